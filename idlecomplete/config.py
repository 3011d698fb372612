"""Configuration and environment variables."""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

# Global config directory
CONFIG_DIR = Path.home() / ".idlecomplete"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
LOCAL_CONFIG_NAME = ".idlecomplete.yaml"

# Template for new config file
CONFIG_TEMPLATE = """# idlecomplete configuration

# Seconds of quiet input before completion is attempted (0 = next loop turn)
delay: 0.3

# Silently complete after the commands listed in trigger_commands
auto_complete_enabled: true

# Show the candidate menu when auto-complete does not apply
show_help_enabled: true

# Above this many candidates the menu is closed instead of shown
max_shown_completions: 1000

# Actions after which auto-complete is attempted
trigger_commands:
  - self-insert

# Action ids used for silent completion and manual triggering
auto_complete_action: "auto-complete"
trigger_completion_action: "complete"

debug: false
"""

_TRUE_VALUES = ("1", "true", "yes", "on")


def ensure_config_dir() -> Path:
    """Create config directory if it doesn't exist."""
    if not CONFIG_DIR.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


def ensure_config_file() -> Path:
    """Create template config file if it doesn't exist."""
    ensure_config_dir()
    if not CONFIG_FILE.exists():
        CONFIG_FILE.write_text(CONFIG_TEMPLATE)
    return CONFIG_FILE


def _env_flag(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return _env_flag(value)
    raise ValueError(f"not a boolean: {value!r}")


def _as_commands(value) -> frozenset:
    # A bare YAML scalar names a single command
    if isinstance(value, str):
        return frozenset({value})
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(str(v) for v in value)
    raise ValueError(f"not a command list: {value!r}")


def _as_action(value) -> str:
    if value is None:
        raise ValueError("missing action id")
    return str(value)


# YAML values are converted per option; ones that won't convert are dropped
_CONVERTERS = {
    "delay": float,
    "auto_complete_enabled": _as_bool,
    "show_help_enabled": _as_bool,
    "max_shown_completions": int,
    "trigger_commands": _as_commands,
    "auto_complete_action": _as_action,
    "trigger_completion_action": _as_action,
    "debug": _as_bool,
}


def _convert_fields(data: dict) -> dict:
    converted = {}
    for key, value in data.items():
        converter = _CONVERTERS.get(key)
        if converter is None:
            continue
        try:
            converted[key] = converter(value)
        except (TypeError, ValueError):
            pass  # Keep the default for values of the wrong type
    return converted


@dataclass(frozen=True)
class AutoCompleteConfig:
    """Process-wide auto-complete options, read-only once built.

    ``auto_complete_enabled`` only seeds the per-process toggle; flipping
    the toggle never mutates this object.
    """

    delay: float = 0.3
    auto_complete_enabled: bool = True
    show_help_enabled: bool = True
    max_shown_completions: int = 1000
    trigger_commands: frozenset = field(default_factory=lambda: frozenset({"self-insert"}))
    auto_complete_action: str = "auto-complete"
    trigger_completion_action: str = "complete"
    debug: bool = False

    def __post_init__(self):
        # Accept a single command or any iterable, store a frozenset
        if not isinstance(self.trigger_commands, frozenset):
            object.__setattr__(self, "trigger_commands", _as_commands(self.trigger_commands))

    @classmethod
    def load(cls) -> "AutoCompleteConfig":
        """Load configuration from files and environment variables.

        Config priority (later overrides earlier):
        1. ~/.idlecomplete/config.yaml (global)
        2. .idlecomplete.yaml (local project)
        3. Environment variables
        """
        config_data = {}

        # Ensure global config exists (creates template on first run)
        ensure_config_file()

        config_paths = [
            str(CONFIG_FILE),
            os.path.join(os.getcwd(), LOCAL_CONFIG_NAME),
        ]

        for path in config_paths:
            if os.path.exists(path):
                try:
                    import yaml
                    with open(path, "r") as f:
                        file_data = yaml.safe_load(f) or {}
                    if isinstance(file_data, dict):
                        config_data.update(file_data)
                except Exception:
                    pass  # Ignore unreadable config files

        valid_fields = _convert_fields(config_data)

        # Environment variables (highest priority)
        env_delay = os.getenv("IDLECOMPLETE_DELAY", "")
        if env_delay:
            try:
                valid_fields["delay"] = float(env_delay)
            except ValueError:
                pass

        env_max = os.getenv("IDLECOMPLETE_MAX_SHOWN", "")
        if env_max:
            try:
                valid_fields["max_shown_completions"] = int(env_max)
            except ValueError:
                pass

        if os.getenv("IDLECOMPLETE_AUTO_COMPLETE"):
            valid_fields["auto_complete_enabled"] = _env_flag(os.getenv("IDLECOMPLETE_AUTO_COMPLETE", ""))

        if os.getenv("IDLECOMPLETE_SHOW_HELP"):
            valid_fields["show_help_enabled"] = _env_flag(os.getenv("IDLECOMPLETE_SHOW_HELP", ""))

        if os.getenv("IDLECOMPLETE_DEBUG"):
            valid_fields["debug"] = _env_flag(os.getenv("IDLECOMPLETE_DEBUG", ""))

        return cls(**valid_fields)

    def with_overrides(self, **overrides) -> "AutoCompleteConfig":
        """Return a copy with the given options replaced (None values are skipped)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if not isinstance(self.delay, (int, float)) or isinstance(self.delay, bool):
            errors.append(f"delay must be a number (got {self.delay!r})")
        elif self.delay < 0:
            errors.append(f"delay must be >= 0 (got {self.delay})")
        if not isinstance(self.max_shown_completions, int) or isinstance(self.max_shown_completions, bool):
            errors.append(f"max_shown_completions must be an integer (got {self.max_shown_completions!r})")
        elif self.max_shown_completions < 1:
            errors.append(f"max_shown_completions must be >= 1 (got {self.max_shown_completions})")
        if not self.auto_complete_action:
            errors.append("auto_complete_action must not be empty")
        if not self.trigger_completion_action:
            errors.append("trigger_completion_action must not be empty")
        return errors

    @staticmethod
    def get_config_path() -> Path:
        """Return path to global config file."""
        return CONFIG_FILE
