"""Interactive REPL demonstrating idle auto-completion."""

from collections import Counter
from pathlib import Path
from typing import Optional

from rich.console import Console
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.styles import Style as PromptStyle

from .config import AutoCompleteConfig
from .logging import CycleLogger, get_logger
from .prompt_host import AttachedSession, attach_auto_complete, build_key_bindings
from .scheduler import TimerHost
from .toggle import ToggleState

COMMANDS = ['/help', '/toggle', '/config', '/stats', '/exit', '/quit']


class AutoCompleteREPL:
    """Read-Eval-Print Loop with one auto-complete controller per prompt."""

    def __init__(
        self,
        config: AutoCompleteConfig,
        completer,
        history_path: Optional[Path] = None,
        timer_host: Optional[TimerHost] = None,
        logger: Optional[CycleLogger] = None,
        input=None,
        output=None,
    ):
        self.config = config
        self.completer = completer
        self.timer_host = timer_host
        self.logger = logger or get_logger()
        self.console = Console()
        self.toggle = ToggleState(config.auto_complete_enabled)
        self.stats: Counter = Counter()
        self.attached: Optional[AttachedSession] = None
        self.session = self._setup_session(history_path, input, output)
        self.commands = {
            "/help": self.cmd_help,
            "/toggle": self.cmd_toggle,
            "/config": self.cmd_config,
            "/stats": self.cmd_stats,
            "exit": self.cmd_exit,
            "/exit": self.cmd_exit,
            "quit": self.cmd_quit,
            "/quit": self.cmd_quit,
        }

    def _setup_session(self, history_path, input, output):
        """Configure prompt_toolkit session."""
        style = PromptStyle.from_dict({
            'prompt': '#00aa00 bold',
            'bottom-toolbar': 'noreverse #888888',
        })

        if history_path:
            history_path = Path(history_path)
            history_path.parent.mkdir(parents=True, exist_ok=True)
            history = FileHistory(str(history_path))
        else:
            history = InMemoryHistory()

        return PromptSession(
            history=history,
            style=style,
            completer=self.completer,
            # Completion is driven by the idle controller instead
            complete_while_typing=False,
            key_bindings=build_key_bindings(self.current_controller),
            bottom_toolbar=self._toolbar,
            input=input,
            output=output,
        )

    def current_controller(self):
        """Controller of the prompt currently running, if any."""
        return self.attached.controller if self.attached else None

    def _toolbar(self):
        state = "on" if self.toggle.enabled else "off"
        return f" auto-complete: {state} | Tab complete | F2 toggle | F3 menu "

    def read_line(self, message: str = "> ") -> str:
        """Prompt once with a fresh controller attached."""
        self.attached = attach_auto_complete(
            self.session,
            self.config,
            toggle=self.toggle,
            timer_host=self.timer_host,
            logger=self.logger,
        )
        try:
            return self.session.prompt(message, pre_run=self.attached.start)
        finally:
            controller = self.attached.controller
            self.attached.detach()
            self.attached = None
            self.stats.update(controller.stats)
            if controller.degraded:
                self.console.print("[yellow]Idle completion unavailable for that prompt; Tab still works[/]")

    def run(self):
        """Start the REPL loop."""
        self.console.print("[bold green]idlecomplete[/] - Type /help for commands")

        while True:
            try:
                user_input = self.read_line().strip()

                if not user_input:
                    continue

                cmd = user_input.split()[0].lower()
                if cmd in self.commands:
                    if self.commands[cmd](user_input):
                        break
                    continue

                self.console.print(f"[bold green]>[/] [on grey23]{user_input}[/]")

            except KeyboardInterrupt:
                self.console.print("\n[dim]Use 'exit' to quit[/]")
                continue
            except EOFError:
                break

        self.console.print("[green]Goodbye![/]")

    # Commands
    def cmd_help(self, _):
        self.console.print("\n[bold]Available Commands:[/]")
        self.console.print("  /toggle - Toggle idle auto-complete")
        self.console.print("  /config - Show current configuration")
        self.console.print("  /stats  - Show decision counts")
        self.console.print("  /exit   - Quit")
        self.console.print("\n[bold]Keys:[/]")
        self.console.print("  Tab - Complete / next candidate")
        self.console.print("  F2  - Toggle idle auto-complete")
        self.console.print("  F3  - Jump into the candidate menu")
        self.console.print()
        return False

    def cmd_toggle(self, _):
        enabled = self.toggle.toggle()
        self.logger.log_toggle(enabled)
        self.console.print(f"[dim]Auto-complete: {'on' if enabled else 'off'}[/]")
        return False

    def cmd_config(self, _):
        """Show current configuration."""
        config = self.config
        self.console.print("\n[bold]Current Configuration:[/]")
        self.console.print(f"  [cyan]Delay[/]: {config.delay}s")
        self.console.print(f"  [cyan]Auto-complete[/]: {self.toggle.enabled}")
        self.console.print(f"  [cyan]Show help[/]: {config.show_help_enabled}")
        self.console.print(f"  [cyan]Max shown[/]: {config.max_shown_completions}")
        self.console.print(f"  [cyan]Triggers[/]: {', '.join(sorted(config.trigger_commands))}")
        self.console.print(f"  [cyan]Log file[/]: {self.logger.log_path}")
        self.console.print()
        return False

    def cmd_stats(self, _):
        if not self.stats:
            self.console.print("[yellow]No idle cycles yet[/]")
            return False
        self.console.print("\n[bold]Idle decisions:[/]")
        for decision, count in self.stats.most_common():
            self.console.print(f"  [cyan]{decision}[/]: {count}")
        self.console.print()
        return False

    def cmd_exit(self, _):
        return True

    def cmd_quit(self, _):
        return True
