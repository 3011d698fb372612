"""Completer used by the idlecomplete REPL.

Completes:
- Slash commands (/help, /toggle, etc.)
- File paths from a directory tree
- Words from a word list and file basenames
"""

import os
from pathlib import Path
from typing import Iterable, Optional

from prompt_toolkit.completion import Completer, Completion

SKIP_DIRS = ("node_modules", "__pycache__", "venv", ".git")


class AutoCompleter(Completer):
    """Completer over slash commands, repository files and words.

    Candidates are yielded lazily so a bounded count can stop early.
    """

    def __init__(self, repo_root=None, commands=None, words: Optional[Iterable[str]] = None):
        """Initialize the completer.

        Args:
            repo_root: Directory whose files are offered as paths
            commands: Slash commands (e.g., ['/help', '/exit'])
            words: Extra words offered for plain-word completion
        """
        self.repo_root = Path(repo_root) if repo_root else Path(".")
        self.commands = sorted(commands or [])
        self.words = set(words or [])
        self.rel_fnames: list[str] = []
        self._scanned = repo_root is None

    def _scan_repo_files(self) -> None:
        """Lazily walk the repository once."""
        if self._scanned:
            return
        self._scanned = True

        try:
            for root, dirs, files in os.walk(self.repo_root):
                dirs[:] = sorted(d for d in dirs if not d.startswith('.') and d not in SKIP_DIRS)
                for f in sorted(files):
                    if f.startswith('.'):
                        continue
                    rel_path = str((Path(root) / f).relative_to(self.repo_root))
                    self.rel_fnames.append(rel_path)
                    self.words.add(f)
        except OSError:
            pass  # Unreadable directories just contribute nothing

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        words = text.split()

        if not words or text[-1].isspace():
            return

        if text.lstrip().startswith("/") and len(words) == 1:
            yield from self._complete_commands(words[0])
            return

        last_word = words[-1]
        if '/' in last_word or last_word.startswith('.'):
            yield from self._complete_files(last_word)
            return

        yield from self._complete_words(last_word)

    def _complete_commands(self, partial):
        partial = partial.lower()
        for cmd in self.commands:
            if cmd.lower().startswith(partial):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_files(self, partial):
        self._scan_repo_files()
        partial_lower = partial.lower().lstrip("./")
        for rel_fname in self.rel_fnames:
            if rel_fname.lower().startswith(partial_lower) or partial_lower in rel_fname.lower():
                yield Completion(rel_fname, start_position=-len(partial), display=rel_fname)

    def _complete_words(self, partial):
        self._scan_repo_files()
        partial_lower = partial.lower()
        for word in sorted(self.words):
            if word.lower().startswith(partial_lower) and word != partial:
                yield Completion(word, start_position=-len(partial))


def load_words(path) -> list[str]:
    """Read one word per line, skipping blanks and # comments."""
    words = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                words.append(line)
    return words
