"""idlecomplete CLI entry point."""

from typing import Optional

import click
from rich.console import Console

from . import __version__
from .autocomplete import AutoCompleter, load_words
from .config import CONFIG_DIR, AutoCompleteConfig
from .logging import init_logger
from .repl import COMMANDS, AutoCompleteREPL

console = Console()


@click.command()
@click.option("--delay", "-d", type=float, default=None, help="Idle delay in seconds before completing")
@click.option("--max-shown", "-n", type=int, default=None, help="Close the menu above this many candidates")
@click.option("--auto-complete/--no-auto-complete", default=None, help="Silently complete after typing")
@click.option("--show-help/--no-show-help", default=None, help="Show the candidate menu when idle")
@click.option("--repo-root", "-r", type=click.Path(exists=True, file_okay=False), default=".", help="Directory offered for path completion")
@click.option("--words", "-w", "words_file", type=click.Path(exists=True, dir_okay=False), default=None, help="File with one completion word per line")
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.version_option(version=__version__)
def main(
    delay: Optional[float],
    max_shown: Optional[int],
    auto_complete: Optional[bool],
    show_help: Optional[bool],
    repo_root: str,
    words_file: Optional[str],
    debug: bool,
):
    """idlecomplete - prompt with idle-triggered completion."""

    config = AutoCompleteConfig.load().with_overrides(
        delay=delay,
        max_shown_completions=max_shown,
        auto_complete_enabled=auto_complete,
        show_help_enabled=show_help,
        debug=debug or None,
    )

    errors = config.validate()
    if errors:
        for error in errors:
            console.print(f"[red]Error: {error}[/]")
        raise SystemExit(1)

    logger = init_logger(enabled=True)

    words = load_words(words_file) if words_file else []
    completer = AutoCompleter(repo_root=repo_root, commands=COMMANDS, words=words)

    console.print(f"[bold green]idlecomplete v{__version__}[/]")
    console.print(f"[dim]Delay: {config.delay}s[/]")
    console.print(f"[dim]Max shown: {config.max_shown_completions}[/]")
    console.print(f"[dim]Auto-complete: {'Enabled' if config.auto_complete_enabled else 'Disabled'}[/]")
    console.print(f"[dim]Logs: {logger.log_path}[/]")
    if config.debug:
        console.print(f"[dim]Config: {AutoCompleteConfig.get_config_path()}[/]")
    console.print()

    repl = AutoCompleteREPL(
        config,
        completer,
        history_path=CONFIG_DIR / "history",
        logger=logger,
    )
    repl.run()


if __name__ == "__main__":
    main()
