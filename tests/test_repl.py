import pytest
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from idlecomplete.autocomplete import AutoCompleter
from idlecomplete.config import AutoCompleteConfig
from idlecomplete.repl import COMMANDS, AutoCompleteREPL


@pytest.fixture
def pipe_input():
    with create_pipe_input() as inp:
        yield inp


@pytest.fixture
def repl(pipe_input, timer_host, logger):
    return AutoCompleteREPL(
        AutoCompleteConfig(delay=0.5),
        AutoCompleter(commands=COMMANDS, words=["hello", "help"]),
        timer_host=timer_host,
        logger=logger,
        input=pipe_input,
        output=DummyOutput(),
    )


def test_repl_commands(repl):
    """Test REPL command handling."""
    assert repl.commands["/exit"]("") is True
    assert repl.commands["/quit"]("") is True
    assert repl.commands["/help"]("") is False
    assert repl.commands["/config"]("") is False

    # /toggle flips the shared toggle
    assert repl.toggle.enabled is True
    repl.commands["/toggle"]("")
    assert repl.toggle.enabled is False
    assert "off" in repl._toolbar()


def test_read_line_attaches_and_detaches(repl, pipe_input, timer_host):
    pipe_input.send_text("hel\r")

    assert repl.read_line() == "hel"

    assert repl.attached is None
    assert repl.current_controller() is None
    # Typing armed countdowns; accepting the line released them
    assert timer_host.handles
    assert timer_host.armed == []


def test_stats_without_idle_cycles(repl, pipe_input, timer_host):
    pipe_input.send_text("x\r")
    repl.read_line()
    assert repl.commands["/stats"]("") is False
    assert not repl.stats


def test_run_exits(repl, pipe_input):
    pipe_input.send_text("/exit\r")
    repl.run()
    assert repl.attached is None
