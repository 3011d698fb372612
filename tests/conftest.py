"""Shared fakes for the auto-complete tests."""

import pytest

from idlecomplete.candidates import CandidateSource
from idlecomplete.config import AutoCompleteConfig
from idlecomplete.controller import AutoCompleteController, CandidateListView, Prompt, ScrollState
from idlecomplete.logging import CycleLogger
from idlecomplete.scheduler import TimerHost


class FakeSource(CandidateSource):
    """Candidate source backed by a factory returning a fresh iterable."""

    def __init__(self, factory):
        self.factory = factory

    def enumerate_up_to(self, bound):
        return iter(self.factory())


class FakeHandle:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeTimerHost(TimerHost):
    """Manual clock; nothing fires until advance() is called."""

    def __init__(self, honor_cancel=True):
        self.now = 0.0
        self.handles = []
        self.fail = False
        self.honor_cancel = honor_cancel

    def call_later(self, delay, callback):
        if self.fail:
            raise RuntimeError("no event loop")
        handle = FakeHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def armed(self):
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [
                h for h in self.handles
                if not h.fired and h.when <= target and not (h.cancelled and self.honor_cancel)
            ]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.now = max(self.now, handle.when)
            handle.fired = True
            handle.callback()
        self.now = target


class FakePrompt(Prompt):
    def __init__(self, candidates=(), last_action="self-insert"):
        self.candidates = list(candidates)
        self.last_action_id = last_action
        self.active = True
        self.invoked = []
        self.fail_on_invoke = False
        self.on_invoke = None
        self.pulled = 0

    def is_active(self):
        return self.active

    def current_candidate_table(self):
        def generate():
            for candidate in self.candidates:
                self.pulled += 1
                yield candidate
        return FakeSource(generate)

    def invoke_action(self, action_id):
        if self.fail_on_invoke:
            raise RuntimeError("prompt refused")
        self.invoked.append(action_id)
        self.last_action_id = action_id
        if self.on_invoke:
            self.on_invoke()
        return True


class FakeView(CandidateListView):
    def __init__(self, visible=False, scrolled=False):
        self.visible = visible
        self.scrolled = scrolled
        self.calls = []
        self.fail_on_open = False

    def is_visible(self):
        return self.visible

    def scroll_state(self):
        return ScrollState.SCROLLED if self.scrolled else ScrollState.AT_TOP

    def open(self):
        self.calls.append("open")
        if self.fail_on_open:
            raise RuntimeError("cannot open view")
        self.visible = True
        self.scrolled = False

    def close(self):
        self.calls.append("close")
        self.visible = False
        self.scrolled = False

    def focus(self):
        self.calls.append("focus")
        self.visible = True


@pytest.fixture
def logger(tmp_path):
    return CycleLogger(log_dir=tmp_path / "logs")


@pytest.fixture
def timer_host():
    return FakeTimerHost()


@pytest.fixture
def config():
    return AutoCompleteConfig(delay=0.5, max_shown_completions=10)


@pytest.fixture
def make_controller(config, timer_host, logger):
    """Build a controller over fake collaborators."""
    def _make(candidates=("a", "b"), last_action="self-insert", view=None, **overrides):
        cfg = config.with_overrides(**overrides) if overrides else config
        prompt = FakePrompt(candidates, last_action=last_action)
        view = view or FakeView()
        controller = AutoCompleteController(prompt, view, cfg, timer_host=timer_host, logger=logger)
        return controller, prompt, view
    return _make


@pytest.fixture
def leaky_timer_host():
    """Timer host whose cancel() does not stop the callback."""
    return FakeTimerHost(honor_cancel=False)


@pytest.fixture
def make_source():
    return FakeSource
