"""Auto-complete controller for one prompt session.

Wires the idle scheduler to the candidate counter and the decision
engine, then carries the decision out on the prompt and its
candidate-list view.
"""

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .candidates import CandidateCount, CandidateCounter, CandidateSource
from .config import AutoCompleteConfig
from .decision import Decision, ViewState, decide
from .errors import ActionExecutionFailure, SchedulerArmFailure
from .logging import CycleLogger, get_logger
from .scheduler import IdleScheduler, TimerHost
from .toggle import ToggleState


class ScrollState(str, Enum):
    """Scroll position of a visible candidate-list view."""
    AT_TOP = "at_top"
    SCROLLED = "scrolled"


class Prompt(ABC):
    """Line-input surface the controller completes on."""

    last_action_id: Any = None

    @abstractmethod
    def is_active(self) -> bool:
        """Return True while the prompt session accepts input."""
        pass

    @abstractmethod
    def current_candidate_table(self) -> CandidateSource:
        """Return the candidate source for the current input."""
        pass

    @abstractmethod
    def invoke_action(self, action_id) -> Any:
        """Run a named action against the prompt."""
        pass

    def record_action(self, action_id) -> None:
        """Record a user command that is not a plain text edit."""
        self.last_action_id = action_id


class CandidateListView(ABC):
    """Companion view listing the current candidates."""

    @abstractmethod
    def is_visible(self) -> bool:
        pass

    @abstractmethod
    def scroll_state(self) -> ScrollState:
        pass

    @abstractmethod
    def open(self) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    @abstractmethod
    def focus(self) -> None:
        pass


def observe_view(view: CandidateListView) -> ViewState:
    """Map a view's visibility and scroll position to a ViewState."""
    if not view.is_visible():
        return ViewState.ABSENT
    if view.scroll_state() is ScrollState.SCROLLED:
        return ViewState.VISIBLE_SCROLLED
    return ViewState.VISIBLE_AT_TOP


@dataclass(frozen=True)
class SessionContext:
    """What the controller knows about the session after the last cycle."""
    last_action: Any = None
    view_state: ViewState = ViewState.ABSENT


@dataclass
class IdleOutcome:
    """Result of one idle fire."""
    decision: Optional[Decision]
    count: Optional[CandidateCount] = None
    executed: bool = False
    error: Optional[ActionExecutionFailure] = None

    @property
    def dropped(self) -> bool:
        """True when the fire was discarded without deciding anything."""
        return self.decision is None


class AutoCompleteController:
    """Runs the idle decision cycle for a single prompt session.

    Usage:
        controller = AutoCompleteController(prompt, view, config)

        # On every input-affecting command:
        controller.notify_activity()

        # When the prompt session ends:
        controller.end_session()
    """

    def __init__(
        self,
        prompt: Prompt,
        view: CandidateListView,
        config: AutoCompleteConfig,
        toggle: Optional[ToggleState] = None,
        timer_host: Optional[TimerHost] = None,
        logger: Optional[CycleLogger] = None,
    ):
        """Initialize the controller.

        Args:
            prompt: Prompt collaborator
            view: Candidate-list view collaborator
            config: Auto-complete options
            toggle: Shared auto-complete toggle, seeded from config if omitted
            timer_host: Timer facility for the idle scheduler
            logger: Cycle logger, defaults to the global one
        """
        self.prompt = prompt
        self.view = view
        self.config = config
        self.toggle = toggle or ToggleState(config.auto_complete_enabled)
        self.logger = logger or get_logger()
        self.context = SessionContext()
        self.counter = CandidateCounter(prompt.current_candidate_table, logger=self.logger)
        self.scheduler = IdleScheduler(config.delay, self.on_idle, timer_host=timer_host)
        self.stats: Counter = Counter()
        self.session_id = self.logger.next_session_id()
        self.closed = False
        self.degraded = False
        self._executing = False
        self.logger.log_session_start(self.session_id)

    @property
    def is_live(self) -> bool:
        return not self.closed and self.prompt.is_active()

    def notify_activity(self) -> None:
        """Restart the idle countdown after an input-affecting command."""
        if self.closed or self.degraded or self._executing:
            return
        try:
            self.scheduler.notify_activity()
        except SchedulerArmFailure as e:
            # Manual completion keeps working; only idle completion is off
            self.degraded = True
            self.logger.log_error("scheduler_arm_failure", str(e))

    def end_session(self) -> None:
        """Cancel any pending countdown and stop reacting to fires."""
        if self.closed:
            return
        self.scheduler.cancel()
        self.closed = True
        self.logger.log_session_end(self.session_id)

    def toggle_auto_complete(self) -> bool:
        """Flip auto-complete and return the new value."""
        enabled = self.toggle.toggle()
        self.logger.log_toggle(enabled)
        return enabled

    def switch_to_view(self) -> bool:
        """Move focus into the candidate view."""
        try:
            if not self.is_live:
                return False
            self.view.focus()
        except Exception as e:
            self.logger.log_error("action_failure", f"switch to view: {e}")
            return False
        return True

    def on_idle(self) -> IdleOutcome:
        """Run one decision cycle (called by the scheduler)."""
        try:
            live = self.is_live
        except Exception as e:
            self.logger.log_error("action_failure", f"Could not check prompt liveness: {e}")
            return IdleOutcome(decision=None)
        if not live:
            self.logger.log_stale_fire(self.session_id)
            return IdleOutcome(decision=None)
        if self._executing:
            return IdleOutcome(decision=None)

        try:
            observed = SessionContext(
                last_action=self.prompt.last_action_id,
                view_state=observe_view(self.view),
            )
        except Exception as e:
            self.logger.log_error("action_failure", f"Could not read session state: {e}")
            return IdleOutcome(decision=None)

        count = self.counter.count(self.config.max_shown_completions)
        decision = decide(
            count,
            observed.last_action,
            self.toggle.enabled,
            observed.view_state,
            self.config,
        )
        self.stats[decision.value] += 1

        self._executing = True
        try:
            self.context = self._execute(decision, observed)
        except ActionExecutionFailure as e:
            self.logger.log_error("action_failure", str(e))
            self.logger.log_cycle(self.session_id, count.count, count.exceeded_bound, decision.value, False)
            return IdleOutcome(decision=decision, count=count, executed=False, error=e)
        finally:
            self._executing = False

        self.logger.log_cycle(self.session_id, count.count, count.exceeded_bound, decision.value, True)
        return IdleOutcome(decision=decision, count=count, executed=True)

    def _execute(self, decision: Decision, observed: SessionContext) -> SessionContext:
        """Carry out a decision and return the resulting session context.

        Raises:
            ActionExecutionFailure: If the prompt or view call fails
        """
        last_action = observed.last_action
        try:
            if decision is Decision.AUTO_COMPLETE:
                self.prompt.invoke_action(self.config.auto_complete_action)
                last_action = self.config.auto_complete_action
                if not self.prompt.is_active():
                    # Completing ended the session; the view is gone with it
                    return SessionContext(last_action=last_action, view_state=observed.view_state)
                # The action may already have opened the view
                if self.config.show_help_enabled and not observe_view(self.view).visible:
                    self.view.open()
            elif decision is Decision.SHOW_HELP:
                self.view.open()
            elif decision is Decision.CLOSE_HELP:
                if observe_view(self.view).visible:
                    self.view.close()
            return SessionContext(last_action=last_action, view_state=observe_view(self.view))
        except Exception as e:
            raise ActionExecutionFailure(decision, f"Failed to execute {decision.value}: {e}") from e
