"""Decision engine for idle auto-completion.

A pure function of the current cycle inputs: candidate count, last
action, the toggle flag and the candidate view's state. It holds no
state between calls.
"""

from enum import Enum

from .candidates import CandidateCount
from .config import AutoCompleteConfig


class Decision(str, Enum):
    """Action chosen for one idle cycle."""
    AUTO_COMPLETE = "auto_complete"
    SHOW_HELP = "show_help"
    CLOSE_HELP = "close_help"
    NO_OP = "no_op"


class ViewState(str, Enum):
    """Visibility of the candidate-list view."""
    ABSENT = "absent"
    VISIBLE_AT_TOP = "visible_at_top"
    VISIBLE_SCROLLED = "visible_scrolled"

    @property
    def visible(self) -> bool:
        return self is not ViewState.ABSENT


def is_paging(last_action, view_state: ViewState, config: AutoCompleteConfig) -> bool:
    """True when repeated manual triggers are paging through an open view.

    In that case an idle fire must leave the view alone.
    """
    manual = last_action in (config.auto_complete_action, config.trigger_completion_action)
    return manual and view_state is ViewState.VISIBLE_SCROLLED


def decide(
    count: CandidateCount,
    last_action,
    auto_complete_enabled: bool,
    view_state: ViewState,
    config: AutoCompleteConfig,
) -> Decision:
    """Choose the action for one idle cycle.

    Args:
        count: Bounded candidate count for the current input
        last_action: Identifier of the most recent action
        auto_complete_enabled: Current toggle value
        view_state: Current state of the candidate view
        config: Auto-complete options (help flag, triggers, action ids)

    Returns:
        The single Decision for this cycle
    """
    # Nothing, or too much, to show
    if count.exceeded_bound or count.count == 0:
        return Decision.CLOSE_HELP

    if auto_complete_enabled and last_action in config.trigger_commands:
        return Decision.AUTO_COMPLETE

    if config.show_help_enabled:
        if is_paging(last_action, view_state, config):
            return Decision.NO_OP
        return Decision.SHOW_HELP

    return Decision.NO_OP
