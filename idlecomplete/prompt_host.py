"""prompt_toolkit bindings for the auto-complete controller.

Adapts a prompt_toolkit ``Buffer`` to the Prompt interface and its
completion menu to the CandidateListView interface, and provides the
key bindings for manual triggering, toggling and switching to the menu.
"""

from itertools import islice
from typing import Callable, Optional

from prompt_toolkit.completion import CompleteEvent, get_common_complete_suffix
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.bindings.completion import generate_completions

from .candidates import CompleterSource
from .config import AutoCompleteConfig
from .controller import AutoCompleteController, CandidateListView, Prompt, ScrollState
from .logging import CycleLogger
from .scheduler import TimerHost
from .toggle import ToggleState

SELF_INSERT = "self-insert"
DELETE_CHAR = "delete-char"


class PromptToolkitPrompt(Prompt):
    """Prompt interface over a prompt_toolkit buffer."""

    def __init__(self, buffer, config: AutoCompleteConfig, app=None):
        """Initialize the adapter.

        Args:
            buffer: The prompt_toolkit Buffer being edited
            config: Auto-complete options (action ids, bound)
            app: Owning Application, used for liveness checks
        """
        self.buffer = buffer
        self.config = config
        self.app = app
        self.attached = True
        self.invoking = False
        self._last_action_id = None
        self._last_was_edit = False
        self._last_text = buffer.text
        self._actions = {
            config.auto_complete_action: self._auto_complete,
            config.trigger_completion_action: self._trigger_completion,
        }

    @property
    def last_action_id(self):
        if self._last_was_edit:
            # Selecting a menu entry rewrites the buffer; the buffer only
            # restores its completion state after the change event.
            state = self.buffer.complete_state
            if state is not None and state.complete_index is not None:
                return self.config.trigger_completion_action
        return self._last_action_id

    @last_action_id.setter
    def last_action_id(self, action_id):
        self._last_action_id = action_id
        self._last_was_edit = False

    def is_active(self) -> bool:
        if not self.attached:
            return False
        if self.app is None:
            return True
        return self.app.is_running and not self.app.is_done

    def current_candidate_table(self) -> CompleterSource:
        return CompleterSource(self.buffer.completer, self.buffer.document)

    def invoke_action(self, action_id):
        """Run a known action; edits it makes are not recorded as user input.

        Raises:
            KeyError: If the action id is unknown
        """
        handler = self._actions.get(action_id)
        if handler is None:
            raise KeyError(f"Unknown action: {action_id}")
        self.invoking = True
        try:
            result = handler()
        finally:
            self.invoking = False
            self._last_text = self.buffer.text
        self.last_action_id = action_id
        return result

    def record_text_change(self) -> None:
        """Classify a buffer edit as an action id."""
        text = self.buffer.text
        if len(text) >= len(self._last_text):
            self.last_action_id = SELF_INSERT
        else:
            self.last_action_id = DELETE_CHAR
        self._last_was_edit = True
        self._last_text = text

    def sync_text(self) -> None:
        """Forget edits made before the prompt started."""
        self._last_text = self.buffer.text

    def _auto_complete(self) -> bool:
        """Insert the single candidate, or the part all candidates share."""
        completer = self.buffer.completer
        if completer is None:
            return False
        document = self.buffer.document
        event = CompleteEvent(completion_requested=True)
        completions = list(islice(
            completer.get_completions(document, event),
            self.config.max_shown_completions + 1,
        ))
        if not completions:
            return False
        if len(completions) == 1:
            self.buffer.apply_completion(completions[0])
            return True
        suffix = get_common_complete_suffix(document, completions)
        if suffix:
            self.buffer.insert_text(suffix)
            return True
        return False

    def _trigger_completion(self) -> bool:
        self.buffer.start_completion(select_first=False)
        return True


class CompletionMenuView(CandidateListView):
    """CandidateListView over a buffer's completion state."""

    def __init__(self, buffer, app=None):
        self.buffer = buffer
        self.app = app

    def is_visible(self) -> bool:
        return self.buffer.complete_state is not None

    def scroll_state(self) -> ScrollState:
        state = self.buffer.complete_state
        if state is None or state.complete_index is None:
            return ScrollState.AT_TOP
        return ScrollState.SCROLLED

    def open(self) -> None:
        self.buffer.start_completion(select_first=False)

    def close(self) -> None:
        # Keep the text as typed; only drop the menu
        self.buffer.complete_state = None
        if self.app is not None:
            self.app.invalidate()

    def focus(self) -> None:
        """Select the first candidate, opening the menu when it is closed."""
        state = self.buffer.complete_state
        if state is None:
            self.buffer.start_completion(select_first=True)
        elif state.complete_index is None:
            self.buffer.complete_next()


class AttachedSession:
    """One controller bound to one prompt run."""

    def __init__(self, controller: AutoCompleteController, prompt: PromptToolkitPrompt, handler):
        self.controller = controller
        self.prompt = prompt
        self._handler = handler

    def start(self) -> None:
        """Call when the prompt starts running (``pre_run`` hook)."""
        self.prompt.sync_text()

    def detach(self) -> None:
        """Unhook the buffer and end the controller session."""
        if not self.prompt.attached:
            return
        self.prompt.buffer.on_text_changed -= self._handler
        self.prompt.attached = False
        self.controller.end_session()


def attach_auto_complete(
    session,
    config: AutoCompleteConfig,
    toggle: Optional[ToggleState] = None,
    timer_host: Optional[TimerHost] = None,
    logger: Optional[CycleLogger] = None,
) -> AttachedSession:
    """Wire a new controller to a PromptSession's default buffer.

    Args:
        session: prompt_toolkit PromptSession
        config: Auto-complete options
        toggle: Toggle shared across prompt runs
        timer_host: Timer facility, defaults to the running asyncio loop
        logger: Cycle logger

    Returns:
        AttachedSession; call ``detach()`` once the prompt returns
    """
    buffer = session.default_buffer
    app = session.app
    prompt = PromptToolkitPrompt(buffer, config, app=app)
    view = CompletionMenuView(buffer, app=app)
    controller = AutoCompleteController(
        prompt, view, config, toggle=toggle, timer_host=timer_host, logger=logger,
    )

    def on_text_changed(_buffer):
        if prompt.invoking:
            return
        prompt.record_text_change()
        controller.notify_activity()

    buffer.on_text_changed += on_text_changed
    return AttachedSession(controller, prompt, on_text_changed)


def build_key_bindings(
    get_controller: Callable[[], Optional[AutoCompleteController]],
    toggle_key: str = "f2",
    view_key: str = "f3",
) -> KeyBindings:
    """Key bindings for manual triggering, toggling and switching to the menu."""
    kb = KeyBindings()

    @kb.add("tab")
    def _(event):
        generate_completions(event)
        controller = get_controller()
        if controller is not None:
            controller.prompt.record_action(controller.config.trigger_completion_action)
            controller.notify_activity()

    @kb.add(toggle_key)
    def _(event):
        controller = get_controller()
        if controller is not None:
            controller.toggle_auto_complete()
            event.app.invalidate()

    @kb.add(view_key)
    def _(event):
        controller = get_controller()
        if controller is not None:
            controller.switch_to_view()

    return kb
