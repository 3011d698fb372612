"""Error kinds raised and handled by the auto-complete core."""

from typing import Optional


class IdleCompleteError(Exception):
    """Base class for auto-complete errors."""
    pass


class SchedulerArmFailure(IdleCompleteError):
    """Raised when the host cannot arm an idle countdown."""
    pass


class CandidateSourceFailure(IdleCompleteError):
    """Raised when the completion collaborator fails to enumerate candidates."""
    pass


class ActionExecutionFailure(IdleCompleteError):
    """Raised when a decision could not be carried out on the prompt or view.
    
    The original exception is chained as ``__cause__``.
    """
    
    def __init__(self, decision, message: Optional[str] = None):
        self.decision = decision
        super().__init__(message or f"Failed to execute {decision}")
