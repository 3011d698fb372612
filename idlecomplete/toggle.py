"""User-toggleable auto-complete flag."""


class ToggleState:
    """Single boolean read by the decision engine on every idle cycle.
    
    Flipping it does not touch a pending countdown; only the next
    evaluation sees the new value.
    """
    
    def __init__(self, enabled: bool = True):
        self._enabled = bool(enabled)
    
    @property
    def enabled(self) -> bool:
        return self._enabled
    
    def toggle(self) -> bool:
        """Flip the flag and return the new value."""
        self._enabled = not self._enabled
        return self._enabled
    
    def __repr__(self) -> str:
        return f"ToggleState(enabled={self._enabled})"
