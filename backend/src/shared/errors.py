"""
Exception types raised by the operator network engine.
"""


class ConfigurationError(ValueError):
    """An operation attribute is outside its fixed enumeration (difficulty, priority)."""


class InvalidTransitionError(ValueError):
    """An operation status change the workflow does not allow."""

    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Cannot move operation from {from_status} to {to_status}")

