"""
Innkeep Hotel Rates — Errors
==============================
Error types for rate composition and the bulk rate workflow.
Interval problems raise core.time.InvalidIntervalError instead.
"""


class RateEngineError(Exception):
    """Base error for hotel rate operations."""
    pass


class BulkWorkflowStateError(RateEngineError):
    """Bulk operation attempted in the wrong workflow state."""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(
            f"Cannot {operation} while the bulk rate workflow is {state}."
        )


class UnknownStayTypeError(RateEngineError):
    """Stay type does not match any room type and meal plan combination."""

    def __init__(self, stay_type: str):
        self.stay_type = stay_type
        super().__init__(f"Unknown stay type '{stay_type}'.")
