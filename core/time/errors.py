"""
Innkeep Core Time — Errors
============================
Interval validation failures. Raised before any rate or
conflict computation runs; callers re-prompt, they never persist.
"""


class InvalidIntervalError(ValueError):
    """End of an interval is not after its start (or a grid is the wrong size)."""

    def __init__(self, start, end, detail: str = ""):
        self.start = start
        self.end = end
        self.detail = detail
        message = f"Invalid interval [{start}, {end}): end must be after start."
        if detail:
            message = f"Invalid interval [{start}, {end}): {detail}"
        super().__init__(message)
