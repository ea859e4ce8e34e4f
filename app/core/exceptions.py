class StoreUnavailable(RuntimeError):
    """Raised when the booking store fails (connection lost, query error, timeout)."""
    pass


class BookingRejected(ValueError):
    """Raised when a booking request cannot be accepted as submitted.

    ``kind`` is ``"input_incomplete"`` (required fields missing) or
    ``"stale_selection"`` (chosen slot is no longer offered). Both are recovered
    by asking the customer to fix or re-pick, never reported as system failures.
    """

    INPUT_INCOMPLETE = "input_incomplete"
    STALE_SELECTION = "stale_selection"

    def __init__(self, kind: str, detail: str, missing: list[str] | None = None) -> None:
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.missing = missing or []
