class SeatingError(Exception):
    """Base class for errors raised by the seating ledger."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(SeatingError):
    """A request is missing data or violates a ledger rule. Nothing was written."""

    status_code = 400


class NotFound(SeatingError):
    status_code = 404


class StorageFailure(SeatingError):
    """The storage collaborator failed. The unit of work was rolled back."""

    status_code = 500
