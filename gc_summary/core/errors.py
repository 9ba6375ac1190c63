"""Error taxonomy for a digest run.

Every error aborts the run it occurs in. None of them is retried in-process;
the next scheduled invocation is the retry.
"""


class DigestError(Exception):
    """Base class for all errors that abort a digest run."""


class SourceUnavailable(DigestError):
    """The remote record source could not be reached or returned garbage."""


class NotFound(DigestError):
    """The remote record source has no detail for the requested record id."""

    def __init__(self, record_id):
        super().__init__(f"No detail found for record {record_id}")
        self.record_id = record_id


class StoreUnavailable(DigestError):
    """The snapshot store could not be read or written."""


class MalformedTimestamp(DigestError):
    """A timestamp from the source or the store could not be parsed."""

    def __init__(self, value, reason: str = ""):
        message = f"Malformed timestamp: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.value = value
