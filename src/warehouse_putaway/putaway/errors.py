class PutawayError(Exception):
    """Base class for put-away failures."""


class InvalidRequest(PutawayError):
    """Malformed suggestion request. Raised before any data fetch."""


class DataUnavailable(PutawayError):
    """A data source (SQL, CSV) could not be read. Retry is the caller's call."""


class CommitRefused(PutawayError):
    """A move reached the commit hand-off without a valid acceptance."""
