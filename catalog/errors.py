"""Error taxonomy for catalog lookups.

The HTTP layer maps each class to a status code; callers can tell
"no such row" apart from "the store is broken" by type alone.
"""


class CatalogError(Exception):
    """Base class for all catalog errors."""

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(CatalogError):
    """Malformed request input, rejected before any query runs."""

    status_code = 400
    public_message = "Invalid input"


class NotFoundError(CatalogError):
    """No row matches the requested id or name."""

    status_code = 404
    public_message = "Not found"


class StorageUnavailableError(CatalogError):
    """The SQLite store could not be opened or read.

    The message is kept generic for clients; the underlying driver error is
    logged where it is raised.
    """

    status_code = 500
    public_message = "Database error"

    def __init__(self, detail: str = None):
        super().__init__(self.public_message)
        self.detail = detail
