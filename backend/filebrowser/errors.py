"""Domain errors raised by the file service and mapped to HTTP responses."""


class FileBrowserError(Exception):
    """Base class for errors surfaced to API callers."""


class PathUnsafeError(FileBrowserError):
    """A resolved path falls outside the data root.

    Reported to callers exactly like a missing file so the layout above
    the root is never disclosed.
    """


class NotFoundError(FileBrowserError):
    pass


class ConflictError(FileBrowserError):
    pass


class InvalidRequestError(FileBrowserError):
    pass
