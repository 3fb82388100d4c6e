"""Exception hierarchy shared by the transl8 modules."""


class Transl8Error(Exception):
    """Base class for all errors raised by transl8."""


class TreeNotFoundError(Transl8Error):
    """A translation file (or other persisted tree) does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Translation file not found: {path}")
        self.path = path


class TreeParseError(Transl8Error):
    """A persisted tree exists but could not be decoded."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to parse translation file {path}: {reason}")
        self.path = path
        self.reason = reason


class ProviderError(Transl8Error):
    """The external translation provider failed (network, auth, quota, timeout)."""


class StructuredResponseError(Transl8Error):
    """A joint description+links response could not be read as the expected structure."""

    def __init__(self, message: str, raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response
