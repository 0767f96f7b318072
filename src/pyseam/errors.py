class SeamError(Exception):
    """Base class for pyseam errors."""


class ParseError(SeamError, ValueError):
    """Raised when a codec fails to parse its text."""


class PatchError(SeamError):
    """Raised when a structural diff cannot be applied to the source text."""


class UnknownFormatError(SeamError, ValueError):
    """Raised when a format name is not registered."""


class NotAListError(SeamError, TypeError):
    """Raised when a list operation targets something that is not a list."""


class SchemaError(SeamError):
    """Raised when a schema reference cannot be resolved."""
