class OpMocksError(Exception):
    """Base class for errors raised by opmocks."""


class ConfigurationError(OpMocksError, ValueError):
    """Raised when the generation configuration cannot be honoured.

    This is the only fatal error of a generation run: it is raised before any
    output is produced and propagates to the caller.
    """
