"""Error types raised by url-readers."""


class UrlReaderError(Exception):
    """Base class for url-readers errors."""

    pass


class ConfigError(UrlReaderError):
    """Configuration could not be loaded or has the wrong shape."""

    pass


class InputError(UrlReaderError):
    """A URL does not point at a location the reader understands."""

    pass


class NotAllowedError(UrlReaderError):
    """No configured reader is responsible for a URL."""

    pass


class NotFoundError(UrlReaderError):
    """The requested object or tree does not exist in the backend."""

    pass


class ReaderConnectionError(UrlReaderError, ConnectionError):
    """The backend could not be reached."""

    pass


class ReadTreeResponseConsumedError(UrlReaderError):
    """A tree response was read more than once."""

    pass
