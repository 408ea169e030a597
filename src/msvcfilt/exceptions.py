class MsvcFiltError(Exception):
    """Base class for every error raised by msvcfilt."""


class DecoderUnavailableError(MsvcFiltError):
    """The platform symbol decoder could not be loaded or initialized."""


class ConfigError(MsvcFiltError):
    """A configuration value is missing or has the wrong type."""
