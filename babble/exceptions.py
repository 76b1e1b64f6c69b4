class BabbleError(Exception):
    """Base class for errors raised by babble."""


class CorpusReadError(BabbleError):
    """Raised when the training corpus keeps failing to read."""


class ConfigError(BabbleError):
    """Raised when a configuration file or value cannot be used."""
