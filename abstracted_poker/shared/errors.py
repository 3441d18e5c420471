"""Exception types raised by the indexing and game modules."""


class AbstractedPokerError(Exception):
    """Base class for all package errors."""


class IndexerConfigurationError(AbstractedPokerError, ValueError):
    """Raised when a hand indexer cannot be built from its round schedule."""


class InvalidActionError(AbstractedPokerError, ValueError):
    """Raised when an action is not in the current legal action set."""


class DuplicateOffAbstractionError(AbstractedPokerError, KeyError):
    """Raised when an information state already has a custom raise amount."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class ClusterFileError(AbstractedPokerError, ValueError):
    """Raised when a cluster file exists but does not match its round size."""


class ConfigFileError(AbstractedPokerError, ValueError):
    """Raised when a YAML preset is malformed or its ``extends`` chain loops."""
