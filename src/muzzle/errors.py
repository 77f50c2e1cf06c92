"""Exception hierarchy.

Only configuration and word-list loading raise.  Parsing and matching
problems degrade instead (see parser / matching), and scan-time failures
are reported in ``TextMatchResult.error``.
"""


class MuzzleError(Exception):
    """Base class for all muzzle errors."""


class ConfigError(MuzzleError, ValueError):
    """Configuration failed validation."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid configuration: " + ", ".join(self.errors))


class WordListError(MuzzleError, RuntimeError):
    """A word list could not be loaded."""


class FilterDisposedError(MuzzleError, RuntimeError):
    """The filter was used after dispose()."""
