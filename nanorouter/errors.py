"""Error types raised by nanorouter."""


class RouterError(Exception):
    """Base class for nanorouter errors."""


class ConfigurationInvalid(RouterError):
    """Configuration could not be read or failed validation.

    Raised once at load time; fatal to startup.
    """

    def __init__(self, message: str, issues: list[str] | None = None):
        self.issues = issues or []
        if self.issues:
            message = message + "\n" + "\n".join(f"  -> {issue}" for issue in self.issues)
        super().__init__(message)


class BadPattern(RouterError):
    """A dimension pattern failed to compile."""

    def __init__(self, dimension: str, pattern: str, reason: str):
        self.dimension = dimension
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid regex pattern in dimension '{dimension}': {pattern} ({reason})")
