"""
Custom exception types for bash-prompt-vars.

Host lookups raise :class:`HostInfoError` and abort the program. Repository
lookups raise :class:`RepositoryError`, which never leaves the VCS layer.
"""


class PromptVarsError(Exception):
    """Base exception for prompt variable collection errors."""

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize prompt variable error.

        Args:
            message: Human-readable error message
            context: Additional context dict with details
        """
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error string for logging."""
        context_str = f" | Context: {self.context}" if self.context else ""
        return f"{self.message}{context_str}"


class HostInfoError(PromptVarsError):
    """Load average, platform, user or process information is unavailable."""


class RepositoryError(PromptVarsError):
    """A repository could not be opened or read."""
