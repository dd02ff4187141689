"""Host and repository status as shell variables for an interactive prompt."""

__version__ = "0.1.0"
