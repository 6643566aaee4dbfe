"""Exceptions raised by pathcomplete."""


class PathCompleteError(Exception):
    """Base exception for all pathcomplete errors."""


class ConfigError(PathCompleteError, ValueError):
    """Raised when options or a configuration file are invalid or cannot be loaded."""


class MissingCollaboratorError(ConfigError):
    """Raised when a required collaborator is missing or not callable."""
