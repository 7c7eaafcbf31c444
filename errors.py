class ScoringError(Exception):
    """Base class for rejected scoring operations."""


class ConfigurationValidationError(ScoringError):
    pass


class AuthorizationError(ScoringError):
    pass
