"""
Exception hierarchy for the Responsible ML workflow.
"""


class ResponsibleMLError(Exception):
    """Base class for all workflow errors."""


class ConfigurationError(ResponsibleMLError):
    """Raised when a configuration value is missing or out of range."""


class DataValidationError(ResponsibleMLError):
    """Raised when an input table does not match the expected schema."""


class ModelNotFittedError(ResponsibleMLError):
    """Raised when a model is used for prediction before it was trained."""


class ExplanationError(ResponsibleMLError):
    """Raised when an explanation procedure gets arguments it cannot use."""
