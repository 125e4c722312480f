"""
Static configuration presets for the Responsible ML workflow.
"""

from .logging_config import get_logging_config, apply_logging_config, get_quiet_config
from .model_config import (
    CDCRiskConfig,
    DecisionTreeConfig,
    RandomForestConfig,
    TunedForestConfig,
    get_model_config,
)

__all__ = [
    'get_logging_config',
    'apply_logging_config',
    'get_quiet_config',
    'CDCRiskConfig',
    'DecisionTreeConfig',
    'RandomForestConfig',
    'TunedForestConfig',
    'get_model_config',
]
