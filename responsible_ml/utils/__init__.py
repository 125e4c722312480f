"""
Utility components for the Responsible ML workflow.
"""

from .logging_utils import setup_logging, log_execution_time
from .model_persistence import ModelPersistence

__all__ = [
    'setup_logging',
    'log_execution_time',
    'ModelPersistence'
]
