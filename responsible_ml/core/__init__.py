"""
Core components for the Responsible ML workflow.
"""

from .config import WorkflowConfig, DataConfig, ExplanationConfig, OutputConfig
from .data_loader import CovidDataLoader
from .explorer import DataExplorer
from .results_manager import ReportBuilder

__all__ = [
    'WorkflowConfig',
    'DataConfig',
    'ExplanationConfig',
    'OutputConfig',
    'CovidDataLoader',
    'DataExplorer',
    'ReportBuilder',
]
