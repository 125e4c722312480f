"""
Model implementations for the Responsible ML workflow.
"""

from .base_model import BaseModel
from .cdc_risk_model import CDCRiskModel
from .tree_model import DecisionTreeModel
from .forest_model import RandomForestModel
from .tuned_forest_model import TunedRandomForestModel
from .model_factory import ModelFactory

__all__ = [
    'BaseModel',
    'CDCRiskModel',
    'DecisionTreeModel',
    'RandomForestModel',
    'TunedRandomForestModel',
    'ModelFactory',
]
