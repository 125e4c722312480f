"""
Model-agnostic explanation procedures for the Responsible ML workflow.
"""

from .explainer import Explainer, explain
from .model_parts import model_parts, VariableImportance
from .model_profile import model_profile, AggregatedProfiles
from .predict_parts import predict_parts, break_down, break_down_orderings, shap_values, PredictParts
from .predict_profile import predict_profile, CeterisParibusProfiles

__all__ = [
    'Explainer',
    'explain',
    'model_parts',
    'VariableImportance',
    'model_profile',
    'AggregatedProfiles',
    'predict_parts',
    'break_down',
    'break_down_orderings',
    'shap_values',
    'PredictParts',
    'predict_profile',
    'CeterisParibusProfiles',
]
