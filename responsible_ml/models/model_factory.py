"""
Model factory for creating the workflow's classifiers.
"""

import logging
from dataclasses import asdict
from typing import Dict, Any, Type

from .base_model import BaseModel
from .cdc_risk_model import CDCRiskModel
from .tree_model import DecisionTreeModel
from .forest_model import RandomForestModel
from .tuned_forest_model import TunedRandomForestModel

logger = logging.getLogger(__name__)


class ModelFactory:
    """Factory for creating different types of models."""

    _models: Dict[str, Type[BaseModel]] = {
        'cdc': CDCRiskModel,
        'tree': DecisionTreeModel,
        'forest': RandomForestModel,
        'tuned_forest': TunedRandomForestModel,
    }

    _aliases = {
        'risk_score': 'cdc',
        'decision_tree': 'tree',
        'random_forest': 'forest',
        'rf': 'forest',
        'tuned': 'tuned_forest',
        'tuned_rf': 'tuned_forest',
    }

    @classmethod
    def create_model(cls, model_type: str, **kwargs) -> BaseModel:
        """Create a model instance of the specified type."""
        model_type = (model_type or '').lower()
        model_type = cls._aliases.get(model_type, model_type)

        if model_type not in cls._models:
            available_models = list(cls._models.keys())
            raise ValueError(f"Unknown model type '{model_type}'. Available: {available_models}")

        logger.info(f"Creating {model_type} model with parameters: {kwargs}")
        return cls._models[model_type](**kwargs)

    @classmethod
    def create_from_config(cls, model_type: str, config: Any) -> BaseModel:
        """
        Create a model from the workflow configuration.

        Args:
            model_type: One of the registered model types
            config: WorkflowConfig instance

        Returns:
            Unfitted model
        """
        model_type = cls._aliases.get(model_type, model_type)
        if model_type == 'tuned_forest':
            return cls.create_model(model_type, **asdict(config.tuning))
        if model_type == 'cdc':
            params = asdict(config.models.cdc)
            params['age_column'] = config.data.age_column
            return cls.create_model(model_type, **params)
        section = getattr(config.models, model_type, None)
        params = asdict(section) if section is not None else {}
        return cls.create_model(model_type, **params)

    @classmethod
    def get_available_models(cls) -> list:
        """Get list of available model types."""
        return list(cls._models.keys())

    @classmethod
    def is_model_available(cls, model_type: str) -> bool:
        """Check if a model type is available."""
        return cls._aliases.get(model_type, model_type) in cls._models
