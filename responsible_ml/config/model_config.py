"""
Model configuration for the Responsible ML workflow.

Presets for the four classifiers compared in the walkthrough. Defaults are
small on purpose: the data has seven features and the models are meant to be
read, not squeezed for the last point of AUC.
"""

from typing import Dict, Any, List, Tuple
from dataclasses import dataclass, field, asdict


# Relative mortality risk by age band, 5-17 year olds as the reference group
CDC_AGE_BREAKS: Tuple[float, ...] = (4.5, 17.5, 29.5, 39.5, 49.5, 64.5, 74.5, 84.5)
CDC_AGE_LABELS: Tuple[str, ...] = ("0-4", "5-17", "18-29", "30-39", "40-49",
                                   "50-64", "65-74", "75-84", "85+")
CDC_RISK_RATIOS: Tuple[float, ...] = (2, 1, 15, 45, 130, 400, 1100, 2800, 7900)


@dataclass
class BaseModelConfig:
    """Options shared by all fitted models."""

    random_state: int = 42

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CDCRiskConfig(BaseModelConfig):
    """Hand-written age-band risk score."""

    base_risk: float = 0.00003
    age_breaks: Tuple[float, ...] = CDC_AGE_BREAKS
    risk_ratios: Tuple[float, ...] = CDC_RISK_RATIOS


@dataclass
class DecisionTreeConfig(BaseModelConfig):
    """Single CART tree kept shallow so that it stays readable."""

    max_depth: int = 4
    min_samples_leaf: int = 20
    min_impurity_decrease: float = 0.0001
    criterion: str = 'gini'
    class_weight: Any = None


@dataclass
class RandomForestConfig(BaseModelConfig):
    """Probability forest with library defaults, as in the untuned walkthrough."""

    n_estimators: int = 500
    max_depth: Any = None
    min_samples_leaf: Any = 1
    max_features: Any = 'sqrt'
    criterion: str = 'gini'
    n_jobs: int = -1


@dataclass
class TunedForestConfig(BaseModelConfig):
    """Random search over forest hyper-parameters, scored by cross-validated AUC."""

    n_iter: int = 10
    cv_folds: int = 5
    scoring: str = 'roc_auc'
    n_jobs: int = -1
    n_estimators_range: Tuple[int, int] = (50, 500)
    max_depth_range: Tuple[int, int] = (1, 10)
    min_samples_leaf_range: Tuple[float, float] = (0.01, 0.1)
    criteria: List[str] = field(default_factory=lambda: ['gini', 'entropy'])


def get_model_config(model_type: str) -> BaseModelConfig:
    """
    Get the default configuration for a model type.

    Args:
        model_type: One of 'cdc', 'tree', 'forest', 'tuned_forest'

    Returns:
        Configuration dataclass for that model
    """
    configs = {
        'cdc': CDCRiskConfig,
        'tree': DecisionTreeConfig,
        'forest': RandomForestConfig,
        'tuned_forest': TunedForestConfig,
    }
    if model_type not in configs:
        raise ValueError(f"Unknown model type '{model_type}'. Available: {list(configs)}")
    return configs[model_type]()
