"""
Configuration management for the Responsible ML workflow.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field, asdict, fields

from ..config.model_config import (
    CDCRiskConfig,
    DecisionTreeConfig,
    RandomForestConfig,
    TunedForestConfig,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path('configs/workflow_config.json')

MODEL_KINDS = ('cdc', 'tree', 'forest', 'tuned_forest')


@dataclass
class DataConfig:
    """Configuration for loading the patient tables."""
    train_path: str = 'data/covid_spring.csv'
    test_path: str = 'data/covid_summer.csv'
    separator: str = ';'
    target: str = 'Death'
    positive_label: str = 'Yes'
    gender_column: str = 'Gender'
    positive_gender: str = 'Male'
    age_column: str = 'Age'
    features: List[str] = field(default_factory=lambda: [
        'Gender', 'Age', 'Cardiovascular.Diseases', 'Diabetes',
        'Neurological.Diseases', 'Kidney.Diseases', 'Cancer',
    ])
    binary_columns: List[str] = field(default_factory=lambda: [
        'Cardiovascular.Diseases', 'Diabetes', 'Neurological.Diseases',
        'Kidney.Diseases', 'Cancer', 'Hospitalization', 'Fever', 'Cough',
    ])

    @property
    def feature_binary_columns(self) -> List[str]:
        """Yes/no columns that are also modelling features."""
        return [c for c in self.binary_columns if c in self.features]


@dataclass
class ModelConfig:
    """Which models to fit and their hyper-parameters."""
    enabled: List[str] = field(default_factory=lambda: list(MODEL_KINDS))
    random_state: int = 42
    cdc: CDCRiskConfig = field(default_factory=CDCRiskConfig)
    tree: DecisionTreeConfig = field(default_factory=DecisionTreeConfig)
    forest: RandomForestConfig = field(default_factory=RandomForestConfig)


@dataclass
class ExplanationConfig:
    """Configuration for the model explanation procedures."""
    B: int = 10
    N: Optional[int] = 1000
    profile_N: int = 100
    grid_points: int = 101
    cutoff: float = 0.5
    profile_variables: List[str] = field(default_factory=lambda: ['Age'])
    profile_groups: Optional[str] = None
    shap_B: int = 25
    shap_background: int = 100
    shap_nsamples: Any = 'auto'
    new_observation: Dict[str, Any] = field(default_factory=lambda: {
        'Gender': 'Male',
        'Age': 76,
        'Cardiovascular.Diseases': 'Yes',
        'Diabetes': 'No',
        'Neurological.Diseases': 'No',
        'Kidney.Diseases': 'No',
        'Cancer': 'No',
    })


@dataclass
class OutputConfig:
    """Configuration for output directories."""
    results_dir: str = 'results'
    plots_dir: str = 'results/plots'
    models_dir: str = 'results/models'
    log_dir: str = 'logs'
    save_models: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: int = logging.INFO
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    date_format: str = '%Y-%m-%d %H:%M:%S'


def _build_section(cls, values: Dict[str, Any], section: str):
    """Instantiate a dataclass section, rejecting unknown keys."""
    if values is None:
        return cls()
    if not isinstance(values, dict):
        raise ConfigurationError(f"Section '{section}' must be a mapping, got {type(values).__name__}")
    known = {f.name: f for f in fields(cls)}
    unknown = set(values) - set(known)
    if unknown:
        raise ConfigurationError(f"Unknown keys in section '{section}': {sorted(unknown)}")
    kwargs = {}
    for key, value in values.items():
        default = known[key].default
        # JSON has no tuples
        if isinstance(default, tuple) and isinstance(value, list):
            value = tuple(value)
        kwargs[key] = value
    return cls(**kwargs)


class WorkflowConfig:
    """
    Main configuration class for the Responsible ML workflow.

    Holds one dataclass per section and provides a centralized way to access
    configuration throughout the workflow.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration from dictionary or load from file.

        Args:
            config_dict: Configuration dictionary. If None, loads from default file.
        """
        if config_dict is not None:
            self._load_from_dict(config_dict)
        else:
            self._load_default_config()
        self.validate()

    @classmethod
    def from_file(cls, config_path: str) -> 'WorkflowConfig':
        """Load configuration from a JSON file."""
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        with open(path, 'r') as f:
            try:
                config_dict = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e
        logger.info(f"Loaded configuration from {config_path}")
        return cls(config_dict=config_dict)

    def _load_default_config(self):
        """Load configuration from default config file."""
        if DEFAULT_CONFIG_PATH.exists():
            with open(DEFAULT_CONFIG_PATH, 'r') as f:
                config_dict = json.load(f)
            self._load_from_dict(config_dict)
        else:
            # Use hardcoded defaults
            self._load_from_dict({})

    def _load_from_dict(self, config_dict: Dict[str, Any]):
        """Load configuration from dictionary."""
        known_sections = {'data', 'models', 'tuning', 'explanation', 'output', 'logging'}
        unknown = set(config_dict) - known_sections
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")

        self.data = _build_section(DataConfig, config_dict.get('data'), 'data')

        model_config = dict(config_dict.get('models') or {})
        random_state = model_config.get('random_state', 42)
        nested = {}
        for name, cls in (('cdc', CDCRiskConfig), ('tree', DecisionTreeConfig),
                          ('forest', RandomForestConfig)):
            section = dict(model_config.pop(name, None) or {})
            section.setdefault('random_state', random_state)
            nested[name] = _build_section(cls, section, f'models.{name}')
        self.models = _build_section(ModelConfig, model_config, 'models')
        for name, value in nested.items():
            setattr(self.models, name, value)

        tuning_config = dict(config_dict.get('tuning') or {})
        tuning_config.setdefault('random_state', random_state)
        self.tuning = _build_section(TunedForestConfig, tuning_config, 'tuning')

        self.explanation = _build_section(ExplanationConfig, config_dict.get('explanation'), 'explanation')
        self.output = _build_section(OutputConfig, config_dict.get('output'), 'output')

        logging_config = dict(config_dict.get('logging') or {})
        level = logging_config.get('level', 'INFO')
        if isinstance(level, str):
            resolved = logging.getLevelName(level.upper())
            if not isinstance(resolved, int):
                raise ConfigurationError(f"Unknown logging level: {level}")
            logging_config['level'] = resolved
        self.logging = _build_section(LoggingConfig, logging_config, 'logging')

    def validate(self) -> bool:
        """Check value ranges; raise ConfigurationError on the first problem."""
        unknown_models = set(self.models.enabled) - set(MODEL_KINDS)
        if unknown_models:
            raise ConfigurationError(f"Unknown models enabled: {sorted(unknown_models)}. Available: {list(MODEL_KINDS)}")
        if self.data.target in self.data.features:
            raise ConfigurationError(f"Target '{self.data.target}' cannot also be a feature")
        if not self.data.features:
            raise ConfigurationError("At least one feature is required")
        if self.explanation.B < 1:
            raise ConfigurationError(f"explanation.B must be positive, got {self.explanation.B}")
        if self.explanation.N is not None and self.explanation.N < 1:
            raise ConfigurationError(f"explanation.N must be positive or null, got {self.explanation.N}")
        if self.explanation.grid_points < 2:
            raise ConfigurationError(f"explanation.grid_points must be at least 2, got {self.explanation.grid_points}")
        if not 0.0 < self.explanation.cutoff < 1.0:
            raise ConfigurationError(f"explanation.cutoff must lie in (0, 1), got {self.explanation.cutoff}")
        if self.tuning.cv_folds < 2:
            raise ConfigurationError(f"tuning.cv_folds must be at least 2, got {self.tuning.cv_folds}")
        if self.tuning.n_iter < 1:
            raise ConfigurationError(f"tuning.n_iter must be positive, got {self.tuning.n_iter}")
        if self.models.cdc.base_risk <= 0:
            raise ConfigurationError(f"models.cdc.base_risk must be positive, got {self.models.cdc.base_risk}")
        if len(self.models.cdc.risk_ratios) != len(self.models.cdc.age_breaks) + 1:
            raise ConfigurationError("models.cdc.risk_ratios needs exactly one more entry than age_breaks")
        return True

    def with_output_dir(self, output_dir: str) -> 'WorkflowConfig':
        """Point every output directory below output_dir."""
        base = Path(output_dir)
        self.output.results_dir = str(base)
        self.output.plots_dir = str(base / 'plots')
        self.output.models_dir = str(base / 'models')
        self.output.log_dir = str(base / 'logs')
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to the nested-dict shape accepted by __init__."""
        models = asdict(self.models)
        logging_section = asdict(self.logging)
        logging_section['level'] = logging.getLevelName(self.logging.level)
        return {
            'data': asdict(self.data),
            'models': models,
            'tuning': asdict(self.tuning),
            'explanation': asdict(self.explanation),
            'output': asdict(self.output),
            'logging': logging_section,
        }

    def save(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)
        logger.info(f"Configuration saved to {filepath}")

    def __repr__(self) -> str:
        return (f"WorkflowConfig(target={self.data.target!r}, "
                f"models={self.models.enabled}, results_dir={self.output.results_dir!r})")
