"""
Model persistence utilities for the Responsible ML workflow.

Provides static methods for saving/loading fitted models together with their
parameters, metrics and the library versions they were fitted with.
"""

import json
import logging
import platform
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, Tuple, Union

import joblib

logger = logging.getLogger(__name__)


class ModelPersistence:
    """
    Model persistence utility for saving/loading models with metadata.
    """

    @staticmethod
    def save_model(model: Any,
                   filepath: Union[str, Path],
                   metrics: Optional[Dict[str, Any]] = None) -> Path:
        """
        Save a fitted model with its metadata.

        Args:
            model: Trained model object (a BaseModel subclass)
            filepath: Directory to save the model into
            metrics: Performance metrics dict

        Returns:
            Directory the model was written to
        """
        filepath = Path(filepath)
        filepath.mkdir(parents=True, exist_ok=True)

        joblib.dump(model, filepath / 'model.pkl')

        params = model.get_params() if hasattr(model, 'get_params') else {}
        metadata = {
            'name': getattr(model, 'name', type(model).__name__),
            'model_class': f"{type(model).__module__}.{type(model).__name__}",
            'params': params,
            'feature_names': getattr(model, 'feature_names', None),
            'saved_at': datetime.now().isoformat(),
            'python_version': sys.version,
            'platform': platform.platform(),
            'dependencies': ModelPersistence._get_dependency_versions(),
        }
        with open(filepath / 'metadata.json', 'w') as f:
            json.dump(metadata, f, indent=2, default=str)

        with open(filepath / 'metrics.json', 'w') as f:
            json.dump(metrics or {}, f, indent=2, default=str)

        logger.info(f"Saved model '{metadata['name']}' to {filepath}")
        return filepath

    @staticmethod
    def load_model(filepath: Union[str, Path]) -> Tuple[Any, Dict[str, Any], Dict[str, Any]]:
        """
        Load a model saved with save_model.

        Args:
            filepath: Path to model directory

        Returns:
            model, metadata, metrics
        """
        filepath = Path(filepath)
        model_file = filepath / 'model.pkl'
        if not model_file.exists():
            raise FileNotFoundError(f"No saved model found in {filepath}")

        model = joblib.load(model_file)
        metadata = ModelPersistence._read_json(filepath / 'metadata.json')
        metrics = ModelPersistence._read_json(filepath / 'metrics.json')

        saved_versions = metadata.get('dependencies', {})
        current_versions = ModelPersistence._get_dependency_versions()
        for name, version in saved_versions.items():
            if current_versions.get(name) not in (None, version):
                logger.warning(f"{name} version mismatch: saved with {version}, running {current_versions[name]}")

        logger.info(f"Loaded model '{metadata.get('name', model_file)}' from {filepath}")
        return model, metadata, metrics

    @staticmethod
    def _read_json(path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        with open(path, 'r') as f:
            return json.load(f)

    @staticmethod
    def _get_dependency_versions() -> Dict[str, str]:
        versions = {}
        for module_name in ('numpy', 'pandas', 'sklearn', 'shap', 'joblib'):
            try:
                module = __import__(module_name)
                versions[module_name] = getattr(module, '__version__', 'unknown')
            except ImportError:
                versions[module_name] = 'not installed'
        return versions
