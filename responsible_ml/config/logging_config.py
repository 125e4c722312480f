"""
Logging configuration for the Responsible ML workflow.

This module provides granular control over logging levels for different components
to reduce noise while maintaining important information for debugging.
"""

import copy
import logging
from typing import Dict, Any

# Default logging configuration
DEFAULT_LOGGING_CONFIG = {
    'root_level': logging.INFO,
    'file_level': logging.INFO,
    'console_level': logging.INFO,

    # Component-specific logging levels
    'components': {
        'responsible_ml': logging.INFO,
        'responsible_ml.core': logging.INFO,
        'responsible_ml.core.data_loader': logging.INFO,
        'responsible_ml.core.explorer': logging.INFO,
        'responsible_ml.core.evaluator': logging.INFO,
        'responsible_ml.core.results_manager': logging.INFO,
        'responsible_ml.models': logging.INFO,
        'responsible_ml.interpretability': logging.INFO,
        'responsible_ml.visualization': logging.INFO,
        'responsible_ml.utils': logging.INFO,
    },

    # Third-party library logging levels
    'third_party': {
        'PIL': logging.WARNING,
        'matplotlib': logging.WARNING,
        'shap': logging.WARNING,
        'sklearn': logging.WARNING,
        'joblib': logging.WARNING,
        'pandas': logging.WARNING,
        'numpy': logging.WARNING,
    },

    # Verbose mode (for debugging)
    'verbose': False,

    # Log format
    'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'date_format': '%Y-%m-%d %H:%M:%S',
}


def get_logging_config(verbose: bool = False, custom_config: Dict[str, Any] = None) -> Dict[str, Any]:
    """
    Get logging configuration with optional customization.

    Args:
        verbose: Enable verbose logging (DEBUG level)
        custom_config: Custom configuration overrides

    Returns:
        Logging configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)

    if verbose:
        config['root_level'] = logging.DEBUG
        config['file_level'] = logging.DEBUG
        config['console_level'] = logging.DEBUG
        config['verbose'] = True

        # Explanation procedures are the chatty part in verbose mode
        for component in config['components']:
            if 'core' in component or 'interpretability' in component:
                config['components'][component] = logging.DEBUG

    if custom_config:
        config.update(custom_config)

    return config


def apply_logging_config(config: Dict[str, Any]) -> None:
    """
    Apply logging configuration to all loggers.

    Args:
        config: Logging configuration dictionary
    """
    for logger_name, level in config['components'].items():
        logging.getLogger(logger_name).setLevel(level)

    for logger_name, level in config['third_party'].items():
        logging.getLogger(logger_name).setLevel(level)

    logging.getLogger().setLevel(config['root_level'])


def get_quiet_config() -> Dict[str, Any]:
    """Get minimal logging configuration for batch runs."""
    return {
        'root_level': logging.WARNING,
        'file_level': logging.INFO,
        'console_level': logging.WARNING,
        'components': {k: logging.WARNING for k in DEFAULT_LOGGING_CONFIG['components']},
        'third_party': {k: logging.ERROR for k in DEFAULT_LOGGING_CONFIG['third_party']},
        'verbose': False,
        'format': DEFAULT_LOGGING_CONFIG['format'],
        'date_format': DEFAULT_LOGGING_CONFIG['date_format'],
    }
