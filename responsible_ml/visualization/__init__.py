"""
Visualization components for the Responsible ML workflow.
"""

from .exploration_visualizer import ExplorationVisualizer
from .explanation_visualizer import ExplanationVisualizer

__all__ = [
    'ExplorationVisualizer',
    'ExplanationVisualizer'
]
