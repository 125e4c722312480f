"""
Synthetic demo data for the Responsible ML workflow.
"""

from .dataset import load_demo

__all__ = ['load_demo']
