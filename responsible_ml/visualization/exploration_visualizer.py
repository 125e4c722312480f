"""
Exploration plots for the patient tables.
"""

import logging
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from ..core.config import DataConfig

logger = logging.getLogger(__name__)


class ExplorationVisualizer:
    """Descriptive figures saved as PNG files."""

    def __init__(self, output_dir: str = 'results/plots', config: Optional[DataConfig] = None):
        """
        Initialize exploration visualizer.

        Args:
            output_dir: Directory to save plots
            config: Data section of the workflow configuration
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.config = config or DataConfig()

        plt.style.use('seaborn-v0_8')
        sns.set_palette("husl")
        logger.info(f"ExplorationVisualizer initialized with output_dir: {output_dir}")

    def _save(self, fig, file_name: str) -> str:
        out_path = self.output_dir / file_name
        fig.tight_layout()
        fig.savefig(out_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        logger.debug(f"Saved {out_path}")
        return str(out_path)

    def plot_age_distribution(self, df: pd.DataFrame, name: str = 'train') -> Optional[str]:
        """Age histogram split by outcome."""
        try:
            fig, ax = plt.subplots(figsize=(10, 5))
            sns.histplot(data=df, x=self.config.age_column, hue=self.config.target,
                         bins=range(0, 105, 5), multiple='stack', ax=ax)
            ax.set_title(f'Age distribution by {self.config.target} ({name})')
            ax.set_xlabel(self.config.age_column)
            ax.set_ylabel('Patients')
            return self._save(fig, f'age_distribution_{name}.png')
        except Exception as e:
            logger.warning(f"plot_age_distribution failed: {e}")
            plt.close('all')
            return None

    def plot_comorbidity_prevalence(self, df: pd.DataFrame, name: str = 'train',
                                    columns: Optional[List[str]] = None) -> Optional[str]:
        """Share of 'Yes' for every yes/no column, split by outcome."""
        try:
            columns = columns or [c for c in self.config.binary_columns if c in df.columns]
            long = df[columns + [self.config.target]].melt(id_vars=self.config.target,
                                                          var_name='variable', value_name='value')
            long['share'] = (long['value'] == 'Yes').astype(float)
            fig, ax = plt.subplots(figsize=(10, 0.5 * len(columns) + 2))
            sns.barplot(data=long, y='variable', x='share', hue=self.config.target,
                        orient='h', errorbar=None, ax=ax)
            ax.set_xlabel("Share with 'Yes'")
            ax.set_ylabel('')
            ax.set_title(f'Prevalence by {self.config.target} ({name})')
            return self._save(fig, f'prevalence_{name}.png')
        except Exception as e:
            logger.warning(f"plot_comorbidity_prevalence failed: {e}")
            plt.close('all')
            return None

    def plot_outcome_rate(self, rate_table: pd.DataFrame, column: str, name: str = 'train') -> Optional[str]:
        """Bar chart of an outcome_rate_by table."""
        try:
            fig, ax = plt.subplots(figsize=(10, 5))
            sns.barplot(data=rate_table, x='level', y='outcome_rate', color='steelblue', ax=ax)
            ax.set_xlabel(column)
            ax.set_ylabel(f'{self.config.target} rate')
            ax.tick_params(axis='x', rotation=45)
            ax.set_title(f'{self.config.target} rate by {column} ({name})')
            return self._save(fig, f'outcome_rate_{column.replace(".", "_").lower()}_{name}.png')
        except Exception as e:
            logger.warning(f"plot_outcome_rate failed: {e}")
            plt.close('all')
            return None
