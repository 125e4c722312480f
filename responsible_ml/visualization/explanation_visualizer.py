"""
Plots for model performance and explanation artifacts.

Every plotting method saves one PNG under the output directory and returns
its path, or None when the figure could not be drawn.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
from sklearn.tree import plot_tree

from ..core.evaluator import ModelPerformance
from ..core.io_utils import slugify
from ..interpretability.model_parts import BASELINE, FULL_MODEL, VariableImportance
from ..interpretability.model_profile import AggregatedProfiles
from ..interpretability.predict_parts import INTERCEPT, PREDICTION, PredictParts
from ..interpretability.predict_profile import CeterisParibusProfiles

logger = logging.getLogger(__name__)


class ExplanationVisualizer:
    """
    Figures for the evaluation and explanation stages.

    Provides:
    - ROC and lift curves with several models on one axis
    - Permutation importance bars with the spread over rounds
    - Partial dependence / ALE lines, optionally grouped
    - Break-down waterfall and Shapley bars
    - Ceteris-paribus lines with the explained observation marked
    - The fitted decision tree
    """

    def __init__(self, output_dir: str = 'results/plots', max_display: int = 20):
        """
        Initialize explanation visualizer.

        Args:
            output_dir: Directory to save plots
            max_display: Maximum number of variables shown in bar plots
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.max_display = max_display

        plt.style.use('seaborn-v0_8')
        sns.set_palette("husl")
        logger.info("ExplanationVisualizer initialized")

    def _save(self, fig, file_name: str) -> str:
        out_path = self.output_dir / file_name
        fig.tight_layout()
        fig.savefig(out_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        logger.debug(f"Saved {out_path}")
        return str(out_path)

    def plot_roc(self, performances: Sequence[ModelPerformance]) -> Optional[str]:
        try:
            fig, ax = plt.subplots(figsize=(7, 7))
            for perf in performances:
                auc = perf.metrics.get('auc', np.nan)
                ax.plot(perf.roc['fpr'], perf.roc['tpr'], label=f"{perf.label} (AUC {auc:.3f})")
            ax.plot([0, 1], [0, 1], linestyle='--', color='grey', linewidth=1)
            ax.set_xlabel('False positive rate')
            ax.set_ylabel('True positive rate')
            ax.set_title('ROC curves')
            ax.legend(loc='lower right')
            return self._save(fig, 'roc_curves.png')
        except Exception as e:
            logger.warning(f"plot_roc failed: {e}")
            plt.close('all')
            return None

    def plot_lift(self, performances: Sequence[ModelPerformance]) -> Optional[str]:
        try:
            fig, ax = plt.subplots(figsize=(8, 5))
            for perf in performances:
                ax.plot(perf.lift['fraction'], perf.lift['lift'], label=perf.label)
            ax.axhline(1.0, linestyle='--', color='grey', linewidth=1)
            ax.set_xlabel('Fraction of patients targeted (highest scores first)')
            ax.set_ylabel('Lift')
            ax.set_title('Lift curves')
            ax.legend()
            return self._save(fig, 'lift_curves.png')
        except Exception as e:
            logger.warning(f"plot_lift failed: {e}")
            plt.close('all')
            return None

    def plot_importance(self, importances: Sequence[VariableImportance]) -> Optional[str]:
        """Bars from the full-model loss to the permuted loss, one panel per model."""
        try:
            n = len(importances)
            fig, axes = plt.subplots(n, 1, figsize=(9, 2.2 + 0.45 * self.max_display * n / 2), squeeze=False)
            for ax, imp in zip(axes[:, 0], importances):
                mean = imp.mean_importance()
                full = imp.full_model_loss()
                rows = mean[~mean['variable'].isin([FULL_MODEL, BASELINE])].head(self.max_display)
                rows = rows.iloc[::-1]
                ax.barh(rows['variable'], rows['dropout_loss'] - full, left=full, color='steelblue')

                per_round = imp.result[(imp.result['permutation'] > 0) &
                                       imp.result['variable'].isin(rows['variable'])]
                spread = [per_round.loc[per_round['variable'] == v, 'dropout_loss'].to_numpy()
                          for v in rows['variable']]
                ax.boxplot(spread, positions=np.arange(len(rows)), vert=False, widths=0.3,
                           manage_ticks=False, showfliers=False)
                ax.axvline(full, color='black', linewidth=1)
                ax.set_title(f"{imp.label} ({imp.loss_name}, B={imp.B})")
                ax.set_xlabel('Loss after permutation')
            return self._save(fig, 'variable_importance.png')
        except Exception as e:
            logger.warning(f"plot_importance failed: {e}")
            plt.close('all')
            return None

    def plot_profiles(self, profiles: Sequence[AggregatedProfiles], variable: str,
                      file_suffix: str = '') -> Optional[str]:
        """Dataset-level profiles of one variable, models (and groups) overlaid."""
        try:
            fig, ax = plt.subplots(figsize=(9, 5))
            for prof in profiles:
                data = prof.profile(variable)
                for group, frame in data.groupby('group', sort=True):
                    label = f"{prof.label} [{prof.groups}={group}]" if group else prof.label
                    ax.plot(frame['x'], frame['yhat'], label=label,
                            drawstyle='steps-post' if len(frame) <= 2 else 'default',
                            marker='o' if len(frame) <= 2 else None)
            kind = profiles[0].type if profiles else 'partial'
            ax.set_xlabel(variable)
            ax.set_ylabel('Average prediction')
            ax.set_title(f"{kind.capitalize()} profile of {variable}")
            ax.legend()
            suffix = f"_{file_suffix}" if file_suffix else ''
            return self._save(fig, f"profile_{kind}_{slugify(variable)}{suffix}.png")
        except Exception as e:
            logger.warning(f"plot_profiles failed: {e}")
            plt.close('all')
            return None

    def plot_break_down(self, parts: PredictParts) -> Optional[str]:
        """Waterfall from the intercept to the prediction."""
        try:
            result = parts.result
            steps = result[~result['variable_name'].isin([INTERCEPT, PREDICTION])].head(self.max_display)
            labels = ['intercept'] + steps['variable'].tolist() + ['prediction']
            starts = [0.0] + (steps['cumulative'] - steps['contribution']).tolist() + [0.0]
            widths = [parts.intercept] + steps['contribution'].tolist() + [parts.prediction]
            colors = ['grey'] + ['seagreen' if c >= 0 else 'firebrick' for c in steps['contribution']] + ['steelblue']

            fig, ax = plt.subplots(figsize=(9, 0.5 * len(labels) + 1.5))
            positions = np.arange(len(labels))[::-1]
            ax.barh(positions, widths, left=starts, color=colors)
            for pos, start, width in zip(positions, starts, widths):
                ax.text(start + width, pos, f" {width:+.4f}" if pos not in (0, len(labels) - 1) else f" {width:.4f}",
                        va='center', fontsize=8)
            ax.set_yticks(positions)
            ax.set_yticklabels(labels)
            ax.axvline(parts.intercept, color='black', linewidth=0.8, linestyle=':')
            ax.set_xlabel('Prediction')
            ax.set_title(f"{parts.type.replace('_', '-').capitalize()} for {parts.label}")
            return self._save(fig, f"{parts.type}_{slugify(parts.label)}.png")
        except Exception as e:
            logger.warning(f"plot_break_down failed: {e}")
            plt.close('all')
            return None

    def plot_shap(self, parts: PredictParts) -> Optional[str]:
        """Shapley contributions as bars, with the spread over orderings when available."""
        try:
            result = parts.result
            rows = result[~result['variable_name'].isin([INTERCEPT, PREDICTION])].head(self.max_display)
            rows = rows.iloc[::-1]
            positions = np.arange(len(rows))
            colors = ['seagreen' if c >= 0 else 'firebrick' for c in rows['contribution']]

            fig, ax = plt.subplots(figsize=(9, 0.5 * len(rows) + 1.5))
            ax.barh(positions, rows['contribution'], color=colors, alpha=0.8)
            if parts.orderings is not None and not parts.orderings.empty:
                spread = [parts.orderings.loc[parts.orderings['variable_name'] == v, 'contribution'].to_numpy()
                          for v in rows['variable_name']]
                ax.boxplot(spread, positions=positions, vert=False, widths=0.3,
                           manage_ticks=False, showfliers=False)
            ax.set_yticks(positions)
            ax.set_yticklabels(rows['variable'])
            ax.axvline(0, color='black', linewidth=0.8)
            ax.set_xlabel('Contribution')
            ax.set_title(f"Shapley values for {parts.label} "
                         f"(intercept {parts.intercept:.4f}, prediction {parts.prediction:.4f})")
            return self._save(fig, f"shap_{slugify(parts.label)}.png")
        except Exception as e:
            logger.warning(f"plot_shap failed: {e}")
            plt.close('all')
            return None

    def plot_ceteris_paribus(self, profiles: Sequence[CeterisParibusProfiles], variable: str,
                             observation_id: int = 0) -> Optional[str]:
        try:
            fig, ax = plt.subplots(figsize=(9, 5))
            for prof in profiles:
                line = prof.profile(variable, observation_id)
                lines = ax.plot(line['x'], line['yhat'], label=prof.label,
                                marker='o' if len(line) <= 2 else None)
                observed = prof.observations[prof.observations['_ids_'] == observation_id].iloc[0]
                ax.scatter([observed[variable]], [observed['_yhat_']], color=lines[0].get_color(),
                           s=60, zorder=3, edgecolor='black')
            ax.set_xlabel(variable)
            ax.set_ylabel('Prediction')
            ax.set_title(f"Ceteris-paribus profile of {variable}")
            ax.legend()
            return self._save(fig, f"ceteris_paribus_{slugify(variable)}.png")
        except Exception as e:
            logger.warning(f"plot_ceteris_paribus failed: {e}")
            plt.close('all')
            return None

    def plot_decision_tree(self, model, class_names: Optional[List[str]] = None) -> Optional[str]:
        """Render a fitted DecisionTreeModel."""
        try:
            estimator = model.model
            fig, ax = plt.subplots(figsize=(max(10, 2.5 * estimator.get_n_leaves()), 8))
            plot_tree(estimator, feature_names=model.feature_names,
                      class_names=class_names or ['No', 'Yes'], filled=True,
                      proportion=True, impurity=False, fontsize=8, ax=ax)
            ax.set_title(f"{model.name}")
            return self._save(fig, f"tree_{slugify(model.name)}.png")
        except Exception as e:
            logger.warning(f"plot_decision_tree failed: {e}")
            plt.close('all')
            return None

    def plot_all_profiles(self, profiles: Sequence[AggregatedProfiles], variables: Sequence[str],
                          file_suffix: str = '') -> Dict[str, Optional[str]]:
        return {v: self.plot_profiles(profiles, v, file_suffix=file_suffix) for v in variables}
