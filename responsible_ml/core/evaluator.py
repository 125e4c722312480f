from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

import pandas as pd

from responsible_ml.core.io_utils import write_atomic
from responsible_ml.core.metrics import (
    classification_metrics,
    cumulative_gain_frame,
    lift_curve_frame,
    roc_curve_frame,
)
from responsible_ml.interpretability.explainer import Explainer

logger = logging.getLogger(__name__)

METRIC_COLUMNS = ["recall", "precision", "f1", "accuracy", "auc"]


@dataclass
class ModelPerformance:
    label: str
    metrics: Dict[str, float]
    cutoff: float
    roc: pd.DataFrame = field(repr=False)
    lift: pd.DataFrame = field(repr=False)
    gain: pd.DataFrame = field(repr=False)
    n_rows: int = 0
    n_positive: int = 0

    def as_row(self) -> Dict[str, float]:
        return {"model": self.label, **self.metrics, "n": self.n_rows, "n_positive": self.n_positive}


def model_performance(explainer: Explainer, cutoff: float = 0.5) -> ModelPerformance:
    """Classification metrics and curve data of an explainer on its own data."""
    explainer._require_y()
    y_true = explainer.y.astype(int)
    y_prob = explainer.y_hat
    metrics = classification_metrics(y_true, y_prob, cutoff=cutoff)
    logger.info(f"Performance of '{explainer.label}' at cutoff {cutoff}: "
                + ", ".join(f"{k}={v:.4f}" for k, v in metrics.items()))
    return ModelPerformance(
        label=explainer.label,
        metrics=metrics,
        cutoff=cutoff,
        roc=roc_curve_frame(y_true, y_prob),
        lift=lift_curve_frame(y_true, y_prob),
        gain=cumulative_gain_frame(y_true, y_prob),
        n_rows=int(len(y_true)),
        n_positive=int(y_true.sum()),
    )


def performance_table(performances: Sequence[ModelPerformance],
                      output_dir: Optional[str] = None) -> pd.DataFrame:
    """One row of metrics per model, best AUC first.

    When output_dir is given the table is persisted as results.csv and RESULTS.md.
    """
    table = pd.DataFrame([p.as_row() for p in performances])
    table = table.sort_values("auc", ascending=False, na_position="last").reset_index(drop=True)

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        write_atomic(os.path.join(output_dir, "results.csv"), table.to_csv(index=False))
        md = table.to_markdown(index=False, floatfmt=".4f")
        write_atomic(os.path.join(output_dir, "RESULTS.md"), "# Model Comparison Results\n\n" + md + "\n")
        logger.info(f"Model comparison written to {output_dir}")

    return table


def compare_models(explainers: Sequence[Explainer], cutoff: float = 0.5,
                   output_dir: Optional[str] = None) -> pd.DataFrame:
    """Performance table of the explainers; see performance_table."""
    performances = [model_performance(e, cutoff=cutoff) for e in explainers]
    return performance_table(performances, output_dir=output_dir)


def performance_by_explainer(explainers: Sequence[Explainer], cutoff: float = 0.5) -> Dict[str, ModelPerformance]:
    return {e.label: model_performance(e, cutoff=cutoff) for e in explainers}
