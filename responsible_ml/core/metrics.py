"""
Core metrics helpers with NaN-safe computations for binary classification.
"""

from __future__ import annotations

from typing import Dict

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    f1_score,
    log_loss,
    precision_score,
    recall_score,
    roc_auc_score,
    roc_curve,
)


def _positive_probability(proba: np.ndarray) -> np.ndarray:
    a = np.asarray(proba, dtype=float)
    # Accept (n, 2) predict_proba output as well as a probability vector
    if a.ndim == 2 and a.shape[1] == 2:
        return a[:, 1]
    return a.reshape(-1)


def auc_safe(y_true: np.ndarray, y_prob: np.ndarray) -> float:
    """ROC AUC, or NaN when only one class is present."""
    y_true = np.asarray(y_true).reshape(-1)
    if len(np.unique(y_true)) < 2:
        return float("nan")
    return float(roc_auc_score(y_true, _positive_probability(y_prob)))


def classification_metrics(
    y_true: np.ndarray,
    y_prob: np.ndarray,
    cutoff: float = 0.5,
    pos_label: int = 1,
) -> Dict[str, float]:
    """Recall, precision, F1, accuracy and AUC of probability predictions.

    Labels are obtained by thresholding at cutoff (inclusive).
    """
    y_true = np.asarray(y_true).reshape(-1).astype(int)
    y_prob = _positive_probability(y_prob)
    if len(y_true) != len(y_prob):
        raise ValueError(f"y_true has {len(y_true)} rows but y_prob has {len(y_prob)}")
    y_pred = (y_prob >= cutoff).astype(int)

    return {
        "recall": float(recall_score(y_true, y_pred, zero_division=0, pos_label=pos_label)),
        "precision": float(precision_score(y_true, y_pred, zero_division=0, pos_label=pos_label)),
        "f1": float(f1_score(y_true, y_pred, zero_division=0, pos_label=pos_label)),
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "auc": auc_safe(y_true, y_prob),
    }


def roc_curve_frame(y_true: np.ndarray, y_prob: np.ndarray) -> pd.DataFrame:
    """False/true positive rates for every threshold, ready for plotting."""
    y_true = np.asarray(y_true).reshape(-1)
    if len(np.unique(y_true)) < 2:
        return pd.DataFrame(columns=["fpr", "tpr", "threshold"])
    fpr, tpr, thresholds = roc_curve(y_true, _positive_probability(y_prob))
    return pd.DataFrame({"fpr": fpr, "tpr": tpr, "threshold": thresholds})


def cumulative_gain_frame(y_true: np.ndarray, y_prob: np.ndarray) -> pd.DataFrame:
    """Share of positives captured when targeting the top-scored fraction of rows."""
    y_true = np.asarray(y_true).reshape(-1).astype(int)
    y_prob = _positive_probability(y_prob)
    order = np.argsort(-y_prob, kind="mergesort")
    captured = np.cumsum(y_true[order])
    n = len(y_true)
    total = max(int(y_true.sum()), 1)
    fraction = np.arange(1, n + 1) / n
    return pd.DataFrame({
        "fraction": np.r_[0.0, fraction],
        "gain": np.r_[0.0, captured / total],
    })


def lift_curve_frame(y_true: np.ndarray, y_prob: np.ndarray) -> pd.DataFrame:
    """Lift of the top-scored fraction over the overall positive rate."""
    gain = cumulative_gain_frame(y_true, y_prob).iloc[1:].reset_index(drop=True)
    gain["lift"] = gain["gain"] / gain["fraction"]
    return gain[["fraction", "lift"]]


# Loss functions for permutation importance: lower is better
def loss_one_minus_auc(y_true: np.ndarray, y_prob: np.ndarray) -> float:
    return 1.0 - auc_safe(y_true, y_prob)


def loss_root_mean_square(y_true: np.ndarray, y_prob: np.ndarray) -> float:
    y_true = np.asarray(y_true, dtype=float).reshape(-1)
    return float(np.sqrt(np.mean((y_true - _positive_probability(y_prob)) ** 2)))


def loss_cross_entropy(y_true: np.ndarray, y_prob: np.ndarray) -> float:
    p = np.clip(_positive_probability(y_prob), 1e-15, 1 - 1e-15)
    return float(log_loss(np.asarray(y_true).reshape(-1), np.c_[1 - p, p], labels=[0, 1]))


def loss_accuracy(y_true: np.ndarray, y_prob: np.ndarray, cutoff: float = 0.5) -> float:
    y_pred = (_positive_probability(y_prob) >= cutoff).astype(int)
    return 1.0 - float(accuracy_score(np.asarray(y_true).reshape(-1), y_pred))


LOSS_FUNCTIONS = {
    "one_minus_auc": loss_one_minus_auc,
    "root_mean_square": loss_root_mean_square,
    "cross_entropy": loss_cross_entropy,
    "accuracy": loss_accuracy,
}
