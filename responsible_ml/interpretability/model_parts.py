"""
Permutation variable importance.

A variable is important when shuffling its values makes the model worse.
The permutations run in dalex (``Explainer.model_parts``): for each of B
rounds a sample of rows is drawn, the loss of the intact model is recorded
as ``_full_model_``, each variable (or group of variables) is permuted in
turn, and permuting the target gives the ``_baseline_`` loss of a model that
knows nothing. This module resolves the loss, keeps the per-round losses
next to the means and orders the rows for reporting.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from .explainer import Explainer
from ..core.metrics import LOSS_FUNCTIONS, loss_one_minus_auc
from ..exceptions import ExplanationError

logger = logging.getLogger(__name__)

FULL_MODEL = '_full_model_'
BASELINE = '_baseline_'
IMPORTANCE_TYPES = ('raw', 'difference', 'ratio')
DALEX_TYPES = {'raw': 'variable_importance', 'difference': 'difference', 'ratio': 'ratio'}


@dataclass
class VariableImportance:
    """Result of model_parts.

    result holds one row per (variable, permutation round); round 0 is the
    mean over rounds. Rows other than the special ones are sorted by
    decreasing mean dropout loss.
    """
    result: pd.DataFrame
    label: str
    loss_name: str
    type: str
    B: int

    def mean_importance(self) -> pd.DataFrame:
        """Round-0 rows (means over permutations)."""
        return self.result[self.result['permutation'] == 0].reset_index(drop=True)

    def ranking(self) -> List[str]:
        """Variables from most to least important, special rows excluded."""
        mean = self.mean_importance()
        mean = mean[~mean['variable'].isin([FULL_MODEL, BASELINE])]
        return mean['variable'].tolist()

    def full_model_loss(self) -> float:
        mean = self.mean_importance()
        return float(mean.loc[mean['variable'] == FULL_MODEL, 'dropout_loss'].iloc[0])


def _resolve_loss(loss_function: Union[str, Callable, None]) -> Callable:
    if loss_function is None:
        return loss_one_minus_auc
    if isinstance(loss_function, str):
        if loss_function not in LOSS_FUNCTIONS:
            raise ExplanationError(f"Unknown loss '{loss_function}'. Available: {list(LOSS_FUNCTIONS)}")
        return LOSS_FUNCTIONS[loss_function]
    return loss_function


def _rounds_frame(permutations: pd.DataFrame, full_model_mean: float, type: str) -> pd.DataFrame:
    """Long table of per-round losses, scaled like the dalex means."""
    rounds = permutations.reset_index(drop=True)
    rounds.index = np.arange(1, len(rounds) + 1)
    if type == 'difference':
        rounds = rounds - full_model_mean
    elif type == 'ratio':
        rounds = rounds / full_model_mean if full_model_mean != 0 else rounds * np.nan
    return (rounds.rename_axis('permutation').reset_index()
            .melt(id_vars='permutation', var_name='variable', value_name='dropout_loss'))


def model_parts(explainer: Explainer,
                loss_function: Union[str, Callable, None] = None,
                B: int = 10,
                N: Optional[int] = 1000,
                variables: Optional[List[str]] = None,
                variable_groups: Optional[Dict[str, List[str]]] = None,
                type: str = 'raw',
                random_state: Optional[int] = None) -> VariableImportance:
    """
    Compute permutation-based variable importance.

    Args:
        explainer: Explainer with data and y
        loss_function: Callable (y_true, y_prob) -> loss, or a registered name; default 1 - AUC
        B: Number of permutation rounds
        N: Rows sampled per round; None or >= n uses all rows
        variables: Subset of variables to permute (ignored when variable_groups is given)
        variable_groups: Mapping of group name to columns permuted together
        type: 'raw' losses, 'difference' from the full model, or 'ratio' to it
        random_state: Seed for row sampling and permutations

    Returns:
        VariableImportance
    """
    explainer._require_y()
    if type not in IMPORTANCE_TYPES:
        raise ExplanationError(f"Unknown importance type '{type}'. Available: {list(IMPORTANCE_TYPES)}")
    if B < 1:
        raise ExplanationError(f"B must be positive, got {B}")

    loss = _resolve_loss(loss_function)
    loss_name = getattr(loss, '__name__', str(loss))

    if variable_groups:
        variable_groups = {name: explainer.check_variables(columns) for name, columns in variable_groups.items()}
        variables = None
    else:
        variables = explainer.check_variables(variables)

    n = len(explainer.data)
    if N is not None and N >= n:
        N = None

    logger.info(f"Permutation importance for '{explainer.label}': "
                f"{len(variable_groups or variables)} variables, B={B}, N={N or n}, loss={loss_name}")

    parts = explainer.dalex.model_parts(
        loss_function=loss,
        type=DALEX_TYPES[type],
        N=N,
        B=B,
        variables=variables,
        variable_groups=variable_groups,
        keep_raw_permutations=True,
        random_state=random_state,
    )

    mean = parts.result[['variable', 'dropout_loss']].copy()
    mean['permutation'] = 0
    full_model_mean = float(parts.permutation[FULL_MODEL].mean())
    rounds = _rounds_frame(parts.permutation, full_model_mean, type)

    special = mean[mean['variable'].isin([FULL_MODEL, BASELINE])]
    ordinary = mean[~mean['variable'].isin([FULL_MODEL, BASELINE])].sort_values(
        'dropout_loss', ascending=False, kind='mergesort')
    order = [FULL_MODEL] + ordinary['variable'].tolist() + [BASELINE]
    rank = {v: i for i, v in enumerate(order)}

    result = pd.concat([special, ordinary, rounds], ignore_index=True)
    result['label'] = explainer.label
    result['_rank'] = result['variable'].map(rank)
    result = result.sort_values(['permutation', '_rank'], kind='mergesort').drop(columns='_rank')
    result = result[['variable', 'permutation', 'dropout_loss', 'label']].reset_index(drop=True)

    logger.info(f"Most important for '{explainer.label}': {ordinary['variable'].head(3).tolist()}")
    return VariableImportance(result=result, label=explainer.label, loss_name=loss_name, type=type, B=B)
