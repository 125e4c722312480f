"""
Instance-level attributions: break-down and Shapley values.

Both decompose one prediction into an intercept (the average prediction
over the reference data) plus one additive contribution per variable.

Break-down comes from dalex: variables are fixed to the observed values one
at a time, in order of decreasing single-variable effect, and the shift of
the mean prediction is recorded. Shapley values come from the ``shap``
library's KernelExplainer on a background sample. dalex's random orderings
(``type='shap'``) show how much the contributions depend on the order in
which variables are fixed.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd
import shap

from .explainer import Explainer, format_value
from ..exceptions import ExplanationError

warnings.filterwarnings('ignore', category=UserWarning, module='shap')

logger = logging.getLogger(__name__)

ATTRIBUTION_TYPES = ('break_down', 'shap')
INTERCEPT = 'intercept'
PREDICTION = 'prediction'
ADDITIVITY_TOLERANCE = 1e-6


@dataclass
class PredictParts:
    """Result of predict_parts.

    result rows: intercept, one row per variable, prediction. Columns are
    variable, variable_name, variable_value, contribution, cumulative, sign,
    label. orderings, when present, holds per-ordering contributions
    (columns B, variable_name, contribution).
    """
    result: pd.DataFrame
    label: str
    type: str
    intercept: float
    prediction: float
    orderings: Optional[pd.DataFrame] = None

    def contributions(self) -> pd.Series:
        """Per-variable contributions indexed by variable name."""
        rows = self.result[~self.result['variable_name'].isin([INTERCEPT, PREDICTION])]
        return rows.set_index('variable_name')['contribution']


def check_additivity(label: str, intercept: float, contributions: Sequence[float], prediction: float,
                     tolerance: float = ADDITIVITY_TOLERANCE) -> None:
    """Raise ExplanationError unless intercept + contributions reproduce the prediction."""
    residual = prediction - (intercept + float(np.sum(contributions)))
    if not np.isfinite(residual) or abs(residual) > tolerance:
        raise ExplanationError(
            f"Attributions for '{label}' do not add up: intercept {intercept:.6g} + contributions "
            f"{float(np.sum(contributions)):.6g} differs from prediction {prediction:.6g} by {residual:.3g}")


def attribution_vector(values, n_variables: int) -> np.ndarray:
    """One attribution per variable from shap output; any other shape is an error."""
    if isinstance(values, list):
        if len(values) != 1:
            raise ExplanationError(f"Expected attributions for one output, got {len(values)} outputs")
        values = values[0]
    values = np.asarray(values, dtype=float)
    if values.size != n_variables:
        raise ExplanationError(f"Expected {n_variables} attributions, got shape {values.shape}")
    return values.reshape(-1)


def _single_observation(explainer: Explainer, new_observation, procedure: str) -> pd.DataFrame:
    observation = explainer.check_observation(new_observation)
    if len(observation) != 1:
        raise ExplanationError(f"{procedure} explains one observation, got {len(observation)}")
    return observation


def _build_result(explainer: Explainer, observation: pd.DataFrame, order: Sequence[str],
                  contributions: Sequence[float], intercept: float, prediction: float) -> pd.DataFrame:
    rows = [{
        'variable': INTERCEPT, 'variable_name': INTERCEPT, 'variable_value': '',
        'contribution': intercept, 'cumulative': intercept,
    }]
    cumulative = intercept
    for variable, contribution in zip(order, contributions):
        cumulative += contribution
        value = format_value(observation[variable].iloc[0])
        rows.append({
            'variable': f"{variable} = {value}", 'variable_name': variable, 'variable_value': value,
            'contribution': float(contribution), 'cumulative': cumulative,
        })
    rows.append({
        'variable': PREDICTION, 'variable_name': PREDICTION, 'variable_value': '',
        'contribution': prediction, 'cumulative': prediction,
    })
    result = pd.DataFrame(rows)
    result['sign'] = np.sign(result['contribution']).astype(int)
    result.loc[result['variable_name'].isin([INTERCEPT, PREDICTION]), 'sign'] = 0
    result['label'] = explainer.label
    return result


def break_down(explainer: Explainer,
               new_observation: Union[pd.DataFrame, pd.Series, dict],
               order: Optional[Sequence[str]] = None,
               N: Optional[int] = None,
               random_state: Optional[int] = None) -> PredictParts:
    """
    Sequential break-down attribution of a single prediction.

    Args:
        explainer: Explainer providing the model and reference data
        new_observation: Single row to explain
        order: Explicit variable order; defaults to decreasing single-variable effect
        N: Rows of the reference data to use; None uses all rows
        random_state: Seed for sampling reference rows

    Returns:
        PredictParts whose contributions add up to the prediction
    """
    observation = _single_observation(explainer, new_observation, 'break_down')
    if order is not None:
        order = explainer.check_variables(list(order))
        order = order + [v for v in explainer.feature_names if v not in order]

    parts = explainer.dalex.predict_parts(
        explainer.to_dalex_frame(observation),
        type='break_down',
        order=order,
        N=N,
        random_state=random_state,
    )
    raw = parts.result
    is_intercept = raw['variable'] == INTERCEPT
    is_prediction = raw['variable'] == PREDICTION
    intercept = float(raw.loc[is_intercept, 'contribution'].iloc[0])
    variables = raw[~(is_intercept | is_prediction)]
    order = variables['variable_name'].tolist()
    contributions = variables['contribution'].astype(float).tolist()

    prediction = float(explainer.predict(observation)[0])
    check_additivity(explainer.label, intercept, contributions, prediction)

    result = _build_result(explainer, observation, order, contributions, intercept, prediction)
    logger.debug(f"Break-down for '{explainer.label}': intercept {intercept:.4f}, prediction {prediction:.4f}")
    return PredictParts(result=result, label=explainer.label, type='break_down',
                        intercept=intercept, prediction=prediction)


def break_down_orderings(explainer: Explainer,
                         new_observation: Union[pd.DataFrame, pd.Series, dict],
                         B: int = 25,
                         N: Optional[int] = None,
                         random_state: Optional[int] = None) -> pd.DataFrame:
    """
    Break-down contributions under B random variable orderings.

    The mean over orderings approximates the Shapley value of each variable.

    Returns:
        DataFrame with columns B, variable_name, contribution
    """
    if B < 1:
        raise ExplanationError(f"B must be positive, got {B}")
    observation = _single_observation(explainer, new_observation, 'break_down_orderings')
    parts = explainer.dalex.predict_parts(
        explainer.to_dalex_frame(observation),
        type='shap',
        B=B,
        N=N,
        random_state=random_state,
    )
    # B == 0 rows hold dalex's average over the orderings
    orderings = parts.result[parts.result['B'] > 0]
    orderings = orderings[['B', 'variable_name', 'contribution']].astype({'B': int, 'contribution': float})
    return orderings.sort_values('B', kind='mergesort').reset_index(drop=True)


def shap_values(explainer: Explainer,
                new_observation: Union[pd.DataFrame, pd.Series, dict],
                background_size: int = 100,
                nsamples: Union[int, str] = 'auto',
                B: int = 0,
                random_state: Optional[int] = None) -> PredictParts:
    """
    Shapley attribution of a single prediction with shap.KernelExplainer.

    Args:
        explainer: Explainer providing the model and reference data
        new_observation: Single row to explain
        background_size: Rows of the reference data used as background
        nsamples: Coalitions evaluated by KernelExplainer
        B: If positive, also compute B random break-down orderings for the spread
        random_state: Seed for background sampling and orderings

    Returns:
        PredictParts with variables sorted by absolute contribution
    """
    observation = _single_observation(explainer, new_observation, 'shap')
    columns: List[str] = explainer.feature_names

    seed = 0 if random_state is None else random_state
    background = shap.sample(explainer.data, min(background_size, len(explainer.data)), random_state=seed)

    def predict_fn(values: np.ndarray) -> np.ndarray:
        return explainer.predict(pd.DataFrame(np.atleast_2d(values), columns=columns))

    logger.info(f"Kernel SHAP for '{explainer.label}': background {len(background)} rows, nsamples={nsamples}")
    kernel = shap.KernelExplainer(predict_fn, background.to_numpy(dtype=float))
    raw = kernel.shap_values(observation.to_numpy(dtype=float), nsamples=nsamples, silent=True)
    values = attribution_vector(raw, len(columns))

    intercept = float(np.asarray(kernel.expected_value).reshape(-1)[0])
    prediction = float(explainer.predict(observation)[0])
    check_additivity(explainer.label, intercept, values, prediction)

    order = [columns[i] for i in np.argsort(-np.abs(values), kind='mergesort')]
    contributions = [float(values[columns.index(v)]) for v in order]

    result = _build_result(explainer, observation, order, contributions, intercept, prediction)
    orderings = None
    if B > 0:
        orderings = break_down_orderings(explainer, observation, B=B, random_state=random_state)
    return PredictParts(result=result, label=explainer.label, type='shap',
                        intercept=intercept, prediction=prediction, orderings=orderings)


def predict_parts(explainer: Explainer,
                  new_observation: Union[pd.DataFrame, pd.Series, dict],
                  type: str = 'break_down',
                  order: Optional[Sequence[str]] = None,
                  B: int = 25,
                  N: Optional[int] = None,
                  background_size: int = 100,
                  nsamples: Union[int, str] = 'auto',
                  random_state: Optional[int] = None) -> PredictParts:
    """
    Attribute a single prediction to the variables.

    Args:
        explainer: Explainer providing the model and reference data
        new_observation: Single row to explain
        type: 'break_down' or 'shap'
        order: Variable order for break_down
        B: Random orderings reported alongside shap values
        N: Reference rows for break_down; None uses all rows
        background_size: Background rows for shap
        nsamples: KernelExplainer coalitions for shap
        random_state: Seed

    Returns:
        PredictParts
    """
    if type not in ATTRIBUTION_TYPES:
        raise ExplanationError(f"Unknown attribution type '{type}'. Available: {list(ATTRIBUTION_TYPES)}")
    if type == 'break_down':
        return break_down(explainer, new_observation, order=order, N=N, random_state=random_state)
    return shap_values(explainer, new_observation, background_size=background_size,
                       nsamples=nsamples, B=B, random_state=random_state)
