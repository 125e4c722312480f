"""
Ceteris-paribus profiles.

For one observation and one variable, the profile is the model prediction
as that variable moves over a grid while all other values stay as observed.
Partial dependence (model_profile) is the average of these profiles over a
sample of the reference data. The predictions over the grid are made by
dalex (``Explainer.predict_profile``).
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .explainer import Explainer
from ..exceptions import ExplanationError

logger = logging.getLogger(__name__)


@dataclass
class CeterisParibusProfiles:
    """Result of predict_profile.

    result: one row per (observation, variable, grid value) with columns
    _ids_, variable, x, yhat, label.
    observations: the explained rows with their prediction in _yhat_.
    """
    result: pd.DataFrame
    observations: pd.DataFrame
    label: str

    def profile(self, variable: str, observation_id: int = 0) -> pd.DataFrame:
        """Grid values and predictions for one variable of one observation."""
        mask = (self.result['variable'] == variable) & (self.result['_ids_'] == observation_id)
        return self.result.loc[mask, ['x', 'yhat']].reset_index(drop=True)


def calculate_variable_split(data: pd.DataFrame, variables: Sequence[str],
                             grid_points: int = 101) -> Dict[str, np.ndarray]:
    """
    Grid of values for each variable.

    Variables with at most grid_points distinct values use those values;
    others use evenly spaced quantiles of the reference data.
    """
    if grid_points < 2:
        raise ExplanationError(f"grid_points must be at least 2, got {grid_points}")
    splits = {}
    for variable in variables:
        values = data[variable].dropna().to_numpy()
        unique = np.unique(values)
        if len(unique) <= grid_points:
            splits[variable] = unique
        else:
            quantiles = np.quantile(values.astype(float), np.linspace(0, 1, grid_points))
            splits[variable] = np.unique(quantiles)
    return splits


def from_dalex_profiles(explainer: Explainer, profiles, variables: Sequence[str]) -> CeterisParibusProfiles:
    """Convert a dalex CeterisParibus explanation to the long profile layout."""
    raw = profiles.result.reset_index(drop=True)
    ids = pd.factorize(raw['_ids_'])[0]
    frames = []
    for variable in variables:
        mask = (raw['_vname_'] == variable).to_numpy()
        frame = pd.DataFrame({
            '_ids_': ids[mask],
            'variable': variable,
            'x': raw.loc[mask, variable].to_numpy(dtype=float),
            'yhat': raw.loc[mask, '_yhat_'].to_numpy(dtype=float),
        })
        frames.append(frame.sort_values(['_ids_', 'x'], kind='mergesort'))
    result = pd.concat(frames, ignore_index=True)
    result['label'] = explainer.label

    observed = profiles.new_observation[explainer.feature_names].reset_index(drop=True)
    observed['_yhat_'] = explainer.predict(observed)
    observed['_ids_'] = np.arange(len(observed))
    return CeterisParibusProfiles(result=result, observations=observed, label=explainer.label)


def predict_profile(explainer: Explainer,
                    new_observation: Union[pd.DataFrame, pd.Series, dict],
                    variables: Optional[List[str]] = None,
                    grid_points: int = 101,
                    variable_splits: Optional[Dict[str, Sequence[float]]] = None,
                    include_observed: bool = True) -> CeterisParibusProfiles:
    """
    Compute ceteris-paribus profiles for one or more observations.

    Args:
        explainer: Explainer providing the model and reference data
        new_observation: Row(s) to explain, with the explainer's columns
        variables: Variables to profile; defaults to all
        grid_points: Grid size when splits come from the reference data
        variable_splits: Explicit grid per variable, overriding the reference data
        include_observed: Add the observations' own values to each grid

    Returns:
        CeterisParibusProfiles
    """
    observations = explainer.check_observation(new_observation)
    variables = explainer.check_variables(variables)

    splits = calculate_variable_split(explainer.data, variables, grid_points)
    if variable_splits:
        for variable, grid in variable_splits.items():
            if variable not in variables:
                raise ExplanationError(f"Split given for variable '{variable}' that is not profiled")
            splits[variable] = np.unique(np.asarray(grid, dtype=float))

    profiles = explainer.dalex.predict_profile(
        explainer.to_dalex_frame(observations),
        variables=variables,
        variable_splits={v: grid.astype(float) for v, grid in splits.items()},
        variable_splits_with_obs=include_observed,
        verbose=False,
    )
    result = from_dalex_profiles(explainer, profiles, variables)

    logger.debug(f"Ceteris-paribus profiles for '{explainer.label}': {len(observations)} observations, "
                 f"{len(variables)} variables, {len(result.result)} predictions")
    return result
