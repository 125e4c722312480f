"""
Dataset-level variable profiles: partial dependence, local (conditional)
dependence and accumulated local effects.

All three summarize how the average model response changes with one
variable. Partial dependence averages ceteris-paribus profiles of a sample
of rows. Local dependence weights them towards rows whose own value is close
to each grid point. Accumulated local effects add up average local
prediction changes, which keeps correlated variables from being pushed into
impossible combinations. The profiles are computed by dalex
(``Explainer.model_profile``) on the grid from calculate_variable_split.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from .explainer import Explainer, format_value
from .predict_profile import CeterisParibusProfiles, calculate_variable_split, from_dalex_profiles
from ..exceptions import ExplanationError

logger = logging.getLogger(__name__)

PROFILE_TYPES = ('partial', 'conditional', 'accumulated')


@dataclass
class AggregatedProfiles:
    """Result of model_profile.

    result has columns variable, x, yhat, group, label; group is '' when no
    grouping variable was used. cp_profiles holds the underlying
    ceteris-paribus profiles of the sampled rows.
    """
    result: pd.DataFrame
    cp_profiles: CeterisParibusProfiles
    label: str
    type: str
    groups: Optional[str] = None

    def profile(self, variable: str, group: Optional[str] = None) -> pd.DataFrame:
        mask = self.result['variable'] == variable
        if group is not None:
            mask &= self.result['group'] == str(group)
        return self.result.loc[mask, ['x', 'yhat', 'group']].reset_index(drop=True)


def model_profile(explainer: Explainer,
                  variables: Optional[List[str]] = None,
                  N: Optional[int] = 100,
                  type: str = 'partial',
                  groups: Optional[str] = None,
                  grid_points: int = 101,
                  random_state: Optional[int] = None) -> AggregatedProfiles:
    """
    Compute dataset-level profiles for the given variables.

    Args:
        explainer: Explainer providing the model and reference data
        variables: Variables to profile; defaults to all
        N: Rows sampled from the reference data; None uses all rows
        type: 'partial', 'conditional' or 'accumulated'
        groups: Column of the reference data whose levels get separate profiles
        grid_points: Maximum number of grid values per variable
        random_state: Seed for row sampling

    Returns:
        AggregatedProfiles
    """
    if type not in PROFILE_TYPES:
        raise ExplanationError(f"Unknown profile type '{type}'. Available: {list(PROFILE_TYPES)}")
    variables = explainer.check_variables(variables)
    if groups is not None and groups not in explainer.feature_names:
        raise ExplanationError(f"Unknown grouping variable '{groups}'")

    n = len(explainer.data)
    if N is not None and N >= n:
        N = None

    splits = calculate_variable_split(explainer.data, variables, grid_points)
    profiles = explainer.dalex.model_profile(
        type=type,
        N=N,
        variables=variables,
        groups=groups,
        grid_points=grid_points,
        variable_splits={v: grid.astype(float) for v, grid in splits.items()},
        random_state=random_state,
        verbose=False,
    )

    raw = profiles.result
    result = pd.DataFrame({
        'variable': raw['_vname_'].to_numpy(),
        'x': raw['_x_'].to_numpy(dtype=float),
        'yhat': raw['_yhat_'].to_numpy(dtype=float),
        'group': raw['_groups_'].map(format_value).to_numpy() if groups is not None else '',
    })
    result['label'] = explainer.label
    result = result.sort_values(['group', 'x'], kind='mergesort')
    result['_order'] = result['variable'].map({v: i for i, v in enumerate(variables)})
    result = result.sort_values('_order', kind='mergesort').drop(columns='_order').reset_index(drop=True)

    cp = from_dalex_profiles(explainer, profiles.raw_profiles, variables)

    logger.info(f"{type.capitalize()} profiles for '{explainer.label}': {variables}"
                f"{f' grouped by {groups}' if groups else ''} over {N or n} rows")
    return AggregatedProfiles(result=result, cp_profiles=cp, label=explainer.label,
                              type=type, groups=groups)
