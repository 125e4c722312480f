"""
Exploratory summaries of the patient tables.

Produces the descriptive tables that open the walkthrough: outcome rate,
age distribution, comorbidity prevalence and a table stratified by outcome
with univariate test p-values.
"""

import logging
from typing import Dict, List, Optional, Sequence, Any

import numpy as np
import pandas as pd
from scipy import stats

from .config import DataConfig
from ..exceptions import DataValidationError

logger = logging.getLogger(__name__)

DEFAULT_AGE_BINS = (0, 18, 30, 40, 50, 65, 75, 85, np.inf)


class DataExplorer:
    """Descriptive statistics for a validated patient table."""

    def __init__(self, config: Optional[DataConfig] = None):
        self.config = config or DataConfig()

    def _is_positive(self, df: pd.DataFrame) -> pd.Series:
        return df[self.config.target] == self.config.positive_label

    def summarize(self, df: pd.DataFrame) -> Dict[str, Any]:
        """
        Headline numbers for a table.

        Args:
            df: Validated patient table

        Returns:
            Dictionary with row count, outcome rate, age quantiles and flag prevalence
        """
        if df.empty:
            raise DataValidationError("Cannot summarize an empty table")
        positive = self._is_positive(df)
        age = df[self.config.age_column]
        prevalence = {
            column: float((df[column] == 'Yes').mean())
            for column in self.config.binary_columns if column in df.columns
        }
        summary = {
            'n_rows': int(len(df)),
            'n_positive': int(positive.sum()),
            'outcome_rate': float(positive.mean()),
            'age': {
                'min': float(age.min()),
                'q25': float(age.quantile(0.25)),
                'median': float(age.median()),
                'mean': float(age.mean()),
                'q75': float(age.quantile(0.75)),
                'max': float(age.max()),
            },
            'prevalence': prevalence,
        }
        logger.info(f"Summary: {summary['n_rows']} rows, outcome rate {summary['outcome_rate']:.2%}, "
                    f"median age {summary['age']['median']:.0f}")
        return summary

    def stratified_table(self, df: pd.DataFrame,
                         variables: Optional[Sequence[str]] = None,
                         strata: Optional[str] = None) -> pd.DataFrame:
        """
        Table of variables stratified by a grouping column.

        Numeric variables are reported as mean (SD) with a Welch t-test,
        categorical variables as n (%) per level with a chi-square test.

        Args:
            df: Validated patient table
            variables: Columns to describe; defaults to every non-strata column
            strata: Grouping column; defaults to the target

        Returns:
            DataFrame with columns variable, level, Overall, one per stratum, p_value
        """
        strata = strata or self.config.target
        if strata not in df.columns:
            raise DataValidationError(f"Unknown strata column '{strata}'")
        variables = list(variables) if variables is not None else [c for c in df.columns if c != strata]
        unknown = [v for v in variables if v not in df.columns]
        if unknown:
            raise DataValidationError(f"Unknown variables: {unknown}")

        levels = sorted(df[strata].unique().tolist())
        groups = {level: df[df[strata] == level] for level in levels}
        rows: List[Dict[str, Any]] = [{
            'variable': 'n', 'level': '',
            'Overall': str(len(df)),
            **{str(level): str(len(group)) for level, group in groups.items()},
            'p_value': np.nan,
        }]

        for variable in variables:
            if pd.api.types.is_numeric_dtype(df[variable]):
                rows.append(self._numeric_row(df, groups, variable))
            else:
                rows.extend(self._categorical_rows(df, groups, variable, strata))

        table = pd.DataFrame(rows)
        logger.debug(f"Stratified table by '{strata}' with {len(variables)} variables")
        return table

    @staticmethod
    def _numeric_row(df: pd.DataFrame, groups: Dict[Any, pd.DataFrame], variable: str) -> Dict[str, Any]:
        def fmt(values: pd.Series) -> str:
            return f"{values.mean():.2f} ({values.std():.2f})"

        samples = [g[variable].dropna() for g in groups.values()]
        p_value = np.nan
        if len(samples) == 2 and all(len(s) > 1 for s in samples):
            p_value = float(stats.ttest_ind(samples[0], samples[1], equal_var=False).pvalue)
        return {
            'variable': f"{variable} (mean (SD))", 'level': '',
            'Overall': fmt(df[variable]),
            **{str(level): fmt(group[variable]) for level, group in groups.items()},
            'p_value': p_value,
        }

    @staticmethod
    def _categorical_rows(df: pd.DataFrame, groups: Dict[Any, pd.DataFrame],
                          variable: str, strata: str) -> List[Dict[str, Any]]:
        def fmt(values: pd.Series, level: Any) -> str:
            count = int((values == level).sum())
            share = 100.0 * count / len(values) if len(values) else 0.0
            return f"{count} ({share:.1f})"

        contingency = pd.crosstab(df[variable], df[strata])
        p_value = np.nan
        if contingency.shape[0] > 1 and contingency.shape[1] > 1:
            p_value = float(stats.chi2_contingency(contingency)[1])

        rows = []
        for i, level in enumerate(sorted(df[variable].unique().tolist())):
            rows.append({
                'variable': f"{variable} (%)" if i == 0 else '',
                'level': str(level),
                'Overall': fmt(df[variable], level),
                **{str(s): fmt(group[variable], level) for s, group in groups.items()},
                'p_value': p_value if i == 0 else np.nan,
            })
        return rows

    def outcome_rate_by(self, df: pd.DataFrame, column: str,
                        bins: Optional[Sequence[float]] = None) -> pd.DataFrame:
        """
        Outcome rate per level of a column, or per bin of a numeric column.

        Args:
            df: Validated patient table
            column: Grouping column
            bins: Bin edges for numeric columns; the age column uses age bands by default

        Returns:
            DataFrame with columns level, n, n_positive, outcome_rate
        """
        if column not in df.columns:
            raise DataValidationError(f"Unknown column '{column}'")
        if bins is None and column == self.config.age_column:
            bins = DEFAULT_AGE_BINS
        keys = pd.cut(df[column], bins=list(bins), right=False) if bins is not None else df[column]
        positive = self._is_positive(df).astype(int)
        grouped = positive.groupby(keys, observed=True)
        result = pd.DataFrame({
            'n': grouped.size(),
            'n_positive': grouped.sum(),
        })
        result['outcome_rate'] = result['n_positive'] / result['n']
        result.index = result.index.astype(str)
        return result.rename_axis('level').reset_index()
