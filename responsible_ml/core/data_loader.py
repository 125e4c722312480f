"""
Data loader component for the Responsible ML workflow.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union, Any, Tuple

import numpy as np
import pandas as pd

from .config import DataConfig
from .io_utils import write_atomic
from ..data.dataset import load_demo
from ..exceptions import DataValidationError

logger = logging.getLogger(__name__)

YES_NO = {'yes': 'Yes', 'no': 'No'}
YES_NO_CODES = {'Yes': 1, 'No': 0}


class CovidDataLoader:
    """
    Data loader for the semicolon-delimited patient tables.

    This class reads and validates the training (spring) and test (summer)
    tables and turns them into the numeric feature matrix the models use.
    """

    def __init__(self, config: Optional[DataConfig] = None):
        """
        Initialize data loader.

        Args:
            config: Data section of the workflow configuration
        """
        self.config = config or DataConfig()
        logger.info(f"CovidDataLoader initialized for target '{self.config.target}' "
                    f"with {len(self.config.features)} features")

    @property
    def required_columns(self) -> List[str]:
        return list(self.config.features) + [self.config.target]

    def load_table(self, path: Union[str, Path]) -> pd.DataFrame:
        """
        Read and validate one patient table.

        Args:
            path: Path to a separator-delimited text file

        Returns:
            Validated DataFrame with normalized labels
        """
        path = Path(path)
        if not path.exists():
            raise DataValidationError(f"Data file not found: {path}")

        logger.info(f"Loading patient table from {path}")
        try:
            df = pd.read_csv(path, sep=self.config.separator, encoding='utf-8-sig',
                             skipinitialspace=True)
        except pd.errors.EmptyDataError as e:
            raise DataValidationError(f"Data file is empty: {path}") from e

        df = self.validate(df, source=str(path))
        logger.info(f"Loaded {len(df)} rows from {path.name} "
                    f"({(df[self.config.target] == self.config.positive_label).mean():.2%} positive)")
        return df

    def load_train_test(self) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Load the training and test tables named in the configuration."""
        train = self.load_table(self.config.train_path)
        test = self.load_table(self.config.test_path)
        return train, test

    def validate(self, df: pd.DataFrame, source: str = '<frame>') -> pd.DataFrame:
        """
        Check the schema of a raw table and normalize its labels.

        Args:
            df: Raw table
            source: Name used in error messages

        Returns:
            Cleaned copy of the table
        """
        df = df.copy()
        df.columns = [str(c).strip() for c in df.columns]

        if df.empty:
            raise DataValidationError(f"No rows in {source}")

        missing = [c for c in self.required_columns if c not in df.columns]
        if missing:
            raise DataValidationError(f"Missing required columns in {source}: {missing}")

        for column in df.columns:
            if pd.api.types.is_object_dtype(df[column]) or pd.api.types.is_string_dtype(df[column]):
                df[column] = df[column].map(lambda v: v.strip() if isinstance(v, str) else v)
                df[column] = df[column].replace('', np.nan)

        incomplete = df[self.required_columns].isna().any(axis=1)
        if incomplete.any():
            logger.warning(f"Dropping {int(incomplete.sum())} rows with missing values in {source}")
            df = df.loc[~incomplete].reset_index(drop=True)
            if df.empty:
                raise DataValidationError(f"No complete rows in {source}")

        age_column = self.config.age_column
        if age_column in df.columns:
            age = pd.to_numeric(df[age_column], errors='coerce')
            bad = age.isna() & df[age_column].notna()
            if bad.any():
                examples = df.loc[bad, age_column].unique()[:3].tolist()
                raise DataValidationError(f"Non-numeric values in '{age_column}' of {source}: {examples}")
            if (age < 0).any():
                raise DataValidationError(f"Negative values in '{age_column}' of {source}")
            df[age_column] = age

        yes_no_columns = [c for c in self.config.binary_columns if c in df.columns]
        yes_no_columns.append(self.config.target)
        for column in yes_no_columns:
            df[column] = self._normalize_yes_no(df[column], column, source)

        if df[self.config.target].nunique() > 2:
            raise DataValidationError(f"Target '{self.config.target}' in {source} is not binary")

        if self.config.gender_column in df.columns:
            df[self.config.gender_column] = df[self.config.gender_column].astype(str).str.title()

        return df

    def _normalize_yes_no(self, values: pd.Series, column: str, source: str) -> pd.Series:
        if values.dtype == bool:
            return values.map({True: 'Yes', False: 'No'})
        normalized = values.astype(str).str.strip().str.lower().map(YES_NO)
        unknown = normalized.isna() & values.notna()
        if unknown.any():
            examples = values[unknown].unique()[:3].tolist()
            raise DataValidationError(f"Column '{column}' in {source} must be Yes/No, found {examples}")
        return normalized

    def encode_features(self, data: Union[pd.DataFrame, Dict[str, Any], List[Dict[str, Any]]]) -> pd.DataFrame:
        """
        Encode feature columns into the numeric matrix the models are fitted on.

        Yes/No flags become 1/0, gender becomes 1 for the positive gender and
        age is kept as a float. Already encoded input is passed through.

        Args:
            data: Table, single observation dict, or list of observation dicts

        Returns:
            DataFrame with exactly the configured feature columns
        """
        if isinstance(data, dict):
            df = pd.DataFrame([data])
        elif isinstance(data, list):
            df = pd.DataFrame(data)
        else:
            df = data.copy()

        missing = [c for c in self.config.features if c not in df.columns]
        if missing:
            raise DataValidationError(f"Missing feature columns: {missing}")

        X = pd.DataFrame(index=df.index)
        for column in self.config.features:
            values = df[column]
            if column == self.config.gender_column:
                X[column] = self._encode_gender(values)
            elif column in self.config.binary_columns:
                X[column] = self._encode_yes_no(values, column)
            else:
                numeric = pd.to_numeric(values, errors='coerce')
                if numeric.isna().any():
                    raise DataValidationError(f"Column '{column}' must be numeric")
                X[column] = numeric.astype(float)
        return X

    def _encode_gender(self, values: pd.Series) -> pd.Series:
        if pd.api.types.is_numeric_dtype(values):
            return values.astype(int)
        positive = self.config.positive_gender.lower()
        return (values.astype(str).str.strip().str.lower() == positive).astype(int)

    def _encode_yes_no(self, values: pd.Series, column: str) -> pd.Series:
        if pd.api.types.is_bool_dtype(values):
            return values.astype(int)
        if pd.api.types.is_numeric_dtype(values):
            if not values.isin([0, 1]).all():
                raise DataValidationError(f"Encoded column '{column}' must contain only 0/1")
            return values.astype(int)
        labels = self._normalize_yes_no(values, column, 'observation')
        return labels.map(YES_NO_CODES).astype(int)

    def decode_features(self, X: pd.DataFrame) -> pd.DataFrame:
        """Map an encoded feature matrix back to display labels."""
        decoded = X.copy()
        for column in decoded.columns:
            if column == self.config.gender_column:
                decoded[column] = np.where(decoded[column].astype(int) == 1,
                                           self.config.positive_gender,
                                           self._other_gender())
            elif column in self.config.binary_columns:
                decoded[column] = np.where(decoded[column].astype(int) == 1, 'Yes', 'No')
        return decoded

    def _other_gender(self) -> str:
        return 'Female' if self.config.positive_gender.lower() == 'male' else 'Other'

    def encode_target(self, df: pd.DataFrame) -> pd.Series:
        """Return the outcome as a 0/1 int Series."""
        target = df[self.config.target]
        if pd.api.types.is_numeric_dtype(target):
            return target.astype(int)
        return (target == self.config.positive_label).astype(int).rename(self.config.target)

    def prepare(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
        """
        Split a validated table into feature matrix and target.

        Args:
            df: Validated patient table

        Returns:
            Tuple of (X, y)
        """
        X = self.encode_features(df)
        y = self.encode_target(df)
        logger.debug(f"Prepared matrix {X.shape} with {int(y.sum())} positive cases")
        return X, y

    def load_demo(self, n: int = 2000, seed: int = 1337, period: str = 'spring') -> pd.DataFrame:
        """Synthetic table with this loader's schema, already validated."""
        return self.validate(load_demo(n=n, seed=seed, period=period, data_config=self.config),
                             source=f'demo:{period}')

    def write_table(self, df: pd.DataFrame, path: Union[str, Path]) -> str:
        """Write a table in the same delimited format the loader reads."""
        write_atomic(path, df.to_csv(sep=self.config.separator, index=False))
        logger.info(f"Wrote {len(df)} rows to {path}")
        return str(path)
