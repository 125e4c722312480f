from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from responsible_ml.core.config import DataConfig


PERIOD_SHIFT = {
    # Spring patients were older and died more often than summer patients
    "spring": {"age_mean": 52.0, "mortality_offset": 0.0},
    "summer": {"age_mean": 45.0, "mortality_offset": -0.6},
}


def _sigmoid(z: np.ndarray) -> np.ndarray:
    return 1.0 / (1.0 + np.exp(-z))


def load_demo(n: int = 2000, seed: int = 1337, period: str = "spring",
              data_config: Optional[DataConfig] = None) -> pd.DataFrame:
    """Return a deterministic synthetic patient table.

    Columns follow the semicolon files the workflow reads: gender, age, five
    comorbidity flags, three symptom/hospitalization flags and the outcome.
    Mortality rises steeply with age and with each comorbidity.
    n: number of patients
    period: 'spring' (training period) or 'summer' (test period)
    """
    if period not in PERIOD_SHIFT:
        raise ValueError(f"Unknown period '{period}'. Available: {list(PERIOD_SHIFT)}")
    cfg = data_config or DataConfig()
    shift = PERIOD_SHIFT[period]
    rng = np.random.default_rng(seed)

    male = rng.random(n) < 0.48
    age = np.clip(rng.normal(loc=shift["age_mean"], scale=20.0, size=n), 0, 100).round().astype(int)

    def comorbidity(intercept: float, slope: float) -> np.ndarray:
        return rng.random(n) < _sigmoid(intercept + slope * (age - 50))

    cardio = comorbidity(-1.6, 0.06)
    diabetes = comorbidity(-2.2, 0.04)
    neuro = comorbidity(-3.0, 0.05)
    kidney = comorbidity(-3.2, 0.05)
    cancer = comorbidity(-3.0, 0.04)

    logit = (-8.0 + shift["mortality_offset"] + 0.085 * age + 0.45 * male + 0.8 * cardio
             + 0.35 * diabetes + 0.6 * neuro + 0.9 * kidney + 0.7 * cancer)
    death = rng.random(n) < _sigmoid(logit)

    hospitalization = rng.random(n) < np.where(death, 0.85, _sigmoid(-2.5 + 0.03 * age))
    fever = rng.random(n) < np.where(death, 0.6, 0.35)
    cough = rng.random(n) < np.where(death, 0.55, 0.4)

    def yes_no(flag: np.ndarray) -> np.ndarray:
        return np.where(flag, "Yes", "No")

    binary = {
        "Cardiovascular.Diseases": cardio,
        "Diabetes": diabetes,
        "Neurological.Diseases": neuro,
        "Kidney.Diseases": kidney,
        "Cancer": cancer,
        "Hospitalization": hospitalization,
        "Fever": fever,
        "Cough": cough,
    }
    df = pd.DataFrame({
        cfg.gender_column: np.where(male, cfg.positive_gender, "Female"),
        cfg.age_column: age,
    })
    for column, flag in binary.items():
        df[column] = yes_no(flag)
    df[cfg.target] = np.where(death, cfg.positive_label, "No")
    return df
