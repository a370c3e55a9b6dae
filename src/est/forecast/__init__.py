# src/est/forecast/__init__.py
"""
est.forecast
~~~~~~~~~~~~

Evidence-based delivery forecasts. Accuracy ratios (estimated / actual hours)
of finished tasks are resampled in a Monte Carlo simulation over the pending
estimates; the 100-point percentile table of simulated working hours is then
mapped onto the business calendar.

Basic usage::

    import numpy as np
    from est.forecast import ForecastEngine, synthetic_ratios

    engine = ForecastEngine(calendar, rng=np.random.default_rng(7))
    prior = synthetic_ratios(rng=np.random.default_rng(1))
    dates = engine.schedule(now, ledger, synthetic=prior)
    dates[49]   # median delivery instant

Public API
----------
ForecastEngine      Simulation plus date mapping.
AccuracyRatio       One estimate-accuracy observation.
historical_ratios   Ratios of a ledger's finished tasks.
pad_with_synthetic  Top up a short history with synthetic ratios.
synthetic_ratios    Conservative prior ratios for new estimators.
fit_prior           Moment-matched distribution of observed ratios.
simulate            Monte Carlo trial totals.
to_percentile       100-bucket percentile table.
"""

from __future__ import annotations

from est.forecast._exceptions import ForecastError, ForecastInvariantError
from est.forecast.engine import BUCKETS, TRIALS, ForecastEngine, simulate, to_percentile
from est.forecast.prior import PRIORS, PriorSpec, fit_prior, ratio_prior, synthetic_ratios
from est.forecast.ratios import (
    MIN_HISTORY,
    AccuracyRatio,
    accuracy_ratio,
    historical_ratios,
    pad_with_synthetic,
    ratio_values,
    ratios_after,
    sort_by_time,
)

__all__ = [
    "ForecastEngine",
    "simulate",
    "to_percentile",
    "TRIALS",
    "BUCKETS",
    "AccuracyRatio",
    "accuracy_ratio",
    "historical_ratios",
    "pad_with_synthetic",
    "ratio_values",
    "ratios_after",
    "sort_by_time",
    "MIN_HISTORY",
    "PRIORS",
    "PriorSpec",
    "ratio_prior",
    "fit_prior",
    "synthetic_ratios",
    "ForecastError",
    "ForecastInvariantError",
]
