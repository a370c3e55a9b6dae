from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

import numpy as np
from scipy.stats import gamma as _gamma
from scipy.stats import lognorm as _lognorm
from scipy.stats import truncnorm as _truncnorm

from ._exceptions import ForecastError

# Mean/std of the synthetic prior: the average task takes 25% longer than
# estimated, and about one task in six is delivered on time or better.
PRIOR_MEAN = 0.8
PRIOR_STD = 0.2
PRIOR_SIZE = 20

# Accuracy ratios are divisors; the truncated normal never goes below this.
RATIO_FLOOR = 0.05

# SciPy's rv_frozen is not a stable public typing target.
FrozenDist = Any

ParamsFromMomentsFn = Callable[[float, float], tuple[float, ...]]
FreezeFn = Callable[[tuple[float, ...]], FrozenDist]


@dataclass(frozen=True, slots=True)
class PriorSpec:
    params_from_mean_std: ParamsFromMomentsFn
    freeze: FreezeFn


def _truncnorm_params(mean: float, std: float) -> tuple[float, ...]:
    a = (RATIO_FLOOR - mean) / std
    return a, np.inf, mean, std  # a, b, loc, scale


def _truncnorm_freeze(params: tuple[float, ...]) -> FrozenDist:
    a, b, loc, scale = params
    return _truncnorm(a, b, loc=loc, scale=scale)


def _gamma_params(mean: float, std: float) -> tuple[float, ...]:
    k = (mean / std) ** 2
    return k, 0.0, mean / k  # a, loc, scale


def _gamma_freeze(params: tuple[float, ...]) -> FrozenDist:
    a, loc, scale = params
    return _gamma(a, loc=loc, scale=scale)


def _lognorm_params(mean: float, std: float) -> tuple[float, ...]:
    # For lognormal X: var/mean^2 = exp(s^2) - 1, mean = scale * exp(s^2 / 2).
    s2 = float(np.log1p((std / mean) ** 2))
    return float(np.sqrt(s2)), 0.0, float(mean / np.exp(s2 / 2.0))  # s, loc, scale


def _lognorm_freeze(params: tuple[float, ...]) -> FrozenDist:
    s, loc, scale = params
    return _lognorm(s, loc=loc, scale=scale)


PRIORS: dict[str, PriorSpec] = {
    "truncnorm": PriorSpec(_truncnorm_params, _truncnorm_freeze),
    "gamma": PriorSpec(_gamma_params, _gamma_freeze),
    "lognorm": PriorSpec(_lognorm_params, _lognorm_freeze),
}


def _spec(dist: str) -> PriorSpec:
    try:
        return PRIORS[dist]
    except KeyError:
        raise ForecastError(
            f"Unknown prior distribution {dist!r}; expected one of {sorted(PRIORS)}."
        ) from None


def ratio_prior(
    mean: float = PRIOR_MEAN,
    std: float = PRIOR_STD,
    dist: str = "truncnorm",
) -> FrozenDist:
    """Frozen SciPy distribution of accuracy ratios with the given moments."""
    if not np.isfinite(mean) or not np.isfinite(std):
        raise ForecastError("mean/std must be finite.")
    if mean <= 0.0 or std <= 0.0:
        raise ForecastError(f"Prior needs positive mean and std; got mean={mean}, std={std}.")
    spec = _spec(dist)
    return spec.freeze(spec.params_from_mean_std(float(mean), float(std)))


def fit_prior(
    ratios: Sequence[float] | np.ndarray,
    dist: str = "gamma",
    *,
    ddof: int = 1,
) -> FrozenDist:
    """Fit a prior to observed accuracy ratios by matching mean and std."""
    x = np.asarray(ratios, dtype=np.float64).reshape(-1)
    if x.size < 2:
        raise ForecastError("At least two ratios are needed to fit a prior.")
    if not np.isfinite(x).all():
        raise ForecastError("The ratios contain non-finite values.")
    return ratio_prior(float(x.mean()), float(x.std(ddof=int(ddof))), dist)


def synthetic_ratios(
    n: int = PRIOR_SIZE,
    *,
    mean: float = PRIOR_MEAN,
    std: float = PRIOR_STD,
    dist: str = "truncnorm",
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """
    Draw ``n`` synthetic accuracy ratios: a conservative track record for
    estimators who don't have one yet. ``std == 0`` yields ``n`` copies of
    ``mean``.
    """
    if n < 0:
        raise ForecastError(f"n must be non-negative; got {n}.")
    if std == 0.0:
        if mean <= 0.0:
            raise ForecastError(f"Ratios must be positive; got mean={mean}.")
        return np.full(n, float(mean))
    if rng is None:
        rng = np.random.default_rng()
    return np.asarray(ratio_prior(mean, std, dist).rvs(size=n, random_state=rng), dtype=np.float64)