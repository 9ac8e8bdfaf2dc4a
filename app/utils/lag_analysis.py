"""
Lead/lag analysis between indicator series: rank correlation, cross-correlation
over a lag sweep, and auto-discovery of the best-correlated indicators for a target.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from app.utils.descriptive import clean
from app.utils.regression import paired, pearson_correlation

logger = logging.getLogger(__name__)

METHODS = ("pearson", "spearman", "crosscorr")
MIN_LAG_POINTS = 3
MIN_CANDIDATE_POINTS = 5


@dataclass
class LagCorrelation:
    lag: int
    correlation: float


@dataclass
class OptimalLag:
    lag: int
    correlation: float
    direction: str      # "X leads Y" | "Y leads X" | "simultaneous"


@dataclass
class CorrelationCandidate:
    id: str
    name: str
    values: list = field(default_factory=list)


@dataclass
class BestCorrelation:
    id: str
    name: str
    correlation: float
    method: str
    lag: Optional[int] = None
    lag_interpretation: Optional[str] = None


def get_ranks(values) -> list[float]:
    """
    1-based fractional ranks: tied values share the mean of the ranks they span.
    get_ranks([10, 20, 20, 30]) -> [1.0, 2.5, 2.5, 4.0]
    Invalid entries are dropped first, so the result ranks the cleaned sample.
    """
    x = clean(values)
    order = np.argsort(x, kind="mergesort")
    ranks = np.empty(x.size, dtype=float)

    i = 0
    while i < x.size:
        j = i
        while j < x.size and x[order[j]] == x[order[i]]:
            j += 1
        # positions i..j-1 hold ranks i+1..j
        ranks[order[i:j]] = (i + 1 + j) / 2.0
        i = j
    return ranks.tolist()


def spearman_correlation(x, y) -> float:
    """Pearson correlation of the fractional ranks of both (truncated) series."""
    xs, ys = paired(x, y)
    if xs.size < 2:
        return 0.0
    return pearson_correlation(get_ranks(xs), get_ranks(ys))


def cross_correlation(x, y, max_lag: int = 12) -> list[LagCorrelation]:
    """
    Pearson correlation of x against y shifted by every lag in [-L, L],
    L = min(max_lag, n // 3). Positive lag: x leads y.
    Sorted by |correlation| descending, strongest first.
    """
    x = list(x)
    y = list(y)
    n = min(len(x), len(y))
    if n < MIN_LAG_POINTS:
        return [LagCorrelation(lag=0, correlation=0.0)]

    effective_max_lag = min(int(max_lag), n // 3)
    results: list[LagCorrelation] = []
    for lag in range(-effective_max_lag, effective_max_lag + 1):
        if lag > 0:
            x_shifted, y_shifted = x[: n - lag], y[lag:n]
        elif lag < 0:
            x_shifted, y_shifted = x[-lag:n], y[: n + lag]
        else:
            x_shifted, y_shifted = x[:n], y[:n]

        if len(x_shifted) < MIN_LAG_POINTS or len(y_shifted) < MIN_LAG_POINTS:
            continue
        results.append(LagCorrelation(lag=lag, correlation=pearson_correlation(x_shifted, y_shifted)))

    # sorted() is stable: equal strengths keep ascending lag order
    return sorted(results, key=lambda r: abs(r.correlation), reverse=True)


def find_optimal_lag(x, y, max_lag: int = 12) -> OptimalLag:
    ccf = cross_correlation(x, y, max_lag)
    if not ccf:
        return OptimalLag(lag=0, correlation=0.0, direction="simultaneous")

    best = ccf[0]
    if best.lag > 0:
        direction = "X leads Y"
    elif best.lag < 0:
        direction = "Y leads X"
    else:
        direction = "simultaneous"
    return OptimalLag(lag=best.lag, correlation=best.correlation, direction=direction)


def interpret_lag(lag: int, x_name: str, y_name: str, lang: str = "en") -> str:
    """Plain-language lead/lag sentence. lang: "en" or "pt-BR"."""
    pt = lang.lower().startswith("pt")
    if lag == 0:
        return "Relação simultânea" if pt else "Simultaneous relationship"

    abs_lag = abs(lag)
    if pt:
        periods = "período" if abs_lag == 1 else "períodos"
        leader, follower = (x_name, y_name) if lag > 0 else (y_name, x_name)
        return f"{leader} antecede {follower} em {abs_lag} {periods}"

    periods = "period" if abs_lag == 1 else "periods"
    leader, follower = (x_name, y_name) if lag > 0 else (y_name, x_name)
    return f"{leader} leads {follower} by {abs_lag} {periods}"


def find_best_correlations(
    target: CorrelationCandidate,
    candidates: Sequence[CorrelationCandidate],
    method: str = "spearman",
    top_n: int = 5,
    max_lag: int = 12,
    lang: str = "en",
) -> list[BestCorrelation]:
    """
    Rank candidate indicators by |correlation| against the target.

    Target and candidate are truncated to their common length; candidates with
    fewer than 5 aligned points (and the target itself) are skipped.
    With method="crosscorr" the candidate is X and the target is Y, so a
    positive lag means the candidate leads the target.
    """
    if method not in METHODS:
        raise ValueError(f"Unknown correlation method {method!r}; expected one of {METHODS}")

    results: list[BestCorrelation] = []
    for candidate in candidates:
        if candidate.id == target.id:
            continue

        min_length = min(len(target.values), len(candidate.values))
        if min_length < MIN_CANDIDATE_POINTS:
            logger.debug("skipping %s: only %d aligned points", candidate.id, min_length)
            continue

        target_values = list(target.values)[:min_length]
        candidate_values = list(candidate.values)[:min_length]

        if method == "crosscorr":
            optimal = find_optimal_lag(candidate_values, target_values, max_lag)
            results.append(BestCorrelation(
                id=candidate.id,
                name=candidate.name,
                correlation=optimal.correlation,
                method=method,
                lag=optimal.lag,
                lag_interpretation=interpret_lag(optimal.lag, candidate.name, target.name, lang),
            ))
        else:
            corr = spearman_correlation if method == "spearman" else pearson_correlation
            results.append(BestCorrelation(
                id=candidate.id,
                name=candidate.name,
                correlation=corr(candidate_values, target_values),
                method=method,
            ))

    results.sort(key=lambda r: abs(r.correlation), reverse=True)
    return results[: max(int(top_n), 0)]
