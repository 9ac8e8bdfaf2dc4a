import numpy as np
import pytest

from app.utils.granger import granger_causality_test, lag_matrix, residual_sum_of_squares


def test_lag_matrix_rows_hold_previous_values():
    m = lag_matrix(np.arange(6, dtype=float), 2)
    assert m.tolist() == [[1, 0], [2, 1], [3, 2], [4, 3]]


def test_residual_sum_of_squares_perfect_fit_is_zero():
    x = np.arange(10, dtype=float)
    assert residual_sum_of_squares(3 * x + 2, x.reshape(-1, 1)) == pytest.approx(0.0, abs=1e-9)
    assert residual_sum_of_squares(np.empty(0), np.empty((0, 1))) == float("inf")


def test_insufficient_data_is_neutral():
    res = granger_causality_test([1, 2, 3, 4, 5], [2, 3, 4, 5, 6], max_lag=4)
    assert res.causality_type == "none"
    assert (res.p_value_xy, res.p_value_yx) == (1.0, 1.0)
    assert not res.x_causes_y and not res.y_causes_x
    assert "Insufficient" in res.interpretation


def test_detects_leading_series():
    """
    y follows x with one period of delay; past x must help predict y far more
    than past y helps predict x.
    """
    rng = np.random.default_rng(21)
    n = 120
    x = rng.normal(0, 1, n)
    y = np.empty(n)
    y[0] = 0.0
    y[1:] = 0.8 * x[:-1] + rng.normal(0, 0.2, n - 1)

    res = granger_causality_test(x.tolist(), y.tolist(), max_lag=3)
    assert res.x_causes_y, f"expected x -> y, got p={res.p_value_xy}"
    assert res.p_value_xy < res.p_value_yx
    assert res.f_stat_xy > res.f_stat_yx
    assert res.causality_type in ("x_causes_y", "bidirectional")
    assert 1 <= res.optimal_lag <= 3


def test_p_values_are_probabilities():
    rng = np.random.default_rng(4)
    res = granger_causality_test(rng.normal(size=60), rng.normal(size=60), max_lag=2)
    for p in (res.p_value_xy, res.p_value_yx):
        assert 0.0 <= p <= 1.0
    assert res.f_stat_xy >= 0 and res.f_stat_yx >= 0
