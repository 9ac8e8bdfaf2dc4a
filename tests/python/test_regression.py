import numpy as np
import pytest

from app.utils.regression import (
    detect_trend,
    generate_pairs,
    get_correlation_strength,
    get_correlation_strength_pt_br,
    linear_regression,
    paired,
    pearson_correlation,
    predict_value,
    trend_regression,
)


def test_linear_regression_recovers_exact_line():
    x = list(range(10))
    y = [2 * v + 1 for v in x]
    res = linear_regression(x, y)
    assert res.slope == pytest.approx(2.0)
    assert res.intercept == pytest.approx(1.0)
    assert res.r2 == pytest.approx(1.0)


def test_linear_regression_with_noise_has_high_r2():
    rng = np.random.default_rng(42)
    x = rng.uniform(0, 100, size=300)
    y = 0.5 + 0.2 * x + rng.normal(0, 0.5, size=300)
    res = linear_regression(x, y)
    assert res.r2 > 0.95, f"Low R^2: {res.r2}"
    assert abs(res.slope - 0.2) < 0.01, f"Slope off: {res.slope}"


def test_linear_regression_insufficient_and_degenerate():
    zero = linear_regression([1], [2])
    assert (zero.slope, zero.intercept, zero.r2) == (0, 0, 0)

    flat_y = linear_regression([1, 2, 3, 4], [5, 5, 5, 5])
    assert flat_y.slope == pytest.approx(0.0)
    assert flat_y.r2 == 0, "constant y must give r2 = 0, not NaN"

    flat_x = linear_regression([3, 3, 3], [1, 2, 6])
    assert (flat_x.slope, flat_x.r2) == (0, 0)
    assert flat_x.intercept == pytest.approx(3.0)


def test_paired_truncates_then_drops_invalid_pairs():
    x, y = paired([1, 2, None, 4, 5], [10, float("nan"), 30, 40])
    assert x.tolist() == [1.0, 4.0]
    assert y.tolist() == [10.0, 40.0]


def test_regression_silently_truncates_to_shorter_input():
    res = linear_regression([0, 1, 2, 3, 100, 200], [1, 3, 5, 7])
    assert res.slope == pytest.approx(2.0)
    assert res.intercept == pytest.approx(1.0)


def test_trend_regression_and_predict_value():
    res = trend_regression([10, 12, None, 14, 16])
    # cleaned: [10, 12, 14, 16] over index 0..3
    assert res.slope == pytest.approx(2.0)
    assert predict_value(res, 4) == pytest.approx(18.0)


def test_pearson_self_is_one_and_short_is_zero():
    x = [1.0, 4.0, 2.0, 8.0, 5.0]
    assert pearson_correlation(x, x) == pytest.approx(1.0)
    assert pearson_correlation(x, [-v for v in x]) == pytest.approx(-1.0)
    assert pearson_correlation([1], [2]) == 0
    assert pearson_correlation([], []) == 0
    assert pearson_correlation([1, 2, 3], [4, 4, 4]) == 0, "zero variance must give 0"


def test_detect_trend_threshold():
    assert detect_trend(0.02) == "up"
    assert detect_trend(-0.02) == "down"
    assert detect_trend(0.01) == "stable"
    assert detect_trend(0.3, threshold=0.5) == "stable"


@pytest.mark.parametrize(
    "r, strength",
    [(0.95, "Very Strong"), (-0.9, "Very Strong"), (0.75, "Strong"), (0.5, "Moderate"),
     (-0.3, "Weak"), (0.29, "Very Weak"), (0.0, "Very Weak")],
)
def test_correlation_strength_bands(r, strength):
    assert get_correlation_strength(r).strength == strength


def test_correlation_strength_direction_and_colour():
    neg = get_correlation_strength(-0.8)
    assert neg.description == "Strong negative correlation"
    assert neg.color == "text-red-400"
    pos = get_correlation_strength(0.92)
    assert pos.description == "Very strong positive correlation"
    assert pos.color == "text-green-500"


def test_correlation_strength_pt_br_labels():
    assert get_correlation_strength_pt_br(0.95).strength == "Muito Forte"
    assert get_correlation_strength_pt_br(-0.6).description == "Correlação negativa moderada"
    assert get_correlation_strength_pt_br(0.1).description == "Correlação insignificante"


def test_generate_pairs_unordered():
    assert generate_pairs(["a", "b", "c"]) == [("a", "b"), ("a", "c"), ("b", "c")]
    assert generate_pairs(["a"]) == []
