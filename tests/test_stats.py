from __future__ import annotations

import numpy as np
import pytest
from sklearn.linear_model import LinearRegression

from happynet.stats import (
    RegressionModel,
    correlation,
    fit_line,
    fit_regression,
    pearson_correlation,
    r_squared,
    regression_r_squared,
)


def test_two_point_example(two_records):
    model = fit_regression(two_records)

    assert correlation(two_records) == pytest.approx(1.0)
    assert model.slope == pytest.approx(0.05)
    assert model.intercept == pytest.approx(3.5)
    assert model.n == 2
    assert regression_r_squared(two_records, model) == pytest.approx(1.0)


def test_correlation_symmetric_and_bounded():
    rng = np.random.default_rng(0)
    for _ in range(20):
        x = rng.uniform(0, 100, size=30)
        y = 0.03 * x + rng.normal(0, 1, size=30)
        r_xy = pearson_correlation(x, y)
        assert r_xy == pytest.approx(pearson_correlation(y, x))
        assert -1.0 <= r_xy <= 1.0
        assert r_xy == pytest.approx(np.corrcoef(x, y)[0, 1])


def test_collinear_points_have_r2_of_one():
    x = np.array([5.0, 20.0, 35.0, 60.0, 95.0])
    y = -0.02 * x + 7.0
    model = fit_line(x, y)

    assert model.slope == pytest.approx(-0.02)
    assert r_squared(x, y, model) == pytest.approx(1.0)
    assert pearson_correlation(x, y) == pytest.approx(-1.0)


def test_slope_sign_matches_correlation_sign(world_records):
    model = fit_regression(world_records)
    r = correlation(world_records)

    assert r != 0
    assert np.sign(model.slope) == np.sign(r)


def test_fit_matches_sklearn(world_records):
    x = world_records[["internet_usage_pct"]].to_numpy()
    y = world_records["happiness_score"].to_numpy()
    reference = LinearRegression().fit(x, y)
    model = fit_regression(world_records)

    assert model.slope == pytest.approx(reference.coef_[0])
    assert model.intercept == pytest.approx(reference.intercept_)
    assert regression_r_squared(world_records, model) == pytest.approx(reference.score(x, y))


def test_fewer_than_two_points():
    assert pearson_correlation([50.0], [6.0]) == 0.0
    assert pearson_correlation([], []) == 0.0
    assert fit_line([50.0], [6.0]) == RegressionModel(slope=0.0, intercept=6.0, n=1)
    assert fit_line([], []) == RegressionModel(slope=0.0, intercept=0.0, n=0)
    assert r_squared([], [], RegressionModel(0.0, 0.0)) == 0.0


def test_zero_variance_fallbacks():
    x = [10.0, 40.0, 90.0]
    flat_y = [5.0, 5.0, 5.0]
    assert pearson_correlation(x, flat_y) == 0.0
    model = fit_line(x, flat_y)
    assert model.slope == 0.0
    assert r_squared(x, flat_y, model) == 0.0

    flat_x = [50.0, 50.0, 50.0]
    y = [4.0, 5.0, 6.0]
    assert pearson_correlation(flat_x, y) == 0.0
    assert fit_line(flat_x, y) == RegressionModel(slope=0.0, intercept=5.0, n=3)


def test_mismatched_lengths():
    with pytest.raises(ValueError):
        pearson_correlation([1.0, 2.0], [1.0])


def test_predict_and_equation():
    model = RegressionModel(slope=0.05, intercept=3.5)

    assert model.predict(90) == pytest.approx(8.0)
    np.testing.assert_allclose(model.predict([10, 50]), [4.0, 6.0])
    assert model.equation == "y=0.050x+3.500"


def test_equation_shows_negative_intercept_sign():
    assert RegressionModel(slope=0.05, intercept=-3.5).equation == "y=0.050x-3.500"
    assert RegressionModel(slope=-0.2, intercept=0.0).equation == "y=-0.200x+0.000"
