"""Unit tests for derivative and delta transforms"""
import numpy as np
import pandas as pd
import pytest

from conftest import T0, make_series
from kwarchive.api.queries.series import KeywordKind, Series
from kwarchive.api.queries.transforms import Transform, apply_transform, round_half_away
from kwarchive.core.errors import RowIterationError, UnknownTransform

DIFFERENCING = [
    Transform.DERIVATIVE,
    Transform.DERIVATIVE_1HZ,
    Transform.DERIVATIVE_10HZ,
    Transform.DERIVATIVE_100HZ,
    Transform.DELTA,
]


class TestDerivative:
    """First derivative variants"""

    def test_derivative_of_linear_steps(self):
        series = make_series([0, 1, 2], [1.0, 2.0, 4.0])
        result = apply_transform(series, Transform.DERIVATIVE)

        assert result.values.tolist() == [1.0, 2.0]
        assert list(result.times) == list(series.times[1:])

    def test_derivative_divides_by_interval_seconds(self):
        series = make_series([0, 0.5, 2.5], [0.0, 1.0, 2.0])
        result = apply_transform(series, Transform.DERIVATIVE)
        assert result.values.tolist() == pytest.approx([2.0, 0.5])

    def test_derivative_of_constant_is_zero(self):
        series = make_series([0, 0.5, 1.0, 1.5, 2.0], [3.0] * 5)
        result = apply_transform(series, Transform.DERIVATIVE)

        assert len(result) == 4
        assert (result.values == 0).all()

    def test_1hz_rounds_to_nearest_integer(self):
        series = make_series([0, 1, 2], [0.0, 2.4, 5.0])
        result = apply_transform(series, Transform.DERIVATIVE_1HZ)
        assert result.values.tolist() == [2.0, 3.0]

    def test_10hz_rounds_to_tenths(self):
        series = make_series([0, 1], [0.0, 1.26])
        result = apply_transform(series, Transform.DERIVATIVE_10HZ)
        assert result.values.tolist() == pytest.approx([1.3])

    def test_100hz_rounds_to_hundredths(self):
        series = make_series([0, 1], [0.0, -1.234])
        result = apply_transform(series, Transform.DERIVATIVE_100HZ)
        assert result.values.tolist() == pytest.approx([-1.23])

    def test_unrounded_derivative_keeps_precision(self):
        series = make_series([0, 1], [0.0, 2.4])
        result = apply_transform(series, Transform.DERIVATIVE)
        assert result.values.tolist() == pytest.approx([2.4])


class TestDelta:
    """Forward difference ignoring the sampling interval"""

    def test_delta_values(self):
        series = make_series([0, 10, 11], [1.0, 2.0, 4.0])
        result = apply_transform(series, Transform.DELTA)

        assert result.values.tolist() == [1.0, 2.0]
        assert len(result) == len(series) - 1

    def test_delta_keeps_later_timestamps(self):
        series = make_series([0, 10, 11], [1.0, 2.0, 4.0])
        result = apply_transform(series, Transform.DELTA)
        expected = pd.to_datetime([T0 + 10, T0 + 11], unit="s", utc=True)
        assert list(result.times) == list(expected)


class TestBoundaries:
    """Short series and pass-through cases"""

    @pytest.mark.parametrize("option", DIFFERENCING)
    def test_single_sample_yields_empty_series(self, option):
        result = apply_transform(make_series([0], [5.0]), option)
        assert len(result) == 0
        assert len(result.times) == len(result.values)

    @pytest.mark.parametrize("option", DIFFERENCING)
    def test_empty_series_yields_empty_series(self, option):
        result = apply_transform(Series.empty(KeywordKind.SCALAR), option)
        assert len(result) == 0

    def test_none_is_identity(self):
        series = make_series([0, 1, 2], [1.0, 2.0, 4.0])
        assert apply_transform(series, Transform.NONE) is series

    @pytest.mark.parametrize("option", DIFFERENCING)
    def test_string_series_pass_through(self, option):
        series = make_series([0, 1, 2], ["open", "closed", "open"], kind=KeywordKind.STRING)
        result = apply_transform(series, option)

        assert result.values.tolist() == ["open", "closed", "open"]
        assert len(result.times) == len(result.values) == 3

    def test_zero_interval_gives_non_finite_value(self):
        series = make_series([0, 0], [1.0, 2.0])
        result = apply_transform(series, Transform.DERIVATIVE)
        assert np.isinf(result.values.iloc[0])

    def test_iteration_error_is_carried(self):
        series = make_series([0, 1], [1.0, 2.0])
        series.iteration_error = RowIterationError("row query error: boom")
        result = apply_transform(series, Transform.DELTA)
        assert result.iteration_error is series.iteration_error


class TestTransformCodes:
    def test_codes_match_editor_options(self):
        assert [t.value for t in Transform] == [0, 1, 2, 3, 4, 5]

    @pytest.mark.parametrize("code", [6, 42, -3])
    def test_unknown_code_raises(self, code):
        with pytest.raises(UnknownTransform, match="Unknown transform"):
            Transform.from_code(code)


class TestRoundHalfAway:
    def test_halves_round_away_from_zero(self):
        values = np.array([0.5, 1.5, 2.5, -0.5, -2.5])
        assert round_half_away(values, 0).tolist() == [1.0, 2.0, 3.0, -1.0, -3.0]

    def test_just_below_half_rounds_down(self):
        values = np.array([0.49999999999999994, -0.49999999999999994])
        assert round_half_away(values, 0).tolist() == [0.0, 0.0]

    def test_large_integers_are_unchanged(self):
        values = np.array([4503599627370497.0, -4503599627370497.0])
        assert round_half_away(values, 0).tolist() == [4503599627370497.0, -4503599627370497.0]

    def test_infinities_pass_through(self):
        assert round_half_away(np.array([np.inf, -np.inf]), 2).tolist() == [np.inf, -np.inf]

    def test_nan_passes_through(self):
        assert np.isnan(round_half_away(np.array([np.nan]), 1)[0])
