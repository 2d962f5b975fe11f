# tests/test_spectrum.py

import numpy as np
import pytest

from eq_blindtest import config
from eq_blindtest.core.filters import Configuration, FilterBand, FilterShape, magnitude_db
from eq_blindtest.core.spectrum import FREQUENCIES, compute_response, evaluate, peak_gain
from eq_blindtest.errors import InvalidParameter
from eq_blindtest.utils import log_frequency_grid


class TestFrequencyGrid:
    def test_grid_shape(self):
        assert len(FREQUENCIES) == config.NUM_POINTS
        assert FREQUENCIES[0] == pytest.approx(config.GRID_MIN_FREQ)
        assert FREQUENCIES[-1] == pytest.approx(config.GRID_MAX_FREQ)
        assert np.all(np.diff(FREQUENCIES) > 0)

    def test_grid_is_logarithmic(self):
        ratios = FREQUENCIES[1:] / FREQUENCIES[:-1]
        np.testing.assert_allclose(ratios, ratios[0], rtol=1e-9)

    def test_grid_is_read_only(self):
        with pytest.raises(ValueError):
            FREQUENCIES[0] = 1.0

    def test_invalid_grid(self):
        with pytest.raises(InvalidParameter):
            log_frequency_grid(20.0, 20000.0, 1)
        with pytest.raises(InvalidParameter):
            log_frequency_grid(0.0, 20000.0, 10)


class TestEvaluate:
    def test_preamp_only(self):
        curve, peak = evaluate(Configuration(preamp_db=-4.5))
        assert np.all(curve.magnitudes_db == -4.5)
        assert peak == -4.5

    def test_curve_uses_shared_grid(self, config_a, config_b):
        curve_a, _ = evaluate(config_a)
        curve_b, _ = evaluate(config_b)
        assert curve_a.frequencies is FREQUENCIES
        assert curve_b.frequencies is FREQUENCIES
        assert len(curve_a) == config.NUM_POINTS

    def test_disabled_bands_contribute_nothing(self):
        active = FilterBand(FilterShape.PEAKING, 1000.0, 6.0, 1.0)
        muted = FilterBand(FilterShape.LOW_SHELF, 80.0, 9.0, 0.7, enabled=False)
        with_muted, peak_with = evaluate(Configuration(1.0, [active, muted]))
        without, peak_without = evaluate(Configuration(1.0, [active]))
        np.testing.assert_array_equal(with_muted.magnitudes_db, without.magnitudes_db)
        assert peak_with == peak_without

    def test_overlapping_bands_add_up(self):
        band = FilterBand(FilterShape.PEAKING, 1000.0, 6.0, 1.0)
        _, single = evaluate(Configuration(0.0, [band]))
        _, double = evaluate(Configuration(0.0, [band, band]))
        assert double == pytest.approx(2 * single)
        assert 11.5 < double <= 12.0 + 1e-9

    def test_peak_is_not_sum_of_band_peaks(self):
        low = FilterBand(FilterShape.PEAKING, 100.0, 6.0, 2.0)
        high = FilterBand(FilterShape.PEAKING, 10000.0, 6.0, 2.0)
        _, peak = evaluate(Configuration(0.0, [low, high]))
        assert peak < 7.0

    def test_matches_scalar_model(self, config_b):
        total = compute_response(config_b)
        expected = [
            config_b.preamp_db + sum(magnitude_db(f, band) for band in config_b.bands)
            for f in FREQUENCIES
        ]
        np.testing.assert_allclose(total, expected, atol=1e-9)

    def test_deterministic(self, config_b):
        first, peak_first = evaluate(config_b)
        second, peak_second = evaluate(config_b)
        np.testing.assert_array_equal(first.magnitudes_db, second.magnitudes_db)
        assert peak_first == peak_second

    def test_curve_is_immutable(self, config_a):
        curve, _ = evaluate(config_a)
        assert not curve.magnitudes_db.flags.writeable

    def test_iterates_as_pairs(self, config_a):
        curve, peak = evaluate(config_a)
        pairs = list(curve)
        assert len(pairs) == config.NUM_POINTS
        assert max(mag for _, mag in pairs) == peak
        assert 900.0 < curve.peak_frequency_hz < 1100.0

    def test_peak_gain_helper(self, config_a):
        assert peak_gain(config_a) == evaluate(config_a)[1]
