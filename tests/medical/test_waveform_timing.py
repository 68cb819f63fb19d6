"""
Physiological timing tests for synthesized traces.
Validates the sampling window, interval-driven reflow and rhythm-specific behaviour.
"""
import numpy as np
import pytest

from ekg_simulator.api_models import Lead, RhythmKind, SynthesisParameters
from ekg_simulator.full_ecg.lead_scaling import find_qrs_peak, qrs_polarity
from ekg_simulator.rhythm_logic import (
    calculate_noise_scale, generate_ekg_waveform, synthesize, synthesize_12_lead,
)
from ekg_simulator.waveform_primitives import fibrillatory_baseline


def _peak_index(voltage, start, stop):
    # Earliest of equally tall deflections, so the R wave wins over the QRS return
    magnitude = np.abs(voltage[start:stop])
    return start + int(np.argmax(magnitude >= magnitude.max() - 1e-9))


class TestSamplingWindow:

    @pytest.mark.medical
    @pytest.mark.parametrize("rhythm", list(RhythmKind))
    @pytest.mark.parametrize("heart_rate", [20, 30, 40, 60, 70, 100, 180, 300])
    def test_sample_count(self, rhythm, heart_rate, expected_sample_count):
        series = synthesize(SynthesisParameters(heart_rate_bpm=heart_rate, rhythm=rhythm))
        assert len(series) == expected_sample_count(heart_rate)

    @pytest.mark.medical
    @pytest.mark.parametrize("heart_rate,samples", [(20, 2250), (30, 1500), (40, 1250), (150, 1250)])
    def test_window_holds_three_beats_or_five_seconds(self, heart_rate, samples):
        assert len(synthesize(SynthesisParameters(heart_rate_bpm=heart_rate))) == samples

    @pytest.mark.medical
    @pytest.mark.parametrize("rhythm", list(RhythmKind))
    def test_time_axis_starts_at_zero_and_increases(self, rhythm):
        series = synthesize(SynthesisParameters(heart_rate_bpm=83, rhythm=rhythm, add_noise=True))

        assert series.time_axis[0] == 0.0
        assert np.all(np.diff(series.time_axis) > 0)
        assert series.time_axis[1] == pytest.approx(1 / 250)

    @pytest.mark.medical
    def test_reference_trace(self, basic_normal_params, tolerance_config):
        series = synthesize(basic_normal_params)
        peak_time, peak_voltage = find_qrs_peak(series.time_axis, series.voltage, series.points_per_cycle)

        assert len(series) == 1250
        assert series.duration_sec == pytest.approx(5.0)
        assert peak_voltage == pytest.approx(1.1, abs=tolerance_config["amplitude_tolerance_mv"])
        assert 0.176 <= peak_time <= 0.192 + tolerance_config["timing_tolerance_sec"]


class TestNoise:

    @pytest.mark.medical
    def test_clean_trace_is_deterministic(self, basic_normal_params):
        first = synthesize(basic_normal_params)
        second = synthesize(basic_normal_params)
        np.testing.assert_array_equal(first.voltage, second.voltage)

    @pytest.mark.medical
    def test_seeded_noise_is_reproducible(self, basic_normal_params):
        noisy_params = basic_normal_params.model_copy(update={"add_noise": True})

        first = synthesize(noisy_params, rng=np.random.default_rng(5))
        second = synthesize(noisy_params, rng=np.random.default_rng(5))
        np.testing.assert_array_equal(first.voltage, second.voltage)

    @pytest.mark.medical
    def test_noise_is_bounded(self, basic_normal_params):
        noisy_params = basic_normal_params.model_copy(update={"add_noise": True})
        clean = synthesize(basic_normal_params)
        noisy = synthesize(noisy_params, rng=np.random.default_rng(11))

        # lead II baseline noise 0.02 at 60 bpm
        bound = 0.02 * calculate_noise_scale(60)
        deviation = np.abs(noisy.voltage - clean.voltage)
        assert np.max(deviation) <= bound + 1e-12
        assert np.max(deviation) > 0

    @pytest.mark.medical
    def test_noise_scale_grows_with_rate(self):
        assert calculate_noise_scale(70) == pytest.approx(0.05)
        assert calculate_noise_scale(170) == pytest.approx(0.1)
        assert calculate_noise_scale(40) < calculate_noise_scale(70)


class TestNormalSinusTiming:

    @pytest.mark.medical
    @pytest.mark.parametrize("heart_rate", [60, 75, 100])
    def test_qrs_peak_in_r_wave_window(self, heart_rate):
        params = SynthesisParameters(heart_rate_bpm=heart_rate, lead=Lead.II)
        series = synthesize(params)
        ppc = series.points_per_cycle

        peak_phase = _peak_index(series.voltage, 0, ppc) / ppc
        r_start = params.pr_interval_sec + 0.2 * params.qrs_width_sec
        r_end = params.pr_interval_sec + 0.4 * params.qrs_width_sec

        assert r_start <= peak_phase <= r_end + 1 / ppc

    @pytest.mark.medical
    def test_pr_interval_moves_qrs(self):
        early = synthesize(SynthesisParameters(heart_rate_bpm=60, pr_interval_sec=0.12))
        late = synthesize(SynthesisParameters(heart_rate_bpm=60, pr_interval_sec=0.20))

        shift = _peak_index(late.voltage, 0, 250) - _peak_index(early.voltage, 0, 250)
        assert shift == 20  # 80 ms at 250 Hz

    @pytest.mark.medical
    def test_qt_interval_moves_t_wave(self):
        short_qt = synthesize(SynthesisParameters(heart_rate_bpm=60, qt_interval_sec=0.36))
        long_qt = synthesize(SynthesisParameters(heart_rate_bpm=60, qt_interval_sec=0.44))

        # Search after the QRS so the T wave is the largest deflection
        shift = _peak_index(long_qt.voltage, 70, 250) - _peak_index(short_qt.voltage, 70, 250)
        assert shift == 20

    @pytest.mark.medical
    def test_qrs_return_restarts_from_full_amplitude(self, basic_normal_params):
        series = synthesize(basic_normal_params)

        # Samples 55-57 sit in the last 30% of the QRS (0.22-0.228 s)
        np.testing.assert_allclose(series.voltage[55:58], [0.7639, 0.4889, 0.2750], atol=1e-4)
        assert series.voltage[60] == pytest.approx(0.0)

    @pytest.mark.medical
    def test_amplitude_gain_scales_trace(self, basic_normal_params):
        single = synthesize(basic_normal_params)
        doubled = synthesize(basic_normal_params.model_copy(update={"amplitude_gain": 2.0}))
        np.testing.assert_allclose(doubled.voltage, 2 * single.voltage)

    @pytest.mark.medical
    def test_beats_repeat_exactly(self, basic_normal_params):
        series = synthesize(basic_normal_params)
        np.testing.assert_array_equal(series.voltage[:250], series.voltage[250:500])

    @pytest.mark.medical
    def test_keyword_entry_point_matches(self, basic_normal_params):
        series = generate_ekg_waveform(**basic_normal_params.model_dump())
        np.testing.assert_array_equal(series.voltage, synthesize(basic_normal_params).voltage)


class TestLeadViews:

    @pytest.mark.medical
    def test_avr_flips_qrs_polarity(self, basic_normal_params):
        lead_ii = synthesize(basic_normal_params)
        lead_avr = synthesize(basic_normal_params.model_copy(update={"lead": Lead.aVR}))

        assert qrs_polarity(lead_ii.voltage, lead_ii.points_per_cycle) == "positive"
        assert qrs_polarity(lead_avr.voltage, lead_avr.points_per_cycle) == "negative"

    @pytest.mark.medical
    def test_unknown_lead_uses_base_amplitudes(self, basic_normal_params):
        series = synthesize(basic_normal_params.model_copy(update={"lead": None}))
        _, peak_voltage = find_qrs_peak(series.time_axis, series.voltage, series.points_per_cycle)

        # base QRS 1.0 times the default 0.9 normalization
        assert peak_voltage == pytest.approx(0.9, abs=0.01)

    @pytest.mark.medical
    def test_12_lead_views(self, basic_normal_params):
        leads = synthesize_12_lead(basic_normal_params)
        peaks = {
            name: abs(find_qrs_peak(series.time_axis, series.voltage, series.points_per_cycle)[1])
            for name, series in leads.items()
        }

        assert len({len(series) for series in leads.values()}) == 1
        assert max(peaks, key=peaks.get) == "V4"
        assert leads["aVR"].voltage.min() < 0 < leads["II"].voltage.max()


class TestAtrialFibrillation:

    @pytest.mark.medical
    def test_fibrillatory_waves_before_first_qrs(self, afib_params):
        series = synthesize(afib_params)
        phases = np.arange(10, 30) / series.points_per_cycle

        np.testing.assert_allclose(series.voltage[10:30], fibrillatory_baseline(phases), atol=1e-12)

    @pytest.mark.medical
    def test_qrs_position_varies_between_beats(self, afib_params):
        series = synthesize(afib_params)
        ppc = series.points_per_cycle
        peak_offsets = [
            _peak_index(series.voltage, beat * ppc, (beat + 1) * ppc) - beat * ppc
            for beat in range(5)
        ]
        assert len(set(peak_offsets)) > 1

    @pytest.mark.medical
    def test_irregularity_is_reproducible(self, afib_params):
        np.testing.assert_array_equal(synthesize(afib_params).voltage, synthesize(afib_params).voltage)


class TestVentricularTachycardia:

    @pytest.mark.medical
    def test_narrow_qrs_setting_is_ignored(self, vtach_params):
        narrow = synthesize(vtach_params)
        wide = synthesize(vtach_params.model_copy(update={"qrs_width_sec": 0.12}))
        np.testing.assert_array_equal(narrow.voltage, wide.voltage)

    @pytest.mark.medical
    def test_slow_descent_still_positive(self, vtach_params):
        series = synthesize(vtach_params)
        # t = 0.2 s lies in the descent phase of the 120 ms QRS starting at 0.1
        assert series.voltage[50] == pytest.approx(0.7, abs=1e-6)

    @pytest.mark.medical
    def test_no_p_wave(self, vtach_params):
        series = synthesize(vtach_params)
        np.testing.assert_array_equal(series.voltage[:25], np.zeros(25))

    @pytest.mark.medical
    def test_regular_at_150_bpm(self):
        params = SynthesisParameters(heart_rate_bpm=150, rhythm=RhythmKind.VENTRICULAR_TACHYCARDIA)
        series = synthesize(params)
        ppc = series.points_per_cycle
        peak_offsets = {
            _peak_index(series.voltage, beat * ppc, (beat + 1) * ppc) - beat * ppc
            for beat in range(len(series) // ppc)
        }

        assert ppc == 100
        assert len(peak_offsets) == 1
