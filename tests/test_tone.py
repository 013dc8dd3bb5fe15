import numpy as np
import pytest

from pcmkit import tone
from pcmkit.exceptions import InvalidParameter
from pcmkit.models import CANONICAL_SAMPLE_RATE


def _peak_frequency(samples: np.ndarray, sample_rate: int) -> float:
    spectrum = np.abs(np.fft.rfft(samples))
    freqs = np.fft.rfftfreq(len(samples), d=1.0 / sample_rate)
    return float(freqs[np.argmax(spectrum)])


def test_note_length_matches_duration():
    samples = tone.note(440.0, 1.0, 1.0)

    assert len(samples) == CANONICAL_SAMPLE_RATE
    assert samples[0] == 0.0


def test_note_zero_crossings_follow_440_hz_period():
    samples = tone.note(440.0, 1.0, 1.0)
    period = CANONICAL_SAMPLE_RATE / 440.0

    rising = np.flatnonzero((samples[:-1] < 0) & (samples[1:] >= 0)) + 1

    assert len(rising) in (439, 440)
    for k, index in enumerate(rising, start=1):
        assert abs(index - k * period) <= 1.0


def test_note_amplitude_scales_peak():
    samples = tone.note(440.0, 0.1, 0.25)

    assert np.max(np.abs(samples)) == pytest.approx(0.25, abs=1e-3)


def test_note_rounds_frame_count():
    assert len(tone.note(440.0, 0.1, 0.5)) == 4410
    assert len(tone.note(440.0, 0.5, 0.5, sample_rate=8_000)) == 4000
    assert len(tone.note(440.0, 0.0, 0.5)) == 0


@pytest.mark.parametrize(
    ("hz", "duration_s", "amplitude"),
    [
        (440.0, -0.1, 0.5),
        (440.0, 1.0, 1.5),
        (440.0, 1.0, -0.1),
        (0.0, 1.0, 0.5),
        (-220.0, 1.0, 0.5),
        (float("nan"), 1.0, 0.5),
    ],
)
def test_note_rejects_out_of_range_parameters(hz, duration_s, amplitude):
    with pytest.raises(InvalidParameter):
        tone.note(hz, duration_s, amplitude)


def test_note_rejects_non_positive_sample_rate():
    with pytest.raises(InvalidParameter):
        tone.note(440.0, 1.0, 0.5, sample_rate=0)


def test_major_scale_is_ascending_and_in_tune():
    notes = tone.major_scale(440.0)

    assert len(notes) == 8
    peaks = [_peak_frequency(samples, CANONICAL_SAMPLE_RATE) for samples in notes]
    expected = [440.0 * 2 ** (step / 12) for step in (0, 2, 4, 5, 7, 9, 11, 12)]
    assert all(low < high for low, high in zip(peaks, peaks[1:]))
    for peak, hz in zip(peaks, expected):
        # one-second buffers give 1 Hz FFT bins
        assert abs(peak - hz) <= 1.0


def test_major_scale_defaults():
    notes = tone.major_scale(261.63)

    assert all(len(samples) == CANONICAL_SAMPLE_RATE for samples in notes)
    assert np.max(np.abs(notes[0])) == pytest.approx(0.5, abs=1e-3)


def test_scale_frequencies_end_an_octave_up():
    freqs = tone.scale_frequencies(220.0)

    assert freqs[0] == 220.0
    assert freqs[-1] == pytest.approx(440.0)


def test_major_scale_rejects_bad_root():
    with pytest.raises(InvalidParameter):
        tone.major_scale(0.0)


def test_silence():
    samples = tone.silence(0.5, sample_rate=8_000)

    assert len(samples) == 4000
    assert not samples.any()
