import os
import stat

import numpy as np
import pytest

from pcmkit import codec, container, source, tone, writer
from pcmkit.exceptions import FormatError, NotFound, UnsupportedFormat
from pcmkit.models import CANONICAL_FORMAT, FormatDescriptor


@pytest.fixture
def samples() -> np.ndarray:
    return tone.note(440.0, 0.05, 0.8)


def test_save_and_load_wav(tmp_path, samples):
    path = tmp_path / "clip.wav"

    writer.save(samples, path)
    data, fmt = source.load(path)

    assert fmt == CANONICAL_FORMAT
    assert len(data) == 2 * len(samples)
    decoded = codec.decode(data, fmt)
    assert np.max(np.abs(decoded - samples)) <= codec.quantization_step(fmt)


def test_save_and_load_au_uses_big_endian(tmp_path, samples):
    path = tmp_path / "CLIP.AU"

    writer.save(samples, str(path))
    decoded, fmt = source.read_samples(path)

    assert fmt == CANONICAL_FORMAT.with_byte_order(little_endian=False)
    assert path.read_bytes()[:4] == b".snd"
    assert np.max(np.abs(decoded - samples)) <= codec.quantization_step(fmt)


def test_save_records_sample_rate(tmp_path):
    path = tmp_path / "low.wav"

    writer.save(tone.note(220.0, 0.5, 0.5, sample_rate=8_000), path, sample_rate=8_000)

    data, fmt = source.load(path)
    assert fmt.sample_rate == 8_000
    assert len(data) == 8_000


def test_save_clips_out_of_range_samples(tmp_path):
    path = tmp_path / "loud.wav"

    writer.save([1.5, -2.0, 0.0], path)

    decoded, _fmt = source.read_samples(path)
    np.testing.assert_allclose(decoded, [32767 / 32768, -1.0, 0.0])


def test_load_reads_declared_8_bit_format(tmp_path):
    fmt = FormatDescriptor(sample_rate=11_025, bit_depth=8, signed=False)
    path = tmp_path / "old.wav"
    path.write_bytes(container.pack_wav(bytes([0, 128, 255]), fmt))

    decoded, loaded_fmt = source.read_samples(path)

    assert loaded_fmt == fmt
    np.testing.assert_allclose(decoded, [-1.0, 0.0, 127 / 128])


def test_load_file_url(tmp_path, samples):
    path = tmp_path / "clip.wav"
    writer.save(samples, path)

    data, fmt = source.load(path.as_uri())

    assert fmt == CANONICAL_FORMAT
    assert len(data) == 2 * len(samples)


def test_load_rejects_unsupported_extension_without_io(tmp_path):
    with pytest.raises(UnsupportedFormat):
        source.load(tmp_path / "file.mp3")


def test_load_missing_file(tmp_path):
    with pytest.raises(NotFound) as exc_info:
        source.load(tmp_path / "missing.wav")

    assert isinstance(exc_info.value, FileNotFoundError)


def test_load_directory_is_not_found(tmp_path):
    directory = tmp_path / "dir.wav"
    directory.mkdir()

    with pytest.raises(NotFound):
        source.load(directory)


def test_load_remote_url_is_not_found():
    with pytest.raises(NotFound):
        source.load("https://example.com/clip.wav")


def test_load_malformed_header(tmp_path):
    path = tmp_path / "broken.wav"
    path.write_bytes(b"not a wave file at all")

    with pytest.raises(FormatError):
        source.load(path)


def test_save_rejects_unsupported_extension_without_touching_filesystem(tmp_path, samples):
    with pytest.raises(UnsupportedFormat):
        writer.save(samples, tmp_path / "file.xyz")

    assert list(tmp_path.iterdir()) == []


def test_save_into_missing_directory(tmp_path, samples):
    with pytest.raises(NotFound):
        writer.save(samples, tmp_path / "missing" / "clip.wav")


def test_failed_save_keeps_previous_file(tmp_path, samples, monkeypatch):
    path = tmp_path / "clip.wav"
    writer.save(samples, path)
    original = path.read_bytes()

    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError, match="disk full"):
        writer.save(np.zeros(10), path)

    assert path.read_bytes() == original
    assert [p.name for p in tmp_path.iterdir()] == ["clip.wav"]


def test_failed_save_leaves_no_file(tmp_path, samples, monkeypatch):
    path = tmp_path / "new.au"

    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError):
        writer.save(samples, path)

    assert list(tmp_path.iterdir()) == []


@pytest.fixture
def umask_022():
    previous = os.umask(0o022)
    yield
    os.umask(previous)


@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
def test_saved_file_mode_follows_umask(tmp_path, samples, umask_022):
    path = tmp_path / "clip.wav"
    plain = tmp_path / "plain.bin"
    plain.write_bytes(b"")

    writer.save(samples, path)

    assert stat.S_IMODE(path.stat().st_mode) == 0o644
    assert stat.S_IMODE(path.stat().st_mode) == stat.S_IMODE(plain.stat().st_mode)


@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
def test_overwrite_keeps_existing_file_mode(tmp_path, samples, umask_022):
    path = tmp_path / "clip.au"
    writer.save(samples, path)
    path.chmod(0o640)

    writer.save(np.zeros(10), path)

    assert stat.S_IMODE(path.stat().st_mode) == 0o640
