"""Unit tests for the ParsedWave reader."""

import struct
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path

import numpy as np
import pytest

from pcmwave import (
    CompressionKind,
    DuplicateChunkError,
    FormatError,
    ParsedWave,
    RiffHeaderError,
    SampleFormat,
    UnsupportedChunkError,
    UnsupportedFormatError,
    WaveError,
    WaveFileError,
    build_wav,
    load_wave_bytes,
    read_wave_file,
)
from pcmwave.format.reader import DataView


def pcm16(values: list[int]) -> bytes:
    return np.array(values, dtype="<i2").tobytes()


class TestEndToEnd:
    """Tests for the minimal mono 16-bit scenario."""

    def test_minimal_mono_16bit(self) -> None:
        """Test parsing and decoding four mono 16-bit samples."""
        source = [0x0001, -1, -0x8000, 0x7FFF]  # 0x0001, 0xFFFF, 0x8000, 0x7FFF
        wave = ParsedWave.from_bytes(build_wav(pcm16(source), 8000))

        assert wave.channel_count == 1
        assert wave.sample_rate == 8000
        assert wave.pcm_count == 4
        assert wave.compression_kind is CompressionKind.RAW_PCM
        assert wave.bytes_per_sample == 2

        out = np.zeros(4, dtype=np.int16)
        assert wave.decode(out, 0, 4) == 4
        np.testing.assert_array_equal(out, np.array(source, dtype=np.int16))
        assert out.view(np.uint16).tolist() == [0x0001, 0xFFFF, 0x8000, 0x7FFF]


class TestConstruction:
    """Tests for ParsedWave.from_bytes validation."""

    def test_stereo_24bit_fields(self) -> None:
        """Test derived counts for stereo 24-bit data."""
        wave = load_wave_bytes(
            build_wav(b"\x00" * 6 * 10, 48000, num_channels=2, bits_per_sample=24)
        )
        assert wave.sample_format is SampleFormat.PCM_S24
        assert wave.total_raw_sample_count == 20
        assert wave.frame_count == 10
        assert wave.duration_seconds == pytest.approx(10 / 48000)

    def test_data_view_is_borrowed(self) -> None:
        """Test that the data view points into the caller's buffer."""
        buffer = build_wav(pcm16([1, 2, 3]), 8000)
        wave = ParsedWave.from_bytes(buffer)

        assert wave.data_view.offset == 44
        assert wave.data_view.length == 6
        assert wave.data_view.view.obj is buffer
        assert wave.data_view.view.readonly

    def test_size_field_off_by_one(self) -> None:
        """Test that a wrong RIFF size fails construction."""
        buffer = bytearray(build_wav(pcm16([0, 0]), 8000))
        struct.pack_into("<I", buffer, 4, len(buffer) - 7)
        with pytest.raises(RiffHeaderError):
            ParsedWave.from_bytes(bytes(buffer))

    def test_two_data_chunks(self) -> None:
        """Test that two data chunks fail construction."""
        buffer = build_wav(pcm16([0]), 8000, extra_chunks=[(b"data", pcm16([1]))])
        with pytest.raises(DuplicateChunkError):
            ParsedWave.from_bytes(buffer)

    def test_wavl_chunk(self) -> None:
        """Test that a wavl chunk fails construction."""
        buffer = build_wav(pcm16([0]), 8000, extra_chunks=[(b"wavl", b"")])
        with pytest.raises(UnsupportedChunkError):
            ParsedWave.from_bytes(buffer)

    def test_three_channels(self) -> None:
        """Test that a three-channel fmt chunk fails construction."""
        buffer = build_wav(pcm16([0, 0, 0]), 8000, num_channels=3)
        with pytest.raises(UnsupportedFormatError) as exc_info:
            ParsedWave.from_bytes(buffer)
        assert exc_info.value.field == "channel_count"

    def test_eleven_bits(self) -> None:
        """Test that an 11-bit fmt chunk fails construction."""
        buffer = bytearray(build_wav(pcm16([0, 0]), 8000))
        struct.pack_into("<H", buffer, 34, 11)
        with pytest.raises(UnsupportedFormatError) as exc_info:
            ParsedWave.from_bytes(bytes(buffer))
        assert exc_info.value.field == "bits_per_sample"

    def test_data_not_whole_samples(self) -> None:
        """Test that a data size not divisible by the sample width fails."""
        buffer = build_wav(b"\x00" * 5, 8000, bits_per_sample=16)
        with pytest.raises(FormatError) as exc_info:
            ParsedWave.from_bytes(buffer)
        assert exc_info.value.field == "data_size"

    def test_all_errors_are_wave_errors(self) -> None:
        """Test that callers can catch a single base class."""
        with pytest.raises(WaveError):
            ParsedWave.from_bytes(b"")

    def test_warnings_exposed(self) -> None:
        """Test that ignored chunk warnings reach the reader."""
        buffer = build_wav(pcm16([0]), 8000, extra_chunks=[(b"LIST", b"INFO")])
        wave = ParsedWave.from_bytes(buffer)
        assert wave.warnings == ("Ignoring wav chunk <LIST>, size: 4",)

    def test_empty_data_chunk(self) -> None:
        """Test that an empty data chunk is valid and decodes nothing."""
        wave = ParsedWave.from_bytes(build_wav(b"", 8000))
        assert wave.pcm_count == 0
        assert wave.decode(np.zeros(4, dtype=np.int16), 0, 4) == 0
        assert wave.decode_all().size == 0


class TestDecode:
    """Tests for ParsedWave.decode range handling."""

    @pytest.fixture
    def wave(self) -> ParsedWave:
        return ParsedWave.from_bytes(build_wav(pcm16(list(range(10))), 8000))

    def test_count_clamped_at_end(self, wave: ParsedWave) -> None:
        """Test that decoding stops at the end of the data chunk."""
        out = np.full(8, -1, dtype=np.int16)
        assert wave.decode(out, 6, 8) == 4
        assert out[:4].tolist() == [6, 7, 8, 9]
        assert out[4:].tolist() == [-1] * 4

    @pytest.mark.parametrize("start", range(11))
    def test_returned_count(self, wave: ParsedWave, start: int) -> None:
        """Test that decode returns min(n, total - start)."""
        out = np.zeros(10, dtype=np.int16)
        for n in (0, 1, 5, 10):
            assert wave.decode(out, start, n) == min(n, 10 - start)

    def test_start_at_end(self, wave: ParsedWave) -> None:
        """Test that starting at the end decodes nothing."""
        assert wave.decode(np.zeros(1, dtype=np.int16), 10, 1) == 0

    def test_start_past_end(self, wave: ParsedWave) -> None:
        """Test that a start index past the end is a caller error."""
        with pytest.raises(ValueError):
            wave.decode(np.zeros(1, dtype=np.int16), 11, 1)

    def test_negative_arguments(self, wave: ParsedWave) -> None:
        """Test that negative start or count are caller errors."""
        out = np.zeros(1, dtype=np.int16)
        with pytest.raises(ValueError):
            wave.decode(out, -1, 1)
        with pytest.raises(ValueError):
            wave.decode(out, 0, -1)

    def test_output_too_small(self, wave: ParsedWave) -> None:
        """Test that an undersized output buffer is a caller error."""
        with pytest.raises(ValueError):
            wave.decode(np.zeros(2, dtype=np.int16), 0, 5)

    def test_no_cursor(self, wave: ParsedWave) -> None:
        """Test that calls in any order give the same results."""
        first = np.zeros(3, dtype=np.int16)
        second = np.zeros(3, dtype=np.int16)
        wave.decode(first, 4, 3)
        wave.decode(np.zeros(10, dtype=np.int16), 0, 10)
        wave.decode(second, 4, 3)
        np.testing.assert_array_equal(first, second)

    def test_iter_blocks(self, wave: ParsedWave) -> None:
        """Test that blocks cover the signal in order."""
        blocks = list(wave.iter_blocks(4))
        assert [len(b) for b in blocks] == [4, 4, 2]
        np.testing.assert_array_equal(np.concatenate(blocks), wave.decode_all())

    def test_iter_blocks_rejects_zero(self, wave: ParsedWave) -> None:
        with pytest.raises(ValueError):
            list(wave.iter_blocks(0))

    def test_concurrent_decodes(self) -> None:
        """Test that concurrent decodes over shared state agree."""
        rng = np.random.default_rng(7)
        samples = rng.integers(-2**31, 2**31, size=4096, dtype=np.int64).astype("<i4")
        wave = ParsedWave.from_bytes(build_wav(samples.tobytes(), 44100, bits_per_sample=32))
        expected = wave.decode_all()

        def decode_slice(start: int) -> np.ndarray:
            out = np.zeros(512, dtype=np.int16)
            count = wave.decode(out, start, 512)
            return out[:count]

        starts = list(range(0, 4096, 256))
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(decode_slice, starts))

        for start, result in zip(starts, results):
            np.testing.assert_array_equal(result, expected[start : start + len(result)])


class TestDirectConstruction:
    """Tests for building ParsedWave from parts that disagree."""

    def test_view_not_matching_data_chunk(self) -> None:
        """Test that a view outside the data chunk payload is rejected."""
        buffer = build_wav(pcm16([1, 2, 3]), 8000)
        wave = ParsedWave.from_bytes(buffer)

        with pytest.raises(ValueError):
            ParsedWave(
                format=wave.format,
                chunks=wave.chunks,
                data_view=DataView.over(buffer, 0, 6),
            )

    def test_view_not_whole_samples(self) -> None:
        """Test that a data length that splits a sample is rejected."""
        buffer = build_wav(b"\x00" * 5, 8000, bits_per_sample=8)
        wave = ParsedWave.from_bytes(buffer)
        wide = replace(wave.format, bits_per_sample=16, block_align=2)

        with pytest.raises(ValueError):
            ParsedWave(format=wide, chunks=wave.chunks, data_view=wave.data_view)

    def test_matching_parts_accepted(self) -> None:
        buffer = build_wav(pcm16([1, 2, 3]), 8000)
        wave = ParsedWave.from_bytes(buffer)
        rebuilt = ParsedWave(format=wave.format, chunks=wave.chunks, data_view=wave.data_view)
        assert rebuilt.decode_all().tolist() == [1, 2, 3]


class TestDataView:
    """Tests for the bounds-checked data view."""

    def test_out_of_range_view(self) -> None:
        with pytest.raises(IndexError):
            DataView.over(b"\x00" * 4, 2, 4)

    def test_out_of_range_slice(self) -> None:
        view = DataView.over(b"\x00\x01\x02\x03", 1, 2)
        assert bytes(view.raw(0, 2)) == b"\x01\x02"
        with pytest.raises(IndexError):
            view.raw(1, 3)


class TestReadWaveFile:
    """Tests for loading files from disk."""

    def test_read_file(self, tmp_path: Path) -> None:
        """Test reading a WAV file from disk."""
        path = tmp_path / "tone.wav"
        path.write_bytes(build_wav(pcm16([1, 2, 3, 4]), 22050, num_channels=2))

        wave = read_wave_file(path)
        assert wave.channel_count == 2
        assert wave.sample_rate == 22050
        assert wave.decode_all().tolist() == [1, 2, 3, 4]

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file raises WaveFileError."""
        with pytest.raises(WaveFileError) as exc_info:
            read_wave_file(tmp_path / "missing.wav")
        assert exc_info.value.field == "path"

    def test_oversized_file(self, tmp_path: Path) -> None:
        """Test that files above max_size are rejected before reading."""
        path = tmp_path / "big.wav"
        path.write_bytes(build_wav(pcm16([0] * 100), 8000))
        with pytest.raises(WaveFileError) as exc_info:
            read_wave_file(path, max_size=64)
        assert exc_info.value.field == "file_size"
