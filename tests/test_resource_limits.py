"""Tests for ResourceLimits.

Covers the environment configuration of the limits, the input size check
and the depth check of the document reader.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from psd2json import (
    ErrorCode,
    PSDConversionError,
    ResourceLimits,
    convert_document,
    psd2json,
)
from psd2json.reader import read_source
from psd2json.resource_limits import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_LAYER_DEPTH,
    MAX_IMAGE_DIMENSION,
)

from .conftest import make_document

# Header-only buffer that passes the signature check.
FAKE_PSD = b"8BPS" + b"\x00" * 60

ENV_KEYS = (
    "PSD2JSON_MAX_FILE_SIZE",
    "PSD2JSON_MAX_LAYER_DEPTH",
    "PSD2JSON_MAX_IMAGE_DIMENSION",
)


def as_tuple(limits: ResourceLimits) -> tuple[int, int, int]:
    return (limits.max_file_size, limits.max_layer_depth, limits.max_image_dimension)


class TestLimitConfiguration:
    def test_builtin_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            limits = ResourceLimits.default()
        assert as_tuple(limits) == (
            DEFAULT_MAX_FILE_SIZE,
            DEFAULT_MAX_LAYER_DEPTH,
            MAX_IMAGE_DIMENSION,
        )
        assert DEFAULT_MAX_FILE_SIZE == 2 * 1024**3

    def test_unlimited(self) -> None:
        limits = ResourceLimits.unlimited()
        assert as_tuple(limits) == (0, 0, 0)
        assert not limits.is_file_size_limited()
        assert not limits.is_layer_depth_limited()
        assert not limits.is_image_dimension_limited()

    @pytest.mark.parametrize(
        "field, check",
        [
            ("max_file_size", "is_file_size_limited"),
            ("max_layer_depth", "is_layer_depth_limited"),
            ("max_image_dimension", "is_image_dimension_limited"),
        ],
    )
    def test_zero_disables(self, field: str, check: str) -> None:
        assert getattr(ResourceLimits(**{field: 10}), check)()
        assert not getattr(ResourceLimits(**{field: 0}), check)()

    def test_from_environment(self) -> None:
        values = dict(zip(ENV_KEYS, ("1048576", "50", "4096")))
        with patch.dict(os.environ, values):
            assert as_tuple(ResourceLimits.default()) == (1048576, 50, 4096)

    def test_negative_environment(self, caplog: pytest.LogCaptureFixture) -> None:
        """Negative values disable the limit and warn."""
        values = dict(zip(ENV_KEYS, ("-100", "-10", "-1000")))
        with patch.dict(os.environ, values):
            assert as_tuple(ResourceLimits.default()) == (0, 0, 0)
        for key, value in values.items():
            assert f"{key}={value} is negative" in caplog.text
        assert caplog.text.count("Consider using ResourceLimits.unlimited()") == 3

    @pytest.mark.parametrize("value", ["not_a_number", "3.14", ""])
    def test_malformed_environment(self, value: str) -> None:
        with patch.dict(os.environ, {"PSD2JSON_MAX_LAYER_DEPTH": value}):
            with pytest.raises(
                ValueError,
                match="PSD2JSON_MAX_LAYER_DEPTH=.* is not a valid integer",
            ):
                ResourceLimits.default()

    def test_malformed_environment_is_structured(self) -> None:
        with patch.dict(os.environ, {"PSD2JSON_MAX_FILE_SIZE": "lots"}):
            with patch("psd2json.reader.PSDImage.open") as mock_open:
                with pytest.raises(PSDConversionError) as excinfo:
                    psd2json(FAKE_PSD)
            mock_open.assert_not_called()
            assert excinfo.value.code == ErrorCode.INVALID_OPTIONS
            assert "PSD2JSON_MAX_FILE_SIZE='lots'" in excinfo.value.message

            with pytest.raises(PSDConversionError) as excinfo:
                convert_document(make_document())
            assert excinfo.value.code == ErrorCode.INVALID_OPTIONS

    def test_explicit_limits_skip_environment(self) -> None:
        with patch.dict(os.environ, {"PSD2JSON_MAX_FILE_SIZE": "lots"}):
            result = convert_document(make_document(), limits=ResourceLimits())
        assert len(result) == 0


class TestFileSizeValidation:
    """Tests for file size limit enforcement."""

    @pytest.fixture
    def input_path(self, tmp_path: Path) -> Path:
        path = tmp_path / "input.psd"
        path.write_bytes(FAKE_PSD)
        return path

    def test_file_size_at_limit(self, input_path: Path) -> None:
        """Test that a file exactly at the limit is read."""
        limits = ResourceLimits(max_file_size=len(FAKE_PSD))
        assert read_source(str(input_path), limits) == FAKE_PSD

    def test_file_size_exceeds_limit(self, input_path: Path) -> None:
        limits = ResourceLimits(max_file_size=len(FAKE_PSD) - 1)
        with pytest.raises(PSDConversionError, match="exceeds the limit") as excinfo:
            read_source(input_path, limits)
        assert excinfo.value.code == ErrorCode.RESOURCE_LIMIT_EXCEEDED

    def test_buffer_size_exceeds_limit(self) -> None:
        limits = ResourceLimits(max_file_size=32)
        with pytest.raises(PSDConversionError) as excinfo:
            read_source(FAKE_PSD, limits)
        assert excinfo.value.code == ErrorCode.RESOURCE_LIMIT_EXCEEDED

    def test_file_size_limit_disabled(self, input_path: Path) -> None:
        limits = ResourceLimits(max_file_size=0)
        assert read_source(input_path, limits) == FAKE_PSD

    def test_psd2json_checks_size_before_parsing(self, input_path: Path) -> None:
        """Test that oversized files fail before psd-tools is invoked."""
        limits = ResourceLimits(max_file_size=10)
        with patch("psd2json.reader.PSDImage.open") as mock_open:
            with pytest.raises(PSDConversionError) as excinfo:
                psd2json(str(input_path), limits=limits)
        assert excinfo.value.code == ErrorCode.RESOURCE_LIMIT_EXCEEDED
        mock_open.assert_not_called()
