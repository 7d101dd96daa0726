"""Tests for the command line interface."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from psd2json.__main__ import build_limits, format_css, main, parse_args
from psd2json.core.converter import ConversionResult
from psd2json.errors import ErrorCode, PSDConversionError

RESULT = ConversionResult(
    texts=[{"position": "absolute", "left": 10, "fontSize": "12px", "value": "Hi"}],
    images=[{"position": "absolute", "opacity": 0.5, "value": "data:image/png;base64,AA"}],
)


class TestParseArgs:
    def test_defaults(self) -> None:
        args = parse_args(["input.psd"])
        assert args.input == "input.psd"
        assert args.output is None
        assert not args.include_hidden
        assert args.units == "px"
        assert args.output_format == "json"
        assert args.indent == 2

    def test_build_limits(self) -> None:
        limits = build_limits(parse_args(["input.psd", "--max-layer-depth", "5"]))
        assert limits.max_layer_depth == 5
        limits = build_limits(parse_args(["input.psd", "--unlimited-resources"]))
        assert limits.max_file_size == 0
        assert limits.max_layer_depth == 0


class TestMain:
    def test_json_output(self, tmp_path: Path) -> None:
        output = tmp_path / "output.json"
        with patch("psd2json.__main__.psd2json", return_value=RESULT) as convert:
            assert main(["input.psd", str(output), "--include-hidden"]) == 0
        assert convert.call_args.kwargs["include_hidden"] is True
        assert convert.call_args.kwargs["units"] == "px"
        assert json.loads(output.read_text(encoding="utf-8")) == RESULT.to_dict()

    def test_stdout(self, capsys: pytest.CaptureFixture) -> None:
        with patch("psd2json.__main__.psd2json", return_value=RESULT):
            assert main(["input.psd", "--indent", "0"]) == 0
        assert json.loads(capsys.readouterr().out) == RESULT.to_dict()

    def test_css_output(self, capsys: pytest.CaptureFixture) -> None:
        with patch("psd2json.__main__.psd2json", return_value=RESULT):
            assert main(["input.psd", "--format", "css"]) == 0
        out = capsys.readouterr().out
        assert ".text-0 {\n  position: absolute;\n  left: 10px;\n  font-size: 12px;\n}" in out
        assert ".image-0 {\n  position: absolute;\n  opacity: 0.5;\n}" in out

    def test_error(self, capsys: pytest.CaptureFixture) -> None:
        error = PSDConversionError("Bad signature", ErrorCode.INVALID_PSD_FORMAT)
        with patch("psd2json.__main__.psd2json", side_effect=error):
            assert main(["input.psd"]) == 1
        assert "INVALID_PSD_FORMAT" in capsys.readouterr().err

    def test_malformed_environment(self, capsys: pytest.CaptureFixture) -> None:
        with patch.dict(os.environ, {"PSD2JSON_MAX_LAYER_DEPTH": "deep"}):
            with patch("psd2json.__main__.psd2json") as convert:
                assert main(["input.psd"]) == 1
        convert.assert_not_called()
        assert "INVALID_OPTIONS" in capsys.readouterr().err


class TestFormatCss:
    def test_empty(self) -> None:
        assert format_css({"texts": [], "images": []}) == "\n"

