"""Tests for the structured-text header parser."""

from __future__ import annotations

import pytest

from emoji_mosaic.errors import FormatError
from emoji_mosaic.header_text import parse_array_metadata, parse_header_dict, tokenize


class TestTokenize:
    def test_token_kinds(self):
        kinds = [t.kind for t in tokenize("{'a': (1, 2), 'b': True}")]
        assert kinds == [
            "LBRACE", "STRING", "COLON", "LPAREN", "INT", "COMMA", "INT",
            "RPAREN", "COMMA", "STRING", "COLON", "NAME", "RBRACE", "END",
        ]

    def test_unterminated_string(self):
        with pytest.raises(FormatError):
            list(tokenize("{'descr: 1}"))

    def test_unknown_name(self):
        with pytest.raises(FormatError):
            list(tokenize("{'a': Maybe}"))


class TestParseHeaderDict:
    def test_numpy_style_header_with_padding(self):
        text = "{'descr': '|u1', 'fortran_order': False, 'shape': (3, 16, 16, 4), }" + " " * 20 + "\n"
        assert parse_header_dict(text) == {
            "descr": "|u1",
            "fortran_order": False,
            "shape": (3, 16, 16, 4),
        }

    def test_single_and_empty_tuples(self):
        out = parse_header_dict('{"a": (7,), "b": ()}')
        assert out == {"a": (7,), "b": ()}

    def test_python2_long_suffix(self):
        out = parse_header_dict("{'shape': (2L, 16L)}")
        assert out["shape"] == (2, 16)

    def test_trailing_garbage_rejected(self):
        with pytest.raises(FormatError):
            parse_header_dict("{'a': 1} 'b'")

    def test_missing_comma_rejected(self):
        with pytest.raises(FormatError):
            parse_header_dict("{'a': 1 'b': 2}")

    def test_duplicate_key_rejected(self):
        with pytest.raises(FormatError):
            parse_header_dict("{'a': 1, 'a': 2}")


class TestParseArrayMetadata:
    def test_typed_record(self):
        meta = parse_array_metadata(
            "{'descr': '<f4', 'fortran_order': False, 'shape': (2, 16, 16, 4), }"
        )
        assert meta.descr == "<f4"
        assert meta.fortran_order is False
        assert meta.shape == (2, 16, 16, 4)
        assert meta.is_float
        assert meta.itemsize == 4
        assert meta.element_count == 2 * 16 * 16 * 4

    @pytest.mark.parametrize("missing", ["descr", "fortran_order", "shape"])
    def test_missing_key(self, missing):
        fields = {"descr": "'|u1'", "fortran_order": "False", "shape": "(1, 16, 16, 4)"}
        del fields[missing]
        text = "{" + ", ".join(f"'{k}': {v}" for k, v in fields.items()) + "}"
        with pytest.raises(FormatError, match=missing):
            parse_array_metadata(text)

    def test_shape_must_be_tuple_of_ints(self):
        with pytest.raises(FormatError):
            parse_array_metadata("{'descr': '|u1', 'fortran_order': False, 'shape': 'x'}")

    def test_fortran_order_must_be_bool(self):
        with pytest.raises(FormatError):
            parse_array_metadata("{'descr': '|u1', 'fortran_order': 0, 'shape': (1,)}")
