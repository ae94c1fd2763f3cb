"""Unit tests for event pass identifier generation."""

from unittest.mock import patch

from venue.services.pass_id import (
    PASS_ID_ALPHABET,
    PASS_ID_PATTERN,
    generate_pass_id,
    normalize_pass_id,
)


class TestGeneratePassId:
    def test_matches_documented_shape(self):
        for _ in range(200):
            assert PASS_ID_PATTERN.match(generate_pass_id())

    def test_alphabet_excludes_ambiguous_symbols(self):
        assert len(PASS_ID_ALPHABET) == 32
        for symbol in "01OI":
            assert symbol not in PASS_ID_ALPHABET

    def test_uses_secrets_module(self):
        """Identifiers must come from a CSPRNG."""
        with patch("venue.services.pass_id.secrets.choice", return_value="K") as choice:
            assert generate_pass_id() == "OSS-EV-KKKKKKKK"
        assert choice.call_count == 8

    def test_identifiers_vary(self):
        assert len({generate_pass_id() for _ in range(100)}) == 100


class TestNormalizePassId:
    def test_trims_and_uppercases(self):
        assert normalize_pass_id("  oss-ev-7kq2m9xh \n") == "OSS-EV-7KQ2M9XH"

    def test_blank_stays_blank(self):
        assert normalize_pass_id("   ") == ""
