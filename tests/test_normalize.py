import pytest

from draftsync.matching import SENTINEL, canonical_field, is_missing, normalize


def test_normalize_collapses_whitespace_and_case():
    key = normalize("  Charlie   CONDON ", " Georgia ")

    assert key.name_key == "charlie condon"
    assert key.name_parts == ("charlie", "condon")
    assert key.school_key == "georgia"
    assert key.has_identity
    assert key.school_known


def test_normalize_missing_school_uses_sentinel():
    assert normalize("Eli Willits").school_key == SENTINEL
    assert normalize("Eli Willits", "N/A").school_key == SENTINEL
    assert normalize("Eli Willits", "  tbd ").school_key == SENTINEL
    assert not normalize("Eli Willits", None).school_known


@pytest.mark.parametrize("raw", ["", "   ", None, 42, ["Charlie", "Condon"]])
def test_normalize_malformed_name_has_no_identity(raw):
    key = normalize(raw, "Georgia")

    assert key.name_key == ""
    assert key.name_parts == ()
    assert not key.has_identity


def test_normalize_spelling_variant_table():
    assert normalize("Ethan Holiday").name_key == normalize("Ethan Holliday").name_key
    assert normalize("Ethan Holiday").name_parts == ("ethan", "holliday")


def test_canonical_field_standardizes_missing_spellings():
    for raw in ("", "N/A", "Unknown", "TBD", "-", None, "null"):
        assert canonical_field(raw) == SENTINEL
    assert canonical_field(" RHP ") == "RHP"
    assert canonical_field(5) == "5"
    assert canonical_field(3.0) == "3"


def test_is_missing_keeps_numbers():
    assert not is_missing(0)
    assert is_missing("  ")
    assert not is_missing("OF/1B")
