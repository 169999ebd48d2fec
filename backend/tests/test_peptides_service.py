"""
Tests for the chopping service: sequence cleanup, fragment coordinates and record errors.
"""
import pytest

from calculations.chopper import InvalidParameter, InvalidSequence, SequenceChopper
from schemas.chop import ChopParameters, SequenceRecord
from services.peptides import build_chopper, chop_record, chop_records, clean_sequence, fragments

KNOWN_SEQUENCE = "MKWVTFISLLLLFSSAYSRGVFRRDTHKSE"


def test_clean_sequence_removes_whitespace_and_stop():
    assert clean_sequence("acd ef\nGH\tIK*") == "ACDEFGHIK"
    assert clean_sequence("  MKW\r\nVTF  ") == "MKWVTF"
    assert clean_sequence("") == ""


def test_clean_sequence_keeps_unknown_characters():
    assert clean_sequence("ac1d") == "AC1D"


def test_fragments_match_chopper_iteration():
    chopper = SequenceChopper(KNOWN_SEQUENCE, 8, 3)
    frags = fragments(chopper)
    assert [f.peptide for f in frags] == list(chopper)
    assert [f.index for f in frags] == list(range(1, len(frags) + 1))


def test_fragment_coordinates_and_trimming():
    frags = fragments(SequenceChopper(KNOWN_SEQUENCE))
    assert [(f.start, f.end, f.trimmed) for f in frags] == [(1, 18, 1), (9, 26, 2), (13, 30, 2)]
    assert [f.length for f in frags] == [17, 16, 16]
    for f in frags:
        assert KNOWN_SEQUENCE[f.start - 1:f.end].startswith(f.peptide)


def test_build_chopper_uses_defaults():
    chopper = build_chopper(KNOWN_SEQUENCE)
    assert chopper.peptide_length == 18
    assert chopper.overlap == 10
    assert chopper.nr_disallowed_end_aas == 3


def test_chop_record_cleans_sequence():
    params = ChopParameters(peptide_length=10, overlap=4, disallowed_ends="")
    result = chop_record(SequenceRecord(name="abc", sequence="ACDEFGHIKL\nMNPQRSTVWY\nXBZJ"), params)
    assert result.name == "abc"
    assert result.sequence_length == 24
    assert result.peptide_strings == ["ACDEFGHIKL", "HIKLMNPQRS", "PQRSTVWYXB", "RSTVWYXBZJ"]


def test_parameters_accept_camel_case_aliases():
    params = ChopParameters(**{"peptideLength": 5, "overlap": 1, "disallowedEnds": "", "nrDisallowedEndAAs": 0})
    assert params.peptide_length == 5
    assert params.nr_disallowed_end_aas == 0
    assert params.to_camel_dict()["nrDisallowedEndAAs"] == 0


def test_chop_records_names_failing_record():
    records = [
        SequenceRecord(name="ok", sequence=KNOWN_SEQUENCE),
        SequenceRecord(name="short", sequence="MKW"),
    ]
    with pytest.raises(InvalidSequence, match="^short: "):
        chop_records(records)


def test_chop_records_rejects_bad_overlap():
    params = ChopParameters(peptide_length=5, overlap=5)
    with pytest.raises(InvalidParameter):
        chop_records([SequenceRecord(name="x", sequence=KNOWN_SEQUENCE)], params)


def test_chop_records_keeps_order():
    records = [SequenceRecord(name=f"s{i}", sequence=KNOWN_SEQUENCE) for i in range(3)]
    results = chop_records(records, ChopParameters(peptide_length=10, overlap=2))
    assert [r.name for r in results] == ["s0", "s1", "s2"]
