"""
Chop named sequences into peptides for display and export.

Sits between the HTTP layer and the chopper: cleans pasted sequences, runs the
chopper with request parameters, and records where each peptide came from.
"""
import re
from typing import List, Optional

from calculations.chopper import ChopperError, SequenceChopper, WindowUnderflow
from schemas.chop import ChopParameters, ChoppedSequence, PeptideFragment, SequenceRecord
from services.logger import log_error, log_info, log_warning

_WHITESPACE = re.compile(r"\s+")


def clean_sequence(raw: str) -> str:
    """
    Prepare a pasted sequence for chopping.
    Removes all whitespace (wrapped lines, spaces, tabs) and a trailing '*' stop marker, and uppercases.
    Unknown characters are kept; the chopper decides whether the sequence is valid.
    """
    s = _WHITESPACE.sub("", raw or "").upper()
    return s[:-1] if s.endswith("*") else s


def build_chopper(sequence: str, params: Optional[ChopParameters] = None) -> SequenceChopper:
    params = params or ChopParameters()
    return SequenceChopper(
        sequence,
        peptide_length=params.peptide_length,
        overlap=params.overlap,
        disallowed_ends=params.disallowed_ends,
        nr_disallowed_end_aas=params.nr_disallowed_end_aas,
        strict_alphabet=params.strict_alphabet,
    )


def fragments(chopper: SequenceChopper) -> List[PeptideFragment]:
    """
    Walk `chopper` and describe each peptide with its window in the parent sequence.
    Follows the same cursor schedule as iterating the chopper, so the peptides are identical.
    """
    out: List[PeptideFragment] = []
    position = 0
    index = 1
    while True:
        bounds = chopper.window(position)
        if bounds is None:
            break
        start, end = bounds
        element = chopper.next_peptide(position)
        out.append(PeptideFragment(
            index=index,
            start=start + 1,
            end=end,
            peptide=element.peptide,
            length=len(element.peptide),
            trimmed=chopper.trimmed_length(chopper.sequence[start:end]),
        ))
        position = element.position
        index += 1
    return out


def chop_record(record: SequenceRecord, params: Optional[ChopParameters] = None) -> ChoppedSequence:
    """
    Chop a single named sequence.

    Raises:
        InvalidParameter / InvalidSequence: the record cannot be chopped with `params`.
        WindowUnderflow: internal error in the window computation.
    """
    sequence = clean_sequence(record.sequence)
    try:
        chopper = build_chopper(sequence, params)
        peptides = fragments(chopper)
    except WindowUnderflow as e:
        log_error("chop_internal_error", str(e), entry=record.name, stage="chop")
        raise
    except ChopperError as e:
        log_warning(
            "chop_invalid_input", str(e), entry=record.name, stage="validate",
            error_type=type(e).__name__, sequence_length=len(sequence),
        )
        raise

    log_info(
        "chop_complete", f"Chopped {record.name} into {len(peptides)} peptides",
        entry=record.name, stage="chop",
        sequence_length=len(sequence), peptides=len(peptides),
    )
    return ChoppedSequence(name=record.name, sequence_length=len(sequence), peptides=peptides)


def chop_records(records: List[SequenceRecord], params: Optional[ChopParameters] = None) -> List[ChoppedSequence]:
    """Chop every record in order. The first failing record aborts the batch."""
    results = []
    for record in records:
        try:
            results.append(chop_record(record, params))
        except ChopperError as e:
            raise type(e)(f"{record.name}: {e}") from e
    return results
