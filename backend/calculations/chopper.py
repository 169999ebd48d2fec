"""
Sequence chopper: splits an amino acid sequence into overlapping peptides.

Peptides are fixed-length windows over the sequence. Consecutive windows share
`overlap` residues, and the last window is shifted left so it still has the full
peptide length. A short trailing run of disallowed residues is trimmed off each
peptide without changing where the next window starts.
"""
import re
from dataclasses import dataclass
from typing import Iterator, Optional

AMINO_ACID_ALPHABET = "ACDEFGHIKLMNPQRSTVWYXBZJ"

DEFAULT_PEPTIDE_LENGTH = 18
DEFAULT_OVERLAP = 10
DEFAULT_DISALLOWED_ENDS = "GSDENQHPCAT"
DEFAULT_NR_DISALLOWED_END_AAS = 3

_AA_PATTERN = re.compile(f"[{AMINO_ACID_ALPHABET}]")


class ChopperError(Exception):
    """Base class for sequence chopper errors."""


class InvalidParameter(ChopperError, ValueError):
    """A chopping parameter is out of range."""


class InvalidSequence(ChopperError, ValueError):
    """The sequence cannot be chopped with the given parameters."""


class WindowUnderflow(ChopperError, RuntimeError):
    """A tail window would start before the sequence start. Indicates a bug."""


@dataclass(frozen=True)
class PeptideElement:
    """One step of a traversal: the next cursor position and the (trimmed) peptide."""
    position: int
    peptide: str


class EndTrimmer:
    """
    Removes a trailing run of disallowed residues from a peptide.

    Only a run of 1..max_run residues is removed. A longer run is left untouched,
    i.e. it is never partially trimmed.
    """

    def __init__(self, disallowed: str, max_run: int):
        self.disallowed = frozenset(disallowed)
        self.max_run = max_run

    def run_length(self, peptide: str) -> int:
        """Number of residues that would be removed from the end of `peptide`."""
        if not self.disallowed or self.max_run < 1:
            return 0
        run = 0
        # scan one past the bound so an over-long run can be told apart
        for aa in reversed(peptide):
            if aa not in self.disallowed or run > self.max_run:
                break
            run += 1
        return run if run <= self.max_run else 0

    def trim(self, peptide: str) -> str:
        run = self.run_length(peptide)
        return peptide[:len(peptide) - run] if run else peptide


class SequenceChopper:
    """
    Chops an amino acid sequence into peptides of `peptide_length` residues.

    The chopper itself holds no traversal state: every call to iter() starts an
    independent traversal at the sequence start, so one instance can be iterated
    any number of times, including concurrently.

    Args:
        sequence: Amino acid sequence, at least `peptide_length` residues long.
        peptide_length: Length of the untrimmed peptides. Returned peptides can be
            shorter when disallowed residues are trimmed from their end.
        overlap: Residues shared with the previous peptide, in [0, peptide_length - 1].
        disallowed_ends: Residues that should not end a peptide.
        nr_disallowed_end_aas: Maximum number of disallowed residues trimmed from the
            end of a peptide. When more are present the full peptide is returned.
        strict_alphabet: If True every residue must be in AMINO_ACID_ALPHABET.
            Otherwise a single valid residue anywhere is enough.

    Raises:
        InvalidParameter: peptide_length < 1, overlap outside [0, peptide_length - 1],
            or nr_disallowed_end_aas < 0.
        InvalidSequence: sequence shorter than peptide_length, or without valid residues.
    """

    def __init__(
        self,
        sequence: str,
        peptide_length: int = DEFAULT_PEPTIDE_LENGTH,
        overlap: int = DEFAULT_OVERLAP,
        disallowed_ends: str = DEFAULT_DISALLOWED_ENDS,
        nr_disallowed_end_aas: int = DEFAULT_NR_DISALLOWED_END_AAS,
        strict_alphabet: bool = False,
    ):
        if peptide_length < 1:
            raise InvalidParameter("Peptide length needs to be >= 1!")
        _verify_sequence(sequence, peptide_length, strict_alphabet)
        if overlap < 0 or overlap >= peptide_length:
            raise InvalidParameter(
                f"Overlap needs to be between 0 and {peptide_length - 1} (peptide length - 1), got {overlap}"
            )
        if nr_disallowed_end_aas < 0:
            raise InvalidParameter("Number of disallowed end amino acids needs to be >= 0!")

        self._sequence = sequence
        self._peptide_length = peptide_length
        self._overlap = overlap
        self._trimmer = EndTrimmer(disallowed_ends, nr_disallowed_end_aas)

    @property
    def sequence(self) -> str:
        return self._sequence

    @property
    def peptide_length(self) -> int:
        return self._peptide_length

    @property
    def overlap(self) -> int:
        return self._overlap

    @property
    def disallowed_ends(self) -> str:
        return "".join(sorted(self._trimmer.disallowed))

    @property
    def nr_disallowed_end_aas(self) -> int:
        return self._trimmer.max_run

    def window(self, position: int) -> Optional[tuple]:
        """
        Return the (start, end) of the untrimmed window following `position`,
        or None when the sequence is exhausted.
        """
        length = len(self._sequence)
        if position >= length:
            return None
        start = max(position - self._overlap, 0)
        end = min(start + self._peptide_length, length)
        if end - start < self._peptide_length:
            # re-anchor at the sequence end, overlapping the previous peptide further
            start = end - self._peptide_length
            if start < 0:
                raise WindowUnderflow(
                    f"Cannot fit a peptide of length {self._peptide_length} "
                    f"into a sequence of length {length}"
                )
        return start, end

    def next_peptide(self, position: int) -> PeptideElement:
        """Return the peptide following `position` and the position to continue from."""
        bounds = self.window(position)
        if bounds is None:
            return PeptideElement(position=len(self._sequence), peptide="")
        start, end = bounds
        return PeptideElement(position=end, peptide=self._trimmer.trim(self._sequence[start:end]))

    def trimmed_length(self, candidate: str) -> int:
        """Number of residues the end trimmer removes from `candidate`."""
        return self._trimmer.run_length(candidate)

    def __iter__(self) -> "PeptideIterator":
        return PeptideIterator(self)

    def __repr__(self) -> str:
        return (
            f"SequenceChopper(length={len(self._sequence)}, peptide_length={self._peptide_length}, "
            f"overlap={self._overlap}, nr_disallowed_end_aas={self._trimmer.max_run})"
        )


class PeptideIterator:
    """Single traversal over a SequenceChopper. Owns the cursor."""

    def __init__(self, chopper: SequenceChopper):
        self._chopper = chopper
        self.cursor = 0
        self.last_value: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.cursor >= len(self._chopper.sequence)

    def __iter__(self) -> "PeptideIterator":
        return self

    def __next__(self) -> str:
        if self.done:
            raise StopIteration
        element = self._chopper.next_peptide(self.cursor)
        self.cursor = element.position
        self.last_value = element.peptide
        return element.peptide


def _verify_sequence(sequence: str, peptide_length: int, strict_alphabet: bool) -> None:
    if len(sequence) < peptide_length:
        raise InvalidSequence("Sequence length is smaller than the specified peptide length!")
    if strict_alphabet:
        invalid = sorted(set(sequence) - set(AMINO_ACID_ALPHABET))
        if invalid:
            raise InvalidSequence(f"Invalid amino acid(s) in sequence: {''.join(invalid)}")
    elif not _AA_PATTERN.search(sequence):
        raise InvalidSequence("Invalid amino acid sequence!")


def make_chopper(
    sequence: str,
    peptide_length: int = DEFAULT_PEPTIDE_LENGTH,
    overlap: int = DEFAULT_OVERLAP,
    disallowed_ends: str = DEFAULT_DISALLOWED_ENDS,
    nr_disallowed_end_aas: int = DEFAULT_NR_DISALLOWED_END_AAS,
    strict_alphabet: bool = False,
) -> SequenceChopper:
    return SequenceChopper(
        sequence,
        peptide_length=peptide_length,
        overlap=overlap,
        disallowed_ends=disallowed_ends,
        nr_disallowed_end_aas=nr_disallowed_end_aas,
        strict_alphabet=strict_alphabet,
    )


def traverse(chopper: SequenceChopper) -> Iterator[str]:
    """Start a fresh traversal of `chopper`'s peptides."""
    return iter(chopper)
