from typing import List
from pydantic import BaseModel, Field

from calculations.chopper import (
    DEFAULT_PEPTIDE_LENGTH,
    DEFAULT_OVERLAP,
    DEFAULT_DISALLOWED_ENDS,
    DEFAULT_NR_DISALLOWED_END_AAS,
)


def _snake_to_camel(s: str) -> str:
    parts = s.split('_')
    return parts[0] + ''.join(p.title() for p in parts[1:])


class CamelModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = _snake_to_camel
        populate_by_name = True

    def to_camel_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class SequenceRecord(CamelModel):
    """A named sequence, e.g. one record of a FASTA file."""
    name: str = Field(..., min_length=1, description="Sequence name, used to label exported peptides")
    sequence: str = Field(..., description="Amino acid sequence (whitespace is removed before chopping)")


class ChopParameters(CamelModel):
    # range checks that depend on each other (overlap < peptide length) are left to the chopper
    peptide_length: int = Field(DEFAULT_PEPTIDE_LENGTH, description="Untrimmed peptide length")
    overlap: int = Field(DEFAULT_OVERLAP, description="Residues shared with the previous peptide")
    disallowed_ends: str = Field(DEFAULT_DISALLOWED_ENDS, description="Residues trimmed from peptide ends")
    nr_disallowed_end_aas: int = Field(
        DEFAULT_NR_DISALLOWED_END_AAS,
        alias="nrDisallowedEndAAs",
        description="Maximum number of residues trimmed from a peptide end",
    )
    strict_alphabet: bool = Field(False, description="Reject sequences with any non amino acid character")


class PeptideFragment(CamelModel):
    index: int = Field(..., description="1-based peptide number within its sequence")
    start: int = Field(..., description="1-based start of the untrimmed window")
    end: int = Field(..., description="1-based inclusive end of the untrimmed window")
    peptide: str
    length: int
    trimmed: int = Field(0, description="Residues trimmed from the end")


class ChoppedSequence(CamelModel):
    name: str
    sequence_length: int
    peptides: List[PeptideFragment] = Field(default_factory=list)

    @property
    def peptide_strings(self) -> List[str]:
        return [p.peptide for p in self.peptides]


class ChopRequest(CamelModel):
    sequences: List[SequenceRecord]
    parameters: ChopParameters = Field(default_factory=ChopParameters)


class ChopMeta(CamelModel):
    records: int
    peptides: int


class ChopResponse(CamelModel):
    results: List[ChoppedSequence]
    meta: ChopMeta
