"""
Export formats for chopped sequences: labeled FASTA, plain text and CSV/TSV tables.
"""
import re
from typing import Iterable, List, Literal

import pandas as pd

from schemas.chop import ChoppedSequence, SequenceRecord

ExportFormat = Literal["fasta", "text", "csv", "tsv"]

MEDIA_TYPES = {
    "fasta": "text/plain",
    "text": "text/plain",
    "csv": "text/csv",
    "tsv": "text/tab-separated-values",
}

EXTENSIONS = {
    "fasta": "fasta",
    "text": "txt",
    "csv": "csv",
    "tsv": "tsv",
}

TABLE_COLUMNS = ["Entry", "Parent", "Peptide index", "Start", "End", "Sequence", "Length", "Trimmed"]


def to_fasta(name: str, peptides: Iterable[str]) -> str:
    """One FASTA record per peptide, labeled '>{name}:peptide_{n}' with n counting from 1."""
    return "".join(f">{name}:peptide_{n}\n{peptide}\n" for n, peptide in enumerate(peptides, start=1))


def to_text(peptides: Iterable[str]) -> str:
    """Peptides one per line, for pasting elsewhere."""
    return "\n".join(peptides)


def to_frame(chopped: List[ChoppedSequence]) -> pd.DataFrame:
    """
    Flatten chopped sequences into one row per peptide.

    Uses the Entry/Sequence/Length columns of an uploaded peptide table, so the
    result can be fed straight into a peptide analysis pipeline.
    """
    rows = [
        {
            "Entry": f"{c.name}:peptide_{p.index}",
            "Parent": c.name,
            "Peptide index": p.index,
            "Start": p.start,
            "End": p.end,
            "Sequence": p.peptide,
            "Length": p.length,
            "Trimmed": p.trimmed,
        }
        for c in chopped
        for p in c.peptides
    ]
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def to_table(chopped: List[ChoppedSequence], sep: str = ",") -> str:
    return to_frame(chopped).to_csv(sep=sep, index=False)


def render(chopped: List[ChoppedSequence], fmt: ExportFormat) -> str:
    if fmt == "fasta":
        return "".join(to_fasta(c.name, c.peptide_strings) for c in chopped)
    if fmt == "text":
        return to_text(p for c in chopped for p in c.peptide_strings)
    if fmt == "csv":
        return to_table(chopped, sep=",")
    if fmt == "tsv":
        return to_table(chopped, sep="\t")
    raise ValueError(f"Unknown export format: {fmt}")


def export_filename(records: List[SequenceRecord], fmt: ExportFormat) -> str:
    """'{name}_peptides.{ext}' for a single record, 'peptides.{ext}' otherwise."""
    ext = EXTENSIONS[fmt]
    if len(records) == 1:
        # keep the name usable in a Content-Disposition header
        safe = re.sub(r"[^A-Za-z0-9._-]+", "_", records[0].name).strip("_") or "sequence"
        return f"{safe}_peptides.{ext}"
    return f"peptides.{ext}"
