# Services module
from .peptides import (
    clean_sequence,
    build_chopper,
    chop_record,
    chop_records,
)
from .export import (
    to_fasta,
    to_text,
    to_frame,
    to_table,
    render,
)

__all__ = [
    'clean_sequence',
    'build_chopper',
    'chop_record',
    'chop_records',
    'to_fasta',
    'to_text',
    'to_frame',
    'to_table',
    'render',
]
