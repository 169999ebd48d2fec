# backend/server.py
import os
import uuid
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from calculations.chopper import (
    AMINO_ACID_ALPHABET,
    ChopperError,
    WindowUnderflow,
)
from schemas.chop import ChopMeta, ChopParameters, ChopRequest, ChopResponse, ChoppedSequence
from services.export import MEDIA_TYPES, ExportFormat, export_filename, render
from services.logger import log_info, set_trace_id
from services.peptides import chop_records

# Explicitly point to backend/.env
load_dotenv(dotenv_path=Path(__file__).with_name(".env"))


def env_true(name: str, default: bool = True) -> bool:
    """Treat 1/true/yes/on (case-insensitive) as True; 0/false/no/off as False."""
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in ("1", "true", "yes", "on")


STRICT_ALPHABET = env_true("STRICT_ALPHABET", False)
MAX_SEQUENCE_RECORDS = int(os.getenv("MAX_SEQUENCE_RECORDS", "500"))
CORS_ORIGINS = [
    o.strip() for o in os.getenv(
        "CORS_ORIGINS",
        "http://127.0.0.1:5173,http://localhost:5173,http://127.0.0.1:8080,http://localhost:8080",
    ).split(",") if o.strip()
]

app = FastAPI(title="Peptide Chopper Service")

# CORS for local dev (Vite on :5173)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    trace_id = request.headers.get("X-Trace-Id") or uuid.uuid4().hex[:12]
    set_trace_id(trace_id)
    response = await call_next(request)
    response.headers["X-Trace-Id"] = trace_id
    return response


# ---------- Helpers ----------

def _resolve_parameters(req: ChopRequest) -> ChopParameters:
    # server-wide strictness applies unless the request asks for it explicitly
    if "strict_alphabet" in req.parameters.model_fields_set:
        return req.parameters
    return req.parameters.model_copy(update={"strict_alphabet": STRICT_ALPHABET})


def _chop_or_raise(req: ChopRequest) -> List[ChoppedSequence]:
    if not req.sequences:
        raise HTTPException(400, detail="At least one sequence is required")
    if len(req.sequences) > MAX_SEQUENCE_RECORDS:
        raise HTTPException(
            400,
            detail=f"Too many sequences: {len(req.sequences)} (max {MAX_SEQUENCE_RECORDS})",
        )
    try:
        return chop_records(req.sequences, _resolve_parameters(req))
    except WindowUnderflow as e:
        raise HTTPException(500, detail=f"Internal error while chopping: {e}")
    except ChopperError as e:
        raise HTTPException(400, detail=str(e))


# ---------- Endpoints ----------

@app.get("/api/health")
def health():
    return {"ok": True}


@app.get("/api/defaults")
def defaults():
    params = ChopParameters(strict_alphabet=STRICT_ALPHABET)
    return {"parameters": params.to_camel_dict(), "alphabet": AMINO_ACID_ALPHABET}


@app.post("/api/chop", response_model=ChopResponse, response_model_by_alias=True)
def chop(req: ChopRequest):
    """
    Chop one or more named sequences into peptides.
    Invalid parameters or sequences are reported as 400 with the offending record name.
    """
    results = _chop_or_raise(req)
    meta = ChopMeta(records=len(results), peptides=sum(len(r.peptides) for r in results))
    log_info("chop_request", f"records={meta.records} • peptides={meta.peptides}", stage="response",
             records=meta.records, peptides=meta.peptides)
    return ChopResponse(results=results, meta=meta)


@app.post("/api/chop/export")
def chop_export(req: ChopRequest, format: ExportFormat = Query("fasta")):
    """
    Chop and return the peptides as a downloadable file.
    fasta: '>{name}:peptide_{n}' records; text: one peptide per line; csv/tsv: peptide table.
    """
    results = _chop_or_raise(req)
    body = render(results, format)
    filename = export_filename(req.sequences, format)
    log_info("chop_export", f"Exported {len(results)} sequences as {format}", stage="export",
             records=len(results), format=format, filename=filename)
    return Response(
        content=body,
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
