"""
Test the chopping endpoints through the FastAPI test client.
"""
import pytest
from fastapi.testclient import TestClient

import server
from server import app

client = TestClient(app)

ABC = "ACDEFGHIKLMNPQRSTVWYXBZJ"
OVERLAP_PEPTIDES = ["ACDEFGHIKL", "HIKLMNPQRS", "PQRSTVWYXB", "RSTVWYXBZJ"]


def _body(sequences, **parameters):
    params = {"peptideLength": 10, "overlap": 4, "disallowedEnds": ""}
    params.update(parameters)
    return {"sequences": sequences, "parameters": params}


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_defaults():
    data = client.get("/api/defaults").json()
    assert data["alphabet"] == ABC
    assert data["parameters"]["peptideLength"] == 18
    assert data["parameters"]["overlap"] == 10
    assert data["parameters"]["disallowedEnds"] == "GSDENQHPCAT"
    assert data["parameters"]["nrDisallowedEndAAs"] == 3


def test_chop_returns_peptides_and_meta():
    response = client.post("/api/chop", json=_body([{"name": "abc", "sequence": ABC}]))
    assert response.status_code == 200
    data = response.json()
    assert data["meta"] == {"records": 1, "peptides": 4}
    result = data["results"][0]
    assert result["name"] == "abc"
    assert result["sequenceLength"] == 24
    assert [p["peptide"] for p in result["peptides"]] == OVERLAP_PEPTIDES
    assert result["peptides"][0] == {
        "index": 1, "start": 1, "end": 10, "peptide": "ACDEFGHIKL", "length": 10, "trimmed": 0,
    }
    assert "X-Trace-Id" in response.headers


def test_chop_with_default_parameters():
    response = client.post("/api/chop", json={"sequences": [{"name": "p", "sequence": "MKWVTFISLLLLFSSAYSRGVFRRDTHKSE"}]})
    assert response.status_code == 200
    peptides = [p["peptide"] for p in response.json()["results"][0]["peptides"]]
    assert peptides == ["MKWVTFISLLLLFSSAY", "LLLLFSSAYSRGVFRR", "FSSAYSRGVFRRDTHK"]


@pytest.mark.parametrize("parameters", [{"peptideLength": 0}, {"overlap": 10}, {"nrDisallowedEndAAs": -1}])
def test_invalid_parameters_are_400(parameters):
    response = client.post("/api/chop", json=_body([{"name": "abc", "sequence": ABC}], **parameters))
    assert response.status_code == 400
    assert response.json()["detail"].startswith("abc: ")


def test_short_sequence_is_400():
    response = client.post("/api/chop", json=_body([{"name": "tiny", "sequence": "ACD"}]))
    assert response.status_code == 400
    assert "tiny" in response.json()["detail"]


def test_empty_request_is_400():
    response = client.post("/api/chop", json={"sequences": []})
    assert response.status_code == 400


def test_missing_sequence_field_is_422():
    response = client.post("/api/chop", json={"sequences": [{"name": "abc"}]})
    assert response.status_code == 422


def test_too_many_records_is_400(monkeypatch):
    monkeypatch.setattr(server, "MAX_SEQUENCE_RECORDS", 1)
    response = client.post("/api/chop", json=_body([{"name": "a", "sequence": ABC}, {"name": "b", "sequence": ABC}]))
    assert response.status_code == 400
    assert "Too many sequences" in response.json()["detail"]


def test_server_strictness_applies_unless_requested(monkeypatch):
    monkeypatch.setattr(server, "STRICT_ALPHABET", True)
    body = _body([{"name": "odd", "sequence": "ACDEFGHIK1"}])
    assert client.post("/api/chop", json=body).status_code == 400

    body["parameters"]["strictAlphabet"] = False
    assert client.post("/api/chop", json=body).status_code == 200


def test_export_fasta_download():
    response = client.post("/api/chop/export?format=fasta", json=_body([{"name": "abc", "sequence": ABC}]))
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="abc_peptides.fasta"'
    expected = "".join(f">abc:peptide_{n}\n{p}\n" for n, p in enumerate(OVERLAP_PEPTIDES, start=1))
    assert response.text == expected


def test_export_text():
    response = client.post("/api/chop/export?format=text", json=_body([{"name": "abc", "sequence": ABC}]))
    assert response.status_code == 200
    assert response.text == "\n".join(OVERLAP_PEPTIDES)


def test_export_csv():
    body = _body([{"name": "a", "sequence": ABC}, {"name": "b", "sequence": ABC}])
    response = client.post("/api/chop/export?format=csv", json=body)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="peptides.csv"' in response.headers["content-disposition"]
    lines = response.text.strip().splitlines()
    assert lines[0] == "Entry,Parent,Peptide index,Start,End,Sequence,Length,Trimmed"
    assert len(lines) == 1 + 2 * len(OVERLAP_PEPTIDES)


def test_export_rejects_unknown_format():
    response = client.post("/api/chop/export?format=xml", json=_body([{"name": "abc", "sequence": ABC}]))
    assert response.status_code == 422
