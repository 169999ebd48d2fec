#!/usr/bin/env python3
"""
Smoke test for the peptide chopper API.
Checks /api/health, /api/chop and /api/chop/export against a running server.

Usage:
    # Ensure server is running first:
    # cd backend && uvicorn server:app --host 127.0.0.1 --port 8000

    # Then run this script:
    python scripts/smoke_test_backend.py

    # Or specify custom base URL:
    API_BASE_URL=http://localhost:8000 python scripts/smoke_test_backend.py
"""

import os
import sys
import requests

# Default API base URL
API_BASE = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")

TEST_SEQUENCE = "ACDEFGHIKLMNPQRSTVWYXBZJ"
EXPECTED_PEPTIDES = ["ACDEFGHIKL", "HIKLMNPQRS", "PQRSTVWYXB", "RSTVWYXBZJ"]
REQUEST_BODY = {
    "sequences": [{"name": "SMOKE001", "sequence": TEST_SEQUENCE}],
    "parameters": {"peptideLength": 10, "overlap": 4, "disallowedEnds": ""},
}


def check_health():
    """Check /api/health endpoint"""
    print("\n🏥 Checking /api/health...")
    try:
        response = requests.get(f"{API_BASE}/api/health", timeout=5)
        assert response.status_code == 200, f"Expected 200, got {response.status_code}"
        data = response.json()
        assert data.get("ok") is True, "Health check should return ok: true"
        print("  ✅ Health check passed")
        return True
    except requests.exceptions.ConnectionError:
        print(f"  ❌ Cannot connect to {API_BASE}")
        print(f"  💡 Make sure the server is running:")
        print(f"     cd backend && uvicorn server:app --host 127.0.0.1 --port 8000")
        return False
    except Exception as e:
        print(f"  ❌ Health check failed: {e}")
        return False


def check_chop():
    """Check /api/chop returns the expected overlapping peptides"""
    print("\n🧬 Checking /api/chop...")
    try:
        response = requests.post(f"{API_BASE}/api/chop", json=REQUEST_BODY, timeout=30)
        assert response.status_code == 200, f"Expected 200, got {response.status_code}"
        data = response.json()

        assert "results" in data, "Response missing 'results' key"
        assert "meta" in data, "Response missing 'meta' key"

        peptides = [p["peptide"] for p in data["results"][0]["peptides"]]
        assert peptides == EXPECTED_PEPTIDES, f"Unexpected peptides: {peptides}"

        print(f"  ✅ Chop endpoint passed ({data['meta']['peptides']} peptides)")
        return True

    except Exception as e:
        print(f"  ❌ Chop endpoint failed: {e}")
        import traceback
        traceback.print_exc()
        return False


def check_rejects_invalid():
    """Check that an overlap >= peptide length is reported as 400"""
    print("\n🚫 Checking /api/chop validation...")
    try:
        body = {**REQUEST_BODY, "parameters": {"peptideLength": 10, "overlap": 10}}
        response = requests.post(f"{API_BASE}/api/chop", json=body, timeout=30)
        assert response.status_code == 400, f"Expected 400, got {response.status_code}"
        print(f"  ✅ Invalid parameters rejected: {response.json()['detail']}")
        return True
    except Exception as e:
        print(f"  ❌ Validation check failed: {e}")
        return False


def check_export():
    """Check /api/chop/export returns a labeled FASTA download"""
    print("\n📄 Checking /api/chop/export...")
    try:
        response = requests.post(
            f"{API_BASE}/api/chop/export",
            params={"format": "fasta"},
            json=REQUEST_BODY,
            timeout=30,
        )
        assert response.status_code == 200, f"Expected 200, got {response.status_code}"
        disposition = response.headers.get("content-disposition", "")
        assert "SMOKE001_peptides.fasta" in disposition, f"Unexpected Content-Disposition: {disposition}"
        headers = [line for line in response.text.splitlines() if line.startswith(">")]
        assert headers[0] == ">SMOKE001:peptide_1", f"Unexpected first header: {headers[0]}"
        assert len(headers) == len(EXPECTED_PEPTIDES), f"Expected {len(EXPECTED_PEPTIDES)} records"
        print(f"  ✅ Export endpoint passed ({len(headers)} FASTA records)")
        return True
    except Exception as e:
        print(f"  ❌ Export endpoint failed: {e}")
        return False


def main():
    """Run all smoke checks"""
    print("=" * 60)
    print("💨 Peptide Chopper Smoke Test")
    print("=" * 60)
    print(f"Testing API at: {API_BASE}")
    print()

    # Check if server is reachable first
    if not check_health():
        print("\n❌ Server is not reachable. Please start it first.")
        print("\nTo start the server:")
        print("  cd backend")
        print("  uvicorn server:app --host 127.0.0.1 --port 8000")
        return 1

    checks = [
        check_chop,
        check_rejects_invalid,
        check_export,
    ]

    passed = 0
    failed = 0

    for check in checks:
        if check():
            passed += 1
        else:
            failed += 1

    print("\n" + "=" * 60)
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 60)

    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
