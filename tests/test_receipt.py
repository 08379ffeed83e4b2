import hashlib
import json

from integrity_proof.models import FILESYSTEM, CIContext, ProofResponse
from integrity_proof.receipt import (
    build_receipt,
    receipt_url_for,
    serialize_receipt,
    write_receipt,
)


BASE = "https://api.getintegrityapi.com"


def _response(data):
    return ProofResponse(data=data, raw=json.dumps(data).encode("utf-8"))


def test_receipt_url_convention():
    assert receipt_url_for(BASE, "abc123") == f"{BASE}/verify/abc123"
    assert receipt_url_for(BASE + "/", "abc123") == f"{BASE}/verify/abc123"


def test_build_receipt_embeds_response_unchanged():
    data = {"proof_id": "abc123", "verified": True, "capsule": {"alg": "ed25519", "kid": "k1", "hp_version": "2"}, "extra": [1, None]}
    response = _response(data)
    ci = CIContext(repository="acme/widgets", commit="deadbeef")

    receipt = build_receipt(response, ci, BASE, "2026-03-01T12:30:45Z")

    assert receipt["receipt_version"] == "1"
    assert receipt["proof_id"] == "abc123"
    assert receipt["receipt_url"] == f"{BASE}/verify/abc123"
    assert receipt["issued_at"] == "2026-03-01T12:30:45Z"
    assert receipt["ci"]["repository"] == "acme/widgets"
    assert receipt["ci"]["actor"] == ""
    assert receipt["proof"] == data
    assert list(receipt["proof"]) == ["proof_id", "verified", "capsule", "extra"]
    assert receipt["response_sha256"] == hashlib.sha256(response.raw).hexdigest()


def test_write_receipt_example(tmp_path):
    ws = tmp_path / "ws"
    ws.mkdir()
    receipt = build_receipt(_response({"proof_id": "abc123"}), CIContext(), BASE, "2026-03-01T12:30:45Z")

    result = write_receipt(receipt, ws)
    assert result.ok

    text = (ws / "receipt.json").read_text(encoding="utf-8")
    assert '"proof_id": "abc123"' in text

    expected = hashlib.sha256((ws / "receipt.json").read_bytes()).hexdigest()
    assert (ws / "receipt.sha256").read_text(encoding="utf-8") == expected + "\n"
    assert result.value.digest == expected


def test_digest_matches_bytes_with_unicode_and_nesting(tmp_path):
    data = {
        "proof_id": "ünï-✓-证明",
        "validator": "Zoë",
        "capsule": {"alg": "ed25519", "nested": {"deep": ["a", {"b": "ß"}]}},
    }
    receipt = build_receipt(_response(data), CIContext(actor="José"), BASE, "2026-03-01T12:30:45Z")

    result = write_receipt(receipt, tmp_path)
    assert result.ok

    on_disk = (tmp_path / "receipt.json").read_bytes()
    assert on_disk == serialize_receipt(receipt)
    assert "证明".encode("utf-8") in on_disk
    assert (tmp_path / "receipt.sha256").read_text(encoding="utf-8").strip() == hashlib.sha256(on_disk).hexdigest()
    assert json.loads(on_disk.decode("utf-8"))["proof"] == data


def test_missing_workspace_fails_before_writing(tmp_path):
    missing = tmp_path / "nope"
    receipt = build_receipt(_response({"proof_id": "abc123"}), CIContext(), BASE, "t")

    result = write_receipt(receipt, missing)
    assert not result.ok
    assert result.kind == FILESYSTEM
    assert not missing.exists()


def test_digest_write_failure_is_reported(tmp_path):
    # A directory squatting on receipt.sha256 makes the digest write fail.
    (tmp_path / "receipt.sha256").mkdir()
    receipt = build_receipt(_response({"proof_id": "abc123"}), CIContext(), BASE, "t")

    result = write_receipt(receipt, tmp_path)
    assert not result.ok
    assert result.kind == FILESYSTEM
    assert "digest" in result.reason
