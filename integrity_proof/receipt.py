from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Dict

from .models import FILESYSTEM, CIContext, ProofResponse, ReceiptArtifacts, StageResult


RECEIPT_VERSION = "1"

RECEIPT_JSON = "receipt.json"
RECEIPT_SHA256 = "receipt.sha256"
RECEIPT_PDF = "receipt.pdf"


def sha256_hex(b: bytes) -> str:
    return hashlib.sha256(b).hexdigest()


def receipt_url_for(api_base: str, proof_id: Any) -> str:
    return f"{api_base.rstrip('/')}/verify/{proof_id}"


def build_receipt(
    response: ProofResponse,
    ci: CIContext,
    api_base: str,
    issued_at: str,
) -> Dict[str, Any]:
    """
    Assemble the receipt envelope. No I/O.

    The service's response is embedded as returned; `response_sha256`
    pins the raw body bytes it was parsed from.
    """
    proof_id = response.proof_id
    return {
        "receipt_version": RECEIPT_VERSION,
        "proof_id": proof_id,
        "receipt_url": receipt_url_for(api_base, proof_id),
        "issued_at": issued_at,
        "ci": ci.as_dict(),
        "response_sha256": sha256_hex(response.raw),
        "proof": response.data,
    }


def serialize_receipt(receipt: Dict[str, Any]) -> bytes:
    return (json.dumps(receipt, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def write_receipt(receipt: Dict[str, Any], workspace: Path) -> StageResult:
    """
    Write receipt.json and receipt.sha256 into `workspace`.

    The receipt is serialized once; the digest is taken over that same
    buffer and the buffer is what lands on disk.
    """
    if not workspace.is_dir():
        return StageResult.failure(FILESYSTEM, f"workspace directory does not exist: {workspace}")

    data = serialize_receipt(receipt)
    digest = sha256_hex(data)

    json_path = workspace / RECEIPT_JSON
    sha_path = workspace / RECEIPT_SHA256

    try:
        json_path.write_bytes(data)
    except OSError as e:
        return StageResult.failure(FILESYSTEM, f"failed to write {json_path}: {e}")

    try:
        sha_path.write_text(digest + "\n", encoding="utf-8")
    except OSError as e:
        return StageResult.failure(
            FILESYSTEM,
            f"wrote {json_path} but failed to write digest {sha_path}: {e}",
        )

    print(f"[IntegrityProof] Wrote {json_path} (sha256={digest})")
    return StageResult.success(ReceiptArtifacts(json_path=json_path, sha256_path=sha_path, digest=digest))
