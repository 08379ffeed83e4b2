from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .receipt import RECEIPT_JSON, RECEIPT_SHA256, sha256_hex


def verify_receipt_files(directory: Path) -> Dict[str, Any]:
    """
    Offline check of a persisted receipt.
    - Digest file must match the exact bytes of receipt.json
    - receipt.json must carry a proof_id and a matching receipt_url
    - No network
    """
    json_path = Path(directory) / RECEIPT_JSON
    sha_path = Path(directory) / RECEIPT_SHA256

    if not json_path.is_file():
        return {"ok": False, "reason": "missing_receipt_json"}
    if not sha_path.is_file():
        return {"ok": False, "reason": "missing_receipt_sha256"}

    try:
        data = json_path.read_bytes()
        expected = sha_path.read_text(encoding="utf-8").strip().lower()
    except (OSError, UnicodeDecodeError):
        return {"ok": False, "reason": "unreadable_receipt_files"}
    actual = sha256_hex(data)
    if expected != actual:
        return {"ok": False, "reason": "digest_mismatch", "expected": expected, "actual": actual}

    try:
        receipt = json.loads(data.decode("utf-8"))
    except ValueError:
        return {"ok": False, "reason": "receipt_not_json"}

    if not isinstance(receipt, dict):
        return {"ok": False, "reason": "receipt_not_object"}

    proof_id = receipt.get("proof_id")
    if not proof_id:
        return {"ok": False, "reason": "missing_proof_id"}

    url = str(receipt.get("receipt_url") or "")
    if not url.endswith(f"/verify/{proof_id}"):
        return {"ok": False, "reason": "receipt_url_mismatch"}

    return {"ok": True, "proof_id": proof_id, "sha256": actual}
