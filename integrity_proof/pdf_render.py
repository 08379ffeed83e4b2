"""
One-page PDF summary of a receipt.

Purely cosmetic: everything printed here is already in receipt.json.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Tuple

from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from .models import RENDER, StageResult
from .receipt import RECEIPT_JSON, RECEIPT_SHA256


MARGIN = 54
BODY_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
MONO_FONT = "Courier"


def _status_line(proof: Dict[str, Any]) -> str:
    verified = proof.get("verified")
    if verified is True:
        return "VERIFIED"
    if verified is False:
        return "NOT VERIFIED"
    return "ISSUED"


def receipt_sections(receipt: Dict[str, Any], digest: str) -> List[Tuple[str, List[Tuple[str, str]]]]:
    proof = receipt.get("proof") or {}
    capsule = proof.get("capsule") or {}
    ci = receipt.get("ci") or {}

    return [
        (
            "Proof",
            [
                ("Status", _status_line(proof)),
                ("Proof ID", str(receipt.get("proof_id", ""))),
                ("Receipt URL", str(receipt.get("receipt_url", ""))),
                ("Issued at", str(receipt.get("issued_at", ""))),
                ("Validator", str(proof.get("validator", "") or "-")),
                ("Receipt SHA-256", digest),
            ],
        ),
        (
            "CI context",
            [
                ("Repository", ci.get("repository", "") or "-"),
                ("Commit", ci.get("commit", "") or "-"),
                ("Actor", ci.get("actor", "") or "-"),
                ("Workflow", ci.get("workflow", "") or "-"),
                ("Run", f"{ci.get('run_id', '') or '-'} (#{ci.get('run_number', '') or '-'})"),
                ("Ref", ci.get("ref", "") or "-"),
            ],
        ),
        (
            "Capsule",
            [
                ("Algorithm", str(capsule.get("alg", "") or "-")),
                ("Key ID", str(capsule.get("kid", "") or "-")),
                ("HP version", str(capsule.get("hp_version", "") or "-")),
            ],
        ),
    ]


def verification_steps(receipt: Dict[str, Any]) -> List[str]:
    return [
        f"1. Recompute SHA-256 over {RECEIPT_JSON} (e.g. sha256sum {RECEIPT_JSON}).",
        f"2. Compare it with the hex digest stored in {RECEIPT_SHA256}.",
        f"3. Look up the proof online: {receipt.get('receipt_url', '')}",
    ]


def render_receipt_pdf(receipt: Dict[str, Any], digest: str, path: Path) -> StageResult:
    try:
        _draw(receipt, digest, path)
    except Exception as e:
        return StageResult.failure(RENDER, f"failed to render {path}: {e}")

    print(f"[IntegrityProof] Wrote {path}")
    return StageResult.success(path)


def _draw(receipt: Dict[str, Any], digest: str, path: Path) -> None:
    width, height = letter
    label_width = 110
    value_width = width - 2 * MARGIN - label_width

    c = canvas.Canvas(str(path), pagesize=letter)
    c.setTitle(f"Proof of publish {receipt.get('proof_id', '')}")

    y = height - MARGIN
    c.setFont(BOLD_FONT, 18)
    c.drawString(MARGIN, y, "Proof of Publish Receipt")
    y -= 30

    for title, rows in receipt_sections(receipt, digest):
        c.setFont(BOLD_FONT, 12)
        c.drawString(MARGIN, y, title)
        y -= 16
        for label, value in rows:
            c.setFont(BODY_FONT, 9)
            c.drawString(MARGIN, y, label)
            font = MONO_FONT if label in ("Proof ID", "Receipt SHA-256", "Commit") else BODY_FONT
            lines = simpleSplit(value, font, 9, value_width) or [""]
            c.setFont(font, 9)
            for line in lines:
                c.drawString(MARGIN + label_width, y, line)
                y -= 12
        y -= 10

    c.setFont(BOLD_FONT, 12)
    c.drawString(MARGIN, y, "How to verify")
    y -= 16
    c.setFont(BODY_FONT, 9)
    for step in verification_steps(receipt):
        for line in simpleSplit(step, BODY_FONT, 9, width - 2 * MARGIN):
            c.drawString(MARGIN, y, line)
            y -= 12

    c.showPage()
    c.save()
