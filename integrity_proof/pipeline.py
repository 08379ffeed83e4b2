from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from .config import load_config
from .models import (
    CONFIG,
    CONTRACT,
    FILESYSTEM,
    REMOTE,
    RENDER,
    TRANSPORT,
    ProofConfig,
    ReceiptArtifacts,
    StageResult,
)
from .outputs import publish_outputs
from .pdf_render import render_receipt_pdf
from .proof_client import request_proof
from .receipt import RECEIPT_PDF, build_receipt, write_receipt
from .timeutil import iso, utc_now


EXIT_CODES = {
    CONFIG: 2,
    TRANSPORT: 3,
    REMOTE: 4,
    CONTRACT: 5,
    FILESYSTEM: 6,
    RENDER: 7,
}


def step_outputs(receipt: Dict[str, Any], artifacts: ReceiptArtifacts) -> Dict[str, str]:
    return {
        "proof_id": str(receipt["proof_id"]),
        "receipt_url": receipt["receipt_url"],
        "receipt_sha256": artifacts.digest,
        "receipt_json": str(artifacts.json_path),
        "receipt_sha256_file": str(artifacts.sha256_path),
        "receipt_pdf": str(artifacts.pdf_path) if artifacts.pdf_path else "",
    }


def run_pipeline(
    config: ProofConfig,
    session: Any = None,
    now: Optional[datetime] = None,
) -> StageResult:
    """
    Request -> build -> persist -> publish. Stops at the first failure.

    Files already written by an earlier stage are left in place when a
    later stage fails.
    """
    if not config.workspace.is_dir():
        return StageResult.failure(FILESYSTEM, f"workspace directory does not exist: {config.workspace}")

    proof = request_proof(config, session=session, now=now)
    if not proof.ok:
        return proof

    receipt = build_receipt(proof.value, config.ci, config.api_base, iso(now or utc_now()))

    written = write_receipt(receipt, config.workspace)
    if not written.ok:
        return written
    artifacts: ReceiptArtifacts = written.value

    if config.render_pdf:
        pdf = render_receipt_pdf(receipt, artifacts.digest, config.workspace / RECEIPT_PDF)
        if not pdf.ok:
            return pdf
        artifacts = replace(artifacts, pdf_path=pdf.value)

    outputs = step_outputs(receipt, artifacts)
    published = publish_outputs(outputs, config.output_path)
    if not published.ok:
        return published

    print(f"[IntegrityProof] Proof ID: {outputs['proof_id']}")
    print(f"[IntegrityProof] Receipt URL: {outputs['receipt_url']}")
    return StageResult.success(artifacts)


def escape_command_data(value: str) -> str:
    # Workflow command data: %, CR and LF must be percent-encoded.
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def report_failure(result: StageResult, env: Mapping[str, str]) -> int:
    print(f"❌ Failed ({result.kind}): {result.reason}", file=sys.stderr)
    if (env.get("GITHUB_ACTIONS") or "").strip().lower() == "true":
        print(f"::error::{escape_command_data(result.reason)}")
    return EXIT_CODES.get(result.kind or "", 1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Request a proof of publish and persist a verifiable receipt")
    parser.add_argument("--workspace", help="Directory for receipt files (default: $GITHUB_WORKSPACE or cwd)")
    parser.add_argument("--no-pdf", action="store_true", help="Skip receipt.pdf")
    parser.add_argument(
        "--require-workspace",
        action="store_true",
        help="Fail instead of falling back to the current directory",
    )
    return parser


def main(
    argv: Optional[list[str]] = None,
    env: Optional[Mapping[str, str]] = None,
    session: Any = None,
) -> int:
    args = build_parser().parse_args(argv)
    if env is None:
        env = os.environ

    config = load_config(
        env,
        workspace=args.workspace,
        render_pdf=False if args.no_pdf else None,
        require_workspace=True if args.require_workspace else None,
    )
    if not config.ok:
        return report_failure(config, env)

    result = run_pipeline(config.value, session=session)
    if not result.ok:
        return report_failure(result, env)

    print("✅ Receipt persisted.")
    return 0
