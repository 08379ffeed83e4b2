from __future__ import annotations

from typing import Dict, Optional

from .models import FILESYSTEM, StageResult


def _one_line(value: str) -> str:
    return value.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


def publish_outputs(outputs: Dict[str, str], output_path: Optional[str]) -> StageResult:
    """
    Append key=value lines to the GITHUB_OUTPUT file.

    No output path (running outside Actions) is a no-op.
    """
    if not output_path:
        print("[IntegrityProof] GITHUB_OUTPUT not set; skipping step outputs.")
        return StageResult.success(False)

    try:
        with open(output_path, "a", encoding="utf-8") as f:
            for key, value in outputs.items():
                f.write(f"{key}={_one_line(value)}\n")
    except OSError as e:
        return StageResult.failure(FILESYSTEM, f"failed to write step outputs to {output_path}: {e}")

    return StageResult.success(True)
