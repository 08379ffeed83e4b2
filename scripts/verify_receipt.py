#!/usr/bin/env python3
"""
Offline check of a persisted proof receipt.

    python scripts/verify_receipt.py [DIR]

DIR defaults to $GITHUB_WORKSPACE, then the current directory.
"""
from __future__ import annotations

import json
import os
import sys
from pathlib import Path

from integrity_proof.receipt_verify import verify_receipt_files


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    directory = Path(argv[0]) if argv else Path(os.getenv("GITHUB_WORKSPACE", "").strip() or ".")

    result = verify_receipt_files(directory)
    print(json.dumps(result, indent=2))
    if not result.get("ok", False):
        print(f"❌ Receipt verification failed: {result['reason']}", file=sys.stderr)
        return 1

    print("✅ Receipt digest matches.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
