from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


# Failure kinds, one per stage that can fail.
CONFIG = "config"
TRANSPORT = "transport"
REMOTE = "remote"
CONTRACT = "contract"
FILESYSTEM = "filesystem"
RENDER = "render"


@dataclass(frozen=True)
class CIContext:
    repository: str = ""
    commit: str = ""
    actor: str = ""
    run_id: str = ""
    run_number: str = ""
    workflow: str = ""
    ref: str = ""

    def as_dict(self) -> Dict[str, str]:
        return {
            "repository": self.repository,
            "commit": self.commit,
            "actor": self.actor,
            "run_id": self.run_id,
            "run_number": self.run_number,
            "workflow": self.workflow,
            "ref": self.ref,
        }


@dataclass(frozen=True)
class ProofConfig:
    api_key: str
    workspace: Path
    ci: CIContext = field(default_factory=CIContext)
    output_path: Optional[str] = None
    render_pdf: bool = True
    api_base: str = "https://api.getintegrityapi.com"
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class ProofResponse:
    data: Dict[str, Any]
    raw: bytes

    @property
    def proof_id(self) -> Any:
        return self.data["proof_id"]


@dataclass(frozen=True)
class ReceiptArtifacts:
    json_path: Path
    sha256_path: Path
    digest: str
    pdf_path: Optional[Path] = None


@dataclass
class StageResult:
    """
    Outcome of one pipeline stage.

    ok=True carries `value`; ok=False carries a failure `kind` and a
    human-readable `reason`.
    """

    ok: bool
    value: Any = None
    kind: Optional[str] = None
    reason: str = ""

    @classmethod
    def success(cls, value: Any = None) -> "StageResult":
        return cls(True, value=value)

    @classmethod
    def failure(cls, kind: str, reason: str) -> "StageResult":
        return cls(False, kind=kind, reason=reason)
