from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .models import CONFIG, CIContext, ProofConfig, StageResult


DEFAULT_API_BASE = "https://api.getintegrityapi.com"
DEFAULT_TIMEOUT_SECONDS = 10.0

API_KEY_VARS = ("INPUT_API_KEY", "INTEGRITY_API_KEY")
WORKSPACE_VARS = ("INPUT_WORKSPACE", "GITHUB_WORKSPACE", "WORKSPACE")

CI_CONTEXT_VARS = {
    "repository": "GITHUB_REPOSITORY",
    "commit": "GITHUB_SHA",
    "actor": "GITHUB_ACTOR",
    "run_id": "GITHUB_RUN_ID",
    "run_number": "GITHUB_RUN_NUMBER",
    "workflow": "GITHUB_WORKFLOW",
    "ref": "GITHUB_REF",
}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def resolve_env(
    env: Mapping[str, str],
    names: Sequence[str],
    fallback: Optional[str] = None,
    required: bool = False,
) -> StageResult:
    """
    First non-blank value among `names`, trimmed.

    Falls back to `fallback` when every candidate is unset or blank.
    With no fallback and required=True this is a config failure.
    """
    for name in names:
        value = (env.get(name) or "").strip()
        if value:
            return StageResult.success(value)

    if fallback is not None:
        return StageResult.success(fallback)

    if required:
        joined = " or ".join(names)
        return StageResult.failure(CONFIG, f"{joined} is required but not set")

    return StageResult.success("")


def _parse_bool(raw: str, default: bool) -> Optional[bool]:
    value = raw.strip().lower()
    if not value:
        return default
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return None


def load_ci_context(env: Mapping[str, str]) -> CIContext:
    # Missing CI fields are never fatal.
    values = {
        field: (env.get(var) or "").strip()
        for field, var in CI_CONTEXT_VARS.items()
    }
    return CIContext(**values)


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    workspace: Optional[str] = None,
    render_pdf: Optional[bool] = None,
    require_workspace: Optional[bool] = None,
) -> StageResult:
    """
    Resolve every input into one ProofConfig before anything else runs.

    Keyword arguments come from the command line and win over the
    environment.
    """
    if env is None:
        env = os.environ

    api_key = resolve_env(env, API_KEY_VARS, required=True)
    if not api_key.ok:
        return StageResult.failure(CONFIG, "api_key input is required (set INPUT_API_KEY or INTEGRITY_API_KEY)")

    if require_workspace is None:
        strict = _parse_bool(env.get("INPUT_REQUIRE_WORKSPACE", ""), False)
        if strict is None:
            return StageResult.failure(CONFIG, "INPUT_REQUIRE_WORKSPACE must be true or false")
        require_workspace = strict

    if workspace is not None and workspace.strip():
        ws = StageResult.success(workspace.strip())
    else:
        ws = resolve_env(
            env,
            WORKSPACE_VARS,
            fallback=None if require_workspace else os.getcwd(),
            required=require_workspace,
        )
    if not ws.ok:
        return ws

    if render_pdf is None:
        render_pdf = _parse_bool(env.get("INPUT_RENDER_PDF", ""), True)
        if render_pdf is None:
            return StageResult.failure(CONFIG, "INPUT_RENDER_PDF must be true or false")

    api_base = resolve_env(env, ("INTEGRITY_API_BASE",), fallback=DEFAULT_API_BASE).value
    output_path = resolve_env(env, ("GITHUB_OUTPUT",)).value or None

    return StageResult.success(
        ProofConfig(
            api_key=api_key.value,
            workspace=Path(ws.value),
            ci=load_ci_context(env),
            output_path=output_path,
            render_pdf=render_pdf,
            api_base=api_base.rstrip("/"),
            timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
        )
    )
