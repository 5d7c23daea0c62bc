"""Compare the stored configuration with a target file."""
from __future__ import annotations

from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path
import difflib

from .exporter import render_config_text
from .importer import DEFAULT_CONFIG_NAME

MAX_DIFF_LINES = 200


@dataclass(slots=True)
class DriftReport:
    target_path: Path
    in_sync: bool | None
    generated_hash: str | None
    target_hash: str | None
    diff: str | None
    error: str | None


def compare_config(target_path: Path, db_path: Path | None = None, *, name: str = DEFAULT_CONFIG_NAME) -> DriftReport:
    generated_text = render_config_text(db_path=db_path, name=name)
    if not generated_text:
        return DriftReport(
            target_path=target_path,
            in_sync=None,
            generated_hash=None,
            target_hash=None,
            diff=None,
            error=f"No stored configuration named {name!r}",
        )
    generated_hash = sha256(generated_text.encode("utf-8")).hexdigest()

    try:
        target_text = target_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return DriftReport(
            target_path=target_path,
            in_sync=None,
            generated_hash=generated_hash,
            target_hash=None,
            diff=None,
            error=f"No configuration found at {target_path}",
        )
    except PermissionError:
        return DriftReport(
            target_path=target_path,
            in_sync=None,
            generated_hash=generated_hash,
            target_hash=None,
            diff=None,
            error=f"Permission denied reading {target_path}",
        )

    target_hash = sha256(target_text.encode("utf-8")).hexdigest()
    if generated_hash == target_hash:
        return DriftReport(
            target_path=target_path,
            in_sync=True,
            generated_hash=generated_hash,
            target_hash=target_hash,
            diff=None,
            error=None,
        )

    diff_lines = difflib.unified_diff(
        target_text.splitlines(),
        generated_text.splitlines(),
        fromfile=str(target_path),
        tofile="stored",
        lineterm="",
    )
    limited: list[str] = []
    for idx, line in enumerate(diff_lines):
        if idx >= MAX_DIFF_LINES:
            limited.append("... diff truncated ...")
            break
        limited.append(line)

    return DriftReport(
        target_path=target_path,
        in_sync=False,
        generated_hash=generated_hash,
        target_hash=target_hash,
        diff="\n".join(limited),
        error=None,
    )


def summarise_drift(report: DriftReport) -> str:
    if report.error:
        return f"Drift: {report.error}"
    if report.in_sync is True:
        return f"Drift: {report.target_path} matches the database"
    if report.in_sync is False:
        return f"Drift: differences detected for {report.target_path}"
    return "Drift: status unknown"
