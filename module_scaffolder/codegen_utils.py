import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from module_scaffolder.exceptions import GenerationWarning, WarningKind


logger = logging.getLogger(__name__)

TOOL_TIMEOUT_SECONDS = 120


def run_external_tool(args: Sequence[str], cwd: Path) -> Optional[GenerationWarning]:
    """Runs a formatter or build tool; failures are returned as a warning, never raised."""
    command = " ".join(args)
    if shutil.which(args[0]) is None:
        logger.debug(f"'{args[0]}' not found on PATH, skipping: {command}")
        return GenerationWarning(
            WarningKind.EXTERNAL_TOOL_FAILED,
            f"'{args[0]}' is not installed; run '{command}' manually",
            subject=args[0],
        )

    try:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=TOOL_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"'{command}' could not run: {e}")
        return GenerationWarning(WarningKind.EXTERNAL_TOOL_FAILED, f"'{command}' failed: {e}", subject=args[0])

    if completed.returncode != 0:
        output = (completed.stderr or completed.stdout).strip()
        logger.debug(f"'{command}' exited with {completed.returncode}: {output}")
        return GenerationWarning(
            WarningKind.EXTERNAL_TOOL_FAILED,
            f"'{command}' exited with status {completed.returncode}: {output}",
            subject=args[0],
        )

    logger.debug(f"Ran '{command}'")
    return None


def format_go_files(files: Sequence[Path], project_root: Path) -> List[GenerationWarning]:
    """Formats generated Go files using goimports, then gofmt."""
    if not files:
        return []
    paths = [str(f) for f in files]
    warnings = []
    for tool in ("goimports", "gofmt"):
        warning = run_external_tool([tool, "-w", *paths], project_root)
        if warning:
            warnings.append(warning)
    return warnings


def tidy_go_module(project_root: Path) -> List[GenerationWarning]:
    """Runs 'go mod tidy' when the project has a go.mod."""
    if not (project_root / "go.mod").exists():
        logger.debug(f"No go.mod in {project_root}, skipping 'go mod tidy'")
        return []
    warning = run_external_tool(["go", "mod", "tidy"], project_root)
    return [warning] if warning else []
