"""
Knip runner for sweep.

Invokes Knip (unused files, exports, types and dependencies) as a
subprocess and parses its JSON reporter output. Candidate commands are
tried one after another until one succeeds.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sweep.core.config import KnipConfig
from sweep.core.models import ExternalFindings

logger = logging.getLogger(__name__)

NO_PACKAGE_JSON = "No package.json found"
ALL_ATTEMPTS_FAILED = "All Knip execution attempts failed"


class KnipCommandError(Exception):
    """A single Knip command failed; the next candidate may still work."""

    pass


@dataclass
class CommandOutput:
    """Captured output of one analyzer command."""

    command: str
    returncode: int
    stdout: str
    stderr: str


def _is_src_path(value: str) -> bool:
    normalized = value.replace("\\", "/")
    return normalized.startswith("src/") or "/src/" in normalized


def filter_src_items(items: Any) -> list[Any]:
    """Keep only findings located under a ``src/`` path segment."""
    if not isinstance(items, list):
        return []
    kept = []
    for item in items:
        if isinstance(item, str):
            if _is_src_path(item):
                kept.append(item)
        elif isinstance(item, dict) and item.get("file"):
            if _is_src_path(str(item["file"])):
                kept.append(item)
        else:
            kept.append(item)
    return kept


def _find_json_start(lines: list[str]) -> int:
    for index, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("{") or stripped.startswith("["):
            return index
    return -1


def parse_knip_output(stdout: str) -> ExternalFindings | None:
    """
    Parse Knip's JSON reporter output.

    Leading non-JSON lines (package manager banners) are skipped.

    Returns:
        ExternalFindings reduced to ``src/`` items, or None if the output
        holds no parseable JSON object
    """
    if not stdout or not isinstance(stdout, str):
        return None
    lines = stdout.splitlines()
    start = _find_json_start(lines)
    if start == -1:
        return None
    try:
        data = json.loads("\n".join(lines[start:]).strip())
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    return ExternalFindings(
        files=filter_src_items(data.get("files") or []),
        dependencies=list(data.get("dependencies") or []),
        devDependencies=list(data.get("devDependencies") or []),
        exports=filter_src_items(data.get("exports") or []),
        types=filter_src_items(data.get("types") or []),
    )


class KnipRunner:
    """
    Runs Knip for one app directory.

    Each command gets ``config.timeout`` seconds. A command counts as failed
    when it cannot start, times out, exits non-zero, or prints output that
    is not Knip JSON; the runner then moves on to the next command.
    """

    def __init__(self, config: KnipConfig):
        self._config = config

    @property
    def enabled(self) -> bool:
        return bool(self._config.enabled)

    def working_directory(self, app_dir: Path) -> Path:
        if self._config.cwd:
            return (Path(app_dir) / self._config.cwd).absolute()
        return Path(app_dir)

    async def run(self, app_dir: Path) -> ExternalFindings:
        """
        Run the analyzer for an app.

        Returns:
            Findings (unfiltered by the whitelist), or findings with
            ``error`` set when the analyzer could not produce a result
        """
        app_dir = Path(app_dir)
        if not (app_dir / "package.json").is_file():
            logger.warning(f"Knip skipped for {app_dir}: {NO_PACKAGE_JSON}")
            return ExternalFindings.failed(NO_PACKAGE_JSON)

        cwd = self.working_directory(app_dir)
        for command in self._config.commands:
            logger.info(f"Trying: {command}")
            try:
                output = await self._execute(command, cwd)
                findings = self._interpret(output)
            except KnipCommandError as e:
                logger.warning(f'Command "{command}" failed: {e}')
                continue
            logger.info(f"Knip analysis completed ({findings.total} findings)")
            return findings

        logger.warning(f"{ALL_ATTEMPTS_FAILED}. Continuing with assets-only analysis.")
        return ExternalFindings.failed(ALL_ATTEMPTS_FAILED)

    async def _execute(self, command: str, cwd: Path) -> CommandOutput:
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                cwd=str(cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise KnipCommandError(f"could not start: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self._config.timeout
            )
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise KnipCommandError(f"timed out after {self._config.timeout}s") from e

        return CommandOutput(
            command=command,
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    @staticmethod
    def _interpret(output: CommandOutput) -> ExternalFindings:
        if output.stderr.strip():
            logger.info(f"Knip stderr: {output.stderr.strip()}")
        if output.returncode != 0:
            raise KnipCommandError(f"exited with code {output.returncode}")
        if not output.stdout.strip():
            logger.info("Knip found no unused files")
            return ExternalFindings()
        findings = parse_knip_output(output.stdout)
        if findings is None:
            raise KnipCommandError("output is not valid Knip JSON")
        return findings
