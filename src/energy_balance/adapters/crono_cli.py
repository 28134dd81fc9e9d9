"""Nutrition export client backed by the crono command-line tool."""

import asyncio
import json
import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from energy_balance.domain.errors import CronoCommandError, InvalidRequestError

_logger = logging.getLogger(__name__)

EXPORT_TYPES = ("nutrition", "exercises", "biometrics")
READ_COMMANDS = ("diary", "weight")


class NutritionExportClient(Protocol):
    """Interface for fetching export rows from the tracking account."""

    async def export_rows(
        self,
        export_type: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> list[dict[str, object]]:
        """Return export rows of the given type for a date or range."""

    async def export_json(
        self,
        export_type: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> object:
        """Return an export's decoded JSON unchanged."""

    async def export_csv(
        self,
        export_type: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> str:
        """Return an export as CSV text."""

    async def read_records(
        self,
        command: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> object:
        """Return diary or weight records for a date or range."""

    def version(self) -> str | None:
        """Return the installed CLI version, if known."""


@dataclass
class SubprocessCronoClient(NutritionExportClient):
    """Runs ``crono`` in a subprocess and parses its JSON output."""

    command: list[str]
    timeout_seconds: float = 180.0
    env: dict[str, str] | None = None
    package_json: str | None = None

    @classmethod
    def create(
        cls,
        bin_path: str,
        timeout_ms: int,
        env: dict[str, str] | None = None,
        package_json: str | None = None,
    ) -> "SubprocessCronoClient":
        """Create a client from a configured binary path."""
        return cls(
            command=shlex.split(bin_path),
            timeout_seconds=timeout_ms / 1000,
            env=env,
            package_json=package_json,
        )

    async def export_rows(
        self,
        export_type: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> list[dict[str, object]]:
        """Run an export and return its rows as a list."""
        return _as_rows(
            await self.export_json(export_type, date=date, range_expr=range_expr)
        )

    async def export_json(
        self,
        export_type: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> object:
        """Run an export and return the decoded JSON as the CLI printed it."""
        args = _export_args(export_type, date, range_expr, "--json")
        return await self.run_json(args)

    async def export_csv(
        self,
        export_type: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> str:
        """Run an export in CSV mode and return the raw text."""
        return await self.run(_export_args(export_type, date, range_expr, "--csv"))

    async def read_records(
        self,
        command: str,
        *,
        date: str | None = None,
        range_expr: str | None = None,
    ) -> object:
        """Run ``diary`` or ``weight`` and return the decoded JSON."""
        if command not in READ_COMMANDS:
            raise InvalidRequestError(f"Invalid read command: {command}")
        args = [command, *build_date_args(date, range_expr), "--json"]
        return await self.run_json(args)

    def version(self) -> str | None:
        """Read the CLI version from its package manifest."""
        if not self.package_json:
            return None
        try:
            manifest = json.loads(Path(self.package_json).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return None
        version = manifest.get("version") if isinstance(manifest, dict) else None
        return version if isinstance(version, str) and version else None

    async def run_json(self, args: list[str]) -> object:
        """Run a command and decode its stdout as JSON."""
        stdout = await self.run(args)
        if not stdout:
            return None
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as exc:
            raise CronoCommandError(
                502, "crono returned invalid JSON", {"args": args, "stdout": stdout}
            ) from exc

    async def run(self, args: list[str]) -> str:
        """Run a command and return its trimmed stdout."""
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.env,
            )
        except OSError as exc:
            raise CronoCommandError(
                500, f"Failed to execute crono: {exc}", {"args": args}
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        except TimeoutError as exc:
            process.kill()
            await process.wait()
            timeout_ms = int(self.timeout_seconds * 1000)
            raise CronoCommandError(
                504, f"crono command timed out after {timeout_ms}ms", {"args": args}
            ) from exc

        out = stdout.decode(errors="replace").strip()
        err = stderr.decode(errors="replace").strip()
        if process.returncode != 0:
            _logger.warning(
                "crono exited with %s: args=%s stderr=%s", process.returncode, args, err
            )
            raise CronoCommandError(
                502,
                "crono command failed",
                {
                    "args": args,
                    "exitCode": process.returncode,
                    "stdout": out,
                    "stderr": err,
                },
            )
        return out

    async def close(self) -> None:
        """Nothing to release; subprocesses are reaped per call."""
        return None


def build_date_args(date: str | None, range_expr: str | None) -> list[str]:
    """Return CLI date arguments; date and range are mutually exclusive."""
    date = (date or "").strip()
    range_expr = (range_expr or "").strip()
    if date and range_expr:
        raise InvalidRequestError("date and range are mutually exclusive")
    args: list[str] = []
    if date:
        args += ["--date", date]
    if range_expr:
        args += ["--range", range_expr]
    return args


def _export_args(
    export_type: str, date: str | None, range_expr: str | None, output_flag: str
) -> list[str]:
    if export_type not in EXPORT_TYPES:
        raise InvalidRequestError(f"Invalid export type: {export_type}")
    return ["export", export_type, *build_date_args(date, range_expr), output_flag]


def _as_rows(data: object) -> list[dict[str, object]]:
    if not data:
        return []
    if isinstance(data, list):
        return [row for row in data if isinstance(row, dict)]
    if isinstance(data, dict):
        return [data]
    return []
