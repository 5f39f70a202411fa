from __future__ import annotations

import json
import logging
import subprocess
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from freespace_gui.exceptions import DeviceResolutionFailure, EnumerationFailure
from freespace_gui.models.disk import MountRecord

logger = logging.getLogger("freespace_gui.mounts")

FSTAB_QUERY = ["findmnt", "--fstab", "--json", "--types=swap", "--invert", "--output=SOURCE,TARGET"]


def _live_query(path: str) -> list[str]:
    return ["findmnt", "--json", "--output=SOURCE", "--", path]


def _parse_filesystems(out: str) -> list[dict[str, Any]]:
    try:
        obj = json.loads(out)
    except ValueError as e:
        raise EnumerationFailure(f"findmnt returned invalid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise EnumerationFailure("findmnt output is not an object")
    rows = obj.get("filesystems")
    if not isinstance(rows, list):
        raise EnumerationFailure("findmnt output has no 'filesystems' list")
    return [r for r in rows if isinstance(r, dict)]


class MountCollector:
    def __init__(self, command_timeout_s: float = 5.0, max_workers: int = 4) -> None:
        self.command_timeout_s = float(command_timeout_s)
        self.max_workers = max(1, int(max_workers))

    def list_mounts(self) -> list[MountRecord]:
        try:
            static = self._static_table()
        except EnumerationFailure as e:
            logger.error("Mount enumeration failed: %s", e)
            return []

        if not static:
            return []

        workers = min(self.max_workers, len(static))
        with ThreadPoolExecutor(max_workers=workers) as ex:
            devices = list(ex.map(self._resolve_or_fallback, static))

        return [MountRecord(path=target, device=device) for (target, _source), device in zip(static, devices)]

    def resolve_device(self, path: str) -> str:
        try:
            out = self._run(_live_query(path))
            rows = _parse_filesystems(out)
        except EnumerationFailure as e:
            raise DeviceResolutionFailure(f"{path}: {e}") from e
        if not rows:
            raise DeviceResolutionFailure(f"{path}: not in the live mount table")
        source = rows[0].get("source")
        if not source:
            raise DeviceResolutionFailure(f"{path}: live mount table has no source")
        return str(source)

    def _resolve_or_fallback(self, entry: tuple[str, str]) -> str:
        target, source = entry
        try:
            return self.resolve_device(target)
        except DeviceResolutionFailure as e:
            logger.debug("Device resolution failed, using fstab source %r: %s", source, e)
            return source

    def _static_table(self) -> list[tuple[str, str]]:
        rows = _parse_filesystems(self._run(FSTAB_QUERY))
        seen: set[str] = set()
        out: list[tuple[str, str]] = []
        for r in rows:
            target = r.get("target")
            if not target or target in seen:
                continue
            seen.add(str(target))
            out.append((str(target), str(r.get("source") or "")))
        return out

    def _run(self, cmd: list[str]) -> str:
        try:
            res = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.command_timeout_s,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise EnumerationFailure(f"{' '.join(cmd)} failed: {e}") from e
        if res.returncode != 0:
            err = (res.stderr or "").strip()
            raise EnumerationFailure(f"{' '.join(cmd)} exited with {res.returncode}: {err}")
        return res.stdout
