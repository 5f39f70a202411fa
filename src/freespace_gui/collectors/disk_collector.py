from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from freespace_gui.collectors.mount_collector import MountCollector
from freespace_gui.collectors.usage_collector import UsageCollector
from freespace_gui.models.common import CollectorResult
from freespace_gui.models.disk import DiskRecord, DiskSnapshot, MountRecord, UsageSample

logger = logging.getLogger("freespace_gui.disks")


class DiskCollector:
    def __init__(
        self,
        mounts: MountCollector | None = None,
        usage: UsageCollector | None = None,
        max_workers: int = 4,
    ) -> None:
        self.mounts = mounts or MountCollector()
        self.usage = usage or UsageCollector()
        self.max_workers = max(1, int(max_workers))

    def collect(self) -> CollectorResult[DiskSnapshot]:
        ts = datetime.now()
        snapshot = self.build_snapshot()
        warnings = list(snapshot.notes)
        return CollectorResult(
            ts=ts,
            status="OK" if not warnings else "WARN",
            warning_count=len(warnings),
            warnings=warnings,
            data=snapshot,
        )

    def build_snapshot(self) -> DiskSnapshot:
        mounts = self.mounts.list_mounts()
        if not mounts:
            logger.info("No mounts enumerated")
            return DiskSnapshot(disks=(), notes=[])

        workers = min(self.max_workers, len(mounts))
        with ThreadPoolExecutor(max_workers=workers) as ex:
            # map() yields in submission order whatever the completion order
            samples = list(ex.map(self._sample, mounts))

        disks: list[DiskRecord] = []
        notes: list[str] = []
        for mount, sample in zip(mounts, samples):
            if sample is None:
                notes.append(f"Usage unavailable: {mount.path} ({mount.device})")
                continue
            disks.append(DiskRecord.from_sample(mount, sample))

        logger.debug("Snapshot built: %d of %d mounts sampled", len(disks), len(mounts))
        return DiskSnapshot(disks=tuple(disks), notes=notes)

    def _sample(self, mount: MountRecord) -> UsageSample | None:
        return self.usage.sample(mount.path)
