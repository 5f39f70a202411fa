from __future__ import annotations

import logging

import psutil

from freespace_gui.exceptions import SampleFailure
from freespace_gui.models.disk import UsageSample

logger = logging.getLogger("freespace_gui.usage")


class UsageCollector:
    def sample(self, path: str) -> UsageSample | None:
        try:
            return self.query(path)
        except SampleFailure as e:
            logger.warning("Usage sampling failed: %s", e)
            return None

    def query(self, path: str) -> UsageSample:
        # psutil's "used" excludes root-reserved blocks; used is derived from total - free instead.
        try:
            u = psutil.disk_usage(path)
        except Exception as e:  # noqa: BLE001
            raise SampleFailure(f"{path}: {e}") from e

        total = int(u.total)
        free = int(u.free)
        if total < 0 or free < 0 or free > total:
            raise SampleFailure(f"{path}: inconsistent sizes total={total} free={free}")
        return UsageSample(total_bytes=total, free_bytes=free)
