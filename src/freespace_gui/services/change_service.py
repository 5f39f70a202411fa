from __future__ import annotations

from collections.abc import Sequence

from freespace_gui.models.disk import DiskRecord

# Used-space swings up to 100 MB (temp file churn) do not warrant a re-render.
CHANGE_THRESHOLD_BYTES = 100_000_000


def has_significant_change(
    previous: Sequence[DiskRecord] | None,
    current: Sequence[DiskRecord],
    forced: bool = False,
) -> bool:
    if forced or previous is None or len(previous) != len(current):
        return True

    for old, new in zip(previous, current):
        if old.path != new.path:
            return True
        if abs(old.used_bytes - new.used_bytes) > CHANGE_THRESHOLD_BYTES:
            return True
    return False
