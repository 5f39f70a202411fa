from __future__ import annotations

from freespace_gui.models.disk import DiskRecord

GB = 1_000_000_000


def make_disk(path: str, used: int, total: int, device: str | None = None) -> DiskRecord:
    return DiskRecord(
        path=path,
        device=device or f"/dev/{path.strip('/') or 'root'}",
        total_bytes=total,
        free_bytes=total - used,
        used_bytes=used,
    )
