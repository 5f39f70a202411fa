from __future__ import annotations

from collections.abc import Iterable

from freespace_gui.models.disk import DiskRecord
from freespace_gui.models.preferences import Preferences


def apply_policy(disks: Iterable[DiskRecord], prefs: Preferences) -> tuple[DiskRecord, ...]:
    """Drop hidden mounts and move the main mount to the front.

    A two-way stable partition: apart from the main mount, records keep
    their enumeration order.
    """
    main: list[DiskRecord] = []
    rest: list[DiskRecord] = []
    for d in disks:
        if prefs.is_hidden(d.path):
            continue
        if d.path == prefs.main_mount_point:
            main.append(d)
        else:
            rest.append(d)
    return tuple(main + rest)


def pick_main_disk(visible: tuple[DiskRecord, ...], prefs: Preferences) -> DiskRecord | None:
    for d in visible:
        if d.path == prefs.main_mount_point:
            return d
    return visible[0] if visible else None
