from __future__ import annotations

import pytest

from freespace_gui.models.disk import DiskRecord
from helpers import GB, make_disk


@pytest.fixture
def two_disks() -> tuple[DiskRecord, ...]:
    return (
        make_disk("/", used=50 * GB, total=100 * GB, device="/dev/sda1"),
        make_disk("/data", used=10 * GB, total=500 * GB, device="/dev/sdb1"),
    )
