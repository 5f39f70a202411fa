from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MountRecord:
    path: str
    device: str


@dataclass(frozen=True)
class UsageSample:
    total_bytes: int
    free_bytes: int

    @property
    def used_bytes(self) -> int:
        return self.total_bytes - self.free_bytes


@dataclass(frozen=True)
class DiskRecord:
    path: str
    device: str
    total_bytes: int
    free_bytes: int
    used_bytes: int

    @classmethod
    def from_sample(cls, mount: MountRecord, sample: UsageSample) -> "DiskRecord":
        return cls(
            path=mount.path,
            device=mount.device,
            total_bytes=sample.total_bytes,
            free_bytes=sample.free_bytes,
            used_bytes=sample.used_bytes,
        )

    @property
    def used_fraction(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.used_bytes / self.total_bytes


@dataclass(frozen=True)
class DiskSnapshot:
    """One sampling pass, in mount enumeration order."""

    disks: tuple[DiskRecord, ...]
    notes: list[str] = field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        return [d.path for d in self.disks]
