"""Packet id allocation for server-originated requests."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class PacketIdAllocator:
    """Hands out packet ids cycling through [1, max_packet_id]; 0 is never issued."""

    max_packet_id: int = 65535
    _last: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_packet_id < 1:
            raise ValueError("max_packet_id must be >= 1")

    def next(self) -> int:
        self._last = self._last % self.max_packet_id + 1
        return self._last

    @property
    def last(self) -> int:
        return self._last
