"""Helpers for encoding/decoding controller protocol frames."""

from .codec import FrameCodec, FrameError, RawFrame
from .packets import PacketIdAllocator

__all__ = ["FrameCodec", "FrameError", "PacketIdAllocator", "RawFrame"]
