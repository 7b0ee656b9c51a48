"""Defaulting, kind-checked reads over an NBT tag tree.

Player files come from many format versions, so any field may be missing or
stored as a different tag kind. None of these accessors raise: a missing node
and a node of the wrong kind both produce the caller's fallback.
"""
from __future__ import annotations

from typing import Any, Optional, TypeVar

from nbtlib import Byte, Compound, Double, Int, List as NbtList, Long, Short, String

T = TypeVar("T")


def is_kind(node: Any, kind: Any) -> bool:
    """Return ``True`` if ``node`` is a tag of exactly ``kind``."""
    return node is not None and getattr(node, "tag_id", None) == kind.tag_id


def child(node: Any, name: str) -> Optional[Any]:
    if not is_kind(node, Compound):
        return None
    return node.get(name)


def indexed(node: Any, index: int) -> Optional[Any]:
    if not is_kind(node, NbtList):
        return None
    if index < 0 or index >= len(node):
        return None
    return node[index]


def child_of(node: Any, name: str, kind: Any) -> Optional[Any]:
    """Return the named child only if it is of ``kind``."""
    value = child(node, name)
    return value if is_kind(value, kind) else None


def as_byte(node: Any, default: T) -> Any:
    return int(node) if is_kind(node, Byte) else default


def as_short(node: Any, default: T) -> Any:
    return int(node) if is_kind(node, Short) else default


def as_int(node: Any, default: T) -> Any:
    return int(node) if is_kind(node, Int) else default


def as_long(node: Any, default: T) -> Any:
    return int(node) if is_kind(node, Long) else default


def as_double(node: Any, default: T) -> Any:
    return float(node) if is_kind(node, Double) else default


def as_string(node: Any, default: T) -> Any:
    return str(node) if is_kind(node, String) else default
