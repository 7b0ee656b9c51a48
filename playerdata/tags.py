"""Structural parsing of NBT documents.

The tag tree itself is nbtlib's tag family: every node is an instance of one
of the classes in :data:`TAG_CLASS_MAP` and carries a numeric ``tag_id``.
This module turns raw (optionally gzipped) bytes into such a tree and offers a
few helpers to walk and summarise it.
"""
from __future__ import annotations

import gzip
import io
import logging
import struct
import zlib
from pathlib import Path
from typing import Any, Dict, Iterator, List as PyList, Tuple, Union

from nbtlib import (
    Byte,
    ByteArray,
    Compound,
    Double,
    File,
    Float,
    Int,
    IntArray,
    List as NbtList,
    Long,
    LongArray,
    Short,
    String,
)

from .errors import StructuralError

logger = logging.getLogger(__name__)

TAG_CLASS_MAP: Dict[str, Any] = {
    "Byte": Byte,
    "Short": Short,
    "Int": Int,
    "Long": Long,
    "Float": Float,
    "Double": Double,
    "String": String,
    "ByteArray": ByteArray,
    "IntArray": IntArray,
    "LongArray": LongArray,
    "Compound": Compound,
    "List": NbtList,
}

KIND_NAMES: Dict[int, str] = {cls.tag_id: name for name, cls in TAG_CLASS_MAP.items()}
KIND_NAMES[0] = "End"

NUMERIC_TYPES = (Byte, Short, Int, Long)
FLOAT_TYPES = (Float, Double)
ARRAY_TYPES = (ByteArray, IntArray, LongArray)

GZIP_MAGIC = b"\x1f\x8b"
MAX_DEPTH = 512

_FIXED_SIZES: Dict[int, int] = {
    Byte.tag_id: 1,
    Short.tag_id: 2,
    Int.tag_id: 4,
    Long.tag_id: 8,
    Float.tag_id: 4,
    Double.tag_id: 8,
}
_ARRAY_ITEM_SIZES: Dict[int, int] = {
    ByteArray.tag_id: 1,
    IntArray.tag_id: 4,
    LongArray.tag_id: 8,
}

TagPath = Tuple[Union[str, int], ...]


class _Scanner:
    """Walks an uncompressed document and checks every declared length.

    nbtlib reads a short numeric field as zero and builds lists of ``End``
    without consuming input, so a truncated or hostile document must be
    rejected before it reaches the parser.
    """

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def skip(self, size: int) -> None:
        if size > self.remaining:
            raise StructuralError(
                f"Unexpected end of document at byte {self.offset}: wanted {size} bytes, got {self.remaining}"
            )
        self.offset += size

    def unpack(self, fmt: str) -> int:
        size = struct.calcsize(fmt)
        start = self.offset
        self.skip(size)
        return struct.unpack_from(fmt, self.data, start)[0]

    def document(self) -> None:
        tag_id = self.unpack(">b")
        if tag_id != Compound.tag_id:
            raise StructuralError(
                f"Root tag must be a Compound, found {KIND_NAMES.get(tag_id, f'unknown tag id {tag_id}')}"
            )
        self.skip(self.unpack(">H"))
        self.payload(tag_id, 0)

    def payload(self, tag_id: int, depth: int) -> None:
        if depth > MAX_DEPTH:
            raise StructuralError(f"Tags nested deeper than {MAX_DEPTH} levels")
        if tag_id in _FIXED_SIZES:
            self.skip(_FIXED_SIZES[tag_id])
        elif tag_id == String.tag_id:
            self.skip(self.unpack(">H"))
        elif tag_id in _ARRAY_ITEM_SIZES:
            self.skip(self._length() * _ARRAY_ITEM_SIZES[tag_id])
        elif tag_id == NbtList.tag_id:
            subtype = self.unpack(">b")
            length = self._length()
            if subtype == 0:
                if length:
                    raise StructuralError(f"List of End declares {length} elements")
                return
            if subtype not in KIND_NAMES:
                raise StructuralError(f"Unknown tag id {subtype} in list")
            # Every element other than End takes at least one byte.
            if length > self.remaining:
                raise StructuralError(f"List declares {length} elements but only {self.remaining} bytes remain")
            for _ in range(length):
                self.payload(subtype, depth + 1)
        elif tag_id == Compound.tag_id:
            child_id = self.unpack(">b")
            while child_id != 0:
                if child_id not in KIND_NAMES:
                    raise StructuralError(f"Unknown tag id {child_id} at byte {self.offset - 1}")
                self.skip(self.unpack(">H"))
                self.payload(child_id, depth + 1)
                child_id = self.unpack(">b")
        else:
            raise StructuralError(f"Unknown tag id {tag_id}")

    def _length(self) -> int:
        length = self.unpack(">i")
        if length < 0:
            raise StructuralError(f"Negative length {length} at byte {self.offset - 4}")
        return length


def _decompress(data: bytes) -> bytes:
    if not data.startswith(GZIP_MAGIC):
        return data
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise StructuralError(f"Corrupt gzip stream: {exc}") from exc


def parse_document(data: bytes) -> Tuple[str, Compound]:
    """Parse a player document into ``(root_name, root_compound)``.

    Raises :class:`StructuralError` if the bytes are not a complete NBT
    document with a compound root.
    """
    if not data:
        raise StructuralError("Empty document")
    payload = _decompress(data)
    _Scanner(payload).document()
    try:
        document = File.parse(io.BytesIO(payload), "big")
    except Exception as exc:  # noqa: BLE001
        raise StructuralError(f"Malformed NBT payload: {exc}") from exc

    logger.debug("Parsed document %r with %d top-level entries", document.root_name, len(document))
    return document.root_name, document


def load_document(path: Union[str, Path]) -> Tuple[str, Compound]:
    with open(path, "rb") as handle:
        data = handle.read()
    return parse_document(data)


# -----------------------------------------------------------------------------
# Tree inspection
# -----------------------------------------------------------------------------


def kind_name(tag: Any) -> str:
    return KIND_NAMES.get(getattr(tag, "tag_id", -1), type(tag).__name__)


def walk(tag: Any, path: TagPath = ()) -> Iterator[Tuple[TagPath, Any]]:
    """Yield ``(path, tag)`` for every descendant of ``tag``, depth first."""
    if isinstance(tag, Compound):
        for key, value in tag.items():
            child_path = path + (key,)
            yield child_path, value
            yield from walk(value, child_path)
    elif isinstance(tag, NbtList):
        for index, value in enumerate(tag):
            child_path = path + (index,)
            yield child_path, value
            yield from walk(value, child_path)


def format_path(path: TagPath) -> str:
    parts: PyList[str] = []
    for element in path:
        if isinstance(element, int):
            if parts:
                parts[-1] += f"[{element}]"
            else:
                parts.append(f"[{element}]")
        else:
            parts.append(element if not parts else f".{element}")
    return "".join(parts)


def format_value(tag: Any) -> str:
    if isinstance(tag, Compound):
        return f"{len(tag)} entries"
    if isinstance(tag, NbtList):
        subtype = getattr(tag, "subtype", None)
        subtype_name = KIND_NAMES.get(getattr(subtype, "tag_id", 0), "End")
        subtype_text = f" of {subtype_name}" if subtype_name != "End" else ""
        return f"{len(tag)} items{subtype_text}"
    if isinstance(tag, ARRAY_TYPES):
        return f"{len(tag)} values"
    if isinstance(tag, NUMERIC_TYPES):
        return str(int(tag))
    if isinstance(tag, FLOAT_TYPES):
        return str(float(tag))
    if isinstance(tag, String):
        text = str(tag)
        return text if len(text) <= 40 else text[:37] + "…"
    return str(tag)
