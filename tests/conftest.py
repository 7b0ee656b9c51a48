"""Shared fixtures for the player data tests."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import base64
import gzip
import io
import json
import struct
from typing import Any, Dict, Optional

import pytest
from nbtlib import Byte, Compound, Double, Int, List as NbtList, Short


def encode_document(root: Compound, name: str = "", *, gzipped: bool = False) -> bytes:
    """Serialise ``root`` as a named compound document."""
    encoded_name = name.encode("utf-8")
    buffer = io.BytesIO()
    buffer.write(struct.pack(">bH", 10, len(encoded_name)))
    buffer.write(encoded_name)
    root.write(buffer, "big")
    data = buffer.getvalue()
    return gzip.compress(data) if gzipped else data


def item_tag(item_id: int, damage: int, count: int, slot: int) -> Compound:
    return Compound(
        {
            "id": Short(item_id),
            "Damage": Short(damage),
            "Count": Byte(count),
            "Slot": Byte(slot),
        }
    )


def profile_payload(name: str, skin_url: Optional[str] = None) -> Dict[str, Any]:
    textures: Dict[str, Any] = {}
    if skin_url is not None:
        textures["SKIN"] = {"url": skin_url}
    inner = json.dumps({"timestamp": 0, "profileName": name, "textures": textures})
    value = base64.b64encode(inner.encode("utf-8")).decode("ascii")
    return {"id": "0" * 32, "name": name, "properties": [{"name": "textures", "value": value}]}


@pytest.fixture
def player_root() -> Compound:
    return Compound(
        {
            "Health": Short(18),
            "Air": Short(300),
            "foodLevel": Int(17),
            "Dimension": Int(-1),
            "Pos": NbtList[Double]([Double(12.5), Double(64.0), Double(-3.25)]),
            "SpawnX": Int(100),
            "SpawnY": Int(70),
            "SpawnZ": Int(-200),
            "XpLevel": Int(5),
            "XpTotal": Int(112),
            "Inventory": NbtList[Compound](
                [
                    item_tag(1, 0, 64, 0),
                    item_tag(276, 3, 1, 1),
                    item_tag(310, 0, 1, 103),
                ]
            ),
        }
    )


@pytest.fixture
def player_bytes(player_root: Compound) -> bytes:
    return encode_document(player_root, gzipped=True)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch) -> None:
    for name in ("PLAYERDATA_SKIN_HOST", "PLAYERDATA_SESSION_HOST", "PLAYERDATA_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
