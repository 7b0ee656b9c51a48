"""Player entity and its decoder.

A player file is a compound of loosely typed fields. Decoding is a single pass
through :mod:`playerdata.fields`, so a missing or mistyped field falls back to
its documented default instead of failing the whole player.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath
from typing import Any, Dict, NamedTuple, Optional, Tuple, Union

from nbtlib import Compound, List as NbtList

from . import fields
from .tags import load_document, parse_document

logger = logging.getLogger(__name__)

MAX_HEALTH = 20
MAX_FOOD = 20
MAX_AIR = 300

SPECIAL_SLOT_NAMES: Dict[int, str] = {
    100: "Boots",
    101: "Leggings",
    102: "Chestplate",
    103: "Helmet",
    150: "Offhand",
}


class Dimension(str, Enum):
    OVERWORLD = "overworld"
    NETHER = "nether"
    END = "end"


DIMENSION_CODES: Dict[int, Dimension] = {
    0: Dimension.OVERWORLD,
    1: Dimension.END,
    -1: Dimension.NETHER,
}


class Vector3d(NamedTuple):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Vector3i(NamedTuple):
    x: int
    y: int
    z: int


@dataclass(frozen=True)
class Item:
    """One inventory stack."""

    item_id: int
    damage: int
    count: int
    slot: int

    @property
    def slot_name(self) -> str:
        # Slots above 127 are stored as negative bytes.
        slot = self.slot % 256
        return SPECIAL_SLOT_NAMES.get(slot, f"Slot {slot}")

    @classmethod
    def from_tag(cls, tag: Any) -> Optional["Item"]:
        """Build an item from an inventory entry, or ``None`` if it is incomplete."""
        item_id = fields.as_short(fields.child(tag, "id"), None)
        damage = fields.as_short(fields.child(tag, "Damage"), None)
        count = fields.as_byte(fields.child(tag, "Count"), None)
        slot = fields.as_byte(fields.child(tag, "Slot"), None)
        if item_id is None or damage is None or count is None or slot is None:
            return None
        return cls(item_id=item_id, damage=damage, count=count, slot=slot)


def identity_from_filename(filename: Union[str, PurePath]) -> Tuple[str, Optional[str]]:
    """Return ``(uuid, name)`` seeded from a player file name.

    ``Notch.dat`` is a legacy account whose name doubles as its identity.
    ``069a79f4-44e9-4726-a5be-fca90e38aaf5.dat`` is an online account: the
    hyphens are dropped and the name stays unknown until the profile is
    resolved.
    """
    basename = PurePath(filename).name
    token, dot, _ = basename.rpartition(".")
    if not dot:
        token = basename
    if not token:
        raise ValueError(f"Cannot derive a player identity from {str(filename)!r}")
    if "-" in token:
        return token.replace("-", ""), None
    return token, token


@dataclass(frozen=True)
class Player:
    uuid: str
    name: Optional[str] = None
    skin_url: Optional[str] = None
    dimension: Dimension = Dimension.OVERWORLD
    position: Vector3d = Vector3d()
    spawn: Optional[Vector3i] = None
    health: int = 0
    food: int = 0
    air: int = 0
    xp_level: int = 0
    xp_total: int = 0
    inventory: Tuple[Item, ...] = ()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_compound(cls, root: Compound, name: str, uuid: Optional[str] = None) -> "Player":
        """Decode an already parsed compound for a player known by ``name``.

        Without an explicit ``uuid`` the name is used as the identity, which
        makes the player an offline account.
        """
        return cls._decode(root, uuid=uuid if uuid is not None else name, name=name)

    @classmethod
    def from_bytes(cls, data: bytes, filename: Union[str, PurePath]) -> "Player":
        uuid, name = identity_from_filename(filename)
        _, root = parse_document(data)
        return cls._decode(root, uuid=uuid, name=name)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Player":
        path = Path(path)
        logger.info("Loading player from %s", path.resolve())
        uuid, name = identity_from_filename(path)
        _, root = load_document(path)
        return cls._decode(root, uuid=uuid, name=name)

    @classmethod
    def _decode(cls, root: Compound, *, uuid: str, name: Optional[str]) -> "Player":
        dimension_code = fields.as_int(fields.child(root, "Dimension"), 0)
        inventory = _read_inventory(fields.child(root, "Inventory"))
        logger.debug("Decoded player %s with %d inventory items", uuid, len(inventory))
        return cls(
            uuid=uuid,
            name=name,
            dimension=DIMENSION_CODES.get(dimension_code, Dimension.OVERWORLD),
            position=_read_position(fields.child(root, "Pos")),
            spawn=_read_spawn(root),
            health=fields.as_short(fields.child(root, "Health"), 0),
            food=fields.as_int(fields.child(root, "foodLevel"), 0),
            air=fields.as_short(fields.child(root, "Air"), 0),
            xp_level=fields.as_int(fields.child(root, "XpLevel"), 0),
            xp_total=fields.as_int(fields.child(root, "XpTotal"), 0),
            inventory=inventory,
        )

    # ------------------------------------------------------------------
    # Profile enrichment
    # ------------------------------------------------------------------
    @property
    def is_offline(self) -> bool:
        return self.uuid == self.name

    def with_profile(self, name: Optional[str], skin_url: Optional[str]) -> "Player":
        return dataclasses.replace(self, name=name, skin_url=skin_url)

    def to_dict(self) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        data["dimension"] = self.dimension.value
        data["position"] = list(self.position)
        data["spawn"] = list(self.spawn) if self.spawn is not None else None
        data["inventory"] = [
            dict(entry, slot_name=item.slot_name)
            for entry, item in zip(data["inventory"], self.inventory)
        ]
        return data


def _read_position(pos: Any) -> Vector3d:
    x = fields.as_double(fields.indexed(pos, 0), None)
    y = fields.as_double(fields.indexed(pos, 1), None)
    z = fields.as_double(fields.indexed(pos, 2), None)
    if x is None or y is None or z is None:
        return Vector3d()
    return Vector3d(x, y, z)


def _read_spawn(root: Compound) -> Optional[Vector3i]:
    x = fields.as_int(fields.child(root, "SpawnX"), None)
    y = fields.as_int(fields.child(root, "SpawnY"), None)
    z = fields.as_int(fields.child(root, "SpawnZ"), None)
    if x is None or y is None or z is None:
        return None
    return Vector3i(x, y, z)


def _read_inventory(inventory: Any) -> Tuple[Item, ...]:
    if not fields.is_kind(inventory, NbtList):
        return ()
    items = []
    for entry in inventory:
        item = Item.from_tag(entry)
        if item is not None:
            items.append(item)
    return tuple(items)
