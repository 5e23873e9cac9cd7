"""Records describing the buildings placed on a player's map."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..tables import ItemInfo

__all__ = [
    "DECORATE_BUILDING",
    "AMUSEMENT_BUILDING",
    "PRODUCTION_BUILDING",
    "OCCUP_BUILDING",
    "BUILDING_TYPES",
    "BUILD_ITEMTYPE_MINJU",
    "BUILD_ITEMTYPE_CAP",
    "SPEEDUP_WATCH_VIDEO",
    "SPEEDUP_GOLD",
    "SPEEDUP_CARD",
    "RELEASE_BUILDING",
    "RELEASE_PRODUCE",
    "RELEASE_LEVELUP",
    "RELEASE_EXPLORE",
    "OCCUPIER_SLOTS",
    "PosInfo",
    "BuildingPos",
    "BuildingInfo",
    "HeroSite",
]

# Title types: which family of building a configuration belongs to.
DECORATE_BUILDING = 1
AMUSEMENT_BUILDING = 2
PRODUCTION_BUILDING = 3
OCCUP_BUILDING = 4
BUILDING_TYPES = (DECORATE_BUILDING, AMUSEMENT_BUILDING, PRODUCTION_BUILDING, OCCUP_BUILDING)

#: Item type of dwellings, which produce on their own once built.
BUILD_ITEMTYPE_MINJU = 52
#: Item type of warehouses, which raise the resource capacity.
BUILD_ITEMTYPE_CAP = 54

# Ways of paying for a speed-up.
SPEEDUP_WATCH_VIDEO = 1
SPEEDUP_GOLD = 2
SPEEDUP_CARD = 3

# Which piece of work workers are released from.
RELEASE_BUILDING = 1
RELEASE_PRODUCE = 2
RELEASE_LEVELUP = 3
RELEASE_EXPLORE = 4

#: Number of occupier slots a new building starts with.
OCCUPIER_SLOTS = 5


@dataclass
class PosInfo:
    """A tile position on the map and the direction the building faces."""

    pos_x: int = 0
    pos_y: int = 0
    direct: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"PosX": self.pos_x, "PoxY": self.pos_y, "Direct": self.direct}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> PosInfo:
        data = data or {}
        return cls(
            pos_x=int(data.get("PosX", 0)),
            pos_y=int(data.get("PoxY", 0)),
            direct=int(data.get("Direct", 0)),
        )


@dataclass
class BuildingPos:
    """The configuration id of a building and where it stands."""

    id: int
    pos: PosInfo


def _items_to_list(items: list[ItemInfo]) -> list[dict[str, int]]:
    return [{"ItemId": i.item_id, "Count": i.count} for i in items]


def _items_from_list(raw: Any) -> list[ItemInfo]:
    return [ItemInfo(int(i.get("ItemId", 0)), int(i.get("Count", 0))) for i in raw or []]


@dataclass
class BuildingInfo:
    """One building on the map.

    A completion time of 0 means that piece of work is not running.
    """

    id: int = 0
    uid: int = 0
    pos: PosInfo = field(default_factory=PosInfo)
    builder: int = 0
    award_end_time: int = 0
    occupiers: list[int] = field(default_factory=lambda: [0] * OCCUPIER_SLOTS)
    builder_people: list[int] = field(default_factory=list)
    build_completed_time: int = 0
    produce_completed_time: int = 0
    up_level_completed_time: int = 0
    awards: list[ItemInfo] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """The stored form; zero and empty optional fields are left out."""
        data: dict[str, Any] = {"Id": self.id, "Uid": self.uid, "Pos": self.pos.to_dict()}
        optional = (
            ("builders", self.builder),
            ("awardendtime", self.award_end_time),
            ("occupies", list(self.occupiers)),
            ("builderPeople", list(self.builder_people)),
            ("buildCompletedTime", self.build_completed_time),
            ("produceCompletedTime", self.produce_completed_time),
            ("upLevelCompletedTime", self.up_level_completed_time),
            ("awards", _items_to_list(self.awards)),
        )
        data.update((key, value) for key, value in optional if value)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BuildingInfo:
        """Rebuild a building from its stored form."""
        return cls(
            id=int(data.get("Id", 0)),
            uid=int(data.get("Uid", 0)),
            pos=PosInfo.from_dict(data.get("Pos")),
            builder=int(data.get("builders", 0)),
            award_end_time=int(data.get("awardendtime", 0)),
            occupiers=[int(v) for v in data.get("occupies") or []],
            builder_people=[int(v) for v in data.get("builderPeople") or []],
            build_completed_time=int(data.get("buildCompletedTime", 0)),
            produce_completed_time=int(data.get("produceCompletedTime", 0)),
            up_level_completed_time=int(data.get("upLevelCompletedTime", 0)),
            awards=_items_from_list(data.get("awards")),
        )


@dataclass
class HeroSite:
    """A hero placed at a numbered site."""

    hero_id: int = 0
    site: int = 0