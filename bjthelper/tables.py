"""Configuration table records for the city-building game."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import Any, TypeVar

__all__ = [
    "ItemInfo",
    "PropInfo",
    "ItemType",
    "WorkType",
    "BuildNumConditionCfg",
    "BuildCfg",
    "BuildingModelCfg",
    "StorageCfg",
    "AreaCfg",
    "AreaOpenCostCfg",
    "MapCfg",
    "HappinessCfg",
    "HeroCfg",
    "HeroStarCfg",
    "GeniusCfg",
    "HeroLevelProp",
    "HeroMaxCfg",
    "HeroPropertyCfg",
    "HeroPropGeniusCfg",
    "GridMap",
    "AreaMapCfg",
    "MapLayoutCfg",
    "NpcCfg",
    "HelperConf",
    "set_count_item",
    "item_id",
]

_R = TypeVar("_R", bound="_Row")


def _col(name: str, default: Any = None, factory: Any = None) -> Any:
    meta = {"col": name}
    if factory is not None:
        return field(default_factory=factory, metadata=meta)
    return field(default=default, metadata=meta)


class _Row:
    """Mixin that builds a record from a table row keyed by column name."""

    @classmethod
    def from_row(cls: type[_R], row: Mapping[str, Any]) -> _R:
        kwargs = {}
        for f in fields(cls):  # type: ignore[arg-type]
            column = f.metadata.get("col", f.name)
            if column in row:
                kwargs[f.name] = row[column]
        return cls(**kwargs)


@dataclass
class ItemInfo:
    """An item id together with a count."""

    item_id: int = 0
    count: int = 0


@dataclass
class PropInfo:
    """A key/value property pair."""

    k: int = 0
    v: int = 0


class ItemType(IntEnum):
    """Items with a special meaning whose ids the host game may remap."""

    QUICK_CARD = 27
    HAPPINESS = 11


_item_ids: dict[ItemType, int] = {kind: int(kind) for kind in ItemType}


def set_count_item(item_type: int, new_item: int) -> None:
    """Remap a special item to another id, for when the host game's ids clash."""
    try:
        kind = ItemType(item_type)
    except ValueError:
        return
    _item_ids[kind] = new_item


def item_id(item_type: int) -> int:
    """Return the id currently used for a special item."""
    return _item_ids[ItemType(item_type)]


class WorkType(IntEnum):
    """Kinds of work a hero can do; DEFAULT matches any work."""

    DEFAULT = 0
    CREATE_BUILDING = 1
    UP_BUILDING = 2
    WORKING = 3
    EXPLORE_PVE = 4
    EXPLORE_NEW = 5
    REPAIR_BUILDING = 6


@dataclass
class BuildNumConditionCfg(_Row):
    id: int = _col("id", 0)
    build_type: int = _col("buildType", 0)
    name: str = _col("name", "")
    max_build_num: int = _col("maxBulidNum", 0)
    build_num: int = _col("buildNum", 0)
    num_unlock_condition: str = _col("numUnlockCondition", "")
    lock_info: str = _col("lockInfo", "")
    npc: list[int] = _col("npc", factory=list)


@dataclass
class BuildCfg(_Row):
    id: int = _col("id", 0)
    city: int = _col("city", 0)
    name: str = _col("name", "")
    level: int = _col("level", 0)
    max_level: int = _col("maxLevel", 0)
    icon: str = _col("icon", "")
    normal_model: int = _col("normalModel", 0)
    base_model: str = _col("baceModel", "")
    title_type: int = _col("titleType", 0)
    work_type: int = _col("workType", 0)
    item_type: int = _col("buildType", 0)
    building_model: str = _col("buildingModel", "")
    work_model: str = _col("workModel", "")
    work_out_model: str = _col("workOutModel", "")
    if_touch: int = _col("ifTouch", 0)
    if_move: int = _col("ifMove", 0)
    info: str = _col("info", "")
    special_picture: str = _col("specialPicture", "")
    lock_info: str = _col("lockInfo", "")
    unbuild_info: str = _col("unbulidInfo", "")
    work_icon: int = _col("workIcon", 0)
    build_info: str = _col("bulidInfo", "")
    unlock_condition: list = _col("unLockCondition", factory=list)
    build_condition: list = _col("buildCondition", factory=list)
    levelup_condition: list = _col("levelupCondition", factory=list)
    levelup_info: str = _col("levelupInfo", "")
    need_hero: int = _col("needHero", 0)
    people_num: int = _col("peopleNum", 0)
    build_time: int = _col("buildTime", 0)
    build_cost: list[ItemInfo] = _col("buildCost", factory=list)
    build_value: list[ItemInfo] = _col("buildValue", factory=list)
    build_exp: int = _col("bulidExp", 0)
    work_hero: int = _col("workHero", 0)
    work_people_num: int = _col("workPeopleNum", 0)
    work_time: int = _col("workTime", 0)
    work_cost: list[ItemInfo] = _col("workCost", factory=list)
    work_out: list[ItemInfo] = _col("workOut", factory=list)
    work_hero_exp: int = _col("workHeroExp", 0)
    moving_operate: str = _col("movingOperate", "")
    house_work_speed: ItemInfo = _col("houseWorkSpeed", factory=ItemInfo)
    house_people_num: int = _col("housePeopleNum", 0)
    gold_cost: ItemInfo = _col("goldCost", factory=ItemInfo)


@dataclass
class BuildingModelCfg(_Row):
    model_id: int = _col("modelId", 0)
    name: str = _col("name", "")
    build_id: int = _col("buildId", 0)
    size: list[int] = _col("size", factory=list)
    scale: str = _col("sacle", "")
    res: str = _col("res", "")
    rect: list[int] = _col("rect", factory=list)


@dataclass
class StorageCfg(_Row):
    """Warehouse capacity per building level."""

    id: int = _col("id", 0)
    build_type: int = _col("buildType", 0)
    desc: str = _col("desc", "")
    info: str = _col("info", "")
    storage_limit: list[int] = _col("storageLimit", factory=list)


@dataclass
class AreaCfg(_Row):
    id: int = _col("id", 0)
    city: int = _col("city", 0)
    area: str = _col("area", "")
    info: str = _col("info", "")
    area_build: str = _col("areaBuild", "")
    area_stage: list[PropInfo] = _col("areaStage", factory=list)
    nearby_area: str = _col("nearbyArea", "")


@dataclass
class AreaOpenCostCfg(_Row):
    id: int = _col("id", 0)
    city: int = _col("city", 0)
    open_num: int = _col("areaOpenNum", 0)
    unlock_condition: list = _col("unLockCondition", factory=list)
    need_hero: int = _col("needHero", 0)
    people_num: int = _col("peopleNum", 0)
    use_time: int = _col("time", 0)
    cost: list[ItemInfo] = _col("cost", factory=list)
    gold: list[ItemInfo] = _col("gold", factory=list)
    hero_exp: int = _col("reward", 0)


@dataclass
class MapCfg(_Row):
    id: int = _col("id", 0)
    name: str = _col("name", "")
    res: str = _col("res", "")
    condition: str = _col("condition", "")


@dataclass
class HappinessCfg(_Row):
    id: int = _col("id", 0)
    happiness_level: int = _col("happinessLevel", 0)
    happiness: int = _col("happiness", 0)


@dataclass
class HeroCfg(_Row):
    id: int = _col("heroId", 0)
    name: str = _col("name", "")
    head: int = _col("head", 0)
    draw_spine: str = _col("picture", "")
    model: int = _col("model", 0)
    scale: float = _col("scale", 0.0)
    quality: int = _col("type", 0)
    max_level: int = _col("maxLevel", 0)
    min_star: int = _col("minStar", 0)
    max_star: int = _col("maxStar", 0)
    recovery_reward: list[ItemInfo] = _col("recoveryReward", factory=list)
    hero_text: str = _col("heroText", "")
    prop1: str = _col("prop1", "")
    prop2: str = _col("prop2", "")
    prop3: str = _col("prop3", "")
    prop4: str = _col("prop4", "")
    prop5: str = _col("prop5", "")
    love_item: list[int] = _col("loveItem", factory=list)
    house_info: str = _col("houseInfo", "")


@dataclass
class HeroStarCfg(_Row):
    """Star level of a hero; id is hero id * 100 + star."""

    id: int = _col("id", 0)
    hero_id: int = _col("heroId", 0)
    name: str = _col("name", "")
    star_id: int = _col("star", 0)
    star_up_cost: list[ItemInfo] = _col("starUpCost", factory=list)
    genius_name: str = _col("geniusName", "")
    genius_info: str = _col("info", "")
    genius_ids: list[int] = _col("geniusId", factory=list)


@dataclass
class GeniusCfg(_Row):
    """A hero talent: a condition and an effect on some kind of work."""

    id: int = _col("id", 0)
    genius_explain: str = _col("geniusExplain", "")
    work_type: WorkType = _col("workType", WorkType.DEFAULT)
    work_cond_id: int = _col("effectiveType", 0)
    work_cond: str = _col("effectiveValue", "")
    effect_id: int = _col("geniusType", 0)
    effect_value: str = _col("value", "")

    def __post_init__(self) -> None:
        self.work_type = WorkType(self.work_type)


@dataclass
class HeroLevelProp(_Row):
    """Level properties of a hero; id is hero id * 100 + level."""

    id: int = _col("id", 0)
    hero_id: int = _col("heroId", 0)
    level: int = _col("level", 0)
    exp: int = _col("exp", 0)
    prop: list[PropInfo] = _col("prop", factory=list)


@dataclass
class HeroMaxCfg(_Row):
    quality_id: int = _col("quality", 0)
    max_level: int = _col("maxLevel", 0)
    condition: int = _col("condition", 0)


@dataclass
class HeroPropertyCfg(_Row):
    id: int = _col("id", 0)
    display_name: str = _col("displayName", "")
    display_des: str = _col("displayDes", "")
    type: int = _col("type", 0)
    val_type: int = _col("valType", 0)


@dataclass
class HeroPropGeniusCfg(_Row):
    """How many property points convert into one percent of talent."""

    id: int = _col("id", 0)
    pro_num: int = _col("proNum", 0)


@dataclass
class NpcCfg(_Row):
    id: int = _col("id", 0)
    name: str = _col("name", "")
    note: str = _col("note", "")
    icon: str = _col("icon", "")
    display_id: int = _col("displayID", 0)
    type: int = _col("type", 0)
    link_to: list[int] = _col("linkTo", factory=list)
    plot: str = _col("plot", "")
    talk: list[int] = _col("talk", factory=list)
    talk_interval: str = _col("talkInterval", "")
    title: int = _col("title", 0)
    secret_npc: list[int] = _col("secretNpc", factory=list)
    house_info: str = _col("houseInfo", "")


@dataclass
class GridMap:
    """One map tile: its type and the area it belongs to."""

    type: int = 0
    area: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GridMap:
        return cls(type=data.get("type", 0), area=data.get("area", 0))


@dataclass
class AreaMapCfg:
    """Tile keys ("x_y") that make up one area."""

    area_map: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AreaMapCfg:
        return cls(area_map=list(data.get("areaMap") or []))


@dataclass
class MapLayoutCfg:
    """Layout of a city map as exported by the map editor."""

    grid_map: dict[str, GridMap] = field(default_factory=dict)
    area_map: dict[int, list[str]] = field(default_factory=dict)
    road_w: float = 0.0
    road_h: float = 0.0
    origin_y: float = 0.0
    origin_x: float = 0.0
    road_max_num_x: int = 0
    road_max_num_y: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MapLayoutCfg:
        grid = data.get("gridMap") or {}
        areas = data.get("areaMap") or {}
        return cls(
            grid_map={key: GridMap.from_dict(tile) for key, tile in grid.items()},
            area_map={int(key): list(tiles) for key, tiles in areas.items()},
            road_w=float(data.get("roadW", 0.0)),
            road_h=float(data.get("roadH", 0.0)),
            origin_y=float(data.get("originY", 0.0)),
            origin_x=float(data.get("originX", 0.0)),
            road_max_num_x=int(data.get("roadMaxNumX", 0)),
            road_max_num_y=int(data.get("roadMaxNumY", 0)),
        )


def _conf(name: str, default: Any = None, factory: Any = None) -> Any:
    meta = {"conf": name}
    if factory is not None:
        return field(default_factory=factory, metadata=meta)
    return field(default=default, metadata=meta)


@dataclass
class HelperConf:
    """Global game settings."""

    building_bag_num_max: int = _conf("buildingbagnummax", 10)
    love_item_effect: int = _conf("loveItemEffect", 1)
    add_speed_card_times: int = _conf("addSpeedCardTimes", 3)
    coin_speed_times: int = _conf("coinSpeedTimes", 3)
    video_reduce_times: int = _conf("videoReduceTimes", 3)
    first_area: list[int] = _conf("firstArea", factory=lambda: [3])

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HelperConf:
        """Build the settings from a mapping keyed by setting name; missing keys keep defaults."""
        kwargs = {}
        for f in fields(cls):
            key = f.metadata["conf"]
            if key in data:
                kwargs[f.name] = data[key]
        return cls(**kwargs)