"""In-memory store of the game's configuration tables and lookups over them."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .tables import (
    AreaCfg,
    AreaMapCfg,
    AreaOpenCostCfg,
    BuildCfg,
    BuildingModelCfg,
    BuildNumConditionCfg,
    GeniusCfg,
    GridMap,
    HelperConf,
    HeroCfg,
    HeroLevelProp,
    HeroPropertyCfg,
    HeroPropGeniusCfg,
    HeroStarCfg,
    ItemInfo,
    ItemType,
    MapCfg,
    NpcCfg,
    StorageCfg,
    item_id,
)

__all__ = ["GameDb", "get_db", "MINJU_ITEM_TYPE"]

log = logging.getLogger(__name__)

#: Item type of the dwelling buildings whose count unlocks townsfolk.
MINJU_ITEM_TYPE = 52


@dataclass
class GameDb:
    """All configuration tables, keyed by their ids."""

    game_ex: HelperConf = field(default_factory=HelperConf)
    hero_cfgs: dict[int, HeroCfg] = field(default_factory=dict)
    hero_star_cfgs: dict[int, HeroStarCfg] = field(default_factory=dict)
    genius_cfgs: dict[int, GeniusCfg] = field(default_factory=dict)
    hero_level_props: dict[int, HeroLevelProp] = field(default_factory=dict)
    hero_property_cfgs: dict[int, HeroPropertyCfg] = field(default_factory=dict)
    hero_prop_genius_cfgs: dict[int, HeroPropGeniusCfg] = field(default_factory=dict)
    npc_hero_cfgs: dict[int, NpcCfg] = field(default_factory=dict)

    build_num_conditions: dict[int, BuildNumConditionCfg] = field(default_factory=dict)
    build_minju_workers: dict[int, list[int]] = field(default_factory=dict)
    build_num_limits: dict[int, int] = field(default_factory=dict)
    build_minju_by_num_type: dict[int, BuildNumConditionCfg] = field(default_factory=dict)
    builds: dict[int, BuildCfg] = field(default_factory=dict)
    build_level_by_item_type: dict[int, dict[int, BuildCfg]] = field(default_factory=dict)
    building_models: dict[int, BuildingModelCfg] = field(default_factory=dict)
    areas: dict[int, AreaCfg] = field(default_factory=dict)
    area_open_cost_cfgs: dict[int, AreaOpenCostCfg] = field(default_factory=dict)
    storage_cfgs: dict[int, StorageCfg] = field(default_factory=dict)

    grid_maps: dict[int, dict[str, GridMap]] = field(default_factory=dict)
    area_maps: dict[int, dict[int, AreaMapCfg]] = field(default_factory=dict)

    map_cfgs: dict[int, MapCfg] = field(default_factory=dict)

    # ------------------------------------------------------------ derived tables

    def patch(self) -> None:
        """Build the derived lookup tables once the raw tables are loaded."""
        self._gen_build_num_limits()
        self._gen_build_levels()

    def _gen_build_num_limits(self) -> None:
        self.build_num_limits = {}
        self.build_minju_by_num_type = {}
        self.build_minju_workers = {}
        for cond in self.build_num_conditions.values():
            self.build_num_limits[cond.build_type] = cond.max_build_num
            if cond.build_type != MINJU_ITEM_TYPE:
                continue
            self.build_minju_by_num_type[cond.build_num] = cond
            if cond.npc:
                self.build_minju_workers[cond.npc[0]] = cond.npc
            else:
                log.error("dwelling condition %s lists no townsfolk", cond.id)

    def _gen_build_levels(self) -> None:
        self.build_level_by_item_type = {}
        for cfg in self.builds.values():
            self.build_level_by_item_type.setdefault(cfg.item_type, {})[cfg.level] = cfg

    # ------------------------------------------------------------ buildings

    def build_num_limit(self, item_type: int) -> int:
        """How many buildings of an item type may exist; 0 means no limit."""
        return self.build_num_limits.get(item_type, 0)

    def get_build(self, build_id: int) -> BuildCfg | None:
        return self.builds.get(build_id)

    def get_area(self, area_id: int) -> AreaCfg | None:
        return self.areas.get(area_id)

    def get_building_model(self, model_id: int) -> BuildingModelCfg | None:
        return self.building_models.get(model_id)

    def get_build_by_level(self, item_type: int, level: int) -> BuildCfg | None:
        levels = self.build_level_by_item_type.get(item_type)
        if not levels:
            return None
        return levels.get(level)

    def get_building_minju(self, num: int) -> BuildNumConditionCfg | None:
        """The dwelling condition that applies when *num* dwellings exist."""
        return self.build_minju_by_num_type.get(num)

    def get_build_add_happiness(self, build_id: int) -> int:
        """Happiness a building adds to its city, 0 if none."""
        cfg = self.builds.get(build_id)
        if cfg is None:
            return 0
        return self.get_happiness_value(cfg.build_value)

    def get_happiness_value(self, items: Iterable[ItemInfo]) -> int:
        """Count of the happiness item among *items*, 0 if absent."""
        happiness = item_id(ItemType.HAPPINESS)
        for item in items:
            if item.item_id == happiness:
                return item.count
        return 0

    def get_area_open_cost_cfg(self, cfg_id: int) -> AreaOpenCostCfg | None:
        return self.area_open_cost_cfgs.get(cfg_id)

    def get_npc_by_one(self, npc_id: int) -> list[int] | None:
        """Townsfolk that move in together, looked up by the first of them."""
        return self.build_minju_workers.get(npc_id)

    def get_storage_cfg(self, build_type: int) -> StorageCfg | None:
        return self.storage_cfgs.get(build_type)

    def get_storage_by_lvl(self, build_type: int, lvl: int) -> int:
        """Warehouse capacity at a level; levels past the table use the last entry."""
        cfg = self.storage_cfgs.get(build_type)
        if cfg is None:
            return 0
        limits = cfg.storage_limit
        if not limits:
            raise IndexError(f"storage table {build_type} has no levels")
        if lvl >= len(limits):
            return limits[-1]
        if lvl < 1:
            raise IndexError(f"storage level {lvl} is out of range")
        return limits[lvl - 1]

    # ------------------------------------------------------------ heroes

    def get_hero_info(self, hero_id: int) -> HeroCfg | None:
        return self.hero_cfgs.get(hero_id)

    def get_hero_star_info(self, hero_id: int, star: int) -> HeroStarCfg | None:
        return self.hero_star_cfgs.get(hero_id * 100 + star)

    def get_hero_genius_info(self, genius_id: int) -> GeniusCfg | None:
        return self.genius_cfgs.get(genius_id)

    def get_hero_lv_info(self, hero_id: int, lv: int) -> HeroLevelProp | None:
        return self.hero_level_props.get(hero_id * 100 + lv)

    # ------------------------------------------------------------ maps

    def get_area_map(self, city_id: int, area: int) -> AreaMapCfg | None:
        city = self.area_maps.get(city_id)
        if city is None:
            return None
        return city.get(area)


_db: GameDb | None = None


def get_db() -> GameDb:
    """Return the process-wide configuration store, creating it on first use."""
    global _db
    if _db is None:
        _db = GameDb()
    return _db