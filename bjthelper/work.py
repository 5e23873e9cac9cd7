"""Work outcomes of heroes: talents, their conditions and the resulting costs."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import IntEnum

from .gamedb import get_db
from .tables import AreaOpenCostCfg, BuildCfg, GeniusCfg, ItemInfo, WorkType

__all__ = [
    "MakeResult",
    "HeroProps",
    "Condition",
    "TitleTypeCondition",
    "WorkTypeCondition",
    "ItemTypeCondition",
    "GeniusKind",
    "Genius",
    "TimeGenius",
    "NpcGenius",
    "ItemsGenius",
    "RewardGenius",
    "OutputGenius",
    "make_condition",
    "new_genius",
    "hero_genius",
    "genius_from_ids",
]

log = logging.getLogger(__name__)


def _div(a: int, b: int) -> int:
    """Integer division that truncates toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _to_int(text: str) -> int:
    try:
        return int(str(text).strip())
    except ValueError:
        return 0


def _parse_amounts(text: str) -> Counter[int]:
    """Parse "id:count" pairs separated by commas, semicolons or bars."""
    result: Counter[int] = Counter()
    for chunk in str(text or "").replace(";", ",").replace("|", ",").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        key, sep, value = chunk.partition(":")
        if not sep:
            raise ValueError(f"malformed amount {chunk!r}")
        result[_to_int(key)] += _to_int(value)
    return result


@dataclass
class MakeResult:
    """The cost, duration and yield of a piece of work after talents apply.

    Cuts and boosts are percentages; an item id of 0 in them applies to
    every item.
    """

    work_type: WorkType = WorkType.DEFAULT
    npc_num: int = 0
    use_time: int = 0
    items: list[ItemInfo] = field(default_factory=list)
    output: list[ItemInfo] = field(default_factory=list)
    area_cfg: AreaOpenCostCfg | None = None
    build_cfg: BuildCfg | None = None
    time_cut: int = 0
    item_cut: Counter[int] = field(default_factory=Counter)
    output_boost: Counter[int] = field(default_factory=Counter)
    reward: Counter[int] = field(default_factory=Counter)

    def __post_init__(self) -> None:
        self.work_type = WorkType(self.work_type)
        self.items = [ItemInfo(i.item_id, i.count) for i in self.items]
        self.output = [ItemInfo(i.item_id, i.count) for i in self.output]

    def needed_npcs(self) -> int:
        """Townsfolk the work needs, never negative."""
        return max(self.npc_num, 0)

    def needed_time(self) -> int:
        """Seconds the work takes; the time cut is capped at 100 percent."""
        if self.time_cut > 100:
            self.time_cut = 100
        return _div(self.use_time * (100 - self.time_cut), 100)

    def needed_items(self) -> list[ItemInfo]:
        """Items the work consumes after cost cuts, none below zero."""
        result = []
        for item in self.items:
            cut = self.item_cut[item.item_id] + self.item_cut[0]
            count = _div(item.count * (100 - cut), 100)
            result.append(ItemInfo(item.item_id, max(count, 0)))
        return result

    def bonus_items(self) -> list[ItemInfo]:
        """Extra items the talents grant."""
        return [ItemInfo(key, count) for key, count in self.reward.items()]

    def output_items(self) -> list[ItemInfo]:
        """Items the work produces after output boosts, none below zero."""
        result = []
        for item in self.output:
            boost = self.output_boost[item.item_id] + self.output_boost[0]
            count = _div(item.count * (100 + boost), 100)
            result.append(ItemInfo(item.item_id, max(count, 0)))
        return result


class HeroProps:
    """A hero's level properties and the ratings derived from them."""

    def __init__(self, props: Mapping[int, int] | None = None) -> None:
        self.props: dict[int, int] = dict(props or {})

    def _rating(self, base: int) -> int:
        p = self.props.get
        first = _div(p(base + 2, 0) * (p(base + 3, 0) + 100), 100)
        second = _div(p(base + 4, 0) * (p(base + 5, 0) + 100), 100)
        return _div((first + second) * (p(base + 6, 0) + 100), 100)

    def build(self) -> int:
        return self._rating(1020)

    def agriculture(self) -> int:
        return self._rating(1030)

    def making(self) -> int:
        return self._rating(1040)

    def financial(self) -> int:
        return self._rating(1050)

    def adventure(self) -> int:
        return self._rating(1060)


class _CondKind(IntEnum):
    DEFAULT = 1
    TITLE = 2
    WORK = 3
    ITEM = 4


class Condition:
    """A talent condition that always holds."""

    def is_run(self, result: MakeResult) -> bool:
        return True

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and vars(other) == vars(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({vars(self)})"


class _BuildCondition(Condition):
    _attr = ""

    def __init__(self, value: int) -> None:
        self.value = value

    def is_run(self, result: MakeResult) -> bool:
        if result.build_cfg is None:
            return False
        return self.value == getattr(result.build_cfg, self._attr)


class TitleTypeCondition(_BuildCondition):
    """Holds when the building's title type matches."""

    _attr = "title_type"


class WorkTypeCondition(_BuildCondition):
    """Holds when the building's work type matches."""

    _attr = "work_type"


class ItemTypeCondition(_BuildCondition):
    """Holds when the building's item type matches."""

    _attr = "item_type"


def make_condition(cfg: GeniusCfg) -> Condition:
    """Build the condition a talent configuration describes."""
    kinds = {
        _CondKind.TITLE: TitleTypeCondition,
        _CondKind.WORK: WorkTypeCondition,
        _CondKind.ITEM: ItemTypeCondition,
    }
    try:
        kind = _CondKind(cfg.work_cond_id)
    except ValueError:
        return Condition()
    cls = kinds.get(kind)
    if cls is None:
        return Condition()
    return cls(_to_int(cfg.work_cond))


class GeniusKind(IntEnum):
    TIME = 1
    NPC_NUM = 2
    ITEMS = 3
    REWARD = 4
    OUTPUT = 5


@dataclass
class Genius:
    """A talent that changes a work result when its work type and condition match."""

    work_type: WorkType = WorkType.DEFAULT
    condition: Condition = field(default_factory=Condition)

    def run(self, result: MakeResult) -> None:
        if self.work_type != WorkType.DEFAULT and self.work_type != result.work_type:
            return
        if not self.condition.is_run(result):
            return
        self._apply(result)

    def _apply(self, result: MakeResult) -> None:
        pass


@dataclass
class TimeGenius(Genius):
    """Cuts the work time by a percentage."""

    value: int = 0

    def _apply(self, result: MakeResult) -> None:
        result.time_cut += self.value


@dataclass
class NpcGenius(Genius):
    """Changes the number of townsfolk needed."""

    value: int = 0

    def _apply(self, result: MakeResult) -> None:
        result.npc_num += self.value


@dataclass
class ItemsGenius(Genius):
    """Cuts item costs by percentages."""

    items: Counter[int] = field(default_factory=Counter)

    def _apply(self, result: MakeResult) -> None:
        result.item_cut.update(self.items)


@dataclass
class RewardGenius(Genius):
    """Grants extra items."""

    items: Counter[int] = field(default_factory=Counter)

    def _apply(self, result: MakeResult) -> None:
        result.reward.update(self.items)


@dataclass
class OutputGenius(Genius):
    """Raises the output by percentages."""

    items: Counter[int] = field(default_factory=Counter)

    def _apply(self, result: MakeResult) -> None:
        result.output_boost.update(self.items)


_VALUE_KINDS = {GeniusKind.TIME: TimeGenius, GeniusKind.NPC_NUM: NpcGenius}
_ITEM_KINDS = {
    GeniusKind.ITEMS: ItemsGenius,
    GeniusKind.REWARD: RewardGenius,
    GeniusKind.OUTPUT: OutputGenius,
}


def _kind(value: int) -> GeniusKind | None:
    try:
        return GeniusKind(value)
    except ValueError:
        return None


def new_genius(cfg: GeniusCfg) -> Genius | None:
    """Build the talent a configuration describes, or None for an unknown effect."""
    kind = _kind(cfg.effect_id)
    condition = make_condition(cfg)
    if kind in _VALUE_KINDS:
        return _VALUE_KINDS[kind](cfg.work_type, condition, _to_int(cfg.effect_value))
    if kind in _ITEM_KINDS:
        return _ITEM_KINDS[kind](cfg.work_type, condition, _parse_amounts(cfg.effect_value))
    log.warning("talent %s has unknown effect %s", cfg.id, cfg.effect_id)
    return None


def hero_genius(kind: int, work_type: WorkType, value: int) -> Genius | None:
    """Build an unconditional talent from a hero's own rating."""
    gkind = _kind(kind)
    if gkind in _VALUE_KINDS:
        return _VALUE_KINDS[gkind](WorkType(work_type), Condition(), value)
    if gkind in _ITEM_KINDS:
        return _ITEM_KINDS[gkind](WorkType(work_type), Condition(), Counter({0: value}))
    log.warning("unknown talent kind %s", kind)
    return None


def genius_from_ids(ids: Iterable[int]) -> list[Genius]:
    """Build the talents for configured talent ids, skipping unknown effects."""
    db = get_db()
    result = []
    for gid in ids:
        cfg = db.get_hero_genius_info(gid)
        if cfg is None:
            raise KeyError(f"no talent configured with id {gid}")
        genius = new_genius(cfg)
        if genius is None:
            log.warning("talent %s produced nothing", gid)
            continue
        result.append(genius)
    return result