# bjthelper

Server-side game logic for a city-building simulation. The package holds
configuration records, the rules that turn a hero's talents into work
costs, building records, and a friend/gift system that passes messages
between players through a key/value store.

## Modules

- **`bjthelper.tables`**: dataclass records for the configuration tables
  (`BuildCfg`, `HeroCfg`, `HeroStarCfg`, `GeniusCfg`, `HeroLevelProp`,
  `AreaOpenCostCfg`, `StorageCfg`, `NpcCfg`, `HelperConf` and others).
  Table records have `from_row(row)`, which reads a mapping keyed by
  column name. `ItemInfo(item_id, count)` is the common item/count pair.
  `WorkType` lists the kinds of hero work. `set_count_item` and `item_id`
  remap and read the ids of special items (`ItemType.QUICK_CARD`,
  `ItemType.HAPPINESS`).
- **`bjthelper.gamedb`**: `GameDb` holds every table in dictionaries and
  offers lookups such as `get_build`, `get_build_by_level`,
  `get_hero_star_info`, `get_storage_by_lvl` and `get_area_map`.
  `get_db()` returns the process-wide instance. After the raw tables are
  filled, call `patch()` to build the derived tables: per-type build
  limits, dwelling conditions and builds indexed by level.
- **`bjthelper.work`**: `MakeResult` describes a piece of work. It gives
  the townsfolk it needs (`needed_npcs`), its duration (`needed_time`),
  its cost (`needed_items`), its extra rewards (`bonus_items`) and its
  yield (`output_items`), once talents have applied their percentage
  cuts and boosts. The talents are `TimeGenius`, `NpcGenius`,
  `ItemsGenius`, `RewardGenius` and `OutputGenius`, and each may carry a
  `Condition` (`TitleTypeCondition`, `WorkTypeCondition`,
  `ItemTypeCondition`). `new_genius`, `hero_genius` and `genius_from_ids`
  build talents from configuration. `HeroProps` computes a hero's build,
  agriculture, making, financial and adventure ratings from level
  properties.
- **`bjthelper.building.records`**: `BuildingInfo`, `PosInfo`,
  `BuildingPos` and `HeroSite`, together with the building-type,
  speed-up and release constants. `BuildingInfo.to_dict` and
  `BuildingInfo.from_dict` convert to and from the stored form.
- **`bjthelper.friend`**:
  - `messages` defines the message ids (`FriendMsgId`), the store key
    formats and `FriendMsgModel`.
  - `user` defines `UserFriend`, a player's friends and pending
    requests, with `to_json` and `from_json`.
  - `manager` defines `FriendManager`, which queues messages and writes
    them to the store on a worker thread.
- **`bjthelper.gifts`**: daily gifts between friends on top of the
  friend manager. See `new_gift_manager`, `send_friend_gift`,
  `send_friends_gift`, `set_friend_gift` and `collect_friend_gifts`. The
  last one returns a `collections.Counter` of item ids.

## Install

```
pip install .
```

## Examples

Work outcome with a talent applied:

```python
from bjthelper.tables import ItemInfo, WorkType
from bjthelper.work import MakeResult, TimeGenius

result = MakeResult(work_type=WorkType.WORKING, use_time=600,
                    output=[ItemInfo(1, 10)])
TimeGenius(work_type=WorkType.WORKING, value=20).run(result)
result.needed_time()   # 480
```

Friend requests through a store. The manager needs an object with
`append`, `getset`, `get` and `set`, which redis-style clients provide.
Users are any objects with a `redis_key` attribute.

```python
from types import SimpleNamespace
from bjthelper.friend.manager import FriendManager
from bjthelper.friend.user import UserFriend

class MemoryStore:
    def __init__(self):
        self.data = {}
    def append(self, key, value):
        self.data[key] = self.data.get(key, "") + value
        return len(self.data[key])
    def getset(self, key, value):
        old = self.data.get(key)
        self.data[key] = value
        return old
    def get(self, key):
        return self.data.get(key)
    def set(self, key, value):
        self.data[key] = value

alice = SimpleNamespace(redis_key="alice")
bob = SimpleNamespace(redis_key="bob")

with FriendManager(MemoryStore()) as manager:
    manager.friend_add(alice, "bob")
# leaving the block writes every queued message

friends = UserFriend()
manager.set_user_friend(bob, friends)
friends.add_friend_keys()   # ["alice"]
```

## What the package does not do

The package has no hero or townsfolk inventories. It has no operations on
placed buildings, such as constructing, upgrading, producing, speeding up
or releasing workers; `bjthelper.building` only defines the records. It
has no error-code types. It has no key/value store client and does not
load configuration files: the caller fills `GameDb` and supplies the
store.

## Tests

```
pip install .[test]
pytest
```