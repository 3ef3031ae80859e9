"""家系図データの永続化。

レジストリは呼び出しごとにファイル全体を読み込み、変更があれば
ファイル全体を書き直す。ロックや原子的なリネームは行わない。
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

import structlog

from family_tree.errors import StoreDecodeError, StoreError
from family_tree.models import Link, Person, Registry

logger = structlog.get_logger(__name__)


class RegistryStore(Protocol):
    """レジストリの保存先。"""

    def exists(self) -> bool: ...

    def initialize(self) -> None: ...

    def load(self) -> Registry: ...

    def save(self, registry: Registry) -> None: ...


def ensure_store(store: RegistryStore) -> bool:
    """保存先が無ければ空のレジストリで作成する。

    既存のファイルは内容が壊れていても上書きしない。

    Returns:
        新規作成した場合は True
    """
    if store.exists():
        return False
    store.initialize()
    logger.debug("store_initialized", store=repr(store))
    return True


class JsonFileStore:
    """JSON ファイルに保存する RegistryStore 実装。"""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"JsonFileStore({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.exists()

    def initialize(self) -> None:
        # 初回のみインデントなしの {} を書き込む
        try:
            self.path.write_text(json.dumps({}), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Error creating family tree file: {e}") from e

    def load(self) -> Registry:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(f"Error reading family tree file: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StoreDecodeError(f"Error decoding family tree data: {e}") from e

        return decode_registry(data)

    def save(self, registry: Registry) -> None:
        text = json.dumps(registry.to_dict(), indent=2, ensure_ascii=False)
        try:
            self.path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Error writing family tree file: {e}") from e
        logger.debug("store_saved", path=str(self.path), persons=len(registry))


class MemoryStore:
    """メモリ上に保持する RegistryStore 実装。

    保存時にシリアライズした形で保持するため、load のたびに
    新しいオブジェクトが返る（ファイル保存と同じ振る舞い）。
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data = data
        self.saves = 0

    def __repr__(self) -> str:
        return "MemoryStore()"

    def exists(self) -> bool:
        return self.data is not None

    def initialize(self) -> None:
        self.data = {}

    def load(self) -> Registry:
        if self.data is None:
            raise StoreError("Error reading family tree file: store is not initialized")
        return decode_registry(json.loads(json.dumps(self.data)))

    def save(self, registry: Registry) -> None:
        self.data = registry.to_dict()
        self.saves += 1


# ---------------------------------------------------------------------------
# デコード
# ---------------------------------------------------------------------------


def decode_registry(data: object) -> Registry:
    """JSON から読み込んだ値を Registry に変換する。

    Raises:
        StoreDecodeError: 想定した構造でない場合
    """
    if not isinstance(data, dict):
        raise StoreDecodeError(
            "Error decoding family tree data: top-level value must be an object"
        )

    registry = Registry()
    for key, value in data.items():
        try:
            person = _decode_person(key, value)
        except (TypeError, ValueError) as e:
            raise StoreDecodeError(f"Error decoding family tree data: {key!r}: {e}") from e
        # キーと name が食い違っていてもキーを優先する
        registry.persons[key] = person
    return registry


def _decode_person(key: str, value: object) -> Person:
    if not isinstance(value, dict):
        raise TypeError("person entry must be an object")

    name = value.get("name", key)
    if not isinstance(name, str):
        raise TypeError("name must be a string")

    relations = value.get("relations", [])
    # null は空リストとして扱う
    if relations is None:
        relations = []
    if not isinstance(relations, list) or not all(isinstance(r, str) for r in relations):
        raise TypeError("relations must be a list of strings")

    raw_links = value.get("links", [])
    if raw_links is None:
        raw_links = []
    if not isinstance(raw_links, list):
        raise TypeError("links must be a list")

    return Person(
        name=name,
        relations=list(relations),
        links=[_decode_link(link) for link in raw_links],
    )


def _decode_link(value: object) -> Link:
    if not isinstance(value, dict):
        raise TypeError("link must be an object")
    relation = value.get("relation")
    person = value.get("person")
    inverse = value.get("inverse", False)
    if not isinstance(relation, str) or not isinstance(person, str):
        raise ValueError("link requires string 'relation' and 'person'")
    if not isinstance(inverse, bool):
        raise TypeError("link 'inverse' must be a boolean")
    return Link(relation=relation, person=person, inverse=inverse)
