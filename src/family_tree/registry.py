"""家系図に対する操作。

各操作は RegistryStore を受け取り、読み込み → 判定 → (変更があれば) 保存
を1回ずつ行う。
"""

from __future__ import annotations

import structlog

from family_tree.config import RelationConfig
from family_tree.errors import MissingRelationError, PersonNotFoundError
from family_tree.models import Link, Person, Registry
from family_tree.store import RegistryStore

logger = structlog.get_logger(__name__)

SON = "son"
DAUGHTER = "daughter"
WIFE = "wife"
FATHER = "father"


def _require(registry: Registry, name: str, hint: bool = False) -> Person:
    person = registry.get_person(name)
    if person is None:
        raise PersonNotFoundError(name, hint=hint)
    return person


def add_person(store: RegistryStore, name: str) -> bool:
    """人物を追加する。

    Returns:
        追加した場合は True、既に存在していた場合は False
    """
    registry = store.load()
    if name in registry:
        logger.debug("person_exists", name=name)
        return False

    registry.add_person(Person(name=name))
    store.save(registry)
    logger.info("person_added", name=name)
    return True


def add_relationship(store: RegistryStore, name: str, relation: str | None) -> None:
    """人物に関係タグを追加する（相手は記録しない）。

    Raises:
        PersonNotFoundError: 人物が存在しない
        MissingRelationError: relation が指定されていない
    """
    registry = store.load()
    person = _require(registry, name, hint=True)
    if relation is None:
        raise MissingRelationError()

    person.relations.append(relation)
    store.save(registry)
    logger.info("relationship_added", name=name, relation=relation)


def connect(
    store: RegistryStore,
    name1: str,
    relationship: str,
    name2: str,
    relations: RelationConfig | None = None,
) -> str:
    """name1 を name2 の relationship として結び付ける。

    name2 には対応表に従った逆方向のタグを付与し、両方の変更を
    1回の保存で書き込む。

    Returns:
        name2 に付与した逆方向のタグ
    """
    policy = relations if relations is not None else RelationConfig()
    registry = store.load()
    person1 = _require(registry, name1, hint=True)
    person2 = _require(registry, name2, hint=True)

    reverse = policy.reverse_of(relationship)
    person1.relations.append(relationship)
    person1.links.append(Link(relation=relationship, person=name2))
    person2.relations.append(reverse)
    person2.links.append(Link(relation=reverse, person=name1, inverse=True))

    store.save(registry)
    logger.info(
        "people_connected",
        name1=name1,
        relationship=relationship,
        name2=name2,
        reverse=reverse,
    )
    return reverse


def count_relation(store: RegistryStore, name: str, tag: str) -> int:
    """人物の ``tag`` に当たる人数を返す。

    add relationship で本人に付けたタグと、connect で他の人物が
    ``name`` の ``tag`` として結び付けられた数の合計。

    Raises:
        PersonNotFoundError: 人物が存在しない
    """
    registry = store.load()
    _require(registry, name)
    return registry.count_relatives(name, tag)


def count_sons(store: RegistryStore, name: str) -> int:
    return count_relation(store, name, SON)


def count_daughters(store: RegistryStore, name: str) -> int:
    return count_relation(store, name, DAUGHTER)


def count_wives(store: RegistryStore, name: str) -> int:
    return count_relation(store, name, WIFE)


def find_father(store: RegistryStore, name: str) -> str | None:
    """父親の名前を返す。記録が無ければ None。

    父親は ``father`` のリンクで name を指している人物。
    connect の順方向・逆方向のどちらで付与されたリンクでもよい。

    Raises:
        PersonNotFoundError: 人物が存在しない
    """
    registry = store.load()
    _require(registry, name)
    fathers = registry.find_related(FATHER, name)
    if len(fathers) > 1:
        logger.debug("multiple_fathers", name=name, candidates=fathers)
    return fathers[0] if fathers else None
