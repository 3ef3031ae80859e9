from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Link:
    """人物間の関係を表すエッジ。

    所有者が ``person`` の ``relation`` であることを表す。
    ``inverse`` は connect が相手側に自動で付与した逆方向のエッジ。
    """

    relation: str
    person: str
    inverse: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"relation": self.relation, "person": self.person, "inverse": self.inverse}


@dataclass
class Person:
    """個人情報を表すデータクラス。

    name がレジストリのキーを兼ねる。relations は自由形式のタグで、
    重複を許し追加のみ行う。
    """

    name: str
    relations: list[str] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)

    def bare_relations(self) -> list[str]:
        """リンクを伴わないタグ（add relationship で付けたもの）を返す。

        connect で付いたタグは本人の立場（誰かの son など）を表すため除く。
        リンクを持たない旧形式のデータでは全てのタグが対象になる。
        """
        linked = Counter(link.relation for link in self.links)
        bare: list[str] = []
        for relation in self.relations:
            if linked[relation] > 0:
                linked[relation] -= 1
            else:
                bare.append(relation)
        return bare

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "relations": list(self.relations),
            "links": [link.to_dict() for link in self.links],
        }


@dataclass
class Registry:
    """家系図全体（名前 -> Person）を管理するデータクラス。"""

    persons: dict[str, Person] = field(default_factory=dict)

    def __contains__(self, name: object) -> bool:
        return name in self.persons

    def __len__(self) -> int:
        return len(self.persons)

    def add_person(self, person: Person) -> None:
        self.persons[person.name] = person

    def get_person(self, name: str) -> Person | None:
        return self.persons.get(name)

    def find_related(self, relation: str, name: str) -> list[str]:
        """``name`` に対して ``relation`` のリンクを持つ人物名を登録順で返す。"""
        return [
            key
            for key, person in self.persons.items()
            if key != name
            and any(
                link.relation == relation and link.person == name
                for link in person.links
            )
        ]

    def count_relatives(self, name: str, relation: str) -> int:
        """``name`` の ``relation`` に当たる人数を返す。

        本人に直接付けたタグと、``name`` へ向いたリンクの合計。
        自分自身へのリンク（connect A as son of A）も1件として数える。
        """
        person = self.persons[name]
        own = sum(1 for tag in person.bare_relations() if tag == relation)
        linked = sum(
            1
            for other in self.persons.values()
            for link in other.links
            if link.relation == relation and link.person == name
        )
        return own + linked

    def to_dict(self) -> dict[str, Any]:
        return {key: person.to_dict() for key, person in self.persons.items()}
