from __future__ import annotations

from family_tree.models import Link, Person, Registry


def _build_registry() -> Registry:
    """Kk の息子 Amit、Amit の父 Raj を登録したレジストリ。"""
    registry = Registry()
    registry.add_person(
        Person(
            name="Kk",
            relations=["parent"],
            links=[Link("parent", "Amit", inverse=True)],
        )
    )
    registry.add_person(
        Person(name="Amit", relations=["son"], links=[Link("son", "Kk")])
    )
    registry.add_person(
        Person(name="Raj", relations=["father"], links=[Link("father", "Amit")])
    )
    return registry


class TestPerson:
    def test_defaults_are_empty(self) -> None:
        person = Person(name="Alice")
        assert person.relations == []
        assert person.links == []

    def test_defaults_not_shared(self) -> None:
        a = Person(name="a")
        b = Person(name="b")
        a.relations.append("son")
        assert b.relations == []

    def test_bare_relations_without_links(self) -> None:
        """リンクの無いタグは全て本人に付けたタグとして扱う。"""
        person = Person(name="Kk", relations=["son", "Son", "son"])
        assert person.bare_relations() == ["son", "Son", "son"]

    def test_bare_relations_excludes_linked_tags(self) -> None:
        person = Person(
            name="Bob",
            relations=["son", "son", "parent"],
            links=[Link("son", "Alice"), Link("parent", "Carl", inverse=True)],
        )
        assert person.bare_relations() == ["son"]

    def test_to_dict(self) -> None:
        person = Person(name="Amit", relations=["son"], links=[Link("son", "Kk")])
        assert person.to_dict() == {
            "name": "Amit",
            "relations": ["son"],
            "links": [{"relation": "son", "person": "Kk", "inverse": False}],
        }


class TestRegistry:
    def test_contains_and_len(self) -> None:
        registry = _build_registry()
        assert "Kk" in registry
        assert "Nobody" not in registry
        assert len(registry) == 3

    def test_get_person(self) -> None:
        registry = _build_registry()
        person = registry.get_person("Amit")
        assert person is not None
        assert person.relations == ["son"]
        assert registry.get_person("Nobody") is None

    def test_find_related(self) -> None:
        registry = _build_registry()
        assert registry.find_related("father", "Amit") == ["Raj"]
        assert registry.find_related("parent", "Amit") == ["Kk"]
        assert registry.find_related("father", "Kk") == []

    def test_find_related_ignores_self(self) -> None:
        registry = Registry()
        registry.add_person(
            Person(name="Amit", relations=["father"], links=[Link("father", "Amit")])
        )
        assert registry.find_related("father", "Amit") == []

    def test_to_dict_preserves_insertion_order(self) -> None:
        registry = _build_registry()
        assert list(registry.to_dict()) == ["Kk", "Amit", "Raj"]

    def test_count_relatives_combines_tags_and_links(self) -> None:
        registry = _build_registry()
        kk = registry.get_person("Kk")
        assert kk is not None
        kk.relations.extend(["son", "daughter"])
        # 本人のタグ1件 + Amit からのリンク1件
        assert registry.count_relatives("Kk", "son") == 2
        assert registry.count_relatives("Kk", "daughter") == 1
        assert registry.count_relatives("Kk", "wife") == 0

    def test_count_relatives_ignores_own_role_tags(self) -> None:
        registry = _build_registry()
        # Amit 自身の son タグは Kk との関係を表すので数えない
        assert registry.count_relatives("Amit", "son") == 0
        assert registry.count_relatives("Amit", "father") == 1

    def test_count_relatives_includes_self_link(self) -> None:
        registry = Registry()
        registry.add_person(
            Person(
                name="A",
                relations=["son", "parent"],
                links=[Link("son", "A"), Link("parent", "A", inverse=True)],
            )
        )
        assert registry.count_relatives("A", "son") == 1
        assert registry.count_relatives("A", "parent") == 1
