from __future__ import annotations

import json
from pathlib import Path

import pytest

from family_tree.errors import StoreDecodeError, StoreError
from family_tree.models import Link, Person, Registry
from family_tree.store import JsonFileStore, MemoryStore, decode_registry, ensure_store


@pytest.fixture()
def store(tmp_path: Path) -> JsonFileStore:
    return JsonFileStore(tmp_path / "family_tree.json")


class TestEnsureStore:
    def test_creates_compact_empty_object(self, store: JsonFileStore) -> None:
        assert ensure_store(store) is True
        assert store.path.read_text(encoding="utf-8") == "{}"

    def test_does_not_overwrite_existing_file(self, store: JsonFileStore) -> None:
        """壊れたファイルでも上書きしない。"""
        store.path.write_text("not json", encoding="utf-8")
        assert ensure_store(store) is False
        assert store.path.read_text(encoding="utf-8") == "not json"

    def test_memory_store(self) -> None:
        store = MemoryStore()
        assert not store.exists()
        assert ensure_store(store) is True
        assert store.data == {}
        assert ensure_store(store) is False

    def test_missing_directory_is_store_error(self, tmp_path: Path) -> None:
        store = JsonFileStore(tmp_path / "missing" / "family_tree.json")
        with pytest.raises(StoreError, match="Error creating family tree file"):
            ensure_store(store)


class TestJsonFileStore:
    def test_save_is_pretty_printed(self, store: JsonFileStore) -> None:
        registry = Registry()
        registry.add_person(Person(name="Alice"))
        store.save(registry)
        assert store.path.read_text(encoding="utf-8") == (
            '{\n'
            '  "Alice": {\n'
            '    "name": "Alice",\n'
            '    "relations": [],\n'
            '    "links": []\n'
            '  }\n'
            '}'
        )

    def test_round_trip(self, store: JsonFileStore) -> None:
        registry = Registry()
        registry.add_person(
            Person(name="Kk", relations=["parent"], links=[Link("parent", "Amit", inverse=True)])
        )
        registry.add_person(
            Person(name="Amit", relations=["son", "son"], links=[Link("son", "Kk")])
        )
        store.save(registry)

        loaded = JsonFileStore(store.path).load()
        assert loaded == registry
        assert list(loaded.persons) == ["Kk", "Amit"]

    def test_non_ascii_names_kept(self, store: JsonFileStore) -> None:
        registry = Registry()
        registry.add_person(Person(name="太郎"))
        store.save(registry)
        assert "太郎" in store.path.read_text(encoding="utf-8")
        assert "太郎" in store.load()

    def test_load_missing_file(self, store: JsonFileStore) -> None:
        with pytest.raises(StoreError, match="Error reading family tree file"):
            store.load()

    def test_load_invalid_json(self, store: JsonFileStore) -> None:
        store.path.write_text("{", encoding="utf-8")
        with pytest.raises(StoreDecodeError, match="Error decoding family tree data"):
            store.load()

    def test_load_legacy_format_without_links(self, store: JsonFileStore) -> None:
        """links を持たない旧形式のファイルも読み込める。"""
        store.path.write_text(
            json.dumps({"Kk": {"name": "Kk", "relations": ["parent"]}}),
            encoding="utf-8",
        )
        person = store.load().get_person("Kk")
        assert person is not None
        assert person.relations == ["parent"]
        assert person.links == []


class TestDecodeRegistry:
    def test_top_level_must_be_object(self) -> None:
        with pytest.raises(StoreDecodeError, match="top-level"):
            decode_registry([])

    def test_null_top_level(self) -> None:
        with pytest.raises(StoreDecodeError):
            decode_registry(None)

    def test_person_must_be_object(self) -> None:
        with pytest.raises(StoreDecodeError, match="'Kk'"):
            decode_registry({"Kk": "parent"})

    def test_relations_must_be_strings(self) -> None:
        with pytest.raises(StoreDecodeError, match="relations"):
            decode_registry({"Kk": {"name": "Kk", "relations": [1]}})

    def test_link_requires_fields(self) -> None:
        with pytest.raises(StoreDecodeError, match="link"):
            decode_registry({"Kk": {"name": "Kk", "relations": [], "links": [{"relation": "son"}]}})

    @pytest.mark.parametrize("value", ["", 0, False, {}])
    def test_falsy_relations_are_rejected(self, value: object) -> None:
        with pytest.raises(StoreDecodeError, match="relations"):
            decode_registry({"Kk": {"name": "Kk", "relations": value}})

    @pytest.mark.parametrize("value", ["", 0, False, {}])
    def test_falsy_links_are_rejected(self, value: object) -> None:
        with pytest.raises(StoreDecodeError, match="links"):
            decode_registry({"Kk": {"name": "Kk", "relations": [], "links": value}})

    def test_null_lists_are_empty(self) -> None:
        registry = decode_registry({"Kk": {"name": "Kk", "relations": None, "links": None}})
        assert registry.persons["Kk"] == Person(name="Kk")

    def test_missing_fields_use_defaults(self) -> None:
        registry = decode_registry({"Kk": {}})
        person = registry.get_person("Kk")
        assert person == Person(name="Kk")

    def test_key_wins_over_name(self) -> None:
        registry = decode_registry({"Kk": {"name": "Other", "relations": []}})
        assert "Kk" in registry
        assert "Other" not in registry
        assert registry.persons["Kk"].name == "Other"


class TestMemoryStore:
    def test_load_before_initialize(self) -> None:
        with pytest.raises(StoreError):
            MemoryStore().load()

    def test_load_returns_copy(self) -> None:
        store = MemoryStore({"Kk": {"name": "Kk", "relations": []}})
        registry = store.load()
        registry.persons["Kk"].relations.append("son")
        assert store.load().persons["Kk"].relations == []

    def test_save_counts(self) -> None:
        store = MemoryStore({})
        store.save(Registry())
        assert store.saves == 1
