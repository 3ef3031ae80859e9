"""設定ファイルの読み込みと設定値の管理。

TOML 形式の設定ファイルを読み込み、AppConfig として返す。
設定ファイルが存在しない場合はデフォルト値を使用する。
"""

from __future__ import annotations

import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_STORE_PATH = "family_tree.json"
DEFAULT_REVERSE_RELATION = "parent"


@dataclass
class StoreConfig:
    """保存ファイルの設定。"""

    path: Path = field(default_factory=lambda: Path(DEFAULT_STORE_PATH))


@dataclass
class RelationConfig:
    """connect で相手側に付与する逆方向タグの対応表。

    reverse に無い関係は default_reverse を使う。
    """

    default_reverse: str = DEFAULT_REVERSE_RELATION
    reverse: dict[str, str] = field(default_factory=dict)

    def reverse_of(self, relation: str) -> str:
        return self.reverse.get(relation, self.default_reverse)


@dataclass
class AppConfig:
    """アプリケーション全体の設定。"""

    store: StoreConfig = field(default_factory=StoreConfig)
    relations: RelationConfig = field(default_factory=RelationConfig)


# ---------------------------------------------------------------------------
# バリデーション
# ---------------------------------------------------------------------------


def _config_error(message: str) -> None:
    print(f"設定エラー: {message}", file=sys.stderr)
    sys.exit(1)


def _validate_tag(value: object, key: str) -> str:
    """関係タグ（空でない文字列）を検証する。"""
    if not isinstance(value, str) or not value:
        _config_error(f"{key} は空でない文字列で指定してください")
    return value  # type: ignore[return-value]


def _build_store(data: dict[str, object]) -> StoreConfig:
    cfg = StoreConfig()
    if "path" in data:
        val = data["path"]
        if not isinstance(val, str) or not val:
            _config_error("store.path は空でない文字列で指定してください")
        cfg.path = Path(val)  # type: ignore[arg-type]
    return cfg


def _build_relations(data: dict[str, object]) -> RelationConfig:
    cfg = RelationConfig()
    if "default_reverse" in data:
        cfg.default_reverse = _validate_tag(
            data["default_reverse"], "relations.default_reverse"
        )
    reverse = data.get("reverse")
    if reverse is not None:
        if not isinstance(reverse, dict):
            _config_error("relations.reverse はテーブルで指定してください")
        for key, val in reverse.items():  # type: ignore[union-attr]
            cfg.reverse[key] = _validate_tag(val, f"relations.reverse.{key}")
    return cfg


# ---------------------------------------------------------------------------
# ロード
# ---------------------------------------------------------------------------


def load_config(path: Path | None) -> AppConfig:
    """設定ファイルを読み込んで AppConfig を返す。

    Args:
        path: 設定ファイルのパス。None の場合はカレントディレクトリの
              config.toml を探索し、存在しなければデフォルト値を使用する。

    Returns:
        AppConfig オブジェクト。
    """
    config_path = path if path is not None else Path("config.toml")

    if not config_path.exists():
        return AppConfig()

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            _config_error(f"{config_path} を読み込めません: {e}")

    app_config = AppConfig()

    store = data.get("store")
    if isinstance(store, dict):
        app_config.store = _build_store(store)

    relations = data.get("relations")
    if isinstance(relations, dict):
        app_config.relations = _build_relations(relations)

    return app_config
