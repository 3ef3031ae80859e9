from __future__ import annotations


class RegistryError(Exception):
    """家系図操作のエラーの基底クラス。"""


class StoreError(RegistryError):
    """保存ファイルの読み書きに失敗した。"""


class StoreDecodeError(RegistryError):
    """保存ファイルの内容が想定した構造ではない。"""


class PersonNotFoundError(RegistryError):
    """指定された人物が家系図に存在しない。"""

    def __init__(self, name: str, hint: bool = False) -> None:
        self.name = name
        message = f"{name} is not in the family tree."
        if hint:
            message += " You can add the person using 'add person' first."
        super().__init__(message)


class MissingRelationError(RegistryError):
    """add relationship に関係タグが指定されていない。"""

    def __init__(self) -> None:
        super().__init__("Please provide a relationship (e.g., father, son).")
