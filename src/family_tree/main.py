from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
import graphviz

from family_tree import registry as ops
from family_tree.config import AppConfig, load_config
from family_tree.errors import RegistryError
from family_tree.graph_builder import build_graph
from family_tree.log_config import configure_logging
from family_tree.renderer import FORMATS, render_graph
from family_tree.store import JsonFileStore, RegistryStore, ensure_store

# "-" で始まる名前や関係タグもオプションではなく引数として受け取る
NAME_ARGS = {"ignore_unknown_options": True}

COMMAND_LIST = """\
  add person       Add a person to the family tree
  add relationship Add a relationship to a person in the family tree
  connect          Connect two people in the family tree
  countsons        Count the number of sons for an individual
  countdaughters   Count the number of daughters for an individual
  countwives       Count the number of wives for an individual
  father           Find the father of an individual
  render           Draw the family tree as an image
  help             Show available commands"""

CONNECT_USAGE = "Usage: family-tree connect <name1> as <relationship> of <name2>"
FATHER_USAGE = "Usage: family-tree father of <name>"


@dataclass
class AppContext:
    """サブコマンドに渡す実行時コンテキスト。"""

    config: AppConfig
    store: RegistryStore


class RegistryGroup(click.Group):
    """引数エラーを終了コード 1 で報告するコマンドグループ。

    click の既定（終了コード 2）ではなく、全ての利用方法の誤りを 1 で終了させる。
    """

    def __init__(
        self,
        *args: Any,
        unknown_command_message: str = "Unknown command. Use 'help' to see available commands.",
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.unknown_command_message = unknown_command_message

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        if args and not args[0].startswith("-") and self.get_command(ctx, args[0]) is None:
            raise click.UsageError(self.unknown_command_message)
        return super().resolve_command(ctx, args)

    def make_context(
        self,
        info_name: str | None,
        args: list[str],
        parent: click.Context | None = None,
        **extra: Any,
    ) -> click.Context:
        # グループ自身のオプション解析の誤りも 1 で終了させる
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = 1
            raise

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = 1
            raise


@click.group(cls=RegistryGroup, invoke_without_command=True)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True),
    default=None,
    help="設定ファイルのパス（省略時はカレントディレクトリの config.toml を自動検索）",
)
@click.option(
    "--store",
    "store_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="家系図ファイルのパス（設定ファイルの store.path より優先）",
)
@click.option("-v", "--verbose", is_flag=True, help="デバッグログを標準エラー出力に表示する")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    store_path: str | None,
    verbose: bool,
) -> None:
    """家系図を記録・照会するCLIアプリケーション"""
    configure_logging(verbose=verbose)
    config = load_config(Path(config_path) if config_path else None)
    store = JsonFileStore(Path(store_path) if store_path else config.store.path)

    try:
        ensure_store(store)
    except RegistryError as e:
        raise click.ClickException(str(e))

    ctx.obj = AppContext(config=config, store=store)

    if ctx.invoked_subcommand is None:
        click.echo("Usage: family-tree <command> [options]")
        click.echo("\nCommands:")
        click.echo(COMMAND_LIST)
        ctx.exit(1)


@cli.group(
    cls=RegistryGroup,
    invoke_without_command=True,
    unknown_command_message="Unknown subcommand for 'add'. Use 'person' or 'relationship'.",
)
@click.pass_context
def add(ctx: click.Context) -> None:
    """人物または関係を追加する"""
    if ctx.invoked_subcommand is None:
        raise click.UsageError(
            "Command 'add' requires an additional argument (person or relationship)."
        )


@add.command(context_settings=NAME_ARGS)
@click.argument("name")
@click.pass_obj
def person(app: AppContext, name: str) -> None:
    """人物を家系図に追加する"""
    try:
        added = ops.add_person(app.store, name)
    except RegistryError as e:
        raise click.ClickException(str(e))

    if added:
        click.echo(f"Added {name} to the family tree.")
    else:
        click.echo(f"{name} is already in the family tree.")


@add.command(context_settings=NAME_ARGS)
@click.argument("name")
@click.argument("relation", required=False)
@click.pass_obj
def relationship(app: AppContext, name: str, relation: str | None) -> None:
    """人物に関係タグを追加する"""
    try:
        ops.add_relationship(app.store, name, relation)
    except RegistryError as e:
        raise click.ClickException(str(e))

    click.echo(f"Added {relation} as {name}'s {relation}.")


@cli.command(context_settings=NAME_ARGS)
@click.argument("name1", required=False)
@click.argument("as_token", metavar="as", required=False)
@click.argument("relationship", required=False)
@click.argument("of_token", metavar="of", required=False)
@click.argument("name2", required=False)
@click.pass_obj
def connect(
    app: AppContext,
    name1: str | None,
    as_token: str | None,
    relationship: str | None,
    of_token: str | None,
    name2: str | None,
) -> None:
    """2人を関係で結び付ける（<name1> as <relationship> of <name2>）"""
    if as_token != "as" or of_token != "of" or None in (name1, relationship, name2):
        raise click.UsageError(CONNECT_USAGE)

    try:
        ops.connect(
            app.store,
            name1,  # type: ignore[arg-type]
            relationship,  # type: ignore[arg-type]
            name2,  # type: ignore[arg-type]
            app.config.relations,
        )
    except RegistryError as e:
        raise click.ClickException(str(e))

    click.echo(f"Connected {name1} as {relationship} of {name2}.")


def _count_command(command_name: str, tag: str, plural: str) -> click.Command:
    @click.argument("name")
    @click.pass_obj
    def command(app: AppContext, name: str) -> None:
        try:
            count = ops.count_relation(app.store, name, tag)
        except RegistryError as e:
            raise click.ClickException(str(e))
        click.echo(f"{name} has {count} {plural}.")

    command.__doc__ = f"{plural} の人数を数える"
    return cli.command(name=command_name, context_settings=NAME_ARGS)(command)


countsons = _count_command("countsons", ops.SON, "sons")
countdaughters = _count_command("countdaughters", ops.DAUGHTER, "daughters")
countwives = _count_command("countwives", ops.WIFE, "wives")


@cli.command(context_settings=NAME_ARGS)
@click.argument("of_token", metavar="of", required=False)
@click.argument("name", required=False)
@click.pass_obj
def father(app: AppContext, of_token: str | None, name: str | None) -> None:
    """父親を調べる（father of <name>）"""
    if of_token != "of" or name is None:
        raise click.UsageError(FATHER_USAGE)

    try:
        father_name = ops.find_father(app.store, name)
    except RegistryError as e:
        raise click.ClickException(str(e))

    if father_name is not None:
        click.echo(f"Father of {name} is {father_name}.")
    else:
        click.echo(f"Father of {name} is not in the family tree.")


@cli.command()
@click.option("--output", "output_path", required=True, help="出力ファイルパス")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(list(FORMATS)),
    default="png",
    help="出力形式",
)
@click.pass_obj
def render(app: AppContext, output_path: str, fmt: str) -> None:
    """家系図を画像（または DOT ソース）として出力する"""
    try:
        registry = app.store.load()
    except RegistryError as e:
        raise click.ClickException(str(e))

    dot = build_graph(registry)
    try:
        result = render_graph(dot, output_path, fmt=fmt)
    except graphviz.ExecutableNotFound as e:
        raise click.ClickException(f"Graphviz is not installed: {e}")
    click.echo(f"Rendered {result}")


@cli.command(name="help")
def help_command() -> None:
    """利用可能なコマンドを表示する"""
    click.echo("Available commands:")
    click.echo(COMMAND_LIST)


if __name__ == "__main__":
    cli()
