"""CLI：模组扫描 / 更新检查 / 更新 / 安装"""

from __future__ import annotations

import sys

import click

from modsync.cli import _echo_events, _run_request, _svc


def register(group: click.Group) -> None:
    group.add_command(scan)
    group.add_command(check)
    group.add_command(update)
    group.add_command(add)


@click.command()
def scan() -> None:
    """扫描模组目录并列出模组"""
    from modsync.services.messages import ScanFolder
    _run_request(ScanFolder())


@click.command()
@click.option("--game-version", "-g", default=None, help="目标游戏版本（默认取配置）")
def check(game_version: str | None) -> None:
    """检查全部模组的更新状态"""
    from modsync.services.messages import CheckForUpdates
    gv = game_version or _svc().config.game_version
    _run_request(CheckForUpdates(game_version=gv))


@click.command()
@click.argument("mod_id")
@click.option("--game-version", "-g", default=None, help="目标游戏版本（默认取配置）")
def update(mod_id: str, game_version: str | None) -> None:
    """更新指定模组到最新版本（先执行一次更新检查）"""
    from modsync.services.messages import CheckForUpdates, UpdateMod

    engine = _svc().engine
    gv = game_version or _svc().config.game_version
    engine.process(CheckForUpdates(game_version=gv))
    if _echo_events(engine.drain_events()):
        sys.exit(1)

    entry = next((m for m in engine.snapshot if m.id == mod_id), None)
    if entry is None:
        click.echo(f"模组不存在: {mod_id}", err=True)
        sys.exit(1)
    _run_request(UpdateMod(entry=entry))


@click.command()
@click.argument("remote_id")
@click.option("--game-version", "-g", default=None, help="目标游戏版本（默认取配置）")
@click.option(
    "--loader", "-l", default=None,
    type=click.Choice(["forge", "fabric"]), help="模组加载器（默认取配置）",
)
def add(remote_id: str, game_version: str | None, loader: str | None) -> None:
    """按注册表项目 id 安装模组"""
    from modsync.core.models import Loader
    from modsync.services.messages import AddMod, ScanFolder

    cfg = _svc().config
    gv = game_version or cfg.game_version
    if not gv:
        click.echo("请通过 --game-version 或配置文件指定游戏版本", err=True)
        sys.exit(1)
    try:
        loader_value = Loader.from_registry(loader or cfg.loader)
    except ValueError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    engine = _svc().engine
    engine.process(ScanFolder())
    if _echo_events(engine.drain_events()):
        sys.exit(1)
    _run_request(AddMod(remote_id=remote_id, game_version=gv, loader=loader_value))
