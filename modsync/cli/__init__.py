"""modsync 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os
import sys
from typing import Any

import click

from modsync import __version__
from modsync.services.container import get_container
from modsync.utils.logger import setup_logging


def _svc() -> Any:
    """获取全局服务容器的快捷方式"""
    return get_container()


def _echo_events(events: list[Any]) -> bool:
    """打印引擎事件，返回是否出现错误"""
    from modsync.services.messages import (
        BackendError,
        BackendErrorContext,
        CheckForUpdatesProgress,
        SetVersionMetadata,
        UpdateModList,
    )

    failed = False
    for event in events:
        if isinstance(event, CheckForUpdatesProgress):
            click.echo(f"[{event.position + 1}/{event.total}] 检查: {event.display_name}", err=True)
        elif isinstance(event, UpdateModList):
            if not event.mods:
                click.echo("没有发现模组。")
            for m in event.mods:
                remote = m.remote.remote_id if m.remote else "-"
                click.echo(
                    f"  {m.display_name:30s} {m.normalized_version():12s} "
                    f"[{m.state.value:8s}] {m.loader!s:7s} {m.source!s:10s} {remote}"
                )
        elif isinstance(event, SetVersionMetadata):
            manifest = event.manifest
            click.echo(f"最新正式版: {manifest.latest_release}")
            click.echo(f"最新快照:   {manifest.latest_snapshot}")
            releases = manifest.releases()
            recent = ", ".join(releases[:5]) or "-"
            click.echo(f"正式版共 {len(releases)} 个，最近: {recent}")
        elif isinstance(event, BackendErrorContext):
            click.echo(f"错误: {event.message}", err=True)
        elif isinstance(event, BackendError):
            click.echo(f"  [{event.error.code}] {event.error}", err=True)
            failed = True
    return failed


def _run_request(request: Any) -> None:
    """同步处理一个请求并打印事件；出错时以退出码 1 结束"""
    engine = _svc().engine
    engine.process(request)
    if _echo_events(engine.drain_events()):
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", default="modsync.yml", help="配置文件路径")
@click.option("--mods-dir", default=None, help="模组目录（覆盖配置文件）")
def main(config: str, mods_dir: str | None) -> None:
    """modsync - 本地模组目录同步与更新"""
    setup_logging(
        level=os.getenv("MODSYNC_LOG_LEVEL", "INFO"),
        json_output=os.getenv("MODSYNC_LOG_JSON", "") == "1",
    )
    from modsync.core.config import init_config
    from modsync.services.container import ServiceContainer, set_container

    cfg = init_config(config)
    if mods_dir:
        cfg.mods_dir = mods_dir
    set_container(ServiceContainer(config=cfg))


# 注册各领域子命令
from modsync.cli.cmd_mods import register as _reg_mods  # noqa: E402
from modsync.cli.cmd_misc import register as _reg_misc  # noqa: E402

_reg_mods(main)
_reg_misc(main)
