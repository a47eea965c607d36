"""CLI：杂项命令（游戏版本清单、看板）"""

from __future__ import annotations

import click

from modsync.cli import _run_request, _svc


def register(group: click.Group) -> None:
    group.add_command(versions)
    group.add_command(dashboard)


@click.command()
def versions() -> None:
    """查询官方游戏版本清单"""
    from modsync.services.messages import GetVersionMetadata
    _run_request(GetVersionMetadata())


@click.command()
@click.option("--host", default=None, help="监听地址（默认取配置）")
@click.option("--port", default=None, type=int, help="监听端口（默认取配置）")
def dashboard(host: str | None, port: int | None) -> None:
    """启动 Web API"""
    from modsync.web.app import run_server
    cfg = _svc().config
    run_server(host=host or cfg.web_host, port=port or cfg.web_port)
