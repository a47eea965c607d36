"""模组管理 API Blueprint

写操作只入队，由引擎后台线程按 FIFO 处理，立即返回 202。
"""

from __future__ import annotations

from flask import Blueprint, Response, request

from modsync.web.responses import accepted, bad_request, not_found, ok

mods_bp = Blueprint("mods", __name__, url_prefix="/api/mods")


def _engine():  # type: ignore[no-untyped-def]
    from modsync.services.container import get_container
    engine = get_container().engine
    engine.start()
    return engine


@mods_bp.route("", methods=["GET"])
def list_mods() -> Response:
    """当前快照"""
    from modsync.services.container import get_container
    engine = get_container().engine
    return ok({"mods": [m.to_dict() for m in engine.snapshot], "running": engine.running})


@mods_bp.route("/scan", methods=["POST"])
def scan() -> tuple[Response, int]:
    from modsync.services.messages import ScanFolder
    _engine().submit(ScanFolder())
    return accepted("扫描已入队")


@mods_bp.route("/check", methods=["POST"])
def check() -> tuple[Response, int]:
    from modsync.services.container import get_container
    from modsync.services.messages import CheckForUpdates
    body = request.get_json(silent=True) or {}
    gv = str(body.get("game_version") or get_container().config.game_version)
    _engine().submit(CheckForUpdates(game_version=gv))
    return accepted("更新检查已入队")


@mods_bp.route("/update", methods=["POST"])
def update() -> tuple[Response, int]:
    from modsync.services.messages import UpdateMod
    body = request.get_json(silent=True) or {}
    mod_id = str(body.get("id", "")).strip()
    if not mod_id:
        return bad_request("需要提供 id")
    engine = _engine()
    entry = next((m for m in engine.snapshot if m.id == mod_id), None)
    if entry is None:
        return not_found(f"模组 {mod_id} ")
    engine.submit(UpdateMod(entry=entry))
    return accepted(f"更新已入队: {mod_id}")


@mods_bp.route("/add", methods=["POST"])
def add() -> tuple[Response, int]:
    from modsync.core.models import Loader
    from modsync.services.container import get_container
    from modsync.services.messages import AddMod

    cfg = get_container().config
    body = request.get_json(silent=True) or {}
    remote_id = str(body.get("remote_id", "")).strip()
    if not remote_id:
        return bad_request("需要提供 remote_id")
    gv = str(body.get("game_version") or cfg.game_version)
    if not gv:
        return bad_request("需要提供 game_version")
    try:
        loader = Loader.from_registry(str(body.get("loader") or cfg.loader))
    except ValueError as e:
        return bad_request(str(e))

    _engine().submit(AddMod(remote_id=remote_id, game_version=gv, loader=loader))
    return accepted(f"安装已入队: {remote_id}")
