"""轻量级 Web API（基于 Flask）

提供：模组快照查询、扫描 / 更新检查 / 更新 / 安装入队、游戏版本清单、事件拉取。
所有写操作交给同一个引擎后台线程串行处理。

启动方式: modsync dashboard --port 8888
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from modsync.web.responses import accepted
from modsync.web.routes import mods_bp

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.register_blueprint(mods_bp)


# =========================================================================
# 全局 JSON 错误处理
# =========================================================================


@app.errorhandler(HTTPException)
def handle_http_exception(exc):
    """将所有 HTTP 异常统一返回 JSON"""
    return jsonify(error=exc.description), exc.code


@app.errorhandler(Exception)
def handle_generic_exception(exc):  # noqa: ARG001
    """捕获未处理异常，返回 500 JSON"""
    logger.exception("未处理的异常")
    return jsonify(error="服务器内部错误"), 500


# =========================================================================
# 事件 / 版本清单
# =========================================================================


@app.route("/api/events")
def api_events():
    """取出引擎自上次拉取以来发布的全部事件"""
    from modsync.services.container import get_container
    events = get_container().engine.drain_events()
    return jsonify(events=[e.to_dict() for e in events])


@app.route("/api/versions")
def api_versions():
    """游戏版本清单请求入队，结果以 set_version_metadata 事件返回"""
    from modsync.services.container import get_container
    from modsync.services.messages import GetVersionMetadata
    engine = get_container().engine
    engine.start()
    engine.submit(GetVersionMetadata())
    return accepted("版本清单请求已入队")


def run_server(port: int = 8888, debug: bool = False, host: str = "127.0.0.1") -> None:
    from modsync.services.container import get_container
    get_container().engine.start()
    logger.info("modsync Web API 已启动: http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug)
