"""Web 路由模块 - Blueprint 集合"""

from modsync.web.routes.mods_bp import mods_bp

__all__ = ["mods_bp"]
