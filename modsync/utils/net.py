"""网络工具：URL 安全校验 + HTTP GET"""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from typing import Any
from urllib.parse import urlencode, urlparse

from modsync.core.exceptions import RegistryError, ValidationError

_ALLOWED_SCHEMES = frozenset(("http", "https"))


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https，防止 file:// 等非预期协议访问

    Raises:
        ValidationError: URL scheme 不在白名单内
    """
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        label = f" ({context})" if context else ""
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 http/https: {url}"
        )


def build_url(base: str, path: str, params: dict[str, str] | None = None) -> str:
    """拼接 base + path，并附加查询参数"""
    url = f"{base.rstrip('/')}/{path.lstrip('/')}"
    if params:
        url = f"{url}?{urlencode(params)}"
    return url


def http_get(
    url: str, *, user_agent: str, timeout: float = 30.0, context: str = "",
) -> bytes:
    """GET 请求并返回响应体

    Raises:
        ValidationError: URL 协议非法
        RegistryError: HTTP 错误（status 为状态码）或网络错误（status 为 None）
    """
    validate_url_scheme(url, context=context)
    req = urllib.request.Request(url, headers={"User-Agent": user_agent})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:  # nosec B310
            return resp.read()
    except urllib.error.HTTPError as e:
        raise RegistryError(f"HTTP 错误 {e.code}: {url}", status=e.code) from e
    except urllib.error.URLError as e:
        raise RegistryError(f"网络错误: {url} - {e.reason}") from e
    except OSError as e:
        raise RegistryError(f"读取响应失败: {url} - {e}") from e


def http_get_json(
    url: str, *, user_agent: str, timeout: float = 30.0, context: str = "",
) -> Any:
    """GET 请求并按 JSON 解析响应"""
    body = http_get(url, user_agent=user_agent, timeout=timeout, context=context)
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RegistryError(f"响应格式错误: {url} - {e}") from e
