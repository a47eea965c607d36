"""内容指纹

对文件原始字节计算两种独立摘要：
- sha1:   主哈希，远程注册表按它反查，也是本地缓存 / 匹配的键
- sha512: 副哈希，仅计算并保存，供将来交叉校验
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from modsync.core.models import Hashes


def fingerprint(data: bytes) -> Hashes:
    """纯函数，对任意字节序列（含空序列）都有定义"""
    return Hashes(
        sha1=hashlib.sha1(data).hexdigest(),  # noqa: S324
        sha512=hashlib.sha512(data).hexdigest(),
    )


def fingerprint_file(path: Path) -> Hashes:
    """读取整个文件并计算指纹，IO 错误原样抛出"""
    return fingerprint(path.read_bytes())
