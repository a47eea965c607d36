"""快照合并

将新扫描结果与上一份快照合并，使已学到的远程关联在重新扫描后保留，
无需再次查询注册表。
"""

from __future__ import annotations

from modsync.core.models import ModEntry


def reconcile(new: list[ModEntry], old: list[ModEntry]) -> list[ModEntry]:
    """按 id 把旧条目的字段前向拷贝到新条目（原地修改并返回 new）

    - 来源与远程关联：只要 id 匹配就拷贝
    - 状态：仅当主哈希未变时拷贝，否则保留扫描器默认值
    - 旧快照中同 id 有多个时，以先出现者为准
    """
    first_by_id: dict[str, ModEntry] = {}
    for entry in old:
        first_by_id.setdefault(entry.id, entry)

    for entry in new:
        previous = first_by_id.get(entry.id)
        if previous is None:
            continue
        entry.source = previous.source
        entry.remote = previous.remote
        if previous.hashes.sha1 == entry.hashes.sha1:
            entry.state = previous.state
    return new
