"""
数据控制器：基于 TinyDB 保存每个组件最近一次成功抓取的数据。
抓取超时或失败时，用最近的数据顶替，避免面板整块消失。
"""

import logging
import time
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from tinydb import Query, TinyDB
from tinydb.storages import MemoryStorage

from devdash.widgets import WidgetData, widget_data_adapter

logger = logging.getLogger(__name__)


class DataController:
    """TinyDB 数据操作封装。未指定路径时仅保存在内存中。"""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self.db = TinyDB(storage=MemoryStorage)
            logger.debug("TinyDB 使用内存存储")
        else:
            db_path = Path(db_path)
            db_path.parent.mkdir(parents=True, exist_ok=True)
            self.db = TinyDB(str(db_path), indent=2, ensure_ascii=False)
            logger.info(f"TinyDB 数据库已打开: {db_path}")
        self.latest_table = self.db.table("latest")

    # ── 写入 ──────────────────────────────────────────

    def upsert(self, key: str, data: WidgetData):
        """更新或插入某个组件的最新数据（按 key 去重）。"""
        record = {
            "key": key,
            "data": data.model_dump(mode="json"),
            "updated_at": time.time(),
        }
        Widget = Query()
        self.latest_table.upsert(record, Widget.key == key)
        logger.debug(f"[{key}] 数据已更新")

    # ── 查询 ──────────────────────────────────────────

    def get_record(self, key: str) -> dict[str, Any] | None:
        Widget = Query()
        results = self.latest_table.search(Widget.key == key)
        return results[0] if results else None

    def get_latest(self, key: str) -> WidgetData | None:
        """获取指定组件的最新数据；记录损坏时返回 None。"""
        record = self.get_record(key)
        if record is None:
            return None
        try:
            return widget_data_adapter.validate_python(record["data"])
        except ValidationError as e:
            logger.warning(f"[{key}] 缓存数据无法解析，已忽略: {e}")
            return None

    # ── 管理 ──────────────────────────────────────────

    def clear(self):
        self.latest_table.truncate()

    def close(self):
        """关闭数据库。"""
        self.db.close()
