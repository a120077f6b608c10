"""
History Service - 会话内分析历史

按插入顺序保存最近的分析记录，新记录在前，超出上限时淘汰最旧的一条。
仅存在于进程生命周期内，不做持久化。
"""

import json
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError

from legalinsight.config import Config
from legalinsight.models.legal_schemas import CaseAnalysis, HistoryItem


class HistoryService:
    """有界历史记录"""

    def __init__(self, max_items: int = Config.HISTORY_MAX_ITEMS):
        if max_items < 1:
            raise ValueError("max_items must be positive")
        self.max_items = max_items
        self._items: List[HistoryItem] = []

    def __len__(self) -> int:
        return len(self._items)

    def save(self, analysis: CaseAnalysis) -> HistoryItem:
        """
        保存一条分析记录

        Args:
            analysis: 完整的分析结果

        Returns:
            新建的历史条目
        """
        item = HistoryItem.from_analysis(analysis)
        self._items.insert(0, item)
        while len(self._items) > self.max_items:
            evicted = self._items.pop()
            logger.debug(f"历史记录已满，淘汰最旧记录: {evicted.id}")
        return item

    def list(self) -> List[HistoryItem]:
        """最新在前"""
        return list(self._items)

    def get_analysis(self, analysis_id: str) -> Optional[CaseAnalysis]:
        for item in self._items:
            if item.id == analysis_id:
                return item.analysis
        return None

    def clear(self) -> None:
        self._items.clear()
        logger.info("历史记录已清空")

    # ==================== 快照导入导出 ====================

    def dump_json(self) -> str:
        return json.dumps(
            [item.model_dump(mode="json") for item in self._items],
            ensure_ascii=False,
        )

    def load_json(self, raw: Optional[str]) -> None:
        """
        从 JSON 快照恢复历史，快照损坏时得到空历史
        """
        self._items = []
        if not raw:
            return
        try:
            data = json.loads(raw)
            items = [HistoryItem.model_validate(entry) for entry in data]
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.warning(f"历史快照解析失败，已重置: {e}")
            return
        self._items = items[:self.max_items]
