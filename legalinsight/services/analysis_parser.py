"""
Analysis Parser - 模型输出规范化

解析顺序（先成功者胜出）:
1. ```json 代码块
2. 整段文本作为 JSON
3. 正则启发式提取少量带标签字段

之后逐个叶子字段对照默认值表补全，保证 CaseAnalysis 的每个字段都存在。
"""

import copy
import json
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from loguru import logger

from legalinsight.config import Config
from legalinsight.models.legal_schemas import (
    ANALYSIS_DEFAULTS,
    ENUM_FIELDS,
    LIST_ITEM_MODELS,
    CaseAnalysis,
    SuccessProbability,
)

JSON_BLOCK_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```")
PRIMARY_DOMAIN_PATTERN = re.compile(r"primary\s*domain[:\s]+([^\n,.;]+)", re.IGNORECASE)
SUCCESS_PROBABILITY_PATTERN = re.compile(
    r"success\s*probability[:\s]+(" + "|".join(p.value for p in SuccessProbability) + r")\b",
    re.IGNORECASE,
)
TRUNCATION_MARKER = "..."


class AnalysisParser:
    """将模型原始输出规范化为完整的 CaseAnalysis"""

    def __init__(self, summary_length: int = Config.INPUT_SUMMARY_LENGTH):
        self.summary_length = summary_length

    def parse(self, content: str, original_input: str) -> CaseAnalysis:
        """
        解析模型输出

        Args:
            content: 累积的完整模型输出
            original_input: 用户原始输入（用于生成摘要）

        Returns:
            字段完整的 CaseAnalysis
        """
        parsed = self._parse_llm_json(content)
        if parsed is None:
            logger.warning("模型输出不是有效 JSON，使用启发式提取")
            parsed = self._extract_from_raw_text(content)

        sections = self._apply_defaults(parsed)
        return CaseAnalysis(
            id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            inputSummary=self.summarize_input(original_input),
            rawAnalysis=content,
            **sections,
        )

    def summarize_input(self, text: str) -> str:
        if len(text) > self.summary_length:
            return text[:self.summary_length] + TRUNCATION_MARKER
        return text

    # ==================== 解析 ====================

    def _parse_llm_json(self, content: str) -> Optional[Dict[str, Any]]:
        """解析 LLM 返回的 JSON，失败返回 None"""
        match = JSON_BLOCK_PATTERN.search(content)
        candidate = match.group(1) if match else content
        try:
            result = json.loads(candidate)
        except (ValueError, RecursionError) as e:
            logger.debug(f"LLM 输出不是合法 JSON: {type(e).__name__}")
            return None
        # 合法 JSON 但不是对象时视为空对象
        return result if isinstance(result, dict) else {}

    def _extract_from_raw_text(self, text: str) -> Dict[str, Any]:
        """从非 JSON 文本中提取可识别的字段"""
        result: Dict[str, Any] = {section: {} for section in ANALYSIS_DEFAULTS}

        domain_match = PRIMARY_DOMAIN_PATTERN.search(text)
        if domain_match and domain_match.group(1).strip():
            result["classification"]["primaryDomain"] = domain_match.group(1).strip()

        probability_match = SUCCESS_PROBABILITY_PATTERN.search(text)
        if probability_match:
            result["riskOutcome"]["successProbability"] = probability_match.group(1).upper()

        return result

    # ==================== 默认值补全 ====================

    def _apply_defaults(self, parsed: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        """逐个叶子字段查找解析值，缺失或不合法时使用默认值表中的值"""
        sections: Dict[str, Dict[str, Any]] = {}
        for section, defaults in ANALYSIS_DEFAULTS.items():
            provided = parsed.get(section)
            if not isinstance(provided, dict):
                provided = {}
            sections[section] = {
                field: self._resolve_field(section, field, provided.get(field), default)
                for field, default in defaults.items()
            }
        return sections

    def _resolve_field(self, section: str, field: str, value: Any, default: Any) -> Any:
        if not self._is_present(value):
            return copy.deepcopy(default)

        enum_type = ENUM_FIELDS.get(section, {}).get(field)
        if enum_type is not None:
            # 大小写不敏感匹配到规范取值
            valid = {member.value.lower(): member.value for member in enum_type}
            if not isinstance(value, str):
                return default
            return valid.get(value.strip().lower(), default)

        item_model = LIST_ITEM_MODELS.get(section, {}).get(field)
        if item_model is not None:
            if not isinstance(value, list):
                return copy.deepcopy(default)
            keys = list(item_model.model_fields)
            return [
                {key: self._as_text(item.get(key)) for key in keys}
                for item in value
                if isinstance(item, dict)
            ]

        if isinstance(default, list):
            if not isinstance(value, list):
                return copy.deepcopy(default)
            return [self._as_text(item) for item in value if item is not None]

        if isinstance(default, float):
            if isinstance(value, bool):
                return default
            try:
                return float(value)
            except (TypeError, ValueError, OverflowError):
                return default

        if isinstance(value, (dict, list)):
            return default
        return self._as_text(value)

    @staticmethod
    def _is_present(value: Any) -> bool:
        """None、空字符串、0 与 False 视为缺失"""
        if value is None or value is False:
            return False
        if isinstance(value, str):
            return value != ""
        if isinstance(value, (int, float)):
            return value != 0
        return True

    @staticmethod
    def _as_text(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        if isinstance(value, (dict, list)):
            return json.dumps(value, ensure_ascii=False)
        return str(value)


def parse_analysis_response(content: str, original_input: str) -> CaseAnalysis:
    """快捷入口"""
    return AnalysisParser().parse(content, original_input)
