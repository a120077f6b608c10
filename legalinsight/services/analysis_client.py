"""
Analysis Client - 案件分析客户端

核心流程:
1. POST {caseText} 到 /api/analyze-case
2. 按状态码区分限流 / 额度不足 / 其他失败
3. 拉取 SSE 字节流并累积增量文本
4. 规范化为 CaseAnalysis 并写入会话历史

整个请求受单一的墙钟超时约束，超时后中止传输，已累积的内容直接丢弃。
"""

import asyncio
from typing import Optional

import httpx
from loguru import logger

from legalinsight.config import Config
from legalinsight.models.analysis_state import (
    FAILURE_MESSAGES,
    AnalysisState,
    FailureReason,
    StateEvent,
    transition,
)
from legalinsight.models.legal_schemas import CaseAnalysis
from legalinsight.services.analysis_parser import AnalysisParser
from legalinsight.services.history_service import HistoryService
from legalinsight.services.stream_service import ProgressCallback, ProgressReporter, accumulate_stream
from legalinsight.utils.document_utils import build_case_text


class AnalysisError(Exception):
    """分析请求失败"""

    def __init__(self, reason: FailureReason, detail: Optional[str] = None):
        self.reason = reason
        self.message = FAILURE_MESSAGES[reason]
        self.detail = detail
        super().__init__(self.message)


class AnalysisInProgressError(RuntimeError):
    """同一客户端已有进行中的分析"""


class AnalysisClient:
    """案件分析客户端（每个会话一个实例）"""

    def __init__(
        self,
        api_url: str = Config.ANALYSIS_API_URL,
        api_key: Optional[str] = Config.ANALYSIS_API_KEY,
        timeout: float = Config.ANALYSIS_TIMEOUT,
        history: Optional[HistoryService] = None,
        parser: Optional[AnalysisParser] = None,
        on_progress: Optional[ProgressCallback] = None,
        progress_window: int = Config.PROGRESS_WINDOW,
        progress_tolerance: int = Config.PROGRESS_TOLERANCE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        初始化分析客户端

        Args:
            api_url: 分析接口地址
            api_key: Bearer 凭证
            timeout: 整个请求的墙钟超时（秒）
            history: 会话历史，默认新建
            parser: 响应规范化器
            on_progress: 进度提示回调
            progress_window: 进度推进窗口（字符数）
            progress_tolerance: 窗口边界容差
            transport: 自定义 httpx 传输层（测试使用）
        """
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self.history = history if history is not None else HistoryService()
        self.parser = parser if parser is not None else AnalysisParser()
        self.reporter = ProgressReporter(
            on_progress=on_progress,
            window=progress_window,
            tolerance=progress_tolerance,
        )
        self._transport = transport
        self.state = AnalysisState()

    @classmethod
    def from_config(cls, **kwargs) -> "AnalysisClient":
        config = Config.get_client_config()
        history = HistoryService(max_items=config.pop("history_max_items"))
        parser = AnalysisParser(summary_length=config.pop("summary_length"))
        config.update(kwargs)
        return cls(history=history, parser=parser, **config)

    @property
    def progress(self) -> str:
        return self.reporter.current

    @property
    def is_analyzing(self) -> bool:
        return self.state.is_busy

    def _apply(self, event: StateEvent, **kwargs) -> None:
        self.state = transition(self.state, event, **kwargs)
        logger.debug(f"分析状态: {self.state.phase.value}")

    async def analyze_case(self, case_text: str, document_text: Optional[str] = None) -> Optional[CaseAnalysis]:
        """
        执行一次案件分析

        Args:
            case_text: 用户输入的案件描述
            document_text: 上传文档的文本或占位说明

        Returns:
            成功时返回 CaseAnalysis；失败返回 None，失败原因见 self.state

        Raises:
            AnalysisInProgressError: 已有分析在进行中
            DocumentError: 案件描述与文档均为空
        """
        if self.state.is_busy:
            raise AnalysisInProgressError("An analysis is already in progress")

        full_text = build_case_text(case_text, document_text)
        self._apply(StateEvent.SUBMIT)

        try:
            self.reporter.milestone("initializing")
            content = await asyncio.wait_for(self._stream_analysis(full_text), timeout=self.timeout)
            self._apply(StateEvent.STREAM_ENDED)

            self.reporter.milestone("finalizing")
            analysis = self.parser.parse(content, case_text)
            self.history.save(analysis)
            self._apply(StateEvent.NORMALIZED, analysis=analysis)
            logger.info(
                f"案件分析完成 | id={analysis.id} | domain={analysis.classification.primaryDomain} "
                f"| probability={analysis.riskOutcome.successProbability.value}"
            )
            return analysis

        except asyncio.TimeoutError:
            logger.error(f"案件分析超时（{self.timeout}s），已中止")
            self._apply(StateEvent.FAIL, reason=FailureReason.TIMEOUT)
        except httpx.TimeoutException as e:
            logger.error(f"案件分析传输超时: {e}")
            self._apply(StateEvent.FAIL, reason=FailureReason.TIMEOUT)
        except AnalysisError as e:
            logger.error(f"案件分析失败: {e.reason.value} {e.detail or ''}")
            self._apply(StateEvent.FAIL, reason=e.reason)
        except httpx.HTTPError as e:
            logger.error(f"案件分析请求失败: {e}")
            self._apply(StateEvent.FAIL, reason=FailureReason.FAILED)
        finally:
            # 取消或意外异常时也不能停留在分析中状态
            if self.state.is_busy:
                self._apply(StateEvent.FAIL, reason=FailureReason.FAILED)
            self.reporter.reset()

        return None

    async def _stream_analysis(self, full_text: str) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            self.reporter.milestone("connecting")
            async with client.stream("POST", self.api_url, json={"caseText": full_text}, headers=headers) as response:
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise AnalysisError(self._failure_reason(response.status_code), f"{response.status_code} {body[:200]}")

                self._apply(StateEvent.STREAM_OPENED)
                return await accumulate_stream(response.aiter_bytes(), self.reporter)

    @staticmethod
    def _failure_reason(status_code: int) -> FailureReason:
        if status_code == 429:
            return FailureReason.RATE_LIMITED
        if status_code == 402:
            return FailureReason.QUOTA_EXHAUSTED
        return FailureReason.FAILED
