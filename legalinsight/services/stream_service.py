"""
Stream Service - 流式响应增量累积

核心流程:
1. 原始字节块 → LineFramer 分行
2. 每行 → decode_line 解码
3. choices[0].delta.content 追加到 full_content
4. 按内容长度推进进度提示
"""

from typing import AsyncIterator, Callable, List, Optional, Union

from loguru import logger

from legalinsight.config import Config
from legalinsight.utils.sse_utils import (
    DATA_PREFIX,
    DecodeStatus,
    LineFramer,
    LineKind,
    StreamEvent,
    classify_line,
    decode_line,
    is_truncated_payload,
    join_fragment,
)

PROGRESS_LABELS: List[str] = [
    "Identifying applicable IPC sections...",
    "Assessing evidence strength...",
    "Determining correct forum...",
    "Calculating success probability...",
    "Compiling precedents...",
    "Generating procedural roadmap...",
]

MILESTONE_LABELS = {
    "initializing": "Initializing analysis...",
    "connecting": "Connecting to AI analysis engine...",
    "first_content": "Analyzing legal provisions and jurisdiction...",
    "finalizing": "Processing analysis results...",
}

ProgressCallback = Callable[[str], None]


class AccumulatorState:
    """单次分析请求独占的累积状态"""

    def __init__(self):
        self.framer = LineFramer()
        self.full_content = ""
        self.stream_done = False
        self.progress_index = 0

    @property
    def text_buffer(self) -> str:
        return self.framer.buffer


class ProgressReporter:
    """
    进度提示

    仅用于展示，与分析语义无关；给定相同的内容长度轨迹，输出序列确定。
    """

    def __init__(
        self,
        on_progress: Optional[ProgressCallback] = None,
        labels: Optional[List[str]] = None,
        window: int = Config.PROGRESS_WINDOW,
        tolerance: int = Config.PROGRESS_TOLERANCE,
    ):
        self.on_progress = on_progress
        self.labels = list(labels) if labels is not None else list(PROGRESS_LABELS)
        self.window = window
        self.tolerance = tolerance
        self.current = ""

    def _emit(self, label: str) -> str:
        self.current = label
        if self.on_progress is not None:
            self.on_progress(label)
        return label

    def milestone(self, name: str) -> str:
        return self._emit(MILESTONE_LABELS[name])

    def advance(self, state: AccumulatorState) -> Optional[str]:
        """内容长度落入窗口边界且仍有未用标签时，推进到下一个标签"""
        if state.progress_index >= len(self.labels):
            return None
        if len(state.full_content) % self.window >= self.tolerance:
            return None
        label = self.labels[state.progress_index]
        state.progress_index += 1
        return self._emit(label)

    def reset(self) -> None:
        self.current = ""


class DeltaAccumulator:
    """增量累积器"""

    def __init__(
        self,
        reporter: Optional[ProgressReporter] = None,
        max_fragment_chars: int = Config.SSE_MAX_FRAGMENT_CHARS,
    ):
        self.state = AccumulatorState()
        self.reporter = reporter
        self.max_fragment_chars = max_fragment_chars

    @property
    def full_content(self) -> str:
        return self.state.full_content

    @property
    def stream_done(self) -> bool:
        return self.state.stream_done

    def feed(self, chunk: Union[bytes, str]) -> None:
        """接收一个数据块并处理其中所有完整的行"""
        if self.state.stream_done:
            return
        if isinstance(chunk, bytes):
            self.state.framer.feed_bytes(chunk)
        else:
            self.state.framer.feed(chunk)
        self._consume(final=False)

    def finish(self) -> str:
        """
        输入结束后对剩余缓冲区做最后一次尽力解析

        Returns:
            累积的完整文本
        """
        if not self.state.stream_done:
            self.state.framer.finish()
            self._consume(final=True)
        return self.state.full_content

    def apply(self, event: StreamEvent) -> None:
        if self.state.stream_done:
            return
        if event.content:
            self.state.full_content += event.content
            if self.reporter is not None:
                self.reporter.advance(self.state)
        if event.finish_reason:
            logger.debug(f"收到 finish_reason: {event.finish_reason}")
            self.state.stream_done = True

    def _consume(self, final: bool) -> None:
        framer = self.state.framer
        while not self.state.stream_done:
            line = framer.next_line()
            if line is None:
                return

            result = decode_line(line)
            if result.status == DecodeStatus.DONE:
                self.state.stream_done = True
            elif result.status == DecodeStatus.DECODED:
                self.apply(result.event)
            elif result.status == DecodeStatus.DEFERRED:
                if not self._defer(line, final):
                    return

    def _defer(self, line: str, final: bool) -> bool:
        """
        处理 JSON 不完整的 data 行

        Returns:
            是否继续处理当前批次的后续行
        """
        framer = self.state.framer
        if not framer.has_line():
            if final:
                logger.warning(f"流结束时仍无法解析的片段已忽略: {line[:80]}")
                return True
            # 等待更多数据后重试
            framer.push_back(line)
            return False

        continuation = framer.next_line()
        joined = join_fragment(line, continuation)
        if joined is None:
            logger.warning(f"事件边界前的片段无法补全，已忽略: {line[:80]}")
            return True

        if len(joined) > self.max_fragment_chars:
            logger.warning(f"拼接片段超过 {self.max_fragment_chars} 字符，已忽略: {line[:80]}")
            framer.push_back(continuation)
            return True

        if classify_line(continuation) == LineKind.DATA and decode_line(joined).status != DecodeStatus.DECODED:
            # 下一行本身是完整事件，或拼接后仍不是合法 JSON 的前缀
            if self._is_standalone_event(continuation) or not is_truncated_payload(joined):
                logger.warning(f"无法与后续事件拼接的片段已忽略: {line[:80]}")
                framer.push_back(continuation)
                return True

        framer.push_back(joined)
        return True

    @staticmethod
    def _is_standalone_event(line: str) -> bool:
        payload = line[len(DATA_PREFIX):].lstrip()
        return payload.startswith("{") and decode_line(line).status == DecodeStatus.DECODED


async def accumulate_stream(
    chunks: AsyncIterator[bytes],
    reporter: Optional[ProgressReporter] = None,
) -> str:
    """
    从字节块异步迭代器中读取并累积完整文本

    Args:
        chunks: 按顺序到达的原始字节块（唯一的挂起点）
        reporter: 可选的进度提示

    Returns:
        重组后的模型输出
    """
    accumulator = DeltaAccumulator(reporter)
    first_chunk = True
    async for chunk in chunks:
        if first_chunk and reporter is not None:
            reporter.milestone("first_content")
        first_chunk = False
        accumulator.feed(chunk)
        if accumulator.stream_done:
            break
    content = accumulator.finish()
    logger.debug(f"流读取完成，共 {len(content)} 个字符")
    return content
