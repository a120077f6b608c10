"""
SSE 工具函数
- LineFramer: 将任意切分的字节/文本块拼接为完整行
- decode_line: 对单行进行分类并解析 data 负载
"""

import codecs
import json
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class LineFramer:
    """
    SSE 行分帧器

    只有在看到结尾的 \\n 之后才会输出一行，未结束的尾部数据保留到下一个块。
    字节块通过增量 UTF-8 解码器转换，跨块切断的多字节字符会被正确拼接。
    """

    def __init__(self):
        self.buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed_bytes(self, chunk: bytes) -> None:
        self.feed(self._decoder.decode(chunk))

    def feed(self, text: str) -> None:
        self.buffer += text

    def has_line(self) -> bool:
        return "\n" in self.buffer

    def next_line(self) -> Optional[str]:
        """取出下一条完整的行（去掉结尾的 \\r），没有完整行时返回 None"""
        newline_index = self.buffer.find("\n")
        if newline_index == -1:
            return None
        line = self.buffer[:newline_index]
        self.buffer = self.buffer[newline_index + 1:]
        if line.endswith("\r"):
            line = line[:-1]
        return line

    def push_back(self, line: str) -> None:
        """将一行放回缓冲区头部，等待更多数据后重试"""
        self.buffer = line + "\n" + self.buffer

    def lines(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line

    def finish(self) -> None:
        """
        流结束: 刷新解码器，并为没有换行结尾的剩余数据补上换行，
        使其可以经过同样的分行逻辑输出
        """
        self.buffer += self._decoder.decode(b"", final=True)
        if self.buffer and not self.buffer.endswith("\n"):
            self.buffer += "\n"


def split_lines(text: str) -> List[str]:
    """一次性分帧（用于测试与校验）"""
    framer = LineFramer()
    framer.feed(text)
    framer.finish()
    return list(framer.lines())


# ==================== 事件解码 ====================

class LineKind(str, Enum):
    COMMENT = "comment"
    BLANK = "blank"
    DATA = "data"
    IGNORABLE = "ignorable"


class StreamEvent(BaseModel):
    """单条 data 事件（瞬时对象）"""
    raw: str
    content: Optional[str] = None
    finish_reason: Optional[str] = None


class DecodeStatus(str, Enum):
    DECODED = "decoded"
    DONE = "done"
    DEFERRED = "deferred"
    IGNORED = "ignored"


class DecodeResult(BaseModel):
    status: DecodeStatus
    event: Optional[StreamEvent] = None


def classify_line(line: str) -> LineKind:
    if line.startswith(":"):
        return LineKind.COMMENT
    if line.strip() == "":
        return LineKind.BLANK
    if line.startswith(DATA_PREFIX):
        return LineKind.DATA
    return LineKind.IGNORABLE


def _first_choice(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        return {}
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return {}
    return choices[0]


def to_stream_event(raw: str, payload: Any) -> StreamEvent:
    """从 choices[0].delta.content 与 choices[0].finish_reason 中提取增量"""
    choice = _first_choice(payload)
    delta = choice.get("delta")
    content = delta.get("content") if isinstance(delta, dict) else None
    finish_reason = choice.get("finish_reason")
    return StreamEvent(
        raw=raw,
        content=content if isinstance(content, str) else None,
        finish_reason=str(finish_reason) if finish_reason else None,
    )


def decode_line(line: str) -> DecodeResult:
    """
    解码一条已分帧的 SSE 行

    Args:
        line: 不含换行符的单行文本

    Returns:
        DecodeResult:
        - DECODED: 成功解析的 data 事件
        - DONE: [DONE] 终止标记
        - DEFERRED: JSON 不完整，需要等待后续数据
        - IGNORED: 注释、空行或其他非 data 行
    """
    if classify_line(line) != LineKind.DATA:
        return DecodeResult(status=DecodeStatus.IGNORED)

    json_str = line[len(DATA_PREFIX):].strip()
    if json_str == DONE_SENTINEL:
        return DecodeResult(status=DecodeStatus.DONE)

    try:
        payload = json.loads(json_str)
    except (ValueError, RecursionError):
        return DecodeResult(status=DecodeStatus.DEFERRED)

    return DecodeResult(status=DecodeStatus.DECODED, event=to_stream_event(json_str, payload))


def is_truncated_payload(line: str) -> bool:
    """
    判断 data 行的 JSON 是否只是在末尾被截断（补上后续数据即可解析），
    而不是本身格式错误
    """
    json_str = line[len(DATA_PREFIX):] if line.startswith(DATA_PREFIX) else line
    json_str = json_str.strip()
    try:
        json.loads(json_str)
    except json.JSONDecodeError as e:
        return e.pos >= len(json_str) or e.msg.startswith("Unterminated string")
    except (ValueError, RecursionError):
        return False
    return False


def join_fragment(fragment: str, continuation: str) -> Optional[str]:
    """
    将未完成的 data 行与下一行拼接

    Returns:
        拼接后的 data 行；下一行是空行（事件边界）时返回 None，表示片段无法补全
    """
    kind = classify_line(continuation)
    if kind == LineKind.BLANK:
        return None
    if kind == LineKind.DATA:
        return fragment + continuation[len(DATA_PREFIX):]
    return fragment + continuation


def format_sse(payload: Any) -> str:
    """编码为一条 SSE data 事件"""
    if payload == DONE_SENTINEL:
        return f"{DATA_PREFIX}{DONE_SENTINEL}\n\n"
    return f"{DATA_PREFIX}{json.dumps(payload, ensure_ascii=False)}\n\n"


def delta_chunk(content: Optional[str] = None, finish_reason: Optional[str] = None) -> Dict[str, Any]:
    """构造 OpenAI 风格的增量事件负载"""
    choice: Dict[str, Any] = {"delta": {} if content is None else {"content": content}}
    if finish_reason:
        choice["finish_reason"] = finish_reason
    return {"choices": [choice]}
