from typing import AsyncGenerator, AsyncIterator, List, Optional

import httpx
from loguru import logger
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI, RateLimitError
from pydantic import BaseModel, Field

from legalinsight.config import Config


class LLMConfig(BaseModel):
    """LLM 网关配置类"""
    base_url: str = Field(default=Config.LLM_BASE_URL, description="OpenAI 兼容网关基础 URL")
    model_name: str = Field(default=Config.LLM_MODEL, description="模型名称")
    api_key: str = Field(default=Config.LLM_API_KEY, description="API 密钥")
    timeout: int = Field(default=Config.LLM_TIMEOUT, description="请求超时时间（秒）")
    max_tokens: int = Field(default=Config.LLM_MAX_TOKENS, description="最大生成 token 数")
    temperature: float = Field(default=Config.LLM_TEMPERATURE, description="生成温度")


class ChatMessage(BaseModel):
    """聊天消息模型"""
    role: str = Field(..., description="消息角色：system, user, assistant")
    content: str = Field(..., description="消息内容")


class StreamChunk(BaseModel):
    """流式增量"""
    content: Optional[str] = None
    finish_reason: Optional[str] = None


class LLMGatewayError(Exception):
    """上游网关错误（携带需要透传给调用方的状态码）"""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{status_code}] {message}")


class LLMEngine:
    """上游 LLM 网关调用引擎"""

    def __init__(self, config: Optional[LLMConfig] = None, http_client: Optional[httpx.AsyncClient] = None):
        """
        初始化 LLM 引擎

        Args:
            config: LLM 配置，如果为 None 则使用 Config 中的默认配置
            http_client: 自定义 HTTP 客户端
        """
        self.config = config or LLMConfig()

        if http_client is None:
            http_client = httpx.AsyncClient(timeout=self.config.timeout)

        # 不做重试：限流与额度错误需要原样返回给调用方
        self.client = AsyncOpenAI(
            base_url=self.config.base_url,
            api_key=self.config.api_key,
            timeout=self.config.timeout,
            max_retries=0,
            http_client=http_client
        )
        logger.info(f"LLM 引擎初始化完成，模型: {self.config.model_name}, URL: {self.config.base_url}")

    async def open_stream(
        self,
        messages: List[ChatMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> AsyncIterator[StreamChunk]:
        """
        发起一次流式聊天补全

        请求失败（限流、额度不足、其他错误）会在返回迭代器之前抛出，
        这样调用方可以在响应开始之前决定状态码。

        Args:
            messages: 聊天消息列表
            temperature: 生成温度，覆盖默认配置
            max_tokens: 最大 token 数，覆盖默认配置

        Returns:
            流式增量的异步迭代器

        Raises:
            LLMGatewayError: 上游返回错误或无法连接
        """
        formatted_messages = [
            {"role": msg.role, "content": msg.content}
            for msg in messages
        ]

        try:
            stream = await self.client.chat.completions.create(
                model=self.config.model_name,
                messages=formatted_messages,
                temperature=temperature or self.config.temperature,
                max_tokens=max_tokens or self.config.max_tokens,
                stream=True,
            )
        except RateLimitError as e:
            logger.warning(f"上游网关限流: {e}")
            raise LLMGatewayError(429, "Rate limit exceeded, please try again later.") from e
        except APIStatusError as e:
            logger.error(f"上游网关错误: {e.status_code} {e.message}")
            if e.status_code == 402:
                raise LLMGatewayError(402, "AI service quota reached.") from e
            raise LLMGatewayError(500, "AI gateway error") from e
        except (APIConnectionError, APITimeoutError) as e:
            logger.error(f"上游网关连接失败: {e}")
            raise LLMGatewayError(500, "AI gateway error") from e

        return self._iter_chunks(stream)

    async def _iter_chunks(self, stream) -> AsyncGenerator[StreamChunk, None]:
        async for chunk in stream:
            if not chunk.choices:
                continue
            choice = chunk.choices[0]
            content = choice.delta.content if choice.delta else None
            if content is None and not choice.finish_reason:
                continue
            yield StreamChunk(content=content, finish_reason=choice.finish_reason)

    async def health_check(self) -> bool:
        """
        健康检查

        Returns:
            是否连接正常
        """
        try:
            await self.client.chat.completions.create(
                model=self.config.model_name,
                messages=[{"role": "user", "content": "Hello"}],
                max_tokens=1,
            )
            return True
        except Exception as e:
            logger.error(f"健康检查失败: {str(e)}")
            return False


# 全局实例
_default_engine: Optional[LLMEngine] = None


def get_default_engine() -> LLMEngine:
    """获取默认的 LLM 引擎实例"""
    global _default_engine
    if _default_engine is None:
        _default_engine = LLMEngine(LLMConfig(**Config.get_llm_config()))
    return _default_engine
