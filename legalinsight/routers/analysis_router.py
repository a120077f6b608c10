"""
Case Analysis Router - 案件分析 SSE 路由

将案件描述转发给上游 LLM 网关，并以 OpenAI 风格的 SSE 流返回:
    data: {"choices": [{"delta": {"content": "..."}}]}
    ...
    data: [DONE]
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from loguru import logger

from legalinsight.config import API_V1_STR
from legalinsight.engines.llm_engine import ChatMessage, LLMEngine, LLMGatewayError, get_default_engine
from legalinsight.models.legal_schemas import AnalyzeCaseRequest
from legalinsight.prompts.legal_analysis_prompt import LEGAL_ANALYSIS_PROMPT, USER_PROMPT_TEMPLATE
from legalinsight.utils.sse_utils import DONE_SENTINEL, delta_chunk, format_sse

router = APIRouter(prefix=f"{API_V1_STR}/analyze-case", tags=["Case Analysis"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/health")
async def analysis_health_check(llm_engine: LLMEngine = Depends(get_default_engine)):
    """分析服务健康检查"""
    is_healthy = await llm_engine.health_check()
    return {
        "status": "healthy" if is_healthy else "unhealthy",
        "service": "analyze-case",
        "llm_connected": is_healthy
    }


@router.post("")
async def analyze_case(
    request: AnalyzeCaseRequest,
    llm_engine: LLMEngine = Depends(get_default_engine),
):
    """案件分析接口 - 流式响应"""
    case_text = request.caseText
    if not isinstance(case_text, str) or not case_text.strip():
        return _error(400, "Case text is required")

    logger.info(f"开始案件分析，输入长度: {len(case_text)}")

    messages = [
        ChatMessage(role="system", content=LEGAL_ANALYSIS_PROMPT),
        ChatMessage(role="user", content=USER_PROMPT_TEMPLATE.format(case_text=case_text)),
    ]

    try:
        stream = await llm_engine.open_stream(messages)
    except LLMGatewayError as e:
        return _error(e.status_code, e.message)

    async def generate_response():
        try:
            async for chunk in stream:
                yield format_sse(delta_chunk(chunk.content, chunk.finish_reason))
            logger.info("案件分析流式响应完成")
        except Exception as e:
            # 响应已开始，只能记录错误并正常结束流
            logger.error(f"流式响应中断: {str(e)}")
        yield format_sse(DONE_SENTINEL)

    return StreamingResponse(
        generate_response(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
