"""
配置文件
管理系统的各种配置参数
"""

import os
from typing import List, Optional


class Config:
    """系统配置类"""

    # LLM 网关配置 (上游 OpenAI 兼容接口)
    LLM_BASE_URL: str = os.getenv("LLM_BASE_URL", "https://ai.gateway.lovable.dev/v1")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "google/gemini-2.5-flash")
    LLM_API_KEY: str = os.getenv("LLM_API_KEY", "dummy_key")
    LLM_TIMEOUT: int = int(os.getenv("LLM_TIMEOUT", "600"))
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "8192"))
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.3"))

    # 分析客户端配置 (调用本服务的 /api/analyze-case)
    ANALYSIS_API_URL: str = os.getenv("ANALYSIS_API_URL", "http://localhost:8000/api/analyze-case")
    ANALYSIS_API_KEY: Optional[str] = os.getenv("ANALYSIS_API_KEY", None)
    ANALYSIS_TIMEOUT: float = float(os.getenv("ANALYSIS_TIMEOUT", "120"))

    # 历史记录 / 展示配置
    HISTORY_MAX_ITEMS: int = int(os.getenv("HISTORY_MAX_ITEMS", "20"))
    INPUT_SUMMARY_LENGTH: int = int(os.getenv("INPUT_SUMMARY_LENGTH", "150"))

    # 进度提示配置
    PROGRESS_WINDOW: int = int(os.getenv("PROGRESS_WINDOW", "500"))
    PROGRESS_TOLERANCE: int = int(os.getenv("PROGRESS_TOLERANCE", "50"))

    # 跨行拼接的 data 片段上限（字符数）
    SSE_MAX_FRAGMENT_CHARS: int = int(os.getenv("SSE_MAX_FRAGMENT_CHARS", str(1024 * 1024)))

    # 上传文档配置
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

    # API配置
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # 日志配置
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def get_llm_config(cls) -> dict:
        """获取上游 LLM 网关配置"""
        return {
            "base_url": cls.LLM_BASE_URL,
            "model_name": cls.LLM_MODEL,
            "api_key": cls.LLM_API_KEY,
            "timeout": cls.LLM_TIMEOUT,
            "max_tokens": cls.LLM_MAX_TOKENS,
            "temperature": cls.LLM_TEMPERATURE
        }

    @classmethod
    def get_client_config(cls) -> dict:
        """获取分析客户端配置"""
        config = {
            "api_url": cls.ANALYSIS_API_URL,
            "timeout": cls.ANALYSIS_TIMEOUT,
            "history_max_items": cls.HISTORY_MAX_ITEMS,
            "summary_length": cls.INPUT_SUMMARY_LENGTH,
            "progress_window": cls.PROGRESS_WINDOW,
            "progress_tolerance": cls.PROGRESS_TOLERANCE,
        }
        if cls.ANALYSIS_API_KEY:
            config["api_key"] = cls.ANALYSIS_API_KEY
        return config


# API配置
API_V1_STR = "/api"
PROJECT_NAME = "Legal Insight API"

# CORS配置
BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000", "http://localhost:8080"]
