import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from legalinsight.config import BACKEND_CORS_ORIGINS, PROJECT_NAME, Config
from legalinsight.routers import analysis_router

# 日志级别由 LOG_LEVEL 控制
logger.remove()
logger.add(sys.stderr, level=Config.LOG_LEVEL)

app = FastAPI(
    title=PROJECT_NAME,
    description="Streaming legal case analysis over an OpenAI-compatible gateway",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis_router.router)


@app.get("/")
async def read_root():
    return {"service": PROJECT_NAME, "status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("legalinsight.main:app", host=Config.API_HOST, port=Config.API_PORT, reload=False)
