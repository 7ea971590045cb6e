from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from .config import settings
from .logging import configure_logging, logger
from .middleware import AccessLogMiddleware, RequestIDMiddleware
from .routers import health, phrases, review

configure_logging()
app = FastAPI(title="Phrase Coach API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 追加順の逆に実行されるため、RequestID を最後に追加して最外側に置く
app.add_middleware(AccessLogMiddleware)
app.add_middleware(RequestIDMiddleware)

app.include_router(health.router)  # ヘルスチェック
app.include_router(phrases.router, prefix="/api/phrases")  # フレーズ管理・インポート/エクスポート
app.include_router(review.router, prefix="/api/review")  # 出題・採点

logger.info("app_configured", environment=settings.environment, db_path=settings.phrase_db_path)
