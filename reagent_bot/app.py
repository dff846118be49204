import logging

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from core.catch_error_middleware import ErrorHandlerMiddleware
from core.exception_handler import ValidationErrorHandler
from core.get_db import get_store
from core.lifespan import lifespan
from core.settings import settings
from core.store import AccessLevel, Store
from models.utils import utcnow
from routes.webhook_routes import router as webhook_router
from routes.whatsapp_routes import router as whatsapp_router

logging.basicConfig(level=logging.INFO)

app = FastAPI(
    lifespan=lifespan,
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
)

app.include_router(webhook_router, prefix="/webhook")
app.include_router(whatsapp_router, prefix="/api/whatsapp")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["System"])
async def health_check(store: Store = Depends(get_store)):
    database_ok = await store.ping(AccessLevel.RESTRICTED)
    return {
        "status": "ok" if database_ok else "degraded",
        "database": "connected" if database_ok else "unreachable",
        "environment": settings.APP_ENV,
        "timestamp": utcnow().isoformat(),
    }


@app.get("/", tags=["System"])
async def index():
    return {
        "message": f"{settings.PROJECT_NAME} is running",
        "version": settings.VERSION,
        "endpoints": {
            "webhook": "/webhook/whatsapp",
            "status_callback": "/webhook/whatsapp/status",
            "send_message": "/api/whatsapp/send",
            "send_template": "/api/whatsapp/send-template",
            "message_status": "/api/whatsapp/status/{message_sid}",
            "whatsapp_health": "/api/whatsapp/health",
            "statistics": "/api/whatsapp/statistics",
            "health": "/health",
        },
    }


app.add_exception_handler(
    RequestValidationError,
    ValidationErrorHandler(),
)

app.add_middleware(ErrorHandlerMiddleware)


if __name__ == "__main__":
    uvicorn.run("app:app", host="127.0.0.1", port=8000, reload=settings.APP_ENV == "development")
