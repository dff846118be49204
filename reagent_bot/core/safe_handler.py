import logging
from functools import wraps

from fastapi import HTTPException, Request

from .breaker import CircuitOpenError
from .errors import DomainError, MessagingError
from .friendly_msg import get_friendly_message

logger = logging.getLogger(__name__)


def _describe(request: Request | None) -> str:
    if request is None:
        return ""
    client_ip = request.client.host if request.client else "unknown"
    trace_id = request.headers.get("X-Request-ID", "none")
    return f"TraceID={trace_id} | Path: {request.url.path} | Client: {client_ip} | "


def safe_handler(func):
    @wraps(func)
    async def wrapper(*args, **kwargs):
        request: Request | None = None
        for arg in list(args) + list(kwargs.values()):
            if isinstance(arg, Request):
                request = arg
                break

        try:
            return await func(*args, **kwargs)
        except HTTPException as e:
            logger.warning(f"[HTTPException] {_describe(request)}{e.status_code}: {e.detail}")
            raise
        except DomainError as e:
            logger.warning(
                f"[DomainError] {_describe(request)}in {func.__name__}: {type(e).__name__} {e}"
            )
            raise HTTPException(status_code=e.status_code, detail=get_friendly_message(e))
        except MessagingError as e:
            logger.error(f"[MessagingError] {_describe(request)}in {func.__name__}: {e}")
            raise HTTPException(status_code=502, detail=f"Failed to send message: {e}")
        except CircuitOpenError as e:
            logger.warning(f"[CircuitOpen] {_describe(request)}in {func.__name__}: {e}")
            raise HTTPException(status_code=503, detail="Messaging is temporarily unavailable. Please try again shortly.")
        except ValueError as e:
            logger.warning(f"[ValueError] {_describe(request)}in {func.__name__}: {e}")
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(
                f"[Unhandled Error] {_describe(request)}in {func.__name__}: {e}",
                exc_info=True,
            )
            raise HTTPException(status_code=500, detail=get_friendly_message(e))

    return wrapper
