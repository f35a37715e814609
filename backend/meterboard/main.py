import logging, time
from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import redis

from meterboard.config import get_settings
from meterboard.database import Base, SessionLocal, engine
from meterboard.routes import energy
from meterboard.services.cache import redis_client
import meterboard.models  # noqa: F401  registers tables on Base.metadata

settings = get_settings()
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("meterboard")


# Secure headers middleware
class SecureHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'no-referrer'
        response.headers['Strict-Transport-Security'] = 'max-age=63072000; includeSubDomains; preload'
        return response


# Request logging middleware
class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = (time.time() - start_time) * 1000  # ms
        logger.info(f"{request.method} {request.url.path} - {response.status_code} - {duration:.2f}ms")
        return response


Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Meterboard API",
    description="Aggregated electrical-meter readings per second, minute, hour and day",
    version="1.0.0"
)

# Enable compression
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

app.add_middleware(SecureHeadersMiddleware)
app.add_middleware(LoggingMiddleware)

# API versioning: v1
app.include_router(energy.router, prefix="/api/v1", tags=["energy"])


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Database error"})


@app.get("/")
def read_root():
    return {"message": "Welcome to Meterboard API", "docs": "/docs"}


@app.get("/health")
def health_check():
    db_status, redis_status = 'ok', 'ok'
    db = SessionLocal()
    try:
        db.execute(text('SELECT 1'))
    except SQLAlchemyError as e:
        db_status = f"error: {str(e)}"
    finally:
        db.close()
    try:
        if not redis_client.ping():
            redis_status = "error: cannot ping Redis"
    except redis.RedisError as e:
        redis_status = f"error: {str(e)}"
    return {"db": db_status, "redis": redis_status}
