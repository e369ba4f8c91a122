import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from quoteflow.config import settings
from quoteflow.database import init_db
from quoteflow.middleware import RequestSizeLimitMiddleware, limiter
from quoteflow.routes import analytics, columns, exports, files, health, mapping, quotes, templates
from quoteflow.routes.errors import register_exception_handlers

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


class CSRFProtectionMiddleware(BaseHTTPMiddleware):
    """Validate Origin header for state-changing requests to prevent CSRF."""

    async def dispatch(self, request: Request, call_next):
        if request.method in ("POST", "PUT", "DELETE", "PATCH"):
            origin = request.headers.get("origin")
            # Allow requests without Origin (same-origin, non-browser)
            if origin and origin not in settings.cors_origins:
                return JSONResponse(
                    status_code=403,
                    content={"detail": "CSRF validation failed: invalid origin"},
                )
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(
    title="Quoteflow API",
    description="Map uploaded spreadsheets, CSV files and PDFs into structured quotes",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiter state (required by slowapi)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(CSRFProtectionMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

app.include_router(columns.router, prefix="/api/columns", tags=["columns"])
app.include_router(templates.router, prefix="/api/templates", tags=["templates"])
app.include_router(files.router, prefix="/api/files", tags=["files"])
app.include_router(mapping.router, prefix="/api/mapping", tags=["mapping"])
app.include_router(quotes.router, prefix="/api/quotes", tags=["quotes"])
app.include_router(exports.router, prefix="/api/exports", tags=["exports"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])
app.include_router(health.router, prefix="/api/health", tags=["health"])
