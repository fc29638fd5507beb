"""
DataFix API application.

Run:
    uvicorn src.datafix.main:app --reload --port 8001
"""

import logging

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request

from .api.auth import router as auth_router
from .api.responses import APIException, success_response
from .auth.middleware import AuthMiddleware
from .config import get_config
from .core.errors import BackendError, DataFixError
from .domains.dashboard.api import router as dashboard_router
from .domains.master_data.api import router as master_data_router
from .domains.tickets.api import router as tickets_router
from .domains.users.api import router as users_router

config = get_config()

logging.basicConfig(
    level=getattr(logging, config.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="DataFix - Data Correction Requests", debug=config.debug)

# Add authentication middleware
app.add_middleware(AuthMiddleware)


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    return exc.to_response()


@app.exception_handler(DataFixError)
async def datafix_error_handler(request: Request, exc: DataFixError):
    if isinstance(exc, BackendError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.detail})")
    return APIException.from_domain_error(exc).to_response()


# -------------------------
# Routers
# -------------------------

app.include_router(auth_router)
app.include_router(master_data_router)
app.include_router(tickets_router)
app.include_router(dashboard_router)
app.include_router(users_router)


@app.get("/health")
def health():
    """Liveness probe; reports whether Supabase is configured."""
    settings = get_config().supabase
    return success_response({
        "status": "ok",
        "environment": get_config().environment,
        "supabase_configured": bool(settings.url and settings.key),
    })


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("src.datafix.main:app", host=config.api_host, port=config.api_port)
