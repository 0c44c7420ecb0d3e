import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from debtclarity.api.v1.plan import router as plan_router
from debtclarity.core.config import get_settings

settings = get_settings()

logging.getLogger("debtclarity").setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Debt Clarity API",
    version="1.0.0",
    docs_url="/docs" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.openapi_enabled else None,
)

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

app.include_router(plan_router, prefix="/api/v1", tags=["plan"])
# Unversioned path kept for existing frontends.
app.include_router(plan_router, prefix="/api", tags=["plan"], include_in_schema=False)

_STATUS_MESSAGES = {
    404: "Not found",
    405: "Method not allowed",
}


def _error_body(status_code: int, detail) -> dict:
    # Details of 5xx errors stay hidden unless explicitly enabled.
    if status_code >= 500:
        body = {"error": "Internal error"}
        if get_settings().expose_error_details and detail:
            body["details"] = str(detail)
        return body
    if status_code in _STATUS_MESSAGES:
        return {"error": _STATUS_MESSAGES[status_code]}
    return {"error": str(detail)}


@app.exception_handler(StarletteHTTPException)
async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, exc.detail),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.info("Rejected request body: %s", errors)
    if any(loc in ("rawText", "raw_text") for err in errors for loc in err.get("loc", ())):
        return JSONResponse(status_code=400, content={"error": "rawText is required"})
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    return JSONResponse(status_code=500, content=_error_body(500, str(exc)))


@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok"}
