"""Delivery FastAPI application.

Web server for last-mile dispatch and cash reconciliation. Commands are
processed synchronously per request inside the delivery domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - unset/"test" → event_processing = "sync"  (realtime emitter fires in UoW)
#   - "production" → event_processing = "async" (emitter fires via Engine)
from delivery.api import register_exception_handlers, routers
from delivery.domain import delivery
from delivery.utils.logging import REQUEST_ID_HEADER, bind_request, clear_context, configure_logging, get_logger
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

configure_logging()
delivery.init()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Delivery API",
    description="Last-mile dispatch, delivery outcomes and cash reconciliation",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Tag the request's log lines and push the delivery domain context."""
    if request.url.path in ("/health", "/docs", "/openapi.json"):
        return await call_next(request)
    request_id = bind_request(
        request.headers.get(REQUEST_ID_HEADER),
        user_id=request.headers.get("X-User-Id"),
        role=request.headers.get("X-User-Role"),
        method=request.method,
        path=request.url.path,
    )
    try:
        with delivery.domain_context():
            response = await call_next(request)
    finally:
        clear_context()
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
for router in routers:
    app.include_router(router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"delivery": {"name": delivery.name}},
        }
    )
