# =============================================
# File: app/main.py
# Purpose: FastAPI app: chat, follow-up suggestions, markdown rendering
# =============================================
import time

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

load_dotenv()

from app.routers import chat, followups, metrics, render  # noqa: E402
from app.utils import logging as _file_logging  # noqa: E402,F401  (adds the loguru sink)
from app.utils import slog  # noqa: E402
from app.utils.metrics import record_endpoint  # noqa: E402

app = FastAPI(title="Property Chat Assistant")

# The Streamlit page runs on another port
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _logging_middleware(request, call_next):
    start = time.perf_counter()
    req_id = slog.new_request_id()
    client_ip = request.client.host if request.client else None
    try:
        response = await call_next(request)
    except Exception as e:
        latency_ms = int((time.perf_counter() - start) * 1000)
        ctx = getattr(request.state, "log_context", {})
        slog.log_event(
            "request.error",
            request_id=req_id,
            path=str(request.url.path),
            method=request.method,
            latency_ms=latency_ms,
            client_ip=client_ip,
            error=str(e),
            **(ctx or {}),
        )
        raise
    latency_ms = int((time.perf_counter() - start) * 1000)
    ctx = getattr(request.state, "log_context", {}) or {}
    slog.finalize_request_log(
        request_id=req_id,
        method=request.method,
        path=str(request.url.path),
        status=response.status_code,
        latency_ms=latency_ms,
        client_ip=client_ip,
        ctx=ctx,
    )
    record_endpoint(method=request.method, path=str(request.url.path), latency_ms=latency_ms)
    response.headers["X-Request-ID"] = req_id
    return response


@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse(url="/docs")


app.include_router(chat.router)
app.include_router(followups.router)
app.include_router(render.router)
app.include_router(metrics.router)
