from datetime import datetime, timezone
import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .db import close_db, init_db
from .errors import ServiceError
from .responses import fail
from .routers import auth as auth_router, templates, workouts


logging.basicConfig(
   level=config.LOG_LEVEL.upper(),
   format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("fitsync")


app = FastAPI(title="FitSync API")

app.add_middleware(
   CORSMiddleware,
   allow_origins=config.CORS_ORIGINS,
   allow_credentials=True,
   allow_methods=["*"],
   allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
   init_db()


@app.on_event("shutdown")
def on_shutdown() -> None:
   close_db()


# ---- Metrics ----
REQUEST_COUNT = Counter(
   "http_requests_total",
   "Total HTTP requests",
   ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
   "http_request_latency_seconds",
   "Request latency",
   ["method", "path"],
)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
   start = time.perf_counter()
   response = await call_next(request)
   route = request.scope.get("route")
   path = getattr(route, "path", request.url.path)
   method = request.method
   REQUEST_COUNT.labels(method=method, path=path, status=str(response.status_code)).inc()
   REQUEST_LATENCY.labels(method=method, path=path).observe(time.perf_counter() - start)
   return response


# ---- Errors ----
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
   if exc.status_code >= 500:
       logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
       return fail(exc.status_code, "Internal server error")
   return fail(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
   return fail(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
   errors = exc.errors()
   missing = [str(e["loc"][-1]) for e in errors if e.get("type") == "missing" and e.get("loc")]
   if missing and len(missing) == len(errors):
       return fail(400, "Missing required fields: " + ", ".join(missing))
   details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]
   return fail(400, "Invalid request body", details=details)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
   logger.exception("Unhandled error on %s %s", request.method, request.url.path)
   return fail(500, "Internal server error")


# ---- APIs ----
app.include_router(auth_router.router)
app.include_router(workouts.router)
app.include_router(templates.router)


# ---- Health & Metrics ----
@app.get("/health")
def health():
   return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/metrics")
def metrics():
   data = generate_latest()  # type: ignore
   return PlainTextResponse(data.decode("utf-8"), media_type=CONTENT_TYPE_LATEST)
