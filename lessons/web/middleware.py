"""HTTP middleware: ordering, aborts, CORS, testing and rate limiting.

Middleware here are plain ``async def (request, call_next)`` functions
registered with ``app.middleware("http")``. Starlette wraps the app once
per registration, so the LAST registered middleware runs FIRST. Returning
a response without awaiting ``call_next`` aborts the chain.
"""

import logging
import threading
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import jwt
from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from lessons.config import get_settings
from lessons.web.auth import DEMO_USERS, LoginRequest, TokenResponse, create_token, decode_token
from lessons.web.validation import redact

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]
Middleware = Callable[[Request, CallNext], Awaitable[Response]]

ALLOWED_ORIGINS = ["https://app.example.com", "http://localhost:3000"]


def _show(label: str, resp: Any) -> None:
    body = resp.json() if resp.content else ""
    print(f"{label:<42} -> {resp.status_code} {body}")


# ---------------------------------------------------------------------------
# Reusable middleware
# ---------------------------------------------------------------------------


def jwt_middleware(public_prefixes: tuple[str, ...] = ("/public",), trace: list[str] | None = None) -> Middleware:
    """Require a valid bearer token except under ``public_prefixes``.

    On success the principal is stored on ``request.state.user``.
    """

    async def middleware(request: Request, call_next: CallNext) -> Response:
        if trace is not None:
            trace.append("jwt")
        if request.method == "OPTIONS" or request.url.path.startswith(public_prefixes):
            return await call_next(request)
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED,
                                content={"error": "missing bearer token"})
        try:
            request.state.user = decode_token(token)
        except jwt.ExpiredSignatureError:
            return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "token expired"})
        except jwt.InvalidTokenError:
            return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": "invalid token"})
        return await call_next(request)

    return middleware


def require_role_middleware(role: str, prefix: str = "/admin", trace: list[str] | None = None) -> Middleware:
    """Reject requests under ``prefix`` whose principal lacks ``role``."""

    async def middleware(request: Request, call_next: CallNext) -> Response:
        if trace is not None:
            trace.append("rbac")
        if request.url.path.startswith(prefix):
            user = getattr(request.state, "user", None)
            if user is None or role not in user.roles:
                return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"error": "access denied"})
        return await call_next(request)

    return middleware


def request_id_middleware(id_factory: Callable[[], str] | None = None) -> Middleware:
    """Echo or assign ``X-Request-ID`` and keep it on ``request.state``.

    Without ``id_factory`` ids are a per-app counter (``req-0001``).
    """
    counter = 0
    lock = threading.Lock()

    def next_id() -> str:
        nonlocal counter
        with lock:
            counter += 1
            return f"req-{counter:04d}"

    make_id = id_factory or next_id

    async def middleware(request: Request, call_next: CallNext) -> Response:
        request_id = request.headers.get("X-Request-ID")
        if request_id is None:
            request_id = make_id()
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    return middleware


# ---------------------------------------------------------------------------
# MiddlewareFlow
# ---------------------------------------------------------------------------


def create_chain_app(trace: list[str]) -> FastAPI:
    """logger -> CORS -> JWT -> RBAC -> handler, recording each hop in ``trace``."""
    app = FastAPI(title="Middleware chain")

    @app.get("/public/info")
    def public_info() -> dict[str, str]:
        trace.append("handler")
        return {"message": "public"}

    @app.get("/api/profile")
    def profile(request: Request) -> dict[str, Any]:
        trace.append("handler")
        return {"userID": request.state.user.user_id}

    @app.get("/admin/dashboard")
    def dashboard() -> dict[str, str]:
        trace.append("handler")
        return {"message": "admin only"}

    async def cors(request: Request, call_next: CallNext) -> Response:
        trace.append("cors")
        origin = request.headers.get("Origin")
        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_204_NO_CONTENT, headers=_cors_headers(origin))
        response = await call_next(request)
        response.headers.update(_cors_headers(origin))
        return response

    async def log_requests(request: Request, call_next: CallNext) -> Response:
        trace.append("logger:start")
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        trace.append(f"logger:end {response.status_code}")
        logger.info("%s %s -> %d (%.1fms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    # registered innermost first
    app.middleware("http")(require_role_middleware("admin", trace=trace))
    app.middleware("http")(jwt_middleware(trace=trace))
    app.middleware("http")(cors)
    app.middleware("http")(log_requests)
    return app


def _cors_headers(origin: str | None) -> dict[str, str]:
    if origin not in ALLOWED_ORIGINS:
        return {}
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Authorization, Content-Type",
    }


def middleware_flow_demo() -> None:
    print("=== Registration order ===")
    print("app.middleware('http') wraps the app, so register innermost first:")
    print("  rbac, jwt, cors, logger  ->  runs as logger -> cors -> jwt -> rbac -> handler")
    print()

    trace: list[str] = []
    app = create_chain_app(trace)
    user_token = create_token("bob", ["user"])
    admin_token = create_token("alice", ["admin", "user"])
    requests = [
        ("GET /public/info", "/public/info", {}),
        ("GET /api/profile (no token)", "/api/profile", {}),
        ("GET /api/profile (bob)", "/api/profile", {"Authorization": f"Bearer {user_token}"}),
        ("GET /admin/dashboard (bob)", "/admin/dashboard", {"Authorization": f"Bearer {user_token}"}),
        ("GET /admin/dashboard (alice)", "/admin/dashboard", {"Authorization": f"Bearer {admin_token}"}),
    ]
    with TestClient(app) as client:
        for label, path, headers in requests:
            trace.clear()
            resp = client.get(path, headers={"Origin": "https://app.example.com", **headers})
            _show(label, resp)
            print(f"  chain: {' -> '.join(trace)}")
    print()
    print("=== Abort semantics ===")
    print("A middleware that returns without awaiting call_next stops the chain:")
    print("inner middleware and the handler never run, outer ones still see the response.")


# ---------------------------------------------------------------------------
# CORSMiddleware
# ---------------------------------------------------------------------------


def create_cors_app(origins: list[str] | None = None) -> FastAPI:
    app = FastAPI(title="CORS")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins if origins is not None else ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
        expose_headers=["X-Request-ID"],
        max_age=600,
    )

    @app.get("/api/data")
    def data() -> dict[str, list[int]]:
        return {"items": [1, 2, 3]}

    return app


def cors_middleware_demo() -> None:
    print(f"=== Allowed origins: {ALLOWED_ORIGINS} ===")
    preflight = {"Access-Control-Request-Method": "PUT", "Access-Control-Request-Headers": "Authorization"}
    with TestClient(create_cors_app()) as client:
        for origin in ("https://app.example.com", "https://evil.example.net"):
            print(f"--- Origin: {origin}")
            resp = client.options("/api/data", headers={"Origin": origin, **preflight})
            print(f"preflight OPTIONS -> {resp.status_code} "
                  f"allow-origin={resp.headers.get('access-control-allow-origin')} "
                  f"max-age={resp.headers.get('access-control-max-age')}")
            resp = client.get("/api/data", headers={"Origin": origin})
            print(f"GET /api/data     -> {resp.status_code} "
                  f"allow-origin={resp.headers.get('access-control-allow-origin')}")
    print()
    print("The server still answers a disallowed origin; the browser refuses to hand")
    print("the response to the page because the allow-origin header is missing.")
    print("Never combine allow_origins=['*'] with allow_credentials=True.")


# ---------------------------------------------------------------------------
# MiddlewareTest
# ---------------------------------------------------------------------------


def create_protected_app() -> FastAPI:
    app = FastAPI(title="Protected")

    @app.get("/test")
    def test_route() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/admin/test")
    def admin_route() -> dict[str, str]:
        return {"status": "ok"}

    app.middleware("http")(require_role_middleware("admin"))
    app.middleware("http")(jwt_middleware())
    app.middleware("http")(request_id_middleware())
    return app


def middleware_test_demo() -> None:
    print("=== Exercising middleware in-process ===")
    print("TestClient drives the ASGI app directly: no server, no sockets.")
    print()
    admin = create_token("user123", ["admin", "user"])
    plain = create_token("user123", ["user"])
    cases = [
        ("valid token", "/test", f"Bearer {admin}", 200),
        ("invalid token", "/test", "Bearer invalid_token", 401),
        ("missing token", "/test", None, 401),
        ("has admin role", "/admin/test", f"Bearer {admin}", 200),
        ("no admin role", "/admin/test", f"Bearer {plain}", 403),
    ]
    passed = 0
    with TestClient(create_protected_app()) as client:
        for name, path, auth, expected in cases:
            headers = {"Authorization": auth} if auth else {}
            resp = client.get(path, headers=headers)
            ok = resp.status_code == expected
            passed += ok
            print(f"{'PASS' if ok else 'FAIL'}  {name:<16} expected {expected}, got {resp.status_code}"
                  f"  (X-Request-ID: {resp.headers.get('x-request-id')})")
    print()
    print(f"{passed}/{len(cases)} checks passed")
    print("The same cases live in the pytest suite as parametrized tests.")


# ---------------------------------------------------------------------------
# MiddlewareDebug
# ---------------------------------------------------------------------------


def trace_middleware(events: list[str]) -> Middleware:
    """Record entry and exit of each request and add ``X-Process-Time``."""

    async def middleware(request: Request, call_next: CallNext) -> Response:
        request_id = getattr(request.state, "request_id", "-")
        events.append(f"[{request_id}] start {request.method} {request.url.path}")
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Process-Time"] = f"{elapsed_ms:.2f}ms"
        events.append(f"[{request_id}] end {response.status_code}")
        logger.debug("[%s] %s %s -> %d in %.2fms", request_id, request.method, request.url.path,
                     response.status_code, elapsed_ms)
        return response

    return middleware


def create_debug_app(events: list[str]) -> FastAPI:
    app = FastAPI(title="Middleware debugging")

    @app.get("/debug/request")
    def debug_request(request: Request) -> dict[str, Any]:
        events.append(f"[{request.state.request_id}] handler")
        return {
            "requestID": request.state.request_id,
            "method": request.method,
            "path": request.url.path,
            "user_agent": request.headers.get("user-agent", ""),
        }

    @app.get("/api/items/{item_id}")
    def item(item_id: int, request: Request) -> dict[str, Any]:
        events.append(f"[{request.state.request_id}] handler")
        return {"id": item_id}

    app.middleware("http")(trace_middleware(events))
    app.middleware("http")(request_id_middleware(lambda: uuid.uuid4().hex[:12]))
    return app


def middleware_debug_demo() -> None:
    print("=== Tag every request, then trace it ===")
    print("request_id runs outermost so every later line can carry the id.")
    print()
    events: list[str] = []
    with TestClient(create_debug_app(events)) as client:
        resp = client.get("/debug/request", headers={"X-Request-ID": "trace-me-1"})
        _show("GET /debug/request (caller id)", resp)
        resp = client.get("/api/items/7")
        _show("GET /api/items/7 (generated id)", resp)
        print(f"  X-Request-ID: {resp.headers['x-request-id']}  X-Process-Time: {resp.headers['x-process-time']}")
        resp = client.get("/api/items/seven")
        print(f"{'GET /api/items/seven':<42} -> {resp.status_code}")
    print()
    print("=== Trace ===")
    for line in events:
        print(f"  {line}")
    print()
    print("Set LOG_LEVEL=DEBUG to see the same timings in the log, keyed by request id.")
    print("A 422 still passes through every middleware: validation happens inside the route.")


# ---------------------------------------------------------------------------
# MiddlewareBestPractices
# ---------------------------------------------------------------------------


def recovery_middleware() -> Middleware:
    """Turn an unhandled exception into a JSON 500 that names the request id."""

    async def middleware(request: Request, call_next: CallNext) -> Response:
        try:
            return await call_next(request)
        except Exception:
            request_id = getattr(request.state, "request_id", None)
            logger.error("Unhandled error in %s %s [%s]", request.method, request.url.path, request_id,
                         exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "internal server error", "requestID": request_id},
            )

    return middleware


def audit_middleware(audit: list[dict[str, Any]]) -> Middleware:
    """Append one redacted record per request to ``audit``."""

    async def middleware(request: Request, call_next: CallNext) -> Response:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        started = time.perf_counter()
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            audit.append({
                "requestID": getattr(request.state, "request_id", None),
                "method": request.method,
                "path": request.url.path,
                "status": status_code,
                "ms": round((time.perf_counter() - started) * 1000, 2),
                "headers": redact(dict(request.headers)),
            })

    return middleware


def create_production_app(audit: list[dict[str, Any]]) -> FastAPI:
    """recovery -> request id -> audit -> CORS -> JWT -> RBAC -> handler."""
    app = FastAPI(title="Production middleware stack")

    @app.post("/api/public/login", response_model=TokenResponse)
    def login(body: LoginRequest) -> TokenResponse:
        record = DEMO_USERS.get(body.username)
        if record is None or record[0] != body.password:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="bad username or password")
        token = create_token(body.username, record[1])
        return TokenResponse(access_token=token, expires_in=get_settings().jwt_expiry_hours * 3600)

    @app.get("/api/public/boom")
    def boom() -> dict[str, str]:
        raise RuntimeError("simulated failure")

    @app.get("/api/profile")
    def profile(request: Request) -> dict[str, Any]:
        user = request.state.user
        return {"userID": user.user_id, "roles": user.roles}

    @app.get("/api/admin/users")
    def admin_users() -> dict[str, list[str]]:
        return {"users": sorted(DEMO_USERS)}

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    # registered innermost first
    app.middleware("http")(require_role_middleware("admin", prefix="/api/admin"))
    app.middleware("http")(jwt_middleware(public_prefixes=("/api/public", "/health")))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
        expose_headers=["X-Request-ID"],
    )
    app.middleware("http")(audit_middleware(audit))
    app.middleware("http")(request_id_middleware())
    app.middleware("http")(recovery_middleware())
    return app


def middleware_best_practices_demo() -> None:
    print("=== Order, outermost first ===")
    print("  recovery    catches anything below and answers 500 as JSON")
    print("  request id  so errors and audit lines can be correlated")
    print("  audit       one record per request, secrets redacted")
    print("  CORS        answers preflight before authentication")
    print("  JWT         skips /api/public and /health")
    print("  RBAC        /api/admin needs the admin role")
    print()
    audit: list[dict[str, Any]] = []
    with TestClient(create_production_app(audit)) as client:
        resp = client.post("/api/public/login", json={"username": "bob", "password": "builder"})
        _show("POST /api/public/login (bob)", resp)
        bob = {"Authorization": f"Bearer {resp.json()['access_token']}"}
        _show("GET /health", client.get("/health"))
        _show("GET /api/profile (no token)", client.get("/api/profile"))
        _show("GET /api/profile (bob)", client.get("/api/profile", headers=bob))
        _show("GET /api/admin/users (bob)", client.get("/api/admin/users", headers=bob))
        _show("GET /api/public/boom", client.get("/api/public/boom"))
    print()
    print("=== Audit log ===")
    for record in audit:
        auth = record["headers"].get("authorization", "-")
        print(f"  {record['requestID']} {record['method']:<4} {record['path']:<20} {record['status']} "
              f"authorization={auth}")
    print()
    print("Keep middleware small and side-effect free, put per-route rules in dependencies,")
    print("and never log tokens, passwords or cookies.")


# ---------------------------------------------------------------------------
# RateLimit
# ---------------------------------------------------------------------------


class FixedWindowRateLimiter:
    """At most ``limit`` hits per key in each ``window`` seconds.

    Windows are aligned to the first hit of a key; ``clock`` is injectable
    so the window can be advanced without sleeping.
    """

    def __init__(self, limit: int, window: float, clock: Callable[[], float] = time.monotonic) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window <= 0:
            raise ValueError("window must be > 0")
        self.limit = limit
        self.window = window
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> tuple[bool, int, float]:
        """Record a hit; return ``(allowed, remaining, retry_after_seconds)``."""
        now = self._clock()
        with self._lock:
            start, count = self._windows.get(key, (now, 0))
            if now - start >= self.window:
                start, count = now, 0
            if count >= self.limit:
                return False, 0, self.window - (now - start)
            count += 1
            self._windows[key] = (start, count)
            return True, self.limit - count, 0.0


def create_rate_limited_app(limiter: FixedWindowRateLimiter, prefix: str = "/api") -> FastAPI:
    app = FastAPI(title="Rate limited")

    @app.get("/api/resource")
    def resource() -> dict[str, str]:
        return {"message": "here you go"}

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.middleware("http")
    async def rate_limit(request: Request, call_next: CallNext) -> Response:
        if not request.url.path.startswith(prefix):
            return await call_next(request)
        key = request.client.host if request.client else "unknown"
        allowed, remaining, retry_after = limiter.hit(key)
        if not allowed:
            logger.warning("Rate limit exceeded for %s on %s", key, request.url.path)
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "too many requests"},
                headers={"Retry-After": str(max(1, round(retry_after)))},
            )
        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limiter.limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

    return app


def rate_limit_demo() -> None:
    settings = get_settings()
    now = [0.0]
    limiter = FixedWindowRateLimiter(settings.rate_limit_per_window, settings.rate_limit_window_s,
                                     clock=lambda: now[0])
    print(f"=== Fixed window: {limiter.limit} requests per {limiter.window:g}s per client, /api/* only ===")
    with TestClient(create_rate_limited_app(limiter)) as client:
        for i in range(1, limiter.limit + 3):
            resp = client.get("/api/resource")
            print(f"request {i}: {resp.status_code} remaining={resp.headers.get('x-ratelimit-remaining')} "
                  f"retry-after={resp.headers.get('retry-after')}")
        print(f"GET /health (not limited) -> {client.get('/health').status_code}")
        now[0] += limiter.window
        print(f"... {limiter.window:g}s later (simulated clock)")
        print(f"request: {client.get('/api/resource').status_code}")
    print()
    print("=== Algorithms ===")
    print("fixed window    simple; allows a burst at each window edge")
    print("sliding window  smoother; stores timestamps or weighted counts")
    print("token bucket    sustained rate with bounded bursts")
    print("leaky bucket    strict constant output rate")
    print("Across several processes the counters belong in a shared store such as Redis.")
