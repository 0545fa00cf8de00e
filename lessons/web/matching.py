"""How a request finds its route: converters, declaration order and scoped dependencies.

Starlette tries routes in the order they were added and picks the first
whose path regex matches. Converters such as ``{id:int}`` change that
regex, so they decide routing; ``Path(pattern=...)`` only validates after
the route has already been chosen.
"""

import logging
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Path, Request, Response, status
from fastapi.testclient import TestClient
from starlette.convertors import Convertor, register_url_convertor

logger = logging.getLogger(__name__)


def _show(label: str, resp: Any) -> None:
    body = resp.json() if resp.content else ""
    print(f"{label:<44} -> {resp.status_code} {body}")


# ---------------------------------------------------------------------------
# RegexRoute
# ---------------------------------------------------------------------------


class SlugConvertor(Convertor[str]):
    regex = "[a-z0-9]+(?:-[a-z0-9]+)*"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("slug", SlugConvertor())


def create_regex_app() -> FastAPI:
    app = FastAPI(title="Regex routes")

    @app.get("/users/{user_id:int}")
    def user_by_id(user_id: int) -> dict[str, Any]:
        return {"route": "numeric id", "id": user_id}

    @app.get("/users/{user_uuid:uuid}")
    def user_by_uuid(user_uuid: UUID) -> dict[str, Any]:
        return {"route": "uuid", "uuid": str(user_uuid)}

    @app.get("/posts/{slug:slug}")
    def post_by_slug(slug: str) -> dict[str, Any]:
        return {"route": "slug", "slug": slug}

    @app.get("/tags/{tag}")
    def tag(tag: Annotated[str, Path(pattern=r"^[a-z]{2,10}$")]) -> dict[str, Any]:
        return {"route": "validated tag", "tag": tag}

    return app


def regex_route_demo() -> None:
    print("=== Converters shape the route regex ===")
    print("  /users/{user_id:int}     [0-9]+")
    print("  /users/{user_uuid:uuid}  8-4-4-4-12 hex")
    print("  /posts/{slug:slug}       custom Convertor registered as 'slug'")
    print("  /tags/{tag}              any segment, then Path(pattern=...) validates")
    print()
    with TestClient(create_regex_app()) as client:
        _show("GET /users/123", client.get("/users/123"))
        _show("GET /users/550e8400-e29b-41d4-a716-446655440000",
              client.get("/users/550e8400-e29b-41d4-a716-446655440000"))
        _show("GET /users/abc (no route matches)", client.get("/users/abc"))
        _show("GET /posts/my-post-123", client.get("/posts/my-post-123"))
        _show("GET /posts/My_Post (no route matches)", client.get("/posts/My_Post"))
        _show("GET /tags/python", client.get("/tags/python"))
        _show("GET /tags/Python3 (route found, invalid)", client.get("/tags/Python3"))
    print()
    print("A converter mismatch is 404: the path simply is not served.")
    print("A Path(pattern=...) mismatch is 422: the route exists but the value is bad.")


# ---------------------------------------------------------------------------
# RouteConflict
# ---------------------------------------------------------------------------


def create_order_app(fixed_first: bool) -> FastAPI:
    """``/users/me`` and ``/users/{user_id}`` declared in either order."""
    app = FastAPI(title="Route order")

    def me() -> dict[str, Any]:
        return {"route": "current user"}

    def by_id(user_id: int) -> dict[str, Any]:
        return {"route": "user by id", "id": user_id}

    if fixed_first:
        app.get("/users/me")(me)
        app.get("/users/{user_id}")(by_id)
    else:
        app.get("/users/{user_id}")(by_id)
        app.get("/users/me")(me)

    @app.get("/users/{owner_id}/posts")
    def posts_of(owner_id: int) -> dict[str, Any]:
        return {"route": "posts of user", "owner_id": owner_id}

    @app.get("/files/{file_path:path}")
    def files(file_path: str) -> dict[str, Any]:
        return {"route": "catch-all", "file_path": file_path}

    return app


def route_conflict_demo() -> None:
    print("=== Declaration order decides between overlapping paths ===")
    for fixed_first in (False, True):
        order = "/users/me first" if fixed_first else "/users/{user_id} first"
        print(f"--- {order}")
        with TestClient(create_order_app(fixed_first)) as client:
            _show("GET /users/me", client.get("/users/me"))
            _show("GET /users/42", client.get("/users/42"))
    print()

    print("=== Different parameter names at the same position are fine ===")
    with TestClient(create_order_app(fixed_first=True)) as client:
        _show("GET /users/42/posts", client.get("/users/42/posts"))
        _show("GET /files/images/photo.jpg", client.get("/files/images/photo.jpg"))
    print()
    print("Declare fixed paths before parameterised ones, or give the parameter")
    print("a converter ({user_id:int}) so 'me' can never match it.")
    print("A {name:path} parameter captures the rest of the URL without a leading slash.")


# ---------------------------------------------------------------------------
# MiddlewareRoute
# ---------------------------------------------------------------------------


def create_scoped_app(log: list[str]) -> FastAPI:
    """Global middleware, router-level and route-level dependencies."""
    app = FastAPI(title="Scoped dependencies")

    @app.middleware("http")
    async def log_requests(request: Request, call_next) -> Response:
        log.append(f"middleware {request.method} {request.url.path}")
        return await call_next(request)

    def require_token(request: Request, authorization: Annotated[str | None, Header()] = None) -> None:
        log.append("require_token")
        if not authorization:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token required")
        request.state.user = "authenticated_user"

    def audit(request: Request) -> None:
        log.append(f"audit {request.url.path}")

    public = APIRouter(prefix="/public")
    protected = APIRouter(prefix="/api", dependencies=[Depends(require_token)])

    @public.get("/info")
    def info() -> dict[str, str]:
        return {"message": "public info"}

    @protected.get("/profile")
    def profile(request: Request) -> dict[str, str]:
        return {"message": "profile", "user": request.state.user}

    @protected.get("/dashboard", dependencies=[Depends(audit)])
    def dashboard() -> dict[str, str]:
        return {"message": "dashboard"}

    app.include_router(public)
    app.include_router(protected)
    return app


def middleware_route_demo() -> None:
    print("=== Three scopes ===")
    print("  app.middleware('http')              every request")
    print("  APIRouter(dependencies=[...])       every route in the router")
    print("  @router.get(..., dependencies=[...]) one route")
    print()
    log: list[str] = []
    with TestClient(create_scoped_app(log)) as client:
        requests = [
            ("GET /public/info", "/public/info", {}),
            ("GET /api/profile (no token)", "/api/profile", {}),
            ("GET /api/profile (token)", "/api/profile", {"Authorization": "Bearer t"}),
            ("GET /api/dashboard (token)", "/api/dashboard", {"Authorization": "Bearer t"}),
        ]
        for label, path, headers in requests:
            log.clear()
            _show(label, client.get(path, headers=headers))
            print(f"  ran: {' -> '.join(log)}")
    print()
    print("Router dependencies run before route dependencies; a raised")
    print("HTTPException stops the request before the handler.")
