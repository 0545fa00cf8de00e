"""Route registration, parameters and request bodies with FastAPI.

Every demo builds its app with a ``create_*_app`` factory and drives it
in-process through ``TestClient``; nothing listens on a socket.
"""

import logging
from enum import Enum
from typing import Annotated, Any

from fastapi import APIRouter, FastAPI, Header, HTTPException, Path, Query, Response, status
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


def _show(label: str, resp: Any) -> None:
    body = resp.json() if resp.content else ""
    print(f"{label:<40} -> {resp.status_code} {body}")


def route_table(app: FastAPI, prefix: str = "/") -> list[tuple[str, str]]:
    """List ``(methods, path)`` pairs from the app's OpenAPI schema.

    ``app.routes`` does not flatten included routers on every Starlette
    release, so the schema is the stable view of what the app serves.
    """
    rows = []
    for path, operations in app.openapi()["paths"].items():
        if path.startswith(prefix):
            rows.append((",".join(sorted(op.upper() for op in operations)), path))
    return rows


def _print_routes(app: FastAPI, prefix: str = "/") -> None:
    for methods, path in route_table(app, prefix):
        print(f"  {methods:<12} {path}")


# ---------------------------------------------------------------------------
# Basic routes
# ---------------------------------------------------------------------------


def create_basic_app() -> FastAPI:
    app = FastAPI(title="Basic routes")

    @app.get("/")
    def index() -> dict[str, str]:
        return {"message": "hello"}

    @app.get("/ping")
    def ping() -> dict[str, str]:
        return {"message": "pong"}

    @app.post("/echo")
    def echo(payload: dict[str, Any]) -> dict[str, Any]:
        return {"received": payload}

    @app.api_route("/any", methods=["GET", "POST", "PUT"])
    def any_method() -> dict[str, str]:
        return {"message": "matched any of GET/POST/PUT"}

    return app


def basic_routes_demo() -> None:
    print("=== Registering routes ===")
    app = create_basic_app()
    _print_routes(app)
    print()

    print("=== Calling them ===")
    with TestClient(app) as client:
        _show("GET /", client.get("/"))
        _show("GET /ping", client.get("/ping"))
        _show("POST /echo", client.post("/echo", json={"hello": "world"}))
        _show("PUT /any", client.put("/any"))
        _show("DELETE /any (not registered)", client.delete("/any"))
        _show("GET /missing", client.get("/missing"))
    print()
    print("Unregistered methods answer 405, unknown paths answer 404.")


# ---------------------------------------------------------------------------
# RESTful resource
# ---------------------------------------------------------------------------


class UserIn(BaseModel):
    name: str = Field(min_length=1)
    email: str


class UserPatch(BaseModel):
    name: str | None = None
    email: str | None = None


class User(UserIn):
    id: int


def create_restful_app() -> FastAPI:
    app = FastAPI(title="RESTful users")
    users: dict[int, User] = {}
    next_id = 1

    def _get_or_404(user_id: int) -> User:
        if user_id not in users:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"user {user_id} not found")
        return users[user_id]

    @app.get("/users")
    def list_users() -> list[User]:
        return list(users.values())

    @app.post("/users", status_code=status.HTTP_201_CREATED)
    def create_user(body: UserIn) -> User:
        nonlocal next_id
        user = User(id=next_id, **body.model_dump())
        users[user.id] = user
        next_id += 1
        return user

    @app.get("/users/{user_id}")
    def get_user(user_id: int) -> User:
        return _get_or_404(user_id)

    @app.put("/users/{user_id}")
    def replace_user(user_id: int, body: UserIn) -> User:
        _get_or_404(user_id)
        users[user_id] = User(id=user_id, **body.model_dump())
        return users[user_id]

    @app.patch("/users/{user_id}")
    def update_user(user_id: int, body: UserPatch) -> User:
        current = _get_or_404(user_id)
        users[user_id] = current.model_copy(update=body.model_dump(exclude_unset=True))
        return users[user_id]

    @app.delete("/users/{user_id}")
    def delete_user(user_id: int) -> Response:
        _get_or_404(user_id)
        del users[user_id]
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


def restful_routes_demo() -> None:
    print("=== One resource, five verbs ===")
    app = create_restful_app()
    _print_routes(app, "/users")
    print()

    with TestClient(app) as client:
        _show("POST /users", client.post("/users", json={"name": "Alice", "email": "alice@example.com"}))
        _show("POST /users", client.post("/users", json={"name": "Bob", "email": "bob@example.com"}))
        _show("GET /users", client.get("/users"))
        _show("GET /users/1", client.get("/users/1"))
        _show("PUT /users/1", client.put("/users/1", json={"name": "Alice B.", "email": "ab@example.com"}))
        _show("PATCH /users/2", client.patch("/users/2", json={"email": "robert@example.com"}))
        _show("DELETE /users/1", client.delete("/users/1"))
        _show("GET /users/1 (after delete)", client.get("/users/1"))
    print()
    print("=== Conventions ===")
    print("POST creates (201), PUT replaces, PATCH updates fields,")
    print("DELETE answers 204 with an empty body, missing ids answer 404.")


# ---------------------------------------------------------------------------
# Path and query parameters
# ---------------------------------------------------------------------------


class ModelName(str, Enum):
    alexnet = "alexnet"
    resnet = "resnet"
    lenet = "lenet"


def create_path_app() -> FastAPI:
    app = FastAPI(title="Path parameters")

    @app.get("/users/{user_id}")
    def user_by_id(user_id: Annotated[int, Path(ge=1)]) -> dict[str, Any]:
        return {"user_id": user_id, "type": type(user_id).__name__}

    @app.get("/posts/{slug}")
    def post_by_slug(slug: Annotated[str, Path(pattern=r"^[a-z0-9-]+$")]) -> dict[str, str]:
        return {"slug": slug}

    @app.get("/models/{model}")
    def model_info(model: ModelName) -> dict[str, str]:
        return {"model": model.value}

    @app.get("/files/{file_path:path}")
    def read_file(file_path: str) -> dict[str, str]:
        return {"file_path": file_path}

    @app.get("/users/{user_id}/orders/{order_id}")
    def user_order(user_id: int, order_id: int) -> dict[str, int]:
        return {"user_id": user_id, "order_id": order_id}

    return app


def path_parameter_demo() -> None:
    print("=== Typed path parameters ===")
    with TestClient(create_path_app()) as client:
        _show("GET /users/42", client.get("/users/42"))
        _show("GET /users/abc (not an int)", client.get("/users/abc"))
        _show("GET /users/0 (ge=1)", client.get("/users/0"))
        _show("GET /posts/my-post-123", client.get("/posts/my-post-123"))
        _show("GET /posts/My_Post (pattern)", client.get("/posts/My_Post"))
        _show("GET /models/resnet", client.get("/models/resnet"))
        _show("GET /models/vgg (not in enum)", client.get("/models/vgg"))
        _show("GET /files/static/css/app.css", client.get("/files/static/css/app.css"))
        _show("GET /users/7/orders/99", client.get("/users/7/orders/99"))
    print()
    print("Conversion and constraint failures answer 422 before the handler runs.")


def create_query_app() -> FastAPI:
    app = FastAPI(title="Query parameters")

    @app.get("/search")
    def search(
        q: Annotated[str | None, Query(max_length=50)] = None,
        page: Annotated[int, Query(ge=1)] = 1,
        size: Annotated[int, Query(ge=1, le=100)] = 10,
        tags: Annotated[list[str], Query()] = [],
        active: bool = True,
    ) -> dict[str, Any]:
        return {"q": q, "page": page, "size": size, "tags": tags, "active": active}

    @app.get("/items")
    def items(sort: Annotated[str, Query(pattern="^(name|price|-name|-price)$")] = "name") -> dict[str, str]:
        return {"sort": sort}

    return app


def query_parameter_demo() -> None:
    print("=== Optional and defaulted query parameters ===")
    with TestClient(create_query_app()) as client:
        _show("GET /search", client.get("/search"))
        _show("GET /search?q=python&page=2", client.get("/search", params={"q": "python", "page": 2}))
        _show("GET /search?tags=a&tags=b", client.get("/search", params=[("tags", "a"), ("tags", "b")]))
        _show("GET /search?active=no", client.get("/search", params={"active": "no"}))
        _show("GET /search?size=500 (le=100)", client.get("/search", params={"size": 500}))
        _show("GET /items?sort=-price", client.get("/items", params={"sort": "-price"}))
        _show("GET /items?sort=color (pattern)", client.get("/items", params={"sort": "color"}))
    print()
    print("Repeated keys bind to list parameters; 'no'/'off'/'0' parse as False.")


# ---------------------------------------------------------------------------
# JSON bodies
# ---------------------------------------------------------------------------


class Address(BaseModel):
    city: str
    zip_code: str = Field(pattern=r"^\d{5}$")


class OrderItem(BaseModel):
    sku: str
    quantity: int = Field(gt=0)
    price: float = Field(ge=0)


class OrderRequest(BaseModel):
    customer: str
    items: list[OrderItem] = Field(min_length=1)
    shipping: Address
    note: str | None = None


def create_binding_app() -> FastAPI:
    app = FastAPI(title="JSON binding")

    @app.post("/orders", status_code=status.HTTP_201_CREATED)
    def create_order(order: OrderRequest) -> dict[str, Any]:
        total = sum(i.quantity * i.price for i in order.items)
        return {"customer": order.customer, "items": len(order.items),
                "total": round(total, 2), "city": order.shipping.city}

    return app


def json_binding_demo() -> None:
    print("=== Binding a JSON body to a pydantic model ===")
    good = {
        "customer": "alice",
        "items": [{"sku": "A-1", "quantity": 2, "price": 9.5}, {"sku": "B-2", "quantity": 1, "price": 20}],
        "shipping": {"city": "Paris", "zip_code": "75001"},
    }
    bad = {"customer": "bob", "items": [], "shipping": {"city": "Rome", "zip_code": "ROMA"}}
    with TestClient(create_binding_app()) as client:
        _show("POST /orders (valid)", client.post("/orders", json=good))
        resp = client.post("/orders", json=bad)
        print(f"{'POST /orders (invalid)':<40} -> {resp.status_code}")
        for err in resp.json()["detail"]:
            print(f"  {'.'.join(str(p) for p in err['loc'])}: {err['msg']}")
        _show("POST /orders (not JSON)",
              client.post("/orders", content=b"customer=bob", headers={"Content-Type": "text/plain"}))
    print()
    print("Nested models validate recursively; every failing field is reported.")


# ---------------------------------------------------------------------------
# Route groups and versions
# ---------------------------------------------------------------------------


def create_grouped_app() -> FastAPI:
    app = FastAPI(title="Route groups")
    v1 = APIRouter(prefix="/api/v1")
    users = APIRouter(prefix="/users", tags=["users"])
    posts = APIRouter(prefix="/posts", tags=["posts"])

    @users.get("")
    def list_users() -> dict[str, Any]:
        return {"users": ["alice", "bob"]}

    @users.get("/{user_id}")
    def get_user(user_id: int) -> dict[str, int]:
        return {"id": user_id}

    @posts.get("")
    def list_posts() -> dict[str, Any]:
        return {"posts": []}

    v1.include_router(users)
    v1.include_router(posts)
    app.include_router(v1)
    return app


def route_group_demo() -> None:
    print("=== Nested APIRouter prefixes ===")
    app = create_grouped_app()
    _print_routes(app, "/api")
    print()
    with TestClient(app) as client:
        _show("GET /api/v1/users", client.get("/api/v1/users"))
        _show("GET /api/v1/users/3", client.get("/api/v1/users/3"))
        _show("GET /api/v1/posts", client.get("/api/v1/posts"))
    print()
    print("Routers compose: prefix, tags and dependencies apply to every route inside.")


def create_versioned_app() -> FastAPI:
    app = FastAPI(title="Versioned API")
    v1 = APIRouter(prefix="/api/v1")
    v2 = APIRouter(prefix="/api/v2")

    @v1.get("/users/{user_id}")
    def user_v1(user_id: int) -> dict[str, Any]:
        return {"id": user_id, "name": "Alice Smith"}

    @v2.get("/users/{user_id}")
    def user_v2(user_id: int) -> dict[str, Any]:
        return {"id": user_id, "first_name": "Alice", "last_name": "Smith", "links": {"self": f"/api/v2/users/{user_id}"}}

    @app.get("/api/users/{user_id}")
    def user_by_header(user_id: int, api_version: Annotated[str, Header()] = "v1") -> dict[str, Any]:
        if api_version == "v1":
            return user_v1(user_id)
        if api_version == "v2":
            return user_v2(user_id)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"unsupported version {api_version}")

    app.include_router(v1)
    app.include_router(v2)
    return app


def version_control_demo() -> None:
    print("=== Versioning by URL path ===")
    with TestClient(create_versioned_app()) as client:
        _show("GET /api/v1/users/1", client.get("/api/v1/users/1"))
        _show("GET /api/v2/users/1", client.get("/api/v2/users/1"))
        print()
        print("=== Versioning by header ===")
        _show("GET /api/users/1", client.get("/api/users/1"))
        _show("GET /api/users/1 (API-Version: v2)", client.get("/api/users/1", headers={"API-Version": "v2"}))
        _show("GET /api/users/1 (API-Version: v9)", client.get("/api/users/1", headers={"API-Version": "v9"}))
    print()
    print("URL versions are explicit and cache-friendly; header versions keep URLs stable.")
    print("Keep old versions running until clients have migrated.")
