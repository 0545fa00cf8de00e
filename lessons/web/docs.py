"""OpenAPI documentation: generated schema, per-route metadata and protected docs.

FastAPI builds the OpenAPI document from the routes themselves, so the
docs cannot drift from the code. ``/docs`` (Swagger UI) and ``/redoc``
render that document.
"""

import json
import logging
import secrets
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException, Path, Query, status
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from lessons.config import get_settings
from lessons.web.auth import Principal, create_token, current_user

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


class ErrorBody(BaseModel):
    detail: str


# ---------------------------------------------------------------------------
# SwaggerIntegration
# ---------------------------------------------------------------------------


class Book(BaseModel):
    id: int = Field(description="Book id", examples=[1])
    title: str = Field(min_length=1, description="Title", examples=["The Go Programming Language"])
    author: str = Field(description="Author", examples=["Alan Donovan"])


class BookCreate(BaseModel):
    title: str = Field(min_length=1)
    author: str


def create_documented_app() -> FastAPI:
    app = FastAPI(
        title="Bookstore API",
        version=API_VERSION,
        description="A small catalogue used to show generated API docs.",
        contact={"name": "API Support", "email": "support@example.com"},
        license_info={"name": "Apache 2.0", "url": "https://www.apache.org/licenses/LICENSE-2.0.html"},
        openapi_tags=[{"name": "books", "description": "Catalogue operations"}],
    )
    books: dict[int, Book] = {1: Book(id=1, title="The Go Programming Language", author="Alan Donovan")}

    @app.get("/api/v1/books", tags=["books"], summary="List books", response_model=list[Book])
    def list_books() -> list[Book]:
        """Return every book in the catalogue, ordered by id."""
        return [books[k] for k in sorted(books)]

    @app.get(
        "/api/v1/books/{book_id}",
        tags=["books"],
        summary="Get a book",
        response_model=Book,
        responses={status.HTTP_404_NOT_FOUND: {"model": ErrorBody, "description": "Book not found"}},
    )
    def get_book(book_id: int) -> Book:
        if book_id not in books:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="book not found")
        return books[book_id]

    @app.post("/api/v1/books", tags=["books"], summary="Create a book", response_model=Book,
              status_code=status.HTTP_201_CREATED)
    def create_book(body: BookCreate) -> Book:
        book = Book(id=max(books, default=0) + 1, **body.model_dump())
        books[book.id] = book
        return book

    return app


def swagger_integration_demo() -> None:
    app = create_documented_app()
    with TestClient(app) as client:
        schema = client.get("/openapi.json").json()
        info = schema["info"]
        print(f"=== {info['title']} {info['version']} (OpenAPI {schema['openapi']}) ===")
        print(info["description"])
        print()
        print("=== Operations ===")
        for path, operations in schema["paths"].items():
            for method, operation in operations.items():
                codes = ",".join(sorted(operation["responses"]))
                print(f"  {method.upper():<6} {path:<26} {operation['summary']:<14} responses={codes}")
        print()
        print("=== Schemas ===")
        for name, component in schema["components"]["schemas"].items():
            print(f"  {name}: {sorted(component.get('properties', {}))}")
        print()
        for url in ("/docs", "/redoc"):
            resp = client.get(url)
            print(f"GET {url:<8} -> {resp.status_code} {resp.headers['content-type'].split(';')[0]}")
    print()
    print("The schema is generated from route signatures and models; there is no")
    print("separate annotation step to keep in sync.")


# ---------------------------------------------------------------------------
# SwaggerAnnotations
# ---------------------------------------------------------------------------

ANNOTATION_MAP = [
    ("summary", "summary='...' on the decorator"),
    ("description", "the handler docstring, or description='...'"),
    ("tags", "tags=['users'] on the decorator or the APIRouter"),
    ("parameters", "Path(...), Query(...), Header(...) with description"),
    ("request body", "a pydantic model parameter"),
    ("success response", "response_model and status_code"),
    ("error responses", "responses={404: {'model': ErrorBody}}"),
    ("security", "a security dependency such as HTTPBearer"),
    ("deprecated", "deprecated=True"),
]


class UserOut(BaseModel):
    id: int
    name: str
    posts: list[str] = Field(default_factory=list)


def create_annotated_app() -> FastAPI:
    app = FastAPI(title="Annotated API", version=API_VERSION)

    @app.get(
        "/api/v1/users/{user_id}",
        tags=["users"],
        summary="Get a user",
        response_model=UserOut,
        responses={status.HTTP_404_NOT_FOUND: {"model": ErrorBody, "description": "No such user"}},
    )
    def get_user(
        user_id: Annotated[int, Path(ge=1, description="User id, starting at 1")],
        include_posts: Annotated[bool, Query(description="Embed the user's posts")] = False,
    ) -> UserOut:
        """Look up one user by id.

        Posts are only loaded when ``include_posts`` is set.
        """
        if user_id != 1:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found")
        return UserOut(id=1, name="Alice", posts=["hello"] if include_posts else [])

    @app.get("/api/v1/users", tags=["users"], summary="Search users (old)", deprecated=True)
    def search_users(q: Annotated[str, Query(min_length=1, description="Name prefix")]) -> list[UserOut]:
        return [UserOut(id=1, name="Alice")] if "alice".startswith(q.lower()) else []

    return app


def swagger_annotations_demo() -> None:
    print("=== Where each piece of documentation comes from ===")
    for concept, source in ANNOTATION_MAP:
        print(f"  {concept:<17} {source}")
    print()
    schema = create_annotated_app().openapi()
    operation = schema["paths"]["/api/v1/users/{user_id}"]["get"]
    print("=== Generated operation for GET /api/v1/users/{user_id} ===")
    print(json.dumps({
        "summary": operation["summary"],
        "description": operation["description"],
        "parameters": [
            {"name": p["name"], "in": p["in"], "required": p["required"], "description": p.get("description")}
            for p in operation["parameters"]
        ],
        "responses": sorted(operation["responses"]),
    }, indent=2))
    print()
    search = schema["paths"]["/api/v1/users"]["get"]
    print(f"GET /api/v1/users deprecated={search.get('deprecated', False)}")


# ---------------------------------------------------------------------------
# SwaggerSecurity
# ---------------------------------------------------------------------------

_basic = HTTPBasic()


def docs_credentials(credentials: HTTPBasicCredentials = Depends(_basic)) -> str:
    """Check HTTP Basic credentials against the configured docs account."""
    settings = get_settings()
    good_user = secrets.compare_digest(credentials.username.encode(), settings.docs_username.encode())
    good_password = secrets.compare_digest(credentials.password.encode(), settings.docs_password.encode())
    if not (good_user and good_password):
        logger.warning("Rejected docs login for %r", credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid docs credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username


def create_secured_docs_app() -> FastAPI:
    """API with bearer auth whose docs and schema sit behind HTTP Basic."""
    app = FastAPI(title="Secured API", version=API_VERSION, docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/docs", include_in_schema=False)
    def docs(_: str = Depends(docs_credentials)) -> HTMLResponse:
        return get_swagger_ui_html(openapi_url="/openapi.json", title=f"{app.title} - docs")

    @app.get("/openapi.json", include_in_schema=False)
    def openapi(_: str = Depends(docs_credentials)) -> dict[str, Any]:
        return app.openapi()

    @app.get("/api/public/ping", tags=["public"])
    def ping() -> dict[str, str]:
        return {"message": "pong"}

    @app.get("/api/protected", tags=["protected"], summary="Requires a bearer token")
    def protected(user: Principal = Depends(current_user)) -> dict[str, Any]:
        return {"userID": user.user_id}

    return app


def swagger_security_demo() -> None:
    settings = get_settings()
    good = (settings.docs_username, settings.docs_password)
    with TestClient(create_secured_docs_app()) as client:
        print("=== /docs behind HTTP Basic ===")
        print(f"GET /docs (no credentials)    -> {client.get('/docs').status_code}")
        print(f"GET /docs (wrong password)    -> {client.get('/docs', auth=(good[0], 'nope')).status_code}")
        print(f"GET /docs (configured account) -> {client.get('/docs', auth=good).status_code}")
        schema = client.get("/openapi.json", auth=good).json()
        print()

        print("=== Security schemes in the schema ===")
        for name, scheme in schema["components"]["securitySchemes"].items():
            print(f"  {name}: {scheme}")
        for path, operations in schema["paths"].items():
            for method, operation in operations.items():
                print(f"  {method.upper()} {path} security={operation.get('security', [])}")
        print()

        print("=== The API itself uses bearer tokens ===")
        token = create_token("alice", ["admin", "user"])
        print(f"GET /api/protected (no token) -> {client.get('/api/protected').status_code}")
        resp = client.get("/api/protected", headers={"Authorization": f"Bearer {token}"})
        print(f"GET /api/protected (token)    -> {resp.status_code} {resp.json()}")
    print()
    print("Set DOCS_USERNAME and DOCS_PASSWORD to change the docs account, or pass")
    print("docs_url=None and openapi_url=None in production to switch the docs off.")
