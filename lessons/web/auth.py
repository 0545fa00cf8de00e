"""JWT authentication for FastAPI routes.

Tokens are HS256-signed with PyJWT. The secret comes from ``JWT_SECRET``
(see ``lessons.config``); claims are ``userID``, ``roles``, ``iat`` and ``exp``.

Invariants:
    - Missing, malformed, badly signed or expired tokens -> 401
    - Valid token without the required role -> 403
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import APIRouter, Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi.testclient import TestClient
from pydantic import BaseModel

from lessons.config import get_settings
from lessons.web.routes import route_table

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)

# Demo users: username -> (password, roles)
DEMO_USERS: dict[str, tuple[str, list[str]]] = {
    "alice": ("wonderland", ["admin", "user"]),
    "bob": ("builder", ["user"]),
}


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class Principal(BaseModel):
    user_id: str
    roles: list[str]


# ---------------------------------------------------------------------------
# Token helpers
# ---------------------------------------------------------------------------


def create_token(
    user_id: str,
    roles: list[str],
    *,
    secret: str | None = None,
    expires_in: timedelta | None = None,
    now: datetime | None = None,
) -> str:
    """Issue a signed token for ``user_id``."""
    settings = get_settings()
    issued = now or datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(hours=settings.jwt_expiry_hours)
    claims = {
        "userID": user_id,
        "roles": roles,
        "iat": issued,
        "exp": issued + lifetime,
    }
    return jwt.encode(claims, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, *, secret: str | None = None) -> Principal:
    """Verify ``token`` and return its principal.

    Raises ``jwt.InvalidTokenError`` (or a subclass such as
    ``jwt.ExpiredSignatureError``) when the token cannot be trusted.
    """
    settings = get_settings()
    claims = jwt.decode(
        token,
        secret or settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["exp", "iat", "userID"]},
    )
    return Principal(user_id=claims["userID"], roles=list(claims.get("roles", [])))


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Principal:
    if credentials is None:
        raise _unauthorized("missing bearer token")
    try:
        return decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("token expired")
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected token: %s", exc)
        raise _unauthorized("invalid token")


def require_role(role: str) -> Callable[..., Principal]:
    """Dependency factory: the caller must hold ``role``."""

    def checker(user: Principal = Depends(current_user)) -> Principal:
        if role not in user.roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"requires role {role}")
        return user

    return checker


# ---------------------------------------------------------------------------
# Apps
# ---------------------------------------------------------------------------


def create_auth_app() -> FastAPI:
    app = FastAPI(title="JWT demo")

    @app.post("/login", response_model=TokenResponse)
    def login(body: LoginRequest) -> TokenResponse:
        record = DEMO_USERS.get(body.username)
        if record is None or record[0] != body.password:
            raise _unauthorized("bad username or password")
        hours = get_settings().jwt_expiry_hours
        token = create_token(body.username, record[1])
        return TokenResponse(access_token=token, expires_in=hours * 3600)

    @app.get("/profile")
    def profile(user: Principal = Depends(current_user)) -> dict[str, Any]:
        return {"userID": user.user_id, "roles": user.roles}

    @app.get("/admin/stats")
    def admin_stats(user: Principal = Depends(require_role("admin"))) -> dict[str, Any]:
        return {"users": len(DEMO_USERS), "requested_by": user.user_id}

    return app


def create_grouped_app() -> FastAPI:
    """Public, authenticated and admin route groups."""
    app = FastAPI(title="Route groups")

    public = APIRouter(prefix="/api/public", tags=["public"])
    user = APIRouter(prefix="/api/user", tags=["user"], dependencies=[Depends(current_user)])
    admin = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_role("admin"))])

    @public.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @user.get("/me")
    def me(principal: Principal = Depends(current_user)) -> dict[str, Any]:
        return {"userID": principal.user_id}

    @admin.delete("/users/{username}")
    def delete_user(username: str) -> dict[str, str]:
        return {"deleted": username}

    app.include_router(public)
    app.include_router(user)
    app.include_router(admin)
    return app


def _show(label: str, resp: Any) -> None:
    print(f"{label:<38} -> {resp.status_code} {resp.json()}")


def jwt_auth_demo() -> None:
    settings = get_settings()
    print("=== JWT authentication with a FastAPI dependency ===")
    print(f"algorithm={settings.jwt_algorithm} lifetime={settings.jwt_expiry_hours}h "
          f"secret from JWT_SECRET ({'custom' if settings.jwt_secret != 'your-secret-key' else 'demo default'})")
    print()

    print("=== Token anatomy ===")
    token = create_token("alice", ["admin", "user"])
    header, payload, signature = token.split(".")
    print(f"header.payload.signature -> {len(header)}.{len(payload)}.{len(signature)} chars")
    print(f"unverified header: {jwt.get_unverified_header(token)}")
    principal = decode_token(token)
    print(f"verified claims: userID={principal.user_id} roles={principal.roles}")
    print()

    app = create_auth_app()
    with TestClient(app) as client:
        print("=== Requests ===")
        _show("GET /profile (no token)", client.get("/profile"))
        _show("GET /profile (garbage token)",
              client.get("/profile", headers={"Authorization": "Bearer not.a.jwt"}))
        forged = create_token("alice", ["admin"], secret="wrong-secret")
        _show("GET /profile (wrong signature)",
              client.get("/profile", headers={"Authorization": f"Bearer {forged}"}))
        expired = create_token("alice", ["admin"], expires_in=timedelta(seconds=-1))
        _show("GET /profile (expired)",
              client.get("/profile", headers={"Authorization": f"Bearer {expired}"}))
        _show("POST /login (bad password)",
              client.post("/login", json={"username": "bob", "password": "nope"}))

        bob = client.post("/login", json={"username": "bob", "password": "builder"}).json()
        bob_auth = {"Authorization": f"Bearer {bob['access_token']}"}
        _show("GET /profile (bob)", client.get("/profile", headers=bob_auth))
        _show("GET /admin/stats (bob, no admin role)", client.get("/admin/stats", headers=bob_auth))

        alice = client.post("/login", json={"username": "alice", "password": "wonderland"}).json()
        alice_auth = {"Authorization": f"Bearer {alice['access_token']}"}
        _show("GET /admin/stats (alice)", client.get("/admin/stats", headers=alice_auth))
    print()

    print("=== Summary ===")
    print("401: no token, bad signature, malformed or expired token")
    print("403: valid token without the required role")


def gin_router_demo() -> None:
    print("=== Route groups with shared dependencies ===")
    app = create_grouped_app()
    for methods, path in route_table(app, "/api"):
        print(f"{methods:<7} {path}")
    print()

    admin_token = create_token("alice", ["admin"])
    user_token = create_token("bob", ["user"])
    with TestClient(app) as client:
        _show("GET /api/public/health", client.get("/api/public/health"))
        _show("GET /api/user/me (no token)", client.get("/api/user/me"))
        _show("GET /api/user/me (bob)",
              client.get("/api/user/me", headers={"Authorization": f"Bearer {user_token}"}))
        _show("DELETE /api/admin/users/carol (bob)",
              client.delete("/api/admin/users/carol", headers={"Authorization": f"Bearer {user_token}"}))
        _show("DELETE /api/admin/users/carol (alice)",
              client.delete("/api/admin/users/carol", headers={"Authorization": f"Bearer {admin_token}"}))
    print()
    print("Group-level dependencies run before every route in the group,")
    print("so handlers only contain business logic.")
