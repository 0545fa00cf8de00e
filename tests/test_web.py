"""Tests for the FastAPI demo apps (lessons/web/).

Uses httpx.AsyncClient with the ASGI transport for fast in-process tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import jwt
import pytest
from pydantic import SecretStr, ValidationError

from lessons.config import get_settings
from lessons.web.auth import create_auth_app, create_grouped_app, create_token, decode_token, gin_router_demo
from lessons.web.docs import create_annotated_app, create_documented_app, create_secured_docs_app
from lessons.web.files import SAMPLE_SITE, create_form_app, create_static_app, write_sample_site
from lessons.web.matching import create_order_app, create_regex_app, create_scoped_app
from lessons.web.middleware import (
    FixedWindowRateLimiter,
    create_chain_app,
    create_cors_app,
    create_debug_app,
    create_production_app,
    create_protected_app,
    create_rate_limited_app,
)
from lessons.web.routes import create_grouped_app as create_routes_grouped_app
from lessons.web.routes import (
    create_path_app,
    create_query_app,
    create_restful_app,
    create_versioned_app,
    route_table,
)
from lessons.web.validation import (
    INVALID_CONSTRAINTS,
    VALID_CONSTRAINTS,
    ConstraintShowcase,
    UserRecord,
    create_constraints_app,
    create_envelope_app,
    create_register_app,
    create_sensitive_app,
    create_validation_app,
    mask_phone,
    redact,
)


def _client(app) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


def _bearer(user_id: str = "alice", roles: list[str] | None = None, **kwargs) -> dict[str, str]:
    token = create_token(user_id, roles if roles is not None else ["user"], **kwargs)
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Token helpers
# ---------------------------------------------------------------------------

class TestTokens:
    def test_round_trip_claims(self):
        principal = decode_token(create_token("u1", ["admin", "user"]))
        assert principal.user_id == "u1"
        assert principal.roles == ["admin", "user"]

    def test_hs256_header(self):
        assert jwt.get_unverified_header(create_token("u1", []))["alg"] == "HS256"

    def test_claims_present(self):
        claims = jwt.decode(create_token("u1", ["user"]), "test-secret-key", algorithms=["HS256"])
        assert {"userID", "roles", "exp", "iat"} <= claims.keys()

    def test_expiry_from_settings(self, monkeypatch):
        monkeypatch.setenv("JWT_EXPIRY_HOURS", "2")
        from lessons.config import get_settings
        get_settings.cache_clear()
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)
        claims = jwt.decode(create_token("u1", [], now=now), "test-secret-key",
                            algorithms=["HS256"], options={"verify_exp": False, "verify_iat": False})
        assert claims["exp"] - claims["iat"] == 2 * 3600

    def test_wrong_secret_rejected(self):
        token = create_token("u1", [], secret="other-secret")
        with pytest.raises(jwt.InvalidSignatureError):
            decode_token(token)

    def test_expired_rejected(self):
        token = create_token("u1", [], expires_in=timedelta(seconds=-5))
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_token(token)

    def test_secret_read_from_env(self, monkeypatch):
        token = create_token("u1", [])
        monkeypatch.setenv("JWT_SECRET", "rotated")
        from lessons.config import get_settings
        get_settings.cache_clear()
        with pytest.raises(jwt.InvalidSignatureError):
            decode_token(token)


# ---------------------------------------------------------------------------
# Auth dependencies
# ---------------------------------------------------------------------------

class TestAuthApp:
    @pytest.mark.asyncio
    async def test_missing_token_401(self):
        async with _client(create_auth_app()) as client:
            resp = await client.get("/profile")
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_garbage_token_401(self):
        async with _client(create_auth_app()) as client:
            resp = await client.get("/profile", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "invalid token"

    @pytest.mark.asyncio
    async def test_expired_token_401(self):
        async with _client(create_auth_app()) as client:
            resp = await client.get("/profile", headers=_bearer(expires_in=timedelta(seconds=-1)))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "token expired"

    @pytest.mark.asyncio
    async def test_valid_token_200(self):
        async with _client(create_auth_app()) as client:
            resp = await client.get("/profile", headers=_bearer("bob", ["user"]))
        assert resp.status_code == 200
        assert resp.json() == {"userID": "bob", "roles": ["user"]}

    @pytest.mark.asyncio
    async def test_missing_role_403(self):
        async with _client(create_auth_app()) as client:
            resp = await client.get("/admin/stats", headers=_bearer("bob", ["user"]))
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_role_200(self):
        async with _client(create_auth_app()) as client:
            resp = await client.get("/admin/stats", headers=_bearer("alice", ["admin"]))
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_login_issues_usable_token(self):
        async with _client(create_auth_app()) as client:
            login = await client.post("/login", json={"username": "alice", "password": "wonderland"})
            assert login.status_code == 200
            token = login.json()["access_token"]
            resp = await client.get("/admin/stats", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_login_bad_password_401(self):
        async with _client(create_auth_app()) as client:
            resp = await client.post("/login", json={"username": "bob", "password": "wrong"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_route_groups(self):
        async with _client(create_grouped_app()) as client:
            assert (await client.get("/api/public/health")).status_code == 200
            assert (await client.get("/api/user/me")).status_code == 401
            assert (await client.get("/api/user/me", headers=_bearer())).status_code == 200
            assert (await client.delete("/api/admin/users/x", headers=_bearer())).status_code == 403
            resp = await client.delete("/api/admin/users/x", headers=_bearer("root", ["admin"]))
        assert resp.json() == {"deleted": "x"}


# ---------------------------------------------------------------------------
# Middleware chain
# ---------------------------------------------------------------------------

class TestMiddlewareChain:
    @pytest.mark.asyncio
    async def test_public_route_runs_full_chain(self):
        trace: list[str] = []
        async with _client(create_chain_app(trace)) as client:
            resp = await client.get("/public/info")
        assert resp.status_code == 200
        assert trace == ["logger:start", "cors", "jwt", "rbac", "handler", "logger:end 200"]

    @pytest.mark.asyncio
    async def test_missing_token_aborts_at_jwt(self):
        trace: list[str] = []
        async with _client(create_chain_app(trace)) as client:
            resp = await client.get("/api/profile")
        assert resp.status_code == 401
        assert trace == ["logger:start", "cors", "jwt", "logger:end 401"]

    @pytest.mark.asyncio
    async def test_rbac_aborts_without_role(self):
        trace: list[str] = []
        async with _client(create_chain_app(trace)) as client:
            resp = await client.get("/admin/dashboard", headers=_bearer("bob", ["user"]))
        assert resp.status_code == 403
        assert "handler" not in trace
        assert trace[-1] == "logger:end 403"

    @pytest.mark.asyncio
    async def test_principal_reaches_handler(self):
        async with _client(create_chain_app([])) as client:
            resp = await client.get("/api/profile", headers=_bearer("carol"))
        assert resp.json() == {"userID": "carol"}

    @pytest.mark.asyncio
    async def test_cors_header_only_for_allowed_origin(self):
        async with _client(create_chain_app([])) as client:
            ok = await client.get("/public/info", headers={"Origin": "http://localhost:3000"})
            bad = await client.get("/public/info", headers={"Origin": "https://evil.example.net"})
        assert ok.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert "access-control-allow-origin" not in bad.headers


class TestProtectedApp:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("path,roles,expected", [
        ("/test", ["admin"], 200),
        ("/test", ["user"], 200),
        ("/admin/test", ["admin", "user"], 200),
        ("/admin/test", ["user"], 403),
    ])
    async def test_role_matrix(self, path, roles, expected):
        async with _client(create_protected_app()) as client:
            resp = await client.get(path, headers=_bearer("user123", roles))
        assert resp.status_code == expected

    @pytest.mark.asyncio
    async def test_invalid_token(self):
        async with _client(create_protected_app()) as client:
            resp = await client.get("/test", headers={"Authorization": "Bearer invalid_token"})
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_request_id_echoed(self):
        async with _client(create_protected_app()) as client:
            resp = await client.get("/test", headers={**_bearer(), "X-Request-ID": "abc"})
        assert resp.headers["x-request-id"] == "abc"

    @pytest.mark.asyncio
    async def test_request_id_generated(self):
        async with _client(create_protected_app()) as client:
            first = await client.get("/test", headers=_bearer())
            second = await client.get("/test", headers=_bearer())
        assert first.headers["x-request-id"] != second.headers["x-request-id"]


class TestCors:
    @pytest.mark.asyncio
    async def test_preflight_allowed(self):
        async with _client(create_cors_app()) as client:
            resp = await client.options("/api/data", headers={
                "Origin": "https://app.example.com", "Access-Control-Request-Method": "PUT"})
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "https://app.example.com"

    @pytest.mark.asyncio
    async def test_preflight_disallowed(self):
        async with _client(create_cors_app()) as client:
            resp = await client.options("/api/data", headers={
                "Origin": "https://evil.example.net", "Access-Control-Request-Method": "PUT"})
        assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------

class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestFixedWindowRateLimiter:
    def test_allows_up_to_limit(self):
        limiter = FixedWindowRateLimiter(3, 60, clock=FakeClock())
        results = [limiter.hit("a") for _ in range(4)]
        assert [r[0] for r in results] == [True, True, True, False]
        assert [r[1] for r in results[:3]] == [2, 1, 0]

    def test_retry_after_counts_down(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        limiter.hit("a")
        clock.now += 20
        allowed, _, retry_after = limiter.hit("a")
        assert not allowed
        assert retry_after == pytest.approx(40)

    def test_window_resets(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        limiter.hit("a")
        clock.now += 60
        assert limiter.hit("a")[0] is True

    def test_keys_are_independent(self):
        limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())
        assert limiter.hit("a")[0]
        assert limiter.hit("b")[0]
        assert not limiter.hit("a")[0]

    @pytest.mark.parametrize("limit,window", [(0, 60), (1, 0)])
    def test_invalid_config(self, limit, window):
        with pytest.raises(ValueError):
            FixedWindowRateLimiter(limit, window)

    @pytest.mark.parametrize("var,value", [
        ("RATE_LIMIT_PER_WINDOW", "0"),
        ("RATE_LIMIT_PER_WINDOW", "-3"),
        ("RATE_LIMIT_WINDOW_S", "0"),
    ])
    def test_settings_reject_unusable_limits(self, monkeypatch, var, value):
        monkeypatch.setenv(var, value)
        get_settings.cache_clear()
        with pytest.raises(ValidationError, match=var.lower()):
            get_settings()

    @pytest.mark.asyncio
    async def test_middleware_returns_429(self):
        limiter = FixedWindowRateLimiter(2, 60, clock=FakeClock())
        async with _client(create_rate_limited_app(limiter)) as client:
            codes = [(await client.get("/api/resource")).status_code for _ in range(3)]
            last = await client.get("/api/resource")
            health = await client.get("/health")
        assert codes == [200, 200, 429]
        assert last.headers["retry-after"] == "60"
        assert health.status_code == 200


# ---------------------------------------------------------------------------
# Routes, parameters and validation
# ---------------------------------------------------------------------------

class TestRoutes:
    @pytest.mark.asyncio
    async def test_restful_crud(self):
        async with _client(create_restful_app()) as client:
            created = await client.post("/users", json={"name": "A", "email": "a@x.io"})
            assert created.status_code == 201
            uid = created.json()["id"]
            patched = await client.patch(f"/users/{uid}", json={"email": "new@x.io"})
            assert patched.json() == {"name": "A", "email": "new@x.io", "id": uid}
            deleted = await client.delete(f"/users/{uid}")
            assert deleted.status_code == 204
            assert (await client.get(f"/users/{uid}")).status_code == 404

    @pytest.mark.asyncio
    async def test_restful_apps_do_not_share_state(self):
        async with _client(create_restful_app()) as client:
            await client.post("/users", json={"name": "A", "email": "a@x.io"})
        async with _client(create_restful_app()) as client:
            assert (await client.get("/users")).json() == []

    @pytest.mark.asyncio
    async def test_path_conversion_and_constraints(self):
        async with _client(create_path_app()) as client:
            assert (await client.get("/users/42")).json() == {"user_id": 42, "type": "int"}
            assert (await client.get("/users/abc")).status_code == 422
            assert (await client.get("/users/0")).status_code == 422
            assert (await client.get("/models/vgg")).status_code == 422
            assert (await client.get("/files/a/b.txt")).json() == {"file_path": "a/b.txt"}

    @pytest.mark.asyncio
    async def test_query_defaults_and_lists(self):
        async with _client(create_query_app()) as client:
            default = (await client.get("/search")).json()
            tagged = (await client.get("/search", params=[("tags", "a"), ("tags", "b")])).json()
            too_big = await client.get("/search", params={"size": 500})
        assert default == {"q": None, "page": 1, "size": 10, "tags": [], "active": True}
        assert tagged["tags"] == ["a", "b"]
        assert too_big.status_code == 422

    @pytest.mark.asyncio
    async def test_version_header(self):
        async with _client(create_versioned_app()) as client:
            v1 = (await client.get("/api/users/1")).json()
            v2 = (await client.get("/api/users/1", headers={"API-Version": "v2"})).json()
            bad = await client.get("/api/users/1", headers={"API-Version": "v9"})
        assert "name" in v1
        assert "first_name" in v2
        assert bad.status_code == 400


class TestValidation:
    _good = {
        "username": "john",
        "phone": "13800138000",
        "email": "john@example.com",
        "password": "Password123",
        "confirm_password": "Password123",
    }

    @pytest.mark.asyncio
    async def test_register_valid(self):
        async with _client(create_register_app()) as client:
            resp = await client.post("/register", json=self._good)
        assert resp.status_code == 200
        assert "password" not in resp.json()["user"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("patch", [
        {"phone": "123"},
        {"password": "letters-only", "confirm_password": "letters-only"},
        {"username": "root"},
        {"confirm_password": "Different1"},
    ])
    async def test_register_invalid(self, patch):
        async with _client(create_register_app()) as client:
            resp = await client.post("/register", json=self._good | patch)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_custom_error_shape(self):
        async with _client(create_validation_app()) as client:
            resp = await client.post("/users", json={"username": "al", "email": "x", "age": 5, "phone": "1"})
        body = resp.json()
        assert resp.status_code == 400
        assert body["code"] == 1001
        assert {e["field"] for e in body["errors"]} == {"username", "email", "age", "phone"}

    @pytest.mark.asyncio
    async def test_envelope_success_and_failure(self):
        async with _client(create_envelope_app()) as client:
            ok = (await client.get("/users/123")).json()
            missing = await client.get("/users/9")
            invalid = (await client.get("/users/abc")).json()
        assert ok == {"code": 0, "message": "success", "data": {"id": 123, "name": "John Doe"}}
        assert missing.status_code == 200
        assert missing.json()["code"] == 1004
        assert invalid["code"] == 1001


class TestBuiltinConstraints:
    @pytest.mark.asyncio
    async def test_valid_payload_accepted(self):
        async with _client(create_constraints_app()) as client:
            resp = await client.post("/constraints", json=VALID_CONSTRAINTS)
        assert resp.status_code == 200
        body = resp.json()
        assert body["newsletter"] is False
        assert body["request_id"] == VALID_CONSTRAINTS["request_id"]

    @pytest.mark.asyncio
    async def test_every_broken_field_reported(self):
        async with _client(create_constraints_app()) as client:
            resp = await client.post("/constraints", json=INVALID_CONSTRAINTS)
        assert resp.status_code == 422
        failing = {err["loc"][1] for err in resp.json()["detail"]}
        assert failing == set(INVALID_CONSTRAINTS) | {"required_string"}

    @pytest.mark.parametrize("field", ["one_of_int", "ipv4", "len_string"])
    def test_single_rule(self, field):
        with pytest.raises(ValidationError):
            ConstraintShowcase(**(VALID_CONSTRAINTS | {field: INVALID_CONSTRAINTS[field]}))


class TestSensitiveData:
    @pytest.mark.asyncio
    async def test_public_model_drops_secrets(self):
        async with _client(create_sensitive_app()) as client:
            body = (await client.get("/users/1")).json()
        assert set(body) == {"id", "username", "email", "phone"}

    @pytest.mark.asyncio
    async def test_none_fields_omitted(self):
        async with _client(create_sensitive_app()) as client:
            body = (await client.get("/users/2")).json()
        assert "phone" not in body

    @pytest.mark.asyncio
    async def test_masked_phone(self):
        async with _client(create_sensitive_app()) as client:
            body = (await client.get("/users/1/masked")).json()
        assert body["phone"] == "138****8000"

    @pytest.mark.asyncio
    async def test_internal_dump_hides_hash_and_token(self):
        async with _client(create_sensitive_app()) as client:
            body = (await client.get("/internal/users/1")).json()
        assert "password_hash" not in body
        assert body["api_token"] == "**********"

    @pytest.mark.asyncio
    async def test_unknown_user_404(self):
        async with _client(create_sensitive_app()) as client:
            assert (await client.get("/users/99")).status_code == 404

    def test_secret_not_in_repr(self):
        record = UserRecord(id=1, username="u", email="u@x.io", password_hash="h", api_token=SecretStr("live"))
        assert "live" not in repr(record)
        assert record.api_token.get_secret_value() == "live"

    def test_redact_nested(self):
        clean = redact({"Authorization": "Bearer x", "meta": {"password": "p", "ok": 1}, "name": "n"})
        assert clean == {"Authorization": "***", "meta": {"password": "***", "ok": 1}, "name": "n"}

    @pytest.mark.parametrize("phone,masked", [("13800138000", "138****8000"), ("12345", "*****")])
    def test_mask_phone(self, phone, masked):
        assert mask_phone(phone) == masked


# ---------------------------------------------------------------------------
# Route tables and matching
# ---------------------------------------------------------------------------

class TestRouteTable:
    def test_included_routers_are_listed(self):
        rows = route_table(create_grouped_app())
        assert ("DELETE", "/api/admin/users/{username}") in rows
        assert ("GET", "/api/public/health") in rows

    def test_prefix_filter(self):
        rows = route_table(create_restful_app(), "/nothing")
        assert rows == []

    def test_versioned_groups(self):
        paths = {path for _, path in route_table(create_routes_grouped_app(), "/api")}
        assert "/api/v1/users" in paths

    def test_gin_router_demo_prints_every_group(self, capsys):
        gin_router_demo()
        out = capsys.readouterr().out
        assert "/api/admin/users/{username}" in out
        assert "/api/user/me" in out


class TestRouteMatching:
    @pytest.mark.asyncio
    async def test_converters_pick_the_route(self):
        async with _client(create_regex_app()) as client:
            numeric = (await client.get("/users/123")).json()
            by_uuid = (await client.get("/users/550e8400-e29b-41d4-a716-446655440000")).json()
            slug = (await client.get("/posts/my-post-123")).json()
        assert numeric == {"route": "numeric id", "id": 123}
        assert by_uuid["route"] == "uuid"
        assert slug == {"route": "slug", "slug": "my-post-123"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/users/abc", "/posts/My_Post"])
    async def test_converter_mismatch_is_404(self, path):
        async with _client(create_regex_app()) as client:
            assert (await client.get(path)).status_code == 404

    @pytest.mark.asyncio
    async def test_pattern_mismatch_is_422(self):
        async with _client(create_regex_app()) as client:
            assert (await client.get("/tags/python")).status_code == 200
            assert (await client.get("/tags/Python3")).status_code == 422

    @pytest.mark.asyncio
    async def test_parameter_declared_first_shadows_fixed_path(self):
        async with _client(create_order_app(fixed_first=False)) as client:
            assert (await client.get("/users/me")).status_code == 422

    @pytest.mark.asyncio
    async def test_fixed_path_declared_first_wins(self):
        async with _client(create_order_app(fixed_first=True)) as client:
            me = (await client.get("/users/me")).json()
            by_id = (await client.get("/users/42")).json()
        assert me == {"route": "current user"}
        assert by_id == {"route": "user by id", "id": 42}

    @pytest.mark.asyncio
    async def test_nested_and_catch_all_paths(self):
        async with _client(create_order_app(fixed_first=True)) as client:
            posts = (await client.get("/users/42/posts")).json()
            files = (await client.get("/files/images/photo.jpg")).json()
        assert posts["owner_id"] == 42
        assert files["file_path"] == "images/photo.jpg"


class TestScopedDependencies:
    @pytest.mark.asyncio
    async def test_public_route_only_sees_middleware(self):
        log: list[str] = []
        async with _client(create_scoped_app(log)) as client:
            resp = await client.get("/public/info")
        assert resp.status_code == 200
        assert log == ["middleware GET /public/info"]

    @pytest.mark.asyncio
    async def test_router_dependency_rejects_missing_token(self):
        log: list[str] = []
        async with _client(create_scoped_app(log)) as client:
            resp = await client.get("/api/profile")
        assert resp.status_code == 401
        assert log == ["middleware GET /api/profile", "require_token"]

    @pytest.mark.asyncio
    async def test_router_then_route_dependency(self):
        log: list[str] = []
        async with _client(create_scoped_app(log)) as client:
            profile = await client.get("/api/profile", headers={"Authorization": "Bearer t"})
            log.clear()
            dashboard = await client.get("/api/dashboard", headers={"Authorization": "Bearer t"})
        assert profile.json()["user"] == "authenticated_user"
        assert dashboard.status_code == 200
        assert log == ["middleware GET /api/dashboard", "require_token", "audit /api/dashboard"]


# ---------------------------------------------------------------------------
# Forms and static files
# ---------------------------------------------------------------------------

class TestForms:
    @pytest.mark.asyncio
    async def test_form_model(self):
        async with _client(create_form_app()) as client:
            resp = await client.post("/register-form", data={
                "name": "John", "email": "john@example.com", "password": "123456"})
        assert resp.status_code == 200
        assert resp.json()["form"] == {"name": "John", "email": "john@example.com"}

    @pytest.mark.asyncio
    async def test_form_model_errors(self):
        async with _client(create_form_app()) as client:
            resp = await client.post("/register-form", data={"name": "John", "email": "john", "password": "1"})
        assert resp.status_code == 422
        assert {err["loc"][-1] for err in resp.json()["detail"]} == {"email", "password"}

    @pytest.mark.asyncio
    async def test_form_field_defaults_and_conversion(self):
        async with _client(create_form_app()) as client:
            minimal = (await client.post("/submit", data={"name": "John"})).json()
            full = (await client.post("/submit", data={"name": "J", "email": "j@x.io", "age": "25"})).json()
            bad = await client.post("/submit", data={"name": "J", "age": "abc"})
        assert minimal == {"name": "John", "email": "", "age": 0}
        assert full["age"] == 25
        assert bad.status_code == 422

    @pytest.mark.asyncio
    async def test_upload(self):
        async with _client(create_form_app()) as client:
            resp = await client.post("/upload", files={"file": ("a.txt", b"hello", "text/plain")},
                                     data={"note": "n"})
        assert resp.json() == {"filename": "a.txt", "content_type": "text/plain", "size": 5, "note": "n"}


class TestStaticFiles:
    @pytest.fixture
    def site(self, tmp_path):
        write_sample_site(tmp_path)
        return tmp_path

    @pytest.mark.asyncio
    async def test_assets_pages_and_single_file(self, site):
        async with _client(create_static_app(site)) as client:
            css = await client.get("/static/css/app.css")
            index = await client.get("/")
            about = await client.get("/about.html")
            robots = await client.get("/robots.txt")
        assert css.text == SAMPLE_SITE["static/css/app.css"]
        assert css.headers["content-type"].startswith("text/css")
        assert "<h1>Hello</h1>" in index.text
        assert "About us" in about.text
        assert robots.text.startswith("User-agent")

    @pytest.mark.asyncio
    async def test_routes_win_over_catch_all_mount(self, site):
        async with _client(create_static_app(site)) as client:
            assert (await client.get("/api/health")).json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_missing_file_404(self, site):
        async with _client(create_static_app(site)) as client:
            assert (await client.get("/static/missing.png")).status_code == 404


# ---------------------------------------------------------------------------
# Debugging and production middleware
# ---------------------------------------------------------------------------

class TestDebugMiddleware:
    @pytest.mark.asyncio
    async def test_caller_request_id_is_traced(self):
        events: list[str] = []
        async with _client(create_debug_app(events)) as client:
            resp = await client.get("/debug/request", headers={"X-Request-ID": "abc"})
        assert resp.json()["requestID"] == "abc"
        assert resp.headers["x-process-time"].endswith("ms")
        assert events == ["[abc] start GET /debug/request", "[abc] handler", "[abc] end 200"]

    @pytest.mark.asyncio
    async def test_generated_ids_are_unique(self):
        async with _client(create_debug_app([])) as client:
            ids = {(await client.get("/api/items/1")).headers["x-request-id"] for _ in range(3)}
        assert len(ids) == 3

    @pytest.mark.asyncio
    async def test_validation_error_still_traced(self):
        events: list[str] = []
        async with _client(create_debug_app(events)) as client:
            resp = await client.get("/api/items/seven", headers={"X-Request-ID": "r1"})
        assert resp.status_code == 422
        assert events == ["[r1] start GET /api/items/seven", "[r1] end 422"]


class TestProductionStack:
    @pytest.mark.asyncio
    async def test_login_then_profile(self):
        audit: list[dict] = []
        async with _client(create_production_app(audit)) as client:
            login = await client.post("/api/public/login", json={"username": "bob", "password": "builder"})
            token = login.json()["access_token"]
            profile = await client.get("/api/profile", headers={"Authorization": f"Bearer {token}"})
        assert profile.json() == {"userID": "bob", "roles": ["user"]}

    @pytest.mark.asyncio
    async def test_public_and_health_skip_jwt(self):
        async with _client(create_production_app([])) as client:
            assert (await client.get("/health")).status_code == 200
            assert (await client.get("/api/profile")).status_code == 401

    @pytest.mark.asyncio
    async def test_admin_prefix_needs_role(self):
        async with _client(create_production_app([])) as client:
            bob = await client.get("/api/admin/users", headers=_bearer("bob", ["user"]))
            alice = await client.get("/api/admin/users", headers=_bearer("alice", ["admin"]))
        assert bob.status_code == 403
        assert alice.json() == {"users": ["alice", "bob"]}

    @pytest.mark.asyncio
    async def test_unhandled_error_becomes_json_500(self, caplog):
        audit: list[dict] = []
        async with _client(create_production_app(audit)) as client:
            resp = await client.get("/api/public/boom", headers={"X-Request-ID": "boom-1"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "internal server error", "requestID": "boom-1"}
        assert audit[-1]["status"] == 500
        assert any(r.levelname == "ERROR" and "boom-1" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_audit_log_redacts_authorization(self):
        audit: list[dict] = []
        async with _client(create_production_app(audit)) as client:
            await client.get("/api/profile", headers=_bearer("bob"))
        record = audit[-1]
        assert record["headers"]["authorization"] == "***"
        assert record["requestID"] == "req-0001"
        assert record["status"] == 200

    @pytest.mark.asyncio
    async def test_cors_preflight_answered_before_jwt(self):
        async with _client(create_production_app([])) as client:
            resp = await client.options("/api/profile", headers={
                "Origin": "https://app.example.com", "Access-Control-Request-Method": "GET"})
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "https://app.example.com"


# ---------------------------------------------------------------------------
# OpenAPI docs
# ---------------------------------------------------------------------------

class TestDocs:
    @pytest.mark.asyncio
    async def test_schema_and_ui_served(self):
        async with _client(create_documented_app()) as client:
            schema = (await client.get("/openapi.json")).json()
            docs = await client.get("/docs")
            redoc = await client.get("/redoc")
        assert schema["info"]["title"] == "Bookstore API"
        assert schema["paths"]["/api/v1/books/{book_id}"]["get"]["summary"] == "Get a book"
        assert "404" in schema["paths"]["/api/v1/books/{book_id}"]["get"]["responses"]
        assert docs.status_code == redoc.status_code == 200
        assert "swagger-ui" in docs.text

    @pytest.mark.asyncio
    async def test_documented_app_works(self):
        async with _client(create_documented_app()) as client:
            created = await client.post("/api/v1/books", json={"title": "T", "author": "A"})
            missing = await client.get("/api/v1/books/99")
        assert created.status_code == 201
        assert created.json()["id"] == 2
        assert missing.json() == {"detail": "book not found"}

    def test_parameter_descriptions_and_deprecation(self):
        schema = create_annotated_app().openapi()
        operation = schema["paths"]["/api/v1/users/{user_id}"]["get"]
        params = {p["name"]: p for p in operation["parameters"]}
        assert params["user_id"]["description"] == "User id, starting at 1"
        assert params["include_posts"]["in"] == "query"
        assert operation["description"].startswith("Look up one user by id.")
        assert schema["paths"]["/api/v1/users"]["get"]["deprecated"] is True

    @pytest.mark.asyncio
    async def test_docs_need_basic_auth(self):
        async with _client(create_secured_docs_app()) as client:
            anonymous = await client.get("/docs")
            wrong = await client.get("/docs", auth=("admin", "nope"))
            ok = await client.get("/docs", auth=("admin", "docs-password"))
            schema_anonymous = await client.get("/openapi.json")
        assert anonymous.status_code == 401
        assert wrong.status_code == 401
        assert wrong.headers["www-authenticate"] == "Basic"
        assert ok.status_code == 200
        assert schema_anonymous.status_code == 401

    @pytest.mark.asyncio
    async def test_docs_credentials_from_settings(self, monkeypatch):
        monkeypatch.setenv("DOCS_PASSWORD", "rotated")
        get_settings.cache_clear()
        async with _client(create_secured_docs_app()) as client:
            assert (await client.get("/docs", auth=("admin", "docs-password"))).status_code == 401
            assert (await client.get("/docs", auth=("admin", "rotated"))).status_code == 200

    @pytest.mark.asyncio
    async def test_bearer_scheme_in_schema(self):
        async with _client(create_secured_docs_app()) as client:
            schema = (await client.get("/openapi.json", auth=("admin", "docs-password"))).json()
            protected = await client.get("/api/protected", headers=_bearer("bob"))
        assert schema["components"]["securitySchemes"]["HTTPBearer"]["scheme"] == "bearer"
        assert "/docs" not in schema["paths"]
        assert protected.json() == {"userID": "bob"}
