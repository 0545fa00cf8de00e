"""Request validation, response shaping and response envelopes."""

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime, time
from enum import IntEnum
from ipaddress import IPv4Address, IPv6Address
from typing import Annotated, Any, Generic, Literal, TypeVar
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient
from pydantic import (
    AfterValidator,
    BaseModel,
    Field,
    HttpUrl,
    IPvAnyAddress,
    SecretStr,
    field_serializer,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PHONE = re.compile(r"^1[3-9]\d{9}$")
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[a-zA-Z]{2,}$"


def _show(label: str, resp: Any) -> None:
    print(f"{label:<34} -> {resp.status_code} {resp.json()}")


# ---------------------------------------------------------------------------
# Custom validators
# ---------------------------------------------------------------------------


def _phone(value: str) -> str:
    if not _PHONE.match(value):
        raise ValueError("must be an 11-digit mobile number starting with 1")
    return value


Phone = Annotated[str, AfterValidator(_phone)]


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=20)
    phone: Phone
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str
    confirm_password: str

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        if len(value) < 8 or not re.search(r"[A-Za-z]", value) or not re.search(r"\d", value):
            raise ValueError("needs at least 8 characters with letters and digits")
        return value

    @field_validator("username")
    @classmethod
    def no_reserved_names(cls, value: str) -> str:
        if value.lower() in {"admin", "root", "system"}:
            raise ValueError(f"{value!r} is reserved")
        return value

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("passwords do not match")
        return self


def create_register_app() -> FastAPI:
    app = FastAPI(title="Custom validation")

    @app.post("/register")
    def register(req: RegisterRequest) -> dict[str, Any]:
        return {"message": "registered", "user": req.model_dump(exclude={"password", "confirm_password"})}

    return app


def custom_validation_demo() -> None:
    print("=== Field, reusable and model validators ===")
    print("Phone            -> Annotated[str, AfterValidator(...)]  (reusable type)")
    print("strong_password  -> @field_validator")
    print("passwords_match  -> @model_validator(mode='after')  (cross-field)")
    print()
    base = {
        "username": "john",
        "phone": "13800138000",
        "email": "john@example.com",
        "password": "Password123",
        "confirm_password": "Password123",
    }
    with TestClient(create_register_app()) as client:
        _show("valid registration", client.post("/register", json=base))
        cases = {
            "bad phone": {"phone": "12345"},
            "weak password": {"password": "short", "confirm_password": "short"},
            "reserved username": {"username": "admin"},
            "passwords differ": {"confirm_password": "Password124"},
        }
        for label, patch in cases.items():
            resp = client.post("/register", json=base | patch)
            msgs = [e["msg"] for e in resp.json()["detail"]]
            print(f"{label:<34} -> {resp.status_code} {msgs}")


# ---------------------------------------------------------------------------
# Validation error handling
# ---------------------------------------------------------------------------


class UserRequest(BaseModel):
    username: str = Field(min_length=3, max_length=20)
    email: str = Field(pattern=EMAIL_PATTERN)
    age: int = Field(ge=18, le=100)
    phone: str = Field(min_length=11, max_length=11)


def format_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors to ``{"field", "message"}`` pairs."""
    errors = []
    for err in exc.errors():
        loc = [str(p) for p in err["loc"] if p != "body"]
        errors.append({"field": ".".join(loc) or "body", "message": err["msg"]})
    return errors


def create_validation_app() -> FastAPI:
    app = FastAPI(title="Validation errors")

    @app.exception_handler(RequestValidationError)
    async def on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = format_errors(exc)
        logger.info("Validation failed on %s %s: %d error(s)", request.method, request.url.path, len(errors))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"code": 1001, "msg": "validation failed", "errors": errors},
        )

    @app.post("/users")
    def create_user(req: UserRequest) -> dict[str, Any]:
        return {"code": 0, "msg": "ok", "data": req.model_dump()}

    return app


def validation_error_handling_demo() -> None:
    print("=== Replacing FastAPI's default 422 body ===")
    with TestClient(create_validation_app()) as client:
        _show("valid user", client.post("/users", json={
            "username": "alice", "email": "alice@example.com", "age": 30, "phone": "13800138000"}))
        resp = client.post("/users", json={"username": "al", "email": "nope", "age": 12, "phone": "123"})
        print(f"{'invalid user':<34} -> {resp.status_code} code={resp.json()['code']}")
        for err in resp.json()["errors"]:
            print(f"  {err['field']:<10} {err['message']}")
        _show("missing body", client.post("/users"))
    print()
    print("Standard flow: bind -> validate -> on error map every field to a message")
    print("-> answer one stable shape the client can render.")


# ---------------------------------------------------------------------------
# Built-in constraints
# ---------------------------------------------------------------------------

# (rule, how it is spelled on a pydantic field)
CONSTRAINT_RULES = [
    ("required", "no default"),
    ("min / max length", "Field(min_length=3) / Field(max_length=10)"),
    ("exact length", "Field(min_length=5, max_length=5)"),
    ("email", "Field(pattern=...) or EmailStr"),
    ("url", "HttpUrl"),
    ("alpha / alphanum", "Field(pattern=r'^[A-Za-z]+$')"),
    ("min / max value", "Field(ge=1) / Field(le=100)"),
    ("range", "Field(ge=18, le=65)"),
    ("one of", "Literal[1, 2, 3]"),
    ("list size", "Field(min_length=1) / Field(max_length=10)"),
    ("uuid", "UUID"),
    ("ip / ipv4 / ipv6", "IPvAnyAddress / IPv4Address / IPv6Address"),
    ("datetime / date / time", "datetime / date / time"),
    ("skip validation", "plain annotation with a default"),
]


class ConstraintShowcase(BaseModel):
    required_string: str
    min_string: str = Field(min_length=3)
    max_string: str = Field(max_length=10)
    len_string: str = Field(min_length=5, max_length=5)
    email: str = Field(pattern=EMAIL_PATTERN)
    url: HttpUrl
    alpha: str = Field(pattern=r"^[A-Za-z]+$")
    alphanum: str = Field(pattern=r"^[A-Za-z0-9]+$")
    min_int: int = Field(ge=1)
    max_int: int = Field(le=100)
    range_int: int = Field(ge=18, le=65)
    one_of_int: Literal[1, 2, 3]
    min_slice: list[str] = Field(min_length=1)
    max_slice: list[str] = Field(max_length=10)
    request_id: UUID
    ip: IPvAnyAddress
    ipv4: IPv4Address
    ipv6: IPv6Address
    created_at: datetime
    birthday: date
    opens_at: time
    newsletter: bool = False


VALID_CONSTRAINTS: dict[str, Any] = {
    "required_string": "present",
    "min_string": "abc",
    "max_string": "short",
    "len_string": "12345",
    "email": "dev@example.com",
    "url": "https://example.com/docs",
    "alpha": "Gopher",
    "alphanum": "Py313",
    "min_int": 1,
    "max_int": 100,
    "range_int": 30,
    "one_of_int": 2,
    "min_slice": ["a"],
    "max_slice": ["a", "b"],
    "request_id": "550e8400-e29b-41d4-a716-446655440000",
    "ip": "10.0.0.1",
    "ipv4": "192.168.1.1",
    "ipv6": "::1",
    "created_at": "2024-01-02T15:04:05",
    "birthday": "1990-05-17",
    "opens_at": "09:30:00",
}

# One broken value per constrained field; required_string is left out.
INVALID_CONSTRAINTS: dict[str, Any] = {
    "min_string": "ab",
    "max_string": "x" * 11,
    "len_string": "1234",
    "email": "nope",
    "url": "not a url",
    "alpha": "abc123",
    "alphanum": "a-b",
    "min_int": 0,
    "max_int": 101,
    "range_int": 17,
    "one_of_int": 4,
    "min_slice": [],
    "max_slice": [str(i) for i in range(11)],
    "request_id": "123",
    "ip": "999.1.1.1",
    "ipv4": "::1",
    "ipv6": "10.0.0.1",
    "created_at": "yesterday",
    "birthday": "2024-13-01",
    "opens_at": "25:00",
}


def create_constraints_app() -> FastAPI:
    app = FastAPI(title="Built-in constraints")

    @app.post("/constraints")
    def check(body: ConstraintShowcase) -> dict[str, Any]:
        return body.model_dump(mode="json")

    return app


def builtin_validation_tags_demo() -> None:
    print("=== Validation rules as pydantic field declarations ===")
    for rule, spelling in CONSTRAINT_RULES:
        print(f"  {rule:<24} {spelling}")
    print()

    with TestClient(create_constraints_app()) as client:
        resp = client.post("/constraints", json=VALID_CONSTRAINTS)
        print(f"{'valid payload':<34} -> {resp.status_code} url={resp.json()['url']}")
        resp = client.post("/constraints", json=INVALID_CONSTRAINTS)
        errors = resp.json()["detail"]
        print(f"{'every rule broken':<34} -> {resp.status_code} ({len(errors)} errors)")
        for err in errors:
            print(f"  {err['loc'][-1]:<16} {err['msg']}")
    print()
    print("Types carry most rules (HttpUrl, UUID, IPv4Address, date); Field() adds bounds.")


# ---------------------------------------------------------------------------
# Sensitive data
# ---------------------------------------------------------------------------

SENSITIVE_KEYS = frozenset({"password", "password_hash", "token", "api_token", "authorization", "cookie", "secret"})


def redact(data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy ``data`` with sensitive values replaced by ``***``, recursing into mappings."""
    clean: dict[str, Any] = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_KEYS:
            clean[key] = "***"
        elif isinstance(value, Mapping):
            clean[key] = redact(value)
        else:
            clean[key] = value
    return clean


def mask_phone(phone: str) -> str:
    if len(phone) < 7:
        return "*" * len(phone)
    return f"{phone[:3]}****{phone[-4:]}"


class UserRecord(BaseModel):
    """What the service stores."""

    id: int
    username: str
    email: str
    password_hash: str = Field(exclude=True)
    api_token: SecretStr
    phone: str | None = None


class UserPublic(BaseModel):
    """What clients may see."""

    id: int
    username: str
    email: str
    phone: str | None = None


class MaskedUser(UserPublic):
    @field_serializer("phone")
    def _mask(self, phone: str | None) -> str | None:
        return mask_phone(phone) if phone else None


def create_sensitive_app() -> FastAPI:
    app = FastAPI(title="Sensitive data")
    records = {
        1: UserRecord(id=1, username="john", email="john@example.com", password_hash="pbkdf2$secret123",
                      api_token=SecretStr("token123"), phone="13800138000"),
        2: UserRecord(id=2, username="jane", email="jane@example.com", password_hash="pbkdf2$hunter2",
                      api_token=SecretStr("token456")),
    }

    def _record(user_id: int) -> UserRecord:
        if user_id not in records:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"user {user_id} not found")
        return records[user_id]

    @app.get("/users/{user_id}", response_model=UserPublic, response_model_exclude_none=True)
    def get_user(user_id: int) -> UserRecord:
        return _record(user_id)

    @app.get("/users/{user_id}/masked", response_model=MaskedUser)
    def get_masked(user_id: int) -> UserRecord:
        return _record(user_id)

    @app.get("/internal/users/{user_id}")
    def dump_record(user_id: int) -> dict[str, Any]:
        return _record(user_id).model_dump(mode="json")

    return app


def sensitive_data_filter_demo() -> None:
    print("=== Keeping secrets out of responses ===")
    with TestClient(create_sensitive_app()) as client:
        _show("GET /users/1 (response_model)", client.get("/users/1"))
        _show("GET /users/2 (exclude_none)", client.get("/users/2"))
        _show("GET /users/1/masked", client.get("/users/1/masked"))
        _show("GET /internal/users/1 (model_dump)", client.get("/internal/users/1"))
    print()

    print("=== Keeping secrets out of logs ===")
    record = UserRecord(id=3, username="max", email="max@example.com", password_hash="x",
                        api_token=SecretStr("live-token"))
    print(f"repr(record) -> {record!r}")
    headers = {"Authorization": "Bearer eyJhbGciOi...", "Accept": "application/json"}
    print(f"redact(headers) -> {redact(headers)}")
    print()
    print("response_model      -> a separate output model drops every undeclared field")
    print("Field(exclude=True) -> never serialised, even by model_dump()")
    print("SecretStr           -> masked in repr, str and JSON")
    print("field_serializer    -> partial masking such as phone numbers")


# ---------------------------------------------------------------------------
# Unified response envelope
# ---------------------------------------------------------------------------


class ErrorCode(IntEnum):
    OK = 0
    INVALID_PARAMS = 1001
    UNAUTHORIZED = 1002
    FORBIDDEN = 1003
    NOT_FOUND = 1004
    DATABASE_ERROR = 2001
    RULE_VIOLATION = 3001


class ApiResponse(BaseModel, Generic[T]):
    code: int = ErrorCode.OK
    message: str = "success"
    data: T | None = None


class BusinessError(Exception):
    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class Profile(BaseModel):
    id: int
    name: str


def success(data: Any = None) -> dict[str, Any]:
    return ApiResponse[Any](data=data).model_dump()


def failure(code: ErrorCode, message: str) -> dict[str, Any]:
    return ApiResponse[Any](code=code, message=message).model_dump()


def create_envelope_app() -> FastAPI:
    """Every reply is HTTP 200 with a business ``code``; 0 means success."""
    app = FastAPI(title="Unified response")
    profiles = {123: Profile(id=123, name="John Doe")}

    @app.exception_handler(BusinessError)
    async def on_business_error(request: Request, exc: BusinessError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_200_OK, content=failure(exc.code, exc.message))

    @app.exception_handler(RequestValidationError)
    async def on_invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_200_OK,
                            content=failure(ErrorCode.INVALID_PARAMS, "invalid parameters"))

    @app.get("/users/{user_id}", response_model=ApiResponse[Profile])
    def get_profile(user_id: int) -> dict[str, Any]:
        if user_id not in profiles:
            raise BusinessError(ErrorCode.NOT_FOUND, f"user {user_id} not found")
        return success(profiles[user_id].model_dump())

    @app.post("/users/{user_id}/deactivate", response_model=ApiResponse[Profile])
    def deactivate(user_id: int) -> dict[str, Any]:
        raise BusinessError(ErrorCode.RULE_VIOLATION, "cannot deactivate the last administrator")

    return app


def unified_response_demo() -> None:
    print("=== One envelope: {code, message, data} ===")
    with TestClient(create_envelope_app()) as client:
        _show("GET /users/123", client.get("/users/123"))
        _show("GET /users/9", client.get("/users/9"))
        _show("GET /users/abc", client.get("/users/abc"))
        _show("POST /users/123/deactivate", client.post("/users/123/deactivate"))
    print()
    print("=== Code ranges ===")
    for code in ErrorCode:
        print(f"  {code.value:>4}  {code.name}")
    print()
    print("HTTP status says whether the request was handled; the business code")
    print("says what happened, so clients branch on one field.")
