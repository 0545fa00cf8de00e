"""Form bodies, file uploads and static files.

Form parsing needs ``python-multipart``; static files are served by
Starlette's ``StaticFiles`` from a temporary directory that the demo
removes before returning.
"""

import logging
import tempfile
from pathlib import Path
from typing import Annotated, Any

from fastapi import FastAPI, Form, UploadFile
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from lessons.web.validation import EMAIL_PATTERN

logger = logging.getLogger(__name__)


def _show(label: str, resp: Any) -> None:
    body = resp.json() if resp.headers.get("content-type", "").startswith("application/json") else resp.text
    print(f"{label:<40} -> {resp.status_code} {body}")


# ---------------------------------------------------------------------------
# FormBinding
# ---------------------------------------------------------------------------


class SignupForm(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)


def create_form_app() -> FastAPI:
    app = FastAPI(title="Form binding")

    @app.post("/register-form")
    def register_form(form: Annotated[SignupForm, Form()]) -> dict[str, Any]:
        return {"message": "form accepted", "form": form.model_dump(exclude={"password"})}

    @app.post("/submit")
    def submit(
        name: Annotated[str, Form()],
        email: Annotated[str, Form()] = "",
        age: Annotated[int, Form(ge=0)] = 0,
    ) -> dict[str, Any]:
        return {"name": name, "email": email, "age": age}

    @app.post("/upload")
    async def upload(file: UploadFile, note: Annotated[str, Form()] = "") -> dict[str, Any]:
        content = await file.read()
        logger.info("Received upload %s (%d bytes)", file.filename, len(content))
        return {"filename": file.filename, "content_type": file.content_type, "size": len(content), "note": note}

    return app


def form_binding_demo() -> None:
    print("=== application/x-www-form-urlencoded into a model ===")
    with TestClient(create_form_app()) as client:
        _show("POST /register-form (valid)", client.post("/register-form", data={
            "name": "John", "email": "john@example.com", "password": "123456"}))
        resp = client.post("/register-form", data={"name": "John", "email": "john", "password": "123"})
        print(f"{'POST /register-form (invalid)':<40} -> {resp.status_code}")
        for err in resp.json()["detail"]:
            print(f"  {err['loc'][-1]}: {err['msg']}")
        print()

        print("=== Individual form fields with defaults ===")
        _show("POST /submit name only", client.post("/submit", data={"name": "John"}))
        _show("POST /submit all fields", client.post("/submit", data={
            "name": "John", "email": "john@example.com", "age": "25"}))
        _show("POST /submit age=abc", client.post("/submit", data={"name": "John", "age": "abc"}))
        print()

        print("=== multipart/form-data with a file ===")
        _show("POST /upload", client.post(
            "/upload",
            files={"file": ("notes.txt", b"hello from a form", "text/plain")},
            data={"note": "meeting notes"},
        ))
    print()
    print("Form() values arrive as strings and are converted by the annotation,")
    print("so age='25' becomes 25 and age='abc' is a 422 like any JSON field.")


# ---------------------------------------------------------------------------
# StaticFiles
# ---------------------------------------------------------------------------

SAMPLE_SITE = {
    "static/css/app.css": "body { font-family: sans-serif; }\n",
    "static/js/app.js": "console.log('ready');\n",
    "site/index.html": "<!doctype html><title>Demo</title><h1>Hello</h1>\n",
    "site/about.html": "<!doctype html><title>About</title><p>About us</p>\n",
    "robots.txt": "User-agent: *\nDisallow: /private/\n",
}


def write_sample_site(root: Path) -> None:
    for relative, content in SAMPLE_SITE.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def create_static_app(root: Path) -> FastAPI:
    """Serve ``root/static`` as assets, ``root/site`` as pages and one single file."""
    app = FastAPI(title="Static files")

    @app.get("/robots.txt", include_in_schema=False)
    def robots() -> FileResponse:
        return FileResponse(root / "robots.txt", media_type="text/plain")

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.mount("/static", StaticFiles(directory=root / "static"), name="static")
    app.mount("/", StaticFiles(directory=root / "site", html=True), name="site")
    return app


def static_files_demo() -> None:
    with tempfile.TemporaryDirectory(prefix="static-") as tmp:
        root = Path(tmp)
        write_sample_site(root)
        print("=== Mounts ===")
        print("  /static/*     StaticFiles(directory='static')")
        print("  /robots.txt   FileResponse for a single file")
        print("  /api/health   ordinary route, matched before the catch-all mount")
        print("  /*            StaticFiles(directory='site', html=True)")
        print()

        with TestClient(create_static_app(root)) as client:
            for path in ("/static/css/app.css", "/static/js/app.js", "/robots.txt",
                         "/", "/about.html", "/api/health", "/static/missing.png"):
                resp = client.get(path)
                kind = resp.headers.get("content-type", "-").split(";")[0]
                print(f"GET {path:<22} -> {resp.status_code} {kind:<24} {len(resp.content)} bytes")
    print("temporary directory removed")
    print()
    print("html=True serves index.html for a directory and is meant for the last, catch-all mount.")
    print("In production a reverse proxy or CDN usually serves these files instead.")
