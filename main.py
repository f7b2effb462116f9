# FILE: main.py
"""
UIGen Backend - FastAPI Application
Version: 0.4.0

Turns a natural-language UI request into a previewable JSX unit:
- Complexity classification (simple / complex)
- Prompt construction with explicit constraints per category
- Groq (OpenAI-compatible) generation
- Defensive normalization of model output into one renderable unit
- Capability-scoped evaluation in an embedded JS interpreter
- Saved projects (SQLite)
"""
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load .env FIRST before any other imports that might need env vars
load_dotenv()

from config.generation_profiles import GENERATION_PROFILES, MAX_RENDER_PASSES, MAX_SESSIONS, RENDER_TIMEOUT_SECONDS
from uigen import __version__
from uigen.db import init_db
from uigen.preview.renderer import shutdown_render_worker
from uigen.preview.router import router as preview_router
from uigen.preview.scope import get_scope_registry
from uigen.projects.router import router as projects_router

app = FastAPI(
    title="UIGen Preview",
    version=__version__,
    description="Natural-language UI generation with sandboxed live preview",
)

# ====== CORS ======

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ====== STARTUP ======

@app.on_event("startup")
def on_startup():
    init_db()

    print("[startup] Building capability scopes...")
    registry = get_scope_registry()
    for name in registry.names():
        print(f"[startup]   - {name}: {len(registry.get(name))} symbols")

    print("[startup] Checking environment variables...")
    if os.getenv("GROQ_API_KEY"):
        print("[startup] GROQ_API_KEY: [OK] set")
    else:
        print("[startup] GROQ_API_KEY: [X] NOT SET - /preview/generate will fail with kind=auth")

    for category, profile in GENERATION_PROFILES.items():
        print(f"[startup] {category} profile: model={profile.model} max_tokens={profile.max_output_units}")
    print(f"[startup] Render pass limit: {MAX_RENDER_PASSES}")
    print(f"[startup] Render timeout: {RENDER_TIMEOUT_SECONDS:g}s, session cap: {MAX_SESSIONS}")


@app.on_event("shutdown")
def on_shutdown():
    shutdown_render_worker()


# ====== ROUTERS ======

app.include_router(preview_router)
app.include_router(projects_router)


# ====== PUBLIC ENDPOINTS ======

@app.get("/health")
def health():
    """Health check (public)."""
    return {
        "status": "ok",
        "version": __version__,
        "gateway_configured": bool(os.getenv("GROQ_API_KEY")),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=int(os.getenv("UIGEN_PORT", "8000")), reload=False)
