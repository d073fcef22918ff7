import logging
import os
import subprocess
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from madness.database import engine, init_db
from madness.db_schema_patch import ensure_option_columns, ensure_vote_columns
from madness.routes import ballots, brackets, interactive, tenants
from madness.seed_data import seed_options_from_file, seed_tenants
from madness.settings import OPTIONS_PATH, TENANT_NAMES

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)

APP_NAME = "Ranked Madness API"


# Get build info
def get_build_info():
    """Get git commit hash or build timestamp"""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=os.path.dirname(os.path.dirname(__file__)),
            capture_output=True,
            text=True,
            timeout=2,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except Exception:
        pass

    # Fallback to build timestamp
    return datetime.now().strftime("%Y%m%d-%H%M%S")


BUILD_HASH = get_build_info()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()  # creates every table registered on SQLModel metadata
    ensure_vote_columns(engine)
    ensure_option_columns(engine)

    with Session(engine) as session:
        seed_tenants(session, TENANT_NAMES)
        seed_options_from_file(session, OPTIONS_PATH)

    logger.info("%s started (build %s)", APP_NAME, BUILD_HASH)
    yield


app = FastAPI(title=APP_NAME, lifespan=lifespan)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tenants.router, prefix="/api", tags=["tenants"])
app.include_router(ballots.router, prefix="/api", tags=["ballots"])
app.include_router(brackets.router, prefix="/api", tags=["brackets"])

# Interactive bracket (per-tenant picks, undo)
app.include_router(interactive.router, prefix="/api", tags=["madness"])


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify which code is running"""
    return {"app_name": APP_NAME, "build_hash": BUILD_HASH, "status": "healthy"}
