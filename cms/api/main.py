import logging
from collections.abc import AsyncGenerator
from contextlib import ExitStack, asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cms.adapters.clock import SystemClock
from cms.adapters.fs.filestore import attachment_root
from cms.adapters.sqlite.migrator import SQLiteMigrator
from cms.adapters.sqlite.repos import SQLiteActivityRepo, SQLiteContentRepo
from cms.adapters.sweep_runner import SweepRunner
from cms.api.deps import get_settings
from cms.components.scheduler import SweepInput, SweepOutput, run_sweep
from cms.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    settings = get_settings()

    # Invalid rules fail startup
    rules = load_rules(settings.rules_path)
    logger.info("Rules loaded from %s", settings.rules_path)

    applied = SQLiteMigrator(settings.db_path).run_migrations()
    if applied:
        logger.info("Applied %d migration(s)", len(applied))

    content_repo = SQLiteContentRepo(settings.db_path)
    activity_repo = SQLiteActivityRepo(settings.db_path)
    clock = SystemClock()

    def sweep() -> SweepOutput:
        return run_sweep(
            SweepInput(limit=rules.scheduler.batch_limit),
            repo=content_repo,
            activity=activity_repo,
            time=clock,
        )

    runner = SweepRunner(sweep, interval_seconds=rules.scheduler.interval_seconds)

    with ExitStack() as stack:
        app.state.rules = rules
        app.state.file_store = stack.enter_context(attachment_root(settings.uploads_dir))
        app.state.sweep_runner = runner
        runner.start()
        stack.callback(runner.stop)
        yield


app = FastAPI(
    title="Intercept CMS API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from cms.api.routes import activities, comments, content  # noqa: E402

app.include_router(content.blogs_router, prefix="/api/blogs", tags=["Blogs"])
app.include_router(comments.router, prefix="/api/blogs", tags=["Blogs"])
app.include_router(content.podcasts_router, prefix="/api/podcasts", tags=["Podcasts"])
app.include_router(activities.router, prefix="/api/activities", tags=["Activities"])


# CORS (Allow Frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


@app.get("/health")
def health_check(request: Request) -> dict[str, Any]:
    """Health check endpoint, including the last scheduled-publish sweep."""
    runner: SweepRunner | None = getattr(request.app.state, "sweep_runner", None)
    last = runner.last_run if runner else None
    return {
        "status": "ok",
        "service": "api",
        "sweeper": {
            "running": bool(runner and runner.is_running),
            "last_run": None
            if last is None
            else {
                "started_at": last.started_at.isoformat(),
                "finished_at": last.finished_at.isoformat(),
                "published": last.published,
                "failures": len(last.failures),
                "error": last.error,
            },
        },
    }
