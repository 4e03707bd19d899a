"""
FastAPI application factory.
Creates the app with CORS, service wiring, and router registration.
Swagger UI available at /docs, ReDoc at /redoc.
"""
import sys
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Ensure src/ is on the path
_src_dir = str(Path(__file__).parent.parent)
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)
# batch_engine lives at the project root
_root_dir = str(Path(__file__).parent.parent.parent)
if _root_dir not in sys.path:
    sys.path.insert(0, _root_dir)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic for the FastAPI app."""
    import config
    from batch_engine.batch_orchestrator import BatchOrchestrator
    from correction.data_corrector import DataCorrector
    from master_data.master_data_cache import MasterDataCache
    from master_data.master_data_service import MasterDataService
    from reconcile.row_reconciler import RowReconciler
    from sheets.row_store import SheetsRowStore
    from utils.logger import get_logger

    logger = get_logger()
    logger.info(f"Initializing FastAPI REST API on port {config.API_PORT}", component="API")

    store = app.state.row_store
    if store is None:
        store = SheetsRowStore()
        app.state.row_store = store

    cache = MasterDataCache(cache_file=config.MASTER_DATA_CACHE_FILE or None)
    master_data_service = MasterDataService(store, cache=cache)

    # Store on app state for route access
    app.state.master_data_cache = cache
    app.state.master_data_service = master_data_service
    app.state.corrector = DataCorrector(master_data_service)
    app.state.orchestrator = BatchOrchestrator(RowReconciler(store))

    logger.info("Services initialized", component="API")
    logger.info(f"Swagger UI: http://localhost:{config.API_PORT}/docs", component="API")

    yield

    logger.info("Shutting down API server", component="API")


def create_app(row_store=None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        row_store: Row store to use instead of connecting to Google Sheets
    """
    import config

    app = FastAPI(
        title=config.APP_NAME,
        description=(
            "REST API for correcting OCR'd worklogs against master data and "
            "saving them to each worker's personal sheet for the pay period."
        ),
        version=config.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.row_store = row_store

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.API_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    from api.routes.health_routes import router as health_router
    from api.routes.master_data_routes import router as master_data_router
    from api.routes.worklog_routes import router as worklog_router

    app.include_router(health_router, prefix="/health", tags=["Health"])
    app.include_router(master_data_router, prefix="/master-data", tags=["Master Data"])
    app.include_router(worklog_router, tags=["Worklogs"])

    @app.get("/", tags=["Root"])
    async def root():
        """API root - redirect to docs."""
        return {
            "service": config.APP_NAME,
            "version": config.APP_VERSION,
            "docs": "/docs",
            "redoc": "/redoc",
            "health": "/health",
        }

    return app
