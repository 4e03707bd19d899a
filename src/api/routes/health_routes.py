"""
Health check routes - public, no dependencies on the Sheets API.
"""
from fastapi import APIRouter, Request

router = APIRouter()


@router.get(
    "",
    summary="System health check",
)
async def health_check(request: Request):
    """
    Check system health status.

    Reports configuration problems and the master data cache state.
    Never calls the Sheets API.
    """
    import config

    health = {
        "status": "healthy",
        "service": config.APP_NAME,
        "version": config.APP_VERSION,
        "components": {}
    }

    try:
        config.validate_config()
        health["components"]["config"] = "ok"
    except ValueError as e:
        health["components"]["config"] = f"error: {str(e)}"
        health["status"] = "degraded"

    cache = getattr(request.app.state, "master_data_cache", None)
    if cache is not None:
        health["components"]["master_data_cache"] = cache.status()
    else:
        health["components"]["master_data_cache"] = "unavailable"

    store = getattr(request.app.state, "row_store", None)
    health["components"]["sheets"] = "available" if store is not None else "unavailable"
    if store is None:
        health["status"] = "degraded"

    return health
