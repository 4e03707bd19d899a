"""
FastAPI dependencies for the worklog services.
Services are created once in main.py's lifespan and stored on app.state.
"""
from fastapi import HTTPException, Request, status


def _service(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Service '{name}' not initialized",
        )
    return service


def get_master_data_service(request: Request):
    """Get the master data service instance."""
    return _service(request, 'master_data_service')


def get_corrector(request: Request):
    """Get the data corrector instance."""
    return _service(request, 'corrector')


def get_orchestrator(request: Request):
    """Get the batch orchestrator instance."""
    return _service(request, 'orchestrator')
