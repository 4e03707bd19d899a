"""
Master data routes - employee and product lists used for correction.
"""
from typing import List

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from api.dependencies import get_master_data_service
from api.errors import master_data_error_to_http
from master_data.models import MasterDataError

router = APIRouter()


class MasterDataResponse(BaseModel):
    """Current master lists."""
    employees: List[str]
    products: List[str]


@router.get(
    "",
    response_model=MasterDataResponse,
    summary="Get master data",
)
async def get_master_data(service=Depends(get_master_data_service)):
    """Employees and products, served from cache when fresh."""
    try:
        data = await run_in_threadpool(service.get_master_data)
    except MasterDataError as e:
        raise master_data_error_to_http(e)
    return MasterDataResponse(**data.to_dict())


@router.post(
    "/refresh",
    response_model=MasterDataResponse,
    summary="Reload master data from the sheet",
)
async def refresh_master_data(service=Depends(get_master_data_service)):
    """Drop the cache and reload from the master tab."""
    try:
        data = await run_in_threadpool(service.refresh)
    except MasterDataError as e:
        raise master_data_error_to_http(e)
    return MasterDataResponse(**data.to_dict())
