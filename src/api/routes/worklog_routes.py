"""
Worklog routes - correct an OCR'd worklog, then save it to personal sheets.

The client shows corrections to a human between the two calls. Saving
refuses anything still flagged or missing from master data unless the
request explicitly confirms it.
"""
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from api.dependencies import get_corrector, get_master_data_service, get_orchestrator
from api.errors import master_data_error_to_http, store_error_to_http
from correction.models import OcrSubmission
from master_data.models import MasterData, MasterDataError
from reconcile.interval_consolidator import InvalidTimeSlotError
from reconcile.work_period import InvalidWorkDateError
from sheets.store_errors import StoreError

router = APIRouter()

# ── Pydantic models ──────────────────────────────────────────────

class TimeSlotModel(BaseModel):
    start: str = ''
    end: str = ''


class BreaksModel(BaseModel):
    lunch: bool = False
    mid: bool = False


class WorkerRecordModel(BaseModel):
    """One worker line (packaging or machine operation)."""
    name: str = ''
    work_type: Literal['packaging', 'machine'] = 'packaging'
    slots: List[TimeSlotModel] = []
    breaks: BreaksModel = Field(default_factory=BreaksModel)
    produced_count: str = ''
    correction: Optional[Dict[str, Any]] = None


class HeaderModel(BaseModel):
    work_date: str = ''
    factory: str = ''
    product: str = ''
    work_hours: str = ''
    correction: Optional[Dict[str, Any]] = None


class SubmissionModel(BaseModel):
    header: HeaderModel = Field(default_factory=HeaderModel)
    workers: List[WorkerRecordModel] = []


class CorrectionRequest(BaseModel):
    """Either an English-keyed submission or the raw OCR JSON."""
    submission: Optional[SubmissionModel] = None
    ocr_result: Optional[Dict[str, Any]] = None


class CorrectionResponse(BaseModel):
    submission: Dict[str, Any]
    needs_confirmation: bool


class SaveRequest(BaseModel):
    """Corrected submission plus the corrections a human has accepted."""
    submission: SubmissionModel
    confirmed_workers: List[str] = []
    confirm_product: bool = False


class SaveResponse(BaseModel):
    failed_workers: List[str]
    period: str
    written_count: int
    outcomes: List[Dict[str, Any]]


# ── Helpers ───────────────────────────────────────────────────────

def unconfirmed_corrections(submission: OcrSubmission, master_data: MasterData,
                            confirmed_workers: List[str], confirm_product: bool) -> List[str]:
    """Describe every correction that still needs a human decision."""
    issues = []
    header = submission.header
    product_flagged = bool(header.correction and header.correction.low_confidence_flag)
    if not confirm_product and (product_flagged or not master_data.has_product(header.product)):
        issues.append(f"product '{header.product}' is not confirmed")

    confirmed = set(confirmed_workers)
    for worker in submission.workers:
        if not worker.name or worker.name in confirmed:
            continue
        flagged = bool(worker.correction and worker.correction.low_confidence_flag)
        if flagged or not master_data.has_employee(worker.name):
            issues.append(f"{worker.work_type.value} worker '{worker.name}' is not confirmed")
    return issues


async def _load_master_data(service) -> MasterData:
    try:
        return await run_in_threadpool(service.get_master_data)
    except MasterDataError as e:
        raise master_data_error_to_http(e)


# ── Routes ────────────────────────────────────────────────────────

@router.post(
    "/corrections",
    response_model=CorrectionResponse,
    summary="Correct names and product against master data",
)
async def correct_worklog(
    request: CorrectionRequest,
    corrector=Depends(get_corrector),
):
    """
    Resolve every worker name and the product to master data entries.

    Low-confidence corrections come back with `low_confidence_flag` set;
    they must be confirmed before saving.
    """
    if request.submission is not None:
        submission = OcrSubmission.from_dict(request.submission.model_dump())
    elif request.ocr_result is not None:
        submission = OcrSubmission.from_ocr_json(request.ocr_result)
    else:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Provide either 'submission' or 'ocr_result'",
        )

    try:
        corrected = await run_in_threadpool(corrector.correct_submission, submission)
    except MasterDataError as e:
        raise master_data_error_to_http(e)

    return CorrectionResponse(
        submission=corrected.to_dict(),
        needs_confirmation=corrected.needs_confirmation(),
    )


@router.post(
    "/submissions",
    response_model=SaveResponse,
    summary="Save a corrected worklog to personal sheets",
)
async def save_worklog(
    request: SaveRequest,
    master_data_service=Depends(get_master_data_service),
    orchestrator=Depends(get_orchestrator),
):
    """
    Write every worker's row for the work date.

    Workers whose personal sheet does not exist yet are listed in
    `failed_workers`; the rest are still saved.
    """
    submission = OcrSubmission.from_dict(request.submission.model_dump())
    master_data = await _load_master_data(master_data_service)

    issues = unconfirmed_corrections(
        submission, master_data, request.confirmed_workers, request.confirm_product
    )
    if issues:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Corrections need confirmation", "unconfirmed": issues},
        )

    try:
        result = await orchestrator.save_all(submission.header, submission.workers)
    except (InvalidWorkDateError, InvalidTimeSlotError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    except StoreError as e:
        raise store_error_to_http(e)

    return SaveResponse(**result.to_dict())
