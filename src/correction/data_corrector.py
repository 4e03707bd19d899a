"""
Data Corrector
Applies the fuzzy resolver to an OCR'd worklog and records how sure each
correction is. Anything below the confidence threshold is flagged so the
confirmation screen forces a human decision before saving.
"""
from dataclasses import replace
from typing import List, Optional, Tuple

import config
from correction.models import Header, NameCorrection, OcrSubmission, ProductCorrection, WorkerRecord
from master_data.models import MasterData
from matching.fuzzy_resolver import MatchKind, resolve_person, resolve_product
from utils.logger import get_logger


def correct_header(header: Header, master_data: MasterData,
                   threshold: Optional[float] = None) -> Header:
    """Resolve the header product against the product list."""
    threshold = config.LOW_CONFIDENCE_THRESHOLD if threshold is None else threshold
    original = header.product

    if not original:
        return replace(header, correction=ProductCorrection(low_confidence_flag=True))

    result = resolve_product(original, master_data.products)
    if result.match is None:
        return replace(header, correction=ProductCorrection(low_confidence_flag=True))

    corrected = result.match
    low = (
        result.confidence < threshold
        or not master_data.has_product(corrected)
    )
    return replace(
        header,
        product=corrected,
        correction=ProductCorrection(
            original_product=original if original != corrected else None,
            confidence=result.confidence,
            kind=result.kind,
            low_confidence_flag=low,
        ),
    )


def correct_worker(record: WorkerRecord, master_data: MasterData,
                   threshold: Optional[float] = None) -> WorkerRecord:
    """Resolve one worker name against the employee list."""
    threshold = config.LOW_CONFIDENCE_THRESHOLD if threshold is None else threshold
    original = record.name

    if not original:
        return replace(record, correction=NameCorrection(low_confidence_flag=True))

    result = resolve_person(original, master_data.employees)
    if result.match is None:
        # Nothing to match against: keep what OCR read
        return replace(record, correction=NameCorrection(
            original_name=None,
            confidence=0.0,
            kind=MatchKind.NO_MATCH,
            low_confidence_flag=True,
        ))

    return replace(
        record,
        name=result.match,
        correction=NameCorrection(
            original_name=original if original != result.match else None,
            confidence=result.confidence,
            kind=result.kind,
            is_last_name_match=result.is_last_name_match,
            low_confidence_flag=result.confidence < threshold,
        ),
    )


def correct(header: Header, workers: List[WorkerRecord],
            master_data: MasterData) -> Tuple[Header, List[WorkerRecord]]:
    """
    Correct a header and its worker records.

    Inputs are left untouched; corrected copies are returned.
    """
    return (
        correct_header(header, master_data),
        [correct_worker(w, master_data) for w in workers],
    )


class DataCorrector:
    """Correction entry point wired to a master data source."""

    def __init__(self, master_data_service):
        self.master_data_service = master_data_service
        self.logger = get_logger()

    def correct_submission(self, submission: OcrSubmission) -> OcrSubmission:
        """
        Load master data and correct a whole submission.

        Raises:
            MasterDataError: master lists could not be loaded
        """
        master_data = self.master_data_service.get_master_data()
        self.logger.info(
            f"Correcting submission against {len(master_data.employees)} employees, "
            f"{len(master_data.products)} products",
            component="Corrector"
        )
        header, workers = correct(submission.header, submission.workers, master_data)
        self._log_corrections(submission, header, workers)
        return OcrSubmission(header=header, workers=workers)

    def _log_corrections(self, original: OcrSubmission, header: Header, workers: List[WorkerRecord]):
        if header.correction and header.correction.kind != MatchKind.NO_MATCH:
            self.logger.log_correction(
                "product", original.header.product, header.product,
                header.correction.confidence, header.correction.kind.value,
            )
        for before, after in zip(original.workers, workers):
            if after.correction and after.correction.kind != MatchKind.NO_MATCH:
                self.logger.log_correction(
                    f"{after.work_type.value} worker", before.name, after.name,
                    after.correction.confidence, after.correction.kind.value,
                )
            elif after.correction and after.correction.low_confidence_flag:
                self.logger.warning(
                    f"{after.work_type.value} worker '{before.name}' could not be matched",
                    component="Corrector"
                )
