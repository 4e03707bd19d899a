"""
Worklog Data Models
Dataclasses for OCR'd worklog submissions and their correction metadata.

Pure definitions -- no I/O.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from matching.fuzzy_resolver import MatchKind


class WorkType(Enum):
    """The two record sections of a worklog sheet."""
    PACKAGING = 'packaging'
    MACHINE = 'machine'


# Keys used by the OCR producer's JSON output
OCR_HEADER_KEY = 'ヘッダー'
OCR_SECTION_KEYS = {
    WorkType.PACKAGING: '包装作業記録',
    WorkType.MACHINE: '機械操作記録',
}


def _text(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


@dataclass
class TimeSlot:
    start: str = ''
    end: str = ''

    def is_complete(self) -> bool:
        return bool(self.start) and bool(self.end)

    def to_dict(self) -> Dict[str, str]:
        return {'start': self.start, 'end': self.end}


@dataclass
class BreakFlags:
    lunch: bool = False
    mid: bool = False


@dataclass
class NameCorrection:
    """How a worker name was resolved against the employee list."""
    original_name: Optional[str] = None
    confidence: float = 0.0
    kind: MatchKind = MatchKind.NO_MATCH
    is_last_name_match: bool = False
    low_confidence_flag: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'original_name': self.original_name,
            'confidence': self.confidence,
            'kind': self.kind.value,
            'is_last_name_match': self.is_last_name_match,
            'low_confidence_flag': self.low_confidence_flag,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NameCorrection':
        return cls(
            original_name=data.get('original_name'),
            confidence=float(data.get('confidence') or 0.0),
            kind=MatchKind(data.get('kind') or MatchKind.NO_MATCH.value),
            is_last_name_match=bool(data.get('is_last_name_match')),
            low_confidence_flag=bool(data.get('low_confidence_flag')),
        )


@dataclass
class ProductCorrection:
    """How the header product was resolved against the product list."""
    original_product: Optional[str] = None
    confidence: float = 0.0
    kind: MatchKind = MatchKind.NO_MATCH
    low_confidence_flag: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'original_product': self.original_product,
            'confidence': self.confidence,
            'kind': self.kind.value,
            'low_confidence_flag': self.low_confidence_flag,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductCorrection':
        return cls(
            original_product=data.get('original_product'),
            confidence=float(data.get('confidence') or 0.0),
            kind=MatchKind(data.get('kind') or MatchKind.NO_MATCH.value),
            low_confidence_flag=bool(data.get('low_confidence_flag')),
        )


@dataclass
class WorkerRecord:
    """One worker line from the packaging or machine-operation section."""
    name: str = ''
    work_type: WorkType = WorkType.PACKAGING
    slots: List[TimeSlot] = field(default_factory=list)
    breaks: BreakFlags = field(default_factory=BreakFlags)
    produced_count: str = ''
    correction: Optional[NameCorrection] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'work_type': self.work_type.value,
            'slots': [slot.to_dict() for slot in self.slots],
            'breaks': {'lunch': self.breaks.lunch, 'mid': self.breaks.mid},
            'produced_count': self.produced_count,
            'correction': self.correction.to_dict() if self.correction else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkerRecord':
        breaks = data.get('breaks') or {}
        correction = data.get('correction')
        return cls(
            name=_text(data.get('name')),
            work_type=WorkType(data.get('work_type') or WorkType.PACKAGING.value),
            slots=[
                TimeSlot(start=_text(s.get('start')), end=_text(s.get('end')))
                for s in (data.get('slots') or [])
            ],
            breaks=BreakFlags(lunch=bool(breaks.get('lunch')), mid=bool(breaks.get('mid'))),
            produced_count=_text(data.get('produced_count')),
            correction=NameCorrection.from_dict(correction) if correction else None,
        )

    @classmethod
    def from_ocr_dict(cls, data: Dict[str, Any], work_type: WorkType) -> 'WorkerRecord':
        """
        Build a record from one OCR row.

        OCR rows carry either a 時刻リスト of slots or a single
        開始時刻/終了時刻 pair.
        """
        slot_list = data.get('時刻リスト') or []
        slots = [
            TimeSlot(start=_text(s.get('開始時刻')), end=_text(s.get('終了時刻')))
            for s in slot_list
        ]
        if not slots:
            start, end = _text(data.get('開始時刻')), _text(data.get('終了時刻'))
            if start or end:
                slots = [TimeSlot(start=start, end=end)]

        breaks = data.get('休憩') or {}
        return cls(
            name=_text(data.get('氏名')),
            work_type=work_type,
            slots=slots,
            breaks=BreakFlags(lunch=bool(breaks.get('昼休み')), mid=bool(breaks.get('中休み'))),
            produced_count=_text(data.get('生産数')),
        )


@dataclass
class Header:
    """Sheet-level fields read from the top of the worklog."""
    work_date: str = ''
    factory: str = ''
    product: str = ''
    work_hours: str = ''
    correction: Optional[ProductCorrection] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'work_date': self.work_date,
            'factory': self.factory,
            'product': self.product,
            'work_hours': self.work_hours,
            'correction': self.correction.to_dict() if self.correction else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Header':
        correction = data.get('correction')
        return cls(
            work_date=_text(data.get('work_date')),
            factory=_text(data.get('factory')),
            product=_text(data.get('product')),
            work_hours=_text(data.get('work_hours')),
            correction=ProductCorrection.from_dict(correction) if correction else None,
        )

    @classmethod
    def from_ocr_dict(cls, data: Dict[str, Any]) -> 'Header':
        return cls(
            work_date=_text(data.get('作業日')),
            factory=_text(data.get('工場名')),
            product=_text(data.get('商品名')),
            work_hours=_text(data.get('作業時間')),
        )


@dataclass
class OcrSubmission:
    """A whole worklog sheet: header plus every worker record."""
    header: Header = field(default_factory=Header)
    workers: List[WorkerRecord] = field(default_factory=list)

    def records_of(self, work_type: WorkType) -> List[WorkerRecord]:
        return [w for w in self.workers if w.work_type == work_type]

    def needs_confirmation(self) -> bool:
        """True while any correction is still flagged as low confidence."""
        if self.header.correction and self.header.correction.low_confidence_flag:
            return True
        return any(w.correction and w.correction.low_confidence_flag for w in self.workers)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'header': self.header.to_dict(),
            'workers': [w.to_dict() for w in self.workers],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OcrSubmission':
        return cls(
            header=Header.from_dict(data.get('header') or {}),
            workers=[WorkerRecord.from_dict(w) for w in (data.get('workers') or [])],
        )

    @classmethod
    def from_ocr_json(cls, data: Dict[str, Any]) -> 'OcrSubmission':
        """Parse the OCR producer's Japanese-keyed JSON."""
        workers = []
        for work_type, key in OCR_SECTION_KEYS.items():
            for row in data.get(key) or []:
                workers.append(WorkerRecord.from_ocr_dict(row, work_type))
        return cls(header=Header.from_ocr_dict(data.get(OCR_HEADER_KEY) or {}), workers=workers)
