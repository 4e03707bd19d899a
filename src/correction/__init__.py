"""
OCR result correction against master data
"""
from .models import Header, OcrSubmission, TimeSlot, WorkerRecord, WorkType
from .data_corrector import DataCorrector, correct

__all__ = ['Header', 'OcrSubmission', 'TimeSlot', 'WorkerRecord', 'WorkType', 'DataCorrector', 'correct']
