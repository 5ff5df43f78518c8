"""Output generation for schedules."""

from smartshift.output.pdf_generator import PDFGenerator
from smartshift.output.records import GenerationRecord, ScheduleRow
from smartshift.output.report import ReportGenerator

__all__ = ["PDFGenerator", "ReportGenerator", "GenerationRecord", "ScheduleRow"]
