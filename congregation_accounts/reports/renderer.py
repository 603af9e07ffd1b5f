"""
Report Renderer Interface

DESIGN DECISION: Both monthly report formats sit behind one interface.
The assembler only knows it hands a `ReportInput` to a renderer and gets
PDF bytes back; which renderer is used is a configuration choice.
"""

from abc import ABC, abstractmethod

from congregation_accounts.models.report import ReportInput


PDF_MIME_TYPE = "application/pdf"


class ReportRenderer(ABC):
    """Turns one month's data into a PDF document."""

    name: str = "renderer"

    @abstractmethod
    def render(self, report_input: ReportInput) -> bytes:
        """
        Produce the complete PDF.

        Raises:
            ReportError: If no document can be produced. Nothing partial
                is ever returned.
        """
        pass


class ReportError(Exception):
    """Base exception for report generation."""
    pass


class TemplateLoadError(ReportError):
    """The report template is missing or has no pages."""
    pass
