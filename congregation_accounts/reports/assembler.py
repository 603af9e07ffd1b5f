"""
Report Assembler

DESIGN DECISION: Rendering and delivery are separate.
The renderer only produces bytes. The assembler decides what happens to
them: handed back to the caller, packaged as a download, or written to a
temporary file and opened in the system viewer.

Render failures are logged and re-raised; the caller always sees them.
"""

import tempfile
import webbrowser
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel

from congregation_accounts.audit import AuditLogger
from congregation_accounts.config import ReportSettings, get_settings
from congregation_accounts.models.report import ReportInput
from congregation_accounts.reports.renderer import PDF_MIME_TYPE, ReportRenderer
from congregation_accounts.reports.styled import StyledReportRenderer
from congregation_accounts.reports.template import TemplateReportRenderer


class ReportDownload(BaseModel):
    """A finished report ready to be offered as a file download."""

    filename: str
    content: bytes
    mime_type: str = PDF_MIME_TYPE


def default_filename(month: str) -> str:
    return f"monthly-report-{month}.pdf"


class ReportAssembler:
    """Runs a renderer and delivers its output."""

    def __init__(
        self,
        renderer: ReportRenderer,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._renderer = renderer
        self._audit = audit_logger or AuditLogger()

    @property
    def renderer(self) -> ReportRenderer:
        return self._renderer

    def render(self, report_input: ReportInput) -> bytes:
        try:
            content = self._renderer.render(report_input)
        except Exception as e:
            self._audit.log_report_failed(report_input.month, self._renderer.name, str(e))
            raise

        self._audit.log_report_generated(report_input.month, self._renderer.name, len(content))
        return content

    def download(
        self,
        report_input: ReportInput,
        filename: Optional[str] = None,
    ) -> ReportDownload:
        return ReportDownload(
            filename=filename or default_filename(report_input.month),
            content=self.render(report_input),
        )

    def open_in_viewer(
        self,
        report_input: ReportInput,
        opener: Callable[[str], bool] = webbrowser.open,
    ) -> Path:
        """Write the report to a temporary file and open it. Returns the file's path."""
        content = self.render(report_input)
        with tempfile.NamedTemporaryFile(
            prefix=f"monthly-report-{report_input.month}-",
            suffix=".pdf",
            delete=False,
        ) as handle:
            handle.write(content)
            path = Path(handle.name)

        opener(path.as_uri())
        return path


def create_renderer(settings: Optional[ReportSettings] = None) -> ReportRenderer:
    """Build the renderer named by REPORT_STRATEGY."""
    settings = settings or get_settings().report
    if settings.strategy == "template":
        return TemplateReportRenderer(settings.template_location)
    return StyledReportRenderer(currency_symbol=settings.currency_symbol)
