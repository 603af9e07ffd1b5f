"""
Template-Fill Monthly Report

Fills the named form fields of the congregation's fixed monthly report
form. Number formatting inside the form is left to the form itself, so
amounts are written as plain decimals ("5000.00").

The template is read fresh for every report and never written back.
"""

from io import BytesIO
from pathlib import Path
from typing import Callable, Optional

import httpx
import structlog
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from congregation_accounts.aggregation.engine import category_income_total
from congregation_accounts.models.report import ReportInput
from congregation_accounts.reports.renderer import ReportRenderer, TemplateLoadError
from congregation_accounts.utils.formatting import format_month_year, format_plain_amount


logger = structlog.get_logger(__name__)

WORLDWIDE_DONATIONS = "Worldwide Work Donations"
LOCAL_DONATIONS = "Local Congregation Donations"

# Form field name -> value. Field names must match the template exactly.
TEMPLATE_FIELD_MAP: dict[str, Callable[[ReportInput], Optional[str]]] = {
    "congregation_name": lambda data: data.congregation_name,
    "month_year": lambda data: format_month_year(data.month),
    "opening_balance": lambda data: format_plain_amount(data.opening_amount),
    "worldwide_work_donations": lambda data: format_plain_amount(
        category_income_total(data.transactions, WORLDWIDE_DONATIONS)
    ),
    "local_congregation_donations": lambda data: format_plain_amount(
        category_income_total(data.transactions, LOCAL_DONATIONS)
    ),
}

CHECKBOX_FIELD_TYPE = "/Btn"


def template_field_values(report_input: ReportInput) -> dict[str, str]:
    """Values for every mapped field that has something to write."""
    values = {}
    for field_name, compute in TEMPLATE_FIELD_MAP.items():
        value = compute(report_input)
        if value:
            values[field_name] = value
    return values


def load_template(location: str, timeout: float = 30.0) -> bytes:
    """
    Read the template from a path or an http(s) URL.

    Raises:
        TemplateLoadError: If there is no template at that location
    """
    if location.startswith(("http://", "https://")):
        try:
            response = httpx.get(location, timeout=timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise TemplateLoadError(f"Report template not found: {location}")
            raise
        return response.content

    path = Path(location)
    if not path.is_file():
        raise TemplateLoadError(f"Report template not found: {location}")
    return path.read_bytes()


class TemplateReportRenderer(ReportRenderer):
    """Writes the month's figures into the fixed report form."""

    name = "template"

    def __init__(
        self,
        location: str,
        loader: Callable[[str], bytes] = load_template,
    ):
        self._location = location
        self._loader = loader

    def render(self, report_input: ReportInput) -> bytes:
        reader = PdfReader(BytesIO(self._loader(self._location)))
        if len(reader.pages) == 0:
            raise TemplateLoadError(f"Report template has no pages: {self._location}")

        writer = PdfWriter(clone_from=reader)
        fields = reader.get_fields() or {}
        values = template_field_values(report_input)

        for field_name, field in fields.items():
            if field.get("/FT") == CHECKBOX_FIELD_TYPE:
                continue
            if field_name not in values:
                continue
            self._fill_field(writer, field_name, values[field_name])

        if fields:
            writer.set_need_appearances_writer(True)

        output = BytesIO()
        writer.write(output)
        return output.getvalue()

    def _fill_field(self, writer: PdfWriter, field_name: str, value: str) -> None:
        """Fill one field on whichever page holds it. A field that can't be filled stays blank."""
        try:
            for page in writer.pages:
                writer.update_page_form_field_values(
                    page, {field_name: value}, auto_regenerate=False
                )
        except (PyPdfError, KeyError, ValueError, TypeError) as e:
            logger.debug("template_field_skipped", field=field_name, error=str(e))
