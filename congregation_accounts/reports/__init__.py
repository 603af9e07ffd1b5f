"""Monthly report rendering and delivery."""

from congregation_accounts.reports.renderer import (
    PDF_MIME_TYPE,
    ReportError,
    ReportRenderer,
    TemplateLoadError,
)
from congregation_accounts.reports.styled import StyledReportRenderer
from congregation_accounts.reports.template import (
    TEMPLATE_FIELD_MAP,
    TemplateReportRenderer,
    load_template,
    template_field_values,
)
from congregation_accounts.reports.assembler import (
    ReportAssembler,
    ReportDownload,
    create_renderer,
)

__all__ = [
    "PDF_MIME_TYPE",
    "ReportAssembler",
    "ReportDownload",
    "ReportError",
    "ReportRenderer",
    "StyledReportRenderer",
    "TEMPLATE_FIELD_MAP",
    "TemplateLoadError",
    "TemplateReportRenderer",
    "create_renderer",
    "load_template",
    "template_field_values",
]
