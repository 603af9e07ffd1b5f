"""
Tests for the monthly PDF reports.

The styled renderer is exercised end to end with fpdf2 and read back with
pypdf. The template renderer is exercised against fake pypdf classes for the
edge cases and against a small AcroForm document built with pypdf.
"""

import pytest
from decimal import Decimal
from io import BytesIO

import httpx
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    FloatObject,
    NameObject,
    NumberObject,
    TextStringObject,
)

from congregation_accounts.audit import AuditLogger
from congregation_accounts.config import ReportSettings
from congregation_accounts.models.audit import AuditEventType
from congregation_accounts.models.ledger import OpeningBalance, Transaction, TransactionKind
from congregation_accounts.models.report import ReportInput
from congregation_accounts.reports import (
    ReportAssembler,
    StyledReportRenderer,
    TemplateLoadError,
    TemplateReportRenderer,
    create_renderer,
    load_template,
    template_field_values,
)
from congregation_accounts.reports import template as template_module
from congregation_accounts.reports.styled import abbreviate_category, latin1, wrap_text


def make_transaction(day, amount, kind="income", category="Worldwide Work Donations", description="Sample entry"):
    return Transaction(
        date=day,
        description=description,
        category=category,
        amount=Decimal(amount),
        type=kind,
    )


@pytest.fixture
def january_input():
    return ReportInput(
        month="2024-01",
        transactions=[
            make_transaction("2024-01-20", "150.00", kind="expense",
                             category="Local Congregation Expenses", description="Electricity Bill"),
            make_transaction("2024-01-15", "500.00", description="Contributions to Worldwide Work"),
            make_transaction("2024-01-15", "300.00", category="Local Congregation Donations",
                             description="Contributions - Local Congregation Expenses"),
            make_transaction("2024-01-25", "50.00", kind="expense",
                             category="Local Congregation Expenses", description="Internet Service"),
        ],
        opening_balance=OpeningBalance(month="2024-01", balance=Decimal("5000.00")),
        congregation_name="Riverside Congregation",
        report_date="Feb 1, 2024",
    )


def pdf_text(content: bytes) -> str:
    reader = PdfReader(BytesIO(content))
    return "\n".join(page.extract_text() for page in reader.pages)


class TestTextHelpers:
    """Tests for table cell helpers."""

    def test_wrap_text_breaks_between_words(self):
        assert wrap_text("hello world again", 10, len) == ["hello", "world", "again"]

    def test_wrap_text_keeps_short_text_on_one_line(self):
        assert wrap_text("hello world", 20, len) == ["hello world"]

    def test_wrap_text_truncates_overlong_word(self):
        lines = wrap_text("abcdefghijklmnop next", 10, len)
        assert lines == ["abcdefg...", "next"]
        assert all(len(line) <= 10 for line in lines)

    def test_wrap_text_overlong_word_after_text(self):
        assert wrap_text("hi abcdefghijklmnop", 10, len) == ["hi", "abcdefg..."]

    def test_wrap_text_empty(self):
        assert wrap_text("", 10, len) == []

    @pytest.mark.parametrize("category,kind,expected", [
        ("Worldwide Work Donations", TransactionKind.INCOME, "WWW"),
        ("Worldwide Work Expenses", TransactionKind.EXPENSE, "WWE"),
        ("Local Congregation Donations", TransactionKind.INCOME, "LCD"),
        ("Local Congregation Expenses", TransactionKind.EXPENSE, "LCE"),
        ("Other Income", TransactionKind.INCOME, "Other Dona..."),
        ("Building Fund Contributions", TransactionKind.INCOME, "Building F..."),
        ("Misc", TransactionKind.EXPENSE, "Misc"),
    ])
    def test_abbreviate_category(self, category, kind, expected):
        assert abbreviate_category(category, kind) == expected

    def test_latin1_replaces_unsupported_characters(self):
        assert latin1("₱500 café") == "?500 café"


class TestStyledRenderer:
    """Tests for the styled report."""

    def test_renders_pdf(self, january_input):
        content = StyledReportRenderer().render(january_input)
        assert content.startswith(b"%PDF")

    def test_report_contents(self, january_input):
        text = pdf_text(StyledReportRenderer().render(january_input))
        assert "Riverside Congregation" in text
        assert "Monthly Financial Report - January 2024" in text
        assert "Generated on: Feb 1, 2024" in text
        assert "PHP 5,600" in text
        assert "Total Transactions: 4" in text
        assert "Donation Transactions: 2" in text
        assert "Generated by Congregation Accounts System" in text

    def test_empty_month(self):
        text = pdf_text(StyledReportRenderer().render(ReportInput(month="2024-05")))
        assert "No transactions found for this month." in text
        assert "Congregation Accounts" in text

    def test_single_page_footer_shows_page_total(self, january_input):
        text = pdf_text(StyledReportRenderer().render(january_input))
        assert "Page 1 of 1" in text
        assert "{nb}" not in text

    def test_long_month_paginates(self):
        transactions = [
            make_transaction(f"2024-03-{(i % 28) + 1:02d}", "10.00", description=f"Offering number {i}")
            for i in range(150)
        ]
        content = StyledReportRenderer().render(ReportInput(month="2024-03", transactions=transactions))
        reader = PdfReader(BytesIO(content))
        total = len(reader.pages)

        assert total > 1
        assert f"Page 1 of {total}" in reader.pages[0].extract_text()
        assert f"Page {total} of {total}" in reader.pages[-1].extract_text()
        assert all("{nb}" not in page.extract_text() for page in reader.pages)

    def test_peso_symbol_does_not_break_rendering(self, january_input):
        content = StyledReportRenderer(currency_symbol="₱").render(january_input)
        assert content.startswith(b"%PDF")


class FakeReader:
    fields: dict = {}

    def __init__(self, stream):
        self.pages = [object()]

    def get_fields(self):
        return self.fields


class FakeWriter:
    instances: list = []
    broken_fields: set = set()

    def __init__(self, clone_from=None):
        self.pages = [object()]
        self.filled: dict[str, str] = {}
        FakeWriter.instances.append(self)

    def update_page_form_field_values(self, page, values, auto_regenerate=True):
        if set(values) & self.broken_fields:
            raise PyPdfError("field has no widget")
        self.filled.update(values)

    def set_need_appearances_writer(self, state=True):
        pass

    def write(self, stream):
        stream.write(b"%PDF-filled")


@pytest.fixture
def fake_pdf(monkeypatch):
    FakeReader.fields = {
        "congregation_name": {"/FT": "/Tx"},
        "month_year": {"/FT": "/Tx"},
        "opening_balance": {"/FT": "/Tx"},
        "worldwide_work_donations": {"/FT": "/Tx"},
        "local_congregation_donations": {"/FT": "/Tx"},
        "approved": {"/FT": "/Btn"},
        "secretary_signature": {"/FT": "/Tx"},
    }
    FakeWriter.instances = []
    FakeWriter.broken_fields = set()
    monkeypatch.setattr(template_module, "PdfReader", FakeReader)
    monkeypatch.setattr(template_module, "PdfWriter", FakeWriter)
    return FakeWriter


class TestTemplateRenderer:
    """Tests for the template-fill report."""

    def test_field_values(self, january_input):
        assert template_field_values(january_input) == {
            "congregation_name": "Riverside Congregation",
            "month_year": "January 2024",
            "opening_balance": "5000.00",
            "worldwide_work_donations": "500.00",
            "local_congregation_donations": "300.00",
        }

    def test_field_values_without_name_or_balance(self):
        values = template_field_values(ReportInput(month="2024-02"))
        assert "congregation_name" not in values
        assert values["opening_balance"] == "0.00"

    def test_fills_mapped_fields_only(self, fake_pdf, january_input):
        renderer = TemplateReportRenderer("template.pdf", loader=lambda location: b"%PDF")
        content = renderer.render(january_input)

        assert content == b"%PDF-filled"
        filled = fake_pdf.instances[0].filled
        assert filled["opening_balance"] == "5000.00"
        assert "approved" not in filled
        assert "secretary_signature" not in filled

    def test_checkbox_with_mapped_name_is_skipped(self, fake_pdf, january_input):
        FakeReader.fields = {"month_year": {"/FT": "/Btn"}}
        TemplateReportRenderer("t.pdf", loader=lambda location: b"%PDF").render(january_input)
        assert fake_pdf.instances[0].filled == {}

    def test_unfillable_field_is_skipped(self, fake_pdf, january_input):
        fake_pdf.broken_fields = {"opening_balance"}
        TemplateReportRenderer("t.pdf", loader=lambda location: b"%PDF").render(january_input)
        filled = fake_pdf.instances[0].filled
        assert "opening_balance" not in filled
        assert filled["month_year"] == "January 2024"

    def test_template_without_pages(self, january_input):
        empty = BytesIO()
        PdfWriter().write(empty)
        renderer = TemplateReportRenderer("empty.pdf", loader=lambda location: empty.getvalue())
        with pytest.raises(TemplateLoadError):
            renderer.render(january_input)

    def test_missing_template_file(self, tmp_path):
        with pytest.raises(TemplateLoadError):
            load_template(str(tmp_path / "missing.pdf"))

    def test_template_file_is_read(self, tmp_path):
        path = tmp_path / "template.pdf"
        path.write_bytes(b"%PDF-1.7")
        assert load_template(str(path)) == b"%PDF-1.7"

    def test_missing_template_url(self, monkeypatch):
        def fake_get(url, **kwargs):
            return httpx.Response(404, request=httpx.Request("GET", url))

        monkeypatch.setattr(template_module.httpx, "get", fake_get)
        with pytest.raises(TemplateLoadError):
            load_template("https://example.org/monthly-report-template.pdf")

    def test_template_url_server_error_propagates(self, monkeypatch):
        def fake_get(url, **kwargs):
            return httpx.Response(500, request=httpx.Request("GET", url))

        monkeypatch.setattr(template_module.httpx, "get", fake_get)
        with pytest.raises(httpx.HTTPStatusError):
            load_template("https://example.org/monthly-report-template.pdf")


def build_form(fields) -> bytes:
    """
    One-page AcroForm PDF.

    fields is a list of (name, field_type, value); checkbox values are
    appearance state names such as "/Off".
    """
    writer = PdfWriter()
    page = writer.add_blank_page(width=612, height=792)

    font = writer._add_object(DictionaryObject({
        NameObject("/Type"): NameObject("/Font"),
        NameObject("/Subtype"): NameObject("/Type1"),
        NameObject("/BaseFont"): NameObject("/Helvetica"),
        NameObject("/Encoding"): NameObject("/WinAnsiEncoding"),
    }))

    widgets = ArrayObject()
    for index, (name, field_type, value) in enumerate(fields):
        bottom = 720 - index * 40
        widget = DictionaryObject({
            NameObject("/Type"): NameObject("/Annot"),
            NameObject("/Subtype"): NameObject("/Widget"),
            NameObject("/FT"): NameObject(field_type),
            NameObject("/T"): TextStringObject(name),
            NameObject("/F"): NumberObject(4),
            NameObject("/Rect"): ArrayObject([
                FloatObject(72), FloatObject(bottom), FloatObject(320), FloatObject(bottom + 20),
            ]),
        })
        if field_type == "/Btn":
            widget[NameObject("/V")] = NameObject(value)
            widget[NameObject("/AS")] = NameObject(value)
        else:
            widget[NameObject("/DA")] = TextStringObject("/Helv 10 Tf 0 g")
            widget[NameObject("/V")] = TextStringObject(value)
        widgets.append(writer._add_object(widget))

    page[NameObject("/Annots")] = widgets
    writer._root_object[NameObject("/AcroForm")] = writer._add_object(DictionaryObject({
        NameObject("/Fields"): ArrayObject(list(widgets)),
        NameObject("/DA"): TextStringObject("/Helv 10 Tf 0 g"),
        NameObject("/DR"): DictionaryObject({
            NameObject("/Font"): DictionaryObject({NameObject("/Helv"): font}),
        }),
    }))

    output = BytesIO()
    writer.write(output)
    return output.getvalue()


class TestTemplateFillOnRealForm:
    """Fills an actual AcroForm document with pypdf."""

    @pytest.fixture
    def template_path(self, tmp_path):
        path = tmp_path / "monthly-report-template.pdf"
        path.write_bytes(build_form([
            ("congregation_name", "/Tx", ""),
            ("month_year", "/Tx", ""),
            ("opening_balance", "/Tx", ""),
            ("worldwide_work_donations", "/Tx", ""),
            ("local_congregation_donations", "/Tx", ""),
            ("secretary_signature", "/Tx", "R. Santos"),
            ("approved", "/Btn", "/Off"),
        ]))
        return path

    def test_mapped_fields_are_filled(self, template_path, january_input):
        content = TemplateReportRenderer(str(template_path)).render(january_input)
        fields = PdfReader(BytesIO(content)).get_fields()

        assert fields["congregation_name"]["/V"] == "Riverside Congregation"
        assert fields["month_year"]["/V"] == "January 2024"
        assert fields["opening_balance"]["/V"] == "5000.00"
        assert fields["worldwide_work_donations"]["/V"] == "500.00"
        assert fields["local_congregation_donations"]["/V"] == "300.00"

    def test_unmapped_and_checkbox_fields_untouched(self, template_path, january_input):
        content = TemplateReportRenderer(str(template_path)).render(january_input)
        fields = PdfReader(BytesIO(content)).get_fields()

        assert fields["secretary_signature"]["/V"] == "R. Santos"
        assert fields["approved"]["/FT"] == "/Btn"
        assert fields["approved"]["/V"] == "/Off"

    def test_template_file_is_not_modified(self, template_path, january_input):
        original = template_path.read_bytes()
        TemplateReportRenderer(str(template_path)).render(january_input)

        assert template_path.read_bytes() == original
        assert PdfReader(BytesIO(original)).get_fields()["month_year"]["/V"] == ""


class FailingRenderer(StyledReportRenderer):
    name = "failing"

    def render(self, report_input):
        raise TemplateLoadError("Report template not found: nowhere.pdf")


class TestAssembler:
    """Tests for report delivery."""

    def test_download(self, january_input):
        download = ReportAssembler(StyledReportRenderer()).download(january_input)
        assert download.filename == "monthly-report-2024-01.pdf"
        assert download.mime_type == "application/pdf"
        assert download.content.startswith(b"%PDF")

    def test_download_custom_filename(self, january_input):
        download = ReportAssembler(StyledReportRenderer()).download(january_input, "january.pdf")
        assert download.filename == "january.pdf"

    def test_open_in_viewer(self, january_input):
        opened = []
        path = ReportAssembler(StyledReportRenderer()).open_in_viewer(
            january_input, opener=lambda uri: opened.append(uri) or True
        )
        try:
            assert path.read_bytes().startswith(b"%PDF")
            assert opened == [path.as_uri()]
        finally:
            path.unlink()

    def test_render_is_audited(self, january_input):
        audit = AuditLogger()
        ReportAssembler(StyledReportRenderer(), audit).render(january_input)
        assert audit.events[-1].event_type == AuditEventType.REPORT_GENERATED

    def test_render_failure_propagates_and_is_audited(self, january_input):
        audit = AuditLogger()
        with pytest.raises(TemplateLoadError):
            ReportAssembler(FailingRenderer(), audit).render(january_input)
        assert audit.events[-1].event_type == AuditEventType.REPORT_FAILED

    def test_create_renderer(self):
        assert isinstance(create_renderer(ReportSettings(strategy="template")), TemplateReportRenderer)
        assert isinstance(create_renderer(ReportSettings(strategy="styled")), StyledReportRenderer)
