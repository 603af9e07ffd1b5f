"""
Styled Monthly Report

Draws the monthly report from scratch with fpdf2 on Legal paper:
header, summary box, transaction table and trailing counts, with a footer
on every page. Coordinates are in millimetres and text is placed on its
baseline.
"""

from datetime import date
from decimal import Decimal
from typing import Callable

from fpdf import FPDF

from congregation_accounts.aggregation.engine import summarize
from congregation_accounts.models.ledger import Transaction, TransactionKind
from congregation_accounts.models.report import ReportInput
from congregation_accounts.reports.renderer import ReportRenderer
from congregation_accounts.utils.formatting import (
    format_currency_whole,
    format_date,
    format_month_year,
)


FONT = "Helvetica"
FONT_SIZE = {"title": 16, "header": 14, "subheader": 12, "body": 10, "small": 8}

PRIMARY = (79, 70, 229)
SUCCESS = (16, 185, 129)
ERROR = (239, 68, 68)
TEXT = (55, 65, 81)
HEADER_FILL = (240, 240, 240)
SEPARATOR = (230, 230, 230)

MARGIN_LEFT = 10
MARGIN_RIGHT = 10
MARGIN_TOP = 15
BOTTOM_RESERVE = 40

COLUMN_WIDTHS = {"date": 25, "description": 120, "category": 35, "amount": 45}
DESCRIPTION_PADDING = 5
LINE_HEIGHT = 4
MIN_ROW_HEIGHT = 5
SEPARATOR_EVERY = 5

ELLIPSIS = "..."
MAX_CATEGORY_LENGTH = 12
DEFAULT_ORGANIZATION = "Congregation Accounts"
FOOTER_TEXT = "Generated by Congregation Accounts System"


def latin1(text: str) -> str:
    """The core PDF fonts only cover latin-1; anything else prints as '?'."""
    return text.encode("latin-1", "replace").decode("latin-1")


def _truncate_to_width(word: str, max_width: float, measure: Callable[[str], float]) -> str:
    cut = len(word)
    while cut > 0 and measure(word[:cut] + ELLIPSIS) > max_width:
        cut -= 1
    return word[:cut] + ELLIPSIS


def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> list[str]:
    """
    Break text into lines no wider than max_width.

    Words are never split; a single word wider than the column is cut
    short and ends with '...'.
    """
    lines: list[str] = []
    current = ""

    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if measure(candidate) <= max_width:
            current = candidate
            continue

        if current:
            lines.append(current)
        if measure(word) <= max_width:
            current = word
        else:
            lines.append(_truncate_to_width(word, max_width, measure))
            current = ""

    if current:
        lines.append(current)
    return lines


def abbreviate_category(category: str, kind: TransactionKind) -> str:
    """Short category label for the narrow table column."""
    is_income = kind == TransactionKind.INCOME
    if "Worldwide Work" in category:
        label = "WWW" if is_income else "WWE"
    elif "Local Congregation" in category:
        label = "LCD" if is_income else "LCE"
    elif "Other" in category:
        label = "Other Donations" if is_income else "Other Expenses"
    else:
        label = category

    if len(label) > MAX_CATEGORY_LENGTH:
        return label[:10] + ELLIPSIS
    return label


class MonthlyReportPDF(FPDF):
    """Legal portrait document with the report footer on every page."""

    def __init__(self):
        super().__init__(orientation="P", unit="mm", format="legal")
        self.set_margins(MARGIN_LEFT, MARGIN_TOP, MARGIN_RIGHT)
        self.set_auto_page_break(False)
        self.set_font(FONT, "", FONT_SIZE["body"])

    @property
    def right_edge(self) -> float:
        return self.w - MARGIN_RIGHT

    def footer(self) -> None:
        footer_y = self.h - 15
        self.set_font(FONT, "", FONT_SIZE["small"])
        self.set_text_color(*TEXT)
        self.set_draw_color(*TEXT)
        self.line(MARGIN_LEFT, footer_y - 5, self.right_edge, footer_y - 5)
        self.text(MARGIN_LEFT, footer_y, FOOTER_TEXT)

        # fpdf2 only substitutes the page total for {nb} inside cells
        page_info = f"Page {self.page_no()} of {{nb}}"
        self.set_xy(MARGIN_LEFT, footer_y - 3)
        self.cell(0, 4, page_info, align="R")

    def centered_text(self, y: float, text: str) -> None:
        text = latin1(text)
        self.text((self.w - self.get_string_width(text)) / 2, y, text)


class StyledReportRenderer(ReportRenderer):
    """Paginated report drawn entirely in code."""

    name = "styled"

    def __init__(self, currency_symbol: str = "PHP "):
        self._currency_symbol = currency_symbol

    def _money(self, amount: Decimal) -> str:
        return latin1(format_currency_whole(amount, self._currency_symbol))

    def render(self, report_input: ReportInput) -> bytes:
        pdf = MonthlyReportPDF()
        pdf.add_page()

        y = self._draw_header(pdf, report_input, MARGIN_TOP)
        y = self._draw_summary(pdf, report_input, y + 10)
        self._draw_transactions(pdf, report_input, y + 10)

        return bytes(pdf.output())

    def _draw_header(self, pdf: MonthlyReportPDF, report_input: ReportInput, y: float) -> float:
        pdf.set_font(FONT, "", FONT_SIZE["title"])
        pdf.set_text_color(*PRIMARY)
        pdf.centered_text(y, report_input.congregation_name or DEFAULT_ORGANIZATION)
        y += 10

        pdf.set_font(FONT, "", FONT_SIZE["header"])
        pdf.set_text_color(*TEXT)
        pdf.centered_text(y, f"Monthly Financial Report - {format_month_year(report_input.month)}")
        y += 8

        pdf.set_font(FONT, "", FONT_SIZE["body"])
        generated_on = report_input.report_date or format_date(date.today())
        pdf.centered_text(y, f"Generated on: {generated_on}")
        y += 5

        pdf.set_draw_color(*PRIMARY)
        pdf.line(MARGIN_LEFT, y, pdf.right_edge, y)
        return y + 5

    def _draw_summary(self, pdf: MonthlyReportPDF, report_input: ReportInput, y: float) -> float:
        summary = summarize(report_input.transactions)
        opening = report_input.opening_amount
        ending = opening + summary.net

        pdf.set_font(FONT, "", FONT_SIZE["subheader"])
        pdf.set_text_color(*PRIMARY)
        pdf.text(MARGIN_LEFT, y, "FINANCIAL SUMMARY")
        y += 10

        box_width = pdf.right_edge - MARGIN_LEFT
        pdf.set_draw_color(*TEXT)
        pdf.rect(MARGIN_LEFT, y - 5, box_width, 55)

        center_x = MARGIN_LEFT + box_width / 2
        label_x, value_x = center_x - 40, center_x + 20
        rows = [
            ("Opening Balance:", opening, TEXT, ""),
            ("Total Donations:", summary.total_income, SUCCESS, ""),
            ("Total Expenses:", summary.total_expenses, ERROR, ""),
            ("Ending Balance:", ending, SUCCESS if ending >= 0 else ERROR, "B"),
        ]

        for offset, (label, amount, color, style) in zip((10, 22, 34, 46), rows):
            pdf.set_font(FONT, "", FONT_SIZE["body"])
            pdf.set_text_color(*TEXT)
            pdf.text(label_x, y + offset, label)
            pdf.set_font(FONT, style, FONT_SIZE["body"])
            pdf.set_text_color(*color)
            pdf.text(value_x, y + offset, self._money(amount))

        pdf.set_font(FONT, "", FONT_SIZE["body"])
        return y + 55

    def _draw_table_header(self, pdf: MonthlyReportPDF, y: float) -> float:
        pdf.set_fill_color(*HEADER_FILL)
        pdf.rect(MARGIN_LEFT, y - 2, pdf.right_edge - MARGIN_LEFT, 6, style="F")

        pdf.set_font(FONT, "B", FONT_SIZE["small"])
        pdf.set_text_color(*TEXT)
        x = MARGIN_LEFT
        for title, key in (("Date", "date"), ("Description", "description"),
                           ("Category", "category"), ("Amount", "amount")):
            pdf.text(x, y, title)
            x += COLUMN_WIDTHS[key]

        pdf.set_font(FONT, "", FONT_SIZE["small"])
        return y + 6

    def _draw_row(
        self,
        pdf: MonthlyReportPDF,
        transaction: Transaction,
        lines: list[str],
        y: float,
    ) -> None:
        x = MARGIN_LEFT
        pdf.set_font(FONT, "", FONT_SIZE["small"])
        pdf.set_text_color(*TEXT)
        pdf.text(x, y, format_date(transaction.date))
        x += COLUMN_WIDTHS["date"]

        for index, line in enumerate(lines):
            pdf.text(x, y + index * LINE_HEIGHT, line)
        x += COLUMN_WIDTHS["description"]

        pdf.text(x, y, latin1(abbreviate_category(transaction.category, transaction.kind)))
        x += COLUMN_WIDTHS["category"]

        pdf.set_text_color(*(SUCCESS if transaction.is_income else ERROR))
        pdf.text(x, y, self._money(transaction.amount))

    def _draw_transactions(self, pdf: MonthlyReportPDF, report_input: ReportInput, y: float) -> None:
        page_limit = pdf.h - BOTTOM_RESERVE

        pdf.set_font(FONT, "", FONT_SIZE["subheader"])
        pdf.set_text_color(*PRIMARY)
        pdf.text(MARGIN_LEFT, y, "TRANSACTION DETAILS")
        y += 8

        transactions = report_input.transactions
        if not transactions:
            pdf.set_font(FONT, "", FONT_SIZE["body"])
            pdf.set_text_color(*TEXT)
            pdf.text(MARGIN_LEFT, y, "No transactions found for this month.")
            return

        y = self._draw_table_header(pdf, y)
        description_width = COLUMN_WIDTHS["description"] - DESCRIPTION_PADDING

        # sorted() is stable, so same-day transactions keep their order
        for index, transaction in enumerate(sorted(transactions, key=lambda t: t.date)):
            pdf.set_font(FONT, "", FONT_SIZE["small"])
            lines = wrap_text(latin1(transaction.description), description_width, pdf.get_string_width)
            row_height = max(MIN_ROW_HEIGHT, len(lines) * LINE_HEIGHT)

            if y + row_height > page_limit:
                pdf.add_page()
                y = MARGIN_TOP

            self._draw_row(pdf, transaction, lines, y)
            y += row_height

            if index % SEPARATOR_EVERY == SEPARATOR_EVERY - 1:
                pdf.set_draw_color(*SEPARATOR)
                pdf.line(MARGIN_LEFT, y, pdf.right_edge, y)
                y += 1

        self._draw_counts(pdf, transactions, y + 6)

    def _draw_counts(self, pdf: MonthlyReportPDF, transactions: list[Transaction], y: float) -> None:
        if y + 22 > pdf.h - BOTTOM_RESERVE:
            pdf.add_page()
            y = MARGIN_TOP

        pdf.set_draw_color(*TEXT)
        pdf.line(MARGIN_LEFT, y, pdf.right_edge, y)
        y += 6

        income_count = sum(1 for t in transactions if t.is_income)
        pdf.set_font(FONT, "B", FONT_SIZE["body"])
        pdf.set_text_color(*TEXT)
        pdf.text(MARGIN_LEFT, y, f"Total Transactions: {len(transactions)}")
        pdf.text(MARGIN_LEFT, y + 8, f"Donation Transactions: {income_count}")
        pdf.text(MARGIN_LEFT, y + 16, f"Expense Transactions: {len(transactions) - income_count}")
