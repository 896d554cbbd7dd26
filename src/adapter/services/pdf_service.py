"""ReportLab PDF Generation Service Implementation

Renders proforma previews of monthly invoices using ReportLab.
"""

from decimal import Decimal
from io import BytesIO
from typing import Dict, List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate,
    Table,
    TableStyle,
    Paragraph,
    Spacer,
)

from src.app.services.pdf_service import PdfService
from src.domain.invoice import MonthlyInvoice

DARK = colors.HexColor("#2C3E50")
MUTED = colors.HexColor("#7F8C8D")
COLUMN_WIDTHS = [75 * mm, 15 * mm, 27 * mm, 25 * mm, 28 * mm]


def _money(amount: Decimal, currency: str) -> str:
    return f"{amount:,.2f} {currency}".replace(",", " ")


class ReportLabPdfService(PdfService):
    """
    ReportLab implementation of PdfService

    The document has four blocks: supplier header, invoice facts, line item
    table (with adjustments) and totals.
    """

    def generate_proforma_invoice(
        self,
        invoice: MonthlyInvoice,
        client_name: str,
        company_name: str = "Agency s.r.o.",
        company_address: str = "Vodičkova 1, 110 00 Praha 1",
    ) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=15 * mm,
            leftMargin=15 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title=f"Proforma {invoice.id}",
        )
        styles = self._styles()

        elements = [
            Paragraph(escape(company_name), styles["title"]),
            Paragraph(escape(company_address), styles["muted"]),
            Spacer(1, 8 * mm),
            Paragraph("PROFORMA", styles["proforma"]),
            self._facts_table(invoice),
            Spacer(1, 8 * mm),
            Paragraph("Bill To:", styles["bold"]),
            Paragraph(escape(client_name), styles["normal"]),
            Paragraph(escape(invoice.engagement_name), styles["muted"]),
            Spacer(1, 8 * mm),
            self._line_table(invoice),
            Spacer(1, 4 * mm),
            self._totals_table(invoice),
            Spacer(1, 12 * mm),
            Paragraph(
                "<i>Preview of a draft invoice. Amounts may still change before issuance.</i>",
                styles["footer"],
            ),
        ]

        doc.build(elements)
        pdf_bytes = buffer.getvalue()
        buffer.close()
        return pdf_bytes

    @staticmethod
    def _styles() -> Dict[str, ParagraphStyle]:
        base = getSampleStyleSheet()
        return {
            "title": ParagraphStyle(
                "Title", parent=base["Heading1"], fontSize=20, textColor=DARK, spaceAfter=6
            ),
            "proforma": ParagraphStyle(
                "Proforma", parent=base["Heading2"], fontSize=14,
                textColor=colors.HexColor("#E74C3C"), spaceAfter=12,
            ),
            "muted": ParagraphStyle("Muted", parent=base["Normal"], fontSize=9, textColor=MUTED),
            "normal": ParagraphStyle("Body", parent=base["Normal"], fontSize=10),
            "bold": ParagraphStyle(
                "Bold", parent=base["Normal"], fontSize=10, fontName="Helvetica-Bold"
            ),
            "footer": ParagraphStyle(
                "Footer", parent=base["Normal"], fontSize=8,
                textColor=colors.HexColor("#95A5A6"),
            ),
        }

    @staticmethod
    def _facts_table(invoice: MonthlyInvoice) -> Table:
        rows = [
            ["Invoice:", invoice.id],
            ["Period:", invoice.billing_period],
            ["Status:", invoice.status.value.upper()],
            ["Currency:", invoice.currency],
            ["Updated:", invoice.updated_at.strftime("%Y-%m-%d %H:%M UTC")],
        ]
        table = Table(rows, colWidths=[30 * mm, 110 * mm])
        table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("TEXTCOLOR", (0, 0), (0, -1), MUTED),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
                ]
            )
        )
        return table

    @staticmethod
    def _line_table(invoice: MonthlyInvoice) -> Table:
        rows: List[List[str]] = [["Description", "Qty", "Unit price", "Adjustment", "Total"]]
        for item in invoice.line_items:
            rows.append(
                [
                    item.line_description,
                    f"{item.quantity.normalize():f}",
                    _money(item.unit_price, item.currency),
                    _money(item.adjustment_amount, item.currency) if item.adjustment_amount else "",
                    _money(item.final_amount, item.currency),
                ]
            )

        table = Table(rows, colWidths=COLUMN_WIDTHS, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), DARK),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 8),
                    ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#BDC3C7")),
                    ("TOPPADDING", (0, 0), (-1, -1), 5),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
                ]
            )
        )
        return table

    @staticmethod
    def _totals_table(invoice: MonthlyInvoice) -> Table:
        rows = [
            ["Subtotal:", _money(invoice.subtotal, invoice.currency)],
            ["Adjustments:", _money(invoice.total_adjustments, invoice.currency)],
            ["Total:", _money(invoice.total_amount, invoice.currency)],
        ]
        table = Table(rows, colWidths=[142 * mm, 28 * mm])
        table.setStyle(
            TableStyle(
                [
                    ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("FONTNAME", (0, 2), (-1, 2), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 2), (-1, 2), 11),
                    ("LINEABOVE", (1, 2), (1, 2), 1.2, DARK),
                ]
            )
        )
        return table
