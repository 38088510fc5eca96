"""
ledger_core.pdf_reports
Printable summary PDF (reportlab).
"""
from __future__ import annotations
from pathlib import Path
from xml.sax.saxutils import escape

from .config import LedgerProfile
from .summaries import SummaryReport, SummarySection
from .utils import fmt_amount, timestamp_line


def require_reportlab():
    try:
        from reportlab.lib.pagesizes import letter  # noqa
        from reportlab.lib.units import inch  # noqa
        from reportlab.lib import colors  # noqa
        from reportlab.lib.styles import getSampleStyleSheet  # noqa
        from reportlab.platypus import (  # noqa
            SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
        )
        return (letter, inch, colors, getSampleStyleSheet,
                SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle)
    except ImportError:
        raise SystemExit("Missing dependency: reportlab\nInstall with: pip3 install reportlab\n")


def _style_summary_table(TableStyle, colors):
    return TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.whitesmoke, colors.white]),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
    ])


def _section_rows(section: SummarySection, name_header: str, total_label: str, currency: str):
    data = [[name_header, "Total Debit", "Total Credit", "Remaining"]]
    for line in section.lines:
        data.append([
            line.name,
            fmt_amount(line.total_debit, currency),
            fmt_amount(line.total_credit, currency),
            fmt_amount(line.remaining, currency),
        ])
    g = section.grand_total
    data.append([
        total_label,
        fmt_amount(g.total_debit, currency),
        fmt_amount(g.total_credit, currency),
        fmt_amount(g.remaining, currency),
    ])
    return data


def write_pdf_summary(report: SummaryReport, pdf_path: Path, profile: LedgerProfile) -> Path:
    (letter, inch, colors, getSampleStyleSheet,
     SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle) = require_reportlab()

    pdf_path = Path(pdf_path)
    pdf_path.parent.mkdir(parents=True, exist_ok=True)
    margin = 0.75 * inch
    doc = SimpleDocTemplate(str(pdf_path), pagesize=letter, leftMargin=margin,
                            rightMargin=margin, topMargin=margin, bottomMargin=margin)
    styles = getSampleStyleSheet()

    story = []
    story.append(Paragraph(escape(profile.organization or profile.ledger_sheet), styles["Title"]))
    story.append(Paragraph("Comprehensive Financial Summary Report", styles["Heading2"]))
    story.append(Paragraph(timestamp_line("Generated on"), styles["Normal"]))
    story.append(Spacer(1, 0.18 * inch))

    widths = [2.8 * inch, 1.35 * inch, 1.35 * inch, 1.35 * inch]
    sections = [(s, "Account", "TOTAL") for s in report.accounts]
    sections.append((report.funds, "Fund", "GRAND TOTAL (All Account)"))

    for section, name_header, total_label in sections:
        story.append(Paragraph(f"<b>{escape(section.title)}</b>", styles["Heading3"]))
        story.append(Spacer(1, 0.04 * inch))
        if not section.lines:
            story.append(Paragraph("No data available.", styles["Normal"]))
            story.append(Spacer(1, 0.12 * inch))
            continue
        tbl = Table(_section_rows(section, name_header, total_label, profile.currency),
                    colWidths=widths, repeatRows=1)
        tbl.setStyle(_style_summary_table(TableStyle, colors))
        story.append(tbl)
        story.append(Spacer(1, 0.16 * inch))

    doc.build(story)
    return pdf_path
