from datetime import date
from typing import List, Optional

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from chashavshavon.models import ProblemOnah


def format_problem_onahs(probs: List[ProblemOnah], from_date: Optional[date] = None) -> str:
    """
    Klartext-Liste der Problem-Onahs, eine Onah pro Block.
    Mit `from_date` werden nur Onahs ab diesem (bürgerlichen) Datum ausgegeben.
    """
    blocks = []
    for po in probs:
        if from_date and po.jdate.to_pydate() < from_date:
            continue
        blocks.append(str(po))
    if not blocks:
        return "Keine Flagged Dates."
    return "\n\n".join(blocks)


def export_problem_onahs_pdf(probs: List[ProblemOnah], filename: str, title: str = "Flagged Dates",
                             from_date: Optional[date] = None):
    """Schreibt die Problem-Onahs als einfache PDF-Liste (reportlab)."""
    c = canvas.Canvas(filename, pagesize=letter)
    width, height = letter
    y = height - 50
    c.setFont("Helvetica-Bold", 16)
    c.drawString(50, y, title)
    y -= 30
    c.setFont("Helvetica", 10)
    text = format_problem_onahs(probs, from_date)
    for line in text.splitlines():
        # neue Seite, wenn unten kein Platz mehr ist
        if y < 50:
            c.showPage()
            c.setFont("Helvetica", 10)
            y = height - 50
        c.drawString(50, y, line.replace("►", "-"))
        y -= 14
    c.save()
