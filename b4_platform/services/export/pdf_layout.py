"""Shared A4 layout for exported PDF documents using fpdf2."""

import re
import unicodedata
from datetime import datetime
from io import BytesIO
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import quote

from fpdf import FPDF, XPos, YPos

from b4_platform.schemas.exports import ExportedDocument

PAGE_WIDTH = 210
MARGIN = 20
PAGE_BREAK_Y = 280
FOOTER_Y = 290

SECTION_SPACE = 30
FIELD_SPACE = 20

# A section is a header plus (label, value) pairs; empty values are skipped.
Field = Tuple[str, object]
Section = Tuple[str, Sequence[Field]]

_TYPOGRAPHY = {
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "–": "-",
    "\u2014": "-",
    "…": "...",
    "•": "-",
    " ": " ",
}


def to_latin1(text: str) -> str:
    """Core PDF fonts only cover latin-1; anything else becomes ``?``."""
    for char, replacement in _TYPOGRAPHY.items():
        text = text.replace(char, replacement)
    return text.encode("latin-1", "replace").decode("latin-1")


def is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def export_filename(prefix: str, name: Optional[str]) -> str:
    """``<prefix>-<slug>.pdf``, or ``<prefix>.pdf`` when there is no name."""
    if is_blank(name):
        return f"{prefix}.pdf"
    slug = re.sub(r"\s+", "-", name.strip().lower())
    return f"{prefix}-{slug}.pdf"


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the RFC 5987 UTF-8 name.

    Header values must be latin-1, so names like ``resume-łukasz-nowak.pdf``
    are sent percent-encoded in ``filename*``.
    """
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = re.sub(r"[^a-z0-9.-]", "", fallback.lower())
    fallback = re.sub(r"-+", "-", fallback)
    fallback = re.sub(r"-\.pdf$", ".pdf", fallback)
    encoded = quote(filename, safe="")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"


def visible_sections(sections: Iterable[Section]) -> List[Section]:
    """Drop empty fields, then sections left without any field."""
    visible = []
    for header, fields in sections:
        kept = [(label, value) for label, value in fields if not is_blank(value)]
        if kept:
            visible.append((header, kept))
    return visible


class ExportPdf(FPDF):
    """Portrait A4 document with a centered title block and page footer."""

    def __init__(self):
        super().__init__(orientation="portrait", unit="mm", format="A4")
        self.set_margins(MARGIN, MARGIN, MARGIN)
        self.set_auto_page_break(auto=True, margin=self.h - PAGE_BREAK_Y)

    def footer(self):
        self.set_y(FOOTER_Y - 3)
        self.set_font("helvetica", "", 9)
        self.set_text_color(128, 128, 128)
        self.cell(0, 6, f"Page {self.page_no()} of {{nb}}", align="C")

    def ensure_space(self, needed: float) -> None:
        if self.get_y() > PAGE_BREAK_Y - needed:
            self.add_page()

    def title_block(self, title: str, name: Optional[str]) -> None:
        self.set_y(MARGIN - 5)
        self.set_font("helvetica", "B", 22)
        self.set_text_color(0, 0, 0)
        self.cell(0, 10, to_latin1(title), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        if not is_blank(name):
            self.set_font("helvetica", "", 14)
            self.cell(0, 8, to_latin1(name.strip()), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        self.set_font("helvetica", "", 10)
        self.set_text_color(100, 100, 100)
        generated = datetime.now().strftime("%B %d, %Y")
        self.cell(0, 8, f"Generated: {generated}", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        self.ln(4)
        self.set_draw_color(200, 200, 200)
        self.line(MARGIN, self.get_y(), PAGE_WIDTH - MARGIN, self.get_y())
        self.ln(8)

    def section(self, header: str, fields: Sequence[Field]) -> None:
        self.ensure_space(SECTION_SPACE)
        self.set_font("helvetica", "B", 14)
        self.set_text_color(0, 51, 102)
        self.cell(0, 10, to_latin1(header), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        for label, value in fields:
            self.ensure_space(FIELD_SPACE)
            self.set_font("helvetica", "B", 10)
            self.set_text_color(60, 60, 60)
            self.cell(0, 6, to_latin1(f"{label}:"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.set_font("helvetica", "", 10)
            self.set_text_color(0, 0, 0)
            self.multi_cell(0, 6, to_latin1(str(value).strip()), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.ln(2)
        self.ln(4)


def render_document(
    title: str, name: Optional[str], sections: Iterable[Section], filename: str
) -> ExportedDocument:
    """Lay out the title block and every non-empty section."""
    pdf = ExportPdf()
    pdf.add_page()
    pdf.title_block(title, name)
    for header, fields in visible_sections(sections):
        pdf.section(header, fields)

    buffer = BytesIO()
    pdf.output(buffer)
    return ExportedDocument(content=buffer.getvalue(), filename=filename, page_count=pdf.page)
