from __future__ import annotations

import io

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.shared import Pt, Twips
from htmldocx import HtmlToDocx

from ..logger import logger


DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Page geometry in twips (1/1440 inch).
PAGE_WIDTH = 12240
PAGE_HEIGHT = 15840
PAGE_MARGIN = 1440

BODY_FONT = "Arial"

DOCUMENT_SHELL = (
    "<!DOCTYPE html>"
    "<html>"
    "<head>"
    '<meta charset="UTF-8">'
    "<title>Document</title>"
    "<style>body { font-family: %(font)s; margin: 40px; } p { margin-bottom: 10px; }</style>"
    "</head>"
    "<body>%(body)s</body>"
    "</html>"
)


def wrap_html(html_fragment: str) -> str:
    """Embed an editor fragment in a complete UTF-8 HTML document."""
    return DOCUMENT_SHELL % {"font": BODY_FONT, "body": html_fragment}


def _apply_page_layout(document) -> None:
    section = document.sections[0]
    section.orientation = WD_ORIENT.PORTRAIT
    section.page_width = Twips(PAGE_WIDTH)
    section.page_height = Twips(PAGE_HEIGHT)
    section.top_margin = Twips(PAGE_MARGIN)
    section.right_margin = Twips(PAGE_MARGIN)
    section.bottom_margin = Twips(PAGE_MARGIN)
    section.left_margin = Twips(PAGE_MARGIN)

    # htmldocx skips <head>, so the shell's body font is set on the Normal style.
    normal = document.styles["Normal"]
    normal.font.name = BODY_FONT
    normal.paragraph_format.space_after = Pt(7.5)


def html_to_docx(html_fragment: str) -> bytes:
    """Convert an HTML fragment into DOCX bytes."""
    document = Document()
    _apply_page_layout(document)

    parser = HtmlToDocx()
    parser.add_html_to_document(wrap_html(html_fragment), document)

    buf = io.BytesIO()
    document.save(buf)
    data = buf.getvalue()
    logger.debug("Converted HTML to DOCX", extra={"html_length": len(html_fragment), "size_bytes": len(data)})
    return data
