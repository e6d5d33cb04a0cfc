"""
Export routes - render edited HTML to PDF or DOCX
"""
from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from ..exceptions import ExportError
from ..logger import logger
from ..rendering import docx as docx_rendering
from ..rendering import pdf as pdf_rendering
from ..schemas import DocxExportRequest, PdfExportRequest

router = APIRouter(prefix="/exports", tags=["Exports"])

@router.post("/pdf")
async def export_pdf(body: PdfExportRequest):
    """
    Render HTML to a single continuous PDF page.
    """
    if not body.htmlContent:
        raise HTTPException(status_code=400, detail="HTML content is required")

    try:
        pdf_bytes = await pdf_rendering.render_pdf(body.htmlContent)
    except Exception as e:
        logger.error(f"PDF generation error: {e}")
        raise ExportError("Failed to generate PDF")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": 'inline; filename="document.pdf"'},
    )

@router.post("/docx")
async def export_docx(body: DocxExportRequest):
    """
    Convert HTML to a DOCX download.
    """
    if not body.html:
        raise HTTPException(status_code=400, detail="Missing html content")

    logger.info("Starting HTML to DOCX conversion", extra={"html_length": len(body.html)})
    try:
        docx_bytes = await run_in_threadpool(docx_rendering.html_to_docx, body.html)
    except Exception as e:
        logger.error(f"Error converting HTML to DOCX: {e}")
        raise ExportError(f"Error converting to DOCX: {e}")

    return Response(
        content=docx_bytes,
        media_type=docx_rendering.DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=document.docx"},
    )
