"""
Document Ingestion Service
Extracts raw text from uploaded PDF, DOCX, TXT and MD files.
Scanned PDF pages fall back to OCR.
"""
import io
from typing import Callable, List, Optional

import fitz  # PyMuPDF
from docx import Document

from formgen.config import OCR_MIN_PAGE_HEIGHT, OCR_MIN_TEXT_CHARS, OCR_RENDER_SCALE
from formgen.errors import IngestionError, OcrError
from formgen.logging_utils import get_logger
from formgen.schemas import IngestionResult
from formgen.services.ocr import extract_text_from_image

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_EXTENSIONS = {"txt", "md"}

UNSUPPORTED_MESSAGE = "Unsupported file type. Please upload a PDF, DOCX, TXT, or MD file."
UNREADABLE_PDF_MESSAGE = "Could not read the PDF file. It may be damaged."
PROTECTED_PDF_MESSAGE = "This PDF is password protected. Please remove the password and upload it again."

OcrFunc = Callable[[bytes], str]


def detect_document_kind(filename: str, content_type: Optional[str] = None) -> str:
    """
    Identifies a document by extension and/or declared content type.

    Returns:
        "pdf", "docx" or "text".

    Raises:
        IngestionError: If the file type is not supported.
    """
    extension = filename.rsplit(".", 1)[-1].lower() if "." in (filename or "") else ""
    declared = (content_type or "").split(";")[0].strip().lower()

    if extension == "pdf" or declared == PDF_CONTENT_TYPE:
        return "pdf"
    if extension == "docx" or declared == DOCX_CONTENT_TYPE:
        return "docx"
    if extension in TEXT_EXTENSIONS or declared.startswith("text/"):
        return "text"
    raise IngestionError(UNSUPPORTED_MESSAGE)


def needs_ocr(page_text: str, page_height: float) -> bool:
    """Heuristic: very little text on a full-size page means the page is an image."""
    return len(page_text.strip()) < OCR_MIN_TEXT_CHARS and page_height > OCR_MIN_PAGE_HEIGHT


def render_page_png(page: "fitz.Page", scale: float = OCR_RENDER_SCALE) -> bytes:
    pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
    return pix.tobytes("png")


def extract_pdf_text(data: bytes, ocr: Optional[OcrFunc] = None) -> IngestionResult:
    """
    Extracts text page by page, in order, running OCR on image-only pages.

    A failed OCR call keeps whatever sparse text the page had and records a
    warning instead of aborting the document.

    Args:
        data: PDF file bytes.
        ocr: Callable turning PNG bytes into text (defaults to the Gemini OCR client).

    Raises:
        IngestionError: If the PDF cannot be opened, is password protected or a page cannot be read.
        ValueError: If a page needs OCR and no Gemini API key is configured.
    """
    ocr = ocr or extract_text_from_image
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        logger.exception("Could not open PDF (%d bytes)", len(data))
        raise IngestionError(UNREADABLE_PDF_MESSAGE) from e

    parts: List[str] = []
    warnings: List[str] = []
    with doc:
        if doc.needs_pass:
            logger.error("PDF is password protected (%d bytes)", len(data))
            raise IngestionError(PROTECTED_PDF_MESSAGE)

        total = doc.page_count
        for number in range(1, total + 1):
            try:
                page = doc.load_page(number - 1)
                page_text = page.get_text()
            except (ValueError, RuntimeError) as e:
                logger.exception("Could not read page %d of %d", number, total)
                raise IngestionError(UNREADABLE_PDF_MESSAGE) from e

            if not needs_ocr(page_text, page.rect.height):
                parts.append(page_text)
                continue

            logger.info("Image detected on page %d of %d. Running OCR...", number, total)
            try:
                parts.append(ocr(render_page_png(page)))
            except (OcrError, RuntimeError) as e:
                logger.warning("OCR failed for page %d: %s", number, e)
                parts.append(page_text)
                warnings.append(
                    f"Could not read text from an image on page {number}. "
                    "The result might be incomplete."
                )

    text = "".join(part + "\n\n" for part in parts).strip()
    return IngestionResult(text=text, warnings=warnings)


def extract_docx_text(data: bytes) -> str:
    """Raw paragraph text of a DOCX file, paragraphs separated by blank lines."""
    try:
        document = Document(io.BytesIO(data))
    except Exception as e:
        logger.exception("Could not open DOCX (%d bytes)", len(data))
        raise IngestionError("Could not read the DOCX file. It may be damaged.") from e
    return "\n\n".join(paragraph.text for paragraph in document.paragraphs).strip()


def extract_plain_text(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.error("Text file is not valid UTF-8: %s", e)
        raise IngestionError("Could not read the text file. Please save it with UTF-8 encoding.") from e


def extract_document_text(
    filename: str,
    data: bytes,
    *,
    content_type: Optional[str] = None,
    ocr: Optional[OcrFunc] = None,
) -> IngestionResult:
    """
    Extracts raw text from an uploaded document.

    Args:
        filename: Original file name (used for extension detection).
        data: File bytes.
        content_type: Declared MIME type, if any.
        ocr: OCR callable for image-only PDF pages.

    Returns:
        IngestionResult with the text and non-fatal warnings.

    Raises:
        IngestionError: On unsupported or unreadable files.
    """
    kind = detect_document_kind(filename, content_type)
    logger.info("Ingesting %s as %s (%d bytes)", filename, kind, len(data))

    if kind == "pdf":
        return extract_pdf_text(data, ocr=ocr)
    if kind == "docx":
        return IngestionResult(text=extract_docx_text(data))
    return IngestionResult(text=extract_plain_text(data))
