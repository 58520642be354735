"""
Main FastAPI Application
Controller layer that orchestrates ingestion, generation and export services.
"""
import os
import tempfile
from functools import partial
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field
from fastapi import Depends, FastAPI, UploadFile, File, Header, HTTPException
from fastapi.responses import FileResponse, PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware

from formgen.config import FORMS_SCOPE, get_export_mode, get_forms_client_id
from formgen.errors import ExportError, GenerationError, IngestionError
from formgen.logging_utils import get_logger
from formgen.schemas import AccessCredential, Form, IngestionResult
from formgen.services.ai_engine import generate_form
from formgen.services.doc_generator import generate_docx
from formgen.services.form_exporter import create_remote_form, export_warnings
from formgen.services.ingestion import extract_document_text
from formgen.services.llm import get_model
from formgen.services.ocr import extract_text_from_image
from formgen.services.script_builder import build_apps_script

logger = get_logger(__name__)

# Setup Paths
BASE_DIR = Path(__file__).resolve().parents[2]
OUTPUT_DIR = BASE_DIR / "output"

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Statuses an ExportError keeps when surfaced; anything else is reported as a bad gateway
PASSTHROUGH_EXPORT_STATUSES = {400, 401, 403, 404, 422}


def get_runtime_output_dir() -> Path:
    """Resolve output directory for local dev or serverless runtime."""
    if os.getenv("VERCEL"):
        return Path(tempfile.gettempdir()) / "formgen-output"
    return OUTPUT_DIR


class GenerateRequest(BaseModel):
    text: str = Field(..., description="Pasted or extracted document text")
    prefer_choice_questions: bool = Field(
        True,
        description="Convert factual questions into choice questions"
    )


class ExportRequest(BaseModel):
    form: Form
    credential: AccessCredential


class ExportResponse(BaseModel):
    url: str
    warnings: List[str]


# Initialize FastAPI App
app = FastAPI(
    title="Form Gen API",
    description="AI-powered quiz form generation from documents, with Google Forms export",
    version="1.0.0"
)

# CORS Middleware (Allow all origins for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_api_key_header(
    x_gemini_api_key: Optional[str] = Header(default=None, alias="X-Gemini-API-Key"),
) -> Optional[str]:
    return x_gemini_api_key


@app.get("/")
def read_root():
    """Return API status info (UI handled by the frontend)."""
    return {"message": "Form Gen API is running."}


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "Form Gen API"}


@app.get("/api/export/mode")
def export_mode():
    """Report which export mode the frontend should offer."""
    mode = get_export_mode()
    return {
        "mode": mode,
        "client_id": get_forms_client_id() or None,
        "scope": FORMS_SCOPE if mode == "api" else None,
    }


@app.post("/api/ingest", response_model=IngestionResult)
def ingest_document(
    file: UploadFile = File(..., description="PDF, DOCX, TXT or MD file"),
    api_key: Optional[str] = Depends(get_api_key_header),
):
    """
    Extract raw text from an uploaded document.

    Image-only PDF pages are sent to OCR; OCR failures come back as warnings,
    a missing API key for OCR is a configuration error.
    """
    data = file.file.read()
    ocr = partial(extract_text_from_image, api_key=api_key)
    try:
        return extract_document_text(
            file.filename or "",
            data,
            content_type=file.content_type,
            ocr=ocr,
        )
    except IngestionError as e:
        status = 415 if e.message.startswith("Unsupported file type") else 422
        raise HTTPException(status_code=status, detail=e.message)
    except ValueError as e:
        # No API key for the OCR fallback
        raise HTTPException(status_code=500, detail=f"Configuration error: {str(e)}")


@app.post(
    "/api/generate",
    response_model=Form,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
def generate(
    request: GenerateRequest,
    api_key: Optional[str] = Depends(get_api_key_header),
):
    """Generate a structured form from document text."""
    try:
        model = get_model(api_key) if request.text.strip() else None
        return generate_form(
            request.text,
            model,
            prefer_choice_questions=request.prefer_choice_questions,
        )
    except GenerationError as e:
        status = 422 if e.reason == "empty_input" else 502
        raise HTTPException(status_code=status, detail=e.message)
    except ValueError as e:
        # API Key or configuration errors
        raise HTTPException(status_code=500, detail=f"Configuration error: {str(e)}")


@app.post("/api/export/google-form", response_model=ExportResponse)
def export_google_form(request: ExportRequest):
    """Create the form as a quiz in Google Forms (Mode A)."""
    try:
        url = create_remote_form(request.form, request.credential)
    except ExportError as e:
        if e.form_id:
            logger.warning("Export left an incomplete form behind: %s", e.form_id)
        status = e.status_code if e.status_code in PASSTHROUGH_EXPORT_STATUSES else 502
        raise HTTPException(status_code=status, detail=e.message)
    return ExportResponse(url=url, warnings=export_warnings(request.form))


@app.post("/api/export/warnings")
def grading_warnings(form: Form):
    """Grading problems the user should review before exporting."""
    return {"warnings": export_warnings(form)}


@app.post("/api/export/script", response_class=PlainTextResponse)
def export_script(form: Form):
    """Apps Script text that recreates the form (Mode B, clipboard payload)."""
    return PlainTextResponse(build_apps_script(form))


@app.post("/api/export/json", response_class=PlainTextResponse)
def export_json(form: Form):
    """Pretty-printed form JSON (clipboard payload)."""
    return PlainTextResponse(form.to_pretty_json(), media_type="application/json")


@app.post("/api/render-docx")
def render_docx(form: Form):
    """Render a DOCX preview of the form and return the file."""
    output_filename = f"form_{os.urandom(4).hex()}.docx"
    runtime_output_dir = get_runtime_output_dir()
    runtime_output_dir.mkdir(parents=True, exist_ok=True)
    output_path = runtime_output_dir / output_filename

    generate_docx(form, str(output_path))

    return FileResponse(
        str(output_path),
        filename=output_filename,
        media_type=DOCX_MEDIA_TYPE,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
