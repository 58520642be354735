"""
Document Generator Service
Renders a printable .docx preview of a Form, with an answer key for graded items.
"""
from docx import Document
from docx.shared import Pt, Inches

from formgen.logging_utils import get_logger
from formgen.schemas import Form, FormItem, ItemType

logger = get_logger(__name__)


def _indented(doc: Document, text: str) -> None:
    p = doc.add_paragraph()
    p.paragraph_format.left_indent = Inches(0.5)
    p.add_run(text)


def _add_choices(doc: Document, item: FormItem) -> None:
    marker = "[ ]" if item.type == ItemType.CHECKBOXES else "( )"
    for option in item.options or []:
        _indented(doc, f"{marker} {option}")


def _add_dropdown(doc: Document, item: FormItem) -> None:
    _indented(doc, "Select an option: " + " / ".join(item.options or []))


def _add_answer_line(doc: Document, paragraph: bool = False) -> None:
    _indented(doc, "." * 56)
    if paragraph:
        _indented(doc, "." * 56)
        _indented(doc, "." * 56)


def _add_passage(doc: Document, item: FormItem) -> None:
    heading = doc.add_heading(item.title, level=2)
    heading.paragraph_format.space_before = Pt(12)
    if item.description:
        passage = doc.add_paragraph(item.description)
        passage.paragraph_format.left_indent = Inches(0.25)


def _points_label(points: int) -> str:
    return f"{points} point" if points == 1 else f"{points} points"


def generate_docx(form: Form, output_path: str) -> None:
    """
    Generates a .docx preview from a Form object.

    Args:
        form: Form to render.
        output_path: Path where the .docx file should be saved.
    """
    logger.info("Generating DOCX preview at %s", output_path)
    doc = Document()

    core_properties = doc.core_properties
    core_properties.title = form.title
    core_properties.subject = form.description

    style = doc.styles['Normal']
    style.font.size = Pt(12)

    heading = doc.add_heading(form.title, 0)
    heading.alignment = 1  # Center

    p_info = doc.add_paragraph(form.description)
    p_info.alignment = 1

    doc.add_paragraph("_" * 50).alignment = 1

    number = 0
    graded = []
    for item in form.items:
        if item.type == ItemType.SECTION_HEADER:
            _add_passage(doc, item)
            continue

        number += 1
        p = doc.add_paragraph()
        p.paragraph_format.space_before = Pt(12)
        run = p.add_run(f"{number}. {item.title}")
        run.bold = True
        if item.required:
            p.add_run(" *")
        if item.is_graded:
            badge = p.add_run(f"  ({_points_label(item.points)})")
            badge.italic = True
            badge.font.size = Pt(10)
            graded.append((number, item))

        if item.type == ItemType.SHORT_ANSWER:
            _add_answer_line(doc)
        elif item.type == ItemType.PARAGRAPH:
            _add_answer_line(doc, paragraph=True)
        elif item.type in (ItemType.MULTIPLE_CHOICE, ItemType.CHECKBOXES):
            _add_choices(doc, item)
        elif item.type == ItemType.DROPDOWN:
            _add_dropdown(doc, item)
        else:
            raise ValueError(f"Unsupported item type: {item.type}")

    if graded:
        doc.add_page_break()
        doc.add_heading("Answer Key", level=1)

        table = doc.add_table(rows=1, cols=3)
        table.style = 'Table Grid'
        hdr_cells = table.rows[0].cells
        hdr_cells[0].text = 'No.'
        hdr_cells[1].text = 'Answer'
        hdr_cells[2].text = 'Points'

        for number, item in graded:
            row_cells = table.add_row().cells
            row_cells[0].text = str(number)
            row_cells[1].text = ", ".join(item.answers()) or "(not identified)"
            row_cells[2].text = str(item.points)

    doc.save(output_path)
    logger.info("DOCX preview saved (%d numbered items)", number)
