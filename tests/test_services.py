"""
Test Services
Tests the DOCX preview renderer.
"""
from docx import Document

from formgen.schemas import Form, FormItem, ItemType
from formgen.services.doc_generator import generate_docx


def read_text(path):
    doc = Document(str(path))
    return doc, "\n".join(para.text for para in doc.paragraphs)


def test_docx_structure(sample_form, tmp_path):
    """Test that generated DOCX has correct structure."""
    output_path = tmp_path / "test_output.docx"

    generate_docx(sample_form, str(output_path))

    assert output_path.exists()
    doc, text = read_text(output_path)
    assert doc.paragraphs[0].text == sample_form.title
    assert "Line one\nLine two" in text
    assert "1. Name *" in text
    assert "2. What is 2+2? *" in text
    assert "( ) 4" in text
    assert "[ ] Pacific" in text
    assert "Select an option: sky / car" in text
    assert "5. What did you think?" in text


def test_docx_passage_is_not_numbered(sample_form, tmp_path):
    output_path = tmp_path / "test_passage.docx"

    generate_docx(sample_form, str(output_path))

    doc, text = read_text(output_path)
    headings = [p.text for p in doc.paragraphs if p.style.name == "Heading 2"]
    assert headings == ["Passage"]
    assert "Word Bank: [sky, car]" in text
    assert "Passage *" not in text


def test_docx_answer_key(sample_form, tmp_path):
    """Test that answer key table is present."""
    output_path = tmp_path / "test_answer_key.docx"

    generate_docx(sample_form, str(output_path))

    doc, text = read_text(output_path)
    assert "Answer Key" in text
    assert len(doc.tables) == 1
    rows = [[cell.text for cell in row.cells] for row in doc.tables[0].rows]
    assert rows == [
        ["No.", "Answer", "Points"],
        ["2", "4", "1"],
        ["3", "Asia, Africa", "2"],
        ["4", "sky", "1"],
    ]


def test_docx_missing_answer_in_key(graded_short_answer_form, tmp_path):
    output_path = tmp_path / "test_missing_answer.docx"

    generate_docx(graded_short_answer_form, str(output_path))

    doc, _ = read_text(output_path)
    answers = [row.cells[1].text for row in doc.tables[0].rows[1:]]
    assert answers == ["Paris", "(not identified)"]


def test_docx_without_grading_has_no_key(tmp_path):
    output_path = tmp_path / "test_survey.docx"
    form = Form(
        title="Feedback",
        description="Tell us what you think",
        items=[FormItem(title="Comments", type=ItemType.PARAGRAPH)],
    )

    generate_docx(form, str(output_path))

    doc, text = read_text(output_path)
    assert "Answer Key" not in text
    assert doc.tables == []


def test_docx_metadata(sample_form, tmp_path):
    """Test that document metadata is set correctly."""
    output_path = tmp_path / "test_metadata.docx"

    generate_docx(sample_form, str(output_path))

    doc = Document(str(output_path))
    assert doc.core_properties.title == sample_form.title
    assert doc.core_properties.subject == sample_form.description


def test_docx_thai_stress_text(tmp_path):
    """Test Thai complex text rendering in DOCX."""
    output_path = tmp_path / "test_thai_text.docx"
    form = Form(
        title="แบบทดสอบภาษาไทย",
        description="ทดสอบการแสดงผลภาษาไทย",
        items=[
            FormItem(
                title="คำว่า \"ภาษา\" สะกดอย่างไร?",
                type=ItemType.MULTIPLE_CHOICE,
                options=["ภาษา", "พาสา"],
                points=1,
                correct_answer="ภาษา",
            )
        ],
    )

    generate_docx(form, str(output_path))

    _, text = read_text(output_path)
    assert "แบบทดสอบภาษาไทย" in text
    assert "( ) พาสา" in text
