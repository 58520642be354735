"""
Apps Script Builder
Generates a self-contained Google Apps Script that recreates a Form as a quiz.
"""
import json
from typing import List

from formgen.schemas import Form, FormItem, ItemType

CHOICE_METHODS = {
    ItemType.MULTIPLE_CHOICE: "addMultipleChoiceItem",
    ItemType.CHECKBOXES: "addCheckboxItem",
    ItemType.DROPDOWN: "addListItem",
}

USAGE_COMMENT = """  /*
   * How to use this script:
   * 1. Go to script.google.com/create in your browser.
   * 2. Paste this entire code into the editor, replacing any existing content.
   * 3. Click the "Save project" icon (floppy disk).
   * 4. Click the "Run" button.
   * 5. Google will ask for permission. Click "Review permissions" and "Allow".
   * 6. After it runs, click "View" > "Executions" to see the links to your new form.
   *
   * NOTE: Some items, like answers for text questions, may require manual setup.
   * Please review the generated form and script comments carefully.
   */"""


def js_literal(value) -> str:
    """JavaScript literal for a string, number or boolean (ASCII-escaped JSON)."""
    return json.dumps(value)


def _short_answer(item: FormItem) -> List[str]:
    lines = [
        f"  var item = form.addTextItem().setTitle({js_literal(item.title)})"
        f".setRequired({js_literal(bool(item.required))});"
    ]
    if item.is_graded:
        lines.append(f"  item.setPoints({js_literal(item.points)});")
        lines.append("")
        lines.append("  // --- IMPORTANT: MANUAL STEP REQUIRED FOR THE QUESTION ABOVE ---")
        lines.append("  // Google Apps Script does not allow setting the correct answer for 'Short Answer' questions automatically.")
        answers = item.answers()
        if answers:
            lines.append(
                "  // You must set this in the Google Forms editor. "
                f"The suggested correct answer is: {js_literal(answers[0])}"
            )
        else:
            lines.append("  // You must set the correct answer manually in the Google Forms editor.")
        lines.append("  // -------------------------------------------------------------")
    return lines


def _choice(item: FormItem) -> List[str]:
    method = CHOICE_METHODS[item.type]
    answers = item.answers()
    marked = answers if item.type == ItemType.CHECKBOXES else answers[:1]
    lines = [
        f"  var item = form.{method}().setTitle({js_literal(item.title)})"
        f".setRequired({js_literal(bool(item.required))});"
    ]
    if item.missing_options:
        lines.append(
            "  // AI WARNING: The AI did not provide any options for this question. "
            "Please add them in the Form editor."
        )
    else:
        choices = ", ".join(
            f"item.createChoice({js_literal(option)}, {js_literal(option in marked)})"
            for option in item.options
        )
        lines.append(f"  item.setChoices([{choices}]);")
    if item.is_graded:
        lines.append(f"  item.setPoints({js_literal(item.points)});")
        if not answers:
            lines.append(
                "  // AI WARNING: This question was assigned points, but the AI did not identify "
                "a correct answer. Please set the answer manually in the Form editor."
            )
    if item.has_answer_list_for_single_answer and len(answers) > 1:
        lines.append(
            "  // AI WARNING: This question accepts one answer but the AI gave several. Only the first was marked: "
            + ", ".join(js_literal(answer) for answer in answers)
        )
    outside = item.answers_outside_options()
    if outside and not item.missing_options:
        lines.append(
            "  // AI WARNING: These correct answers do not match any option and were not marked: "
            + ", ".join(js_literal(answer) for answer in outside)
        )
    return lines


def item_statement(item: FormItem) -> str:
    """
    Apps Script statements that create one item.

    Raises:
        ValueError: For an item type without a mapping.
    """
    if item.type == ItemType.SHORT_ANSWER:
        lines = _short_answer(item)
    elif item.type == ItemType.PARAGRAPH:
        lines = [
            f"  form.addParagraphTextItem().setTitle({js_literal(item.title)})"
            f".setRequired({js_literal(bool(item.required))});"
        ]
    elif item.type in CHOICE_METHODS:
        lines = _choice(item)
    elif item.type == ItemType.SECTION_HEADER:
        lines = [
            f"  form.addSectionHeaderItem().setTitle({js_literal(item.title)})"
            f".setHelpText({js_literal(item.description or '')});"
        ]
    else:
        raise ValueError(f"Unsupported item type: {item.type}")
    return "\n".join(lines)


def build_apps_script(form: Form) -> str:
    """
    Generates the Apps Script text for a form.

    Args:
        form: Form to recreate.

    Returns:
        A complete `createFormFromAI` function, ready to paste into script.google.com.
    """
    statements = "\n\n".join(item_statement(item) for item in form.items)
    return f"""function createFormFromAI() {{
{USAGE_COMMENT}

  try {{
    var form = FormApp.create({js_literal(form.title)});
    form.setDescription({js_literal(form.description)});
    form.setIsQuiz(true); // Make it a quiz!

{statements}

    Logger.log('Form created successfully!');
    Logger.log('View your form here: ' + form.getPublishedUrl());
    Logger.log('Edit your form here: ' + form.getEditUrl());
  }} catch (e) {{
    Logger.log('Error creating form: ' + e.toString());
  }}
}}
"""
