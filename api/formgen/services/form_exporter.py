"""
Google Forms Exporter
Maps a Form onto Google Forms API batchUpdate requests and creates the form remotely.
"""
from typing import Any, Dict, List, Optional

import httpx

from formgen.config import FORMS_API_BASE
from formgen.errors import ExportError
from formgen.logging_utils import get_logger, safe_key_fingerprint
from formgen.schemas import AccessCredential, Form, FormItem, ItemType

logger = get_logger(__name__)

CHOICE_QUESTION_TYPES = {
    ItemType.MULTIPLE_CHOICE: "RADIO",
    ItemType.CHECKBOXES: "CHECKBOX",
    ItemType.DROPDOWN: "DROP_DOWN",
}


def grading_block(item: FormItem) -> Optional[Dict[str, Any]]:
    """Grading payload for a graded item with an identified answer, else None."""
    answers = item.answers()
    if not item.is_graded or not answers:
        return None
    return {
        "pointValue": item.points,
        "correctAnswers": {"answers": [{"value": answer} for answer in answers]},
    }


def _question_item(item: FormItem, kind: Dict[str, Any], graded: bool) -> Dict[str, Any]:
    question: Dict[str, Any] = {}
    if item.required:
        question["required"] = True
    if graded:
        grading = grading_block(item)
        if grading:
            question["grading"] = grading
    question.update(kind)
    return {"title": item.title, "questionItem": {"question": question}}


def map_item(item: FormItem) -> Dict[str, Any]:
    """
    Builds the Forms API `item` payload for a single FormItem.

    Raises:
        ValueError: For an item type without a mapping.
    """
    if item.type == ItemType.SHORT_ANSWER:
        return _question_item(item, {"textQuestion": {"paragraph": False}}, graded=True)
    if item.type == ItemType.PARAGRAPH:
        return _question_item(item, {"textQuestion": {"paragraph": True}}, graded=False)
    if item.type in CHOICE_QUESTION_TYPES:
        choice = {
            "type": CHOICE_QUESTION_TYPES[item.type],
            "options": [{"value": option} for option in item.options or []],
        }
        return _question_item(item, {"choiceQuestion": choice}, graded=True)
    if item.type == ItemType.SECTION_HEADER:
        payload: Dict[str, Any] = {"title": item.title, "textItem": {}}
        if item.description:
            payload["description"] = item.description
        return payload
    raise ValueError(f"Unsupported item type: {item.type}")


def create_item_request(item: FormItem) -> Dict[str, Any]:
    # Every item is inserted at the top of the form
    return {"createItem": {"item": map_item(item), "location": {"index": 0}}}


def build_batch_requests(form: Form) -> List[Dict[str, Any]]:
    """
    Builds the batchUpdate request list for a form shell.

    Items are inserted at index 0, so they are sent in reverse to keep the
    original order in the finished form.
    """
    quiz_settings = {
        "updateSettings": {
            "settings": {"quizSettings": {"isQuiz": True}},
            "updateMask": "quizSettings.isQuiz",
        }
    }
    item_requests = [create_item_request(item) for item in form.items]
    item_requests.reverse()
    description_update = {
        "updateFormInfo": {
            "info": {"description": form.description},
            "updateMask": "description",
        }
    }
    return [quiz_settings, *item_requests, description_update]


def export_warnings(form: Form) -> List[str]:
    """Human-readable grading warnings to show before or after export."""
    warnings: List[str] = []
    for index, item in enumerate(form.items, start=1):
        label = f"Item {index} ({item.title!r})"
        if item.type.is_choice:
            if item.missing_options:
                warnings.append(f"{label} has no options to choose from. Add them in the Form editor.")
            if item.has_answer_list_for_single_answer:
                warnings.append(
                    f"{label} accepts one answer but was given several: {item.answers()}. "
                    "Only the first is marked in the Apps Script export."
                )
            if item.is_graded and not item.answers():
                warnings.append(
                    f"{label} was assigned points, but no correct answer was identified. "
                    "Set the answer manually in the Form editor."
                )
            outside = item.answers_outside_options()
            if outside and not item.missing_options:
                warnings.append(f"{label} has correct answers that are not among its options: {outside}")
        elif item.type == ItemType.SHORT_ANSWER and item.is_graded:
            if item.answers():
                warnings.append(
                    f"{label} is a graded short answer; confirm the answer {item.answers()[0]!r} "
                    "in the Form editor if using the Apps Script export."
                )
            else:
                warnings.append(f"{label} is a graded short answer without a correct answer. Set it manually.")
    return warnings


def validate_for_export(form: Form) -> None:
    """
    Rejects forms the Forms API would refuse or grade incorrectly.

    Runs before any remote call so that no shell form is left behind.

    Raises:
        ExportError: If a choice item has no options, a single-answer item has a
            list of answers, or a correct answer is not one of the item's options.
    """
    problems = []
    for index, item in enumerate(form.items, start=1):
        label = f"Item {index} ({item.title!r})"
        if item.missing_options:
            problems.append(f"{label}: no options to choose from")
        if item.has_answer_list_for_single_answer:
            problems.append(f"{label}: several correct answers, but only CHECKBOXES accepts more than one")
        outside = item.answers_outside_options()
        if outside and not item.missing_options:
            problems.append(f"{label}: answers not among the options: {', '.join(outside)}")
    if problems:
        raise ExportError(
            "This form cannot be exported as a graded quiz:\n" + "\n".join(f"- {p}" for p in problems),
            status_code=422,
        )


def _error_message(resp: httpx.Response, fallback: str) -> str:
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
    return fallback


def _post(client: httpx.Client, url: str, token: str, body: Dict[str, Any]) -> httpx.Response:
    try:
        return client.post(url, json=body, headers={"Authorization": f"Bearer {token}"})
    except httpx.HTTPError as e:
        logger.exception("Request to %s failed", url)
        raise ExportError(f"Request failed: {e}") from e


def create_remote_form(
    form: Form,
    credential: AccessCredential,
    *,
    client: Optional[httpx.Client] = None,
    base_url: str = FORMS_API_BASE,
) -> str:
    """
    Creates the form as a quiz in Google Forms.

    A shell form is created first and then populated in one batchUpdate. If
    the batchUpdate fails the shell form is left in place (its id is logged and
    attached to the error).

    Args:
        form: Form to export.
        credential: OAuth token with the forms.body scope.
        client: Optional httpx client (a default one is created and closed).
        base_url: Forms API root.

    Returns:
        The responder URL of the new form.

    Raises:
        ExportError: On invalid input, expired credentials, or any non-success response.
    """
    if not credential.is_valid():
        raise ExportError("Authentication expired. Please sign in again.", status_code=401)
    validate_for_export(form)

    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=30)

    token = credential.access_token
    logger.info("Exporting form %r (%d items, token %s)", form.title, len(form.items), safe_key_fingerprint(token))
    try:
        create_resp = _post(
            client,
            f"{base_url}/forms",
            token,
            {"info": {"title": form.title, "documentTitle": form.title}},
        )
        if not create_resp.is_success:
            message = _error_message(create_resp, "Failed to create the initial form.")
            logger.error("Form create failed (HTTP %d): %s", create_resp.status_code, message)
            raise ExportError(message, status_code=create_resp.status_code)

        try:
            created = create_resp.json()
            form_id = created["formId"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Form create response was not usable: %s", create_resp.text[:200])
            raise ExportError("Form create response did not include a form id.") from e

        batch_resp = _post(
            client,
            f"{base_url}/forms/{form_id}:batchUpdate",
            token,
            {"requests": build_batch_requests(form), "includeFormInResponse": False},
        )
        if not batch_resp.is_success:
            message = _error_message(batch_resp, "Failed to update the form with items and settings.")
            logger.error(
                "batchUpdate failed for form %s (HTTP %d): %s; shell form left in place",
                form_id,
                batch_resp.status_code,
                message,
            )
            raise ExportError(message, status_code=batch_resp.status_code, form_id=form_id)
    finally:
        if owns_client:
            client.close()

    url = created.get("responderUri", "")
    logger.info("Form %s created: %s", form_id, url)
    return url
