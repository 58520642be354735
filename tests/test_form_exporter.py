"""
Test Google Forms Exporter
Request mapping and the create/batchUpdate flow against a mocked Forms API.
"""
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from formgen.errors import ExportError
from formgen.schemas import AccessCredential, Form, FormItem, ItemType
from formgen.services.form_exporter import (
    build_batch_requests,
    create_remote_form,
    export_warnings,
    map_item,
)


BASE_URL = "https://forms.test/v1"


def forms_api(create_status=200, batch_status=200, create_body=None, batch_body=None):
    """MockTransport handler recording every request it receives."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if request.url.path == "/v1/forms":
            body = create_body if create_body is not None else {
                "formId": "form-123",
                "responderUri": "https://docs.google.com/forms/d/e/form-123/viewform",
            }
            return httpx.Response(create_status, json=body)
        if request.url.path == "/v1/forms/form-123:batchUpdate":
            return httpx.Response(batch_status, json=batch_body if batch_body is not None else {})
        return httpx.Response(404, json={"error": {"message": "unexpected path"}})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    return client, calls


@pytest.fixture
def credential():
    return AccessCredential(access_token="ya29.test-token")


def test_one_create_request_per_item_in_reverse(sample_form):
    requests = build_batch_requests(sample_form)

    assert "updateSettings" in requests[0]
    assert requests[0]["updateSettings"]["settings"] == {"quizSettings": {"isQuiz": True}}
    assert requests[-1] == {
        "updateFormInfo": {"info": {"description": sample_form.description}, "updateMask": "description"}
    }

    item_requests = requests[1:-1]
    assert len(item_requests) == len(sample_form.items)
    assert all(r["createItem"]["location"] == {"index": 0} for r in item_requests)
    titles = [r["createItem"]["item"]["title"] for r in item_requests]
    assert titles == [item.title for item in reversed(sample_form.items)]


def test_insert_at_top_restores_original_order(sample_form):
    """Replaying the inserts at index 0 yields the form's own order."""
    rendered = []
    for request in build_batch_requests(sample_form)[1:-1]:
        rendered.insert(request["createItem"]["location"]["index"], request["createItem"]["item"]["title"])
    assert rendered == [item.title for item in sample_form.items]


def test_every_item_type_is_mapped():
    for item_type in ItemType:
        options = ["a", "b"] if item_type.is_choice else None
        assert map_item(FormItem(title="T", type=item_type, options=options))


def test_graded_short_answer():
    item = FormItem(title="Capital?", type=ItemType.SHORT_ANSWER, points=2, correct_answer="Paris", required=True)
    assert map_item(item) == {
        "title": "Capital?",
        "questionItem": {
            "question": {
                "required": True,
                "grading": {"pointValue": 2, "correctAnswers": {"answers": [{"value": "Paris"}]}},
                "textQuestion": {"paragraph": False},
            }
        },
    }


def test_short_answer_without_answer_is_not_graded():
    item = FormItem(title="Solve", type=ItemType.SHORT_ANSWER, points=1)
    assert "grading" not in map_item(item)["questionItem"]["question"]


def test_paragraph_never_graded():
    item = FormItem(title="Essay", type=ItemType.PARAGRAPH, points=5, correct_answer="anything", required=True)
    assert map_item(item)["questionItem"]["question"] == {
        "required": True,
        "textQuestion": {"paragraph": True},
    }


@pytest.mark.parametrize(
    "item_type, kind",
    [
        (ItemType.MULTIPLE_CHOICE, "RADIO"),
        (ItemType.CHECKBOXES, "CHECKBOX"),
        (ItemType.DROPDOWN, "DROP_DOWN"),
    ],
)
def test_choice_question_kinds(item_type, kind):
    answer = ["b"] if item_type == ItemType.CHECKBOXES else "b"
    item = FormItem(title="Pick", type=item_type, options=["c", "a", "b"], points=1, correct_answer=answer)
    question = map_item(item)["questionItem"]["question"]

    assert question["choiceQuestion"] == {
        "type": kind,
        "options": [{"value": "c"}, {"value": "a"}, {"value": "b"}],
    }
    assert question["grading"]["correctAnswers"] == {"answers": [{"value": "b"}]}
    assert "required" not in question


def test_checkbox_answers_listed():
    item = FormItem(
        title="Continents",
        type=ItemType.CHECKBOXES,
        options=["Asia", "Pacific", "Africa"],
        points=1,
        correct_answer=["Asia", "Africa"],
    )
    grading = map_item(item)["questionItem"]["question"]["grading"]
    assert grading["correctAnswers"]["answers"] == [{"value": "Asia"}, {"value": "Africa"}]


def test_section_header():
    item = FormItem(title="Passage", type=ItemType.SECTION_HEADER, description="Read this.")
    assert map_item(item) == {"title": "Passage", "description": "Read this.", "textItem": {}}


def test_create_remote_form_success(sample_form, credential):
    client, calls = forms_api()

    url = create_remote_form(sample_form, credential, client=client, base_url=BASE_URL)

    assert url == "https://docs.google.com/forms/d/e/form-123/viewform"
    assert len(calls) == 2
    assert calls[0].headers["Authorization"] == "Bearer ya29.test-token"
    assert json.loads(calls[0].content) == {
        "info": {"title": sample_form.title, "documentTitle": sample_form.title}
    }
    batch = json.loads(calls[1].content)
    assert batch["includeFormInResponse"] is False
    assert batch["requests"] == build_batch_requests(sample_form)


def test_create_failure_surfaces_platform_message(sample_form, credential):
    client, calls = forms_api(
        create_status=403,
        create_body={"error": {"code": 403, "message": "The caller does not have permission"}},
    )

    with pytest.raises(ExportError) as exc_info:
        create_remote_form(sample_form, credential, client=client, base_url=BASE_URL)

    assert exc_info.value.message == "The caller does not have permission"
    assert exc_info.value.status_code == 403
    assert len(calls) == 1


def test_batch_failure_leaves_shell_form(sample_form, credential):
    """No rollback: the error names the orphaned form."""
    client, calls = forms_api(
        batch_status=400,
        batch_body={"error": {"message": "Invalid requests[3].createItem: Duplicate option"}},
    )

    with pytest.raises(ExportError) as exc_info:
        create_remote_form(sample_form, credential, client=client, base_url=BASE_URL)

    assert exc_info.value.message == "Invalid requests[3].createItem: Duplicate option"
    assert exc_info.value.form_id == "form-123"
    assert len(calls) == 2


def test_batch_failure_without_json_body(sample_form, credential):
    def handler(request):
        if request.url.path.endswith(":batchUpdate"):
            return httpx.Response(500, text="<html>oops</html>")
        return httpx.Response(200, json={"formId": "form-123", "responderUri": "u"})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with pytest.raises(ExportError, match="Failed to update the form"):
        create_remote_form(sample_form, credential, client=client, base_url=BASE_URL)


def test_transport_error(sample_form, credential):
    def handler(request):
        raise httpx.ConnectError("connection refused")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with pytest.raises(ExportError, match="Request failed"):
        create_remote_form(sample_form, credential, client=client, base_url=BASE_URL)


def test_expired_credential_rejected_before_any_call(sample_form):
    client, calls = forms_api()
    expired = AccessCredential(
        access_token="ya29.old",
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
    )

    with pytest.raises(ExportError) as exc_info:
        create_remote_form(sample_form, expired, client=client, base_url=BASE_URL)

    assert exc_info.value.status_code == 401
    assert calls == []


def test_checkbox_answer_outside_options_rejected(credential):
    form = Form(
        title="Bad key",
        description="D",
        items=[
            FormItem(
                title="Continents",
                type=ItemType.CHECKBOXES,
                options=["Asia", "Africa"],
                points=1,
                correct_answer=["Asia", "Europe"],
            )
        ],
    )
    client, calls = forms_api()

    with pytest.raises(ExportError) as exc_info:
        create_remote_form(form, credential, client=client, base_url=BASE_URL)

    assert "Europe" in exc_info.value.message
    assert calls == []


def test_export_warnings(graded_short_answer_form):
    form = Form(
        title="Warnings",
        description="D",
        items=[
            FormItem(title="No key", type=ItemType.MULTIPLE_CHOICE, options=["a", "b"], points=1),
            *graded_short_answer_form.items,
        ],
    )

    warnings = export_warnings(form)

    assert len(warnings) == 3
    assert "no correct answer was identified" in warnings[0]
    assert "'Paris'" in warnings[1]
    assert "Set it manually" in warnings[2]


def test_clean_form_has_no_warnings(sample_form):
    assert export_warnings(sample_form) == []


@pytest.mark.parametrize(
    "item, problem",
    [
        (FormItem(title="Pick", type=ItemType.MULTIPLE_CHOICE, points=1, correct_answer="a"), "no options"),
        (FormItem(title="Pick", type=ItemType.DROPDOWN, options=[], points=1, correct_answer="a"), "no options"),
        (
            FormItem(title="Pick", type=ItemType.MULTIPLE_CHOICE, options=["a", "b"], points=1, correct_answer=["a", "b"]),
            "only CHECKBOXES accepts more than one",
        ),
        (
            FormItem(title="Pick", type=ItemType.DROPDOWN, options=["a", "b"], points=1, correct_answer=["a"]),
            "only CHECKBOXES accepts more than one",
        ),
    ],
)
def test_malformed_choice_items_rejected_before_any_call(credential, item, problem):
    """No shell form is created for a form the batchUpdate would refuse."""
    form = Form(title="Bad shape", description="D", items=[item])
    client, calls = forms_api()

    with pytest.raises(ExportError) as exc_info:
        create_remote_form(form, credential, client=client, base_url=BASE_URL)

    assert problem in exc_info.value.message
    assert exc_info.value.status_code == 422
    assert exc_info.value.form_id is None
    assert calls == []


def test_malformed_choice_items_warned():
    form = Form(
        title="Bad shape",
        description="D",
        items=[
            FormItem(title="No options", type=ItemType.CHECKBOXES, points=1, correct_answer=["a"]),
            FormItem(title="Two keys", type=ItemType.MULTIPLE_CHOICE, options=["a", "b"], points=1, correct_answer=["a", "b"]),
        ],
    )

    warnings = export_warnings(form)

    assert len(warnings) == 2
    assert "has no options" in warnings[0]
    assert "accepts one answer but was given several" in warnings[1]
