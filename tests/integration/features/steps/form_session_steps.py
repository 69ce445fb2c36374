"""Integration steps for form session navigation.

Steps talk to the API only through ``context.client`` (httpx or TestClient)
and keep per-scenario values in ``context.vars``.
"""

from __future__ import annotations

from typing import Any, Dict, List

from behave import given, then, when


API = "/api/v1"


def _as_list(text: str) -> List[str]:
    return [item.strip() for item in text.split(",") if item.strip()]


def _session_path(context, suffix: str = "") -> str:
    return f"{API}/form-sessions/{context.vars['session_id']}{suffix}"


def _json(context) -> Dict[str, Any]:
    resp = context.response
    assert resp is not None, "no response captured"
    return resp.json()


# ------------------
# Setup
# ------------------


@given('a form "{form_id}" with pages:')
def step_form_with_pages(context, form_id: str) -> None:
    pages: List[Dict[str, Any]] = []
    by_id: Dict[str, Dict[str, Any]] = {}
    for row in context.table:
        page = by_id.get(row["page_id"])
        if page is None:
            page = {"id": row["page_id"], "title": row["page_id"].title(), "fields": []}
            by_id[row["page_id"]] = page
            pages.append(page)
        field: Dict[str, Any] = {
            "id": row["field_id"],
            "kind": row["kind"],
            "label": row["label"],
            "required": row["required"].strip().lower() == "true",
        }
        if row["options"].strip():
            field["options"] = _as_list(row["options"])
        page["fields"].append(field)
    context.vars.setdefault("forms", {})[form_id] = {"id": form_id, "title": form_id, "pages": pages}


@given('I open a form session for "{form_id}"')
def step_open_session(context, form_id: str) -> None:
    form = context.vars["forms"][form_id]
    resp = context.client.post(f"{API}/form-sessions", json={"form": form})
    assert resp.status_code == 201, f"open session failed: {resp.status_code} {resp.text}"
    context.vars["session_id"] = resp.json()["session_id"]
    context.response = resp


# ------------------
# Actions
# ------------------


@when('I set "{field_id}" to the list "{values}"')
def step_set_list(context, field_id: str, values: str) -> None:
    context.response = context.client.patch(
        _session_path(context, "/values"), json={"values": {field_id: _as_list(values)}}
    )


@when('I set "{field_id}" to "{value}"')
def step_set_value(context, field_id: str, value: str) -> None:
    context.response = context.client.patch(_session_path(context, "/values"), json={"values": {field_id: value}})


@when("I go to the next page")
def step_next(context) -> None:
    context.response = context.client.post(_session_path(context, "/navigation/next"))
    assert context.response.status_code == 200, context.response.text


@when("I go to the previous page")
def step_previous(context) -> None:
    context.response = context.client.post(_session_path(context, "/navigation/previous"))
    assert context.response.status_code == 200, context.response.text


# ------------------
# Assertions
# ------------------


@then('the navigation outcome is "{outcome}"')
def step_outcome(context, outcome: str) -> None:
    assert _json(context)["outcome"] == outcome, _json(context)


@then('the current page is "{page_id}"')
def step_current_page(context, page_id: str) -> None:
    assert _json(context)["navigation"]["current_page_id"] == page_id


@then("the attempt count is {count:d}")
def step_attempts(context, count: int) -> None:
    assert _json(context)["navigation"]["attempts"] == count


@then('the visible error for "{field_id}" is "{message}"')
def step_visible_error(context, field_id: str, message: str) -> None:
    assert _json(context)["page"]["errors"].get(field_id) == message, _json(context)["page"]["errors"]


@then('a "{event_type}" event was published')
def step_event_published(context, event_type: str) -> None:
    events = context.client.get("/__test__/events").json()
    assert any(e.get("type") == event_type for e in events), events


@then('exactly {count:d} submission is recorded for "{form_id}"')
def step_submission_count(context, count: int, form_id: str) -> None:
    listed = context.client.get(f"{API}/submissions", params={"form_id": form_id}).json()
    assert len(listed) == count, listed
    context.vars["submission"] = listed[-1] if listed else None


@then('the recorded payload has "{field_id}" equal to the list "{values}"')
def step_payload_list(context, field_id: str, values: str) -> None:
    assert context.vars["submission"]["payload"][field_id] == _as_list(values)


@then('the recorded payload has "{field_id}" equal to "{value}"')
def step_payload_value(context, field_id: str, value: str) -> None:
    assert context.vars["submission"]["payload"][field_id] == value


@then('the stored answer for "{page_id}" "{field_id}" is "{value}"')
def step_stored_answer(context, page_id: str, field_id: str, value: str) -> None:
    responses = context.client.get(_session_path(context, "/responses")).json()
    assert responses.get(page_id, {}).get(field_id) == value, responses


@then("the response status is {status:d}")
def step_status(context, status: int) -> None:
    assert context.response.status_code == status, context.response.text


@then('the problem code is "{code}"')
def step_problem_code(context, code: str) -> None:
    assert _json(context).get("code") == code, _json(context)
