import asyncio
import json
import time
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from logrelay.errors import RenderError
from logrelay.relay.dispatcher import Dispatcher
from logrelay.server.app import create_app, dispatch_until_disconnect


@pytest.fixture
def client_for(make_registry):
    def _factory(raw, session):
        dispatcher = Dispatcher(make_registry(raw), session=session)
        return TestClient(create_app(dispatcher))

    return _factory


def test_get_is_liveness_check(client_for, fake_session):
    client = client_for({"d1": {"http": {"method": "POST", "url": "http://d1.local/"}}}, fake_session)
    response = client.get("/anything")
    assert response.status_code == 200
    assert fake_session.sent == []


@pytest.mark.parametrize("method", ["PUT", "DELETE", "PATCH"])
def test_other_methods_rejected(client_for, fake_session, method):
    client = client_for({}, fake_session)
    assert client.request(method, "/").status_code == 405


def test_invalid_json_is_bad_request(client_for, fake_session):
    client = client_for({}, fake_session)
    response = client.post("/", content=b"{not json")
    assert response.status_code == 400
    assert response.json()["message"] == "failed to unmarshal request body"


def test_post_dispatches_rendered_body(client_for, fake_session):
    client = client_for(
        {
            "d1": {
                "http": {
                    "method": "POST",
                    "url": "http://d1.local/",
                    "body": {
                        "templates": [
                            "{{ body.msg }}",
                            "{{ method }} {{ path }} {{ get(query, 'tag') }} {{ get(headers, 'X-Source') }} "
                            "prefix-{{ executedTemplates[0] }}",
                        ]
                    },
                }
            }
        },
        fake_session,
    )
    response = client.post("/ingest?tag=a&tag=b", json={"msg": "hi"}, headers={"X-Source": "app"})

    assert response.status_code == 200
    assert [r.body for r in fake_session.sent] == [b"POST /ingest a app prefix-hi"]


def test_host_is_visible_to_templates(client_for, fake_session):
    client = client_for(
        {"d1": {"http": {"method": "POST", "url": "http://d1.local/", "body": {"templates": ["{{ host }}"]}}}},
        fake_session,
    )
    client.post("/", json={}, headers={"Host": "relay.example:8080"})
    assert fake_session.sent[0].body == b"relay.example:8080"


def test_render_error_is_internal_error(client_for, fake_session):
    client = client_for(
        {"d1": {"http": {"method": "POST", "url": "http://d1.local/", "body": {"templates": ["{{ body.nope }}"]}}}},
        fake_session,
    )
    response = client.post("/", json={"msg": "hi"})

    assert response.status_code == 500
    payload = response.json()
    assert payload["message"] == "failed to execute body template"
    assert "d1" in payload["error"]
    assert fake_session.sent == []


def test_unreachable_destination_still_succeeds(client_for, session_factory):
    session = session_factory(unreachable=["http://d2.local/"])
    client = client_for(
        {
            "d2": {"http": {"method": "POST", "url": "http://d2.local/", "body": {"templates": ["x"]}}},
            "d3": {"http": {"method": "POST", "url": "http://d3.local/", "body": {"templates": []}}},
        },
        session,
    )
    response = client.post("/", json={"msg": "hi"})

    assert response.status_code == 200
    assert session.sent_urls() == ["http://d3.local/"]
    assert session.sent[0].body is None


def test_non_object_json_bodies_are_accepted(client_for, fake_session):
    client = client_for(
        {"d1": {"http": {"method": "POST", "url": "http://d1.local/", "body": {"templates": ["{{ body[1] }}"]}}}},
        fake_session,
    )
    response = client.post("/", content=json.dumps(["a", "b"]))
    assert response.status_code == 200
    assert fake_session.sent[0].body == b"b"


def test_dispatcher_is_injected():
    dispatcher = MagicMock()
    dispatcher.dispatch.side_effect = RenderError("d9", 3, ValueError("boom"))
    client = TestClient(create_app(dispatcher))

    response = client.post("/", json={})

    assert response.status_code == 500
    assert "number 3" in response.json()["error"]
    event = dispatcher.dispatch.call_args.args[0]
    assert event.method == "POST"


class _DisconnectedRequest:
    def __init__(self, dispatcher):
        self.app = SimpleNamespace(state=SimpleNamespace(dispatcher=dispatcher))
        self.checks = 0

    async def is_disconnected(self):
        self.checks += 1
        return True


def test_client_disconnect_cancels_dispatch(make_registry, make_event, hanging_session):
    dispatcher = Dispatcher(make_registry({"hang": {"http": {"method": "POST", "url": "http://hang.local/"}}}), session=hanging_session)
    request = _DisconnectedRequest(dispatcher)

    started = time.monotonic()
    asyncio.run(dispatch_until_disconnect(request, make_event()))

    assert time.monotonic() - started < 2
    assert request.checks == 1


def test_connected_client_dispatch_is_not_cancelled():
    dispatcher = MagicMock()
    client = TestClient(create_app(dispatcher))

    assert client.post("/", json={"msg": "hi"}).status_code == 200

    event, cancel = dispatcher.dispatch.call_args.args
    assert event.body == {"msg": "hi"}
    assert not cancel.is_set()
