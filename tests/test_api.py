import pytest
from fastapi.testclient import TestClient
from chatmem.api.app import create_app


@pytest.fixture
def client(engine, model):
    app = create_app(engine=engine, model=model, prefix="")
    with TestClient(app) as c:
        yield c


def test_stateless_chat(client, model):
    r = client.post("/chat", json={"message": "What is 2+2?"})
    assert r.status_code == 200
    assert r.json() == {"message": "2+2 = 4"}
    assert r.headers["X-Request-ID"]

    # Nothing is remembered
    assert client.get("/chat-memory").json() == []


def test_stateless_chat_model_failure(client, model):
    model.fail_on = "all"
    r = client.post("/chat", json={"message": "hi"})
    assert r.status_code == 503
    assert "detail" in r.json()


def test_start_list_send_and_read(client):
    r = client.post("/chat-memory/start", json={"message": "What is 2+2?"})
    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"id", "reply", "description"}
    assert "4" in body["reply"]
    conversation_id = body["id"]

    listing = client.get("/chat-memory").json()
    assert listing == [{"id": conversation_id, "description": body["description"]}]

    r = client.post(f"/chat-memory/{conversation_id}", json={"message": "And 3+3?"})
    assert r.status_code == 200
    assert r.json() == {"content": "3+3 = 6", "role": "ASSISTANT"}

    transcript = client.get(f"/chat-memory/{conversation_id}").json()
    assert transcript == [
        {"content": "What is 2+2?", "role": "USER"},
        {"content": "2+2 = 4", "role": "ASSISTANT"},
        {"content": "And 3+3?", "role": "USER"},
        {"content": "3+3 = 6", "role": "ASSISTANT"},
    ]


def test_unknown_conversation_is_404(client):
    r = client.get("/chat-memory/unknown-id")
    assert r.status_code == 404
    assert "unknown-id" in r.json()["detail"]

    r = client.post("/chat-memory/unknown-id", json={"message": "hi"})
    assert r.status_code == 404


def test_start_model_failure_leaves_no_conversation(client, model):
    model.fail_on = "reply"
    r = client.post("/chat-memory/start", json={"message": "hello"})
    assert r.status_code == 503
    assert client.get("/chat-memory").json() == []


def test_send_model_failure_keeps_transcript(client, model):
    conversation_id = client.post("/chat-memory/start", json={"message": "hello"}).json()["id"]

    model.fail_on = "all"
    r = client.post(f"/chat-memory/{conversation_id}", json={"message": "again"})
    assert r.status_code == 503

    model.fail_on = None
    assert len(client.get(f"/chat-memory/{conversation_id}").json()) == 2


@pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": "   "}])
def test_blank_message_rejected(client, payload):
    assert client.post("/chat", json=payload).status_code == 422
    assert client.post("/chat-memory/start", json=payload).status_code == 422


def test_prefix(engine, model):
    app = create_app(engine=engine, model=model, prefix="/api")
    with TestClient(app) as c:
        assert c.post("/api/chat", json={"message": "hi"}).status_code == 200
        assert c.post("/chat", json={"message": "hi"}).status_code == 404


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "database": True}


def test_request_id_is_echoed(client):
    r = client.get("/chat-memory", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"
