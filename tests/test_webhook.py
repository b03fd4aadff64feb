import os

from fastapi.testclient import TestClient

from bot.webhook import create_app


DB_PATH = "test_webhook.db"
CHIEF = "chief"


def setup_module(module):
    if os.path.exists(DB_PATH):
        os.remove(DB_PATH)


def teardown_module(module):
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(DB_PATH + suffix):
            os.remove(DB_PATH + suffix)


def _notify(client, content, sender="u1", event="message"):
    body = {
        "event": event,
        "data": {
            "roomName": "Room One",
            "roomId": "r1",
            "senderName": "Alice",
            "senderHash": sender,
            "content": content,
            "isGroupChat": True,
            "time": 1_700_000_000,
        },
    }
    resp = client.post("/api/kakao/notify", json=body)
    assert resp.status_code == 200
    return resp.json()


def test_webhook_round_trip():
    app = create_app(db_path=DB_PATH, chief_hash=CHIEF)
    with TestClient(app) as client:
        assert client.get("/api/health").json() == {"status": "ok"}

        reply = _notify(client, "!주사위 1")
        assert reply["action"] == "send_text"
        assert reply["roomId"] == "r1"
        assert reply["message"].endswith("결과: 1")

        silent = _notify(client, "그냥 수다")
        assert silent["action"] == ""
        assert silent["message"] == ""

        other_event = _notify(client, "!주사위 1", event="join")
        assert other_event["action"] == ""

        pending = client.get("/api/kakao/pending").json()
        assert pending["action"] == ""
        assert pending["message"] == ""


def test_webhook_applies_room_limit():
    app = create_app(db_path=DB_PATH, chief_hash=CHIEF)
    with TestClient(app) as client:
        reply = _notify(client, "!제한설정 1", sender="u2")
        code = reply["message"].split("승인 코드: ")[1].split()[0]
        assert "설정 완료" in _notify(client, f"!제한승인 {code}", sender=CHIEF)["message"]

        assert _notify(client, "!로또", sender="u3")["message"].startswith("🎱")
        assert "한도를 초과" in _notify(client, "!로또", sender="u3")["message"]


def test_missing_data_is_ignored():
    app = create_app(db_path=DB_PATH, chief_hash=CHIEF)
    with TestClient(app) as client:
        resp = client.post("/api/kakao/notify", json={"event": "message"})
        assert resp.status_code == 200
        assert resp.json()["action"] == ""
