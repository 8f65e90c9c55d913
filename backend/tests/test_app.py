from datetime import datetime

from fastapi.testclient import TestClient

from locallist.core.security import decode_user_id
from locallist.core.settings import Settings
from locallist.main import VERSION, app

client = TestClient(app)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["version"] == VERSION == "0.1.0"
    datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))


def test_request_id_is_generated():
    r = client.get("/health")
    assert r.headers.get("X-Request-ID")


def test_request_id_is_echoed():
    r = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert r.headers["X-Request-ID"] == "trace-123"


def test_settings_defaults():
    s = Settings(_env_file=None, GEMINI_API_KEY="", JWT_SECRET="x")
    assert s.DEFAULT_CITY == "Miami"
    assert s.GEMINI_MODEL == "gemini-2.5-flash"
    assert s.GEMINI_TEMPERATURE == 0.3
    assert s.GEMINI_MAX_OUTPUT_TOKENS == 300
    assert s.RATE_LIMIT_BUILDER == "100/minute"


def test_allowed_origins_from_csv():
    s = Settings(_env_file=None, ALLOWED_ORIGINS="http://a.test, http://b.test,")
    assert s.ALLOWED_ORIGINS == ["http://a.test", "http://b.test"]


def test_token_issuer_and_audience_are_checked_when_configured():
    from jose import jwt

    settings = Settings(_env_file=None, JWT_SECRET="s", JWT_ISSUER="locallist", JWT_AUDIENCE="mobile")
    sub = "0b6f1c1e-6a59-4a8e-9c35-2f0b8f7a1d10"

    good = jwt.encode({"sub": sub, "iss": "locallist", "aud": "mobile"}, "s", algorithm="HS256")
    wrong_aud = jwt.encode({"sub": sub, "iss": "locallist", "aud": "web"}, "s", algorithm="HS256")
    wrong_iss = jwt.encode({"sub": sub, "iss": "other", "aud": "mobile"}, "s", algorithm="HS256")

    assert str(decode_user_id(good, settings)) == sub
    assert decode_user_id(wrong_aud, settings) is None
    assert decode_user_id(wrong_iss, settings) is None
