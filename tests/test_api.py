import pytest
from fastapi.testclient import TestClient

from blocker_converter.api import create_app
from blocker_converter.settings import Settings


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        f'[runtime]\noutput_dir = "{(tmp_path / "runs").as_posix()}"\nenable_local_api = true\n',
        encoding="utf-8",
    )
    return path


@pytest.fixture
def client(config_path, monkeypatch):
    monkeypatch.setattr("blocker_converter.settings.get_settings", lambda: Settings())
    return TestClient(create_app(config_path))


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": "1.2.0"}


def test_convert(client) -> None:
    response = client.post("/convert", json={"rules": ["##.banner", "||ads.com^$object"]})
    assert response.status_code == 200
    payload = response.json()
    assert payload["convertedCount"] == 1
    assert payload["errorsCount"] == 1
    assert payload["overLimit"] is False
    assert payload["errors"][0]["code"] == "UNSUPPORTED_CONTENT_TYPE"
    assert payload["errors"][0]["rule"] == "||ads.com^$object"
    assert '"css-display-none"' in payload["converted"]


def test_convert_with_limit(client) -> None:
    response = client.post("/convert", json={"rules": ["||a.com^", "||b.com^"], "limit": 1})
    payload = response.json()
    assert payload["convertedCount"] == 1
    assert payload["overLimit"] is True
    assert payload["errors"][-1]["code"] == "OVER_LIMIT"


def test_convert_empty_input(client) -> None:
    response = client.post("/convert", json={"rules": []})
    assert response.status_code == 400
    assert response.json()["detail"] == "EMPTY_INPUT"


def test_disabled_api(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("blocker_converter.settings.get_settings", lambda: Settings())
    path = tmp_path / "config.toml"
    path.write_text("[runtime]\nenable_local_api = false\n", encoding="utf-8")
    with pytest.raises(RuntimeError):
        create_app(path)
    assert create_app(path, require_enabled=False).title == "Content Blocker Converter"
