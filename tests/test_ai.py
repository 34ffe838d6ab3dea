import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from studysync.ai import generate_knowledge_tip, generate_study_structure
from studysync.config import clean_api_key, get_db_path, get_model


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", '"test-key" ')


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)


def _fake_client(text=None, error=None):
    def generate_content(**kwargs):
        if error:
            raise error
        return SimpleNamespace(text=text)
    return SimpleNamespace(models=SimpleNamespace(generate_content=generate_content))


def test_clean_api_key():
    assert clean_api_key(' "abc" ') == "abc"
    assert clean_api_key("'abc'") == "abc"
    assert clean_api_key(None) == ""


def test_structure_without_key_returns_none(no_api_key):
    with patch("studysync.ai.genai.Client") as client:
        assert generate_study_structure("biology") is None
        client.assert_not_called()


def test_structure_parses_response(api_key):
    body = json.dumps({
        "name": "Biology 101",
        "modules": [
            {"name": "Cells", "unit_kind": "Pages", "total_items": 40},
            {"name": "Genetics", "unit_kind": "Minutes", "total_items": "25"},
        ],
    })
    with patch("studysync.ai.genai.Client", return_value=_fake_client(body)) as client:
        template = generate_study_structure("biology")
    client.assert_called_once_with(api_key="test-key")
    assert template == {
        "name": "Biology 101",
        "description": "",
        "modules": [
            {"name": "Cells", "unit_kind": "Pages", "total_items": 40},
            {"name": "Genetics", "unit_kind": "Questions", "total_items": 25},
        ],
    }


@pytest.mark.parametrize("text", ["", "not json", json.dumps({"modules": []})])
def test_structure_bad_response_returns_none(api_key, text):
    with patch("studysync.ai.genai.Client", return_value=_fake_client(text)):
        assert generate_study_structure("biology") is None


def test_structure_service_error_returns_none(api_key):
    with patch("studysync.ai.genai.Client", return_value=_fake_client(error=RuntimeError("503"))):
        assert generate_study_structure("biology") is None


def test_tip_returns_text(api_key):
    tip = "1. [Core concept]: ...\n2. [Common pitfall]: ...\n3. [Mnemonic]: ..."
    with patch("studysync.ai.genai.Client", return_value=_fake_client(tip)):
        assert generate_knowledge_tip("Fenbi App", "Law Drills", "labour law") == tip


def test_tip_failure_returns_none(api_key):
    with patch("studysync.ai.genai.Client", return_value=_fake_client(error=RuntimeError("quota"))):
        assert generate_knowledge_tip("Fenbi App", "Law Drills", "labour law") is None


def test_tip_without_key_returns_none(no_api_key):
    assert generate_knowledge_tip("Fenbi App", "Law Drills", "labour law") is None


def test_model_and_db_path_read_at_call_time(monkeypatch, tmp_path):
    monkeypatch.setenv("STUDYSYNC_MODEL", "gemini-test")
    monkeypatch.setenv("STUDYSYNC_DB", str(tmp_path / "env.db"))
    assert get_model() == "gemini-test"
    assert get_db_path() == str(tmp_path / "env.db")
    monkeypatch.delenv("STUDYSYNC_MODEL")
    assert get_model() == "gemini-2.5-flash"
