"""Shared fixtures for SPSMonday tests."""

import json

import httpx
import pytest

from spsmonday.config import get_settings
from spsmonday.monday_client import MondayClient
from spsmonday.profiles import ProfileStore

API_URL = "https://api.monday.com/v2"
TOKEN = "test-token-do-not-use"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Point settings at a temporary config dir and drop any real token."""
    monkeypatch.delenv("MONDAY_API_KEY", raising=False)
    monkeypatch.delenv("MONDAY_PROFILE", raising=False)
    monkeypatch.delenv("MONDAY_TIMEOUT", raising=False)
    monkeypatch.setenv("MONDAY_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client():
    return MondayClient(api_key=TOKEN, api_url=API_URL)


@pytest.fixture
def store(tmp_path):
    return ProfileStore(tmp_path / "profiles-root", identity=b"tester@testhost")


def gql(data=None, errors=None, status=200):
    """Build a GraphQL envelope response."""
    body = {}
    if data is not None:
        body["data"] = data
    if errors is not None:
        body["errors"] = [{"message": message} for message in errors]
    return httpx.Response(status, json=body)


def sent_body(route, index=-1):
    """Decoded JSON body of a recorded request."""
    return json.loads(route.calls[index].request.content)


def raw_item(item_id, board_id=1, group_id="topics", state="active", name=None):
    return {
        "id": str(item_id),
        "name": name or f"Item {item_id}",
        "state": state,
        "created_at": "2024-03-01T10:00:00Z",
        "updated_at": "2024-03-02T10:00:00Z",
        "board": {"id": str(board_id), "name": "Board"},
        "group": {"id": group_id, "title": group_id.title()},
        "column_values": [
            {"id": "status", "type": "status", "text": "Done", "value": '{"index":1}'},
        ],
    }
