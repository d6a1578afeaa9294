"""Pytest bootstrap configuration.

Environment variables are set before test collection and module imports
that depend on application settings.
"""
import os

os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("STATIC_DIR", os.path.join(os.path.dirname(__file__), "_no_static"))

import pytest
from fastapi.testclient import TestClient

from application.services.chat_service import ChatBox


@pytest.fixture
def chat_box() -> ChatBox:
    return ChatBox()


@pytest.fixture
def client():
    from main import app
    with TestClient(app) as c:
        yield c
