import pytest
from fastapi.testclient import TestClient

from notes_website.backend.main import create_app
from notes_website.backend.services import NoteStore


@pytest.fixture
def store(tmp_path):
    return NoteStore(str(tmp_path / 'cache'))


@pytest.fixture
def client(store):
    return TestClient(create_app(store))
