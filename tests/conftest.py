import pytest


@pytest.fixture(autouse=True)
def test_set_env(monkeypatch):
    monkeypatch.setenv("MESSENGER_ACCESS_TOKEN", "test-token")
    monkeypatch.delenv("MESSENGER_GRAPH_VERSION", raising=False)
    monkeypatch.delenv("MESSAGING_BATCH_MAX_SIZE", raising=False)
    monkeypatch.delenv("MESSAGING_BATCH_DELAY_SECONDS", raising=False)
