import pytest
from pydantic import ValidationError

from messaging_batch.models import BatchOutcome, GraphBatchRequest, QueueConfig


def test_queue_config_defaults():
    config = QueueConfig()

    assert config.max_size == 50
    assert config.delay_seconds == 1.0


def test_queue_config_is_frozen():
    config = QueueConfig()

    with pytest.raises(ValidationError):
        config.max_size = 10


def test_queue_config_from_env(monkeypatch):
    monkeypatch.setenv("MESSAGING_BATCH_MAX_SIZE", "10")
    monkeypatch.setenv("MESSAGING_BATCH_DELAY_SECONDS", "0.5")

    config = QueueConfig.from_env()

    assert config == QueueConfig(max_size=10, delay_seconds=0.5)


def test_queue_config_from_env_defaults():
    assert QueueConfig.from_env() == QueueConfig()


def test_queue_config_from_env_rejects_garbage(monkeypatch):
    monkeypatch.setenv("MESSAGING_BATCH_MAX_SIZE", "many")

    with pytest.raises(ValueError):
        QueueConfig.from_env()


def test_batch_outcome_constructors():
    success = BatchOutcome.success(payload={"id": 1})
    failure = BatchOutcome.failure(error={"message": "nope"}, response={"code": 400})

    assert success == BatchOutcome(ok=True, payload={"id": 1})
    assert failure.ok is False
    assert failure.error == {"message": "nope"}
    assert failure.response == {"code": 400}


def test_graph_batch_request_accepts_both_cases():
    by_name = GraphBatchRequest(relative_url="me/messages", depends_on="first")
    by_alias = GraphBatchRequest.model_validate(
        {"relativeUrl": "me/messages", "dependsOn": "first"}
    )

    assert by_name == by_alias
    assert by_name.method == "POST"
    assert by_name.body is None


def test_graph_batch_request_aliases_use_camelcase():
    aliases = {name: field.alias for name, field in GraphBatchRequest.model_fields.items()}

    assert aliases["relative_url"] == "relativeUrl"
    assert aliases["depends_on"] == "dependsOn"
    assert aliases["omit_response_on_success"] == "omitResponseOnSuccess"
