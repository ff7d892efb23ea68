"""
Module: test_queue.py
Description: Unit tests for queue parameter parsing.

Tests QueueParameters.from_raw with camelCase and snake_case keys,
strict typing, unknown keys and malformed JSON.
"""

import pytest

from broker.errors import ErrorKind, InvalidParametersError
from models.queue import QueueParameters


class TestQueueParameters:
    """Test cases for QueueParameters parsing."""

    def test_parse_camel_case_json(self):
        """Test parsing the JSON keys platform users send."""
        raw = (
            '{"delaySeconds": 10, "maximumMessageSize": 2048, "messageRetentionPeriod": 3600,'
            ' "receiveMessageWaitTimeSeconds": 20, "redriveMaxReceiveCount": 5,'
            ' "visibilityTimeout": 30, "fifoQueue": true, "contentBasedDeduplication": true,'
            ' "tags": {"team": "payments"}}'
        )

        params = QueueParameters.from_raw(raw)

        assert params.delay_seconds == 10
        assert params.maximum_message_size == 2048
        assert params.message_retention_period == 3600
        assert params.receive_message_wait_time_seconds == 20
        assert params.redrive_max_receive_count == 5
        assert params.visibility_timeout == 30
        assert params.fifo_queue is True
        assert params.content_based_deduplication is True
        assert params.tags == {"team": "payments"}

    def test_parse_bytes(self):
        params = QueueParameters.from_raw(b'{"delaySeconds": 3}')
        assert params.delay_seconds == 3

    def test_parse_snake_case_dict(self):
        params = QueueParameters.from_raw({"visibility_timeout": 45})
        assert params.visibility_timeout == 45

    @pytest.mark.parametrize("raw", [None, "", b"", "null"])
    def test_empty_input_gives_defaults(self, raw):
        """Test that absent parameters yield all defaults."""
        params = QueueParameters.from_raw(raw)

        assert params == QueueParameters()
        assert params.delay_seconds is None
        assert params.fifo_queue is False
        assert params.content_based_deduplication is False
        assert params.tags == {}

    def test_malformed_json(self):
        with pytest.raises(InvalidParametersError, match="not valid JSON"):
            QueueParameters.from_raw('{"delaySeconds": ')

    @pytest.mark.parametrize("raw", ["[]", '"text"', "42", [1, 2]])
    def test_non_object_rejected(self, raw):
        with pytest.raises(InvalidParametersError, match="must be a JSON object"):
            QueueParameters.from_raw(raw)

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidParametersError, match="queueName"):
            QueueParameters.from_raw({"queueName": "mine"})

    @pytest.mark.parametrize("raw", [
        {"delaySeconds": "10"},
        {"delaySeconds": 1.5},
        {"fifoQueue": "true"},
        {"tags": ["a", "b"]},
        {"tags": {"count": 3}},
    ])
    def test_wrong_types_rejected(self, raw):
        """Strings are never coerced to numbers or booleans."""
        with pytest.raises(InvalidParametersError):
            QueueParameters.from_raw(raw)

    def test_out_of_range_values_are_accepted(self):
        """Range limits are enforced by CloudFormation, not here."""
        params = QueueParameters.from_raw({"delaySeconds": 100000, "redriveMaxReceiveCount": -1})

        assert params.delay_seconds == 100000
        assert params.redrive_enabled is False

    @pytest.mark.parametrize("count,enabled", [(None, False), (0, False), (1, True), (10, True)])
    def test_redrive_enabled(self, count, enabled):
        assert QueueParameters(redrive_max_receive_count=count).redrive_enabled is enabled

    def test_error_kind_is_validation(self):
        with pytest.raises(InvalidParametersError) as exc_info:
            QueueParameters.from_raw("nope")

        assert exc_info.value.kind == ErrorKind.VALIDATION
