"""Unit tests for stream event models and frame parsing."""

import json

import pytest
from pydantic import ValidationError

from vecinita_client.models import (
    EVENT_TYPE_CLARIFICATION,
    EVENT_TYPE_COMPLETE,
    EVENT_TYPE_ERROR,
    EVENT_TYPE_THINKING,
    TERMINAL_EVENT_TYPES,
    VALID_EVENT_TYPES,
    AgentConfig,
    AgentResponse,
    ClarificationEvent,
    CompleteEvent,
    ErrorEvent,
    QueryParameters,
    SourceEvent,
    ThinkingEvent,
    TokenEvent,
    ToolEvent,
    is_terminal,
    parse_stream_event,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------


class TestConstants:
    """Verify event type constants are consistent."""

    def test_terminal_types_are_valid(self):
        assert TERMINAL_EVENT_TYPES <= VALID_EVENT_TYPES
        assert TERMINAL_EVENT_TYPES == {EVENT_TYPE_COMPLETE, EVENT_TYPE_ERROR}

    def test_event_models_match_constants(self):
        """Each model's default type field matches the constant."""
        assert ThinkingEvent().type == EVENT_TYPE_THINKING
        assert ClarificationEvent().type == EVENT_TYPE_CLARIFICATION
        assert CompleteEvent().type == EVENT_TYPE_COMPLETE
        assert ErrorEvent().type == EVENT_TYPE_ERROR


# ---------------------------------------------------------------------------
# parse_stream_event
# ---------------------------------------------------------------------------


class TestParseStreamEvent:
    def test_thinking(self):
        event = parse_stream_event(
            json.dumps(
                {
                    "type": "thinking",
                    "message": "Searching...",
                    "stage": "retrieval",
                    "progress": 40,
                    "toolName": "search_docs",
                }
            )
        )
        assert isinstance(event, ThinkingEvent)
        assert event.message == "Searching..."
        assert event.stage == "retrieval"
        assert event.progress == 40
        assert event.tool_name == "search_docs"
        assert not is_terminal(event)

    def test_complete(self):
        event = parse_stream_event(
            json.dumps(
                {
                    "type": "complete",
                    "answer": "Done",
                    "sources": [{"id": "c1", "content": "text", "similarity": 0.87}],
                    "thread_id": "thread-1",
                    "metadata": {"model_used": "llama-3.1"},
                }
            )
        )
        assert isinstance(event, CompleteEvent)
        assert event.answer == "Done"
        assert event.sources[0].similarity == pytest.approx(0.87)
        assert event.thread_id == "thread-1"
        assert event.metadata == {"model_used": "llama-3.1"}
        assert is_terminal(event)

    def test_complete_without_optional_fields(self):
        event = parse_stream_event('{"type": "complete"}')
        assert isinstance(event, CompleteEvent)
        assert event.answer == ""
        assert event.sources == []

    def test_error(self):
        event = parse_stream_event('{"type": "error", "message": "boom", "code": "X"}')
        assert isinstance(event, ErrorEvent)
        assert event.message == "boom"
        assert event.code == "X"
        assert event.status_code is None
        assert is_terminal(event)

    def test_error_status_alias(self):
        event = parse_stream_event('{"type": "error", "message": "m", "statusCode": 503}')
        assert isinstance(event, ErrorEvent)
        assert event.status_code == 503

    @pytest.mark.parametrize("type_", ["clarification", "clarification-request"])
    def test_clarification_both_spellings(self, type_):
        event = parse_stream_event(
            json.dumps(
                {
                    "type": type_,
                    "message": "Which neighborhood?",
                    "questions": ["North", "South"],
                    "suggestedQuestions": ["Near downtown?"],
                }
            )
        )
        assert isinstance(event, ClarificationEvent)
        assert event.type == type_
        assert event.questions == ["North", "South"]
        assert event.suggested_questions == ["Near downtown?"]
        assert not is_terminal(event)

    def test_token_source_and_tool_events(self):
        assert isinstance(parse_stream_event('{"type": "token", "content": "Hi"}'), TokenEvent)
        assert isinstance(
            parse_stream_event('{"type": "source", "url": "https://x", "title": "X"}'),
            SourceEvent,
        )
        tool = parse_stream_event('{"type": "tool_event", "phase": "start", "tool": "db"}')
        assert isinstance(tool, ToolEvent)
        assert tool.phase == "start"

    def test_unknown_keys_are_kept(self):
        event = parse_stream_event('{"type": "thinking", "message": "m", "extra": 1}')
        assert event is not None
        assert event.model_extra == {"extra": 1}

    def test_numeric_ids_and_codes_become_text(self):
        complete = parse_stream_event('{"type": "complete", "answer": "ok", "thread_id": 42}')
        assert isinstance(complete, CompleteEvent)
        assert complete.thread_id == "42"

        error = parse_stream_event('{"type": "error", "message": "LLM down", "code": 503}')
        assert isinstance(error, ErrorEvent)
        assert error.code == "503"
        assert error.message == "LLM down"

    def test_null_answer_and_sources_default(self):
        event = parse_stream_event('{"type": "complete", "answer": null, "sources": null}')
        assert isinstance(event, CompleteEvent)
        assert event.answer == ""
        assert event.sources == []

    def test_terminal_frame_survives_unusable_field(self):
        event = parse_stream_event(
            json.dumps(
                {
                    "type": "complete",
                    "answer": "Done",
                    "thread_id": "t-1",
                    "sources": [{"title": "Doc", "similarity": "high"}],
                    "metadata": "not a mapping",
                }
            )
        )
        assert isinstance(event, CompleteEvent)
        assert event.answer == "Done"
        assert event.thread_id == "t-1"
        assert event.sources == []
        assert event.metadata is None

    def test_error_frame_with_unusable_message_keeps_code(self):
        event = parse_stream_event('{"type": "error", "message": {"x": 1}, "code": "BUSY"}')
        assert isinstance(event, ErrorEvent)
        assert event.message == "Agent reported an error"
        assert event.code == "BUSY"

    @pytest.mark.parametrize(
        "data",
        [
            "invalid json",
            "",
            "[1, 2]",
            '"just a string"',
            '{"message": "no type"}',
            '{"type": "mystery"}',
            '{"type": "tool_event", "phase": "bogus"}',
            '{"type": "thinking", "message": ["not", "text"]}',
        ],
    )
    def test_malformed_frames_return_none(self, data):
        assert parse_stream_event(data) is None


# ---------------------------------------------------------------------------
# Query and response models
# ---------------------------------------------------------------------------


class TestQueryParameters:
    def test_requires_question(self):
        with pytest.raises(ValidationError):
            QueryParameters(question="")

    def test_rejects_unknown_language(self):
        with pytest.raises(ValidationError):
            QueryParameters(question="q", lang="fr")

    def test_immutable(self):
        params = QueryParameters(question="q")
        with pytest.raises(ValidationError):
            params.question = "other"  # type: ignore[misc]

    def test_value_equality(self):
        assert QueryParameters(question="q", lang="en") == QueryParameters(
            question="q", lang="en"
        )
        assert hash(QueryParameters(question="q")) == hash(QueryParameters(question="q"))

    def test_to_query_order(self):
        params = QueryParameters(question="q", model="m", thread_id="t")
        assert params.to_query() == [
            ("question", "q"),
            ("thread_id", "t"),
            ("lang", None),
            ("provider", None),
            ("model", "m"),
            ("clarification_response", None),
        ]


class TestAgentResponse:
    def test_parses_as_is(self):
        payload = {"answer": "Test answer", "sources": [], "thread_id": "thread-123"}
        response = AgentResponse.model_validate(payload)
        assert response.model_dump(exclude_none=True) == payload

    def test_missing_fields_default(self):
        response = AgentResponse.model_validate({})
        assert response.answer == ""
        assert response.sources == []
        assert response.thread_id is None

    def test_loosely_typed_body(self):
        response = AgentResponse.model_validate(
            {"answer": "a", "sources": None, "thread_id": 7}
        )
        assert response.answer == "a"
        assert response.sources == []
        assert response.thread_id == "7"

    def test_null_answer_and_numeric_source_id(self):
        response = AgentResponse.model_validate(
            {"answer": None, "sources": [{"id": 12, "title": "Doc"}]}
        )
        assert response.answer == ""
        assert response.sources[0].id == "12"

    def test_source_aliases(self):
        response = AgentResponse.model_validate(
            {"answer": "a", "sources": [{"title": "Doc", "url": "u", "chunkIndex": 3}]}
        )
        assert response.sources[0].chunk_index == 3


class TestAgentConfig:
    def test_key_label_shape(self):
        config = AgentConfig.model_validate(
            {
                "providers": [{"key": "groq", "label": "Groq"}],
                "models": {"groq": ["llama-3.1"]},
            }
        )
        assert config.providers[0].key == "groq"
        assert config.providers[0].label == "Groq"
        assert config.models_for("groq") == ["llama-3.1"]
        assert config.models_for("unknown") == []

    def test_name_shape_and_defaults(self):
        config = AgentConfig.model_validate(
            {
                "providers": [{"name": "groq", "models": ["llama-3.1"], "default": True}],
                "models": {"groq": ["llama-3.1"]},
                "defaultProvider": "groq",
            }
        )
        assert config.providers[0].key == "groq"
        assert config.providers[0].label == "groq"
        assert config.default_provider == "groq"

    def test_flat_model_list_is_grouped(self):
        config = AgentConfig.model_validate(
            {
                "providers": ["openai"],
                "models": [
                    {"id": "gpt-4", "provider": "openai"},
                    {"id": "gpt-4o", "provider": "openai"},
                ],
            }
        )
        assert config.providers[0].key == "openai"
        assert config.models == {"openai": ["gpt-4", "gpt-4o"]}
