"""
Tests for RequestTranslator: validation, defaults, stream mode and the
system prompt fold.
"""

import pytest
from fastapi import HTTPException

from talkai_gateway.schemas import ChatCompletionRequest
from talkai_gateway.services.chat_service.request_translator import RequestTranslator


def make_request(**fields) -> ChatCompletionRequest:
    fields.setdefault("messages", [{"role": "user", "content": "Hi"}])
    return ChatCompletionRequest.model_validate(fields)


class TestParse:

    def setup_method(self):
        self.translator = RequestTranslator(config_manager=None)

    def test_valid_payload(self):
        chat_request = self.translator.parse({"messages": [{"role": "user", "content": "Hi"}]})
        assert chat_request.messages[0].content == "Hi"
        assert chat_request.model is None
        assert chat_request.temperature is None

    @pytest.mark.parametrize("payload", [
        [],
        {"messages": "not-a-list"},
        {"messages": [{"role": "user", "content": 42}]},
        {"messages": [{"role": "user", "content": "Hi"}], "temperature": "hot"},
        {"messages": [{"role": "user", "content": "Hi"}], "temperature": "0.5"},
        {"messages": [{"role": "user", "content": "Hi"}], "stream": "true"},
        {"messages": [{"role": "user", "content": "Hi"}], "stream": 1},
    ])
    def test_invalid_shape_is_rejected(self, payload):
        with pytest.raises(HTTPException) as exc_info:
            self.translator.parse(payload)
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == {"error": "Invalid request body"}

    def test_missing_and_null_fields_become_empty(self):
        chat_request = self.translator.parse({"messages": [
            {"role": "user"},
            {"role": "assistant", "content": None},
            {"content": "orphan"},
            {"role": None, "content": "orphan"},
        ]})
        assert [(m.role, m.content) for m in chat_request.messages] == [
            ("user", ""), ("assistant", ""), ("", "orphan"), ("", "orphan")
        ]

    def test_null_stream_and_integer_temperature(self):
        chat_request = self.translator.parse({
            "messages": [{"role": "user", "content": "Hi"}], "stream": None, "temperature": 1
        })
        assert not chat_request.stream
        assert chat_request.temperature == 1

    @pytest.mark.parametrize("payload", [{"messages": []}, {"model": "x"}])
    def test_empty_messages_are_rejected(self, payload):
        with pytest.raises(HTTPException) as exc_info:
            self.translator.parse(payload)
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == {"error": "Messages required"}


class TestDefaults:

    def test_missing_model_and_temperature_use_defaults(self, make_config_manager):
        translator = RequestTranslator(make_config_manager(DEFAULT_MODEL="claude-x", DEFAULT_TEMPERATURE="0.2"))
        translated = translator.translate(make_request())

        assert translated.model == "claude-x"
        assert translated.backend_request.settings.model == "claude-x"
        assert translated.backend_request.settings.temperature == 0.2

    def test_empty_model_counts_as_unset(self, config_manager):
        translated = RequestTranslator(config_manager).translate(make_request(model=""))
        assert translated.model == config_manager.get_config().default_model

    def test_explicit_values_win(self, config_manager):
        translated = RequestTranslator(config_manager).translate(make_request(model="m", temperature=0.0))
        assert translated.backend_request.settings.model == "m"
        assert translated.backend_request.settings.temperature == 0.0

    def test_default_temperature_is_0_7(self, config_manager):
        translated = RequestTranslator(config_manager).translate(make_request())
        assert translated.backend_request.settings.temperature == 0.7


class TestStreamMode:

    @pytest.mark.parametrize("default_stream, body_stream, stream_query, expected", [
        ("false", False, None, False),
        ("true", False, None, True),
        ("true", None, None, True),
        ("true", False, "false", False),
        ("true", False, "", True),
        ("false", True, None, True),
        ("false", True, "false", True),
        ("true", True, None, True),
    ])
    def test_query_presence_overrides_default_only_for_false_body(
        self, make_config_manager, default_stream, body_stream, stream_query, expected
    ):
        translator = RequestTranslator(make_config_manager(DEFAULT_STREAM=default_stream))
        translated = translator.translate(make_request(stream=body_stream), stream_query)
        assert translated.stream is expected


class TestHistory:

    def test_system_prompt_is_folded_into_last_user_turn(self):
        history = RequestTranslator.build_history(make_request(messages=[
            {"role": "system", "content": "S"},
            {"role": "user", "content": "U"},
        ]))
        assert len(history) == 1
        assert history[0].from_ == "you"
        assert history[0].content == "S\n\nU"

    def test_order_and_roles_are_preserved(self):
        history = RequestTranslator.build_history(make_request(messages=[
            {"role": "user", "content": "one"},
            {"role": "assistant", "content": "two"},
            {"role": "user", "content": "three"},
        ]))
        assert [(m.from_, m.content) for m in history] == [
            ("you", "one"), ("assistant", "two"), ("you", "three")
        ]

    def test_last_system_message_wins(self):
        history = RequestTranslator.build_history(make_request(messages=[
            {"role": "system", "content": "first"},
            {"role": "user", "content": "U"},
            {"role": "system", "content": "second"},
        ]))
        assert history[-1].content == "second\n\nU"

    def test_system_prompt_dropped_when_last_turn_is_assistant(self):
        history = RequestTranslator.build_history(make_request(messages=[
            {"role": "system", "content": "S"},
            {"role": "user", "content": "U"},
            {"role": "assistant", "content": "A"},
        ]))
        assert [m.content for m in history] == ["U", "A"]

    def test_system_only_yields_empty_history(self):
        history = RequestTranslator.build_history(make_request(messages=[
            {"role": "system", "content": "S"},
        ]))
        assert history == []

    def test_unknown_roles_are_ignored(self):
        history = RequestTranslator.build_history(make_request(messages=[
            {"role": "tool", "content": "T"},
            {"role": "user", "content": "U"},
        ]))
        assert [m.content for m in history] == ["U"]

    def test_history_ids_are_unique(self):
        history = RequestTranslator.build_history(make_request(messages=[
            {"role": "user", "content": "a"},
            {"role": "user", "content": "b"},
        ]))
        assert history[0].id != history[1].id

    def test_backend_payload_uses_wire_names(self, config_manager):
        translated = RequestTranslator(config_manager).translate(make_request(model="m", temperature=0.5))
        payload = translated.backend_request.to_payload()

        assert payload["type"] == "chat"
        assert payload["settings"] == {"model": "m", "temperature": 0.5}
        assert payload["messagesHistory"][0]["from"] == "you"
        assert payload["messagesHistory"][0]["content"] == "Hi"
        assert "history" not in payload

    def test_messages_without_role_are_dropped(self):
        history = RequestTranslator.build_history(make_request(messages=[
            {"content": "no role"},
            {"role": "user", "content": "U"},
        ]))
        assert [m.content for m in history] == ["U"]

    def test_null_content_is_kept_as_empty_turn(self):
        history = RequestTranslator.build_history(make_request(messages=[
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": None},
            {"role": "user", "content": "again"},
        ]))
        assert [(m.from_, m.content) for m in history] == [
            ("you", "Hi"), ("assistant", ""), ("you", "again")
        ]
