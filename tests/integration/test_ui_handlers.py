"""Integration tests for the Gradio handlers.

The handlers run against a real PromptClient whose HTTP traffic goes to the
scripted fake API, so these tests cover the whole path from a UI event to the
request body and back to the document.
"""

import json
from unittest.mock import patch

import httpx
import pytest

from promptforge.core.chat import PROMPT_APPLIED_TEXT, ChatSession, build_personas
from promptforge.core.settings_store import load_api_config
from promptforge.ui.handlers import (
    add_field,
    apply_value,
    choose_alternative,
    custom_alternatives,
    edit_prompt,
    generate_prompt,
    improve_prompt,
    load_model_catalog,
    load_settings_view,
    move_field,
    new_conversation,
    refresh_alternatives,
    remove_field,
    restore_version,
    save_settings,
    send_chat_message,
    switch_persona,
    translate_prompt,
    use_proposal,
)
from promptforge.ui.models import MALFORMED_REPLY_MESSAGE, UIState

# Positions in the editor view tuple
PROMPT_MD, FIELDS, VALUE, ALTERNATIVES, HISTORY, PROMPT_JSON, STATUS, STATE = range(8)


@pytest.fixture
def state(client, api_config) -> UIState:
    """Configured session state using the fake API."""
    return UIState(
        client=client,
        chat=ChatSession(personas=build_personas("French")),
        api_config=api_config,
    )


@pytest.fixture
def state_with_prompt(state, sample_prompt) -> UIState:
    state.document.replace(sample_prompt)
    return state


class TestGeneratePrompt:
    """Tests for generate_prompt handler."""

    async def test_success(self, state, fake_api, sample_prompt_data):
        fake_api.reply_with(sample_prompt_data)

        view = await generate_prompt("a lighthouse", None, state)

        assert view[STATUS] == "✅ Prompt generated with 5 fields"
        assert view[STATE].document.order == list(sample_prompt_data)
        assert "1. **Subject**: a lighthouse on a cliff" in view[PROMPT_MD]

    async def test_not_configured(self, client, fake_api):
        state = UIState(client=client, chat=ChatSession(personas=build_personas("French")))

        view = await generate_prompt("a lighthouse", None, state)

        assert "Settings" in view[STATUS]
        assert fake_api.requests == []

    async def test_no_input(self, state, fake_api):
        view = await generate_prompt("  ", None, state)

        assert "Validation Error" in view[STATUS]
        assert fake_api.requests == []

    async def test_malformed_reply_keeps_document(self, state_with_prompt, fake_api):
        fake_api.reply_with({"subject": {"value": "x", "alternatives": []}})

        view = await generate_prompt("a cat", None, state_with_prompt)

        assert view[STATUS] == MALFORMED_REPLY_MESSAGE
        assert len(view[STATE].document.order) == 5

    async def test_request_failure(self, state, fake_api):
        fake_api.reply_status(401, {"error": {"message": "User not found."}})

        view = await generate_prompt("a lighthouse", None, state)

        assert "Request failed" in view[STATUS]
        assert "User not found." in view[STATUS]
        assert view[STATE].document.is_empty

    async def test_image_path(self, state, fake_api, sample_prompt_data, temp_dir, png_bytes):
        image_path = temp_dir / "idea.png"
        image_path.write_bytes(png_bytes)
        fake_api.reply_with(sample_prompt_data)

        await generate_prompt("", str(image_path), state)

        content = fake_api.last_body["messages"][1]["content"]
        assert content[1]["image_url"]["url"].startswith("data:image/png;base64,")

    async def test_invalid_image(self, state, fake_api, temp_dir):
        image_path = temp_dir / "idea.png"
        image_path.write_text("not an image")

        view = await generate_prompt("", str(image_path), state)

        assert "valid image" in view[STATUS]
        assert fake_api.requests == []


class TestFieldHandlers:
    """Tests for the per-field handlers."""

    def test_apply_value(self, state_with_prompt):
        view = apply_value("style", "watercolour", state_with_prompt)

        assert view[STATE].document.segments["style"].value == "watercolour"
        assert view[VALUE] == "watercolour"

    def test_apply_blank_value(self, state_with_prompt):
        view = apply_value("style", "  ", state_with_prompt)

        assert "cannot be empty" in view[STATUS]
        assert view[STATE].document.segments["style"].value == "cinematic shot"

    def test_choose_alternative(self, state_with_prompt):
        view = choose_alternative("lighting", "moonlight", state_with_prompt)

        assert view[STATE].document.segments["lighting"].value == "moonlight"

    async def test_refresh_alternatives(self, state_with_prompt, fake_api):
        fake_api.reply_with({"alternatives": ["a", "b", "c", "d"]})

        view = await refresh_alternatives("lighting", state_with_prompt)

        assert view[STATE].document.segments["lighting"].alternatives == ["a", "b", "c", "d"]
        assert fake_api.last_body["messages"][1]["content"] == 'Category: "Lighting", Current value: "golden hour"'

    async def test_refresh_malformed(self, state_with_prompt, fake_api):
        fake_api.reply_with({"ideas": []})

        view = await refresh_alternatives("lighting", state_with_prompt)

        assert view[STATUS] == MALFORMED_REPLY_MESSAGE
        assert len(view[STATE].document.segments["lighting"].alternatives) == 4

    async def test_custom_alternatives(self, state_with_prompt, fake_api):
        fake_api.reply_with({"alternatives": ["w", "x", "y", "z"]})

        view = await custom_alternatives("lighting", "neon", state_with_prompt)

        assert view[STATE].document.segments["lighting"].alternatives == ["w", "x", "y", "z"]

    async def test_custom_alternatives_need_query(self, state_with_prompt, fake_api):
        view = await custom_alternatives("lighting", "", state_with_prompt)

        assert "Validation Error" in view[STATUS]
        assert fake_api.requests == []

    def test_move_field(self, state_with_prompt):
        view = move_field("details", -1, state_with_prompt)

        assert view[STATE].document.order[3] == "details"

    def test_move_field_at_edge(self, state_with_prompt):
        view = move_field("subject", -1, state_with_prompt)

        assert view[STATE].document.order[0] == "subject"

    def test_remove_field(self, state_with_prompt):
        view = remove_field("style", state_with_prompt)

        assert "style" not in view[STATE].document.order

    def test_remove_last_field_starts_over(self, state, sample_prompt):
        state.document.replace({"subject": sample_prompt["subject"]})

        view = remove_field("subject", state)

        assert view[STATE].document.is_empty
        assert "Start over" in view[STATUS]


class TestWholePromptHandlers:
    """Tests for improve, edit, add field, restore and translate."""

    async def test_improve_keeps_user_order(self, state_with_prompt, fake_api, sample_prompt_data):
        move_field("details", -4, state_with_prompt)
        user_order = list(state_with_prompt.document.order)
        fake_api.reply_with(sample_prompt_data)

        view = await improve_prompt(state_with_prompt)

        assert view[STATE].document.order == user_order
        sent = json.loads(fake_api.last_body["messages"][1]["content"].split("Current prompt: ", 1)[1])
        assert list(sent) == user_order

    async def test_improve_rejects_changed_keys(self, state_with_prompt, fake_api, sample_prompt_data):
        del sample_prompt_data["details"]
        fake_api.reply_with(sample_prompt_data)

        view = await improve_prompt(state_with_prompt)

        assert view[STATUS] == MALFORMED_REPLY_MESSAGE
        assert "details" in view[STATE].document.order

    async def test_improve_without_prompt(self, state, fake_api):
        view = await improve_prompt(state)

        assert "Generate a prompt first" in view[STATUS]

    async def test_edit_clears_instruction(self, state_with_prompt, fake_api, sample_prompt_data):
        fake_api.reply_with(sample_prompt_data)

        result = await edit_prompt("more vintage", state_with_prompt)

        assert result[0] == ""
        assert result[1 + STATUS] == "✅ Prompt updated"

    async def test_edit_failure_keeps_instruction(self, state_with_prompt, fake_api):
        fake_api.fail_with(httpx.ConnectError("offline"))

        result = await edit_prompt("more vintage", state_with_prompt)

        assert result[0] == "more vintage"
        assert "Request failed" in result[1 + STATUS]

    async def test_add_field(self, state_with_prompt, fake_api):
        fake_api.reply_with({"value": "stormy", "alternatives": ["a", "b", "c", "d"]})

        result = await add_field("Weather Mood", state_with_prompt)

        document = result[1 + STATE].document
        assert document.order[-1] == "weather_mood"
        assert document.segments["weather_mood"].value == "stormy"
        assert result[0] == ""

    async def test_add_existing_field(self, state_with_prompt, fake_api):
        result = await add_field("Style", state_with_prompt)

        assert "already exists" in result[1 + STATUS]
        assert fake_api.requests == []

    async def test_add_field_malformed(self, state_with_prompt, fake_api):
        fake_api.reply_with({"value": "stormy"})

        result = await add_field("Weather", state_with_prompt)

        assert "could not generate content" in result[1 + STATUS]
        assert "weather" not in result[1 + STATE].document.order

    def test_restore_version(self, state_with_prompt):
        apply_value("style", "watercolour", state_with_prompt)
        remove_field("details", state_with_prompt)

        view = restore_version(0, state_with_prompt)

        assert "details" in view[STATE].document.order
        assert view[STATE].document.segments["style"].value == "watercolour"

    async def test_translate(self, state_with_prompt, fake_api):
        fake_api.reply_with("a lighthouse on a cliff, cinematic shot")

        english, status, state = await translate_prompt(state_with_prompt)

        assert english == "a lighthouse on a cliff, cinematic shot"
        assert fake_api.last_body["messages"][1]["content"] == state.document.compile()

    async def test_translate_empty_reply(self, state_with_prompt, fake_api):
        fake_api.reply_with("")

        english, status, _ = await translate_prompt(state_with_prompt)

        assert english == ""
        assert "translation failed" in status


class TestChatHandlers:
    """Tests for the chat handlers."""

    async def test_text_reply(self, state, fake_api):
        fake_api.reply_with("Try a low angle.")

        messages, box, image, button, status, state = await send_chat_message("Tips?", None, state)

        assert messages[-1] == {"role": "assistant", "content": "Try a low angle."}
        assert box == ""
        assert button["visible"] is False

    async def test_expert_gets_context(self, state_with_prompt, fake_api):
        fake_api.reply_with("Sure.")

        await send_chat_message("Make it rainy", None, state_with_prompt)

        roles = [m["role"] for m in fake_api.last_body["messages"]]
        assert roles == ["system", "assistant", "system", "user"]
        assert fake_api.last_body["messages"][2]["content"].startswith("CONTEXT:")

    async def test_generalist_has_no_context(self, state_with_prompt, fake_api):
        switch_persona("generalist", state_with_prompt)
        fake_api.reply_with("Hello.")

        await send_chat_message("Hi", None, state_with_prompt)

        roles = [m["role"] for m in fake_api.last_body["messages"]]
        assert roles == ["system", "assistant", "user"]

    async def test_proposal_and_use(self, state, fake_api, sample_prompt_data):
        fake_api.reply_with(sample_prompt_data)

        messages, _, _, button, _, state = await send_chat_message("A lighthouse prompt", None, state)

        assert button["visible"] is True
        assert messages[-1]["content"].startswith("Here is a prompt proposal:")
        assert state.document.is_empty

        result = use_proposal(state)

        assert result[0][-1] == {"role": "assistant", "content": PROMPT_APPLIED_TEXT}
        assert result[2 + STATE].document.order == list(sample_prompt_data)
        assert result[2 + STATE].pending_proposal is None

    async def test_history_is_sent(self, state, fake_api):
        fake_api.reply_with("First answer.")
        fake_api.reply_with("Second answer.")

        await send_chat_message("First", None, state)
        await send_chat_message("Second", None, state)

        contents = [m["content"] for m in fake_api.last_body["messages"]]
        assert contents[-3] == [{"type": "text", "text": "First"}]
        assert contents[-2] == "First answer."

    async def test_request_failure_answered_in_chat(self, state, fake_api):
        fake_api.reply_status(500)

        messages, *_ = await send_chat_message("Hi", None, state)

        assert messages[-1]["content"].startswith("An error occurred:")

    async def test_error_notice_not_sent_on_retry(self, state, fake_api):
        fake_api.reply_status(500)
        await send_chat_message("Hi", None, state)
        fake_api.reply_with("Hello again.")

        messages, *_ = await send_chat_message("Hi", None, state)

        sent = [m["content"] for m in fake_api.last_body["messages"]]
        assert not any(isinstance(c, str) and c.startswith("An error occurred:") for c in sent)
        assert any(m["content"].startswith("An error occurred:") for m in messages)

    async def test_empty_message(self, state, fake_api):
        _, _, _, _, status, _ = await send_chat_message("  ", None, state)

        assert "Validation Error" in status
        assert fake_api.requests == []

    def test_new_conversation(self, state):
        state.chat.append("expert", state.chat.turns("expert")[0])

        messages, _, state = new_conversation(state)

        assert len(messages) == 1


class TestSettingsHandlers:
    """Tests for the settings handlers."""

    def test_load_unconfigured(self, client, test_config):
        with patch("promptforge.ui.state.config", test_config), \
             patch("promptforge.ui.handlers.settings.config", test_config):
            api_key, choice, custom, status, state = load_settings_view(UIState(client=client))

        assert api_key == ""
        assert choice == "premium"
        assert "No API key" in status

    def test_load_custom_model(self, state):
        state.api_config = state.api_config.model_copy(update={"model": "anthropic/claude-x"})

        api_key, choice, custom, status, _ = load_settings_view(state)

        assert api_key == "sk-or-test-key"
        assert choice == "custom"
        assert custom["value"] == "anthropic/claude-x"
        assert custom["visible"] is True

    def test_save(self, state, test_config):
        with patch("promptforge.ui.state.config", test_config), \
             patch("promptforge.ui.handlers.settings.config", test_config):
            status, state = save_settings("sk-or-new", "free", None, state)

        assert "Settings saved" in status
        assert state.api_config.model == test_config.free_model_id
        assert load_api_config(test_config.settings_file).model == test_config.free_model_id

    def test_save_without_custom_model(self, state, test_config):
        with patch("promptforge.ui.state.config", test_config), \
             patch("promptforge.ui.handlers.settings.config", test_config):
            status, state = save_settings("sk-or-new", "custom", "", state)

        assert "custom model identifier" in status
        assert not test_config.settings_file.exists()

    async def test_load_catalog(self, state, fake_api):
        fake_api.reply_json(
            {
                "data": [
                    {"id": "paid", "name": "Paid", "pricing": {"prompt": "0.001", "completion": "0.002"}},
                    {"id": "free", "name": "Free", "pricing": {"prompt": "0", "completion": "0"}},
                ]
            }
        )

        update, status, state = await load_model_catalog(state)

        assert [value for _, value in update["choices"]] == ["free", "paid"]
        assert "2 models" in status
