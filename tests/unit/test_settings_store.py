"""Unit tests for API settings persistence."""

import json

import pytest

from promptforge.core.config import FREE_MODEL_ID, PREMIUM_MODEL_ID
from promptforge.core.errors import SettingsError
from promptforge.core.models import ApiConfig
from promptforge.core.settings_store import (
    choice_for_model,
    load_api_config,
    migrate_legacy_config,
    resolve_model_choice,
    save_api_config,
)


class TestMigrateLegacyConfig:
    """Tests for migrate_legacy_config function."""

    def test_current_shape_unchanged(self):
        raw = {"apiKey": "k", "model": "x/y"}
        assert migrate_legacy_config(raw) == raw

    def test_legacy_premium(self):
        """The premium selection maps to the premium model id."""
        assert migrate_legacy_config({"apiKey": "k", "modelSelection": "premium"}) == {
            "apiKey": "k",
            "model": PREMIUM_MODEL_ID,
        }

    def test_legacy_other_selection(self):
        """Any other selection maps to the free model id."""
        assert migrate_legacy_config({"apiKey": "k", "modelSelection": "gratuit"}) == {
            "apiKey": "k",
            "model": FREE_MODEL_ID,
        }

    @pytest.mark.parametrize("raw", [{}, {"apiKey": "k"}, {"model": "x"}, [], "text", None])
    def test_unrecognised(self, raw):
        assert migrate_legacy_config(raw) is None


class TestLoadSave:
    """Tests for load_api_config and save_api_config."""

    def test_round_trip(self, temp_dir, api_config):
        """A saved config loads back equal, parent directory created."""
        path = temp_dir / "nested" / "api_config.json"

        save_api_config(path, api_config)

        assert json.loads(path.read_text()) == {"apiKey": "sk-or-test-key", "model": "openai/gpt-4.1-mini"}
        assert load_api_config(path) == api_config

    def test_missing_file(self, temp_dir):
        assert load_api_config(temp_dir / "missing.json") is None

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "api_config.json"
        path.write_text("{not json")

        assert load_api_config(path) is None

    def test_unrecognised_blob(self, temp_dir):
        path = temp_dir / "api_config.json"
        path.write_text(json.dumps({"token": "abc"}))

        assert load_api_config(path) is None

    def test_legacy_blob_is_migrated_and_rewritten(self, temp_dir):
        """A legacy blob loads as the new shape and is saved back."""
        path = temp_dir / "api_config.json"
        path.write_text(json.dumps({"apiKey": "k", "modelSelection": "premium"}))

        api_config = load_api_config(path)

        assert api_config.model == PREMIUM_MODEL_ID
        assert json.loads(path.read_text()) == {"apiKey": "k", "model": PREMIUM_MODEL_ID}

    def test_legacy_blob_without_key(self, temp_dir):
        """A legacy blob with no key is unusable."""
        path = temp_dir / "api_config.json"
        path.write_text(json.dumps({"modelSelection": "premium"}))

        assert load_api_config(path) is None


class TestModelChoice:
    """Tests for choice_for_model and resolve_model_choice."""

    def test_choice_for_model(self):
        assert choice_for_model(PREMIUM_MODEL_ID) == "premium"
        assert choice_for_model(FREE_MODEL_ID) == "free"
        assert choice_for_model("anthropic/some-model") == "custom"

    def test_resolve_premium(self):
        assert resolve_model_choice(" key ", "premium") == ApiConfig(api_key="key", model=PREMIUM_MODEL_ID)

    def test_resolve_free(self):
        assert resolve_model_choice("key", "free").model == FREE_MODEL_ID

    def test_resolve_custom(self):
        assert resolve_model_choice("key", "custom", " x/y ").model == "x/y"

    def test_blank_key(self):
        with pytest.raises(SettingsError, match="API key"):
            resolve_model_choice("  ", "premium")

    def test_blank_custom_model(self):
        with pytest.raises(SettingsError, match="custom model"):
            resolve_model_choice("key", "custom", "")

    def test_unknown_choice(self):
        with pytest.raises(SettingsError, match="select a model"):
            resolve_model_choice("key", "other")
