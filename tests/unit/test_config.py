"""Unit tests for environment-driven settings."""

from pydantic import ValidationError
import pytest

from kb_matcher.config import Settings, get_settings


@pytest.mark.unit
class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.match_threshold == 0.4
        assert settings.chat_match_threshold == 0.12
        assert settings.tfidf_weight == 0.6
        assert settings.fuzzy_weight == 0.4
        assert settings.fuzzy_similarity_threshold == 0.75
        assert settings.snippet_max_length == 300
        assert settings.rate_limit_window_ms == 60_000
        assert settings.rate_limit_max_messages == 5
        assert settings.log_json is True

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MATCH_THRESHOLD", "0.25")
        monkeypatch.setenv("RATE_LIMIT_MAX_MESSAGES", "9")
        monkeypatch.setenv("LOG_JSON", "false")
        settings = Settings()
        assert settings.match_threshold == 0.25
        assert settings.rate_limit_max_messages == 9
        assert settings.log_json is False

    def test_threshold_out_of_range(self):
        with pytest.raises(ValidationError):
            Settings(match_threshold=1.5)

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError, match="must sum to 1.0"):
            Settings(tfidf_weight=0.7, fuzzy_weight=0.4)

    def test_custom_weights(self):
        settings = Settings(tfidf_weight=0.7, fuzzy_weight=0.3)
        assert settings.tfidf_weight + settings.fuzzy_weight == pytest.approx(1.0)

    def test_rate_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(rate_limit_max_messages=0)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
