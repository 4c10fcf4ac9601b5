"""
Tests for configuration loading.
"""

import os

import pytest

from dupcheck.config import MatcherConfig, load_config, load_env


class TestMatcherConfig:
    """Test defaults and validation."""

    def test_defaults(self):
        config = MatcherConfig()
        assert config.min_query_length == 8
        assert config.max_query_tokens == 10
        assert config.token_threshold == 0.18
        assert config.dice_threshold == 0.32
        assert config.max_matches == 5
        assert config.pool_limit == 200

    def test_threshold_out_of_range(self):
        with pytest.raises(ValueError):
            MatcherConfig(token_threshold=1.5)
        with pytest.raises(ValueError):
            MatcherConfig(dice_threshold=-0.1)

    def test_limits_must_be_positive(self):
        with pytest.raises(ValueError):
            MatcherConfig(max_matches=0)


class TestLoadConfig:
    """Test reading DUPCHECK_* variables."""

    def test_empty_environment_gives_defaults(self):
        assert load_config({}) == MatcherConfig()

    def test_overrides(self):
        config = load_config({
            "DUPCHECK_TOKEN_THRESHOLD": "0.25",
            "DUPCHECK_DICE_THRESHOLD": "0.4",
            "DUPCHECK_MIN_QUERY_LENGTH": "10",
            "DUPCHECK_MAX_MATCHES": "3",
            "DUPCHECK_POOL_LIMIT": " 500 ",
        })
        assert config.token_threshold == 0.25
        assert config.dice_threshold == 0.4
        assert config.min_query_length == 10
        assert config.max_matches == 3
        assert config.pool_limit == 500
        assert config.max_query_tokens == 10

    def test_blank_values_ignored(self):
        assert load_config({"DUPCHECK_MAX_MATCHES": ""}) == MatcherConfig()

    def test_invalid_number(self):
        with pytest.raises(ValueError, match="DUPCHECK_MAX_MATCHES"):
            load_config({"DUPCHECK_MAX_MATCHES": "fünf"})

    def test_integer_field_rejects_float(self):
        with pytest.raises(ValueError):
            load_config({"DUPCHECK_MIN_QUERY_LENGTH": "7.5"})

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            load_config({"DUPCHECK_TOKEN_THRESHOLD": "2"})

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("DUPCHECK_DICE_THRESHOLD", "0.5")
        assert load_config().dice_threshold == 0.5


class TestLoadEnv:
    """Test .env loading."""

    def test_missing_file(self, tmp_path):
        assert load_env(tmp_path / ".env") is False

    def test_loads_file_without_overriding(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("DUPCHECK_TEST_PRESET=from-file\nDUPCHECK_TEST_NEW=loaded\n")
        monkeypatch.setenv("DUPCHECK_TEST_PRESET", "from-env")

        try:
            assert load_env(env_file) is True
            assert os.environ["DUPCHECK_TEST_PRESET"] == "from-env"
            assert os.environ["DUPCHECK_TEST_NEW"] == "loaded"
        finally:
            os.environ.pop("DUPCHECK_TEST_NEW", None)
