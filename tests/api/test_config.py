"""Tests for configuration classes."""

import dataclasses
import os
import pytest
from decimal import Decimal
from unittest.mock import patch

from config import (
    AppConfig,
    CORSConfig,
    GameConfig,
    RateLimitConfig,
    RedisConfig,
    SecurityConfig,
    _parse_cors_origins,
)
from blackjack.game import RoundController


class TestCORSConfig:
    """Tests for CORSConfig class."""

    def test_cors_default_origins(self):
        """Test that default CORS origins are set correctly."""
        with patch.dict(os.environ, {}, clear=True):
            config = CORSConfig()

            assert config.allowed_origins == ["http://localhost:8000"]

    def test_cors_parses_env_var_with_whitespace(self):
        """Test that CORS origins are parsed and stripped."""
        env_origins = "  http://example.com  ,http://localhost:3000,, "
        with patch.dict(os.environ, {"CORS_ORIGINS": env_origins}):
            origins = _parse_cors_origins()

            assert origins == ["http://example.com", "http://localhost:3000"]


class TestRateLimitConfig:
    """Tests for RateLimitConfig class."""

    def test_rate_limit_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = RateLimitConfig()

            assert config.enabled is True
            assert config.requests_per_minute == 60

    def test_rate_limit_from_env(self):
        with patch.dict(
            os.environ,
            {"RATE_LIMIT_ENABLED": "FALSE", "RATE_LIMIT_RPM": "120"},
        ):
            config = RateLimitConfig()

            assert config.enabled is False
            assert config.requests_per_minute == 120


class TestSecurityConfig:
    """Tests for SecurityConfig class."""

    def test_secret_key_auto_generates(self):
        with patch.dict(os.environ, {}, clear=True):
            config = SecurityConfig()

            assert len(config.secret_key) > 0

    def test_secret_key_from_env(self):
        with patch.dict(os.environ, {"SECRET_KEY": "my-super-secret-key-12345"}):
            config = SecurityConfig()

            assert config.secret_key == "my-super-secret-key-12345"


class TestRedisConfig:
    """Tests for RedisConfig class."""

    def test_redis_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = RedisConfig()

            assert config.enabled is False
            assert config.url == "redis://localhost:6379/0"
            assert config.password is None

    def test_redis_from_env(self):
        with patch.dict(
            os.environ,
            {
                "REDIS_ENABLED": "true",
                "REDIS_HOST": "redis.example.com",
                "REDIS_PORT": "6380",
                "REDIS_DB": "1",
                "REDIS_PASSWORD": "secret123",
            },
        ):
            config = RedisConfig()

            assert config.enabled is True
            assert config.url == "redis://:secret123@redis.example.com:6380/1"


class TestGameConfig:
    """Tests for GameConfig class."""

    def test_game_config_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = GameConfig()

            assert config.decks_in_shoe == 6
            assert config.starting_balance == Decimal("1000")
            assert config.min_bet == Decimal("1")
            assert config.auto_play_dealer is True

    def test_game_config_from_env(self):
        with patch.dict(
            os.environ,
            {
                "BLACKJACK_DECKS": "2",
                "BLACKJACK_STARTING_BALANCE": "250.50",
                "BLACKJACK_MIN_BET": "5",
            },
        ):
            config = GameConfig()

            assert config.decks_in_shoe == 2
            assert config.starting_balance == Decimal("250.50")
            assert config.min_bet == Decimal("5")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"decks_in_shoe": 0},
            {"starting_balance": Decimal("-1")},
            {"min_bet": Decimal("0")},
        ],
    )
    def test_game_config_rejects_bad_values(self, overrides):
        with pytest.raises(ValueError):
            GameConfig(**overrides)

    def test_game_config_frozen(self):
        config = GameConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.decks_in_shoe = 8

    def test_table_from_config(self):
        config = GameConfig(
            decks_in_shoe=2,
            starting_balance=Decimal("300"),
            min_bet=Decimal("5"),
        )

        table = RoundController.from_config(config)
        snapshot = table.snapshot()

        assert snapshot.balance == Decimal("300")
        assert snapshot.cards_remaining == 104
        assert table.min_bet == Decimal("5")
        assert table.deal(4).refusal is not None


class TestAppConfig:
    """Tests for AppConfig class."""

    def test_app_config_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = AppConfig()

            assert config.debug is False
            assert config.host == "0.0.0.0"
            assert config.port == 8000
            assert config.log_level == "INFO"
            assert config.session_ttl == 3600
            assert config.session_cleanup_interval == 300

    def test_app_config_from_env(self):
        with patch.dict(
            os.environ,
            {"DEBUG": "true", "LOG_LEVEL": "debug", "SESSION_CLEANUP_INTERVAL": "30"},
        ):
            config = AppConfig()

            assert config.debug is True
            assert config.log_level == "DEBUG"
            assert config.session_cleanup_interval == 30

    def test_app_config_has_nested_configs(self):
        config = AppConfig()

        assert isinstance(config.redis, RedisConfig)
        assert isinstance(config.game, GameConfig)
        assert isinstance(config.cors, CORSConfig)
        assert isinstance(config.rate_limit, RateLimitConfig)
        assert isinstance(config.security, SecurityConfig)
