"""Unit tests for configuration loading."""

import pytest
from pydantic import ValidationError

from holder_intel.models.config import HolderIntelConfig


class TestHolderIntelConfig:
    """Tests for HolderIntelConfig."""

    def test_defaults(self):
        config = HolderIntelConfig(_env_file=None)

        assert config.max_holders == 30
        assert config.address_min_length == 20
        assert config.token_info_ttl_seconds == 60.0
        assert config.holders_ttl_seconds == 60.0
        assert config.trending_ttl_seconds == 30.0
        assert config.countdown_seconds == 180
        assert config.countdown_tick_seconds == 1.0
        assert config.privacy_mode is False
        assert config.preferred_chain == "solana"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("HOLDER_INTEL_BACKEND_URL", "http://localhost:8000/")
        monkeypatch.setenv("HOLDER_INTEL_MAX_HOLDERS", "10")
        monkeypatch.setenv("HOLDER_INTEL_PRIVACY_MODE", "true")

        config = HolderIntelConfig(_env_file=None)

        assert config.backend_base_url == "http://localhost:8000"
        assert config.max_holders == 10
        assert config.privacy_mode is True

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("HOLDER_INTEL_ACCESS_CODE=ORB-42\nHOLDER_INTEL_LOG_FORMAT=json\n")

        config = HolderIntelConfig(_env_file=str(env_file))

        assert config.access_code == "ORB-42"
        assert config.log_format == "json"

    def test_rejects_invalid_values(self):
        with pytest.raises(ValidationError):
            HolderIntelConfig(max_holders=0, _env_file=None)

        with pytest.raises(ValidationError):
            HolderIntelConfig(request_timeout=0, _env_file=None)

    @pytest.mark.parametrize("identifier,expected", [
        ("DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", True),
        ("BONK", False),
        ("a" * 20, False),
        ("a" * 21, True),
    ])
    def test_is_address(self, identifier, expected):
        config = HolderIntelConfig(_env_file=None)

        assert config.is_address(identifier) is expected
