"""
Tests for application settings.
"""

import pytest
from pydantic import ValidationError

from config.settings import Settings


class TestApiKeySetting:

    def test_api_key_is_required(self, monkeypatch):
        monkeypatch.delenv("API_KEY", raising=False)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_empty_api_key_rejected(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "s3cret-key")

        assert Settings(_env_file=None).api_key == "s3cret-key"
