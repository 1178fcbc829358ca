"""Unit tests for settings and storage configuration validation"""

import pytest
from pydantic import ValidationError

from docshelf.config import DEV_SECRET_KEY, Settings
from docshelf.infrastructure.storage.storage_config import StorageConfig, validate_storage_config


class TestSettings:
    def test_app_url_trailing_slash_stripped(self):
        assert Settings(APP_URL="https://docs.example.test/").APP_URL == "https://docs.example.test"

    def test_log_level_normalized(self):
        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            Settings(LOG_LEVEL="chatty")

    def test_attempts_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(ANALYSIS_MAX_ATTEMPTS=0)

    def test_production_requires_secret(self):
        with pytest.raises(ValidationError, match="SECRET_KEY"):
            Settings(ENVIRONMENT="production", SECRET_KEY=DEV_SECRET_KEY)


class TestStorageConfig:
    def make(self, **overrides):
        values = dict(
            endpoint_url="http://localhost:9000",
            access_key="key",
            secret_key="secret",
            bucket_name="docshelf",
        )
        values.update(overrides)
        return StorageConfig(**values)

    def test_valid(self):
        validate_storage_config(self.make())

    def test_reports_every_problem(self):
        with pytest.raises(ValueError) as exc_info:
            validate_storage_config(self.make(access_key="", bucket_name=""))

        assert "access_key is required" in str(exc_info.value)
        assert "bucket_name is required" in str(exc_info.value)

    def test_bad_endpoint_scheme(self):
        with pytest.raises(ValueError, match="endpoint_url"):
            validate_storage_config(self.make(endpoint_url="localhost:9000"))

    def test_nested_namespace_rejected(self):
        with pytest.raises(ValueError, match="namespace"):
            validate_storage_config(self.make(namespace="a/b"))
