"""
Unit tests for Folio configuration management.

Tests configuration loading, validation, and manipulation.
"""

import json
import tempfile
from pathlib import Path

import pytest
import yaml

from folio.config.defaults import DEFAULT_CONFIG, get_default_config_yaml
from folio.config.manager import ConfigManager, ValidationResult
from folio.config.models import (
    FolioConfig,
    LintConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    OutputConfig,
    OutputFormat,
    PostsConfig,
)


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_init(self) -> None:
        """Test ConfigManager initialization."""
        manager = ConfigManager()
        assert manager.is_loaded is False
        assert manager.config_file is None

    def test_load_defaults(self) -> None:
        """Test loading with default configuration."""
        manager = ConfigManager()
        manager.load()
        assert manager.is_loaded is True
        assert manager.get("posts.directory") == "content/_posts"
        assert manager.get("lint.required_fields") == ["layout", "title", "description", "date"]

    def test_settings_load_lazily(self) -> None:
        """Test that the first lookup loads the settings."""
        manager = ConfigManager()
        settings = manager.settings
        assert manager.is_loaded is True
        assert manager.settings is settings
        assert settings.get("posts.directory") == "content/_posts"

    def test_get_with_default(self) -> None:
        """Test getting value with default fallback."""
        manager = ConfigManager()
        manager.load()
        assert manager.get("nonexistent.key", "default_value") == "default_value"

    def test_set_value(self) -> None:
        """Test setting configuration value."""
        manager = ConfigManager()
        manager.load()
        manager.set("lint.strict", True)
        assert manager.get("lint.strict") is True
        assert manager.model().lint.strict is True

    def test_to_dict_lowercase_keys(self) -> None:
        """Test exporting configuration as a plain dictionary."""
        manager = ConfigManager()
        manager.load()
        config_dict = manager.to_dict()
        assert "lint" in config_dict
        assert "LINT" not in config_dict
        assert isinstance(config_dict["lint"]["file_patterns"], list)
        yaml.safe_dump(config_dict)

    def test_model_defaults(self) -> None:
        """Test that the default configuration validates."""
        manager = ConfigManager()
        manager.load()
        config = manager.model()
        assert isinstance(config, FolioConfig)
        assert config.posts.extension == ".md"

    def test_load_yaml_file(self) -> None:
        """Test loading configuration from YAML file."""
        config_content = {
            "lint": {"allowed_layouts": ["post", "page"]},
            "output": {"format": "json"},
        }
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(config_content, f)
            config_path = Path(f.name)

        try:
            manager = ConfigManager()
            manager.load(config_path)
            assert manager.is_loaded is True
            assert manager.config_file == config_path
            config = manager.model()
            assert config.lint.allowed_layouts == ["post", "page"]
            assert config.output.format == OutputFormat.JSON
            # Keys absent from the file keep their defaults
            assert config.lint.check_code_fences is True
        finally:
            config_path.unlink()

    def test_load_json_file(self) -> None:
        """Test loading configuration from JSON file."""
        config_content = {"posts": {"directory": "_posts"}}
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump(config_content, f)
            config_path = Path(f.name)

        try:
            manager = ConfigManager()
            manager.load(config_path)
            assert manager.get("posts.directory") == "_posts"
        finally:
            config_path.unlink()

    def test_load_nonexistent_file(self) -> None:
        """Test loading from nonexistent file raises error."""
        manager = ConfigManager()
        with pytest.raises(FileNotFoundError):
            manager.load(Path("/nonexistent/config.yaml"))

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that FOLIO_ environment variables override defaults."""
        monkeypatch.setenv("FOLIO_POSTS__DIRECTORY", "blog/_posts")
        manager = ConfigManager()
        manager.load()
        assert manager.get("posts.directory") == "blog/_posts"

    def test_validate_valid_config(self, tmp_path: Path) -> None:
        """Test validation passes for valid configuration."""
        manager = ConfigManager()
        manager.load()
        manager.set("posts.directory", str(tmp_path))
        result = manager.validate()
        assert isinstance(result, ValidationResult)
        assert result.is_valid is True
        assert result.warnings == []

    def test_validate_invalid_log_level(self) -> None:
        """Test validation catches invalid log level."""
        manager = ConfigManager()
        manager.load()
        manager.set("logging.level", "INVALID_LEVEL")
        result = manager.validate()
        assert result.is_valid is False
        assert any(e.startswith("logging.level") for e in result.errors)

    def test_validate_unknown_key(self) -> None:
        """Test validation catches misspelled lint keys."""
        manager = ConfigManager()
        manager.load()
        manager.set("lint.stirct", True)
        result = manager.validate()
        assert result.is_valid is False
        assert any("lint.stirct" in e for e in result.errors)

    def test_validate_missing_posts_directory(self, tmp_path: Path) -> None:
        """Test that a missing posts directory is a warning, fatal in strict mode."""
        manager = ConfigManager()
        manager.load()
        manager.set("posts.directory", str(tmp_path / "missing"))
        assert manager.validate().is_valid is True
        result = manager.validate(strict=True)
        assert result.is_valid is False
        assert any("does not exist" in w for w in result.warnings)

    def test_validate_required_not_known(self, tmp_path: Path) -> None:
        """Test the warning for required fields absent from known_fields."""
        manager = ConfigManager()
        manager.load()
        manager.set("posts.directory", str(tmp_path))
        manager.set("lint.known_fields", ["layout", "title", "date"])
        result = manager.validate()
        assert result.is_valid is True
        assert any("description" in w for w in result.warnings)

    def test_logging_settings_defaults(self) -> None:
        """Test the logging section read for the CLI."""
        manager = ConfigManager()
        manager.load()
        assert manager.logging_settings() == {
            "level": "WARNING",
            "format": "console",
            "output": "stderr",
        }

    def test_logging_settings_unvalidated(self) -> None:
        """Test that an invalid level is passed through as text."""
        manager = ConfigManager()
        manager.load()
        manager.set("logging.level", "LOUD")
        manager.set("logging.output", "folio.log")
        settings = manager.logging_settings()
        assert settings["level"] == "LOUD"
        assert settings["output"] == "folio.log"
        assert settings["format"] == "console"


class TestConfigModels:
    """Tests for Pydantic configuration models."""

    def test_logging_config_defaults(self) -> None:
        """Test LoggingConfig default values."""
        config = LoggingConfig()
        assert config.level == LogLevel.WARNING
        assert config.format == LogFormat.CONSOLE
        assert config.output == "stderr"

    def test_lint_config_defaults(self) -> None:
        """Test LintConfig default values."""
        config = LintConfig()
        assert config.required_fields == ["layout", "title", "description", "date"]
        assert "writing_time" in config.known_fields
        assert config.allowed_layouts == []
        assert config.strict is False

    def test_lint_config_blank_entries(self) -> None:
        """Test that blank field names are rejected."""
        with pytest.raises(ValueError):
            LintConfig(required_fields=["title", " "])

    @pytest.mark.parametrize("extension,expected", [(".md", ".md"), ("markdown", ".markdown")])
    def test_posts_config_extension(self, extension: str, expected: str) -> None:
        """Test extension normalisation."""
        assert PostsConfig(extension=extension).extension == expected

    def test_output_config_defaults(self) -> None:
        """Test OutputConfig default values."""
        config = OutputConfig()
        assert config.format == OutputFormat.CONSOLE
        assert config.show_valid is True

    def test_folio_config_full(self) -> None:
        """Test full FolioConfig model."""
        config = FolioConfig(
            logging=LoggingConfig(level=LogLevel.DEBUG),
            output=OutputConfig(format=OutputFormat.JSON),
            site_url="https://blog.example.com",
        )
        assert config.logging.level == LogLevel.DEBUG
        assert config.output.format == OutputFormat.JSON
        assert config.site_url == "https://blog.example.com"


class TestDefaultConfig:
    """Tests for default configuration."""

    def test_default_config_structure(self) -> None:
        """Test DEFAULT_CONFIG has expected structure."""
        for section in ("logging", "lint", "posts", "output"):
            assert section in DEFAULT_CONFIG

    def test_default_config_matches_models(self) -> None:
        """Test that DEFAULT_CONFIG validates and equals the model defaults."""
        config = FolioConfig.model_validate(DEFAULT_CONFIG)
        assert config.lint == LintConfig()
        assert config.posts == PostsConfig()

    def test_default_yaml_is_valid(self) -> None:
        """Test generated YAML is valid and loads as a configuration."""
        yaml_content = get_default_config_yaml()
        assert "lint:" in yaml_content
        parsed = yaml.safe_load(yaml_content)
        assert isinstance(parsed, dict)
        FolioConfig.model_validate(parsed)


class TestConfigMerging:
    """Tests for configuration merging behavior."""

    def test_file_overrides_defaults(self) -> None:
        """Test that file values override defaults."""
        config_content = {"logging": {"level": "ERROR"}}
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(config_content, f)
            config_path = Path(f.name)

        try:
            manager = ConfigManager()
            manager.load(config_path)
            assert manager.get("logging.level") == "ERROR"
            assert manager.get("logging.format") == "console"
        finally:
            config_path.unlink()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
