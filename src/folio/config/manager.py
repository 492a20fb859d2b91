"""
Configuration loading for Folio.

Settings are merged from, highest precedence first:

1. ``FOLIO_*`` environment variables (``FOLIO_LINT__STRICT=true``)
2. the file given with ``--config``, or the first of ``settings.yaml``,
   ``settings.json`` and ``settings.toml`` found in the working directory
3. :data:`folio.config.defaults.DEFAULT_CONFIG`
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dynaconf import Dynaconf
from pydantic import ValidationError

from folio.config.defaults import DEFAULT_CONFIG
from folio.config.models import FolioConfig
from folio.logging import get_logger

logger = get_logger(__name__)

SEARCHED_FILES = ("settings.yaml", "settings.json", "settings.toml")


@dataclass
class ValidationResult:
    """Outcome of ``ConfigManager.validate``."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class ConfigManager:
    """
    Merged view over Folio's settings sources.

    Values are read lazily: the first ``get``, ``set``, ``validate`` or
    ``to_dict`` loads the searched settings files if ``load`` was not called.

    Usage:
        manager = ConfigManager()
        manager.load(Path("folio.yaml"))
        if manager.get("lint.strict"):
            ...
        config = manager.model()
    """

    def __init__(self) -> None:
        self._settings: Optional[Dynaconf] = None
        self._config_file: Optional[Path] = None

    def load(self, config_path: Optional[Path] = None) -> Dynaconf:
        """
        Read settings from ``config_path`` (or the searched files) and the
        environment, then fill the gaps from the defaults.

        Raises:
            FileNotFoundError: If ``config_path`` is given but missing

        Returns:
            The loaded settings, also kept for later lookups
        """
        if config_path is not None and not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        self._config_file = config_path
        settings = Dynaconf(
            envvar_prefix="FOLIO",
            settings_files=[str(config_path)] if config_path else list(SEARCHED_FILES),
            environments=False,
            load_dotenv=True,
            merge_enabled=True,
            default_settings_paths=[],
        )
        _fill_missing(settings, DEFAULT_CONFIG)
        self._settings = settings

        logger.debug("configuration_loaded", config_file=str(config_path) if config_path else None)
        return settings

    @property
    def settings(self) -> Dynaconf:
        if self._settings is None:
            return self.load()
        return self._settings

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``"posts.directory"``."""
        return self.settings.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Override a dotted key for the lifetime of this manager."""
        self.settings.set(key, value)

    def validate(self, strict: bool = False) -> ValidationResult:
        """
        Check the merged settings against :class:`FolioConfig` and for
        combinations that load but will not behave as intended.

        Schema problems are errors. Inconsistencies are warnings, which
        ``strict`` turns into failures.
        """
        errors = self._schema_errors()
        warnings = self._consistency_warnings()
        is_valid = not errors and not (strict and warnings)
        return ValidationResult(is_valid=is_valid, errors=errors, warnings=warnings)

    def _schema_errors(self) -> list[str]:
        try:
            FolioConfig.model_validate(self.to_dict())
        except ValidationError as e:
            return [
                ".".join(str(part) for part in error["loc"]) + f": {error['msg']}"
                for error in e.errors()
            ]
        return []

    def _consistency_warnings(self) -> list[str]:
        warnings = []

        known = set(self.get("lint.known_fields", []) or [])
        not_known = [name for name in self.get("lint.required_fields", []) or [] if name not in known]
        if not_known:
            warnings.append(
                "Required fields missing from lint.known_fields: " + ", ".join(not_known)
            )

        posts_dir = Path(str(self.get("posts.directory", "content/_posts")))
        if not posts_dir.exists():
            warnings.append(f"Posts directory does not exist: {posts_dir}")

        return warnings

    def model(self) -> FolioConfig:
        """
        The merged settings as a :class:`FolioConfig`.

        Raises:
            pydantic.ValidationError: If the merged settings are invalid
        """
        return FolioConfig.model_validate(self.to_dict())

    def logging_settings(self) -> dict[str, str]:
        """
        The ``logging`` section as plain strings.

        Read without schema validation so that the CLI can set up logging
        before it reports configuration errors.
        """
        section = self.to_dict().get("logging")
        if not isinstance(section, dict):
            section = {}
        defaults = DEFAULT_CONFIG["logging"]
        return {key: str(section.get(key) or default) for key, default in defaults.items()}

    def to_dict(self) -> dict:
        """The merged settings as nested dictionaries with lowercase keys."""
        return _lowercase_keys(self.settings.as_dict())

    @property
    def config_file(self) -> Optional[Path]:
        """The explicitly loaded settings file, if any."""
        return self._config_file

    @property
    def is_loaded(self) -> bool:
        return self._settings is not None


def _fill_missing(settings: Dynaconf, defaults: dict, prefix: str = "") -> None:
    for key, value in defaults.items():
        dotted = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            _fill_missing(settings, value, dotted)
        elif not settings.exists(dotted):
            settings.set(dotted, value)


def _lowercase_keys(value: Any) -> Any:
    # Dynaconf upper-cases top-level keys in as_dict()
    if isinstance(value, dict):
        return {str(k).lower(): _lowercase_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_lowercase_keys(item) for item in value]
    return value
