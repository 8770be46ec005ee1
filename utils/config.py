# utils/config.py
"""Application config: OmegaConf-backed, loaded once, read by dotted path."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Sequence

from omegaconf import DictConfig, OmegaConf

from utils.errors import ConfigurationError
from utils.logger import Logger
from utils.settings import logging as LOGCFG
from utils.settings import paths

DEFAULT_CONFIG_PATH = paths.APP_CONFIG


class ConfigLoader:
    """Strategy interface for config loading."""

    def load(self, filename: str | Path) -> DictConfig:
        raise NotImplementedError


class YamlConfigLoader(ConfigLoader):
    """
    Read a YAML file. ``overrides`` are ``key.path=value`` strings merged on
    top, e.g. ``["cameras.table_crop.src=rs2"]``.
    """

    def __init__(self, overrides: Sequence[str] = ()) -> None:
        self.overrides = list(overrides)

    def load(self, filename: str | Path) -> DictConfig:
        cfg = OmegaConf.load(filename)
        if self.overrides:
            cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(self.overrides))
        return cfg


class DictConfigLoader(ConfigLoader):
    """Serve an in-memory mapping, mostly for tests."""

    def __init__(self, data: Dict[str, Any]) -> None:
        self.data = data

    def load(self, filename: str | Path) -> DictConfig:
        return OmegaConf.create(self.data)


class Config:
    _cfg: DictConfig | None = None
    _loader: ConfigLoader = YamlConfigLoader()
    _logger = Logger.get_logger("utils.config")

    @classmethod
    def load(
        cls, filename: Path | str = DEFAULT_CONFIG_PATH, force_reload: bool = False
    ) -> None:
        """Load configuration from ``filename`` unless already loaded."""
        if cls._cfg is not None and not force_reload:
            return
        try:
            cls._cfg = cls._loader.load(filename)
        except Exception as e:
            cls._logger.error(f"Failed to load config {filename}: {e}")
            raise
        cls._logger.info(f"Config loaded from {filename}")

        logging_cfg = cls.get("logging", {})
        Logger.configure(
            level=logging_cfg.get("level", LOGCFG.level),
            log_dir=logging_cfg.get("log_dir", LOGCFG.log_dir),
            json_format=logging_cfg.get("json", LOGCFG.json),
        )

    @classmethod
    def get(cls, path: str, default: Any | None = None) -> Any:
        """
        Value at dotted ``path`` as plain Python data (dicts and lists), or
        ``default`` if any key along the way is missing.
        """
        if cls._cfg is None:
            cls.load()
        value = OmegaConf.select(cls._cfg, path, default=None)
        if value is None:
            cls._logger.debug(f"Config key {path} not found")
            return default
        if OmegaConf.is_config(value):
            return OmegaConf.to_container(value, resolve=True)
        return value

    @classmethod
    def section(cls, path: str) -> Dict[str, Any]:
        """Mapping at ``path``; a missing or non-mapping entry is an error."""
        value = cls.get(path)
        if not isinstance(value, dict):
            raise ConfigurationError(f"config section {path!r} is missing")
        return value

    @classmethod
    def set_loader(cls, loader: ConfigLoader) -> None:
        """Replace the config loader strategy and drop loaded data."""
        cls._loader = loader
        cls._cfg = None
        cls._logger.info(f"Config loader set to {loader.__class__.__name__}")
