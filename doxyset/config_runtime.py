"""Runtime configuration for doxyset - centralized configuration management."""

import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from doxyset.exceptions import ConfigError
from doxyset.utils.constants import CONFIG_FILE, ENV_PREFIX, EXTRACTION_DIR, INTERMEDIATE_DIR
from doxyset.utils.logging import logger

DEFAULTS = {
    "paths": {
        "input_dir": "./doxygen/xml",
        "output_dir": "./docs",
        "doxyfile": "",
        "doxygen": "doxygen",
    },
    "output": {
        "keep_intermediate": False,
        "generators": ["html", "docset"],
        "file_extension": ".html",
        "project_name": "Documentation",
        "bundle_id": "org.doxygen.Project",
    },
    "limits": {
        "workers": 4,
        "extraction_timeout": 600,
    },
}

SECTIONS = tuple(DEFAULTS)


def _coerce_env(value: str, default: Any) -> Any:
    """Convert an environment string to the type of the default value."""
    if isinstance(default, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    if isinstance(default, list):
        return [v.strip() for v in value.split(",") if v.strip()]
    return value


def _matches_default(value: Any, default: Any) -> bool:
    """True when a config.json value has the type of its default (bools are not ints)."""
    if isinstance(value, bool) and not isinstance(default, bool):
        return False
    return isinstance(value, type(default))


def load_runtime_config(root: str = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .doxyset/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (DOXYSET_<SECTION>_<KEY>)
    2. .doxyset/config.json file
    3. Built-in defaults

    Args:
        root: Root directory to look for config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / CONFIG_FILE
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in SECTIONS:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and _matches_default(value, cfg[section][key]):
                                cfg[section][key] = value
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config file from {path}: {e}")
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"{ENV_PREFIX}{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                try:
                    cfg[section][key] = _coerce_env(os.environ[env_var], cfg[section][key])
                except ValueError:
                    logger.warning(f"Ignoring invalid value for {env_var}: {os.environ[env_var]!r}")

    return cfg


@dataclass(frozen=True)
class ConversionConfig:
    """Resolved, read-only options consumed by a conversion run."""

    input_dir: Path
    output_dir: Path
    keep_intermediate: bool = False
    generators: tuple[str, ...] = ("html", "docset")
    file_extension: str = ".html"
    workers: int = 4
    project_name: str = "Documentation"
    bundle_id: str = "org.doxygen.Project"
    doxyfile: Path | None = None
    doxygen_path: str = "doxygen"
    extraction_timeout: int = 600

    def __post_init__(self):
        if not self.file_extension.startswith("."):
            raise ConfigError(
                f"File extension must start with '.': {self.file_extension!r}",
                identifier="file_extension",
            )
        if isinstance(self.workers, bool) or self.workers < 1:
            raise ConfigError(f"Worker count must be positive: {self.workers}", identifier="workers")
        if len(set(self.generators)) != len(self.generators):
            raise ConfigError(
                f"Generator listed more than once: {', '.join(self.generators)}",
                identifier="generators",
            )

    @classmethod
    def from_runtime(cls, cfg: dict[str, Any], **overrides: Any) -> "ConversionConfig":
        """Build a config from load_runtime_config() output plus CLI overrides.

        Overrides whose value is None are ignored so unset CLI options fall
        through to the file/environment layers.
        """
        paths = cfg["paths"]
        output = cfg["output"]
        limits = cfg["limits"]

        values: dict[str, Any] = {
            "input_dir": Path(paths["input_dir"]),
            "output_dir": Path(paths["output_dir"]),
            "keep_intermediate": output["keep_intermediate"],
            "generators": tuple(output["generators"]),
            "file_extension": output["file_extension"],
            "workers": limits["workers"],
            "project_name": output["project_name"],
            "bundle_id": output["bundle_id"],
            "doxyfile": Path(paths["doxyfile"]) if paths["doxyfile"] else None,
            "doxygen_path": paths["doxygen"],
            "extraction_timeout": limits["extraction_timeout"],
        }

        for key, value in overrides.items():
            if key not in values:
                raise ConfigError(f"Unknown configuration option: {key}", identifier=key)
            if value is None:
                continue
            if key == "doxyfile":
                value = Path(value) if value else None
            elif key in ("input_dir", "output_dir"):
                value = Path(value)
            elif key == "generators":
                value = tuple(value)
            values[key] = value

        return cls(**values)

    @property
    def extraction_dir(self) -> Path:
        """Working directory used when doxygen is run by doxyset itself."""
        return self.output_dir / EXTRACTION_DIR

    @property
    def intermediate_dir(self) -> Path:
        """Directory holding retained cleaned documents."""
        return self.output_dir / INTERMEDIATE_DIR
