"""
Configuration for the host driver.

Supports YAML and JSON configuration files for selecting rules, overriding
severities and tuning the engine.
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, Any, Optional, List

import yaml


# Default configuration file names to search for
CONFIG_FILE_NAMES = [
    ".sqlinterp.yaml",
    ".sqlinterp.yml",
    ".sqlinterp.json",
]


@dataclass
class RuleSetConfig:
    """Configuration for the rule set."""
    enabled: List[str] = field(default_factory=list)
    disabled: List[str] = field(default_factory=list)
    severity_overrides: Dict[str, str] = field(default_factory=dict)


@dataclass
class ScanConfig:
    """
    Main configuration.

    Example YAML config:

    ```yaml
    scan:
      max_workers: 4
      severity_threshold: high

    rules:
      disabled: []
      severity_overrides:
        PreventSQLInjection: high

    log_level: INFO
    ```
    """
    max_workers: int = 4
    severity_threshold: str = "info"  # critical, high, medium, low, info
    rules: RuleSetConfig = field(default_factory=RuleSetConfig)
    log_level: str = "WARNING"

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to a dictionary."""
        return asdict(self)

    def to_engine_config(self) -> Dict[str, Any]:
        """Convert to engine configuration format."""
        return {
            "max_workers": self.max_workers,
            "severity_threshold": self.severity_threshold,
            "rules": {
                "enabled": self.rules.enabled,
                "disabled": self.rules.disabled,
                "severity_overrides": self.rules.severity_overrides,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanConfig":
        """Create config from a dictionary."""
        data = dict(data)

        # Handle nested 'scan' section
        if "scan" in data and isinstance(data["scan"], dict):
            data.update(data.pop("scan"))

        if "rules" in data and isinstance(data["rules"], dict):
            known_rule_fields = set(RuleSetConfig.__dataclass_fields__)
            data["rules"] = RuleSetConfig(
                **{k: v for k, v in data["rules"].items() if k in known_rule_fields}
            )

        # Filter to only known fields
        known_fields = set(cls.__dataclass_fields__)
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        return cls(**filtered_data)


def load_config(path: str) -> Dict[str, Any]:
    """
    Load configuration from a file.

    Supports YAML and JSON formats.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    content = path.read_text(encoding="utf-8")

    if path.suffix == ".json":
        return json.loads(content)
    return yaml.safe_load(content) or {}


def find_config(start_path: str = ".") -> Optional[str]:
    """
    Find a configuration file by searching up the directory tree.

    Returns the path to the first config file found, or None.
    """
    current = Path(start_path).resolve()

    while current != current.parent:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.exists():
                return str(config_path)
        current = current.parent

    return None


def load_scan_config(path: Optional[str] = None, start_dir: str = ".") -> ScanConfig:
    """
    Load a ScanConfig from a file or create a default one.

    If path is None, searches for a config file starting from start_dir.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return ScanConfig()

    return ScanConfig.from_dict(load_config(path))


def configure_logging(level: str = "WARNING") -> None:
    """Send the package's log records to stderr at the given level."""
    logger = logging.getLogger("sqlinterp")
    logger.setLevel(level.upper())

    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
