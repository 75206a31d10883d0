"""Configuration for module metadata generation."""

import logging
import os
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml

from maven_gmm.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = (".maven-gmm.yaml", "maven-gmm.yaml")

MAVEN_VERSION_PATTERN = re.compile(r"Apache Maven (\S+)")


class ConfigLoader(yaml.SafeLoader):
    """SafeLoader that keeps numbers as the text written in the file."""


ConfigLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag not in ("tag:yaml.org,2002:int", "tag:yaml.org,2002:float")
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _text(value) -> Optional[str]:
    return None if value is None else str(value)


@dataclass
class GeneratorConfig:
    """Settings shared by the generator, the pom loader and the CLI."""

    # Creator block
    tool_name: str = "maven"
    tool_version: Optional[str] = None  # None = ask `mvn --version`

    # Component status
    snapshot_suffix: str = "SNAPSHOT"

    # Prefix of every attribute key (org.gradle.status, org.gradle.usage, ...)
    attribute_namespace: str = "org.gradle"

    # Packagings that are platforms/BOMs and get no metadata
    skip_packagings: list[str] = field(default_factory=lambda: ["pom"])

    # pom.xml integration
    plugin_artifact_id: str = "gradle-module-metadata-maven-plugin"
    require_marker: bool = True

    # Output
    output_directory: str = "target/publications/maven"
    module_file_name: str = "module.json"

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: dict) -> "GeneratorConfig":
        """Create config from dictionary.

        YAML turns unquoted values such as ``3.10`` into numbers; every
        string setting is converted back to text.
        """
        skip_packagings = data.get("skip_packagings", ["pom"])
        if isinstance(skip_packagings, str):
            skip_packagings = [skip_packagings]
        tool_version = data.get("tool_version") or os.environ.get("MAVEN_GMM_TOOL_VERSION")
        return cls(
            tool_name=str(data.get("tool_name", "maven")),
            tool_version=_text(tool_version),
            snapshot_suffix=str(data.get("snapshot_suffix", "SNAPSHOT")),
            attribute_namespace=str(data.get("attribute_namespace", "org.gradle")),
            skip_packagings=[str(packaging) for packaging in skip_packagings or []],
            plugin_artifact_id=str(data.get("plugin_artifact_id", "gradle-module-metadata-maven-plugin")),
            require_marker=data.get("require_marker", True),
            output_directory=str(data.get("output_directory", "target/publications/maven")),
            module_file_name=str(data.get("module_file_name", "module.json")),
            log_level=str(data.get("log_level") or os.environ.get("MAVEN_GMM_LOG_LEVEL", "WARNING")),
        )

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "tool_name": self.tool_name,
            "tool_version": self.tool_version,
            "snapshot_suffix": self.snapshot_suffix,
            "attribute_namespace": self.attribute_namespace,
            "skip_packagings": self.skip_packagings,
            "plugin_artifact_id": self.plugin_artifact_id,
            "require_marker": self.require_marker,
            "output_directory": self.output_directory,
            "module_file_name": self.module_file_name,
            "log_level": self.log_level,
        }

    def attribute(self, name: str) -> str:
        """Return the fully qualified attribute key for ``name``."""
        return f"{self.attribute_namespace}.{name}"


def find_config_file(project_dir: Union[str, Path]) -> Optional[Path]:
    """Return the first config file present in ``project_dir``."""
    for name in CONFIG_FILE_NAMES:
        candidate = Path(project_dir) / name
        if candidate.is_file():
            return candidate
    return None


def load_config(
    path: Optional[Union[str, Path]] = None,
    project_dir: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """Load configuration from YAML.

    Args:
        path: Explicit config file. Must exist when given.
        project_dir: Directory searched for ``.maven-gmm.yaml`` when no
            explicit path is given.

    Returns:
        The loaded configuration, or defaults when no file is found.
    """
    if path is None and project_dir is not None:
        path = find_config_file(project_dir)
    if path is None:
        return GeneratorConfig.from_dict({})

    config_path = Path(path)
    try:
        data = yaml.load(config_path.read_text(encoding="utf-8"), Loader=ConfigLoader)
    except OSError as e:
        raise ConfigurationError(f"Unable to read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    logger.debug(f"Loaded configuration from {config_path}")
    return GeneratorConfig.from_dict(data)


def detect_maven_version() -> str:
    """Ask the installed Maven for its version."""
    try:
        result = subprocess.run(
            ["mvn", "--version"],
            capture_output=True,
            text=True,
            timeout=60,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ConfigurationError("Unable to determine Maven version.") from e

    match = MAVEN_VERSION_PATTERN.search(result.stdout) if result.returncode == 0 else None
    if match is None:
        raise ConfigurationError("Unable to determine Maven version.")
    return match.group(1)


def resolve_tool_version(config: GeneratorConfig) -> str:
    """Return the configured tool version, falling back to the local Maven."""
    if config.tool_version:
        return config.tool_version
    version = detect_maven_version()
    logger.debug(f"Detected Maven {version}")
    return version
