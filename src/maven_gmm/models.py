"""Data models describing a built Maven module."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


DEFAULT_TYPE = "jar"
DEFAULT_SCOPE = "compile"

# Scopes recognised in a pom.xml; only compile and runtime reach a variant.
MAVEN_SCOPES = ("compile", "provided", "runtime", "test", "system", "import")


class Variant(Enum):
    """The two variants every published module carries."""

    API_ELEMENTS = ("apiElements", "java-api", ("compile",))
    RUNTIME_ELEMENTS = ("runtimeElements", "java-runtime", ("compile", "runtime"))

    def __init__(self, variant_name: str, usage: str, scopes: tuple[str, ...]) -> None:
        self.variant_name = variant_name
        self.usage = usage
        self.scopes = scopes

    def accepts(self, scope: Optional[str]) -> bool:
        """Return True if dependencies of ``scope`` are exposed by this variant."""
        return scope in self.scopes


@dataclass(frozen=True)
class Exclusion:
    """A group/module pair suppressed transitively."""

    group: str
    module: str


@dataclass
class Dependency:
    """A declared dependency of the module.

    Attributes:
        group: Maven groupId.
        module: Maven artifactId.
        version: Requested version, or ``None`` for no constraint.
        scope: Maven scope (compile, runtime, provided, ...). Platform
            dependencies may leave it ``None`` to apply to every variant.
        optional: ``<optional>true</optional>`` dependencies are never published.
        type: Artifact type, ``jar`` unless stated otherwise.
        classifier: Artifact classifier such as ``tests``.
        exclusions: Modules excluded from this dependency's transitive graph.
    """

    group: str
    module: str
    version: Optional[str] = None
    scope: Optional[str] = DEFAULT_SCOPE
    optional: bool = False
    type: Optional[str] = DEFAULT_TYPE
    classifier: Optional[str] = None
    exclusions: list[Exclusion] = field(default_factory=list)

    @property
    def coordinates(self) -> str:
        """Return ``group:module[:version]``."""
        if self.version:
            return f"{self.group}:{self.module}:{self.version}"
        return f"{self.group}:{self.module}"

    def same_module(self, other: "Dependency") -> bool:
        """Compare group and module only, ignoring version."""
        return self.group == other.group and self.module == other.module


@dataclass
class Capability:
    """An additional capability published by the module."""

    group: str
    name: str
    version: Optional[str] = None


@dataclass
class ProducedArtifact:
    """The primary file produced by the build."""

    path: Path
    classifier: Optional[str] = None

    @property
    def size(self) -> int:
        """Length of the file in bytes."""
        return Path(self.path).stat().st_size

    @property
    def extension(self) -> Optional[str]:
        """Text after the last '.' of the file name, or None without one."""
        file_name = Path(self.path).name
        if "." not in file_name:
            return None
        return file_name.rsplit(".", 1)[1]


@dataclass
class ProjectDescriptor:
    """Everything the generator needs to know about one module."""

    group: str
    module: str
    version: str
    artifact: Optional[ProducedArtifact]
    packaging: str = "jar"
    dependencies: list[Dependency] = field(default_factory=list)
    platform_dependencies: list[Dependency] = field(default_factory=list)
    capabilities: list[Capability] = field(default_factory=list)
    removed_dependencies: list[Dependency] = field(default_factory=list)

    def is_snapshot(self, suffix: str = "SNAPSHOT") -> bool:
        """Return True for integration (snapshot) versions."""
        return self.version.endswith(suffix)

    def is_removed(self, dependency: Dependency) -> bool:
        """Return True if ``dependency`` is on the removed-dependency blocklist."""
        return any(dependency.same_module(removed) for removed in self.removed_dependencies)

    def missing_fields(self) -> list[str]:
        """Names of required fields that are absent or empty."""
        missing = [name for name in ("group", "module", "version") if not getattr(self, name)]
        if self.artifact is None or not self.artifact.path:
            missing.append("artifact.path")
        return missing
