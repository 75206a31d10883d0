"""Maven pom.xml project model.

Reads the subset of the Maven project model the generator needs: identity,
packaging, dependencies (with parent inheritance and dependency management
applied), and the configuration block of the metadata plugin.
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from maven_gmm.config import GeneratorConfig
from maven_gmm.errors import MarkerMissingError, PomError
from maven_gmm.models import (
    DEFAULT_SCOPE,
    DEFAULT_TYPE,
    MAVEN_SCOPES,
    Capability,
    Dependency,
    Exclusion,
    ProducedArtifact,
    ProjectDescriptor,
)

logger = logging.getLogger(__name__)

MARKER = "do_not_remove: published-with-gradle-metadata"

PROPERTY_PATTERN = re.compile(r"\$\{([^}]+)\}")
MODEL_VERSION_PATTERN = re.compile(r"(<modelVersion>\s*4\.0\.0\s*</modelVersion>)")

# Packagings whose main artifact is not a jar
PACKAGING_EXTENSIONS = {
    "war": "war",
    "ear": "ear",
    "rar": "rar",
}

MAX_PARENT_DEPTH = 16


@dataclass
class PomModel:
    """A pom.xml with its parent chain, before interpolation."""

    path: Path
    group: Optional[str]
    artifact_id: Optional[str]
    version: Optional[str]
    packaging: str
    final_name: Optional[str]
    properties: dict[str, str] = field(default_factory=dict)
    dependencies: list[Dependency] = field(default_factory=list)
    managed_dependencies: list[Dependency] = field(default_factory=list)
    plugins: list[ET.Element] = field(default_factory=list)
    parent_group: Optional[str] = None
    parent_version: Optional[str] = None
    parent: Optional["PomModel"] = None

    @property
    def effective_group(self) -> Optional[str]:
        return self.group or self.parent_group

    @property
    def effective_version(self) -> Optional[str]:
        return self.version or self.parent_version

    def effective_properties(self) -> dict[str, str]:
        """Properties of the parent chain overlaid with this pom's own."""
        properties = self.parent.effective_properties() if self.parent else {}
        properties.update(self.properties)

        builtins = {
            "groupId": self.effective_group,
            "artifactId": self.artifact_id,
            "version": self.effective_version,
            "packaging": self.packaging,
            "parent.groupId": self.parent_group,
            "parent.version": self.parent_version,
        }
        for name, value in builtins.items():
            if value is not None:
                properties[f"project.{name}"] = value
                properties[f"pom.{name}"] = value
        if self.effective_version is not None:
            properties.setdefault("version", self.effective_version)
        properties["basedir"] = str(self.path.parent)
        properties["project.basedir"] = str(self.path.parent)
        return properties

    def effective_dependencies(self) -> list[Dependency]:
        """This pom's dependencies first, then inherited ones it does not redeclare."""
        dependencies = list(self.dependencies)
        if self.parent is not None:
            declared = {_management_key(d) for d in dependencies}
            dependencies.extend(
                d for d in self.parent.effective_dependencies() if _management_key(d) not in declared
            )
        return dependencies

    def effective_management(self) -> dict[tuple, Dependency]:
        managed = self.parent.effective_management() if self.parent else {}
        for dependency in self.managed_dependencies:
            managed[_management_key(dependency)] = dependency
        return managed

    def plugin_configuration(self, artifact_id: str) -> Optional[ET.Element]:
        """Return the <configuration> of the named plugin, searching up the parent chain."""
        for plugin in self.plugins:
            if _get_text(plugin, "artifactId") == artifact_id:
                configuration = plugin.find("configuration")
                if configuration is not None:
                    return configuration
        if self.parent is not None:
            return self.parent.plugin_configuration(artifact_id)
        return None


def _management_key(dependency: Dependency) -> tuple:
    return (
        dependency.group,
        dependency.module,
        dependency.type or DEFAULT_TYPE,
        dependency.classifier or "",
    )


def _get_text(elem: ET.Element, tag: str) -> Optional[str]:
    """Get text content of a child element."""
    child = elem.find(tag)
    if child is not None and child.text:
        return child.text.strip()
    return None


def _children(elem: Optional[ET.Element], container: str, tag: str) -> list[ET.Element]:
    if elem is None:
        return []
    parent = elem.find(container)
    if parent is None:
        return []
    return parent.findall(tag)


def read_pom(path: Union[str, Path]) -> ET.Element:
    """Parse a pom.xml and return its root element without namespaces."""
    pom_path = Path(path)
    try:
        content = pom_path.read_text(encoding="utf-8")
    except OSError as e:
        raise PomError(f"Unable to read {pom_path}: {e}") from e

    # Remove namespace for easier parsing
    content_clean = re.sub(r'\sxmlns="[^"]+"', "", content, count=1)
    try:
        return ET.fromstring(content_clean)
    except ET.ParseError as e:
        raise PomError(f"Invalid pom.xml {pom_path}: {e}") from e


def _parse_dependency(elem: ET.Element, default_scope: Optional[str] = None) -> Dependency:
    optional = (_get_text(elem, "optional") or "").lower() == "true"
    exclusions = []
    for exclusion in _children(elem, "exclusions", "exclusion"):
        group = _get_text(exclusion, "groupId")
        module = _get_text(exclusion, "artifactId")
        if group and module:
            exclusions.append(Exclusion(group, module))

    return Dependency(
        group=_get_text(elem, "groupId") or "",
        module=_get_text(elem, "artifactId") or "",
        version=_get_text(elem, "version"),
        scope=_get_text(elem, "scope") or default_scope,
        optional=optional,
        type=_get_text(elem, "type") or DEFAULT_TYPE,
        classifier=_get_text(elem, "classifier"),
        exclusions=exclusions,
    )


def _parse_properties(root: ET.Element) -> dict[str, str]:
    properties = {}
    props_elem = root.find("properties")
    if props_elem is not None:
        for prop in props_elem:
            if isinstance(prop.tag, str) and prop.text:
                properties[prop.tag] = prop.text.strip()
    return properties


def _resolve_parent_path(pom_path: Path, parent_elem: ET.Element) -> Path:
    relative_path = _get_text(parent_elem, "relativePath")
    if relative_path is None:
        relative_path = "../pom.xml"
    candidate = pom_path.parent / relative_path
    if candidate.is_dir():
        candidate = candidate / "pom.xml"
    return candidate


def parse_pom(path: Union[str, Path], _depth: int = 0) -> PomModel:
    """Parse a pom.xml and the local parents it references.

    Parents are looked up through ``<relativePath>`` (default
    ``../pom.xml``); a parent that is not on disk, or whose artifactId does
    not match, is ignored apart from the groupId and version it provides.
    """
    pom_path = Path(path)
    root = read_pom(pom_path)

    model = PomModel(
        path=pom_path,
        group=_get_text(root, "groupId"),
        artifact_id=_get_text(root, "artifactId"),
        version=_get_text(root, "version"),
        packaging=_get_text(root, "packaging") or "jar",
        final_name=None,
        properties=_parse_properties(root),
        dependencies=[_parse_dependency(d) for d in _children(root, "dependencies", "dependency")],
    )

    management = root.find("dependencyManagement")
    model.managed_dependencies = [
        _parse_dependency(d) for d in _children(management, "dependencies", "dependency")
    ]

    build = root.find("build")
    if build is not None:
        model.final_name = _get_text(build, "finalName")
        model.plugins = _children(build, "plugins", "plugin")
        model.plugins += _children(build.find("pluginManagement"), "plugins", "plugin")

    parent_elem = root.find("parent")
    if parent_elem is not None:
        model.parent_group = _get_text(parent_elem, "groupId")
        model.parent_version = _get_text(parent_elem, "version")
        parent_path = _resolve_parent_path(pom_path, parent_elem)
        if _depth >= MAX_PARENT_DEPTH:
            raise PomError(f"Parent chain of {pom_path} is too deep")
        if parent_path.is_file():
            parent = parse_pom(parent_path, _depth + 1)
            if parent.artifact_id == _get_text(parent_elem, "artifactId"):
                model.parent = parent
            else:
                logger.debug(f"Ignoring {parent_path}: not the declared parent of {pom_path}")

    return model


def _interpolate(value: Optional[str], properties: dict[str, str]) -> Optional[str]:
    """Resolve ${property} references in a value."""
    if value is None:
        return None

    def replace(match: re.Match) -> str:
        return properties.get(match.group(1), match.group(0))

    for _ in range(10):
        resolved = PROPERTY_PATTERN.sub(replace, value)
        if resolved == value:
            break
        value = resolved
    return value


def _interpolate_dependency(dependency: Dependency, properties: dict[str, str]) -> Dependency:
    return Dependency(
        group=_interpolate(dependency.group, properties),
        module=_interpolate(dependency.module, properties),
        version=_interpolate(dependency.version, properties),
        scope=_interpolate(dependency.scope, properties),
        optional=dependency.optional,
        type=_interpolate(dependency.type, properties),
        classifier=_interpolate(dependency.classifier, properties),
        exclusions=[
            Exclusion(_interpolate(e.group, properties), _interpolate(e.module, properties))
            for e in dependency.exclusions
        ],
    )


def _apply_management(dependency: Dependency, managed: dict[tuple, Dependency]) -> Dependency:
    entry = managed.get(_management_key(dependency))
    if entry is not None:
        if dependency.version is None:
            dependency.version = entry.version
        if dependency.scope is None:
            dependency.scope = entry.scope
        if not dependency.exclusions:
            dependency.exclusions = list(entry.exclusions)
    if dependency.scope is None:
        dependency.scope = DEFAULT_SCOPE
    elif dependency.scope not in MAVEN_SCOPES:
        logger.warning(f"Unknown scope '{dependency.scope}' on {dependency.coordinates}; it is not published")
    return dependency


def default_artifact_path(model: PomModel, properties: Optional[dict[str, str]] = None) -> Path:
    """Location of the packaged artifact under ``target/``."""
    properties = properties if properties is not None else model.effective_properties()
    base_name = _interpolate(model.final_name, properties) or f"{model.artifact_id}-{model.effective_version}"
    extension = PACKAGING_EXTENSIONS.get(model.packaging, "jar")
    return model.path.parent / "target" / f"{base_name}.{extension}"


def load_project(
    pom_path: Union[str, Path],
    config: Optional[GeneratorConfig] = None,
    artifact_path: Optional[Union[str, Path]] = None,
) -> ProjectDescriptor:
    """Build a ProjectDescriptor from a pom.xml.

    Args:
        pom_path: The module's pom.xml.
        config: Settings naming the metadata plugin whose configuration
            supplies platform dependencies, capabilities and removed
            dependencies.
        artifact_path: The packaged artifact; defaults to the file Maven's
            packaging would produce under ``target/``.
    """
    config = config or GeneratorConfig()
    model = parse_pom(pom_path)
    properties = model.effective_properties()
    managed = {
        _management_key(d): d
        for d in (_interpolate_dependency(m, properties) for m in model.effective_management().values())
    }

    dependencies = [
        _apply_management(_interpolate_dependency(d, properties), managed)
        for d in model.effective_dependencies()
    ]

    platform_dependencies: list[Dependency] = []
    capabilities: list[Capability] = []
    removed_dependencies: list[Dependency] = []
    configuration = model.plugin_configuration(config.plugin_artifact_id)
    if configuration is not None:
        platform_dependencies = [
            _interpolate_dependency(_parse_dependency(d), properties)
            for d in _children(configuration, "platformDependencies", "dependency")
        ]
        removed_dependencies = [
            _interpolate_dependency(_parse_dependency(d), properties)
            for d in _children(configuration, "removedDependencies", "dependency")
        ]
        for elem in _children(configuration, "capabilities", "capability"):
            capabilities.append(
                Capability(
                    group=_interpolate(_get_text(elem, "groupId"), properties) or "",
                    name=_interpolate(_get_text(elem, "artifactId"), properties) or "",
                    version=_interpolate(_get_text(elem, "version"), properties),
                )
            )

    if artifact_path is None:
        artifact_path = default_artifact_path(model, properties)

    descriptor = ProjectDescriptor(
        group=_interpolate(model.effective_group, properties) or "",
        module=_interpolate(model.artifact_id, properties) or "",
        version=_interpolate(model.effective_version, properties) or "",
        artifact=ProducedArtifact(Path(artifact_path)),
        packaging=model.packaging,
        dependencies=dependencies,
        platform_dependencies=platform_dependencies,
        capabilities=capabilities,
        removed_dependencies=removed_dependencies,
    )
    logger.debug(
        f"Loaded {descriptor.group}:{descriptor.module}:{descriptor.version} "
        f"with {len(dependencies)} dependencies from {pom_path}"
    )
    return descriptor


def has_marker(pom_path: Union[str, Path]) -> bool:
    """Return True if the pom.xml contains the publication marker comment."""
    try:
        content = Path(pom_path).read_text(encoding="utf-8")
    except OSError as e:
        raise PomError(f"Unable to read {pom_path}: {e}") from e
    return MARKER in content


def assert_marker(pom_path: Union[str, Path]) -> None:
    """Raise MarkerMissingError unless the publication marker is present."""
    if not has_marker(pom_path):
        raise MarkerMissingError(
            f"Please add the Gradle Module Metadata marker '<!-- {MARKER} -->' to {Path(pom_path).resolve()}"
        )


def add_marker(pom_path: Union[str, Path]) -> bool:
    """Insert the publication marker after <modelVersion>.

    Returns:
        True if the file was changed, False if the marker was already there.
    """
    path = Path(pom_path)
    if has_marker(path):
        return False

    content = path.read_text(encoding="utf-8")
    updated, count = MODEL_VERSION_PATTERN.subn(rf"\1 <!-- {MARKER} -->", content, count=1)
    if count == 0:
        raise PomError(f"No <modelVersion>4.0.0</modelVersion> element found in {path}")

    try:
        path.write_text(updated, encoding="utf-8")
    except OSError as e:
        raise PomError(f"Unable to write {path}: {e}") from e
    logger.info(f"Added publication marker to {path}")
    return True
