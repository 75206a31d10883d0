"""Gradle Module Metadata generator.

Turns a ProjectDescriptor into the JSON document Gradle reads to pick
between the API and runtime variants of a module published by Maven.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from maven_gmm.checksums import ARTIFACT_ALGORITHMS, create_hashes
from maven_gmm.config import GeneratorConfig
from maven_gmm.errors import DescriptorError
from maven_gmm.models import (
    DEFAULT_TYPE,
    Capability,
    Dependency,
    ProducedArtifact,
    ProjectDescriptor,
    Variant,
)

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.1"


def artifact_file_name(descriptor: ProjectDescriptor) -> str:
    """Return the published file name of the descriptor's artifact.

    ``<module>-<version>[-<classifier>].<extension>``, where the extension
    is taken from the real file. A file without an extension keeps its
    original name.
    """
    artifact = descriptor.artifact
    extension = artifact.extension
    if extension is None:
        return Path(artifact.path).name

    file_name = f"{descriptor.module}-{descriptor.version}"
    if artifact.classifier:
        file_name += f"-{artifact.classifier}"
    return f"{file_name}.{extension}"


def _sorted(attributes: dict[str, str]) -> dict[str, str]:
    return dict(sorted(attributes.items()))


class ModuleMetadataGenerator:
    """Build and serialize module metadata documents."""

    def __init__(self, config: Optional[GeneratorConfig] = None, tool_version: Optional[str] = None) -> None:
        """Initialize the generator.

        Args:
            config: Generator settings; defaults are used when omitted.
            tool_version: Version written to ``createdBy``. Overrides
                ``config.tool_version``.
        """
        self.config = config or GeneratorConfig()
        self.tool_version = tool_version or self.config.tool_version

    def generate(self, descriptor: ProjectDescriptor) -> Optional[bytes]:
        """Generate the serialized document.

        Returns:
            UTF-8 encoded JSON ending in a newline, or ``None`` when the
            packaging is a platform/BOM and nothing should be published.

        Raises:
            DescriptorError: Required descriptor fields are missing.
            ChecksumError: The artifact could not be read.
        """
        document = self.build(descriptor)
        if document is None:
            return None
        return self.serialize(document)

    def build(self, descriptor: ProjectDescriptor) -> Optional[dict[str, Any]]:
        """Build the document as nested dictionaries in output order."""
        if descriptor.packaging in self.config.skip_packagings:
            logger.info(
                f"Skipping module metadata for {descriptor.group}:{descriptor.module}: "
                f"packaging '{descriptor.packaging}' is a platform"
            )
            return None

        missing = descriptor.missing_fields()
        if not self.tool_version:
            missing.append("tool_version")
        if missing:
            raise DescriptorError(missing)

        # Checksums first: an unreadable artifact aborts before anything is built
        files = [self._file_entry(descriptor)]

        return {
            "formatVersion": FORMAT_VERSION,
            "component": self._component(descriptor),
            "createdBy": {self.config.tool_name: {"version": self.tool_version}},
            "variants": [
                self._variant(descriptor, variant, files)
                for variant in (Variant.API_ELEMENTS, Variant.RUNTIME_ELEMENTS)
            ],
        }

    @staticmethod
    def serialize(document: dict[str, Any]) -> bytes:
        """Render a document as two-space indented JSON with a trailing newline.

        Non-ASCII text is written as UTF-8, except the line and paragraph
        separators U+2028 and U+2029, which are always escaped.
        """
        text = json.dumps(document, indent=2, ensure_ascii=False)
        text = text.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")
        return (text + "\n").encode("utf-8")

    def _component(self, descriptor: ProjectDescriptor) -> dict[str, Any]:
        status = "integration" if descriptor.is_snapshot(self.config.snapshot_suffix) else "release"
        return {
            "group": descriptor.group,
            "module": descriptor.module,
            "version": descriptor.version,
            "attributes": _sorted({self.config.attribute("status"): status}),
        }

    def variant_attributes(self, variant: Variant) -> dict[str, str]:
        """Classification attributes of ``variant``, sorted by key."""
        return _sorted({
            self.config.attribute("category"): "library",
            self.config.attribute("dependency.bundling"): "external",
            self.config.attribute("libraryelements"): "jar",
            self.config.attribute("usage"): variant.usage,
        })

    def _variant(
        self,
        descriptor: ProjectDescriptor,
        variant: Variant,
        files: list[dict[str, Any]],
    ) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "name": variant.variant_name,
            "attributes": self.variant_attributes(variant),
        }

        dependencies = self.variant_dependencies(descriptor, variant)
        if dependencies is not None:
            entry["dependencies"] = dependencies

        entry["files"] = [dict(file) for file in files]

        capabilities = self._capabilities(descriptor)
        if capabilities:
            entry["capabilities"] = capabilities

        return entry

    def variant_dependencies(
        self,
        descriptor: ProjectDescriptor,
        variant: Variant,
    ) -> Optional[list[dict[str, Any]]]:
        """Render the dependencies ``variant`` exposes.

        Returns ``None`` when the descriptor declares no dependencies at all.
        """
        if not descriptor.dependencies and not descriptor.platform_dependencies:
            return None

        rendered = []
        for dependency in descriptor.dependencies:
            if dependency.optional:
                logger.debug(f"{variant.variant_name}: skipping optional {dependency.coordinates}")
                continue
            if not variant.accepts(dependency.scope):
                logger.debug(
                    f"{variant.variant_name}: skipping {dependency.coordinates} in scope {dependency.scope}"
                )
                continue
            if descriptor.is_removed(dependency):
                logger.debug(f"{variant.variant_name}: skipping removed {dependency.coordinates}")
                continue
            rendered.append(self._dependency(dependency, platform=False))

        for dependency in descriptor.platform_dependencies:
            if dependency.scope is None or variant.accepts(dependency.scope):
                rendered.append(self._dependency(dependency, platform=True))

        return rendered

    def _dependency(self, dependency: Dependency, platform: bool) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "group": dependency.group,
            "module": dependency.module,
        }
        if dependency.version is not None:
            entry["version"] = {"requires": dependency.version}
        if dependency.exclusions:
            entry["excludes"] = [
                {"group": exclusion.group, "module": exclusion.module}
                for exclusion in dependency.exclusions
            ]
        if platform:
            entry["attributes"] = _sorted({self.config.attribute("category"): "platform"})
            entry["endorseStrictVersions"] = True
        if dependency.classifier or dependency.type != DEFAULT_TYPE:
            selector = {
                "name": dependency.module,
                "type": dependency.type or DEFAULT_TYPE,
            }
            if dependency.classifier:
                selector["classifier"] = dependency.classifier
            entry["thirdPartyCompatibility"] = {"artifactSelector": selector}
        return entry

    def _file_entry(self, descriptor: ProjectDescriptor) -> dict[str, Any]:
        artifact: ProducedArtifact = descriptor.artifact
        file_name = artifact_file_name(descriptor)
        hashes = create_hashes(artifact.path, ARTIFACT_ALGORITHMS)

        entry: dict[str, Any] = {
            "name": file_name,
            "url": file_name,
            "size": artifact.size,
        }
        for algorithm in ARTIFACT_ALGORITHMS:
            entry[algorithm] = hashes[algorithm].as_hex_string()
        return entry

    def _capabilities(self, descriptor: ProjectDescriptor) -> list[dict[str, str]]:
        if not descriptor.capabilities:
            return []

        default = Capability(descriptor.group, descriptor.module, descriptor.version)
        return [
            {
                "group": capability.group,
                "name": capability.name,
                "version": capability.version or descriptor.version,
            }
            for capability in [default, *descriptor.capabilities]
        ]


def generate_module_metadata(
    descriptor: ProjectDescriptor,
    tool_version: str,
    config: Optional[GeneratorConfig] = None,
) -> Optional[bytes]:
    """Generate module metadata for ``descriptor`` in one call."""
    return ModuleMetadataGenerator(config, tool_version=tool_version).generate(descriptor)
