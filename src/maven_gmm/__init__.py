"""maven-gmm - Gradle Module Metadata generation for Maven modules."""

__version__ = "0.5.0"

from maven_gmm.checksums import HashValue, create_hash, create_hashes
from maven_gmm.config import GeneratorConfig, load_config
from maven_gmm.errors import (
    ChecksumError,
    ConfigurationError,
    DescriptorError,
    ModuleMetadataError,
    UnsupportedAlgorithmError,
)
from maven_gmm.generator import ModuleMetadataGenerator, generate_module_metadata
from maven_gmm.models import (
    Capability,
    Dependency,
    Exclusion,
    ProducedArtifact,
    ProjectDescriptor,
    Variant,
)

__all__ = [
    "__version__",
    "Capability",
    "ChecksumError",
    "ConfigurationError",
    "Dependency",
    "DescriptorError",
    "Exclusion",
    "GeneratorConfig",
    "HashValue",
    "ModuleMetadataError",
    "ModuleMetadataGenerator",
    "ProducedArtifact",
    "ProjectDescriptor",
    "UnsupportedAlgorithmError",
    "Variant",
    "create_hash",
    "create_hashes",
    "generate_module_metadata",
    "load_config",
]
