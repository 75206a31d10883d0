"""Exceptions raised while generating module metadata."""


class ModuleMetadataError(Exception):
    """Base class for all maven-gmm errors."""
    pass


class ConfigurationError(ModuleMetadataError):
    """Invalid or incomplete configuration."""
    pass


class UnsupportedAlgorithmError(ConfigurationError):
    """Requested digest algorithm is not one of MD5, SHA-1, SHA-256, SHA-512."""

    def __init__(self, algorithm: str) -> None:
        super().__init__(f"Unsupported checksum algorithm: {algorithm}")
        self.algorithm = algorithm


class DescriptorError(ConfigurationError):
    """Project descriptor is missing required fields."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Project descriptor is missing required fields: {', '.join(missing)}")
        self.missing = missing


class ChecksumError(ModuleMetadataError):
    """An artifact could not be read for hashing."""

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(f"Unable to read {path} for hashing: {cause}")
        self.path = path


class PomError(ModuleMetadataError):
    """A pom.xml file could not be read or parsed."""
    pass


class MarkerMissingError(PomError):
    """The pom.xml lacks the publication marker comment."""
    pass


class PublishError(ModuleMetadataError):
    """The module file could not be written."""
    pass
