"""Write module.json next to the other publications of a Maven build."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from maven_gmm.config import GeneratorConfig, load_config, resolve_tool_version
from maven_gmm.errors import PublishError
from maven_gmm.generator import ModuleMetadataGenerator
from maven_gmm.pom import assert_marker, load_project

logger = logging.getLogger(__name__)


def write_module_file(
    content: bytes,
    output_directory: Union[str, Path],
    file_name: str = "module.json",
) -> Path:
    """Atomically write ``content`` to ``output_directory/file_name``.

    The bytes go to a temporary file in the same directory which is then
    renamed over the destination, so readers never see a partial file.
    """
    directory = Path(output_directory)
    destination = directory / file_name
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=f".{file_name}.", suffix=".tmp", dir=directory)
    except OSError as e:
        raise PublishError(f"Error creating file {destination}: {e}") from e

    try:
        with os.fdopen(fd, "wb") as stream:
            stream.write(content)
        os.replace(temp_name, destination)
    except OSError as e:
        Path(temp_name).unlink(missing_ok=True)
        raise PublishError(f"Error creating file {destination}: {e}") from e

    logger.info(f"Wrote {destination}")
    return destination


def publish(
    pom_path: Union[str, Path],
    config: Optional[GeneratorConfig] = None,
    artifact_path: Optional[Union[str, Path]] = None,
    output_directory: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Generate and write module.json for the module described by ``pom_path``.

    Returns:
        Path of the written file, or None when the packaging is skipped.
    """
    pom_path = Path(pom_path)
    config = config or load_config(project_dir=pom_path.parent)

    descriptor = load_project(pom_path, config, artifact_path=artifact_path)
    if descriptor.packaging in config.skip_packagings:
        logger.info(f"Packaging '{descriptor.packaging}' is a platform; no module metadata written")
        return None

    if config.require_marker:
        assert_marker(pom_path)

    generator = ModuleMetadataGenerator(config, tool_version=resolve_tool_version(config))
    content = generator.generate(descriptor)

    if output_directory is None:
        output_directory = pom_path.parent / config.output_directory
    return write_module_file(content, output_directory, config.module_file_name)
