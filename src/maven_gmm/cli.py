"""Command-line interface for maven-gmm."""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from maven_gmm import __version__
from maven_gmm.checksums import ARTIFACT_ALGORITHMS, ALGORITHMS, create_hashes
from maven_gmm.config import GeneratorConfig, load_config, resolve_tool_version
from maven_gmm.errors import ModuleMetadataError
from maven_gmm.generator import ModuleMetadataGenerator
from maven_gmm.pom import add_marker, assert_marker, has_marker, load_project
from maven_gmm.publisher import publish
from maven_gmm.reporter import create_reporter, document_from_json

console = Console()
err_console = Console(stderr=True)


def _log_level(name: str) -> int:
    return getattr(logging, name.upper(), logging.WARNING)


def _configure_logging(verbose: bool) -> None:
    """Route library logging to stderr at the requested level."""
    level = _log_level("DEBUG" if verbose else os.environ.get("MAVEN_GMM_LOG_LEVEL", "WARNING"))
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("maven_gmm").setLevel(level)


def _pom_path(path: str) -> Path:
    """Accept either a pom.xml or the directory that holds it."""
    pom = Path(path)
    if pom.is_dir():
        pom = pom / "pom.xml"
    return pom


def _load_config(
    pom: Path,
    config_file: Optional[str],
    tool_version: Optional[str],
    verbose: bool = False,
) -> GeneratorConfig:
    config = load_config(config_file, project_dir=pom.parent)
    if tool_version:
        config.tool_version = tool_version

    # --verbose on the group or the command wins over the configured level
    verbose = verbose or click.get_current_context().find_root().params.get("verbose", False)
    logging.getLogger("maven_gmm").setLevel(_log_level("DEBUG" if verbose else config.log_level))
    return config


def _fail(error: Exception) -> None:
    err_console.print(f"[red]Error: {escape(str(error))}[/red]")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="maven-gmm")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """maven-gmm - Gradle Module Metadata for Maven builds."""
    _configure_logging(verbose)


@main.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@click.option(
    "--artifact",
    "-a",
    type=click.Path(),
    help="Packaged artifact (default: target/<artifactId>-<version>.jar)",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False),
    help="Directory for module.json (default: target/publications/maven)",
)
@click.option("--tool-version", help="Maven version written to createdBy")
@click.option("--config", "-c", "config_file", type=click.Path(exists=True), help="Config file")
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the document instead of writing it")
@click.option("--skip-marker-check", is_flag=True, help="Do not require the pom.xml marker comment")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def generate(
    path: str,
    artifact: Optional[str],
    output_dir: Optional[str],
    tool_version: Optional[str],
    config_file: Optional[str],
    to_stdout: bool,
    skip_marker_check: bool,
    verbose: bool,
) -> None:
    """Generate module.json for a Maven module.

    PATH is the pom.xml or its directory (default: current directory).
    """
    pom = _pom_path(path)

    try:
        config = _load_config(pom, config_file, tool_version, verbose)
        if skip_marker_check:
            config.require_marker = False

        if to_stdout:
            descriptor = load_project(pom, config, artifact_path=artifact)
            if config.require_marker and descriptor.packaging not in config.skip_packagings:
                assert_marker(pom)
            generator = ModuleMetadataGenerator(config, tool_version=resolve_tool_version(config))
            content = generator.generate(descriptor)
            if content is not None:
                click.echo(content.decode("utf-8"), nl=False)
            return

        written = publish(pom, config, artifact_path=artifact, output_directory=output_dir)
    except ModuleMetadataError as e:
        _fail(e)
        return

    if written is None:
        console.print("[yellow]Platform packaging: no module metadata generated[/yellow]")
    else:
        console.print(f"[green]Module metadata written to {written}[/green]")


@main.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@click.option("--artifact", "-a", type=click.Path(), help="Packaged artifact")
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.option("--tool-version", help="Maven version written to createdBy")
@click.option("--config", "-c", "config_file", type=click.Path(exists=True), help="Config file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def show(
    path: str,
    artifact: Optional[str],
    format: str,
    tool_version: Optional[str],
    config_file: Optional[str],
    verbose: bool,
) -> None:
    """Show the variants a module publishes.

    PATH is a pom.xml, its directory, or an existing module.json.
    """
    try:
        if path.endswith(".json"):
            document = document_from_json(Path(path).read_text(encoding="utf-8"))
        else:
            pom = _pom_path(path)
            config = _load_config(pom, config_file, tool_version, verbose)
            descriptor = load_project(pom, config, artifact_path=artifact)
            generator = ModuleMetadataGenerator(config, tool_version=resolve_tool_version(config))
            document = generator.build(descriptor)
            if document is None:
                console.print("[yellow]Platform packaging: no module metadata generated[/yellow]")
                return
    except (ModuleMetadataError, ValueError) as e:
        _fail(e)
        return

    report = create_reporter(format).generate(document)
    if format == "json":
        click.echo(report, nl=False)
    else:
        click.echo(report)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--algorithm",
    "-a",
    "algorithms",
    multiple=True,
    type=click.Choice(sorted(ALGORITHMS), case_sensitive=False),
    help="Digest algorithm (repeatable, default: all four)",
)
def checksum(file: str, algorithms: tuple[str, ...]) -> None:
    """Print the checksums written for FILE."""
    try:
        hashes = create_hashes(file, algorithms or ARTIFACT_ALGORITHMS)
    except ModuleMetadataError as e:
        _fail(e)
        return

    for name, value in hashes.items():
        click.echo(f"{name}  {value.as_hex_string()}  {file}")


@main.command()
@click.argument("path", type=click.Path(exists=True), default=".")
@click.option("--check", is_flag=True, help="Only check for the marker; exit 1 if missing")
def marker(path: str, check: bool) -> None:
    """Add the publication marker comment to a pom.xml.

    Gradle only looks for module.json when the pom carries this marker.
    """
    pom = _pom_path(path)
    try:
        if check:
            if not has_marker(pom):
                err_console.print(f"[red]Marker missing in {pom}[/red]")
                sys.exit(1)
            console.print(f"[green]Marker present in {pom}[/green]")
            return

        if add_marker(pom):
            console.print(f"[green]Marker added to {pom}[/green]")
        else:
            console.print(f"[dim]Marker already present in {pom}[/dim]")
    except ModuleMetadataError as e:
        _fail(e)


@main.command()
def version() -> None:
    """Show version information."""
    click.echo(f"maven-gmm version {__version__}")


if __name__ == "__main__":
    main()
