"""Human-readable views of a module metadata document."""

import json
from abc import ABC, abstractmethod
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from maven_gmm.generator import ModuleMetadataGenerator


class ReportGenerator(ABC):
    """Abstract base class for report generators."""

    @abstractmethod
    def generate(self, document: dict[str, Any]) -> str:
        """Generate a report from a built document.

        Args:
            document: The document returned by ``ModuleMetadataGenerator.build``.

        Returns:
            Formatted report as a string.
        """
        pass


class JSONReporter(ReportGenerator):
    """Render the document exactly as it is published."""

    def generate(self, document: dict[str, Any]) -> str:
        return ModuleMetadataGenerator.serialize(document).decode("utf-8")


class VariantReporter(ReportGenerator):
    """Summary panel and one dependency table per variant."""

    def __init__(self, width: int = 120) -> None:
        self.console = Console(record=True, force_terminal=True, width=width)

    def generate(self, document: dict[str, Any]) -> str:
        self._render_summary(document)
        for variant in document["variants"]:
            self._render_variant(variant)
        return self.console.export_text()

    def _render_summary(self, document: dict[str, Any]) -> None:
        component = document["component"]
        (tool, creator), = document["createdBy"].items()
        file = document["variants"][0]["files"][0]

        summary_text = Text()
        summary_text.append(f"{component['group']}:{component['module']}:{component['version']}\n", style="bold")
        for key, value in component.get("attributes", {}).items():
            summary_text.append(f"{key}: {value}\n")
        summary_text.append(f"Created by: {tool} {creator['version']}\n")
        summary_text.append(f"File: {file['name']} ({file['size']} bytes)\n")
        summary_text.append(f"sha256: {file['sha256']}")

        self.console.print(Panel(summary_text, title="Module Metadata", border_style="blue"))

    def _render_variant(self, variant: dict[str, Any]) -> None:
        usage = next(
            (value for key, value in variant["attributes"].items() if key.endswith(".usage")),
            "",
        )
        table = Table(
            title=f"{variant['name']} ({usage})",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Dependency", width=45)
        table.add_column("Version", width=15)
        table.add_column("Notes", width=40)

        for dependency in variant.get("dependencies", []):
            notes = []
            if dependency.get("endorseStrictVersions"):
                notes.append("platform")
            if dependency.get("excludes"):
                notes.append(f"{len(dependency['excludes'])} exclude(s)")
            selector = dependency.get("thirdPartyCompatibility", {}).get("artifactSelector")
            if selector:
                classifier = f":{selector['classifier']}" if "classifier" in selector else ""
                notes.append(f"{selector['type']}{classifier}")
            table.add_row(
                f"{dependency['group']}:{dependency['module']}",
                dependency.get("version", {}).get("requires", "-"),
                ", ".join(notes),
            )

        self.console.print(table)

        capabilities = variant.get("capabilities")
        if capabilities:
            text = Text()
            for capability in capabilities:
                text.append(f"• {capability['group']}:{capability['name']}:{capability['version']}\n")
            self.console.print(Panel(text, title="Capabilities", border_style="dim"))


def create_reporter(format: str, width: int = 120) -> ReportGenerator:
    """Create a reporter for the specified format.

    Args:
        format: Output format ('json', 'table').
        width: Console width (for table format).

    Returns:
        Appropriate ReportGenerator instance.

    Raises:
        ValueError: If format is not supported.
    """
    if format == "json":
        return JSONReporter()
    elif format == "table":
        return VariantReporter(width=width)
    else:
        raise ValueError(f"Unsupported format: {format}")


REQUIRED_KEYS = ("formatVersion", "component", "createdBy", "variants")


def document_from_json(content: str) -> dict[str, Any]:
    """Load a previously generated module.json.

    Raises:
        ValueError: The content is not JSON or not a module metadata document.
    """
    document = json.loads(content)
    if not isinstance(document, dict):
        raise ValueError("Not a module metadata document: expected a JSON object")
    missing = [key for key in REQUIRED_KEYS if key not in document]
    if missing:
        raise ValueError(f"Not a module metadata document: missing {', '.join(missing)}")
    variants = document["variants"]
    if not variants or not all(isinstance(v, dict) and v.get("files") for v in variants):
        raise ValueError("Not a module metadata document: variants without files")
    return document
