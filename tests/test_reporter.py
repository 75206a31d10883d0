"""Tests for report generators."""

import pytest

from maven_gmm.generator import ModuleMetadataGenerator
from maven_gmm.models import Capability, Dependency, ProducedArtifact, ProjectDescriptor
from maven_gmm.reporter import JSONReporter, VariantReporter, create_reporter, document_from_json


@pytest.fixture
def document(tmp_path):
    jar = tmp_path / "lib-1.0.jar"
    jar.write_bytes(b"abc")
    descriptor = ProjectDescriptor(
        "org.example",
        "lib",
        "1.0",
        ProducedArtifact(jar),
        dependencies=[
            Dependency("d", "api-dep", "1.0"),
            Dependency("r", "runtime-dep", "2.0", scope="runtime", classifier="linux"),
        ],
        platform_dependencies=[Dependency("p", "bom", "3.0", scope=None)],
        capabilities=[Capability("org.example", "lib-feature")],
    )
    return ModuleMetadataGenerator(tool_version="3.9.9").build(descriptor)


class TestJSONReporter:
    """Tests for JSON output."""

    def test_matches_published_bytes(self, document):
        report = JSONReporter().generate(document)

        assert report.encode("utf-8") == ModuleMetadataGenerator.serialize(document)
        assert document_from_json(report) == document


class TestVariantReporter:
    """Tests for rich table output."""

    def test_lists_variants_and_dependencies(self, document):
        report = VariantReporter().generate(document)

        assert "org.example:lib:1.0" in report
        assert "apiElements (java-api)" in report
        assert "runtimeElements (java-runtime)" in report
        assert "d:api-dep" in report
        assert "r:runtime-dep" in report
        assert "jar:linux" in report
        assert "platform" in report
        assert "org.example:lib-feature:1.0" in report

    def test_runtime_dependency_only_in_runtime_table(self, document):
        report = VariantReporter().generate(document)
        api_section, runtime_section = report.split("runtimeElements (java-runtime)")

        assert "r:runtime-dep" not in api_section
        assert "r:runtime-dep" in runtime_section


class TestCreateReporter:
    """Tests for the reporter factory."""

    def test_known_formats(self):
        assert isinstance(create_reporter("json"), JSONReporter)
        assert isinstance(create_reporter("table"), VariantReporter)

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unsupported format"):
            create_reporter("xml")


class TestDocumentFromJson:
    """Tests for loading an existing module.json."""

    def test_rejects_other_json(self):
        with pytest.raises(ValueError, match="missing formatVersion, component, createdBy, variants"):
            document_from_json('{"name": "package.json"}')

    def test_rejects_non_object(self):
        with pytest.raises(ValueError, match="JSON object"):
            document_from_json("[1, 2]")

    def test_rejects_variants_without_files(self):
        content = '{"formatVersion": "1.1", "component": {}, "createdBy": {}, "variants": [{"name": "x"}]}'

        with pytest.raises(ValueError, match="without files"):
            document_from_json(content)
