"""Tests for writing module.json."""

import json
from pathlib import Path

import pytest

from maven_gmm.config import GeneratorConfig
from maven_gmm.errors import ChecksumError, MarkerMissingError, PublishError
from maven_gmm.pom import MARKER
from maven_gmm.publisher import publish, write_module_file


def write_project(directory: Path, packaging: str = "jar", marker: bool = True) -> Path:
    comment = f" <!-- {MARKER} -->" if marker else ""
    pom = directory / "pom.xml"
    pom.write_text(
        f"""<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>{comment}
  <groupId>org.gradlex</groupId>
  <artifactId>example</artifactId>
  <version>0.1</version>
  <packaging>{packaging}</packaging>
  <dependencies>
    <dependency>
      <groupId>commons-io</groupId>
      <artifactId>commons-io</artifactId>
      <version>2.6</version>
    </dependency>
  </dependencies>
</project>
""",
        encoding="utf-8",
    )
    jar = directory / "target" / "example-0.1.jar"
    jar.parent.mkdir(parents=True, exist_ok=True)
    jar.write_bytes(b"*")
    return pom


@pytest.fixture
def config():
    return GeneratorConfig(tool_version="3.9.9")


class TestWriteModuleFile:
    """Tests for the atomic writer."""

    def test_creates_directories(self, tmp_path):
        target = write_module_file(b"{}\n", tmp_path / "a" / "b")

        assert target == tmp_path / "a" / "b" / "module.json"
        assert target.read_bytes() == b"{}\n"

    def test_replaces_existing_file(self, tmp_path):
        write_module_file(b"old\n", tmp_path)
        write_module_file(b"new\n", tmp_path)

        assert (tmp_path / "module.json").read_bytes() == b"new\n"
        assert [p.name for p in tmp_path.iterdir()] == ["module.json"]

    def test_output_directory_is_a_file(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        with pytest.raises(PublishError, match="Error creating file"):
            write_module_file(b"{}", blocker)


class TestPublish:
    """Tests for the end-to-end publish flow."""

    def test_writes_module_json(self, tmp_path, config):
        pom = write_project(tmp_path)

        written = publish(pom, config)

        assert written == tmp_path / "target" / "publications" / "maven" / "module.json"
        document = json.loads(written.read_text())
        assert document["component"]["module"] == "example"
        assert document["variants"][0]["files"][0]["name"] == "example-0.1.jar"
        assert document["variants"][0]["files"][0]["size"] == 1
        assert document["variants"][0]["dependencies"] == [
            {"group": "commons-io", "module": "commons-io", "version": {"requires": "2.6"}}
        ]

    def test_custom_output_directory(self, tmp_path, config):
        pom = write_project(tmp_path)

        written = publish(pom, config, output_directory=tmp_path / "out")

        assert written == tmp_path / "out" / "module.json"

    def test_pom_packaging_writes_nothing(self, tmp_path, config):
        pom = write_project(tmp_path, packaging="pom", marker=False)

        assert publish(pom, config) is None
        assert not (tmp_path / "target" / "publications").exists()

    def test_marker_required(self, tmp_path, config):
        pom = write_project(tmp_path, marker=False)

        with pytest.raises(MarkerMissingError):
            publish(pom, config)
        assert not (tmp_path / "target" / "publications").exists()

    def test_marker_check_disabled(self, tmp_path):
        pom = write_project(tmp_path, marker=False)

        written = publish(pom, GeneratorConfig(tool_version="3.9.9", require_marker=False))

        assert written.exists()

    def test_missing_artifact_leaves_no_file(self, tmp_path, config):
        pom = write_project(tmp_path)

        with pytest.raises(ChecksumError):
            publish(pom, config, artifact_path=tmp_path / "missing.jar")
        assert not (tmp_path / "target" / "publications").exists()

    def test_reads_project_config(self, tmp_path):
        pom = write_project(tmp_path)
        (tmp_path / ".maven-gmm.yaml").write_text("tool_version: 3.6.3\noutput_directory: gmm\n")

        written = publish(pom)

        assert written == tmp_path / "gmm" / "module.json"
        assert json.loads(written.read_text())["createdBy"] == {"maven": {"version": "3.6.3"}}
