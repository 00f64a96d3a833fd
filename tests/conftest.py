"""Shared fixtures: on-disk project trees built from real pom.xml files."""
from __future__ import annotations

from pathlib import Path

import pytest

from constants import Constants

POM_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
{parent}  <groupId>{group}</groupId>
  <artifactId>{artifact}</artifactId>
  <version>{version}</version>
  <packaging>{packaging}</packaging>
{modules}{dependencies}</project>
"""


def write_pom(directory, artifact, group="com.example", version="1.0.0", packaging="pom",
              modules=(), parent=None, relative_path=None, dependencies=()):
    """Write a pom.xml into ``directory`` and return its path.

    ``parent`` is a (group, artifact, version) tuple; ``dependencies`` holds
    (group, artifact, version, scope) tuples.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    parent_xml = ""
    if parent is not None:
        rel = f"    <relativePath>{relative_path}</relativePath>\n" if relative_path else ""
        parent_xml = (
            "  <parent>\n"
            f"    <groupId>{parent[0]}</groupId>\n"
            f"    <artifactId>{parent[1]}</artifactId>\n"
            f"    <version>{parent[2]}</version>\n"
            f"{rel}"
            "  </parent>\n"
        )
    modules_xml = ""
    if modules:
        modules_xml = "  <modules>\n" + "".join(
            f"    <module>{m}</module>\n" for m in modules
        ) + "  </modules>\n"
    deps_xml = ""
    if dependencies:
        deps_xml = "  <dependencies>\n" + "".join(
            "    <dependency>\n"
            f"      <groupId>{g}</groupId>\n"
            f"      <artifactId>{a}</artifactId>\n"
            f"      <version>{v}</version>\n"
            f"      <scope>{s}</scope>\n"
            "    </dependency>\n"
            for g, a, v, s in dependencies
        ) + "  </dependencies>\n"

    path = directory / "pom.xml"
    path.write_text(
        POM_TEMPLATE.format(
            parent=parent_xml, group=group, artifact=artifact, version=version,
            packaging=packaging, modules=modules_xml, dependencies=deps_xml,
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def project_tree(tmp_path):
    """A small project::

        A/pom.xml                  root (modules, provision)
        A/modules/pom.xml          aggregator (b, c)
        A/modules/b/pom.xml        bundle, parent = modules, relativePath ../pom.xml
        A/modules/c/pom.xml        empty aggregator
        A/provision/pom.xml        provisioning POM
    """
    root = tmp_path / "A"
    write_pom(root, "root", modules=["modules", "provision"])
    write_pom(root / "modules", "modules", modules=["b", "c"],
              parent=("com.example", "root", "1.0.0"), relative_path="../pom.xml")
    write_pom(root / "modules" / "b", "b", packaging="bundle",
              parent=("com.example", "modules", "1.0.0"), relative_path="../pom.xml",
              dependencies=[("org.osgi", "osgi.core", "4.1.0", "provided")])
    write_pom(root / "modules" / "c", "c",
              parent=("com.example", "modules", "1.0.0"), relative_path="../pom.xml")
    write_pom(root / "provision", "provision",
              parent=("com.example", "root", "1.0.0"), relative_path="../pom.xml")
    return root


@pytest.fixture(autouse=True)
def restore_constants():
    """Config loading writes onto Constants; put the defaults back after each test."""
    saved = {k: v for k, v in vars(Constants).items() if k.isupper()}
    yield
    for key, value in saved.items():
        setattr(Constants, key, value)
