"""Tests for provisioning sessions and the external runner."""
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from pom.document import PomDocument
from project.errors import ProvisionError
from provision.runner import ProvisionRunner
from provision.session import ProvisionSession

from conftest import write_pom


class TestProvisionSession:
    """Accumulating bundles and writing the deployment POM."""

    def test_collects_bundle_and_provided_dependencies(self, project_tree):
        session = ProvisionSession(MagicMock())
        session.add_project(PomDocument.read(project_tree / "modules" / "b"))
        session.add_project(PomDocument.read(project_tree / "modules" / "c"))

        assert [str(c) for c in session.bundles] == [
            "com.example:b:1.0.0",
            "org.osgi:osgi.core:4.1.0",
        ]

    def test_skips_optional_and_non_provided(self, tmp_path):
        write_pom(tmp_path, "x", dependencies=[
            ("g", "compiled", "1", "compile"),
            ("g", "tested", "1", "test"),
        ])
        session = ProvisionSession(MagicMock())
        session.add_project(PomDocument.read(tmp_path))
        assert session.bundles == []

    def test_snapshots_use_meta_version(self, tmp_path):
        write_pom(tmp_path, "x", dependencies=[
            ("g", "snap", "1.0-20070101.101010-3", "provided"),
            ("g", "snap", "1.0-SNAPSHOT", "provided"),
        ])
        session = ProvisionSession(MagicMock())
        session.add_project(PomDocument.read(tmp_path))
        assert [c.version for c in session.bundles] == ["1.0-SNAPSHOT"]

    def test_finalize_writes_deployment_pom_and_runs(self, project_tree):
        runner = MagicMock()
        session = ProvisionSession(runner)
        session.add_project(PomDocument.read(project_tree / "modules" / "b"))

        doc = session.finalize(PomDocument.read(project_tree))

        expected = project_tree / "target" / "deployment" / "pom.xml"
        assert doc.path == expected
        written = PomDocument.read(expected)
        assert written.group_id == "com.example.root.build"
        assert written.artifact_id == "deployment"
        assert [d.target.name for d in written.dependencies] == ["b", "osgi.core"]
        runner.run.assert_called_once_with(expected)
        assert session.finalized
        assert session.bundles == []

    def test_finalize_without_deploy(self, project_tree, caplog):
        runner = MagicMock()
        session = ProvisionSession(runner, deploy=False)
        with caplog.at_level("INFO"):
            session.finalize(PomDocument.read(project_tree))
        runner.run.assert_not_called()
        assert "No bundles found!" in caplog.text
        assert "Deployment complete" in caplog.text

    def test_session_cannot_be_reused(self, project_tree):
        session = ProvisionSession(MagicMock(), deploy=False)
        session.finalize(PomDocument.read(project_tree))
        with pytest.raises(RuntimeError):
            session.add_project(PomDocument.read(project_tree / "modules" / "b"))

    def test_runner_failure_still_ends_session(self, project_tree):
        runner = MagicMock()
        runner.run.side_effect = ProvisionError("boom")
        session = ProvisionSession(runner)
        session.add_project(PomDocument.read(project_tree / "modules" / "b"))
        with pytest.raises(ProvisionError):
            session.finalize(PomDocument.read(project_tree))
        assert session.finalized

    def test_additional_poms(self, project_tree, tmp_path):
        extra = write_pom(tmp_path / "extra", "extra", packaging="bundle", group="org.extra")
        session = ProvisionSession(MagicMock())
        session.add_additional_poms([str(extra), " ", str(tmp_path / "missing.xml")])
        assert [str(c) for c in session.bundles] == ["org.extra:extra:1.0.0"]


class TestProvisionRunner:
    """Launching the runner executable."""

    def test_command_line(self, tmp_path):
        runner = ProvisionRunner("pax-run", "equinox", ["--profiles=log"])
        cmd = runner.command(tmp_path / "pom.xml")
        assert cmd == ["pax-run", "--overwrite", "--platform=equinox", "--profiles=log",
                       str((tmp_path / "pom.xml").resolve())]

    @patch("provision.runner.shutil.which", return_value=None)
    def test_missing_executable(self, _which, tmp_path):
        with pytest.raises(ProvisionError, match="not found"):
            ProvisionRunner().run(tmp_path / "pom.xml")

    @patch("provision.runner.subprocess.run")
    @patch("provision.runner.shutil.which", return_value="/usr/bin/pax-run")
    def test_successful_run(self, _which, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=0)
        assert ProvisionRunner().run(Path(tmp_path / "pom.xml")) == 0
        args, kwargs = mock_run.call_args
        assert args[0][0] == "pax-run"
        assert kwargs == {"check": False}

    @patch("provision.runner.subprocess.run")
    @patch("provision.runner.shutil.which", return_value="/usr/bin/pax-run")
    def test_non_zero_exit(self, _which, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=3)
        with pytest.raises(ProvisionError, match="status 3"):
            ProvisionRunner().run(tmp_path / "pom.xml")

    @patch("provision.runner.subprocess.run", side_effect=OSError("exec format error"))
    @patch("provision.runner.shutil.which", return_value="/usr/bin/pax-run")
    def test_start_failure(self, _which, _run, tmp_path):
        with pytest.raises(ProvisionError, match="Unable to start"):
            ProvisionRunner().run(tmp_path / "pom.xml")
