"""Unit tests for DeploymentRunner and the result models.

End-to-end runs of the workflow against the fake docker CLI, covering the
step order, the abort points and what each run leaves behind.
"""

from __future__ import annotations

import json

import pytest

from conftest import RecordingInput


def _runner(answers, work_dir, *, confirm=None, force=False, dry_run=False, containers=None):
    from nifi_deploy.deploy.config import DeploymentConfig
    from nifi_deploy.deploy.container import ContainerManager
    from nifi_deploy.deploy.workflow import DeploymentRunner

    source = RecordingInput(answers, confirm=confirm)
    config = DeploymentConfig(work_dir=work_dir, force=force, dry_run=dry_run, interactive=False)
    runner = DeploymentRunner(config, source, containers or ContainerManager(dry_run=dry_run))
    return runner, source


# ===========================================================================
# Result models
# ===========================================================================


class TestDeploymentResult:
    def test_mark_complete_passed(self):
        from nifi_deploy.deploy.results import DeploymentResult, OverallStatus, StepResult

        result = DeploymentResult(run_id="abc")
        result.steps.append(StepResult(name="volumes", status=OverallStatus.PASSED))
        result.mark_complete()
        assert result.overall_status == OverallStatus.PASSED
        assert result.summary == "1/1 steps passed"
        assert result.completed_at is not None

    def test_mark_complete_failed_on_error(self):
        from nifi_deploy.deploy.results import DeploymentResult, OverallStatus

        result = DeploymentResult(run_id="abc", error="boom")
        result.mark_complete()
        assert result.overall_status == OverallStatus.FAILED

    def test_explicit_status(self):
        from nifi_deploy.deploy.results import DeploymentResult, OverallStatus

        result = DeploymentResult(run_id="abc")
        result.mark_complete(OverallStatus.SKIPPED)
        assert result.overall_status == OverallStatus.SKIPPED

    def test_serialization(self):
        from nifi_deploy.deploy.results import DeploymentResult, StepResult

        result = DeploymentResult(run_id="abc", steps=[StepResult(name="volumes", detail={"volumes": ["a"]})])
        data = json.loads(result.model_dump_json())
        assert data["run_id"] == "abc"
        assert data["steps"][0]["detail"] == {"volumes": ["a"]}
        assert result.step("volumes") is result.steps[0]
        assert result.step("launch") is None


# ===========================================================================
# Runner
# ===========================================================================


class TestDeploymentRunnerLocalhost:
    def test_blank_port_defaults_to_8443(self, fake_docker, tmp_path, localhost_answers):
        from nifi_deploy.deploy.results import OverallStatus

        runner, _ = _runner(localhost_answers, tmp_path)
        result = runner.run()

        assert result.error is None
        assert result.overall_status == OverallStatus.PASSED
        assert runner.config.http_port == 8443
        assert result.destination == "localhost"
        assert result.container_name == "nifi"
        assert result.image == "apache/nifi:latest"
        assert result.container_id == "4f1c2a9be07d"
        assert [s.name for s in result.steps] == ["volumes", "reconcile", "destination", "collect", "launch"]

        (run,) = fake_docker.commands("run")
        assert "8443:8443" in run

    def test_command_order(self, fake_docker, tmp_path, localhost_answers):
        runner, _ = _runner(localhost_answers, tmp_path)
        runner.run()

        verbs = [" ".join(args[:2]) for args in fake_docker.calls]
        assert verbs[:8] == ["volume create"] * 8
        assert verbs[8:] == ["ps -a", "ps -a", "run --name"]

    def test_invalid_destination(self, fake_docker, tmp_path, localhost_answers):
        from nifi_deploy.deploy.results import OverallStatus

        localhost_answers["destination"] = "Server"
        runner, source = _runner(localhost_answers, tmp_path)
        result = runner.run()

        assert result.overall_status == OverallStatus.FAILED
        assert result.error == "Invalid deploy destination."
        assert result.error_type == "ValidationError"
        assert result.step("destination").status == OverallStatus.FAILED
        assert source.asked == ["destination"]
        assert len(fake_docker.volumes) == 8
        assert fake_docker.commands("run") == []

    def test_invalid_port_aborts_before_launch(self, fake_docker, tmp_path, localhost_answers):
        localhost_answers["http_port"] = "80a"
        runner, _ = _runner(localhost_answers, tmp_path)
        result = runner.run()

        assert result.error_type == "ValidationError"
        assert fake_docker.commands("run") == []


class TestDeploymentRunnerReconcile:
    def test_declined_deletion(self, fake_docker, tmp_path, localhost_answers):
        from nifi_deploy.deploy.results import OverallStatus

        fake_docker.containers = {"nifi"}
        runner, source = _runner(localhost_answers, tmp_path, confirm=False)
        result = runner.run()

        assert result.overall_status == OverallStatus.FAILED
        assert result.error_type == "ContainerExistsError"
        assert result.step("reconcile").status == OverallStatus.FAILED
        assert fake_docker.commands("rm") == []
        assert fake_docker.commands("run") == []
        assert source.asked == []
        # volumes are not rolled back
        assert len(fake_docker.volumes) == 8

    def test_confirmed_deletion(self, fake_docker, tmp_path, localhost_answers):
        fake_docker.containers = {"nifi"}
        runner, _ = _runner(localhost_answers, tmp_path, confirm=True)
        result = runner.run()

        assert result.error is None
        assert result.step("reconcile").detail["removed"] == ["nifi"]
        verbs = [args[0] for args in fake_docker.calls]
        assert verbs.index("rm") < verbs.index("run")

    def test_force_removes_both_names(self, fake_docker, tmp_path, localhost_answers):
        fake_docker.containers = {"nifi", "nifi-v0.1"}
        runner, source = _runner(localhost_answers, tmp_path, force=True)
        result = runner.run()

        assert result.error is None
        assert source.confirmations == []
        assert fake_docker.commands("rm") == [["rm", "-f", "nifi"], ["rm", "-f", "nifi-v0.1"]]


class TestDeploymentRunnerServer:
    def test_full_server_run(self, fake_docker, work_dir, server_answers):
        runner, _ = _runner(server_answers, work_dir)
        result = runner.run()

        assert result.error is None
        assert result.container_name == "nifi-v0.1"
        assert result.image == "nifi"
        assert [s.name for s in result.steps] == [
            "volumes", "reconcile", "destination", "certificates", "collect", "launch",
        ]
        assert (work_dir / "Dockerfile").is_file()
        assert [args[0] for args in fake_docker.calls][-2:] == ["build", "run"]

    def test_missing_keystore_aborts_before_prompts(self, fake_docker, work_dir, server_answers):
        from nifi_deploy.deploy.results import OverallStatus

        (work_dir / "keystore.pkcs12").unlink()
        runner, source = _runner(server_answers, work_dir)
        result = runner.run()

        assert result.overall_status == OverallStatus.FAILED
        assert result.error_type == "MissingCertificateError"
        assert result.step("certificates").status == OverallStatus.FAILED
        assert result.step("collect") is None
        assert source.asked == ["destination"]
        assert fake_docker.commands("build") == []
        assert not (work_dir / "Dockerfile").exists()

    def test_build_failure_is_reported(self, fake_docker, work_dir, server_answers):
        fake_docker.fail_on = "build"
        runner, _ = _runner(server_answers, work_dir)
        result = runner.run()

        assert result.error == "Failed to build Docker image."
        assert result.error_type == "ExternalToolError"
        assert result.step("launch").error == "Failed to build Docker image."
        assert fake_docker.commands("run") == []

    def test_missing_store_password_non_interactive(self, fake_docker, work_dir, server_answers):
        del server_answers["store_password"]
        runner, _ = _runner(server_answers, work_dir)
        result = runner.run()

        assert result.error_type == "ValidationError"
        assert "store_password" in result.error
        assert fake_docker.commands("build") == []


class TestDeploymentRunnerDryRun:
    def test_dry_run_executes_nothing(self, work_dir, server_answers):
        from unittest.mock import patch

        with patch("subprocess.run") as mock_run:
            runner, _ = _runner(server_answers, work_dir, dry_run=True)
            result = runner.run()
            mock_run.assert_not_called()

        assert result.error is None
        assert result.dry_run is True
        assert result.container_id is None
        assert not (work_dir / "Dockerfile").exists()
        assert [cmd[1] for cmd in runner.containers.history][-2:] == ["build", "run"]

    def test_volume_failure_stops_run(self, fake_docker, tmp_path, localhost_answers):
        from nifi_deploy.deploy.results import OverallStatus

        fake_docker.fail_on = "volume"
        runner, source = _runner(localhost_answers, tmp_path)
        result = runner.run()

        assert result.overall_status == OverallStatus.FAILED
        assert result.step("volumes").status == OverallStatus.FAILED
        assert len(result.steps) == 1
        assert source.asked == []


def test_run_context_is_cleared(fake_docker, tmp_path, localhost_answers):
    import structlog

    runner, _ = _runner(localhost_answers, tmp_path)
    runner.run()
    assert structlog.contextvars.get_contextvars() == {}


@pytest.mark.parametrize("destination", ["localhost", "server"])
def test_run_id_is_bound(fake_docker, work_dir, localhost_answers, server_answers, destination):
    answers = localhost_answers if destination == "localhost" else server_answers
    runner, _ = _runner(answers, work_dir)
    result = runner.run()
    assert result.run_id == runner.config.run_id
