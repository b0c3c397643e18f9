import pytest

from ballast.errors import ExecCreateError, ExecutionError
from ballast.lifecycle.runner import CommandRunner


@pytest.fixture
def container(runtime):
    runtime.create("box", "ubuntu:latest", ["sleep", "3600"])
    runtime.start("box")
    return runtime.container("box")


def test_execute_returns_output(runtime, container):
    container.files["/ballast"] = 42
    output = CommandRunner(runtime).execute(container.id, ["stat", "-c", "%s", "/ballast"])
    assert output == "42\n"


def test_non_zero_exit_raises_with_code_and_output(runtime, container):
    container.failures["df"] = (2, "df: /: permission denied\n")
    with pytest.raises(ExecutionError) as exc_info:
        CommandRunner(runtime).execute(container.id, ["df", "--block-size=1G", "/"])
    assert exc_info.value.exit_code == 2
    assert "permission denied" in exc_info.value.output


def test_run_reports_exit_code_without_raising(runtime, container):
    result = CommandRunner(runtime).run(container.id, ["test", "-e", "/ballast"])
    assert result.exit_code == 1


def test_stopped_container_cannot_exec(runtime, container):
    runtime.stop("box")
    with pytest.raises(ExecCreateError) as exc_info:
        CommandRunner(runtime).execute(container.id, ["true"])
    assert exc_info.value.exit_code is None


def test_unfinished_command_is_not_success(runtime, container, monkeypatch):
    monkeypatch.setattr(
        runtime, "exec_inspect", lambda exec_id: {"ExitCode": None, "Running": True}
    )
    with pytest.raises(ExecutionError) as exc_info:
        CommandRunner(runtime).execute(container.id, ["df", "--block-size=1G", "/"])
    assert exc_info.value.exit_code is None
