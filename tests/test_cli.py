"""Tests for the CLI entrypoint."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
from click.testing import CliRunner

from eco_stats import __version__
from eco_stats.cli import _resolve_max_repos, main


def _invoke(args, env=None):
    runner = CliRunner()
    return runner.invoke(main, args, env=env or {})


def test_missing_token_is_fatal():
    result = _invoke(["--topic", "json-schema"], env={"GITHUB_TOKEN": ""})
    assert result.exit_code == 2
    assert "--token" in result.output


def test_version():
    result = _invoke(["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_resolve_max_repos():
    assert _resolve_max_repos(None) is None
    assert _resolve_max_repos(-1) is None
    assert _resolve_max_repos(0) == 0
    assert _resolve_max_repos(25) == 25


def test_options_passed_to_run(tmp_path):
    with patch("eco_stats.orchestrator.run", new=AsyncMock()) as run:
        result = _invoke(
            [
                "--topic", "openapi",
                "--max-repos", "-1",
                "--data-dir", str(tmp_path),
                "--top-n", "3",
                "--delay", "0",
            ],
            env={"GITHUB_TOKEN": "secret"},
        )
    assert result.exit_code == 0, result.output
    kwargs = run.await_args.kwargs
    assert kwargs["token"] == "secret"
    assert kwargs["topic"] == "openapi"
    assert kwargs["max_results"] is None
    assert kwargs["data_dir"] == str(tmp_path)
    assert kwargs["top_n"] == 3
    assert kwargs["delay"] == 0
    assert kwargs["verify_ssl"] is True


def test_env_configuration(tmp_path):
    env = {
        "GITHUB_TOKEN": "t",
        "TOPIC": "asyncapi",
        "MAX_REPOS": "10",
        "DATA_DIR": str(tmp_path),
    }
    with patch("eco_stats.orchestrator.run", new=AsyncMock()) as run:
        result = _invoke([], env=env)
    assert result.exit_code == 0, result.output
    kwargs = run.await_args.kwargs
    assert kwargs["topic"] == "asyncapi"
    assert kwargs["max_results"] == 10
    assert kwargs["data_dir"] == str(tmp_path)


def test_auth_failure_message():
    response = MagicMock(spec=httpx.Response)
    response.status_code = 401
    error = httpx.HTTPStatusError("401", request=MagicMock(), response=response)
    with patch("eco_stats.orchestrator.run", new=AsyncMock(side_effect=error)):
        result = _invoke(["--token", "bad"])
    assert result.exit_code == 1
    assert "Authentication failed" in result.output


def test_unexpected_error_exits_one():
    with patch("eco_stats.orchestrator.run", new=AsyncMock(side_effect=OSError("read-only"))):
        result = _invoke(["--token", "t"])
    assert result.exit_code == 1
    assert "read-only" in result.output
