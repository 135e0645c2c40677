"""Tests for the ``crpt-submit`` Typer CLI."""

import base64
import json

import httpx
import pytest
from typer.testing import CliRunner

from CrptKit.DocumentSubmit import cli
from CrptKit.DocumentSubmit.api import CrptApi
from CrptKit.DocumentSubmit.errors import AdmissionCancelled

from .conftest import BASE_URL, SIGNATURE, TOKEN

runner = CliRunner()


@pytest.fixture
def document_file(tmp_path, sample_document):
    path = tmp_path / "document.json"
    path.write_text(sample_document.model_dump_json(by_alias=True), encoding="utf-8")
    return path


@pytest.fixture
def mock_registry(monkeypatch):
    """Route the CLI's client through an in-memory registry."""
    state = {"status": 200, "body": '{"id":"abc"}', "requests": []}

    def handler(request):
        state["requests"].append(request)
        return httpx.Response(state["status"], text=state["body"])

    def build_api(settings):
        return CrptApi(
            settings.window_unit,
            settings.max_requests_per_window,
            BASE_URL,
            settings.request_timeout_s,
            http_transport=httpx.MockTransport(handler),
        )

    monkeypatch.setattr(cli, "_build_api", build_api)
    return state


def test_submit_prints_registry_payload(document_file, mock_registry):
    result = runner.invoke(
        cli.app,
        ["submit", str(document_file), "--pg", "milk", "--token", TOKEN, "--signature", SIGNATURE],
    )

    assert result.exit_code == 0, result.output
    assert '{"id":"abc"}' in result.stdout
    (request,) = mock_registry["requests"]
    assert request.url.params["pg"] == "milk"
    assert json.loads(request.content)["signature"] == SIGNATURE


def test_submit_reads_token_and_signature_file(document_file, mock_registry, monkeypatch, tmp_path):
    signature_file = tmp_path / "signature.b64"
    signature_file.write_text(SIGNATURE + "\n", encoding="utf-8")
    monkeypatch.setenv("CRPT_TOKEN", "env-token")

    result = runner.invoke(
        cli.app,
        ["submit", str(document_file), "--pg", "milk", "--signature-file", str(signature_file)],
    )

    assert result.exit_code == 0, result.output
    request = mock_registry["requests"][0]
    assert request.headers["authorization"] == "Bearer env-token"
    assert json.loads(request.content)["signature"] == SIGNATURE


def test_submit_rejection_exits_with_failure(document_file, mock_registry):
    mock_registry.update(status=403, body="forbidden")

    result = runner.invoke(
        cli.app,
        ["submit", str(document_file), "--pg", "milk", "--token", TOKEN, "--signature", SIGNATURE],
    )

    assert result.exit_code == cli.EXIT_FAILURE


@pytest.mark.parametrize(
    "signature_args",
    [[], ["--signature", SIGNATURE, "--signature-file", "sig.b64"]],
)
def test_submit_requires_exactly_one_signature(document_file, mock_registry, signature_args):
    result = runner.invoke(
        cli.app,
        ["submit", str(document_file), "--pg", "milk", "--token", TOKEN, *signature_args],
    )

    assert result.exit_code == cli.EXIT_USAGE
    assert mock_registry["requests"] == []


def test_submit_blank_signature_is_usage_error(document_file, mock_registry):
    result = runner.invoke(
        cli.app,
        ["submit", str(document_file), "--pg", "milk", "--token", TOKEN, "--signature", "  "],
    )

    assert result.exit_code == cli.EXIT_USAGE
    assert mock_registry["requests"] == []


def test_submit_cancelled_admission(document_file, monkeypatch):
    class CancelledApi:
        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return None

        def submit(self, *args, **kwargs):
            raise AdmissionCancelled("limiter shut down")

    monkeypatch.setattr(cli, "_build_api", lambda settings: CancelledApi())

    result = runner.invoke(
        cli.app,
        ["submit", str(document_file), "--pg", "milk", "--token", TOKEN, "--signature", SIGNATURE],
    )

    assert result.exit_code == cli.EXIT_CANCELLED


def test_invalid_document_file(tmp_path, mock_registry):
    path = tmp_path / "broken.json"
    path.write_text('{"unexpected": true}', encoding="utf-8")

    result = runner.invoke(
        cli.app,
        ["submit", str(path), "--pg", "milk", "--token", TOKEN, "--signature", SIGNATURE],
    )

    assert result.exit_code == cli.EXIT_USAGE


def test_encode_prints_signable_text(document_file, sample_document):
    result = runner.invoke(cli.app, ["encode", str(document_file)])

    assert result.exit_code == 0, result.output
    text = result.stdout.strip()
    assert json.loads(base64.b64decode(text))["doc_id"] == sample_document.doc_id


def test_settings_masks_token(monkeypatch):
    monkeypatch.setenv("CRPT_TOKEN", "secret-token")
    monkeypatch.setenv("CRPT_MAX_REQUESTS_PER_WINDOW", "42")

    result = runner.invoke(cli.app, ["settings"])

    assert result.exit_code == 0, result.output
    shown = json.loads(result.stdout)
    assert shown["token"] == "***masked***"
    assert shown["max_requests_per_window"] == 42


def test_version_flag():
    result = runner.invoke(cli.app, ["--version"])
    assert result.exit_code == 0
    assert "crpt-submit" in result.stdout


def test_missing_signature_file_is_usage_error(document_file, mock_registry, tmp_path):
    result = runner.invoke(
        cli.app,
        [
            "submit",
            str(document_file),
            "--pg",
            "milk",
            "--token",
            TOKEN,
            "--signature-file",
            str(tmp_path / "absent.b64"),
        ],
    )

    assert result.exit_code == cli.EXIT_USAGE
    assert not isinstance(result.exception, OSError)
    assert mock_registry["requests"] == []


def test_invalid_environment_is_usage_error(monkeypatch):
    monkeypatch.setenv("CRPT_MAX_REQUESTS_PER_WINDOW", "0")

    result = runner.invoke(cli.app, ["settings"])

    assert result.exit_code == cli.EXIT_USAGE
    assert isinstance(result.exception, SystemExit)


def test_settings_shows_quota_shorthand(monkeypatch):
    monkeypatch.setenv("CRPT_QUOTA", "100/second")

    result = runner.invoke(cli.app, ["settings"])

    assert result.exit_code == 0, result.output
    shown = json.loads(result.stdout)
    assert shown["max_requests_per_window"] == 100
    assert shown["window_unit"] == "second"
