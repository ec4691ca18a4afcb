"""Tests for the command-line interface."""

import json
from unittest.mock import AsyncMock, patch

import pytest
import structlog

from cg_bot.api.errors import BotHTTPError
from cg_bot.api.models import SendMessageResult
from cg_bot.cli import main
from cg_bot.webhooks.security import SIGNATURE_HEADER, TIMESTAMP_HEADER, compute_signature

NOW_MS = 1_700_000_000_000


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from the caller's environment and logging config."""
    for name in ("BOT_TOKEN", "CG_BASE_URL", "CG_REQUEST_TIMEOUT", "WEBHOOK_SECRET", "DEBUG_SDK", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield
    structlog.reset_defaults()


@pytest.fixture
def payload_file(tmp_path):
    """A raw payload on disk."""
    path = tmp_path / "payload.json"
    path.write_bytes(b'{"a":1}')
    return path


class TestSignAndVerify:
    """Tests for the sign and verify commands."""

    def test_sign(self, payload_file, capsys):
        """Test sign prints verifiable headers."""
        code = main(["sign", str(payload_file), "--secret", "s3cr3t", "--timestamp", str(NOW_MS)])

        headers = json.loads(capsys.readouterr().out)
        assert code == 0
        assert headers[TIMESTAMP_HEADER] == str(NOW_MS)
        assert headers[SIGNATURE_HEADER] == "sha256=" + compute_signature(b'{"a":1}', "s3cr3t", str(NOW_MS))

    def test_sign_uses_env_secret(self, payload_file, capsys, monkeypatch):
        """Test the secret defaults to WEBHOOK_SECRET."""
        monkeypatch.setenv("WEBHOOK_SECRET", "s3cr3t")

        assert main(["sign", str(payload_file), "--timestamp", str(NOW_MS)]) == 0

    def test_sign_without_secret(self, payload_file):
        """Test sign fails without any secret."""
        assert main(["sign", str(payload_file)]) == 1

    def test_verify_valid(self, payload_file, capsys):
        """Test verify succeeds for a correct signature."""
        signature = compute_signature(b'{"a":1}', "s3cr3t", str(NOW_MS))

        code = main(
            [
                "verify",
                str(payload_file),
                "--secret", "s3cr3t",
                "--signature", signature,
                "--timestamp", str(NOW_MS),
                "--now", str(NOW_MS),
            ]
        )

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["valid"] is True
        assert output["reason"] is None

    def test_verify_oversized_timestamp(self, payload_file, capsys):
        """Test verify reports a huge timestamp as malformed instead of crashing."""
        code = main(
            [
                "verify",
                str(payload_file),
                "--secret", "s3cr3t",
                "--signature", "0" * 64,
                "--timestamp", "9" * 5000,
            ]
        )

        output = json.loads(capsys.readouterr().out)
        assert code == 1
        assert output["reason"] == "MALFORMED_TIMESTAMP"

    def test_verify_expired(self, payload_file, capsys):
        """Test verify reports the failure reason."""
        signature = compute_signature(b'{"a":1}', "s3cr3t", str(NOW_MS))

        code = main(
            [
                "verify",
                str(payload_file),
                "--secret", "s3cr3t",
                "--signature", signature,
                "--timestamp", str(NOW_MS),
                "--now", str(NOW_MS + 600_001),
            ]
        )

        output = json.loads(capsys.readouterr().out)
        assert code == 1
        assert output["reason"] == "TIMESTAMP_EXPIRED"
        assert output["age_ms"] == 600_001


class TestSend:
    """Tests for the send command."""

    def test_send_without_token(self):
        """Test send fails without BOT_TOKEN."""
        assert main(["send", "--community", "c", "--channel", "ch", "--text", "hi"]) == 1

    def test_send(self, monkeypatch, capsys):
        """Test send posts the message and prints the result."""
        monkeypatch.setenv("BOT_TOKEN", "tok")
        result = SendMessageResult.model_validate(
            {
                "message": {
                    "id": "msg_1",
                    "channelId": "ch",
                    "body": {"version": "1", "content": [{"type": "text", "value": "hi"}]},
                    "createdAt": "2024-01-01T00:00:00.000Z",
                    "updatedAt": "2024-01-01T00:00:00.000Z",
                    "botId": "bot_1",
                }
            }
        )

        with patch(
            "cg_bot.cli.BotClient.send_message", new_callable=AsyncMock, return_value=result
        ) as send:
            code = main(["send", "--community", "c", "--channel", "ch", "--text", "hi", "--reply-to", "m0"])

        assert code == 0
        send.assert_awaited_once_with("c", "ch", text="hi", reply_to="m0")
        assert json.loads(capsys.readouterr().out)["message"]["id"] == "msg_1"

    def test_send_api_error(self, monkeypatch):
        """Test API failures produce a non-zero exit code."""
        monkeypatch.setenv("BOT_TOKEN", "tok")

        with patch(
            "cg_bot.cli.BotClient.send_message",
            new_callable=AsyncMock,
            side_effect=BotHTTPError("FORBIDDEN", "nope", 403),
        ):
            code = main(["send", "--community", "c", "--channel", "ch", "--text", "hi"])

        assert code == 1


def test_no_command_prints_help(capsys):
    """Test running without a command prints help."""
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out
