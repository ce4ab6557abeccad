"""Tests for the offline verification command."""

import pytest

from wipecert.cli.verify import EXIT_INVALID, EXIT_KEY_ERROR, EXIT_VALID, main
from wipecert.services.pdf import wrap_signature
from wipecert.services.records import build_record
from wipecert.services.signing import sign_record


@pytest.fixture
def signed_record(signing_context):
    record = build_record(
        original_name="server 42.pdf",
        mime_type="application/pdf",
        size_bytes=100,
        text="",
    )
    return record.with_signature(sign_record(signing_context, record))


@pytest.fixture
def public_key_file(tmp_path, signing_context):
    path = tmp_path / "public.pem"
    path.write_text(signing_context.public_key_pem)
    return path


def args_for(record, public_key, **overrides) -> list[str]:
    values = {
        "--id": record.id,
        "--name": record.original_name,
        "--time": record.upload_time,
        "--signature": record.signature,
        "--public-key": str(public_key),
    }
    values.update(overrides)
    return [item for pair in values.items() for item in pair]


class TestVerifyCommand:
    """Tests for wipecert-verify."""

    def test_valid(self, signed_record, public_key_file, capsys):
        assert main(args_for(signed_record, public_key_file)) == EXIT_VALID
        assert "valid" in capsys.readouterr().out

    def test_wrapped_signature(self, signed_record, public_key_file):
        """The signature can be pasted as printed on the certificate."""
        printed = "\n".join(wrap_signature(signed_record.signature))
        args = args_for(signed_record, public_key_file, **{"--signature": printed})

        assert main(args) == EXIT_VALID

    def test_wrong_name(self, signed_record, public_key_file, capsys):
        args = args_for(signed_record, public_key_file, **{"--name": "other.pdf"})

        assert main(args) == EXIT_INVALID
        assert "INVALID" in capsys.readouterr().out

    def test_wrong_key(self, signed_record, tmp_path, other_signing_context):
        path = tmp_path / "other.pem"
        path.write_text(other_signing_context.public_key_pem)

        assert main(args_for(signed_record, path)) == EXIT_INVALID

    def test_missing_key_file(self, signed_record, tmp_path):
        assert main(args_for(signed_record, tmp_path / "missing.pem")) == EXIT_KEY_ERROR

    def test_unreadable_key_file(self, signed_record, tmp_path):
        path = tmp_path / "garbage.pem"
        path.write_text("not a key")

        assert main(args_for(signed_record, path)) == EXIT_KEY_ERROR
