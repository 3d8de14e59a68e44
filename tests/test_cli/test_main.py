"""
Unit tests for the CLI commands.
"""

from unittest.mock import patch

import pytest

import main
from src.errors import ConfigurationError, ValidationError
from src.models.verification import BookVerification
from src.utils.settings_store import AppSettings, JsonFileStore, load_settings

CONFIGURED = AppSettings(naver_client_id="id", naver_client_secret="secret")


@pytest.fixture
def upload(tmp_path):
    path = tmp_path / "reports.csv"
    path.write_text(
        "학번,책제목,작가,감상문\n20241001,어린왕자,생텍쥐페리,좋았다\n20241002,,헤세,좋았다\n",
        encoding="utf-8"
    )
    return path


def _args(*argv):
    return main.build_parser().parse_args(list(argv))


def test_parse_mapping_args():
    assert main.parse_mapping_args(["student_id=출석", "review = 느낀점"]) == {
        "student_id": "출석",
        "review": "느낀점",
    }
    assert main.parse_mapping_args(None) == {}

    with pytest.raises(ValidationError):
        main.parse_mapping_args(["student_id"])


def test_mask():
    assert main._mask("") == "(미설정)"
    assert main._mask("abcdefgh") == "abcd****"


def test_verify_writes_results(upload, tmp_path, capsys):
    output = tmp_path / "results.xlsx"
    args = _args("verify", str(upload), "--output", str(output))

    with patch('main.load_app_settings', return_value=CONFIGURED), \
            patch('main.BookVerifier') as mock_verifier:
        mock_verifier.return_value.verify.return_value = BookVerification(found=True, matched_title="어린 왕자")
        exit_code = main.cmd_verify(args)

    assert exit_code == main.EXIT_OK
    assert output.exists()
    out = capsys.readouterr().out
    assert "3행: 책제목이 비어있습니다." in out
    assert "검증 완료: 1건" in out
    mock_verifier.return_value.close.assert_called_once()


def test_verify_requires_naver_keys(upload):
    with patch('main.load_app_settings', return_value=AppSettings()):
        with pytest.raises(ConfigurationError):
            main.cmd_verify(_args("verify", str(upload)))


def test_verify_asks_for_mapping(tmp_path, capsys):
    path = tmp_path / "reports.csv"
    path.write_text("출석,제목,저자,느낀점\n1,데미안,헤세,좋았다\n", encoding="utf-8")

    with patch('main.load_app_settings', return_value=CONFIGURED), \
            patch('main.BookVerifier') as mock_verifier:
        exit_code = main.cmd_verify(_args("verify", str(path)))

    assert exit_code == main.EXIT_NEEDS_MAPPING
    assert "감지된 헤더: 출석, 제목, 저자, 느낀점" in capsys.readouterr().out
    mock_verifier.assert_not_called()


def test_verify_with_manual_mapping(tmp_path):
    path = tmp_path / "reports.csv"
    path.write_text("출석,제목,저자,느낀점\n1,데미안,헤세,좋았다\n", encoding="utf-8")
    args = _args(
        "verify", str(path),
        "--map", "student_id=출석", "--map", "review=느낀점",
        "--output", str(tmp_path / "out.xlsx")
    )

    with patch('main.load_app_settings', return_value=CONFIGURED), \
            patch('main.BookVerifier') as mock_verifier:
        mock_verifier.return_value.verify.return_value = BookVerification(found=False)
        exit_code = main.cmd_verify(args)

    assert exit_code == main.EXIT_OK
    mock_verifier.return_value.verify.assert_called_once_with("데미안", "헤세")


def test_settings_saved_and_masked(tmp_path, capsys):
    settings_path = tmp_path / "settings.json"
    args = _args(
        "--settings-path", str(settings_path),
        "settings", "--naver-client-id", "client-id-1234", "--ai-provider", "openai"
    )

    assert main.cmd_settings(args) == main.EXIT_OK

    stored = load_settings(JsonFileStore(settings_path))
    assert stored.naver_client_id == "client-id-1234"
    assert stored.ai_provider == "openai"
    out = capsys.readouterr().out
    assert "clie**********" in out
    assert "client-id-1234" not in out


def test_template_command(tmp_path):
    output = tmp_path / "template.xlsx"

    assert main.cmd_template(_args("template", "--output", str(output))) == main.EXIT_OK
    assert output.exists()


def test_main_reports_domain_errors(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    upload = tmp_path / "reports.pdf"
    upload.write_bytes(b"%PDF-1.4")

    with patch('main.load_app_settings', return_value=CONFIGURED):
        with pytest.raises(SystemExit) as exc_info:
            main.main(["verify", str(upload)])

    assert exc_info.value.code == main.EXIT_FAILURE
    assert "지원하지 않는 파일 형식입니다" in capsys.readouterr().out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
