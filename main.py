"""
ReadOrNot - Book Report Verification

CLI entry point for verifying uploaded book reports.
"""

import argparse
import logging
import sys
from typing import Dict, List

import config.settings as settings
from src.agents.book_verifier import BookVerifier
from src.agents.review_analyzer import ReviewAnalyzer
from src.errors import ConfigurationError, ReadOrNotError, ValidationError
from src.ingestion.header_mapper import FIELD_LABELS, apply_overrides, map_headers
from src.ingestion.report_extractor import extract_reports
from src.ingestion.spreadsheet_reader import read_file
from src.models.report import REQUIRED_FIELDS
from src.orchestrator import VerificationOrchestrator
from src.utils.export import default_export_name, export_results, write_template
from src.utils.settings_store import (
    AppSettings,
    JsonFileStore,
    has_ai_key,
    has_naver_keys,
    load_settings,
    save_settings,
    settings_from_env,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NEEDS_MAPPING = 2


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def parse_mapping_args(values: List[str]) -> Dict[str, str]:
    """Parse repeated field=header arguments."""
    mapping = {}
    for value in values or []:
        if "=" not in value:
            raise ValidationError(f"매핑 형식이 올바르지 않습니다 (field=header): {value}")
        field_name, header = value.split("=", 1)
        mapping[field_name.strip()] = header.strip()
    return mapping


def load_app_settings(settings_path: str) -> AppSettings:
    """Stored settings with environment credentials layered on top."""
    return settings_from_env(load_settings(JsonFileStore(settings_path)))


def _mask(value: str) -> str:
    if not value:
        return "(미설정)"
    return value[:4] + "*" * max(len(value) - 4, 0)


def cmd_verify(args) -> int:
    app_settings = load_app_settings(args.settings_path)
    if not has_naver_keys(app_settings):
        raise ConfigurationError(
            "네이버 API 키가 설정되지 않았습니다. `settings` 명령으로 API 키를 등록해주세요."
        )

    rows = read_file(args.file)
    inferred = map_headers(rows[0].keys())
    overrides = parse_mapping_args(args.map)

    if overrides:
        mapping = apply_overrides(inferred.partial_mapping, overrides, inferred.detected_headers)
    elif inferred.needs_mapping:
        print("헤더를 자동으로 인식하지 못했습니다. --map 옵션으로 직접 연결해주세요.")
        print(f"감지된 헤더: {', '.join(inferred.detected_headers)}")
        for field_name in inferred.missing_fields:
            print(f"  누락된 필드: {field_name} ({FIELD_LABELS[field_name]})")
        print(f"예: --map {inferred.missing_fields[0]}=<헤더 이름>")
        return EXIT_NEEDS_MAPPING
    else:
        mapping = inferred.partial_mapping

    parsed = extract_reports(rows, mapping)
    for message in parsed.errors:
        print(f"  ⚠️  {message}")
    if not parsed.success:
        print("검증할 독후감이 없습니다.")
        return EXIT_FAILURE

    analyzer = None
    if args.analyze:
        if not has_ai_key(app_settings):
            raise ConfigurationError("AI API 키가 설정되지 않았습니다. `settings` 명령으로 등록해주세요.")
        analyzer = ReviewAnalyzer(app_settings)

    verifier = BookVerifier(app_settings.naver_client_id, app_settings.naver_client_secret)
    orchestrator = VerificationOrchestrator(verifier, analyzer=analyzer)

    def show_progress(progress):
        print(f"\r분석 진행률: {progress.completed}/{progress.total}", end="", flush=True)

    try:
        orchestrator.run(parsed.reports, on_progress=show_progress)
    finally:
        verifier.close()
    print()

    for number in args.analyze or []:
        try:
            result = orchestrator.analyze(number - 1)
            print(f"  #{number} {result.report.student_id}: {result.review_analysis.label}")
        except Exception as e:
            logger.warning(f"Analysis #{number} not completed: {e}")
            print(f"  #{number}: {e}")

    output_path = args.output or str(settings.OUTPUT_ROOT / default_export_name())
    export_results(orchestrator.results, output_path)

    summary = orchestrator.summary()
    print("=" * 60)
    print(f"전체: {summary['total']}건  검증 완료: {summary['verified']}건  "
          f"미확인: {summary['not_found']}건  오류: {summary['error']}건  "
          f"AI 분석: {summary['analyzed']}건")
    print(f"결과 파일: {output_path}")
    print("=" * 60)
    return EXIT_OK


def cmd_template(args) -> int:
    path = write_template(args.output)
    print(f"템플릿 파일: {path}")
    return EXIT_OK


def cmd_settings(args) -> int:
    store = JsonFileStore(args.settings_path)
    updates = {
        name: getattr(args, name)
        for name in ("naver_client_id", "naver_client_secret", "ai_provider",
                     "gemini_api_key", "openai_api_key", "openai_model")
        if getattr(args, name) is not None
    }
    current = save_settings(store, updates) if updates else load_settings(store)

    print(f"네이버 Client ID: {_mask(current.naver_client_id)}")
    print(f"네이버 Client Secret: {_mask(current.naver_client_secret)}")
    print(f"AI 제공자: {current.ai_provider}")
    print(f"AI API 키: {_mask(current.ai_api_key)}")

    if args.test:
        if has_naver_keys(current):
            verifier = BookVerifier(current.naver_client_id, current.naver_client_secret)
            try:
                ok, message = verifier.test_connection()
            finally:
                verifier.close()
            print(f"{'✅' if ok else '❌'} {message}")
        else:
            print("❌ 네이버 API 키가 설정되지 않았습니다.")
    return EXIT_OK


def cmd_serve(args) -> int:
    import uvicorn

    uvicorn.run("src.api.app:app", host=args.host, port=args.port)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ReadOrNot - 독후감 진위 검증",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Verify an uploaded spreadsheet
  python main.py verify reports.xlsx

  # Map columns the auto-mapper did not recognize
  python main.py verify reports.csv --map student_id=출석 --map review=느낀점

  # Verify, then run AI analysis on results #1 and #3
  python main.py verify reports.xlsx --analyze 1 3

Note: Set NAVER_CLIENT_ID / NAVER_CLIENT_SECRET (and GEMINI_API_KEY or
OPENAI_API_KEY) or store them with `python main.py settings`.
        """
    )
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )
    parser.add_argument(
        "--settings-path",
        default=str(settings.SETTINGS_PATH),
        help=f"Settings file (default: {settings.SETTINGS_PATH})"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    verify = subparsers.add_parser("verify", help="Verify book reports in a CSV/Excel file")
    verify.add_argument("file", help="Upload file (.csv, .xls, .xlsx)")
    verify.add_argument(
        "--map",
        action="append",
        metavar="FIELD=HEADER",
        help=f"Manual column mapping; fields: {', '.join(REQUIRED_FIELDS)}"
    )
    verify.add_argument(
        "--analyze",
        nargs="+",
        type=int,
        metavar="N",
        help=f"Result numbers (1-based) to run AI analysis on (max {settings.MAX_AI_ANALYSES})"
    )
    verify.add_argument("--output", help="Result workbook path")
    verify.set_defaults(handler=cmd_verify)

    template = subparsers.add_parser("template", help="Write the upload template workbook")
    template.add_argument("--output", default=settings.TEMPLATE_FILE_NAME)
    template.set_defaults(handler=cmd_template)

    config_cmd = subparsers.add_parser("settings", help="Show or update stored API settings")
    config_cmd.add_argument("--naver-client-id")
    config_cmd.add_argument("--naver-client-secret")
    config_cmd.add_argument("--ai-provider", choices=["gemini", "openai"])
    config_cmd.add_argument("--gemini-api-key")
    config_cmd.add_argument("--openai-api-key")
    config_cmd.add_argument("--openai-model")
    config_cmd.add_argument("--test", action="store_true", help="Test the Naver credentials")
    config_cmd.set_defaults(handler=cmd_settings)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(handler=cmd_serve)

    return parser


def main(argv: List[str] = None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)

    try:
        exit_code = args.handler(args)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        print("\n⚠️  중단되었습니다")
        exit_code = EXIT_FAILURE
    except ReadOrNotError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"\n❌ {e}")
        exit_code = EXIT_FAILURE
    except Exception as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        print(f"\n❌ 오류가 발생했습니다: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        exit_code = EXIT_FAILURE

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
