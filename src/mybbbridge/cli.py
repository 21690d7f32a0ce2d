"""
mybbbridge CLI.

사용법:
    # 설정 스켈레톤 생성
    mybbbridge --workspace ./forum create-config

    # 템플릿 세트 / 테마 내려받기
    mybbbridge --workspace ./forum load-templates "Default Templates"
    mybbbridge --workspace ./forum load-style Default

    # 파일 하나 즉시 업로드 (autoUpload 무시)
    mybbbridge --workspace ./forum push template_sets/Default/Header\\ Templates/header.html

    # 에디터용 HTTP 서버
    mybbbridge --workspace ./forum serve --port 8765

종료 코드: 성공 0, 실패 1
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from mybbbridge.app import commands
from mybbbridge.app.runtime import BridgeRuntime
from mybbbridge.core.config import get_config_path, load_config
from mybbbridge.core.logging import configure_logging
from mybbbridge.domain.errors import ConfigError
from mybbbridge.domain.schemas import SyncOutcome

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8765


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mybbbridge",
        description="Sync MyBB templates and stylesheets with a local workspace",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        default=Path.cwd(),
        help="workspace root (default: current directory)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    load_templates = subparsers.add_parser("load-templates", help="download a template set")
    load_templates.add_argument("name", help="template set title")

    load_style = subparsers.add_parser("load-style", help="download a theme's stylesheets")
    load_style.add_argument("name", help="theme name")

    subparsers.add_parser("create-config", help="write .vscode/mbbb.json skeleton")

    push = subparsers.add_parser("push", help="upload one saved file now")
    push.add_argument(
        "path",
        type=Path,
        help="template (.html) or stylesheet (.css) path, relative to the workspace",
    )

    serve = subparsers.add_parser("serve", help="run the HTTP API for the editor")
    serve.add_argument("--host", default=DEFAULT_HOST)
    serve.add_argument("--port", type=int, default=DEFAULT_PORT)

    return parser


def _setup_logging(workspace: Path) -> None:
    log_file_path = None
    if get_config_path(workspace).exists():
        try:
            log_file_path = load_config(workspace).log_file_path
        except ConfigError:
            # 명령 실행 시 같은 에러가 다시 보고됨
            log_file_path = None
    configure_logging(log_file_path)


def _report(outcome: SyncOutcome) -> int:
    if outcome.success:
        print(outcome.message)
        return 0
    code = f"[{outcome.code}] " if outcome.code else ""
    print(f"Error: {code}{outcome.message}", file=sys.stderr)
    return 1


def _serve(workspace: Path, host: str, port: int) -> int:
    import uvicorn

    os.environ["MYBBBRIDGE_WORKSPACE"] = str(workspace)
    uvicorn.run("mybbbridge.app.main:app", host=host, port=port)
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    CLI 진입점.

    Args:
        argv: 인자 목록 (None이면 sys.argv)

    Returns:
        종료 코드
    """
    args = build_parser().parse_args(argv)
    workspace: Path = args.workspace.resolve()

    if args.command == "serve":
        return _serve(workspace, args.host, args.port)

    _setup_logging(workspace)
    runtime = BridgeRuntime(workspace)

    try:
        if args.command == "load-templates":
            outcome = commands.load_template_set_command(runtime, args.name)
        elif args.command == "load-style":
            outcome = commands.load_style_command(runtime, args.name)
        elif args.command == "create-config":
            outcome = commands.create_config_command(runtime)
        elif args.command == "push":
            # 상대 경로는 워크스페이스 기준
            path = args.path if args.path.is_absolute() else (workspace / args.path)
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Cannot read {path}: {e}")
                print(f"Error: cannot read {path}: {e}", file=sys.stderr)
                return 1
            outcome = commands.on_artifact_saved(runtime, path, content, force=True)
        else:
            # argparse가 이미 막음
            raise ValueError(f"Unknown command: {args.command}")
    finally:
        runtime.close()

    return _report(outcome)


if __name__ == "__main__":
    sys.exit(main())
