"""
로그 설정: 파일 + 콘솔.

모든 모듈은 logging.getLogger(__name__)만 쓰고,
핸들러는 진입점(CLI, FastAPI lifespan)에서 configure_logging() 한 번 호출.
"""

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "mybbbridge"

# 이 모듈이 설치한 핸들러 표시
_HANDLER_MARK = "_mybbbridge_handler"


def configure_logging(
    log_file_path: Path | None = None,
    level: int = logging.INFO,
    console: bool = True,
) -> logging.Logger:
    """
    mybbbridge 로거에 핸들러 설치.

    다시 호출하면 이전에 설치한 핸들러를 교체 (중복 출력 방지).

    Args:
        log_file_path: 로그 파일 경로 (None이면 파일 로그 없음)
        level: 로그 레벨
        console: stderr 출력 여부

    Returns:
        설정된 mybbbridge 로거
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if log_file_path is not None:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARK, True)
        root.addHandler(file_handler)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        setattr(stream_handler, _HANDLER_MARK, True)
        root.addHandler(stream_handler)

    return root
