"""
워크스페이스 경로 해석.

template_sets/<set>/<group...>/<title>.html → 템플릿
styles/<theme>/<name>.css                  → stylesheet

그룹 폴더는 정보용일 뿐, 저장 대상은 title만으로 결정된다.
"""

from pathlib import Path, PurePath

from mybbbridge.domain.constants import (
    LOCKS_DIR,
    STATE_DIR,
    STYLES_DIR,
    STYLESHEET_EXTENSION,
    TEMPLATE_EXTENSION,
    TEMPLATE_SETS_DIR,
)
from mybbbridge.domain.errors import ErrorCodes, InvalidPathError
from mybbbridge.domain.schemas import ArtifactKind, ArtifactRef


def parse_artifact_path(workspace: Path, path: Path) -> ArtifactRef | None:
    """
    저장된 파일 경로 → ArtifactRef.

    Args:
        workspace: 워크스페이스 루트
        path: 저장된 파일 경로 (절대 또는 workspace 기준 상대)

    Returns:
        ArtifactRef, 브리지 대상이 아니면 None
    """
    if path.is_absolute():
        try:
            relative = path.resolve().relative_to(workspace.resolve())
        except ValueError:
            return None
    else:
        relative = PurePath(path)

    parts = relative.parts
    if len(parts) < 3 or any(part in ("", ".", "..") for part in parts):
        return None

    root, container = parts[0], parts[1]
    file_name = parts[-1]
    extension = PurePath(file_name).suffix

    if root == TEMPLATE_SETS_DIR and extension == TEMPLATE_EXTENSION:
        title = PurePath(file_name).stem
        if not title:
            return None
        group_folder = "/".join(parts[2:-1]) or None
        return ArtifactRef(
            kind=ArtifactKind.TEMPLATE,
            container=container,
            name=title,
            group_folder=group_folder,
        )

    if root == STYLES_DIR and extension == STYLESHEET_EXTENSION:
        return ArtifactRef(
            kind=ArtifactKind.STYLESHEET,
            container=container,
            name=file_name,
        )

    return None


def ensure_safe_name(name: str) -> str:
    """
    DB에서 온 이름을 파일/폴더명으로 쓰기 전 검증.

    Raises:
        InvalidPathError: 구분자나 상위 경로 참조 포함
    """
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise InvalidPathError(
            f"'{name}' cannot be used as a file name",
            code=ErrorCodes.INVALID_PATH,
            name=name,
        )
    return name


def template_set_dir(workspace: Path, set_name: str) -> Path:
    return workspace / TEMPLATE_SETS_DIR / ensure_safe_name(set_name)


def style_dir(workspace: Path, theme_name: str) -> Path:
    return workspace / STYLES_DIR / ensure_safe_name(theme_name)


def locks_dir(workspace: Path) -> Path:
    return workspace / STATE_DIR / LOCKS_DIR
