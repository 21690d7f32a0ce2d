"""
Sync Controller: 워크스페이스 파일 ↔ DB 행.

- save: 저장된 파일 경로 → 대상 store → INSERT/UPDATE (아티팩트별 락)
- load: DB 행 → 그룹 폴더 → 파일 쓰기 (best-effort, 실패는 LoadResult에 기록)

DB가 원본, 파일은 투영.
"""

import logging
from pathlib import Path

from sqlalchemy.engine import Engine

from mybbbridge.core.config import BridgeConfig
from mybbbridge.core.locks import artifact_lock
from mybbbridge.core.paths import (
    ensure_safe_name,
    locks_dir,
    parse_artifact_path,
    style_dir,
    template_set_dir,
)
from mybbbridge.db.repository import CacheRefresher, StyleStore, TemplateSetStore
from mybbbridge.db.tables import BridgeTables, build_tables
from mybbbridge.domain.constants import TEMPLATE_EXTENSION
from mybbbridge.domain.errors import BridgeError
from mybbbridge.domain.schemas import (
    ArtifactKind,
    LoadResult,
    SaveResult,
    Template,
)
from mybbbridge.templates.grouping import TemplateGroupCache, sanitize_folder_name

logger = logging.getLogger(__name__)


def collapse_templates(templates: list[Template]) -> list[Template]:
    """
    title당 1행으로 축약. custom 행이 master 행을 덮는다.

    입력 순서(title 순)는 유지.
    """
    by_title: dict[str, Template] = {}
    for template in templates:
        current = by_title.get(template.title)
        if current is None or (current.is_master and not template.is_master):
            by_title[template.title] = template
    return list(by_title.values())


class SyncController:
    """
    워크스페이스 하나에 대한 동기화.

    Usage:
        controller = SyncController(workspace, config, engine, refresher)
        controller.load_template_set("Default Templates")
        controller.save_artifact(path, content)
    """

    def __init__(
        self,
        workspace: Path,
        config: BridgeConfig,
        engine: Engine,
        refresher: CacheRefresher,
        group_cache: TemplateGroupCache | None = None,
    ):
        """
        Args:
            workspace: 워크스페이스 루트
            config: 로드된 설정
            engine: 연결 확인된 Engine
            refresher: stylesheet 캐시 갱신 클라이언트
            group_cache: 그룹 테이블 캐시 (None이면 새로 생성)
        """
        self.workspace = workspace
        self.config = config
        self.engine = engine
        self.refresher = refresher
        self.group_cache = group_cache if group_cache is not None else TemplateGroupCache()
        self.tables: BridgeTables = build_tables(config.database.prefix)

    # =========================================================================
    # Store Factories
    # =========================================================================

    def template_set(self, name: str) -> TemplateSetStore:
        return TemplateSetStore(
            self.engine,
            self.tables,
            name,
            version=self.config.mybb_version,
            group_cache=self.group_cache,
        )

    def style(self, name: str) -> StyleStore:
        return StyleStore(self.engine, self.tables, name, self.refresher)

    # =========================================================================
    # Save
    # =========================================================================

    def save_artifact(self, path: Path, content: str) -> SaveResult | None:
        """
        저장된 파일 1건을 DB에 반영.

        Args:
            path: 저장된 파일 경로
            content: 파일 내용

        Returns:
            SaveResult, 브리지 대상 경로가 아니면 None

        Raises:
            NotFoundError, NoRowsAffectedError, RefreshError, LockTimeoutError
        """
        ref = parse_artifact_path(self.workspace, path)
        if ref is None:
            logger.debug(f"Ignoring non-bridge path: {path}")
            return None

        with artifact_lock(
            locks_dir(self.workspace),
            ref.kind.value,
            ref.container,
            ref.name,
            timeout=self.config.lock_timeout,
        ):
            if ref.kind == ArtifactKind.TEMPLATE:
                return self.template_set(ref.container).save_element(ref.name, content)
            return self.style(ref.container).save_element(ref.name, content)

    # =========================================================================
    # Load
    # =========================================================================

    def load_template_set(self, name: str) -> LoadResult:
        """
        템플릿 세트 → template_sets/{name}/{group}/{title}.html

        Raises:
            NotFoundError: 세트 없음
            InvalidPathError: 세트 이름을 폴더명으로 쓸 수 없음
        """
        root = template_set_dir(self.workspace, name)
        templates = collapse_templates(self.template_set(name).fetch_elements())

        result = LoadResult(kind=ArtifactKind.TEMPLATE, container=name, root=root)
        result.total = len(templates)

        for template in templates:
            folder_name = sanitize_folder_name(template.group_name or "")
            try:
                file_name = ensure_safe_name(template.title) + TEMPLATE_EXTENSION
                folder = root / folder_name
                folder.mkdir(parents=True, exist_ok=True)
                (folder / file_name).write_text(template.template, encoding="utf-8")
            except (BridgeError, OSError) as e:
                logger.warning(f"Failed to write template '{template.title}': {e}")
                result.failures.append(template.title)
                continue

            result.written += 1
            if folder_name not in result.folders:
                result.folders.append(folder_name)

        logger.info(result.summary)
        return result

    def load_style(self, name: str) -> LoadResult:
        """
        테마 stylesheet → styles/{name}/{stylesheet name}

        Raises:
            NotFoundError: 테마 없음
            InvalidPathError: 테마 이름을 폴더명으로 쓸 수 없음
        """
        root = style_dir(self.workspace, name)
        stylesheets = self.style(name).fetch_elements()

        result = LoadResult(kind=ArtifactKind.STYLESHEET, container=name, root=root)
        result.total = len(stylesheets)

        for stylesheet in stylesheets:
            try:
                file_name = ensure_safe_name(stylesheet.name)
                root.mkdir(parents=True, exist_ok=True)
                (root / file_name).write_text(stylesheet.stylesheet, encoding="utf-8")
            except (BridgeError, OSError) as e:
                logger.warning(f"Failed to write stylesheet '{stylesheet.name}': {e}")
                result.failures.append(stylesheet.name)
                continue

            result.written += 1

        logger.info(result.summary)
        return result
