"""
MyBB 테마 저장소: template set / style 두 가지 변형.

규칙:
- 모든 SQL은 SQLAlchemy Core 식으로 생성 (바인드 파라미터만, 문자열 결합 없음)
- 변경 쿼리(INSERT/UPDATE)가 0행이면 NoRowsAffectedError (no-op으로 넘기지 않음)
- 저장 1건은 트랜잭션 1개
- 행 삭제는 하지 않는다

템플릿 저장 결정표 (master 존재 / custom 존재):
    yes / yes → custom UPDATE
    yes / no  → 해당 세트 sid로 custom INSERT (master는 그대로)
    no  / yes → custom UPDATE
    no  / no  → custom INSERT
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Protocol

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection, CursorResult, Engine, RowMapping
from sqlalchemy.sql.expression import Executable

from mybbbridge.db.tables import BridgeTables
from mybbbridge.domain.constants import MASTER_SET_ID
from mybbbridge.domain.errors import ErrorCodes, NoRowsAffectedError, NotFoundError
from mybbbridge.domain.schemas import (
    ArtifactKind,
    SaveAction,
    SaveResult,
    Stylesheet,
    Template,
    TemplateGroup,
    TemplateSet,
    Theme,
)
from mybbbridge.templates.grouping import TemplateGroupCache, classify

logger = logging.getLogger(__name__)


# =============================================================================
# Shared Query Execution
# =============================================================================

def execute_statement(
    conn: Connection,
    statement: Executable,
    *,
    mutation: bool = False,
) -> CursorResult[Any]:
    """
    쿼리 실행 + 변경 쿼리의 affected rows 검사.

    Args:
        conn: 열린 연결
        statement: SQLAlchemy 식
        mutation: INSERT/UPDATE 여부

    Returns:
        CursorResult

    Raises:
        NoRowsAffectedError: mutation인데 0행
    """
    result = conn.execute(statement)
    if mutation and result.rowcount == 0:
        raise NoRowsAffectedError(
            "No rows affected by the query - update may have failed.",
            code=ErrorCodes.NO_ROWS_AFFECTED,
        )
    return result


def unix_timestamp() -> int:
    return int(time.time())


class CacheRefresher(Protocol):
    """stylesheet 저장 후 포럼 캐시 갱신 (app.cache_refresh.CacheRefreshClient)."""

    def refresh(self, stylesheet_name: str, theme_name: str) -> None: ...


# =============================================================================
# Base Store
# =============================================================================

class ThemeSetStore(ABC):
    """
    이름으로 지정된 세트(template set 또는 theme) 하나에 대한 저장소.

    하위 클래스는 fetch_elements / save_element만 구현.
    """

    kind: ArtifactKind

    def __init__(self, engine: Engine, tables: BridgeTables, name: str):
        """
        Args:
            engine: 공유 Engine
            tables: prefix 적용된 테이블
            name: template set title 또는 theme name
        """
        self.engine = engine
        self.tables = tables
        self.name = name

    def _fetch_all(self, conn: Connection, statement: Executable) -> list[RowMapping]:
        return list(execute_statement(conn, statement).mappings().all())

    def _fetch_one(self, conn: Connection, statement: Executable) -> RowMapping | None:
        return execute_statement(conn, statement).mappings().first()

    def _execute(self, conn: Connection, statement: Executable) -> CursorResult[Any]:
        return execute_statement(conn, statement, mutation=True)

    @abstractmethod
    def fetch_elements(self) -> list[Any]:
        """세트의 모든 요소 조회."""

    @abstractmethod
    def save_element(self, name: str, content: str) -> SaveResult:
        """요소 1건 저장 (생성 또는 갱신)."""


# =============================================================================
# Template Set
# =============================================================================

class TemplateSetStore(ThemeSetStore):
    """
    템플릿 세트 저장소.

    master 행(sid=-2)은 읽기만 하고, 저장은 항상 세트 sid의 custom 행으로.
    """

    kind = ArtifactKind.TEMPLATE

    def __init__(
        self,
        engine: Engine,
        tables: BridgeTables,
        name: str,
        version: str = "",
        group_cache: TemplateGroupCache | None = None,
    ):
        """
        Args:
            engine: 공유 Engine
            tables: prefix 적용된 테이블
            name: template set title
            version: 저장 시 기록할 mybbVersion
            group_cache: 그룹 테이블 캐시 (None이면 이 저장소 전용 캐시)
        """
        super().__init__(engine, tables, name)
        self.version = version
        self.group_cache = group_cache if group_cache is not None else TemplateGroupCache()

    def _resolve_set(self, conn: Connection) -> TemplateSet:
        ts = self.tables.templatesets
        row = self._fetch_one(conn, select(ts.c.sid, ts.c.title).where(ts.c.title == self.name))
        if row is None:
            raise NotFoundError(
                f'Template set "{self.name}" not found',
                code=ErrorCodes.NOT_FOUND,
                template_set=self.name,
            )
        return TemplateSet.from_row(row)

    def _select_groups(self, conn: Connection) -> list[TemplateGroup]:
        tg = self.tables.templategroups
        rows = self._fetch_all(conn, select(tg).order_by(tg.c.gid.asc()))
        return [TemplateGroup.from_row(row) for row in rows]

    def fetch_elements(self) -> list[Template]:
        """
        세트 템플릿 + master 템플릿 전체, title 순.

        같은 title의 master/custom은 둘 다 반환 (master가 먼저).
        각 템플릿의 group_name은 grouping 엔진이 채운다.

        Raises:
            NotFoundError: 세트 없음
        """
        t = self.tables.templates

        with self.engine.connect() as conn:
            sid = self._resolve_set(conn).sid
            self.group_cache.load(lambda: self._select_groups(conn))

            rows = self._fetch_all(
                conn,
                select(t)
                .where(t.c.sid.in_([MASTER_SET_ID, sid]))
                .order_by(t.c.title.asc(), t.c.sid.asc()),
            )

        templates = []
        for row in rows:
            template = Template.from_row(row)
            template.group_name = classify(template, self.group_cache)
            templates.append(template)

        logger.info(f"Fetched {len(templates)} templates for set '{self.name}'")
        return templates

    def save_element(self, name: str, content: str) -> SaveResult:
        """
        템플릿 저장 (결정표 적용).

        Args:
            name: 템플릿 title
            content: 템플릿 본문

        Returns:
            SaveResult

        Raises:
            NotFoundError: 세트 없음
            NoRowsAffectedError: UPDATE/INSERT 0행
        """
        t = self.tables.templates

        with self.engine.begin() as conn:
            sid = self._resolve_set(conn).sid

            master = self._fetch_one(
                conn,
                select(t.c.tid).where(t.c.title == name, t.c.sid == MASTER_SET_ID),
            )
            custom = self._fetch_one(
                conn,
                select(t.c.tid).where(t.c.title == name, t.c.sid == sid),
            )

            now = unix_timestamp()

            if custom is not None:
                self._execute(
                    conn,
                    update(t)
                    .where(t.c.tid == custom["tid"])
                    .values(template=content, version=self.version, dateline=now),
                )
                if master is not None:
                    action = SaveAction.UPDATED_MODIFIED
                    message = f'Updated modified template "{name}"'
                else:
                    action = SaveAction.UPDATED_CUSTOM
                    message = f'Updated custom template "{name}"'
            else:
                self._execute(
                    conn,
                    insert(t).values(
                        title=name,
                        template=content,
                        sid=sid,
                        version=self.version,
                        status="",
                        dateline=now,
                    ),
                )
                if master is not None:
                    action = SaveAction.CREATED_CUSTOM
                    message = f'Created custom version of template "{name}"'
                else:
                    action = SaveAction.CREATED_TEMPLATE
                    message = f'Created new template "{name}"'

        logger.info(f'{message} in set "{self.name}"')
        return SaveResult(
            kind=self.kind,
            container=self.name,
            name=name,
            action=action,
            message=message,
        )


# =============================================================================
# Style
# =============================================================================

class StyleStore(ThemeSetStore):
    """
    테마(style) stylesheet 저장소.

    저장 성공 후 항상 refresher.refresh() 1회 호출 (포럼 캐시 파일 재생성).
    저장 실패 시 호출 0회.
    """

    kind = ArtifactKind.STYLESHEET

    def __init__(
        self,
        engine: Engine,
        tables: BridgeTables,
        name: str,
        refresher: CacheRefresher,
    ):
        """
        Args:
            engine: 공유 Engine
            tables: prefix 적용된 테이블
            name: theme name
            refresher: 캐시 갱신 클라이언트
        """
        super().__init__(engine, tables, name)
        self.refresher = refresher

    def _resolve_theme(self, conn: Connection) -> Theme:
        th = self.tables.themes
        row = self._fetch_one(conn, select(th.c.tid, th.c.name).where(th.c.name == self.name))
        if row is None:
            raise NotFoundError(
                f'Theme "{self.name}" not found in database',
                code=ErrorCodes.NOT_FOUND,
                theme=self.name,
            )
        return Theme.from_row(row)

    def fetch_elements(self) -> list[Stylesheet]:
        """
        테마의 stylesheet 전체, name 순.

        Raises:
            NotFoundError: 테마 없음
        """
        ss = self.tables.themestylesheets

        with self.engine.connect() as conn:
            tid = self._resolve_theme(conn).tid
            rows = self._fetch_all(
                conn,
                select(ss).where(ss.c.tid == tid).order_by(ss.c.name.asc()),
            )

        stylesheets = [Stylesheet.from_row(row) for row in rows]
        logger.info(f"Fetched {len(stylesheets)} stylesheets for theme '{self.name}'")
        return stylesheets

    def save_element(self, name: str, content: str) -> SaveResult:
        """
        stylesheet 저장 후 캐시 갱신.

        Args:
            name: stylesheet 이름 (예: global.css)
            content: CSS 본문

        Returns:
            SaveResult

        Raises:
            NotFoundError: 테마 없음 (쓰기 없음)
            NoRowsAffectedError: UPDATE/INSERT 0행
            RefreshError: 저장은 되었으나 캐시 갱신 실패
        """
        ss = self.tables.themestylesheets

        with self.engine.begin() as conn:
            tid = self._resolve_theme(conn).tid

            existing = self._fetch_one(
                conn,
                select(ss.c.sid).where(ss.c.tid == tid, ss.c.name == name),
            )

            now = unix_timestamp()

            if existing is None:
                self._execute(
                    conn,
                    insert(ss).values(
                        tid=tid,
                        name=name,
                        attachedto="",
                        stylesheet=content,
                        cachefile=name,
                        lastmodified=now,
                    ),
                )
                action = SaveAction.CREATED_STYLESHEET
                message = f'Created new stylesheet "{name}" for theme "{self.name}"'
            else:
                self._execute(
                    conn,
                    update(ss)
                    .where(ss.c.tid == tid, ss.c.name == name)
                    .values(stylesheet=content, lastmodified=now),
                )
                action = SaveAction.UPDATED_STYLESHEET
                message = f'Updated stylesheet "{name}" for theme "{self.name}"'

        logger.info(message)

        # 커밋 이후에만 갱신 요청
        self.refresher.refresh(name, self.name)

        return SaveResult(
            kind=self.kind,
            container=self.name,
            name=name,
            action=action,
            message=message,
        )
