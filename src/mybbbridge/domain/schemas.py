"""
Data schemas for the bridge.

규칙:
- 필드명은 MyBB 테이블 컬럼명과 동일하게 사용 (tid, sid, dateline ...)
- DB 행 → dataclass 변환은 from_row() 한 곳에서만
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from mybbbridge.domain.constants import MASTER_SET_ID

# =============================================================================
# Artifact Kind
# =============================================================================

class ArtifactKind(str, Enum):
    """워크스페이스 파일 종류."""
    TEMPLATE = "template"
    STYLESHEET = "stylesheet"


class SaveAction(str, Enum):
    """
    저장 시 실제로 수행된 동작.

    템플릿 결정표 (master 존재 / custom 존재):
    - yes / yes → UPDATED_MODIFIED
    - yes / no  → CREATED_CUSTOM
    - no  / yes → UPDATED_CUSTOM
    - no  / no  → CREATED_TEMPLATE
    """
    UPDATED_MODIFIED = "updated_modified"
    CREATED_CUSTOM = "created_custom"
    UPDATED_CUSTOM = "updated_custom"
    CREATED_TEMPLATE = "created_template"
    CREATED_STYLESHEET = "created_stylesheet"
    UPDATED_STYLESHEET = "updated_stylesheet"


# =============================================================================
# Database Rows
# =============================================================================

@dataclass
class Template:
    """templates 테이블 행."""
    title: str
    template: str
    sid: int
    tid: int | None = None
    version: str = ""
    status: str = ""
    dateline: int = 0

    # fetch 시 grouping 엔진이 채움
    group_name: str | None = None

    @property
    def is_master(self) -> bool:
        return self.sid == MASTER_SET_ID

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Template":
        return cls(
            tid=int(row["tid"]) if row.get("tid") is not None else None,
            title=str(row["title"]),
            template=str(row.get("template") or ""),
            sid=int(row["sid"]),
            version=str(row.get("version") or ""),
            status=str(row.get("status") or ""),
            dateline=int(row.get("dateline") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tid": self.tid,
            "title": self.title,
            "template": self.template,
            "sid": self.sid,
            "version": self.version,
            "status": self.status,
            "dateline": self.dateline,
            "group_name": self.group_name,
        }


@dataclass
class TemplateSet:
    """templatesets 테이블 행."""
    sid: int
    title: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TemplateSet":
        return cls(sid=int(row["sid"]), title=str(row["title"]))


@dataclass
class TemplateGroup:
    """
    templategroups 테이블 행.

    title은 "<lang:group_header>" 같은 언어 키 참조일 수 있음.
    폴더명 계산에만 사용하고 이 도구는 쓰지 않는다.
    """
    gid: int
    prefix: str
    title: str
    isdefault: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TemplateGroup":
        return cls(
            gid=int(row["gid"]),
            prefix=str(row["prefix"]),
            title=str(row["title"]),
            isdefault=bool(row.get("isdefault") or 0),
        )


@dataclass
class Theme:
    """themes 테이블 행."""
    tid: int
    name: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Theme":
        return cls(tid=int(row["tid"]), name=str(row["name"]))


@dataclass
class Stylesheet:
    """themestylesheets 테이블 행."""
    name: str
    stylesheet: str
    tid: int
    sid: int | None = None
    cachefile: str = ""
    lastmodified: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Stylesheet":
        return cls(
            sid=int(row["sid"]) if row.get("sid") is not None else None,
            tid=int(row["tid"]),
            name=str(row["name"]),
            stylesheet=str(row.get("stylesheet") or ""),
            cachefile=str(row.get("cachefile") or ""),
            lastmodified=int(row.get("lastmodified") or 0),
        )


# =============================================================================
# Sync Results
# =============================================================================

@dataclass
class ArtifactRef:
    """
    워크스페이스 경로 해석 결과.

    container: template set 이름 또는 theme 이름
    name: 템플릿 title 또는 stylesheet 파일명 (확장자 포함)
    group_folder: 템플릿이 놓인 그룹 폴더 (저장 대상 결정에는 사용 안 함)
    """
    kind: ArtifactKind
    container: str
    name: str
    group_folder: str | None = None


@dataclass
class SaveResult:
    """저장 1건 결과."""
    kind: ArtifactKind
    container: str
    name: str
    action: SaveAction
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "container": self.container,
            "name": self.name,
            "action": self.action.value,
            "message": self.message,
        }


@dataclass
class LoadResult:
    """
    load 명령 결과.

    best-effort: 파일 단위 실패는 failures에 기록하고 계속 진행.
    summary는 항상 written/total을 보여준다 (개수 불일치 숨기지 않음).
    """
    kind: ArtifactKind
    container: str
    root: Path
    total: int = 0
    written: int = 0
    folders: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.written == self.total and not self.failures

    @property
    def summary(self) -> str:
        noun = "templates" if self.kind == ArtifactKind.TEMPLATE else "stylesheets"
        text = f"{self.written} of {self.total} {noun} were loaded from '{self.container}'"
        if self.kind == ArtifactKind.TEMPLATE:
            text += f" into {len(self.folders)} folders"
        if self.failures:
            text += f" ({len(self.failures)} failed)"
        return text + "."

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "container": self.container,
            "root": str(self.root),
            "total": self.total,
            "written": self.written,
            "folders": list(self.folders),
            "failures": list(self.failures),
        }


@dataclass
class SyncOutcome:
    """커맨드/이벤트 경계에서 사용자에게 보여줄 결과."""
    success: bool
    message: str
    code: str | None = None
    detail: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "code": self.code,
            "detail": self.detail,
        }
