"""
템플릿 그룹 분류: 평면적인 MyBB 템플릿 title → 폴더명.

우선순위 (하나로 고정):
1. master 세트(sid=-2) + "global_" 시작 → "Global Templates"
2. base_prefix (첫 "_" 앞부분, 소문자)가 templategroups 테이블에 있으면 그 title
3. 하드코딩 패턴 (header_, footer_, usercp_ ...) 첫 매치
4. base_prefix 대문자화 + " Templates" (없으면 "Misc Templates")

그룹 테이블은 TemplateGroupCache 객체로 명시적으로 주입한다.
한 번 로드 후 invalidate() 전까지 재사용.
"""

import logging
import re
import threading
from collections.abc import Callable, Iterable

from mybbbridge.domain.constants import (
    GLOBAL_GROUP_NAME,
    GROUP_SUFFIX,
    MISC_GROUP_NAME,
)
from mybbbridge.domain.schemas import Template, TemplateGroup

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

GLOBAL_TITLE_PREFIX = "global_"

# 하드코딩 패턴: 순서가 우선순위
STANDARD_GROUP_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^header_"), "Header Templates"),
    (re.compile(r"^footer_"), "Footer Templates"),
    (re.compile(r"^usercp_"), "User CP Templates"),
    (re.compile(r"^modcp_"), "Moderator CP Templates"),
    (re.compile(r"^admin_"), "Admin Templates"),
    (re.compile(r"^forum_"), "Forum Templates"),
    (re.compile(r"^member_"), "Member Templates"),
    (re.compile(r"^post_"), "Posting Templates"),
    (re.compile(r"^poll_"), "Poll Templates"),
    (re.compile(r"^rating_"), "Rating Templates"),
    (re.compile(r"^misc_"), "Misc Templates"),
)

# templategroups.title 의 언어 키 참조: <lang:group_header>
LANG_REFERENCE_PATTERN = re.compile(r"^<lang:([^>]+)>$")

# MyBB 기본 언어팩의 그룹 이름
LANG_GROUP_TITLES: dict[str, str] = {
    "group_calendar": "Calendar",
    "group_forumdisplay": "Forum Display",
    "group_index": "Index Page",
    "group_error": "Error Message",
    "group_memberlist": "Member List",
    "group_multipage": "Multipage Pagination",
    "group_private": "Private Messaging",
    "group_portal": "Portal",
    "group_postbit": "Post Bit",
    "group_posticons": "Post Icon",
    "group_showthread": "Show Thread",
    "group_usercp": "User Control Panel",
    "group_online": "Who's Online",
    "group_forumbit": "Forum Bit",
    "group_editpost": "Edit Post",
    "group_forumjump": "Forum Jump",
    "group_moderation": "Moderation",
    "group_nav": "Navigation",
    "group_search": "Search",
    "group_showteam": "Show Forum Team",
    "group_reputation": "Reputation",
    "group_newthread": "New Thread",
    "group_newreply": "New Reply",
    "group_member": "Member",
    "group_warning": "Warning System",
    "group_global": "Global",
    "group_header": "Header",
    "group_managegroup": "Manage Group",
    "group_misc": "Miscellaneous",
    "group_modcp": "Moderator Control Panel",
    "group_announcement": "Announcement",
    "group_polls": "Poll",
    "group_post": "Post",
    "group_printthread": "Print Thread",
    "group_report": "Report",
    "group_smilieinsert": "Smilie Inserter",
    "group_stats": "Statistics",
    "group_xmlhttp": "XMLHTTP",
    "group_footer": "Footer",
    "group_video": "Video MyCode",
    "group_sendthread": "Send Thread",
    "group_mycode": "MyCode",
}

# 파일시스템 금지 문자 + 제어 문자
ILLEGAL_FOLDER_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
WHITESPACE_RUN = re.compile(r"\s+")


# =============================================================================
# Group Cache
# =============================================================================

class TemplateGroupCache:
    """
    templategroups 테이블 스냅샷 (prefix → TemplateGroup).

    load()는 최초 1회만 loader를 호출한다. 다시 읽으려면 invalidate().
    load/invalidate는 락 안에서 실행, 조회용 dict는 통째로 교체 (HTTP 핸들러 스레드가 공유).
    """

    def __init__(self, groups: Iterable[TemplateGroup] | None = None):
        self._lock = threading.Lock()
        self._groups: dict[str, TemplateGroup] = {}
        self._loaded = False
        if groups is not None:
            self._fill(groups)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self, loader: Callable[[], Iterable[TemplateGroup]]) -> None:
        """캐시가 비어 있을 때만 loader 결과로 채움."""
        with self._lock:
            if self._loaded:
                return
            self._fill(loader())
        logger.info(f"Loaded {len(self._groups)} template groups")

    def invalidate(self) -> None:
        with self._lock:
            self._groups = {}
            self._loaded = False

    def get(self, prefix: str) -> TemplateGroup | None:
        return self._groups.get(prefix)

    def __len__(self) -> int:
        return len(self._groups)

    def _fill(self, groups: Iterable[TemplateGroup]) -> None:
        # gid 오름차순으로 들어오므로 같은 prefix면 나중 행이 이김
        by_prefix = {group.prefix: group for group in groups}
        self._groups = by_prefix
        self._loaded = True


# =============================================================================
# Classification
# =============================================================================

def template_prefix(title: str) -> str:
    """첫 "_" 앞부분 (없으면 title 전체), 소문자."""
    return title.split("_", 1)[0].lower()


def resolve_group_title(raw_title: str) -> str:
    """
    templategroups.title → 폴더용 그룹 이름.

    - "<lang:KEY>": 언어 테이블에서 찾아 " Templates" 부착, 모르는 키는 Misc
    - 그 외: 그대로 사용, "Templates"로 끝나지 않으면 " Templates" 부착
    """
    match = LANG_REFERENCE_PATTERN.match(raw_title.strip())
    if match:
        label = LANG_GROUP_TITLES.get(match.group(1))
        if label is None:
            return MISC_GROUP_NAME
        return f"{label} {GROUP_SUFFIX}"

    title = raw_title.strip()
    if not title:
        return MISC_GROUP_NAME
    if title.endswith(GROUP_SUFFIX):
        return title
    return f"{title} {GROUP_SUFFIX}"


def standard_group_name(title: str) -> str | None:
    """하드코딩 패턴 매칭. 매치 없으면 None."""
    for pattern, group_name in STANDARD_GROUP_PATTERNS:
        if pattern.match(title):
            return group_name
    return None


def fallback_group_name(prefix: str) -> str:
    if not prefix:
        return MISC_GROUP_NAME
    return f"{prefix[0].upper()}{prefix[1:]} {GROUP_SUFFIX}"


def classify(template: Template, cache: TemplateGroupCache) -> str:
    """
    템플릿 → 그룹 이름.

    (title, sid, 캐시 스냅샷)이 같으면 항상 같은 결과.

    Args:
        template: 분류할 템플릿
        cache: 로드된 그룹 테이블

    Returns:
        그룹 이름 (sanitize 전)
    """
    if template.is_master and template.title.startswith(GLOBAL_TITLE_PREFIX):
        return GLOBAL_GROUP_NAME

    prefix = template_prefix(template.title)

    group = cache.get(prefix) if prefix else None
    if group is not None:
        return resolve_group_title(group.title)

    standard = standard_group_name(template.title)
    if standard is not None:
        return standard

    return fallback_group_name(prefix)


# =============================================================================
# Folder Names
# =============================================================================

def sanitize_folder_name(name: str, fallback: str = MISC_GROUP_NAME) -> str:
    """
    그룹 이름 → 디렉터리명.

    금지 문자(<>:"/\\|?*)는 공백으로, 연속 공백은 하나로, 양끝 trim.
    결과가 비면 fallback.
    """
    cleaned = ILLEGAL_FOLDER_CHARS.sub(" ", name)
    cleaned = WHITESPACE_RUN.sub(" ", cleaned).strip()
    # "." / ".." 만 남는 경우 상위 디렉터리로 새지 않게
    if cleaned.strip(".") == "":
        return fallback
    return cleaned

