"""
test_grouping.py - 템플릿 그룹 분류 테스트

검증:
- master + global_ → "Global Templates" (그룹 행이 있어도)
- 그룹 테이블 → 하드코딩 패턴 → prefix fallback 순서
- <lang:KEY> 해석
- 폴더명 sanitize
- 그룹 캐시는 한 번만 로드
"""

import threading

import pytest

from mybbbridge.domain.constants import MASTER_SET_ID
from mybbbridge.domain.schemas import Template, TemplateGroup
from mybbbridge.templates.grouping import (
    LANG_GROUP_TITLES,
    TemplateGroupCache,
    classify,
    fallback_group_name,
    resolve_group_title,
    sanitize_folder_name,
    standard_group_name,
    template_prefix,
)


# =============================================================================
# Fixtures
# =============================================================================

def make_template(title: str, sid: int = MASTER_SET_ID) -> Template:
    return Template(title=title, template="", sid=sid)


@pytest.fixture
def empty_cache() -> TemplateGroupCache:
    """그룹 행 없음 (로드 완료 상태)."""
    return TemplateGroupCache([])


@pytest.fixture
def group_cache() -> TemplateGroupCache:
    """header / index / global 그룹 행."""
    return TemplateGroupCache([
        TemplateGroup(gid=1, prefix="header", title="Navigation"),
        TemplateGroup(gid=2, prefix="index", title="<lang:group_index>"),
        TemplateGroup(gid=3, prefix="global", title="Site Wide"),
    ])


# =============================================================================
# Global Templates
# =============================================================================

class TestGlobalTemplates:
    """master + global_ 특수 규칙 테스트."""

    def test_master_global_ignores_group_row(self, group_cache):
        """global 그룹 행이 있어도 master global_* 는 Global Templates."""
        template = make_template("global_footer")

        assert classify(template, group_cache) == "Global Templates"

    def test_custom_global_uses_group_row(self, group_cache):
        """custom 세트의 global_* 는 일반 규칙 적용."""
        template = make_template("global_footer", sid=1)

        assert classify(template, group_cache) == "Site Wide Templates"

    def test_master_global_without_rows(self, empty_cache):
        template = make_template("global_header")

        assert classify(template, empty_cache) == "Global Templates"


# =============================================================================
# Group Table
# =============================================================================

class TestGroupTable:
    """templategroups 기반 분류 테스트."""

    def test_group_row_overrides_pattern(self, group_cache):
        """header 그룹 행이 header_ 패턴보다 우선."""
        template = make_template("header_welcome")

        assert classify(template, group_cache) == "Navigation Templates"

    def test_lang_reference(self, group_cache):
        """<lang:group_index> → Index Page Templates."""
        template = make_template("index_boardstats")

        assert classify(template, group_cache) == "Index Page Templates"

    def test_title_without_underscore_is_prefix(self, group_cache):
        """밑줄 없는 title은 전체가 prefix."""
        template = make_template("index")

        assert classify(template, group_cache) == "Index Page Templates"

    def test_prefix_lookup_is_lowercase(self, group_cache):
        template = make_template("Header_Banner")

        assert classify(template, group_cache) == "Navigation Templates"


class TestResolveGroupTitle:
    """그룹 title 해석 테스트."""

    def test_known_lang_key(self):
        assert resolve_group_title("<lang:group_header>") == "Header Templates"

    def test_unknown_lang_key(self):
        """모르는 언어 키 → Misc Templates."""
        assert resolve_group_title("<lang:group_unknown>") == "Misc Templates"

    def test_plain_title_gets_suffix(self):
        assert resolve_group_title("Calendar") == "Calendar Templates"

    def test_plain_title_already_suffixed(self):
        assert resolve_group_title("Calendar Templates") == "Calendar Templates"

    def test_blank_title(self):
        assert resolve_group_title("   ") == "Misc Templates"

    def test_lang_table_size(self):
        """기본 언어팩 그룹 키 42개."""
        assert len(LANG_GROUP_TITLES) == 42
        assert all(key.startswith("group_") for key in LANG_GROUP_TITLES)


# =============================================================================
# Standard Patterns / Fallback
# =============================================================================

class TestStandardPatterns:
    """하드코딩 패턴 테스트."""

    @pytest.mark.parametrize("title,expected", [
        ("header_welcomeblock", "Header Templates"),
        ("footer_languageselect", "Footer Templates"),
        ("usercp_nav", "User CP Templates"),
        ("modcp_nav", "Moderator CP Templates"),
        ("admin_options", "Admin Templates"),
        ("forum_jump", "Forum Templates"),
        ("member_profile", "Member Templates"),
        ("post_attachments", "Posting Templates"),
        ("poll_results", "Poll Templates"),
        ("rating_stars", "Rating Templates"),
        ("misc_help", "Misc Templates"),
    ])
    def test_pattern_without_group_row(self, empty_cache, title, expected):
        """그룹 행이 없어도 패턴 라벨 고정."""
        assert classify(make_template(title), empty_cache) == expected

    def test_no_match(self):
        assert standard_group_name("showthread_usersbrowsing") is None


class TestFallback:
    """prefix fallback 테스트."""

    def test_capitalized_prefix(self, empty_cache):
        assert classify(make_template("random_thing"), empty_cache) == "Random Templates"

    def test_empty_prefix(self, empty_cache):
        """"_" 로 시작 → prefix 없음 → Misc Templates."""
        assert classify(make_template("_orphan"), empty_cache) == "Misc Templates"

    def test_fallback_group_name(self):
        assert fallback_group_name("showthread") == "Showthread Templates"
        assert fallback_group_name("") == "Misc Templates"

    def test_template_prefix(self):
        assert template_prefix("Header_Welcome_Block") == "header"
        assert template_prefix("index") == "index"


class TestDeterminism:
    """같은 입력 → 같은 결과."""

    def test_classify_is_deterministic(self, group_cache):
        titles = ["header_welcome", "global_footer", "random_thing", "usercp_nav", "index"]

        first = [classify(make_template(t), group_cache) for t in titles]
        second = [classify(make_template(t), group_cache) for t in titles]

        assert first == second


# =============================================================================
# Folder Names
# =============================================================================

class TestSanitizeFolderName:
    """폴더명 sanitize 테스트."""

    def test_illegal_characters(self):
        assert sanitize_folder_name("My/Group:Name") == "My Group Name"

    def test_collapses_whitespace(self):
        assert sanitize_folder_name('  a <b>  "c" | d ') == "a b c d"

    def test_control_characters(self):
        assert sanitize_folder_name("Tab\tNew\nLine") == "Tab New Line"

    def test_empty_falls_back(self):
        assert sanitize_folder_name("") == "Misc Templates"
        assert sanitize_folder_name("???") == "Misc Templates"

    def test_dots_only_falls_back(self):
        """상위 디렉터리 참조가 되지 않게."""
        assert sanitize_folder_name("..") == "Misc Templates"


# =============================================================================
# Group Cache
# =============================================================================

class TestTemplateGroupCache:
    """그룹 캐시 테스트."""

    def test_load_once(self):
        """loader는 최초 1회만 호출."""
        calls = []

        def loader():
            calls.append(1)
            return [TemplateGroup(gid=1, prefix="header", title="Navigation")]

        cache = TemplateGroupCache()
        cache.load(loader)
        cache.load(loader)

        assert len(calls) == 1
        assert cache.loaded
        assert cache.get("header").title == "Navigation"

    def test_invalidate_reloads(self):
        cache = TemplateGroupCache()
        cache.load(lambda: [TemplateGroup(gid=1, prefix="header", title="Old")])

        cache.invalidate()
        assert not cache.loaded
        assert len(cache) == 0

        cache.load(lambda: [TemplateGroup(gid=1, prefix="header", title="New")])
        assert cache.get("header").title == "New"

    def test_later_gid_wins(self):
        """같은 prefix면 나중 행."""
        cache = TemplateGroupCache([
            TemplateGroup(gid=1, prefix="header", title="First"),
            TemplateGroup(gid=2, prefix="header", title="Second"),
        ])

        assert cache.get("header").title == "Second"

    def test_concurrent_load_calls_loader_once(self):
        """동시에 load해도 loader는 1회, 두 스레드 모두 채워진 캐시를 본다."""
        calls = []
        started = threading.Event()
        release = threading.Event()
        seen = []

        def loader():
            calls.append(1)
            started.set()
            release.wait(timeout=5)
            return [TemplateGroup(gid=1, prefix="header", title="Navigation")]

        cache = TemplateGroupCache()

        def worker():
            cache.load(loader)
            seen.append(cache.get("header"))

        first = threading.Thread(target=worker)
        second = threading.Thread(target=worker)
        first.start()
        assert started.wait(timeout=5)
        second.start()
        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert len(calls) == 1
        assert [group.title for group in seen] == ["Navigation", "Navigation"]
