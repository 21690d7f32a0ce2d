"""
Templates layer: 템플릿 그룹 분류.

역할:
- 템플릿 title → 그룹 이름 (grouping.py)
- 그룹 이름 → 안전한 폴더명

주의: 폴더 구분
- src/mybbbridge/templates/ → 코드 (이 모듈)
- <workspace>/template_sets/ → 로드된 템플릿 파일
"""

from .grouping import (
    LANG_GROUP_TITLES,
    STANDARD_GROUP_PATTERNS,
    TemplateGroupCache,
    classify,
    resolve_group_title,
    sanitize_folder_name,
    template_prefix,
)

__all__ = [
    "LANG_GROUP_TITLES",
    "STANDARD_GROUP_PATTERNS",
    "TemplateGroupCache",
    "classify",
    "resolve_group_title",
    "sanitize_folder_name",
    "template_prefix",
]
