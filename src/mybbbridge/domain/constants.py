"""
Domain Constants: 브리지 전역 상수.

워크스페이스 디렉토리 규칙, MyBB 스키마 상수 등.
"""

# =============================================================================
# Workspace Layout (워크스페이스 구조)
# =============================================================================
# <workspace>/
# ├── .vscode/mbbb.json
# ├── template_sets/<set title>/<group folder>/<template title>.html
# ├── styles/<theme name>/<stylesheet name>
# └── .mybbbridge/locks/

TEMPLATE_SETS_DIR = "template_sets"
STYLES_DIR = "styles"

TEMPLATE_EXTENSION = ".html"
STYLESHEET_EXTENSION = ".css"

CONFIG_DIR = ".vscode"
CONFIG_FILENAME = "mbbb.json"
DEFAULT_LOG_FILENAME = "mybbbridge_extension.log"

STATE_DIR = ".mybbbridge"
LOCKS_DIR = "locks"

# =============================================================================
# MyBB Schema
# =============================================================================

# master(기본) 템플릿의 sid. 세트별 custom 행이 없으면 이 행이 fallback
MASTER_SET_ID = -2

DEFAULT_TABLE_PREFIX = "mybb_"

# =============================================================================
# Cache Refresh (cachecss.php)
# =============================================================================

CACHE_REFRESH_SCRIPT = "cachecss.php"
CACHE_REFRESH_TIMEOUT = 10.0

# =============================================================================
# Forum Log (log.php)
# =============================================================================

FORUM_LOG_SCRIPT = "log.php"

# =============================================================================
# Group Names
# =============================================================================

GLOBAL_GROUP_NAME = "Global Templates"
MISC_GROUP_NAME = "Misc Templates"
GROUP_SUFFIX = "Templates"
