"""MyBB Bridge: 로컬 워크스페이스와 MyBB 템플릿/stylesheet 동기화."""

__version__ = "0.1.0"
