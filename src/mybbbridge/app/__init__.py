"""
App layer: 에디터와 맞닿는 부분.

역할:
- 저장 이벤트 / 커맨드 경계 (commands)
- 워크스페이스 런타임 (runtime)
- 동기화 (sync), 캐시 갱신 (cache_refresh)
- HTTP API (main, routes)

⚠️ 에러는 commands에서만 잡는다. 아래 계층은 BridgeError를 그대로 올린다.
"""
