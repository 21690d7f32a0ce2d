"""
test_locks.py - 아티팩트별 락 테스트

DoD:
- 같은 identity → 같은 락 파일
- 점유 중이면 timeout 후 LockTimeoutError
- 해제 후 재획득 가능
"""

from pathlib import Path

import pytest
from filelock import FileLock

from mybbbridge.core.locks import artifact_lock, lock_key
from mybbbridge.domain.errors import ErrorCodes, LockTimeoutError


class TestLockKey:
    """lock_key 테스트."""

    def test_deterministic(self):
        assert lock_key("template", "Default", "index") == lock_key("template", "Default", "index")

    def test_length(self):
        assert len(lock_key("stylesheet", "Default", "global.css")) == 16

    def test_distinct_identities(self):
        """구분자 때문에 "a"+"bc" 와 "ab"+"c" 가 다름."""
        assert lock_key("a", "bc") != lock_key("ab", "c")
        assert lock_key("template", "Default", "index") != lock_key("stylesheet", "Default", "index")


class TestArtifactLock:
    """artifact_lock 테스트."""

    def test_creates_locks_dir(self, tmp_path: Path):
        locks = tmp_path / ".mybbbridge" / "locks"

        with artifact_lock(locks, "template", "Default", "index", timeout=1.0):
            assert locks.is_dir()
            assert (locks / f"{lock_key('template', 'Default', 'index')}.lock").exists()

    def test_timeout_when_held(self, tmp_path: Path):
        """다른 쪽이 점유 중 → LockTimeoutError."""
        locks = tmp_path / "locks"
        locks.mkdir()
        holder = FileLock(locks / f"{lock_key('template', 'Default', 'index')}.lock")

        with holder:
            with pytest.raises(LockTimeoutError) as exc_info:
                with artifact_lock(locks, "template", "Default", "index", timeout=0.05):
                    pass

        assert exc_info.value.code == ErrorCodes.LOCK_TIMEOUT
        assert exc_info.value.context["identity"] == ["template", "Default", "index"]

    def test_other_identity_not_blocked(self, tmp_path: Path):
        locks = tmp_path / "locks"

        with artifact_lock(locks, "template", "Default", "index", timeout=0.05):
            with artifact_lock(locks, "template", "Default", "header", timeout=0.05):
                pass

    def test_released_after_block(self, tmp_path: Path):
        locks = tmp_path / "locks"

        with artifact_lock(locks, "stylesheet", "Default", "global.css", timeout=0.05):
            pass
        with artifact_lock(locks, "stylesheet", "Default", "global.css", timeout=0.05):
            pass
