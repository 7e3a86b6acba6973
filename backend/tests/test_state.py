from __future__ import annotations

import pytest

from statlog.errors import LockHeldByOtherError
from statlog.state import ActiveProjectPointer, CheckinLock


def test_lock_starts_unlocked(layout):
    assert CheckinLock(layout).read() is None


def test_lock_is_exclusive(layout):
    lock = CheckinLock(layout)
    lock.acquire("alpha")
    with pytest.raises(LockHeldByOtherError) as excinfo:
        lock.acquire("beta")
    assert excinfo.value.holder == "alpha"
    assert excinfo.value.reason == "lock_held_by_other"
    assert lock.read() == "alpha"


def test_lock_reentry_by_holder_succeeds(layout):
    lock = CheckinLock(layout)
    lock.acquire("alpha")
    lock.acquire("alpha")
    assert lock.read() == "alpha"
    assert lock.is_held_by("alpha")
    assert not lock.is_held_by("beta")


def test_release_is_idempotent(layout):
    lock = CheckinLock(layout)
    lock.release()
    assert lock.read() is None
    lock.acquire("alpha")
    lock.release()
    lock.release()
    assert lock.read() is None
    assert not layout.lock_file.exists()


def test_lock_file_format(layout):
    CheckinLock(layout).acquire("alpha")
    assert layout.lock_file.read_text(encoding="utf-8") == "alpha\n"


def test_lock_keeps_surrounding_whitespace_of_ids(layout):
    lock = CheckinLock(layout)
    lock.acquire(" alpha ")
    assert layout.lock_file.read_text(encoding="utf-8") == " alpha \n"
    assert lock.read() == " alpha "
    assert lock.is_held_by(" alpha ")
    assert not lock.is_held_by("alpha")


def test_lock_reads_windows_line_ending(layout):
    layout.lock_file.write_bytes(b"alpha\r\n")
    assert CheckinLock(layout).read() == "alpha"


def test_blank_lock_file_means_unlocked(layout):
    layout.lock_file.write_text("   \n", encoding="utf-8")
    assert CheckinLock(layout).read() is None


def test_empty_lock_file_means_unlocked(layout):
    layout.lock_file.write_text("\n", encoding="utf-8")
    lock = CheckinLock(layout)
    assert lock.read() is None
    lock.acquire("beta")
    assert lock.read() == "beta"


def test_pointer_set_read_clear(layout):
    pointer = ActiveProjectPointer(layout)
    assert pointer.read() is None
    pointer.set("alpha")
    assert pointer.read() == "alpha"
    assert layout.running_file.read_text(encoding="utf-8") == "alpha\n"
    pointer.clear()
    pointer.clear()
    assert pointer.read() is None


def test_pointer_and_lock_are_independent(layout):
    lock = CheckinLock(layout)
    pointer = ActiveProjectPointer(layout)
    lock.acquire("alpha")
    pointer.set("beta")
    assert lock.read() == "alpha"
    assert pointer.read() == "beta"
    lock.release()
    assert pointer.read() == "beta"
