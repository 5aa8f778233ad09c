import pytest

from bcplkit.jit_memory import JITMemoryError, JITMemoryManager


def test_round_to_page_size_rounds_up():
    page = JITMemoryManager.page_size()
    assert JITMemoryManager.round_to_page_size(1) == page
    assert JITMemoryManager.round_to_page_size(page) == page
    assert JITMemoryManager.round_to_page_size(page + 1) == 2 * page
    assert JITMemoryManager.round_to_page_size(0) == 0


def test_page_size_is_power_of_two():
    page = JITMemoryManager.page_size()
    assert page > 0 and page & (page - 1) == 0


def test_default_has_no_memory():
    manager = JITMemoryManager()
    assert manager.is_allocated is False
    assert manager.size == 0
    assert manager.memory is None
    assert manager.is_executable is False


def test_constructor_allocates_page_aligned():
    manager = JITMemoryManager(100)
    try:
        assert manager.is_allocated
        assert manager.size == JITMemoryManager.page_size()
        assert manager.is_executable is False
    finally:
        manager.deallocate()


def test_allocate_zero_raises():
    with pytest.raises(JITMemoryError, match="Cannot allocate zero bytes"):
        JITMemoryManager().allocate(0)


def test_double_allocate_raises():
    with JITMemoryManager(16) as manager:
        with pytest.raises(JITMemoryError, match="already allocated"):
            manager.allocate(16)


def test_error_message_prefix():
    with pytest.raises(JITMemoryError) as info:
        JITMemoryManager().make_executable()
    assert str(info.value).startswith("JITMemoryManager: ")
    assert "No memory allocated." in str(info.value)


def test_make_writable_without_memory_raises():
    with pytest.raises(JITMemoryError, match="No memory allocated"):
        JITMemoryManager().make_writable()


def test_write_read_round_trip():
    code = bytes([0x1F, 0x20, 0x03, 0xD5])
    with JITMemoryManager(64) as manager:
        manager.write(8, code)
        assert manager.read(8, len(code)) == code
        assert manager.read(0, 8) == bytes(8)


def test_executable_refuses_writes_until_writable():
    with JITMemoryManager(64) as manager:
        manager.write(0, b"ab")
        manager.make_executable()
        assert manager.is_executable
        with pytest.raises(JITMemoryError):
            manager.write(0, b"cd")
        assert manager.read(0, 2) == b"ab"
        manager.make_writable()
        assert manager.is_executable is False
        manager.write(0, b"cd")
        assert manager.read(0, 2) == b"cd"


def test_make_executable_is_idempotent():
    with JITMemoryManager(8) as manager:
        manager.make_executable()
        manager.make_executable()
        assert manager.is_executable


def test_out_of_range_access_raises():
    with JITMemoryManager(8) as manager:
        size = manager.size
        with pytest.raises(JITMemoryError):
            manager.write(size - 1, b"xy")
        with pytest.raises(JITMemoryError):
            manager.read(-1, 1)
        with pytest.raises(JITMemoryError):
            manager.read(0, size + 1)


def test_deallocate_resets_state_and_allows_reallocation():
    manager = JITMemoryManager(8)
    manager.make_executable()
    manager.deallocate()
    assert manager.is_allocated is False
    assert manager.size == 0
    assert manager.is_executable is False
    manager.deallocate()
    manager.allocate(8)
    assert manager.is_allocated
    manager.deallocate()


def test_context_manager_releases_memory():
    with JITMemoryManager(8) as manager:
        assert manager.is_allocated
    assert manager.is_allocated is False


def test_read_without_memory_raises():
    with pytest.raises(JITMemoryError, match="No memory allocated"):
        JITMemoryManager().read(0, 1)