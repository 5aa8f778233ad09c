"""Page-aligned code memory with Write-XOR-Execute permission tracking."""

from __future__ import annotations

import mmap


class JITMemoryError(RuntimeError):
    """Raised when a code memory region is misused or cannot be obtained."""

    def __init__(self, message: str) -> None:
        super().__init__(f"JITMemoryManager: {message}")


class JITMemoryManager:
    """Owns one anonymous, page-aligned memory region for generated code.

    The region is writable after allocation. ``make_executable`` flips it to
    the executable state, in which writes are refused; ``make_writable``
    flips it back.
    """

    def __init__(self, size: int | None = None) -> None:
        self._memory: mmap.mmap | None = None
        self._size = 0
        self._executable = False
        if size is not None:
            self.allocate(size)

    @property
    def memory(self) -> mmap.mmap | None:
        """The allocated region, or None when nothing is allocated."""
        return self._memory

    @property
    def size(self) -> int:
        """Size of the region in bytes, 0 when nothing is allocated."""
        return self._size

    @property
    def is_allocated(self) -> bool:
        return self._memory is not None

    @property
    def is_executable(self) -> bool:
        return self._executable

    def allocate(self, size: int) -> mmap.mmap:
        """Reserve a writable region of at least ``size`` bytes, page rounded."""
        if self._memory is not None:
            raise JITMemoryError("Memory already allocated. Call deallocate() first.")
        if size == 0:
            raise JITMemoryError("Cannot allocate zero bytes.")
        if size < 0:
            raise JITMemoryError(f"Failed to allocate {size} bytes: negative size")
        aligned = self.round_to_page_size(size)
        try:
            region = mmap.mmap(-1, aligned)
        except (OSError, ValueError, OverflowError) as exc:
            raise JITMemoryError(f"Failed to allocate {size} bytes: {exc}") from exc
        self._memory = region
        self._size = aligned
        self._executable = False
        return region

    def _require_memory(self) -> mmap.mmap:
        if self._memory is None:
            raise JITMemoryError("No memory allocated.")
        return self._memory

    def make_executable(self) -> None:
        """Switch the region to read+execute; writes are refused afterwards."""
        self._require_memory()
        self._executable = True

    def make_writable(self) -> None:
        """Switch the region back to read+write."""
        self._require_memory()
        self._executable = False

    def deallocate(self) -> None:
        """Release the region; does nothing when none is allocated."""
        if self._memory is not None:
            self._memory.close()
            self._memory = None
            self._size = 0
            self._executable = False

    def _check_range(self, offset: int, length: int) -> None:
        if offset < 0 or length < 0 or offset + length > self._size:
            raise JITMemoryError(
                f"Range {offset}..{offset + length} outside region of {self._size} bytes."
            )

    def write(self, offset: int, data: bytes) -> None:
        """Copy ``data`` into the region at ``offset``."""
        region = self._require_memory()
        if self._executable:
            raise JITMemoryError("Memory is executable; call make_writable() first.")
        data = bytes(data)
        self._check_range(offset, len(data))
        region[offset:offset + len(data)] = data

    def read(self, offset: int, length: int) -> bytes:
        """Return ``length`` bytes of the region starting at ``offset``."""
        region = self._require_memory()
        self._check_range(offset, length)
        return bytes(region[offset:offset + length])

    def __enter__(self) -> JITMemoryManager:
        return self

    def __exit__(self, *args) -> None:
        self.deallocate()

    def __del__(self) -> None:
        try:
            self.deallocate()
        except Exception:
            pass

    @staticmethod
    def page_size() -> int:
        """The system page size in bytes."""
        return mmap.PAGESIZE

    @staticmethod
    def round_to_page_size(size: int) -> int:
        """Round ``size`` up to the next page boundary."""
        page = JITMemoryManager.page_size()
        return ((size + page - 1) // page) * page