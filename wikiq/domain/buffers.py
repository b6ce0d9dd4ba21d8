# =====================================================
#                 DOMAIN / BUFFERS
# =====================================================

from wikiq.domain.errors import BufferGrowthError


FIELD_BUFFER_SIZE = 1024


class FieldBuffer:
    """
    Append-only byte buffer for one logical field.

    The written length is tracked separately from the backing storage, so an
    append only touches the appended bytes. Storage doubles when it runs out
    and is never capped; `grow_count` records how many times that happened.
    """

    def __init__(self, name: str, initial_capacity: int = FIELD_BUFFER_SIZE):
        self.name = name
        self.initial_capacity = initial_capacity
        self.grow_count = 0
        self._buf = bytearray(initial_capacity)
        self._length = 0

    def __len__(self) -> int:
        return self._length

    @property
    def capacity(self) -> int:
        return len(self._buf)

    def reset(self, release: bool = False):
        self._length = 0
        if release and len(self._buf) > self.initial_capacity:
            self._buf = bytearray(self.initial_capacity)

    def append(self, data: bytes):
        end = self._length + len(data)
        if end == self._length:
            return
        if end > len(self._buf):
            self._grow(end)
        self._buf[self._length:end] = data
        self._length = end

    def _grow(self, required: int):
        capacity = max(required, len(self._buf) * 2)
        try:
            self._buf.extend(bytes(capacity - len(self._buf)))
        except MemoryError as e:
            raise BufferGrowthError(self.name, capacity) from e
        self.grow_count += 1

    def getvalue(self) -> bytes:
        return bytes(self._buf[:self._length])

    def text(self) -> str:
        return self.getvalue().decode("utf-8", errors="replace")
