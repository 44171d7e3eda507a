# y86_core_tracer/transport/memory.py
"""
Transport Layer (メモリイメージ)

このモジュールは、固定サイズのバイトアドレス可能なメモリを表現し、
境界チェック付きのバイト/64ビットワードアクセスを提供します。
書き込まれたバイトを含む8バイト境界のワードを「タッチ済み」として記録し、
トレースエントリに差分だけを保存できるようにします。
"""
from typing import Iterable, Set, Tuple

from y86_core_tracer.common.types import to_signed64, to_unsigned64
from y86_core_tracer.core.errors import AddressError

# @intent:constant 参照構成のメモリサイズ (32KB)。
DEFAULT_MEMORY_SIZE = 0x8000
WORD_SIZE = 8

# @intent:responsibility 固定サイズのメモリ領域と、タッチ済みワードの記録を管理します。
# @intent:rationale 旧Busのアクセスログと同じく「取得してクリアする」方式で差分を受け渡します。
class Memory:
    """
    Y86-64のメモリイメージ。アドレスは [0, size) の非負整数です。
    複数バイトのアクセスは全て8バイトのリトルエンディアンです。
    """
    # @intent:pre-condition sizeは正の整数である必要があります。
    def __init__(self, size: int = DEFAULT_MEMORY_SIZE):
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise ValueError("Memory size must be a positive integer.")
        self._memory = bytearray(size)
        self._size = size
        self._touched: Set[int] = set()

    def get_size(self) -> int:
        return self._size

    # @intent:responsibility アドレス範囲 [address, address+length) がメモリ内にあるか検査します。
    def _check_range(self, address: int, length: int, action: str) -> None:
        if address < 0 or address + length > self._size:
            raise AddressError(f"{action} out of bounds: {address:#x} (memory size {self._size:#x})")

    # @intent:responsibility 書き込まれた範囲を含む8バイト境界ワードをタッチ済みとして記録します。
    def _mark_touched(self, address: int, length: int) -> None:
        first = (address // WORD_SIZE) * WORD_SIZE
        last = ((address + length - 1) // WORD_SIZE) * WORD_SIZE
        for base in range(first, last + 1, WORD_SIZE):
            if base < self._size:
                self._touched.add(base)

    def get_and_clear_touched(self) -> Set[int]:
        """
        前回の呼び出し以降にタッチされたワードのアドレス集合を返し、記録をクリアします。
        """
        touched = self._touched
        self._touched = set()
        return touched

    def read(self, address: int) -> int:
        self._check_range(address, 1, "Read")
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        self._check_range(address, 1, "Write")
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data
        self._mark_touched(address, 1)

    # @intent:responsibility 8バイトのリトルエンディアン値を読み出します。
    def read_quad(self, address: int, signed: bool = True) -> int:
        self._check_range(address, WORD_SIZE, "Read")
        value = int.from_bytes(self._memory[address:address + WORD_SIZE], "little")
        return to_signed64(value) if signed else value

    def write_quad(self, address: int, value: int) -> None:
        self._check_range(address, WORD_SIZE, "Write")
        self._memory[address:address + WORD_SIZE] = to_unsigned64(value).to_bytes(WORD_SIZE, "little")
        self._mark_touched(address, WORD_SIZE)

    # @intent:responsibility 境界ワードの値を符号なしで返します。メモリ末尾をまたぐ部分は0として扱います。
    def word_at(self, base: int) -> int:
        chunk = bytes(self._memory[base:base + WORD_SIZE])
        return int.from_bytes(chunk.ljust(WORD_SIZE, b"\x00"), "little")

    # @intent:responsibility トレースエントリのワード差分をメモリに書き戻します（タッチ記録は行いません）。
    def apply_words(self, words: Iterable[Tuple[int, int]]) -> None:
        for base, value in words:
            if not 0 <= base < self._size:
                continue
            raw = to_unsigned64(value).to_bytes(WORD_SIZE, "little")
            end = min(base + WORD_SIZE, self._size)
            self._memory[base:end] = raw[:end - base]

    def to_bytes(self) -> bytes:
        return bytes(self._memory)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Memory":
        memory = cls(len(data))
        memory._memory[:] = data
        return memory

    def copy(self) -> "Memory":
        return Memory.from_bytes(self.to_bytes())
