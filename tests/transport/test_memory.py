# tests/transport/test_memory.py
"""
y86_core_tracer.transport.memoryモジュールの単体テスト。
"""
import pytest
from y86_core_tracer.core.errors import AddressError
from y86_core_tracer.transport.memory import DEFAULT_MEMORY_SIZE, Memory

# @intent:test_suite メモリイメージの読み書き、境界チェック、タッチ済みワードの記録を検証します。

class TestMemory:
    """
    Memoryの単体テスト。
    """
    # @intent:test_case_init 既定サイズで0初期化されることを検証します。
    def test_default_size(self):
        memory = Memory()
        assert memory.get_size() == DEFAULT_MEMORY_SIZE == 0x8000
        assert memory.to_bytes() == bytes(0x8000)

    # @intent:test_case_init 無効なサイズでValueErrorが発生することを検証します。
    def test_invalid_size(self):
        with pytest.raises(ValueError, match="Memory size must be a positive integer."):
            Memory(0)
        with pytest.raises(ValueError, match="Memory size must be a positive integer."):
            Memory(-8)
        with pytest.raises(ValueError, match="Memory size must be a positive integer."):
            Memory(1.5)

    # @intent:test_case_rw バイト単位の読み書きと、8ビットを超える値の拒否を検証します。
    def test_byte_read_write(self):
        memory = Memory(16)
        memory.write(3, 0xAB)
        assert memory.read(3) == 0xAB
        with pytest.raises(ValueError):
            memory.write(0, 0x100)

    # @intent:test_case_bounds 範囲外アクセスがAddressErrorになることを検証します。
    def test_out_of_bounds(self):
        memory = Memory(16)
        with pytest.raises(AddressError):
            memory.read(16)
        with pytest.raises(AddressError):
            memory.write(-1, 0)
        with pytest.raises(AddressError):
            memory.read_quad(9)  # 9..16 は末尾をまたぐ
        with pytest.raises(AddressError):
            memory.write_quad(12, 1)

    # @intent:test_case_quad 64ビット値がリトルエンディアンで格納され、符号付き/符号なしで読めることを検証します。
    def test_quad_little_endian(self):
        memory = Memory(16)
        memory.write_quad(0, 0x0102030405060708)
        assert memory.read(0) == 0x08
        assert memory.read(7) == 0x01
        assert memory.read_quad(0) == 0x0102030405060708

        memory.write_quad(8, -1)
        assert memory.read_quad(8) == -1
        assert memory.read_quad(8, signed=False) == 0xFFFFFFFFFFFFFFFF

    # @intent:test_case_touched 書き込みを含む8バイト境界ワードが記録され、取得時にクリアされることを検証します。
    def test_touched_words(self):
        memory = Memory(32)
        memory.write(3, 1)
        memory.write_quad(6, 2)  # 0..7 と 8..15 の2ワードにまたがる
        assert memory.get_and_clear_touched() == {0, 8}
        assert memory.get_and_clear_touched() == set()

        memory.read_quad(16)
        assert memory.get_and_clear_touched() == set()

    # @intent:test_case_words ワード差分の書き戻しがタッチ記録を残さないことを検証します。
    def test_apply_words(self):
        memory = Memory(20)
        memory.apply_words([(8, 0x1122334455667788), (16, 0xAABBCCDDEEFF0011)])
        assert memory.read_quad(8, signed=False) == 0x1122334455667788
        # メモリ末尾をまたぐワードは範囲内の部分だけ書き込まれる
        assert memory.read(16) == 0x11
        assert memory.read(19) == 0xEE
        assert memory.word_at(16) == 0xEEFF0011
        assert memory.get_and_clear_touched() == set()

    # @intent:test_case_copy コピーが独立した内容を持つことを検証します。
    def test_copy_is_independent(self):
        memory = Memory(8)
        memory.write(0, 1)
        clone = memory.copy()
        clone.write(0, 2)
        assert memory.read(0) == 1
        assert Memory.from_bytes(clone.to_bytes()).read(0) == 2
