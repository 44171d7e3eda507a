# tests/core/test_snapshot.py
"""
y86_core_tracer.core.snapshotモジュールの単体テスト。
"""
import dataclasses
import pytest

from y86_core_tracer.common.types import Register, StatusCode
from y86_core_tracer.core.snapshot import Operation, TraceEntry

# @intent:test_suite 不変データ構造の基本的な振る舞いを検証します。

class TestOperation:
    def test_text_with_operands(self):
        op = Operation(opcode_hex="60", mnemonic="addq", operands=["%rbx", "%rax"], length=2)
        assert op.text == "addq %rbx, %rax"

    def test_text_without_operands(self):
        assert Operation(opcode_hex="00", mnemonic="halt").text == "halt"

    # @intent:test_case_immutable Operationが不変であることを検証します。
    def test_frozen(self):
        op = Operation(opcode_hex="00", mnemonic="halt")
        with pytest.raises(dataclasses.FrozenInstanceError):
            op.mnemonic = "nop"


class TestTraceEntry:
    def test_register_lookup(self):
        entry = TraceEntry(cycle=0, pc=0, stat=StatusCode.AOK, registers=tuple(range(15)),
                           zf=True, sf=False, of=False)
        assert entry.register(Register.RSP) == 4
        assert entry.register_map()["r14"] == 14
        assert entry.memory_words == ()
        assert entry.instruction is None
