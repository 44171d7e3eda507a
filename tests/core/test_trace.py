# tests/core/test_trace.py
"""
y86_core_tracer.core.traceモジュールの単体テスト。
ロード時の一括実行と、1ステップごとのトレースエントリの記録を検証します。
"""
import pytest

from y86_core_tracer.common.types import Register, StatusCode, to_unsigned64
from y86_core_tracer.core.trace import MAX_SIMULATION_STEPS, TraceBuilder
from y86_core_tracer.loader.loader import ObjectCodeLoader

# @intent:test_suite トレースビルダーの検証。

def build(text, max_steps=MAX_SIMULATION_STEPS, memory_size=0x8000):
    program = ObjectCodeLoader(memory_size).load_text(text)
    return TraceBuilder(max_steps).build(program)


class TestTraceBuilder:
    # @intent:test_case_halt haltのみのプログラムが2エントリのトレースになることを検証します。
    def test_halt_only_program(self):
        trace = build("0x000: 00")
        assert len(trace) == 2
        first, last = trace[0], trace[1]
        assert first.cycle == 0
        assert first.pc == 0
        assert first.stat == StatusCode.AOK
        assert first.register(Register.RSP) == 0x8000
        assert first.zf is True
        assert first.memory_words == ((0, 0),)
        assert first.instruction is None

        assert last.cycle == 1
        assert last.pc == 1
        assert last.stat == StatusCode.HLT
        assert last.instruction == "halt"
        assert trace.final_status == StatusCode.HLT
        assert trace.step_limit_reached is False
        assert trace.instruction_stats == {"HALT": 1}

    # @intent:test_case_adr 範囲外への呼び出しがADRで終わり、PCが進まないことを検証します。
    def test_call_beyond_memory(self):
        trace = build("0x000: 80 0090000000000000")
        assert len(trace) == 2
        assert trace[1].stat == StatusCode.ADR
        assert trace[1].pc == 0
        assert trace[1].instruction is None
        assert trace.instruction_stats == {}

    # @intent:test_case_ins 未定義命令がINSで終わることを検証します。
    def test_invalid_instruction(self):
        trace = build("0x000: 10\n0x001: f0")
        assert [e.stat for e in trace.entries] == [StatusCode.AOK, StatusCode.AOK, StatusCode.INS]
        assert trace[2].pc == 1

    # @intent:test_case_limit ステップ上限に達した場合、HLTのエントリが1つ追加されることを検証します。
    def test_step_limit(self):
        # 0x000: jmp 0x000 (無限ループ)
        trace = build("0x000: 70 0000000000000000", max_steps=5)
        assert len(trace) == 7
        assert all(e.stat == StatusCode.AOK for e in trace.entries[:-1])
        assert trace[-1].stat == StatusCode.HLT
        assert trace[-1].cycle == 6
        assert trace.step_limit_reached is True
        assert trace.instruction_stats == {"JXX": 5}

    # @intent:test_case_delta 各エントリにはそのステップでタッチされたワードだけが含まれることを検証します。
    def test_memory_words_are_deltas(self):
        text = "\n".join([
            "0x000: 30f00500000000000000",  # irmovq $5, %rax
            "0x00a: a00f",                  # pushq %rax
            "0x00c: b03f",                  # popq %rbx
            "0x00e: 00",                    # halt
        ])
        trace = build(text)
        assert len(trace) == 5
        assert {base for base, _ in trace[0].memory_words} == {0, 8}
        assert trace[1].memory_words == ()
        assert trace[2].memory_words == ((0x7FF8, 5),)
        assert trace[3].memory_words == ()
        assert trace[3].register(Register.RBX) == 5
        assert trace[3].register(Register.RSP) == 0x8000

    # @intent:test_case_overflow 0x7FFF...F + 1 でOFとSFが立ちZFが落ちることを検証します。
    def test_overflow_flags(self):
        text = "\n".join([
            "0x000: 30f0ffffffffffffff7f",  # irmovq $0x7fffffffffffffff, %rax
            "0x00a: 30f30100000000000000",  # irmovq $1, %rbx
            "0x014: 6030",                  # addq %rbx, %rax
            "0x016: 00",                    # halt
        ])
        trace = build(text)
        after_add = trace[3]
        assert to_unsigned64(after_add.register(Register.RAX)) == 0x8000000000000000
        assert after_add.of is True
        assert after_add.sf is True
        assert after_add.zf is False

    # @intent:test_case_entry 実行がエントリポイント（最小アドレス）から始まることを検証します。
    def test_starts_at_entry_point(self):
        trace = build("0x100: 00")
        assert trace.entry_point == 0x100
        assert trace[0].pc == 0x100
        assert trace[1].pc == 0x101

    # @intent:test_case_isolation トレース構築がロード済みのメモリイメージを変更しないことを検証します。
    def test_program_memory_untouched(self):
        program = ObjectCodeLoader().load_text("0x000: 30f00500000000000000\n0x00a: a00f\n0x00c: 00")
        TraceBuilder().build(program)
        assert program.memory.read_quad(0x7FF8) == 0

    def test_invalid_max_steps(self):
        with pytest.raises(ValueError):
            TraceBuilder(0)

    def test_not_reversed(self):
        assert build("0x000: 00").looks_reversed() is False
