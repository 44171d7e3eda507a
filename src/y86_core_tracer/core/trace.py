# y86_core_tracer/core/trace.py
"""
Core Layer (実行トレース)

ロード済みのメモリイメージからマシンを初期化し、停止するかステップ上限に達するまで
インタプリタを駆動して、1ステップごとに1つのTraceEntryを記録します。
対話的なステップ実行はこのトレースの再生であり、命令の再実行ではありません。
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from y86_core_tracer.common.types import InstructionCode, StatusCode
from y86_core_tracer.core.errors import SimulatorError
from y86_core_tracer.core.snapshot import TraceEntry
from y86_core_tracer.core.state import CpuState, create_initial_state
from y86_core_tracer.arch.y86.cpu import Y86Cpu
from y86_core_tracer.loader.loader import LoadedProgram

logger = logging.getLogger(__name__)

# @intent:constant ステップ数の上限。到達時点でAOKのままなら強制的にHLTにします。
MAX_SIMULATION_STEPS = 10000

# @intent:responsibility 1回の完全な実行結果（エントリ列と命令統計）を不変に保持します。
@dataclass(frozen=True)
class Trace:
    entries: Sequence[TraceEntry]
    entry_point: int = 0
    instruction_stats: Dict[str, int] = field(default_factory=dict)
    step_limit_reached: bool = False

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> TraceEntry:
        return self.entries[index]

    @property
    def final_status(self) -> StatusCode:
        return self.entries[-1].stat

    # @intent:responsibility 先頭がAOK以外で末尾がAOKという、実行順と逆に見える並びかどうかを返します。
    def looks_reversed(self) -> bool:
        return (len(self.entries) > 1
                and self.entries[0].stat != StatusCode.AOK
                and self.entries[-1].stat == StatusCode.AOK)


# @intent:responsibility 現在の状態を、指定されたタッチ済みワードだけを含むTraceEntryに直列化します。
def serialize_state(state: CpuState, touched_words: Iterable[int], instruction: Optional[str] = None) -> TraceEntry:
    size = state.memory.get_size()
    words = tuple((base, state.memory.word_at(base)) for base in sorted(touched_words) if 0 <= base < size)
    return TraceEntry(
        cycle=state.cycle,
        pc=state.pc,
        stat=state.stat,
        registers=state.registers.as_tuple(),
        zf=state.flags.zf,
        sf=state.flags.sf,
        of=state.flags.of,
        memory_words=words,
        instruction=instruction,
    )


class TraceBuilder:
    """
    インタプリタを最後まで同期的に駆動し、Traceを構築します。
    """
    def __init__(self, max_steps: int = MAX_SIMULATION_STEPS):
        if max_steps <= 0:
            raise ValueError("max_steps must be a positive integer.")
        self._max_steps = max_steps

    def build(self, program: LoadedProgram) -> Trace:
        state = create_initial_state(program.memory.copy(), program.entry_point)
        cpu = Y86Cpu(state)
        stats: Counter = Counter()

        entries: List[TraceEntry] = [serialize_state(state, program.touched_words)]

        steps = 0
        while steps < self._max_steps and state.stat == StatusCode.AOK:
            label = None
            try:
                operation = cpu.step()
                label = operation.text
                stats[InstructionCode(operation.icode).name] += 1
            except SimulatorError as e:
                # 失敗したステップの部分的な変更はそのまま記録する
                logger.debug("Step %d failed at pc=%#x: %s", steps + 1, state.pc, e)
                state.stat = e.status

            steps += 1
            state.cycle = steps
            entries.append(serialize_state(state, state.memory.get_and_clear_touched(), label))

        limit_reached = state.stat == StatusCode.AOK
        if limit_reached:
            logger.info("Step limit %d reached; forcing HLT", self._max_steps)
            state.stat = StatusCode.HLT
            state.cycle += 1
            entries.append(serialize_state(state, ()))

        logger.debug("Trace built: %d entries, final status %s", len(entries), state.stat.name)
        return Trace(
            entries=tuple(entries),
            entry_point=program.entry_point,
            instruction_stats=dict(stats),
            step_limit_reached=limit_reached,
        )
