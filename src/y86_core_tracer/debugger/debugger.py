# y86_core_tracer/debugger/debugger.py
"""
デバッガモジュール。

ロード時に一度だけ構築した実行トレースを所有し、ステップ・連続実行・リセット・
ブレークポイントからの再開・スナップショットへのジャンプを、トレース上のカーソル移動として提供します。
命令の再実行は一切行いません。
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple

from y86_core_tracer.common.types import LogLevel, RegisterLayoutInfo, StatusCode
from y86_core_tracer.core.errors import LoadError
from y86_core_tracer.core.snapshot import ExecutionSnapshot, TraceEntry
from y86_core_tracer.core.state import ConditionCodes, CpuState, RegisterFile, create_initial_state
from y86_core_tracer.core.trace import MAX_SIMULATION_STEPS, Trace, TraceBuilder
from y86_core_tracer.arch.y86.cpu import Y86Cpu
from y86_core_tracer.loader.loader import ObjectCodeLoader
from y86_core_tracer.transport.memory import DEFAULT_MEMORY_SIZE, Memory
from .breakpoint import Breakpoint, BreakpointHit, BreakpointTable
from .history import SnapshotComparison, SnapshotHistory

logger = logging.getLogger(__name__)

_LOGGING_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}

# @intent:responsibility セッションの状態機械の状態を定義します。
class SessionState(Enum):
    UNLOADED = "UNLOADED"
    LOADED = "LOADED"                        # トレース構築済み、カーソルはエントリ0
    ADVANCING = "ADVANCING"                  # まだ進めるエントリがある
    HALTED = "HALTED"                        # 最終エントリに到達、またはAOK以外
    BREAKPOINT_PAUSED = "BREAKPOINT_PAUSED"  # 再生中にブレークポイントが発火した

# @intent:data_structure 外部UI（ターミナル・トースト）向けの構造化ログ。
@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    cycle: int
    level: LogLevel
    message: str


class Debugger:
    """
    アーキテクチャ状態・トレース・スナップショット履歴の唯一の所有者（Session Controller）。
    全ての変更は load_program / step / run_tick / restore_snapshot / reset の呼び出し内で同期的に行われます。
    """
    def __init__(self, memory_size: int = DEFAULT_MEMORY_SIZE, max_steps: int = MAX_SIMULATION_STEPS):
        self._memory_size = memory_size
        self._loader = ObjectCodeLoader(memory_size)
        self._builder = TraceBuilder(max_steps)
        self._breakpoints = BreakpointTable(warn=lambda message: self._log(LogLevel.WARNING, message))
        self._history = SnapshotHistory()
        self._logs: List[LogEntry] = []
        self._state: CpuState = self._create_initial_state()
        self._trace: Optional[Trace] = None
        self._current_index = -1
        self._running = False
        self._run_active = False
        self._stat_before_breakpoint: Optional[StatusCode] = None
        self._last_breakpoint_hit: Optional[BreakpointHit] = None

    def _create_initial_state(self) -> CpuState:
        return create_initial_state(Memory(self._memory_size), 0)

    def _log(self, level: LogLevel, message: str) -> None:
        self._logs.append(LogEntry(
            timestamp=datetime.now(timezone.utc),
            cycle=self._state.cycle,
            level=level,
            message=message,
        ))
        logger.log(_LOGGING_LEVELS[level], message)

    def _has_next_step(self) -> bool:
        return self._trace is not None and self._current_index < len(self._trace) - 1

    # --- ライフサイクル ---

    # @intent:responsibility トレース・履歴・カーソルを破棄し、未ロード状態に戻します。
    # @intent:rationale ブレークポイントとそのヒット数は保持されます（明示的な削除でのみ消える）。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._logs = []
        self._history.clear()
        self._trace = None
        self._current_index = -1
        self._running = False
        self._run_active = False
        self._stat_before_breakpoint = None
        self._last_breakpoint_hit = None
        self._log(LogLevel.INFO, "CPU reset: registers and memory cleared")

    def load_program(self, text: str) -> bool:
        """
        オブジェクトコードをロードし、ステップ上限まで実行してトレースを構築します。
        失敗した場合はFalseを返し、エラーログを残します。部分的なトレースは残りません。
        """
        self.reset()
        try:
            program = self._loader.load_text(text)
            trace = self._builder.build(program)
        except LoadError as e:
            self._log(LogLevel.ERROR, f"Program load failed: {e}")
            return False

        if trace.looks_reversed():
            # ビルダーは常に実行順で出力するため、ここに来るのは不整合の兆候
            self._log(LogLevel.WARNING, "Trace order looks reversed; keeping execution order")

        self._trace = trace
        self._current_index = 0
        self._apply_entry(trace[0], 0)
        self._running = len(trace) > 1 and self._state.stat == StatusCode.AOK
        self._log(LogLevel.SUCCESS, f"Program simulated: {len(trace)} trace entries recorded")
        self._capture_snapshot(trace[0])
        return True

    # @intent:responsibility トレースエントリを現在のアーキテクチャ状態として適用します。
    # @intent:rationale メモリはエントリに含まれるワード差分だけを直前のメモリに上書きします。
    def _apply_entry(self, entry: TraceEntry, index: int) -> None:
        memory = self._state.memory.copy()
        memory.apply_words(entry.memory_words)
        self._state = CpuState(
            pc=entry.pc,
            stat=entry.stat,
            registers=RegisterFile.from_values(entry.registers),
            flags=ConditionCodes(zf=entry.zf, sf=entry.sf, of=entry.of),
            memory=memory,
            cycle=index,
        )

    def _capture_snapshot(self, entry: TraceEntry) -> ExecutionSnapshot:
        label = entry.instruction or f"PC=0x{self._state.pc:04x}"
        return self._history.capture(self._state, label)

    # --- 実行制御 ---

    def step(self) -> bool:
        """
        次のトレースエントリを再生します。進められない場合は何もしません。

        Returns:
            再生後もさらに進められるかどうか。
        """
        if not self._running or not self._has_next_step():
            self._running = False
            return False

        next_index = self._current_index + 1
        entry = self._trace[next_index]
        self._apply_entry(entry, next_index)
        self._current_index = next_index
        self._capture_snapshot(entry)
        self._log(LogLevel.INFO, f"Cycle {self._state.cycle}: PC=0x{self._state.pc:04x}")

        self._running = self._state.stat == StatusCode.AOK and self._has_next_step()

        hit = self._breakpoints.check(self._state.pc, self._state.registers, self._state.cycle)
        if hit:
            self._last_breakpoint_hit = hit
            self._stat_before_breakpoint = self._state.stat
            self._state.stat = StatusCode.HLT
            self._running = False
            self._log(LogLevel.WARNING, f"Breakpoint hit at 0x{self._state.pc:04x}")

        if not self._running:
            self._run_active = False
        return self._running

    def continue_from_breakpoint(self) -> bool:
        """
        ブレークポイントで上書きする前のステータスを復元し、AOKかつ残りのエントリがあれば再開可能にします。
        """
        if self._last_breakpoint_hit is None or self._stat_before_breakpoint is None:
            return False
        self._state.stat = self._stat_before_breakpoint
        self._running = self._state.stat == StatusCode.AOK and self._has_next_step()
        self._last_breakpoint_hit = None
        self._stat_before_breakpoint = None
        self._log(LogLevel.INFO, "Continuing from breakpoint")
        return self._running

    # @intent:responsibility 連続実行を開始します。実際の前進は run_tick() の呼び出しごとに1ステップずつ行われます。
    def run(self) -> bool:
        if not self._running:
            return False
        self._run_active = True
        self._log(LogLevel.INFO, "Running")
        return True

    # @intent:responsibility 連続実行の1ティック。停止条件に達すると自動的に連続実行を終了します。
    def run_tick(self) -> bool:
        if not self._run_active:
            return False
        if not self._running:
            self._run_active = False
            return False
        self.step()
        return self._run_active

    # @intent:responsibility ティック境界で連続実行を中断します。ステップの途中状態が見えることはありません。
    def pause(self) -> None:
        if self._run_active:
            self._run_active = False
            self._log(LogLevel.INFO, f"Paused at cycle {self._state.cycle}")

    # --- 履歴 ---

    def restore_snapshot(self, snapshot_id: str) -> bool:
        """
        以前に取得したスナップショットの時点に、状態とカーソルを移動します。
        """
        snapshot = self._history.find(snapshot_id)
        if snapshot is None:
            self._log(LogLevel.ERROR, f"Snapshot not found: {snapshot_id}")
            return False

        self._state = CpuState(
            pc=snapshot.pc,
            stat=snapshot.stat,
            registers=RegisterFile.from_values(snapshot.registers),
            flags=ConditionCodes(zf=snapshot.zf, sf=snapshot.sf, of=snapshot.of),
            memory=Memory.from_bytes(snapshot.memory),
            cycle=snapshot.cycle,
        )
        self._current_index = snapshot.cycle
        self._stat_before_breakpoint = None
        self._last_breakpoint_hit = None
        self._run_active = False
        self._running = self._state.stat == StatusCode.AOK and self._has_next_step()
        self._log(LogLevel.INFO, f"Restored to cycle {snapshot.cycle}")
        return True

    def compare_snapshots(self, first_id: str, second_id: str) -> Optional[SnapshotComparison]:
        comparison = self._history.compare(first_id, second_id)
        if comparison is None:
            self._log(LogLevel.ERROR, f"Snapshot comparison failed: {first_id}, {second_id}")
        return comparison

    def export_history(self, fmt: str = "json") -> str:
        return self._history.export(fmt)

    # --- ブレークポイント ---

    def add_breakpoint(self, address: int, condition: Optional[str] = None) -> Breakpoint:
        bp = self._breakpoints.add(address, condition)
        self._log(LogLevel.INFO, f"Breakpoint added: 0x{address:04x}")
        return bp

    def remove_breakpoint(self, address: int) -> bool:
        removed = self._breakpoints.remove(address)
        if removed:
            self._log(LogLevel.INFO, f"Breakpoint removed: 0x{address:04x}")
        else:
            self._log(LogLevel.WARNING, f"No breakpoint at 0x{address:04x}")
        return removed

    def remove_breakpoint_by_id(self, breakpoint_id: str) -> bool:
        removed = self._breakpoints.remove_by_id(breakpoint_id)
        if removed:
            self._log(LogLevel.INFO, f"Breakpoint removed: {breakpoint_id}")
        else:
            self._log(LogLevel.WARNING, f"Breakpoint not found: {breakpoint_id}")
        return removed

    def toggle_breakpoint(self, address: int) -> bool:
        enabled = self._breakpoints.toggle(address)
        if enabled is None:
            self._log(LogLevel.WARNING, f"No breakpoint at 0x{address:04x}")
            return False
        self._log(LogLevel.INFO, f"Breakpoint 0x{address:04x} {'enabled' if enabled else 'disabled'}")
        return enabled

    def get_breakpoints(self) -> List[Breakpoint]:
        return self._breakpoints.all()

    def has_breakpoint(self, address: int) -> bool:
        return self._breakpoints.has(address)

    def clear_breakpoints(self) -> None:
        self._breakpoints.clear()
        self._log(LogLevel.INFO, "All breakpoints cleared")

    def get_last_breakpoint_hit(self) -> Optional[BreakpointHit]:
        return self._last_breakpoint_hit

    # --- アクセサ ---

    def get_state(self) -> CpuState:
        return self._state.copy()

    def get_registers(self) -> Dict[str, int]:
        return self._state.registers.as_dict()

    def get_condition_codes(self) -> Dict[str, bool]:
        return self._state.flags.as_dict()

    def get_memory(self) -> bytes:
        return self._state.memory.to_bytes()

    def get_pc(self) -> int:
        return self._state.pc

    def get_status(self) -> StatusCode:
        return self._state.stat

    def get_status_name(self) -> str:
        return self._state.stat.name

    def get_cycle(self) -> int:
        return self._state.cycle

    def get_logs(self) -> List[LogEntry]:
        return list(self._logs)

    def get_execution_history(self) -> List[ExecutionSnapshot]:
        return self._history.all()

    def get_trace(self) -> Optional[Trace]:
        return self._trace

    def get_instruction_stats(self) -> Dict[str, int]:
        return dict(self._trace.instruction_stats) if self._trace else {}

    def is_running(self) -> bool:
        return self._running

    def is_run_active(self) -> bool:
        return self._run_active

    def get_session_state(self) -> SessionState:
        if self._trace is None:
            return SessionState.UNLOADED
        if self._last_breakpoint_hit is not None:
            return SessionState.BREAKPOINT_PAUSED
        if self._running:
            return SessionState.LOADED if self._current_index == 0 else SessionState.ADVANCING
        return SessionState.HALTED

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return Y86Cpu(self._state).get_register_layout()

    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return Y86Cpu(self._state).disassemble(start_addr, length)
