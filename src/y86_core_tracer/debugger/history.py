# y86_core_tracer/debugger/history.py
"""
実行履歴モジュール。

再生の1ステップごとに取得されるExecutionSnapshotを保持し、
ジャンプ・比較・エクスポートを提供します。トレースとは独立したライフサイクルを持ちます。
"""
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import yaml

from y86_core_tracer.common.types import to_unsigned64
from y86_core_tracer.core.snapshot import ExecutionSnapshot
from y86_core_tracer.core.state import CpuState

# @intent:data_structure 2つのスナップショットの差分。
@dataclass(frozen=True)
class SnapshotComparison:
    cycles: Tuple[int, int]
    pcs: Tuple[int, int]
    register_changes: Dict[str, Tuple[int, int]] = field(default_factory=dict)
    flag_changes: List[str] = field(default_factory=list)

    def summary(self) -> str:
        regs = ", ".join(f"{name}: {a:x} -> {b:x}" for name, (a, b) in self.register_changes.items()) or "none"
        flags = ", ".join(self.flag_changes) or "none"
        return (f"Cycle: {self.cycles[0]} -> {self.cycles[1]}\n"
                f"PC: {self.pcs[0]:#x} -> {self.pcs[1]:#x}\n"
                f"Registers: {regs}\n"
                f"Condition codes: {flags}")


def snapshot_to_record(snapshot: ExecutionSnapshot) -> Dict[str, Any]:
    """エクスポート形式の1レコードを生成します。"""
    return {
        "cycle": snapshot.cycle,
        "pc": f"0x{snapshot.pc:04x}",
        "instruction": snapshot.instruction,
        "stat": snapshot.stat.name,
        "timestamp": snapshot.timestamp.isoformat(),
        "registers": {name: f"0x{to_unsigned64(value):016x}" for name, value in snapshot.register_map().items()},
        "conditionCodes": snapshot.flag_map(),
    }


class SnapshotHistory:
    """
    ExecutionSnapshotの順序付きリスト。作成されたスナップショットは変更されません。
    """
    def __init__(self):
        self._snapshots: List[ExecutionSnapshot] = []

    # @intent:responsibility 状態の完全なディープコピーを取り、履歴に追加します。
    def capture(self, state: CpuState, instruction: Optional[str] = None) -> ExecutionSnapshot:
        snapshot = ExecutionSnapshot(
            id=uuid.uuid4().hex,
            timestamp=datetime.now(timezone.utc),
            cycle=state.cycle,
            pc=state.pc,
            stat=state.stat,
            registers=state.registers.as_tuple(),
            zf=state.flags.zf,
            sf=state.flags.sf,
            of=state.flags.of,
            memory=state.memory.to_bytes(),
            instruction=instruction,
        )
        self._snapshots.append(snapshot)
        return snapshot

    def find(self, snapshot_id: str) -> Optional[ExecutionSnapshot]:
        for snapshot in self._snapshots:
            if snapshot.id == snapshot_id:
                return snapshot
        return None

    def index_of(self, snapshot_id: str) -> int:
        for index, snapshot in enumerate(self._snapshots):
            if snapshot.id == snapshot_id:
                return index
        return -1

    def latest(self) -> Optional[ExecutionSnapshot]:
        return self._snapshots[-1] if self._snapshots else None

    def all(self) -> List[ExecutionSnapshot]:
        return list(self._snapshots)

    def clear(self) -> None:
        self._snapshots = []

    def __len__(self) -> int:
        return len(self._snapshots)

    # @intent:responsibility 2つのスナップショット間のレジスタとフラグの変化を求めます。
    # @intent:return いずれかのIDが存在しない場合はNone。
    def compare(self, first_id: str, second_id: str) -> Optional[SnapshotComparison]:
        first = self.find(first_id)
        second = self.find(second_id)
        if first is None or second is None:
            return None

        second_regs = second.register_map()
        register_changes = {
            name: (value, second_regs[name])
            for name, value in first.register_map().items()
            if value != second_regs[name]
        }
        second_flags = second.flag_map()
        flag_changes = [name for name, value in first.flag_map().items() if value != second_flags[name]]
        return SnapshotComparison(
            cycles=(first.cycle, second.cycle),
            pcs=(first.pc, second.pc),
            register_changes=register_changes,
            flag_changes=flag_changes,
        )

    def export_records(self) -> List[Dict[str, Any]]:
        return [snapshot_to_record(s) for s in self._snapshots]

    # @intent:responsibility 履歴を構造化文書（JSONまたはYAML）として直列化します。
    def export(self, fmt: str = "json") -> str:
        records = self.export_records()
        if fmt == "json":
            return json.dumps(records, indent=2, ensure_ascii=False)
        if fmt == "yaml":
            return yaml.safe_dump(records, sort_keys=False, allow_unicode=True)
        raise ValueError(f"Unsupported export format: {fmt}")
