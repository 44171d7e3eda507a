# y86_core_tracer/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、デコードされた命令(Operation)、トレースビルダーが1ステップごとに
直列化するTraceEntry、そしてSession Controllerが再生時に取得する
UI向けのExecutionSnapshotという、3つの不変データ構造を定義します。
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from y86_core_tracer.common.types import GENERAL_REGISTERS, Register, StatusCode

# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True)
class Operation:
    """
    デコードされた命令（HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode_hex: str  # 例: "30"
    mnemonic: str  # 例: "irmovq"
    operands: List[str] = field(default_factory=list)  # 例: ["$0xa", "%rax"]
    operand_bytes: List[int] = field(default_factory=list)  # オペコードに続く生のバイト列
    length: int = 1  # 命令のバイト長
    icode: int = 0
    ifun: int = 0
    r_a: Register = Register.RNONE
    r_b: Register = Register.RNONE
    val_c: int = 0  # 即値・変位・ジャンプ先

    @property
    def text(self) -> str:
        if self.operands:
            return f"{self.mnemonic} {', '.join(self.operands)}"
        return self.mnemonic

# @intent:responsibility トレースビルダーが各ステップ後に直列化するマシン状態を不変に記録します。
# @intent:rationale メモリは前エントリ以降にタッチされたワードだけを保持し、エントリを小さく保ちます。
@dataclass(frozen=True)
class TraceEntry:
    cycle: int
    pc: int
    stat: StatusCode
    registers: Tuple[int, ...]  # GENERAL_REGISTERSの順、符号付き64ビット
    zf: bool
    sf: bool
    of: bool
    memory_words: Tuple[Tuple[int, int], ...] = ()  # (境界アドレス, 符号なし64ビット値) の昇順
    instruction: Optional[str] = None  # このエントリを生んだ命令。エントリ0と強制停止エントリはNone

    def register(self, register: Register) -> int:
        return self.registers[GENERAL_REGISTERS.index(register)]

    def register_map(self) -> Dict[str, int]:
        return {r.reg_name: v for r, v in zip(GENERAL_REGISTERS, self.registers)}

# @intent:responsibility 再生中の1ステップごとに取得される、UI向けの完全なディープコピー。
@dataclass(frozen=True)
class ExecutionSnapshot:
    """
    履歴ナビゲーション（ジャンプ・比較・エクスポート）のための不変の記録。
    TraceEntryとは独立したライフサイクルを持ち、作成後に変更されることはありません。
    """
    id: str
    timestamp: datetime
    cycle: int
    pc: int
    stat: StatusCode
    registers: Tuple[int, ...]
    zf: bool
    sf: bool
    of: bool
    memory: bytes
    instruction: Optional[str] = None

    def register_map(self) -> Dict[str, int]:
        return {r.reg_name: v for r, v in zip(GENERAL_REGISTERS, self.registers)}

    def flag_map(self) -> Dict[str, bool]:
        return {"ZF": self.zf, "SF": self.sf, "OF": self.of}
