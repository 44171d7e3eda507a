# y86_core_tracer/debugger/breakpoint.py
"""
ブレークポイントモジュール。

アドレスをキーとするブレークポイントの管理と、
レジスタと整数リテラルを比較する条件式の評価を担います。
"""
import logging
import operator
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from y86_core_tracer.common.types import REGISTER_BY_NAME, Register
from y86_core_tracer.core.state import RegisterFile

logger = logging.getLogger(__name__)

# @intent:constant "<レジスタ> <演算子> <整数>" 形式の条件式。
CONDITION_PATTERN = re.compile(
    r"^\s*(rax|rcx|rdx|rbx|rsp|rbp|rsi|rdi|r8|r9|r10|r11|r12|r13|r14)\s*(==|!=|>=|<=|>|<)\s*(-?\d+)\s*$"
)

# @intent:responsibility 条件式で使用できる比較演算子を定義します。
class Comparison(Enum):
    EQ = "=="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="

_COMPARATORS: Dict[Comparison, Callable[[int, int], bool]] = {
    Comparison.EQ: operator.eq,
    Comparison.NE: operator.ne,
    Comparison.GT: operator.gt,
    Comparison.LT: operator.lt,
    Comparison.GE: operator.ge,
    Comparison.LE: operator.le,
}

# @intent:responsibility ブレークポイント作成時に一度だけ構築される、型付きの条件モデル。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    単一のレジスタを整数リテラルと比較する条件。評価時に文字列を再解析しません。
    """
    register: Register
    comparison: Comparison
    value: int

    # @intent:rationale レジスタ値は符号付き64ビットとして比較します。
    def evaluate(self, registers: RegisterFile) -> bool:
        return _COMPARATORS[self.comparison](registers.get(self.register), self.value)

    def __str__(self) -> str:
        return f"{self.register.reg_name}{self.comparison.value}{self.value}"


def parse_condition(text: str) -> BreakpointCondition:
    """
    条件式の文字列を解析します。不正な形式の場合はValueErrorを送出します。
    """
    match = CONDITION_PATTERN.match(text or "")
    if not match:
        raise ValueError(f"Invalid breakpoint condition: {text!r}")
    return BreakpointCondition(
        register=REGISTER_BY_NAME[match.group(1)],
        comparison=Comparison(match.group(2)),
        value=int(match.group(3)),
    )

# @intent:responsibility 1つのブレークポイント。アドレスごとに最大1つだけ存在します。
@dataclass
class Breakpoint:
    id: str
    address: int
    enabled: bool = True
    condition_text: Optional[str] = None
    condition: Optional[BreakpointCondition] = None
    condition_error: Optional[str] = None  # 条件式が不正な場合の理由。不正な条件は決して発火しない
    hit_count: int = 0

# @intent:data_structure ブレークポイントのヒット情報。
@dataclass(frozen=True)
class BreakpointHit:
    breakpoint: Breakpoint
    cycle: int
    pc: int


class BreakpointTable:
    """
    アドレスをキーとしてブレークポイントを保持し、現在のPCとレジスタに対して評価します。
    """
    def __init__(self, warn: Optional[Callable[[str], None]] = None):
        self._breakpoints: Dict[int, Breakpoint] = {}
        self._warn = warn or logger.warning

    # @intent:responsibility ブレークポイントを追加します。同じアドレスの既存ブレークポイントは置き換えます。
    def add(self, address: int, condition: Optional[str] = None) -> Breakpoint:
        parsed = None
        error = None
        if condition:
            try:
                parsed = parse_condition(condition)
            except ValueError as e:
                error = str(e)
                self._warn(f"Invalid breakpoint condition at {address:#06x}: {condition}")
        bp = Breakpoint(
            id=f"bp_{address}_{time.time_ns()}",
            address=address,
            condition_text=condition or None,
            condition=parsed,
            condition_error=error,
        )
        self._breakpoints[address] = bp
        return bp

    def remove(self, address: int) -> bool:
        return self._breakpoints.pop(address, None) is not None

    def remove_by_id(self, breakpoint_id: str) -> bool:
        for address, bp in list(self._breakpoints.items()):
            if bp.id == breakpoint_id:
                del self._breakpoints[address]
                return True
        return False

    # @intent:return 切り替え後の有効状態。ブレークポイントが存在しない場合はNone。
    def toggle(self, address: int) -> Optional[bool]:
        bp = self._breakpoints.get(address)
        if bp is None:
            return None
        bp.enabled = not bp.enabled
        return bp.enabled

    def get(self, address: int) -> Optional[Breakpoint]:
        return self._breakpoints.get(address)

    def has(self, address: int) -> bool:
        return address in self._breakpoints

    def clear(self) -> None:
        self._breakpoints.clear()

    def all(self) -> List[Breakpoint]:
        return list(self._breakpoints.values())

    def __len__(self) -> int:
        return len(self._breakpoints)

    # @intent:responsibility 現在のPCでブレークポイントが発火するか評価し、発火時はヒット数を1増やします。
    def check(self, pc: int, registers: RegisterFile, cycle: int) -> Optional[BreakpointHit]:
        bp = self._breakpoints.get(pc)
        if bp is None or not bp.enabled:
            return None

        if bp.condition_error is not None:
            self._warn(f"Invalid breakpoint condition: {bp.condition_text}")
            return None
        if bp.condition is not None and not bp.condition.evaluate(registers):
            return None

        bp.hit_count += 1
        return BreakpointHit(breakpoint=bp, cycle=cycle, pc=pc)
