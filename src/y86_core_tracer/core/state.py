# y86_core_tracer/core/state.py
"""
Core Layer (アーキテクチャ状態)

このモジュールは、インタプリタが1命令ずつ進める唯一の可変な「マシン」、
すなわちレジスタファイル、コンディションコード、PC、ステータス、
メモリイメージ、サイクルカウンタを保持するデータ構造を定義します。
"""
from dataclasses import dataclass, field, fields
from typing import Dict, Tuple

from y86_core_tracer.common.types import GENERAL_REGISTERS, Register, StatusCode, to_signed64
from y86_core_tracer.transport.memory import Memory

# @intent:responsibility 15本の64ビット汎用レジスタを保持します。値は常に符号付き64ビットの範囲に正規化されます。
@dataclass
class RegisterFile:
    rax: int = 0
    rcx: int = 0
    rdx: int = 0
    rbx: int = 0
    rsp: int = 0
    rbp: int = 0
    rsi: int = 0
    rdi: int = 0
    r8: int = 0
    r9: int = 0
    r10: int = 0
    r11: int = 0
    r12: int = 0
    r13: int = 0
    r14: int = 0

    # @intent:rationale RNONE(0xF)は記憶領域を持たないため、ここでアクセスされた場合は呼び出し側の不具合です。
    def get(self, register: Register) -> int:
        if register == Register.RNONE:
            raise KeyError("RNONE has no storage")
        return getattr(self, register.reg_name)

    def set(self, register: Register, value: int) -> None:
        if register == Register.RNONE:
            raise KeyError("RNONE has no storage")
        setattr(self, register.reg_name, to_signed64(value))

    def as_tuple(self) -> Tuple[int, ...]:
        return tuple(self.get(r) for r in GENERAL_REGISTERS)

    def as_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_values(cls, values) -> "RegisterFile":
        regs = cls()
        for register, value in zip(GENERAL_REGISTERS, values):
            regs.set(register, value)
        return regs

# @intent:responsibility 算術論理演算によってのみ更新される3つのフラグ。
@dataclass
class ConditionCodes:
    zf: bool = True
    sf: bool = False
    of: bool = False

    def as_dict(self) -> Dict[str, bool]:
        return {"ZF": self.zf, "SF": self.sf, "OF": self.of}

# @intent:responsibility マシン全体の状態を保持します。Session Controllerが唯一の所有者です。
@dataclass
class CpuState:
    """
    Y86-64のアーキテクチャ状態。
    インタプリタには所有者から値として渡され、グローバルな共有状態にはなりません。
    """
    pc: int = 0x0000
    stat: StatusCode = StatusCode.AOK
    registers: RegisterFile = field(default_factory=RegisterFile)
    flags: ConditionCodes = field(default_factory=ConditionCodes)
    memory: Memory = field(default_factory=Memory)
    cycle: int = 0

    # @intent:responsibility レジスタ・フラグ・メモリを含めた完全なコピーを返します。
    def copy(self) -> "CpuState":
        return CpuState(
            pc=self.pc,
            stat=self.stat,
            registers=RegisterFile(**self.registers.as_dict()),
            flags=ConditionCodes(self.flags.zf, self.flags.sf, self.flags.of),
            memory=self.memory.copy(),
            cycle=self.cycle,
        )


# @intent:responsibility 実行開始時の状態を生成します。rspはメモリの最上位、ZFのみ真で開始します。
def create_initial_state(memory: Memory, entry_point: int = 0) -> CpuState:
    registers = RegisterFile()
    registers.rsp = memory.get_size()
    return CpuState(
        pc=entry_point,
        stat=StatusCode.AOK,
        registers=registers,
        flags=ConditionCodes(zf=True, sf=False, of=False),
        memory=memory,
        cycle=0,
    )
