# src/y86_core_tracer/arch/y86/instructions/base.py
"""
Y86-64命令実装用の共通ユーティリティ。
"""
from typing import Tuple

from y86_core_tracer.common.types import ConditionCode, Register
from y86_core_tracer.core.errors import AddressError, InstructionError
from y86_core_tracer.core.snapshot import Operation
from y86_core_tracer.core.state import ConditionCodes
from y86_core_tracer.transport.memory import Memory

# @intent:utility_function 命令の2バイト目からrA(上位4ビット)とrB(下位4ビット)を取り出します。
def read_register_byte(memory: Memory, pc: int) -> Tuple[int, int]:
    reg_byte = memory.read(pc + 1)
    return (reg_byte >> 4) & 0xF, reg_byte & 0xF

# @intent:utility_function レジスタ番号を検証します。0xF(RNONE)はオペランドが必須の位置では不正です。
def require_register(reg_id: int) -> Register:
    if reg_id == Register.RNONE:
        raise InstructionError("Invalid register encoding: 0xF where a register is required")
    return Register(reg_id)

# @intent:utility_function 機能コード(ifun)が0であることを検証します。
def require_ifun_zero(opcode: int) -> None:
    if opcode & 0xF:
        raise InstructionError(f"Invalid function code for instruction {opcode:02X}")

def reg_operand(register: Register) -> str:
    return f"%{register.reg_name}"

def mem_operand(displacement: int, base: Register) -> str:
    return f"{displacement}({reg_operand(base)})"

# @intent:utility_function 計算済みアドレスがメモリ範囲内にあることを検証して返します。
def check_address(value: int, memory: Memory, action: str = "Memory access") -> int:
    if value < 0 or value >= memory.get_size():
        raise AddressError(f"{action} out of bounds: {value:#x}")
    return value

# @intent:utility_function 条件コードを評価します（cmovXX と jXX で共有）。
def evaluate_condition(ifun: int, flags: ConditionCodes) -> bool:
    if ifun == ConditionCode.YES:
        return True
    if ifun == ConditionCode.LE:
        return (flags.sf != flags.of) or flags.zf
    if ifun == ConditionCode.L:
        return flags.sf != flags.of
    if ifun == ConditionCode.E:
        return flags.zf
    if ifun == ConditionCode.NE:
        return not flags.zf
    if ifun == ConditionCode.GE:
        return flags.sf == flags.of
    if ifun == ConditionCode.G:
        return (not flags.zf) and flags.sf == flags.of
    return False

# @intent:utility_function 条件コードとして有効なifunかを検証します。
def require_condition(ifun: int) -> ConditionCode:
    try:
        return ConditionCode(ifun)
    except ValueError:
        raise InstructionError(f"Invalid condition function code: {ifun:#x}") from None

# @intent:utility_function 符号付き加算のオーバーフロー判定。両オペランドの符号が等しく、結果の符号だけが異なる場合に真。
def detect_add_overflow(a: int, b: int, result: int) -> bool:
    a_neg = a < 0
    b_neg = b < 0
    res_neg = result < 0
    return a_neg == b_neg and res_neg != a_neg

# @intent:utility_function 命令バイトからOperationを組み立てる際の共通処理。
def make_operation(opcode: int, mnemonic: str, operands, memory: Memory, pc: int, length: int, **kwargs) -> Operation:
    operand_bytes = [memory.read(pc + i) for i in range(1, length)]
    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=mnemonic,
        operands=list(operands),
        operand_bytes=operand_bytes,
        length=length,
        icode=(opcode >> 4) & 0xF,
        ifun=opcode & 0xF,
        **kwargs
    )