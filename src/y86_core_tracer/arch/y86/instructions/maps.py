# src/y86_core_tracer/arch/y86/instructions/maps.py
"""
命令コード(icode)と命令実装のマッピング定義。
"""
from y86_core_tracer.common.types import InstructionCode
from . import load
from . import alu
from . import control

# @intent:map 命令コードからデコード関数へのマッピングテーブル。
DECODE_MAP = {
    # Control
    InstructionCode.HALT: control.decode_halt,
    InstructionCode.NOP: control.decode_nop,
    InstructionCode.JXX: control.decode_jxx,
    InstructionCode.CALL: control.decode_call,
    InstructionCode.RET: control.decode_ret,

    # Data movement
    InstructionCode.RRMOVQ: load.decode_rrmovq,
    InstructionCode.IRMOVQ: load.decode_irmovq,
    InstructionCode.RMMOVQ: load.decode_rmmovq,
    InstructionCode.MRMOVQ: load.decode_mrmovq,
    InstructionCode.PUSHQ: load.decode_pushq,
    InstructionCode.POPQ: load.decode_popq,

    # ALU
    InstructionCode.OPQ: alu.decode_opq,
}

# @intent:map 命令コードから実行関数へのマッピングテーブル。
EXECUTE_MAP = {
    # Control
    InstructionCode.HALT: control.execute_halt,
    InstructionCode.NOP: control.execute_nop,
    InstructionCode.JXX: control.execute_jxx,
    InstructionCode.CALL: control.execute_call,
    InstructionCode.RET: control.execute_ret,

    # Data movement
    InstructionCode.RRMOVQ: load.execute_rrmovq,
    InstructionCode.IRMOVQ: load.execute_irmovq,
    InstructionCode.RMMOVQ: load.execute_rmmovq,
    InstructionCode.MRMOVQ: load.execute_mrmovq,
    InstructionCode.PUSHQ: load.execute_pushq,
    InstructionCode.POPQ: load.execute_popq,

    # ALU
    InstructionCode.OPQ: alu.execute_opq,
}
