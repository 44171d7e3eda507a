# src/y86_core_tracer/arch/y86/instructions/alu.py
"""
算術論理演算命令 (OPq: addq, subq, andq, xorq) の実装。
"""
from y86_core_tracer.common.types import AluOp, to_signed64
from y86_core_tracer.core.errors import InstructionError
from y86_core_tracer.core.snapshot import Operation
from y86_core_tracer.core.state import ConditionCodes, CpuState
from y86_core_tracer.transport.memory import Memory
from .base import detect_add_overflow, make_operation, read_register_byte, reg_operand, require_register

ALU_MNEMONICS = {
    AluOp.ADD: "addq",
    AluOp.SUB: "subq",
    AluOp.AND: "andq",
    AluOp.XOR: "xorq",
}

# @intent:utility_function 演算結果に基づいてフラグ(ZF, SF, OF)を更新します。
def update_flags(flags: ConditionCodes, result: int, overflow: bool) -> None:
    flags.zf = result == 0
    flags.sf = result < 0
    flags.of = overflow

# @intent:responsibility ALU演算を行い、(結果, オーバーフロー) を返します。
# @intent:rationale 減算は b + (-a) として計算し、加算と同じ符号規則でオーバーフローを判定します。
def alu_compute(op: AluOp, val_a: int, val_b: int):
    if op == AluOp.ADD:
        result = to_signed64(val_a + val_b)
        return result, detect_add_overflow(val_a, val_b, result)
    if op == AluOp.SUB:
        neg_a = to_signed64(-val_a)
        result = to_signed64(val_b + neg_a)
        return result, detect_add_overflow(val_b, neg_a, result)
    if op == AluOp.AND:
        return to_signed64(val_b & val_a), False
    if op == AluOp.XOR:
        return to_signed64(val_b ^ val_a), False
    raise InstructionError(f"Unknown ALU operation: {op}")

def decode_opq(opcode: int, memory: Memory, pc: int) -> Operation:
    ifun = opcode & 0xF
    try:
        alu_op = AluOp(ifun)
    except ValueError:
        raise InstructionError(f"Unknown ALU operation: {ifun:#x}") from None
    r_a, r_b = read_register_byte(memory, pc)
    src = require_register(r_a)
    dst = require_register(r_b)
    return make_operation(opcode, ALU_MNEMONICS[alu_op], [reg_operand(src), reg_operand(dst)],
                          memory, pc, 2, r_a=src, r_b=dst)

# @intent:responsibility rB ← rB op rA を計算し、フラグを更新します。
def execute_opq(state: CpuState, op: Operation) -> None:
    val_a = state.registers.get(op.r_a)
    val_b = state.registers.get(op.r_b)
    result, overflow = alu_compute(AluOp(op.ifun), val_a, val_b)
    state.registers.set(op.r_b, result)
    update_flags(state.flags, result, overflow)
    state.pc += op.length
