# src/y86_core_tracer/arch/y86/instructions/load.py
"""
データ転送命令（rrmovq/cmovXX, irmovq, rmmovq, mrmovq, pushq, popq）の実装。
"""
from y86_core_tracer.common.types import to_signed64
from y86_core_tracer.core.snapshot import Operation
from y86_core_tracer.core.state import CpuState
from y86_core_tracer.transport.memory import Memory
from .base import (
    check_address,
    evaluate_condition,
    make_operation,
    mem_operand,
    read_register_byte,
    reg_operand,
    require_condition,
    require_ifun_zero,
    require_register,
)

# @intent:constant cmovXX のニーモニック（ifun順）。ifun=0 は無条件の rrmovq。
CMOV_MNEMONICS = ["rrmovq", "cmovle", "cmovl", "cmove", "cmovne", "cmovge", "cmovg"]

# --- rrmovq / cmovXX ---
def decode_rrmovq(opcode: int, memory: Memory, pc: int) -> Operation:
    ifun = require_condition(opcode & 0xF)
    r_a, r_b = read_register_byte(memory, pc)
    src = require_register(r_a)
    dst = require_register(r_b)
    return make_operation(opcode, CMOV_MNEMONICS[ifun], [reg_operand(src), reg_operand(dst)],
                          memory, pc, 2, r_a=src, r_b=dst)

# @intent:responsibility 条件が成立した場合のみ rA を rB にコピーします。
def execute_rrmovq(state: CpuState, op: Operation) -> None:
    if evaluate_condition(op.ifun, state.flags):
        state.registers.set(op.r_b, state.registers.get(op.r_a))
    state.pc += op.length

# --- irmovq ---
# @intent:rationale rAフィールドは使用しないため検証しません。
def decode_irmovq(opcode: int, memory: Memory, pc: int) -> Operation:
    require_ifun_zero(opcode)
    _, r_b = read_register_byte(memory, pc)
    dst = require_register(r_b)
    value = memory.read_quad(pc + 2)
    return make_operation(opcode, "irmovq", [f"${value}", reg_operand(dst)],
                          memory, pc, 10, r_b=dst, val_c=value)

def execute_irmovq(state: CpuState, op: Operation) -> None:
    state.registers.set(op.r_b, op.val_c)
    state.pc += op.length

# --- rmmovq ---
def decode_rmmovq(opcode: int, memory: Memory, pc: int) -> Operation:
    require_ifun_zero(opcode)
    r_a, r_b = read_register_byte(memory, pc)
    src = require_register(r_a)
    base = require_register(r_b)
    displacement = memory.read_quad(pc + 2)
    return make_operation(opcode, "rmmovq", [reg_operand(src), mem_operand(displacement, base)],
                          memory, pc, 10, r_a=src, r_b=base, val_c=displacement)

# @intent:responsibility rA の値を M[rB + D] に格納します。
def execute_rmmovq(state: CpuState, op: Operation) -> None:
    address = to_signed64(state.registers.get(op.r_b) + op.val_c)
    check_address(address, state.memory)
    state.memory.write_quad(address, state.registers.get(op.r_a))
    state.pc += op.length

# --- mrmovq ---
def decode_mrmovq(opcode: int, memory: Memory, pc: int) -> Operation:
    require_ifun_zero(opcode)
    r_a, r_b = read_register_byte(memory, pc)
    dst = require_register(r_a)
    base = require_register(r_b)
    displacement = memory.read_quad(pc + 2)
    return make_operation(opcode, "mrmovq", [mem_operand(displacement, base), reg_operand(dst)],
                          memory, pc, 10, r_a=dst, r_b=base, val_c=displacement)

def execute_mrmovq(state: CpuState, op: Operation) -> None:
    address = to_signed64(state.registers.get(op.r_b) + op.val_c)
    check_address(address, state.memory)
    state.registers.set(op.r_a, state.memory.read_quad(address))
    state.pc += op.length

# --- pushq ---
def decode_pushq(opcode: int, memory: Memory, pc: int) -> Operation:
    require_ifun_zero(opcode)
    r_a, _ = read_register_byte(memory, pc)
    src = require_register(r_a)
    return make_operation(opcode, "pushq", [reg_operand(src)], memory, pc, 2, r_a=src)

# @intent:responsibility rsp を8減らしてから、新しい rsp の位置にレジスタを格納します。
# @intent:rationale 格納に失敗した場合でも rsp の減算は残ります（部分的な変更として記録される）。
def execute_pushq(state: CpuState, op: Operation) -> None:
    regs = state.registers
    regs.rsp = to_signed64(regs.rsp - 8)
    check_address(regs.rsp, state.memory, "Stack write")
    state.memory.write_quad(regs.rsp, regs.get(op.r_a))
    state.pc += op.length

# --- popq ---
def decode_popq(opcode: int, memory: Memory, pc: int) -> Operation:
    require_ifun_zero(opcode)
    r_a, _ = read_register_byte(memory, pc)
    dst = require_register(r_a)
    return make_operation(opcode, "popq", [reg_operand(dst)], memory, pc, 2, r_a=dst)

# @intent:responsibility 現在の rsp からレジスタを読み出し、その後 rsp を8増やします。
def execute_popq(state: CpuState, op: Operation) -> None:
    regs = state.registers
    check_address(regs.rsp, state.memory, "Stack read")
    value = state.memory.read_quad(regs.rsp)
    regs.set(op.r_a, value)
    regs.rsp = to_signed64(regs.rsp + 8)
    state.pc += op.length
