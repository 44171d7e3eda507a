# src/y86_core_tracer/arch/y86/instructions/control.py
"""
制御命令（halt, nop, jXX, call, ret）の実装。
"""
from y86_core_tracer.common.types import StatusCode, to_signed64
from y86_core_tracer.core.snapshot import Operation
from y86_core_tracer.core.state import CpuState
from y86_core_tracer.transport.memory import Memory
from .base import check_address, evaluate_condition, make_operation, require_condition, require_ifun_zero

JUMP_MNEMONICS = ["jmp", "jle", "jl", "je", "jne", "jge", "jg"]

# --- halt ---
def decode_halt(opcode: int, memory: Memory, pc: int) -> Operation:
    require_ifun_zero(opcode)
    return make_operation(opcode, "halt", [], memory, pc, 1)

def execute_halt(state: CpuState, op: Operation) -> None:
    state.stat = StatusCode.HLT
    state.pc += op.length

# --- nop ---
def decode_nop(opcode: int, memory: Memory, pc: int) -> Operation:
    require_ifun_zero(opcode)
    return make_operation(opcode, "nop", [], memory, pc, 1)

def execute_nop(state: CpuState, op: Operation) -> None:
    state.pc += op.length

# --- jXX ---
def decode_jxx(opcode: int, memory: Memory, pc: int) -> Operation:
    ifun = require_condition(opcode & 0xF)
    destination = memory.read_quad(pc + 1, signed=False)
    return make_operation(opcode, JUMP_MNEMONICS[ifun], [f"0x{destination:x}"], memory, pc, 9, val_c=destination)

# @intent:responsibility 条件成立時はジャンプ先へ、不成立時は次の命令へ進みます。
# @intent:rationale ジャンプ先は条件に関わらず検証され、範囲外ならADRになります。
def execute_jxx(state: CpuState, op: Operation) -> None:
    target = check_address(op.val_c, state.memory, "Jump target")
    if evaluate_condition(op.ifun, state.flags):
        state.pc = target
    else:
        state.pc += op.length

# --- call ---
def decode_call(opcode: int, memory: Memory, pc: int) -> Operation:
    require_ifun_zero(opcode)
    destination = memory.read_quad(pc + 1, signed=False)
    return make_operation(opcode, "call", [f"0x{destination:x}"], memory, pc, 9, val_c=destination)

# @intent:responsibility 戻りアドレス (pc+9) をスタックに積み、呼び出し先へ制御を移します。
def execute_call(state: CpuState, op: Operation) -> None:
    target = check_address(op.val_c, state.memory, "Call target")
    return_address = state.pc + op.length
    regs = state.registers
    regs.rsp = to_signed64(regs.rsp - 8)
    check_address(regs.rsp, state.memory, "Stack write")
    state.memory.write_quad(regs.rsp, return_address)
    state.pc = target

# --- ret ---
def decode_ret(opcode: int, memory: Memory, pc: int) -> Operation:
    require_ifun_zero(opcode)
    return make_operation(opcode, "ret", [], memory, pc, 1)

# @intent:responsibility スタックから戻りアドレスを取り出し、そこへ制御を移します。
def execute_ret(state: CpuState, op: Operation) -> None:
    regs = state.registers
    check_address(regs.rsp, state.memory, "Stack read")
    return_address = state.memory.read_quad(regs.rsp, signed=False)
    regs.rsp = to_signed64(regs.rsp + 8)
    state.pc = check_address(return_address, state.memory, "Return address")
