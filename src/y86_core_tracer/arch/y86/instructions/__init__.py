# src/y86_core_tracer/arch/y86/instructions/__init__.py
"""
Y86-64命令セット実装パッケージ。
"""
from y86_core_tracer.core.errors import InstructionError
from y86_core_tracer.core.snapshot import Operation
from y86_core_tracer.core.state import CpuState
from y86_core_tracer.transport.memory import Memory
from .maps import DECODE_MAP, EXECUTE_MAP

# @intent:responsibility 命令バイトを上位4ビット(icode)で振り分け、デコードします。
def decode_opcode(opcode: int, memory: Memory, pc: int) -> Operation:
    """
    Y86-64のオペコードをデコードし、Operationオブジェクトを返します。
    未定義の命令コードはInstructionErrorになります。
    """
    decoder = DECODE_MAP.get((opcode >> 4) & 0xF)
    if decoder is None:
        raise InstructionError(f"Unknown instruction: {opcode:02X} at {pc:#x}")
    return decoder(opcode, memory, pc)

# @intent:responsibility デコードされたY86-64命令を実行します。
def execute_instruction(operation: Operation, state: CpuState) -> None:
    executor = EXECUTE_MAP.get(operation.icode)
    if executor is None:
        raise InstructionError(f"Unknown instruction: {operation.opcode_hex}")
    executor(state, operation)
