# src/y86_core_tracer/arch/y86/disassembler.py
"""
Y86-64 Disassembler

メモリ上のバイナリデータを解析し、Y86-64のアセンブリ言語（ニーモニック）に変換します。
Instruction Layerのデコードロジックを再利用します。デコードは読み込みのみで、
タッチ済みワードの記録には影響しません。
"""
from typing import List, Optional, Tuple

from y86_core_tracer.core.errors import SimulatorError
from y86_core_tracer.transport.memory import Memory
from y86_core_tracer.arch.y86.instructions import decode_opcode

# @intent:responsibility 1命令分を逆アセンブルし、(hex_bytes, mnemonic, length) を返します。
# @intent:return デコードできないバイトは ".byte 0xNN" として長さ1で返します。
def disassemble_one(memory: Memory, address: int) -> Optional[Tuple[str, str, int]]:
    if not 0 <= address < memory.get_size():
        return None
    opcode = memory.read(address)
    try:
        operation = decode_opcode(opcode, memory, address)
    except SimulatorError:
        return f"{opcode:02X}", f".byte 0x{opcode:02x}", 1

    hex_bytes = " ".join(f"{b:02X}" for b in [opcode] + operation.operand_bytes)
    return hex_bytes, operation.text, operation.length

# @intent:responsibility 指定されたメモリ範囲を逆アセンブルし、表示用データを生成します。
def disassemble(memory: Memory, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    指定された範囲のメモリを逆アセンブルします。

    Returns:
        List of (address, hex_bytes, mnemonic) tuples.
    """
    result = []
    current_addr = start_addr
    end_addr = start_addr + length

    while current_addr < end_addr:
        decoded = disassemble_one(memory, current_addr)
        if decoded is None:
            break
        hex_bytes, mnemonic, size = decoded
        result.append((current_addr, hex_bytes, mnemonic))
        current_addr += size

    return result
