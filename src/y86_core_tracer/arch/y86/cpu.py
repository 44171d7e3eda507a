# src/y86_core_tracer/arch/y86/cpu.py
"""
Y86-64 CPUエミュレーションの中心モジュール。
"""
from typing import Dict, List, Tuple

from y86_core_tracer.common.types import GENERAL_REGISTERS, RegisterInfo, RegisterLayoutInfo
from y86_core_tracer.core.cpu import AbstractCpu
from y86_core_tracer.core.snapshot import Operation
from y86_core_tracer.core.state import CpuState
from y86_core_tracer.arch.y86.instructions import decode_opcode, execute_instruction
from y86_core_tracer.arch.y86.instructions.base import check_address
from y86_core_tracer.arch.y86 import disassembler

# @intent:responsibility Y86-64 CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行）を提供します。
class Y86Cpu(AbstractCpu):
    """
    Y86-64 CPUをエミュレートするクラス。
    """
    def __init__(self, state: CpuState):
        super().__init__(state)

    # @intent:responsibility PCの位置から命令バイトをフェッチします。PCが範囲外ならADRです。
    def _fetch(self) -> int:
        pc = check_address(self._state.pc, self._state.memory, "PC")
        return self._state.memory.read(pc)

    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode, self._state.memory, self._state.pc)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state)

    def get_register_map(self) -> Dict[str, int]:
        return self._state.registers.as_dict()

    # @intent:responsibility UIのレジスタ表示レイアウト（グループ化）を定義します。
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        names = [r.reg_name for r in GENERAL_REGISTERS]
        return [
            RegisterLayoutInfo("General", [RegisterInfo(n, 64) for n in names[:8]]),
            RegisterLayoutInfo("Extended", [RegisterInfo(n, 64) for n in names[8:]]),
        ]

    def get_flag_state(self) -> Dict[str, bool]:
        return self._state.flags.as_dict()

    # @intent:responsibility 指定範囲のメモリを逆アセンブルします。
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return disassembler.disassemble(self._state.memory, start_addr, length)
