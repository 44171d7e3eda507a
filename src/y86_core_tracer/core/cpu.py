# y86_core_tracer/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

from y86_core_tracer.core.snapshot import Operation
from y86_core_tracer.core.state import CpuState
from y86_core_tracer.common.types import RegisterLayoutInfo

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    CPUエミュレーションの基底となる抽象クラス。
    状態は所有者（トレースビルダー）から渡され、CPU自身はグローバルな状態を持ちません。
    """
    # @intent:pre-condition `state`は有効なCpuStateであり、メモリを含んでいる必要があります。
    def __init__(self, state: CpuState):
        self._state = state

    # @intent:responsibility 現在のCPUの状態を返します。
    def get_state(self) -> CpuState:
        return self._state

    # @intent:responsibility 状態を丸ごと差し替えます。
    def restore_state(self, state: CpuState) -> None:
        self._state = state

    @abstractmethod
    def _fetch(self) -> int:
        """
        現在のPCから命令バイトをフェッチして返します。PCは変更しません。
        """
        pass

    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        """
        与えられたオペコードとそれに続くバイト列を解析し、Operationとして返します。
        """
        pass

    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        """
        デコードされた命令を実行し、レジスタ・フラグ・メモリ・PCを更新します。
        """
        pass

    # @intent:responsibility CPUを1命令進め、実行したOperationを返します。
    # @intent:rationale Template Methodパターン（フェッチ→デコード→実行）。PCの更新は実行の最後に命令側が行うため、
    #                  途中で例外が発生した場合にPCは進みません。
    def step(self) -> Operation:
        """
        1命令を実行します。失敗時はSimulatorErrorを送出し、その時点までの部分的な変更は残ります。
        """
        opcode = self._fetch()
        operation = self._decode(opcode)
        self._execute(operation)
        return operation

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        """
        レジスタをUI上でどのように配置・グループ化すべきかの定義を返す。
        """
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        """
        指定されたメモリ範囲を逆アセンブルし、(address, hex_bytes, mnemonic) のタプルリストを返す。
        """
        pass
