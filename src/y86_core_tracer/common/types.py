"""
共通の型定義を提供するモジュール。
Y86-64の命令コード、レジスタ番号、ステータスコードなど、
プロジェクト全体で使用される列挙型を定義します。
"""
from enum import Enum, IntEnum
from typing import Dict, List, NamedTuple

# @intent:constant 64ビット演算で使用するマスクと符号ビット。
WORD_MASK = 0xFFFFFFFFFFFFFFFF
SIGN_BIT = 1 << 63

# @intent:responsibility マシンの実行ステータスを表します。AOKの間だけ実行を継続できます。
class StatusCode(IntEnum):
    AOK = 1  # 正常実行中
    HLT = 2  # halt命令による停止
    ADR = 3  # 不正アドレス
    INS = 4  # 不正命令

# @intent:responsibility 命令バイト上位4ビット(icode)の定義。
class InstructionCode(IntEnum):
    HALT = 0x0
    NOP = 0x1
    RRMOVQ = 0x2  # cmovXX を含む
    IRMOVQ = 0x3
    RMMOVQ = 0x4
    MRMOVQ = 0x5
    OPQ = 0x6
    JXX = 0x7
    CALL = 0x8
    RET = 0x9
    PUSHQ = 0xA
    POPQ = 0xB

# @intent:responsibility OPq命令の機能コード(ifun)。
class AluOp(IntEnum):
    ADD = 0x0
    SUB = 0x1
    AND = 0x2
    XOR = 0x3

# @intent:responsibility cmovXX / jXX 命令の条件コード(ifun)。
class ConditionCode(IntEnum):
    YES = 0x0
    LE = 0x1
    L = 0x2
    E = 0x3
    NE = 0x4
    GE = 0x5
    G = 0x6

# @intent:responsibility レジスタ番号。0xFは「レジスタなし」を表す番兵であり、記憶領域は持ちません。
class Register(IntEnum):
    RAX = 0x0
    RCX = 0x1
    RDX = 0x2
    RBX = 0x3
    RSP = 0x4
    RBP = 0x5
    RSI = 0x6
    RDI = 0x7
    R8 = 0x8
    R9 = 0x9
    R10 = 0xA
    R11 = 0xB
    R12 = 0xC
    R13 = 0xD
    R14 = 0xE
    RNONE = 0xF

    @property
    def reg_name(self) -> str:
        return self.name.lower()

# @intent:data_structure 記憶領域を持つ15本のレジスタ（番号順）。
GENERAL_REGISTERS: List[Register] = [r for r in Register if r != Register.RNONE]

# @intent:data_structure レジスタ名（"rax"など）からRegisterへの逆引き表。
REGISTER_BY_NAME: Dict[str, Register] = {r.reg_name: r for r in GENERAL_REGISTERS}

# @intent:responsibility セッションログの重要度。外部UIはこれをトースト等の種類に対応付けます。
class LogLevel(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"

# @intent:data_structure 単一のレジスタの表示定義。UIが動的にフィールドを生成するために使用される。
class RegisterInfo(NamedTuple):
    name: str
    width: int  # ビット幅

# @intent:data_structure レジスタグループの表示定義。関連するレジスタをまとめる。
class RegisterLayoutInfo(NamedTuple):
    group_name: str
    registers: List[RegisterInfo]


def to_signed64(value: int) -> int:
    """任意の整数を64ビットで切り詰め、2の補数の符号付き値として返します。"""
    value &= WORD_MASK
    return value - (1 << 64) if value & SIGN_BIT else value


def to_unsigned64(value: int) -> int:
    return value & WORD_MASK
