# y86_core_tracer/core/errors.py
"""
シミュレータの例外定義。

命令実行中の失敗はステータスコード（ADR/INS）を伴う例外として送出され、
トレースビルダーがそれを捕捉してトレース上の終端ステータスに変換します。
"""
from y86_core_tracer.common.types import StatusCode

# @intent:responsibility ステータスコードを伴う全てのシミュレータ例外の基底クラス。
class SimulatorError(Exception):
    status: StatusCode = StatusCode.INS

    def __init__(self, message: str, status: StatusCode = None):
        super().__init__(message)
        if status is not None:
            self.status = status

# @intent:responsibility メモリ範囲外へのアクセス（フェッチ、オペランド、データ）を表します。
class AddressError(SimulatorError):
    status = StatusCode.ADR

# @intent:responsibility 未定義の命令コード・機能コード、または不正なレジスタ指定を表します。
class InstructionError(SimulatorError):
    status = StatusCode.INS

# @intent:responsibility オブジェクトコードのロード失敗を表します。部分的なイメージは残りません。
class LoadError(SimulatorError):
    status = StatusCode.ADR
