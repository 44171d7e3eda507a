# y86_core_tracer/debugger/runner.py
"""
連続実行クロック。

QTimerのタイムアウトごとにDebugger.run_tick()を1回呼び出します。
ティックはイベントループ上で直列に処理されるため、ステップの途中状態が外部に見えることはありません。
"""
import logging

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from .debugger import Debugger

logger = logging.getLogger(__name__)

# @intent:constant 連続実行時のティック間隔 (ミリ秒)。
DEFAULT_TICK_INTERVAL_MS = 100


class RunClock(QObject):
    """
    Debuggerの連続実行をQtのイベントループで駆動するクロック。
    """
    stepped = Signal(int)   # 再生後のサイクル
    finished = Signal()

    def __init__(self, debugger: Debugger, interval_ms: int = DEFAULT_TICK_INTERVAL_MS, parent=None):
        super().__init__(parent)
        self._debugger = debugger
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._on_tick)

    def is_active(self) -> bool:
        return self._timer.isActive()

    # @intent:responsibility 連続実行を開始します。進められない状態ならFalseを返し、タイマーは起動しません。
    def start(self) -> bool:
        if self._timer.isActive():
            return True
        if not self._debugger.run():
            return False
        self._timer.start()
        return True

    def pause(self) -> None:
        self._timer.stop()
        self._debugger.pause()

    @Slot()
    def _on_tick(self) -> None:
        still_running = self._debugger.run_tick()
        self.stepped.emit(self._debugger.get_cycle())
        if not still_running:
            self._timer.stop()
            logger.debug("Run finished at cycle %d", self._debugger.get_cycle())
            self.finished.emit()
