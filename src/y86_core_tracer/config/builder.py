from typing import Optional, Tuple

from y86_core_tracer.debugger.debugger import Debugger
from y86_core_tracer.debugger.runner import RunClock
from .models import SimulatorConfig

# @intent:responsibility 設定（Config）に基づいて、Debuggerと連続実行用のRunClockを生成・接続します。
class SystemBuilder:
    def build_debugger(self, config: Optional[SimulatorConfig] = None) -> Debugger:
        config = config or SimulatorConfig()
        return Debugger(memory_size=config.memory_size, max_steps=config.max_steps)

    # @intent:pre-condition RunClockのタイマーを動かすには、呼び出し側でQtアプリケーションが生成済みである必要があります。
    def build_system(self, config: Optional[SimulatorConfig] = None) -> Tuple[Debugger, RunClock]:
        config = config or SimulatorConfig()
        debugger = self.build_debugger(config)
        return debugger, RunClock(debugger, interval_ms=config.tick_interval_ms)
