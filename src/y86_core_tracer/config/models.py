from dataclasses import dataclass

from y86_core_tracer.core.trace import MAX_SIMULATION_STEPS
from y86_core_tracer.debugger.runner import DEFAULT_TICK_INTERVAL_MS
from y86_core_tracer.transport.memory import DEFAULT_MEMORY_SIZE

@dataclass
class SimulatorConfig:
    memory_size: int = DEFAULT_MEMORY_SIZE
    max_steps: int = MAX_SIMULATION_STEPS
    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS  # 連続実行のティック間隔 (ms)
