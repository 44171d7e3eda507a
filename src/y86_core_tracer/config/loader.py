import yaml
from typing import Dict, Any
from .models import SimulatorConfig

class ConfigLoader:
    def load_from_file(self, path: str) -> SimulatorConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        return self._parse_config(data)

    def load_from_string(self, text: str) -> SimulatorConfig:
        return self._parse_config(yaml.safe_load(text))

    # @intent:responsibility YAMLの内容を設定値に変換します。欠けているキーは既定値を使います。
    def _parse_config(self, data: Dict[str, Any]) -> SimulatorConfig:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")

        defaults = SimulatorConfig()
        config = SimulatorConfig(
            memory_size=self._parse_int(data.get("memory_size", defaults.memory_size)),
            max_steps=self._parse_int(data.get("max_steps", defaults.max_steps)),
            tick_interval_ms=self._parse_int(data.get("tick_interval_ms", defaults.tick_interval_ms)),
        )
        for name in ("memory_size", "max_steps", "tick_interval_ms"):
            if getattr(config, name) <= 0:
                raise ValueError(f"{name} must be a positive integer: {getattr(config, name)}")
        return config

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            if value.lower().startswith("0x"):
                return int(value, 16)
            return int(value)
        raise ValueError(f"Invalid integer format: {value}")
