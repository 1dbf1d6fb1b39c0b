import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union

from i8080_tracer.core.errors import ConfigError
from .models import SystemConfig, MemoryRegion, CpuInitialState, ProgramConfig, RunConfig

class ConfigLoader:
    def load_from_file(self, path: Union[str, Path]) -> SystemConfig:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        config = self._parse_config(data)
        # プログラムの相対パスは設定ファイルの場所を基準に解決する
        if config.program and not Path(config.program.path).is_absolute():
            config.program.path = str(Path(path).parent / config.program.path)
        return config

    def load_from_string(self, text: str) -> SystemConfig:
        return self._parse_config(yaml.safe_load(text))

    def _parse_config(self, data: Any) -> SystemConfig:
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping.")

        # YAMLでは 8080 が整数として読まれるため文字列に揃える
        arch = str(data.get("architecture", "8080"))

        # Parse Memory Map
        memory_map = []
        for region_data in data.get("memory_map", []):
            memory_map.append(MemoryRegion(
                start=self._parse_int(region_data.get("start")),
                end=self._parse_int(region_data.get("end")),
                type=str(region_data.get("type", "RAM")).upper(),
                label=region_data.get("label", ""),
                permissions=str(region_data.get("permissions", "RW")).upper(),
            ))

        # Parse Initial State
        initial_state_data = data.get("initial_state") or {}
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", 0)),
            sp=self._parse_int(initial_state_data.get("sp", 0)),
            interrupts_enabled=bool(initial_state_data.get("interrupts_enabled", False)),
            registers={
                str(name).lower(): self._parse_int(value)
                for name, value in (initial_state_data.get("registers") or {}).items()
            },
        )

        return SystemConfig(
            architecture=arch,
            memory_map=memory_map,
            initial_state=initial_state,
            program=self._parse_program(data.get("program")),
            run=RunConfig(max_steps=self._parse_optional_int((data.get("run") or {}).get("max_steps"))),
            symbols={
                str(name): self._parse_int(addr)
                for name, addr in (data.get("symbols") or {}).items()
            },
        )

    def _parse_program(self, program_data: Optional[Dict[str, Any]]) -> Optional[ProgramConfig]:
        if not program_data:
            return None
        if "path" not in program_data:
            raise ConfigError("Program section requires a 'path'.")
        fmt = str(program_data.get("format", "binary")).lower()
        if fmt not in ("binary", "ihex"):
            raise ConfigError(f"Unsupported program format: {fmt}")
        return ProgramConfig(
            path=str(program_data["path"]),
            format=fmt,
            start_address=self._parse_int(program_data.get("start_address", 0)),
        )

    def _parse_optional_int(self, value: Any) -> Optional[int]:
        if value is None:
            return None
        return self._parse_int(value)

    # @intent:utility_function 整数値、または "0x" 接頭辞付きの16進文字列を数値に変換します。
    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                if value.lower().startswith("0x"):
                    return int(value, 16)
                return int(value)
            except ValueError as e:
                raise ConfigError(f"Invalid integer format: {value}") from e
        raise ConfigError(f"Invalid integer format: {value}")
