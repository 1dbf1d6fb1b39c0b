from typing import Tuple
import logging

from i8080_tracer.transport.bus import Bus, RAM, ROM, MAX_ADDRESS_SPACE
from i8080_tracer.core.errors import ConfigError
from i8080_tracer.i8080.cpu import I8080Cpu
from i8080_tracer.loader.loader import BinaryLoader, IntelHexLoader
from .models import SystemConfig, CpuInitialState, MemoryRegion

logger = logging.getLogger(__name__)

SUPPORTED_ARCHITECTURES = ("8080", "I8080", "INTEL8080")

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig) -> Tuple[I8080Cpu, Bus]:
        if config.architecture.upper() not in SUPPORTED_ARCHITECTURES:
            raise ConfigError(f"Unsupported architecture: {config.architecture}")
        if not config.memory_map:
            raise ConfigError("Memory map must define at least one region.")

        bus = Bus()
        for region in config.memory_map:
            if not 0 <= region.start <= region.end:
                raise ConfigError(f"Invalid memory region {region.start:#06x}-{region.end:#06x}")
            if region.end >= MAX_ADDRESS_SPACE:
                raise ConfigError(
                    f"Memory region {region.start:#06x}-{region.end:#06x} exceeds the 64 KiB address space"
                )

            bus.register_device(region.start, region.end, self._create_device(region))

        cpu = I8080Cpu(bus)

        # 初期状態の適用
        self.apply_initial_state(cpu, config.initial_state)

        if config.program:
            self.load_program(bus, config)

        if config.symbols:
            cpu.set_symbol_map(dict(config.symbols))

        return cpu, bus

    # @intent:responsibility 領域の種別と権限からデバイスを生成します。RO権限の領域は種別に関わらずROMになります。
    def _create_device(self, region: MemoryRegion) -> RAM:
        if region.permissions not in ("RW", "RO"):
            raise ConfigError(
                f"Invalid permissions '{region.permissions}' for range {region.start:04X}-{region.end:04X}"
            )

        if region.type not in ("RAM", "ROM"):
            logger.warning(
                "Unknown device type '%s' for range %04X-%04X, defaulting to RAM",
                region.type, region.start, region.end,
            )
        if region.type == "ROM" or region.permissions == "RO":
            return ROM(region.size)
        return RAM(region.size)

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: I8080Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定された初期値を適用します。
        """
        cpu.reset()
        size = cpu.get_bus().get_size()

        state = cpu.get_state()
        state.pc = config_state.pc % size
        state.sp = config_state.sp % size
        state.inte = config_state.interrupts_enabled
        for reg_name, value in config_state.registers.items():
            if reg_name in ("psw", "bc", "de", "hl"):
                setattr(state, reg_name, value & 0xFFFF)
            elif reg_name in ("a", "b", "c", "d", "e", "h", "l", "f"):
                setattr(state, reg_name, value & 0xFF)
            else:
                raise ConfigError(f"Unknown register in initial state: {reg_name}")

    def load_program(self, bus: Bus, config: SystemConfig) -> int:
        program = config.program
        if program.format == "ihex":
            loaded = IntelHexLoader().load_intel_hex(program.path, bus)
        else:
            loaded = BinaryLoader().load_binary(program.path, bus, program.start_address)
        logger.info("Loaded %d bytes from %s", loaded, program.path)
        return loaded
