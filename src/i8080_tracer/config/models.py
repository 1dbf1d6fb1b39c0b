from dataclasses import dataclass, field
from typing import Dict, List, Optional

@dataclass
class MemoryRegion:
    start: int
    end: int
    type: str  # "RAM", "ROM"
    label: str = ""
    permissions: str = "RW"  # "RW", "RO"

    @property
    def size(self) -> int:
        return self.end - self.start + 1

@dataclass
class CpuInitialState:
    pc: int = 0x0000
    sp: int = 0x0000
    interrupts_enabled: bool = False
    registers: Dict[str, int] = field(default_factory=dict)

@dataclass
class ProgramConfig:
    path: str
    format: str = "binary"  # "binary", "ihex"
    start_address: int = 0x0000

@dataclass
class RunConfig:
    max_steps: Optional[int] = None

@dataclass
class SystemConfig:
    architecture: str
    memory_map: List[MemoryRegion] = field(default_factory=list)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
    program: Optional[ProgramConfig] = None
    run: RunConfig = field(default_factory=RunConfig)
    symbols: Dict[str, int] = field(default_factory=dict)
