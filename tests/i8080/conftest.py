import pytest

from i8080_tracer.transport.bus import Bus, RAM
from i8080_tracer.i8080.cpu import I8080Cpu


@pytest.fixture
def machine():
    """64KB RAMを接続した8080マシン (cpu, bus) を返します。"""
    bus = Bus()
    bus.register_device(0x0000, 0xFFFF, RAM(0x10000))
    cpu = I8080Cpu(bus)
    return cpu, bus


@pytest.fixture
def load_program():
    """バイト列を指定アドレスに書き込み、PCをその先頭に設定するヘルパーを返します。"""
    def _load(cpu, bus, program, address=0x0000):
        for i, byte in enumerate(program):
            bus.load(address + i, byte)
        cpu.get_state().pc = address
    return _load
