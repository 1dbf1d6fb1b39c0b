# tests/i8080/test_maps.py
"""
命令記述子表 (INSTRUCTION_TABLE) の網羅性と整合性のテスト。
"""
import pytest

from i8080_tracer.i8080.instructions import get_descriptor
from i8080_tracer.i8080.instructions.maps import INSTRUCTION_TABLE, UNDEFINED_OPCODES


def test_table_covers_all_opcodes():
    assert len(INSTRUCTION_TABLE) == 256
    assert all(d.length in (1, 2, 3) for d in INSTRUCTION_TABLE)


def test_only_daa_in_out_are_unimplemented():
    unimplemented = {op for op in range(0x100) if not INSTRUCTION_TABLE[op].implemented}
    assert unimplemented == {0x27, 0xD3, 0xDB}
    assert get_descriptor(0x27).length == 1
    assert get_descriptor(0xD3).length == 2
    assert get_descriptor(0xDB).length == 2


@pytest.mark.parametrize("opcode", UNDEFINED_OPCODES)
def test_undefined_opcodes(opcode):
    descriptor = get_descriptor(opcode)
    assert descriptor.mnemonic == "NOP"
    assert descriptor.length == 1
    assert descriptor.implemented


@pytest.mark.parametrize("opcode, mnemonic, length", [
    (0x01, "LXI B", 3),
    (0x31, "LXI SP", 3),
    (0x36, "MVI M", 2),
    (0x41, "MOV B,C", 1),
    (0x76, "HLT", 1),
    (0x86, "ADD M", 1),
    (0xBF, "CMP A", 1),
    (0xC3, "JMP", 3),
    (0xCD, "CALL", 3),
    (0xCF, "RST 1", 1),
    (0xE6, "ANI", 2),
    (0xF1, "POP PSW", 1),
    (0xF5, "PUSH PSW", 1),
    (0xFE, "CPI", 2),
])
def test_descriptor_entries(opcode, mnemonic, length):
    descriptor = get_descriptor(opcode)
    assert descriptor.mnemonic == mnemonic
    assert descriptor.length == length


def test_control_flow_manages_pc():
    managed = {op for op in range(0x100) if INSTRUCTION_TABLE[op].manages_pc}
    # JMP, CALL, RET, PCHL, HLT と 条件付き分岐8種 x 3、RST 8種
    assert len(managed) == 5 + 8 * 3 + 8
    assert 0xE9 in managed
    assert 0x00 not in managed
