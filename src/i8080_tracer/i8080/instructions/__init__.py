"""
8080命令セット実装パッケージ。
"""
from typing import List

from i8080_tracer.transport.bus import Bus
from i8080_tracer.core.errors import UnimplementedInstruction
from i8080_tracer.core.snapshot import Operation
from i8080_tracer.i8080.state import I8080CpuState
from .base import InstructionDescriptor
from .maps import INSTRUCTION_TABLE

_OPERAND_FORMATS = {
    "d8": "#${:02X}",
    "d16": "#${:04X}",
    "a16": "${:04X}",
}


# @intent:responsibility オペコードに対応する命令記述子を返します。表は256要素で全域を網羅しています。
def get_descriptor(opcode: int) -> InstructionDescriptor:
    return INSTRUCTION_TABLE[opcode & 0xFF]


# @intent:responsibility 与えられたオペコードを8080の命令としてデコードします。
# @intent:pre-condition `pc`はデコードするオペコードの先頭アドレスを指している必要があります。
def decode_opcode(opcode: int, bus: Bus, pc: int, peek: bool = False) -> Operation:
    """
    8080のオペコードをデコードし、Operationオブジェクトを返します。
    オペランドは下位バイトが先に置かれています。peek=Trueの場合、バスアクセスをログに残しません（逆アセンブラ用）。
    """
    descriptor = get_descriptor(opcode)
    read = bus.peek if peek else bus.read
    size = bus.get_size()
    operand_bytes: List[int] = [read((pc + i) % size) for i in range(1, descriptor.length)]

    operands: List[str] = []
    if descriptor.operand_format:
        value = operand_bytes[0]
        if len(operand_bytes) == 2:
            value |= operand_bytes[1] << 8
        operands.append(_OPERAND_FORMATS[descriptor.operand_format].format(value))

    mnemonic, _, inline_operands = descriptor.mnemonic.partition(" ")
    if inline_operands:
        operands = inline_operands.split(",") + operands

    return Operation(
        opcode_hex=f"{opcode:02X}",
        mnemonic=mnemonic,
        operands=operands,
        operand_bytes=operand_bytes,
        length=descriptor.length,
        address=pc,
        manages_pc=descriptor.manages_pc,
    )


# @intent:responsibility デコードされた8080命令を実行し、CPUの状態を変更します。
# @intent:post-condition 未実装の命令の場合はUnimplementedInstructionを送出し、状態は変更しません。
def execute_instruction(operation: Operation, state: I8080CpuState, bus: Bus) -> None:
    descriptor = get_descriptor(operation.opcode)
    if not descriptor.implemented:
        raise UnimplementedInstruction(operation.opcode, operation.address, operation.mnemonic)
    descriptor.execute(state, bus, operation)
