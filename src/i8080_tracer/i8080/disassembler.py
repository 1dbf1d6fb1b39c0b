"""
8080逆アセンブラモジュール。

メモリ上のバイナリデータを解析し、8080アセンブリ言語のニーモニック形式に変換します。
命令長は実行エンジンと同じ命令記述子表から取得するため、両者が食い違うことはありません。
CPUの状態は一切参照・変更しません。
"""
from typing import List, Tuple

from i8080_tracer.core.errors import OutOfBoundsAddress
from i8080_tracer.transport.bus import Bus
from i8080_tracer.i8080.instructions import decode_opcode


# @intent:responsibility 指定アドレスの1命令を逆アセンブルし、(ニーモニック文字列, 命令長) を返します。
def disassemble_instruction(bus: Bus, offset: int) -> Tuple[str, int]:
    opcode = bus.peek(offset)
    operation = decode_opcode(opcode, bus, offset, peek=True)
    return operation.text(), operation.length


# @intent:responsibility 指定されたメモリ範囲のバイナリデータを解析し、アドレスとニーモニックのリストを返します。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    メモリ上のデータを読み取り、(アドレス, 16進ダンプ, ニーモニック) のタプルのリストを返します。
    """
    result = []
    current_addr = start_addr
    end_addr = start_addr + length
    memory_size = bus.get_size()

    while current_addr < end_addr and current_addr < memory_size:
        try:
            # ログを汚さないためにpeekを使用
            opcode = bus.peek(current_addr)
            operation = decode_opcode(opcode, bus, current_addr, peek=True)
        except OutOfBoundsAddress:
            # マップされていない領域
            result.append((current_addr, "??", "ERR"))
            current_addr += 1
            continue

        hex_dump = " ".join(f"{b:02X}" for b in [opcode] + operation.operand_bytes)
        result.append((current_addr, hex_dump, operation.text()))
        current_addr += operation.length

    return result
