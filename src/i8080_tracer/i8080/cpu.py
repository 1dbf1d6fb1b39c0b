# i8080_tracer/i8080/cpu.py
"""
8080 CPUエミュレーションの中心モジュール。

このモジュールは8080 CPUの具体的な実装を提供し、
AbstractCpuインターフェースを実装します。
"""
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from i8080_tracer.core.cpu import AbstractCpu
from i8080_tracer.core.snapshot import Operation, Metadata, Snapshot
from i8080_tracer.i8080.state import I8080CpuState
from i8080_tracer.i8080.instructions import decode_opcode, execute_instruction
from i8080_tracer.i8080 import disassembler
from i8080_tracer.transport.bus import Bus


# @intent:responsibility 8080 CPUの具体的なエミュレーションロジックを提供します。
class I8080Cpu(AbstractCpu):
    """
    Intel 8080 CPUをエミュレートするクラス。
    AbstractCpuを継承し、8080固有の動作を実装します。
    """
    # @intent:pre-condition `bus`にはメモリデバイスが登録済みである必要があります（PC/SPの回り込みの法になるため）。
    def __init__(self, bus: Bus):
        if bus.get_size() == 0:
            raise ValueError("Bus has no memory mapped; register a device before creating the CPU.")
        super().__init__(bus)

    # @intent:responsibility 8080の初期状態を生成します。レジスタとフラグは全て0です。
    def _create_initial_state(self) -> I8080CpuState:
        return I8080CpuState()

    def _fetch(self) -> int:
        return self._bus.read(self._state.pc)

    # @intent:rationale 実際のデコードロジックは`instructions`パッケージの命令記述子表に委譲します。
    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode, self._bus, self._state.pc)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._bus)

    # @intent:responsibility CPUがHALT状態の場合、何も実行せずその旨のSnapshotを返します。
    # @intent:rationale HALTは終端状態であり、メモリ読み込みもPCの変更も行いません。
    def _handle_halt(self, current_pc: int) -> Optional[Snapshot]:
        if not self._state.halted:
            return None
        operation = Operation(opcode_hex="76", mnemonic="HLT (halted)", length=0, address=current_pc, manages_pc=True)
        return Snapshot(
            state=replace(self._state),
            operation=operation,
            metadata=Metadata(step_count=self._step_count, symbol_info=f"PC: {current_pc:#06x} -> HLT (halted)"),
            bus_activity=[],
        )

    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        return {
            "A": s.a, "B": s.b, "C": s.c, "D": s.d, "E": s.e, "H": s.h, "L": s.l,
            "BC": s.bc, "DE": s.de, "HL": s.hl, "PSW": s.psw,
            "SP": s.sp, "PC": s.pc,
        }

    def get_flag_state(self) -> Dict[str, bool]:
        s = self._state
        return {
            "S": s.flag_s,
            "Z": s.flag_z,
            "AC": s.flag_ac,
            "P": s.flag_p,
            "CY": s.flag_cy,
        }

    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return disassembler.disassemble(self._bus, start_addr, length)
