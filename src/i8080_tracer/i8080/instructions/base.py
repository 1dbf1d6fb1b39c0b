"""
8080命令セット実装のための共通ヘルパー関数と定数。

レジスタ/レジスタペアの列挙、Mレジスタ（HLが指すメモリ）の解決、
スタック操作、および命令記述子（InstructionDescriptor）を提供します。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from i8080_tracer.core.errors import OutOfBoundsAddress
from i8080_tracer.core.snapshot import Operation
from i8080_tracer.i8080.state import I8080CpuState
from i8080_tracer.transport.bus import Bus


# @intent:data_structure 8bitレジスタの閉じた列挙。値は命令エンコーディング上の3bitフィールド値です。
class Register(Enum):
    B = 0b000
    C = 0b001
    D = 0b010
    E = 0b011
    H = 0b100
    L = 0b101
    M = 0b110  # HLが指すメモリ (物理レジスタではない)
    A = 0b111


# @intent:data_structure レジスタペアの閉じた列挙。値はニーモニック上の表記です。
class RegisterPair(Enum):
    BC = "B"
    DE = "D"
    HL = "H"
    SP = "SP"
    PSW = "PSW"


_REGISTER_ATTRS = {
    Register.B: "b", Register.C: "c", Register.D: "d", Register.E: "e",
    Register.H: "h", Register.L: "l", Register.A: "a",
}

_PAIR_ATTRS = {
    RegisterPair.BC: "bc", RegisterPair.DE: "de", RegisterPair.HL: "hl",
    RegisterPair.SP: "sp", RegisterPair.PSW: "psw",
}

# 16bit演算 (LXI/INX/DCX/DAD) で使用される rp フィールド
_RP_CODES = {0b00: RegisterPair.BC, 0b01: RegisterPair.DE, 0b10: RegisterPair.HL, 0b11: RegisterPair.SP}
# PUSH/POP で使用される rp フィールド
_PUSH_POP_CODES = {0b00: RegisterPair.BC, 0b01: RegisterPair.DE, 0b10: RegisterPair.HL, 0b11: RegisterPair.PSW}

# 条件コード (Jcc/Ccc/Rcc の3bitフィールド)
CONDITION_NAMES = ["NZ", "Z", "NC", "C", "PO", "PE", "P", "M"]


# @intent:utility_function オペコードのビットフィールドからレジスタを取得します。
def register_from_code(code: int) -> Register:
    return Register(code & 0b111)


def rp_from_code(code: int) -> RegisterPair:
    return _RP_CODES[code & 0b11]


def push_pop_pair_from_code(code: int) -> RegisterPair:
    return _PUSH_POP_CODES[code & 0b11]


# @intent:utility_function レジスタ（またはM）の現在の値を取得します。Mは毎回HLを参照して解決します。
def get_register_value(state: I8080CpuState, bus: Bus, reg: Register) -> int:
    if reg is Register.M:
        return bus.read(state.hl)
    attr = _REGISTER_ATTRS.get(reg)
    if attr is None:
        raise ValueError(f"Unknown register: {reg!r}")
    return getattr(state, attr)


# @intent:utility_function レジスタ（またはM）に値を設定します。
def set_register_value(state: I8080CpuState, bus: Bus, reg: Register, value: int) -> None:
    if reg is Register.M:
        bus.write(state.hl, value & 0xFF)
        return
    attr = _REGISTER_ATTRS.get(reg)
    if attr is None:
        raise ValueError(f"Unknown register: {reg!r}")
    setattr(state, attr, value & 0xFF)


# @intent:utility_function レジスタペアの16bit値を取得します。
def get_pair_value(state: I8080CpuState, pair: RegisterPair) -> int:
    attr = _PAIR_ATTRS.get(pair)
    if attr is None:
        raise ValueError(f"Unknown register pair: {pair!r}")
    return getattr(state, attr)


def set_pair_value(state: I8080CpuState, pair: RegisterPair, value: int) -> None:
    attr = _PAIR_ATTRS.get(pair)
    if attr is None:
        raise ValueError(f"Unknown register pair: {pair!r}")
    setattr(state, attr, value & 0xFFFF)


# @intent:utility_function アドレスをメモリサイズで回り込ませます。PC/SPの演算は全てこれを通します。
def wrap_address(bus: Bus, address: int) -> int:
    return address % bus.get_size()


# @intent:utility_function 分岐先アドレスがメモリ領域内にあることを確認します。
# @intent:post-condition 範囲外であればOutOfBoundsAddressを発生させます。
def check_address(bus: Bus, address: int) -> int:
    if not bus.is_mapped(address):
        raise OutOfBoundsAddress(address, "jump target outside memory")
    return address


# @intent:utility_function リトルエンディアンの16bit値を読み出します。
def read_word(bus: Bus, address: int) -> int:
    low = bus.read(address)
    high = bus.read(wrap_address(bus, address + 1))
    return (high << 8) | low


def write_word(bus: Bus, address: int, value: int) -> None:
    bus.write(address, value & 0xFF)
    bus.write(wrap_address(bus, address + 1), (value >> 8) & 0xFF)


# @intent:responsibility 16bit値をスタックに積みます。
# @intent:rationale スタックのバイト順はこの関数とpop_wordで一元管理する。
#                  上位バイトをSP-1、下位バイトをSP-2に置き、SPは2減る（メモリ上はリトルエンディアン）。
def push_word(state: I8080CpuState, bus: Bus, value: int) -> None:
    bus.write(wrap_address(bus, state.sp - 1), (value >> 8) & 0xFF)
    bus.write(wrap_address(bus, state.sp - 2), value & 0xFF)
    state.sp = wrap_address(bus, state.sp - 2)


# @intent:utility_function スタック先頭の16bit値を読みます。SPは変更しません。
def stack_top(state: I8080CpuState, bus: Bus) -> int:
    return read_word(bus, wrap_address(bus, state.sp))


# @intent:responsibility スタックから16bit値を取り出します。push_wordと対称です。
def pop_word(state: I8080CpuState, bus: Bus) -> int:
    value = stack_top(state, bus)
    state.sp = wrap_address(bus, state.sp + 2)
    return value


# @intent:utility_function 条件コード (0-7) をフラグに照らして評価します。
def condition_met(state: I8080CpuState, code: int) -> bool:
    code &= 0b111
    if code == 0b000:
        return not state.flag_z
    if code == 0b001:
        return state.flag_z
    if code == 0b010:
        return not state.flag_cy
    if code == 0b011:
        return state.flag_cy
    if code == 0b100:
        return not state.flag_p  # PO
    if code == 0b101:
        return state.flag_p      # PE
    if code == 0b110:
        return not state.flag_s  # P
    return state.flag_s          # M


ExecuteFn = Callable[[I8080CpuState, Bus, Operation], None]


# @intent:data_structure オペコード1つ分の命令記述子。デコード/ディスパッチ表の要素です。
# @intent:rationale PCの更新責務（命令長による一律の前進か、ルーチン自身による設定か）を
#                  命令ごとの明示的な属性 manages_pc として保持します。
@dataclass(frozen=True)
class InstructionDescriptor:
    mnemonic: str
    length: int
    execute: Optional[ExecuteFn]
    manages_pc: bool = False
    operand_format: str = ""  # "", "d8", "d16", "a16"

    @property
    def implemented(self) -> bool:
        return self.execute is not None
