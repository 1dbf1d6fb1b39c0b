"""
8080 データ転送命令およびスタック命令の実装。
"""
from i8080_tracer.i8080.state import I8080CpuState
from i8080_tracer.transport.bus import Bus
from i8080_tracer.core.snapshot import Operation
from .base import (
    register_from_code, rp_from_code, push_pop_pair_from_code,
    get_register_value, set_register_value, get_pair_value, set_pair_value,
    read_word, write_word, push_word, pop_word, wrap_address, RegisterPair
)


# @intent:responsibility MOV r1,r2 を実行します。どちらか一方がMの場合はメモリを経由します。
def execute_mov(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    dest = register_from_code(opcode >> 3)
    src = register_from_code(opcode)
    set_register_value(state, bus, dest, get_register_value(state, bus, src))


def execute_mvi(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    dest = register_from_code(operation.opcode >> 3)
    set_register_value(state, bus, dest, operation.byte)


# @intent:responsibility LXI rp,d16 を実行します。SPの場合もメモリサイズで回り込ませます。
def execute_lxi(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    pair = rp_from_code(operation.opcode >> 4)
    if pair is RegisterPair.SP:
        state.sp = wrap_address(bus, operation.word)
    else:
        set_pair_value(state, pair, operation.word)


def execute_lda(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.a = bus.read(operation.word)


def execute_sta(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    bus.write(operation.word, state.a)


def execute_lhld(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.hl = read_word(bus, operation.word)


def execute_shld(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    write_word(bus, operation.word, state.hl)


# LDAX/STAX は BC と DE のみ (rp = 00, 01)
def execute_ldax(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    pair = rp_from_code(operation.opcode >> 4)
    state.a = bus.read(get_pair_value(state, pair))


def execute_stax(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    pair = rp_from_code(operation.opcode >> 4)
    bus.write(get_pair_value(state, pair), state.a)


def execute_xchg(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.hl, state.de = state.de, state.hl


# @intent:responsibility XTHL: スタックトップの16bit値とHLを交換します。SPは変化しません。
def execute_xthl(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    top = read_word(bus, state.sp)
    write_word(bus, state.sp, state.hl)
    state.hl = top


def execute_sphl(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.sp = wrap_address(bus, state.hl)


# @intent:responsibility PUSH rp / PUSH PSW を実行します。
def execute_push(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    pair = push_pop_pair_from_code(operation.opcode >> 4)
    push_word(state, bus, get_pair_value(state, pair))


# @intent:responsibility POP rp / POP PSW を実行します。PSWの場合はフラグバイトが復元されます。
def execute_pop(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    pair = push_pop_pair_from_code(operation.opcode >> 4)
    set_pair_value(state, pair, pop_word(state, bus))
