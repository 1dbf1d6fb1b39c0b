"""
8080 算術論理演算 (ALU) 命令の実装。
"""
from i8080_tracer.i8080.state import I8080CpuState
from i8080_tracer.transport.bus import Bus
from i8080_tracer.core.snapshot import Operation
from i8080_tracer.i8080.alu import (
    add8, sub8, logic8, inc8, dec8, add16, rlc, rrc, ral, rar
)
from .base import (
    register_from_code, rp_from_code, get_register_value, set_register_value,
    get_pair_value, set_pair_value, wrap_address, RegisterPair
)

# 10xxxsss のxxxフィールド: ADD, ADC, SUB, SBB, ANA, XRA, ORA, CMP
# 11xxx110 (即値版) も同じ並び: ADI, ACI, SUI, SBI, ANI, XRI, ORI, CPI
ALU_OPS = ["ADD", "ADC", "SUB", "SBB", "ANA", "XRA", "ORA", "CMP"]
ALU_IMMEDIATE_OPS = ["ADI", "ACI", "SUI", "SBI", "ANI", "XRI", "ORI", "CPI"]


# @intent:responsibility アキュムレータとオペランドの演算を行い、結果とフラグを反映します。
# @intent:rationale レジスタ版と即値版で演算の種類（bit5-3）の並びが同じため、共通化しています。
def _alu_apply(state: I8080CpuState, op_type: int, val: int) -> None:
    if op_type == 0b000: # ADD
        result, flags = add8(state.a, val)
    elif op_type == 0b001: # ADC
        result, flags = add8(state.a, val, carry_in=int(state.flag_cy))
    elif op_type == 0b010: # SUB
        result, flags = sub8(state.a, val)
    elif op_type == 0b011: # SBB
        result, flags = sub8(state.a, val, borrow_in=int(state.flag_cy))
    elif op_type == 0b100: # ANA
        result = state.a & val
        flags = logic8(result)
    elif op_type == 0b101: # XRA
        result = state.a ^ val
        flags = logic8(result)
    elif op_type == 0b110: # ORA
        result = state.a | val
        flags = logic8(result)
    else: # CMP: 減算のフラグのみ、Aは変更しない
        _, flags = sub8(state.a, val)
        state.apply_flags(flags)
        return
    state.apply_flags(flags)
    state.a = result


def execute_alu_r(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    opcode = operation.opcode
    val = get_register_value(state, bus, register_from_code(opcode))
    _alu_apply(state, (opcode >> 3) & 0b111, val)


def execute_alu_immediate(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    _alu_apply(state, (operation.opcode >> 3) & 0b111, operation.byte)


# @intent:responsibility INR r / INR M を実行します。CYは変化しません。
def execute_inr(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    reg = register_from_code(operation.opcode >> 3)
    result, flags = inc8(get_register_value(state, bus, reg))
    set_register_value(state, bus, reg, result)
    state.apply_flags(flags)


# @intent:responsibility DCR r / DCR M を実行します。CYは変化しません。
def execute_dcr(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    reg = register_from_code(operation.opcode >> 3)
    result, flags = dec8(get_register_value(state, bus, reg))
    set_register_value(state, bus, reg, result)
    state.apply_flags(flags)


# @intent:responsibility INX rp を実行します。フラグは変化しません。
def execute_inx(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    pair = rp_from_code(operation.opcode >> 4)
    if pair is RegisterPair.SP:
        state.sp = wrap_address(bus, state.sp + 1)
    else:
        set_pair_value(state, pair, get_pair_value(state, pair) + 1)


# @intent:responsibility DCX rp を実行します。フラグは変化しません。
def execute_dcx(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    pair = rp_from_code(operation.opcode >> 4)
    if pair is RegisterPair.SP:
        state.sp = wrap_address(bus, state.sp - 1)
    else:
        set_pair_value(state, pair, get_pair_value(state, pair) - 1)


# @intent:responsibility DAD rp を実行します。CYのみ更新します。
def execute_dad(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    pair = rp_from_code(operation.opcode >> 4)
    result, carry = add16(state.hl, get_pair_value(state, pair))
    state.hl = result
    state.flag_cy = carry


def execute_rlc(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.a, state.flag_cy = rlc(state.a)


def execute_rrc(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.a, state.flag_cy = rrc(state.a)


def execute_ral(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.a, state.flag_cy = ral(state.a, state.flag_cy)


def execute_rar(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.a, state.flag_cy = rar(state.a, state.flag_cy)


# CMA: フラグは変化しない
def execute_cma(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.a = (~state.a) & 0xFF


def execute_stc(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.flag_cy = True


def execute_cmc(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.flag_cy = not state.flag_cy
