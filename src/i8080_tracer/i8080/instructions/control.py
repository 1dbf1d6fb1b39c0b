"""
8080 制御命令（分岐、サブルーチン呼び出し、リスタート、割り込み許可、HLT）の実装。

分岐系の命令は全て manages_pc=True として登録され、フォールスルーの場合も含めて
自身でPCを設定します。
"""
from i8080_tracer.i8080.state import I8080CpuState
from i8080_tracer.transport.bus import Bus
from i8080_tracer.core.snapshot import Operation
from .base import (
    wrap_address, check_address, push_word, stack_top, condition_met
)


# @intent:utility_function 命令の直後のアドレス（フォールスルー先、CALLの戻り先）を返します。
def _next_address(bus: Bus, operation: Operation) -> int:
    return wrap_address(bus, operation.address + operation.length)


def execute_nop(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    # Intentional: NOP and the undocumented aliases do nothing.
    pass


# @intent:responsibility HLT: CPUを停止状態にします。PCはHLTの直後を指します。
def execute_hlt(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.halted = True
    state.pc = _next_address(bus, operation)


def execute_jmp(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.pc = check_address(bus, operation.word)


def execute_jcc(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    if condition_met(state, operation.opcode >> 3):
        state.pc = check_address(bus, operation.word)
    else:
        state.pc = _next_address(bus, operation)


# @intent:responsibility CALL: 戻りアドレス（CALLの直後）を積んでから分岐します。
# @intent:rationale 分岐先を先に検証し、範囲外の場合はスタックを変更しないまま失敗させます。
def _call(state: I8080CpuState, bus: Bus, operation: Operation, target: int) -> None:
    check_address(bus, target)
    push_word(state, bus, _next_address(bus, operation))
    state.pc = target


def execute_call(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    _call(state, bus, operation, operation.word)


def execute_ccc(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    if condition_met(state, operation.opcode >> 3):
        _call(state, bus, operation, operation.word)
    else:
        state.pc = _next_address(bus, operation)


# @intent:rationale 戻り先を検証してからSPを進めます。範囲外の場合、SPは変更されません。
def _ret(state: I8080CpuState, bus: Bus) -> None:
    state.pc = check_address(bus, stack_top(state, bus))
    state.sp = wrap_address(bus, state.sp + 2)


def execute_ret(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    _ret(state, bus)


def execute_rcc(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    if condition_met(state, operation.opcode >> 3):
        _ret(state, bus)
    else:
        state.pc = _next_address(bus, operation)


# @intent:responsibility RST n: n*8番地への1バイトCALLです。
def execute_rst(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    n = (operation.opcode >> 3) & 0b111
    _call(state, bus, operation, n * 8)


def execute_pchl(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.pc = check_address(bus, state.hl)


def execute_ei(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.inte = True


def execute_di(state: I8080CpuState, bus: Bus, operation: Operation) -> None:
    state.inte = False
