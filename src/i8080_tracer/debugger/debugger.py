# i8080_tracer/debugger/debugger.py
"""
デバッガ

CPUをステップ実行しながらブレークポイント条件を評価し、条件が成立した時点で実行を止めます。
実行したSnapshotを履歴として残し、メモリへの書き込みも含めて1命令ずつ巻き戻せます。
"""
from collections import deque
from dataclasses import dataclass, replace
from enum import Enum
from typing import Deque, List, Optional
import logging

from i8080_tracer.core.cpu import AbstractCpu
from i8080_tracer.core.errors import I8080Error
from i8080_tracer.core.runner import RunResult, StopReason
from i8080_tracer.core.snapshot import Snapshot
from i8080_tracer.core.state import CpuState
from i8080_tracer.transport.bus import BusAccessType

logger = logging.getLogger(__name__)


class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # 次に実行する命令のアドレス
    MEMORY_READ = "MEMORY_READ"         # 直前の命令がaddressを読んだ
    MEMORY_WRITE = "MEMORY_WRITE"       # 直前の命令がaddressに書いた
    REGISTER_VALUE = "REGISTER_VALUE"   # register_nameの値がvalueになった
    REGISTER_CHANGE = "REGISTER_CHANGE" # register_nameの値が直前の命令で変わった


_MEMORY_CONDITIONS = {
    BreakpointConditionType.MEMORY_READ: BusAccessType.READ,
    BreakpointConditionType.MEMORY_WRITE: BusAccessType.WRITE,
}


# @intent:data_structure 1つのブレークポイント。比較と重複排除のため不変にしています。
# @intent:rationale register_nameにはCPU状態の属性名を指定します（例: "a", "hl", "sp", "flag_z"）。
@dataclass(frozen=True)
class BreakpointCondition:
    condition_type: BreakpointConditionType
    value: Optional[int] = None
    address: Optional[int] = None
    register_name: Optional[str] = None
    enabled: bool = True

    # @intent:responsibility 実行済みの命令（snapshot）に対して、PC_MATCH以外の条件を評価します。
    # @intent:pre-condition beforeはsnapshotの命令を実行する直前のCPU状態です。
    def matches(self, snapshot: Snapshot, before: CpuState) -> bool:
        access_type = _MEMORY_CONDITIONS.get(self.condition_type)
        if access_type is not None:
            return any(
                a.access_type == access_type and a.address == self.address
                for a in snapshot.bus_activity
            )

        if self.condition_type == BreakpointConditionType.PC_MATCH:
            return False
        if not self.register_name or not hasattr(snapshot.state, self.register_name):
            return False

        current = getattr(snapshot.state, self.register_name)
        if self.condition_type == BreakpointConditionType.REGISTER_VALUE:
            return current == self.value
        return current != getattr(before, self.register_name)


# @intent:responsibility ブレークポイントの管理と、CPUの前進・後退の制御を行います。
class Debugger:
    # @intent:pre-condition max_historyがNoneの場合、履歴は無制限に保持されます。
    def __init__(self, cpu: AbstractCpu, max_history: Optional[int] = 10000):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running = False
        self._history: Deque[Snapshot] = deque(maxlen=max_history)
        self._last_snapshot: Optional[Snapshot] = None
        # 直前の命令を実行する前の状態 (REGISTER_CHANGE用)
        self._before: CpuState = replace(cpu.get_state())
        # 履歴を全て巻き戻した時に戻る状態とその時点のステップ数
        self._origin: CpuState = replace(cpu.get_state())
        self._origin_steps = cpu.step_count

    # --- ブレークポイント ---

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        try:
            self._breakpoints[self._breakpoints.index(old_condition)] = new_condition
        except ValueError:
            logger.debug("Breakpoint %s is not registered; nothing to update", old_condition)

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def _at_pc_breakpoint(self, pc: int) -> bool:
        return any(
            bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc
            for bp in self._breakpoints
        )

    # @intent:pre-condition beforeはsnapshotの命令を実行する直前の状態です。
    def _check_other_breakpoints(self, snapshot: Snapshot, before: CpuState) -> bool:
        return any(bp.enabled and bp.matches(snapshot, before) for bp in self._breakpoints)

    # --- 履歴 ---

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    # @intent:responsibility 1命令実行し、Snapshotを履歴に積みます。
    def step_instruction(self) -> Snapshot:
        self._before = replace(self._cpu.get_state())
        if not self._history:
            self._origin = self._before
            self._origin_steps = self._cpu.step_count
        elif len(self._history) == self._history.maxlen:
            # 最古の履歴が押し出されるので、その実行後の状態が巻き戻しの終点になる
            self._origin = self._history[0].state
            self._origin_steps = self._history[0].metadata.step_count

        snapshot = self._cpu.step()
        self._history.append(snapshot)
        self._last_snapshot = snapshot
        return snapshot

    # @intent:responsibility 最新の1命令を取り消し、CPU状態とメモリを実行前に戻します。
    # @intent:return 戻った先の直近のSnapshot。履歴を全て巻き戻した場合はNone。
    def step_back(self) -> Optional[Snapshot]:
        if not self._history:
            return None

        undone = self._history.pop()
        bus = self._cpu.get_bus()
        for access in reversed(undone.writes()):
            if access.previous_data is not None:
                bus.load(access.address, access.previous_data)

        self._last_snapshot = self._history[-1] if self._history else None
        if self._last_snapshot is None:
            self._cpu.restore_state(self._origin, self._origin_steps)
        else:
            self._cpu.restore_state(self._last_snapshot.state, self._last_snapshot.metadata.step_count)
        return self._last_snapshot

    # --- 連続実行 ---

    # @intent:responsibility HALT、ブレークポイント、max_steps、stop() のいずれかまで前進します。
    # @intent:rationale 開始地点のPC_MATCHでは止まりません。ブレークした位置からそのまま再開できます。
    def run(self, max_steps: Optional[int] = None) -> RunResult:
        self._running = True
        steps = 0
        snapshot: Optional[Snapshot] = None
        reason = StopReason.STOPPED

        while self._running:
            state = self._cpu.get_state()
            if state.halted:
                logger.info("Halted at PC: %#06x", state.pc)
                reason = StopReason.HALTED
                break
            if steps and self._at_pc_breakpoint(state.pc):
                logger.info("Breakpoint hit at PC: %#06x", state.pc)
                reason = StopReason.BREAKPOINT
                break
            if max_steps is not None and steps >= max_steps:
                reason = StopReason.STEP_LIMIT
                break

            try:
                snapshot = self.step_instruction()
            except I8080Error as e:
                self._running = False
                logger.error("Execution stopped at PC %#06x: %s", state.pc, e)
                raise
            steps += 1

            if self._check_other_breakpoints(snapshot, self._before):
                logger.info("Breakpoint hit at PC: %#06x", snapshot.state.pc)
                reason = StopReason.BREAKPOINT
                break

        self._running = False
        return RunResult(reason, steps, snapshot)

    # @intent:responsibility ブレークポイントに当たるか履歴が尽きるまで後退します。
    def run_back(self) -> None:
        self._running = True
        while self._running:
            snapshot = self.step_back()
            if snapshot is None:
                logger.info("Reached start of history.")
                break
            # 戻った先の命令は、履歴上その1つ前の状態から実行されている
            before = self._history[-2].state if len(self._history) >= 2 else self._origin
            if self._at_pc_breakpoint(snapshot.state.pc) or self._check_other_breakpoints(snapshot, before):
                logger.info("Reverse breakpoint hit at PC: %#06x", snapshot.state.pc)
                break
        self._running = False

    def stop(self) -> None:
        self._running = False
