# i8080_tracer/core/runner.py
"""
実行ドライバ

CPUのstepを停止条件（HALTまたはステップ数上限）に達するまで繰り返し呼び出します。
ループとスケジューリングを持つのはこのモジュール（およびDebugger）だけであり、
アーキテクチャ上の計算は一切行いません。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

from i8080_tracer.core.cpu import AbstractCpu
from i8080_tracer.core.errors import I8080Error
from i8080_tracer.core.snapshot import Snapshot

logger = logging.getLogger(__name__)


# @intent:responsibility 実行ループが停止した理由を定義します。
class StopReason(Enum):
    HALTED = "HALTED"
    STEP_LIMIT = "STEP_LIMIT"
    BREAKPOINT = "BREAKPOINT"
    STOPPED = "STOPPED"


# @intent:data_structure 実行ループの結果。
@dataclass(frozen=True)
class RunResult:
    reason: StopReason
    steps: int
    last_snapshot: Optional[Snapshot] = None


# @intent:responsibility HALTするか、max_stepsに達するまで命令を実行します。
# @intent:pre-condition max_stepsがNoneの場合、HALTするまで停止しません。
# @intent:post-condition 致命的エラー（I8080Error）はログに記録した上でそのまま呼び出し元へ送出します。
def run(cpu: AbstractCpu, max_steps: Optional[int] = None) -> RunResult:
    if max_steps is not None and max_steps < 0:
        raise ValueError("max_steps must be non-negative.")

    steps = 0
    snapshot: Optional[Snapshot] = None
    while not cpu.get_state().halted:
        if max_steps is not None and steps >= max_steps:
            logger.info("Step limit of %d reached at PC %#06x", max_steps, cpu.get_state().pc)
            return RunResult(StopReason.STEP_LIMIT, steps, snapshot)
        try:
            snapshot = cpu.step()
        except I8080Error as e:
            logger.error("Execution stopped after %d steps: %s", steps, e)
            raise
        steps += 1

    logger.info("Halted at PC %#06x after %d steps", cpu.get_state().pc, steps)
    return RunResult(StopReason.HALTED, steps, snapshot)
