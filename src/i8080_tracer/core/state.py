# i8080_tracer/core/state.py
"""
Core Layer (CPU状態)

このモジュールは、CPUの基本的な状態（レジスタ群）を保持するデータ構造を定義します。
"""
from dataclasses import dataclass
from enum import Enum


# @intent:responsibility 命令実行エンジンの状態遷移を定義します。HALTEDは終端状態です。
class ExecutionState(Enum):
    RUNNING = "RUNNING"
    HALTED = "HALTED"


# @intent:responsibility CPUのレジスタ状態を保持します。アーキテクチャ固有のレジスタはこれを拡張します。
@dataclass
class CpuState:
    """
    CPUのレジスタ状態を保持するデータクラス。
    8080固有のレジスタは i8080.state.I8080CpuState で追加されます。
    """
    pc: int = 0x0000  # Program Counter
    sp: int = 0x0000  # Stack Pointer
    halted: bool = False
    # @intent:rationale 初期値は0x0000とする。8080のリセット時のPCは0番地であり、
    #                  SPはプログラム側（LXI SP）か構成ファイルで初期化される。

    @property
    def execution_state(self) -> ExecutionState:
        return ExecutionState.HALTED if self.halted else ExecutionState.RUNNING
