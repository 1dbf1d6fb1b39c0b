# i8080_tracer/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令の実行結果（CPU状態とバスアクティビティ）を記録した
不変のデータ構造を定義します。デバッガの履歴とホストへの情報提供に用います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from i8080_tracer.core.state import CpuState
from i8080_tracer.transport.bus import BusAccessType, BusAccess


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    デコードされた命令の詳細（HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode_hex: str # 例: "C3"
    mnemonic: str # 例: "JMP"
    operands: List[str] = field(default_factory=list) # 例: ["$1234"]
    operand_bytes: List[int] = field(default_factory=list) # 生のオペランドバイト（下位バイトが先）
    length: int = 1 # 命令のバイト長
    address: int = 0 # オペコードが置かれていたアドレス
    manages_pc: bool = False # Trueの場合、実行ルーチン自身がPCを設定する

    @property
    def opcode(self) -> int:
        return int(self.opcode_hex, 16)

    # @intent:utility_function 16bitオペランド（下位バイトが先）を値として返します。
    @property
    def word(self) -> int:
        return (self.operand_bytes[1] << 8) | self.operand_bytes[0]

    @property
    def byte(self) -> int:
        return self.operand_bytes[0]

    def text(self) -> str:
        if self.operands:
            return f"{self.mnemonic} {','.join(self.operands)}"
        return self.mnemonic


# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True) # 不変データ構造
class Metadata:
    """
    実行に関するメタデータ（累計ステップ数、シンボル情報など）を記録するデータクラス。
    """
    step_count: int
    symbol_info: Optional[str] = None # 例: "main_loop: JMP $1234"


# @intent:responsibility ある一時点におけるCPUの状態と、その命令で発生したバスアクセスを不変に記録します。
@dataclass(frozen=True) # 不変データ構造
class Snapshot:
    """
    1命令実行後のCPU状態のコピーと、その命令で発生したバスアクセスの記録。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)

    # @intent:rationale stateには実行直後の状態のコピーを格納する。
    #                  CPUが保持する可変の状態オブジェクトを共有すると、履歴が後続の命令で書き換わってしまう。

    def writes(self) -> List[BusAccess]:
        return [a for a in self.bus_activity if a.access_type == BusAccessType.WRITE]
