# i8080_tracer/core/cpu.py
"""
Core Layer (命令サイクル)

1命令分の フェッチ → デコード → 実行 → PC更新 の順序を固定し、
各段の中身をアーキテクチャ側（i8080.cpu）に実装させます。
命令ごとの意味はInstruction Layer（i8080.instructions）が持ちます。
"""
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, List, Optional, Tuple
import logging

from i8080_tracer.transport.bus import Bus
from i8080_tracer.core.snapshot import Snapshot, Operation, Metadata
from i8080_tracer.core.state import CpuState, ExecutionState
from i8080_tracer.common.types import SymbolMap

logger = logging.getLogger(__name__)


# @intent:responsibility CPU状態とバスを所有し、命令サイクルを駆動する基底クラス。
class AbstractCpu(ABC):
    """
    状態（CpuState）は1台のCPUにつき1つで、このクラスだけが保持します。
    外部からは get_state() / restore_state() を通して参照・復元します。
    """
    # @intent:pre-condition `bus`には少なくとも1つのデバイスが登録されている必要があります。
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._step_count = 0
        self._symbols: SymbolMap = {}
        self._labels: Dict[int, str] = {}

    # --- 状態の生成・参照 ---

    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        pass

    # @intent:responsibility 電源投入直後の状態に戻し、実行ステップ数も0に戻します。メモリの内容は保持されます。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._step_count = 0

    def get_state(self) -> CpuState:
        return self._state

    # @intent:responsibility 保存しておいた状態のコピーを現在の状態にします（デバッガの巻き戻し用）。
    # @intent:pre-condition step_countを渡した場合、実行ステップ数もその時点の値に戻します。
    def restore_state(self, state: CpuState, step_count: Optional[int] = None) -> None:
        self._state = replace(state)
        if step_count is not None:
            self._step_count = step_count

    def get_bus(self) -> Bus:
        return self._bus

    @property
    def execution_state(self) -> ExecutionState:
        return self._state.execution_state

    @property
    def step_count(self) -> int:
        return self._step_count

    # --- シンボル ---

    def set_symbol_map(self, symbol_map: SymbolMap) -> None:
        self._symbols = symbol_map
        self._labels = {address: name for name, address in symbol_map.items()}

    def get_symbol_map(self) -> SymbolMap:
        return self._symbols

    def _describe(self, address: int, operation: Operation) -> str:
        label = self._labels.get(address)
        return f"{label}: {operation.text()}" if label else operation.text()

    # --- 命令サイクルの各段 (アーキテクチャ側で実装) ---

    # @intent:responsibility PCの位置のオペコードを読みます。PCは変更しません。
    @abstractmethod
    def _fetch(self) -> int:
        pass

    # @intent:responsibility オペコードとオペランドからOperationを作ります。
    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        pass

    # @intent:responsibility Operationの意味に従ってCPU状態とメモリを変更します。
    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    # @intent:responsibility HALT中のstepで返すSnapshotを作ります。HALT中でなければNoneを返します。
    def _handle_halt(self, current_pc: int) -> Optional[Snapshot]:
        return None

    # @intent:responsibility 実行後にPCを命令長だけ進めます。
    # @intent:rationale 分岐系の命令（manages_pc）は実行ルーチン自身がPCを設定済みなので何もしません。
    def _update_pc(self, operation: Operation) -> None:
        if not operation.manages_pc:
            self._state.pc = (self._state.pc + operation.length) % self._bus.get_size()

    # @intent:responsibility 1命令を実行し、実行後の状態とその命令のバスアクセスをSnapshotとして返します。
    # @intent:post-condition 実行中に例外が発生した場合、PCは問題の命令のアドレスを指したままです。
    def step(self) -> Snapshot:
        # 前回のstep以降にホストが行ったアクセスは記録対象外
        self._bus.get_and_clear_activity_log()
        pc = self._state.pc

        halted = self._handle_halt(pc)
        if halted is not None:
            return halted

        operation = self._decode(self._fetch())
        self._execute(operation)
        self._update_pc(operation)
        self._step_count += 1

        logger.debug("%04X  %s", pc, operation.text())
        return Snapshot(
            state=replace(self._state),
            operation=operation,
            metadata=Metadata(step_count=self._step_count, symbol_info=self._describe(pc, operation)),
            bus_activity=self._bus.get_and_clear_activity_log(),
        )

    # --- ホスト向けの読み出しAPI ---

    # @intent:responsibility レジスタ名と値の辞書を返します。ホストはCPUの内部構造を知らずに値を表示・比較できます。
    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        pass

    # @intent:responsibility (アドレス, 16進ダンプ, ニーモニック) のリストを返します。状態は変更しません。
    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        pass
