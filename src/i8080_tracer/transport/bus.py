# i8080_tracer/transport/bus.py
"""
Transport Layer (メモリバス)

8080から見える16bitのメモリアドレス空間を表します。
アドレスを登録済みのメモリデバイスとデバイス内オフセットに解決し、
CPUが行った読み書きを1命令分ずつ記録します。
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional
import logging

from i8080_tracer.core.errors import OutOfBoundsAddress

logger = logging.getLogger(__name__)

# 8080のアドレス空間は16bit
MAX_ADDRESS_SPACE = 0x10000


# @intent:responsibility 記録されるメモリアクセスの種別。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"


# @intent:data_structure CPUが行った1回のメモリアクセス。
# @intent:rationale 書き込みでは書き込み前の値(previous_data)も残し、デバッガがメモリを巻き戻せるようにします。
@dataclass(frozen=True)
class BusAccess:
    address: int
    data: int
    access_type: BusAccessType
    previous_data: Optional[int] = None


# @intent:responsibility バスに接続するメモリデバイスの共通インターフェース。
class Device(ABC):
    """
    アドレスはデバイス先頭からのオフセットで渡されます。
    """
    @abstractmethod
    def read(self, offset: int) -> int:
        pass

    @abstractmethod
    def write(self, offset: int, value: int) -> None:
        pass

    # @intent:responsibility ローダー用の書き込み口。既定では通常の書き込みと同じです。
    def load_data(self, offset: int, value: int) -> None:
        self.write(offset, value)


# @intent:responsibility 読み書き可能なメモリ。プログラム本体とスタックを置きます。
class RAM(Device):
    # @intent:pre-condition sizeは正の整数である必要があります。
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._cells = bytearray(size)

    def get_size(self) -> int:
        return len(self._cells)

    def _validate_offset(self, offset: int) -> None:
        if offset < 0 or offset >= len(self._cells):
            raise OutOfBoundsAddress(offset, f"{type(self).__name__} of size {len(self._cells)}")

    def read(self, offset: int) -> int:
        self._validate_offset(offset)
        return self._cells[offset]

    def write(self, offset: int, value: int) -> None:
        self._validate_offset(offset)
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Data {value} is not an 8-bit value.")
        self._cells[offset] = value

    def load_data(self, offset: int, value: int) -> None:
        RAM.write(self, offset, value)


# @intent:responsibility 実行中は書き換わらないメモリ。内容はload_data経由でのみ設定します。
class ROM(RAM):
    def write(self, offset: int, value: int) -> None:
        self._validate_offset(offset)
        # Intentional: a store into ROM is dropped, it does not fault.
        logger.debug("Ignored write of %02X to ROM offset %#06x", value, offset)


class _Mapping(NamedTuple):
    start: int
    end: int
    device: Device

    def contains(self, address: int) -> bool:
        return self.start <= address <= self.end


# @intent:responsibility アドレス空間をデバイスに割り当て、アクセスを委譲・記録します。
# @intent:rationale 記録したアクセスはSnapshotに含められ、デバッガのブレークポイントと巻き戻しに使われます。
class Bus:
    """
    8080のメモリバス。

    read/write はCPUが行うアクセスで、アクティビティログに記録されます。
    peek/load はホスト（逆アセンブラ、ローダー、デバッガ）用で、記録されません。
    """
    def __init__(self):
        self._mappings: List[_Mapping] = []
        self._activity: List[BusAccess] = []

    # @intent:responsibility start_address から end_address (両端を含む) にデバイスを割り当てます。
    # @intent:pre-condition 範囲は0以上で16bitアドレス空間に収まる必要があります。重複は検査しません（構成側の責務）。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        if start_address < 0 or start_address > end_address:
            raise ValueError("Invalid address range: start_address must be <= end_address and non-negative.")
        if end_address >= MAX_ADDRESS_SPACE:
            raise ValueError(f"End address {end_address:#x} exceeds the 16-bit address space.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")

        span = end_address - start_address + 1
        if isinstance(device, RAM) and device.get_size() != span:
            raise ValueError(
                f"Registered {type(device).__name__} device size ({device.get_size()} bytes) does not match "
                f"the specified address range size ({span} bytes)."
            )
        self._mappings.append(_Mapping(start_address, end_address, device))

    # @intent:responsibility メモリサイズ（割り当て済みの最上位アドレス + 1）を返します。PC/SPはこれを法として回り込みます。
    def get_size(self) -> int:
        return max((m.end for m in self._mappings), default=-1) + 1

    def is_mapped(self, address: int) -> bool:
        return any(m.contains(address) for m in self._mappings)

    def _resolve(self, address: int) -> _Mapping:
        for mapping in self._mappings:
            if mapping.contains(address):
                return mapping
        raise OutOfBoundsAddress(address, "not mapped to any device")

    def read(self, address: int) -> int:
        m = self._resolve(address)
        value = m.device.read(address - m.start)
        self._activity.append(BusAccess(address, value, BusAccessType.READ))
        return value

    # @intent:responsibility ROMへの書き込みもデバイス側で無視されるだけで、アクセスとしては記録されます。
    def write(self, address: int, data: int) -> None:
        m = self._resolve(address)
        offset = address - m.start
        previous = m.device.read(offset)
        m.device.write(offset, data)
        self._activity.append(BusAccess(address, data, BusAccessType.WRITE, previous_data=previous))

    def peek(self, address: int) -> int:
        m = self._resolve(address)
        return m.device.read(address - m.start)

    # @intent:responsibility ローダーとデバッガの巻き戻し用の書き込み。記録されず、ROMにも書き込めます。
    def load(self, address: int, data: int) -> None:
        m = self._resolve(address)
        m.device.load_data(address - m.start, data)

    # @intent:responsibility 記録済みのアクセスを返し、ログを空にします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        activity, self._activity = self._activity, []
        return activity
