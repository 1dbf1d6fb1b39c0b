# i8080_tracer/loader/loader.py
"""
コードローダーモジュール。
生バイナリイメージおよび Intel HEX 形式のロードをサポートします。

ロードはバスの load() 経由で行うため、バスアクティビティログには記録されず、
ROM領域にも書き込めます。
"""
from pathlib import Path
from typing import Union
import logging

from i8080_tracer.core.errors import LoadTooLarge
from i8080_tracer.transport.bus import Bus

logger = logging.getLogger(__name__)


class BinaryLoader:
    """
    生のバイナリイメージを指定アドレスからバスにロードするローダー。
    """
    # @intent:responsibility ファイルを読み込み、その内容をstart_addressからロードします。
    # @intent:return ロードしたバイト数。
    def load_binary(self, file_path: Union[str, Path], bus: Bus, start_address: int = 0) -> int:
        data = Path(file_path).read_bytes()
        loaded = self.load_bytes(data, bus, start_address)
        logger.debug("Loaded %d bytes from %s at %#06x", loaded, file_path, start_address)
        return loaded

    # @intent:responsibility バイト列をstart_addressから連続してロードします。
    # @intent:pre-condition イメージ全体がメモリに収まらない場合、1バイトも書き込まずにLoadTooLargeを送出します。
    def load_bytes(self, data: bytes, bus: Bus, start_address: int = 0) -> int:
        capacity = bus.get_size()
        if start_address < 0 or len(data) > capacity - start_address:
            raise LoadTooLarge(len(data), capacity, start_address)

        for i, byte_data in enumerate(data):
            bus.load(start_address + i, byte_data)
        return len(data)


class IntelHexLoader:
    """
    Intel HEX形式のファイルを解析し、データをバスにロードするローダー。
    """
    def load_intel_hex(self, file_path: Union[str, Path], bus: Bus) -> int:
        with open(file_path, 'r') as f:
            loaded = self.load_intel_hex_lines(f, bus)
        logger.debug("Loaded %d bytes from Intel HEX file %s", loaded, file_path)
        return loaded

    # @intent:responsibility Intel HEXのレコード行を解析し、データレコードの内容をバスにロードします。
    # @intent:return ロードしたデータバイト数。
    def load_intel_hex_lines(self, lines, bus: Bus) -> int:
        current_extended_address = 0x0000
        loaded = 0

        for line_num, line in enumerate(lines, 1):
            line = line.strip()
            if not line or not line.startswith(':'):
                continue

            comment_start = line.find(';')
            if comment_start != -1:
                line = line[:comment_start].strip()

            if len(line) < 11:
                raise ValueError(f"Invalid Intel HEX record format on line {line_num}: Too short - {line}")

            try:
                data_length = int(line[1:3], 16)
                address_field = int(line[3:7], 16)
                record_type = int(line[7:9], 16)
                data_part_str = line[9:-2]
                checksum_field = int(line[-2:], 16)
                data = bytes.fromhex(data_part_str)
            except ValueError as e:
                raise ValueError(f"Error parsing Intel HEX line {line_num}: {line} - {e}") from e

            if len(data) != data_length:
                raise ValueError(f"Data length mismatch on line {line_num}")

            checksum_sum = data_length + (address_field >> 8) + (address_field & 0xFF) + record_type + sum(data)
            calculated_checksum = (~checksum_sum + 1) & 0xFF
            if calculated_checksum != checksum_field:
                raise ValueError(
                    f"Checksum mismatch on line {line_num}: "
                    f"Calculated {calculated_checksum:02X}, Expected {checksum_field:02X}"
                )

            if record_type == 0x00:
                load_address = current_extended_address + address_field
                # レコード単位で範囲を確認し、収まらない場合は1バイトも書き込まない
                capacity = bus.get_size()
                if load_address + data_length > capacity:
                    raise LoadTooLarge(data_length, capacity, load_address)
                for i, byte_data in enumerate(data):
                    bus.load(load_address + i, byte_data)
                loaded += data_length
            elif record_type == 0x01:
                break
            elif record_type == 0x02:
                current_extended_address = int(data_part_str, 16) << 4
            elif record_type == 0x04:
                current_extended_address = int(data_part_str, 16) << 16
            elif record_type in (0x03, 0x05):
                # 開始アドレスレコードは8080では意味を持たない
                pass
            else:
                raise ValueError(f"Unknown Intel HEX record type {record_type:02X} on line {line_num}")

        return loaded
