# i8080_tracer/core/errors.py
"""
Core Layer (例外定義)

実行を継続できない致命的な状態を表す例外群を定義します。
命令単位のリトライという概念は存在しないため、ここで定義される例外は全て
その実行（run）にとって終端となります。
"""
from dataclasses import dataclass
from typing import Optional


# @intent:data_structure 例外の内容をホスト（UIやテスト）に渡すための構造化情報。
@dataclass(frozen=True)
class ErrorInfo:
    type: str
    message: str
    address: Optional[int] = None
    opcode: Optional[int] = None
    pc: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "address": self.address,
            "opcode": self.opcode,
            "pc": self.pc,
        }


# @intent:responsibility 本パッケージが送出する全ての例外の基底クラス。
class I8080Error(Exception):
    """i8080_tracerの例外の基底クラス。"""

    def __init__(self, message: str, address: Optional[int] = None,
                 opcode: Optional[int] = None, pc: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.address = address
        self.opcode = opcode
        self.pc = pc

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=self.__class__.__name__,
            message=self.message,
            address=self.address,
            opcode=self.opcode,
            pc=self.pc,
        )


# @intent:responsibility アーキテクチャ上は定義されているが、実行ルーチンが未実装の命令に遭遇したことを表します。
# @intent:pre-condition 送出時点でPCは問題の命令のアドレスを指したままです。
class UnimplementedInstruction(I8080Error):
    def __init__(self, opcode: int, pc: int, mnemonic: str = ""):
        label = f" ({mnemonic})" if mnemonic else ""
        super().__init__(
            f"Unimplemented instruction {opcode:02X}{label} at PC {pc:#06x}",
            address=pc, opcode=opcode, pc=pc,
        )
        self.mnemonic = mnemonic


# @intent:responsibility 実効アドレスがメモリ領域の外にあることを表します。
# @intent:rationale 既存のバス利用側はアドレス範囲外をIndexErrorとして扱うため、IndexErrorも継承します。
class OutOfBoundsAddress(I8080Error, IndexError):
    def __init__(self, address: int, detail: str = ""):
        message = f"Address {address:#06x} out of bounds"
        if detail:
            message += f": {detail}"
        super().__init__(message, address=address)


# @intent:responsibility ロードしようとしたイメージがメモリ容量を超えていることを表します。
class LoadTooLarge(I8080Error, ValueError):
    def __init__(self, size: int, capacity: int, start_address: int = 0):
        super().__init__(
            f"Image of {size} bytes does not fit in {capacity} bytes of memory "
            f"starting at {start_address:#06x}",
            address=start_address,
        )
        self.size = size
        self.capacity = capacity


# @intent:responsibility マシン構成（YAML）の内容が不正であることを表します。
class ConfigError(I8080Error, ValueError):
    pass
