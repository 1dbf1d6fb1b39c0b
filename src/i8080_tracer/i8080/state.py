# i8080_tracer/i8080/state.py
"""
8080 CPU固有の状態定義。

このモジュールは、8080 CPUのレジスタ、フラグ、およびその他の状態を保持するデータ構造を定義します。
"""
from dataclasses import dataclass
from typing import NamedTuple, Optional

from i8080_tracer.core.state import CpuState

# 8080フラグビットマスク (PSWの下位バイト)
# @intent:constant フラグバイト内の各フラグビットの位置を定義します。
S_FLAG = 0b10000000   # Sign (符号)
Z_FLAG = 0b01000000   # Zero (ゼロ)
# 0b00100000 # 常に0
AC_FLAG = 0b00010000  # Auxiliary Carry (ビット3からの桁上がり)
# 0b00001000 # 常に0
P_FLAG = 0b00000100   # Parity (偶数パリティで1)
# 0b00000010 # 常に1
CY_FLAG = 0b00000001  # Carry (キャリー/ボロー)

# PSWとして読み出した際に意味を持つビット
FLAG_MASK = S_FLAG | Z_FLAG | AC_FLAG | P_FLAG | CY_FLAG
PSW_FIXED_ONE = 0b00000010


# @intent:data_structure フラグ演算ユニットの計算結果。Noneのフラグは「変化しない」ことを意味します。
class FlagSet(NamedTuple):
    z: bool
    s: bool
    p: bool
    cy: Optional[bool] = None
    ac: Optional[bool] = None


# @intent:responsibility 8080 CPUの全てのレジスタとフラグの状態を保持します。
@dataclass
class I8080CpuState(CpuState):
    """
    8080 CPUのレジスタ状態を保持するデータクラス。
    CpuStateを拡張し、8080固有のレジスタと割り込み許可フラグを含みます。
    """
    a: int = 0x00
    b: int = 0x00
    c: int = 0x00
    d: int = 0x00
    e: int = 0x00
    h: int = 0x00
    l: int = 0x00
    f: int = 0x00  # Flag register

    inte: bool = False # 割り込み許可 (EI/DI)

    # @intent:accessor フラグバイトの各ビットにアクセスするためのプロパティを提供します。
    # @intent:rationale フラグを直接ビット操作する代わりに、分かりやすいプロパティとして提供することで、
    #                   命令実装の可読性を高めます。

    def _get_flag(self, mask: int) -> bool:
        return (self.f & mask) != 0

    def _set_flag(self, mask: int, value: bool) -> None:
        if value:
            self.f |= mask
        else:
            self.f &= ~mask & 0xFF

    @property
    def flag_s(self) -> bool:
        return self._get_flag(S_FLAG)

    @flag_s.setter
    def flag_s(self, value: bool) -> None:
        self._set_flag(S_FLAG, value)

    @property
    def flag_z(self) -> bool:
        return self._get_flag(Z_FLAG)

    @flag_z.setter
    def flag_z(self, value: bool) -> None:
        self._set_flag(Z_FLAG, value)

    @property
    def flag_ac(self) -> bool:
        return self._get_flag(AC_FLAG)

    @flag_ac.setter
    def flag_ac(self, value: bool) -> None:
        self._set_flag(AC_FLAG, value)

    @property
    def flag_p(self) -> bool:
        return self._get_flag(P_FLAG)

    @flag_p.setter
    def flag_p(self, value: bool) -> None:
        self._set_flag(P_FLAG, value)

    @property
    def flag_cy(self) -> bool:
        return self._get_flag(CY_FLAG)

    @flag_cy.setter
    def flag_cy(self, value: bool) -> None:
        self._set_flag(CY_FLAG, value)

    # @intent:responsibility フラグ演算ユニットの結果を反映します。Noneのフラグは変更しません。
    def apply_flags(self, flags: FlagSet) -> None:
        self.flag_z = flags.z
        self.flag_s = flags.s
        self.flag_p = flags.p
        if flags.cy is not None:
            self.flag_cy = flags.cy
        if flags.ac is not None:
            self.flag_ac = flags.ac

    # 16-bit register pairs (上位バイトは先に名前が来るレジスタ)
    @property
    def psw(self) -> int:
        return (self.a << 8) | (self.f & FLAG_MASK) | PSW_FIXED_ONE

    @psw.setter
    def psw(self, value: int) -> None:
        self.a = (value >> 8) & 0xFF
        self.f = value & FLAG_MASK

    @property
    def bc(self) -> int:
        return (self.b << 8) | self.c

    @bc.setter
    def bc(self, value: int) -> None:
        self.b = (value >> 8) & 0xFF
        self.c = value & 0xFF

    @property
    def de(self) -> int:
        return (self.d << 8) | self.e

    @de.setter
    def de(self, value: int) -> None:
        self.d = (value >> 8) & 0xFF
        self.e = value & 0xFF

    @property
    def hl(self) -> int:
        return (self.h << 8) | self.l

    @hl.setter
    def hl(self, value: int) -> None:
        self.h = (value >> 8) & 0xFF
        self.l = value & 0xFF
