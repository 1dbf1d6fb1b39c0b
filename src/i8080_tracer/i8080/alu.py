"""
8080 ALU (算術論理演算ユニット) およびフラグ計算ユーティリティ。

演算結果に基づいたフラグ（Z, S, P, CY, AC）を計算します。
ここで定義する関数は全て純粋関数であり、CPU状態への書き込みは呼び出し側
（命令実装）が I8080CpuState.apply_flags を通じて行います。
"""
from typing import Tuple

from i8080_tracer.i8080.state import FlagSet


# @intent:responsibility 指定されたバイト値のパリティ（ビット1の数が偶数ならTrue）を計算します。
def calculate_parity(val: int) -> bool:
    """8ビット値のパリティ（偶数ならTrue）を計算します。"""
    val &= 0xFF
    val ^= val >> 4
    val ^= val >> 2
    val ^= val >> 1
    return (val & 1) == 0


# @intent:responsibility 切り詰め後の8bit結果からZ/S/Pを計算します。CY/ACは変化させません。
def flags_zsp(result: int) -> FlagSet:
    res8 = result & 0xFF
    return FlagSet(z=res8 == 0, s=(res8 & 0x80) != 0, p=calculate_parity(res8))


# @intent:responsibility 8ビット加算 (ADD/ADC/ADI/ACI) の結果とフラグを計算します。
def add8(val1: int, val2: int, carry_in: int = 0) -> Tuple[int, FlagSet]:
    """ADD/ADC系命令の結果とフラグを返します。"""
    result = val1 + val2 + carry_in
    res8 = result & 0xFF
    zsp = flags_zsp(res8)
    return res8, zsp._replace(
        cy=result > 0xFF,
        ac=((val1 & 0x0F) + (val2 & 0x0F) + carry_in) > 0x0F,
    )


# @intent:responsibility 8ビット減算 (SUB/SBB/SUI/SBI/CMP/CPI) の結果とフラグを計算します。
# @intent:rationale 実機と同様に、減数の1の補数と (1 - borrow_in) を加える2の補数加算で計算します。
#                  この加算の桁上がりは「ボローなし」を意味し、CYはその否定（ボローありで1）になります。
def sub8(val1: int, val2: int, borrow_in: int = 0) -> Tuple[int, FlagSet]:
    """SUB/SBB/CMP系命令の結果とフラグを返します。"""
    complement = (~val2) & 0xFF
    carry_in = 1 - borrow_in
    total = val1 + complement + carry_in
    res8 = total & 0xFF
    zsp = flags_zsp(res8)
    return res8, zsp._replace(
        cy=total <= 0xFF,
        ac=((val1 & 0x0F) + (complement & 0x0F) + carry_in) > 0x0F,
    )


# @intent:responsibility 論理演算 (ANA/XRA/ORA) のフラグを計算します。CYとACは常にクリアされます。
def logic8(result: int) -> FlagSet:
    return flags_zsp(result)._replace(cy=False, ac=False)


# @intent:responsibility INR命令の結果とフラグを計算します（Z/S/Pのみ、CYは変化しません）。
def inc8(val: int) -> Tuple[int, FlagSet]:
    res8 = (val + 1) & 0xFF
    return res8, flags_zsp(res8)


# @intent:responsibility DCR命令の結果とフラグを計算します（Z/S/Pのみ、CYは変化しません）。
def dec8(val: int) -> Tuple[int, FlagSet]:
    res8 = (val - 1) & 0xFF
    return res8, flags_zsp(res8)


# @intent:responsibility DAD命令の16ビット加算を行い、結果とキャリーを返します。
# @intent:rationale Z, S, P, ACフラグは影響を受けないため、FlagSetではなくキャリーのみを返します。
def add16(val1: int, val2: int) -> Tuple[int, bool]:
    result = val1 + val2
    return result & 0xFFFF, result > 0xFFFF


# --- Rotates: (新しいアキュムレータ, 新しいキャリー) を返します ---

def rlc(a: int) -> Tuple[int, bool]:
    out = (a >> 7) & 1
    return ((a << 1) | out) & 0xFF, out == 1


def rrc(a: int) -> Tuple[int, bool]:
    out = a & 1
    return ((a >> 1) | (out << 7)) & 0xFF, out == 1


# RAL/RARは空いたビットに「出ていくビット」ではなく直前のキャリーを入れる
def ral(a: int, carry: bool) -> Tuple[int, bool]:
    out = (a >> 7) & 1
    return ((a << 1) | int(carry)) & 0xFF, out == 1


def rar(a: int, carry: bool) -> Tuple[int, bool]:
    out = a & 1
    return ((a >> 1) | (int(carry) << 7)) & 0xFF, out == 1
