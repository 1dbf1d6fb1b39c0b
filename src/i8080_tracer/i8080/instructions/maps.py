"""
8080 命令マッピング定義。
各命令モジュールから関数をインポートし、オペコードと命令記述子の対応表を構築します。

INSTRUCTION_TABLE は256個全てのオペコードを網羅します。
未定義のエンコーディングはNOPとして扱い、DAA/IN/OUT は未実装（execute=None）として登録します。
"""
from typing import Dict, List

from .base import (
    InstructionDescriptor, CONDITION_NAMES,
    register_from_code, rp_from_code, push_pop_pair_from_code
)
from .alu import (
    ALU_OPS, ALU_IMMEDIATE_OPS,
    execute_alu_r, execute_alu_immediate, execute_inr, execute_dcr, execute_inx, execute_dcx,
    execute_dad, execute_rlc, execute_rrc, execute_ral, execute_rar, execute_cma, execute_stc, execute_cmc
)
from .load import (
    execute_mov, execute_mvi, execute_lxi, execute_lda, execute_sta, execute_lhld, execute_shld,
    execute_ldax, execute_stax, execute_xchg, execute_xthl, execute_sphl, execute_push, execute_pop
)
from .control import (
    execute_nop, execute_hlt, execute_jmp, execute_jcc, execute_call, execute_ccc,
    execute_ret, execute_rcc, execute_rst, execute_pchl, execute_ei, execute_di
)

# 8080で命令が割り当てられていないエンコーディング
UNDEFINED_OPCODES = [0x08, 0x10, 0x18, 0x20, 0x28, 0x30, 0x38, 0xCB, 0xD9, 0xDD, 0xED, 0xFD]


def _d(mnemonic, length, execute, manages_pc=False, operand_format=""):
    return InstructionDescriptor(mnemonic, length, execute, manages_pc, operand_format)


def _reg(code: int) -> str:
    return register_from_code(code).name


def _build_descriptor_map() -> Dict[int, InstructionDescriptor]:
    table = {
        0x00: _d("NOP", 1, execute_nop),
        0x07: _d("RLC", 1, execute_rlc),
        0x0F: _d("RRC", 1, execute_rrc),
        0x17: _d("RAL", 1, execute_ral),
        0x1F: _d("RAR", 1, execute_rar),
        0x22: _d("SHLD", 3, execute_shld, operand_format="a16"),
        0x27: _d("DAA", 1, None),
        0x2A: _d("LHLD", 3, execute_lhld, operand_format="a16"),
        0x2F: _d("CMA", 1, execute_cma),
        0x32: _d("STA", 3, execute_sta, operand_format="a16"),
        0x37: _d("STC", 1, execute_stc),
        0x3A: _d("LDA", 3, execute_lda, operand_format="a16"),
        0x3F: _d("CMC", 1, execute_cmc),
        0x76: _d("HLT", 1, execute_hlt, manages_pc=True),
        0xC3: _d("JMP", 3, execute_jmp, manages_pc=True, operand_format="a16"),
        0xC9: _d("RET", 1, execute_ret, manages_pc=True),
        0xCD: _d("CALL", 3, execute_call, manages_pc=True, operand_format="a16"),
        0xD3: _d("OUT", 2, None, operand_format="d8"),
        0xDB: _d("IN", 2, None, operand_format="d8"),
        0xE3: _d("XTHL", 1, execute_xthl),
        0xE9: _d("PCHL", 1, execute_pchl, manages_pc=True),
        0xEB: _d("XCHG", 1, execute_xchg),
        0xF3: _d("DI", 1, execute_di),
        0xF9: _d("SPHL", 1, execute_sphl),
        0xFB: _d("EI", 1, execute_ei),
        **{op: _d("NOP", 1, execute_nop) for op in UNDEFINED_OPCODES},
    }

    # 00rp0001 LXI / 00rp0011 INX / 00rp1001 DAD / 00rp1011 DCX
    for op in range(0x01, 0x40, 0x10):
        rp = rp_from_code(op >> 4).value
        table[op] = _d(f"LXI {rp}", 3, execute_lxi, operand_format="d16")
        table[op + 0x02] = _d(f"INX {rp}", 1, execute_inx)
        table[op + 0x08] = _d(f"DAD {rp}", 1, execute_dad)
        table[op + 0x0A] = _d(f"DCX {rp}", 1, execute_dcx)

    # STAX/LDAX は B と D のみ
    for op in (0x02, 0x12):
        rp = rp_from_code(op >> 4).value
        table[op] = _d(f"STAX {rp}", 1, execute_stax)
        table[op + 0x08] = _d(f"LDAX {rp}", 1, execute_ldax)

    # 00ddd100 INR / 00ddd101 DCR / 00ddd110 MVI
    for op in range(0x04, 0x40, 0x08):
        reg = _reg(op >> 3)
        table[op] = _d(f"INR {reg}", 1, execute_inr)
        table[op + 1] = _d(f"DCR {reg}", 1, execute_dcr)
        table[op + 2] = _d(f"MVI {reg}", 2, execute_mvi, operand_format="d8")

    # 01dddsss MOV (01110110 はHLT)
    for op in range(0x40, 0x80):
        if op != 0x76:
            table[op] = _d(f"MOV {_reg(op >> 3)},{_reg(op)}", 1, execute_mov)

    # 10xxxsss ALU r
    for op in range(0x80, 0xC0):
        table[op] = _d(f"{ALU_OPS[(op >> 3) & 0b111]} {_reg(op)}", 1, execute_alu_r)

    # 11ccc000 Rcc / 11ccc010 Jcc / 11ccc100 Ccc / 11xxx110 ALU d8 / 11nnn111 RST
    for op in range(0xC0, 0x100, 0x08):
        code = (op >> 3) & 0b111
        cc = CONDITION_NAMES[code]
        table[op] = _d(f"R{cc}", 1, execute_rcc, manages_pc=True)
        table[op + 0x02] = _d(f"J{cc}", 3, execute_jcc, manages_pc=True, operand_format="a16")
        table[op + 0x04] = _d(f"C{cc}", 3, execute_ccc, manages_pc=True, operand_format="a16")
        table[op + 0x06] = _d(ALU_IMMEDIATE_OPS[code], 2, execute_alu_immediate, operand_format="d8")
        table[op + 0x07] = _d(f"RST {code}", 1, execute_rst, manages_pc=True)

    # 11rp0001 POP / 11rp0101 PUSH
    for op in range(0xC1, 0x100, 0x10):
        rp = push_pop_pair_from_code(op >> 4).value
        table[op] = _d(f"POP {rp}", 1, execute_pop)
        table[op + 0x04] = _d(f"PUSH {rp}", 1, execute_push)

    return table


def _build_instruction_table() -> List[InstructionDescriptor]:
    descriptors = _build_descriptor_map()
    missing = [op for op in range(0x100) if op not in descriptors]
    if missing:
        raise RuntimeError(f"Opcodes without descriptor: {[f'{op:02X}' for op in missing]}")
    return [descriptors[op] for op in range(0x100)]


# @intent:data_structure オペコード(0x00-0xFF)をインデックスとする命令記述子の表。起動時に一度だけ構築されます。
INSTRUCTION_TABLE: List[InstructionDescriptor] = _build_instruction_table()
