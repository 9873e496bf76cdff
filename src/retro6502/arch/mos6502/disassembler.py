# src/retro6502/arch/mos6502/disassembler.py
"""
MOS 6502 逆アセンブラ。
"""
from typing import List

from retro6502.common.errors import AddressOutOfRangeError
from retro6502.common.types import DisassemblyLine
from retro6502.transport.bus import Bus
from retro6502.arch.mos6502.instructions.base import AddressingMode, format_operand
from retro6502.arch.mos6502.instructions.maps import lookup

# @intent:responsibility 指定されたメモリ範囲を逆アセンブルする。
# @intent:post-condition バスへのアクセスはpeekのみで行い、アクティビティログもCPU状態も変化させない。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[DisassemblyLine]:
    """
    メモリを解析し、(アドレス, HEX, ニーモニック) のリストを返す。
    未定義オペコードは "DB $xx" として1バイトずつ出力する。
    """
    results: List[DisassemblyLine] = []
    current_addr = start_addr
    end_addr = start_addr + length

    while current_addr < end_addr:
        addr = current_addr & 0xFFFF
        try:
            opcode = bus.peek(addr)
            entry = lookup(opcode)
            if entry.mode is AddressingMode.ILLEGAL:
                results.append((addr, f"{opcode:02X}", f"DB ${opcode:02X}"))
                current_addr += 1
                continue

            instr_len = 1 + entry.mode.operand_length
            raw = [bus.peek((addr + i) & 0xFFFF) for i in range(instr_len)]
        except AddressOutOfRangeError:
            # マップされていない領域に達したら打ち切る
            break

        op_str = format_operand(entry.mode, raw[1:], (addr + instr_len) & 0xFFFF, bus)
        hex_str = " ".join(f"{b:02X}" for b in raw)
        results.append((addr, hex_str, f"{entry.mnemonic} {op_str}".strip()))
        current_addr += instr_len

    return results
