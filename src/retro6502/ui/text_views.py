# retro6502/ui/text_views.py
"""
テキスト診断ビュー。

CPUとバスの状態を端末表示用の文字列に整形します。
どの関数もバスへはpeekでのみアクセスし、アクティビティログやCPU状態を変更しません。
"""
from typing import Iterable, List

from retro6502.common.types import DisassemblyLine
from retro6502.core.cpu import AbstractCpu
from retro6502.transport.bus import Bus
from retro6502.arch.mos6502.state import STACK_PAGE

BANNER = "MOS 6502 Processor Emulator"
FLAG_HEADER = "C  Z  I  D  B  -  V  N"

# @intent:responsibility レジスタ値を "A: 00 X: 00 Y: 00 SP: FF PC: 0600" 形式で返す。
def format_registers(cpu: AbstractCpu) -> str:
    regs = cpu.get_register_map()
    return (
        "Registers: \n"
        f"A: {regs['A']:02X} X: {regs['X']:02X} Y: {regs['Y']:02X} "
        f"SP: {regs['S']:02X} PC: {regs['PC']:04X}\n"
    )

# @intent:responsibility フラグをビット0 (C) から順に 0/1 で並べる。
def format_flags(cpu: AbstractCpu) -> str:
    row = "".join(f"{int(value)}  " for value in cpu.get_flag_state().values())
    return f"Flags:\n{FLAG_HEADER}\n{row}\n"

# @intent:responsibility スタックページ ($0100-$01FF) を16x16のHEXダンプで返す。
def format_stack(bus: Bus) -> str:
    lines = ["Stack: "]
    for row in range(16):
        base = STACK_PAGE + row * 16
        lines.append("".join(f"{bus.peek(base + col):02X} " for col in range(16)))
    return "\n".join(lines) + "\n"

# @intent:responsibility 1バイトをビット0から順に "1 0 ..." で表す。
def format_byte_bits(value: int) -> str:
    return "".join("1 " if value & (1 << i) else "0 " for i in range(8))

def format_memory_byte(bus: Bus, address: int) -> str:
    return f"Byte at address {address}\n{format_byte_bits(bus.peek(address))}"

def format_disassembly(lines: Iterable[DisassemblyLine]) -> str:
    out: List[str] = []
    for address, hex_bytes, text in lines:
        out.append(f"${address:04X}  {hex_bytes:<9} {text}")
    return "\n".join(out)
