# src/retro6502/arch/mos6502/instructions/load.py
"""
MOS 6502 転送系命令 (Load/Store/Transfer)。
"""
from typing import Optional

from retro6502.transport.bus import Bus
from retro6502.arch.mos6502.state import Mos6502CpuState

# --- LDA (Load Accumulator) ---
# @intent:responsibility メモリからAレジスタへロードし、N, Zフラグを更新。
def lda(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    val = bus.read(addr)
    state.a = val
    state.update_nz(val)

# --- LDX (Load X Register) ---
def ldx(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    val = bus.read(addr)
    state.x = val
    state.update_nz(val)

# --- LDY (Load Y Register) ---
def ldy(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    val = bus.read(addr)
    state.y = val
    state.update_nz(val)

# --- STA (Store Accumulator) ---
# @intent:responsibility Aレジスタの内容をメモリへストア。フラグ変化なし。
def sta(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    bus.write(addr, state.a)

def stx(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    bus.write(addr, state.x)

def sty(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    bus.write(addr, state.y)

# --- Register Transfers (TAX, TAY, TXA, TYA, TSX, TXS) ---

def tax(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.x = state.a
    state.update_nz(state.x)

def tay(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.y = state.a
    state.update_nz(state.y)

def txa(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.a = state.x
    state.update_nz(state.a)

def tya(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.a = state.y
    state.update_nz(state.a)

# @intent:note TSXはSP(8bitオフセット)からXへ転送。N, Z更新あり。
def tsx(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.x = state.sp
    state.update_nz(state.x)

# @intent:note TXSもXの値でN, Zを更新する（実機のTXSはフラグを変更しない）。
def txs(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.sp = state.x
    state.update_nz(state.x)
