# src/retro6502/arch/mos6502/instructions/alu.py
"""
MOS 6502 算術論理演算命令 (ALU)。
BCD（デシマルモード）補正を含む。
"""
from typing import Optional

from retro6502.transport.bus import Bus
from retro6502.arch.mos6502.state import Mos6502CpuState

# --- Logical Operations (AND, ORA, EOR, BIT) ---

def and_(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.a = state.a & bus.read(addr)
    state.update_nz(state.a)

def ora(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.a = state.a | bus.read(addr)
    state.update_nz(state.a)

def eor(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.a = state.a ^ bus.read(addr)
    state.update_nz(state.a)

# @intent:note BIT命令はメモリの値のビット6, 7をそれぞれV, Nフラグにコピーし、A & Mの結果でZフラグを設定する。Aは変化しない。
def bit(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    val = bus.read(addr)
    state.flag_z = (state.a & val) == 0
    state.flag_v = (val & 0x40) != 0
    state.flag_n = (val & 0x80) != 0

# --- Arithmetic Operations (ADC, SBC) ---

# @intent:responsibility A + M + C をAに格納し、C, V, N, Zを更新する。
# @intent:note デシマルモードでは下位ニブル > 9 で +0x06、Cを (結果 > 0x99) で再設定、
#              上位ニブル > 0x90 で +0x60 の順に補正する。ハーフキャリーは考慮しない。
def adc(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    val = bus.read(addr)
    a = state.a
    total = a + val + (1 if state.flag_c else 0)
    state.flag_c = total > 0xFF

    if state.flag_d:
        if (total & 0x0F) > 0x09:
            total += 0x06
        state.flag_c = total > 0x99
        if (total & 0xF0) > 0x90:
            total += 0x60

    # Overflow: 両オペランドの符号が同じで、結果の符号がAの元の符号と異なる
    state.flag_v = ((a ^ val) & 0x80) == 0 and ((a ^ total) & 0x80) != 0
    state.flag_n = (total & 0x80) != 0
    total &= 0xFF
    state.flag_z = total == 0
    state.a = total

# @intent:responsibility A - M - (1 - C) をAに格納する。Cは借りが発生しなかった場合にセット。
# @intent:note N, Z, V は2進の差分から算出し、デシマルモードではAに格納する値のみ補正する。
def sbc(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    val = bus.read(addr)
    a = state.a
    borrow = 0 if state.flag_c else 1
    diff = a - val - borrow

    state.flag_v = ((a ^ val) & 0x80) != 0 and ((a ^ diff) & 0x80) != 0
    state.flag_c = diff >= 0
    state.update_nz(diff)

    result = diff
    if state.flag_d:
        if (a & 0x0F) - (val & 0x0F) - borrow < 0:
            result -= 0x06
        if diff < 0:
            result -= 0x60
    state.a = result & 0xFF

# --- Compare Operations (CMP, CPX, CPY) ---
# @intent:note Compareは結果を格納しない減算。C: Reg >= M, Z: Reg == M, N: 差分のビット7。

def _compare(state: Mos6502CpuState, reg_val: int, mem_val: int) -> None:
    state.flag_z = reg_val == mem_val
    state.flag_c = reg_val >= mem_val
    state.flag_n = ((reg_val - mem_val) & 0x80) != 0

def cmp(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _compare(state, state.a, bus.read(addr))

def cpx(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _compare(state, state.x, bus.read(addr))

def cpy(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _compare(state, state.y, bus.read(addr))

# --- Shift / Rotate Operations (ASL, LSR, ROL, ROR) ---
# 各命令にメモリ版とアキュムレータ版がある。演算本体は共通ヘルパーで行い、C, N, Zを更新する。

def _shift_left(state: Mos6502CpuState, val: int, carry_in: int) -> int:
    res = ((val << 1) | carry_in) & 0xFF
    state.flag_c = (val & 0x80) != 0
    state.update_nz(res)
    return res

def _shift_right(state: Mos6502CpuState, val: int, carry_in: int) -> int:
    res = (val >> 1) | (carry_in << 7)
    state.flag_c = (val & 0x01) != 0
    state.update_nz(res)
    return res

def asl(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    bus.write(addr, _shift_left(state, bus.read(addr), 0))

def asl_acc(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.a = _shift_left(state, state.a, 0)

def lsr(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    bus.write(addr, _shift_right(state, bus.read(addr), 0))

def lsr_acc(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.a = _shift_right(state, state.a, 0)

def rol(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    carry_in = 1 if state.flag_c else 0
    bus.write(addr, _shift_left(state, bus.read(addr), carry_in))

def rol_acc(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    carry_in = 1 if state.flag_c else 0
    state.a = _shift_left(state, state.a, carry_in)

def ror(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    carry_in = 1 if state.flag_c else 0
    bus.write(addr, _shift_right(state, bus.read(addr), carry_in))

def ror_acc(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    carry_in = 1 if state.flag_c else 0
    state.a = _shift_right(state, state.a, carry_in)

# --- Increment / Decrement (INC, DEC, INX, DEX, INY, DEY) ---
# @intent:note 8bitでラップアラウンド。Cは変化しない。

def inc(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    res = (bus.read(addr) + 1) & 0xFF
    bus.write(addr, res)
    state.update_nz(res)

def dec(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    res = (bus.read(addr) - 1) & 0xFF
    bus.write(addr, res)
    state.update_nz(res)

def inx(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.x = (state.x + 1) & 0xFF
    state.update_nz(state.x)

def dex(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.x = (state.x - 1) & 0xFF
    state.update_nz(state.x)

def iny(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.y = (state.y + 1) & 0xFF
    state.update_nz(state.y)

def dey(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.y = (state.y - 1) & 0xFF
    state.update_nz(state.y)
