# src/retro6502/arch/mos6502/state.py
"""
MOS 6502 CPUの状態定義。
"""
from dataclasses import dataclass, replace
from enum import IntEnum

from retro6502.core.state import CpuState

STACK_PAGE = 0x0100

# @intent:constant ステータスレジスタ(P)内の各フラグのビット位置。
class Flag(IntEnum):
    CARRY = 0
    ZERO = 1
    INTERRUPT_DISABLE = 2
    DECIMAL = 3
    BREAK = 4
    UNUSED = 5
    OVERFLOW = 6
    NEGATIVE = 7

# 表示用の短縮名（ビット0から順）
FLAG_NAMES = ("C", "Z", "I", "D", "B", "-", "V", "N")


def _flag_property(flag: Flag) -> property:
    mask = 1 << flag

    def getter(self) -> bool:
        return (self.p & mask) != 0

    def setter(self, value: bool) -> None:
        if value:
            self.p |= mask
        else:
            self.p &= ~mask & 0xFF

    return property(getter, setter)


# @intent:responsibility MOS 6502 CPUの状態（レジスタ、フラグ）を保持する。
# @intent:invariant sp, a, x, y, p は 0..0xFF、pc は 0..0xFFFF に収まる。
@dataclass
class Mos6502CpuState(CpuState):
    """
    MOS 6502 CPUのレジスタ状態。
    spはスタックページ($0100)内のオフセットとして8bitで保持する。
    """
    sp: int = 0xFF
    a: int = 0
    x: int = 0
    y: int = 0
    p: int = 0  # Packed status flags

    # @intent:responsibility 名前付きフラグへのアクセサ。ハンドラはpを直接ビット操作しない。
    flag_c = _flag_property(Flag.CARRY)
    flag_z = _flag_property(Flag.ZERO)
    flag_i = _flag_property(Flag.INTERRUPT_DISABLE)
    flag_d = _flag_property(Flag.DECIMAL)
    flag_b = _flag_property(Flag.BREAK)
    flag_u = _flag_property(Flag.UNUSED)
    flag_v = _flag_property(Flag.OVERFLOW)
    flag_n = _flag_property(Flag.NEGATIVE)

    def get_flag(self, flag: Flag) -> bool:
        return (self.p >> flag) & 1 == 1

    # @intent:post-condition 指定ビット以外のフラグは変化しない。
    def set_flag(self, flag: Flag, value: bool) -> None:
        if value:
            self.p |= 1 << flag
        else:
            self.p &= ~(1 << flag) & 0xFF

    # @intent:responsibility N, Z フラグを値から更新するヘルパー。
    def update_nz(self, value: int) -> None:
        self.flag_z = (value & 0xFF) == 0
        self.flag_n = (value & 0x80) != 0

    def copy(self) -> 'Mos6502CpuState':
        return replace(self)

    # @intent:responsibility dataclasses.replaceのラッパー。
    def replace(self, **changes) -> 'Mos6502CpuState':
        return replace(self, **changes)
