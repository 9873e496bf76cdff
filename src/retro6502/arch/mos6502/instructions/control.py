# src/retro6502/arch/mos6502/instructions/control.py
"""
MOS 6502 制御系命令 (Branch, Jump, Stack, Flags, NOP, BRK/RTI)。

ハンドラが呼ばれる時点でPCはオペランドの直後（次の命令の先頭）を指している。
分岐・ジャンプ命令はPCを書き換え、それ以外の命令はPCに触れない。
"""
import logging
from typing import Optional

from retro6502.transport.bus import Bus
from retro6502.arch.mos6502.state import Mos6502CpuState, STACK_PAGE

logger = logging.getLogger(__name__)

BRK_VECTOR = 0xFFFE

# --- Stack Helpers ---

# @intent:responsibility スタックへ1バイト積む。
# @intent:note 書き込み先は $0100 + SP。その後SPを1減らし、8bitでラップする。
def stack_push(state: Mos6502CpuState, bus: Bus, value: int) -> None:
    bus.write(STACK_PAGE + state.sp, value & 0xFF)
    state.sp = (state.sp - 1) & 0xFF

# @intent:responsibility スタックから1バイト取り出す。
# @intent:note SPを1増やして(8bitラップ)から $0100 + SP を読む。
def stack_pop(state: Mos6502CpuState, bus: Bus) -> int:
    state.sp = (state.sp + 1) & 0xFF
    return bus.read(STACK_PAGE + state.sp)

def _push_word(state: Mos6502CpuState, bus: Bus, value: int) -> None:
    stack_push(state, bus, (value >> 8) & 0xFF)
    stack_push(state, bus, value & 0xFF)

def _pop_word(state: Mos6502CpuState, bus: Bus) -> int:
    low = stack_pop(state, bus)
    high = stack_pop(state, bus)
    return (high << 8) | low

# --- Branch Instructions ---
# @intent:note addrは解決済みの分岐先絶対アドレス。不成立時はPCを変更しない。
#              分岐成立・ページ交差による追加サイクルはモデル化しない。

def _branch(state: Mos6502CpuState, addr: Optional[int], condition: bool) -> None:
    if condition:
        state.pc = addr

def bcc(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _branch(state, addr, not state.flag_c)

def bcs(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _branch(state, addr, state.flag_c)

def beq(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _branch(state, addr, state.flag_z)

def bne(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _branch(state, addr, not state.flag_z)

def bmi(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _branch(state, addr, state.flag_n)

def bpl(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _branch(state, addr, not state.flag_n)

def bvc(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _branch(state, addr, not state.flag_v)

def bvs(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _branch(state, addr, state.flag_v)

# --- Jump Instructions ---

def jmp(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.pc = addr

# @intent:responsibility サブルーチン呼び出し。
# @intent:note スタックに積むのは「JSR命令の最後のバイトのアドレス」(= 次の命令 - 1)。上位バイトが先。
def jsr(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    _push_word(state, bus, (state.pc - 1) & 0xFFFF)
    state.pc = addr

# @intent:responsibility サブルーチンから復帰する。下位、上位の順にポップし+1した位置へ戻る。
def rts(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.pc = (_pop_word(state, bus) + 1) & 0xFFFF

# --- Stack Operations ---

def pha(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    stack_push(state, bus, state.a)

# @intent:note PはそのままプッシュしB/未使用ビットを強制しない。
def php(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    stack_push(state, bus, state.p)

def pla(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.a = stack_pop(state, bus)
    state.update_nz(state.a)

def plp(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.p = stack_pop(state, bus)

# --- Flag Operations ---

def clc(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.flag_c = False

def sec(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.flag_c = True

def cli(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.flag_i = False

def sei(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.flag_i = True

def clv(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.flag_v = False

def cld(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.flag_d = False

def sed(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.flag_d = True

# --- System ---

def nop(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    pass

# @intent:responsibility ソフトウェア割り込み。
# @intent:note PCをさらに1進め(パディングバイト)、Bをセットしてから PC(上位→下位)、P の順に積み、
#              $FFFE のベクタへ飛ぶ。Iフラグは変更しない。
def brk(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.pc = (state.pc + 1) & 0xFFFF
    state.flag_b = True
    _push_word(state, bus, state.pc)
    stack_push(state, bus, state.p)
    state.pc = bus.read_word(BRK_VECTOR)

# @intent:responsibility 割り込みからの復帰。Pを復元(Bはセットしたまま)し、PCを下位→上位の順に取り出す。
def rti(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    state.p = stack_pop(state, bus) | 0x10
    state.pc = _pop_word(state, bus)

# @intent:responsibility 未定義オペコード。警告を出すのみで状態は変えない。
def illegal(state: Mos6502CpuState, bus: Bus, addr: Optional[int]) -> None:
    opcode = bus.peek((state.pc - 1) & 0xFFFF)
    logger.warning("Illegal opcode $%02X at $%04X", opcode, (state.pc - 1) & 0xFFFF)
