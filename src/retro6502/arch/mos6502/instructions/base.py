# src/retro6502/arch/mos6502/instructions/base.py
"""
MOS 6502 アドレッシングモード解決ロジック。

各解決関数はPCの位置から命令ストリームのオペランドを読み取り（PCを進めながら）、
AddressingResultを返します。実効アドレスを持たないモード（implied / accumulator）は
addressにNoneを返します。
"""
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional

from retro6502.transport.bus import Bus
from retro6502.arch.mos6502.state import Mos6502CpuState

# @intent:responsibility アドレッシングモードの種類とオペランド長を定義する。
class AddressingMode(Enum):
    IMPLIED = ("implied", 0)
    ACCUMULATOR = ("accumulator", 0)
    IMMEDIATE = ("immediate", 1)
    ZERO_PAGE = ("zero_page", 1)
    ZERO_PAGE_X = ("zero_page_x", 1)
    ZERO_PAGE_Y = ("zero_page_y", 1)
    ABSOLUTE = ("absolute", 2)
    ABSOLUTE_X = ("absolute_x", 2)
    ABSOLUTE_Y = ("absolute_y", 2)
    INDEXED_INDIRECT = ("indexed_indirect", 1)
    INDIRECT_INDEXED = ("indirect_indexed", 1)
    INDIRECT = ("indirect", 2)
    RELATIVE = ("relative", 1)
    ILLEGAL = ("illegal", 0)

    def __init__(self, label: str, operand_length: int):
        self.label = label
        self.operand_length = operand_length

# @intent:responsibility アドレッシングモードの解決結果。
# address: 解決された実効アドレス (implied/accumulatorの場合はNone)
# operand_bytes: 命令ストリームからフェッチされたオペランドのバイト列
class AddressingResult(NamedTuple):
    address: Optional[int]
    operand_bytes: List[int]

AddrFunc = Callable[[Mos6502CpuState, Bus], AddressingResult]

# @intent:responsibility PC位置の1バイトを読み、PCを1進める。
def fetch_byte(state: Mos6502CpuState, bus: Bus) -> int:
    value = bus.read(state.pc)
    state.pc = (state.pc + 1) & 0xFFFF
    return value

# @intent:responsibility ゼロページ上の16bitポインタを読む。
# @intent:note 上位側バイトの読み出しはページ0内でラップアラウンドする ($FF -> $00)。
def read_zero_page_word(bus: Bus, ptr: int) -> int:
    first = bus.read(ptr & 0xFF)
    second = bus.read((ptr + 1) & 0xFF)
    return bus.compose_word(first, second)

# --- Addressing Modes ---

def addr_implied(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    return AddressingResult(None, [])

# @intent:responsibility Accumulator Mode (ASL A など)。ハンドラはAレジスタを直接操作する。
def addr_accumulator(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    return AddressingResult(None, [])

# @intent:responsibility Immediate Mode (#$xx)
# @intent:note オペランドそのものの位置（現在のPC）を実効アドレスとして返す。
def addr_immediate(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    addr = state.pc
    val = fetch_byte(state, bus)
    return AddressingResult(addr, [val])

# @intent:responsibility Zero Page Mode ($xx)
def addr_zeropage(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    addr = fetch_byte(state, bus)
    return AddressingResult(addr, [addr])

# @intent:responsibility Zero Page, X Mode ($xx,X)
# @intent:note ラップアラウンドあり (0xFF + 1 -> 0x00)
def addr_zeropage_x(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    base = fetch_byte(state, bus)
    return AddressingResult((base + state.x) & 0xFF, [base])

# @intent:responsibility Zero Page, Y Mode ($xx,Y) - LDX, STX only
def addr_zeropage_y(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    base = fetch_byte(state, bus)
    return AddressingResult((base + state.y) & 0xFF, [base])

# @intent:responsibility Absolute Mode ($xxxx)
def addr_absolute(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    first = fetch_byte(state, bus)
    second = fetch_byte(state, bus)
    return AddressingResult(bus.compose_word(first, second), [first, second])

# @intent:responsibility Absolute, X Mode ($xxxx,X)
# @intent:note ページ境界交差による追加サイクルはモデル化しない。
def addr_absolute_x(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    base_addr, op_bytes = addr_absolute(state, bus)
    return AddressingResult((base_addr + state.x) & 0xFFFF, op_bytes)

# @intent:responsibility Absolute, Y Mode ($xxxx,Y)
def addr_absolute_y(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    base_addr, op_bytes = addr_absolute(state, bus)
    return AddressingResult((base_addr + state.y) & 0xFFFF, op_bytes)

# @intent:responsibility Indirect Mode ($xxxx) - JMP only
# @intent:note ポインタワードを読み、その位置のワードをジャンプ先とする。
#              実機のページ境界バグ ($xxFF) は再現しない。
def addr_indirect(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    ptr, op_bytes = addr_absolute(state, bus)
    return AddressingResult(bus.read_word(ptr), op_bytes)

# @intent:responsibility Indexed Indirect Mode ($xx,X) - "Pre-indexed"
# @intent:note ゼロページ内でXを加算(ラップアラウンド)し、そこにあるポインタを読む。
def addr_indexed_indirect(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    base = fetch_byte(state, bus)
    ptr_addr = (base + state.x) & 0xFF
    return AddressingResult(read_zero_page_word(bus, ptr_addr), [base])

# @intent:responsibility Indirect Indexed Mode ($xx),Y - "Post-indexed"
# @intent:note オペランドのバイトそのものをゼロページポインタとして読み、Yを加算する。
def addr_indirect_indexed(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    ptr_addr = fetch_byte(state, bus)
    base_addr = read_zero_page_word(bus, ptr_addr)
    return AddressingResult((base_addr + state.y) & 0xFFFF, [ptr_addr])

def relative_target(next_pc: int, offset: int) -> int:
    if offset & 0x80:
        offset -= 0x100
    return (next_pc + offset) & 0xFFFF

# @intent:responsibility Relative Mode (Branch)
# @intent:note 戻り値のアドレスは「分岐先の絶対アドレス」。オペランドを読み進めた後のPCに符号付きオフセットを加算する。
def addr_relative(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    offset = fetch_byte(state, bus)
    return AddressingResult(relative_target(state.pc, offset), [offset])

# @intent:responsibility 未定義オペコード用。オペランドを消費せずアドレス0を返す。
def addr_illegal(state: Mos6502CpuState, bus: Bus) -> AddressingResult:
    return AddressingResult(0, [])


RESOLVERS: Dict[AddressingMode, AddrFunc] = {
    AddressingMode.IMPLIED: addr_implied,
    AddressingMode.ACCUMULATOR: addr_accumulator,
    AddressingMode.IMMEDIATE: addr_immediate,
    AddressingMode.ZERO_PAGE: addr_zeropage,
    AddressingMode.ZERO_PAGE_X: addr_zeropage_x,
    AddressingMode.ZERO_PAGE_Y: addr_zeropage_y,
    AddressingMode.ABSOLUTE: addr_absolute,
    AddressingMode.ABSOLUTE_X: addr_absolute_x,
    AddressingMode.ABSOLUTE_Y: addr_absolute_y,
    AddressingMode.INDEXED_INDIRECT: addr_indexed_indirect,
    AddressingMode.INDIRECT_INDEXED: addr_indirect_indexed,
    AddressingMode.INDIRECT: addr_indirect,
    AddressingMode.RELATIVE: addr_relative,
    AddressingMode.ILLEGAL: addr_illegal,
}

# @intent:responsibility 逆アセンブル用のオペランド文字列表現を生成する。
# @intent:pre-condition next_pcはオペランド直後のアドレス（relativeの分岐先計算に使用）。
def format_operand(mode: AddressingMode, operand_bytes: List[int], next_pc: int, bus: Bus) -> str:
    if mode is AddressingMode.ACCUMULATOR:
        return "A"
    if mode.operand_length == 0:
        return ""
    if mode is AddressingMode.RELATIVE:
        return f"${relative_target(next_pc, operand_bytes[0]):04X}"
    if mode.operand_length == 1:
        val = operand_bytes[0]
        return {
            AddressingMode.IMMEDIATE: f"#${val:02X}",
            AddressingMode.ZERO_PAGE: f"${val:02X}",
            AddressingMode.ZERO_PAGE_X: f"${val:02X},X",
            AddressingMode.ZERO_PAGE_Y: f"${val:02X},Y",
            AddressingMode.INDEXED_INDIRECT: f"(${val:02X},X)",
            AddressingMode.INDIRECT_INDEXED: f"(${val:02X}),Y",
        }[mode]
    addr = bus.compose_word(operand_bytes[0], operand_bytes[1])
    return {
        AddressingMode.ABSOLUTE: f"${addr:04X}",
        AddressingMode.ABSOLUTE_X: f"${addr:04X},X",
        AddressingMode.ABSOLUTE_Y: f"${addr:04X},Y",
        AddressingMode.INDIRECT: f"(${addr:04X})",
    }[mode]
