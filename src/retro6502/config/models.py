from dataclasses import dataclass, field
from typing import Dict, List, Optional

@dataclass
class MemoryRegion:
    start: int
    end: int
    type: str = "RAM"  # 未知の種別はRAMとして扱う
    label: str = ""

@dataclass
class ProgramImage:
    path: Optional[str] = "data.bin"
    load_address: int = 0x0600

@dataclass
class CpuInitialState:
    pc: int = 0x0600  # リセットアドレス
    sp: int = 0xFF
    use_reset_vector: bool = False
    registers: Dict[str, int] = field(default_factory=dict)

@dataclass
class RunConfig:
    cycles: int = 1000

def _default_memory_map() -> List[MemoryRegion]:
    return [MemoryRegion(start=0x0000, end=0xFFFF, type="RAM", label="main")]

# @intent:responsibility システム構成全体。デフォルト値は64KiB RAM・$0600ロード・1000サイクル実行の基準構成と一致する。
@dataclass
class SystemConfig:
    architecture: str = "MOS6502"
    endianness: str = "little"  # "little" | "big"
    memory_map: List[MemoryRegion] = field(default_factory=_default_memory_map)
    program: ProgramImage = field(default_factory=ProgramImage)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
    run: RunConfig = field(default_factory=RunConfig)
