# retro6502/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令の実行結果（CPU状態、命令の詳細、バスアクセス）を記録した
不変のデータ構造を定義します。診断出力とテストでの状態検証に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from retro6502.core.state import CpuState
from retro6502.transport.bus import BusAccess


# @intent:responsibility 実行された命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    実行された命令の詳細（オペコード、ニーモニック、オペランド、実効アドレス）を記録するデータクラス。
    """
    opcode: int # 例: 0x4C
    mnemonic: str # 例: "JMP"
    mode: str = "implied" # アドレッシングモード名
    operands: List[str] = field(default_factory=list) # 例: ["$1234"]
    operand_bytes: List[int] = field(default_factory=list) # 生のオペランドバイト
    address: Optional[int] = None # 解決された実効アドレス (implied/accumulatorではNone)
    cycle_count: int = 0 # 命令実行に必要なサイクル数
    length: int = 1 # 命令のバイト長

    @property
    def opcode_hex(self) -> str:
        return f"{self.opcode:02X}"

    @property
    def text(self) -> str:
        if self.operands:
            return f"{self.mnemonic} " + ", ".join(self.operands)
        return self.mnemonic

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    """
    実行に関するメタデータ（累計サイクル数、逆アセンブル表記）を記録するデータクラス。
    """
    cycle_count: int
    disassembly: Optional[str] = None # 例: "$0600: JMP $1234"

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    1命令実行直後のCPU状態と、その命令で発生したバスアクセスを記録した不変のデータ構造。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)

    # @intent:invariant stateは実行後状態のコピーであり、後続の命令実行で変化しない。
