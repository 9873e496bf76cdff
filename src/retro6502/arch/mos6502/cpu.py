# src/retro6502/arch/mos6502/cpu.py
"""
MOS 6502 CPUエミュレーションの中心モジュール。
"""
from typing import Dict, List

from retro6502.common.types import DisassemblyLine, RegisterLayoutInfo, RegisterInfo
from retro6502.core.cpu import AbstractCpu
from retro6502.core.snapshot import Operation
from retro6502.transport.bus import Bus
from retro6502.arch.mos6502.state import Mos6502CpuState, FLAG_NAMES
from retro6502.arch.mos6502.instructions.maps import decode_opcode, execute_instruction
from retro6502.arch.mos6502 import disassembler

DEFAULT_RESET_ADDRESS = 0x0600
RESET_VECTOR = 0xFFFC

# @intent:responsibility MOS 6502 CPUの具体的なエミュレーションロジックを提供する。
class Mos6502Cpu(AbstractCpu):
    """
    MOS 6502 CPUをエミュレートするクラス。

    リセット時はPC=reset_address, SP=0xFF, A=X=Y=0, P=0 となる。
    use_reset_vectorが有効な場合のみ、PCを $FFFC のリセットベクタから読み込む。
    """
    def __init__(self, bus: Bus, reset_address: int = DEFAULT_RESET_ADDRESS, use_reset_vector: bool = False):
        self._reset_address = reset_address & 0xFFFF
        self._use_reset_vector = use_reset_vector
        super().__init__(bus)
        self.reset()

    # @intent:responsibility MOS 6502の初期状態を生成する。
    def _create_initial_state(self) -> Mos6502CpuState:
        return Mos6502CpuState(pc=self._reset_address, sp=0xFF, a=0, x=0, y=0, p=0)

    # @intent:responsibility リセット処理。必要に応じてリセットベクタからPCをロードする。
    def reset(self) -> None:
        super().reset()
        if self._use_reset_vector:
            self._state.pc = self._bus.read_word(RESET_VECTOR)
            self._bus.get_and_clear_activity_log()

    # @intent:responsibility 命令フェッチ。オペコードを読みPCを1進める。
    def _fetch(self) -> int:
        opcode = self._bus.read(self._state.pc)
        self._state.pc = (self._state.pc + 1) & 0xFFFF
        return opcode

    # @intent:responsibility 命令デコード。アドレッシングモードを解決しPCをオペランド分進める。
    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode, self._state, self._bus)

    # @intent:responsibility 命令実行。ハンドラは状態を直接更新する。
    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._bus)

    def _copy_state(self) -> Mos6502CpuState:
        return self._state.copy()

    # @intent:responsibility レジスタマップ（診断出力用）を返す。
    # @intent:note Sは物理アドレスではなくスタックページ内の8bitオフセットのまま返す。
    def get_register_map(self) -> Dict[str, int]:
        state = self._state
        return {
            "A": state.a,
            "X": state.x,
            "Y": state.y,
            "PC": state.pc,
            "S": state.sp,
            "P": state.p
        }

    # @intent:responsibility フラグ状態を C Z I D B - V N の順（ビット0から）で返す。
    def get_flag_state(self) -> Dict[str, bool]:
        p = self._state.p
        return {name: (p >> bit) & 1 == 1 for bit, name in enumerate(FLAG_NAMES)}

    # @intent:responsibility レジスタレイアウト定義を返す。
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("Registers", [
                RegisterInfo("A", 8),
                RegisterInfo("X", 8),
                RegisterInfo("Y", 8),
                RegisterInfo("P", 8)
            ]),
            RegisterLayoutInfo("Pointers", [
                RegisterInfo("PC", 16),
                RegisterInfo("S", 8)
            ])
        ]

    # @intent:responsibility 指定範囲の逆アセンブル結果を返す。
    def disassemble(self, start_addr: int, length: int) -> List[DisassemblyLine]:
        return disassembler.disassemble(self._bus, start_addr, length)
