# retro6502/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクル（フェッチ→デコード→実行）の駆動、
およびサイクル予算付きの実行ループを提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List

from retro6502.transport.bus import Bus
from retro6502.core.snapshot import Snapshot, Operation, Metadata
from retro6502.core.state import CpuState
from retro6502.common.types import DisassemblyLine, RegisterLayoutInfo

logger = logging.getLogger(__name__)

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    CPUエミュレーションの基底となる抽象クラス。
    Busとのインターフェース、基本的な状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:responsibility CPUの状態とバスへの参照を初期化します。
    # @intent:pre-condition `bus`は有効なBusオブジェクトである必要があります。CPUはバスを所有しません。
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._cycle_count: int = 0

    # @intent:responsibility 初期状態のCpuStateオブジェクトを生成します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        具体的なCPUアーキテクチャはこのメソッドを実装し、
        そのアーキテクチャに特化したCpuStateのサブクラスを返します。
        """
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._cycle_count = 0

    # @intent:responsibility 現在のCPUの状態（コピー）を返します。
    # @intent:post-condition 返り値を変更してもCPU内部の状態には影響しません。
    def get_state(self) -> CpuState:
        return self._copy_state()

    # @intent:responsibility 外部から与えられた状態でCPUの状態を置き換えます。
    def restore_state(self, state: CpuState) -> None:
        self._state = state

    @property
    def cycle_count(self) -> int:
        """リセット以降に消費した累計サイクル数。"""
        return self._cycle_count

    @property
    def bus(self) -> Bus:
        return self._bus

    # @intent:responsibility 診断・テスト用のメモリ読み書きパススルー。
    def read_byte(self, address: int) -> int:
        return self._bus.read(address & 0xFFFF)

    def write_byte(self, address: int, value: int) -> None:
        self._bus.write(address & 0xFFFF, value & 0xFF)

    # @intent:responsibility PCの位置からオペコードをフェッチし、PCを1進めます。
    @abstractmethod
    def _fetch(self) -> int:
        pass

    # @intent:responsibility オペコードのアドレッシングモードを解決し、Operationオブジェクトに変換します。
    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        """
        与えられたオペコードのオペランドを命令ストリームから読み取り（PCを進めながら）、
        実効アドレスを含むOperationオブジェクトとして返します。
        """
        pass

    # @intent:responsibility デコードされた命令を実行し、CPUの状態を更新します。
    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    # @intent:responsibility 1命令を実行し、サイクル数を加算します。
    # @intent:flow ログクリア → フェッチ → デコード → 実行 → サイクル加算 の順で処理します。
    def _run_instruction(self) -> Operation:
        self._bus.get_and_clear_activity_log()
        initial_pc = self._state.pc

        opcode = self._fetch()
        operation = self._decode(opcode)
        self._execute(operation)
        self._cycle_count += operation.cycle_count

        if logger.isEnabledFor(logging.DEBUG):
            raw = " ".join(f"{b:02X}" for b in [operation.opcode, *operation.operand_bytes])
            regs = " ".join(f"{name}:{value:02X}" for name, value in self.get_register_map().items())
            logger.debug("%04X  %-8s  %-14s %s", initial_pc, raw, operation.text, regs)
        return operation

    # @intent:responsibility CPUを1命令進め、その結果のスナップショットを返します。
    def step_instruction(self) -> Snapshot:
        initial_pc = self._state.pc
        operation = self._run_instruction()
        bus_activity = self._bus.get_and_clear_activity_log()

        return Snapshot(
            state=self._copy_state(),
            operation=operation,
            metadata=Metadata(cycle_count=self._cycle_count,
                              disassembly=f"${initial_pc:04X}: {operation.text}"),
            bus_activity=bus_activity
        )

    # @intent:responsibility 累計サイクルが予算に達するまで命令を実行します。
    # @intent:post-condition 命令の途中で中断することはなく、最後の1命令分だけ予算を超過し得ます。
    def step(self, cycle_budget: int) -> int:
        """
        `cycle_budget` サイクルに達するか超えるまで命令を実行し、この呼び出しで消費したサイクル数を返します。
        予算が0以下の場合は何も実行しません。
        """
        consumed = 0
        while consumed < cycle_budget:
            operation = self._run_instruction()
            consumed += operation.cycle_count
        return consumed

    @abstractmethod
    def _copy_state(self) -> CpuState:
        pass

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        診断出力がCPUの内部構造を知らなくても値を表示できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        """
        現在のフラグ（ステータスレジスタ）の各ビットの状態を、ビット0から順に辞書形式で返す。
        """
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[DisassemblyLine]:
        """
        指定されたメモリ範囲を逆アセンブルし、(address, hex_bytes, text) のタプルリストを返す。
        """
        pass
