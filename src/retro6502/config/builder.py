import logging
from typing import Tuple

from retro6502.transport.bus import Bus, Endianness, RAM
from retro6502.arch.mos6502.cpu import Mos6502Cpu
from retro6502.loader.loader import BinaryLoader
from .models import SystemConfig, CpuInitialState

logger = logging.getLogger(__name__)

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig) -> Tuple[Mos6502Cpu, Bus]:
        bus = Bus(Endianness(config.endianness))

        for region in config.memory_map:
            size = region.end - region.start + 1
            if region.type != "RAM":
                logger.warning("Unknown device type '%s' for range %04X-%04X, defaulting to RAM",
                               region.type, region.start, region.end)
            bus.register_device(region.start, region.end, RAM(size))

        # リセットベクタがイメージ内にある場合に備え、CPU生成（リセット）より先にロードする
        if config.program.path:
            BinaryLoader().load_binary(config.program.path, bus, config.program.load_address)

        cpu = Mos6502Cpu(bus,
                         reset_address=config.initial_state.pc,
                         use_reset_vector=config.initial_state.use_reset_vector)

        # 初期状態の適用
        self.apply_initial_state(cpu, config.initial_state)

        return cpu, bus

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: Mos6502Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定されたSPとレジスタ値を適用します。
        PCはリセット処理（reset_addressまたはリセットベクタ）で決定済みです。
        """
        cpu.reset()
        state = cpu.get_state()
        state.sp = config_state.sp & 0xFF

        for reg_name, value in config_state.registers.items():
            if reg_name in ("a", "x", "y", "p"):
                setattr(state, reg_name, value & 0xFF)
            else:
                logger.warning("Ignoring unknown register '%s' in initial state", reg_name)

        cpu.restore_state(state)
