import logging
from typing import Any, Dict, List, Optional

import yaml

from retro6502.common.errors import ConfigError
from .models import SystemConfig, MemoryRegion, ProgramImage, CpuInitialState, RunConfig

logger = logging.getLogger(__name__)

SUPPORTED_ARCHITECTURES = ("MOS6502",)
SUPPORTED_ENDIANNESS = ("little", "big")

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r', encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return self.parse(data)

    def load_from_string(self, text: str) -> SystemConfig:
        return self.parse(yaml.safe_load(text))

    # @intent:responsibility YAMLから得た辞書をSystemConfigに変換する。省略されたキーは基準構成の値になる。
    def parse(self, data: Optional[Dict[str, Any]]) -> SystemConfig:
        if data is None:
            return SystemConfig()
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping, got {type(data).__name__}")

        defaults = SystemConfig()

        arch = str(data.get("architecture", defaults.architecture)).upper()
        if arch not in SUPPORTED_ARCHITECTURES:
            raise ConfigError(f"Unsupported architecture: {arch}")

        endianness = str(data.get("endianness", defaults.endianness)).lower()
        if endianness not in SUPPORTED_ENDIANNESS:
            raise ConfigError(f"Unsupported endianness: {endianness}")

        # Parse Memory Map
        if "memory_map" in data:
            memory_map = []
            for region_data in data["memory_map"] or []:
                if not isinstance(region_data, dict):
                    raise ConfigError(f"memory_map entry must be a mapping, got {region_data!r}")
                region = MemoryRegion(
                    start=self._parse_int(region_data.get("start"), "memory_map.start"),
                    end=self._parse_int(region_data.get("end"), "memory_map.end"),
                    type=str(region_data.get("type", "RAM")).upper(),
                    label=region_data.get("label", "")
                )
                self._validate_region(region, memory_map)
                memory_map.append(region)
        else:
            memory_map = defaults.memory_map

        # Parse Program Image
        program_data = data.get("program", {})
        if program_data is None:
            program = ProgramImage(path=None)
        else:
            program = ProgramImage(
                path=program_data.get("path", defaults.program.path),
                load_address=self._parse_int(
                    program_data.get("load_address", defaults.program.load_address), "program.load_address")
            )

        # Parse Initial State
        initial_state_data = data.get("initial_state") or {}
        registers = {
            str(name).lower(): self._parse_int(value, f"initial_state.registers.{name}")
            for name, value in (initial_state_data.get("registers") or {}).items()
        }
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", defaults.initial_state.pc), "initial_state.pc"),
            sp=self._parse_int(initial_state_data.get("sp", defaults.initial_state.sp), "initial_state.sp"),
            use_reset_vector=self._parse_bool(
                initial_state_data.get("use_reset_vector", False), "initial_state.use_reset_vector"),
            registers=registers
        )

        run_data = data.get("run") or {}
        run = RunConfig(cycles=self._parse_int(run_data.get("cycles", defaults.run.cycles), "run.cycles"))

        return SystemConfig(
            architecture=arch,
            endianness=endianness,
            memory_map=memory_map,
            program=program,
            initial_state=initial_state,
            run=run
        )

    # @intent:pre-condition 領域は0x0000-0xFFFF内で start <= end、かつ既存の領域と重ならないこと。
    def _validate_region(self, region: MemoryRegion, existing: List[MemoryRegion]) -> None:
        if not (0x0000 <= region.start <= region.end <= 0xFFFF):
            raise ConfigError(
                f"Invalid memory_map range {region.start:#06x}-{region.end:#06x}: "
                "start must be <= end and within 0x0000-0xFFFF")
        for other in existing:
            if region.start <= other.end and other.start <= region.end:
                raise ConfigError(
                    f"memory_map range {region.start:#06x}-{region.end:#06x} overlaps "
                    f"{other.start:#06x}-{other.end:#06x}")

    def _parse_bool(self, value: Any, key: str) -> bool:
        # YAMLの真偽値のみ受け付ける（"false" などの文字列は不可）
        if isinstance(value, bool):
            return value
        raise ConfigError(f"Invalid boolean for {key}: {value!r}")

    def _parse_int(self, value: Any, key: str = "value") -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format for {key}: {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                if text.lower().startswith("0x"):
                    return int(text, 16)
                return int(text)
            except ValueError as e:
                raise ConfigError(f"Invalid integer format for {key}: {value!r}") from e
        raise ConfigError(f"Invalid integer format for {key}: {value!r}")
