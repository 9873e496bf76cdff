# retro6502/loader/loader.py
"""
コードローダーモジュール。
ヘッダを持たない生バイナリイメージを、指定アドレスからそのままバスへ展開します。
"""
import logging
from typing import Optional, Tuple

from retro6502.transport.bus import ADDRESS_SPACE_SIZE, Bus, RAM

logger = logging.getLogger(__name__)

DEFAULT_LOAD_ADDRESS = 0x0600

class BinaryLoader:
    """
    生バイナリ（ヘッダなし）のプログラムイメージをバスにロードするローダー。
    マップされた領域を超える部分はコピーされず、ロードされなかった領域はゼロのまま残ります。
    """
    # @intent:responsibility ファイルを読み込み、load_addressから展開する。
    # @intent:post-condition ファイルが存在しない・読めない場合は警告をログに残し0を返す（メモリは変更しない）。
    def load_binary(self, file_path: str, bus: Bus, load_address: int = DEFAULT_LOAD_ADDRESS) -> int:
        try:
            with open(file_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            logger.warning("Could not read program image %s: %s", file_path, e)
            return 0

        copied = self.load_bytes(data, bus, load_address)
        logger.info("Loaded %d bytes from %s at $%04X", copied, file_path, load_address)
        return copied

    # @intent:responsibility メモリ上のイメージをload_addressから展開し、コピーしたバイト数を返す。
    def load_bytes(self, data: bytes, bus: Bus, load_address: int = DEFAULT_LOAD_ADDRESS) -> int:
        copied = 0
        address = load_address
        while copied < len(data) and address < ADDRESS_SPACE_SIZE:
            region = self._find_region(bus, address)
            if region is None:
                break
            start, end, device = region
            chunk = data[copied:copied + (end - address + 1)]
            count = device.load(address - start, chunk)
            copied += count
            address += count

        if copied < len(data):
            logger.warning("Program image truncated: %d of %d bytes copied", copied, len(data))
        return copied

    def _find_region(self, bus: Bus, address: int) -> Optional[Tuple[int, int, RAM]]:
        for start, end, device in bus.get_memory_map():
            if start <= address <= end:
                return start, end, device
        return None
