# retro6502/transport/bus.py
"""
Transport Layer (共通バス)

このモジュールは、16bitアドレス空間を抽象化し、読み書きアクセスを
適切なデバイス（メモリストア）に委譲する責務を負います。
ワードアクセスのエンディアンはバス単位で設定され、全てのワードアクセスで一貫して使用されます。
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from retro6502.common.errors import AddressOutOfRangeError, ResourceExhaustedError

logger = logging.getLogger(__name__)

ADDRESS_SPACE_SIZE = 0x10000

# @intent:responsibility ワードアクセス時のバイト順を定義します。
class Endianness(Enum):
    LITTLE = "little"
    BIG = "big"

# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 個々のバスアクセス操作を記録します。
@dataclass(frozen=True) # 不変データ構造
class BusAccess:
    """
    バス上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int # 8bit value
    access_type: BusAccessType

# @intent:responsibility バスの抽象デバイスインターフェースを定義します。
class Device(ABC):
    """
    バスに接続されるデバイスの抽象基底クラス。
    全てのデバイスはreadとwriteのインターフェースを実装する必要があります。
    """
    # @intent:responsibility 指定されたオフセットから8bitのデータを読み出す責務を負います。
    @abstractmethod
    def read(self, address: int) -> int:
        """
        指定されたアドレスから8bitのデータを読み出します。
        アドレスはデバイス内でのオフセットとして扱われます。
        """
        pass

    # @intent:responsibility 指定されたオフセットに8bitのデータを書き込みます。
    @abstractmethod
    def write(self, address: int, data: int) -> None:
        """
        指定されたアドレスに8bitのデータを書き込みます。
        アドレスはデバイス内でのオフセットとして扱われます。
        """
        pass

    @abstractmethod
    def get_size(self) -> int:
        pass

# @intent:responsibility 固定容量のフラットなメモリストアを提供します。
class RAM(Device):
    """
    バイト単位でアドレス指定可能な固定容量のメモリストア。
    確保時にゼロクリアされ、容量は生成後に変化しません。
    """
    # @intent:responsibility 指定されたサイズのメモリ領域を確保し、ゼロで初期化します。
    # @intent:pre-condition sizeは正の整数である必要があります。
    def __init__(self, size: int):
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        try:
            self._memory = bytearray(size)
        except MemoryError as e:
            raise ResourceExhaustedError(f"Failed to allocate {size} bytes of memory.") from e
        self._size = size
        logger.info("%d bytes allocated", size)

    def _check(self, address: int) -> None:
        if not 0 <= address < self._size:
            raise AddressOutOfRangeError(f"Address {address:#06x} out of bounds for RAM of size {self._size}.")

    def read(self, address: int) -> int:
        self._check(address)
        return self._memory[address]

    # @intent:pre-condition データは8bit値である必要があります。
    def write(self, address: int, data: int) -> None:
        self._check(address)
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data

    def get_size(self) -> int:
        return self._size

    # @intent:responsibility 全領域をゼロで埋めます。
    def clear(self) -> None:
        self._memory[:] = bytes(self._size)

    # @intent:responsibility バイト列をそのままコピーします。容量を超える部分は捨てられます。
    def load(self, address: int, data: bytes) -> int:
        """
        offset `address` から `data` をコピーし、実際にコピーしたバイト数を返します。
        """
        self._check(address)
        count = min(len(data), self._size - address)
        self._memory[address:address + count] = data[:count]
        return count

# @intent:responsibility メモリアドレス空間を管理し、デバイスへのアクセスをディスパッチする共通バス。
# @intent:note 全てのアクセスはログに記録され、1命令分がSnapshotのbus_activityになります。
class Bus:
    """
    メモリアドレス空間を管理し、デバイスへのアクセスをディスパッチする共通バス。
    バイト/ワード単位のアクセスと、バス上で行われた全てのアクセスの記録機能を提供します。
    """
    def __init__(self, endianness: Endianness = Endianness.LITTLE):
        # メモリマップ: (start_address, end_address, device) のタプルリスト
        self._memory_map: List[Tuple[int, int, Device]] = []
        self._bus_activity_log: List[BusAccess] = []
        self._endianness = endianness

    @property
    def endianness(self) -> Endianness:
        return self._endianness

    def _log_access(self, address: int, data: int, access_type: BusAccessType) -> None:
        self._bus_activity_log.append(BusAccess(address=address, data=data, access_type=access_type))

    # @intent:responsibility 記録されたバスアクティビティログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._bus_activity_log
        self._bus_activity_log = []
        return log

    # @intent:responsibility 指定されたアドレス範囲にデバイスを登録します。
    # @intent:pre-condition start_address <= end_addressかつ16bit空間内であり、デバイスサイズは範囲と一致する必要があります。
    # @intent:note アドレス範囲の重複チェックは行いません。呼び出し元（SystemBuilder）が責任を持ちます。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        if not (0 <= start_address <= end_address < ADDRESS_SPACE_SIZE):
            raise ValueError("Invalid address range: start_address must be <= end_address and within 0x0000-0xFFFF.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")

        expected_size = end_address - start_address + 1
        if device.get_size() != expected_size:
            raise ValueError(
                f"Registered {type(device).__name__} device size ({device.get_size()} bytes) does not match "
                f"the specified address range size ({expected_size} bytes)."
            )
        self._memory_map.append((start_address, end_address, device))

    def get_memory_map(self) -> List[Tuple[int, int, Device]]:
        return list(self._memory_map)

    # @intent:post-condition デバイスが見つからなかった場合、AddressOutOfRangeErrorを発生させます。
    def _find_device(self, address: int) -> Tuple[Device, int]:
        for start, end, device in self._memory_map:
            if start <= address <= end:
                return device, address - start
        raise AddressOutOfRangeError(f"Address {address:#06x} not mapped to any device.")

    def read(self, address: int) -> int:
        """
        指定されたアドレスから8bitのデータを読み出します。
        アクセスはログに記録されます。
        """
        device, offset = self._find_device(address)
        data = device.read(offset)
        self._log_access(address, data, BusAccessType.READ)
        return data

    # @intent:responsibility ログを記録せずに読み出します（診断出力・逆アセンブル用）。
    def peek(self, address: int) -> int:
        device, offset = self._find_device(address)
        return device.read(offset)

    def write(self, address: int, data: int) -> None:
        device, offset = self._find_device(address)
        device.write(offset, data)
        self._log_access(address, data, BusAccessType.WRITE)

    # --- Word access ---

    # @intent:responsibility 連続する2バイトを設定されたエンディアンで16bit値に組み立てます。
    def compose_word(self, first: int, second: int) -> int:
        if self._endianness is Endianness.LITTLE:
            return first | (second << 8)
        return second | (first << 8)

    # @intent:responsibility 16bit値を設定されたエンディアンで (first, second) の2バイトに分解します。
    def split_word(self, value: int) -> Tuple[int, int]:
        lo = value & 0xFF
        hi = (value >> 8) & 0xFF
        if self._endianness is Endianness.LITTLE:
            return lo, hi
        return hi, lo

    # @intent:note 2バイト目のアドレスは16bit空間内でラップアラウンドします。
    def read_word(self, address: int) -> int:
        first = self.read(address)
        second = self.read((address + 1) & 0xFFFF)
        return self.compose_word(first, second)

    def peek_word(self, address: int) -> int:
        return self.compose_word(self.peek(address), self.peek((address + 1) & 0xFFFF))

    def write_word(self, address: int, value: int) -> None:
        first, second = self.split_word(value)
        self.write(address, first)
        self.write((address + 1) & 0xFFFF, second)
