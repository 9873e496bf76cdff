# tests/transport/test_bus.py
"""
retro6502.transport.busモジュールの単体テスト。
"""
import pytest
from unittest import mock

from retro6502.common.errors import AddressOutOfRangeError, ResourceExhaustedError
from retro6502.transport.bus import Bus, BusAccess, BusAccessType, Device, Endianness, RAM

# @intent:test_suite メモリストアと共通バスの基本的な機能とエラーハンドリングを検証します。

class TestRAM:
    """
    RAMデバイスの単体テスト。
    """
    # @intent:test_case_init RAMクラスが正しいサイズで初期化され、ゼロクリアされていることを検証します。
    def test_ram_init_valid_size(self):
        ram = RAM(16)
        assert ram.get_size() == 16
        assert all(ram.read(i) == 0 for i in range(16))

    # @intent:test_case_init 無効なサイズでRAMを初期化するとValueErrorが発生することを検証します。
    @pytest.mark.parametrize("size", [0, -1, 1.5, True])
    def test_ram_init_invalid_size(self, size):
        with pytest.raises(ValueError, match="RAM size must be a positive integer."):
            RAM(size)

    # @intent:test_case_init 確保失敗はResourceExhaustedErrorとして通知されることを検証します。
    def test_ram_allocation_failure(self):
        with mock.patch("retro6502.transport.bus.bytearray", side_effect=MemoryError, create=True):
            with pytest.raises(ResourceExhaustedError):
                RAM(0x10000)

    # @intent:test_case_init ResourceExhaustedErrorはMemoryErrorとしても捕捉できることを検証します。
    def test_resource_exhausted_is_memory_error(self):
        assert issubclass(ResourceExhaustedError, MemoryError)

    # @intent:test_case_rw 境界内でRAMへの読み書きが正しく行われることを検証します。
    def test_ram_read_write_within_bounds(self):
        ram = RAM(4)
        for offset, value in enumerate([0x12, 0x34, 0x56, 0x78]):
            ram.write(offset, value)
        assert [ram.read(i) for i in range(4)] == [0x12, 0x34, 0x56, 0x78]

    # @intent:test_case_oob 境界外アドレスへのアクセス時にAddressOutOfRangeError(IndexError)が発生することを検証します。
    def test_ram_read_write_out_of_bounds(self):
        ram = RAM(4)
        with pytest.raises(AddressOutOfRangeError):
            ram.read(4)
        with pytest.raises(IndexError):
            ram.write(-1, 0x00)

    # @intent:test_case_data 8bitを超える値の書き込みはValueErrorになることを検証します。
    def test_ram_write_invalid_data(self):
        ram = RAM(1)
        with pytest.raises(ValueError, match="Data 256 is not an 8-bit value."):
            ram.write(0, 0x100)
        with pytest.raises(ValueError, match="Data -1 is not an 8-bit value."):
            ram.write(0, -1)

    # @intent:test_case_load ロードは容量で打ち切られ、コピーしたバイト数を返すことを検証します。
    def test_ram_load_truncates_at_capacity(self):
        ram = RAM(8)
        assert ram.load(6, b"\x01\x02\x03\x04") == 2
        assert ram.read(6) == 0x01
        assert ram.read(7) == 0x02

    def test_ram_clear(self):
        ram = RAM(4)
        ram.load(0, b"\xAA\xBB\xCC\xDD")
        ram.clear()
        assert all(ram.read(i) == 0 for i in range(4))


class TestBus:
    """
    Busの単体テスト。
    """
    @pytest.fixture
    def bus(self):
        bus = Bus()
        bus.register_device(0x0000, 0xFFFF, RAM(0x10000))
        return bus

    # @intent:test_case_rw バスを介した読み書きがデバイスへ委譲されることを検証します。
    def test_read_write(self, bus):
        bus.write(0x1234, 0xAB)
        assert bus.read(0x1234) == 0xAB

    # @intent:test_case_log 読み書きがアクティビティログに記録され、取得時にクリアされることを検証します。
    def test_activity_log(self, bus):
        bus.write(0x0010, 0x42)
        bus.read(0x0010)
        log = bus.get_and_clear_activity_log()
        assert log == [
            BusAccess(0x0010, 0x42, BusAccessType.WRITE),
            BusAccess(0x0010, 0x42, BusAccessType.READ),
        ]
        assert bus.get_and_clear_activity_log() == []

    # @intent:test_case_log peekはログに残らないことを検証します。
    def test_peek_is_not_logged(self, bus):
        bus.write(0x0300, 0x99)
        bus.get_and_clear_activity_log()
        assert bus.peek(0x0300) == 0x99
        assert bus.peek_word(0x0300) == 0x0099
        assert bus.get_and_clear_activity_log() == []

    # @intent:test_case_word リトルエンディアンでのワードの読み書きを検証します。
    def test_word_little_endian(self, bus):
        bus.write_word(0x2000, 0xBEEF)
        assert bus.read(0x2000) == 0xEF
        assert bus.read(0x2001) == 0xBE
        assert bus.read_word(0x2000) == 0xBEEF

    # @intent:test_case_word ビッグエンディアンでのワードの読み書きを検証します。
    def test_word_big_endian(self):
        bus = Bus(Endianness.BIG)
        bus.register_device(0x0000, 0xFFFF, RAM(0x10000))
        bus.write_word(0x2000, 0xBEEF)
        assert bus.read(0x2000) == 0xBE
        assert bus.read(0x2001) == 0xEF
        assert bus.read_word(0x2000) == 0xBEEF
        assert bus.compose_word(0x12, 0x34) == 0x1234
        assert bus.split_word(0x1234) == (0x12, 0x34)

    # @intent:test_case_word ワードの2バイト目は$FFFFから$0000へラップアラウンドすることを検証します。
    def test_word_wraps_at_top_of_address_space(self, bus):
        bus.write(0xFFFF, 0x34)
        bus.write(0x0000, 0x12)
        assert bus.read_word(0xFFFF) == 0x1234

    # @intent:test_case_oob マップされていないアドレスはAddressOutOfRangeErrorになることを検証します。
    def test_unmapped_address(self):
        bus = Bus()
        bus.register_device(0x0000, 0x00FF, RAM(0x100))
        with pytest.raises(AddressOutOfRangeError, match="not mapped"):
            bus.read(0x0100)
        with pytest.raises(AddressOutOfRangeError):
            bus.write_word(0x00FF, 0x1234)

    # @intent:test_case_map 複数デバイスへのアクセスがオフセット変換されて委譲されることを検証します。
    def test_multiple_devices(self):
        bus = Bus()
        low, high = RAM(0x100), RAM(0x100)
        bus.register_device(0x0000, 0x00FF, low)
        bus.register_device(0x1000, 0x10FF, high)
        bus.write(0x1005, 0x77)
        assert high.read(0x05) == 0x77
        assert low.read(0x05) == 0x00
        assert [start for start, _, _ in bus.get_memory_map()] == [0x0000, 0x1000]

    # @intent:test_case_map Device以外の登録はTypeErrorになることを検証します。
    def test_register_non_device(self):
        bus = Bus()
        with pytest.raises(TypeError):
            bus.register_device(0x0000, 0x000F, object())

    # @intent:test_case_map 独自のDevice実装もバスに接続できることを検証します。
    def test_custom_device(self):
        class Latch(Device):
            def __init__(self):
                self.value = 0

            def read(self, address):
                return self.value

            def write(self, address, data):
                self.value = data

            def get_size(self):
                return 1

        bus = Bus()
        latch = Latch()
        bus.register_device(0x8000, 0x8000, latch)
        bus.write(0x8000, 0x5A)
        assert latch.value == 0x5A
        assert bus.read(0x8000) == 0x5A
