"""
例外階層の定義。

命令単位の異常（未定義オペコードなど）は実行ループ内で吸収されるため、
ここで定義される例外が呼び出し元へ伝播するのはストア確保失敗、
範囲外アドレスアクセス、設定不備の場合に限られます。
"""


class Retro6502Error(Exception):
    """Base error for the emulator."""


# @intent:responsibility メモリストアを要求容量で確保できなかったことを表す（プロセス致命的）。
class ResourceExhaustedError(Retro6502Error, MemoryError):
    """Raised when the memory store cannot be allocated."""


# @intent:responsibility マップされていない、または容量外のアドレスへのアクセスを表す。
# @intent:note IndexErrorとしても捕捉できる。
class AddressOutOfRangeError(Retro6502Error, IndexError):
    """Raised for byte or word access outside the mapped address range."""


class ConfigError(Retro6502Error, ValueError):
    """Raised when a system configuration value is malformed."""
