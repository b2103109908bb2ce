#  Copyright (c) Kuba Szczodrzyński 2021-5-5.

import struct
from typing import Iterable, Union

from .words import WORD_MASK


def to_bytes(
    data: Union[str, bytes, bytearray, memoryview, Iterable[int]],
    encoding: str = "utf-8",
) -> bytes:
    """Turn text or any bytes-like value into ``bytes`` for the cipher."""
    if isinstance(data, str):
        return data.encode(encoding)
    return bytes(data)


def counter_nonce(counter: int, byteorder: str = "big") -> bytes:
    """Pack a per-message counter into a 4-byte nonce."""
    if not 0 <= counter <= WORD_MASK:
        raise ValueError("Nonce counter out of range: {}".format(counter))
    if byteorder == "big":
        return struct.pack(">I", counter)
    if byteorder == "little":
        return struct.pack("<I", counter)
    raise ValueError("Unknown byte order: {}".format(byteorder))
