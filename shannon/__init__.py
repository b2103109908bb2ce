#  Copyright (c) Kuba Szczodrzyński 2021-5-5.

from .codec import counter_nonce, to_bytes
from .errors import (
    BufferLengthError,
    KeyNotSetError,
    SessionFinishedError,
    ShannonError,
)
from .shannon import Shannon
from .words import MAC_LENGTH

__all__ = [
    "Shannon",
    "ShannonError",
    "KeyNotSetError",
    "SessionFinishedError",
    "BufferLengthError",
    "counter_nonce",
    "to_bytes",
    "MAC_LENGTH",
]
