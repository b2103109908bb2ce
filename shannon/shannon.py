#  Copyright (c) Kuba Szczodrzyński 2021-5-5.

import hmac
import logging
from typing import List, MutableSequence, Optional, Tuple, Union

from .errors import BufferLengthError, KeyNotSetError, SessionFinishedError
from .words import (
    FOLD,
    INITKONST,
    KEYP,
    MAC_LENGTH,
    N,
    WORD_MASK,
    pack4,
    rotate_left,
    sbox,
    sbox2,
    shift4,
)

Buffer = Union[bytes, bytearray, memoryview, List[int]]
Result = Union[bytes, bytearray, memoryview, List[int]]


def _is_mutable(buf: Buffer) -> bool:
    if isinstance(buf, memoryview):
        return not buf.readonly and buf.ndim == 1 and buf.format == "B"
    return isinstance(buf, (bytearray, list))


class Shannon:
    """
    Shannon stream cipher with a built-in MAC.

    One instance holds the state of one session. ``set_key`` loads a key and
    saves the resulting register, ``set_nonce`` restarts from that saved
    register with new nonce material, the streaming operations consume input
    in pieces of any size, and ``finish`` produces the tag.

    A ``bytearray``, a list of ints or a writable byte ``memoryview`` is
    transformed in place and returned as is; read-only input such as
    ``bytes`` is copied and returned as ``bytes`` of the same length.
    """

    logger = logging.getLogger("Shannon:Cipher")

    R: List[int]
    CRC: List[int]
    initR: List[int]
    konst: int
    sbuf: int
    mbuf: int
    nbuf: int

    def __init__(self, key: Optional[bytes] = None, legacy_tail: bool = False) -> None:
        self.R = [0x00] * N
        self.CRC = [0x00] * N
        self.initR = [0x00] * N
        self.konst = 0
        self.sbuf = 0
        self.mbuf = 0
        self.nbuf = 0
        self.legacy_tail = legacy_tail
        self._keyed = False
        self._finished = False

        if key is not None:
            self.set_key(key)

    def _cycle(self) -> None:
        t = self.R[12] ^ self.R[13] ^ self.konst
        t = sbox(t) ^ rotate_left(self.R[0], 1)

        for i in range(1, N):
            self.R[i - 1] = self.R[i]

        self.R[N - 1] = t

        t = sbox2(self.R[2] ^ self.R[15])
        self.R[0] ^= t
        self.sbuf = t ^ self.R[8] ^ self.R[12]

    def _crc(self, i: int) -> None:
        # 32 bit-sliced CRC-16 lanes, polynomial x^16 + x^15 + x^2 + 1
        t = self.CRC[0] ^ self.CRC[2] ^ self.CRC[15] ^ i

        for j in range(1, N):
            self.CRC[j - 1] = self.CRC[j]

        self.CRC[N - 1] = t

    def _mac(self, i: int) -> None:
        self._crc(i)

        self.R[KEYP] ^= i

    def _init_state(self) -> None:
        self.R[0] = 1
        self.R[1] = 1

        for i in range(2, N):
            self.R[i] = (self.R[i - 1] + self.R[i - 2]) & WORD_MASK

        self.konst = INITKONST

    def _save_state(self) -> None:
        self.initR = list(self.R)

    def _reload_state(self) -> None:
        self.R = list(self.initR)

    def _gen_konst(self) -> None:
        self.konst = self.R[0]

    def _add_key(self, k: int) -> None:
        self.R[KEYP] ^= k

    def _diffuse(self) -> None:
        for _ in range(FOLD):
            self._cycle()

    def _load_key(self, key: bytes) -> None:
        whole = len(key) & ~0x03

        for i in range(0, whole, 4):
            self._add_key(shift4(key, i))
            self._cycle()

        if whole < len(key):
            extra = bytearray(4)
            extra[: len(key) - whole] = key[whole:]
            self._add_key(shift4(extra, 0))
            self._cycle()

        # the length goes in too, so differently padded keys never collide
        self._add_key(len(key) & WORD_MASK)
        self._cycle()

        self.CRC = list(self.R)
        self._diffuse()

        # xor the copy back, key loading must not be reversible
        for i in range(0, N):
            self.R[i] ^= self.CRC[i]

    def set_key(self, key: bytes) -> None:
        key = bytes(key)

        self._init_state()
        self._load_key(key)
        self._gen_konst()
        self._save_state()
        self.nbuf = 0
        self._keyed = True
        self._finished = False

        self.logger.debug("Loaded key of {} bytes".format(len(key)))

    def set_nonce(self, nonce: bytes) -> None:
        if not self._keyed:
            raise KeyNotSetError("set a nonce")

        nonce = bytes(nonce)

        self._reload_state()
        self.konst = INITKONST
        self._load_key(nonce)
        self._gen_konst()
        self.nbuf = 0
        self._finished = False

        self.logger.debug("Loaded nonce of {} bytes".format(len(nonce)))

    def _begin(
        self, operation: str, buf: Buffer, length: Optional[int]
    ) -> Tuple[MutableSequence[int], int]:
        if not self._keyed:
            raise KeyNotSetError(operation)
        if self._finished:
            raise SessionFinishedError(operation)

        if _is_mutable(buf):
            data = buf
        else:
            data = bytearray(buf)
        n = len(data) if length is None else length

        if n < 0 or n > len(data):
            raise BufferLengthError(n, len(data))

        return data, n

    @staticmethod
    def _end(buf: Buffer, data: MutableSequence[int]) -> Result:
        return data if data is buf else bytes(data)

    def stream(self, buf: Buffer, length: Optional[int] = None) -> Result:
        data, n = self._begin("apply keystream", buf, length)
        i = 0

        while self.nbuf != 0 and n != 0:
            data[i] ^= self.sbuf & 0xFF
            i += 1
            self.sbuf >>= 8
            self.nbuf -= 8
            n -= 1

        j = i + (n & ~0x03)

        while i < j:
            self._cycle()
            pack4(data, i, shift4(data, i) ^ self.sbuf)
            i += 4

        n &= 0x03

        if n != 0:
            self._cycle()
            self.nbuf = 32

            while self.nbuf != 0 and n != 0:
                data[i] ^= self.sbuf & 0xFF
                i += 1
                self.sbuf >>= 8
                self.nbuf -= 8
                n -= 1

        return self._end(buf, data)

    def mac_only(self, buf: Buffer, length: Optional[int] = None) -> Result:
        data, n = self._begin("accumulate MAC", buf, length)
        i = 0

        if self.nbuf != 0:
            while self.nbuf != 0 and n != 0:
                self.mbuf ^= data[i] << (32 - self.nbuf)
                i += 1
                self.nbuf -= 8
                n -= 1

            if self.nbuf != 0:
                return self._end(buf, data)

            # register was already cycled for this word
            self._mac(self.mbuf)

        j = i + (n & ~0x03)

        while i < j:
            self._cycle()
            self._mac(shift4(data, i))
            i += 4

        n &= 0x03

        if n != 0:
            self._cycle()
            self.mbuf = 0
            self.nbuf = 32

            while self.nbuf != 0 and n != 0:
                self.mbuf ^= data[i] << (32 - self.nbuf)
                i += 1
                self.nbuf -= 8
                n -= 1

        return self._end(buf, data)

    # noinspection DuplicatedCode
    def encrypt(self, buf: Buffer, length: Optional[int] = None) -> Result:
        data, n = self._begin("encrypt", buf, length)
        i = 0

        if self.nbuf != 0:
            while self.nbuf != 0 and n != 0:
                self.mbuf ^= data[i] << (32 - self.nbuf)
                data[i] ^= (self.sbuf >> (32 - self.nbuf)) & 0xFF
                i += 1
                self.nbuf -= 8
                n -= 1

            if self.nbuf != 0:
                return self._end(buf, data)

            self._mac(self.mbuf)

        j = i + (n & ~0x03)

        while i < j:
            self._cycle()
            t = shift4(data, i)
            self._mac(t)
            pack4(data, i, t ^ self.sbuf)
            i += 4

        n &= 0x03

        if n != 0:
            self._cycle()
            self.mbuf = 0
            self.nbuf = 32

            while self.nbuf != 0 and n != 0:
                self.mbuf ^= data[i] << (32 - self.nbuf)
                data[i] ^= (self.sbuf >> (32 - self.nbuf)) & 0xFF
                i += 1
                self.nbuf -= 8
                n -= 1

        return self._end(buf, data)

    # noinspection DuplicatedCode
    def decrypt(self, buf: Buffer, length: Optional[int] = None) -> Result:
        data, n = self._begin("decrypt", buf, length)
        i = 0

        if self.nbuf != 0:
            while self.nbuf != 0 and n != 0:
                data[i] ^= (self.sbuf >> (32 - self.nbuf)) & 0xFF
                self.mbuf ^= data[i] << (32 - self.nbuf)
                i += 1
                self.nbuf -= 8
                n -= 1

            if self.nbuf != 0:
                return self._end(buf, data)

            self._mac(self.mbuf)

        j = i + (n & ~0x03)

        while i < j:
            self._cycle()
            t = shift4(data, i) ^ self.sbuf
            self._mac(t)
            pack4(data, i, t)
            i += 4

        n &= 0x03

        if n != 0:
            self._cycle()
            self.mbuf = 0
            self.nbuf = 32

            while self.nbuf != 0 and n != 0:
                data[i] ^= (self.sbuf >> (32 - self.nbuf)) & 0xFF
                self.mbuf ^= data[i] << (32 - self.nbuf)
                i += 1
                self.nbuf -= 8
                n -= 1

        return self._end(buf, data)

    def _tail_byte(self, i: int, j: int) -> int:
        if self.legacy_tail:
            # deployed implementations shift by the buffer offset, and a
            # 32-bit shift count wraps modulo 32
            return (self.sbuf >> ((i * 8) & 31)) & 0xFF
        return (self.sbuf >> (j * 8)) & 0xFF

    def finish_into(self, buf: Buffer, length: Optional[int] = None) -> Result:
        data, n = self._begin("finish", buf, length)
        size = n
        i = 0

        if self.nbuf != 0:
            self._mac(self.mbuf)

        # marks the end of input in a way no plaintext can reproduce
        self._cycle()
        self._add_key(INITKONST ^ (self.nbuf << 3))
        self.nbuf = 0

        for j in range(0, N):
            self.R[j] ^= self.CRC[j]

        self._diffuse()

        while n > 0:
            self._cycle()

            if n >= 4:
                pack4(data, i, self.sbuf)
                n -= 4
                i += 4
            else:
                for j in range(0, n):
                    data[i + j] = self._tail_byte(i, j)
                break

        self._finished = True
        self.logger.debug("Finished MAC of {} bytes".format(size))

        return self._end(buf, data)

    def finish(self, length: int = MAC_LENGTH) -> bytes:
        return bytes(self.finish_into(bytearray(max(length, 0)), length))

    def verify(self, tag: bytes) -> bool:
        tag = bytes(tag)
        expected = self.finish(len(tag))

        # an empty tag authenticates nothing
        if not tag:
            return False

        return hmac.compare_digest(expected, tag)
