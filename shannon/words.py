#  Copyright (c) Kuba Szczodrzyński 2021-5-5.

from typing import MutableSequence, Sequence

N = 16
FOLD = N  # diffusion rounds after loading key material
INITKONST = 0x6996C53A
KEYP = 13  # where key, nonce and MAC words are inserted
WORD_MASK = 0xFFFFFFFF
MAC_LENGTH = 16


def rotate_left(i: int, distance: int) -> int:
    return ((i << distance) | (i >> (32 - distance))) & WORD_MASK


def sbox(i: int) -> int:
    i ^= rotate_left(i, 5) | rotate_left(i, 7)
    i ^= rotate_left(i, 19) | rotate_left(i, 22)
    return i


def sbox2(i: int) -> int:
    i ^= rotate_left(i, 7) | rotate_left(i, 22)
    i ^= rotate_left(i, 5) | rotate_left(i, 19)
    return i


def shift4(buf: Sequence[int], i: int) -> int:
    return (
        ((buf[i + 3] & 0xFF) << 24)
        | ((buf[i + 2] & 0xFF) << 16)
        | ((buf[i + 1] & 0xFF) << 8)
        | (buf[i] & 0xFF)
    )


def pack4(buf: MutableSequence[int], i: int, word: int) -> None:
    buf[i + 3] = (word >> 24) & 0xFF
    buf[i + 2] = (word >> 16) & 0xFF
    buf[i + 1] = (word >> 8) & 0xFF
    buf[i] = word & 0xFF
