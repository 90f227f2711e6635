#!/usr/bin/env python
# encoding: utf-8

"""
  @license: MIT Licence
     @file: des.py

Single block DES in the form used for VNC password obfuscation.

This follows Outerbridge's d3des: the key schedule is cooked into 32 words so
that each half-round needs two lookups groups of four SP tables, and the
initial and final permutations are done with shift/xor/mask steps instead of
a 64 entry table. The only departure from the standard cipher is BYTEBIT,
which reads key bits least significant first.
"""

import logging
import struct
from typing import List, Tuple

from .errors import InvalidKeyFormat
from .tables import (BIGBYTE, BYTEBIT, PC1, PC2, SP1, SP2, SP3, SP4, SP5,
                     SP6, SP7, SP8, TOTROT)

log = logging.getLogger(__name__)

BLOCK_SIZE = 8
KEY_SIZE = 8
SCHEDULE_WORDS = 32
MASK32 = 0xffffffff


class KeySchedule:
    """
    The cooked subkeys for one key in one direction.

    A schedule is built fresh for every block operation and belongs to the
    caller that asked for it. ``erase`` zeroes the words in place once the
    schedule is no longer needed.
    """

    __slots__ = ('words', 'encryption')

    def __init__(self, words: List[int], encryption: bool):
        if len(words) != SCHEDULE_WORDS:
            raise ValueError(f"a key schedule has {SCHEDULE_WORDS} words, got {len(words)}")
        self.words = list(words)
        self.encryption = encryption

    def __getitem__(self, i: int) -> int:
        return self.words[i]

    def __len__(self) -> int:
        return len(self.words)

    def __repr__(self) -> str:
        direction = 'encrypt' if self.encryption else 'decrypt'
        state = 'erased' if self.is_erased() else 'loaded'
        return f"<KeySchedule {direction} {state}>"

    def erase(self) -> None:
        for i in range(len(self.words)):
            self.words[i] = 0

    def is_erased(self) -> bool:
        return not any(self.words)


def deskey(key: bytes, encryption: bool) -> KeySchedule:
    """
    Expand an 8-byte key into a key schedule.

    :param key: The 8 key bytes. The top bit of every byte is ignored.
    :param encryption: True for an encryption schedule, False for decryption
    :ret: A new KeySchedule owned by the caller
    """
    if len(key) != KEY_SIZE:
        raise InvalidKeyFormat(f"key must be {KEY_SIZE} bytes, got {len(key)}")

    pc1m = [0] * 56
    pcr = [0] * 56
    kn = [0] * SCHEDULE_WORDS

    for j in range(56):
        l = PC1[j]
        pc1m[j] = 1 if key[l >> 3] & BYTEBIT[l & 0o7] else 0

    for i in range(16):
        # Decryption stores the rounds back to front so the same round
        # function undoes encryption.
        m = i << 1 if encryption else (15 - i) << 1
        n = m + 1
        for j in range(28):
            l = j + TOTROT[i]
            pcr[j] = pc1m[l] if l < 28 else pc1m[l - 28]
        for j in range(28, 56):
            l = j + TOTROT[i]
            pcr[j] = pc1m[l] if l < 56 else pc1m[l - 28]
        for j in range(24):
            if pcr[PC2[j]]:
                kn[m] |= BIGBYTE[j]
            if pcr[PC2[j + 24]]:
                kn[n] |= BIGBYTE[j]

    return KeySchedule(cookey(kn), encryption)


def cookey(raw: List[int]) -> List[int]:
    """
    Regroup the 32 raw 24-bit subkey words into the layout ``desfunc`` reads.

    Each pair of raw words becomes two cooked words holding four 6-bit groups
    each, positioned to line up with the SP table windows.
    """
    cooked = []
    for i in range(0, SCHEDULE_WORDS, 2):
        raw0, raw1 = raw[i], raw[i + 1]
        k = (raw0 & 0x00fc0000) << 6
        k |= (raw0 & 0x00000fc0) << 10
        k |= (raw1 & 0x00fc0000) >> 10
        k |= (raw1 & 0x00000fc0) >> 6
        cooked.append(k)
        k = (raw0 & 0x0003f000) << 12
        k |= (raw0 & 0x0000003f) << 16
        k |= (raw1 & 0x0003f000) >> 4
        k |= raw1 & 0x0000003f
        cooked.append(k)
    return cooked


def pack_block(block: bytes) -> Tuple[int, int]:
    """
    Split an 8-byte block into two big-endian 32-bit words (left, right).
    """
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"a block is {BLOCK_SIZE} bytes, got {len(block)}")
    return struct.unpack('>II', block)


def unpack_block(left: int, right: int) -> bytes:
    """
    Join two 32-bit words back into an 8-byte big-endian block.
    """
    return struct.pack('>II', left, right)


def _rotl1(word: int) -> int:
    return ((word << 1) | (word >> 31)) & MASK32


def _rotr1(word: int) -> int:
    return ((word << 31) | (word >> 1)) & MASK32


def initial_permutation(left: int, right: int) -> Tuple[int, int]:
    """
    The DES initial permutation, leaving both halves rotated left by one bit
    as the round function expects.
    """
    work = ((left >> 4) ^ right) & 0x0f0f0f0f
    right ^= work
    left ^= work << 4
    work = ((left >> 16) ^ right) & 0x0000ffff
    right ^= work
    left ^= work << 16
    work = ((right >> 2) ^ left) & 0x33333333
    left ^= work
    right ^= work << 2
    work = ((right >> 8) ^ left) & 0x00ff00ff
    left ^= work
    right ^= work << 8
    right = _rotl1(right)
    work = (left ^ right) & 0xaaaaaaaa
    left ^= work
    right ^= work
    left = _rotl1(left)
    return left, right


def final_permutation(left: int, right: int) -> Tuple[int, int]:
    """
    The inverse of ``initial_permutation``, reading its halves exchanged:
    if ``initial_permutation(l, r) == (a, b)`` then
    ``final_permutation(b, a) == (l, r)``.
    """
    right = _rotr1(right)
    work = (left ^ right) & 0xaaaaaaaa
    left ^= work
    right ^= work
    left = _rotr1(left)
    work = ((left >> 8) ^ right) & 0x00ff00ff
    right ^= work
    left ^= work << 8
    work = ((left >> 2) ^ right) & 0x33333333
    right ^= work
    left ^= work << 2
    work = ((right >> 16) ^ left) & 0x0000ffff
    left ^= work
    right ^= work << 16
    work = ((right >> 4) ^ left) & 0x0f0f0f0f
    left ^= work
    right ^= work << 4
    return right, left


def f(word: int, k0: int, k1: int) -> int:
    """
    The mangler function on a pre-rotated half, using two cooked subkeys.

    The SP lookups are combined with OR: each table only sets bits the
    others leave clear.
    """
    work = (((word << 28) | (word >> 4)) & MASK32) ^ k0
    fval = (SP7[work & 0x3f]
            | SP5[(work >> 8) & 0x3f]
            | SP3[(work >> 16) & 0x3f]
            | SP1[(work >> 24) & 0x3f])
    work = word ^ k1
    fval |= (SP8[work & 0x3f]
             | SP6[(work >> 8) & 0x3f]
             | SP4[(work >> 16) & 0x3f]
             | SP2[(work >> 24) & 0x3f])
    return fval


def desfunc(schedule: KeySchedule, left: int, right: int) -> Tuple[int, int]:
    """
    Run the full cipher on a pair of 32-bit words.

    Parameters
    ----------
    schedule : KeySchedule
        Encryption or decryption subkeys from ``deskey``.
    left, right : int
        The block as two big-endian words.

    Returns
    -------
    tuple of int
        The transformed block, already in output word order.
    """
    left, right = initial_permutation(left, right)
    for k in range(0, SCHEDULE_WORDS, 4):
        left ^= f(right, schedule[k], schedule[k + 1])
        right ^= f(left, schedule[k + 2], schedule[k + 3])
    return final_permutation(left, right)


def des(schedule: KeySchedule, block: bytes) -> bytes:
    """
    Transform one 8-byte block with an existing schedule.
    """
    left, right = pack_block(block)
    return unpack_block(*desfunc(schedule, left, right))


def _crypt(block: bytes, key: bytes, encryption: bool) -> bytes:
    schedule = deskey(key, encryption)
    try:
        return des(schedule, block)
    finally:
        schedule.erase()
        log.debug("%s schedule erased", 'encrypt' if encryption else 'decrypt')


def encrypt_block(block: bytes, key: bytes) -> bytes:
    """
    Encrypt a single 8-byte block under an 8-byte key.
    """
    return _crypt(block, key, encryption=True)


def decrypt_block(block: bytes, key: bytes) -> bytes:
    """
    Decrypt a single 8-byte block under an 8-byte key.
    """
    return _crypt(block, key, encryption=False)
