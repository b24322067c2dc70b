# zcash_keys/crypto/f4jumble.py
"""
F4Jumble: the unkeyed four-round Feistel permutation that unified encodings
apply before Bech32m, so that any change to the encoded bytes affects every
receiver in the string.
"""
import hashlib

HASH_LENGTH = 64
MIN_LENGTH = 48
MAX_LENGTH = (2 ** 16 + 1) * HASH_LENGTH

def _xor(target: bytes, mask: bytes) -> bytes:
    return bytes(a ^ b for a, b in zip(target, mask))

def _h(round_index: int, right: bytes, left_length: int) -> bytes:
    person = b"UA_F4Jumble_H" + bytes([round_index, 0, 0])
    return hashlib.blake2b(right, digest_size=left_length, person=person).digest()

def _g(round_index: int, left: bytes, right_length: int) -> bytes:
    blocks = []
    for j in range((right_length + HASH_LENGTH - 1) // HASH_LENGTH):
        person = b"UA_F4Jumble_G" + bytes([round_index]) + j.to_bytes(2, 'little')
        blocks.append(hashlib.blake2b(left, digest_size=HASH_LENGTH, person=person).digest())
    return b"".join(blocks)[:right_length]

def _split(message: bytes):
    if not MIN_LENGTH <= len(message) <= MAX_LENGTH:
        raise ValueError(
            f"F4Jumble input must be between {MIN_LENGTH} and {MAX_LENGTH} bytes, got {len(message)}.")
    left_length = min(HASH_LENGTH, len(message) // 2)
    return message[:left_length], message[left_length:]

def f4jumble(message: bytes) -> bytes:
    a, b = _split(bytes(message))
    x = _xor(b, _g(0, a, len(b)))
    y = _xor(a, _h(0, x, len(a)))
    d = _xor(x, _g(1, y, len(x)))
    c = _xor(y, _h(1, d, len(y)))
    return c + d

def f4jumble_inv(message: bytes) -> bytes:
    c, d = _split(bytes(message))
    y = _xor(c, _h(1, d, len(c)))
    x = _xor(d, _g(1, y, len(d)))
    a = _xor(y, _h(0, x, len(y)))
    b = _xor(x, _g(0, a, len(x)))
    return a + b
