"""Modular arithmetic primitives for the challenge-response protocol."""

from __future__ import annotations

import secrets
from typing import Callable

from .constants import PRIMALITY_ROUNDS
from .exceptions import InvalidMultiplier

ModPow = Callable[[int, int, int], int]


def powmod(base: int, exponent: int, modulus: int) -> int:
    """Compute ``base ** exponent % modulus`` by square-and-multiply.

    Bits of the exponent are consumed from the least significant end, so the
    loop runs once per bit of ``exponent``.
    """

    if modulus <= 0:
        raise ValueError("Modulus must be positive")
    if exponent < 0:
        raise ValueError("Exponent must be non-negative")
    if modulus == 1:
        return 0

    result = 1
    base %= modulus
    while exponent > 0:
        if exponent & 1:
            result = (result * base) % modulus
        base = (base * base) % modulus
        exponent >>= 1
    return result


def modinverse(a: int, modulus: int, *, modpow: ModPow = powmod) -> int:
    """Inverse of ``a`` modulo a prime ``modulus`` via Fermat's little theorem."""

    if a % modulus == 0:
        raise InvalidMultiplier(f"{a} has no inverse modulo {modulus}")
    return modpow(a, modulus - 2, modulus)


def is_probable_prime(n: int, rounds: int = PRIMALITY_ROUNDS) -> bool:
    """Miller-Rabin primality test."""

    if n < 2:
        return False
    for small in (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37):
        if n % small == 0:
            return n == small

    d = n - 1
    shift = 0
    while d % 2 == 0:
        d //= 2
        shift += 1

    for _ in range(rounds):
        witness = secrets.randbelow(n - 3) + 2
        x = powmod(witness, d, n)
        if x in (1, n - 1):
            continue
        for _ in range(shift - 1):
            x = (x * x) % n
            if x == n - 1:
                break
        else:
            return False
    return True


__all__ = ["ModPow", "is_probable_prime", "modinverse", "powmod"]
