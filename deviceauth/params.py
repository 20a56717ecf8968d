"""Process-wide global parameters: generator and prime modulus."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from .arith import is_probable_prime
from .exceptions import InvalidParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobalParameters:
    """Immutable ``generator`` and ``modulus`` fixed at initialization."""

    generator: int
    modulus: int

    @classmethod
    def create(
        cls,
        generator: int,
        modulus: int,
        *,
        check_primality: bool = False,
    ) -> "GlobalParameters":
        if modulus <= 2:
            raise InvalidParameters("Modulus must be greater than two")
        if not 0 < generator < modulus:
            raise InvalidParameters("Generator must satisfy 0 < generator < modulus")
        if check_primality and not is_probable_prime(modulus):
            raise InvalidParameters(f"Modulus {modulus} is not prime")
        logger.debug(
            "Global parameters fixed: generator=%d modulus bits=%d",
            generator,
            modulus.bit_length(),
        )
        return cls(generator=generator, modulus=modulus)

    def to_dict(self) -> Dict[str, str]:
        return {
            "generator": hex(self.generator),
            "modulus": hex(self.modulus),
        }

    @staticmethod
    def from_dict(data: Dict[str, str], *, check_primality: bool = False) -> "GlobalParameters":
        try:
            generator = int(data["generator"], 16)
            modulus = int(data["modulus"], 16)
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidParameters("Malformed parameter payload") from exc
        return GlobalParameters.create(generator, modulus, check_primality=check_primality)


__all__ = ["GlobalParameters"]
