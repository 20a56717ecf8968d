"""Blinded challenge-response verification against stored commitments."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Dict

from .arith import ModPow, modinverse, powmod
from .constants import CHALLENGE_BITS
from .exceptions import NotRegistered
from .params import GlobalParameters
from .registry import CommitmentRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Challenge:
    """Fresh ``(exponent, multiplier)`` pair; never stored."""

    exponent: int
    multiplier: int

    def to_dict(self) -> Dict[str, str]:
        return {
            "exponent": hex(self.exponent),
            "multiplier": hex(self.multiplier),
        }

    @staticmethod
    def from_dict(data: Dict[str, str]) -> "Challenge":
        return Challenge(
            exponent=int(data["exponent"], 16),
            multiplier=int(data["multiplier"], 16),
        )


class ChallengeVerifier:
    """Stateless verifier over the global parameters and a registry.

    The device answers a challenge ``(e, x)`` with ``K = W**e * x mod p``
    where ``W`` is its registered commitment. The verifier strips the blind
    ``x`` with its modular inverse and compares against ``W**e mod p``.
    """

    def __init__(
        self,
        params: GlobalParameters,
        registry: CommitmentRegistry,
        *,
        modpow: ModPow = powmod,
        zero_means_unregistered: bool = False,
    ) -> None:
        self.params = params
        self.registry = registry
        self.modpow = modpow
        self.zero_means_unregistered = zero_means_unregistered

    def _commitment_for(self, identity: str) -> int:
        commitment = self.registry.lookup(identity)
        if commitment is None or (self.zero_means_unregistered and commitment == 0):
            logger.warning("Verification requested for unregistered identity %s", identity)
            raise NotRegistered(identity)
        return commitment

    def verify(
        self,
        identity: str,
        challenge_exponent: int,
        response_product: int,
        challenge_multiplier: int,
    ) -> bool:
        modulus = self.params.modulus
        commitment = self._commitment_for(identity)
        expected = self.modpow(commitment, challenge_exponent, modulus)
        inverse = modinverse(challenge_multiplier, modulus, modpow=self.modpow)
        recovered = (response_product * inverse) % modulus
        ok = recovered == expected
        if ok:
            logger.info("Challenge response accepted for %s", identity)
        else:
            logger.warning("Challenge response rejected for %s", identity)
        return ok

    def verify_challenge(self, identity: str, challenge: Challenge, response_product: int) -> bool:
        return self.verify(identity, challenge.exponent, response_product, challenge.multiplier)


def issue_challenge(params: GlobalParameters, *, bits: int = CHALLENGE_BITS) -> Challenge:
    """Draw a random challenge with a positive exponent and invertible multiplier."""

    exponent = 0
    while exponent == 0:
        exponent = secrets.randbits(bits)
    multiplier = secrets.randbelow(params.modulus - 1) + 1
    return Challenge(exponent=exponent, multiplier=multiplier)


def derive_commitment(secret: int, params: GlobalParameters, *, modpow: ModPow = powmod) -> int:
    """Device side: ``generator ** secret mod modulus``."""

    if secret < 0:
        raise ValueError("Secret must be non-negative")
    return modpow(params.generator, secret, params.modulus)


def expected_value(
    commitment: int,
    exponent: int,
    params: GlobalParameters,
    *,
    modpow: ModPow = powmod,
) -> int:
    return modpow(commitment, exponent, params.modulus)


def respond_to_challenge(
    commitment: int,
    challenge: Challenge,
    params: GlobalParameters,
    *,
    modpow: ModPow = powmod,
) -> int:
    """Device side: blind the expected value with the challenge multiplier."""

    expected = expected_value(commitment, challenge.exponent, params, modpow=modpow)
    return (expected * challenge.multiplier) % params.modulus


__all__ = [
    "Challenge",
    "ChallengeVerifier",
    "derive_commitment",
    "expected_value",
    "issue_challenge",
    "respond_to_challenge",
]
