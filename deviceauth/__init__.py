"""Blinded challenge-response device authentication."""

from .arith import is_probable_prime, modinverse, powmod
from .config import Settings
from .exceptions import (
    AlreadyInitialized,
    DeviceAuthError,
    InvalidMultiplier,
    InvalidParameters,
    NotInitialized,
    NotRegistered,
)
from .params import GlobalParameters
from .registry import CommitmentRecord, CommitmentRegistry, JsonRegistry, MemoryRegistry
from .service import DeviceAuthService
from .verifier import (
    Challenge,
    ChallengeVerifier,
    derive_commitment,
    expected_value,
    issue_challenge,
    respond_to_challenge,
)

__all__ = [
    "is_probable_prime",
    "modinverse",
    "powmod",
    "Settings",
    "AlreadyInitialized",
    "DeviceAuthError",
    "InvalidMultiplier",
    "InvalidParameters",
    "NotInitialized",
    "NotRegistered",
    "GlobalParameters",
    "CommitmentRecord",
    "CommitmentRegistry",
    "JsonRegistry",
    "MemoryRegistry",
    "DeviceAuthService",
    "Challenge",
    "ChallengeVerifier",
    "derive_commitment",
    "expected_value",
    "issue_challenge",
    "respond_to_challenge",
]
