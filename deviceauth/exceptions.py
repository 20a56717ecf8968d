"""Error kinds raised by the device authentication core."""

from __future__ import annotations


class DeviceAuthError(Exception):
    """Base class for every error raised by :mod:`deviceauth`."""


class NotRegistered(DeviceAuthError):
    """The identity has no stored commitment."""

    def __init__(self, identity: str) -> None:
        super().__init__(f"Identity '{identity}' is not registered")
        self.identity = identity


class InvalidMultiplier(DeviceAuthError, ValueError):
    """The challenge multiplier has no inverse modulo the modulus."""


class InvalidParameters(DeviceAuthError, ValueError):
    """Global parameters violate ``0 < generator < modulus`` or primality."""


class NotInitialized(DeviceAuthError):
    """Parameters must be initialized before register/verify."""


class AlreadyInitialized(DeviceAuthError):
    """Global parameters are fixed once set."""


__all__ = [
    "AlreadyInitialized",
    "DeviceAuthError",
    "InvalidMultiplier",
    "InvalidParameters",
    "NotInitialized",
    "NotRegistered",
]
