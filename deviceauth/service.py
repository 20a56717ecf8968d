"""Caller-facing operations: initialize, register and verify."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .arith import ModPow, powmod
from .config import Settings
from .exceptions import AlreadyInitialized, NotInitialized
from .params import GlobalParameters
from .registry import CommitmentRegistry, JsonRegistry, MemoryRegistry
from .verifier import Challenge, ChallengeVerifier, issue_challenge

logger = logging.getLogger(__name__)


class DeviceAuthService:
    """Binds global parameters, a registry and the verifier together.

    ``initialize`` must run exactly once before any ``register`` or
    ``verify`` call.
    """

    def __init__(
        self,
        registry: Optional[CommitmentRegistry] = None,
        *,
        modpow: ModPow = powmod,
        check_primality: bool = False,
        zero_means_unregistered: bool = False,
    ) -> None:
        self.registry = registry if registry is not None else MemoryRegistry()
        self.modpow = modpow
        self.check_primality = check_primality
        self.zero_means_unregistered = zero_means_unregistered
        self._params: Optional[GlobalParameters] = None
        self._verifier: Optional[ChallengeVerifier] = None
        self._init_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeviceAuthService":
        """Build a service for ``settings``.

        Without a store the parameters come from the settings. A JSON store
        only ever uses the parameters saved by an explicit ``initialize``; a
        store without them yields an uninitialized service.
        """

        registry: CommitmentRegistry
        if settings.store:
            registry = JsonRegistry(settings.store)
        else:
            registry = MemoryRegistry()

        service = cls(
            registry,
            check_primality=settings.check_primality,
            zero_means_unregistered=settings.zero_means_unregistered,
        )
        if isinstance(registry, JsonRegistry):
            stored = registry.read_parameters()
            if stored is not None:
                service.initialize(stored.generator, stored.modulus)
            else:
                logger.info("Store %s has no saved parameters", registry.path)
        else:
            service.initialize(settings.generator, settings.modulus)
        return service

    @property
    def initialized(self) -> bool:
        return self._params is not None

    @property
    def params(self) -> GlobalParameters:
        if self._params is None:
            raise NotInitialized("Global parameters have not been initialized")
        return self._params

    def initialize(self, generator: int, modulus: int) -> GlobalParameters:
        with self._init_lock:
            if self._params is not None:
                raise AlreadyInitialized("Global parameters are already set")
            params = GlobalParameters.create(
                generator,
                modulus,
                check_primality=self.check_primality,
            )
            if isinstance(self.registry, JsonRegistry):
                self.registry.write_parameters(params)
            self._verifier = ChallengeVerifier(
                params,
                self.registry,
                modpow=self.modpow,
                zero_means_unregistered=self.zero_means_unregistered,
            )
            self._params = params
        logger.info("Service initialized with generator %d", generator)
        return params

    def _require_verifier(self) -> ChallengeVerifier:
        if self._verifier is None:
            raise NotInitialized("Global parameters have not been initialized")
        return self._verifier

    def register(self, identity: str, commitment: int) -> None:
        self._require_verifier()
        self.registry.register(identity, commitment)

    def lookup(self, identity: str) -> Optional[int]:
        return self.registry.lookup(identity)

    def issue_challenge(self) -> Challenge:
        return issue_challenge(self.params)

    def verify(
        self,
        identity: str,
        challenge_exponent: int,
        response_product: int,
        challenge_multiplier: int,
    ) -> bool:
        verifier = self._require_verifier()
        return verifier.verify(identity, challenge_exponent, response_product, challenge_multiplier)


__all__ = ["DeviceAuthService"]
