"""Deployment defaults for the device authentication scheme."""

DEFAULT_GENERATOR = 7
DEFAULT_MODULUS = 1000000007

# Bit length of randomly issued challenge exponents.
CHALLENGE_BITS = 64

PRIMALITY_ROUNDS = 40

ENV_PREFIX = "DEVICEAUTH_"
