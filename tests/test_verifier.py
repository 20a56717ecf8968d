import random
import unittest

from deviceauth.exceptions import InvalidMultiplier, NotRegistered
from deviceauth.params import GlobalParameters
from deviceauth.registry import MemoryRegistry
from deviceauth.verifier import (
    Challenge,
    ChallengeVerifier,
    derive_commitment,
    expected_value,
    issue_challenge,
    respond_to_challenge,
)

GENERATOR = 7
MODULUS = 1000000007
# A 127-bit Mersenne prime keeps accidental collisions out of the tamper tests.
WIDE_MODULUS = 2**127 - 1


class TestReferenceScenario(unittest.TestCase):
    def setUp(self) -> None:
        self.params = GlobalParameters.create(GENERATOR, MODULUS)
        self.registry = MemoryRegistry()
        self.verifier = ChallengeVerifier(self.params, self.registry)
        self.commitment = pow(GENERATOR, 123456, MODULUS)
        self.registry.register("device", self.commitment)
        expected = pow(self.commitment, 333, MODULUS)
        self.response = (expected * 99) % MODULUS

    def test_commitment_matches_device_side_helper(self) -> None:
        self.assertEqual(derive_commitment(123456, self.params), self.commitment)

    def test_valid_response_accepted(self) -> None:
        self.assertTrue(self.verifier.verify("device", 333, self.response, 99))

    def test_wrong_multiplier_rejected(self) -> None:
        self.assertFalse(self.verifier.verify("device", 333, self.response, 98))

    def test_verify_challenge_wrapper(self) -> None:
        challenge = Challenge(exponent=333, multiplier=99)
        self.assertTrue(self.verifier.verify_challenge("device", challenge, self.response))

    def test_verification_does_not_mutate_registry(self) -> None:
        self.verifier.verify("device", 333, self.response, 98)
        self.assertEqual(self.registry.lookup("device"), self.commitment)


class TestVerifierProperties(unittest.TestCase):
    def setUp(self) -> None:
        self.params = GlobalParameters.create(3, WIDE_MODULUS)
        self.registry = MemoryRegistry()
        self.verifier = ChallengeVerifier(self.params, self.registry)
        self.rng = random.Random(20240601)

    def _secret(self) -> int:
        return self.rng.randint(1, WIDE_MODULUS - 2)

    def _challenge(self) -> Challenge:
        return Challenge(
            exponent=self.rng.getrandbits(64),
            multiplier=self.rng.randint(1, WIDE_MODULUS - 1),
        )

    def test_round_trip(self) -> None:
        for index in range(20):
            identity = f"device-{index}"
            commitment = derive_commitment(self._secret(), self.params)
            self.registry.register(identity, commitment)
            challenge = self._challenge()
            response = respond_to_challenge(commitment, challenge, self.params)
            with self.subTest(identity=identity):
                self.assertTrue(
                    self.verifier.verify(identity, challenge.exponent, response, challenge.multiplier)
                )

    def test_tampering_is_detected(self) -> None:
        commitment = derive_commitment(self._secret(), self.params)
        self.registry.register("device", commitment)
        challenge = Challenge(exponent=65537, multiplier=self.rng.randint(2, WIDE_MODULUS - 2))
        response = respond_to_challenge(commitment, challenge, self.params)

        self.assertFalse(
            self.verifier.verify("device", challenge.exponent, (response + 1) % WIDE_MODULUS, challenge.multiplier)
        )
        self.assertFalse(
            self.verifier.verify("device", challenge.exponent, response, challenge.multiplier + 1)
        )

        self.registry.register("device", (commitment * 3) % WIDE_MODULUS)
        self.assertFalse(
            self.verifier.verify("device", challenge.exponent, response, challenge.multiplier)
        )

    def test_zero_multiplier_rejected(self) -> None:
        self.registry.register("device", derive_commitment(5, self.params))
        with self.assertRaises(InvalidMultiplier):
            self.verifier.verify("device", 3, 0, 0)
        with self.assertRaises(InvalidMultiplier):
            self.verifier.verify("device", 3, 0, WIDE_MODULUS)

    def test_unregistered_identity(self) -> None:
        with self.assertRaises(NotRegistered) as ctx:
            self.verifier.verify("stranger", 3, 1, 1)
        self.assertEqual(ctx.exception.identity, "stranger")

    def test_reregistration_replaces_commitment(self) -> None:
        old_commitment = derive_commitment(self._secret(), self.params)
        new_commitment = derive_commitment(self._secret(), self.params)
        challenge = self._challenge()
        self.registry.register("device", old_commitment)
        self.registry.register("device", new_commitment)

        old_response = respond_to_challenge(old_commitment, challenge, self.params)
        new_response = respond_to_challenge(new_commitment, challenge, self.params)
        self.assertFalse(self.verifier.verify("device", challenge.exponent, old_response, challenge.multiplier))
        self.assertTrue(self.verifier.verify("device", challenge.exponent, new_response, challenge.multiplier))

    def test_zero_exponent(self) -> None:
        self.registry.register("device", derive_commitment(11, self.params))
        self.assertTrue(self.verifier.verify("device", 0, 42, 42))


class TestZeroCommitment(unittest.TestCase):
    def setUp(self) -> None:
        self.params = GlobalParameters.create(GENERATOR, MODULUS)
        self.registry = MemoryRegistry()
        self.registry.register("device", 0)

    def test_zero_commitment_is_registered_by_default(self) -> None:
        verifier = ChallengeVerifier(self.params, self.registry)
        self.assertTrue(verifier.verify("device", 5, 0, 17))

    def test_zero_commitment_as_unregistered(self) -> None:
        verifier = ChallengeVerifier(self.params, self.registry, zero_means_unregistered=True)
        with self.assertRaises(NotRegistered):
            verifier.verify("device", 5, 0, 17)


class TestChallengeHelpers(unittest.TestCase):
    def setUp(self) -> None:
        self.params = GlobalParameters.create(GENERATOR, MODULUS)

    def test_issued_challenge_ranges(self) -> None:
        for _ in range(50):
            challenge = issue_challenge(self.params, bits=16)
            self.assertTrue(0 < challenge.exponent < 2**16)
            self.assertTrue(1 <= challenge.multiplier < MODULUS)

    def test_expected_value(self) -> None:
        self.assertEqual(expected_value(10, 3, self.params), 1000)

    def test_challenge_dict_round_trip(self) -> None:
        challenge = Challenge(exponent=333, multiplier=99)
        self.assertEqual(challenge.to_dict(), {"exponent": "0x14d", "multiplier": "0x63"})
        self.assertEqual(Challenge.from_dict(challenge.to_dict()), challenge)

    def test_builtin_pow_is_a_drop_in(self) -> None:
        registry = MemoryRegistry()
        verifier = ChallengeVerifier(self.params, registry, modpow=pow)
        commitment = derive_commitment(123456, self.params, modpow=pow)
        registry.register("device", commitment)
        response = respond_to_challenge(commitment, Challenge(333, 99), self.params)
        self.assertTrue(verifier.verify("device", 333, response, 99))

    def test_negative_secret_rejected(self) -> None:
        with self.assertRaises(ValueError):
            derive_commitment(-1, self.params)


if __name__ == "__main__":
    unittest.main()
