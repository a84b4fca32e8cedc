import unittest

from argon2 import PasswordHasher

from raffledesk.credentials import Argon2Verifier, CredentialVerifier, PlaintextVerifier


class TestCredentialVerifier(unittest.TestCase):
    def test_incomplete_verifier_cannot_be_built(self):
        class HashOnly(CredentialVerifier):
            def hash(self, password):
                return password

        with self.assertRaises(TypeError):
            HashOnly()


class TestPlaintextVerifier(unittest.TestCase):
    def test_exact_match_only(self):
        verifier = PlaintextVerifier()
        self.assertEqual(verifier.hash("pw"), "pw")
        self.assertTrue(verifier.verify("pw", "pw"))
        self.assertFalse(verifier.verify("PW", "pw"))
        self.assertFalse(verifier.verify("pw", None))


class TestArgon2Verifier(unittest.TestCase):
    def setUp(self):
        # cheap parameters keep the suite fast
        self.verifier = Argon2Verifier(PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))

    def test_hash_round_trip(self):
        stored = self.verifier.hash("s3cret")
        self.assertTrue(stored.startswith("$argon2"))
        self.assertTrue(self.verifier.verify("s3cret", stored))
        self.assertFalse(self.verifier.verify("wrong", stored))

    def test_plaintext_stored_value_rejected(self):
        with self.assertLogs("raffledesk.credentials", level="WARNING"):
            self.assertFalse(self.verifier.verify("s3cret", "s3cret"))


if __name__ == "__main__":
    unittest.main()
