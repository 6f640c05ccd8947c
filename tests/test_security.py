"""Unit tests for notevault.core.security: bcrypt hashing and credential shape rules."""

import unittest

from notevault.core.security import (
    hash_password,
    is_valid_email,
    is_valid_username,
    normalize_email,
    password_problems,
    verify_password,
)


class TestPasswordHashing(unittest.TestCase):
    def test_hash_is_salted(self) -> None:
        h1 = hash_password("Bb1!aaaa")
        h2 = hash_password("Bb1!aaaa")
        self.assertNotEqual(h1, h2)
        self.assertNotIn("Bb1!aaaa", h1)

    def test_verify_correct_and_wrong(self) -> None:
        hashed = hash_password("Bb1!aaaa")
        self.assertTrue(verify_password("Bb1!aaaa", hashed))
        self.assertFalse(verify_password("Bb1!aaab", hashed))

    def test_malformed_hash_does_not_verify(self) -> None:
        self.assertFalse(verify_password("Bb1!aaaa", "not-a-bcrypt-hash"))


class TestShapeRules(unittest.TestCase):
    def test_username(self) -> None:
        self.assertTrue(is_valid_username("bob"))
        self.assertTrue(is_valid_username("a_b-c9"))
        self.assertFalse(is_valid_username("ab"))
        self.assertFalse(is_valid_username("x" * 31))
        self.assertFalse(is_valid_username("bob smith"))

    def test_email(self) -> None:
        self.assertEqual(normalize_email("  Bob@X.com "), "bob@x.com")
        self.assertTrue(is_valid_email("bob@x.com"))
        self.assertFalse(is_valid_email("bob@x"))
        self.assertFalse(is_valid_email("bob x@y.com"))

    def test_strong_password_has_no_problems(self) -> None:
        self.assertEqual(password_problems("Bb1!aaaa"), [])

    def test_weak_password_lists_each_rule(self) -> None:
        problems = password_problems("abc")
        self.assertIn("at least 8 characters", problems)
        self.assertIn("an uppercase letter", problems)
        self.assertIn("a number", problems)
        self.assertIn("a special character", problems)
        self.assertNotIn("a lowercase letter", problems)


if __name__ == "__main__":
    unittest.main()
