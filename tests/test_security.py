"""
Tests for password hashing, JWT handling and PII masking/encryption.
Run from the project root: python -m pytest tests/test_security.py -v
"""
import unittest
from datetime import datetime, timedelta, timezone

import jwt

from config import Settings
from utils.errors import AppError, AuthError
from utils.security import (
    JWT_ALGORITHM,
    create_tokens,
    decode_access_token,
    decode_refresh_token,
    decrypt,
    encrypt,
    hash_password,
    mask_aadhaar,
    mask_email,
    mask_pan,
    mask_phone,
    verify_password,
)


class TestPasswords(unittest.TestCase):
    def test_hash_and_verify(self):
        hashed = hash_password("Secret@123", rounds=4)
        self.assertNotEqual(hashed, "Secret@123")
        self.assertTrue(verify_password("Secret@123", hashed))
        self.assertFalse(verify_password("Wrong@123", hashed))

    def test_malformed_hash(self):
        self.assertFalse(verify_password("Secret@123", "not-a-bcrypt-hash"))


class TestTokens(unittest.TestCase):
    def setUp(self):
        self.settings = Settings(jwt_secret="access-secret", jwt_refresh_secret="refresh-secret")
        self.tokens = create_tokens("user-1", "a@example.com", "CUSTOMER", self.settings)

    def test_access_token_round_trip(self):
        payload = decode_access_token(self.tokens["accessToken"], self.settings)
        self.assertEqual(payload["id"], "user-1")
        self.assertEqual(payload["role"], "CUSTOMER")
        self.assertEqual(payload["type"], "access")

    def test_tokens_are_not_interchangeable(self):
        with self.assertRaises(AuthError) as ctx:
            decode_access_token(self.tokens["refreshToken"], self.settings)
        self.assertEqual(ctx.exception.code, "INVALID_TOKEN")
        with self.assertRaises(AuthError) as ctx:
            decode_refresh_token(self.tokens["accessToken"], self.settings)
        self.assertEqual(ctx.exception.code, "INVALID_REFRESH_TOKEN")

    def test_expired_token(self):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = jwt.encode(
            {"id": "user-1", "type": "access", "iat": past - timedelta(minutes=15), "exp": past},
            "access-secret",
            algorithm=JWT_ALGORITHM,
        )
        with self.assertRaises(AuthError) as ctx:
            decode_access_token(token, self.settings)
        self.assertEqual(ctx.exception.code, "TOKEN_EXPIRED")

    def test_garbage_token(self):
        with self.assertRaises(AuthError) as ctx:
            decode_access_token("not.a.token", self.settings)
        self.assertEqual(ctx.exception.code, "INVALID_TOKEN")


class TestPii(unittest.TestCase):
    def test_encrypt_round_trip(self):
        token = encrypt("123456789012", "passphrase")
        self.assertNotIn("123456789012", token)
        self.assertEqual(decrypt(token, "passphrase"), "123456789012")

    def test_decrypt_with_wrong_key(self):
        token = encrypt("123456789012", "passphrase")
        with self.assertRaises(AppError) as ctx:
            decrypt(token, "other-passphrase")
        self.assertEqual(ctx.exception.code, "DECRYPTION_ERROR")

    def test_masks(self):
        self.assertEqual(mask_pan("ABCDE1234F"), "AB****234F")
        self.assertEqual(mask_aadhaar("123456789012"), "****-****-9012")
        self.assertEqual(mask_phone("9876543210"), "******3210")
        self.assertEqual(mask_email("john.doe@gmail.com"), "joh***@gmail.com")


if __name__ == "__main__":
    unittest.main()
