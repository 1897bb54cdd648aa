"""Cryptographic utilities (encryption boundary + password strength)."""
from __future__ import annotations
import base64, binascii, re, secrets
from typing import NamedTuple
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.backends import default_backend
from securevault.config.settings import (
	DEFAULT_ITERATIONS, SALT_LENGTH, KEY_LENGTH, IV_LENGTH, AUTH_TAG_LENGTH, CIPHER_PREFIX
)

class CryptoError(Exception):
	pass

class VaultCrypto:
	def __init__(self):
		self._backend = default_backend()

	def generate_salt(self) -> bytes:
		return secrets.token_bytes(SALT_LENGTH)

	def derive_key(self, password: str, salt: bytes, iterations: int = DEFAULT_ITERATIONS) -> bytes:
		if not password:
			raise CryptoError("Password empty")
		kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=KEY_LENGTH, salt=salt, iterations=iterations, backend=self._backend)
		return kdf.derive(password.encode())

	def encrypt(self, data: bytes, key: bytes) -> bytes:
		if len(key) != KEY_LENGTH: raise CryptoError("Bad key length")
		iv = secrets.token_bytes(IV_LENGTH)
		cipher = Cipher(algorithms.AES(key), modes.GCM(iv), backend=self._backend)
		enc = cipher.encryptor()
		ct = enc.update(data) + enc.finalize()
		return iv + ct + enc.tag

	def decrypt(self, blob: bytes, key: bytes) -> bytes:
		if len(key) != KEY_LENGTH: raise CryptoError("Bad key length")
		if len(blob) < IV_LENGTH + AUTH_TAG_LENGTH: raise CryptoError("Ciphertext too short")
		iv = blob[:IV_LENGTH]; tag = blob[-AUTH_TAG_LENGTH:]; ct = blob[IV_LENGTH:-AUTH_TAG_LENGTH]
		cipher = Cipher(algorithms.AES(key), modes.GCM(iv, tag), backend=self._backend)
		dec = cipher.decryptor()
		try:
			return dec.update(ct) + dec.finalize()
		except Exception as e:
			raise CryptoError(f"Decrypt failed: {e}")

	def encrypt_text(self, text: str, key: bytes) -> str:
		return base64.b64encode(self.encrypt(text.encode('utf-8'), key)).decode('ascii')

	def decrypt_text(self, token: str, key: bytes) -> str:
		try:
			raw = base64.b64decode(token, validate=True)
		except (binascii.Error, ValueError) as e:
			raise CryptoError(f"Bad token encoding: {e}")
		return self.decrypt(raw, key).decode('utf-8')


class PlainCipher:
	"""Identity cipher used when no vault key has been unlocked."""

	def encrypt(self, text: str) -> str:
		return text

	def decrypt(self, token: str) -> str:
		return token


class FieldCipher:
	"""Encrypts single string fields (credential passwords) with a vault key.

	Tokens are tagged with CIPHER_PREFIX; values without the tag are legacy
	plaintext and are returned unchanged by decrypt().
	"""

	def __init__(self, key: bytes, crypto: VaultCrypto | None = None):
		if len(key) != KEY_LENGTH:
			raise CryptoError("Bad key length")
		self._key = key
		self._crypto = crypto or VaultCrypto()

	def encrypt(self, text: str) -> str:
		return CIPHER_PREFIX + self._crypto.encrypt_text(text, self._key)

	def decrypt(self, token: str) -> str:
		if not token.startswith(CIPHER_PREFIX):
			return token
		return self._crypto.decrypt_text(token[len(CIPHER_PREFIX):], self._key)


# Password strength

SYMBOL_RE = re.compile(r'[!@#$%^&*(),.?":{}|<>]')

class Strength(NamedTuple):
	label: str
	score: int
	percent: int = 0

def _class_points(password: str) -> int:
	checks = [re.search(r'[A-Z]', password), re.search(r'[a-z]', password), re.search(r'\d', password), SYMBOL_RE.search(password)]
	return sum(1 for c in checks if c)

def rate_password(password: str) -> Strength:
	"""Canonical 5-point rating used for stored credentials."""
	if not password:
		return Strength('Unknown', 0)
	score = (1 if len(password) >= 8 else 0) + _class_points(password)
	if score >= 4: label = 'Strong'
	elif score == 3: label = 'Medium'
	else: label = 'Weak'
	return Strength(label, score)

def meter_password(password: str) -> Strength:
	"""6-point gauge shown next to freshly generated passwords."""
	if not password:
		return Strength('Generate a password', 0, 0)
	L = len(password)
	score = 2 if L >= 12 else 1 if L >= 8 else 0
	score += _class_points(password)
	if score >= 5: return Strength('Very Strong', score, 100)
	if score >= 4: return Strength('Strong', score, 80)
	if score >= 3: return Strength('Medium', score, 60)
	if score >= 2: return Strength('Weak', score, 40)
	return Strength('Very Weak', score, 20)
