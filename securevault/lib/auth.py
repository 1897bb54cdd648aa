"""Accounts and session: registry of users plus the logged-in identity.

Registry entries keep a bcrypt hash of the account password and the salt used
to derive the key that protects credential passwords.
"""
from __future__ import annotations
import logging, time
from typing import Callable, Dict, List, Optional
import bcrypt
from securevault.config.settings import USER_KEY, REGISTRY_KEY, MIN_PASSWORD_LENGTH, latency as configured_latency
from .activity import ActivityLog, iso_timestamp, millis_id
from .crypto import VaultCrypto
from .errors import AuthError, ConflictError, FormatError, NotFoundError, ValidationError
from .storage import LocalStorage

log = logging.getLogger(__name__)

SESSION_FIELDS = ('id', 'email', 'name', 'twoFactorEnabled', 'createdAt')

def hash_password(password: str) -> str:
	if not password:
		raise AuthError('Empty password')
	return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()

def verify_password(password: str, hashed: str) -> bool:
	try:
		return bcrypt.checkpw(password.encode(), hashed.encode())
	except (ValueError, TypeError):
		return False


class SessionStore:
	def __init__(self, storage: LocalStorage, activity: ActivityLog | None = None,
			latency: float | None = None, sleep: Callable[[float], None] = time.sleep):
		self.storage = storage
		self.activity = activity or ActivityLog(storage)
		self.latency = configured_latency() if latency is None else latency
		self.sleep = sleep
		self.crypto = VaultCrypto()

	def _wait(self):
		# Stand-in for a network round trip
		if self.latency > 0:
			self.sleep(self.latency)

	def _registry(self) -> List[Dict]:
		try:
			users = self.storage.read_json(REGISTRY_KEY, [])
		except FormatError:
			log.warning('Registry is not valid JSON; treating it as empty')
			return []
		return users if isinstance(users, list) else []

	def _find(self, email: str) -> Optional[Dict]:
		email = email.lower()
		return next((u for u in self._registry() if isinstance(u, dict) and str(u.get('email', '')).lower() == email), None)

	def _start_session(self, user: Dict) -> Dict:
		session = {k: user.get(k) for k in SESSION_FIELDS}
		session['twoFactorEnabled'] = bool(session['twoFactorEnabled'])
		self.storage.write_json(USER_KEY, session)
		return session

	def current_user(self) -> Optional[Dict]:
		try:
			user = self.storage.read_json(USER_KEY)
		except FormatError:
			self.storage.remove_item(USER_KEY)
			return None
		return user if isinstance(user, dict) else None

	def register(self, email: str, password: str, confirm_password: str) -> Dict:
		if password != confirm_password:
			raise ValidationError('Passwords do not match', title='Registration Failed')
		if len(password) < MIN_PASSWORD_LENGTH:
			raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long', title='Registration Failed')
		self._wait()
		if self._find(email):
			raise ConflictError('User with this email already exists', title='Registration Failed')
		users = self._registry()
		user = {
			'id': millis_id(),
			'email': email.lower(),
			'passwordHash': hash_password(password),
			'salt': self.crypto.generate_salt().hex(),
			'name': email.split('@')[0],
			'twoFactorEnabled': False,
			'createdAt': iso_timestamp(),
		}
		users.append(user)
		self.storage.write_json(REGISTRY_KEY, users)
		log.info('Registered account %s', user['id'])
		return self._start_session(user)

	def login(self, email: str, password: str) -> Dict:
		self._wait()
		user = self._find(email)
		if not user:
			raise NotFoundError('User not found. Please register first.', title='Login Failed')
		if not verify_password(password, user.get('passwordHash', '')):
			log.warning('Failed login for account %s', user.get('id'))
			raise AuthError('Invalid password.', title='Login Failed')
		session = self._start_session(user)
		self.activity.append('Login', 'User logged in successfully')
		return session

	def logout(self) -> None:
		self.storage.remove_item(USER_KEY)
		self.activity.append('Logout', 'User logged out')

	def forgot_password(self, email: str) -> bool:
		"""Simulated reset: only checks that the account exists."""
		self._wait()
		if not self._find(email):
			raise NotFoundError('No account found with this email address', title='Reset Failed')
		return True

	def unlock(self, password: str) -> bytes:
		"""Verify the session user's password and derive the vault key."""
		session = self.current_user()
		if not session:
			raise AuthError('Not logged in. Run `securevault login` first.', title='Locked')
		user = self._find(str(session.get('email', '')))
		if not user or user.get('id') != session.get('id'):
			raise AuthError('Session does not match a registered account', title='Locked')
		if not verify_password(password, user.get('passwordHash', '')):
			raise AuthError('Invalid password.', title='Locked')
		try:
			salt = bytes.fromhex(user['salt'])
		except (KeyError, ValueError) as e:
			raise FormatError('Account has no valid key salt') from e
		return self.crypto.derive_key(password, salt)
