"""Error taxonomy shared by the vault components.

Each error carries a short ``title`` so the command line can render it as a
notification (``<title>: <message>``).
"""
from __future__ import annotations


class VaultError(Exception):
	title = 'Error'

	def __init__(self, message: str, title: str | None = None):
		super().__init__(message)
		if title:
			self.title = title


class ValidationError(VaultError):
	title = 'Invalid Input'

class ConflictError(VaultError):
	title = 'Conflict'

class NotFoundError(VaultError):
	title = 'Not Found'

class AuthError(VaultError):
	title = 'Authentication Failed'

class FormatError(VaultError):
	title = 'Invalid Format'

class StorageError(VaultError):
	title = 'Storage Error'
