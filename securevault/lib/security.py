"""Security settings record and the dashboard summary."""
from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Dict, List
from securevault.config.settings import (
	SECURITY_SETTINGS_KEY, DEFAULT_SECURITY_SETTINGS, SESSION_TIMEOUTS, WEAK_PASSWORD_LENGTH
)
from .activity import ActivityRecord, WINDOWS, utcnow, within
from .errors import FormatError, ValidationError
from .storage import LocalStorage
from .vault import CredentialRecord

log = logging.getLogger(__name__)


class SecuritySettingsStore:
	def __init__(self, storage: LocalStorage):
		self.storage = storage

	def load(self) -> Dict[str, Any]:
		saved = self.storage.read_json(SECURITY_SETTINGS_KEY, {})
		if not isinstance(saved, dict):
			raise FormatError('Stored security settings are not an object')
		return {**DEFAULT_SECURITY_SETTINGS, **saved}

	def update(self, **changes) -> Dict[str, Any]:
		for key, value in changes.items():
			if key not in DEFAULT_SECURITY_SETTINGS:
				raise ValidationError(f"Unknown setting {key!r}; known: {', '.join(DEFAULT_SECURITY_SETTINGS)}")
			if key == 'sessionTimeout':
				if isinstance(value, bool) or value not in SESSION_TIMEOUTS:
					raise ValidationError(f"sessionTimeout must be one of {', '.join(map(str, SESSION_TIMEOUTS))} minutes")
			elif not isinstance(value, bool):
				raise ValidationError(f'{key} must be true or false')
		settings = {**self.load(), **changes}
		self.storage.write_json(SECURITY_SETTINGS_KEY, settings)
		log.info('Security settings updated: %s', ', '.join(sorted(changes)))
		return settings


def dashboard_summary(credentials: List[CredentialRecord], activities: List[ActivityRecord],
		now: datetime | None = None) -> Dict[str, Any]:
	now = now or utcnow()
	weak = sum(1 for c in credentials if c.password and len(c.password) < WEAK_PASSWORD_LENGTH)
	last_login = next((a for a in activities if 'login' in a.action.lower()), None)
	last_change = next((a for a in activities if 'update credential' in a.action.lower()), None)
	return {
		'totalCredentials': len(credentials),
		'weakPasswords': weak,
		'recentActivity': sum(1 for a in activities if within(a, WINDOWS['day'], now)),
		'securityScore': max(50, 100 - weak * 10),
		'lastLogin': last_login.timestamp if last_login else None,
		'lastPasswordChange': last_change.timestamp if last_change else None,
	}
