"""Activity log: capped, newest-first list of user-facing events.

Every mutating action appends one record. The stored collection keeps only
the most recent ACTIVITY_LIMIT entries; each append is also written through
to the audit logger so a file handler can keep the full history.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, asdict, fields
from datetime import datetime, timedelta, timezone
from typing import Dict, List
from securevault.config.settings import (
	ACTIVITIES_KEY, ACTIVITY_LIMIT, PLACEHOLDER_IP, USER_AGENT_LIMIT, AUDIT_LOGGER, user_agent
)
from .errors import FormatError, ValidationError
from .storage import LocalStorage

log = logging.getLogger(__name__)
audit = logging.getLogger(AUDIT_LOGGER)

ACTION_TYPES = ('all', 'login', 'credential', 'security', 'generate')

WINDOWS = {
	'hour': timedelta(hours=1),
	'day': timedelta(days=1),
	'week': timedelta(days=7),
	'month': timedelta(days=30),
}

# Checked in order; first match wins.
ACTION_KINDS = [
	('login', ('login',)),
	('logout', ('logout',)),
	('create', ('add', 'create')),
	('update', ('update', 'edit')),
	('delete', ('delete',)),
	('generate', ('generate',)),
	('security', ('security',)),
]


def utcnow() -> datetime:
	return datetime.now(timezone.utc)

def iso_timestamp(dt: datetime | None = None) -> str:
	dt = dt or utcnow()
	return dt.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')

def parse_timestamp(value: str) -> datetime:
	try:
		dt = datetime.fromisoformat(value.replace('Z', '+00:00'))
	except (AttributeError, ValueError) as e:
		raise FormatError(f'Bad timestamp: {value!r}') from e
	if dt.tzinfo is None:
		dt = dt.replace(tzinfo=timezone.utc)
	return dt

def millis_id(dt: datetime | None = None) -> str:
	return str(int((dt or utcnow()).timestamp() * 1000))


@dataclass
class ActivityRecord:
	id: str
	action: str
	details: str
	timestamp: str
	ipAddress: str
	userAgent: str

	@classmethod
	def from_dict(cls, raw: Dict) -> 'ActivityRecord':
		if not isinstance(raw, dict):
			raise FormatError('Activity record is not an object')
		names = {f.name for f in fields(cls)}
		try:
			rec = cls(**{k: v for k, v in raw.items() if k in names})
		except TypeError as e:
			raise FormatError(f'Malformed activity record: {e}') from e
		if not all(isinstance(getattr(rec, n), str) for n in names):
			raise FormatError('Activity record fields must be strings')
		rec.at()
		return rec

	def at(self) -> datetime:
		return parse_timestamp(self.timestamp)


def format_relative(timestamp: str, now: datetime | None = None) -> str:
	when = parse_timestamp(timestamp)
	diff = (now or utcnow()) - when
	mins = int(diff.total_seconds() // 60)
	hours = int(diff.total_seconds() // 3600)
	days = int(diff.total_seconds() // 86400)
	if mins < 1: return 'Just now'
	if mins < 60: return f'{mins}m ago'
	if hours < 24: return f'{hours}h ago'
	if days < 7: return f'{days}d ago'
	return when.astimezone().strftime('%x')

def classify_action(action: str) -> str:
	lower = action.lower()
	for kind, needles in ACTION_KINDS:
		if any(n in lower for n in needles):
			return kind
	return 'other'

def within(record: ActivityRecord, window: timedelta, now: datetime) -> bool:
	return now - record.at() < window


class ActivityLog:
	def __init__(self, storage: LocalStorage, agent: str | None = None):
		self.storage = storage
		self.agent = agent if agent is not None else user_agent()

	def _load(self) -> List[ActivityRecord]:
		return [ActivityRecord.from_dict(r) for r in self.storage.read_list(ACTIVITIES_KEY)]

	def append(self, action: str, details: str) -> ActivityRecord:
		entries = self._load()
		now = utcnow()
		rec = ActivityRecord(
			id=millis_id(now),
			action=action,
			details=details,
			timestamp=iso_timestamp(now),
			ipAddress=PLACEHOLDER_IP,
			userAgent=self.agent[:USER_AGENT_LIMIT] + '...',
		)
		entries.insert(0, rec)
		self.storage.write_json(ACTIVITIES_KEY, [asdict(e) for e in entries[:ACTIVITY_LIMIT]])
		audit.info('%s | %s | %s', rec.timestamp, action, details)
		return rec

	def list(self, search: str | None = None, action_type: str | None = None,
			window: str | None = None, now: datetime | None = None) -> List[ActivityRecord]:
		entries = self._load()
		if search:
			term = search.lower()
			entries = [e for e in entries if term in e.action.lower() or term in e.details.lower()]
		if action_type and action_type != 'all':
			kind = action_type.lower()
			entries = [e for e in entries if kind in e.action.lower()]
		if window and window != 'all':
			if window not in WINDOWS:
				raise ValidationError(f'Unknown time window: {window}')
			now = now or utcnow()
			entries = [e for e in entries if within(e, WINDOWS[window], now)]
		return entries

	def stats(self, now: datetime | None = None) -> Dict[str, int]:
		entries = self._load()
		now = now or utcnow()
		return {
			'today': sum(1 for e in entries if within(e, WINDOWS['day'], now)),
			'week': sum(1 for e in entries if within(e, WINDOWS['week'], now)),
			'totalLogins': sum(1 for e in entries if 'login' in e.action.lower()),
			'total': len(entries),
		}

