"""Credential store: CRUD over the vault's credential records.

The collection is persisted whole under CREDENTIALS_KEY in insertion order
and is shared by every account. Each record carries the ``ownerId`` of the
account that wrote it; a store opened for an owner only sees that owner's
records (plus unowned legacy ones) and leaves the rest untouched on write.
Passwords go through the injected cipher before they are written and are
decrypted again on every read.
"""
from __future__ import annotations
import json, logging
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path
from typing import Dict, List
from securevault.config.settings import CREDENTIALS_KEY, CATEGORIES, DEFAULT_CATEGORY, EXPORT_FILENAME
from .activity import ActivityLog, iso_timestamp, millis_id
from .crypto import CryptoError, PlainCipher
from .errors import FormatError, NotFoundError, ValidationError
from .storage import LocalStorage, dump_json

log = logging.getLogger(__name__)

REQUIRED = ('siteName', 'username', 'password')


@dataclass
class CredentialRecord:
	siteName: str
	username: str
	password: str
	category: str = DEFAULT_CATEGORY
	notes: str = ''
	id: str = ''
	createdAt: str = ''
	updatedAt: str = ''
	ownerId: str = ''

	@classmethod
	def from_dict(cls, raw: Dict) -> 'CredentialRecord':
		if not isinstance(raw, dict):
			raise FormatError('Credential record is not an object')
		names = {f.name for f in fields(cls)}
		try:
			rec = cls(**{k: v for k, v in raw.items() if k in names})
		except TypeError as e:
			raise FormatError(f'Malformed credential record: {e}') from e
		if not rec.id or not all(isinstance(getattr(rec, n), str) for n in names):
			raise FormatError('Credential record needs a string id and string fields')
		return rec

	def to_dict(self) -> Dict[str, str]:
		return asdict(self)


def validate_record(record: CredentialRecord) -> None:
	missing = [n for n in REQUIRED if not getattr(record, n)]
	if missing:
		raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
	if record.category not in CATEGORIES:
		raise ValidationError(f"Unknown category {record.category!r}; choose one of {', '.join(CATEGORIES)}")


def filter_credentials(records: List[CredentialRecord], search: str = '', category: str = 'all') -> List[CredentialRecord]:
	term = (search or '').lower()
	return [
		r for r in records
		if (term in r.siteName.lower() or term in r.username.lower())
		and (category == 'all' or r.category == category)
	]


class CredentialStore:
	def __init__(self, storage: LocalStorage, activity: ActivityLog | None = None, cipher=None, owner: str | None = None):
		self.storage = storage
		self.activity = activity or ActivityLog(storage)
		self.cipher = cipher or PlainCipher()
		self.owner = owner

	def _load_raw(self) -> List[Dict]:
		raw = self.storage.read_list(CREDENTIALS_KEY)
		for pos, r in enumerate(raw, 1):
			try:
				CredentialRecord.from_dict(r)
			except FormatError as e:
				raise FormatError(f'Stored credential #{pos} is malformed ({e}); import a valid backup to recover') from e
		return raw

	def _visible(self, raw: Dict) -> bool:
		# unowned records predate per-account keys
		return not self.owner or not raw.get('ownerId') or raw['ownerId'] == self.owner

	def _decode(self, raw: Dict) -> CredentialRecord:
		rec = CredentialRecord.from_dict(raw)
		try:
			rec.password = self.cipher.decrypt(rec.password)
		except CryptoError as e:
			raise FormatError(f'Cannot decrypt credential {rec.id}: {e}') from e
		return rec

	def _encode(self, record: CredentialRecord) -> Dict[str, str]:
		owned = replace(record, password=self.cipher.encrypt(record.password), ownerId=self.owner or record.ownerId)
		return owned.to_dict()

	def _next_id(self, raw: List[Dict]) -> str:
		taken = {r['id'] for r in raw}
		candidate = int(millis_id())
		while str(candidate) in taken:
			candidate += 1
		return str(candidate)

	def list(self) -> List[CredentialRecord]:
		return [self._decode(r) for r in self._load_raw() if self._visible(r)]

	def get(self, credential_id: str) -> CredentialRecord:
		for r in self._load_raw():
			if r['id'] == credential_id and self._visible(r):
				return self._decode(r)
		raise NotFoundError(f'No credential with id {credential_id}')

	def upsert(self, record: CredentialRecord, is_edit: bool = False) -> List[CredentialRecord]:
		"""Add a new record or replace an existing one (complete record, no partial update)."""
		validate_record(record)
		raw = self._load_raw()
		now = iso_timestamp()
		if is_edit:
			idx = next((i for i, r in enumerate(raw) if r['id'] == record.id and self._visible(r)), None)
			if idx is None:
				raise NotFoundError(f'No credential with id {record.id}')
			updated = replace(record, createdAt=record.createdAt or raw[idx].get('createdAt', now), updatedAt=now)
			raw[idx] = self._encode(updated)
			action, verb = 'Update Credential', 'Updated'
		else:
			updated = replace(record, id=self._next_id(raw), createdAt=now, updatedAt=now)
			raw.append(self._encode(updated))
			action, verb = 'Add Credential', 'Added'
		self.storage.write_json(CREDENTIALS_KEY, raw)
		log.info('%s credential %s', verb, updated.id)
		self.activity.append(action, f'{verb} credential for {record.siteName}')
		return self.list()

	def remove(self, credential_id: str) -> List[CredentialRecord]:
		raw = self._load_raw()
		kept = [r for r in raw if r['id'] != credential_id or not self._visible(r)]
		self.storage.write_json(CREDENTIALS_KEY, kept)
		if len(kept) != len(raw):
			log.info('Deleted credential %s', credential_id)
		self.activity.append('Delete Credential', 'Deleted a credential from vault')
		return [self._decode(r) for r in kept if self._visible(r)]


def export_credentials(storage: LocalStorage, dest: Path | None = None) -> Path:
	"""Write the stored credentials value verbatim to ``dest``."""
	raw = storage.get_item(CREDENTIALS_KEY)
	if raw is None:
		raise NotFoundError('No credentials to export', title='No Data')
	target = Path(dest) if dest is not None else Path(EXPORT_FILENAME)
	if target.is_dir():
		target = target / EXPORT_FILENAME
	target.parent.mkdir(parents=True, exist_ok=True)
	target.write_text(raw, encoding='utf-8')
	log.info('Exported credentials -> %s', target)
	return target


def import_credentials(storage: LocalStorage, text: str) -> int:
	"""Replace the stored credentials with a previously exported list."""
	try:
		imported = json.loads(text)
	except json.JSONDecodeError as e:
		raise FormatError('Invalid file format.', title='Import Failed') from e
	if not isinstance(imported, list):
		raise FormatError('Invalid file format.', title='Import Failed')
	storage.set_item(CREDENTIALS_KEY, dump_json(imported))
	log.info('Imported %d credential(s)', len(imported))
	return len(imported)
