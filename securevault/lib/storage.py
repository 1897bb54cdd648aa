"""Local key-value store.

Each key is persisted as ``<home>/<key>.json`` holding the JSON text of its
value, mirroring a browser's local storage: callers get and set whole strings
and decide themselves how to parse them.
"""
from __future__ import annotations
import json, os, logging, re
from pathlib import Path
from typing import Any, Optional
from securevault.config.settings import vault_home
from .errors import FormatError, StorageError

log = logging.getLogger(__name__)

_KEY_RE = re.compile(r'^[A-Za-z0-9_.-]+$')


def dump_json(value: Any) -> str:
	"""Compact serialization used for every stored value."""
	return json.dumps(value, separators=(',', ':'), ensure_ascii=False)


class LocalStorage:
	def __init__(self, home: Path | None = None):
		# Resolve path dynamically to honor environment overrides in tests
		self.home = Path(home) if home is not None else vault_home()

	def _path(self, key: str) -> Path:
		if not _KEY_RE.match(key):
			raise StorageError(f'Invalid storage key: {key!r}')
		return self.home / f'{key}.json'

	def get_item(self, key: str) -> Optional[str]:
		path = self._path(key)
		if not path.exists():
			return None
		try:
			return path.read_text(encoding='utf-8')
		except OSError as e:
			raise StorageError(f'Cannot read {key}: {e}') from e

	def set_item(self, key: str, value: str) -> None:
		path = self._path(key)
		try:
			self.home.mkdir(parents=True, exist_ok=True)
			tmp = path.with_suffix('.tmp')
			tmp.write_text(value, encoding='utf-8')
			os.replace(tmp, path)
		except OSError as e:
			raise StorageError(f'Cannot write {key}: {e}') from e
		log.debug('Stored %s (%d bytes)', key, len(value))

	def remove_item(self, key: str) -> None:
		try:
			self._path(key).unlink(missing_ok=True)
		except OSError as e:
			raise StorageError(f'Cannot remove {key}: {e}') from e

	def keys(self) -> list[str]:
		if not self.home.exists():
			return []
		return sorted(p.stem for p in self.home.glob('*.json'))

	# JSON helpers

	def read_json(self, key: str, default: Any = None) -> Any:
		"""Parse the stored value, raising FormatError when it is not JSON."""
		raw = self.get_item(key)
		if raw is None:
			return default
		try:
			return json.loads(raw)
		except json.JSONDecodeError as e:
			raise FormatError(f'Stored value for {key} is not valid JSON: {e}') from e

	def write_json(self, key: str, value: Any) -> None:
		self.set_item(key, dump_json(value))

	def read_list(self, key: str) -> list:
		value = self.read_json(key, [])
		if not isinstance(value, list):
			raise FormatError(f'Stored value for {key} is not a list')
		return value
