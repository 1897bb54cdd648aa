"""Simple backup utility script.

Copies every stored key of the vault home into a timestamped folder.

Usage (from repo root):
  python -m scripts.backup --dest backups/
"""
from __future__ import annotations
import shutil
from datetime import datetime
from pathlib import Path
import click
from securevault.lib.storage import LocalStorage

@click.command()
@click.option('--dest', type=click.Path(file_okay=False, path_type=Path), default=Path('backups'), help='Destination directory for backups.')
def main(dest: Path):
	storage = LocalStorage()
	keys = storage.keys()
	if not keys:
		click.echo(f"No vault data at {storage.home}; nothing to backup.")
		raise SystemExit(1)
	stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
	target = dest / f"vault_{stamp}"
	target.mkdir(parents=True, exist_ok=True)
	for key in keys:
		shutil.copy2(storage.home / f"{key}.json", target / f"{key}.json")
	click.echo(f"Backup written: {target} ({len(keys)} keys)")

if __name__ == '__main__':  # pragma: no cover
	main()
