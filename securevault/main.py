"""Program entry point (CLI dispatcher).

Sets up file logging under the vault home, then hands over to click.
"""
from __future__ import annotations
import logging
from securevault.config.settings import LOG_FILE, log_level, vault_home
from securevault.cli.commands import cli

def configure_logging():
	home = vault_home()
	home.mkdir(parents=True, exist_ok=True)
	handler = logging.FileHandler(home / LOG_FILE, encoding='utf-8')
	handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
	root = logging.getLogger()
	root.setLevel(log_level())
	root.addHandler(handler)

def main():  # pragma: no cover - thin wrapper
	configure_logging()
	cli()

if __name__ == '__main__':  # pragma: no cover
	main()
