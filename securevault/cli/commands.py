"""CLI commands implemented with click.

Each command opens the local store, runs one vault operation and prints the
outcome as a notification line (``<title>: <message>``).
"""
from __future__ import annotations
import json, logging, click
from pathlib import Path
from securevault.config.settings import VERSION, CATEGORIES, DEFAULT_SECURITY_SETTINGS, EXPORT_FILENAME
from securevault.lib.activity import ActivityLog, ACTION_TYPES, WINDOWS, classify_action, format_relative
from securevault.lib.auth import SessionStore
from securevault.lib.crypto import FieldCipher, rate_password, meter_password
from securevault.lib.errors import VaultError
from securevault.lib.generator import PasswordGenerator, PRESETS, PRESET_DESCRIPTIONS
from securevault.lib.security import SecuritySettingsStore, dashboard_summary
from securevault.lib.storage import LocalStorage
from securevault.lib.vault import CredentialRecord, CredentialStore, export_credentials, import_credentials, filter_credentials

log = logging.getLogger(__name__)

def notify(title: str, message: str):
	click.echo(f'{title}: {message}')

def fail(e: VaultError):
	log.warning('%s: %s', e.title, e)
	notify(e.title, str(e))

def unlocked_store(storage: LocalStorage, master_password: str) -> CredentialStore:
	sessions = SessionStore(storage, latency=0)
	key = sessions.unlock(master_password)
	owner = sessions.current_user()['id']
	return CredentialStore(storage, ActivityLog(storage), FieldCipher(key), owner=owner)

master_option = click.option('--master-password', prompt='Master password', hide_input=True, help='Password of the logged-in account.')

@click.group()
@click.version_option(version=VERSION, prog_name='securevault')
def cli():
	"""SecureVault password vault CLI"""

# --- Account ---

@cli.command()
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True)
@click.option('--confirm', prompt='Confirm password', hide_input=True)
def register(email, password, confirm):
	"""Create an account and log in."""
	try:
		user = SessionStore(LocalStorage()).register(email, password, confirm)
		notify('Registration Successful', 'Your account has been created successfully')
		click.echo(f"Logged in as {user['email']}")
	except VaultError as e:
		fail(e)

@cli.command()
@click.option('--email', prompt=True)
@click.option('--password', prompt=True, hide_input=True)
def login(email, password):
	try:
		SessionStore(LocalStorage()).login(email, password)
		notify('Login Successful', 'Welcome back to SecureVault')
	except VaultError as e:
		fail(e)

@cli.command()
def logout():
	try:
		SessionStore(LocalStorage()).logout()
		notify('Logged Out', 'You have been logged out successfully')
	except VaultError as e:
		fail(e)

@cli.command('forgot-password')
@click.option('--email', prompt=True)
def forgot_password(email):
	"""Simulated password reset request."""
	try:
		SessionStore(LocalStorage()).forgot_password(email)
		notify('Reset Link Sent', 'Password reset instructions have been sent to your email')
	except VaultError as e:
		fail(e)

@cli.command()
def whoami():
	user = SessionStore(LocalStorage(), latency=0).current_user()
	if not user:
		click.echo('Not logged in')
		return
	click.echo(f"{user.get('name')} <{user.get('email')}> (since {user.get('createdAt')})")

# --- Credentials ---

@cli.group()
def cred():
	"""Manage stored credentials."""

@cred.command('add')
@master_option
@click.option('--site', prompt='Site name')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True)
@click.option('--category', type=click.Choice(CATEGORIES), default=CATEGORIES[0], show_default=True)
@click.option('--notes', default='')
def cred_add(master_password, site, username, password, category, notes):
	"""Add a credential to the vault."""
	try:
		store = unlocked_store(LocalStorage(), master_password)
		records = store.upsert(CredentialRecord(site, username, password, category, notes))
		notify('Credential Added', 'Your credential has been added to the vault.')
		click.echo(f'{records[-1].id}: {site} [{rate_password(password).label}]')
	except VaultError as e:
		fail(e)

@cred.command('edit')
@click.argument('credential_id')
@master_option
@click.option('--site')
@click.option('--username')
@click.option('--password', hide_input=True)
@click.option('--category', type=click.Choice(CATEGORIES))
@click.option('--notes')
def cred_edit(credential_id, master_password, site, username, password, category, notes):
	"""Update fields of a credential; unspecified fields are kept."""
	try:
		store = unlocked_store(LocalStorage(), master_password)
		current = store.get(credential_id)
		changes = {'siteName': site, 'username': username, 'password': password, 'category': category, 'notes': notes}
		for name, value in changes.items():
			if value is not None:
				setattr(current, name, value)
		store.upsert(current, is_edit=True)
		notify('Credential Updated', 'Your credential has been updated successfully.')
		click.echo(f'{current.id}: {current.siteName} [{rate_password(current.password).label}]')
	except VaultError as e:
		fail(e)

@cred.command('rm')
@click.argument('credential_id')
@master_option
def cred_rm(credential_id, master_password):
	try:
		unlocked_store(LocalStorage(), master_password).remove(credential_id)
		notify('Credential Deleted', 'The credential has been removed from your vault.')
	except VaultError as e:
		fail(e)

@cred.command('list')
@master_option
@click.option('--search', default='')
@click.option('--category', type=click.Choice(('all',) + CATEGORIES), default='all', show_default=True)
@click.option('--show', is_flag=True, help='Print passwords in clear text.')
def cred_list(master_password, search, category, show):
	try:
		records = filter_credentials(unlocked_store(LocalStorage(), master_password).list(), search, category)
	except VaultError as e:
		fail(e)
		return
	if not records:
		click.echo('No credentials found')
		return
	for r in records:
		secret = r.password if show else '*' * 8
		click.echo(f'{r.id}: {r.siteName} ({r.username}) [{r.category}] {secret} {rate_password(r.password).label}')

@cred.command('show')
@click.argument('credential_id')
@master_option
def cred_show(credential_id, master_password):
	try:
		r = unlocked_store(LocalStorage(), master_password).get(credential_id)
	except VaultError as e:
		fail(e)
		return
	click.echo(f"ID: {r.id}\nSite: {r.siteName}\nUsername: {r.username}\nPassword: {r.password}\nStrength: {rate_password(r.password).label}\nCategory: {r.category}\nCreated: {r.createdAt}\nUpdated: {r.updatedAt}\n---\n{r.notes}")

# --- Generator ---

@cli.command()
@click.option('--preset', type=click.Choice(list(PRESETS)), help='Start from a named preset.')
@click.option('--length', type=int)
@click.option('--uppercase/--no-uppercase', default=None)
@click.option('--lowercase/--no-lowercase', default=None)
@click.option('--numbers/--no-numbers', default=None)
@click.option('--symbols/--no-symbols', default=None)
@click.option('--exclude-similar/--include-similar', default=None)
@click.option('--exclude-ambiguous/--include-ambiguous', default=None)
@click.option('--list-presets', is_flag=True)
def generate(preset, length, uppercase, lowercase, numbers, symbols, exclude_similar, exclude_ambiguous, list_presets):
	"""Generate a random password."""
	if list_presets:
		for name, opts in PRESETS.items():
			click.echo(f'{name} ({opts.length} chars): {PRESET_DESCRIPTIONS[name]}')
		return
	storage = LocalStorage()
	gen = PasswordGenerator(ActivityLog(storage))
	try:
		if preset:
			gen.apply_preset(preset)
		overrides = {
			'length': length, 'uppercase': uppercase, 'lowercase': lowercase, 'numbers': numbers,
			'symbols': symbols, 'exclude_similar': exclude_similar, 'exclude_ambiguous': exclude_ambiguous,
		}
		gen.configure(**{k: v for k, v in overrides.items() if v is not None})
		password = gen.generate()
	except VaultError as e:
		fail(e)
		return
	meter = meter_password(password)
	click.echo(password)
	click.echo(f'Strength: {meter.label} ({meter.percent}%)')

@cli.command('strength')
@click.argument('password')
def strength_cmd(password):
	"""Rate a password."""
	rating = rate_password(password)
	click.echo(f'Rating: {rating.label} ({rating.score}/5)')

# --- Activity ---

@cli.group()
def activity():
	"""Inspect the activity log."""

@activity.command('list')
@click.option('--search', default='')
@click.option('--type', 'action_type', type=click.Choice(ACTION_TYPES), default='all', show_default=True)
@click.option('--since', type=click.Choice(('all',) + tuple(WINDOWS)), default='all', show_default=True)
def activity_list(search, action_type, since):
	try:
		entries = ActivityLog(LocalStorage()).list(search, action_type, since)
	except VaultError as e:
		fail(e)
		return
	if not entries:
		click.echo('No activity found')
		return
	for a in entries:
		click.echo(f'{format_relative(a.timestamp):>10}  {a.action} - {a.details} ({classify_action(a.action)}, {a.ipAddress})')

@activity.command('stats')
def activity_stats():
	try:
		stats = ActivityLog(LocalStorage()).stats()
	except VaultError as e:
		fail(e)
		return
	click.echo(json.dumps(stats, indent=2))

# --- Settings, import/export, dashboard ---

@cli.group()
def settings():
	"""View or change security settings."""

@settings.command('show')
def settings_show():
	try:
		click.echo(json.dumps(SecuritySettingsStore(LocalStorage()).load(), indent=2))
	except VaultError as e:
		fail(e)

@settings.command('set')
@click.argument('key', type=click.Choice(list(DEFAULT_SECURITY_SETTINGS)))
@click.argument('value')
def settings_set(key, value):
	"""Set KEY to VALUE (true/false, or minutes for sessionTimeout)."""
	lowered = value.lower()
	if lowered in ('true', 'yes', 'on'): parsed = True
	elif lowered in ('false', 'no', 'off'): parsed = False
	elif lowered.isdigit(): parsed = int(lowered)
	else: parsed = value
	try:
		SecuritySettingsStore(LocalStorage()).update(**{key: parsed})
		notify('Settings Updated', 'Your security settings have been saved')
	except VaultError as e:
		fail(e)

@cli.command('export')
@click.option('--dest', type=click.Path(path_type=Path), default=Path(EXPORT_FILENAME), show_default=True)
def export_cmd(dest):
	"""Write the stored credentials to a JSON backup file."""
	try:
		target = export_credentials(LocalStorage(), dest)
		notify('Exported', f'Credentials exported as JSON file ({target}).')
	except VaultError as e:
		fail(e)

@cli.command('import')
@click.argument('source', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def import_cmd(source):
	"""Replace the stored credentials with a JSON backup file.

	Any JSON list is accepted as is. Entries that are not credential records
	(no string id, non-string fields) make every `cred` command fail until a
	valid backup is imported.
	"""
	try:
		count = import_credentials(LocalStorage(), source.read_text(encoding='utf-8'))
		notify('Imported', f'Credentials imported successfully ({count}).')
	except VaultError as e:
		fail(e)

@cli.command()
@master_option
def dashboard(master_password):
	"""Summarise vault health and recent activity."""
	storage = LocalStorage()
	try:
		credentials = unlocked_store(storage, master_password).list()
		summary = dashboard_summary(credentials, ActivityLog(storage).list())
	except VaultError as e:
		fail(e)
		return
	click.echo(json.dumps(summary, indent=2))
