import pytest
from click.testing import CliRunner
from securevault.config.settings import CREDENTIALS_KEY
from securevault.lib.storage import LocalStorage
from securevault.cli.commands import cli

@pytest.fixture
def home(monkeypatch, tmp_path):
	path = tmp_path / 'home'
	monkeypatch.setenv('VAULT_HOME', str(path))
	monkeypatch.setenv('VAULT_LATENCY', '0')
	return path

def register(runner, email='a@x.com', password='secret1'):
	return runner.invoke(cli, ['register'], input=f'{email}\n{password}\n{password}\n')

def test_cli_help():
	r = CliRunner().invoke(cli, ['--help'])
	assert r.exit_code == 0
	for name in ('register', 'login', 'cred', 'generate', 'activity', 'dashboard'):
		assert name in r.output


def test_register_login_logout(home):
	runner = CliRunner()
	r = register(runner)
	assert r.exit_code == 0
	assert 'Registration Successful' in r.output
	assert 'a@x.com' in runner.invoke(cli, ['whoami']).output
	dup = register(runner)
	assert 'User with this email already exists' in dup.output
	bad = runner.invoke(cli, ['login', '--email', 'a@x.com', '--password', 'wrong'])
	assert bad.exit_code == 0
	assert 'Login Failed: Invalid password.' in bad.output
	ok = runner.invoke(cli, ['login', '--email', 'a@x.com', '--password', 'secret1'])
	assert 'Login Successful' in ok.output
	out = runner.invoke(cli, ['logout'])
	assert 'Logged Out' in out.output
	assert 'Not logged in' in runner.invoke(cli, ['whoami']).output
	log = runner.invoke(cli, ['activity', 'list'])
	assert log.output.index('Logout') < log.output.index('Login -')


def test_register_mismatch(home):
	r = CliRunner().invoke(cli, ['register'], input='a@x.com\nsecret1\nsecret2\n')
	assert 'Registration Failed: Passwords do not match' in r.output


def test_forgot_password(home):
	runner = CliRunner()
	assert 'No account found' in runner.invoke(cli, ['forgot-password', '--email', 'a@x.com']).output
	register(runner)
	assert 'Reset Link Sent' in runner.invoke(cli, ['forgot-password', '--email', 'a@x.com']).output


def test_credential_lifecycle(home):
	runner = CliRunner()
	register(runner)
	add = runner.invoke(cli, ['cred', 'add', '--master-password', 'secret1', '--site', 'GitHub',
		'--username', 'bob', '--password', 'Abc12345!', '--category', 'Work'])
	assert add.exit_code == 0
	assert 'Credential Added' in add.output
	assert '[Strong]' in add.output
	storage = LocalStorage(home)
	assert 'Abc12345!' not in storage.get_item(CREDENTIALS_KEY)
	cid = storage.read_list(CREDENTIALS_KEY)[0]['id']
	lst = runner.invoke(cli, ['cred', 'list', '--show'], input='secret1\n')
	assert 'GitHub (bob) [Work] Abc12345! Strong' in lst.output
	edit = runner.invoke(cli, ['cred', 'edit', cid, '--master-password', 'secret1', '--password', 'ab'])
	assert 'Credential Updated' in edit.output
	assert '[Weak]' in edit.output
	show = runner.invoke(cli, ['cred', 'show', cid, '--master-password', 'secret1'])
	assert 'Password: ab' in show.output
	assert 'Category: Work' in show.output
	rm = runner.invoke(cli, ['cred', 'rm', cid, '--master-password', 'secret1'])
	assert 'Credential Deleted' in rm.output
	empty = runner.invoke(cli, ['cred', 'list', '--master-password', 'secret1'])
	assert 'No credentials found' in empty.output


def test_two_accounts_share_the_store(home):
	runner = CliRunner()
	register(runner, 'a@x.com', 'secret1')
	add_a = runner.invoke(cli, ['cred', 'add', '--master-password', 'secret1', '--site', 'SiteA',
		'--username', 'alice', '--password', 'pw-a'])
	assert 'Credential Added' in add_a.output
	register(runner, 'b@x.com', 'secret2')
	add_b = runner.invoke(cli, ['cred', 'add', '--master-password', 'secret2', '--site', 'SiteB',
		'--username', 'bob', '--password', 'pw-b'])
	assert 'Credential Added' in add_b.output
	assert 'Invalid Format' not in add_b.output
	storage = LocalStorage(home)
	stored = storage.read_list(CREDENTIALS_KEY)
	assert len(stored) == 2
	a_id = stored[0]['id']
	list_b = runner.invoke(cli, ['cred', 'list', '--show', '--master-password', 'secret2'])
	assert 'SiteB (bob) [Personal] pw-b' in list_b.output
	assert 'SiteA' not in list_b.output
	assert 'No credential with id' in runner.invoke(cli, ['cred', 'show', a_id, '--master-password', 'secret2']).output
	runner.invoke(cli, ['cred', 'rm', a_id, '--master-password', 'secret2'])
	assert len(storage.read_list(CREDENTIALS_KEY)) == 2
	runner.invoke(cli, ['login', '--email', 'a@x.com', '--password', 'secret1'])
	list_a = runner.invoke(cli, ['cred', 'list', '--show', '--master-password', 'secret1'])
	assert 'SiteA (alice) [Personal] pw-a' in list_a.output
	assert 'SiteB' not in list_a.output
	r = runner.invoke(cli, ['dashboard', '--master-password', 'secret1'])
	assert '"totalCredentials": 1' in r.output


def test_edit_password_input_is_hidden():
	edit = cli.commands['cred'].commands['edit']
	password = next(p for p in edit.params if p.name == 'password')
	assert password.hide_input


def test_credentials_need_session_and_password(home):
	runner = CliRunner()
	locked = runner.invoke(cli, ['cred', 'list', '--master-password', 'secret1'])
	assert 'Not logged in' in locked.output
	register(runner)
	wrong = runner.invoke(cli, ['cred', 'list', '--master-password', 'nope'])
	assert 'Locked: Invalid password.' in wrong.output
	missing = runner.invoke(cli, ['cred', 'show', '42', '--master-password', 'secret1'])
	assert 'No credential with id 42' in missing.output
