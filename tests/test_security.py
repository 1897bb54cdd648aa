import pytest
from datetime import datetime, timedelta, timezone
from securevault.config.settings import DEFAULT_SECURITY_SETTINGS, SECURITY_SETTINGS_KEY
from securevault.lib.activity import ActivityRecord, iso_timestamp
from securevault.lib.errors import FormatError, ValidationError
from securevault.lib.security import SecuritySettingsStore, dashboard_summary
from securevault.lib.storage import LocalStorage
from securevault.lib.vault import CredentialRecord

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

def activity(action, ago):
    return ActivityRecord('1', action, '', iso_timestamp(NOW - ago), '192.168.1.1', 'pytest...')

def test_defaults_when_absent(tmp_path):
    assert SecuritySettingsStore(LocalStorage(tmp_path)).load() == DEFAULT_SECURITY_SETTINGS

def test_update_merges_and_persists(tmp_path):
    storage = LocalStorage(tmp_path)
    SecuritySettingsStore(storage).update(sessionTimeout=15, breachMonitoring=False)
    loaded = SecuritySettingsStore(storage).load()
    assert loaded['sessionTimeout'] == 15
    assert loaded['breachMonitoring'] is False
    assert loaded['autoLockEnabled'] is True

def test_saved_values_override_defaults(tmp_path):
    storage = LocalStorage(tmp_path)
    storage.write_json(SECURITY_SETTINGS_KEY, {'autoLockEnabled': False})
    loaded = SecuritySettingsStore(storage).load()
    assert loaded['autoLockEnabled'] is False
    assert loaded['sessionTimeout'] == 30

@pytest.mark.parametrize('changes', [
    {'colour': True},
    {'sessionTimeout': 45},
    {'sessionTimeout': True},
    {'autoLockEnabled': 'yes'},
])
def test_update_rejects_bad_values(tmp_path, changes):
    with pytest.raises(ValidationError):
        SecuritySettingsStore(LocalStorage(tmp_path)).update(**changes)

def test_malformed_settings(tmp_path):
    storage = LocalStorage(tmp_path)
    storage.set_item(SECURITY_SETTINGS_KEY, '[1]')
    with pytest.raises(FormatError):
        SecuritySettingsStore(storage).load()

def test_dashboard_summary():
    creds = [CredentialRecord('A', 'u', 'short', id='1'), CredentialRecord('B', 'u', 'LongEnough1!', id='2')]
    acts = [
        activity('Update Credential', timedelta(hours=1)),
        activity('Login', timedelta(hours=2)),
        activity('Login', timedelta(days=3)),
    ]
    summary = dashboard_summary(creds, acts, now=NOW)
    assert summary == {
        'totalCredentials': 2,
        'weakPasswords': 1,
        'recentActivity': 2,
        'securityScore': 90,
        'lastLogin': acts[1].timestamp,
        'lastPasswordChange': acts[0].timestamp,
    }

def test_dashboard_score_floor():
    creds = [CredentialRecord(f's{i}', 'u', 'x', id=str(i)) for i in range(7)]
    summary = dashboard_summary(creds, [], now=NOW)
    assert summary['securityScore'] == 50
    assert summary['lastLogin'] is None
