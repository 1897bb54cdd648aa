"""Project configuration settings.

Constants live here; values that tests and users override through the
environment are resolved at call time by the helper functions below.
"""

from pathlib import Path
import os
import platform

VERSION = "1.0.0"

# Security / crypto
DEFAULT_ITERATIONS = 100_000
SALT_LENGTH = 32
KEY_LENGTH = 32  # AES-256
IV_LENGTH = 16   # GCM nonce
AUTH_TAG_LENGTH = 16  # GCM tag length
CIPHER_PREFIX = "enc:v1:"

# Local store
DEFAULT_VAULT_HOME = "vault_data"
USER_KEY = "vault_user"
REGISTRY_KEY = "vault_registered_users"
CREDENTIALS_KEY = "vault_credentials"
ACTIVITIES_KEY = "vault_activities"
SECURITY_SETTINGS_KEY = "vault_security_settings"

# Activity log
ACTIVITY_LIMIT = 100
PLACEHOLDER_IP = "192.168.1.1"
USER_AGENT_LIMIT = 50

# Accounts
MIN_PASSWORD_LENGTH = 6
DEFAULT_LATENCY = 1.0  # seconds of simulated round trip

# Credentials
CATEGORIES = ("Personal", "Work", "Banking", "Social", "Shopping", "Other")
DEFAULT_CATEGORY = "Personal"
WEAK_PASSWORD_LENGTH = 8

# Generator
MIN_GENERATED_LENGTH = 4
MAX_GENERATED_LENGTH = 50
DEFAULT_GENERATED_LENGTH = 16

# Security settings
SESSION_TIMEOUTS = (15, 30, 60)  # minutes
DEFAULT_SECURITY_SETTINGS = {
	"autoLockEnabled": True,
	"sessionTimeout": 30,
	"passwordHistory": True,
	"breachMonitoring": True,
	"securityNotifications": True,
}

# Export
EXPORT_FILENAME = "vault_credentials_backup.json"

# Logging
LOG_LEVEL = "INFO"
LOG_FILE = "vault.log"
AUDIT_LOGGER = "securevault.audit"


def vault_home() -> Path:
	return Path(os.environ.get("VAULT_HOME", DEFAULT_VAULT_HOME))


def latency() -> float:
	raw = os.environ.get("VAULT_LATENCY")
	return float(raw) if raw else DEFAULT_LATENCY


def log_level() -> str:
	return os.environ.get("VAULT_LOG_LEVEL", LOG_LEVEL).upper()


def user_agent() -> str:
	"""Client identification recorded with every activity."""
	return f"securevault/{VERSION} (Python {platform.python_version()}; {platform.system()} {platform.release()})"


__all__ = [
	'VERSION', 'DEFAULT_ITERATIONS', 'SALT_LENGTH', 'KEY_LENGTH', 'IV_LENGTH', 'AUTH_TAG_LENGTH', 'CIPHER_PREFIX',
	'DEFAULT_VAULT_HOME', 'USER_KEY', 'REGISTRY_KEY', 'CREDENTIALS_KEY', 'ACTIVITIES_KEY', 'SECURITY_SETTINGS_KEY',
	'ACTIVITY_LIMIT', 'PLACEHOLDER_IP', 'USER_AGENT_LIMIT', 'MIN_PASSWORD_LENGTH', 'DEFAULT_LATENCY',
	'CATEGORIES', 'DEFAULT_CATEGORY', 'WEAK_PASSWORD_LENGTH',
	'MIN_GENERATED_LENGTH', 'MAX_GENERATED_LENGTH', 'DEFAULT_GENERATED_LENGTH',
	'SESSION_TIMEOUTS', 'DEFAULT_SECURITY_SETTINGS', 'EXPORT_FILENAME',
	'LOG_LEVEL', 'LOG_FILE', 'AUDIT_LOGGER',
	'vault_home', 'latency', 'log_level', 'user_agent',
]
