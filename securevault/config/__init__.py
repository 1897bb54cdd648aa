"""Configuration settings and constants for SecureVault.

Everything is defined once in `settings`; this package re-exports it so
`from securevault.config import CATEGORIES` keeps working.
"""

from .settings import *  # noqa: F401,F403
from .settings import __all__  # noqa: F401
