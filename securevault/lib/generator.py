"""Password generator with named presets."""
from __future__ import annotations
import secrets, string
from dataclasses import dataclass, replace
from typing import Dict
from securevault.config.settings import MIN_GENERATED_LENGTH, MAX_GENERATED_LENGTH, DEFAULT_GENERATED_LENGTH
from .activity import ActivityLog
from .errors import NotFoundError, ValidationError

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGITS = string.digits
SYMBOLS = '!@#$%^&*()_+-=[]{}|;:,.<>?'
SIMILAR = set('il1Lo0O')
AMBIGUOUS = set('{}[]()/\\\'"~,;<>.')


@dataclass(frozen=True)
class GeneratorOptions:
	length: int = DEFAULT_GENERATED_LENGTH
	uppercase: bool = True
	lowercase: bool = True
	numbers: bool = True
	symbols: bool = True
	exclude_similar: bool = False
	exclude_ambiguous: bool = False


PRESETS: Dict[str, GeneratorOptions] = {
	'High Security': GeneratorOptions(20, exclude_similar=True),
	'Balanced': GeneratorOptions(16),
	'Simple': GeneratorOptions(12, symbols=False, exclude_similar=True, exclude_ambiguous=True),
}

PRESET_DESCRIPTIONS = {
	'High Security': 'Maximum security for critical accounts',
	'Balanced': 'Good balance of security and usability',
	'Simple': 'Easy to type, good for mobile',
}


def build_charset(options: GeneratorOptions) -> str:
	charset = ''
	if options.lowercase: charset += LOWERCASE
	if options.uppercase: charset += UPPERCASE
	if options.numbers: charset += DIGITS
	if options.symbols: charset += SYMBOLS
	if options.exclude_similar:
		charset = ''.join(c for c in charset if c not in SIMILAR)
	if options.exclude_ambiguous:
		charset = ''.join(c for c in charset if c not in AMBIGUOUS)
	return charset


def generate_password(options: GeneratorOptions) -> str:
	"""Draw ``options.length`` characters uniformly from the enabled classes."""
	if not MIN_GENERATED_LENGTH <= options.length <= MAX_GENERATED_LENGTH:
		raise ValidationError(f'Length must be between {MIN_GENERATED_LENGTH} and {MAX_GENERATED_LENGTH}')
	charset = build_charset(options)
	if not charset:
		raise ValidationError('Please select at least one character type', title='Error')
	return ''.join(secrets.choice(charset) for _ in range(options.length))


class PasswordGenerator:
	def __init__(self, activity: ActivityLog, options: GeneratorOptions | None = None):
		self.activity = activity
		self.options = options or GeneratorOptions()

	def apply_preset(self, name: str) -> GeneratorOptions:
		try:
			self.options = PRESETS[name]
		except KeyError:
			raise NotFoundError(f"Unknown preset {name!r}; choose one of {', '.join(PRESETS)}") from None
		return self.options

	def configure(self, **changes) -> GeneratorOptions:
		self.options = replace(self.options, **changes)
		return self.options

	def generate(self) -> str:
		password = generate_password(self.options)
		self.activity.append('Generate Password', f'Generated a {self.options.length}-character password')
		return password
