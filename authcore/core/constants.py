"""Core constants: cache key prefixes and shared literal values."""

# Cache key prefixes
CACHE_PREFIX_CATALOG = "permission_catalog"
CACHE_PREFIX_ROLE_CHECK = "role_check"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Reserved permission identities (overridable via Settings)
SUPER_USER_CODE = "a"
SYS_ADMIN_KEY = "sys_admin"

# Transfer form limits
MAX_AMOUNT_DECIMALS = 2
MAX_AMOUNT_INTEGER_DIGITS = 15
MAX_DESCRIPTION_LENGTH = 255
MAX_EXTERNAL_NAME_LENGTH = 255
DEFAULT_CURRENCY = "EUR"
