"""Tag vocabulary shared by sources."""

DEFAULT_KEY_TAG = "key"
"""Library-wide fallback tag naming a field's key in any source."""

JSON_KEY_TAG = "json"
"""Tag naming a field's key in JSON documents; takes precedence over ``key``."""

IGNORE_TAG = "ignore"
"""Tag that, when set to ``"true"`` (any case), skips a field entirely."""

TAG_OPTION_SEPARATOR = ","
"""Only the part of a tag value before this separator names the key."""
