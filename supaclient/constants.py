"""
API endpoint prefixes, relative to the project URL.
"""

AUTH_ENDPOINT = "auth/v1"
ADMIN_ENDPOINT = "auth/v1/admin"
REST_ENDPOINT = "rest/v1"
STORAGE_ENDPOINT = "storage/v1"

DEFAULT_TIMEOUT = 60.0
