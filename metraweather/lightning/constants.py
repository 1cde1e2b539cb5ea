"""Lightning API constants."""

from datetime import timedelta

API_HOST = "https://lightning.api.metraweather.com"
STRIKES_PATH = "strikes"

# Strikes newer than this are not guaranteed to be complete
FINALISED_HISTORY_TIME = timedelta(minutes=10)

MAXIMUM_QUERIES_AT_ONCE = 20
DEFAULT_QUERIES_AT_ONCE = 10

MAXIMUM_PAGE_LIMIT = 10000

MAXIMUM_NUMBER_OF_ATTEMPTS = 3
RETRY_BACKOFF_SECONDS = 5.0

DEFAULT_HTTP_TIMEOUT_SECONDS = 60.0

# Refresh exchanged JWTs this long before they expire
TOKEN_EXPIRY_MARGIN_SECONDS = 60.0
