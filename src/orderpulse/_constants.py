"""Internal constants shared across the library."""

from datetime import timedelta

BASE_URL = "http://localhost:5000"
USER_AGENT = "orderpulse/1"

ACTIVE_ORDERS_ENDPOINT = "/api/orders/public/active"
RECENTLY_FINISHED_ENDPOINT = "/api/orders/public/recently-finished"
FEEDBACK_ENDPOINT = "/api/feedbacks/public"

SESSION_HEADER = "X-Session-Id"
RESTAURANT_HEADER = "X-Restaurant-Slug"

# ------------------------------------------------------------------
# Persisted key names (shared with the browser storefront)
# ------------------------------------------------------------------

SHOWN_FEEDBACK_KEY = "shownFeedbackOrders"
SESSION_ID_KEY = "restaurant_session_id"
PENDING_FEEDBACK_KEY = "pending_feedbacks"

# ------------------------------------------------------------------
# Timing defaults
# ------------------------------------------------------------------

DEFAULT_POLL_INTERVAL: float = 10.0
DEFAULT_REQUEST_TIMEOUT: float = 10.0
DEFAULT_FEEDBACK_DELAY = timedelta(minutes=15)
