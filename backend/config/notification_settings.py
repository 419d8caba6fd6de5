"""
Tunable constants for immediate notifications and the weekly digest.

Values that differ between deployments are read from the environment
(a local .env file is honoured through python-dotenv).
"""

import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

# At most one immediate email per drop within this window
RATE_LIMIT_WINDOW = timedelta(minutes=5)

# Digest groups list at most this many individual submissions
DIGEST_SAMPLE_SIZE = 5

# Trailing window covered by the weekly digest, ending at the start of today
DIGEST_WINDOW_DAYS = 7

# Pause between digest sends (Resend allows ~10 requests/second)
DIGEST_SEND_INTERVAL_SECONDS = float(os.getenv("DIGEST_SEND_INTERVAL_SECONDS", "0.1"))

# Upper bound for a single Resend API call
EMAIL_SEND_TIMEOUT_SECONDS = float(os.getenv("EMAIL_SEND_TIMEOUT_SECONDS", "15"))

# Timezone used for the digest window and for dates shown in emails
NOTIFICATION_TIMEZONE = os.getenv("NOTIFICATION_TIMEZONE", "UTC")

# Public site for dashboard and settings links in emails
SITE_URL = os.getenv("SITE_URL", "https://onelink.app")

DEFAULT_FROM_NAME = "OneLink"
DEFAULT_FROM_EMAIL = "notifications@onelink.app"

# Unsubscribe links stay valid for this long
UNSUBSCRIBE_TOKEN_MAX_AGE_DAYS = 90
