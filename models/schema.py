# Centralized collection / key names to prevent drift.

COL_PRODUCTS = "products"
COL_USER_SUBMISSIONS = "user_submissions"
COL_ADMIN_SETTINGS = "admin_settings"  # single logical row
DOC_ADMIN_SETTINGS = "1"

# Local fallback cache keys
CACHE_SUBMISSIONS = "submissions"
CACHE_ADMIN_SETTINGS = "adminSettings"

# Blob paths inside GCS_SUBMISSIONS_BUCKET
BLOB_PAYMENT_SCREENSHOTS = "payment-screenshots"  # payment-screenshots/{ref}-{ms}.{ext}
BLOB_SETTINGS = "settings"  # settings/qr-code-{ms}.{ext}
