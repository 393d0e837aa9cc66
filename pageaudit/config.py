import os

# Timeouts (seconds)
PAGE_TIMEOUT = float(os.getenv("PAGEAUDIT_PAGE_TIMEOUT", "10"))
PROBE_TIMEOUT = float(os.getenv("PAGEAUDIT_PROBE_TIMEOUT", "5"))
IMAGE_TIMEOUT = float(os.getenv("PAGEAUDIT_IMAGE_TIMEOUT", "5"))
PAGESPEED_TIMEOUT = float(os.getenv("PAGEAUDIT_PAGESPEED_TIMEOUT", "15"))

# HTTP
USER_AGENT = os.getenv(
    "PAGEAUDIT_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
)
PAGESPEED_ENDPOINT = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
PAGESPEED_API_KEY = os.getenv("PAGESPEED_API_KEY", "").strip() or None

# Behaviour
DOWNLOAD_IMAGES = os.getenv("PAGEAUDIT_DOWNLOAD_IMAGES", "1").strip().lower() not in {
    "0",
    "false",
    "no",
    "off",
}

# Logging
LOG_LEVEL = os.getenv("PAGEAUDIT_LOG_LEVEL", "INFO").upper()
