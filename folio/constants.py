"""Field limits, pagination defaults and upload rules."""

from __future__ import annotations

import re

# ==========================================
# Pagination
# ==========================================

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


# ==========================================
# Input limits (characters)
# ==========================================

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

USERNAME_MAX = 50
PASSWORD_MAX = 100

ARTICLE_TITLE_MAX = 200
ARTICLE_CONTENT_MAX = 100_000
ARTICLE_DESCRIPTION_MAX = 500
ARTICLE_KEYWORDS_MAX = 200
ARTICLE_COVER_MAX = 1000

CATEGORY_NAME_MAX = 50
CATEGORY_SLUG_MAX = 50
CATEGORY_DESCRIPTION_MAX = 200

TAG_NAME_MAX = 30
TAG_SLUG_MAX = 30

RELATED_ARTICLES_LIMIT = 4

# SQLite INTEGER is a signed 64-bit value
MAX_RECORD_ID = 2**63 - 1


# ==========================================
# Uploads
# ==========================================

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

MIME_TO_EXT: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}
ALLOWED_IMAGE_TYPES: tuple[str, ...] = tuple(MIME_TO_EXT)
