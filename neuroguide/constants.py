"""
Application Constants for the NeuroGuide backend.

Centralizes limits, defaults and magic numbers.

Note: Dynamic configuration (from environment variables) lives in config.py.
This file only contains true constants that don't change between environments.
"""

# =============================================================================
# API Surface
# =============================================================================

API_PREFIX = "/api"
APP_VERSION = "1.0.0"

# =============================================================================
# File Upload Limits
# =============================================================================

MAX_UPLOAD_SIZE_BYTES = 50 * 1024 * 1024  # 50MB max PDF upload
MULTIPART_OVERHEAD_BYTES = 1024 * 1024  # Slack for non-file fields and framing
UPLOAD_FIELD_NAME = "pdf"
PDF_MIME_TYPE = "application/pdf"
DEFAULT_PDF_FILENAME = "document.pdf"
MAX_FILENAME_LENGTH = 255

# =============================================================================
# Content Limits
# =============================================================================

MAX_TITLE_LENGTH = 255
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 5000
MAX_NOTE_CONTENT_LENGTH = 1024 * 1024  # 1MB of note text
MAX_URL_LENGTH = 2048
MAX_PLATFORM_LENGTH = 50
MAX_TIMESTAMP_LABEL_LENGTH = 32
MAX_SEARCH_QUERY_LENGTH = 500

# =============================================================================
# Topic Defaults
# =============================================================================

DEFAULT_TOPIC_COLOR = "#3B82F6"
TOPIC_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

# =============================================================================
# Authentication Configuration
# =============================================================================

DEFAULT_TOKEN_EXPIRE_MINUTES = 1440  # 24 hours
JWT_ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 72  # bcrypt ignores bytes past 72

# =============================================================================
# Compression
# =============================================================================

DEFAULT_COMPRESSION_LEVEL = 6
