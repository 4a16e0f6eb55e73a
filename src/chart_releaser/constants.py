"""Constants used throughout chart-releaser."""

# ============================================================================
# Chart packages
# ============================================================================
CHART_ASSET_FILE_EXTENSION = ".tgz"
PROVENANCE_FILE_EXTENSION = ".prov"
CHART_METADATA_FILE = "Chart.yaml"

# ============================================================================
# Upload defaults
# ============================================================================
DEFAULT_PACKAGE_PATH = ".cr-release-packages"
DEFAULT_GIT_BASE_URL = "https://api.github.com/"
DEFAULT_GIT_UPLOAD_URL = "https://uploads.github.com/"
DEFAULT_RELEASE_NAME_TEMPLATE = "{{ Name }}-{{ Version }}"

# Asset uploads are the only retried network operation
UPLOAD_MAX_ATTEMPTS = 3
UPLOAD_RETRY_DELAY_SECONDS = 3.0

DEFAULT_REQUEST_TIMEOUT = 60
GITHUB_PAGE_SIZE = 100

# ============================================================================
# Index defaults
# ============================================================================
DEFAULT_INDEX_PATH = ".cr-index/index.yaml"
DEFAULT_PAGES_BRANCH = "gh-pages"
DEFAULT_PAGES_INDEX_PATH = "index.yaml"
DEFAULT_REMOTE = "origin"
INDEX_API_VERSION = "v1"
INDEX_FILE_NAME = "index.yaml"

PR_BRANCH_PREFIX = "chart-releaser-"
PR_BRANCH_SUFFIX_LENGTH = 16
PR_BRANCH_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
PR_TITLE = "Update index file"
