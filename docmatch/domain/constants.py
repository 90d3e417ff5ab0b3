"""
Domain Constants: values shared across the comparison pipeline.

Sentinel format, path syntax, display widths and environment variables.
"""

# =============================================================================
# Placeholder sentinels
# =============================================================================
# Each {{...}} expression is replaced by __MATCHER_<n>__ before the native
# parser sees the text; n increases left to right.

SENTINEL_PREFIX = "__MATCHER_"
SENTINEL_SUFFIX = "__"
SENTINEL_PATTERN = r"__MATCHER_(\d+)__"

# =============================================================================
# Paths
# =============================================================================
# JSON:  $, $.field, $.field[0].name
# HTML:  html > body > div > span[1], "... (text)", "... (comment)", "... @class"

JSON_ROOT_PATH = "$"
HTML_CHILD_SEPARATOR = " > "
HTML_TEXT_SUFFIX = " (text)"
HTML_COMMENT_SUFFIX = " (comment)"
HTML_ATTRIBUTE_SEPARATOR = " @"
HTML_DOCTYPE_PATH = "<!DOCTYPE>"
HTML_DOCUMENT_TAG = "#document"

# Void elements are rendered without a closing tag.
VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

# =============================================================================
# Display
# =============================================================================

MAX_TEXT_DISPLAY_LEN = 30
MAX_VALUE_DISPLAY_LEN = 80
MISSING_DISPLAY = "(missing)"
NIL_DISPLAY = "(nil)"

# =============================================================================
# Environment
# =============================================================================

UPDATE_ENV_VAR = "DOCMATCH_UPDATE"
UPDATE_FLAGS = ("--update", "--docmatch-update")

NO_COLOR_ENV_VAR = "NO_COLOR"
FORCE_COLOR_ENV_VAR = "FORCE_COLOR"

CI_INDICATORS = (
    "CI",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "JENKINS_URL",
    "CIRCLECI",
    "TRAVIS",
    "BUILDKITE",
    "TF_BUILD",  # Azure Pipelines
    "CODEBUILD_BUILD_ID",  # AWS CodeBuild
)

# Expected files whose suffix is listed here are parsed as HTML.
HTML_SUFFIXES = frozenset({".html", ".htm"})
