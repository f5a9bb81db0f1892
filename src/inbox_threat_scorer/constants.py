"""Constants for Inbox Threat Scorer."""

from pathlib import Path

# --- Config paths ---
CONFIG_DIR = Path.home() / ".inbox-threat-scorer"
CREDENTIALS_PATH = CONFIG_DIR / "credentials.json"
TOKEN_PATH = CONFIG_DIR / "token.json"

# --- Gmail API ---
SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]
BATCH_SIZE = 50  # threads per BatchHttpRequest
METADATA_HEADERS = ["From", "Subject", "Date"]

# --- Extraction limits ---
THREAD_WINDOW_DAYS = 7
MAX_THREADS = 50
MAX_LINKS = 200
EXTRACTION_RETRY_DELAY = 0.4  # seconds before the single retry on an empty fetch

# --- Verdict levels ---
LEVEL_SAFE = "safe"
LEVEL_WARNING = "warning"
LEVEL_DANGER = "danger"
LEVEL_NEUTRAL = "neutral"

# --- Indicator tags ---
TAG_TEXT_URL_MISMATCH = "text-url-mismatch"
TAG_SHORTENER = "shortener-detected"
TAG_KNOWN_MALICIOUS = "known-malicious-domain"
TAG_AUTH_SUBDOMAIN = "auth-subdomain-pattern"
TAG_INSECURE_HTTP = "insecure-http"
TAG_SUSPICIOUS_TLD = "suspicious-tld"
TAG_TYPOSQUATTING = "typosquatting"
TAG_SIMILAR_TO_PREFIX = "similar-to-"

# Human-readable wording used to build a link finding's reason
INDICATOR_DESCRIPTIONS = {
    TAG_TEXT_URL_MISMATCH: "text-URL mismatch (visible plaintext differs from href)",
    TAG_SHORTENER: "URL shortener detected",
    TAG_KNOWN_MALICIOUS: "known malicious domain",
    TAG_AUTH_SUBDOMAIN: "suspicious auth-related subdomain pattern",
    TAG_INSECURE_HTTP: "uses http (not https)",
}

# --- Indicator severity (shared by both analyzers) ---
SEVERITY_STRONG = "strong"
SEVERITY_WEAK = "weak"

INDICATOR_SEVERITY = {
    TAG_TEXT_URL_MISMATCH: SEVERITY_STRONG,
    TAG_SHORTENER: SEVERITY_STRONG,
    TAG_KNOWN_MALICIOUS: SEVERITY_STRONG,
    TAG_AUTH_SUBDOMAIN: SEVERITY_WEAK,
    TAG_INSECURE_HTTP: SEVERITY_WEAK,
    TAG_SUSPICIOUS_TLD: SEVERITY_STRONG,
    TAG_TYPOSQUATTING: SEVERITY_STRONG,
}

# --- Link deception ---
URL_SHORTENERS = [
    "bit.ly",
    "tinyurl.com",
    "goo.gl",
    "ow.ly",
    "t.co",
    "short.url",
    "is.gd",
    "buff.ly",
    "tiny.one",
]

# Placeholder list, expand offline
KNOWN_BAD_HOSTS = [
    "malware.example",
    "badware.test",
    "phishingsite.test",
]

AUTH_SUBDOMAIN_PATTERN = r"login-|secure-|verify-|account-|signin-"
# Only http(s):// and www. tokens count; bare domains like paypal.com are not compared
URL_LIKE_PATTERN = r"\bhttps?://[^\s/$.?#].[^\s]*\b|(?:www\.)[^\s/$.?#].[^\s]*\b"

DETAIL_NO_SUSPICIOUS_LINKS = "✅ No suspicious links detected."
DETAIL_REASONS_SHOWN = 3

# --- Brand spoofing ---
KNOWN_BRANDS = [
    "microsoft",
    "google",
    "amazon",
    "paypal",
    "apple",
    "facebook",
    "bank",
    "chase",
    "bankofamerica",
    "stripe",
    "github",
]

SUSPICIOUS_TLDS = [".tk", ".ru", ".ml", ".ga", ".cf", ".biz", ".info"]

MIN_TOKEN_LENGTH = 4
TYPO_DISTANCE_RATIO = 0.2

# Visually confusable sequences folded before the second typosquat comparison
CONFUSABLES = [
    ("rn", "m"),
    ("vv", "w"),
    ("0", "o"),
    ("1", "l"),
    ("3", "e"),
    ("5", "s"),
]

DETAIL_CHECKS_OUT = "Checks out! ✅"

# --- Remote classification ---
REMOTE_TIMEOUT = 3.0  # seconds
PROVIDER_PROBE_TIMEOUT = 2.0  # seconds
COMPLETION_MAX_TOKENS = 500
COMPLETION_TEMPERATURE = 0.7
DEFAULT_PROVIDER = "ollama"
