"""Prompt templates sent to the remote classifier.

The embedded JSON schemas are a contract with the model: field names
``threat_level``, ``confidence``, ``suspicious_links``/``suspicious_items``
and ``overall_assessment`` must stay stable.
"""

from __future__ import annotations

from .models import LinkRecord, ThreadRecord

LINK_ANALYSIS_PROMPT = """You are a cybersecurity expert specializing in phishing detection. Analyze these email links for potential threats.

OUTPUT FORMAT (Required):
{{
  "threat_level": "safe" | "warning" | "danger",
  "confidence": 0.0 to 1.0,
  "suspicious_links": [
    {{
      "link_index": number,
      "reason": "explanation",
      "indicators": ["indicator1", "indicator2"]
    }}
  ],
  "overall_assessment": "brief explanation"
}}

DETECTION CRITERIA:
1. Text-URL mismatch (text says "google.com" but links elsewhere)
2. Suspicious domains (look-alikes, unusual TLDs, randomized subdomains)
3. Urgency language combined with sensitive actions
4. Shortened URLs hiding real destination
5. Login/credential requests from unexpected sources
6. Homograph attacks (unicode lookalikes)

FEW-SHOT EXAMPLES:

Example 1:
Context: "Password reset notification from your bank"
Links:
Link 1: text="Reset Password" href="https://secure.bankofamerica.com/reset"
Link 2: text="Contact Support" href="https://bankofamerica.com/help"

Output:
{{
  "threat_level": "safe",
  "confidence": 0.95,
  "suspicious_links": [],
  "overall_assessment": "All links point to legitimate Bank of America domains with proper HTTPS. No text-URL mismatches detected."
}}

Example 2:
Context: "Urgent security alert"
Links:
Link 1: text="Verify Account at PayPal" href="https://paypal-secure-verify.tk/login"
Link 2: text="paypal.com/security" href="http://bit.ly/2xK9mP"

Output:
{{
  "threat_level": "danger",
  "confidence": 0.98,
  "suspicious_links": [
    {{
      "link_index": 1,
      "reason": "Text claims PayPal but links to suspicious domain with unusual TLD (.tk)",
      "indicators": ["text-URL mismatch", "suspicious TLD", "fake subdomain pattern"]
    }},
    {{
      "link_index": 2,
      "reason": "Text shows PayPal domain but uses URL shortener to hide real destination",
      "indicators": ["URL shortener", "potential redirect", "HTTP not HTTPS"]
    }}
  ],
  "overall_assessment": "High-confidence phishing attempt. Both links are deceptive and lead away from legitimate PayPal domains."
}}

NOW ANALYZE THESE LINKS:

Context: {context}

Links:
{links}

Output (JSON only, no additional text):"""

THREAD_ANALYSIS_PROMPT = """You are a cybersecurity expert. Analyze the following recent email senders and subjects and identify any suspicious or likely malicious items. Look for typosquatting (e.g. 'rnicrosft' for 'microsoft'), odd domains in sender addresses, repeated misspellings, or clearly fraudulent subjects. Output JSON only with these fields:
{{
  "threat_level": "safe" | "warning" | "danger",
  "confidence": 0.0 to 1.0,
  "suspicious_items": [
    {{
      "index": number,
      "sender": "",
      "subject": "",
      "reason": "",
      "indicators": ["..."]
    }}
  ],
  "overall_assessment": ""
}}

Inbox items (last {days} days):
{items}

Output (JSON only):"""


def format_links(links: list[LinkRecord]) -> str:
    """Itemize links, numbered from 1."""
    return "\n".join(
        f'Link {i}: text="{link.text}" href="{link.href}"'
        for i, link in enumerate(links, start=1)
    )


def format_threads(threads: list[ThreadRecord]) -> str:
    """Itemize sender/subject pairs, numbered from 1."""
    return "\n".join(
        f'Item {i}: Sender: "{t.sender or ""}" Subject: "{t.subject or ""}"'
        for i, t in enumerate(threads, start=1)
    )


def build_link_prompt(links: list[LinkRecord], context: str = "") -> str:
    return LINK_ANALYSIS_PROMPT.format(context=context, links=format_links(links))


def build_thread_prompt(threads: list[ThreadRecord], days: int = 7) -> str:
    return THREAD_ANALYSIS_PROMPT.format(days=days, items=format_threads(threads))
