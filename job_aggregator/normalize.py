"""Normalization & heuristics.

This module contains the deterministic field inference shared by every source:
- seniority and category inference from the title (and tags)
- employment-type mapping from free-text upstream job types
- relative posting dates ("3 days ago")
- HTML to plain text
- requirements / benefits extraction (lightweight heuristics)
- salary formatting

Nothing here does I/O. `format_posted_at` depends on the current time, so callers
recompute it on every response instead of storing the string.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple, Union
from urllib.parse import quote


SENIOR_KEYWORDS = [
    "senior",
    "lead",
    "principal",
    "staff",
    "architect",
    "head of",
    "director",
    "vp ",
    "manager",
]

ENTRY_KEYWORDS = [
    "junior",
    "entry",
    "intern",
    "associate",
    "trainee",
    "graduate",
]

# First match wins, so keep the order.
CATEGORY_PATTERNS: List[Tuple[str, str]] = [
    (r"software|developer|engineer|programming|coding|frontend|backend|fullstack", "Technology"),
    (r"marketing|seo|content|social media|brand", "Marketing"),
    (r"design|ui|ux|graphic|creative", "Design"),
    (r"sales|business development|account", "Sales"),
    (r"data|analyst|analytics|scientist", "Data"),
    (r"product|manager|management", "Product"),
    (r"finance|accounting|financial", "Finance"),
    (r"hr|human resources|recruiting|talent", "HR"),
    (r"customer|support|service", "Customer Service"),
    (r"healthcare|medical|nurse|doctor", "Healthcare"),
    (r"legal|lawyer|attorney", "Legal"),
    (r"education|teacher|instructor", "Education"),
]

REQUIREMENT_SIGNALS = ["experience", "knowledge", "proficient", "familiar", "degree", "years", "skill"]

# (phrases, label) in output order.
BENEFIT_GROUPS: List[Tuple[Tuple[str, ...], str]] = [
    (("health insurance", "medical"), "Health Insurance"),
    (("401k", "retirement"), "401(k)"),
    (("pto", "paid time off", "vacation"), "Paid Time Off"),
    (("remote", "work from home"), "Remote Work"),
    (("equity", "stock"), "Equity/Stock Options"),
]

REQUIREMENTS_FALLBACK = "See full job description for requirements"
BENEFITS_FALLBACK = "See job posting for full benefits"

LIST_DESCRIPTION_CHARS = 500
REVIEWS_SEARCH_URL = "https://www.glassdoor.com/Search/results.htm?keyword="

# Applied in order; "&amp;" goes first so "&amp;lt;" decodes to "&lt;" then "<".
HTML_ENTITIES: List[Tuple[str, str]] = [
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&rsquo;", "'"),
    ("&lsquo;", "'"),
    ("&rdquo;", '"'),
    ("&ldquo;", '"'),
    ("&bull;", "•"),
    ("&mdash;", "—"),
    ("&ndash;", "–"),
]


def infer_seniority(title: str) -> str:
    """Infer entry/mid/senior from title keywords. Senior keywords are checked first."""
    t = (title or "").lower()
    if any(kw in t for kw in SENIOR_KEYWORDS):
        return "senior"
    if any(kw in t for kw in ENTRY_KEYWORDS):
        return "entry"
    return "mid"


def infer_category(title: str, tags: Optional[Sequence[str]] = None) -> str:
    """Classify a job into a coarse category from its title and tags."""
    text = f"{title or ''} {' '.join(tags or [])}".lower()
    for pat, label in CATEGORY_PATTERNS:
        if re.search(pat, text):
            return label
    return "Other"


def map_employment_type(job_type: Optional[str]) -> str:
    t = (job_type or "").lower()
    if "part" in t:
        return "part-time"
    if "contract" in t or "freelance" in t or "contractor" in t:
        return "contract"
    return "full-time"


def parse_timestamp(value: Union[str, int, float, None]) -> Optional[datetime]:
    """Parse an ISO string or Unix epoch (seconds, or milliseconds when > 1e12) to aware UTC."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        ts = float(value)
        if ts > 1e12:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    return None


def format_posted_at(value: Union[str, int, float, None], now: Optional[datetime] = None) -> str:
    """Render an upstream timestamp as "Today", "N days ago", "N weeks ago", "N months ago".

    Future timestamps count as today. Unparseable values render as "Recently", which
    sorts behind every dated record.
    """
    posted = parse_timestamp(value)
    if posted is None:
        return "Recently"

    now = now or datetime.now(timezone.utc)
    days = max(math.floor((now - posted).total_seconds() / 86400), 0)

    if days == 0:
        return "Today"
    if days == 1:
        return "1 day ago"
    if days < 7:
        return f"{days} days ago"
    if days < 14:
        return "1 week ago"
    if days < 30:
        return f"{days // 7} weeks ago"
    if days < 60:
        return "1 month ago"
    return f"{days // 30} months ago"


def strip_html(html: Optional[str]) -> str:
    """Convert an HTML job description to plain text, keeping paragraph breaks."""
    if not html:
        return ""

    text = re.sub(r"</p>", "\n\n", html, flags=re.IGNORECASE)
    text = re.sub(r"<br\s*/?>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"</li>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"</h[1-6]>", "\n\n", text, flags=re.IGNORECASE)
    text = re.sub(r"</div>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]*>", "", text)

    for entity, char in HTML_ENTITIES:
        text = text.replace(entity, char)

    text = re.sub(r"[ \t]+", " ", text)
    text = text.replace("\n ", "\n").replace(" \n", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def summarize_description(html: Optional[str], limit: int = LIST_DESCRIPTION_CHARS) -> str:
    """List-view description: stripped text cut to `limit` chars plus an ellipsis."""
    return strip_html(html)[:limit] + "..."


def extract_requirements(description: Optional[str], qualifications: Optional[Sequence[str]] = None) -> List[str]:
    """Pick requirement sentences out of a description.

    Structured upstream qualifications win when present. Otherwise the first four
    sentences mentioning a requirement signal are kept if they are a readable length.
    """
    if qualifications:
        return list(qualifications[:5])

    sentences = re.split(r"[.!?]", strip_html(description))
    hits = [s for s in sentences if any(sig in s.lower() for sig in REQUIREMENT_SIGNALS)]

    out: List[str] = []
    for s in hits[:4]:
        s = s.strip()
        if 20 < len(s) < 200:
            out.append(s)

    return out or [REQUIREMENTS_FALLBACK]


def extract_benefits(description: Optional[str], benefits: Optional[Sequence[str]] = None) -> List[str]:
    """Structured upstream benefits when present, else one label per matched phrase group."""
    if benefits:
        return list(benefits[:5])

    blob = strip_html(description).lower()
    out = [label for phrases, label in BENEFIT_GROUPS if any(p in blob for p in phrases)]
    return out or [BENEFITS_FALLBACK]


def _format_amount(n: float) -> str:
    if n >= 1000:
        # Round half up ("$80.5k" -> "$81k"); built-in round() would go to even.
        return f"{math.floor(n / 1000 + 0.5)}k"
    if float(n).is_integer():
        return str(int(n))
    return str(n)


def format_salary(
    min_amount: Optional[float],
    max_amount: Optional[float],
    currency: Optional[str] = None,
    period: Optional[str] = None,
) -> Optional[str]:
    """Format a salary range as "$80k - $100k", "$80k+" or "Up to $100k".

    Zero counts as unknown. `currency` is accepted for signature parity with the
    upstream fields but amounts are always rendered with "$".
    """
    if not min_amount and not max_amount:
        return None

    if min_amount and max_amount:
        salary = f"${_format_amount(min_amount)} - ${_format_amount(max_amount)}"
    elif min_amount:
        salary = f"${_format_amount(min_amount)}+"
    else:
        salary = f"Up to ${_format_amount(max_amount)}"

    if period and period.lower() == "hour":
        salary += "/hr"
    return salary


def company_reviews_url(company: str, title: str) -> str:
    """Search link for company reviews; never provided by an upstream."""
    return REVIEWS_SEARCH_URL + quote(f"{company} {title}", safe="-_.!~*'()")
