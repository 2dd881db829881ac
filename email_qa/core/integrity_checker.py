"""
Content-integrity heuristic: compares an original email HTML with an AI-modified one
and itemizes every way the candidate lost content, links, images or styling.
"""
import logging
import re
from dataclasses import dataclass
from typing import List

from email_qa.config.validator_config import (
    CRITICAL_META_MARKERS,
    CSS_RETENTION_RATIO,
    IMAGE_RETENTION_RATIO,
    KEY_PHRASE_THRESHOLD,
    LINK_RETENTION_RATIO,
    WORD_SIMILARITY_THRESHOLD,
)
from email_qa.models.schemas import IntegrityCheckResult, IntegrityDetails

logger = logging.getLogger(__name__)

TITLE_PATTERN = re.compile(r"<title[^>]*>([^<]*)</title>", re.IGNORECASE)
BODY_PATTERN = re.compile(r"<body[^>]*>([\s\S]*?)</body>", re.IGNORECASE)
HEAD_PATTERN = re.compile(r"<head[^>]*>([\s\S]*?)</head>", re.IGNORECASE)
IMAGE_PATTERN = re.compile(r"<img[^>]*(?:src=[\"'][^\"']*[\"'])[^>]*>", re.IGNORECASE)
IMAGE_SRC_PATTERN = re.compile(r"src=[\"']([^\"']*)[\"']", re.IGNORECASE)
LINK_PATTERN = re.compile(r"<a[^>]*href=[\"'][^\"']*[\"'][^>]*>[\s\S]*?</a>", re.IGNORECASE)
CTA_PATTERN = re.compile(
    r"<(?:a|button)[^>]*"
    r"(?:class=[\"'][^\"']*(?:button|btn|cta)[^\"']*[\"']|style=[\"'][^\"']*(?:button|btn)[^\"']*[\"'])"
    r"[^>]*>[\s\S]*?</(?:a|button)>",
    re.IGNORECASE,
)
STYLE_ATTR_PATTERN = re.compile(r"style=[\"']([^\"']*)[\"']", re.IGNORECASE)
TAG_PATTERN = re.compile(r"<[^>]*>")
WHITESPACE_PATTERN = re.compile(r"\s+")
# ASCII word characters plus Cyrillic letters
KEY_PHRASE_PATTERN = re.compile(r"[А-Яа-я\w\s]{10,50}", re.ASCII)

REQUIRED_STRUCTURE = [
    ("<html", "HTML tag"),
    ("</html>", "HTML closing tag"),
    ("<head", "HEAD tag"),
    ("</head>", "HEAD closing tag"),
    ("<body", "BODY tag"),
    ("</body>", "BODY closing tag"),
]


@dataclass
class _DocumentProfile:
    title: str
    images: List[str]
    image_srcs: List[str]
    links: List[str]
    cta_buttons: List[str]
    text: str
    style_attrs: int
    head: str


def visible_text(html: str) -> str:
    """Strip tags and collapse whitespace"""
    return WHITESPACE_PATTERN.sub(" ", TAG_PATTERN.sub("", html)).strip()


def extract_title(html: str) -> str:
    match = TITLE_PATTERN.search(html)
    return match.group(1) if match else ""


def _profile(html: str) -> _DocumentProfile:
    head_match = HEAD_PATTERN.search(html)
    images = IMAGE_PATTERN.findall(html)
    srcs = []
    for image in images:
        src_match = IMAGE_SRC_PATTERN.search(image)
        if src_match and src_match.group(1):
            srcs.append(src_match.group(1))
    return _DocumentProfile(
        title=extract_title(html).strip(),
        images=images,
        image_srcs=srcs,
        links=LINK_PATTERN.findall(html),
        cta_buttons=CTA_PATTERN.findall(html),
        text=visible_text(html),
        style_attrs=len(STYLE_ATTR_PATTERN.findall(html)),
        head=head_match.group(1) if head_match else "",
    )


def _significant_words(text: str) -> List[str]:
    # Words longer than two characters that are not plain numbers
    return [word for word in text.lower().split() if len(word) > 2 and not word.isdigit()]


def _text_similarity(original_text: str, candidate_text: str):
    original_words = _significant_words(original_text)
    candidate_words = set(_significant_words(candidate_text))
    common = [word for word in original_words if word in candidate_words]
    word_similarity = len(common) / len(original_words) if original_words else 1.0

    phrases = KEY_PHRASE_PATTERN.findall(original_text)
    preserved = [
        phrase for phrase in phrases
        if phrase in candidate_text or phrase.lower() in candidate_text
    ]
    key_phrase_similarity = len(preserved) / len(phrases) if phrases else 1.0
    return word_similarity, key_phrase_similarity


# Compares original and candidate HTML across eight independent sub-checks.
# Each failing sub-check appends one issue and clears its details flag.
def check_integrity(original_html: str, candidate_html: str) -> IntegrityCheckResult:
    """
    Check whether an AI-modified HTML kept the original's content

    Args:
        original_html: HTML before enhancement
        candidate_html: HTML returned by the model

    Returns:
        IntegrityCheckResult; is_valid is True iff no issues were found
    """
    original = _profile(original_html)
    candidate = _profile(candidate_html)
    issues: List[str] = []
    details = IntegrityDetails()

    # Title: missing original title, equality or containment either way
    title_match = (
        not original.title
        or original.title == candidate.title
        or original.title in candidate.title
        or candidate.title in original.title
    )
    if not title_match:
        details.title_match = False
        issues.append(f'Title mismatch: "{original.title}" vs "{candidate.title}"')

    word_similarity, key_phrase_similarity = _text_similarity(original.text, candidate.text)
    if not (word_similarity > WORD_SIMILARITY_THRESHOLD and key_phrase_similarity > KEY_PHRASE_THRESHOLD):
        details.main_text_match = False
        issues.append(
            f"Main text content significantly changed "
            f"({word_similarity * 100:.1f}% word similarity, "
            f"{key_phrase_similarity * 100:.1f}% key phrases preserved)"
        )

    if len(candidate.images) < max(1, len(original.images) * IMAGE_RETENTION_RATIO):
        details.image_count_match = False
        issues.append(f"Image count decreased significantly: {len(original.images)} → {len(candidate.images)}")

    preserved_srcs = [
        src for src in original.image_srcs
        if any(src in other or other in src for other in candidate.image_srcs)
    ]
    if original.image_srcs and len(preserved_srcs) < len(original.image_srcs) * IMAGE_RETENTION_RATIO:
        details.image_count_match = False
        issues.append(f"Image sources changed: {len(preserved_srcs)}/{len(original.image_srcs)} preserved")

    if len(candidate.links) < max(1, len(original.links) * LINK_RETENTION_RATIO):
        details.link_count_match = False
        issues.append(f"Link count decreased: {len(original.links)} → {len(candidate.links)}")

    if original.cta_buttons and len(candidate.cta_buttons) < len(original.cta_buttons):
        details.cta_buttons_match = False
        issues.append(f"CTA buttons decreased: {len(original.cta_buttons)} → {len(candidate.cta_buttons)}")

    missing_structure = [name for tag, name in REQUIRED_STRUCTURE if tag not in candidate_html]
    if missing_structure:
        details.structure_valid = False
        issues.append(f"Basic HTML structure incomplete: missing {', '.join(missing_structure)}")

    original_meta = [marker for marker in CRITICAL_META_MARKERS if marker in original.head.lower()]
    candidate_meta = [marker for marker in CRITICAL_META_MARKERS if marker in candidate.head.lower()]
    if len(candidate_meta) < len(original_meta):
        details.meta_tags_match = False
        issues.append(f"Critical meta tags missing: {len(original_meta)} → {len(candidate_meta)}")

    if original.style_attrs > 0 and candidate.style_attrs < original.style_attrs * CSS_RETENTION_RATIO:
        details.css_integrity_match = False
        issues.append(f"CSS styles significantly reduced: {original.style_attrs} → {candidate.style_attrs}")

    result = IntegrityCheckResult(issues=issues, details=details)
    if result.is_valid:
        logger.debug("[Integrity] ✓ Candidate preserves original content")
    else:
        logger.info(
            f"[Integrity] ✗ {len(issues)} issue(s) | "
            f"words: {word_similarity * 100:.1f}% | "
            f"key_phrases: {key_phrase_similarity * 100:.1f}% | "
            f"images: {len(original.images)} → {len(candidate.images)} | "
            f"links: {len(original.links)} → {len(candidate.links)} | "
            f"cta: {len(original.cta_buttons)} → {len(candidate.cta_buttons)}"
        )
    return result
