"""Rule-based responder used offline and whenever the remote model fails.

The mapping is pure: the same text always yields the same response, and no
input (the empty string included) makes it raise.
"""

from __future__ import annotations

import re

from sellerops.llm.types import StructuredResponse

MARKETPLACES: tuple[str, ...] = ("Amazon", "Flipkart", "Meesho", "Myntra")

CATALOG_PATTERN = re.compile(
    r"catalog|catalogue|listing|spreadsheet|sheet|excel|csv|sku|product|inventory",
    re.IGNORECASE,
)

# A bare "plan" is not enough: "Plan my Amazon Prime Day listings" is a catalog request.
TASK_PATTERN = re.compile(
    r"\btasks?\b"
    r"|\bto-?dos?\b"
    r"|\bschedul"
    r"|\bremind"
    r"|\bpriorit"
    r"|\bdeadlines?\b"
    r"|\btoday\b"
    r"|\btomorrow\b"
    r"|\bplan\s+(?:my|the|for|out)\s+(?:day|week|today|tomorrow|morning|afternoon)\b"
    r"|\b(?:daily|day|weekly|action)\s+plan\b",
    re.IGNORECASE,
)

TASK_BLOCK: tuple[str, ...] = (
    "daily ops blueprint:",
    "- Prioritise based on impact: revenue, compliance, customer experience.",
    "- Break work into 90-minute focus blocks with clear Done Definitions.",
    "- Reserve the final block for QA checks and reporting back to leadership.",
)

CATALOG_BULLETS: tuple[str, ...] = (
    "- Clean your master sheet: ensure SKU, Title, MRP, Offer Price, Color, Size, Fabric, and Image URLs are present.",
    "- Upload the latest supplier file to the catalog lab, then generate marketplace CSVs.",
    "- Enrich copy automatically: include 3 USP bullet points, search keywords, and compliance notes for GST/Legal.",
)

STANDBY_BLOCK: tuple[str, ...] = (
    "jarvis ready:",
    "- Share a task, question, or catalog sheet and I will prep the steps, automations, and documents you need.",
)

TASK_FOLLOW_UPS: tuple[str, ...] = (
    "Should I schedule reminders and sync them to your preferred calendar?",
    "Want me to draft stakeholder updates once each task is closed?",
)

CATALOG_FOLLOW_UPS: tuple[str, ...] = (
    "Would you like marketplace-compliant image naming rules generated?",
    "Need SEO keywords per SKU for sponsored ads?",
)

GENERIC_FOLLOW_UPS: tuple[str, ...] = (
    "Upload the latest catalog so I can generate ready-to-use marketplace sheets.",
    "Tell me your top priority for today and I will create an execution timeline.",
)

CATALOG_SUMMARY = "Catalog automation plan prepared with channel-specific actions."
TASK_SUMMARY = "Daily operations plan generated."
STANDBY_SUMMARY = "Standing by for instructions."


def sentence_case(text: str) -> str:
    trimmed = text.strip()
    if not trimmed:
        return ""
    return trimmed[0].upper() + trimmed[1:]


def detect_marketplaces(text: str) -> list[str]:
    lowered = text.lower()
    return [name for name in MARKETPLACES if name.lower() in lowered]


def wants_catalog(text: str, marketplaces: list[str] | None = None) -> bool:
    if marketplaces is None:
        marketplaces = detect_marketplaces(text)
    return bool(marketplaces) or CATALOG_PATTERN.search(text) is not None


def wants_tasks(text: str) -> bool:
    return TASK_PATTERN.search(text) is not None


def _render(block: tuple[str, ...] | list[str]) -> str:
    return "\n".join(sentence_case(line) for line in block)


def build_heuristic_response(text: str) -> StructuredResponse:
    text = text or ""
    marketplaces = detect_marketplaces(text)
    catalog = wants_catalog(text, marketplaces)
    tasks = wants_tasks(text)

    sections: list[str] = []
    follow_ups: list[str] = []

    if tasks:
        sections.append(_render(TASK_BLOCK))
        follow_ups.extend(TASK_FOLLOW_UPS)

    if catalog:
        channels = ", ".join(marketplaces or MARKETPLACES)
        sections.append(_render([f"{channels} listing automation:", *CATALOG_BULLETS]))
        follow_ups.extend(CATALOG_FOLLOW_UPS)

    if not sections:
        sections.append(_render(STANDBY_BLOCK))
        follow_ups.extend(GENERIC_FOLLOW_UPS)

    if catalog:
        summary = CATALOG_SUMMARY
    elif tasks:
        summary = TASK_SUMMARY
    else:
        summary = STANDBY_SUMMARY

    return StructuredResponse(reply="\n\n".join(sections), summary=summary, follow_ups=follow_ups)


__all__ = [
    "MARKETPLACES",
    "build_heuristic_response",
    "detect_marketplaces",
    "sentence_case",
    "wants_catalog",
    "wants_tasks",
]
