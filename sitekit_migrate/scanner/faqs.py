"""FAQ section detector and question/answer extraction."""

from __future__ import annotations

import re

from sitekit_migrate.models import Category, FAQDetection, FAQType, MatchStrategy
from sitekit_migrate.scanner.base import BaseDetector, SourceFile, uses_site_kit
from sitekit_migrate.scanner.parser import iter_jsx_elements, line_range, tag_name

FAQ_TAG_PATTERNS = (
    re.compile(r"FAQ|Faq|faq"),
    re.compile(r"Accordion", re.I),
    re.compile(r"questions?\s*(?:and|&)?\s*answers?", re.I),
)

_DETAILS_RE = re.compile(
    r"<details[^>]*>[\s\S]*?<summary[^>]*>([\s\S]*?)</summary>([\s\S]*?)</details>", re.I
)
_ACCORDION_ITEM_RE = re.compile(
    r"""<(?:Accordion\.Item|AccordionItem|FAQItem)[^>]*(?:question|title)=["'`]([^"'`]+)["'`]"""
    r"""[^>]*>[\s\S]*?(?:answer|content)=["'`]([^"'`]+)["'`]""",
    re.I,
)
_QA_OBJECT_RE = re.compile(
    r"""\{\s*question:\s*["'`]([^"'`]+)["'`]\s*,\s*answer:\s*["'`]([^"'`]+)["'`]\s*,?\s*\}""", re.I
)
_SHORT_QA_OBJECT_RE = re.compile(
    r"""\{\s*q:\s*["'`]([^"'`]+)["'`]\s*,\s*a:\s*["'`]([^"'`]+)["'`]\s*,?\s*\}""", re.I
)
_TAG_RE = re.compile(r"<[^>]+>")


def _strip_tags(text: str) -> str:
    return _TAG_RE.sub("", text).strip()


def extract_faq_items(content: str, faq_type: FAQType | None = None) -> list[tuple[str, str]]:
    """Best-effort (question, answer) pairs found in a file's source."""
    items: list[tuple[str, str]] = []

    if faq_type is FAQType.DETAILS_SUMMARY:
        for m in _DETAILS_RE.finditer(content):
            question, answer = _strip_tags(m.group(1)), _strip_tags(m.group(2))
            if question and answer:
                items.append((question, answer))

    for pattern in (_ACCORDION_ITEM_RE, _QA_OBJECT_RE, _SHORT_QA_OBJECT_RE):
        for m in pattern.finditer(content):
            items.append((m.group(1), m.group(2)))

    return items


def _is_faq_tag(name: str) -> bool:
    return any(p.search(name) for p in FAQ_TAG_PATTERNS)


def _count_items(element) -> int:
    count = 0
    for child in iter_jsx_elements(element):
        if child.id == element.id:
            continue
        name = tag_name(child).lower()
        if "item" in name or "question" in name:
            count += 1
    return count


class FAQDetector(BaseDetector):
    category = Category.FAQ
    needs_tree = True

    def detect(self, source: SourceFile) -> list[FAQDetection]:
        content = source.text
        if uses_site_kit(content) and "ManagedFAQ" in content:
            return []

        has_schema = "FAQPage" in content or "application/ld+json" in content
        faqs: list[FAQDetection] = []
        matched: set = set()

        def _prune(node) -> bool:
            return node.id in matched

        for element in iter_jsx_elements(source.root_node, prune=_prune):
            name = tag_name(element)
            if not name:
                continue
            start, end = line_range(element)

            if name == "details":
                matched.add(element.id)
                faqs.append(FAQDetection(
                    file_path=source.rel_path,
                    start_line=start,
                    end_line=end,
                    type=FAQType.DETAILS_SUMMARY,
                    has_schema=has_schema,
                ))
                continue

            if _is_faq_tag(name):
                # Nested Accordion.Item etc. belong to this section
                matched.add(element.id)
                faq_type = FAQType.ACCORDION if "accordion" in name.lower() else FAQType.COMPONENT
                faqs.append(FAQDetection(
                    file_path=source.rel_path,
                    start_line=start,
                    end_line=end,
                    type=faq_type,
                    component_name=name,
                    item_count=_count_items(element) or None,
                    has_schema=has_schema,
                ))

        if not faqs:
            literals = len(_QA_OBJECT_RE.findall(content)) + len(_SHORT_QA_OBJECT_RE.findall(content))
            if literals:
                start = source.find_line("question", default=source.find_line("q:"))
                faqs.append(FAQDetection(
                    file_path=source.rel_path,
                    start_line=start,
                    end_line=start,
                    strategy=MatchStrategy.TEXT,
                    type=FAQType.STATIC_LIST,
                    item_count=literals,
                    has_schema=has_schema,
                ))

        return faqs
