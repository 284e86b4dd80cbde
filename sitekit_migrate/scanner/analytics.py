"""Analytics snippet and package detector."""

from __future__ import annotations

import re

from sitekit_migrate.models import AnalyticsDetection, AnalyticsType, Category, MatchStrategy
from sitekit_migrate.scanner.base import BaseDetector, SourceFile

# (presence pattern, type, tracking-id pattern)
ANALYTICS_PATTERNS: list[tuple[re.Pattern, AnalyticsType, re.Pattern | None]] = [
    (
        re.compile(r"googletagmanager\.com|gtag|google-analytics", re.I),
        AnalyticsType.GOOGLE_ANALYTICS,
        re.compile(r"(?:G-|UA-|GTM-)[\w-]+"),
    ),
    (
        re.compile(r"gtm\.js|GTM-", re.I),
        AnalyticsType.GOOGLE_TAG_MANAGER,
        re.compile(r"GTM-\w+"),
    ),
    (re.compile(r"@vercel/analytics|vercel\.com.*analytics", re.I), AnalyticsType.VERCEL_ANALYTICS, None),
    (re.compile(r"posthog", re.I), AnalyticsType.POSTHOG, re.compile(r"phc_\w+")),
    (re.compile(r"mixpanel", re.I), AnalyticsType.MIXPANEL, None),
    (re.compile(r"plausible\.io", re.I), AnalyticsType.PLAUSIBLE, None),
    (re.compile(r"usefathom\.com|fathom", re.I), AnalyticsType.FATHOM, None),
]


class AnalyticsDetector(BaseDetector):
    category = Category.ANALYTICS
    needs_tree = False

    def detect(self, source: SourceFile) -> list[AnalyticsDetection]:
        content = source.text
        found: list[AnalyticsDetection] = []
        lines = content.split("\n")

        for pattern, analytics_type, id_pattern in ANALYTICS_PATTERNS:
            if not pattern.search(content):
                continue

            tracking_id = None
            if id_pattern is not None:
                m = id_pattern.search(content)
                if m:
                    tracking_id = m.group(0)

            start = next((i + 1 for i, line in enumerate(lines) if pattern.search(line)), 1)
            found.append(AnalyticsDetection(
                file_path=source.rel_path,
                start_line=start,
                end_line=start + 5,
                strategy=MatchStrategy.TEXT,
                type=analytics_type,
                tracking_id=tracking_id,
            ))

        return found
