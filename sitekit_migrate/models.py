"""Data models for the scan -> migrate pipeline."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any

SOURCE_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".mjs")
DEFAULT_SKIP_DIRS = (
    "node_modules", ".next", ".git", "dist", "build", "out",
    "coverage", ".turbo", ".vercel",
)


class Category(enum.Enum):
    FORM = "forms"
    METADATA = "metadata"
    WIDGET = "widgets"
    SCHEMA = "schemas"
    FAQ = "faqs"
    SITEMAP = "sitemaps"
    ANALYTICS = "analytics"
    IMAGE = "images"


class MatchStrategy(enum.Enum):
    TREE = "tree"
    TEXT = "text"


class FormLibrary(enum.Enum):
    NATIVE = "native"
    REACT_HOOK_FORM = "react-hook-form"
    FORMIK = "formik"
    UNKNOWN = "unknown"


class Complexity(enum.Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class SuggestedAction(enum.Enum):
    AUTO_MIGRATE = "auto-migrate"
    ASSISTED = "assisted"
    MANUAL = "manual"


# Complexity gates what the form migrator may touch.
ACTION_FOR_COMPLEXITY: dict[Complexity, SuggestedAction] = {
    Complexity.SIMPLE: SuggestedAction.AUTO_MIGRATE,
    Complexity.MODERATE: SuggestedAction.ASSISTED,
    Complexity.COMPLEX: SuggestedAction.MANUAL,
}


class MetadataType(enum.Enum):
    NEXT_METADATA = "next-metadata"
    HEAD = "head"
    NEXT_SEO = "next-seo"
    NO_METADATA = "no-metadata"
    OTHER = "other"


class WidgetType(enum.Enum):
    INTERCOM = "intercom"
    CRISP = "crisp"
    DRIFT = "drift"
    HUBSPOT = "hubspot"
    ZENDESK = "zendesk"
    OTHER = "other"


class SchemaBucket(enum.Enum):
    JSON_LD = "json-ld"
    MICRODATA = "microdata"
    RDFA = "rdfa"
    ORGANIZATION = "organization"
    LOCAL_BUSINESS = "local-business"
    SERVICE = "service"
    PRODUCT = "product"
    ARTICLE = "article"
    FAQ_SCHEMA = "faq-schema"


class FAQType(enum.Enum):
    ACCORDION = "accordion"
    DETAILS_SUMMARY = "details-summary"
    STATIC_LIST = "static-list"
    COMPONENT = "component"


class SitemapType(enum.Enum):
    NEXT_SITEMAP = "next-sitemap"
    NEXT_SITEMAP_CONFIG = "next-sitemap-config"
    CUSTOM_SITEMAP = "custom-sitemap"
    STATIC_XML = "static-xml"


class AnalyticsType(enum.Enum):
    GOOGLE_ANALYTICS = "google-analytics"
    GOOGLE_TAG_MANAGER = "google-tag-manager"
    VERCEL_ANALYTICS = "vercel-analytics"
    POSTHOG = "posthog"
    MIXPANEL = "mixpanel"
    PLAUSIBLE = "plausible"
    FATHOM = "fathom"
    OTHER = "other"


class ImageType(enum.Enum):
    NEXT_IMAGE = "next-image"
    IMG = "img"
    BACKGROUND_IMAGE = "background-image"


# ── Detections ──────────────────────────────────────────────


@dataclass(frozen=True)
class FieldOption:
    label: str
    value: str


@dataclass(frozen=True)
class FormField:
    name: str
    type: str = "text"
    required: bool = False
    placeholder: str | None = None
    options: tuple[FieldOption, ...] | None = None


@dataclass(frozen=True, kw_only=True)
class Detection:
    """One instance of a legacy pattern found in source.

    A detection is a snapshot of the file as it was read during the scan.
    Editing the file afterwards invalidates every detection for it.
    """
    file_path: str
    start_line: int = 0
    end_line: int = 0
    strategy: MatchStrategy = MatchStrategy.TREE

    category: Category = field(init=False, repr=False, default=Category.FORM)


@dataclass(frozen=True, kw_only=True)
class FormDetection(Detection):
    component_name: str
    fields: tuple[FormField, ...] = ()
    form_library: FormLibrary = FormLibrary.NATIVE
    complexity: Complexity = Complexity.SIMPLE
    suggested_action: SuggestedAction = SuggestedAction.AUTO_MIGRATE
    has_validation: bool = False
    submits_to: str | None = None

    category: Category = field(init=False, repr=False, default=Category.FORM)


@dataclass(frozen=True, kw_only=True)
class MetadataDetection(Detection):
    type: MetadataType
    title: str | None = None
    description: str | None = None
    is_client_component: bool = False

    category: Category = field(init=False, repr=False, default=Category.METADATA)


@dataclass(frozen=True, kw_only=True)
class WidgetDetection(Detection):
    widget_type: WidgetType
    script_src: str | None = None

    category: Category = field(init=False, repr=False, default=Category.WIDGET)


@dataclass(frozen=True, kw_only=True)
class SchemaDetection(Detection):
    type: SchemaBucket = SchemaBucket.JSON_LD
    schema_type: str = "Unknown"

    category: Category = field(init=False, repr=False, default=Category.SCHEMA)


@dataclass(frozen=True, kw_only=True)
class FAQDetection(Detection):
    type: FAQType
    component_name: str | None = None
    item_count: int | None = None
    has_schema: bool = False

    category: Category = field(init=False, repr=False, default=Category.FAQ)


@dataclass(frozen=True, kw_only=True)
class SitemapDetection(Detection):
    type: SitemapType
    generator: str | None = None
    details: dict[str, Any] = field(default_factory=dict, compare=False)

    category: Category = field(init=False, repr=False, default=Category.SITEMAP)


@dataclass(frozen=True, kw_only=True)
class AnalyticsDetection(Detection):
    type: AnalyticsType
    tracking_id: str | None = None

    category: Category = field(init=False, repr=False, default=Category.ANALYTICS)


@dataclass(frozen=True, kw_only=True)
class ImageDetection(Detection):
    type: ImageType
    src: str | None = None
    alt: str | None = None
    is_local: bool = True

    category: Category = field(init=False, repr=False, default=Category.IMAGE)


# ── Scan / migration results ────────────────────────────────


@dataclass
class ParseFailure:
    file_path: str
    message: str


@dataclass
class ScanResult:
    """Aggregated detections, one ordered list per category."""
    forms: list[FormDetection] = field(default_factory=list)
    metadata: list[MetadataDetection] = field(default_factory=list)
    widgets: list[WidgetDetection] = field(default_factory=list)
    schemas: list[SchemaDetection] = field(default_factory=list)
    faqs: list[FAQDetection] = field(default_factory=list)
    sitemaps: list[SitemapDetection] = field(default_factory=list)
    analytics: list[AnalyticsDetection] = field(default_factory=list)
    images: list[ImageDetection] = field(default_factory=list)
    parse_errors: list[ParseFailure] = field(default_factory=list)

    def bucket(self, category: Category) -> list:
        return getattr(self, category.value)

    def add(self, detection: Detection) -> None:
        self.bucket(detection.category).append(detection)

    @property
    def total(self) -> int:
        return sum(len(self.bucket(c)) for c in Category)

    @property
    def migratable(self) -> int:
        """Detections that a migrator acts on (images are report-only)."""
        return self.total - len(self.images)

    def to_dict(self) -> dict[str, Any]:
        report: dict[str, Any] = {
            c.value: [_to_jsonable(asdict(d)) for d in self.bucket(c)]
            for c in Category
        }
        report["parse_errors"] = [asdict(p) for p in self.parse_errors]
        return report


@dataclass
class MigrationResult:
    file_path: str
    success: bool
    changes: list[str] = field(default_factory=list)
    error: str | None = None
    form_id: str | None = None


@dataclass
class ScanConfig:
    """Configuration for file discovery."""
    skip_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_SKIP_DIRS))
    extensions: tuple[str, ...] = SOURCE_EXTENSIONS


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value
