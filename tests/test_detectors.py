"""Tests for the metadata, widget, schema, FAQ, sitemap, analytics and image detectors."""

from pathlib import Path
from textwrap import dedent

from sitekit_migrate.models import (
    AnalyticsType,
    FAQType,
    ImageType,
    MatchStrategy,
    MetadataType,
    SchemaBucket,
    SitemapType,
    WidgetType,
)
from sitekit_migrate.scanner import scan_file
from sitekit_migrate.scanner.faqs import extract_faq_items
from sitekit_migrate.scanner.schemas import classify_schema
from sitekit_migrate.scanner.sitemaps import discover_sitemap_files, extract_exclude_paths


def _scan(tmp_path: Path, name: str, code: str):
    path = tmp_path / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dedent(code), encoding="utf-8")
    return scan_file(path, tmp_path)


# ── Metadata ─────────────────────────────────────────────────

class TestMetadata:
    def test_static_export(self, tmp_path):
        code = """\
            import type { Metadata } from 'next'

            export const metadata: Metadata = {
              title: 'About Us',
              description: "Who we are",
            }

            export default function Page() {
              return <main />
            }
        """
        [meta] = _scan(tmp_path, "app/about/page.tsx", code).metadata
        assert meta.type is MetadataType.NEXT_METADATA
        assert meta.title == "About Us"
        assert meta.description == "Who we are"
        assert (meta.start_line, meta.end_line) == (3, 6)
        assert not meta.is_client_component

    def test_generate_metadata_function(self, tmp_path):
        code = """\
            export async function generateMetadata({ params }) {
              return { title: params.slug }
            }
            export default function Page() { return <main /> }
        """
        [meta] = _scan(tmp_path, "app/blog/[slug]/page.jsx", code).metadata
        assert meta.type is MetadataType.NEXT_METADATA
        assert meta.title is None

    def test_page_without_metadata(self, tmp_path):
        code = """\
            'use client'

            export default function Page() {
              return <main />
            }
        """
        [meta] = _scan(tmp_path, "app/contact/page.tsx", code).metadata
        assert meta.type is MetadataType.NO_METADATA
        assert (meta.start_line, meta.end_line) == (1, 6)
        assert meta.is_client_component

    def test_layout_without_metadata_is_not_reported(self, tmp_path):
        code = "export default function Layout({ children }) { return <div>{children}</div> }\n"
        assert _scan(tmp_path, "app/layout.tsx", code).metadata == []

    def test_non_route_files_are_ignored(self, tmp_path):
        code = "export default function Hero() { return <h1>Hi</h1> }\n"
        assert _scan(tmp_path, "components/Hero.tsx", code).metadata == []

    def test_managed_metadata_is_skipped(self, tmp_path):
        code = """\
            import { getManagedMetadata } from '@uptrademedia/site-kit/seo'
            export async function generateMetadata() { return getManagedMetadata({}) }
            export default function Page() { return <main /> }
        """
        assert _scan(tmp_path, "app/page.tsx", code).metadata == []

    def test_head_title(self, tmp_path):
        code = """\
            import Head from 'next/head'

            export default function Page() {
              return (
                <>
                  <Head>
                    <title>Pricing</title>
                  </Head>
                  <main />
                </>
              )
            }
        """
        [meta] = _scan(tmp_path, "src/app/pricing/page.tsx", code).metadata
        assert meta.type is MetadataType.HEAD
        assert meta.title == "Pricing"
        assert meta.start_line == 6

    def test_next_seo(self, tmp_path):
        code = """\
            import { NextSeo } from 'next-seo'

            export default function Page() {
              return <NextSeo title="Home" />
            }
        """
        [meta] = _scan(tmp_path, "app/page.tsx", code).metadata
        assert meta.type is MetadataType.NEXT_SEO
        assert meta.start_line == 4


# ── Widgets ──────────────────────────────────────────────────

class TestWidgets:
    def test_script_tag(self, tmp_path):
        code = """\
            import Script from 'next/script'

            export default function Layout({ children }) {
              return (
                <body>
                  {children}
                  <Script src="https://widget.intercom.io/widget/abc123" strategy="lazyOnload" />
                </body>
              )
            }
        """
        [widget] = _scan(tmp_path, "app/layout.tsx", code).widgets
        assert widget.widget_type is WidgetType.INTERCOM
        assert widget.script_src == "https://widget.intercom.io/widget/abc123"
        assert widget.start_line == 7
        assert widget.strategy is MatchStrategy.TREE

    def test_text_mention(self, tmp_path):
        code = """\
            export function loadChat() {
              window.$crisp = []
              window.CRISP_WEBSITE_ID = 'abc'
            }
        """
        [widget] = _scan(tmp_path, "lib/chat.ts", code).widgets
        assert widget.widget_type is WidgetType.CRISP
        assert widget.strategy is MatchStrategy.TEXT
        assert widget.start_line == 0
        assert widget.script_src is None


# ── Schemas ──────────────────────────────────────────────────

SCHEMA_PAGE = """\
    const schema = {
      "@context": "https://schema.org",
      "@type": "Organization",
      "name": "Acme",
    }

    export default function Page() {
      return (
        <main>
          <script
            type="application/ld+json"
            dangerouslySetInnerHTML={{ __html: JSON.stringify(schema) }}
          />
        </main>
      )
    }
"""


class TestSchemas:
    def test_ld_json_script(self, tmp_path):
        [schema] = _scan(tmp_path, "app/page.tsx", SCHEMA_PAGE).schemas
        assert schema.schema_type == "Organization"
        assert schema.type is SchemaBucket.ORGANIZATION
        assert schema.start_line == 10
        assert schema.strategy is MatchStrategy.TREE

    def test_schema_object_without_script(self, tmp_path):
        code = """\
            export const productSchema = {
              '@context': 'https://schema.org',
              '@type': 'Product',
            }
        """
        [schema] = _scan(tmp_path, "lib/seo.ts", code).schemas
        assert schema.schema_type == "Product"
        assert schema.strategy is MatchStrategy.TEXT
        assert (schema.start_line, schema.end_line) == (2, 22)

    def test_managed_schema_file_is_skipped(self, tmp_path):
        code = """\
            import { ManagedSchema } from '@uptrademedia/site-kit/seo'
            export default function Page() {
              return <ManagedSchema projectId="p" path="/" />
            }
        """
        assert _scan(tmp_path, "app/page.tsx", code).schemas == []

    def test_microdata_outermost_item(self, tmp_path):
        code = """\
            export default function Product() {
              return (
                <div itemScope itemType="https://schema.org/Product">
                  <span itemProp="name">Widget</span>
                  <div itemProp="offers" itemScope itemType="https://schema.org/Offer" />
                </div>
              )
            }
        """
        [schema] = _scan(tmp_path, "app/product/page.tsx", code).schemas
        assert schema.type is SchemaBucket.MICRODATA
        assert schema.schema_type == "Product"
        assert (schema.start_line, schema.end_line) == (3, 6)

    def test_rdfa(self, tmp_path):
        code = """\
            export const Person = () => (
              <p vocab="https://schema.org/" typeof="schema:Person">
                <span property="name">Ada</span>
              </p>
            )
        """
        [schema] = _scan(tmp_path, "components/Person.tsx", code).schemas
        assert schema.type is SchemaBucket.RDFA
        assert schema.schema_type == "Person"

    def test_microdata_in_unparsable_file(self, tmp_path):
        code = """\
            const broken = (
            <div itemscope itemtype="https://schema.org/Event">
        """
        [schema] = _scan(tmp_path, "app/page.tsx", code).schemas
        assert schema.type is SchemaBucket.MICRODATA
        assert schema.schema_type == "Event"
        assert schema.strategy is MatchStrategy.TEXT
        assert schema.start_line == 2

    def test_classify(self):
        assert classify_schema("FAQPage") is SchemaBucket.FAQ_SCHEMA
        assert classify_schema("LocalBusiness") is SchemaBucket.LOCAL_BUSINESS
        assert classify_schema("ProfessionalService") is SchemaBucket.SERVICE
        assert classify_schema("BlogPosting") is SchemaBucket.ARTICLE
        assert classify_schema("WebSite") is SchemaBucket.JSON_LD


# ── FAQs ─────────────────────────────────────────────────────

class TestFAQs:
    def test_accordion_counts_items_once(self, tmp_path):
        code = """\
            export default function Page() {
              return (
                <section>
                  <Accordion type="single">
                    <Accordion.Item value="a">Shipping</Accordion.Item>
                    <Accordion.Item value="b">Returns</Accordion.Item>
                  </Accordion>
                </section>
              )
            }
        """
        [faq] = _scan(tmp_path, "app/faq/page.tsx", code).faqs
        assert faq.type is FAQType.ACCORDION
        assert faq.component_name == "Accordion"
        assert faq.item_count == 2
        assert (faq.start_line, faq.end_line) == (4, 7)

    def test_details_summary(self, tmp_path):
        code = """\
            export default function Page() {
              return (
                <div>
                  <details>
                    <summary>Do you ship?</summary>
                    <p>Yes</p>
                  </details>
                </div>
              )
            }
        """
        [faq] = _scan(tmp_path, "app/help/page.tsx", code).faqs
        assert faq.type is FAQType.DETAILS_SUMMARY
        assert faq.item_count is None

    def test_component(self, tmp_path):
        code = """\
            export default function Page() {
              return <FaqSection title="Questions" />
            }
        """
        [faq] = _scan(tmp_path, "app/page.tsx", code).faqs
        assert faq.type is FAQType.COMPONENT
        assert faq.component_name == "FaqSection"

    def test_static_list(self, tmp_path):
        code = """\
            export const items = [
              { question: 'Do you ship?', answer: 'Yes' },
              { q: 'Refunds?', a: 'Within 30 days' },
            ]
        """
        [faq] = _scan(tmp_path, "data/items.ts", code).faqs
        assert faq.type is FAQType.STATIC_LIST
        assert faq.item_count == 2
        assert faq.strategy is MatchStrategy.TEXT

    def test_extract_items(self):
        content = dedent("""\
            <details><summary>One?</summary><p>Yes.</p></details>
            const faqs = [{ question: 'Two?', answer: 'No.' }]
        """)
        assert extract_faq_items(content, FAQType.DETAILS_SUMMARY) == [
            ("One?", "Yes."),
            ("Two?", "No."),
        ]
        assert extract_faq_items(content, FAQType.COMPONENT) == [("Two?", "No.")]


# ── Sitemaps ─────────────────────────────────────────────────

class TestSitemaps:
    def test_config_and_static_files(self, tmp_path):
        (tmp_path / "next-sitemap.config.js").write_text(
            "module.exports = {\n"
            "  siteUrl: 'https://example.com',\n"
            "  generateRobotsTxt: true,\n"
            "  exclude: ['/admin', '/secret/*'],\n"
            "}\n",
            encoding="utf-8",
        )
        public = tmp_path / "public"
        public.mkdir()
        (public / "sitemap.xml").write_text(
            "<urlset><url><loc>/a</loc></url><url><loc>/b</loc></url></urlset>", encoding="utf-8",
        )
        (public / "feed.xml").write_text("<rss />", encoding="utf-8")

        config, static = discover_sitemap_files(tmp_path)
        assert config.type is SitemapType.NEXT_SITEMAP_CONFIG
        assert config.details == {"has_robots_txt": True, "exclude_paths": ["/admin", "/secret/*"]}
        assert static.file_path == "public/sitemap.xml"
        assert static.type is SitemapType.STATIC_XML
        assert static.details == {"url_count": 2, "is_index": False}

    def test_custom_route_sitemap(self, tmp_path):
        code = """\
            import { db } from '@/lib/prisma'

            export default async function sitemap() {
              return []
            }
        """
        [sitemap] = _scan(tmp_path, "app/sitemap.ts", code).sitemaps
        assert sitemap.type is SitemapType.CUSTOM_SITEMAP
        assert sitemap.generator == "custom"
        assert sitemap.details["has_async_function"]
        assert sitemap.details["has_database_query"]

    def test_config_file_not_reported_twice(self, tmp_path):
        code = "module.exports = { siteUrl: 'https://example.com' } // next-sitemap\n"
        assert _scan(tmp_path, "next-sitemap.config.js", code).sitemaps == []

    def test_site_kit_sitemap(self, tmp_path):
        code = """\
            import { createSitemap } from '@uptrademedia/site-kit/sitemap'
            export default createSitemap({ projectId: 'p' })
        """
        [sitemap] = _scan(tmp_path, "app/sitemap.ts", code).sitemaps
        assert sitemap.generator == "site-kit"

    def test_exclude_paths(self):
        assert extract_exclude_paths("exclude: [\"/a\", '/b']") == ["/a", "/b"]
        assert extract_exclude_paths("siteUrl: 'x'") == []


# ── Analytics ────────────────────────────────────────────────

class TestAnalytics:
    def test_google_analytics(self, tmp_path):
        code = """\
            import Script from 'next/script'

            export default function Analytics() {
              return <Script src="https://www.googletagmanager.com/gtag/js?id=G-ABC123" />
            }
        """
        [found] = _scan(tmp_path, "components/Analytics.tsx", code).analytics
        assert found.type is AnalyticsType.GOOGLE_ANALYTICS
        assert found.tracking_id == "G-ABC123"
        assert (found.start_line, found.end_line) == (4, 9)

    def test_multiple_providers(self, tmp_path):
        code = """\
            import { Analytics } from '@vercel/analytics/react'
            import posthog from 'posthog-js'
            posthog.init('phc_abc123')
        """
        found = _scan(tmp_path, "app/providers.ts", code).analytics
        assert [a.type for a in found] == [AnalyticsType.VERCEL_ANALYTICS, AnalyticsType.POSTHOG]
        assert found[1].tracking_id == "phc_abc123"


# ── Images ───────────────────────────────────────────────────

class TestImages:
    def test_img_and_next_image(self, tmp_path):
        code = """\
            import Image from 'next/image'

            export default function Gallery() {
              return (
                <div style={{ backgroundImage: 'none' }}>
                  <img src="/hero.png" alt="Hero" />
                  <Image src="https://cdn.example.com/a.jpg" alt="" width={10} height={10} />
                  <Image src="https://cdn.uptrade.com/managed.jpg" alt="x" />
                </div>
              )
            }
        """
        images = _scan(tmp_path, "components/Gallery.tsx", code).images
        assert [(i.type, i.src, i.is_local) for i in images] == [
            (ImageType.IMG, "/hero.png", True),
            (ImageType.NEXT_IMAGE, "https://cdn.example.com/a.jpg", False),
        ]
        assert images[0].alt == "Hero"
        assert images[1].alt is None

    def test_background_image(self, tmp_path):
        code = """\
            export const styles = `
              .hero { background-image: url('/bg.jpg'); }
            `
        """
        [image] = _scan(tmp_path, "styles/hero.ts", code).images
        assert image.type is ImageType.BACKGROUND_IMAGE
        assert image.src == "/bg.jpg"
        assert image.start_line == 2

    def test_static_asset_dirs_are_skipped(self, tmp_path):
        code = 'export default () => <img src="/x.png" />\n'
        assert _scan(tmp_path, "public/embed.tsx", code).images == []
