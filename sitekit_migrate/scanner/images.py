"""Raster image detector. Report-only: images are handled by the upload pipeline."""

from __future__ import annotations

import re

from sitekit_migrate.models import Category, ImageDetection, ImageType, MatchStrategy
from sitekit_migrate.scanner.base import BaseDetector, SourceFile
from sitekit_migrate.scanner.parser import (
    attribute_literal,
    iter_jsx_elements,
    jsx_attributes,
    line_range,
    tag_name,
)

IMAGE_TAGS = {"img": ImageType.IMG, "Image": ImageType.NEXT_IMAGE}
STATIC_ASSET_DIRS = ("/public/", "/assets/")
MANAGED_MARKERS = ("uptrade", "portal")

_BACKGROUND_RE = re.compile(r"""background(?:-image)?:\s*url\(['"]?([^'")]+)['"]?\)""")


def is_local_src(src: str) -> bool:
    return not src.startswith(("http", "//"))


def _is_managed(src: str) -> bool:
    return any(marker in src for marker in MANAGED_MARKERS)


class ImageDetector(BaseDetector):
    category = Category.IMAGE
    needs_tree = True

    def detect(self, source: SourceFile) -> list[ImageDetection]:
        padded = "/" + source.rel_path
        if any(d in padded for d in STATIC_ASSET_DIRS):
            return []

        images: list[ImageDetection] = []
        for element in iter_jsx_elements(source.root_node):
            image_type = IMAGE_TAGS.get(tag_name(element))
            if image_type is None:
                continue
            attrs = jsx_attributes(element)
            src = attribute_literal(attrs.get("src")) or ""
            alt = attribute_literal(attrs.get("alt")) or ""
            if _is_managed(src):
                continue
            start, end = line_range(element)
            images.append(ImageDetection(
                file_path=source.rel_path,
                start_line=start,
                end_line=end,
                type=image_type,
                src=src or None,
                alt=alt or None,
                is_local=is_local_src(src),
            ))

        for m in _BACKGROUND_RE.finditer(source.text):
            src = m.group(1)
            if _is_managed(src):
                continue
            line = source.line_at(m.start())
            images.append(ImageDetection(
                file_path=source.rel_path,
                start_line=line,
                end_line=line,
                strategy=MatchStrategy.TEXT,
                type=ImageType.BACKGROUND_IMAGE,
                src=src,
                is_local=is_local_src(src),
            ))

        return images
