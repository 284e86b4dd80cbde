"""sitekit-migrate: detect hand-written site concerns and rewrite them onto Site-Kit."""

__version__ = "0.2.0"
