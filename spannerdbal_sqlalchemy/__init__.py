from .dialect import SpannerDialect

__all__ = ["SpannerDialect"]
