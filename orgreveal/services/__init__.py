from __future__ import annotations

from .inline_scanner import OrgInlineScanner, TextElementParser

__all__ = ["OrgInlineScanner", "TextElementParser"]
