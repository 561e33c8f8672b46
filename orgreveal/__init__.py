"""Cursor-driven reveal of hidden org markup delimiters."""

from .elements import DescriptorTag, Element, ElementDescriptor, ElementKind

__all__ = ["DescriptorTag", "Element", "ElementDescriptor", "ElementKind"]
