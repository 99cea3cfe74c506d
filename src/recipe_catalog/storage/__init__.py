"""File storage for uploaded images."""

from recipe_catalog.storage.images import ImageStore, InvalidImageError


__all__ = ["ImageStore", "InvalidImageError"]
