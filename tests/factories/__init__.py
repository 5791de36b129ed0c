"""Factory Boy factories for test data generation.

Available factories
-------------------
ListingItemFactory  : raw listing item dict (rendered-fetch shape)
render_listing      : full listing-page HTML for a list of item dicts
"""

from __future__ import annotations

from tests.factories.listing import ListingItemFactory, render_item, render_listing

__all__ = [
    "ListingItemFactory",
    "render_item",
    "render_listing",
]
