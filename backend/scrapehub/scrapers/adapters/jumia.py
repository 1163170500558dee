"""Jumia product page extractor.

Product pages:  /<sku>.html (8 alphanumerics) or /<slug>-<sku>.html (8-12 digits)
Listing pages:  a.core cards on catalog pages
"""

import re

from scrapehub.scrapers.base import BaseExtractor


class JumiaExtractor(BaseExtractor):
    """Extracts products from Jumia storefronts (jumia.com.eg, jumia.com.ng, ...)."""

    platform = "jumia"
    origin = "https://www.jumia.com.eg"
    host_marker = "jumia."

    # Bare 8-character SKU segment, or a numeric SKU closing a slug
    id_pattern = re.compile(r"(?:/([a-z0-9]{8})|-(\d{8,12}))\.html")

    title_selectors = ("h1.-fs20.-pts.-pbxs",)
    price_selectors = ("span.-b.-ltr.-tal.-fs24",)
    image_selectors = ("img.-fw.-fh",)

    listing_selector = "a.core"
    product_path_pattern = re.compile(r"\.html$")
