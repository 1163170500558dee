"""Amazon product page extractor.

Product pages:  /<slug>/dp/<ASIN>
Listing pages:  div.s-result-item > a.a-link-normal (search results)
"""

import re

from scrapehub.scrapers.base import BaseExtractor


class AmazonExtractor(BaseExtractor):
    """Extracts products from Amazon storefronts (amazon.com, amazon.de, ...)."""

    platform = "amazon"
    origin = "https://www.amazon.com"
    host_marker = "amazon."

    id_pattern = re.compile(r"/dp/([^/?]+)")

    title_selectors = ("#productTitle", "#title")
    price_selectors = (
        ".a-price .a-offscreen",
        "#priceblock_ourprice",
        "#priceblock_dealprice",
    )
    image_selectors = ("#landingImage", "#imgBlkFront", "#main-image")

    listing_selector = ".s-result-item"
    listing_link_selector = "a.a-link-normal"
    product_path_pattern = re.compile(r"/dp/")
