"""Manual scraper runner, usable without installing the package.

Usage:
    python scripts/run_scraper.py scrape-product https://www.amazon.com/dp/B0TEST1234
    python scripts/run_scraper.py scrape-category https://www.jumia.com.eg/laptops/
"""

import os
import sys

# Add backend to path so we can import scrapehub modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from scrapehub.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
