# homescore/scrape.py
import os
from time import sleep
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from dotenv import load_dotenv
from playwright.sync_api import sync_playwright, Error as PWError

from .utils import logger, retry

_bs_parser = "lxml"

load_dotenv()
HEADLESS = os.getenv("HEADLESS", "1") == "1"
SCRAPE_TIMEOUT_MS = int(os.getenv("SCRAPE_TIMEOUT_MS", "60000"))
# extra settle time for client-rendered listing details
SETTLE_SECONDS = float(os.getenv("SCRAPE_SETTLE_SECONDS", "3"))
USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
)


class ScrapeError(Exception):
    """The page could not be fetched or held no usable listing content."""


class Page:
    """Rendered page content handed to the extractors."""

    def __init__(self, url, html):
        self.url = url
        self.html = html
        self.soup = BeautifulSoup(html, _bs_parser)

    @property
    def text(self):
        return self.soup.get_text("\n", strip=True)

    @property
    def links(self):
        hrefs = (a.get("href") for a in self.soup.find_all("a"))
        return [urljoin(self.url, h) for h in hrefs if h]


@retry(PWError, tries=3, delay=2, backoff=2)
def _render(url):
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=HEADLESS)
        context = browser.new_context(user_agent=USER_AGENT)
        try:
            page = context.new_page()
            page.goto(url, timeout=SCRAPE_TIMEOUT_MS)
            page.wait_for_load_state("domcontentloaded")
            sleep(SETTLE_SECONDS)
            return page.content()
        finally:
            context.close()
            browser.close()


def fetch_page(url):
    """Render ``url`` in Chromium; browser failures surface as ``ScrapeError``."""
    try:
        html = _render(url)
    except PWError as e:
        raise ScrapeError(f"Could not load {url}: {e}") from e
    if not html:
        raise ScrapeError(f"No content found on {url}")
    logger.info("Fetched %s (%d bytes)", url, len(html))
    return Page(url, html)
