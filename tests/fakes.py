"""
Stand-ins for the LLM and the scraper used by assist tests.
"""
from backend.assist.scraper import ScrapeResult


class FakeLLM:
    """Returns a canned answer and records the messages it was sent."""

    def __init__(self, answer: str = "ЗАГОЛОВОК: Как копить деньги\n---\n## Введение\nТекст статьи"):
        self.answer = answer
        self.calls = []

    async def generate_text(self, messages=None, prompt=None, max_tokens=3000):
        self.calls.append(messages or [{"role": "user", "content": prompt}])
        return self.answer


class FakeScraper:
    """Serves ``ScrapeResult`` objects by URL."""

    def __init__(self, pages: dict = None, default: ScrapeResult = None):
        self.pages = pages or {}
        self.default = default or ScrapeResult(markdown="", links=[], metadata={})
        self.requested = []

    async def scrape(self, url: str) -> ScrapeResult:
        self.requested.append(url)
        return self.pages.get(url, self.default)
