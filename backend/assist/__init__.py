# assist -- AI text generation and page scraping for editors
#
# Modules:
#   llm_client     -- OpenAI-compatible chat completions
#   scraper        -- httpx + BeautifulSoup page reduction
#   content_assist -- generate / rewrite / import-news flows
