"""ResearchBot — answer questions grounded in the content of user-supplied URLs.

Pipeline for a chat request:
    1. Validate URL schemes and fetch each page via :mod:`researchbot.page_fetcher`
    2. Extract readable text via :mod:`researchbot.html_extractor`
    3. Collect the successes as sources via :mod:`researchbot.source_collector`
    4. Ask the hosted model via :mod:`researchbot.answer_generator`

The HTTP surface lives in :mod:`researchbot.main`.
"""
