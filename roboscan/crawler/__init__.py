"""Crawler package: canonicalization, well-known file retrieval and robots.txt evaluation."""

# Use explicit imports when needed:
# from roboscan.crawler.url import normalize_target_url, split_origin
# from roboscan.crawler.fetcher import ResourceFetcher
# from roboscan.crawler.robots import parse_robots_txt
# from roboscan.crawler.permissions import evaluate_permissions
