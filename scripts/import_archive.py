#!/usr/bin/env python3
"""Import content from an archived snapshot of the old site.

Scrapes the home page hero, a handful of blog posts, trusted-company logos and
industry cards with BeautifulSoup, then creates them through the site API.

Config via environment::

    API_BASE=http://localhost:8000
    ARCHIVE_BASE=https://web.archive.org/web/20241205110457/https://sbaccounting.us
"""
import argparse
import logging
import os
import re
import sys
import time
from typing import Any, Dict, List, Optional

import httpx
from bs4 import BeautifulSoup
from dotenv import load_dotenv

from scripts.api_client import ApiError, SiteClient
from settings import setup_logging

logger = logging.getLogger("scripts.import_archive")

DEFAULT_ARCHIVE = "https://web.archive.org/web/20241205110457/https://sbaccounting.us"
USER_AGENT = "site-importer/1.0"
BLOG_LINK = re.compile(r"/(blog|blogs)/", re.IGNORECASE)
LOGO_HINTS = ("logo", "client", "partner")
EXCERPT_LENGTH = 260


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import archived site content through the API.")
    parser.add_argument("--archive-base", default=os.getenv("ARCHIVE_BASE", DEFAULT_ARCHIVE))
    parser.add_argument("--max-posts", type=int, default=10, help="Blog posts to import (default 10)")
    parser.add_argument("--delay", type=float, default=0.3, help="Seconds to wait between API writes")
    return parser.parse_args()


class ArchiveReader:
    def __init__(self, base: str) -> None:
        self.base = base.rstrip("/")
        self._http = httpx.Client(timeout=20.0, headers={"User-Agent": USER_AGENT}, follow_redirects=True)

    def close(self) -> None:
        self._http.close()

    def absolute(self, href: str) -> str:
        if href.startswith("http"):
            return href
        return f"{self.base}{'' if href.startswith('/') else '/'}{href}"

    def soup(self, path: str = "/") -> BeautifulSoup:
        resp = self._http.get(self.absolute(path))
        resp.raise_for_status()
        return BeautifulSoup(resp.text, "html.parser")

    # ---------------------- extraction ----------------------
    def hero(self) -> Dict[str, str]:
        page = self.soup("/")
        heading = page.find("h1")
        title = heading.get_text(strip=True) if heading else ""
        paragraph = heading.find_next("p") if heading else None
        return {
            "title": title or "Welcome",
            "description": paragraph.get_text(strip=True) if paragraph else "Your trusted partner for accounting "
                                                                              "and bookkeeping services.",
            "button_text": "Contact Us",
        }

    def blog_links(self, limit: int) -> List[str]:
        for listing in ("/blogs", "/blog", "/blog/"):
            try:
                page = self.soup(listing)
            except httpx.HTTPError as exc:
                logger.debug("No blog listing at %s: %s", listing, exc)
                continue
            links: List[str] = []
            for anchor in page.find_all("a", href=True):
                href = anchor["href"]
                if BLOG_LINK.search(href) and "#" not in href:
                    url = self.absolute(href)
                    if url not in links:
                        links.append(url)
            if links:
                return links[:limit]
        return []

    def blog_post(self, url: str) -> Optional[Dict[str, Any]]:
        page = self.soup(url)
        heading = page.select_one("article h1") or page.find("h1") or page.find("title")
        title = heading.get_text(strip=True) if heading else ""
        body = page.find("article") or page.find("main") or page.body
        if not title or body is None:
            return None
        author = page.select_one("[class*=author]")
        text = " ".join(body.get_text(separator=" ").split())
        image = body.find("img", src=True) or page.find("meta", property="og:image")
        image_url = (image.get("src") or image.get("content")) if image else ""
        if not image_url:
            logger.warning("Skipping %s: no image found", url)
            return None
        excerpt = text[:EXCERPT_LENGTH]
        return {
            "title": title,
            "description": excerpt or title,
            "excerpt": excerpt,
            "content": body.decode_contents(),
            "author": author.get_text(strip=True) if author else "Admin",
            "image": self.absolute(image_url),
            "tags": [],
            "published": True,
        }

    def trusted_companies(self, limit: int = 10) -> List[Dict[str, str]]:
        page = self.soup("/")
        seen, logos = set(), []
        for img in page.find_all("img", src=True):
            alt = (img.get("alt") or "").strip()
            if not any(hint in alt.lower() for hint in LOGO_HINTS):
                continue
            src = self.absolute(img["src"])
            if src in seen:
                continue
            seen.add(src)
            logos.append({"name": alt or "Logo", "image": src})
            if len(logos) >= limit:
                break
        return logos

    def industries(self, limit: int = 8) -> List[Dict[str, Any]]:
        page = self.soup("/")
        heading = page.find(lambda tag: tag.name in ("h2", "h3") and "Industries" in tag.get_text())
        scope = heading.find_parent(["section", "div"]) if heading else page.body
        seen, items = set(), []
        if scope is None:
            return []
        for el in scope.find_all(["article", "li", "div"], class_=re.compile(r"card|industry|item")):
            title_el = el.find(["h3", "h4", "strong"])
            desc_el = el.find("p")
            img_el = el.find("img", src=True)
            if not (title_el and desc_el and img_el):
                continue
            item = {
                "title": title_el.get_text(strip=True),
                "description": desc_el.get_text(strip=True),
                "image": self.absolute(img_el["src"]),
                "tags": [],
            }
            key = (item["title"], item["image"])
            if key in seen:
                continue
            seen.add(key)
            items.append(item)
            if len(items) >= limit:
                break
        return items


def post_all(client: SiteClient, path: str, items: List[Dict[str, Any]], delay: float,
             body: str = "json") -> Dict[str, int]:
    """POST each item; ``body="data"`` sends it as a form instead of JSON."""
    counts = {"created": 0, "failed": 0}
    for item in items:
        try:
            client.send("POST", path, **{body: item})
            counts["created"] += 1
        except ApiError as exc:
            logger.error("%s", exc)
            counts["failed"] += 1
        time.sleep(delay)
    return counts


def run(client: SiteClient, reader: ArchiveReader, max_posts: int, delay: float) -> Dict[str, Dict[str, int]]:
    summary: Dict[str, Dict[str, int]] = {}

    summary["hero"] = post_all(client, "/api/heroes/home", [reader.hero()], delay, body="data")

    posts = []
    for link in reader.blog_links(max_posts):
        try:
            post = reader.blog_post(link)
        except httpx.HTTPError as exc:
            logger.error("Failed to fetch %s: %s", link, exc)
            continue
        if post is not None:
            posts.append(post)
    summary["blogs"] = post_all(client, "/api/blogs", posts, delay)
    summary["trusted"] = post_all(client, "/api/trusted-companies", reader.trusted_companies(), delay)
    summary["industries"] = post_all(client, "/api/industries", reader.industries(), delay)
    return summary


def main() -> int:
    load_dotenv()
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    args = parse_args()
    reader = ArchiveReader(args.archive_base)
    try:
        with SiteClient() as client:
            client.login(os.getenv("ADMIN_USERNAME", "admin"), os.getenv("ADMIN_PASSWORD", ""))
            summary = run(client, reader, args.max_posts, args.delay)
    except (ApiError, httpx.HTTPError) as exc:
        logger.critical("Import failed: %s", exc)
        return 1
    finally:
        reader.close()
    for section, counts in summary.items():
        print(f"{section}: created={counts['created']}, failed={counts['failed']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
