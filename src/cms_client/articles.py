"""
Article queries and mutations with optimistic cache synchronisation.

Reads go through the QueryCache. Updates and deletes change the cached
state before the request is sent and roll back to a snapshot if the server
rejects them; creates only touch the cache after the server confirms.
"""

from __future__ import annotations

import logging
import math
from typing import IO, Any, Dict, List, Optional

from .api import ApiClient
from .cache import Key, QueryCache
from .exceptions import ApiError

logger = logging.getLogger(__name__)

ARTICLES_KEY: Key = ("articles",)
ARTICLE_KEY: Key = ("article",)
SEARCH_KEY: Key = ("search",)

DEFAULT_LIMIT = 10


def articles_key(page: int, limit: int = DEFAULT_LIMIT) -> Key:
    return ("articles", page, limit)


def article_key(article_id: Any) -> Key:
    return ("article", str(article_id))


def search_key(query: str) -> Key:
    return ("search", query)


class ArticlesResource:
    """Article endpoints bound to a client and a shared cache."""

    ENDPOINT = "articles/"

    def __init__(self, client: ApiClient, cache: Optional[QueryCache] = None) -> None:
        self.client = client
        self.cache = cache if cache is not None else QueryCache()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, page: int = 1, limit: int = DEFAULT_LIMIT) -> Dict[str, Any]:
        """One page of the caller's articles: {'articles': [...], 'metadata': {...}}."""
        return self.cache.fetch(
            articles_key(page, limit),
            lambda: self.client.get(self.ENDPOINT, page=page, limit=limit),
        )

    def get(self, article_id: Any) -> Dict[str, Any]:
        return self.cache.fetch(
            article_key(article_id),
            lambda: self.client.get(f"{self.ENDPOINT}{article_id}/"),
        )

    def read(self, article_id: Any) -> Dict[str, Any]:
        """Any user's article through the reader route (not cached)."""
        return self.client.get(f"article/{article_id}/")

    def search(self, query: Optional[str]) -> List[Dict[str, Any]]:
        term = (query or "").strip()
        if not term:
            return []
        return self.cache.fetch(search_key(term), lambda: self.client.get("search/", q=term))

    def authors(self) -> List[Dict[str, Any]]:
        return self.client.get("author/")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        article = self.client.post(self.ENDPOINT, json=payload)
        self.cache.invalidate(ARTICLES_KEY)
        self.cache.set(article_key(article["id"]), article)
        return article

    def update(self, article_id: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
        key = article_key(article_id)
        prefixes = (key, ARTICLES_KEY, SEARCH_KEY)
        snapshot = self.cache.snapshot(prefixes)

        self.cache.update(key, lambda cached: {**cached, **payload})
        self._patch_lists(article_id, payload)

        try:
            article = self.client.put(f"{self.ENDPOINT}{article_id}/", json=payload)
        except ApiError:
            logger.info("Rolling back optimistic update of article %s", article_id)
            self.cache.restore(snapshot, prefixes)
            raise

        self.cache.set(key, article)
        self.cache.invalidate(ARTICLES_KEY)
        self.cache.invalidate(SEARCH_KEY)
        return article

    def delete(self, article_id: Any) -> None:
        key = article_key(article_id)
        prefixes = (key, ARTICLES_KEY, SEARCH_KEY)
        snapshot = self.cache.snapshot(prefixes)

        self.cache.remove(key)
        self._drop_from_lists(article_id)

        try:
            self.client.delete(f"{self.ENDPOINT}{article_id}/")
        except ApiError:
            logger.info("Rolling back optimistic delete of article %s", article_id)
            self.cache.restore(snapshot, prefixes)
            raise

        self.cache.invalidate(ARTICLES_KEY)
        self.cache.invalidate(SEARCH_KEY)

    def upload(self, file_obj: IO[bytes], filename: str, content_type: str = "application/octet-stream") -> Dict[str, str]:
        """Upload a cover image and return {'url', 'publicId'}."""
        return self.client.post("upload/", files={"file": (filename, file_obj, content_type)})

    # ------------------------------------------------------------------
    # Cached list helpers
    # ------------------------------------------------------------------

    def _patch_lists(self, article_id: Any, payload: Dict[str, Any]) -> None:
        target = str(article_id)

        def patch_page(page: Dict[str, Any]) -> Dict[str, Any]:
            articles = [
                {**item, **payload} if str(item.get("id")) == target else item
                for item in page.get("articles", [])
            ]
            return {**page, "articles": articles}

        def patch_results(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            return [{**item, **payload} if str(item.get("id")) == target else item for item in results]

        for list_key in self.cache.keys(ARTICLES_KEY):
            self.cache.update(list_key, patch_page)
        for result_key in self.cache.keys(SEARCH_KEY):
            self.cache.update(result_key, patch_results)

    def _drop_from_lists(self, article_id: Any) -> None:
        target = str(article_id)

        def drop_from_page(page: Dict[str, Any]) -> Dict[str, Any]:
            articles = page.get("articles", [])
            kept = [item for item in articles if str(item.get("id")) != target]
            if len(kept) == len(articles):
                return page
            metadata = dict(page.get("metadata") or {})
            if "total" in metadata:
                metadata["total"] = max(0, metadata["total"] - 1)
                if metadata.get("limit"):
                    metadata["totalPages"] = math.ceil(metadata["total"] / metadata["limit"])
            return {**page, "articles": kept, "metadata": metadata}

        def drop_from_results(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            return [item for item in results if str(item.get("id")) != target]

        for list_key in self.cache.keys(ARTICLES_KEY):
            self.cache.update(list_key, drop_from_page)
        for result_key in self.cache.keys(SEARCH_KEY):
            self.cache.update(result_key, drop_from_results)


__all__ = ["ArticlesResource", "article_key", "articles_key", "search_key"]
