from sqlalchemy.orm import Session
from typing import Optional
import logging

from shortlinks.db import repository
from shortlinks.services.cache import RedirectCache


logger = logging.getLogger(__name__)


class URLService:

    @staticmethod
    def shorten(db: Session, link: str, cache: Optional[RedirectCache] = None) -> str:
        shortlink = repository.lookup_or_create(db, link)
        if cache is not None:
            cache.put(shortlink, link)
        return shortlink

    @staticmethod
    def resolve(db: Session, shortlink: str, cache: Optional[RedirectCache] = None) -> Optional[str]:
        if cache is not None:
            cached = cache.get(shortlink)
            if cached is not None:
                return cached

        link = repository.resolve(db, shortlink)
        if link is not None and cache is not None:
            cache.put(shortlink, link)
        return link
