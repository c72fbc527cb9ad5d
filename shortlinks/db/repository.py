from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

from shortlinks.core.config import settings
from shortlinks.core.errors import StoreError
from shortlinks.db.models import URLMapping
from shortlinks.utils.encoding import RESERVED_SHORTLINKS, generate_short_id

logger = logging.getLogger(__name__)


def get_by_link(db: Session, link: str) -> Optional[URLMapping]:
    return db.query(URLMapping).filter(URLMapping.link == link).first()


def get_by_shortlink(db: Session, shortlink: str) -> Optional[URLMapping]:
    return db.query(URLMapping).filter(URLMapping.shortlink == shortlink).first()


def _commit_and_refresh(db: Session, mapping: URLMapping) -> URLMapping:
    try:
        db.add(mapping)
        db.commit()
        db.refresh(mapping)
        return mapping
    except IntegrityError as e:
        db.rollback()
        logger.warning(
            "IntegrityError creating URLMapping shortlink=%s link=%s: %s",
            mapping.shortlink, mapping.link[:50], str(e.orig)
        )
        raise


def _create_and_generate_shortlink(db: Session, link: str) -> str:
    max_retries = settings.MAX_COLLISION_RETRIES

    for attempt in range(max_retries):
        shortlink = generate_short_id()
        if shortlink in RESERVED_SHORTLINKS:
            logger.info(f"Generated reserved shortlink '{shortlink}' on attempt {attempt + 1}/{max_retries}")
            continue
        mapping = URLMapping(link=link, shortlink=shortlink)
        try:
            return _commit_and_refresh(db, mapping).shortlink
        except IntegrityError:
            # Either a concurrent request stored the same link first, or the
            # generated shortlink is taken. The first case is resolved by a re-read.
            existing = get_by_link(db, link)
            if existing:
                return existing.shortlink
            logger.info(f"Shortlink collision on attempt {attempt + 1}/{max_retries}")

    raise StoreError(f"Failed to generate unique shortlink after {max_retries} attempts")


def lookup_or_create(db: Session, link: str) -> str:
    """Return the shortlink stored for ``link``, creating the mapping on first use."""
    try:
        existing = get_by_link(db, link)
        if existing:
            logger.info("shortlink already existed : '%s' for URL: %s", existing.shortlink, link[:50])
            return existing.shortlink
        return _create_and_generate_shortlink(db, link)
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Failed to store mapping: {e}") from e


def resolve(db: Session, shortlink: str) -> Optional[str]:
    try:
        mapping = get_by_shortlink(db, shortlink)
    except SQLAlchemyError as e:
        raise StoreError(f"Failed to look up shortlink: {e}") from e
    return mapping.link if mapping else None
