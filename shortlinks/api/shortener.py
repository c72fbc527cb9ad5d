from html import escape
from urllib.parse import quote
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from shortlinks.api.decoder import URLENCODED, decode_submission
from shortlinks.db import database
from shortlinks.services.cache import RedirectCache, get_cache
from shortlinks.services.shortener import URLService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["shortener"])

OTHER_METHODS = ["PUT", "PATCH", "DELETE", "OPTIONS", "HEAD", "TRACE", "CONNECT"]
# Reserved and unreserved URL characters stay as they are; everything else is percent-encoded
LOCATION_SAFE = ":/?#[]@!$&'()*+,;=%~"


def respond_with_shortlink(shortlink: str) -> Response:
    return Response(content=shortlink, media_type="text/html", status_code=status.HTTP_200_OK)


def respond_with_redirect(link: str) -> Response:
    body = (
        f'You will be redirected to: <a href="{escape(link)}">{escape(link)}</a>. '
        "If not, click the link."
    )
    return Response(
        content=body,
        media_type="text/html",
        status_code=status.HTTP_301_MOVED_PERMANENTLY,
        headers={"Location": quote(link, safe=LOCATION_SAFE)},
    )


def respond_with_status(status_code: int) -> Response:
    return Response(status_code=status_code)


@router.post("/{path:path}")
async def shorten_endpoint(
    request: Request,
    db: Session = Depends(database.get_db),
    cache: Optional[RedirectCache] = Depends(get_cache),
):
    submission = await decode_submission(request)

    if submission.link is None:
        if submission.encoding == URLENCODED:
            logger.warning("Shorten 422: urlencoded body without a 'shorten' field")
            return respond_with_status(status.HTTP_422_UNPROCESSABLE_ENTITY)
        return respond_with_status(status.HTTP_200_OK)

    shortlink = await run_in_threadpool(URLService.shorten, db, submission.link, cache)
    logger.info(f"Shortened {submission.link[:50]} to {shortlink}")
    return respond_with_shortlink(shortlink)


@router.get("/{candidate:path}", tags=["redirect"])
async def redirect_endpoint(
    candidate: str,
    db: Session = Depends(database.get_db),
    cache: Optional[RedirectCache] = Depends(get_cache),
):
    link = await run_in_threadpool(URLService.resolve, db, candidate, cache)
    if link is None:
        logger.warning(f"Redirect 404: Shortlink not found: {candidate}")
        return respond_with_status(status.HTTP_404_NOT_FOUND)

    return respond_with_redirect(link)


@router.api_route("/{path:path}", methods=OTHER_METHODS, include_in_schema=False)
async def unsupported_method_endpoint(path: str):
    return respond_with_status(status.HTTP_404_NOT_FOUND)
