"""
Extracts the submitted link from a POST body.

Two encodings are accepted:
- multipart/form-data with a boundary: the first part is used, and only when
  it is named "shorten"
- anything else: the whole body is read as application/x-www-form-urlencoded
  and the "shorten" key is looked up (last occurrence wins)
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote_plus

from fastapi import Request
from python_multipart.exceptions import FormParserError
from python_multipart.multipart import QuerystringParser, parse_options_header
from starlette.datastructures import FormData, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser
from starlette.requests import ClientDisconnect

from shortlinks.core.config import settings
from shortlinks.core.errors import RequestDecodeError

logger = logging.getLogger(__name__)

FIELD_NAME = "shorten"
MULTIPART = "multipart"
URLENCODED = "urlencoded"


@dataclass(frozen=True)
class Submission:
    encoding: str
    link: Optional[str]


def multipart_boundary(content_type: Optional[str]) -> Optional[bytes]:
    """Return the boundary if the header names multipart/form-data with one."""
    if not content_type:
        return None
    media_type, params = parse_options_header(content_type)
    if media_type.lower() != b"multipart/form-data":
        return None
    return params.get(b"boundary") or None


async def _field_text(value) -> str:
    if isinstance(value, UploadFile):
        return (await value.read()).decode("utf-8", errors="replace")
    return value


def _unquote(raw: bytes) -> str:
    return unquote_plus(raw.decode("utf-8", errors="replace"))


async def parse_urlencoded(stream) -> FormData:
    """Parse an application/x-www-form-urlencoded body, decoding names and values as UTF-8."""
    items = []
    name = bytearray()
    value = bytearray()

    def on_field_start():
        name.clear()
        value.clear()

    def on_field_name(data: bytes, start: int, end: int):
        name.extend(data[start:end])

    def on_field_data(data: bytes, start: int, end: int):
        value.extend(data[start:end])

    def on_field_end():
        items.append((_unquote(bytes(name)), _unquote(bytes(value))))

    parser = QuerystringParser(
        {
            "on_field_start": on_field_start,
            "on_field_name": on_field_name,
            "on_field_data": on_field_data,
            "on_field_end": on_field_end,
        }
    )
    async for chunk in stream:
        if chunk:
            parser.write(chunk)
    parser.finalize()
    return FormData(items)


async def _parse(parsing) -> FormData:
    try:
        return await asyncio.wait_for(parsing, timeout=settings.REQUEST_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as e:
        raise RequestDecodeError("Timed out reading request body") from e
    except MultiPartException as e:
        raise RequestDecodeError(f"Malformed multipart body: {e.message}") from e
    except FormParserError as e:
        raise RequestDecodeError(f"Malformed form body: {e}") from e
    except ClientDisconnect as e:
        raise RequestDecodeError("Client disconnected while sending body") from e


async def decode_submission(request: Request) -> Submission:
    content_type = request.headers.get("content-type")

    if multipart_boundary(content_type) is None:
        form = await _parse(parse_urlencoded(request.stream()))
        return Submission(encoding=URLENCODED, link=form.get(FIELD_NAME))

    form = await _parse(MultiPartParser(request.headers, request.stream()).parse())
    try:
        items = form.multi_items()
        if not items:
            return Submission(encoding=MULTIPART, link=None)
        name, value = items[0]
        if name != FIELD_NAME:
            logger.info("Multipart body without a leading '%s' field (got '%s')", FIELD_NAME, name)
            return Submission(encoding=MULTIPART, link=None)
        return Submission(encoding=MULTIPART, link=await _field_text(value))
    finally:
        await form.close()
