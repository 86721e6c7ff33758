"""
아바타/배경 이미지 로더입니다.

  - bytes / bytearray: 그대로 디코딩
  - http(s) URL: aiohttp로 비동기 다운로드 후 디코딩
  - 그 외 문자열/경로: 로컬 파일로 읽기

실패하면 항상 ImageLoadError를 발생시킵니다. 재시도/타임아웃은 호출자 몫입니다.
"""

import io
import logging
import os
from typing import Optional, Union

import aiohttp
from PIL import Image, UnidentifiedImageError

from rankcard.core.errors import ImageLoadError

logger = logging.getLogger(__name__)

ImageSource = Union[str, bytes, bytearray, os.PathLike]


def _describe(source: ImageSource) -> str:
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    return str(source)


def decode_image(data: bytes, source: str = "<bytes>") -> Image.Image:
    """바이트를 RGBA 이미지로 디코딩합니다."""
    if not data:
        raise ImageLoadError(source, "빈 이미지 데이터")
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        return image.convert("RGBA")
    except Image.DecompressionBombError as e:
        raise ImageLoadError(source, f"이미지가 너무 큽니다: {e}") from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageLoadError(source, f"디코딩 실패: {e}") from e


async def download_image(url: str, session: Optional[aiohttp.ClientSession] = None) -> bytes:
    """URL에서 이미지 바이트를 비동기로 다운로드합니다."""
    owns_session = session is None
    if owns_session:
        session = aiohttp.ClientSession()
    try:
        async with session.get(url) as resp:
            if resp.status != 200:
                raise ImageLoadError(url, f"HTTP {resp.status}")
            return await resp.read()
    except aiohttp.ClientError as e:
        raise ImageLoadError(url, f"요청 실패: {e}") from e
    finally:
        if owns_session:
            await session.close()


async def load_image(source: ImageSource, session: Optional[aiohttp.ClientSession] = None) -> Image.Image:
    """이미지 소스를 불러와 RGBA 이미지로 반환합니다."""
    label = _describe(source)
    try:
        if isinstance(source, (bytes, bytearray)):
            return decode_image(bytes(source), label)
        if not isinstance(source, (str, os.PathLike)):
            raise ImageLoadError(label, f"지원하지 않는 이미지 소스 타입: {type(source).__name__}")

        path = os.fspath(source)
        if path.startswith(("http://", "https://")):
            data = await download_image(path, session)
        else:
            try:
                with open(path, "rb") as f:
                    data = f.read()
            except OSError as e:
                raise ImageLoadError(label, f"파일 읽기 실패: {e}") from e
        return decode_image(data, label)
    except ImageLoadError as e:
        logger.error(f"이미지 로드 실패: {e}")
        raise
