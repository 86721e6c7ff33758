"""이미지 로더 테스트"""
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from PIL import Image

from rankcard.card.ImageLoader import decode_image, load_image
from rankcard.core.errors import ImageLoadError

from tests.conftest import AVATAR_COLOR


def test_decode_image(avatar_bytes):
    image = decode_image(avatar_bytes)
    assert image.mode == "RGBA"
    assert image.size == (64, 64)


@pytest.mark.parametrize("data", [b"", b"definitely not a png"])
def test_decode_invalid(data):
    with pytest.raises(ImageLoadError):
        decode_image(data)


@pytest.mark.asyncio
async def test_load_from_bytes(avatar_bytes):
    image = await load_image(avatar_bytes)
    assert image.getpixel((10, 10)) == AVATAR_COLOR


@pytest.mark.asyncio
async def test_load_from_file(avatar_bytes, tmp_path):
    path = tmp_path / "avatar.png"
    path.write_bytes(avatar_bytes)
    image = await load_image(str(path))
    assert image.size == (64, 64)


@pytest.mark.asyncio
async def test_load_missing_file(tmp_path):
    with pytest.raises(ImageLoadError):
        await load_image(str(tmp_path / "missing.png"))


@pytest.mark.asyncio
async def test_load_unsupported_source():
    with pytest.raises(ImageLoadError):
        await load_image(None)


@pytest.mark.asyncio
async def test_load_from_url(avatar_bytes):
    async def avatar(request):
        return web.Response(body=avatar_bytes, content_type="image/png")

    async def missing(request):
        return web.Response(status=404)

    app = web.Application()
    app.router.add_get("/avatar.png", avatar)
    app.router.add_get("/missing.png", missing)

    server = TestServer(app)
    await server.start_server()
    try:
        image = await load_image(str(server.make_url("/avatar.png")))
        assert image.getpixel((0, 0)) == AVATAR_COLOR

        with pytest.raises(ImageLoadError) as excinfo:
            await load_image(str(server.make_url("/missing.png")))
        assert "404" in str(excinfo.value)
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_unreachable_url():
    with pytest.raises(ImageLoadError):
        await load_image("http://127.0.0.1:1/avatar.png")


def test_decompression_bomb_is_load_error(avatar_bytes, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    with pytest.raises(ImageLoadError):
        decode_image(avatar_bytes)
