"""
Image loader: which references may be loaded, and how they decode.
"""

import base64

import pytest

from clinicrx.domain.errors import ImageLoadError
from clinicrx.domain.value_objects.image_reference import reference_problem
from clinicrx.rendering.images import ImageLoader

from conftest import LOGO_SVG, png_bytes, png_data_url


@pytest.fixture
def secret_png(tmp_path):
    path = tmp_path / "server_secret.png"
    path.write_bytes(png_bytes((20, 20), (10, 200, 10)))
    return path


def test_reference_rules():
    assert reference_problem("data:image/png;base64,AAAA") is None
    assert reference_problem("https://cdn.example.com/logo.png", ["cdn.example.com"]) is None
    assert reference_problem("https://CDN.example.com/logo.png", ["cdn.example.com"]) is None
    assert reference_problem("https://evil.example.com/logo.png", ["cdn.example.com"]) is not None
    assert reference_problem("http://169.254.169.254/latest/meta-data") is not None
    assert reference_problem("/etc/passwd") is not None
    assert reference_problem("file:///etc/passwd") is not None
    assert reference_problem("ftp://cdn.example.com/logo.png", ["cdn.example.com"]) is not None
    assert reference_problem("") is not None


@pytest.mark.asyncio
async def test_data_url_loads():
    image = await ImageLoader().load(png_data_url((30, 20)))
    assert image.size == (30, 20)


@pytest.mark.asyncio
@pytest.mark.parametrize("prefix", ["", "file://"])
async def test_server_files_are_never_read(secret_png, prefix):
    with pytest.raises(ImageLoadError) as exc:
        await ImageLoader().load(prefix + str(secret_png))
    assert "data: URLs" in exc.value.reason


@pytest.mark.asyncio
async def test_hosts_outside_the_allow_list_are_not_fetched():
    loader = ImageLoader(allowed_hosts=["cdn.example.com"])
    with pytest.raises(ImageLoadError) as exc:
        await loader.load("http://127.0.0.1:9/logo.png")
    assert "not an allowed image host" in exc.value.reason


@pytest.mark.asyncio
async def test_allowed_host_that_is_down_fails_to_load():
    loader = ImageLoader(timeout_seconds=2, allowed_hosts=["127.0.0.1"])
    with pytest.raises(ImageLoadError):
        await loader.load("http://127.0.0.1:9/logo.png")


@pytest.mark.asyncio
async def test_svg_is_rasterized_at_its_own_size():
    svg = "data:image/svg+xml;base64," + base64.b64encode(LOGO_SVG.encode()).decode("ascii")
    image = await ImageLoader().load(svg)
    assert image.size == (40, 40)
    assert image.convert("RGB").getpixel((20, 20)) == (0, 170, 0)


@pytest.mark.asyncio
async def test_broken_svg_fails_to_load():
    svg = "data:image/svg+xml;base64," + base64.b64encode(b"not svg at all").decode("ascii")
    with pytest.raises(ImageLoadError):
        await ImageLoader().load(svg)
