import httpx
import pytest

from mediatree.errors import UpstreamFailure
from mediatree.objectstorage.cloudflare import (
    delete_cloudflare_image,
    list_cloudflare_images,
    parse_image,
    upload_cloudflare_image,
    variant_url,
)
from tests.tools import CF_IMAGES, CF_LIST_URL, cf_error, cf_listing, cf_record


def test_parse_image():
    image = parse_image(cf_record("themes/akurai/logo.webp", size=2048))
    assert image.id == "themes/akurai/logo.webp"
    assert image.filename == "logo.webp"
    assert image.size_bytes == 2048
    assert image.uploaded_at == "2025-01-15T10:00:00.000Z"
    assert image.require_signed_urls is False

    # records without id fall back to the filename
    assert parse_image({"filename": "loose.png"}).id == "loose.png"
    assert parse_image({"id": "x.png", "meta": {"size": "big"}}).size_bytes is None


@pytest.mark.anyio
async def test_list_follows_continuation_token(connections, httpx_mock):
    httpx_mock.add_response(url=f"{CF_LIST_URL}?per_page=1000", json=cf_listing(["a/1.png", "a/2.png"], "page2"))
    httpx_mock.add_response(
        url=f"{CF_LIST_URL}?per_page=1000&continuation_token=page2", json=cf_listing(["b/3.png"], "page3")
    )
    httpx_mock.add_response(url=f"{CF_LIST_URL}?per_page=1000&continuation_token=page3", json=cf_listing([]))
    result = await list_cloudflare_images()
    assert [i.id for i in result] == ["a/1.png", "a/2.png", "b/3.png"]
    assert all(r.headers["Authorization"] == "Bearer test-token" for r in httpx_mock.get_requests())


@pytest.mark.anyio
async def test_list_page_size(connections, httpx_mock, test_settings):
    test_settings.cf_page_size = 50
    httpx_mock.add_response(url=f"{CF_LIST_URL}?per_page=50", json=cf_listing(["x.png"]))
    assert [i.id for i in await list_cloudflare_images()] == ["x.png"]


@pytest.mark.anyio
async def test_list_skips_unreadable_records(connections, httpx_mock):
    listing = cf_listing(["ok.png"])
    listing["result"]["images"].append("not a record")
    httpx_mock.add_response(url=f"{CF_LIST_URL}?per_page=1000", json=listing)
    assert [i.id for i in await list_cloudflare_images()] == ["ok.png"]


@pytest.mark.anyio
async def test_list_error_status_is_passed_through(connections, httpx_mock):
    httpx_mock.add_response(url=f"{CF_LIST_URL}?per_page=1000", status_code=403, json=cf_error(10000, "Authentication error"))
    with pytest.raises(UpstreamFailure) as e:
        await list_cloudflare_images()
    assert e.value.status_code == 403
    assert e.value.message == "Authentication error"
    assert e.value.details == [{"code": 10000, "message": "Authentication error"}]


@pytest.mark.anyio
async def test_list_unsuccessful_body(connections, httpx_mock):
    httpx_mock.add_response(url=f"{CF_LIST_URL}?per_page=1000", status_code=200, json=cf_error(5400, "Something broke"))
    with pytest.raises(UpstreamFailure) as e:
        await list_cloudflare_images()
    assert e.value.status_code == 502
    assert e.value.message == "Something broke"


@pytest.mark.anyio
async def test_list_non_json_error(connections, httpx_mock):
    httpx_mock.add_response(url=f"{CF_LIST_URL}?per_page=1000", status_code=500, text="<html>oops</html>")
    with pytest.raises(UpstreamFailure) as e:
        await list_cloudflare_images()
    assert e.value.status_code == 500
    assert e.value.message == "Failed to fetch images"


@pytest.mark.anyio
async def test_list_unreadable_success_body(connections, httpx_mock):
    httpx_mock.add_response(url=f"{CF_LIST_URL}?per_page=1000", status_code=200, text="<html>gateway</html>")
    with pytest.raises(UpstreamFailure) as e:
        await list_cloudflare_images()
    assert e.value.status_code == 502
    assert e.value.message.startswith("Failed to fetch images")


@pytest.mark.anyio
async def test_list_without_result(connections, httpx_mock):
    httpx_mock.add_response(url=f"{CF_LIST_URL}?per_page=1000", json={"success": True})
    with pytest.raises(UpstreamFailure) as e:
        await list_cloudflare_images()
    assert e.value.status_code == 502


@pytest.mark.anyio
async def test_list_unreachable(connections, httpx_mock):
    httpx_mock.add_exception(httpx.ConnectError("Connection refused"), url=f"{CF_LIST_URL}?per_page=1000")
    with pytest.raises(UpstreamFailure) as e:
        await list_cloudflare_images()
    assert e.value.status_code == 502
    assert "cannot reach Cloudflare" in e.value.message


@pytest.mark.anyio
async def test_list_without_account(connections, test_settings):
    test_settings.cf_account_id = None
    with pytest.raises(ValueError):
        await list_cloudflare_images()


@pytest.mark.anyio
async def test_upload(connections, httpx_mock):
    httpx_mock.add_response(
        url=f"{CF_IMAGES}/v1", method="POST", json={"success": True, "result": cf_record("themes/logo.webp")}
    )
    image = await upload_cloudflare_image(b"bytes", "logo.webp", key="themes/logo.webp", content_type="image/webp")
    assert image.id == "themes/logo.webp"
    request = httpx_mock.get_request()
    assert b'name="id"' in request.content
    assert b"themes/logo.webp" in request.content
    assert b'filename="logo.webp"' in request.content


@pytest.mark.anyio
async def test_upload_conflict(connections, httpx_mock):
    httpx_mock.add_response(
        url=f"{CF_IMAGES}/v1", method="POST", status_code=409, json=cf_error(5409, "Resource already exists")
    )
    with pytest.raises(UpstreamFailure) as e:
        await upload_cloudflare_image(b"bytes", "logo.webp", key="logo.webp")
    assert e.value.status_code == 409
    assert e.value.message == "Resource already exists"


@pytest.mark.anyio
async def test_delete(connections, httpx_mock):
    httpx_mock.add_response(url=f"{CF_IMAGES}/v1/themes/akurai/logo.webp", method="DELETE", json={"success": True})
    await delete_cloudflare_image("themes/akurai/logo.webp")


@pytest.mark.anyio
async def test_delete_missing(connections, httpx_mock):
    httpx_mock.add_response(
        url=f"{CF_IMAGES}/v1/nope.png", method="DELETE", status_code=404, json=cf_error(5404, "Image not found")
    )
    with pytest.raises(UpstreamFailure) as e:
        await delete_cloudflare_image("nope.png")
    assert e.value.status_code == 404


def test_variant_url(test_settings):
    assert variant_url("themes/logo.webp") == "https://imagedelivery.net/test-hash/themes/logo.webp/public"
    assert variant_url("a.png", "thumbnail") == "https://imagedelivery.net/test-hash/a.png/thumbnail"
    test_settings.cf_account_hash = None
    with pytest.raises(ValueError):
        variant_url("a.png")
