import pytest
from httpx import AsyncClient

from mediatree.client import MediaTreeClient, NavigationState, TreeMirror
from mediatree.client.navigation import ROOT_LABEL
from mediatree.namespace import build_tree
from tests.tools import API_KEY, CF_IMAGES, CF_LIST_URL, cf_error, cf_record, images, mock_listing

LISTING = ["themes/akurai/logo.webp", "themes/akurai/bg.png", "themes/foo/icon.webp", "icons/x.svg", "readme.txt"]


def navigation(*keys: str) -> NavigationState:
    tree = build_tree(images(*keys))

    async def load():
        return tree

    return NavigationState(TreeMirror(load, tree=tree))


def rows(state: NavigationState) -> list[tuple[str, int, bool]]:
    return [(row.path, row.depth, row.expanded) for row in state.sidebar_rows()]


def test_sidebar_at_root():
    state = navigation(*LISTING)
    assert rows(state) == [("", 0, True), ("icons", 1, False), ("themes", 1, False)]
    root = state.sidebar_rows()[0]
    assert root.name == ROOT_LABEL
    assert root.active and root.in_path
    assert root.object_count == 1


def test_sidebar_follows_current_path():
    state = navigation(*LISTING)
    state.on_navigate("themes/akurai")
    assert rows(state) == [
        ("", 0, True),
        ("icons", 1, False),
        ("themes", 1, True),
        ("themes/akurai", 2, True),
        ("themes/foo", 2, False),
    ]
    by_path = {row.path: row for row in state.sidebar_rows()}
    assert by_path["themes/akurai"].active
    assert by_path["themes"].in_path and not by_path["themes"].active
    assert not by_path["themes/foo"].in_path
    assert not by_path[""].active
    assert by_path["themes"].has_children and not by_path["themes/akurai"].has_children


def test_prefix_is_not_ancestor():
    state = navigation("ab/x.png", "abc/x/y.png")
    state.on_navigate("abc/x")
    expanded = {row.path for row in state.sidebar_rows() if row.expanded}
    assert "ab" not in expanded
    assert {"abc", "abc/x"} <= expanded


def test_toggle():
    state = navigation(*LISTING)
    state.on_navigate("themes/akurai")
    state.toggle("themes")
    assert not state.is_expanded("themes")
    assert [r.path for r in state.sidebar_rows()] == ["", "icons", "themes"]

    state.toggle("icons")
    assert state.is_expanded("icons")

    # navigating into a closed branch opens it again
    state.on_navigate("themes/foo")
    assert state.is_expanded("themes")
    assert state.is_expanded("icons")


def test_breadcrumb():
    state = navigation(*LISTING)
    assert [(c.name, c.path, c.current) for c in state.breadcrumb()] == [(ROOT_LABEL, "", True)]
    state.on_navigate("/themes/akurai/")
    assert state.current_path == "themes/akurai"
    assert [(c.name, c.path, c.current) for c in state.breadcrumb()] == [
        (ROOT_LABEL, "", False),
        ("themes", "themes", False),
        ("akurai", "themes/akurai", True),
    ]


def test_content():
    state = navigation(*LISTING)
    content = state.content()
    assert [d.name for d in content.directories] == ["icons", "themes"]
    assert [o.filename for o in content.objects] == ["readme.txt"]

    state.on_navigate("themes/akurai")
    content = state.content()
    assert content.directories == []
    assert [o.filename for o in content.objects] == ["bg.png", "logo.webp"]
    assert not content.not_found and not content.empty

    state.on_navigate("themes/nope")
    content = state.content()
    assert content.not_found and content.empty


def test_content_without_tree():
    async def load():
        raise AssertionError("not called")

    state = NavigationState(TreeMirror(load))
    assert state.content().empty
    assert rows(state) == [("", 0, True)]


def test_requires_client_for_mutations():
    state = navigation(*LISTING)
    with pytest.raises(RuntimeError):
        state._require_client()


@pytest.fixture()
def api(client: AsyncClient) -> MediaTreeClient:
    return MediaTreeClient(client=client, api_key=API_KEY)


@pytest.fixture()
def state(api: MediaTreeClient) -> NavigationState:
    return NavigationState(TreeMirror(api.fetch_tree), client=api)


@pytest.mark.anyio
async def test_reload(state: NavigationState, httpx_mock):
    mock_listing(httpx_mock, LISTING)
    assert await state.reload()
    assert state.error is None
    assert [d.name for d in state.content().directories] == ["icons", "themes"]


@pytest.mark.anyio
async def test_reload_failure_keeps_tree(state: NavigationState, httpx_mock):
    mock_listing(httpx_mock, LISTING)
    httpx_mock.add_response(url=f"{CF_LIST_URL}?per_page=1000", status_code=500, json=cf_error(1, "Internal error"))
    await state.reload()
    assert not await state.reload()
    assert state.error == "Internal error"
    assert [d.name for d in state.content().directories] == ["icons", "themes"]
    state.dismiss_error()
    assert state.error is None


@pytest.mark.anyio
async def test_upload_into_current_directory(state: NavigationState, httpx_mock):
    mock_listing(httpx_mock, LISTING)
    httpx_mock.add_response(
        url=f"{CF_IMAGES}/v1", method="POST", json={"success": True, "result": cf_record("themes/akurai/new.png")}
    )
    mock_listing(httpx_mock, LISTING + ["themes/akurai/new.png"])

    await state.reload()
    state.on_navigate("themes/akurai")
    image = await state.upload(b"data", "new.png", content_type="image/png")
    assert image is not None and image.id == "themes/akurai/new.png"
    assert b"themes/akurai/new.png" in httpx_mock.get_request(method="POST").content
    assert [o.filename for o in state.content().objects] == ["bg.png", "logo.webp", "new.png"]


@pytest.mark.anyio
async def test_upload_failure(state: NavigationState, httpx_mock):
    mock_listing(httpx_mock, LISTING)
    httpx_mock.add_response(
        url=f"{CF_IMAGES}/v1", method="POST", status_code=409, json=cf_error(5409, "Resource already exists")
    )
    await state.reload()
    assert await state.upload(b"data", "readme.txt") is None
    assert state.error == "Resource already exists"


@pytest.mark.anyio
async def test_delete(state: NavigationState, httpx_mock):
    mock_listing(httpx_mock, LISTING)
    httpx_mock.add_response(url=f"{CF_IMAGES}/v1/themes/akurai/logo.webp", method="DELETE", json={"success": True})
    mock_listing(httpx_mock, [k for k in LISTING if k != "themes/akurai/logo.webp"])

    await state.reload()
    state.on_navigate("themes/akurai")
    assert await state.delete("themes/akurai/logo.webp")
    assert [o.filename for o in state.content().objects] == ["bg.png"]
