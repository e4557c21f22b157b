from mediatree.namespace import build_tree, listing_for, resolve
from tests.tools import images

LISTING = ["themes/akurai/logo.webp", "themes/akurai/bg.png", "themes/foo/icon.webp", "readme.txt"]


def names(listing):
    return [d.name for d in listing.directories], [o.filename for o in listing.objects]


def test_resolve_levels():
    root = build_tree(images(*LISTING))
    assert names(resolve(root, "")) == (["themes"], ["readme.txt"])
    assert names(resolve(root, "themes")) == (["akurai", "foo"], [])
    dirs, objects = names(resolve(root, "themes/akurai"))
    assert dirs == []
    assert set(objects) == {"logo.webp", "bg.png"}


def test_resolve_empty_listing():
    listing = resolve(build_tree([]), "")
    assert listing is not None
    assert listing.path == ""
    assert listing.directories == [] and listing.objects == []


def test_resolve_not_found():
    root = build_tree(images("a/b/c.png"))
    # a leaf's full id is not a directory
    assert resolve(root, "a/b/c.png") is None
    assert resolve(root, "x") is None
    assert resolve(root, "a/x") is None


def test_resolve_canonicalizes_path():
    root = build_tree(images(*LISTING))
    for path in ["themes/akurai", "/themes/akurai", "themes/akurai/", "themes//akurai"]:
        listing = resolve(root, path)
        assert listing is not None and listing.path == "themes/akurai"


def test_resolve_is_one_level_deep():
    root = build_tree(images("a/b/c/d.png", "a/x.png"))
    listing = resolve(root, "a")
    assert [d.path for d in listing.directories] == ["a/b"]
    assert [o.id for o in listing.objects] == ["a/x.png"]


def test_directory_summary_counts():
    root = build_tree(images(*LISTING))
    [themes] = resolve(root, "").directories
    assert themes.path == "themes"
    assert themes.directory_count == 2
    assert themes.object_count == 0
    akurai, foo = resolve(root, "themes").directories
    assert (akurai.directory_count, akurai.object_count) == (0, 2)
    assert (foo.directory_count, foo.object_count) == (0, 1)


def test_display_order():
    root = build_tree(images("b.png", "A.png", "a.png", "C/x.png", "b/x.png", "B/x.png", "a/x.png"))
    dirs, objects = names(resolve(root, ""))
    assert dirs == ["a", "B", "b", "C"]
    assert objects == ["A.png", "a.png", "b.png"]
    # the order is fixed, whatever the listing order was
    reversed_root = build_tree(images("a/x.png", "B/x.png", "b/x.png", "C/x.png", "a.png", "A.png", "b.png"))
    assert names(resolve(reversed_root, "")) == (dirs, objects)


def test_listing_for_matches_resolve():
    root = build_tree(images(*LISTING))
    node = root.children["themes"]
    assert listing_for(node) == resolve(root, "themes")


def test_resolve_after_delete():
    keys = list(LISTING)
    assert "logo.webp" in names(resolve(build_tree(images(*keys)), "themes/akurai"))[1]
    keys.remove("themes/akurai/logo.webp")
    assert names(resolve(build_tree(images(*keys)), "themes/akurai")) == ([], ["bg.png"])
