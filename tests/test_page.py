from datetime import datetime

from canopy.descriptors import Src
from canopy.directory import Directory
from canopy.html_utils import string_to_document
from canopy.page import Page


def test_create_directory_style_url():
    page = Page.create("/blog/", "<p>Blog</p>")
    assert page.dest.path == "/blog/index"
    assert page.dest.ext == ".html"
    assert page.data["url"] == "/blog/"
    assert page.output_path == "blog/index.html"
    assert page.src.is_virtual


def test_create_file_url():
    page = Page.create("/feed.xml", "<rss/>")
    assert page.dest.path == "/feed"
    assert page.dest.ext == ".xml"
    assert page.data["url"] == "/feed.xml"
    assert page.data["content"] == "<rss/>"
    assert page.content == "<rss/>"
    assert page.parent is None


def test_update_dest_is_idempotent():
    page = Page()
    first = page.update_dest({"path": "/a/index", "ext": ".html"})
    state = (page.dest.path, page.dest.ext, dict(page.own_data))
    second = page.update_dest({"path": "/a/index", "ext": ".html"})
    assert first == second == "/a/"
    assert (page.dest.path, page.dest.ext, dict(page.own_data)) == state


def test_update_dest_root_index():
    page = Page()
    assert page.update_dest({"path": "/index", "ext": ".html"}) == "/"


def test_update_dest_url_modes():
    page = Page()
    assert page.update_dest({"path": "/blog/post", "ext": ".html"}) == "/blog/post.html"
    assert (
        page.update_dest({"path": "/blog/post", "ext": ".html"}, "no-html-extension")
        == "/blog/post"
    )
    # Non-HTML outputs keep their extension
    assert page.update_dest({"path": "/style", "ext": ".css"}, "no-html-extension") == "/style.css"


def test_update_dest_merges_partial_fields():
    page = Page()
    page.update_dest({"path": "/a", "ext": ".md", "hash": "H"})
    page.update_dest({"ext": ".html"})
    assert (page.dest.path, page.dest.ext, page.dest.hash) == ("/a", ".html", "H")
    assert page.data["url"] == "/a.html"


def test_content_document_round_trip():
    page = Page.create("/p/", "<html><body><p>Hi</p></body></html>")
    document = page.document
    document.p.string = "Bye"
    assert "<p>Bye</p>" in page.content
    assert "<p>Hi</p>" not in page.content


def test_setting_content_drops_document():
    page = Page.create("/p/", "<p>old</p>")
    assert page.document is not None
    page.content = "<p>new</p>"
    assert page.content == "<p>new</p>"


def test_setting_document_drops_content():
    page = Page.create("/p/", "<p>old</p>")
    page.document = string_to_document("<b>x</b>")
    assert page.content == "<b>x</b>"


def test_document_absent_for_non_html_destination():
    page = Page.create("/style.css", "body { color: red; }")
    assert page.document is None
    assert page.content == "body { color: red; }"


def test_bytes_content_is_kept_as_bytes():
    page = Page.create("/favicon.ico", b"\x00\x01")
    assert page.content == b"\x00\x01"


def test_date_prefix_is_stripped_and_injected():
    page = Page(Src(path="/posts/2024-01-15_hello", ext=".md"))
    assert page.dest.path == "/posts/hello"
    page.own_data = {"title": "Hello"}
    assert page.data["date"] == datetime(2024, 1, 15)


def test_explicit_date_wins_over_filename_date():
    page = Page(Src(path="/posts/2024-01-15_hello", ext=".md"))
    page.own_data = {"date": datetime(2020, 5, 1)}
    assert page.data["date"] == datetime(2020, 5, 1)


def test_underscore_without_date_is_kept():
    page = Page(Src(path="/posts/my_notes", ext=".md"))
    assert page.dest.path == "/posts/my_notes"
    assert page.filename_date is None


def test_cache_invalidation_on_own_data_write():
    page = Page()
    page.own_data = {"a": 1}
    assert page.data["a"] == 1
    page.own_data = {"a": 2}
    # Already dirty after the write
    assert page.refresh_cache() is False
    assert page.data["a"] == 2
    assert page.refresh_cache() is True
    assert page.refresh_cache() is False


def test_duplicate_shares_source_with_suffix():
    root = Directory()
    root.own_data = {"layout": "base"}
    posts = root.create_directory("posts")
    page = Page(Src(path="/posts/list", ext=".md"))
    page.own_data = {"title": "List"}
    posts.set_page("list.md", page)
    page.update_dest({"ext": ".html"})

    copy = page.duplicate(2, {"title": "List 2", "page": page})
    assert copy.src.path == "/posts/list[2]"
    assert page.src.path == "/posts/list"
    assert copy.src_key != page.src_key
    assert copy.parent is posts
    assert copy.dest == page.dest
    assert copy.dest is not page.dest
    assert copy.own_data["title"] == "List 2"
    assert copy.own_data["layout"] == "base"
    assert "page" not in copy.own_data
    # Not registered in the parent's mapping
    assert list(posts.pages) == ["list.md"]


def test_duplicate_sees_later_parent_data():
    root = Directory()
    root.own_data = {"layout": "a"}
    page = Page(Src(path="/list", ext=".md"))
    root.set_page("list.md", page)
    copy = page.duplicate(1)
    assert copy.data["layout"] == "a"

    root.own_data = {"layout": "b", "author": "Ann"}
    assert page.data["layout"] == "b"
    assert copy.data["author"] == "Ann"
    # Own data of the copy is the effective data captured when duplicating
    assert copy.data["layout"] == "a"


def test_duplicate_without_index_keeps_src_path():
    page = Page.create("/a/", "x")
    copy = page.duplicate()
    assert copy.src.path == page.src.path
    assert copy.data["url"] == "/a/"
