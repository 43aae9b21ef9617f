from pathlib import Path

import pytest


def create_site(project: Path) -> Path:
    site = project / "site"
    (site / "_layouts").mkdir(parents=True)
    (site / "_components").mkdir()
    (site / "_private").mkdir()
    (site / "posts").mkdir()

    (site / "_data.yml").write_text(
        "title: My Site\ntags: [site]\n", encoding="utf-8"
    )
    (site / "index.md").write_text("---\nsection: home\n---\n# Welcome\n", encoding="utf-8")
    (site / "about.html").write_text("<p>About</p>", encoding="utf-8")
    (site / "logo.png").write_bytes(b"\x89PNG")
    (site / ".hidden.md").write_text("# Hidden", encoding="utf-8")
    (site / "_private" / "secret.md").write_text("# Secret", encoding="utf-8")
    (site / "contact.jinja").write_text(
        "---\nheading: Contact\n---\n{{ comp.badge(label='Hi') }} {{ heading }}",
        encoding="utf-8",
    )

    (site / "posts" / "_data.yml").write_text(
        "layout: post\ntags: [posts]\n", encoding="utf-8"
    )
    (site / "posts" / "2024-01-15_hello.md").write_text(
        "---\ntags: [python, posts]\n---\nHello **world**\n", encoding="utf-8"
    )
    (site / "posts" / "draft.md").write_text(
        "---\ndraft: true\n---\nSecret draft\n", encoding="utf-8"
    )

    (site / "_layouts" / "post.html.jinja").write_text(
        "<article data-tags=\"{{ tags | join(',') }}\">{{ content }}</article>",
        encoding="utf-8",
    )
    (site / "_components" / "badge.html.jinja").write_text(
        '<span class="badge">{{ label }}</span>', encoding="utf-8"
    )
    (site / "_components" / "badge.css").write_text(
        ".badge { color: red; }", encoding="utf-8"
    )
    return site


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    create_site(root)
    return root
