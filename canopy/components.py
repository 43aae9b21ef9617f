"""Reusable render components.

Components are named render functions, optionally carrying global CSS and
JS fragments. Each Directory may register its own; a page sees the
components of its directory and of every ancestor, nearest first.

Key classes:
- Component: A named render unit.
- ComponentProxy: Template-friendly accessor (``comp.button(text="Go")``).

Key functions:
- load_components: Build components from a ``_components`` folder of Jinja templates.
- collect_component_assets: Gather global CSS/JS fragments of a whole tree.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import Environment
from markupsafe import Markup

if TYPE_CHECKING:
    from .directory import Directory

COMPONENTS_DIR = "_components"
_TEMPLATE_SUFFIXES = (".html.jinja", ".jinja")


@dataclass(frozen=True)
class Component:
    """A named, reusable render unit.

    Attributes:
        name: Name used to look the component up.
        render: Callable receiving keyword arguments and returning HTML.
        css: Global CSS fragment bundled once for the whole site.
        js: Global JS fragment bundled once for the whole site.
    """

    name: str
    render: Callable[..., str]
    css: str | None = None
    js: str | None = None

    def __call__(self, **kwargs: Any) -> Markup:
        return Markup(self.render(**kwargs))


class ComponentProxy(Mapping[str, Component]):
    """Read-only view over resolved components for use in templates."""

    def __init__(self, components: Mapping[str, Component]):
        self._components = dict(components)

    def __getitem__(self, name: str) -> Component:
        return self._components[name]

    def __getattr__(self, name: str) -> Component:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._components[name]
        except KeyError:
            raise AttributeError(f"Unknown component: {name}") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._components)

    def __len__(self) -> int:
        return len(self._components)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"ComponentProxy({sorted(self._components)})"


def _component_name(path: Path) -> str | None:
    for suffix in _TEMPLATE_SUFFIXES:
        if path.name.endswith(suffix):
            return path.name[: -len(suffix)]
    return None


def _read_optional(path: Path) -> str | None:
    if path.exists():
        return path.read_text(encoding="utf-8")
    return None


def load_components(folder: Path, env: Environment) -> dict[str, Component]:
    """Load Jinja template components from a ``_components`` folder.

    ``button.html.jinja`` becomes the ``button`` component; sibling
    ``button.css`` and ``button.js`` files become its global fragments.

    Args:
        folder: The ``_components`` folder.
        env: Jinja environment used to compile the templates.

    Returns:
        Mapping of component name to Component (empty if the folder is missing).
    """
    components: dict[str, Component] = {}
    if not folder.is_dir():
        return components
    for path in sorted(folder.iterdir()):
        name = _component_name(path)
        if not name:
            continue
        template = env.from_string(path.read_text(encoding="utf-8"))
        components[name] = Component(
            name=name,
            render=template.render,
            css=_read_optional(folder / f"{name}.css"),
            js=_read_optional(folder / f"{name}.js"),
        )
    return components


def collect_component_assets(directories: Iterable[Directory]) -> tuple[str, str]:
    """Concatenate the global CSS and JS of every registered component.

    A fragment is emitted once per distinct component (name plus fragment),
    in traversal order.

    Args:
        directories: Directories to scan, usually ``root.get_directories()``.

    Returns:
        Tuple of (css, js) bundles; empty strings when there is nothing to emit.
    """
    css: list[str] = []
    js: list[str] = []
    seen: set[tuple[str, str | None, str | None]] = set()
    for directory in directories:
        for component in (directory.components or {}).values():
            key = (component.name, component.css, component.js)
            if key in seen:
                continue
            seen.add(key)
            if component.css:
                css.append(component.css.strip())
            if component.js:
                js.append(component.js.strip())
    return "\n".join(css), "\n".join(js)
