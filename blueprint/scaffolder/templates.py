"""Template tree loading and rendering.

A template tree is a directory of files, some containing ``{{key}}``
placeholder tokens.  :class:`TemplateRenderer` loads a tree once and renders
it into a fresh target directory, substituting every token whose key is in
the data context and leaving unknown tokens untouched.  File contents are
treated as raw bytes so binary assets pass through unchanged.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import FileSystemError, TemplateNotFoundError, ValidationError

_PLACEHOLDER = re.compile(rb"\{\{\s*([A-Za-z_][A-Za-z0-9_.-]*)\s*\}\}")


# ---------------------------------------------------------------------------
# Tree model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TemplateNode:
    """A directory (``content is None``) or a file inside a template tree."""

    name: str
    content: bytes | None = None
    children: tuple["TemplateNode", ...] = field(default_factory=tuple)

    @property
    def is_dir(self) -> bool:
        return self.content is None


@dataclass(frozen=True)
class TemplateTree:
    """An immutable, fully loaded template tree."""

    id: str
    source: Path
    root: TemplateNode

    def iter_files(self) -> list[str]:
        """Relative POSIX paths of every file, in declared order."""
        paths: list[str] = []

        def _walk(node: TemplateNode, prefix: str) -> None:
            for child in node.children:
                rel = f"{prefix}{child.name}"
                if child.is_dir:
                    _walk(child, f"{rel}/")
                else:
                    paths.append(rel)

        _walk(self.root, "")
        return paths


def load_tree(source: Path, template_id: str | None = None) -> TemplateTree:
    """Read the directory *source* into a :class:`TemplateTree`.

    Children are ordered by name so the walk order does not depend on the
    platform's directory listing order.

    Raises:
        TemplateNotFoundError: If *source* is not a directory.
    """
    source = Path(source)
    tree_id = template_id or source.name
    if not source.is_dir():
        raise TemplateNotFoundError(
            tree_id, f"Template directory for {tree_id!r} not found: {source}"
        )

    def _load(path: Path) -> TemplateNode:
        if path.is_dir():
            children = tuple(_load(child) for child in sorted(path.iterdir()))
            return TemplateNode(name=path.name, children=children)
        return TemplateNode(name=path.name, content=path.read_bytes())

    try:
        root = _load(source)
    except OSError as exc:
        raise FileSystemError(f"Could not read template {tree_id!r}: {exc}") from exc
    return TemplateTree(id=tree_id, source=source, root=root)


# ---------------------------------------------------------------------------
# Placeholder substitution
# ---------------------------------------------------------------------------


def substitute(content: bytes, context: Mapping[str, str]) -> bytes:
    """Replace ``{{key}}`` tokens in *content* with values from *context*.

    Tokens whose key is absent from *context* are kept verbatim.
    """
    if not context:
        return content

    def _replace(match: re.Match[bytes]) -> bytes:
        key = match.group(1).decode("ascii")
        if key not in context:
            return match.group(0)
        return str(context[key]).encode("utf-8")

    return _PLACEHOLDER.sub(_replace, content)


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders template trees found under a template root directory."""

    def __init__(self, template_root: str | Path) -> None:
        self.template_root = Path(template_root)

    def load(self, directory: str, template_id: str | None = None) -> TemplateTree:
        """Load the tree stored at ``<template_root>/<directory>``."""
        return load_tree(self.template_root / directory, template_id or directory)

    async def render(
        self,
        tree: TemplateTree,
        target: str | Path,
        context: Mapping[str, str],
        *,
        fresh: bool = True,
        on_file: Callable[[Path], None] | None = None,
    ) -> list[Path]:
        """Render *tree* into *target* and return the written file paths.

        Args:
            tree: The loaded template tree.
            target: Destination directory.
            context: Flat placeholder values.
            fresh: When ``True`` (the default) *target* must not exist yet.
                When ``False`` the tree is laid over an existing directory,
                but no existing file is ever overwritten.
            on_file: Called with each file path right after it is written.

        Raises:
            ValidationError: If *fresh* and *target* already exists.
            FileSystemError: On any directory creation or write failure.  The
                files written before the failure are left in place.
        """
        out_base = Path(target)
        if fresh and out_base.exists():
            raise ValidationError(f"Target directory already exists: {out_base}")

        written: list[Path] = []
        try:
            await asyncio.to_thread(out_base.mkdir, parents=True, exist_ok=not fresh)
            await self._render_dir(tree.root, out_base, context, written, on_file)
        except OSError as exc:
            raise FileSystemError(
                f"Failed to render template {tree.id!r} into {out_base}: {exc}"
            ) from exc
        return written

    async def _render_dir(
        self,
        node: TemplateNode,
        out_dir: Path,
        context: Mapping[str, str],
        written: list[Path],
        on_file: Callable[[Path], None] | None,
    ) -> None:
        for child in node.children:
            dest = out_dir / child.name
            if child.is_dir:
                await asyncio.to_thread(dest.mkdir, parents=True, exist_ok=True)
                await self._render_dir(child, dest, context, written, on_file)
                continue
            content = substitute(child.content or b"", context)
            await asyncio.to_thread(_write_new_file, dest, content)
            written.append(dest)
            if on_file is not None:
                on_file(dest)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _write_new_file(path: Path, content: bytes) -> None:
    """Write *content* to *path*, failing if the file already exists."""
    with path.open("xb") as handle:
        handle.write(content)
