"""Plugin resolution and fragment splicing."""

from __future__ import annotations

import asyncio
import shutil
from collections import defaultdict
from collections.abc import Callable, Iterable
from pathlib import Path, PurePosixPath

from ..catalog import Catalog, PluginDescriptor
from ..errors import FileSystemError, MissingFragmentError, PluginCollisionError


class PluginResolver:
    """Maps plugin identifiers to descriptors and splices their fragments.

    Fragments are copied byte-for-byte; no placeholder substitution happens.
    """

    def __init__(self, catalog: Catalog, template_root: str | Path) -> None:
        self.catalog = catalog
        self.template_root = Path(template_root)

    def resolve(self, plugin_id: str) -> PluginDescriptor:
        """Return the descriptor for *plugin_id*.

        Raises:
            UnknownPluginError: If the identifier is not in the catalog.
        """
        return self.catalog.plugin(plugin_id)

    def resolve_all(self, plugin_ids: Iterable[str]) -> list[PluginDescriptor]:
        """Resolve every identifier, sorted by id so results are reproducible."""
        return [self.resolve(pid) for pid in sorted(set(plugin_ids))]

    def dependencies(self, plugin_ids: Iterable[str]) -> dict[str, str]:
        """Union of ``{package: version}`` for the selected plugins."""
        return {d.package: d.version for d in self.resolve_all(plugin_ids)}

    def plan(self, plugin_ids: Iterable[str]) -> list[tuple[PluginDescriptor, Path]]:
        """Resolve *plugin_ids* and pair each fragment with its source file.

        Everything is checked before anything is copied, so a bad selection
        leaves the target tree untouched.

        Raises:
            UnknownPluginError: For an identifier missing from the catalog.
            MissingFragmentError: If a declared fragment file does not exist.
            PluginCollisionError: If two plugins share a destination.
        """
        claimed: dict[str, set[str]] = defaultdict(set)
        plan: list[tuple[PluginDescriptor, Path]] = []
        for descriptor in self.resolve_all(plugin_ids):
            if descriptor.fragment is None:
                continue
            source = self.template_root / descriptor.fragment
            if not source.is_file():
                raise MissingFragmentError(descriptor.id, str(source))
            claimed[str(PurePosixPath(descriptor.target))].add(descriptor.id)
            plan.append((descriptor, source))

        for destination, owners in claimed.items():
            if len(owners) > 1:
                raise PluginCollisionError(destination, owners)
        return plan

    async def splice(
        self,
        plugin_ids: Iterable[str],
        target: str | Path,
        on_file: Callable[[Path], None] | None = None,
    ) -> list[Path]:
        """Copy the fragments of *plugin_ids* into *target*.

        Returns the written paths.  Parent directories are created as needed;
        an existing file at a destination is never replaced.

        Raises:
            FileSystemError: If a copy fails or the destination already exists.
        """
        target = Path(target)
        written: list[Path] = []
        for descriptor, source in self.plan(plugin_ids):
            dest = target / descriptor.target
            try:
                await asyncio.to_thread(_copy_fragment, source, dest)
            except OSError as exc:
                raise FileSystemError(
                    f"Failed to splice plugin {descriptor.id!r} into {dest}: {exc}"
                ) from exc
            written.append(dest)
            if on_file is not None:
                on_file(dest)
        return written


def _copy_fragment(source: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    with source.open("rb") as src, dest.open("xb") as out:
        shutil.copyfileobj(src, out)
