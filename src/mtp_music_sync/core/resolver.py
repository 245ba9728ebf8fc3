"""Resolve logical paths to device object handles.

Resolution tries progressively looser strategies and stops at the first
hit:

1. walk the folder tree from the storage root for each spelling of the path
2. look the file name up in a catalog scan
3. fuzzy match on parent folder and base name

Devices, playlists and users disagree about letter case, drive prefixes and
track-number prefixes, which is why the first layer alone is not enough.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..models import PARENT_ROOT, CatalogEntry, DeviceObject
from .catalog import DEFAULT_ROOTS, CatalogScanner
from .errors import ObjectNotFoundError
from .paths import (
    base_name,
    normalize_logical_path,
    parent_segment,
    path_variations,
    split_components,
    strip_numeric_prefix,
)
from .transport.session import DeviceSession


class PathResolver:
    """Map logical paths to object handles."""

    def __init__(
        self,
        session: DeviceSession,
        scanner: Optional[CatalogScanner] = None,
        catalog_roots: Sequence[str] = DEFAULT_ROOTS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize resolver.

        Args:
            session: Device session
            scanner: Scanner used for the catalog fallbacks
            catalog_roots: Folder roots scanned by the fallbacks
            logger: Logger to use instead of the module logger
        """
        self.session = session
        self.logger = logger or logging.getLogger(__name__)
        self.scanner = scanner or CatalogScanner(session, logger=self.logger)
        self.catalog_roots = tuple(catalog_roots)

    def resolve(
        self,
        storage_id: int,
        logical_path: str,
        catalog: Optional[List[CatalogEntry]] = None,
    ) -> int:
        """Find the handle of the object at ``logical_path``.

        Args:
            storage_id: Storage to search
            logical_path: Path in any supported spelling
            catalog: Audio catalog to reuse for the fallbacks; scanned when
                omitted and needed

        Returns:
            Object handle

        Raises:
            ObjectNotFoundError: If no strategy finds the object
        """
        normalized = normalize_logical_path(logical_path, upper=False)
        self.logger.debug("Resolving %s", logical_path)

        handle = self._resolve_by_traversal(storage_id, normalized)
        if handle is not None:
            return handle

        if catalog is None:
            catalog = self.scanner.scan(storage_id, self.catalog_roots).audio

        entry = self._match_filename(normalized, catalog)
        if entry is None:
            entry = self._match_fuzzy(normalized, catalog)
        if entry is not None:
            self.logger.debug(
                "Resolved %s through catalog as %s", logical_path, entry.logical_path
            )
            return entry.handle

        raise ObjectNotFoundError("No object found for path", path=logical_path)

    def resolve_folder(self, storage_id: int, logical_path: str) -> int:
        """Find the handle of a folder by walking the tree.

        Only folder objects are accepted at each level.

        Raises:
            ObjectNotFoundError: If a component is missing
        """
        cache: Dict[int, List[DeviceObject]] = {}
        handle = self._traverse(
            storage_id,
            split_components(normalize_logical_path(logical_path, upper=False)),
            cache,
            folders_only=True,
        )
        if handle is None:
            raise ObjectNotFoundError("Folder not found", path=logical_path)
        return handle

    def _resolve_by_traversal(self, storage_id: int, path: str) -> Optional[int]:
        cache: Dict[int, List[DeviceObject]] = {}
        for variation in path_variations(path):
            components = split_components(variation)
            if not components:
                continue
            handle = self._traverse(storage_id, components, cache)
            if handle is not None:
                self.logger.debug("Found %s by traversal as %s", path, variation)
                return handle
        return None

    def _traverse(
        self,
        storage_id: int,
        components: List[str],
        cache: Dict[int, List[DeviceObject]],
        folders_only: bool = False,
    ) -> Optional[int]:
        current = PARENT_ROOT
        last = len(components) - 1
        for index, component in enumerate(components):
            if current not in cache:
                cache[current] = self.session.list_child_objects(storage_id, current)
            children = cache[current]

            match = self._pick_child(children, component, index < last or folders_only)
            if match is None:
                return None
            current = match.handle
        return current

    @staticmethod
    def _pick_child(
        children: List[DeviceObject], name: str, folder: bool
    ) -> Optional[DeviceObject]:
        candidates = [c for c in children if c.is_folder] if folder else children
        for child in candidates:
            if child.filename == name:
                return child
        lowered = name.lower()
        for child in candidates:
            if child.filename.lower() == lowered:
                return child
        return None

    @staticmethod
    def _match_filename(
        path: str, catalog: List[CatalogEntry]
    ) -> Optional[CatalogEntry]:
        components = split_components(path)
        if not components:
            return None
        wanted = components[-1].upper()
        for entry in catalog:
            if entry.filename.upper() == wanted:
                return entry

        wanted_stripped = strip_numeric_prefix(wanted)
        for entry in catalog:
            if strip_numeric_prefix(entry.filename.upper()) == wanted_stripped:
                return entry
        return None

    @staticmethod
    def _match_fuzzy(path: str, catalog: List[CatalogEntry]) -> Optional[CatalogEntry]:
        wanted_parent = parent_segment(path)
        wanted_base = base_name(path)
        if not wanted_base:
            return None
        for entry in catalog:
            if parent_segment(entry.logical_path) != wanted_parent:
                continue
            candidate = base_name(entry.logical_path)
            if not candidate:
                continue
            if (
                candidate == wanted_base
                or wanted_base in candidate
                or candidate in wanted_base
            ):
                return entry
        return None
