"""Bulk permission selection by category with tri-state semantics.

The operations are pure functions over (selection, catalog); the
CategorySelection class only holds the current selection for one editing
dialog and swaps in the result of each operation.

A category toggle from a partial or empty selection always goes up to
fully checked; only a fully checked category toggles down to empty.
"""

from __future__ import annotations

from collections.abc import Iterable

from authcore.application.services.permission_catalog import PermissionCatalog
from authcore.application.services.permission_codec import (
    PermissionCodec,
    apply_super_user_closure,
)
from authcore.core.constants import SYS_ADMIN_KEY
from authcore.domain.enums import CategoryState
from authcore.domain.exceptions import (
    CatalogUnavailableException,
    UnknownPermissionKeyException,
)


def _category_keys(category: str, catalog: PermissionCatalog) -> frozenset[str]:
    return frozenset(p.key for p in catalog.permissions_in(category))


def toggle_one(
    selected: Iterable[str],
    key: str,
    catalog: PermissionCatalog,
    sys_admin_key: str = SYS_ADMIN_KEY,
) -> frozenset[str]:
    """Remove key if selected, otherwise add it (sys_admin adds every key).

    Raises:
        UnknownPermissionKeyException: If key is not in the catalog.
    """
    if key not in catalog:
        raise UnknownPermissionKeyException(key)
    current = frozenset(selected)
    if key in current:
        return current - {key}
    return apply_super_user_closure(current | {key}, catalog, sys_admin_key)


def toggle_category(
    selected: Iterable[str],
    category: str,
    catalog: PermissionCatalog,
    sys_admin_key: str = SYS_ADMIN_KEY,
) -> frozenset[str]:
    """Clear a fully checked category, otherwise check all of it.

    Unknown or empty categories leave the selection unchanged.
    """
    current = frozenset(selected)
    keys = _category_keys(category, catalog)
    if not keys:
        return current
    if keys <= current:
        return current - keys
    return apply_super_user_closure(current | keys, catalog, sys_admin_key)


def category_state(
    selected: Iterable[str],
    category: str,
    catalog: PermissionCatalog,
) -> CategoryState:
    """CHECKED if every key is selected, INDETERMINATE if some, else UNCHECKED."""
    keys = _category_keys(category, catalog)
    if not keys:
        return CategoryState.UNCHECKED
    chosen = keys & frozenset(selected)
    if chosen == keys:
        return CategoryState.CHECKED
    if chosen:
        return CategoryState.INDETERMINATE
    return CategoryState.UNCHECKED


class CategorySelection:
    """Selected permission keys for one permission-editing dialog.

    Not editable over an empty catalog (failed load): mutations then raise
    CatalogUnavailableException.
    """

    def __init__(
        self,
        catalog: PermissionCatalog,
        selected: Iterable[str] = (),
        sys_admin_key: str = SYS_ADMIN_KEY,
    ) -> None:
        self.catalog = catalog
        self.sys_admin_key = sys_admin_key
        self._selected = frozenset(k for k in selected if k in catalog)

    @classmethod
    def from_encoded(
        cls,
        catalog: PermissionCatalog,
        encoded: str | None,
        sys_admin_key: str = SYS_ADMIN_KEY,
    ) -> CategorySelection:
        """Start from a user's encoded permission string (lenient decode)."""
        keys = PermissionCodec(catalog).decode_keys(encoded)
        return cls(catalog, keys, sys_admin_key)

    @property
    def selected(self) -> frozenset[str]:
        return self._selected

    @property
    def editable(self) -> bool:
        return not self.catalog.is_empty

    def _ensure_editable(self) -> None:
        if not self.editable:
            raise self.catalog.error or CatalogUnavailableException("catalog is empty")

    def is_selected(self, key: str) -> bool:
        return key in self._selected

    def toggle_one(self, key: str) -> frozenset[str]:
        self._ensure_editable()
        self._selected = toggle_one(self._selected, key, self.catalog, self.sys_admin_key)
        return self._selected

    def toggle_category(self, category: str) -> frozenset[str]:
        self._ensure_editable()
        self._selected = toggle_category(
            self._selected, category, self.catalog, self.sys_admin_key
        )
        return self._selected

    def category_state(self, category: str) -> CategoryState:
        return category_state(self._selected, category, self.catalog)

    def states(self) -> dict[str, CategoryState]:
        """Tri-state of every category, in catalog order."""
        return {c: self.category_state(c) for c in self.catalog.categories()}

    def clear(self) -> None:
        self._selected = frozenset()

    def encode(self) -> str:
        """Encoded string for the current selection (catalog order)."""
        return PermissionCodec(self.catalog).encode(self._selected)
