"""Category selection tests: tri-state, bulk toggle asymmetry, sys_admin closure."""

import pytest

from authcore.application.services.category_selection import (
    CategorySelection,
    category_state,
    toggle_category,
    toggle_one,
)
from authcore.application.services.permission_catalog import PermissionCatalog
from authcore.domain.enums import CategoryState
from authcore.domain.exceptions import (
    CatalogUnavailableException,
    UnknownPermissionKeyException,
)

FINANCE = {f"finance_{i}" for i in range(1, 6)}


class TestPureOperations:
    def test_toggle_one_adds_and_removes(self, catalog: PermissionCatalog) -> None:
        selected = toggle_one(frozenset(), "view", catalog)
        assert selected == {"view"}
        assert toggle_one(selected, "view", catalog) == frozenset()

    def test_toggle_sys_admin_selects_everything(self, catalog: PermissionCatalog) -> None:
        assert toggle_one(frozenset(), "sys_admin", catalog) == {"view", "edit", "sys_admin"}

    def test_toggle_unknown_key_rejected(self, catalog: PermissionCatalog) -> None:
        with pytest.raises(UnknownPermissionKeyException):
            toggle_one(frozenset(), "delete", catalog)

    def test_partial_category_toggles_up(self, large_catalog: PermissionCatalog) -> None:
        """Two of five selected (indeterminate) -> toggle -> all five selected."""
        selected = {"finance_1", "finance_2"}
        assert category_state(selected, "Finance", large_catalog) == CategoryState.INDETERMINATE
        after = toggle_category(selected, "Finance", large_catalog)
        assert after == FINANCE
        assert category_state(after, "Finance", large_catalog) == CategoryState.CHECKED

    def test_full_category_toggles_down(self, large_catalog: PermissionCatalog) -> None:
        after = toggle_category(FINANCE | {"reports"}, "Finance", large_catalog)
        assert after == {"reports"}
        assert category_state(after, "Finance", large_catalog) == CategoryState.UNCHECKED

    def test_category_with_sys_admin_applies_closure(self, large_catalog: PermissionCatalog) -> None:
        after = toggle_category(frozenset(), "Admin", large_catalog)
        assert after == set(large_catalog.keys())

    def test_unknown_category_is_noop(self, catalog: PermissionCatalog) -> None:
        assert toggle_category({"view"}, "Nope", catalog) == {"view"}
        assert category_state({"view"}, "Nope", catalog) == CategoryState.UNCHECKED


class TestCategorySelection:
    def test_initial_selection_filtered_to_catalog(self, catalog: PermissionCatalog) -> None:
        selection = CategorySelection(catalog, {"view", "ghost"})
        assert selection.selected == {"view"}
        assert selection.is_selected("view")

    def test_from_encoded(self, catalog: PermissionCatalog) -> None:
        selection = CategorySelection.from_encoded(catalog, "2?")
        assert selection.selected == {"edit"}

    def test_states_in_catalog_order(self, catalog: PermissionCatalog) -> None:
        selection = CategorySelection(catalog, {"view"})
        assert selection.states() == {
            "Basic": CategoryState.INDETERMINATE,
            "Admin": CategoryState.UNCHECKED,
        }

    def test_mutations_and_encode(self, catalog: PermissionCatalog) -> None:
        selection = CategorySelection(catalog)
        selection.toggle_category("Basic")
        assert selection.encode() == "12"
        selection.toggle_one("view")
        assert selection.encode() == "2"
        selection.toggle_one("sys_admin")
        assert selection.encode() == "129"
        selection.clear()
        assert selection.selected == frozenset()

    def test_empty_catalog_not_editable(self) -> None:
        err = CatalogUnavailableException("HTTP 503")
        selection = CategorySelection(PermissionCatalog.empty(err))
        assert selection.editable is False
        with pytest.raises(CatalogUnavailableException) as exc_info:
            selection.toggle_category("Basic")
        assert exc_info.value is err
        with pytest.raises(CatalogUnavailableException):
            CategorySelection(PermissionCatalog.empty()).toggle_one("view")
