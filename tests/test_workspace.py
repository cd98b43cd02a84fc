"""
Tests for category and account label editing.
"""

import pytest

from eden_wallet.constants import COLOR_PALETTE
from eden_wallet.models import (
    AccountLabel,
    Ledger,
    SettingsValidationError,
    WorkspaceSettings,
    default_workspace_settings,
)
from eden_wallet.workspace import (
    WorkspaceEditor,
    add_account_label,
    add_category,
    add_sub_category,
    delete_account_label,
    delete_category,
    delete_sub_category,
    rename_category,
    set_default_account_type,
    update_account_label,
)


@pytest.fixture
def two_label_settings():
    return WorkspaceSettings(
        categories={"Food": ["Hawker", "Cafe"], "Transport": []},
        account_configs={
            "A": AccountLabel(label="A", color="blue"),
            "B": AccountLabel(label="B", color="rose"),
        },
        default_account_type="A",
    )


class TestCategories:

    def test_add_category_appends(self, two_label_settings):
        updated = add_category(two_label_settings, "  Travel ")

        assert list(updated.categories) == ["Food", "Transport", "Travel"]
        assert updated.categories["Travel"] == []
        assert "Travel" not in two_label_settings.categories

    def test_add_duplicate_category_rejected(self, two_label_settings):
        with pytest.raises(SettingsValidationError, match="already exists"):
            add_category(two_label_settings, "Food")

    def test_add_blank_category_rejected(self, two_label_settings):
        with pytest.raises(SettingsValidationError, match="blank"):
            add_category(two_label_settings, "   ")

    def test_rename_keeps_position_and_subs(self, two_label_settings):
        updated = rename_category(two_label_settings, "Food", "Eating out")

        assert list(updated.categories) == ["Eating out", "Transport"]
        assert updated.categories["Eating out"] == ["Hawker", "Cafe"]

    def test_rename_onto_existing_rejected(self, two_label_settings):
        with pytest.raises(SettingsValidationError):
            rename_category(two_label_settings, "Food", "Transport")

    def test_rename_unknown_rejected(self, two_label_settings):
        with pytest.raises(SettingsValidationError, match="Unknown category"):
            rename_category(two_label_settings, "Nope", "Other")

    def test_delete_category(self, two_label_settings):
        updated = delete_category(two_label_settings, "Food")

        assert list(updated.categories) == ["Transport"]

    def test_add_and_delete_sub_category(self, two_label_settings):
        updated = add_sub_category(two_label_settings, "Food", "Bakery")
        assert updated.sub_categories("Food") == ["Hawker", "Cafe", "Bakery"]

        updated = delete_sub_category(updated, "Food", "Hawker")
        assert updated.sub_categories("Food") == ["Cafe", "Bakery"]

    def test_duplicate_sub_category_rejected(self, two_label_settings):
        with pytest.raises(SettingsValidationError):
            add_sub_category(two_label_settings, "Food", "Cafe")

    def test_delete_unknown_sub_category_rejected(self, two_label_settings):
        with pytest.raises(SettingsValidationError):
            delete_sub_category(two_label_settings, "Transport", "Taxi")


class TestAccountLabels:

    def test_add_label_generates_user_key(self, two_label_settings):
        updated, key = add_account_label(two_label_settings, "Holiday fund")

        assert key.startswith("USER_")
        assert key[len("USER_"):].isdigit()
        assert updated.account_configs[key].label == "Holiday fund"
        assert updated.account_configs[key].color in COLOR_PALETTE

    def test_add_label_with_color(self, two_label_settings):
        updated, key = add_account_label(two_label_settings, "Gym", color="cyan", description="Split")

        assert updated.account_configs[key].color == "cyan"
        assert updated.account_configs[key].description == "Split"

    def test_add_label_avoids_key_collision(self, two_label_settings):
        updated, key = add_account_label(two_label_settings, "Again", key="A")

        assert key != "A"
        assert updated.account_configs["A"].label == "A"

    def test_update_label(self, two_label_settings):
        updated = update_account_label(two_label_settings, "B", label="Bee", color="amber")

        assert updated.account_configs["B"].label == "Bee"
        assert updated.account_configs["B"].color == "amber"
        assert updated.account_configs["B"].description == ""

    def test_update_label_rejects_blank_color(self, two_label_settings):
        with pytest.raises(SettingsValidationError):
            update_account_label(two_label_settings, "B", color="")

    def test_delete_non_default_label(self, two_label_settings):
        updated = delete_account_label(two_label_settings, "B")

        assert updated.label_keys == ["A"]
        assert updated.default_account_type == "A"

    def test_delete_default_label_reassigns_default(self, two_label_settings):
        updated = delete_account_label(two_label_settings, "A")

        assert updated.label_keys == ["B"]
        assert updated.default_account_type == "B"

    def test_delete_last_label_rejected(self, single_label_settings):
        with pytest.raises(SettingsValidationError, match="last account label"):
            delete_account_label(single_label_settings, "A")

    def test_set_default(self, two_label_settings):
        assert set_default_account_type(two_label_settings, "B").default_account_type == "B"

    def test_set_unknown_default_rejected(self, two_label_settings):
        with pytest.raises(SettingsValidationError, match="Unknown account label"):
            set_default_account_type(two_label_settings, "Z")


class TestWorkspaceEditor:
    """Edits persisted through the facade."""

    async def test_load_seeds_defaults(self, offline_storage):
        editor = WorkspaceEditor(offline_storage, Ledger.PERSONAL)

        assert await editor.load() == default_workspace_settings()

    async def test_edit_is_saved(self, storage, remote):
        editor = WorkspaceEditor(storage, Ledger.JOINT)

        await editor.add_category("Travel")
        await editor.add_sub_category("Travel", "Flights")

        saved = await storage.get_settings(Ledger.JOINT)
        assert saved.sub_categories("Travel") == ["Flights"]
        assert remote.settings[Ledger.JOINT] == saved

    async def test_add_label_returns_key(self, offline_storage):
        editor = WorkspaceEditor(offline_storage, Ledger.PERSONAL)

        key = await editor.add_account_label("Pets", color="pink")

        saved = await offline_storage.get_settings(Ledger.PERSONAL)
        assert saved.account_configs[key].label == "Pets"

    async def test_rejected_edit_saves_nothing(self, offline_storage, single_label_settings):
        await offline_storage.save_settings(single_label_settings, Ledger.PERSONAL)
        editor = WorkspaceEditor(offline_storage, Ledger.PERSONAL)

        with pytest.raises(SettingsValidationError):
            await editor.delete_account_label("A")

        assert await offline_storage.get_settings(Ledger.PERSONAL) == single_label_settings


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
