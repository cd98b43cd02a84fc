"""
Workspace Editing

Edits to a ledger's categories and account labels.

DESIGN DECISION: Every edit is a pure function WorkspaceSettings -> WorkspaceSettings.
- Settings are frozen, so an edit can never leave a half-applied state
- Invariants are re-checked by WorkspaceSettings.replace on every edit
- User mistakes (duplicate names, unknown keys) raise SettingsValidationError
  for the form to show; nothing is silently corrected

WorkspaceEditor applies an edit and persists the result through DataStorage.
"""

import random
import time
from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from eden_wallet.constants import COLOR_PALETTE, USER_LABEL_PREFIX
from eden_wallet.models import (
    AccountLabel,
    Ledger,
    SettingsValidationError,
    WorkspaceSettings,
)


logger = structlog.get_logger(__name__)


def _clean(name: str, what: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise SettingsValidationError(f"{what} name cannot be blank")
    return cleaned


def _require_category(settings: WorkspaceSettings, category: str) -> None:
    if category not in settings.categories:
        raise SettingsValidationError(f"Unknown category: {category}")


def _require_label(settings: WorkspaceSettings, key: str) -> None:
    if key not in settings.account_configs:
        raise SettingsValidationError(f"Unknown account label: {key}")


def _label_record(label: str, color: str, description: str) -> AccountLabel:
    try:
        return AccountLabel(label=label, color=color, description=description)
    except ValidationError as e:
        raise SettingsValidationError(str(e)) from e


# =============================================================================
# CATEGORIES
# =============================================================================

def add_category(settings: WorkspaceSettings, name: str) -> WorkspaceSettings:
    """Append a new category with no sub-categories."""
    name = _clean(name, "Category")
    if name in settings.categories:
        raise SettingsValidationError(f"Category already exists: {name}")
    return settings.replace(categories={**settings.categories, name: []})


def rename_category(settings: WorkspaceSettings, old: str, new: str) -> WorkspaceSettings:
    """Rename a category in place, keeping its position and sub-categories."""
    _require_category(settings, old)
    new = _clean(new, "Category")
    if new == old:
        return settings
    if new in settings.categories:
        raise SettingsValidationError(f"Category already exists: {new}")
    categories = {
        (new if name == old else name): subs
        for name, subs in settings.categories.items()
    }
    return settings.replace(categories=categories)


def delete_category(settings: WorkspaceSettings, name: str) -> WorkspaceSettings:
    """
    Remove a category and its sub-categories.

    Stored transactions keep their category text; they are not rewritten.
    """
    _require_category(settings, name)
    categories = {k: v for k, v in settings.categories.items() if k != name}
    return settings.replace(categories=categories)


def add_sub_category(settings: WorkspaceSettings, category: str, name: str) -> WorkspaceSettings:
    _require_category(settings, category)
    name = _clean(name, "Sub-category")
    subs = settings.sub_categories(category)
    if name in subs:
        raise SettingsValidationError(f"Sub-category already exists in {category}: {name}")
    return settings.replace(categories={**settings.categories, category: subs + [name]})


def delete_sub_category(settings: WorkspaceSettings, category: str, name: str) -> WorkspaceSettings:
    _require_category(settings, category)
    subs = settings.sub_categories(category)
    if name not in subs:
        raise SettingsValidationError(f"Unknown sub-category in {category}: {name}")
    subs.remove(name)
    return settings.replace(categories={**settings.categories, category: subs})


# =============================================================================
# ACCOUNT LABELS
# =============================================================================

def new_label_key() -> str:
    """Key for a user-created label: USER_<epoch millis>."""
    return f"{USER_LABEL_PREFIX}{int(time.time() * 1000)}"


def add_account_label(
    settings: WorkspaceSettings,
    label: str,
    color: Optional[str] = None,
    description: str = "",
    key: Optional[str] = None,
) -> tuple[WorkspaceSettings, str]:
    """
    Add an account label.

    Args:
        settings: Current settings
        label: Display text
        color: Palette color; a random one if omitted
        description: Optional longer text
        key: Explicit key (defaults to USER_<millis>)

    Returns:
        (new settings, key of the new label)
    """
    label = _clean(label, "Label")
    key = key or new_label_key()
    while key in settings.account_configs:
        # Two labels added within the same millisecond
        key = f"{key}_1"

    record = _label_record(label, color or random.choice(COLOR_PALETTE), description or "")
    updated = settings.replace(account_configs={**settings.account_configs, key: record})
    return updated, key


def update_account_label(
    settings: WorkspaceSettings,
    key: str,
    label: Optional[str] = None,
    color: Optional[str] = None,
    description: Optional[str] = None,
) -> WorkspaceSettings:
    """Change the display fields of an existing label; None leaves a field as is."""
    _require_label(settings, key)
    current = settings.account_configs[key]
    record = _label_record(
        _clean(label, "Label") if label is not None else current.label,
        color if color is not None else current.color,
        description if description is not None else current.description,
    )
    return settings.replace(account_configs={**settings.account_configs, key: record})


def delete_account_label(settings: WorkspaceSettings, key: str) -> WorkspaceSettings:
    """
    Remove a label.

    The last remaining label cannot be deleted. Deleting the default label
    makes the first remaining key the new default.
    """
    _require_label(settings, key)
    remaining = {k: v for k, v in settings.account_configs.items() if k != key}
    if not remaining:
        raise SettingsValidationError("Cannot delete the last account label")

    default = settings.default_account_type
    if default == key:
        default = next(iter(remaining))
    return settings.replace(account_configs=remaining, default_account_type=default)


def set_default_account_type(settings: WorkspaceSettings, key: str) -> WorkspaceSettings:
    _require_label(settings, key)
    return settings.replace(default_account_type=key)


# =============================================================================
# EDITOR
# =============================================================================

class WorkspaceEditor:
    """
    Applies edits to one ledger's settings and saves them.

    Usage:
        editor = WorkspaceEditor(storage, Ledger.PERSONAL)
        await editor.load()
        await editor.add_category("Travel")
    """

    def __init__(self, storage, ledger: Ledger):
        self._storage = storage
        self._ledger = ledger
        self._settings: Optional[WorkspaceSettings] = None

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def settings(self) -> Optional[WorkspaceSettings]:
        return self._settings

    async def load(self) -> WorkspaceSettings:
        self._settings = await self._storage.load_workspace(self._ledger)
        return self._settings

    async def _apply(
        self,
        edit: Callable[[WorkspaceSettings], WorkspaceSettings],
        action: str,
    ) -> WorkspaceSettings:
        current = self._settings or await self.load()
        updated = edit(current)
        if updated is not current:
            await self._storage.save_settings(updated, self._ledger)
            logger.info("workspace_edited", ledger=self._ledger.value, action=action)
        self._settings = updated
        return updated

    async def add_category(self, name: str) -> WorkspaceSettings:
        return await self._apply(lambda s: add_category(s, name), "add_category")

    async def rename_category(self, old: str, new: str) -> WorkspaceSettings:
        return await self._apply(lambda s: rename_category(s, old, new), "rename_category")

    async def delete_category(self, name: str) -> WorkspaceSettings:
        return await self._apply(lambda s: delete_category(s, name), "delete_category")

    async def add_sub_category(self, category: str, name: str) -> WorkspaceSettings:
        return await self._apply(
            lambda s: add_sub_category(s, category, name), "add_sub_category"
        )

    async def delete_sub_category(self, category: str, name: str) -> WorkspaceSettings:
        return await self._apply(
            lambda s: delete_sub_category(s, category, name), "delete_sub_category"
        )

    async def add_account_label(
        self,
        label: str,
        color: Optional[str] = None,
        description: str = "",
    ) -> str:
        """Add a label and return its generated key."""
        keys: list[str] = []

        def edit(s: WorkspaceSettings) -> WorkspaceSettings:
            updated, key = add_account_label(s, label, color, description)
            keys.append(key)
            return updated

        await self._apply(edit, "add_account_label")
        return keys[0]

    async def update_account_label(
        self,
        key: str,
        label: Optional[str] = None,
        color: Optional[str] = None,
        description: Optional[str] = None,
    ) -> WorkspaceSettings:
        return await self._apply(
            lambda s: update_account_label(s, key, label, color, description),
            "update_account_label",
        )

    async def delete_account_label(self, key: str) -> WorkspaceSettings:
        return await self._apply(lambda s: delete_account_label(s, key), "delete_account_label")

    async def set_default_account_type(self, key: str) -> WorkspaceSettings:
        return await self._apply(
            lambda s: set_default_account_type(s, key), "set_default_account_type"
        )
