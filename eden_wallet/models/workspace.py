"""
Workspace Settings Models

Per-ledger configuration: the category vocabulary and the account labels.

DESIGN DECISION: Settings used to travel as a free-form JSON document.
They are now a typed model whose invariants are checked on construction, so
an invalid document is rejected at the store boundary instead of breaking a
form later. The wire shape (categories / accountConfigs / defaultAccountType)
is kept so existing remote rows still load.

Invariants:
- At least one account label exists
- The default label key is always present in the label map
- Category names are unique and non-blank
- Sub-category names are unique within their category
"""

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from eden_wallet.constants import DEFAULT_ACCOUNT_CONFIGS, DEFAULT_SPENDING_CATEGORIES, SystemAccountType


class SettingsValidationError(ValueError):
    """Settings document or settings edit breaks an invariant."""
    pass


class AccountLabel(BaseModel):
    """Display record for one account label key."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, extra="ignore")

    label: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display label"
    )
    color: str = Field(
        default="slate",
        min_length=1,
        max_length=30,
        description="Color tag from the palette"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="Longer explanation shown in settings"
    )


class WorkspaceSettings(BaseModel):
    """
    Settings bundle for one ledger.

    Dict ordering is meaningful: categories and labels are shown in
    insertion order, and deleting the default label falls back to the
    first remaining key.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    categories: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Category name -> ordered sub-category names"
    )
    account_configs: dict[str, AccountLabel] = Field(
        ...,
        alias="accountConfigs",
        description="Label key -> label record"
    )
    default_account_type: str = Field(
        ...,
        alias="defaultAccountType",
        description="Label key preselected on new transactions"
    )

    @field_validator("categories")
    @classmethod
    def validate_categories(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        cleaned: dict[str, list[str]] = {}
        for name, subs in v.items():
            key = name.strip()
            if not key:
                raise ValueError("Category names cannot be blank")
            if key in cleaned:
                raise ValueError(f"Duplicate category: {key}")
            stripped = [s.strip() for s in subs]
            if any(not s for s in stripped):
                raise ValueError(f"Blank sub-category in {key}")
            if len(set(stripped)) != len(stripped):
                raise ValueError(f"Duplicate sub-category in {key}")
            cleaned[key] = stripped
        return cleaned

    @model_validator(mode="after")
    def validate_labels(self) -> "WorkspaceSettings":
        if not self.account_configs:
            raise ValueError("At least one account label is required")
        if self.default_account_type not in self.account_configs:
            raise ValueError(
                f"Default account type {self.default_account_type!r} is not a known label"
            )
        return self

    @classmethod
    def from_document(cls, document: Any) -> "WorkspaceSettings":
        """
        Parse a settings document from either tier.

        Raises:
            SettingsValidationError: If the document is not a valid settings bundle
        """
        if isinstance(document, WorkspaceSettings):
            return document
        if not isinstance(document, dict):
            raise SettingsValidationError(
                f"Settings document must be an object, got {type(document).__name__}"
            )
        try:
            return cls.model_validate(document)
        except ValidationError as e:
            raise SettingsValidationError(str(e)) from e

    def to_document(self) -> dict:
        """Wire shape shared by the remote row and the local cache."""
        return self.model_dump(mode="json", by_alias=True)

    def replace(self, **changes: Any) -> "WorkspaceSettings":
        """
        Return a copy with some fields changed, re-checking invariants.

        model_copy(update=...) skips validation, so build a fresh instance.
        """
        data = {
            "categories": self.categories,
            "account_configs": self.account_configs,
            "default_account_type": self.default_account_type,
        }
        data.update(changes)
        try:
            return WorkspaceSettings(**data)
        except ValidationError as e:
            raise SettingsValidationError(str(e)) from e

    @property
    def label_keys(self) -> list[str]:
        return list(self.account_configs)

    def sub_categories(self, category: str) -> list[str]:
        return list(self.categories.get(category, []))


def default_workspace_settings() -> WorkspaceSettings:
    """Settings a brand-new ledger is seeded with."""
    return WorkspaceSettings(
        categories={name: list(subs) for name, subs in DEFAULT_SPENDING_CATEGORIES.items()},
        account_configs={
            key: AccountLabel(**record) for key, record in DEFAULT_ACCOUNT_CONFIGS.items()
        },
        default_account_type=SystemAccountType.OWN_EXPENSE.value,
    )
