# =============================================================================
# core/models/locale.py - Locale Resolution
# =============================================================================
# The catalog is published in two languages. Each locale owns its own app
# table and its own category names, so anything locale-dependent is looked
# up through the Locale enum instead of ad-hoc string comparisons.
# =============================================================================

from enum import Enum


class Locale(str, Enum):
    """
    Supported catalog languages.

    - zh: Chinese listings (table `apps`)
    - en: English listings (table `appsen`)
    """
    ZH = "zh"
    EN = "en"

    @property
    def table(self) -> str:
        """Name of the catalog table holding this locale's listings."""
        return _TABLES[self]


_TABLES = {
    Locale.ZH: "apps",
    Locale.EN: "appsen",
}


def resolve_locale(value: "str | Locale | None", default: "str | Locale" = Locale.ZH) -> Locale:
    """
    Map a request-supplied locale string to a Locale.

    Case-insensitive, region suffixes are ignored ("en-US" -> EN,
    "zh_CN" -> ZH). Anything unknown or empty falls back to `default`.

    Example:
        resolve_locale("EN")      # Locale.EN
        resolve_locale(None)      # Locale.ZH
        resolve_locale("fr", "en")  # Locale.EN
    """
    if isinstance(value, Locale):
        return value

    if value:
        primary = value.strip().lower().replace("_", "-").split("-")[0]
        for locale in Locale:
            if locale.value == primary:
                return locale

    return default if isinstance(default, Locale) else Locale(default)
