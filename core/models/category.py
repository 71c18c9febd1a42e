# =============================================================================
# core/models/category.py - Category Maps
# =============================================================================
# Categories are a fixed taxonomy, not a table: each app row stores the
# numeric term_id, and the slug / display name come from the maps below.
#
# Two pseudo-slugs list the whole catalog instead of one category:
# - "all": every published app
# - "0":   the latest published apps
# Both are ordered newest first.
# =============================================================================

from pydantic import BaseModel, Field

from .locale import Locale


class Category(BaseModel):
    """
    A catalog category as shown to clients.

    Example:
        {"term_id": 5, "name": "Programming", "slug": "code"}
    """

    term_id: int = Field(..., description="Numeric id stored on app rows")
    name: str = Field(..., description="Localized display name")
    slug: str = Field(..., description="URL slug (same in every locale)")

    model_config = {"frozen": True}


DEFAULT_CATEGORY_ID = 18

ALL_SLUG = "all"
LATEST_SLUG = "0"


# term_id -> (slug, zh name, en name)
_CATEGORY_TABLE: dict[int, tuple[str, str, str]] = {
    1: ("uncategorized", "默认", "Uncategorized"),
    2: ("software", "装机", "Essential Software"),
    3: ("net", "网络软件", "Network Tools"),
    4: ("video", "媒体", "Media"),
    5: ("code", "编程软件", "Programming"),
    6: ("pic", "图像", "Graphics"),
    7: ("sys", "系统软件", "System Tools"),
    8: ("tools", "应用软件", "Applications"),
    9: ("mobile", "手机软件", "Mobile Apps"),
    13: ("info", "资讯", "News"),
    31: ("game", "游戏", "Games"),
    52: ("ai", "AI", "AI"),
}

_PSEUDO_NAMES: dict[str, dict[Locale, str]] = {
    ALL_SLUG: {Locale.ZH: "全部软件", Locale.EN: "All Software"},
    LATEST_SLUG: {Locale.ZH: "最新软件", Locale.EN: "Latest Software"},
}


def list_categories(locale: Locale) -> list[Category]:
    """All real categories for a locale, ordered by term_id."""
    name_index = 1 if locale == Locale.ZH else 2
    return [
        Category(term_id=term_id, name=row[name_index], slug=row[0])
        for term_id, row in sorted(_CATEGORY_TABLE.items())
    ]


def find_category(slug: str, locale: Locale) -> Category | None:
    """
    Look up a category by slug.

    Pseudo-slugs resolve to a Category with term_id 0.
    Returns None when the slug is unknown.
    """
    if slug in _PSEUDO_NAMES:
        return Category(term_id=0, name=_PSEUDO_NAMES[slug][locale], slug=slug)

    for category in list_categories(locale):
        if category.slug == slug:
            return category
    return None


def is_pseudo_slug(slug: str) -> bool:
    """True for slugs that list the whole catalog."""
    return slug in _PSEUDO_NAMES
