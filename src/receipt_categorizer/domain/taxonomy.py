"""
Category/subcategory catalog and the lookup indices built from it.

The catalog is declared once as literal data; `TAXONOMY` is built from it at
import time and only exposes read accessors afterwards.
"""
from collections.abc import Iterable, Sequence
from types import MappingProxyType
from typing import Any

from receipt_categorizer.models import CategoryDefinition, SubcategoryDefinition

SUBCATEGORY_SEPARATOR = ":"

DEFAULT_CATEGORY_ID = "others"
DEFAULT_SUBCATEGORY_ID = "others:missing"

# (id, name, color, icon, type, [(slug, name, icon), ...])
CATALOG: tuple[tuple[str, str, str, str, str, tuple[tuple[str, str, str], ...]], ...] = (
    ("foodAndDrinks", "Food & Drinks", "#F97316", "silverware-fork-knife", "expense", (
        ("bar-cafe", "Bar, Cafe", "coffee-outline"),
        ("groceries", "Groceries", "cart-outline"),
        ("restaurant-fast-food", "Restaurant, Fast-food", "silverware-fork-knife"),
    )),
    ("shopping", "Shopping", "#A855F7", "shopping", "expense", (
        ("clothes-shoes", "Clothes & shoes", "tshirt-crew-outline"),
        ("drug-store-chemist", "Drug-store, chemist", "pill"),
        ("electronics-accessories", "Electronics, accessories", "cellphone"),
        ("free-time", "Free-time", "puzzle-outline"),
        ("gifts-joy", "Gifts, joy", "gift-outline"),
        ("health-beauty", "Health and beauty", "flower-outline"),
        ("home-green", "Home, green", "leaf"),
        ("jewels-accessories", "Jewels, accessories", "diamond-stone"),
        ("kids", "Kids", "baby-face-outline"),
        ("pets-animals", "Pets, animals", "paw"),
        ("stationary-tools", "Stationary, tools", "pencil-ruler"),
    )),
    ("housing", "Housing", "#EF4444", "home-variant-outline", "expense", (
        ("energy-utilities", "Energy, utilities", "flash-outline"),
        ("maintenance-repairs", "Maintenance, repairs", "hammer-wrench"),
        ("mortgage", "Mortgage", "office-building-outline"),
        ("property-insurance", "Property insurance", "shield-home-outline"),
        ("rent", "Rent", "home-city-outline"),
        ("services", "Services", "toolbox-outline"),
    )),
    ("transportation", "Transportation", "#0EA5E9", "bus", "expense", (
        ("business-trips", "Business trips", "briefcase-outline"),
        ("long-distance", "Long distance", "airplane"),
        ("public-transport", "Public transport", "bus"),
        ("taxi", "Taxi", "taxi"),
    )),
    ("vehicle", "Vehicle", "#22C55E", "car", "expense", (
        ("fuel", "Fuel", "gas-station-outline"),
        ("leasing", "Leasing", "car-key"),
        ("parking", "Parking", "parking"),
        ("rentals", "Rentals", "car-arrow-right"),
        ("vehicle-insurance", "Vehicle insurance", "shield-car"),
        ("vehicle-maintenance", "Vehicle maintenance", "car-wrench"),
    )),
    ("lifeEntertainment", "Life & Entertainment", "#EC4899", "party-popper", "expense", (
        ("active-sport-fitness", "Active sport, fitness", "dumbbell"),
        ("alcohol-tobacco", "Alcohol, tobacco", "glass-cocktail"),
        ("books-audio-subscriptions", "Books, audio, subscriptions", "book-open-page-variant"),
        ("charity-gifts", "Charity, gifts", "hand-heart-outline"),
        ("culture-sport-events", "Culture, sport events", "ticket-confirmation-outline"),
        ("education-development", "Education, development", "school-outline"),
        ("health-care-doctor", "Health care, doctor", "stethoscope"),
        ("hobbies", "Hobbies", "palette-outline"),
        ("holiday-trips-hotels", "Holiday, trips, hotels", "beach"),
        ("life-events", "Life events", "party-popper"),
        ("lottery-gambling", "Lottery, gambling", "dice-5"),
        ("tv-streaming", "TV, Streaming", "television-play"),
        ("wellness-beauty", "Wellness, beauty", "flower-lotus"),
    )),
    ("communicationPc", "Communication, PC", "#6366F1", "cellphone", "expense", (
        ("internet", "Internet", "wifi"),
        ("phone-cellphone", "Phone, cellphone", "cellphone"),
        ("postal-services", "Postal services", "email-outline"),
        ("software-apps-games", "Software, apps, games", "controller-classic-outline"),
    )),
    ("financialExpenses", "Financial Expenses", "#F59E0B", "bank-outline", "expense", (
        ("advisory", "Advisory", "account-tie-outline"),
        ("charges-fees", "Charges, Fees", "cash-multiple"),
        ("child-support", "Child Support", "human-child"),
        ("fines", "Fines", "gavel"),
        ("insurances", "Insurances", "shield-outline"),
        ("loan-interest", "Loan, Interest", "cash-plus"),
        ("taxes", "Taxes", "file-document-outline"),
    )),
    ("investments", "Investments", "#10B981", "chart-line", "expense", (
        ("collections", "Collections", "cube-outline"),
        ("financial-investments", "Financial investments", "chart-line"),
        ("realty", "Realty", "home-modern"),
        ("savings", "Savings", "piggy-bank"),
        ("vehicle-chattels", "Vehicle, chattels", "garage"),
    )),
    ("others", "Others", "#9CA3AF", "dots-horizontal-circle", "expense", (
        ("missing", "Missing", "dots-horizontal-circle-outline"),
    )),
    ("income", "Income", "#2563EB", "wallet-plus", "income", (
        ("checks-coupons", "Checks, coupons", "ticket-percent"),
        ("child-support", "Child Support", "human-child"),
        ("dues-grants", "Dues & grants", "hand-coin-outline"),
        ("gifts", "Gifts", "gift-outline"),
        ("interests-dividends", "Interests, dividends", "chart-areaspline"),
        ("lending-renting", "Lending, renting", "handshake"),
        ("lottery-gambling", "Lottery, Gambling", "dice-5"),
        ("refunds", "Refunds (tax, purchase)", "cash-refund"),
        ("rental-income", "Rental Income", "home-city-outline"),
        ("sale", "Sale", "tag-outline"),
        ("wage-invoices", "Wage, invoices", "briefcase-outline"),
    )),
)


def _add_lookup(index: dict[str, list[str]], key: str, target_id: str) -> None:
    targets = index.setdefault(key.lower(), [])
    if target_id not in targets:
        targets.append(target_id)


class Taxonomy:
    def __init__(
        self,
        categories: Sequence[CategoryDefinition],
        subcategories: Sequence[SubcategoryDefinition],
        *,
        default_category_id: str = DEFAULT_CATEGORY_ID,
        default_subcategory_id: str = DEFAULT_SUBCATEGORY_ID,
    ) -> None:
        category_map: dict[str, CategoryDefinition] = {}
        for category in categories:
            if category.id in category_map:
                raise ValueError(f"Duplicate category id '{category.id}'.")
            category_map[category.id] = category

        subcategory_map: dict[str, SubcategoryDefinition] = {}
        children: dict[str, list[str]] = {category_id: [] for category_id in category_map}
        for subcategory in subcategories:
            if subcategory.id in subcategory_map:
                raise ValueError(f"Duplicate subcategory id '{subcategory.id}'.")
            if subcategory.parent_id not in category_map:
                raise ValueError(
                    f"Subcategory '{subcategory.id}' references unknown category '{subcategory.parent_id}'."
                )
            subcategory_map[subcategory.id] = subcategory
            children[subcategory.parent_id].append(subcategory.id)

        if default_category_id not in category_map:
            raise ValueError(f"Default category '{default_category_id}' is not in the taxonomy.")
        default_subcategory = subcategory_map.get(default_subcategory_id)
        if default_subcategory is None or default_subcategory.parent_id != default_category_id:
            raise ValueError(
                f"Default subcategory '{default_subcategory_id}' must belong to '{default_category_id}'."
            )

        # Name and id keys are matched case-insensitively; slugs may collide across
        # categories ("child-support"), so every key keeps all of its targets.
        category_lookup: dict[str, list[str]] = {}
        for category in category_map.values():
            _add_lookup(category_lookup, category.id, category.id)
            _add_lookup(category_lookup, category.name, category.id)

        subcategory_lookup: dict[str, list[str]] = {}
        for subcategory in subcategory_map.values():
            _add_lookup(subcategory_lookup, subcategory.id, subcategory.id)
            _add_lookup(subcategory_lookup, subcategory.name, subcategory.id)
            _add_lookup(subcategory_lookup, subcategory.slug, subcategory.id)

        self.default_category_id = default_category_id
        self.default_subcategory_id = default_subcategory_id
        self._categories = MappingProxyType(category_map)
        self._subcategories = MappingProxyType(subcategory_map)
        self._children = MappingProxyType({key: tuple(value) for key, value in children.items()})
        self._category_lookup = MappingProxyType(
            {key: tuple(value) for key, value in category_lookup.items()}
        )
        self._subcategory_lookup = MappingProxyType(
            {key: tuple(value) for key, value in subcategory_lookup.items()}
        )
        self._reference_text = self._build_reference_text()

    @property
    def categories(self) -> tuple[CategoryDefinition, ...]:
        return tuple(self._categories.values())

    def subcategory(self, subcategory_id: str) -> SubcategoryDefinition | None:
        return self._subcategories.get(subcategory_id)

    def subcategories_of(self, category_id: str) -> tuple[SubcategoryDefinition, ...]:
        return tuple(self._subcategories[sub_id] for sub_id in self._children.get(category_id, ()))

    def is_valid_category(self, category_id: str | None) -> bool:
        return category_id is not None and category_id in self._categories

    def parent_of(self, subcategory_id: str) -> str | None:
        subcategory = self.subcategory(subcategory_id)
        return subcategory.parent_id if subcategory else None

    def subcategory_name(self, subcategory_id: str) -> str | None:
        subcategory = self.subcategory(subcategory_id)
        return subcategory.name if subcategory else None

    def resolve_category(self, text: str | None) -> str | None:
        """Match a category id or display name, ignoring case."""
        if not text:
            return None
        matches = self._category_lookup.get(text.strip().lower())
        return matches[0] if matches else None

    def resolve_subcategory(self, text: str | None, category_id: str | None = None) -> str | None:
        """
        Match a subcategory id, display name or trailing slug, ignoring case.

        When `category_id` is given, a key shared by several categories resolves
        to the subcategory under that category; otherwise the first declared wins.
        """
        if not text:
            return None
        matches = self._subcategory_lookup.get(text.strip().lower())
        if not matches:
            return None
        if category_id is not None:
            for match in matches:
                if self.parent_of(match) == category_id:
                    return match
        return matches[0]

    def primary_subcategory_of(self, category_id: str) -> str:
        children = self._children.get(category_id)
        if children:
            return children[0]
        return self.default_subcategory_id

    def reference_text(self) -> str:
        return self._reference_text

    def _build_reference_text(self) -> str:
        groups: list[str] = []
        for category in self._categories.values():
            lines = [f"- {category.id} -> {category.name}"]
            children = self._children[category.id]
            if children:
                for sub_id in children:
                    lines.append(f"    - {sub_id} -> {self._subcategories[sub_id].name}")
            else:
                lines.append("    - none")
            groups.append("\n".join(lines))
        return (
            "Valid categories and subcategories (use the exact ids):\n"
            + "\n".join(groups)
            + f"\nIf nothing fits, use {self.default_category_id} "
            f"with subcategory {self.default_subcategory_id}."
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "defaultCategoryId": self.default_category_id,
            "defaultSubcategoryId": self.default_subcategory_id,
            "categories": [
                {
                    **category.model_dump(),
                    "subcategories": [
                        {
                            "id": sub.id,
                            "parentId": sub.parent_id,
                            "name": sub.name,
                            "icon": sub.icon,
                        }
                        for sub in self.subcategories_of(category.id)
                    ],
                }
                for category in self._categories.values()
            ],
        }


def build_taxonomy(
    catalog: Iterable[tuple[str, str, str, str, str, Iterable[tuple[str, str, str]]]] = CATALOG,
    *,
    default_category_id: str = DEFAULT_CATEGORY_ID,
    default_subcategory_id: str = DEFAULT_SUBCATEGORY_ID,
) -> Taxonomy:
    categories: list[CategoryDefinition] = []
    subcategories: list[SubcategoryDefinition] = []
    for category_id, name, color, icon, category_type, children in catalog:
        categories.append(
            CategoryDefinition(id=category_id, name=name, color=color, icon=icon, type=category_type)
        )
        for slug, sub_name, sub_icon in children:
            subcategories.append(
                SubcategoryDefinition(
                    id=f"{category_id}{SUBCATEGORY_SEPARATOR}{slug}",
                    parent_id=category_id,
                    name=sub_name,
                    icon=sub_icon,
                )
            )
    return Taxonomy(
        categories,
        subcategories,
        default_category_id=default_category_id,
        default_subcategory_id=default_subcategory_id,
    )


TAXONOMY = build_taxonomy()
