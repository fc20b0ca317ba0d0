from __future__ import annotations

from collections.abc import Iterable

from app.domain.models import EnvironmentCategory, EnvironmentGroupsRead, EnvironmentRead

SECRET_MASK = "••••••••"


def category_of(variable: EnvironmentRead) -> EnvironmentCategory | None:
    """Missing category means general; unknown categories belong to no group."""
    if not variable.category:
        return EnvironmentCategory.GENERAL
    try:
        return EnvironmentCategory(variable.category)
    except ValueError:
        return None


def group_environments(variables: Iterable[EnvironmentRead]) -> EnvironmentGroupsRead:
    groups = EnvironmentGroupsRead()
    for variable in variables:
        category = category_of(variable)
        if category == EnvironmentCategory.GENERAL:
            groups.general.append(variable)
        elif category == EnvironmentCategory.AUTH:
            groups.auth.append(variable)
        elif category == EnvironmentCategory.PAYMENT:
            groups.payment.append(variable)
    return groups


def secret_environments(variables: Iterable[EnvironmentRead]) -> list[EnvironmentRead]:
    return [item for item in variables if item.is_secret]


def mask_value(value: str) -> str:
    if not value:
        return ""
    return SECRET_MASK
