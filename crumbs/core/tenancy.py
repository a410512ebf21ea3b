from typing import Type, TypeVar
from tortoise.models import Model
from tortoise.queryset import QuerySet
from crumbs.core.exceptions import InvalidInputError

M = TypeVar("M", bound=Model)


def scoped(model: Type[M], tenant_id: str) -> QuerySet[M]:
    """
    Base queryset for a tenant-owned model (any model with a `user_id` column).
    Every read or write of tenant data starts here, so no query runs without
    the owning tenant's filter.
    """
    if not tenant_id:
        raise InvalidInputError("A tenant id is required for this operation.")
    return model.filter(user_id=tenant_id)
