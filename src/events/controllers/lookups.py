import typing as t

from django.db.models import Model, QuerySet

from events.exceptions import NotFoundError

M = t.TypeVar("M", bound=Model)


def get_or_not_found(queryset: QuerySet[M], message: str, **lookup: t.Any) -> M:
    """Fetch one object or raise the domain NotFoundError."""
    try:
        return queryset.get(**lookup)
    except queryset.model.DoesNotExist as e:
        raise NotFoundError(message) from e
