import typing as t

from django.db import models


class LedgerCountersMixin(models.Model):
    """Keeps denormalised ledger counters out of regular saves.

    Counters listed in LEDGER_FIELDS are only ever changed by conditional UPDATEs in the
    inventory ledger. A plain ``save()`` of a stale instance must not write them back.
    """

    LEDGER_FIELDS: t.ClassVar[tuple[str, ...]] = ()

    class Meta:
        abstract = True

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Exclude ledger counters from updates unless explicitly requested."""
        if not self._state.adding and kwargs.get("update_fields") is None and not kwargs.get("force_insert"):
            kwargs["update_fields"] = [
                field.name
                for field in self._meta.concrete_fields
                if not field.primary_key and field.name not in self.LEDGER_FIELDS
            ]
        super().save(*args, **kwargs)
