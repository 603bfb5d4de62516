from typing import Type, TypeVar, Generic, Iterable, List, Optional
from django.db import models

T = TypeVar('T', bound=models.Model)


class GenericRepository(Generic[T]):
    def __init__(self, model: Type[T]):
        self.model = model

    def get(self, **filters) -> Optional[T]:
        return self.model.objects.filter(**filters).first()

    def get_many(self, ids: Iterable[int]) -> List[T]:
        """Return the rows matching ``ids`` in the order the ids were given."""
        wanted = list(ids)
        by_id = {obj.pk: obj for obj in self.model.objects.filter(pk__in=wanted)}
        return [by_id[pk] for pk in wanted if pk in by_id]

    def exists(self, **filters) -> bool:
        return self.model.objects.filter(**filters).exists()

    def create(self, **data) -> T:
        return self.model.objects.create(**data)

    def update(self, obj: T, **data) -> T:
        for k, v in data.items():
            setattr(obj, k, v)
        obj.save()
        return obj

    def delete(self, obj: T):
        obj.delete()
