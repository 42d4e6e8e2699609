# chatterlite/infrastructure/uow.py
from typing import Any, Dict, Type

from sqlalchemy.exc import IntegrityError

from chatterlite.domain.errors import ConstraintViolation


class UoWModel:
    def __init__(self, model: Any, uow: "UnitOfWork"):
        self.__dict__["_model"] = model
        self.__dict__["_uow"] = uow

    def __getattr__(self, key):
        return getattr(self._model, key)

    def __setattr__(self, key, value):
        setattr(self._model, key, value)
        # new models are inserted whole on commit, only existing ones go dirty
        if id(self._model) not in self._uow.new:
            self._uow.register_dirty(self._model)


class UnitOfWork:
    def __init__(self) -> None:
        self.dirty: Dict[int, Any] = {}
        self.new: Dict[int, Any] = {}
        self.deleted: Dict[int, Any] = {}
        self.mappers: Dict[Type, Any] = {}

    def register_dirty(self, model: Any) -> None:
        if isinstance(model, UoWModel):
            model = model._model
        model_id = id(model)
        if model_id not in self.new:
            self.dirty[model_id] = model

    def register_deleted(self, model: Any) -> None:
        if isinstance(model, UoWModel):
            model = model._model
        model_id = id(model)
        if model_id in self.new:
            self.new.pop(model_id)
            return
        self.dirty.pop(model_id, None)
        self.deleted[model_id] = model

    def register_new(self, model: Any) -> UoWModel:
        if isinstance(model, UoWModel):
            model = model._model
        self.new[id(model)] = model
        return UoWModel(model, self)

    async def commit(self) -> None:
        try:
            for model in self.new.values():
                await self.mappers[type(model)].insert(model)
            for model in self.dirty.values():
                await self.mappers[type(model)].update(model)
            for model in self.deleted.values():
                await self.mappers[type(model)].delete(model)
        except IntegrityError as e:
            raise ConstraintViolation("Record already exists") from e
        finally:
            self.new.clear()
            self.dirty.clear()
            self.deleted.clear()
