"""Queryset module."""

from itertools import filterfalse

import pandas as pd

from ..conf import CONF
from ..exceptions import RecordDoesNotExistError, MultipleRecordsReturnedError


def _unique_ever_seen(iterable, key=None):
    """
    List unique elements, preserving order. Remember all elements ever seen.

    https://docs.python.org/3.6/library/itertools.html#itertools-recipes

    >>> list(_unique_ever_seen('AAAABBBCCDAABBB'))
    ['A', 'B', 'C', 'D']
    >>> list(_unique_ever_seen('ABBCcAD', str.lower))
    ['A', 'B', 'C', 'D']
    """
    seen = set()
    seen_add = seen.add
    if key is None:
        for element in filterfalse(seen.__contains__, iterable):
            seen_add(element)
            yield element
    else:
        for element in iterable:
            k = key(element)
            if k not in seen:
                seen_add(k)
                yield element


def _model_key(model):
    # saved models are identified by their id, new models by their python id
    if model.is_new():
        return "new", id(model)
    return "saved", str(model.get(CONF.id_attribute))


class Queryset:
    """
    Contains models of one table, in db order.

    A queryset must be immutable (not a Python sense, but list must never be modified).

    Parameters
    ----------
    table: memorm.orm.table.Table
    models: typing.Iterable[memorm.orm.model.Model]
    """

    def __init__(self, table, models=None):
        self._table = table

        # manage empty
        if models is None:
            models = ()

        # ensure unique, make un-mutable
        self._models = tuple(_unique_ever_seen(models, key=_model_key))

        # ensure correct table
        if len({m.get_type() for m in self._models}.difference({self.get_table_ref()})) > 0:
            raise RuntimeError(
                f"queryset contains models that belong to other table than {self.get_table_ref()}"
            )

    # python magic
    def __repr__(self):
        """
        Returns
        -------
        str
        """
        return "<Queryset of %s: %s models>" % (self.get_table_ref(), str(len(self._models)))

    def __getitem__(self, item):
        """
        Get model(s) from the queryset by index/slice.

        Parameters
        ----------
        item: int or slice

        Returns
        -------
        memorm.orm.model.Model or tuple of models
        """
        return self._models[item]

    def __iter__(self):
        return iter(self._models)

    def __len__(self):
        return len(self._models)

    def __add__(self, other):
        """
        Add new query set to query set (only new models will be added since uniqueness is ensured in __init__).

        Parameters
        ----------
        other: Queryset

        Returns
        -------
        Queryset
        """
        return Queryset(self._table, list(self) + list(other))

    def __eq__(self, other):
        """
        Check if two queryset are equal (contain the same models, in the same order).

        Parameters
        ----------
        other: Queryset

        Returns
        -------
        bool
        """
        if not isinstance(other, Queryset):
            return NotImplemented
        return list(self) == list(other)

    __hash__ = None

    # get info
    def get_table(self):
        """
        Returns
        -------
        memorm.orm.table.Table
        """
        return self._table

    def get_table_ref(self):
        """
        Returns
        -------
        str
        """
        return self._table.get_ref()

    def one(self, id_value=None):
        """
        Get a single model of this queryset.

        Parameters
        ----------
        id_value: id or None
            if given, model who's id is id_value, else queryset must contain one and only one model

        Returns
        -------
        memorm.orm.model.Model

        Raises
        ------
        RecordDoesNotExistError
            if no model is found
        MultipleRecordsReturnedError
            if id_value is None and queryset contains more than one model
        """
        if id_value is not None:
            for m in self._models:
                if not m.is_new() and str(m.get(CONF.id_attribute)) == str(id_value):
                    return m
            raise RecordDoesNotExistError(f"queryset does not contain a model who's id is '{id_value}'")

        # check one and only one
        if len(self) == 0:
            raise RecordDoesNotExistError("Queryset set contains no value.")
        if len(self) > 1:
            raise MultipleRecordsReturnedError("Queryset contains more than one value.")

        return self._models[0]

    # construct
    def save(self):
        """
        Save all models.

        Returns
        -------
        Queryset
            self
        """
        for m in self._models:
            m.save()
        return self

    def update(self, data=None, value=None, **or_data):
        """
        Update and save all models (see Model.update).

        Returns
        -------
        Queryset
            self
        """
        for m in self._models:
            m.update(data, value, **or_data)
        return self

    # delete
    def destroy(self):
        """Destroy all models of queryset."""
        for m in self._models:
            m.destroy()

        # clear content
        self._models = ()

    # ------------------------------------------- export ---------------------------------------------------------------
    def to_json_data(self):
        """
        Queryset as a json-serializable list.

        Returns
        -------
        list of dict
        """
        return [m.to_json_data() for m in self._models]

    def to_dataframe(self):
        """
        Queryset as a dataframe, one row per model. Index is the id if all models are saved.

        Returns
        -------
        pandas.DataFrame
        """
        df = pd.DataFrame.from_records(self.to_json_data())
        if len(self) > 0 and CONF.id_attribute in df.columns and not any(m.is_new() for m in self._models):
            df = df.set_index(CONF.id_attribute)
        return df
