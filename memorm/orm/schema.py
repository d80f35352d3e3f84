"""
Module to register model types, and their associations, on top of a db.

create/update/delete framework methods (see methods documentation):
 - schema.register_model
 - table.new / table.create
 - model.save / model.update / model.destroy
"""

import collections
import logging

from ..db import Db
from ..exceptions import ConfigurationError
from ..util import name_to_ref, pluralize
from .association import Association
from .model import Model
from .table import Table

logger = logging.getLogger(__name__)


def _iter_declared_associations(model_cls):
    # parent classes first, so that a subclass may redeclare an association
    declared = collections.OrderedDict()
    for klass in reversed(model_cls.__mro__):
        for key, value in vars(klass).items():
            if isinstance(value, Association):
                declared[key] = value
    return declared.items()


class Schema:
    """
    Schema: registry of model types, and of their associations.

    Parameters
    ----------
    db: memorm.db.Db or None
        if None (default), an empty db is created

    Examples
    --------
    schema = Schema(Db({"users": [{"id": 1, "name": "Link"}]}))

    class Address(Model):
        user = belongs_to()

    schema.register_model("user")
    schema.register_model("address", Address)

    link = schema.user.find(1)
    address = schema.address.create(user=link)
    """

    _dev_table_cls = Table  # for subclassing

    def __init__(self, db=None):
        self.db = Db() if db is None else db
        self._tables = collections.OrderedDict()  # {ref: table, ...}
        self._associations = {}  # {ref: {association_key: bound association, ...}, ...}

    # ------------------------------------------ dev api ---------------------------------------------------------------
    def _dev_get_type_ref(self, type_name):
        ref = name_to_ref(type_name)
        if ref not in self._tables:
            raise ConfigurationError(f"type '{type_name}' is not registered in schema", type_name=type_name)
        return ref

    def _dev_get_associations(self, ref):
        """
        Parameters
        ----------
        ref: str
            registered type ref

        Returns
        -------
        collections.OrderedDict
            {association_key: bound association, ...}
        """
        return self._associations[ref]

    # --------------------------------------------- public api ---------------------------------------------------------
    # python magic
    def __repr__(self):
        return "<Schema>"

    def __str__(self):
        s = "Schema\n"
        for table in self._tables.values():
            models_nb = len(table)
            plural = "" if models_nb == 1 else "s"
            s += f"  {table.get_ref()}: {models_nb} model{plural}\n"
        return s.strip()

    def __getattr__(self, item):
        """
        Get a table by type (case insensitive).

        Parameters
        ----------
        item: str
            type name or ref

        Returns
        -------
        memorm.orm.table.Table
        """
        # _tables may not exist yet (copy, pickle)
        tables = self.__dict__.get("_tables")
        if item.startswith("_") or tables is None:
            raise AttributeError(item)
        try:
            return tables[name_to_ref(item)]
        except KeyError:
            raise AttributeError(f"No type with name '{item}'.") from None

    def __getitem__(self, item):
        return self.get_table(item)

    def __contains__(self, item):
        return name_to_ref(item) in self._tables

    def __iter__(self):
        return iter(self._tables.values())

    def __dir__(self):
        return list(self._tables) + list(self.__dict__)

    # get info
    def get_table(self, type_name):
        """
        Parameters
        ----------
        type_name: str
            type name or ref (case insensitive)

        Returns
        -------
        memorm.orm.table.Table
        """
        try:
            return self._tables[name_to_ref(type_name)]
        except KeyError:
            raise KeyError(f"No type with name '{type_name}'.") from None

    def get_type_refs(self):
        """
        Returns
        -------
        list of str
        """
        return list(self._tables)

    def get_associations(self, type_name):
        """
        Parameters
        ----------
        type_name: str

        Returns
        -------
        dict
            {association_key: association, ...}
        """
        return collections.OrderedDict(self._associations[self._dev_get_type_ref(type_name)])

    # construct
    def register_model(self, type_name, model_cls=None, associations=None):
        """
        Register a model type.

        Associations declared on model class (and given associations, if any) are bound to the type, and the type's
        collection is created in db if it does not exist.

        Parameters
        ----------
        type_name: str
        model_cls: type or None
            Model subclass. If None (default), Model is used.
        associations: dict or None
            {association_key: association, ...}, added to the associations declared on model_cls

        Returns
        -------
        memorm.orm.table.Table
        """
        model_cls = Model if model_cls is None else model_cls
        if not (isinstance(model_cls, type) and issubclass(model_cls, Model)):
            raise TypeError(f"model_cls must be a subclass of Model, got {model_cls}")

        ref = name_to_ref(type_name) if type_name else ""
        if ref == "":
            raise ConfigurationError("A model requires a type", type_name=type_name)
        if ref in self._tables:
            raise ConfigurationError(f"type '{ref}' is already registered", type_name=type_name)

        # bind associations
        declared = collections.OrderedDict(_iter_declared_associations(model_cls))
        if associations is not None:
            declared.update(associations)
        bound = collections.OrderedDict(
            (key, association.bind(ref, key)) for (key, association) in declared.items()
        )

        # each foreign key belongs to one association only
        foreign_keys = {}  # {foreign_key: association_key, ...}
        for key, association in bound.items():
            foreign_key = association.get_foreign_key()
            if foreign_key is None:
                continue
            if foreign_key in foreign_keys:
                raise ConfigurationError(
                    f"associations '{foreign_keys[foreign_key]}' and '{key}' of type '{ref}' both use foreign key "
                    f"'{foreign_key}'",
                    type_name=type_name
                )
            foreign_keys[foreign_key] = key
        self._associations[ref] = bound

        # prepare collection
        collection_name = pluralize(ref)
        self.db._dev_get_or_create_collection(collection_name)

        # create table
        table = self._dev_table_cls(self, ref, type_name, model_cls)
        self._tables[ref] = table

        logger.debug(
            f"registered type {ref} (collection: {collection_name}, associations: {list(self._associations[ref])})"
        )

        return table

    def register_models(self, models):
        """
        Register several model types.

        Parameters
        ----------
        models: dict
            {type_name: model_cls, ...}, model_cls may be None
        """
        for type_name, model_cls in models.items():
            self.register_model(type_name, model_cls)

    # ------------------------------------------- export ---------------------------------------------------------------
    def to_json_data(self):
        """
        Get all registered types' records as a json-serializable dict.

        Returns
        -------
        dict
            {collection_name: [record_data, ...], ...}
        """
        return collections.OrderedDict(
            (table.get_collection_name(), table.to_json_data()) for table in self._tables.values()
        )
