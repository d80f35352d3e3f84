"""
Model module.

A model wraps an attribute bag (the persistable attributes, i.e. the db record), and gives access to it and to the
relations of its type through an accessor table: {name: (getter, setter), ...}.

create/update/delete framework methods (see methods documentation):
 - table.new / table.create
 - model.save
 - model.update
 - model.destroy
"""

import collections
import copy
import functools

from ..conf import CONF
from ..exceptions import ConfigurationError, RecordDoesNotExistError
from ..util import pluralize


def _get_plain_accessor(attr):
    def getter(model):
        return model._attrs.get(attr)

    def setter(model, value):
        model._attrs[attr] = value

    return getter, setter


def merge_initial_foreign_keys(data, foreign_keys_data):
    """
    Merge foreign keys computed by associations into initial data.

    A foreign key explicitly given in data (not None) is kept, else the value computed by association (id of a related
    model given in data, or None) is used.

    Parameters
    ----------
    data: dict
    foreign_keys_data: dict
        {foreign_key: value, ...}

    Returns
    -------
    dict
        new merged dict, data is not modified
    """
    merged = dict(data)
    for foreign_key, value in foreign_keys_data.items():
        if merged.get(foreign_key) is None:
            merged[foreign_key] = value
    return merged


class Model:
    """
    Model class. A model represents a record of a given type.

    Parameters
    ----------
    schema: memorm.orm.schema.Schema
    type_name: str
        registered type of the model
    data: dict or None
        initial data. Keys may be plain attributes, foreign keys, or association keys (with a related model as value).

    Notes
    -----
    Type name is required because a same Model class can be registered for different types.

    Attribute access: model.name, model["name"], model.get("name") are equivalent (same for setting). Setting an
    attribute that does not exist yet adds it to the persistable attributes.
    """

    _initialized = False  # used by __setattr__

    def __init__(self, schema, type_name, data=None):
        if schema is None:
            raise ConfigurationError("A model requires a schema", type_name=type_name)
        if not type_name:
            raise ConfigurationError("A model requires a type", type_name=type_name)

        self._schema = schema
        self._type = schema._dev_get_type_ref(type_name)
        self._attrs = {}
        self._accessors = {}  # {name: (getter, setter), ...}
        self._factories = {}  # {association_key: {"new": factory, "create": factory}, ...}
        self._factory_names = {}  # {method_name: (association_key, factory_kind), ...}
        self._dev_pending_references = {}  # {association_key: new related model, ...}
        self._dev_saving = False
        self._dev_models_waiting_for_id = []  # models that must be saved again once this model has an id

        data = {} if data is None else dict(data)

        # order matters: each step needs the previous one
        self._discover_associations()
        self._setup_attrs(data)
        self._setup_relationships(data)
        self._setup_plain_attributes()

        # signal initialized
        self._initialized = True

    def _discover_associations(self):
        # association registry was built by schema when type was registered
        self._associations = self._schema._dev_get_associations(self._type)
        self._foreign_keys = [
            fk for fk in (association.get_foreign_key() for association in self._associations.values())
            if fk is not None
        ]

        # id accessor is always available, but id is only in attrs once saved
        self._define_plain_attribute(CONF.id_attribute, ensure_in_attrs=False)

    def _setup_attrs(self, data):
        # data may contain plain attributes, foreign keys, or related models
        foreign_keys_data = {}
        for key, association in self._associations.items():
            foreign_keys_data.update(association.get_initial_value_for_foreign_key(key, data))

        data = merge_initial_foreign_keys(data, foreign_keys_data)

        # association keys are not persistable
        self._attrs = dict((k, v) for (k, v) in data.items() if k not in self._associations)

    def _setup_relationships(self, data):
        for key, association in self._associations.items():
            association.define_relationship(self, key, self._schema, data)

    def _setup_plain_attributes(self):
        for attr in list(self._attrs):
            if attr in self._foreign_keys:
                continue
            self._define_plain_attribute(attr)

    def _define_plain_attribute(self, attr, ensure_in_attrs=True):
        # already defined (id, or attribute defined by an association): nothing to do
        if attr in self._accessors:
            return

        if ensure_in_attrs and attr not in self._attrs:
            self._attrs[attr] = None

        self._accessors[attr] = _get_plain_accessor(attr)

    def _get_collection(self):
        return self._schema.db.get_collection(pluralize(self._type))

    def _get_factory(self, key, kind):
        try:
            return self._factories[key][kind]
        except KeyError:
            raise KeyError(f"{self._type} has no association named '{key}'") from None

    # ------------------------------------------ dev api ---------------------------------------------------------------
    def _dev_define_accessor(self, name, getter, setter):
        """
        Parameters
        ----------
        name: str
        getter: callable
            getter(model) -> value
        setter: callable
            setter(model, value)
        """
        self._accessors[name] = (getter, setter)

    def _dev_define_factories(self, key, new, create):
        """
        Parameters
        ----------
        key: str
            association key
        new: callable
            new(model, data) -> new related model
        create: callable
            create(model, data) -> created related model
        """
        self._factories[key] = {"new": new, "create": create}
        self._factory_names[f"{CONF.new_factory_prefix}{key}"] = (key, "new")
        self._factory_names[f"{CONF.create_factory_prefix}{key}"] = (key, "create")

    def _dev_wait_for_id(self, model):
        """
        Register a model to save again once this model (currently being saved) has been inserted.

        Parameters
        ----------
        model: Model
            model holding a pending reference to this model
        """
        if not any(m is model for m in self._dev_models_waiting_for_id):
            self._dev_models_waiting_for_id.append(model)

    # --------------------------------------------- public api ---------------------------------------------------------
    # python magic
    def __repr__(self):
        """
        Get model repr, including its type and id.

        Returns
        -------
        str
        """
        if self.is_new():
            return f"<Model {self._type} (new)>"
        return f"<Model {self._type} '{self._attrs[CONF.id_attribute]}'>"

    def __eq__(self, other):
        """
        Two models are equal if they have the same type and the same attributes.

        Returns
        -------
        bool
        """
        if not isinstance(other, Model):
            return NotImplemented
        return (self._type == other._type) and (self._attrs == other._attrs)

    __hash__ = None  # mutable

    def __getitem__(self, item):
        """
        Get attribute value.

        Parameters
        ----------
        item: str
            attribute, foreign key or association name

        Returns
        -------
        value
        """
        return self.get(item)

    def __setitem__(self, key, value):
        """
        Set attribute value.

        Parameters
        ----------
        key: str
            attribute, foreign key or association name
        value
        """
        self.set(key, value)

    def __getattr__(self, item):
        """
        Get attribute value, or association factory, by name.

        Parameters
        ----------
        item: str
        """
        # private attributes are never looked up in accessors (may not exist yet)
        if item.startswith("_"):
            raise AttributeError(item)

        if item in self.__dict__.get("_accessors", {}):
            return self.get(item)

        factory_names = self.__dict__.get("_factory_names", {})
        if item in factory_names:
            key, kind = factory_names[item]
            method = self.new_related if kind == "new" else self.create_related
            return functools.partial(method, key)

        raise AttributeError(f"'{self.__dict__.get('_type')}' model has no attribute '{item}'")

    def __setattr__(self, name, value):
        """
        Set attribute value.

        Parameters
        ----------
        name: str
        value
        """
        # properties of subclasses keep their own setter
        if name.startswith("_") or not self._initialized or isinstance(getattr(type(self), name, None), property):
            super().__setattr__(name, value)
            return
        self.set(name, value)

    def __dir__(self):
        """
        Get list of attributes and factories for auto-completion.

        Returns
        -------
        list of str
        """
        return sorted(set(self._accessors) | set(self._factory_names) | set(super().__dir__()))

    # get context
    def get_schema(self):
        """
        Returns
        -------
        memorm.orm.schema.Schema
        """
        return self._schema

    def get_type(self):
        """
        Get model type ref.

        Returns
        -------
        str
        """
        return self._type

    def get_table(self):
        """
        Get the schema table of the model's type.

        Returns
        -------
        memorm.orm.table.Table
        """
        return self._schema.get_table(self._type)

    def get_associations(self):
        """
        Returns
        -------
        dict
            {association_key: association, ...}
        """
        return collections.OrderedDict(self._associations)

    def get_foreign_keys(self):
        """
        Returns
        -------
        list of str
        """
        return list(self._foreign_keys)

    @property
    def attrs(self):
        """
        Persistable attributes (copy).

        Returns
        -------
        dict
        """
        return dict(self._attrs)

    def is_new(self):
        """
        A model is new until it has been saved (it has no id yet).

        Returns
        -------
        bool
        """
        return CONF.id_attribute not in self._attrs

    # attributes access
    def get(self, name):
        """
        Get value of an attribute, a foreign key or an association.

        Parameters
        ----------
        name: str

        Returns
        -------
        value

        Raises
        ------
        KeyError
            if name is unknown
        """
        try:
            getter, _ = self._accessors[name]
        except KeyError:
            raise KeyError(f"'{self._type}' model has no attribute '{name}'") from None
        return getter(self)

    def set(self, name, value):
        """
        Set value of an attribute, a foreign key or an association (which may have side effects on other attributes).

        If name is unknown, a new plain attribute is created.

        Parameters
        ----------
        name: str
        value
        """
        if name not in self._accessors:
            self._define_plain_attribute(name)
        _, setter = self._accessors[name]
        setter(self, value)

    # association factories
    def new_related(self, key, data=None, **or_data):
        """
        Build a new (unsaved) related model and relate it to this model.

        Parameters
        ----------
        key: str
            association key
        data: dict or None
        or_data: related model data (kwargs syntax)

        Returns
        -------
        Model
        """
        return self._get_factory(key, "new")(self, or_data if data is None else data)

    def create_related(self, key, data=None, **or_data):
        """
        Create (and save) a related model and relate it to this model.

        Parameters
        ----------
        key: str
            association key
        data: dict or None
        or_data: related model data (kwargs syntax)

        Returns
        -------
        Model
        """
        return self._get_factory(key, "create")(self, or_data if data is None else data)

    # construct
    def save(self):
        """
        Insert model in db if it is new, else update its record. Pending related models are saved first.

        A pending related model that is itself being saved (reference cycle) is not saved again: this model is inserted
        without its foreign key, and is saved again once the related model has an id.

        Returns
        -------
        Model
            self
        """
        self._dev_saving = True
        try:
            # resolve relations to new models (they need an id)
            for key, association in self._associations.items():
                association.prepare_save(self, key)

            collection = self._get_collection()
            if self.is_new():
                # db response contains id
                self._attrs = collection.insert(self._attrs)
                self._define_plain_attribute(CONF.id_attribute)
            else:
                collection.update(self._attrs, self._attrs[CONF.id_attribute])
        finally:
            self._dev_saving = False

        # models of a reference cycle can now resolve their foreign key
        waiting_models, self._dev_models_waiting_for_id = self._dev_models_waiting_for_id, []
        for model in waiting_models:
            model.save()

        return self

    def update(self, data=None, value=None, **or_data):
        """
        Update given attributes and save.

        Parameters
        ----------
        data: str or dict or None
            if str: name of the attribute to update with value
            if dict: {name: value, ...}
        value
            value of attribute if data is a str
        or_data: attributes (kwargs syntax)

        Returns
        -------
        Model
            self

        Examples
        --------
        model.update("name", "Zelda")
        model.update({"name": "Zelda"})
        model.update(name="Zelda")
        """
        if isinstance(data, str):
            data = {data: value}
        elif data is None:
            if len(or_data) == 0:
                return self
            data = or_data

        for name, v in data.items():
            self.set(name, v)

        return self.save()

    def reload(self):
        """
        Reset attributes to the values stored in db. Pending related models are forgotten.

        Returns
        -------
        Model
            self
        """
        if self.is_new():
            raise RecordDoesNotExistError(f"{self!r} was never saved, it can't be reloaded")

        id_value = self._attrs[CONF.id_attribute]
        record = self._get_collection().find(id_value)
        if record is None:
            raise RecordDoesNotExistError(f"{pluralize(self._type)} does not contain a record who's id is '{id_value}'")

        self._attrs = record
        self._dev_pending_references.clear()
        self._setup_plain_attributes()

        return self

    # delete
    def destroy(self):
        """Remove record from db. Model must not be used afterwards."""
        if self.is_new():
            raise RecordDoesNotExistError(f"{self!r} was never saved, it can't be destroyed")
        self._get_collection().remove(self._attrs[CONF.id_attribute])

    # ------------------------------------------- export ---------------------------------------------------------------
    def to_json_data(self):
        """
        Get model attributes as a json-serializable dict.

        Returns
        -------
        dict
        """
        return copy.deepcopy(self._attrs)
