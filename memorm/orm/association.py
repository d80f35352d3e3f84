"""
Association module.

An association is a type-level declaration of a relation between two model types. It is declared as a class attribute
of a Model subclass (or given to Schema.register_model), and bound once, when the type is registered, to its
possessor type and its key:

    class Address(Model):
        user = belongs_to()

    schema.register_model("address", Address)  # binds: possessor='address', key='user', referent='user'

A bound association is stateless across model instances: per instance state (for example a not yet saved related
model) is stored on the model itself.
"""

import copy

from ..util import name_to_ref


class Association:
    """
    Association base class.

    Parameters
    ----------
    referent: str or None
        type of the models this association refers to. If None (default), the association key is used.

    Attributes
    ----------
    possessor: str or None
        ref of the type that holds the association (None until bound)
    referent: str or None
        ref of the type the association refers to
    key: str or None
        name of the association on the possessor
    """

    def __init__(self, referent=None):
        self.possessor = None
        self.referent = None if referent is None else name_to_ref(referent)
        self.key = None

    # python magic
    def __repr__(self):
        return f"<{type(self).__name__} {self.possessor}.{self.key} -> {self.referent}>"

    def __set_name__(self, owner, name):
        self.key = name

    def __get__(self, instance, owner=None):
        # on the class: the declaration itself, on a model: the related object
        if instance is None:
            return self
        if self.key is None:
            # attached after class creation, __set_name__ was not called
            raise AttributeError(f"{self!r} has no key")
        return instance.get(self.key)

    def __set__(self, instance, value):
        if self.key is None:
            raise AttributeError(f"{self!r} has no key")
        instance.set(self.key, value)

    # construct
    def bind(self, possessor, key):
        """
        Get a copy of this association, bound to a registered type.

        Parameters
        ----------
        possessor: str
            possessor type ref
        key: str
            association key on possessor

        Returns
        -------
        Association
        """
        bound = copy.copy(self)
        bound.possessor = possessor
        bound.key = key
        if bound.referent is None:
            bound.referent = name_to_ref(key)
        return bound

    def is_bound(self):
        """
        Returns
        -------
        bool
        """
        return self.possessor is not None

    # --------------------------------------------- contract -----------------------------------------------------------
    def get_foreign_key(self):
        """
        Get the name of the foreign key this association adds to the possessor's attributes.

        Returns
        -------
        str or None
            None if association does not require a foreign key on possessor
        """
        raise NotImplementedError

    def get_initial_value_for_foreign_key(self, key, data):
        """
        Compute the initial foreign key value of a model being constructed.

        Parameters
        ----------
        key: str
            association key
        data: dict
            initial data given to the model

        Returns
        -------
        dict
            {foreign_key: value}
        """
        raise NotImplementedError

    def define_relationship(self, model, key, schema, data):
        """
        Define accessors and factories of this association on a model being constructed.

        Parameters
        ----------
        model: memorm.orm.model.Model
        key: str
        schema: memorm.orm.schema.Schema
        data: dict
            initial data given to the model
        """
        raise NotImplementedError

    def prepare_save(self, model, key):
        """
        Called by model before it is persisted. Does nothing by default.

        Parameters
        ----------
        model: memorm.orm.model.Model
        key: str
        """
        pass
