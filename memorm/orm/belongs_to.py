"""
BelongsTo association: a to-one reference from a possessor to a referent, stored as a `<referent>_id` foreign key.

For an association `user` on `address`, following members are added to address models:
 - address.user_id: foreign key (setting it checks that the user exists)
 - address.user: related user model
 - address.new_user(data): build a new (unsaved) user and relate it
 - address.create_user(data): create (save) a user and relate it

Per model states of the relation
--------------------------------
 - unset: foreign key is None, no pending reference
 - pending: foreign key is None, model holds an unsaved user (pending reference)
 - resolved: foreign key is set, no pending reference

A foreign key and a pending reference are never set together.
"""

import functools
import logging
from collections.abc import Mapping

from ..conf import CONF
from ..exceptions import ReferentNotFoundError
from .association import Association
from .model import Model

logger = logging.getLogger(__name__)


def _get_id(related):
    # related model or plain dict payload
    if isinstance(related, (Model, Mapping)):
        return related.get(CONF.id_attribute)
    return None


class BelongsTo(Association):
    """
    BelongsTo association class.

    Parameters
    ----------
    referent: str or None
        type of the models this association refers to. If None (default), the association key is used.
    """

    def _promote_pending_reference(self, model, key):
        # a pending model that was saved in the meantime becomes the foreign key
        pending = model._dev_pending_references.get(key)
        if pending is None or pending.is_new():
            return
        del model._dev_pending_references[key]
        model._attrs[self.get_foreign_key()] = pending.get(CONF.id_attribute)

    # --------------------------------------------- contract -----------------------------------------------------------
    def get_foreign_key(self):
        """
        Returns
        -------
        str
            `<referent>_id`
        """
        return f"{self.referent}{CONF.foreign_key_suffix}"

    def get_initial_value_for_foreign_key(self, key, data):
        """
        Compute the initial foreign key value of a model being constructed.

        Precedence: explicit foreign key > id of the related model (or dict) given under key > None.

        Parameters
        ----------
        key: str
        data: dict

        Returns
        -------
        dict
            {foreign_key: value}
        """
        foreign_key = self.get_foreign_key()
        value = data.get(foreign_key)
        if value is None:
            value = _get_id(data.get(key))
        return {foreign_key: value}

    def define_relationship(self, model, key, schema, data):
        """
        Add foreign key accessor, related model accessor, and new/create factories to model.

        Parameters
        ----------
        model: memorm.orm.model.Model
        key: str
        schema: memorm.orm.schema.Schema
        data: dict
            initial data, a new related model given under key becomes the pending reference
        """
        model._dev_define_accessor(
            self.get_foreign_key(),
            self.get_foreign_key_value,
            functools.partial(self.set_foreign_key_value, schema=schema)
        )
        model._dev_define_accessor(
            key,
            functools.partial(self.get_related, key=key, schema=schema),
            functools.partial(self.set_related, key=key)
        )
        model._dev_define_factories(
            key,
            new=functools.partial(self.new_related, key=key, schema=schema),
            create=functools.partial(self.create_related, schema=schema)
        )

        # a saved related model is already the foreign key, a new one must be kept as pending reference
        related = data.get(key)
        if isinstance(related, Model) and related.is_new() and model._attrs.get(self.get_foreign_key()) is None:
            model.set(key, related)

    def prepare_save(self, model, key):
        """
        Save pending related model (if any), and replace pending reference by foreign key.

        Parameters
        ----------
        model: memorm.orm.model.Model
        key: str
        """
        pending = model._dev_pending_references.get(key)
        if pending is None:
            return
        if pending.is_new():
            if pending._dev_saving:
                # reference cycle: model will be saved again once pending has an id
                pending._dev_wait_for_id(model)
                return
            pending.save()
        self._promote_pending_reference(model, key)

    # --------------------------------------------- accessors ----------------------------------------------------------
    def get_foreign_key_value(self, model):
        """
        model.<referent>_id

        Returns
        -------
        id or None
        """
        self._promote_pending_reference(model, self.key)
        return model._attrs.get(self.get_foreign_key())

    def set_foreign_key_value(self, model, id_value, schema):
        """
        model.<referent>_id = id_value

        Parameters
        ----------
        model: memorm.orm.model.Model
        id_value: id or None
        schema: memorm.orm.schema.Schema

        Raises
        ------
        ReferentNotFoundError
            if id_value is not None and no referent has this id (model is not modified)
        """
        if id_value is not None and schema.get_table(self.referent).find(id_value) is None:
            raise ReferentNotFoundError(self.referent, id_value)

        model._attrs[self.get_foreign_key()] = id_value
        model._dev_pending_references.pop(self.key, None)

    def get_related(self, model, key, schema):
        """
        model.<key>

        Returns
        -------
        memorm.orm.model.Model or None
            None if relation is unset, or if foreign key points on a record that no longer exists
        """
        self._promote_pending_reference(model, key)

        foreign_key_value = model._attrs.get(self.get_foreign_key())
        if foreign_key_value is not None:
            model._dev_pending_references.pop(key, None)
            related = schema.get_table(self.referent).find(foreign_key_value)
            if related is None and CONF.warn_on_dangling_foreign_key:
                logger.warning(
                    f"{model!r}: {self.get_foreign_key()} points on a {self.referent} that does not exist "
                    f"({foreign_key_value}), returning None"
                )
            return related

        return model._dev_pending_references.get(key)

    def set_related(self, model, new_model, key):
        """
        model.<key> = new_model

        Parameters
        ----------
        model: memorm.orm.model.Model
        new_model: memorm.orm.model.Model or None
            if new (unsaved): foreign key is set to None and new_model is kept as pending reference
            if saved: foreign key is set to new_model's id
            if None: relation is unset
        key: str
        """
        if new_model is None:
            model._dev_pending_references.pop(key, None)
            model._attrs[self.get_foreign_key()] = None
            return

        if not isinstance(new_model, Model):
            raise TypeError(f"{self.possessor}.{key} must be a {self.referent} model or None, got {type(new_model)}")
        if new_model.get_type() != self.referent:
            raise TypeError(f"{self.possessor}.{key} must be a {self.referent} model, got a {new_model.get_type()}")

        if new_model.is_new():
            model._attrs[self.get_foreign_key()] = None
            model._dev_pending_references[key] = new_model
            return

        model._dev_pending_references.pop(key, None)
        model.set(self.get_foreign_key(), new_model.get(CONF.id_attribute))

    # --------------------------------------------- factories ----------------------------------------------------------
    def new_related(self, model, data, key, schema):
        """
        model.new_<key>(data): build a new (unsaved) referent and relate it to model.

        Returns
        -------
        memorm.orm.model.Model
        """
        related = schema.get_table(self.referent).new(data)
        model.set(key, related)
        return related

    def create_related(self, model, data, schema):
        """
        model.create_<key>(data): create (and save) a referent and relate it to model.

        Returns
        -------
        memorm.orm.model.Model
        """
        related = schema.get_table(self.referent).create(data)
        model.set(self.get_foreign_key(), related.get(CONF.id_attribute))
        return related


def belongs_to(referent=None):
    """
    Declare a belongs_to association.

    Parameters
    ----------
    referent: str or None
        type of the related models. If None (default), the association key is used.

    Returns
    -------
    BelongsTo

    Examples
    --------
    class Address(Model):
        user = belongs_to()

    class Post(Model):
        author = belongs_to("user")
    """
    return BelongsTo(referent=referent)
