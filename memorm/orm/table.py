from ..exceptions import RecordDoesNotExistError
from ..util import pluralize
from .queryset import Queryset


class Table:
    """
    Entry point of a registered type: builds, creates and finds models of this type.

    Reached from schema: schema.user, schema["user"] or schema.get_table("user").

    Parameters
    ----------
    schema: memorm.orm.schema.Schema
    ref: str
        type ref
    name: str
        type name, as given at registration
    model_cls: type
        Model class (or subclass) used to build models of this type
    """

    def __init__(self, schema, ref, name, model_cls):
        self._schema = schema
        self._ref = ref
        self._name = name
        self._model_cls = model_cls

    def _to_model(self, record):
        return self._model_cls(self._schema, self._ref, record)

    # --------------------------------------------- public api ---------------------------------------------------------
    def __repr__(self):
        return f"<Table {self._ref}>"

    def __str__(self):
        header = f"Table {self._ref} ({self.get_collection_name()})"
        return header + "\n" + "\n".join(f"  {model.id}" for model in self.all())

    def __iter__(self):
        return iter(self.all())

    def __len__(self):
        return len(self.get_collection())

    # get context
    def get_ref(self):
        """
        The table ref is the converted name, in order to be compatible with Python variable rules (so we can access
        table from Schema using __getattr__).
        Example: 'blog_post'
        """
        return self._ref

    def get_name(self):
        """
        The table name is the name given at registration.
        Example: 'BlogPost'
        """
        return self._name

    def get_schema(self):
        return self._schema

    def get_model_cls(self):
        return self._model_cls

    def get_collection_name(self):
        """
        Example: 'blog_posts'
        """
        return pluralize(self._ref)

    def get_collection(self):
        """
        Returns
        -------
        memorm.db.DbCollection
        """
        return self._schema.db.get_collection(self.get_collection_name())

    # explore
    def find(self, ids):
        """
        Parameters
        ----------
        ids: id or list of ids

        Returns
        -------
        Model or None
            if a single id was given: found model, or None
        Queryset
            if a list or tuple of ids was given: found models (missing ids are skipped)
        """
        if isinstance(ids, (list, tuple)):
            return Queryset(self, models=(self._to_model(r) for r in self.get_collection().find(ids)))
        record = self.get_collection().find(ids)
        return None if record is None else self._to_model(record)

    def one(self, id_value):
        """
        Parameters
        ----------
        id_value

        Returns
        -------
        Model

        Raises
        ------
        RecordDoesNotExistError if no model has this id
        """
        model = self.find(id_value)
        if model is None:
            raise RecordDoesNotExistError(f"table {self._ref} does not contain a record who's id is '{id_value}'")
        return model

    def all(self):
        """
        Returns
        -------
        Queryset instance, containing all models of table (in db order).
        """
        return Queryset(self, models=(self._to_model(r) for r in self.get_collection().all()))

    # construct
    def new(self, data=None, **or_data):
        """
        Build a new (unsaved) model.

        Parameters
        ----------
        data: dictionary containing attribute names as keys, and attribute values as values (dict syntax)
        or_data: keyword arguments containing attribute names as keys (kwargs syntax)

        The two syntaxes are not meant to cohabit.

        Examples
        --------
        address = schema.address.new(user=link, city="Hyrule")
        address = schema.address.new({"user_id": 1, "city": "Hyrule"})

        Returns
        -------
        Model
        """
        return self._model_cls(self._schema, self._ref, or_data if data is None else data)

    def create(self, data=None, **or_data):
        """
        Build and save a model (see new).

        Returns
        -------
        Model
        """
        return self.new(data, **or_data).save()

    # delete
    def destroy(self):
        """Destroys all models of table."""
        self.all().destroy()

    # ------------------------------------------- export ---------------------------------------------------------------
    def to_json_data(self):
        """
        Returns
        -------
        list of dict
        """
        return self.all().to_json_data()

    def to_dataframe(self):
        """
        Returns
        -------
        pandas.DataFrame
        """
        return self.get_collection().to_dataframe()
