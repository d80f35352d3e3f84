"""
In-memory db: one collection of plain dict records per pluralized type name.

create/update/delete framework methods (see methods documentation):
 - db.load_data
 - collection.insert
 - collection.update
 - collection.remove
"""

import collections
import copy
import logging

import pandas as pd

from .conf import CONF
from .exceptions import RecordDoesNotExistError
from .util import json_data_to_json

logger = logging.getLogger(__name__)


def _id_to_key(id_value):
    # ids are compared by their string form: find(1) and find("1") point on the same record
    return str(id_value)


class DbCollection:
    """
    Collection of records.

    Records are plain dicts, and are always copied when entering or leaving the collection: the collection is the only
    owner of its records.

    Parameters
    ----------
    name: str
        collection name (pluralized type ref)
    initial_data: list of dict or None
    """

    def __init__(self, name, initial_data=None):
        self.name = name
        self._records = collections.OrderedDict()  # {id_key: record, ...}

        if initial_data is not None:
            self.insert(initial_data)

    def _next_id(self):
        int_ids = [r[CONF.id_attribute] for r in self._records.values() if isinstance(r[CONF.id_attribute], int)]
        candidate = CONF.first_id if len(int_ids) == 0 else max(max(int_ids) + 1, CONF.first_id)

        # string ids may already use the candidate ("1" and 1 are the same key)
        while _id_to_key(candidate) in self._records:
            candidate += 1
        return candidate

    def _insert_record(self, data):
        record = copy.deepcopy(dict(data))

        # manage id
        if record.get(CONF.id_attribute) is None:
            record[CONF.id_attribute] = self._next_id()
        key = _id_to_key(record[CONF.id_attribute])
        if key in self._records:
            raise ValueError(
                f"collection {self.name} already contains a record who's id is '{record[CONF.id_attribute]}'")

        # store
        self._records[key] = record
        logger.debug(f"{self.name}: inserted record {record[CONF.id_attribute]}")

        return copy.deepcopy(record)

    def _get_record(self, id_value):
        try:
            return self._records[_id_to_key(id_value)]
        except KeyError:
            raise RecordDoesNotExistError(
                f"collection {self.name} does not contain a record who's id is '{id_value}'") from None

    # --------------------------------------------- public api ---------------------------------------------------------
    # python magic
    def __repr__(self):
        return f"<DbCollection {self.name}: {len(self)} records>"

    def __iter__(self):
        # copy before iterating, records may be removed while iterating
        return iter(self.all())

    def __len__(self):
        return len(self._records)

    # explore
    def all(self):
        """
        Get all records, in insertion order.

        Returns
        -------
        list of dict
        """
        return [copy.deepcopy(r) for r in self._records.values()]

    def find(self, ids):
        """
        Find record(s) by id.

        Parameters
        ----------
        ids: id or list of ids

        Returns
        -------
        dict or None
            if a single id was given: copy of found record, or None if no record has this id
        list of dict
            if a list or tuple of ids was given: copies of found records (missing ids are skipped)
        """
        if isinstance(ids, (list, tuple)):
            return [
                copy.deepcopy(self._records[_id_to_key(i)]) for i in ids
                if _id_to_key(i) in self._records
            ]
        record = self._records.get(_id_to_key(ids))
        return None if record is None else copy.deepcopy(record)

    def contains(self, id_value):
        """
        Check if a record exists.

        Parameters
        ----------
        id_value

        Returns
        -------
        bool
        """
        return id_value is not None and _id_to_key(id_value) in self._records

    # construct
    def insert(self, data):
        """
        Insert record(s).

        Parameters
        ----------
        data: dict or list of dict
            if a record contains an id, it is kept (and must be unique), else next integer id is assigned

        Returns
        -------
        dict or list of dict
            copies of inserted records, including their id
        """
        if isinstance(data, (list, tuple)):
            return [self._insert_record(d) for d in data]
        return self._insert_record(data)

    def update(self, attrs, target=None):
        """
        Update record(s).

        Parameters
        ----------
        attrs: dict
            values to merge into targeted records (id is never modified)
        target: id or None
            if None (default), all records are updated

        Returns
        -------
        dict or list of dict
            copy of updated record if target is an id, else list of copies of updated records

        Raises
        ------
        RecordDoesNotExistError
            if target is an id that does not exist
        """
        attrs = dict((k, copy.deepcopy(v)) for (k, v) in attrs.items() if k != CONF.id_attribute)

        if target is None:
            for record in self._records.values():
                record.update(attrs)
            logger.debug(f"{self.name}: updated all records ({len(self)})")
            return self.all()

        record = self._get_record(target)
        record.update(attrs)
        logger.debug(f"{self.name}: updated record {target}")
        return copy.deepcopy(record)

    # delete
    def remove(self, target=None):
        """
        Remove record(s).

        Parameters
        ----------
        target: id or None
            if None (default), all records are removed

        Raises
        ------
        RecordDoesNotExistError
            if target is an id that does not exist
        """
        if target is None:
            self._records.clear()
            logger.debug(f"{self.name}: removed all records")
            return

        # check existence
        self._get_record(target)

        del self._records[_id_to_key(target)]
        logger.debug(f"{self.name}: removed record {target}")

    # ------------------------------------------- export ---------------------------------------------------------------
    def to_json_data(self):
        """
        Get collection as a json-serializable list.

        Returns
        -------
        list of dict
        """
        return self.all()

    def to_dataframe(self):
        """
        Get collection as a dataframe, one row per record, indexed by id.

        Returns
        -------
        pandas.DataFrame
        """
        records = self.all()
        if len(records) == 0:
            return pd.DataFrame(columns=[CONF.id_attribute]).set_index(CONF.id_attribute)
        return pd.DataFrame.from_records(records).set_index(CONF.id_attribute)


class Db:
    """
    In-memory db.

    Parameters
    ----------
    initial_data: dict or None
        {collection_name: [record_data, ...], ...}
    """

    def __init__(self, initial_data=None):
        self._collections = collections.OrderedDict()  # {name: collection, ...}

        if initial_data is not None:
            self.load_data(initial_data)

    # ------------------------------------------ dev api ---------------------------------------------------------------
    def _dev_get_or_create_collection(self, name):
        if name not in self._collections:
            return self.create_collection(name)
        return self._collections[name]

    # --------------------------------------------- public api ---------------------------------------------------------
    # python magic
    def __repr__(self):
        return "<Db>"

    def __str__(self):
        s = "Db\n"
        for collection in self._collections.values():
            records_nb = len(collection)
            plural = "" if records_nb == 1 else "s"
            s += f"  {collection.name}: {records_nb} record{plural}\n"
        return s.strip()

    def __getattr__(self, item):
        """
        Get a collection by name.

        Parameters
        ----------
        item: str
            collection name

        Returns
        -------
        DbCollection
        """
        # _collections may not exist yet (copy, pickle)
        collections_d = self.__dict__.get("_collections")
        if collections_d is None or item not in collections_d:
            raise AttributeError(f"No collection with name '{item}'.")
        return collections_d[item]

    def __getitem__(self, item):
        try:
            return self._collections[item]
        except KeyError:
            raise KeyError(f"No collection with name '{item}'.") from None

    def __contains__(self, item):
        return item in self._collections

    def __dir__(self):
        return list(self._collections) + list(self.__dict__)

    # get info
    def get_collection_names(self):
        """
        Returns
        -------
        list of str
        """
        return list(self._collections)

    def get_collection(self, name):
        """
        Parameters
        ----------
        name: str

        Returns
        -------
        DbCollection
        """
        return self[name]

    # construct
    def create_collection(self, name, initial_data=None):
        """
        Create a new collection.

        Parameters
        ----------
        name: str
        initial_data: list of dict or None

        Returns
        -------
        DbCollection
        """
        if name in self._collections:
            raise ValueError(f"Db already contains a collection named '{name}'")
        collection = DbCollection(name, initial_data=initial_data)
        self._collections[name] = collection
        return collection

    def create_collections(self, names):
        """
        Create several collections.

        Parameters
        ----------
        names: iterable of str
        """
        for name in names:
            self.create_collection(name)

    def load_data(self, data):
        """
        Insert records in collections, creating collections if needed.

        Parameters
        ----------
        data: dict
            {collection_name: [record_data, ...], ...}
        """
        for name, records_data in data.items():
            self._dev_get_or_create_collection(name).insert(records_data)

    # delete
    def empty_data(self):
        """Remove all records of all collections (collections are kept)."""
        for collection in self._collections.values():
            collection.remove()

    # ------------------------------------------- export ---------------------------------------------------------------
    def to_json_data(self):
        """
        Get db content as a json-serializable dict.

        Returns
        -------
        dict
            {collection_name: [record_data, ...], ...}
        """
        return collections.OrderedDict(
            (name, collection.to_json_data()) for (name, collection) in self._collections.items()
        )

    def to_json(self, buffer_or_path=None, indent=2):
        """
        Parameters
        ----------
        buffer_or_path: buffer or path, default None
            output to write into. If None, will return a json string.
        indent: int, default 2
            Defines the indentation of the json

        Returns
        -------
        None, or a json string (if buffer_or_path is None).
        """
        return json_data_to_json(self.to_json_data(), buffer_or_path=buffer_or_path, indent=indent)
