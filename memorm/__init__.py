__all__ = ["__version__", "CONF", "Db", "DbCollection", "Schema", "Table", "Model", "Queryset", "Association",
           "BelongsTo", "belongs_to", "MemormError", "ConfigurationError", "ReferentNotFoundError",
           "RecordDoesNotExistError", "MultipleRecordsReturnedError", "pluralize", "name_to_ref"]

from .version import version as __version__

from memorm.conf import CONF
from memorm.db import Db, DbCollection
from memorm.orm import Schema, Table, Model, Queryset, Association, BelongsTo, belongs_to
from memorm.util import pluralize, name_to_ref
from .exceptions import MemormError, ConfigurationError, ReferentNotFoundError, RecordDoesNotExistError, \
    MultipleRecordsReturnedError
