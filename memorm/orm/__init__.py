"""Public api for memorm orm package."""
__all__ = ["Schema", "Table", "Model", "Queryset", "Association", "BelongsTo", "belongs_to"]

from .schema import Schema
from .table import Table
from .model import Model
from .queryset import Queryset
from .association import Association
from .belongs_to import BelongsTo, belongs_to
