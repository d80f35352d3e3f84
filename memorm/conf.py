"""Memorm configuration."""


class CONF:
    """
    Memorm configuration class.

    Attributes
    ----------
    id_attribute: str
        name of the identifier attribute, assigned by the db on first save
    foreign_key_suffix: str
        appended to the referent type ref to build a belongs_to foreign key (user -> user_id)
    new_factory_prefix: str
    create_factory_prefix: str
        prefixes of the factory methods injected by associations (new_user, create_user)
    first_id: int
        first identifier assigned by an empty db collection
    warn_on_dangling_foreign_key: bool
        log a warning when a foreign key points on a record that no longer exists
    """

    id_attribute = "id"
    foreign_key_suffix = "_id"
    new_factory_prefix = "new_"
    create_factory_prefix = "create_"
    first_id = 1
    warn_on_dangling_foreign_key = True
