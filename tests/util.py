from memorm import Db, Schema, Model, belongs_to


class User(Model):
    pass


class Address(Model):
    user = belongs_to()


class Post(Model):
    author = belongs_to("user")


def get_users_data():
    return [
        {"id": 1, "name": "Link"},
        {"id": 2, "name": "Zelda"}
    ]


def build_schema(addresses_data=None, posts_data=None):
    """
    Returns
    -------
    Schema
        user, address (belongs to user) and post (author belongs to user) types, with users Link (1) and Zelda (2)
    """
    db = Db({
        "users": get_users_data(),
        "addresses": [] if addresses_data is None else addresses_data,
        "posts": [] if posts_data is None else posts_data
    })
    schema = Schema(db)
    schema.register_model("user", User)
    schema.register_model("address", Address)
    schema.register_model("post", Post)
    return schema
