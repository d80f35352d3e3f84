import unittest

from tests.util import build_schema

from memorm import Schema, Model, belongs_to, ReferentNotFoundError


class NewChildSavedParentTest(unittest.TestCase):
    def setUp(self):
        self.schema = build_schema()
        self.link = self.schema.user.find(1)
        self.zelda = self.schema.user.find(2)
        self.address = self.schema.address.new({"user": self.link})

    # ----------------------------------------------- create -----------------------------------------------------------
    def test_create_saved_parent(self):
        ganon = self.address.create_user({"name": "Ganon"})

        self.assertIsNotNone(ganon.id)
        self.assertFalse(ganon.is_new())
        self.assertEqual(ganon, self.address.user)
        self.assertEqual(ganon.id, self.address.user_id)
        self.assertEqual({"user_id": ganon.id}, self.address.attrs)

    def test_new_unsaved_parent(self):
        ganon = self.address.new_user({"name": "Ganon"})

        self.assertIsNone(ganon.id)
        self.assertTrue(ganon.is_new())
        self.assertEqual(ganon, self.address.user)
        self.assertIsNone(self.address.user_id)
        self.assertEqual({"user_id": None}, self.address.attrs)

    def test_factories_kwargs_syntax(self):
        ganon = self.address.new_user(name="Ganon")
        self.assertEqual("Ganon", ganon.name)

        ganon = self.address.create_user(name="Ganon")
        self.assertEqual("Ganon", self.schema.user.find(ganon.id).name)

    def test_factories_by_association_key(self):
        ganon = self.address.new_related("user", name="Ganon")
        self.assertIs(ganon, self.address.user)

        ganon = self.address.create_related("user", {"name": "Ganon"})
        self.assertEqual(ganon.id, self.address.user_id)

        with self.assertRaises(KeyError):
            self.address.new_related("town")

    # ------------------------------------------------ read ------------------------------------------------------------
    def test_read(self):
        self.assertEqual(self.link, self.address.user)
        self.assertEqual(1, self.address.user_id)
        self.assertEqual({"user_id": 1}, self.address.attrs)

    # ----------------------------------------------- update -----------------------------------------------------------
    def test_update_saved_parent_via_foreign_key(self):
        self.address.user_id = 2

        self.assertEqual(2, self.address.user_id)
        self.assertEqual(self.zelda, self.address.user)
        self.assertEqual({"user_id": 2}, self.address.attrs)

    def test_update_saved_parent_via_parent(self):
        self.address.user = self.zelda

        self.assertEqual(2, self.address.user_id)
        self.assertEqual(self.zelda, self.address.user)
        self.assertEqual({"user_id": 2}, self.address.attrs)

    def test_update_new_parent_via_parent(self):
        ganon = self.schema.user.new({"name": "Ganon"})
        self.address.user = ganon

        self.assertIsNone(self.address.user_id)
        self.assertEqual(ganon, self.address.user)
        self.assertEqual({"user_id": None}, self.address.attrs)

    def test_update_null_via_foreign_key(self):
        self.address.user_id = None

        self.assertIsNone(self.address.user_id)
        self.assertIsNone(self.address.user)
        self.assertEqual({"user_id": None}, self.address.attrs)

    def test_update_null_via_parent(self):
        self.address.user = None

        self.assertIsNone(self.address.user_id)
        self.assertIsNone(self.address.user)
        self.assertEqual({"user_id": None}, self.address.attrs)

    def test_update_missing_referent(self):
        with self.assertRaises(ReferentNotFoundError) as cm:
            self.address.user_id = 999

        self.assertEqual("user", cm.exception.referent)
        self.assertEqual(999, cm.exception.id)
        self.assertEqual({"user_id": 1}, self.address.attrs)
        self.assertEqual(self.link, self.address.user)

    def test_update_wrong_type(self):
        post = self.schema.post.create(title="Hello")
        with self.assertRaises(TypeError):
            self.address.user = post
        with self.assertRaises(TypeError):
            self.address.user = 2
        self.assertEqual({"user_id": 1}, self.address.attrs)

    # ------------------------------------------------ save ------------------------------------------------------------
    def test_save(self):
        self.address.save()

        self.assertFalse(self.address.is_new())
        self.assertEqual({"id": 1, "user_id": 1}, self.schema.db.addresses.find(self.address.id))


class NewChildNewParentTest(unittest.TestCase):
    def setUp(self):
        self.schema = build_schema()
        self.ganon = self.schema.user.new(name="Ganon")
        self.address = self.schema.address.new(user=self.ganon)

    def test_read(self):
        self.assertIs(self.ganon, self.address.user)
        self.assertIsNone(self.address.user_id)
        self.assertEqual({"user_id": None}, self.address.attrs)

    def test_save_child_saves_parent(self):
        self.address.save()

        self.assertFalse(self.ganon.is_new())
        self.assertEqual(self.ganon.id, self.address.user_id)
        self.assertEqual(self.ganon, self.address.user)
        self.assertEqual(
            {"id": self.address.id, "user_id": self.ganon.id},
            self.schema.db.addresses.find(self.address.id)
        )

    def test_save_parent_then_read_child(self):
        self.ganon.save()

        self.assertEqual(self.ganon.id, self.address.user_id)
        self.assertEqual(self.ganon, self.address.user)
        self.assertEqual({"user_id": self.ganon.id}, self.address.attrs)

    def test_update_saved_parent_via_foreign_key(self):
        self.address.user_id = 2

        self.assertEqual(self.schema.user.find(2), self.address.user)
        self.assertEqual({"user_id": 2}, self.address.attrs)

        # pending parent is forgotten
        self.address.save()
        self.assertTrue(self.ganon.is_new())

    def test_update_null_via_parent(self):
        self.address.user = None

        self.assertIsNone(self.address.user)
        self.assertIsNone(self.address.user_id)

        self.address.save()
        self.assertTrue(self.ganon.is_new())


class SavedChildSavedParentTest(unittest.TestCase):
    def setUp(self):
        self.schema = build_schema(addresses_data=[{"id": 1, "user_id": 1, "city": "Hyrule"}])
        self.link = self.schema.user.find(1)
        self.zelda = self.schema.user.find(2)
        self.address = self.schema.address.find(1)

    def test_read(self):
        self.assertEqual(self.link, self.address.user)
        self.assertEqual(1, self.address.user_id)
        self.assertEqual({"id": 1, "user_id": 1, "city": "Hyrule"}, self.address.attrs)

    def test_create_saved_parent(self):
        ganon = self.address.create_user(name="Ganon")

        self.assertEqual(ganon, self.address.user)
        self.assertEqual({"id": 1, "user_id": ganon.id, "city": "Hyrule"}, self.address.attrs)

        # not saved yet
        self.assertEqual(1, self.schema.db.addresses.find(1)["user_id"])

        self.address.save()
        self.assertEqual(ganon.id, self.schema.db.addresses.find(1)["user_id"])

    def test_update_via_update(self):
        self.address.update("user", self.zelda)

        self.assertEqual(2, self.schema.db.addresses.find(1)["user_id"])
        self.assertEqual(self.zelda, self.schema.address.find(1).user)

    def test_update_null_via_update(self):
        self.address.update({"user_id": None})

        self.assertIsNone(self.schema.db.addresses.find(1)["user_id"])
        self.assertIsNone(self.schema.address.find(1).user)

    def test_update_missing_referent_via_update(self):
        with self.assertRaises(ReferentNotFoundError):
            self.address.update(user_id=999)
        self.assertEqual(1, self.schema.db.addresses.find(1)["user_id"])

    def test_parent_removed(self):
        self.link.destroy()

        # foreign key is kept, but no user is found
        self.assertEqual(1, self.address.user_id)
        with self.assertLogs("memorm.orm.belongs_to", level="WARNING"):
            self.assertIsNone(self.address.user)


class SavedChildNewParentTest(unittest.TestCase):
    def setUp(self):
        self.schema = build_schema(addresses_data=[{"id": 1, "user_id": 1}])
        self.address = self.schema.address.find(1)
        self.ganon = self.address.new_user(name="Ganon")

    def test_read(self):
        self.assertIs(self.ganon, self.address.user)
        self.assertIsNone(self.address.user_id)
        self.assertEqual({"id": 1, "user_id": None}, self.address.attrs)

    def test_save_child_saves_parent(self):
        self.address.save()

        self.assertEqual(3, self.ganon.id)
        self.assertEqual({"id": 1, "user_id": 3}, self.schema.db.addresses.find(1))
        self.assertEqual({"id": 3, "name": "Ganon"}, self.schema.db.users.find(3))

    def test_update_saved_parent_via_parent(self):
        zelda = self.schema.user.find(2)
        self.address.update(user=zelda)

        self.assertEqual(2, self.schema.db.addresses.find(1)["user_id"])
        self.assertTrue(self.ganon.is_new())
        self.assertEqual(2, len(self.schema.db.users))


class ReferentDifferentFromKeyTest(unittest.TestCase):
    def setUp(self):
        self.schema = build_schema()
        self.zelda = self.schema.user.find(2)

    def test_foreign_key(self):
        post = self.schema.post.new(author=self.zelda, title="Triforce")

        self.assertEqual({"user_id": 2, "title": "Triforce"}, post.attrs)
        self.assertEqual(self.zelda, post.author)
        self.assertEqual(["user_id"], post.get_foreign_keys())

    def test_factories(self):
        post = self.schema.post.new()
        ganon = post.create_author(name="Ganon")

        self.assertEqual("user", ganon.get_type())
        self.assertEqual(ganon.id, post.user_id)

    def test_explicit_foreign_key_wins(self):
        link = self.schema.user.find(1)
        post = self.schema.post.new(author=link, user_id=2)

        self.assertEqual(2, post.user_id)
        self.assertEqual(self.zelda, post.author)


class RelationInvariantsTest(unittest.TestCase):
    def check_exclusive(self, address):
        pending = address._dev_pending_references.get("user")
        self.assertFalse((address.attrs["user_id"] is not None) and (pending is not None))

    def test_foreign_key_and_pending_reference_are_exclusive(self):
        schema = build_schema()
        address = schema.address.new()
        self.check_exclusive(address)

        for value in (
                schema.user.new(name="Ganon"),
                schema.user.find(1),
                schema.user.new(name="Impa"),
                None,
                schema.user.new(name="Midna"),
        ):
            address.user = value
            self.check_exclusive(address)

        address.user_id = 2
        self.check_exclusive(address)

        address.new_user(name="Navi")
        self.check_exclusive(address)

        address.create_user(name="Tingle")
        self.check_exclusive(address)

        address.new_user(name="Epona")
        address.save()
        self.check_exclusive(address)
        self.assertIsNotNone(address.user_id)

    def test_dict_payload(self):
        schema = build_schema()
        address = schema.address.new(user={"id": 2, "name": "Zelda"})

        self.assertEqual({"user_id": 2}, address.attrs)
        self.assertEqual(schema.user.find(2), address.user)


class Node(Model):
    parent = belongs_to("node")


class Hero(Model):
    companion = belongs_to()


class Companion(Model):
    hero = belongs_to()


class ReferenceCycleTest(unittest.TestCase):
    def setUp(self):
        self.schema = Schema()
        self.schema.register_models({"node": Node, "hero": Hero, "companion": Companion})

    def test_self_reference(self):
        root = self.schema.node.new(name="root")
        root.parent = root
        root.save()

        self.assertFalse(root.is_new())
        self.assertEqual(root.id, root.node_id)
        self.assertEqual({"id": 1, "name": "root", "node_id": 1}, self.schema.db.nodes.find(1))
        self.assertEqual(root, root.parent)
        self.assertEqual({}, root._dev_pending_references)

    def test_mutual_reference(self):
        link = self.schema.hero.new(name="Link")
        navi = self.schema.companion.new(name="Navi")
        link.companion = navi
        navi.hero = link

        link.save()

        self.assertFalse(link.is_new())
        self.assertFalse(navi.is_new())
        self.assertEqual({"id": 1, "name": "Link", "companion_id": 1}, self.schema.db.heroes.find(1))
        self.assertEqual({"id": 1, "name": "Navi", "hero_id": 1}, self.schema.db.companions.find(1))
        self.assertEqual(navi, link.companion)
        self.assertEqual(link, navi.hero)

    def test_save_cycle_again(self):
        root = self.schema.node.new(name="root")
        root.parent = root
        root.save()
        root.update(name="new root")

        self.assertEqual(1, len(self.schema.db.nodes))
        self.assertEqual({"id": 1, "name": "new root", "node_id": 1}, self.schema.db.nodes.find(1))


if __name__ == "__main__":
    unittest.main()
