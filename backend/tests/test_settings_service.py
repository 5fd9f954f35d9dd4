import unittest
from flask import Flask

from stockpos.extensions import db
from stockpos.models import Setting
from stockpos.services.settings_service import DEFAULT_SETTINGS, SettingsGateway
from stockpos.store import PersistentStore
from stockpos.validation import ValidationError


class SettingsServiceTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = Flask(__name__)
        cls.app.config.update(
            SECRET_KEY="test",
            SQLALCHEMY_DATABASE_URI="sqlite:///:memory:",
            SQLALCHEMY_TRACK_MODIFICATIONS=False,
            TESTING=True,
        )
        db.init_app(cls.app)
        cls.ctx = cls.app.app_context()
        cls.ctx.push()
        from stockpos import models  # noqa: F401
        db.create_all()

    @classmethod
    def tearDownClass(cls):
        db.session.remove()
        db.drop_all()
        cls.ctx.pop()

    def setUp(self):
        db.session.query(Setting).delete()
        db.session.commit()
        self.settings = SettingsGateway(PersistentStore(db.session))

    def test_get_missing_key_returns_none(self):
        self.assertIsNone(self.settings.get("companyName"))

    def test_set_inserts_then_replaces(self):
        self.settings.set("taxRate", 10)
        self.settings.set("taxRate", "12.5")

        self.assertEqual(self.settings.get("taxRate"), "12.5")
        self.assertEqual(db.session.query(Setting).filter_by(key="taxRate").count(), 1)

    def test_values_are_stored_as_text(self):
        self.settings.set("printReceipts", True)
        self.assertEqual(self.settings.get("printReceipts"), "true")

    def test_blank_key_rejected(self):
        with self.assertRaises(ValidationError):
            self.settings.set("   ", "x")

    def test_get_all_returns_mapping(self):
        self.settings.set("b", "2")
        self.settings.set("a", "1")
        self.assertEqual(self.settings.get_all(), {"a": "1", "b": "2"})

    def test_initialize_defaults_fills_missing_only(self):
        self.settings.set("companyName", "Corner Shop")

        added = self.settings.initialize_defaults()

        self.assertNotIn("companyName", added)
        self.assertEqual(set(added), set(DEFAULT_SETTINGS) - {"companyName"})
        self.assertEqual(self.settings.get("companyName"), "Corner Shop")
        self.assertEqual(self.settings.get("taxRate"), DEFAULT_SETTINGS["taxRate"])

        self.assertEqual(self.settings.initialize_defaults(), [])

    def test_set_many_is_one_transaction(self):
        saved = self.settings.set_many({"phone": "555-0100", "email": "shop@example.com"})
        self.assertEqual(saved, {"phone": "555-0100", "email": "shop@example.com"})
        self.assertEqual(self.settings.get("email"), "shop@example.com")

        with self.assertRaises(ValidationError):
            self.settings.set_many({"phone": "1", "": "bad"})
        self.assertEqual(self.settings.get("phone"), "555-0100")


if __name__ == "__main__":
    unittest.main()
