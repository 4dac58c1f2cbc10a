from __future__ import annotations

import unittest
from datetime import date

from signature.exceptions.errors import FieldValueError
from signature.logic.field_collection import FieldCollection
from signature.models.field import Field, FieldType, Position, Size


class TestPlacement(unittest.TestCase):
    def setUp(self) -> None:
        self.fields = FieldCollection(today=date(2026, 10, 19))

    def test_defaults_per_type(self) -> None:
        sig = self.fields.add_signature(1)
        text = self.fields.add_text(1)
        box = self.fields.add_checkbox(2)
        day = self.fields.add_date(1)

        self.assertEqual((sig.position, sig.size), (Position(100, 300), Size(300, 100)))
        self.assertTrue(sig.required)
        self.assertEqual(text.size, Size(300, 36))
        self.assertEqual(text.placeholder, "Enter text here")
        self.assertEqual(text.font_size, 12)
        self.assertEqual((box.size, box.checkbox_size), (Size(32, 32), 100))
        self.assertEqual(day.position, Position(50, 50))
        self.assertEqual(day.value, "10/19/2026")
        self.assertEqual(len(self.fields), 4)
        self.assertEqual(self.fields.for_page(2), [box])

    def test_template_fields_have_no_values(self) -> None:
        template = FieldCollection(is_template=True, today=date(2026, 10, 19))
        self.assertIsNone(template.add_date(1).value)
        self.assertIsNone(template.add_text(1, "filled").value)
        self.assertIsNone(self.fields.add_text(1, "filled", template=True).value)

    def test_field_data_is_copied_onto_page(self) -> None:
        source = Field(page=1, position=Position(1, 2), size=Size(3, 4), field_type=FieldType.TEXT,
                       id="tpl-1", value="from template")
        placed = self.fields.add_text(3, field_data=source, field_id="doc-1")
        self.assertEqual(placed.page, 3)
        self.assertEqual(placed.id, "doc-1")
        self.assertEqual(placed.value, "from template")
        self.assertEqual(placed.position, Position(1, 2))
        self.assertEqual(source.page, 1)

    def test_duplicate_keys_are_rejected(self) -> None:
        self.assertIsNotNone(self.fields.add_text(1, field_id="same"))
        with self.assertLogs("signature.logic.field_collection", level="WARNING"):
            self.assertIsNone(self.fields.add_text(1, field_id="same"))
        self.assertEqual(len(self.fields), 1)


class TestUpdates(unittest.TestCase):
    def setUp(self) -> None:
        self.fields = FieldCollection()
        self.text = self.fields.add_text(1, "a")
        self.box = self.fields.add_checkbox(1)

    def test_move_resize_rename(self) -> None:
        key = self.text.key
        self.fields.move(key, 10, 20)
        self.fields.resize(key, 50, 60)
        updated = self.fields.rename(key, "Name")
        self.assertEqual(updated.position, Position(10, 20))
        self.assertEqual(updated.size, Size(50, 60))
        self.assertEqual(updated.field_name, "Name")
        self.assertGreaterEqual(updated.updated_at, self.text.updated_at)
        self.assertIs(self.fields.get(key), updated)

    def test_unknown_key_returns_none(self) -> None:
        self.assertIsNone(self.fields.move("nope", 1, 1))
        self.assertFalse(self.fields.remove("nope"))

    def test_value_type_is_checked(self) -> None:
        with self.assertRaises(FieldValueError):
            self.fields.set_value(self.box.key, "checked")
        self.assertEqual(self.fields.set_text(self.text.key, "b").value, "b")

    def test_format_updates_only_given_attributes(self) -> None:
        self.fields.update_format(self.text.key, is_bold=True)
        updated = self.fields.update_format(self.text.key, font_size=18)
        self.assertTrue(updated.is_bold)
        self.assertFalse(updated.is_italic)
        self.assertEqual(updated.font_size, 18)

    def test_checkbox_operations(self) -> None:
        self.assertTrue(self.fields.toggle_checkbox(self.box.key).is_checked)
        self.assertFalse(self.fields.toggle_checkbox(self.box.key).is_checked)
        self.assertEqual(self.fields.set_checkbox_size(self.box.key, 500).checkbox_size, 200)
        self.assertIsNone(self.fields.toggle_checkbox(self.text.key))
        self.assertIsNone(self.fields.set_checkbox_size(self.text.key, 80))

    def test_remove_frees_key(self) -> None:
        self.assertTrue(self.fields.remove(self.text.key))
        self.assertNotIn(self.text.key, self.fields)
        self.assertEqual(self.fields.fields, [self.box])

    def test_load_replaces_and_dedupes(self) -> None:
        a = Field(page=1, position=Position(0, 0), size=Size(1, 1), field_type=FieldType.TEXT, id="x")
        b = Field(page=2, position=Position(0, 0), size=Size(1, 1), field_type=FieldType.TEXT, id="x")
        with self.assertLogs("signature.logic.field_collection", level="WARNING"):
            self.fields.load([a, b])
        self.assertEqual(self.fields.fields, [a])


class TestSigningGate(unittest.TestCase):
    def test_required_fields_block_signing(self) -> None:
        fields = FieldCollection()
        sig = fields.add_signature(1)
        fields.add_text(1)
        self.assertEqual(fields.missing_required(), [sig])
        self.assertFalse(fields.ready_to_sign())

        fields.set_signature(sig.key, "data:image/png;base64,AAAA")
        self.assertTrue(fields.ready_to_sign())


if __name__ == "__main__":
    unittest.main()
