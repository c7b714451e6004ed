import unittest
from datetime import date

from geoattend.schemas.users import SortSpec, UserQuery
from geoattend.services.user_query import select
from geoattend.services.users_export import DEFAULT_EXPORT_COLUMNS, build_users_csv, export_filename


class UsersExportTests(unittest.TestCase):
    def test_header_uses_labels_and_every_field_is_quoted(self):
        records = [{"key": "1", "name": 'Ada "Queen" Obi', "email": "ada@uni.edu", "verification": True}]
        text = build_users_csv(records, ["name", "email", "verification", "matricNumber"])
        lines = text.split("\n")
        self.assertEqual(lines[0], '"Name","Email","Verification","Matric Number"')
        self.assertEqual(lines[1], '"Ada ""Queen"" Obi","ada@uni.edu","Verified",""')
        self.assertEqual(len(lines), 2)

    def test_unknown_column_falls_back_to_key(self):
        text = build_users_csv([{"campus": "North"}], ["campus"])
        self.assertEqual(text, '"campus"\n"North"')

    def test_default_columns(self):
        text = build_users_csv([])
        self.assertEqual(text.count(","), len(DEFAULT_EXPORT_COLUMNS) - 1)
        self.assertTrue(text.startswith('"Name","Email","Phone"'))

    def test_empty_column_list_exports_nothing(self):
        self.assertEqual(build_users_csv([{"name": "a"}], []), "")

    def test_export_reflects_filters_and_sort_but_not_pagination(self):
        users = [{"key": str(i), "name": f"User {i:02d}", "status": "Active" if i % 2 else "Inactive"} for i in range(1, 21)]
        query = UserQuery(
            column_filters={"status": "active"},
            sort=SortSpec(column="name", direction="descending"),
            page=1,
            page_size=3,
        )
        text = build_users_csv(select(users, query), ["name"])
        rows = text.split("\n")[1:]
        self.assertEqual(len(rows), 10)
        self.assertEqual(rows[0], '"User 19"')
        self.assertEqual(rows[-1], '"User 01"')

    def test_embedded_newline_stays_inside_quotes(self):
        text = build_users_csv([{"name": "two\nlines"}], ["name"])
        self.assertEqual(text, '"Name"\n"two\nlines"')

    def test_export_filename(self):
        self.assertEqual(export_filename(date(2025, 1, 9)), "users_export_2025-01-09.csv")


if __name__ == "__main__":
    unittest.main()
