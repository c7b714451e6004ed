import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from geoattend.main import app
from geoattend.services.appwrite import AppwriteError

ADMIN_ACCOUNT = {"$id": "admin-1", "name": "Admin", "email": "admin@uni.edu", "labels": ["admin"], "prefs": {}}
STUDENT_ACCOUNT = {"$id": "student-1", "name": "Student", "email": "s@uni.edu", "labels": [], "prefs": {}}

DIRECTORY = [
    {"key": "1", "name": "Tony", "email": "tony@uni.edu", "role": "Admin", "status": "Active"},
    {"key": "2", "name": "Zoey", "email": "zoey@uni.edu", "role": "Staff", "status": "Active"},
    {"key": "3", "name": "Musa", "email": "musa@uni.edu", "role": "User", "status": "Inactive"},
]

AUTH = {"Authorization": "Bearer session-jwt"}


class AdminUsersApiTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)
        self._account_patch = patch("geoattend.core.deps.get_account", return_value=ADMIN_ACCOUNT)
        self.account_mock = self._account_patch.start()
        self._directory_patch = patch("geoattend.api.admin.users.fetch_all_users", return_value=DIRECTORY)
        self.directory_mock = self._directory_patch.start()

    def tearDown(self):
        self._directory_patch.stop()
        self._account_patch.stop()
        self.client.close()

    def test_missing_token_is_401(self):
        response = self.client.post("/api/admin/users/query", json={})
        self.assertEqual(response.status_code, 401)

    def test_expired_session_is_401(self):
        self.account_mock.side_effect = AppwriteError("Invalid token", status_code=401)
        response = self.client.post("/api/admin/users/query", json={}, headers=AUTH)
        self.assertEqual(response.status_code, 401)

    def test_non_admin_is_403(self):
        self.account_mock.return_value = STUDENT_ACCOUNT
        response = self.client.get("/api/admin/users/stats", headers=AUTH)
        self.assertEqual(response.status_code, 403)

    def test_query_returns_page_and_filtered_aggregates(self):
        response = self.client.post(
            "/api/admin/users/query",
            json={
                "searchText": "",
                "columnFilters": {"status": "active"},
                "sort": {"column": "name", "direction": "descending"},
                "page": 1,
                "pageSize": 1,
            },
            headers=AUTH,
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([u["name"] for u in body["items"]], ["Zoey"])
        self.assertEqual(body["totalMatched"], 2)
        self.assertEqual(body["pageCount"], 2)
        self.assertEqual(body["aggregates"], {"totalUsers": 2, "activeUsers": 2, "totalAdmins": 1})
        self.account_mock.assert_called_with("session-jwt")

    def test_query_ignores_null_column_filter(self):
        response = self.client.post(
            "/api/admin/users/query",
            json={"columnFilters": {"role": None, "status": "active"}, "pageSize": 10},
            headers=AUTH,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual([u["name"] for u in response.json()["items"]], ["Tony", "Zoey"])

    def test_string_labels_are_not_substring_matched(self):
        self.account_mock.return_value = {**STUDENT_ACCOUNT, "labels": "superadmin"}
        response = self.client.get("/api/admin/users/stats", headers=AUTH)
        self.assertEqual(response.status_code, 403)

    def test_query_with_zero_page_size_is_400(self):
        response = self.client.post("/api/admin/users/query", json={"pageSize": 0}, headers=AUTH)
        self.assertEqual(response.status_code, 400)

    def test_directory_failure_is_500(self):
        self.directory_mock.side_effect = AppwriteError("boom", status_code=503)
        response = self.client.post("/api/admin/users/query", json={}, headers=AUTH)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["detail"], "Failed to fetch users")

    def test_stats_cover_the_whole_directory(self):
        response = self.client.get("/api/admin/users/stats", headers=AUTH)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"totalUsers": 3, "activeUsers": 2, "totalAdmins": 1})

    def test_export_is_csv_attachment_without_pagination(self):
        response = self.client.post(
            "/api/admin/users/export",
            json={"query": {"searchText": "uni.edu", "sort": {"column": "name"}, "pageSize": 1}, "columns": ["name", "email"]},
            headers=AUTH,
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/csv"))
        self.assertRegex(response.headers["content-disposition"], r'filename="users_export_\d{4}-\d{2}-\d{2}\.csv"')
        self.assertEqual(
            response.text.split("\n"),
            ['"Name","Email"', '"Musa","musa@uni.edu"', '"Tony","tony@uni.edu"', '"Zoey","zoey@uni.edu"'],
        )

    def test_raw_directory_page(self):
        page = {"users": DIRECTORY[:2], "total": 3, "page": 1, "limit": 2}
        with patch("geoattend.api.admin.users.fetch_users_page", return_value=page) as page_mock:
            response = self.client.get("/api/admin/users?page=1&limit=2", headers=AUTH)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["total"], 3)
        page_mock.assert_called_once_with(page=1, limit=2)


class PublicProfileApiTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def tearDown(self):
        self.client.close()

    def test_get_profile(self):
        account = {**STUDENT_ACCOUNT, "prefs": {"fullName": "Stu Dent", "profileCompleted": True}}
        with patch("geoattend.core.deps.get_account", return_value=account):
            response = self.client.get("/api/public/profile", headers=AUTH)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["fullName"], "Stu Dent")
        self.assertFalse(body["profileCompleted"])

    def test_put_profile_validates_payload(self):
        with patch("geoattend.core.deps.get_account", return_value=STUDENT_ACCOUNT):
            response = self.client.put(
                "/api/public/profile",
                json={"fullName": "Stu", "phoneNumber": "123", "matricNumber": "M1"},
                headers=AUTH,
            )
        self.assertEqual(response.status_code, 422)

    def test_put_profile_saves_prefs(self):
        with patch("geoattend.core.deps.get_account", return_value=STUDENT_ACCOUNT), patch(
            "geoattend.services.profile.appwrite.update_account_prefs"
        ) as prefs_mock, patch("geoattend.services.profile.appwrite.update_account_name"):
            response = self.client.put(
                "/api/public/profile",
                json={"fullName": "Stu Dent", "phoneNumber": "08012345678", "matricNumber": "M1", "level": "200 Level"},
                headers=AUTH,
            )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["profileCompleted"])
        self.assertEqual(prefs_mock.call_args.args[1]["level"], "200 Level")

    def test_put_profile_provider_failure_is_502(self):
        with patch("geoattend.core.deps.get_account", return_value=STUDENT_ACCOUNT), patch(
            "geoattend.services.profile.appwrite.update_account_prefs",
            side_effect=AppwriteError("down", status_code=500),
        ):
            response = self.client.put(
                "/api/public/profile",
                json={"fullName": "Stu Dent", "phoneNumber": "08012345678", "matricNumber": "M1"},
                headers=AUTH,
            )
        self.assertEqual(response.status_code, 502)


if __name__ == "__main__":
    unittest.main()
