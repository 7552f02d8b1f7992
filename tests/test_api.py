import unittest
import os
import sys
import uuid
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).resolve().parents[1]))

from main import app
from sbk_ladder.router import get_service
from sbk_ladder.service import LadderService
from sbk_ladder.storage import SQLiteLadderStore


class TestHealth(unittest.TestCase):

    def test_health_check(self):
        client = TestClient(app)
        r = client.get("/api/health")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["status"], "online")
        self.assertEqual(r.json()["service"], "SBK Ladder Manager")


class TestLadderRoutesMounted(unittest.TestCase):
    def setUp(self):
        self.test_db = f"test_api_{uuid.uuid4().hex}.sqlite"
        self.service = LadderService(SQLiteLadderStore(db_path=self.test_db))
        app.dependency_overrides[get_service] = lambda: self.service
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.service.close()
        if os.path.exists(self.test_db):
            try:
                os.remove(self.test_db)
            except PermissionError:
                print(f"Warning: Could not remove {self.test_db}")

    def test_status_route(self):
        r = self.client.get("/ladders/status")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["message"], "Ready!")

    def test_list_and_win_routes(self):
        self.assertEqual(self.client.get("/ladders").json(), [])
        # No ladder selected yet
        self.assertEqual(self.client.post("/ladders/active/win").status_code, 404)


if __name__ == '__main__':
    unittest.main()
