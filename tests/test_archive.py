"""
Tests — Project archive API.

Covers:
    - save snapshot (name, lines, stats, team, brief)
    - list newest first, include_data switch
    - delete, restore into the same or another project
    - 404 / 400 / 403 paths
"""

from vrshow.models.archive import ProjectSnapshot
from vrshow.services import archive_service

BASE = "/api/v1"


def _select(client, project_id, role, cost, days):
    res = client.post(
        f"{BASE}/projects/{project_id}/proposals",
        json={
            "first_name": "Léa",
            "last_name": "Martin",
            "company_name": "Polygones",
            "lines": [{"role": role, "unit_cost": cost, "days": days}],
        },
        headers={"X-VR-Role": "provider", "X-VR-Email": "studio@polygones.fr"},
    )
    bid_id = res.get_json()["items"][0]["id"]
    client.post(f"{BASE}/projects/{project_id}/quote/select", json={"bid_id": bid_id})


def _save(client, project_id):
    res = client.post(f"{BASE}/projects/{project_id}/snapshots")
    assert res.status_code == 201
    return res.get_json()


class TestSaveAndList:
    def test_save_copies_project(self, client, project):
        _select(client, project["id"], "Modeleur 3D", 300, 5)
        snapshot = _save(client, project["id"])
        assert snapshot["name"] == "Parcours VR Musée"
        assert snapshot["brief"] == "Parcours de 12 minutes"
        assert snapshot["source_project_id"] == project["id"]
        assert snapshot["stats"]["total_revenue"] == 2500
        assert len(snapshot["data"]) == 1
        assert snapshot["data"][0]["role"] == "Modeleur 3D"
        assert len(snapshot["date"].split("/")) == 3

    def test_list_newest_first(self, client, project):
        first = _save(client, project["id"])
        client.put(f"{BASE}/projects/{project['id']}", json={"name": "Version 2"})
        second = _save(client, project["id"])

        res = client.get(f"{BASE}/archive")
        assert res.status_code == 200
        data = res.get_json()
        assert data["total"] == 2
        assert [s["id"] for s in data["items"]] == [second["id"], first["id"]]
        assert "data" not in data["items"][0]

    def test_list_with_data(self, client, project):
        _save(client, project["id"])
        items = client.get(f"{BASE}/archive?include_data=1").get_json()["items"]
        assert items[0]["data"] == []

    def test_save_unknown_project(self, client):
        assert client.post(f"{BASE}/projects/9999/snapshots").status_code == 404

    def test_provider_forbidden(self, client, provider_headers):
        assert client.get(f"{BASE}/archive", headers=provider_headers).status_code == 403


class TestDelete:
    def test_delete(self, client, project):
        snapshot = _save(client, project["id"])
        res = client.delete(f"{BASE}/archive/{snapshot['id']}")
        assert res.status_code == 200
        assert res.get_json() == {"deleted": True, "id": snapshot["id"]}
        assert ProjectSnapshot.query.count() == 0

    def test_delete_unknown(self, client):
        res = client.delete(f"{BASE}/archive/9999")
        assert res.status_code == 404


class TestRestore:
    def test_restore_into_other_project(self, client, project):
        _select(client, project["id"], "Modeleur 3D", 300, 5)
        _select(client, project["id"], "QA / Test VR", 200, 2)
        snapshot = _save(client, project["id"])

        target = client.post(f"{BASE}/projects", json={"name": "Vide"}).get_json()
        res = client.post(f"{BASE}/archive/{snapshot['id']}/restore", json={"project_id": target["id"]})
        assert res.status_code == 200
        data = res.get_json()
        assert data["project"]["name"] == "Parcours VR Musée"
        assert data["project"]["brief"] == "Parcours de 12 minutes"
        restored = data["quote"]["lines"]
        assert [line["role"] for line in restored] == ["Modeleur 3D", "QA / Test VR"]
        original_ids = {line["id"] for line in snapshot["data"]}
        assert not original_ids & {line["id"] for line in restored}

    def test_restore_replaces_current_quote(self, client, project):
        snapshot = _save(client, project["id"])
        _select(client, project["id"], "Modeleur 3D", 300, 5)
        res = client.post(f"{BASE}/archive/{snapshot['id']}/restore", json={"project_id": project["id"]})
        assert res.get_json()["quote"]["lines"] == []

    def test_restore_twice_into_same_project(self, client, project):
        _select(client, project["id"], "Modeleur 3D", 300, 5)
        snapshot = _save(client, project["id"])
        for _ in range(2):
            res = client.post(
                f"{BASE}/archive/{snapshot['id']}/restore", json={"project_id": project["id"]},
            )
            assert res.status_code == 200
        assert len(res.get_json()["quote"]["lines"]) == 1

    def test_restore_unknown_snapshot(self, client, project):
        res = client.post(f"{BASE}/archive/9999/restore", json={"project_id": project["id"]})
        assert res.status_code == 404

    def test_restore_requires_project_id(self, client, project):
        snapshot = _save(client, project["id"])
        res = client.post(f"{BASE}/archive/{snapshot['id']}/restore", json={})
        assert res.status_code == 400


class TestArchiveService:
    def test_load_archive_newest_first(self, client, project):
        first = _save(client, project["id"])
        second = _save(client, project["id"])
        assert [s.id for s in archive_service.load_archive()] == [second["id"], first["id"]]

    def test_snapshot_keeps_margin(self, client, project):
        client.put(f"{BASE}/projects/{project['id']}/quote/margin", json={"margin": 30})
        snapshot = _save(client, project["id"])
        assert snapshot["global_margin"] == 30
