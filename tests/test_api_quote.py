"""
Tests — Final quote API.

Covers:
    - selecting bids (pricing at global margin, one line per role, 404s)
    - global margin update reprices every line, clamps
    - move / patch / delete lines, task-id addressing, silent no-ops
    - quote view per-line figures + stats
    - reset, xlsx export
"""

import io

import pytest
from openpyxl import load_workbook

from vrshow.models.project import QuoteLineRecord

BASE = "/api/v1/projects"


def _submit(client, project_id, *lines, email="studio@polygones.fr"):
    res = client.post(
        f"{BASE}/{project_id}/proposals",
        json={
            "first_name": "Léa",
            "last_name": "Martin",
            "company_name": "Polygones",
            "lines": [{"role": r, "unit_cost": c, "days": d} for r, c, d in lines],
        },
        headers={"X-VR-Role": "provider", "X-VR-Email": email},
    )
    assert res.status_code == 201
    return [bid["id"] for bid in res.get_json()["items"]]


def _select(client, project_id, bid_id):
    return client.post(f"{BASE}/{project_id}/quote/select", json={"bid_id": bid_id})


def _quote(client, project_id):
    res = client.get(f"{BASE}/{project_id}/quote")
    assert res.status_code == 200
    return res.get_json()


@pytest.fixture()
def quoted(client, project):
    """Project with three selected lines: Chef de projet, Modeleur 3D, QA."""
    bid_ids = _submit(
        client, project["id"],
        ("Chef de projet / Direction de production", 600, 3),
        ("Modeleur 3D", 300, 5),
        ("QA / Test VR", 200, 2),
    )
    for bid_id in bid_ids:
        assert _select(client, project["id"], bid_id).status_code == 200
    return project


# ═════════════════════════════════════════════════════════════════════════════
# SELECTION
# ═════════════════════════════════════════════════════════════════════════════


class TestSelectBid:
    def test_empty_quote(self, client, project):
        data = _quote(client, project["id"])
        assert data["lines"] == []
        assert data["global_margin"] == 40
        assert data["stats"] == {
            "total_revenue": 0, "total_cost": 0, "total_profit": 0,
            "average_margin": 0, "total_days": 0,
        }

    def test_select_prices_at_margin(self, client, project):
        [bid_id] = _submit(client, project["id"], ("Modeleur 3D", 300, 5))
        res = _select(client, project["id"], bid_id)
        assert res.status_code == 200
        data = res.get_json()
        assert data["line"]["sale_price"] == 500
        assert data["line"]["unit_cost"] == 300
        assert data["line"]["id"] != str(bid_id)
        [row] = data["quote"]["lines"]
        assert row["total_cost"] == 1500
        assert row["total_sale"] == 2500
        assert row["line_margin"] == pytest.approx(40.0)
        assert data["quote"]["stats"]["total_revenue"] == 2500

    def test_same_role_replaces_line(self, client, project):
        [first] = _submit(client, project["id"], ("Modeleur 3D", 300, 5), email="contact@atelier-a.fr")
        [second] = _submit(client, project["id"], ("Modeleur 3D", 240, 5), email="contact@atelier-b.fr")
        _select(client, project["id"], first)
        _select(client, project["id"], second)
        lines = _quote(client, project["id"])["lines"]
        assert len(lines) == 1
        assert lines[0]["unit_cost"] == 240
        assert lines[0]["responder_email"] == "contact@atelier-b.fr"
        assert QuoteLineRecord.query.count() == 1

    def test_reselecting_same_bid_keeps_one_line(self, client, project):
        [bid_id] = _submit(client, project["id"], ("Modeleur 3D", 300, 5))
        _select(client, project["id"], bid_id)
        _select(client, project["id"], bid_id)
        assert len(_quote(client, project["id"])["lines"]) == 1

    def test_unknown_bid(self, client, project):
        res = _select(client, project["id"], 9999)
        assert res.status_code == 404

    def test_bid_from_other_project(self, client, project):
        other = client.post(BASE, json={}).get_json()
        [bid_id] = _submit(client, other["id"], ("Modeleur 3D", 300, 5))
        assert _select(client, project["id"], bid_id).status_code == 404

    @pytest.mark.parametrize("payload", [{}, {"bid_id": "abc"}, {"bid_id": True}])
    def test_bid_id_validation(self, client, project, payload):
        res = client.post(f"{BASE}/{project['id']}/quote/select", json=payload)
        assert res.status_code == 400

    def test_provider_cannot_edit_quote(self, client, project, provider_headers):
        res = client.get(f"{BASE}/{project['id']}/quote", headers=provider_headers)
        assert res.status_code == 403


# ═════════════════════════════════════════════════════════════════════════════
# MARGIN
# ═════════════════════════════════════════════════════════════════════════════


class TestMargin:
    def test_margin_reprices_all_lines(self, client, quoted):
        res = client.put(f"{BASE}/{quoted['id']}/quote/margin", json={"margin": 50})
        assert res.status_code == 200
        data = res.get_json()
        assert data["applied_margin"] == 50
        assert [line["sale_price"] for line in data["quote"]["lines"]] == [1200, 600, 400]
        assert data["quote"]["stats"]["average_margin"] == pytest.approx(50.0)

    def test_margin_persists_on_project(self, client, quoted):
        client.put(f"{BASE}/{quoted['id']}/quote/margin", json={"margin": 25})
        project = client.get(f"{BASE}/{quoted['id']}").get_json()
        assert project["global_margin"] == 25

    def test_margin_100_is_clamped(self, client, quoted):
        res = client.put(f"{BASE}/{quoted['id']}/quote/margin", json={"margin": 100})
        assert res.status_code == 200
        assert res.get_json()["applied_margin"] == 99.99

    def test_margin_required(self, client, quoted):
        res = client.put(f"{BASE}/{quoted['id']}/quote/margin", json={})
        assert res.status_code == 400


# ═════════════════════════════════════════════════════════════════════════════
# LINES
# ═════════════════════════════════════════════════════════════════════════════


class TestLineOperations:
    def _roles(self, client, project_id):
        return [line["role"] for line in _quote(client, project_id)["lines"]]

    def test_move_up(self, client, quoted):
        lines = _quote(client, quoted["id"])["lines"]
        res = client.post(
            f"{BASE}/{quoted['id']}/quote/lines/{lines[2]['id']}/move", json={"direction": "up"},
        )
        assert res.status_code == 200
        assert res.get_json()["moved"] is True
        assert self._roles(client, quoted["id"]) == [
            "Chef de projet / Direction de production", "QA / Test VR", "Modeleur 3D",
        ]
        assert [line["order"] for line in _quote(client, quoted["id"])["lines"]] == [0, 1, 2]

    def test_move_by_task_id(self, client, quoted):
        planning = client.get(f"{BASE}/{quoted['id']}/planning").get_json()
        task_id = planning["tasks"][0]["id"]
        assert task_id.startswith("task-")
        res = client.post(f"{BASE}/{quoted['id']}/quote/lines/{task_id}/move", json={"direction": "down"})
        assert res.get_json()["moved"] is True
        assert self._roles(client, quoted["id"])[1] == "Chef de projet / Direction de production"

    def test_move_first_up_is_noop(self, client, quoted):
        lines = _quote(client, quoted["id"])["lines"]
        res = client.post(
            f"{BASE}/{quoted['id']}/quote/lines/{lines[0]['id']}/move", json={"direction": "up"},
        )
        assert res.status_code == 200
        assert res.get_json()["moved"] is False

    def test_move_unknown_line_is_noop(self, client, quoted):
        res = client.post(f"{BASE}/{quoted['id']}/quote/lines/nope/move", json={"direction": "up"})
        assert res.status_code == 200
        assert res.get_json()["moved"] is False

    def test_move_invalid_direction(self, client, quoted):
        lines = _quote(client, quoted["id"])["lines"]
        res = client.post(
            f"{BASE}/{quoted['id']}/quote/lines/{lines[0]['id']}/move", json={"direction": "left"},
        )
        assert res.status_code == 400

    def test_patch_line(self, client, quoted):
        line = _quote(client, quoted["id"])["lines"][1]
        res = client.patch(
            f"{BASE}/{quoted['id']}/quote/lines/{line['id']}", json={"days": 8, "sale_price": "x"},
        )
        data = res.get_json()
        assert data["updated"] is True
        patched = data["quote"]["lines"][1]
        assert patched["days"] == 8
        assert patched["sale_price"] == 0
        assert patched["line_margin"] == 0

    def test_patch_unknown_line(self, client, quoted):
        res = client.patch(f"{BASE}/{quoted['id']}/quote/lines/nope", json={"days": 8})
        assert res.status_code == 200
        assert res.get_json()["updated"] is False

    def test_remove_line(self, client, quoted):
        line = _quote(client, quoted["id"])["lines"][0]
        res = client.delete(f"{BASE}/{quoted['id']}/quote/lines/{line['id']}")
        assert res.get_json()["removed"] is True
        assert self._roles(client, quoted["id"]) == ["Modeleur 3D", "QA / Test VR"]

    def test_remove_unknown_line(self, client, quoted):
        res = client.delete(f"{BASE}/{quoted['id']}/quote/lines/nope")
        assert res.get_json()["removed"] is False
        assert len(res.get_json()["quote"]["lines"]) == 3

    def test_reset_quote(self, client, quoted):
        res = client.delete(f"{BASE}/{quoted['id']}/quote")
        assert res.status_code == 200
        assert res.get_json()["lines"] == []
        assert QuoteLineRecord.query.count() == 0


# ═════════════════════════════════════════════════════════════════════════════
# EXPORT
# ═════════════════════════════════════════════════════════════════════════════


class TestQuoteExport:
    def test_export_xlsx(self, client, quoted):
        res = client.get(f"{BASE}/{quoted['id']}/quote/export")
        assert res.status_code == 200
        assert res.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        assert "Devis_VR_SHOW_Parcours_VR_Mus" in res.headers["Content-Disposition"]
        ws = load_workbook(io.BytesIO(res.data))["Devis"]
        assert ws.cell(row=5, column=1).value == "Chef de projet / Direction de production"
        assert ws.cell(row=8, column=1).value == "TOTAL PROJET"
