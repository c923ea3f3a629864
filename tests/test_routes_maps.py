"""
Tests des routes `/v1/maps`.

Cycle de vie d'une carte, rattachement d'objets, élagage de la collection pour un tiers et
traduction des erreurs de rattachement.
"""

from __future__ import annotations

from backend.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_CREATED,
    HTTP_FORBIDDEN,
    HTTP_NO_CONTENT,
    HTTP_NOT_FOUND,
    HTTP_OK,
    TOTAL_COUNT_HEADER,
)
from tests.fakes import PLANET_PAYLOAD, STAR_PAYLOAD, register_and_login


def _create_map(client, headers, name="alpha", is_public=True) -> dict:
    r = client.post("/v1/maps", json={"name": name, "is_public": is_public}, headers=headers)
    assert r.status_code == HTTP_CREATED, r.text
    return r.json()


def _create_object(client, headers, payload) -> dict:
    r = client.post("/v1/celestial-objects", json=payload, headers=headers)
    assert r.status_code == HTTP_CREATED, r.text
    return r.json()


def test_alpha_terra_flow(client):
    """Teste le scénario « Alpha/Terra » via l'API."""
    _, owner = register_and_login(client, "owner@stellar.io")
    alpha = _create_map(client, owner)
    terra = _create_object(
        client,
        owner,
        {**PLANET_PAYLOAD, "map_id": alpha["id"], "position": {"x": 1, "y": 2, "z": 3}},
    )
    assert alpha["name"] == "Alpha"
    assert terra["map_id"] is None
    assert terra["position"] is None

    r = client.post(f"/v1/maps/{alpha['id']}/celestial-objects/{terra['id']}", headers=owner)
    assert r.status_code == HTTP_OK, r.text
    assert [o["id"] for o in r.json()["celestial_objects"]] == [terra["id"]]

    r = client.post(f"/v1/maps/{alpha['id']}/celestial-objects/{terra['id']}", headers=owner)
    assert r.status_code == HTTP_BAD_REQUEST
    assert r.json()["code"] == "ALREADY_LINKED"

    r = client.put(
        f"/v1/celestial-objects/{terra['id']}",
        json={**PLANET_PAYLOAD, "position": {"x": 1, "y": 2, "z": 3}},
        headers=owner,
    )
    assert r.status_code == HTTP_OK, r.text
    assert r.json()["position"] == {"x": 1, "y": 2, "z": 3}
    assert r.json()["map_id"] == alpha["id"]

    r = client.delete(f"/v1/maps/{alpha['id']}/celestial-objects/{terra['id']}", headers=owner)
    assert r.status_code == HTTP_OK
    assert r.json()["celestial_objects"] == []
    detached = client.get(f"/v1/celestial-objects/{terra['id']}", headers=owner).json()
    assert detached["map_id"] is None
    assert detached["position"] is None

    r = client.delete(f"/v1/maps/{alpha['id']}/celestial-objects/{terra['id']}", headers=owner)
    assert r.status_code == HTTP_BAD_REQUEST
    assert r.json()["code"] == "NOT_LINKED"


def test_collection_pruned_for_other_users(client):
    """Teste l'élagage A/B/C : B (privé) n'apparaît que pour le propriétaire."""
    _, owner = register_and_login(client, "owner@stellar.io")
    _, other = register_and_login(client, "other@stellar.io", username="other")
    alpha = _create_map(client, owner)
    for name, public in (("a", True), ("b", False), ("c", True)):
        obj = _create_object(client, owner, {**STAR_PAYLOAD, "name": name, "is_public": public})
        client.post(f"/v1/maps/{alpha['id']}/celestial-objects/{obj['id']}", headers=owner)

    def names(headers=None):
        r = client.get(f"/v1/maps/{alpha['id']}", headers=headers)
        assert r.status_code == HTTP_OK
        return [o["name"] for o in r.json()["celestial_objects"]]

    assert names(owner) == ["A", "B", "C"]
    assert names(other) == ["A", "C"]
    assert names() == ["A", "C"]

    r = client.get("/v1/maps")
    assert r.headers[TOTAL_COUNT_HEADER] == "1"
    assert [o["name"] for o in r.json()[0]["celestial_objects"]] == ["A", "C"]


def test_link_requires_ownership_of_both(client):
    _, owner = register_and_login(client, "owner@stellar.io")
    _, other = register_and_login(client, "other@stellar.io", username="other")
    alpha = _create_map(client, owner)
    theirs = _create_object(client, other, STAR_PAYLOAD)
    mine = _create_object(client, owner, STAR_PAYLOAD)

    r = client.post(f"/v1/maps/{alpha['id']}/celestial-objects/{theirs['id']}", headers=owner)
    assert r.status_code == HTTP_FORBIDDEN
    r = client.post(f"/v1/maps/{alpha['id']}/celestial-objects/{mine['id']}", headers=other)
    assert r.status_code == HTTP_FORBIDDEN
    r = client.post(f"/v1/maps/999/celestial-objects/{mine['id']}", headers=owner)
    assert r.status_code == HTTP_NOT_FOUND
    r = client.post(f"/v1/maps/{alpha['id']}/celestial-objects/999", headers=owner)
    assert r.status_code == HTTP_NOT_FOUND


def test_private_map_update_and_delete(client):
    _, owner = register_and_login(client, "owner@stellar.io")
    _, other = register_and_login(client, "other@stellar.io", username="other")
    hidden = _create_map(client, owner, name="hidden", is_public=False)
    star = _create_object(client, owner, STAR_PAYLOAD)
    client.post(f"/v1/maps/{hidden['id']}/celestial-objects/{star['id']}", headers=owner)

    assert client.get(f"/v1/maps/{hidden['id']}", headers=other).status_code == HTTP_FORBIDDEN
    assert client.get("/v1/maps").json() == []
    r = client.get("/v1/maps/mine", headers=owner)
    assert r.headers[TOTAL_COUNT_HEADER] == "1"

    r = client.put(f"/v1/maps/{hidden['id']}", json={"name": "stolen"}, headers=other)
    assert r.status_code == HTTP_FORBIDDEN
    r = client.put(
        f"/v1/maps/{hidden['id']}", json={"name": "revealed", "is_public": True}, headers=owner
    )
    assert r.status_code == HTTP_OK
    assert r.json()["name"] == "Revealed"
    assert r.json()["creation_date"] == hidden["creation_date"]

    assert client.delete(f"/v1/maps/{hidden['id']}", headers=other).status_code == HTTP_FORBIDDEN
    assert client.delete(f"/v1/maps/{hidden['id']}", headers=owner).status_code == HTTP_NO_CONTENT
    assert client.get(f"/v1/maps/{hidden['id']}", headers=owner).status_code == HTTP_NOT_FOUND
    survivor = client.get(f"/v1/celestial-objects/{star['id']}", headers=owner).json()
    assert survivor["map_id"] is None
