def test_create_default_lists_once(client, seed, alice):
    headers = seed.headers(alice.user_id)
    r = client.get("/list/create-default", headers=headers)
    assert r.status_code == 200, r.text
    lists = r.json()["data"]["lists"]
    assert [(l["name"], l["color"], l["list_order"]) for l in lists] == [
        ("New Leads", "#F9BA0B", 1.0),
        ("Follow Up", "#40C2FC", 2.0),
        ("Qualified", "#75C699", 3.0),
        ("Rejected", "#EB695B", 4.0),
    ]

    again = client.get("/list/create-default", headers=headers)
    assert again.status_code == 400
    assert again.json() == {"error": "default lists already exist"}


def test_get_lists_sorts_lists_and_cards(client, seed, alice, bob):
    late = seed.new_list(alice.user_id, "late", order=5.0)
    early = seed.new_list(alice.user_id, "early", order=2.0)
    seed.new_list(bob.user_id, "not mine")
    second = seed.card(early, 2.0, name="second")
    first = seed.card(early, 1.0, name="first")

    r = client.get("/list/all", headers=seed.headers(alice.user_id))
    assert r.status_code == 200
    lists = r.json()["data"]["lists"]
    assert [l["id"] for l in lists] == [early, late]
    assert [c["id"] for c in lists[0]["cards"]] == [first, second]
    assert lists[1]["cards"] == []


def test_create_list_goes_last(client, seed, alice):
    headers = seed.headers(alice.user_id)
    seed.new_list(alice.user_id, order=7.0)
    r = client.post("/list/create", json={"name": " Won ", "color": "#000000"}, headers=headers)
    assert r.status_code == 200, r.text
    created = r.json()["data"]
    assert created["name"] == "Won"
    assert created["list_order"] == 8.0


def test_update_list_keeps_color_when_omitted(client, seed, alice):
    lst = seed.new_list(alice.user_id, "Follow Up")
    r = client.put(f"/list/{lst}", json={"name": "Chasing"}, headers=seed.headers(alice.user_id))
    assert r.status_code == 200, r.text
    assert r.json()["data"]["name"] == "Chasing"
    assert r.json()["data"]["color"] == "#F9BA0B"


def test_update_foreign_list_is_not_found(client, seed, alice, bob):
    theirs = seed.new_list(bob.user_id)
    r = client.put(f"/list/{theirs}", json={"name": "mine now"}, headers=seed.headers(alice.user_id))
    assert r.status_code == 404
    assert r.json() == {"error": "list not found"}


def test_delete_list_takes_its_cards(client, seed, alice):
    headers = seed.headers(alice.user_id)
    doomed = seed.new_list(alice.user_id, "doomed")
    kept = seed.new_list(alice.user_id, "kept", order=2.0)
    gone = seed.card(doomed, 1.0)
    stays = seed.card(kept, 1.0)

    assert client.delete(f"/list/{doomed}", headers=headers).json() == {"data": "ok"}
    assert seed.orders(doomed) == []
    assert seed.orders(kept) == [(stays, 1.0)]
    assert client.get(f"/card/{gone}", headers=headers).status_code == 404
    lists = client.get("/list/all", headers=headers).json()["data"]["lists"]
    assert [l["id"] for l in lists] == [kept]


def test_delete_foreign_list_is_not_found(client, seed, alice, bob):
    theirs = seed.new_list(bob.user_id)
    card = seed.card(theirs, 1.0)
    r = client.delete(f"/list/{theirs}", headers=seed.headers(alice.user_id))
    assert r.status_code == 404
    assert seed.orders(theirs) == [(card, 1.0)]
