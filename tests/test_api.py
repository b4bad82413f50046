from conftest import API, b64, basic_auth


def register(client, username="a", password=b"p1", email=None):
    res = client.post(
        f"{API}/users",
        json={"username": username, "password": b64(password), "email": email},
    )
    assert res.status_code == 201
    return res.json()


def test_root_reports_running(client) -> None:
    res = client.get("/")
    assert res.status_code == 200
    assert res.json() == "Server is running."


def test_register_and_read_current_user(client) -> None:
    created = register(client, email="a@example.com")
    assert created["password"] == b64(b"p1")

    res = client.get(f"{API}/user", headers=basic_auth("a", b"p1"))
    assert res.status_code == 200
    assert res.json()["id"] == created["id"]
    assert res.json()["email"] == "a@example.com"


def test_register_conflicts(client) -> None:
    register(client, username="a", email="a@example.com")

    res = client.post(f"{API}/users", json={"username": "a", "password": b64(b"x"), "email": "a@example.com"})
    assert res.status_code == 409
    assert res.json()["detail"] == "Both username and email address already exist."

    res = client.post(f"{API}/users", json={"username": "a", "password": b64(b"x")})
    assert res.status_code == 409
    assert res.json()["detail"] == "Username already exists."

    res = client.post(f"{API}/users", json={"username": "b", "password": b64(b"x"), "email": "a@example.com"})
    assert res.status_code == 409
    assert res.json()["detail"] == "Email address already exists."


def test_register_rejects_malformed_password(client) -> None:
    res = client.post(f"{API}/users", json={"username": "a", "password": "not base64!"})
    assert res.status_code == 400


def test_bulk_register_echoes_mobile_ids(client) -> None:
    res = client.post(f"{API}/users/bulk", json=[
        {"username": "a", "password": b64(b"p1"), "mobile_id": 11},
        {"username": "b", "password": b64(b"p2"), "mobile_id": 12},
    ])
    assert res.status_code == 201
    assert [user["mobile_id"] for user in res.json()] == [11, 12]


def test_wrong_credentials_are_unauthorized(client) -> None:
    register(client)

    res = client.get(f"{API}/categories/", headers=basic_auth("a", b"p2"))
    assert res.status_code == 401
    assert res.headers["www-authenticate"] == "Basic"

    res = client.get(f"{API}/categories/")
    assert res.status_code == 401


def test_colours_are_listed_as_hex(client) -> None:
    register(client)
    headers = basic_auth("a", b"p1")

    res = client.get(f"{API}/colours/", headers=headers)
    assert res.status_code == 200
    assert len(res.json()) == 12
    assert res.json()[0] == {"id": 1, "name": "red", "code": "FF0000"}

    res = client.get(f"{API}/colours/99", headers=headers)
    assert res.status_code == 404
    assert res.json()["detail"] == "Colour with ID 99 does not exist"


def test_category_lifecycle(client) -> None:
    register(client)
    headers = basic_auth("a", b"p1")

    res = client.post(f"{API}/categories/", json={"name": b64(b"food"), "colour_id": 1}, headers=headers)
    assert res.status_code == 201
    category = res.json()
    assert category["name"] == b64(b"food")
    assert category["description"] is None

    res = client.patch(f"{API}/categories/{category['id']}", json={"description": b64(b"daily")}, headers=headers)
    assert res.status_code == 200
    assert res.json()["description"] == b64(b"daily")
    assert res.json()["name"] == b64(b"food")

    res = client.put(f"{API}/categories/{category['id']}", json={"name": b64(b"meals"), "colour_id": 2},
                     headers=headers)
    assert res.status_code == 200
    assert res.json()["description"] is None
    assert res.json()["colour_id"] == 2

    res = client.delete(f"{API}/categories/{category['id']}", headers=headers)
    assert res.status_code == 204

    res = client.get(f"{API}/categories/{category['id']}", headers=headers)
    assert res.status_code == 404

    res = client.post(f"{API}/categories/", json={"name": b64(b"next"), "colour_id": 1}, headers=headers)
    assert res.json()["id"] > category["id"]


def test_category_validation_errors(client) -> None:
    register(client)
    headers = basic_auth("a", b"p1")

    res = client.get(f"{API}/categories/0", headers=headers)
    assert res.status_code == 422

    res = client.post(f"{API}/categories/", json={"name": "***", "colour_id": 1}, headers=headers)
    assert res.status_code == 400

    res = client.post(f"{API}/categories/", json={"name": b64(b"x"), "colour_id": 99}, headers=headers)
    assert res.status_code == 404

    res = client.post(f"{API}/categories/", json={"colour_id": 1}, headers=headers)
    assert res.status_code == 422


def test_users_cannot_see_each_others_categories(client) -> None:
    register(client, username="a", password=b"p1")
    register(client, username="b", password=b"p2")
    u1 = basic_auth("a", b"p1")
    u2 = basic_auth("b", b"p2")

    c1 = client.post(f"{API}/categories/", json={"name": b64(b"mine"), "colour_id": 1}, headers=u1).json()

    assert client.get(f"{API}/categories/{c1['id']}", headers=u2).status_code == 404
    assert client.get(f"{API}/categories/", headers=u2).json() == []
    assert client.patch(f"{API}/categories/{c1['id']}", json={"name": b64(b"x")}, headers=u2).status_code == 404
    assert client.delete(f"{API}/categories/{c1['id']}", headers=u2).status_code == 404
    assert client.get(f"{API}/categories/{c1['id']}", headers=u1).status_code == 200


def test_category_bulk(client) -> None:
    register(client)
    headers = basic_auth("a", b"p1")

    res = client.post(f"{API}/categories/bulk", json=[
        {"name": b64(b"x"), "colour_id": 1, "mobile_id": 5},
        {"name": b64(b"y"), "colour_id": 2},
    ], headers=headers)
    assert res.status_code == 201
    body = res.json()
    assert [item["mobile_id"] for item in body] == [5, None]
    assert body[0]["name"] == b64(b"x")


def test_subcategory_entry_and_label_flow(client) -> None:
    register(client)
    headers = basic_auth("a", b"p1")

    category = client.post(f"{API}/categories/", json={"name": b64(b"food"), "colour_id": 1},
                           headers=headers).json()
    res = client.post(f"{API}/categories/{category['id']}/subcategories",
                      json={"name": b64(b"fruit"), "colour_id": 2}, headers=headers)
    assert res.status_code == 201
    subcategory = res.json()
    assert subcategory["category_id"] == category["id"]

    res = client.get(f"{API}/categories/{category['id']}/subcategories", headers=headers)
    assert [s["id"] for s in res.json()] == [subcategory["id"]]

    res = client.post(
        f"{API}/categories/subcategories/{subcategory['id']}/entries",
        json={"amount": b64(b"\x10\x20"), "time_of_expense": b64(b"2024-03-01")},
        headers=headers,
    )
    assert res.status_code == 201
    entry = res.json()
    assert entry["amount"] == b64(b"\x10\x20")
    assert entry["creation_time"]

    res = client.patch(
        f"{API}/categories/subcategories/{subcategory['id']}/entries/{entry['id']}",
        json={"name": b64(b"bananas")}, headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["name"] == b64(b"bananas")
    assert res.json()["amount"] == b64(b"\x10\x20")
    assert res.json()["creation_time"] == entry["creation_time"]

    res = client.post(f"{API}/labels/", json={"name": b64(b"weekly"), "colour_id": 3}, headers=headers)
    assert res.status_code == 201
    label = res.json()

    link_url = f"{API}/entry-labels/entries/{entry['id']}/labels/{label['id']}"
    res = client.post(link_url, headers=headers)
    assert res.status_code == 201
    assert res.json()["entry_id"] == entry["id"]

    assert client.post(link_url, headers=headers).status_code == 409

    res = client.get(f"{API}/entry-labels/entries/{entry['id']}/labels", headers=headers)
    assert [item["id"] for item in res.json()] == [label["id"]]
    res = client.get(f"{API}/entry-labels/labels/{label['id']}/entries", headers=headers)
    assert [item["id"] for item in res.json()] == [entry["id"]]

    assert client.delete(link_url, headers=headers).status_code == 204
    assert client.delete(link_url, headers=headers).status_code == 404


def test_entry_bulk_and_move(client) -> None:
    register(client)
    headers = basic_auth("a", b"p1")

    category = client.post(f"{API}/categories/", json={"name": b64(b"c"), "colour_id": 1}, headers=headers).json()
    first = client.post(f"{API}/categories/{category['id']}/subcategories",
                        json={"name": b64(b"s1"), "colour_id": 1}, headers=headers).json()
    second = client.post(f"{API}/categories/{category['id']}/subcategories",
                         json={"name": b64(b"s2"), "colour_id": 1}, headers=headers).json()

    res = client.post(f"{API}/categories/subcategories/{first['id']}/entries/bulk", json=[
        {"amount": b64(b"1"), "time_of_expense": b64(b"t"), "mobile_id": 100},
        {"amount": b64(b"2"), "time_of_expense": b64(b"t"), "mobile_id": 101},
    ], headers=headers)
    assert res.status_code == 201
    entries = res.json()
    assert [e["mobile_id"] for e in entries] == [100, 101]

    res = client.put(
        f"{API}/categories/subcategories/{first['id']}/entries/{entries[0]['id']}",
        json={"subcategory_id": second["id"], "amount": b64(b"3"), "time_of_expense": b64(b"t2")},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["subcategory_id"] == second["id"]

    res = client.get(f"{API}/categories/subcategories/{first['id']}/entries", headers=headers)
    assert [e["id"] for e in res.json()] == [entries[1]["id"]]


def test_user_update_and_delete(client) -> None:
    created = register(client, username="a", password=b"p1")
    register(client, username="b", password=b"p2")
    headers = basic_auth("a", b"p1")

    res = client.patch(f"{API}/users/{created['id']}", json={"first_name": "Ann"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["first_name"] == "Ann"
    assert res.json()["username"] == "a"

    res = client.patch(f"{API}/users/{created['id']}", json={"username": "b"}, headers=headers)
    assert res.status_code == 409

    other_id = created["id"] + 1
    res = client.patch(f"{API}/users/{other_id}", json={"first_name": "Eve"}, headers=headers)
    assert res.status_code == 403

    res = client.put(f"{API}/users/{created['id']}",
                     json={"username": "a2", "password": b64(b"p3")}, headers=headers)
    assert res.status_code == 200
    assert res.json()["first_name"] is None

    assert client.get(f"{API}/user", headers=headers).status_code == 401
    new_headers = basic_auth("a2", b"p3")
    assert client.get(f"{API}/user", headers=new_headers).status_code == 200

    assert client.delete(f"{API}/users", headers=new_headers).status_code == 204
    assert client.get(f"{API}/user", headers=new_headers).status_code == 401


def test_failed_bulk_register_creates_no_users(client) -> None:
    res = client.post(f"{API}/users/bulk", json=[
        {"username": "a", "password": b64(b"p1")},
        {"username": "a", "password": b64(b"p2")},
    ])
    assert res.status_code == 409

    assert client.get(f"{API}/user", headers=basic_auth("a", b"p1")).status_code == 401


def test_failed_category_bulk_creates_nothing(client) -> None:
    register(client)
    headers = basic_auth("a", b"p1")

    res = client.post(f"{API}/categories/bulk", json=[
        {"name": b64(b"x"), "colour_id": 1},
        {"name": b64(b"y"), "colour_id": 99},
    ], headers=headers)
    assert res.status_code == 404
    assert client.get(f"{API}/categories/", headers=headers).json() == []


def test_category_batch_patch_and_delete(client) -> None:
    register(client)
    headers = basic_auth("a", b"p1")
    first = client.post(f"{API}/categories/", json={"name": b64(b"a"), "colour_id": 1}, headers=headers).json()
    second = client.post(f"{API}/categories/", json={"name": b64(b"b"), "colour_id": 1}, headers=headers).json()
    ids = [first["id"], second["id"]]

    res = client.patch(f"{API}/categories/batch", json={
        "category_ids": ids,
        "updates": [{"name": b64(b"a2")}, {"colour_id": 4}],
    }, headers=headers)
    assert res.status_code == 200
    assert [c["name"] for c in res.json()] == [b64(b"a2"), b64(b"b")]
    assert [c["colour_id"] for c in res.json()] == [1, 4]

    res = client.patch(f"{API}/categories/batch", json={"category_ids": ids, "updates": [{"colour_id": 2}]},
                       headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"] == "The number of ids and items must be equal"

    res = client.delete(f"{API}/categories/batch", params={"category_ids": [ids[0], 999]}, headers=headers)
    assert res.status_code == 404
    assert len(client.get(f"{API}/categories/", headers=headers).json()) == 2

    res = client.delete(f"{API}/categories/batch", params={"category_ids": ids}, headers=headers)
    assert res.status_code == 200
    assert res.json() == [1, 1]
    assert client.get(f"{API}/categories/", headers=headers).json() == []


def test_batch_cannot_touch_other_users_rows(client) -> None:
    register(client, username="a", password=b"p1")
    register(client, username="b", password=b"p2")
    u1 = basic_auth("a", b"p1")
    u2 = basic_auth("b", b"p2")
    label = client.post(f"{API}/labels/", json={"name": b64(b"mine"), "colour_id": 1}, headers=u1).json()

    res = client.patch(f"{API}/labels/batch", json={"label_ids": [label["id"]], "updates": [{"colour_id": 2}]},
                       headers=u2)
    assert res.status_code == 404
    assert client.delete(f"{API}/labels/batch", params={"label_ids": [label["id"]]}, headers=u2).status_code == 404

    assert client.get(f"{API}/labels/{label['id']}", headers=u1).json()["colour_id"] == 1


def test_subcategory_and_entry_batches(client) -> None:
    register(client)
    headers = basic_auth("a", b"p1")
    category = client.post(f"{API}/categories/", json={"name": b64(b"c"), "colour_id": 1}, headers=headers).json()
    subcategory = client.post(f"{API}/categories/{category['id']}/subcategories",
                              json={"name": b64(b"s"), "colour_id": 1}, headers=headers).json()

    res = client.patch(f"{API}/categories/subcategories/batch", json={
        "category_ids": [category["id"]],
        "subcategory_ids": [subcategory["id"]],
        "updates": [{"description": b64(b"d")}],
    }, headers=headers)
    assert res.status_code == 200
    assert res.json()[0]["description"] == b64(b"d")

    entries = client.post(f"{API}/categories/subcategories/{subcategory['id']}/entries/bulk", json=[
        {"amount": b64(b"1"), "time_of_expense": b64(b"t")},
        {"amount": b64(b"2"), "time_of_expense": b64(b"t")},
    ], headers=headers).json()
    entry_ids = [e["id"] for e in entries]

    res = client.patch(f"{API}/categories/subcategories/entries/batch", json={
        "subcategory_ids": [subcategory["id"], subcategory["id"]],
        "entry_ids": entry_ids,
        "updates": [{"amount": b64(b"10")}, {"amount": b64(b"20")}],
    }, headers=headers)
    assert res.status_code == 200
    assert [e["amount"] for e in res.json()] == [b64(b"10"), b64(b"20")]

    res = client.delete(f"{API}/categories/subcategories/entries/batch",
                        params={"subcategory_ids": [subcategory["id"]], "entry_ids": entry_ids}, headers=headers)
    assert res.status_code == 400

    res = client.delete(f"{API}/categories/subcategories/entries/batch",
                        params={"subcategory_ids": [subcategory["id"]] * 2, "entry_ids": entry_ids}, headers=headers)
    assert res.json() == [1, 1]

    res = client.delete(f"{API}/categories/subcategories/batch",
                        params={"category_ids": [category["id"]], "subcategory_ids": [subcategory["id"]]},
                        headers=headers)
    assert res.status_code == 200
    assert client.get(f"{API}/categories/{category['id']}/subcategories", headers=headers).json() == []


def test_entry_label_batches(client) -> None:
    register(client)
    headers = basic_auth("a", b"p1")
    category = client.post(f"{API}/categories/", json={"name": b64(b"c"), "colour_id": 1}, headers=headers).json()
    subcategory = client.post(f"{API}/categories/{category['id']}/subcategories",
                              json={"name": b64(b"s"), "colour_id": 1}, headers=headers).json()
    entries = client.post(f"{API}/categories/subcategories/{subcategory['id']}/entries/bulk", json=[
        {"amount": b64(b"1"), "time_of_expense": b64(b"t")},
        {"amount": b64(b"2"), "time_of_expense": b64(b"t")},
    ], headers=headers).json()
    label = client.post(f"{API}/labels/", json={"name": b64(b"l"), "colour_id": 1}, headers=headers).json()
    entry_ids = [e["id"] for e in entries]

    res = client.post(f"{API}/entry-labels/batch", json={"entry_ids": entry_ids, "label_ids": [label["id"]] * 2},
                      headers=headers)
    assert res.status_code == 201
    assert [link["entry_id"] for link in res.json()] == entry_ids

    res = client.post(f"{API}/entry-labels/batch", json={"entry_ids": entry_ids, "label_ids": [label["id"]] * 2},
                      headers=headers)
    assert res.status_code == 409

    res = client.get(f"{API}/entry-labels/batch/labels", params={"entry_ids": entry_ids}, headers=headers)
    assert res.status_code == 200
    assert [[item["id"] for item in labels] for labels in res.json()] == [[label["id"]], [label["id"]]]

    res = client.delete(f"{API}/entry-labels/batch", params={"entry_ids": entry_ids, "label_ids": [label["id"]]},
                        headers=headers)
    assert res.status_code == 400

    res = client.delete(f"{API}/entry-labels/batch",
                        params={"entry_ids": entry_ids, "label_ids": [label["id"]] * 2}, headers=headers)
    assert res.status_code == 200
    assert res.json() == [1, 1]
