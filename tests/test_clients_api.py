def test_create_and_get_client(client, auth_headers, customer):
    assert customer["email"] == "billing@globex.com"
    assert customer["address"]["country"] == "USA"

    response = client.get(f"/v1/clients/{customer['id']}", headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["client"]["name"] == "Globex"
    assert body["stats"] == {"total_invoices": 0, "total_amount": 0.0, "paid_amount": 0.0, "pending_amount": 0.0}


def test_duplicate_client_email_conflicts(client, auth_headers, customer):
    response = client.post(
        "/v1/clients",
        json={"name": "Globex Again", "email": "BILLING@globex.com"},
        headers=auth_headers,
    )
    assert response.status_code == 409
    assert response.json()["error"]["message"] == "Client with this email already exists"


def test_update_client(client, auth_headers, customer):
    other = client.post("/v1/clients", json={"name": "Initech", "email": "ap@initech.com"}, headers=auth_headers)
    assert other.status_code == 201

    taken = client.put(
        f"/v1/clients/{customer['id']}",
        json={"name": "Globex", "email": "ap@initech.com"},
        headers=auth_headers,
    )
    assert taken.status_code == 409

    response = client.put(
        f"/v1/clients/{customer['id']}",
        json={"name": "Globex Corp", "email": "billing@globex.com", "is_active": False},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["client"]["name"] == "Globex Corp"
    assert response.json()["client"]["is_active"] is False


def test_list_clients_search_and_pagination(client, auth_headers, customer):
    for name in ("Initech", "Umbrella", "Soylent"):
        client.post("/v1/clients", json={"name": name}, headers=auth_headers)

    response = client.get("/v1/clients", params={"limit": 2}, headers=auth_headers)
    body = response.json()
    assert response.status_code == 200
    assert len(body["clients"]) == 2
    assert body["pagination"] == {"current": 1, "pages": 2, "total": 4, "limit": 2}

    response = client.get("/v1/clients", params={"search": "globex"}, headers=auth_headers)
    assert [c["id"] for c in response.json()["clients"]] == [customer["id"]]


def test_missing_client_is_404(client, auth_headers):
    response = client.get("/v1/clients/999", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_delete_client_without_invoices(client, auth_headers, customer):
    response = client.delete(f"/v1/clients/{customer['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert client.get(f"/v1/clients/{customer['id']}", headers=auth_headers).status_code == 404


def test_delete_client_with_invoices_conflicts(client, auth_headers, customer, create_invoice):
    create_invoice()
    create_invoice()

    response = client.delete(f"/v1/clients/{customer['id']}", headers=auth_headers)
    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "CLIENT_HAS_INVOICES"
    assert error["details"]["invoice_count"] == 2


def test_client_stats_split_paid_and_pending(client, auth_headers, customer, create_invoice):
    paid = create_invoice()
    create_invoice()
    client.patch(f"/v1/invoices/{paid['id']}/mark-paid", headers=auth_headers)

    stats = client.get(f"/v1/clients/{customer['id']}", headers=auth_headers).json()["stats"]
    assert stats["total_invoices"] == 2
    assert stats["total_amount"] == 220.02
    assert stats["paid_amount"] == 110.01
    assert stats["pending_amount"] == 110.01
