from conftest import auth_headers, create_client_record, create_shift, create_staff, register


def test_staff_crud_and_soft_delete(client, owner):
    headers = owner["headers"]
    staff = create_staff(client, headers, email="Nina@Example.com", hourly_rate=28.5, specializations=["wound care"])
    assert staff["email"] == "nina@example.com"
    assert staff["is_active"] is True
    assert staff["specializations"] == ["wound care"]

    updated = client.patch(f"/staff/{staff['id']}", json={"job_title": "Senior RN"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["job_title"] == "Senior RN"
    assert updated.json()["hourly_rate"] == 28.5

    assert client.delete(f"/staff/{staff['id']}", headers=headers).status_code == 200
    assert client.get("/staff", headers=headers).json() == []
    # Row is kept for history
    assert client.get(f"/staff/{staff['id']}", headers=headers).json()["is_active"] is False


def test_staff_rejects_negative_rate(client, owner):
    response = client.post(
        "/staff", json={"first_name": "A", "last_name": "B", "hourly_rate": -1}, headers=owner["headers"]
    )
    assert response.status_code == 422


def test_staff_is_scoped_to_organization(client, owner):
    staff = create_staff(client, owner["headers"])

    other = register(client, "other@example.com")
    other_headers = auth_headers(other["access_token"])
    client.post("/organizations", json={"name": "Other Org"}, headers=other_headers)

    assert client.get(f"/staff/{staff['id']}", headers=other_headers).status_code == 404


def test_clients_search_and_shift_count(client, owner):
    headers = owner["headers"]
    alice = create_client_record(client, headers, "Alice", "Adams", email="alice@example.com")
    create_client_record(client, headers, "Bob", "Brown")
    staff = create_staff(client, headers)
    create_shift(client, headers, staff["id"], alice["id"])
    create_shift(client, headers, staff["id"], alice["id"])

    everyone = client.get("/clients", headers=headers).json()
    assert len(everyone) == 2

    found = client.get("/clients", params={"search": "ali"}, headers=headers).json()
    assert [c["first_name"] for c in found] == ["Alice"]
    assert found[0]["shift_count"] == 2


def test_client_update_skips_nulls(client, owner):
    headers = owner["headers"]
    carl = create_client_record(client, headers, city="Leeds")

    response = client.patch(
        f"/clients/{carl['id']}", json={"city": None, "allergies": "Penicillin"}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["city"] == "Leeds"
    assert response.json()["allergies"] == "Penicillin"

    assert client.get("/clients/9999", headers=headers).status_code == 404
