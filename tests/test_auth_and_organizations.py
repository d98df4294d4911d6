from conftest import PASSWORD, auth_headers, onboard_staff, register


def test_register_login_and_me(client):
    data = register(client, "Nurse@Example.com", "Nora", "Nightingale")
    assert data["user"]["email"] == "nurse@example.com"
    assert data["user"]["organization_id"] is None

    login = client.post("/auth/login", json={"email": "nurse@example.com", "password": PASSWORD})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/auth/me", headers=auth_headers(token))
    assert me.status_code == 200
    assert me.json()["first_name"] == "Nora"


def test_register_rejects_weak_password_and_duplicates(client):
    weak = client.post("/auth/register", json={"email": "a@example.com", "password": "short"})
    assert weak.status_code == 400

    register(client, "a@example.com")
    duplicate = client.post("/auth/register", json={"email": "a@example.com", "password": PASSWORD})
    assert duplicate.status_code == 409


def test_login_with_wrong_password(client):
    register(client, "b@example.com")
    response = client.post("/auth/login", json={"email": "b@example.com", "password": "Wrong12345"})
    assert response.status_code == 401


def test_missing_or_bad_token_is_rejected(client):
    assert client.get("/auth/me").status_code in (401, 403)
    assert client.get("/auth/me", headers=auth_headers("not-a-token")).status_code == 401


def test_organization_lifecycle(client, owner):
    current = client.get("/organizations/current", headers=owner["headers"])
    assert current.status_code == 200
    assert current.json()["name"] == "Sunrise Care"
    assert current.json()["role"] == "owner"

    updated = client.patch(
        "/organizations/current", json={"phone": "+44 20 7946 0000"}, headers=owner["headers"]
    )
    assert updated.status_code == 200
    assert updated.json()["phone"] == "+442079460000"
    assert updated.json()["name"] == "Sunrise Care"

    again = client.post("/organizations", json={"name": "Second"}, headers=owner["headers"])
    assert again.status_code == 409


def test_user_without_organization_gets_404(client):
    data = register(client, "lonely@example.com")
    response = client.get("/staff", headers=auth_headers(data["access_token"]))
    assert response.status_code == 404


def test_security_headers_present(client):
    response = client.get("/")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert client.get("/health").json() == {"status": "healthy"}


def test_staff_member_cannot_update_organization(client, owner):
    nurse = onboard_staff(client, owner)
    response = client.patch("/organizations/current", json={"name": "Taken Over"}, headers=nurse["headers"])
    assert response.status_code == 403
    assert client.get("/organizations/current", headers=owner["headers"]).json()["name"] == "Sunrise Care"


def test_main_serves_app_with_uvicorn(monkeypatch):
    import uvicorn

    from nursecare import main

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setenv("PORT", "9001")
    main.main()
    assert calls == [(main.app, {"host": "0.0.0.0", "port": 9001})]
