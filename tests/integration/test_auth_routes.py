"""Integration tests for session routes."""


def test_register_pharmacy_with_email(api_client, provider):
    """Test registration creates the provider user, the row and a session."""
    # When: registering with an email identifier
    response = api_client.post("/auth/pharmacy/register", json={
        "name": "Farmácia Nova", "identifier": "nova@farmacia.com", "password": "secret123",
        "phone": "11955554444",
    })

    # Then
    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "pharmacy"
    assert body["user"]["email"] == "nova@farmacia.com"
    assert body["session"]["access_token"] in provider.tokens
    assert "nova@farmacia.com" in provider.users


def test_register_pharmacy_with_phone_uses_synthetic_email(api_client, provider):
    response = api_client.post("/auth/pharmacy/register", json={
        "name": "Farmácia Fone", "identifier": "(21) 98888-1111", "password": "secret123",
    })

    assert response.status_code == 200
    assert "phone_5521988881111@system.local" in provider.users
    assert response.json()["user"]["email"] is None


def test_register_pharmacy_duplicate_account(api_client, pharmacy):
    response = api_client.post("/auth/pharmacy/register", json={
        "name": "Again", "identifier": "owner@farmacia.com", "password": "secret123",
    })
    assert response.status_code == 422
    assert response.json()["detail"] == "User already registered"


def test_pharmacy_login(api_client, pharmacy):
    response = api_client.post("/auth/pharmacy/login",
                               json={"identifier": "owner@farmacia.com", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == pharmacy.id


def test_pharmacy_login_wrong_password(api_client, pharmacy):
    response = api_client.post("/auth/pharmacy/login",
                               json={"identifier": "owner@farmacia.com", "password": "nope"})
    assert response.status_code == 401


def test_client_login_with_formatted_phone(api_client, client_row):
    """Test clients sign in with the phone in any notation."""
    response = api_client.post("/auth/client/login",
                               json={"identifier": "+55 (11) 99999-0000", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["role"] == "client"
    assert response.json()["user"]["id"] == client_row.id


def test_client_credentials_on_pharmacy_login_is_404(api_client, client_row):
    response = api_client.post("/auth/pharmacy/login",
                               json={"identifier": "11999990000", "password": "secret123"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Pharmacy not found"


def test_me_resolves_pharmacy_then_client(api_client, pharmacy_headers, client_headers, pharmacy, client_row):
    pharmacy_me = api_client.get("/auth/me", headers=pharmacy_headers).json()
    client_me = api_client.get("/auth/me", headers=client_headers).json()

    assert pharmacy_me["role_name"] == "pharmacy"
    assert pharmacy_me["pharmacy_id"] == pharmacy.id
    assert client_me["role_name"] == "client"
    assert client_me["pharmacy_id"] == pharmacy.id


def test_me_with_invalid_token(api_client):
    response = api_client.get("/auth/me", headers={"Authorization": "Bearer bogus"})
    assert response.status_code == 401


def test_logout_revokes_token(api_client, provider, pharmacy_headers):
    assert api_client.post("/auth/logout", headers=pharmacy_headers).status_code == 200
    assert api_client.get("/auth/me", headers=pharmacy_headers).status_code == 401
