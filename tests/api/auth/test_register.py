async def test_register_success(client):
    response = await client.post("/auth/", json={
        "email": "New@Example.com",
        "password": "SecurePass123"
    })

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "new@example.com"
    assert data["role"] == "user"
    assert data["id"]
    assert "password" not in str(data).lower()


async def test_register_duplicate_email(client, registered_user):
    response = await client.post("/auth/", json={
        "email": registered_user.email,
        "password": "SecurePass123"
    })

    assert response.status_code == 400
    assert "already registered" in response.json()["detail"].lower()


async def test_register_weak_password(client):
    response = await client.post("/auth/", json={
        "email": "weak@example.com",
        "password": "short"
    })

    assert response.status_code == 422


async def test_register_invalid_email(client):
    response = await client.post("/auth/", json={
        "email": "not-an-email",
        "password": "SecurePass123"
    })

    assert response.status_code == 422
