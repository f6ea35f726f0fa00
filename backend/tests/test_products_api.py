from conftest import register


def session_login(client, email="a@x.com", password="pw"):
    return client.post("/session-login", json={"email": email, "password": password})


def test_create_product_requires_session(client):
    response = client.post("/products", json={"name": "Mouse", "price": 100})

    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized"


def test_access_token_is_not_a_session(client, access_token):
    response = client.post(
        "/products",
        json={"name": "Mouse", "price": 100},
        headers={"Authorization": f"Bearer {access_token}"},
    )

    assert response.status_code == 401


def test_create_and_fetch_product(client, registered_user):
    session_login(client)

    created = client.post("/products", json={"name": "Mouse", "price": 15000})

    assert created.status_code == 201
    product = created.json()
    assert product["name"] == "Mouse"
    assert product["price"] == 15000

    fetched = client.get(f"/products/{product['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == product


def test_negative_price_rejected(client, registered_user):
    session_login(client)

    response = client.post("/products", json={"name": "Mouse", "price": -1})

    assert response.status_code == 422
    assert response.json()["message"] == "Invalid request"
    assert response.json()["data"][0]["loc"] == ["body", "price"]


def test_unknown_product(client):
    response = client.get("/products/999")

    assert response.status_code == 404
    assert response.json()["message"] == "Product not found"


def test_session_is_per_client(client, other_client, registered_user):
    register(other_client, email="b@x.com", name="B")
    session_login(client)

    assert other_client.post("/products", json={"name": "Mouse", "price": 1}).status_code == 401


def test_out_of_range_product_id_rejected(client):
    response = client.get("/products/99999999999999999999")

    assert response.status_code == 422
