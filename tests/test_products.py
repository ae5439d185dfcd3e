from fastapi import status


def test_create_product(client):
    response = client.post(
        "/api/products",
        json={"name": "Course bundle", "description": "All lessons", "price": 2500},
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["name"] == "Course bundle"
    assert data["price"] == 2500
    assert data["currency"] == "usd"
    assert data["id"] > 0


def test_create_product_requires_name_and_positive_price(client):
    assert client.post("/api/products", json={"price": 2500}).status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert (
        client.post("/api/products", json={"name": "Free", "price": 0}).status_code
        == status.HTTP_422_UNPROCESSABLE_ENTITY
    )


def test_list_products_newest_first(client):
    client.post("/api/products", json={"name": "First", "price": 100})
    client.post("/api/products", json={"name": "Second", "price": 200})

    response = client.get("/api/products")

    assert response.status_code == status.HTTP_200_OK
    assert [p["name"] for p in response.json()] == ["Second", "First"]


def test_get_product(client, test_product):
    response = client.get(f"/api/products/{test_product.id}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["price"] == 2500


def test_get_product_not_found(client):
    response = client.get("/api/products/99999")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert "not found" in response.json()["detail"].lower()
