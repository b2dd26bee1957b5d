import inspect

from barberbook.routes.barber_route import upload_gallery_image
from barberbook.routes.service_route import upload_service_image
from conftest import blob_key, create_barber, create_service

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def test_create_and_list_services(client, barber):
    headers, barber_id = barber
    created = create_service(client, headers, name="Skin Fade", price=30, duration_minutes=45)
    assert created["barber_id"] == barber_id
    assert created["price"] == 30.0
    assert created["is_active"] is True

    listed = client.get(f"/api/barbers/{barber_id}/services").json()
    assert [service["name"] for service in listed] == ["Skin Fade"]


def test_inactive_services_are_hidden_from_customers(client, barber):
    headers, barber_id = barber
    create_service(client, headers, name="Skin Fade")
    hidden = create_service(client, headers, name="Perm")
    response = client.patch(f"/api/services/{hidden['id']}", json={"is_active": False}, headers=headers)
    assert response.status_code == 200

    public = client.get(f"/api/barbers/{barber_id}/services").json()
    assert [service["name"] for service in public] == ["Skin Fade"]

    own = client.get("/api/barbers/me/services", headers=headers).json()
    assert {service["name"] for service in own} == {"Skin Fade", "Perm"}


def test_service_search_over_name_and_description(client, barber):
    headers, barber_id = barber
    create_service(client, headers, name="Skin Fade", description="Clippers and scissors")
    create_service(client, headers, name="Beard Trim", description="Hot towel finish")
    create_service(client, headers, name="Kids Cut", description="Under 12")

    by_name = client.get(f"/api/barbers/{barber_id}/services", params={"q": "BEARD"}).json()
    assert [service["name"] for service in by_name] == ["Beard Trim"]
    by_description = client.get(f"/api/barbers/{barber_id}/services", params={"q": "scissors"}).json()
    assert [service["name"] for service in by_description] == ["Skin Fade"]


def test_service_validation(client, barber):
    headers, _ = barber
    negative = {"name": "Cut", "price": -1, "duration_minutes": 30}
    assert client.post("/api/services", json=negative, headers=headers).status_code == 422
    no_duration = {"name": "Cut", "price": 10, "duration_minutes": 0}
    assert client.post("/api/services", json=no_duration, headers=headers).status_code == 422


def test_only_owner_can_modify(client, barber):
    headers, _ = barber
    service = create_service(client, headers)
    other_headers, _ = create_barber(client, "other@barberbook.io")

    assert client.patch(f"/api/services/{service['id']}", json={"price": 1}, headers=other_headers).status_code == 403
    assert client.delete(f"/api/services/{service['id']}", headers=other_headers).status_code == 403


def test_customers_cannot_create_services(client, customer_headers):
    response = client.post(
        "/api/services", json={"name": "Cut", "price": 10, "duration_minutes": 30}, headers=customer_headers
    )
    assert response.status_code == 403


def test_delete_service_removes_its_image(client, barber, s3):
    headers, barber_id = barber
    service = create_service(client, headers)

    response = client.post(
        f"/api/services/{service['id']}/image",
        files={"file": ("fade.png", PNG_BYTES, "image/png")},
        headers=headers,
    )
    assert response.status_code == 200
    image_url = response.json()["image_url"]
    assert blob_key(image_url) in s3.objects

    assert client.delete(f"/api/services/{service['id']}", headers=headers).status_code == 204
    assert blob_key(image_url) not in s3.objects
    assert client.get(f"/api/barbers/{barber_id}/services").json() == []


def test_quote(client, barber):
    headers, barber_id = barber
    fade = create_service(client, headers, name="Skin Fade", price=25)
    beard = create_service(client, headers, name="Beard Trim", price=40)

    response = client.post(
        f"/api/barbers/{barber_id}/quote",
        json={"services": {fade["id"]: 2, beard["id"]: 1, "gone": 1}},
    )
    assert response.status_code == 200
    quote = response.json()
    assert quote["total_price"] == 90.0
    assert quote["total_items"] == 4
    assert quote["missing_service_ids"] == ["gone"]
    assert {line["name"]: line["subtotal"] for line in quote["lines"]} == {"Skin Fade": 50.0, "Beard Trim": 40.0}


def test_quote_rejects_zero_quantity(client, barber):
    headers, barber_id = barber
    fade = create_service(client, headers)
    response = client.post(f"/api/barbers/{barber_id}/quote", json={"services": {fade["id"]: 0}})
    assert response.status_code == 422


def test_upload_handlers_run_in_the_threadpool():
    assert not inspect.iscoroutinefunction(upload_gallery_image)
    assert not inspect.iscoroutinefunction(upload_service_image)
