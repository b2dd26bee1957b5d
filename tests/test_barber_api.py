from datetime import date, timedelta

from botocore.exceptions import ClientError

from barberbook.main import app
from barberbook.utils.storage import BlobStorage, get_storage
from conftest import CDN_URL, SHOP, auth_headers, blob_key, create_barber, register_and_login

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def test_profile_setup_initialises_gallery_and_rating(client):
    headers, barber_id = create_barber(client, "barber@barberbook.io")
    profile = client.get("/api/barbers/me", headers=headers).json()
    assert profile["id"] == barber_id
    assert profile["images"] == []
    assert profile["rating"] == 0
    assert profile["total_ratings"] == 0
    assert profile["is_active"] is True


def test_profile_update_is_last_write_wins(client):
    headers, barber_id = create_barber(client, "barber@barberbook.io")
    response = client.put("/api/barbers/me", json={**SHOP, "shop_name": "Renamed"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["shop_name"] == "Renamed"
    assert response.json()["id"] == barber_id


def test_profile_setup_validation(client):
    headers = auth_headers(register_and_login(client, "barber@barberbook.io", role="barber"))
    assert client.put("/api/barbers/me", json={**SHOP, "latitude": 91}, headers=headers).status_code == 422
    assert client.put("/api/barbers/me", json={**SHOP, "longitude": -181}, headers=headers).status_code == 422
    bad_hours = {**SHOP, "open_time": "18:00", "close_time": "09:00"}
    assert client.put("/api/barbers/me", json=bad_hours, headers=headers).status_code == 422
    assert client.put("/api/barbers/me", json={**SHOP, "open_time": "9am"}, headers=headers).status_code == 422
    missing = {key: value for key, value in SHOP.items() if key != "contact"}
    assert client.put("/api/barbers/me", json=missing, headers=headers).status_code == 422


def test_customers_cannot_set_up_a_shop(client, customer_headers):
    response = client.put("/api/barbers/me", json=SHOP, headers=customer_headers)
    assert response.status_code == 403


def test_profile_missing_before_setup(client):
    headers = auth_headers(register_and_login(client, "barber@barberbook.io", role="barber"))
    assert client.get("/api/barbers/me", headers=headers).status_code == 404


def test_directory_without_location_keeps_creation_order(client):
    create_barber(client, "first@barberbook.io", shop_name="First Cuts")
    create_barber(client, "second@barberbook.io", shop_name="Second Cuts")

    payload = client.get("/api/barbers").json()
    assert payload["location_known"] is False
    assert payload["location_error"] == "Geolocation is not supported by your browser"
    assert [b["shop_name"] for b in payload["barbers"]] == ["First Cuts", "Second Cuts"]
    assert all(b["distance_km"] is None for b in payload["barbers"])


def test_directory_with_location_sorts_and_filters_by_distance(client):
    create_barber(client, "far@barberbook.io", shop_name="Far Cuts", latitude=-33.60, longitude=151.18)
    create_barber(client, "near@barberbook.io", shop_name="Near Cuts", latitude=-33.895, longitude=151.18)
    create_barber(client, "remote@barberbook.io", shop_name="Remote Cuts", latitude=-37.81, longitude=144.96)

    payload = client.get("/api/barbers", params={"lat": -33.897, "lng": 151.179}).json()
    assert payload["location_known"] is True
    assert payload["location_error"] is None
    assert [b["shop_name"] for b in payload["barbers"]] == ["Near Cuts", "Far Cuts"]
    assert payload["barbers"][0]["distance_label"].endswith("m away")

    nearby = client.get("/api/barbers", params={"lat": -33.897, "lng": 151.179, "max_distance": 10}).json()
    assert [b["shop_name"] for b in nearby["barbers"]] == ["Near Cuts"]


def test_directory_search(client):
    create_barber(client, "one@barberbook.io", shop_name="Fade Factory", address="12 King St")
    create_barber(client, "two@barberbook.io", shop_name="Clip Joint", address="4 Queen St")

    payload = client.get("/api/barbers", params={"search": "queen"}).json()
    assert [b["shop_name"] for b in payload["barbers"]] == ["Clip Joint"]
    assert payload["total"] == 1


def test_directory_half_a_location_is_an_error_not_a_failure(client):
    create_barber(client, "one@barberbook.io")
    response = client.get("/api/barbers", params={"lat": -33.9})
    assert response.status_code == 200
    assert response.json()["location_known"] is False
    assert response.json()["location_error"]
    assert len(response.json()["barbers"]) == 1


def test_get_barber(client):
    _, barber_id = create_barber(client, "barber@barberbook.io")
    assert client.get(f"/api/barbers/{barber_id}").json()["shop_name"] == SHOP["shop_name"]
    assert client.get("/api/barbers/unknown-id").status_code == 404


def test_availability(client):
    _, barber_id = create_barber(client, "barber@barberbook.io", open_time="10:00", close_time="13:00")
    day = date.today() + timedelta(days=3)

    response = client.get(f"/api/barbers/{barber_id}/availability", params={"date": day.isoformat()})
    assert response.status_code == 200
    payload = response.json()
    assert payload["slots"] == ["10:00", "10:30", "11:00", "11:30", "12:00", "12:30"]
    assert [bucket["label"] for bucket in payload["buckets"]] == ["Morning", "Afternoon"]
    assert payload["max_date"] == (date.today() + timedelta(days=30)).isoformat()


def test_availability_rejects_dates_outside_window(client):
    _, barber_id = create_barber(client, "barber@barberbook.io")
    past = (date.today() - timedelta(days=1)).isoformat()
    too_far = (date.today() + timedelta(days=31)).isoformat()
    assert client.get(f"/api/barbers/{barber_id}/availability", params={"date": past}).status_code == 422
    assert client.get(f"/api/barbers/{barber_id}/availability", params={"date": too_far}).status_code == 422


def test_gallery_upload_and_delete(client, s3):
    headers, barber_id = create_barber(client, "barber@barberbook.io")

    response = client.post(
        "/api/barbers/me/images",
        files={"file": ("my cut.png", PNG_BYTES, "image/png")},
        headers=headers,
    )
    assert response.status_code == 201
    images = response.json()["images"]
    assert len(images) == 1
    url = images[0]
    assert url.startswith(f"{CDN_URL}/barbers/{barber_id}/")
    assert url.endswith("_my_cut.png")
    stored = s3.objects[blob_key(url)]
    assert stored["Body"] == PNG_BYTES
    assert stored["ContentType"] == "image/png"

    response = client.delete("/api/barbers/me/images", params={"image_url": url}, headers=headers)
    assert response.status_code == 200
    assert response.json()["images"] == []
    assert blob_key(url) not in s3.objects


def test_gallery_rejects_non_images(client):
    headers, _ = create_barber(client, "barber@barberbook.io")
    response = client.post(
        "/api/barbers/me/images",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "File must be an image"


def test_gallery_delete_unknown_image(client):
    headers, _ = create_barber(client, "barber@barberbook.io")
    response = client.delete(
        "/api/barbers/me/images", params={"image_url": f"{CDN_URL}/barbers/x/1_a.png"}, headers=headers
    )
    assert response.status_code == 404


class UnreachableS3:
    def put_object(self, **kwargs):
        raise ClientError({"Error": {"Code": "ServiceUnavailable", "Message": "down"}}, "PutObject")


def test_gallery_upload_reports_storage_failure(client):
    headers, _ = create_barber(client, "barber@barberbook.io")
    app.dependency_overrides[get_storage] = lambda: BlobStorage(
        client=UnreachableS3(), bucket="barberbook-test", public_base_url=CDN_URL
    )

    response = client.post(
        "/api/barbers/me/images",
        files={"file": ("cut.png", PNG_BYTES, "image/png")},
        headers=headers,
    )
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to upload image"
    assert client.get("/api/barbers/me", headers=headers).json()["images"] == []
