import uuid

from conftest import CONCERT, create_publication

PHOTO = ("media", ("stage.jpg", b"\xff\xd8\xff", "image/jpeg"))
SECOND_PHOTO = ("media", ("crowd.png", b"\x89PNG", "image/png"))
VIDEO = ("media", ("clip.mp4", b"\x00\x00\x00\x18ftyp", "video/mp4"))


class TestCreatePublication:

    async def test_concert_without_media(self, client, alice):
        response = await client.post("/publications", data=CONCERT, headers=alice)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Publication created successfully"

        response = await client.get(f"/publications/{body['publicationId']}")
        assert response.status_code == 200
        publication = response.json()
        assert publication["title"] == "Concert"
        assert publication["description"] == "Live music"
        assert publication["category"] == "musical"
        assert publication["location"] == {"lat": -26.18, "long": -58.19}
        assert publication["startDate"].startswith("2024-06-01T18:00")
        assert publication["endDate"].startswith("2024-06-01T23:00")
        assert publication["photos"] == []
        assert publication["videos"] == []
        assert publication["likesCount"] == 0
        assert publication["owner"]["username"] == "alice"

    async def test_media_are_split_by_kind(self, client, alice, media_storage):
        publication_id = await create_publication(
            client, alice, files=[PHOTO, VIDEO, SECOND_PHOTO]
        )

        publication = (await client.get(f"/publications/{publication_id}")).json()

        assert len(publication["photos"]) == 2
        assert len(publication["videos"]) == 1
        assert len(media_storage.uploaded) == 3
        uploaded = {asset.public_id: asset.url for asset in media_storage.uploaded}
        for entry in publication["photos"] + publication["videos"]:
            assert uploaded[entry["id"]] == entry["url"]

    async def test_requires_authentication(self, client):
        response = await client.post("/publications", data=CONCERT)

        assert response.status_code == 401

    async def test_missing_fields_are_listed(self, client, alice):
        data = {key: value for key, value in CONCERT.items() if key not in ("title", "locations")}

        response = await client.post("/publications", data=data, headers=alice)

        assert response.status_code == 400
        assert response.json()["message"] == "Missing required fields: title, locations"

    async def test_location_without_long_is_missing(self, client, alice):
        data = {**CONCERT, "locations": '{"lat": 10}'}

        response = await client.post("/publications", data=data, headers=alice)

        assert response.status_code == 400
        assert "locations" in response.json()["message"]

    async def test_zero_coordinates_are_valid(self, client, alice):
        publication_id = await create_publication(
            client, alice, locations='{"lat": 0, "long": 0}'
        )

        publication = (await client.get(f"/publications/{publication_id}")).json()
        assert publication["location"] == {"lat": 0, "long": 0}

    async def test_unknown_category(self, client, alice):
        data = {**CONCERT, "category": "sports"}

        response = await client.post("/publications", data=data, headers=alice)

        assert response.status_code == 400
        assert response.json()["message"] == "Unknown category: sports"

    async def test_end_before_start(self, client, alice):
        data = {**CONCERT, "endDates": "2024-05-31T10:00"}

        response = await client.post("/publications", data=data, headers=alice)

        assert response.status_code == 400

    async def test_unsupported_media_type_uploads_nothing(self, client, alice, media_storage):
        files = [PHOTO, ("media", ("flyer.pdf", b"%PDF", "application/pdf"))]

        response = await client.post("/publications", data=CONCERT, files=files, headers=alice)

        assert response.status_code == 400
        assert media_storage.uploaded == []

    async def test_failed_upload_persists_nothing(self, client, alice, media_storage):
        media_storage.fail_uploads.add("clip.mp4")

        response = await client.post(
            "/publications", data=CONCERT, files=[PHOTO, VIDEO], headers=alice
        )

        assert response.status_code == 500
        # The photo that did make it is removed again
        assert len(media_storage.uploaded) == 1
        assert media_storage.deleted_ids == [media_storage.uploaded[0].public_id]
        response = await client.get("/publications")
        assert response.status_code == 404


class TestReadPublications:

    async def test_invalid_id(self, client):
        response = await client.get("/publications/not-an-id")

        assert response.status_code == 404
        assert response.json()["message"] == "Invalid ID"

    async def test_unknown_id(self, client):
        response = await client.get(f"/publications/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["message"] == "Publication not found"

    async def test_empty_feed(self, client):
        response = await client.get("/publications")

        assert response.status_code == 404
        assert response.json()["message"] == "No events to show"

    async def test_feed_lists_everything(self, client, alice, bob):
        await create_publication(client, alice)
        await create_publication(client, bob, title="Food drive", category="charity")

        response = await client.get("/publications")

        assert response.status_code == 200
        assert {p["title"] for p in response.json()} == {"Concert", "Food drive"}

    async def test_feed_category_filter(self, client, alice):
        await create_publication(client, alice)
        await create_publication(client, alice, title="Food drive", category="charity")

        response = await client.get("/publications", params={"category": "charity"})

        assert [p["title"] for p in response.json()] == ["Food drive"]

    async def test_search_by_category(self, client, alice):
        await create_publication(client, alice)
        await create_publication(client, alice, title="Museum night", category="cultural")

        response = await client.get("/publications/searched/for/category/cultural")

        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["Museum night"]

    async def test_search_empty_category(self, client, alice):
        await create_publication(client, alice)

        response = await client.get("/publications/searched/for/category/social")

        assert response.status_code == 404
        assert response.json()["message"] == "No events in that category"

    async def test_own_publications(self, client, alice, bob):
        await create_publication(client, alice)
        await create_publication(client, bob, title="Bob's gig")

        response = await client.get("/publications/user", headers=bob)

        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["Bob's gig"]

    async def test_own_publications_requires_authentication(self, client):
        response = await client.get("/publications/user")

        assert response.status_code == 401


class TestUpdatePublication:

    async def test_json_update_only_touches_given_fields(self, client, alice):
        publication_id = await create_publication(client, alice)

        response = await client.put(
            f"/publications/{publication_id}", json={"title": "Open air concert"}, headers=alice
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Publication updated successfully"
        publication = body["publication"]
        assert publication["title"] == "Open air concert"
        assert publication["description"] == "Live music"
        assert publication["category"] == "musical"
        assert publication["location"] == {"lat": -26.18, "long": -58.19}

    async def test_location_and_dates(self, client, alice):
        publication_id = await create_publication(client, alice)

        response = await client.put(
            f"/publications/{publication_id}",
            json={
                "locations": {"lat": 40.4, "long": -3.7},
                "startDates": "2024-07-01T18:00:00Z",
                "endDates": "2024-07-02T02:00:00Z",
            },
            headers=alice,
        )

        publication = response.json()["publication"]
        assert publication["location"] == {"lat": 40.4, "long": -3.7}
        assert publication["startDate"].startswith("2024-07-01T18:00")
        assert publication["endDate"].startswith("2024-07-02T02:00")

    async def test_multipart_update_appends_media(self, client, alice, media_storage):
        publication_id = await create_publication(client, alice, files=[PHOTO])

        response = await client.put(
            f"/publications/{publication_id}",
            data={"description": "Live music and fireworks", "locations": '{"lat": 1, "long": 2}'},
            files=[SECOND_PHOTO, VIDEO],
            headers=alice,
        )

        assert response.status_code == 200
        publication = response.json()["publication"]
        assert publication["description"] == "Live music and fireworks"
        assert publication["location"] == {"lat": 1, "long": 2}
        photo_ids = [p["id"] for p in publication["photos"]]
        assert len(photo_ids) == 2
        # New media go after the existing ones
        assert photo_ids[0] == media_storage.uploaded[0].public_id
        assert len(publication["videos"]) == 1

    async def test_malformed_id_wins_over_malformed_body(self, client, alice):
        response = await client.put(
            "/publications/not-an-id", content=b"{not json", headers={**alice, "Content-Type": "application/json"}
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Invalid ID"

    async def test_explicit_null_is_rejected(self, client, alice):
        publication_id = await create_publication(client, alice)

        response = await client.put(
            f"/publications/{publication_id}", json={"title": None}, headers=alice
        )

        assert response.status_code == 400

    async def test_end_before_existing_start(self, client, alice):
        publication_id = await create_publication(client, alice)

        response = await client.put(
            f"/publications/{publication_id}", json={"endDates": "2024-05-01T00:00"}, headers=alice
        )

        assert response.status_code == 400
        assert response.json()["message"] == "endDates must not be before startDates"

    async def test_only_owner_can_update(self, client, alice, bob):
        publication_id = await create_publication(client, alice)

        response = await client.put(
            f"/publications/{publication_id}", json={"title": "Mine now"}, headers=bob
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Only the owner can modify this publication"

    async def test_remove_single_media(self, client, alice, media_storage):
        publication_id = await create_publication(client, alice, files=[PHOTO, SECOND_PHOTO])
        removed = media_storage.uploaded[0].public_id

        response = await client.delete(
            f"/publications/{publication_id}/media/{removed}", headers=alice
        )

        assert response.status_code == 200
        photos = response.json()["publication"]["photos"]
        assert removed not in [p["id"] for p in photos]
        assert len(photos) == 1
        assert media_storage.deleted_ids == [removed]

    async def test_remove_unknown_media(self, client, alice):
        publication_id = await create_publication(client, alice)

        response = await client.delete(
            f"/publications/{publication_id}/media/eventboard/nothing", headers=alice
        )

        assert response.status_code == 404


class TestDeletePublication:

    async def test_delete_removes_media_and_record(self, client, alice, media_storage):
        publication_id = await create_publication(client, alice, files=[PHOTO, VIDEO])

        response = await client.delete(f"/publications/{publication_id}", headers=alice)

        assert response.status_code == 200
        assert response.json() == {"message": "Publication deleted successfully"}
        assert sorted(media_storage.deleted_ids) == sorted(a.public_id for a in media_storage.uploaded)
        response = await client.get(f"/publications/{publication_id}")
        assert response.status_code == 404

    async def test_every_asset_is_attempted_when_one_fails(self, client, alice, media_storage):
        publication_id = await create_publication(
            client, alice, files=[PHOTO, SECOND_PHOTO, VIDEO]
        )
        media_storage.fail_deletes.add(media_storage.uploaded[0].public_id)

        response = await client.delete(f"/publications/{publication_id}", headers=alice)

        assert response.status_code == 200
        assert len(media_storage.deleted) == 3
        response = await client.get(f"/publications/{publication_id}")
        assert response.status_code == 404

    async def test_delete_drops_likes(self, client, alice, bob):
        publication_id = await create_publication(client, alice)
        await client.patch(f"/publications/{publication_id}/like", headers=bob)

        await client.delete(f"/publications/{publication_id}", headers=alice)

        profile = (await client.get("/profile", headers=bob)).json()
        assert profile["likedPublications"] == []

    async def test_only_owner_can_delete(self, client, alice, bob, media_storage):
        publication_id = await create_publication(client, alice, files=[PHOTO])

        response = await client.delete(f"/publications/{publication_id}", headers=bob)

        assert response.status_code == 403
        assert media_storage.deleted == []
