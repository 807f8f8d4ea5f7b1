import uuid

from conftest import create_publication


class TestToggleLike:

    async def test_first_toggle_likes(self, client, alice):
        publication_id = await create_publication(client, alice)

        response = await client.patch(f"/publications/{publication_id}/like", headers=alice)

        assert response.status_code == 200
        assert response.json() == {"message": "Like added", "likesCount": 1, "liked": True}

    async def test_second_toggle_takes_the_like_back(self, client, alice):
        publication_id = await create_publication(client, alice)

        await client.patch(f"/publications/{publication_id}/like", headers=alice)
        response = await client.patch(f"/publications/{publication_id}/like", headers=alice)

        assert response.json() == {"message": "Like removed", "likesCount": 0, "liked": False}
        profile = (await client.get("/profile", headers=alice)).json()
        assert profile["likedPublications"] == []

    async def test_likes_from_several_users_are_counted(self, client, alice, bob):
        publication_id = await create_publication(client, alice)

        await client.patch(f"/publications/{publication_id}/like", headers=alice)
        response = await client.patch(f"/publications/{publication_id}/like", headers=bob)

        assert response.json()["likesCount"] == 2
        publication = (await client.get(f"/publications/{publication_id}")).json()
        assert publication["likesCount"] == 2

    async def test_liked_flag_follows_the_viewer(self, client, alice, bob):
        publication_id = await create_publication(client, alice)
        await client.patch(f"/publications/{publication_id}/like", headers=bob)

        seen_by_bob = (await client.get(f"/publications/{publication_id}", headers=bob)).json()
        seen_by_alice = (await client.get(f"/publications/{publication_id}", headers=alice)).json()
        anonymous = (await client.get(f"/publications/{publication_id}")).json()

        assert seen_by_bob["liked"] is True
        assert seen_by_alice["liked"] is False
        assert anonymous["liked"] is False

    async def test_requires_authentication(self, client, alice):
        publication_id = await create_publication(client, alice)

        response = await client.patch(f"/publications/{publication_id}/like")

        assert response.status_code == 401

    async def test_invalid_id(self, client, alice):
        response = await client.patch("/publications/123/like", headers=alice)

        assert response.status_code == 404
        assert response.json()["message"] == "Invalid ID"

    async def test_unknown_publication(self, client, alice):
        response = await client.patch(f"/publications/{uuid.uuid4()}/like", headers=alice)

        assert response.status_code == 404
        assert response.json()["message"] == "Publication not found"
