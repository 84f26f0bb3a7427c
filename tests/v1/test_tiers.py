"""Tests for tier endpoints."""

from fastapi import status

from freestealer.models.vote import VOTE_UP
from tests.conftest import make_tier, make_user


def test_create_tier(client, test_user, auth_token) -> None:
    response = client.post(
        "/api/v1/tiers",
        json={
            "platform": "Koyeb",
            "name": "Free instance",
            "cpu_limit": "0.1 vCPU",
            "memory_limit": "512MB",
            "url": "https://koyeb.com",
        },
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["user_id"] == test_user.id
    assert body["owner"]["username"] == test_user.username
    assert (body["upvote_count"], body["downvote_count"], body["comment_count"]) == (0, 0, 0)


def test_create_tier_ignores_counter_fields(client, auth_token) -> None:
    response = client.post(
        "/api/v1/tiers",
        json={"platform": "Fly.io", "name": "Hobby", "upvote_count": 1000},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["upvote_count"] == 0


def test_create_tier_requires_platform(client, auth_token) -> None:
    response = client.post("/api/v1/tiers", json={"name": "Nameless"}, headers=auth_token)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_list_orders_by_upvotes(client, db_session, counter_service, test_user, auth_token) -> None:
    quiet = make_tier(db_session, test_user, name="Quiet")
    popular = make_tier(db_session, test_user, name="Popular")
    counter_service.apply_vote(test_user.id, popular.id, VOTE_UP)

    response = client.get("/api/v1/tiers", headers=auth_token)

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert [tier["id"] for tier in body["data"]] == [popular.id, quiet.id]
    assert body["page"] == 1
    assert body["page_size"] == 20


def test_list_recent(client, db_session, counter_service, test_user, auth_token) -> None:
    older = make_tier(db_session, test_user, name="Older")
    newer = make_tier(db_session, test_user, name="Newer")
    counter_service.apply_vote(test_user.id, older.id, VOTE_UP)

    response = client.get("/api/v1/tiers", params={"sort": "recent"}, headers=auth_token)

    assert [tier["id"] for tier in response.json()["data"]] == [newer.id, older.id]


def test_list_filters_by_platform(client, db_session, test_user, auth_token) -> None:
    make_tier(db_session, test_user, platform="Render")
    vercel = make_tier(db_session, test_user, platform="Vercel")

    response = client.get("/api/v1/tiers", params={"platform": "Vercel"}, headers=auth_token)

    assert [tier["id"] for tier in response.json()["data"]] == [vercel.id]


def test_list_pagination(client, db_session, test_user, auth_token) -> None:
    for index in range(21):
        make_tier(db_session, test_user, name=f"Tier {index}")

    first = client.get("/api/v1/tiers", headers=auth_token).json()
    second = client.get("/api/v1/tiers", params={"page": 2}, headers=auth_token).json()

    assert len(first["data"]) == 20
    assert len(second["data"]) == 1
    assert second["page"] == 2


def test_private_tiers_hidden_from_others(
    client, db_session, test_user, auth_token, other_auth_token
) -> None:
    private = make_tier(db_session, test_user, is_public=False)

    public_listing = client.get("/api/v1/tiers", headers=auth_token).json()["data"]
    assert private.id not in [tier["id"] for tier in public_listing]

    own = client.get("/api/v1/tiers", params={"user_id": test_user.id}, headers=auth_token)
    assert private.id in [tier["id"] for tier in own.json()["data"]]

    theirs = client.get(
        "/api/v1/tiers", params={"user_id": test_user.id}, headers=other_auth_token
    )
    assert private.id not in [tier["id"] for tier in theirs.json()["data"]]

    detail = client.get(f"/api/v1/tiers/{private.id}", headers=other_auth_token)
    assert detail.status_code == status.HTTP_404_NOT_FOUND


def test_get_tier_includes_comments(
    client, counter_service, test_user, test_tier, auth_token
) -> None:
    counter_service.apply_comment(test_user.id, test_tier.id, "first")
    counter_service.apply_comment(test_user.id, test_tier.id, "second")

    response = client.get(f"/api/v1/tiers/{test_tier.id}", headers=auth_token)

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["comment_count"] == 2
    assert [comment["content"] for comment in body["comments"]] == ["second", "first"]
    assert body["comments"][0]["author"]["id"] == test_user.id


def test_get_missing_tier(client, auth_token) -> None:
    response = client.get("/api/v1/tiers/9999", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_update_tier(client, test_tier, auth_token) -> None:
    response = client.put(
        f"/api/v1/tiers/{test_tier.id}",
        json={"description": "Sleeps after 30 minutes idle"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["description"] == "Sleeps after 30 minutes idle"
    assert body["name"] == test_tier.name


def test_update_tier_rejects_null_fields(client, test_tier, auth_token) -> None:
    response = client.put(
        f"/api/v1/tiers/{test_tier.id}", json={"name": None}, headers=auth_token
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    detail = client.get(f"/api/v1/tiers/{test_tier.id}", headers=auth_token)
    assert detail.json()["name"] == test_tier.name


def test_update_tier_not_owner(client, test_tier, other_auth_token) -> None:
    response = client.put(
        f"/api/v1/tiers/{test_tier.id}", json={"name": "Hijacked"}, headers=other_auth_token
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_update_cannot_touch_counters(client, test_tier, auth_token, counts) -> None:
    client.put(
        f"/api/v1/tiers/{test_tier.id}",
        json={"upvote_count": 50, "comment_count": 9},
        headers=auth_token,
    )
    assert counts(test_tier.id) == (0, 0, 0)


def test_delete_tier(client, test_tier, auth_token) -> None:
    response = client.delete(f"/api/v1/tiers/{test_tier.id}", headers=auth_token)
    assert response.status_code == status.HTTP_204_NO_CONTENT

    detail = client.get(f"/api/v1/tiers/{test_tier.id}", headers=auth_token)
    assert detail.status_code == status.HTTP_404_NOT_FOUND


def test_delete_tier_not_owner(client, test_tier, other_auth_token) -> None:
    response = client.delete(f"/api/v1/tiers/{test_tier.id}", headers=other_auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_delete_tier_keeps_counters_consistent(
    client, db_session, counter_service, test_tier, auth_token
) -> None:
    voter = make_user(db_session)
    counter_service.apply_vote(voter.id, test_tier.id, VOTE_UP)

    client.delete(f"/api/v1/tiers/{test_tier.id}", headers=auth_token)

    assert counter_service.find_drift() == []
