"""Tests for user endpoints."""

from fastapi import status


def test_list_users(client, test_user, other_user, auth_token) -> None:
    response = client.get("/api/v1/users", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    ids = [user["id"] for user in response.json()]
    assert ids == [test_user.id, other_user.id]


def test_list_users_requires_auth(client) -> None:
    assert client.get("/api/v1/users").status_code == status.HTTP_401_UNAUTHORIZED


def test_create_user(client, auth_token) -> None:
    response = client.post(
        "/api/v1/users",
        json={"username": "plain", "email": "plain@example.com"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["username"] == "plain"


def test_create_duplicate_user(client, test_user, auth_token) -> None:
    response = client.post(
        "/api/v1/users",
        json={"username": test_user.username, "email": "other@example.com"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_get_user(client, other_user, auth_token) -> None:
    response = client.get(f"/api/v1/users/{other_user.id}", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["email"] == other_user.email


def test_get_missing_user(client, auth_token) -> None:
    response = client.get("/api/v1/users/99999", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND
