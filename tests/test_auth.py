"""Tests for token resolution and the capability check."""

from conftest import ADMIN, MANAGER, NOBODY, OTHER_MANAGER, auth
from models import User
from core.auth import resolve_token
from core.permissions import can_act_for


class TestCanActFor:
    def test_manager_acts_for_self(self, users):
        assert can_act_for(users[MANAGER], MANAGER, "game_manager")
        assert can_act_for(users[MANAGER], None, "game_manager")

    def test_role_required(self, users):
        assert not can_act_for(users[NOBODY], NOBODY, "game_manager")

    def test_manager_cannot_impersonate(self, users):
        assert not can_act_for(users[MANAGER], OTHER_MANAGER, "game_manager")

    def test_admin_role_can_impersonate(self, users):
        assert can_act_for(users[ADMIN], MANAGER, "game_manager")

    def test_is_admin_flag_passes_everything(self):
        root = User(email="root@example.com", roles=[], is_admin=True)
        assert can_act_for(root, "root@example.com", "game_manager")
        assert can_act_for(root, MANAGER, "game_manager")

    def test_no_caller(self):
        assert not can_act_for(None, MANAGER, "game_manager")


class TestResolveToken:
    def test_demo_token(self, db, users):
        assert resolve_token(db, f"demo-token-{MANAGER}").email == MANAGER

    def test_unknown_email(self, db, users):
        assert resolve_token(db, "demo-token-ghost@example.com") is None

    def test_unsupported_format(self, db, users):
        assert resolve_token(db, MANAGER) is None
        assert resolve_token(db, "demo-token-") is None


class TestAuthOverHttp:
    def test_missing_header(self, client):
        response = client.get("/api/games")
        assert response.status_code == 401
        assert response.json() == {"error": "Missing or invalid authorization"}

    def test_unknown_user(self, client):
        response = client.get("/api/games", headers=auth("ghost@example.com"))
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_user_without_role(self, client):
        response = client.get("/api/games", headers=auth(NOBODY))
        assert response.status_code == 401

    def test_admin_impersonation(self, client, make_game):
        game = make_game()
        response = client.get(
            f"/api/games/{game.id}", params={"impersonate": MANAGER}, headers=auth(ADMIN)
        )
        assert response.status_code == 200
        assert response.json()["game"]["managerEmail"] == MANAGER

    def test_manager_impersonation_denied(self, client):
        response = client.get(
            "/api/games", params={"impersonate": OTHER_MANAGER}, headers=auth(MANAGER)
        )
        assert response.status_code == 401
