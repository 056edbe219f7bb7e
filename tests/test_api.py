"""End-to-end tests over HTTP."""

import pytest

from conftest import MANAGER, OTHER_MANAGER, auth


def create_group_with_teams(client, teams=("Arsenal", "Chelsea", "Spurs", "Villa")):
    group_id = client.post("/api/groups", json={"name": "PL"}, headers=auth()).json()["id"]
    for rank, name in enumerate(teams, start=1):
        response = client.post(
            f"/api/groups/{group_id}/teams", json={"name": name, "rank": rank}, headers=auth()
        )
        assert response.status_code == 200
    return group_id


def create_game(client, group_id, players=("Alice", "Bob", "Carol"), **options):
    body = {"name": "Office LMS", "groupId": group_id, "playerNames": list(players)}
    body.update(options)
    response = client.post("/api/games", json=body, headers=auth())
    assert response.status_code == 200, response.json()
    return response.json()["id"]


def current_round_id(client, game_id):
    rounds = client.get(f"/api/games/{game_id}/rounds", headers=auth()).json()
    return rounds[-1]["id"]


def close_round(client, game_id, results):
    round_id = current_round_id(client, game_id)
    client.post(f"/api/rounds/{round_id}/auto-assign", headers=auth())
    picks = client.get(f"/api/rounds/{round_id}/picks", headers=auth()).json()
    payload = {
        "results": [
            {"pickId": p["id"], "result": results.get(p["playerName"], "win")} for p in picks
        ]
    }
    response = client.post(f"/api/rounds/{round_id}/results", json=payload, headers=auth())
    assert response.status_code == 200, response.json()
    return round_id, response.json()


class TestPublicEndpoints:
    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok", "service": "lms-manager"}

    def test_config(self, client):
        assert client.get("/api/config").json() == {"appName": "LMS Manager", "appIcon": "🎯"}


class TestMasterData:
    def test_groups_and_teams(self, client):
        group_id = create_group_with_teams(client)

        groups = client.get("/api/groups", headers=auth()).json()
        assert [(g["id"], g["teamCount"]) for g in groups] == [(group_id, 4)]

        teams = client.get(f"/api/groups/{group_id}/teams", headers=auth()).json()
        assert [t["name"] for t in teams] == ["Arsenal", "Chelsea", "Spurs", "Villa"]

        spurs = next(t for t in teams if t["name"] == "Spurs")
        response = client.put(
            f"/api/teams/{spurs['id']}", json={"name": "Tottenham", "rank": 9}, headers=auth()
        )
        assert response.status_code == 204
        assert client.delete(f"/api/teams/{spurs['id']}", headers=auth()).status_code == 204

    def test_duplicate_team(self, client):
        group_id = create_group_with_teams(client, teams=("Arsenal",))
        response = client.post(
            f"/api/groups/{group_id}/teams", json={"name": "Arsenal"}, headers=auth()
        )
        assert response.status_code == 409

    def test_group_in_use_cannot_be_deleted(self, client):
        group_id = create_group_with_teams(client)
        create_game(client, group_id)
        assert client.delete(f"/api/groups/{group_id}", headers=auth()).status_code == 409

    def test_groups_are_private(self, client):
        group_id = create_group_with_teams(client)
        response = client.get(f"/api/groups/{group_id}/teams", headers=auth(OTHER_MANAGER))
        assert response.status_code == 404

    def test_player_pool(self, client):
        player_id = client.post("/api/players", json={"name": "Alice"}, headers=auth()).json()["id"]
        assert client.post("/api/players", json={"name": "Alice"}, headers=auth()).status_code == 409
        assert [p["name"] for p in client.get("/api/players", headers=auth()).json()] == ["Alice"]
        assert client.delete(f"/api/players/{player_id}", headers=auth()).status_code == 204
        assert client.delete(f"/api/players/{player_id}", headers=auth()).status_code == 404


class TestGameFlow:
    def test_create_and_fetch(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(
            client, group_id, winnerMode="multiple", rolloverMode="game", maxWinners=2
        )

        detail = client.get(f"/api/games/{game_id}", headers=auth()).json()
        assert detail["game"]["status"] == "active"
        assert detail["game"]["winnerMode"] == "multiple"
        assert detail["game"]["rolloverMode"] == "game"
        assert detail["game"]["maxWinners"] == 2
        assert [p["playerName"] for p in detail["participants"]] == ["Alice", "Bob", "Carol"]
        assert [(r["roundNumber"], r["status"]) for r in detail["rounds"]] == [(1, "open")]

        [summary] = client.get("/api/games", headers=auth()).json()
        assert summary["participantCount"] == 3
        assert summary["currentRound"] == 1
        assert summary["groupName"] == "PL"

    def test_play_to_a_winner(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)

        _, closed = close_round(client, game_id, {"Carol": "loss"})
        assert closed == {"roundNumber": 1, "eliminated": ["Carol"], "survived": ["Alice", "Bob"]}

        advanced = client.post(f"/api/games/{game_id}/advance", headers=auth()).json()
        assert advanced == {"status": "active", "roundNumber": 2, "rolledOver": False}

        close_round(client, game_id, {"Bob": "draw"})
        advanced = client.post(f"/api/games/{game_id}/advance", headers=auth()).json()
        assert advanced["status"] == "completed"
        assert advanced["winnerName"] == "Alice"

        assert advanced == {"status": "completed", "winnerName": "Alice", "winnerNames": ["Alice"]}

        again = client.post(f"/api/games/{game_id}/advance", headers=auth()).json()
        assert again == {"status": "completed", "winnerName": "Alice", "winnerNames": ["Alice"]}

    def test_advance_with_earlier_round_reopened(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)
        round_one, _ = close_round(client, game_id, {"Carol": "loss"})
        client.post(f"/api/games/{game_id}/advance", headers=auth())
        close_round(client, game_id, {})
        client.post(f"/api/rounds/{round_one}/reopen", headers=auth())

        response = client.post(f"/api/games/{game_id}/advance", headers=auth())

        assert response.status_code == 400
        assert response.json() == {"error": "Round 1 is still open; save its results first"}
        rounds = client.get(f"/api/games/{game_id}/rounds", headers=auth()).json()
        assert [(r["roundNumber"], r["status"]) for r in rounds] == [(1, "open"), (2, "closed")]

    def test_rollover_round_over_http(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)

        close_round(client, game_id, {"Alice": "loss", "Bob": "loss", "Carol": "draw"})
        advanced = client.post(f"/api/games/{game_id}/advance", headers=auth()).json()

        assert advanced == {"status": "active", "roundNumber": 2, "rolledOver": True}
        detail = client.get(f"/api/games/{game_id}", headers=auth()).json()
        assert all(p["isActive"] for p in detail["participants"])
        assert [r["status"] for r in detail["rounds"]] == ["closed", "open"]

    def test_advance_with_open_round(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)
        response = client.post(f"/api/games/{game_id}/advance", headers=auth())
        assert response.status_code == 400
        assert "still open" in response.json()["error"]

    def test_reopen_and_correct(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)
        round_id, _ = close_round(client, game_id, {"Bob": "loss"})

        response = client.post(f"/api/rounds/{round_id}/reopen", headers=auth())
        assert response.json() == {"roundNumber": 1, "reinstated": ["Bob"]}

        picks = client.get(f"/api/rounds/{round_id}/picks", headers=auth()).json()
        assert all(p["result"] is None for p in picks)
        assert client.post(f"/api/rounds/{round_id}/reopen", headers=auth()).status_code == 400

    def test_declare_winner(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)
        close_round(client, game_id, {"Carol": "loss"})

        response = client.post(f"/api/games/{game_id}/declare-winner", headers=auth())
        assert response.json() == {"success": True, "winners": ["Alice", "Bob"]}

    def test_add_participant(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)

        response = client.post(
            f"/api/games/{game_id}/participants", json={"playerName": "Dan"}, headers=auth()
        )
        assert response.json()["isActive"] is True
        duplicate = client.post(
            f"/api/games/{game_id}/participants", json={"playerName": "Dan"}, headers=auth()
        )
        assert duplicate.status_code == 409

    def test_pick_endpoints(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)
        round_id = current_round_id(client, game_id)
        teams = client.get(
            f"/api/rounds/{round_id}/available-teams",
            params={"playerName": "Alice"},
            headers=auth(),
        ).json()
        assert [t["name"] for t in teams] == ["Arsenal", "Chelsea", "Spurs", "Villa"]

        response = client.post(
            f"/api/rounds/{round_id}/picks",
            json={"playerName": "Alice", "teamId": teams[0]["id"]},
            headers=auth(),
        )
        pick_id = response.json()["id"]
        again = client.post(
            f"/api/rounds/{round_id}/picks",
            json={"playerName": "Alice", "teamId": teams[1]["id"]},
            headers=auth(),
        )
        assert again.status_code == 409

        available = client.get(f"/api/rounds/{round_id}/available-players", headers=auth()).json()
        assert available == ["Bob", "Carol"]

        response = client.put(f"/api/picks/{pick_id}", json={"teamId": teams[2]["id"]}, headers=auth())
        assert response.json() == {"success": True}
        assert client.delete(f"/api/picks/{pick_id}", headers=auth()).json() == {"success": True}

    def test_delete_game(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)
        assert client.delete(f"/api/games/{game_id}", headers=auth()).status_code == 204
        assert client.get(f"/api/games/{game_id}", headers=auth()).status_code == 404


class TestErrors:
    def test_other_manager_gets_not_found(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)

        response = client.post(f"/api/games/{game_id}/advance", headers=auth(OTHER_MANAGER))
        assert response.status_code == 404
        assert response.json() == {"error": "Game not found"}

    def test_malformed_json_is_bad_request(self, client):
        response = client.post(
            "/api/games",
            content="{not json",
            headers={**auth(), "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "error" in response.json()

    def test_missing_field_is_bad_request(self, client):
        response = client.post("/api/games", json={"name": "No group"}, headers=auth())
        assert response.status_code == 400
        assert "groupId" in response.json()["error"]

    def test_invalid_result_is_bad_request(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)
        round_id = current_round_id(client, game_id)
        client.post(f"/api/rounds/{round_id}/auto-assign", headers=auth())
        pick = client.get(f"/api/rounds/{round_id}/picks", headers=auth()).json()[0]

        response = client.post(
            f"/api/rounds/{round_id}/results",
            json={"results": [{"pickId": pick["id"], "result": "abandoned"}]},
            headers=auth(),
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("players", [[], ["", "  "]])
    def test_game_needs_players(self, client, players):
        group_id = create_group_with_teams(client)
        response = client.post(
            "/api/games",
            json={"name": "Empty", "groupId": group_id, "playerNames": players},
            headers=auth(),
        )
        assert response.status_code == 400
        assert response.json() == {"error": "At least one player is required"}


class TestReport:
    def test_public_report(self, client):
        group_id = create_group_with_teams(client)
        game_id = create_game(client, group_id)
        close_round(client, game_id, {"Carol": "loss"})
        client.post(f"/api/games/{game_id}/advance", headers=auth())

        report = client.get(f"/api/report/{game_id}").json()

        assert report["gameName"] == "Office LMS"
        assert report["status"] == "active"
        first, second = report["rounds"]
        assert first["status"] == "closed"
        assert first["activePlayers"] == 3
        assert first["pickCount"] == 3
        assert first["teamSummary"] == [{"teamName": "Arsenal", "count": 3}]
        assert first["resultCounts"] == {"win": 2, "loss": 1}
        assert first["eliminatedList"] == ["Carol"]
        assert second["status"] == "open"
        assert second["activePlayers"] == 2
        assert second["eliminatedList"] == []

    def test_unknown_game(self, client):
        response = client.get("/api/report/404")
        assert response.status_code == 404
        assert response.json() == {"error": "Game not found"}
