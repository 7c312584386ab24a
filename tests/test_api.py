"""
Testing API via TestClient
- Trick: replace engine.generate_secret's random source so the secret is predictable.
- Tool: pytest's "monkeypatch" fixture does that for just one test at a time.
"""

import threading

import whatscolor.main as main
import whatscolor.round_machine as round_machine
from whatscolor.engine import generate_secret

from conftest import fixed_randbelow

FIRST_FOUR = ["red", "green", "orange", "blue"]
WRONG = ["yellow", "purple", "cyan", "red"]


def pin_secret(monkeypatch):
    """Every generated secret becomes red, green, orange, blue."""
    monkeypatch.setattr(
        round_machine,
        "generate_secret",
        lambda randbelow=None: generate_secret(fixed_randbelow([0, 0, 0, 0])),
    )


def enter(client, sid, colors):
    for index, color in enumerate(colors):
        r = client.put(f"/sessions/{sid}/slots/{index}", json={"color": color})
        assert r.status_code == 200


def new_session(client, **body):
    r = client.post("/sessions", json=body)
    assert r.status_code == 200
    return r.json()["session_id"]


def test_solo_win_then_next_level(client, monkeypatch):
    """
    Flow:
    1) Create a solo session and start it.
    2) Incomplete guess -> 400, nothing recorded.
    3) Wrong guess -> feedback.
    4) Winning guess -> won, secret revealed, level saved.
    5) A tick starts the next level.
    """
    pin_secret(monkeypatch)
    sid = new_session(client, variant="solo", difficulty="normal", mode="aggregate")

    r = client.post(f"/sessions/{sid}/start")
    assert r.status_code == 200
    state = r.json()
    assert state["status"] == "in_progress"
    assert state["timer_active"] is True
    assert state["secret"] is None

    client.put(f"/sessions/{sid}/slots/0", json={"color": "red"})
    r = client.post(f"/sessions/{sid}/guess")
    assert r.status_code == 400
    assert r.json()["detail"] == "FILL ALL SLOTS"

    enter(client, sid, WRONG)
    r = client.post(f"/sessions/{sid}/guess")
    assert r.status_code == 200
    body = r.json()
    assert body["outcome"] == "accepted"
    assert body["feedback"] == ["misplaced", "wrong", "wrong", "wrong"]
    assert body["state"]["attempts_left"] == 6

    enter(client, sid, FIRST_FOUR)
    r = client.post(f"/sessions/{sid}/guess")
    body = r.json()
    assert body["won"] is True
    assert body["state"]["secret"] == FIRST_FOUR
    assert body["state"]["advance_pending"] is True

    assert client.get("/levels").json()["levels"]["normal"] == 2

    r = client.post(f"/sessions/{sid}/tick")
    assert r.json()["is_over"] is False
    state = client.get(f"/sessions/{sid}").json()
    assert state["level"] == 2
    assert state["attempts"] == []


def test_duplicate_colors_rejected(client, monkeypatch):
    pin_secret(monkeypatch)
    sid = new_session(client)
    client.post(f"/sessions/{sid}/start")

    enter(client, sid, ["red", "red", "blue", "yellow"])
    r = client.post(f"/sessions/{sid}/guess")
    assert r.status_code == 400
    assert r.json()["detail"] == "USE UNIQUE COLORS"
    assert client.get(f"/sessions/{sid}").json()["attempts"] == []


def test_dual_authoring_and_positional_hints(client):
    sid = new_session(client, variant="dual", difficulty="easy", mode="positional")

    r = client.put(f"/sessions/{sid}/time-limit", json={"seconds": 5})
    assert r.json()["time_remaining"] == 10

    # finalize before the code is complete -> 409
    client.post(f"/sessions/{sid}/secret", json={"color": "red"})
    assert client.post(f"/sessions/{sid}/secret/finalize").status_code == 409

    for color in ["blue", "green", "yellow"]:
        client.post(f"/sessions/{sid}/secret", json={"color": color})
    r = client.post(f"/sessions/{sid}/secret", json={"color": "cyan"})
    assert r.json() == {
        "accepted": False,
        "secret_draft": ["red", "blue", "green", "yellow"],
        "complete": True,
    }

    r = client.post(f"/sessions/{sid}/secret/finalize")
    assert r.status_code == 200
    assert r.json()["max_attempts"] == 10

    enter(client, sid, ["purple", "cyan", "orange", "red"])
    r = client.post(f"/sessions/{sid}/guess")
    assert r.json()["feedback"] == ["wrong", "wrong", "wrong", "misplaced"]


def test_timeout_through_ticks(client, monkeypatch):
    pin_secret(monkeypatch)
    sid = new_session(client, variant="dual")
    client.put(f"/sessions/{sid}/time-limit", json={"seconds": 10})
    client.post(f"/sessions/{sid}/secret/abandon")

    for _ in range(10):
        r = client.post(f"/sessions/{sid}/tick")
    body = r.json()
    assert body["time_remaining"] == 0
    assert body["is_over"] is True
    assert body["status"] == "timed_out"
    assert body["message"] == "TIME'S UP"


def test_slot_navigation_and_cycle(client, monkeypatch):
    pin_secret(monkeypatch)
    sid = new_session(client)
    client.post(f"/sessions/{sid}/start")

    r = client.post(f"/sessions/{sid}/slots/2/cycle", params={"forward": "false"})
    assert r.json()["current_guess"] == [None, None, "cyan", None]
    assert r.json()["active_index"] == 2

    r = client.post(f"/sessions/{sid}/active", json={"direction": "forward"})
    assert r.json()["active_index"] == 3
    r = client.post(f"/sessions/{sid}/active", json={"direction": "forward"})
    assert r.json()["active_index"] == 3

    r = client.post(f"/sessions/{sid}/slots/swap", json={"source": 2, "target": 0})
    assert r.json()["current_guess"] == ["cyan", None, None, None]


def test_invalid_inputs(client):
    sid = new_session(client)
    client.post(f"/sessions/{sid}/start")

    assert client.put(f"/sessions/{sid}/slots/4", json={"color": "red"}).status_code == 422
    assert client.put(f"/sessions/{sid}/slots/0", json={"color": "black"}).status_code == 422
    assert client.post("/sessions", json={"difficulty": "insane"}).status_code == 422
    assert client.get("/sessions/does-not-exist").status_code == 404


def test_settings_change_restarts_round(client, monkeypatch):
    pin_secret(monkeypatch)
    sid = new_session(client)
    client.post(f"/sessions/{sid}/start")
    enter(client, sid, WRONG)
    client.post(f"/sessions/{sid}/guess")

    r = client.put(f"/sessions/{sid}/settings", json={"difficulty": "hard", "mode": "positional"})
    state = r.json()
    assert state["difficulty"] == "hard"
    assert state["mode"] == "positional"
    assert state["max_attempts"] == 5
    assert state["attempts"] == []


def test_pause_resume_restart_delete(client):
    sid = new_session(client)
    client.post(f"/sessions/{sid}/start")

    assert client.post(f"/sessions/{sid}/pause").json()["timer_active"] is False
    assert client.post(f"/sessions/{sid}/resume").json()["timer_active"] is True

    state = client.post(f"/sessions/{sid}/restart").json()
    assert state["status"] == "setup"
    assert state["started"] is False

    assert client.delete(f"/sessions/{sid}").status_code == 200
    assert client.get(f"/sessions/{sid}").status_code == 404


def test_levels_reset(client, level_store):
    level_store.save_level("easy", 9)
    assert client.get("/levels").json()["levels"]["easy"] == 9
    assert client.post("/levels/reset").status_code == 200
    assert client.get("/levels").json()["levels"]["easy"] == 1


def test_guess_before_start_is_ignored(client):
    sid = new_session(client)

    enter(client, sid, FIRST_FOUR)
    r = client.post(f"/sessions/{sid}/guess")
    assert r.status_code == 200
    body = r.json()
    assert body["outcome"] == "not_started"
    assert body["won"] is False
    assert body["state"]["attempts"] == []
    assert body["state"]["current_guess"] == [None, None, None, None]


def test_guess_after_restart_is_ignored(client, monkeypatch):
    pin_secret(monkeypatch)
    sid = new_session(client)
    client.post(f"/sessions/{sid}/start")
    enter(client, sid, WRONG)
    client.post(f"/sessions/{sid}/guess")

    state = client.post(f"/sessions/{sid}/restart").json()
    assert state["attempts"] == []
    assert state["secret"] is None

    enter(client, sid, FIRST_FOUR)
    body = client.post(f"/sessions/{sid}/guess").json()
    assert body["outcome"] == "not_started"
    assert body["state"]["attempts"] == []
    assert body["state"]["level"] == 1
    assert body["state"]["advance_pending"] is False


def lock_held_by_another_thread(lock) -> bool:
    acquired = []

    def attempt():
        got = lock.acquire(blocking=False)
        if got:
            lock.release()
        acquired.append(got)

    worker = threading.Thread(target=attempt)
    worker.start()
    worker.join()
    return not acquired[0]


def test_board_is_built_while_the_session_is_locked(client, monkeypatch):
    sessions = main.get_sessions()
    build_state = main.to_session_state
    locked = []

    def checked(session_id, controller):
        locked.append(lock_held_by_another_thread(sessions.lock))
        return build_state(session_id, controller)

    monkeypatch.setattr(main, "to_session_state", checked)
    pin_secret(monkeypatch)

    sid = new_session(client)
    client.post(f"/sessions/{sid}/start")
    enter(client, sid, WRONG)
    client.post(f"/sessions/{sid}/guess")
    client.get(f"/sessions/{sid}")

    assert len(locked) == 8
    assert all(locked)
