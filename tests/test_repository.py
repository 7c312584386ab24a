# tests/test_repository.py
from whatscolor.session import SessionController

from conftest import fixed_randbelow


def test_repository_defaults_to_level_one(level_store):
    assert level_store.get_level("easy") == 1
    assert level_store.all_levels() == {"easy": 1, "normal": 1, "hard": 1}


def test_repository_upserts(level_store):
    level_store.save_level("hard", 3)
    level_store.save_level("hard", 5)
    assert level_store.get_level("hard") == 5
    assert level_store.get_level("normal") == 1

    level_store.reset()
    assert level_store.get_level("hard") == 1


def test_repository_flow(level_store):
    # Winning a solo round persists the new level; a new session picks it up
    controller = SessionController(
        variant="solo",
        difficulty="easy",
        level_store=level_store,
        randbelow=fixed_randbelow([0, 0, 0, 0]),
    )
    controller.start()
    for index, color in enumerate(["red", "green", "orange", "blue"]):
        controller.place_color(color, index)
    assert controller.submit_guess().won

    assert level_store.get_level("easy") == 2
    assert SessionController(difficulty="easy", level_store=level_store).state.level == 2
