"""Shared fixtures for CLI tests."""

import pytest

from kanbanwave.config import ENV_VAR

BOARD_FILE = """
boards:
  - id: b1
    title: Sprint
    lists:
      - id: l1
        title: To Do
        cards:
          - {id: c1, title: First card, writer: {id: w1, name: Ada}, due_date: 2024-05-03}
          - {id: c2, title: Second card}
          - {id: c3, title: Third card}
      - id: l2
        title: Done
        cards:
          - {id: c4, title: Fourth card}
  - id: b2
    title: Ideas
    lists:
      - {id: l3, title: Someday}
"""


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every CLI test away from any real config file."""
    monkeypatch.delenv(ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def board_file(tmp_path):
    """Write a board file with two boards (b1: 2 lists, 4 cards; b2: 1 empty list)."""
    path = tmp_path / "board.yaml"
    path.write_text(BOARD_FILE)
    return str(path)


@pytest.fixture
def events_file(tmp_path):
    def write(text):
        path = tmp_path / "events.yaml"
        path.write_text(text)
        return str(path)

    return write
