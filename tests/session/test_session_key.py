from __future__ import annotations

from pathlib import Path

import pytest

from cnd.core.exceptions import MalformedKeyError
from cnd.core.model import Dev
from cnd.core.session import SessionKey


def test_key_from_dev_formats_three_segments() -> None:
    key = SessionKey.for_dev("team-a", Dev(deployment="api", container="web"))
    assert str(key) == "team-a/api/web"


def test_empty_container_keeps_trailing_separator() -> None:
    assert str(SessionKey.for_dev("team-a", Dev(deployment="api"))) == "team-a/api/"


def test_parse_round_trips() -> None:
    assert SessionKey.parse("team-a/api/web") == SessionKey("team-a", "api", "web")
    assert SessionKey.parse("team-a/api") == SessionKey("team-a", "api", "")


def test_parse_keeps_extra_segments_in_container() -> None:
    assert SessionKey.parse("ns/dep/a/b").container == "a/b"


@pytest.mark.parametrize("raw", ["lonely", "", "/api/web", "ns//web"])
def test_parse_rejects_malformed_keys(raw: str) -> None:
    with pytest.raises(MalformedKeyError):
        SessionKey.parse(raw)


def test_malformed_key_names_state_file() -> None:
    with pytest.raises(MalformedKeyError) as exc:
        SessionKey.parse("lonely", state_path=Path("/home/u/.cnd/.state"))
    assert str(exc.value) == "invalid state file, please remove lonely from /home/u/.cnd/.state manually and try again"


def test_session_folder_ignores_container(tmp_path: Path) -> None:
    assert SessionKey("ns", "api", "web").session_folder(tmp_path) == tmp_path / "ns" / "api"
