from __future__ import annotations

import logging

import pytest

from stepwise.config import PongConfig, SchedulerConfig, Settings, clear_settings_cache, get_settings
from stepwise.main import main, parse_args, run_headless


def small_settings() -> Settings:
    return Settings(
        scheduler=SchedulerConfig(force_gc=False),
        pong=PongConfig(width=20, height=8, paddle_height=2, points_to_win=1, max_frames=3000),
    )


def test_parse_args() -> None:
    args = parse_args(["--headless", "--frames", "50", "--seed", "3", "--debug", "--history"])
    assert args.headless
    assert args.frames == 50
    assert args.seed == 3
    assert args.debug
    assert args.history
    assert args.config is None


@pytest.mark.asyncio
async def test_headless_game_reports_success() -> None:
    assert await run_headless(small_settings(), seed=5) == 0


@pytest.mark.asyncio
async def test_headless_game_prints_state_history(capsys) -> None:
    assert await run_headless(small_settings(), seed=5, show_history=True) == 0

    out = capsys.readouterr().out
    assert '"state": "TERMINATED"' in out
    assert '"identity": "\'pong\'"' in out


def test_frame_limit_leaves_cached_settings_alone(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        assert main(["--headless", "--frames", "5", "--seed", "1"]) == 0
        assert get_settings().pong.max_frames == PongConfig().max_frames
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
        clear_settings_cache()
