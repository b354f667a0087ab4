from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from blockfall.game import Action, GameConfig, GameSession, HeldInput, ScoringRules, SessionState
from blockfall.visualization.palette import color_for_value


# Discrete action index -> engine action
AGENT_ACTIONS: Tuple[Action, ...] = (
    Action.NONE,
    Action.MOVE_LEFT,
    Action.MOVE_RIGHT,
    Action.ROTATE_CW,
    Action.ROTATE_CCW,
    Action.SOFT_DROP,
    Action.HARD_DROP,
    Action.HOLD,
)

NUM_KINDS = 7


class BlockfallEnv(gym.Env):
    """One engine frame per step, with the agent acting as the input source.

    Left/right actions are taps: the direction is held for that frame only,
    which triggers the immediate initial shift and never reaches DAS.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 60}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        render_mode: Optional[str] = None,
        frame_ms: float = 1000.0 / 60.0,
        max_episode_steps: int = 10000,
    ) -> None:
        super().__init__()
        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"unsupported render_mode {render_mode!r}")
        self.game = GameSession(config, rules)
        self.render_mode = render_mode
        self.frame_ms = float(frame_ms)
        self.max_episode_steps = int(max_episode_steps)

        cfg = self.game.config
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=-NUM_KINDS, high=NUM_KINDS, shape=(cfg.visible_rows, cfg.width), dtype=np.int8),
                "hold": spaces.Discrete(NUM_KINDS + 1),
                "queue": spaces.Box(low=0, high=NUM_KINDS, shape=(cfg.preview_length,), dtype=np.int8),
            }
        )
        self.action_space = spaces.Discrete(len(AGENT_ACTIONS))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        snap = self.game.snapshot()
        queue = np.zeros((self.game.config.preview_length,), dtype=np.int8)
        for i, kind in enumerate(snap.next_queue):
            queue[i] = int(kind)
        obs: Dict[str, Any] = {
            "grid": self.game.get_state().astype(np.int8),
            "hold": int(snap.hold) if snap.hold is not None else 0,
            "queue": queue,
        }
        return obs

    def _get_info(self) -> Dict[str, Any]:
        stats = self.game.stats
        info: Dict[str, Any] = {
            "score": stats.score,
            "lines": stats.lines,
            "level": stats.level,
            "max_height": self.game.grid.get_max_height(),
            "holes": self.game.grid.count_holes(),
            "steps": self._steps,
        }
        return info

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        if not self.action_space.contains(action):
            raise ValueError(f"invalid action {action!r}")
        engine_action = AGENT_ACTIONS[int(action)]
        score_before = self.game.stats.score

        held = HeldInput(
            left=engine_action == Action.MOVE_LEFT,
            right=engine_action == Action.MOVE_RIGHT,
        )
        actions = () if engine_action in (Action.MOVE_LEFT, Action.MOVE_RIGHT, Action.NONE) else (engine_action,)
        self.game.advance(self.frame_ms, actions, held)
        # Release so the next tap registers as a fresh press.
        self.game.shift.reset()

        self._steps += 1
        reward = float(self.game.stats.score - score_before)
        terminated = self.game.state is SessionState.GAME_OVER
        truncated = self._steps >= self.max_episode_steps
        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        grid = self.game.get_state()
        cell = 12
        h, w = grid.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color_for_value(int(grid[y, x]))
        return img

    def close(self) -> None:
        pass
