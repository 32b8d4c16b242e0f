"""Project-scoped board configuration in .taskboard/config.yaml."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ruamel.yaml import YAML

from taskboard.hierarchy import DEFAULT_MAX_DEPTH
from taskboard.ordering.engine import ORDER_STEP

CONFIG_DIRNAME = ".taskboard"
CONFIG_FILENAME = "config.yaml"


class ConfigError(RuntimeError):
    """Raised when board configuration cannot be read."""


@dataclass(slots=True)
class BoardConfig:
    """Board settings stored inside .taskboard/config.yaml."""

    order_step: int = ORDER_STEP
    show_all_completed: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    def to_dict(self) -> dict[str, object]:
        return {
            "board": {
                "order_step": self.order_step,
                "show_all_completed": self.show_all_completed,
            },
            "hierarchy": {
                "max_depth": self.max_depth,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, object] | None) -> "BoardConfig":
        if not isinstance(data, dict):
            return cls()

        board = data.get("board")
        hierarchy = data.get("hierarchy")
        board = board if isinstance(board, dict) else {}
        hierarchy = hierarchy if isinstance(hierarchy, dict) else {}

        order_step = board.get("order_step")
        show_all = board.get("show_all_completed")
        max_depth = hierarchy.get("max_depth")
        return cls(
            order_step=order_step if _positive_int(order_step) else ORDER_STEP,
            show_all_completed=show_all if isinstance(show_all, bool) else False,
            max_depth=max_depth if _positive_int(max_depth) else DEFAULT_MAX_DEPTH,
        )


def _positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def locate_project_root(start: Path) -> Path | None:
    """Return the nearest directory at or above ``start`` holding .taskboard/."""
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / CONFIG_DIRNAME).is_dir():
            return candidate
    return None


def _config_path(root: Path) -> Path:
    return root / CONFIG_DIRNAME / CONFIG_FILENAME


def load_config(root: Path | None) -> BoardConfig:
    """Load board config from .taskboard/config.yaml; defaults when absent."""
    if root is None:
        return BoardConfig()
    config_path = _config_path(root)
    if not config_path.exists():
        return BoardConfig()

    yaml = YAML()
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle) or {}
    except Exception as exc:
        raise ConfigError(f"Failed to parse {config_path}: {exc}") from exc

    return BoardConfig.from_dict(payload if isinstance(payload, dict) else None)


def save_config(root: Path, config: BoardConfig) -> None:
    """Persist board config, preserving unrelated sections of the file."""
    config_path = _config_path(root)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    yaml = YAML()
    yaml.preserve_quotes = True

    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle) or {}
    else:
        payload = {}

    if not isinstance(payload, dict):
        payload = {}

    payload.update(config.to_dict())

    with config_path.open("w", encoding="utf-8") as handle:
        yaml.dump(payload, handle)
