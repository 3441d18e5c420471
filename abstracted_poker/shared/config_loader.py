"""
Building a game :class:`Config` from YAML presets.

The Python models in :mod:`abstracted_poker.shared.config` hold every default.
A preset file only lists what it changes, grouped by section (``game``,
``abstraction``, ``system``). A preset can start from another one with
``extends: <file>``, resolved relative to the preset's own directory, so a
limit variant only has to restate its betting fields::

    extends: hunl.yaml
    game:
      betting: limit
      raise_size: [10, 10, 20, 20]
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from abstracted_poker.shared.config import Config, deep_merge_dicts
from abstracted_poker.shared.errors import ConfigFileError

logger = logging.getLogger(__name__)

EXTENDS_KEY = "extends"
OVERRIDE_SEPARATOR = "__"


def load_config(path: str | Path | None = None, **overrides: Any) -> Config:
    """
    Build a validated config from the defaults, a preset and keyword overrides.

    Later layers win: the Python defaults, then each preset of the ``extends``
    chain from the root base down to ``path``, then ``overrides``.

    Args:
        path: Preset file, e.g. ``config/leduc_like.yaml``. None keeps the
            heads-up no-limit hold'em defaults.
        **overrides: Section and field joined by ``__``, e.g.
            ``game__num_players=3`` or ``abstraction__placeholder_buckets=50``.

    Raises:
        FileNotFoundError: If a preset in the chain does not exist.
        ConfigFileError: If a preset is not a mapping or the chain loops.
        pydantic.ValidationError: If the merged values are not a valid game.
    """
    config = Config.default()
    if path is not None:
        config = config.merge(read_preset(Path(path)))
    if overrides:
        config = config.merge(overrides_to_tree(overrides))
    return config


def read_preset(path: Path) -> dict[str, Any]:
    """
    Raw values of ``path`` with its ``extends`` chain merged in.

    Bases are merged first, so each file in the chain overrides the ones it
    extends.
    """
    layers = []
    visited: list[Path] = []
    current: Path | None = path
    while current is not None:
        resolved = current.resolve()
        if resolved in visited:
            chain = " -> ".join(p.name for p in [*visited, resolved])
            raise ConfigFileError(f"Preset extends chain loops: {chain}")
        visited.append(resolved)

        data = _read_mapping(current)
        base = data.pop(EXTENDS_KEY, None)
        layers.append(data)
        if base is None:
            current = None
        elif isinstance(base, str):
            current = current.parent / base
        else:
            raise ConfigFileError(f"{current}: '{EXTENDS_KEY}' must be a file name, got {base!r}")

    logger.debug(f"Preset chain: {' <- '.join(p.name for p in visited)}")
    merged: dict[str, Any] = {}
    for layer in reversed(layers):
        merged = deep_merge_dicts(merged, layer)
    return merged


def _read_mapping(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(f"{path}: expected a mapping of sections, got {type(data).__name__}")
    return data


def overrides_to_tree(overrides: dict[str, Any]) -> dict[str, Any]:
    """
    Nest ``section__field`` keyword overrides.

    ``{"game__stack": [500, 500], "system__log_level": "DEBUG"}`` becomes
    ``{"game": {"stack": [500, 500]}, "system": {"log_level": "DEBUG"}}``.

    Raises:
        ValueError: If one key sets a whole section that another key descends into.
    """
    tree: dict[str, Any] = {}
    for key, value in overrides.items():
        *sections, name = key.split(OVERRIDE_SEPARATOR)
        node = tree
        for section in sections:
            node = node.setdefault(section, {})
            if not isinstance(node, dict):
                raise ValueError(f"Override {key} conflicts with a value set for '{section}'")
        if isinstance(node.get(name), dict):
            raise ValueError(f"Override {key} conflicts with nested overrides of '{name}'")
        node[name] = value
    return tree
