"""
config_loader.py — YAML loaders for the collapse simulator.

Loads collapse configuration YAML and converts it to the immutable
CollapseParams the simulator consumes, and loads world YAML files into a
WorldModel.

Keys may be written nested or dotted; both are flattened into the
``collapse.*`` key space before lookup, so these are equivalent:

    collapse:
      wood:
        p-destroyed: 0.05

    collapse.wood.p-destroyed: 0.05

Every key except ``collapse.seed`` and ``collapse.<code>.p-none`` is
required; a missing or malformed key raises ConfigError at load time.

Public API:
    flatten_config(raw)                 -> {dotted key: value}
    load_config(path)                   -> flat config dict
    build_collapse_params(flat, seed)   -> CollapseParams
    load_collapse_params(path, seed)    -> CollapseParams
    build_world(raw)                    -> WorldModel
    load_world(path)                    -> WorldModel
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .core.damage import BuildingCode
from .core.params import CodeProbabilities, CollapseParams, ConfigError, GaussianParams
from .core.world import Blockade, Building, Entity, Road, WorldModel, edges_from_points

logger = logging.getLogger("collapse_engine.config_loader")

CONFIG_PREFIX = "collapse."
DESTROYED_SUFFIX = ".p-destroyed"
SEVERE_SUFFIX = ".p-severe"
MODERATE_SUFFIX = ".p-moderate"
SLIGHT_SUFFIX = ".p-slight"
NONE_SUFFIX = ".p-none"

BLOCK_KEY = "collapse.create-road-blockages"
FLOOR_HEIGHT_KEY = "collapse.floor-height"
WALL_COLLAPSE_EXTENT_MIN_KEY = "collapse.wall-extent.min"
WALL_COLLAPSE_EXTENT_MAX_KEY = "collapse.wall-extent.max"
SEED_KEY = "collapse.seed"

_DEGREES = ("slight", "moderate", "severe", "destroyed")


class WorldFormatError(ValueError):
    """Raised when a world file contains a malformed entity record."""


# ─────────────────────────────────────────────────────────────────────────── #
# YAML loading                                                                 #
# ─────────────────────────────────────────────────────────────────────────── #

def _read_yaml(path: str) -> Any:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p.resolve()}")
    with open(p, "r") as f:
        return yaml.safe_load(f)


def flatten_config(raw: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings into dotted keys."""
    flat: Dict[str, Any] = {}
    for key, value in raw.items():
        full = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(flatten_config(value, prefix=f"{full}."))
        else:
            flat[full] = value
    return flat


def load_config(path: str) -> Dict[str, Any]:
    """Load a collapse config YAML file and return it flattened."""
    raw = _read_yaml(path)
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected mapping at {path}, got {type(raw).__name__}")
    return flatten_config(raw)


# ─────────────────────────────────────────────────────────────────────────── #
# Flat config → CollapseParams                                                 #
# ─────────────────────────────────────────────────────────────────────────── #

def _get_float(flat: Dict[str, Any], key: str) -> float:
    if key not in flat:
        raise ConfigError(f"Missing required config key '{key}'")
    value = flat[key]
    if isinstance(value, bool):
        raise ConfigError(f"Config key '{key}' must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Config key '{key}' must be a number, got {value!r}") from None


def _get_bool(flat: Dict[str, Any], key: str) -> bool:
    if key not in flat:
        raise ConfigError(f"Missing required config key '{key}'")
    value = flat[key]
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "yes", "on", "false", "no", "off"):
        return value.lower() in ("true", "yes", "on")
    raise ConfigError(f"Config key '{key}' must be a boolean, got {value!r}")


def _code_probabilities(flat: Dict[str, Any], code: BuildingCode) -> CodeProbabilities:
    s = CONFIG_PREFIX + code.config_name
    p_none = flat.get(s + NONE_SUFFIX)
    return CodeProbabilities(
        p_destroyed=_get_float(flat, s + DESTROYED_SUFFIX),
        p_severe=_get_float(flat, s + SEVERE_SUFFIX),
        p_moderate=_get_float(flat, s + MODERATE_SUFFIX),
        p_slight=_get_float(flat, s + SLIGHT_SUFFIX),
        p_none=None if p_none is None else float(p_none),
    )


def build_collapse_params(flat: Dict[str, Any], seed: Optional[int] = None) -> CollapseParams:
    """
    Convert a flat collapse config to a CollapseParams instance.

    Args:
        flat: Dotted-key config (see flatten_config).
        seed: Overrides ``collapse.seed`` when given.

    Returns:
        Validated CollapseParams.

    Raises:
        ConfigError: On any missing, malformed or inconsistent value.
    """
    gaussians = {
        name: GaussianParams(
            mean=_get_float(flat, f"{CONFIG_PREFIX}{name}.mean"),
            sd=_get_float(flat, f"{CONFIG_PREFIX}{name}.sd"),
        )
        for name in _DEGREES
    }
    if seed is None and flat.get(SEED_KEY) is not None:
        seed = int(flat[SEED_KEY])

    known = {CONFIG_PREFIX + code.config_name for code in BuildingCode}
    for key in flat:
        if key.startswith(CONFIG_PREFIX) and key.endswith(DESTROYED_SUFFIX):
            section = key[: -len(DESTROYED_SUFFIX)]
            if section not in known:
                logger.warning(f"Ignoring collapse probabilities for unknown building code '{section}'")

    return CollapseParams(
        seed=seed,
        probabilities={code: _code_probabilities(flat, code) for code in BuildingCode},
        create_road_blockages=_get_bool(flat, BLOCK_KEY),
        floor_height_m=_get_float(flat, FLOOR_HEIGHT_KEY),
        wall_extent_min=_get_float(flat, WALL_COLLAPSE_EXTENT_MIN_KEY),
        wall_extent_max=_get_float(flat, WALL_COLLAPSE_EXTENT_MAX_KEY),
        **gaussians,
    )


def load_collapse_params(path: str, seed: Optional[int] = None) -> CollapseParams:
    """Load and validate a collapse config YAML file."""
    return build_collapse_params(load_config(path), seed=seed)


# ─────────────────────────────────────────────────────────────────────────── #
# World YAML → WorldModel                                                      #
# ─────────────────────────────────────────────────────────────────────────── #

def _points(record: Dict[str, Any], kind: str) -> List[tuple]:
    pts = record.get("apexes")
    if not isinstance(pts, list) or len(pts) < 3:
        raise WorldFormatError(f"{kind} {record.get('id')} needs at least 3 apexes")
    try:
        return [(int(p[0]), int(p[1])) for p in pts]
    except (TypeError, ValueError, IndexError):
        raise WorldFormatError(f"{kind} {record.get('id')} has malformed apexes: {pts!r}") from None


def _building_code(value: Any) -> Optional[int]:
    if value is None or isinstance(value, int):
        return value
    try:
        return int(BuildingCode[str(value).upper()])
    except KeyError:
        raise WorldFormatError(f"Unknown building code {value!r}") from None


def _record_id(record: Dict[str, Any], kind: str) -> int:
    if "id" not in record:
        raise WorldFormatError(f"{kind} record without an id: {record!r}")
    return int(record["id"])


def build_world(raw: Dict[str, Any]) -> WorldModel:
    """
    Build a WorldModel from a parsed world mapping.

    Expected layout (coordinates in millimetres):

        buildings:
          - {id: 1, floors: 2, code: wood, apexes: [[x, y], ...],
             brokenness: 0, fieryness: 0}
        roads:
          - {id: 10, apexes: [[x, y], ...], blockades: []}
        blockades:
          - {id: 20, position: 10, apexes: [x0, y0, x1, y1, ...],
             repair_cost: 3, x: 0, y: 0}
    """
    entities: List[Entity] = []
    for rec in raw.get("buildings", []) or []:
        entities.append(Building(
            id=_record_id(rec, "Building"),
            edges=edges_from_points(_points(rec, "Building")),
            floors=int(rec.get("floors", 1)),
            building_code=_building_code(rec.get("code")),
            brokenness=rec.get("brokenness"),
            fieryness=rec.get("fieryness"),
        ))
    for rec in raw.get("roads", []) or []:
        blockades = rec.get("blockades")
        entities.append(Road(
            id=_record_id(rec, "Road"),
            edges=edges_from_points(_points(rec, "Road")),
            blockades=None if blockades is None else [int(b) for b in blockades],
        ))
    for rec in raw.get("blockades", []) or []:
        apexes = tuple(int(v) for v in rec.get("apexes", []))
        if len(apexes) < 6 or len(apexes) % 2:
            raise WorldFormatError(f"Blockade {rec.get('id')} has malformed apexes")
        entities.append(Blockade(
            id=_record_id(rec, "Blockade"),
            position=int(rec.get("position", -1)),
            apexes=apexes,
            repair_cost=int(rec.get("repair_cost", 0)),
            x=int(rec.get("x", 0)),
            y=int(rec.get("y", 0)),
        ))
    try:
        return WorldModel(entities)
    except ValueError as exc:
        raise WorldFormatError(str(exc)) from None


def load_world(path: str) -> WorldModel:
    """Load a world YAML file."""
    raw = _read_yaml(path)
    if not isinstance(raw, dict):
        raise WorldFormatError(f"Expected mapping at {path}, got {type(raw).__name__}")
    return build_world(raw)
