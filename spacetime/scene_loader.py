#!/usr/bin/env python3
"""
Scene file loading and building.

A scene file is JSON (scenes/*.json) or TOML (scenes/*.toml). Building a
scene validates every path, expands every object into a pixel grid, collects
the clocks and picks the followed path. Any problem is a SceneError and the
tick loop must not start.

Schema
======
JSON:
{
  "name": "Human-friendly scene name",
  "description": "Optional description",
  "c": 30.0,                  # speed of light, units per tick (required)
  "time_scale": 1.0,          # optional, observer ticks per real second
  "tick_step": null,          # optional, fixed observer ticks per frame
  "clock_scale": 10.0,        # optional, rest-frame ticks per clock turn
  "resolution": 20,           # optional, grid radius R -> (2R+1)^2 samples
  "objects": [
    {
      "name": "ship",         # optional
      "follow": true,         # exactly one object must carry it
      "clock": "repeat",      # optional, "once" | "repeat"
      "color": "red",         # red, blue, green, yellow, violet, cyan, white
      "path": [[0, 0, 0], [10, 0, 5], [10, 0, 10]]
    }
  ]
}

TOML scenes use [[object]] tables; "object" is accepted as an alias of
"objects" in both formats.
"""
import json
import logging
import math
import os
import tomllib
from typing import Any, Dict, List, Optional, Tuple

from .constants import DEFAULT_CLOCK_SCALE, DEFAULT_GRID_RADIUS, DEFAULT_TIME_SCALE, PALETTE
from .data_models import Clock, ClockMode, PixelObject, Scene
from .errors import FollowMarkerError, SceneError
from .paths import validate_path, validate_sample_paths
from .pixelate import pixelate

logger = logging.getLogger(__name__)

SCENES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "scenes")
SCENE_EXTENSIONS = (".json", ".toml")


def _read_document(path: str) -> Dict[str, Any]:
  try:
    if path.lower().endswith(".toml"):
      with open(path, "rb") as f:
        data = tomllib.load(f)
    else:
      with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
  except OSError as e:
    raise SceneError(f"Cannot read scene file {path}: {e}") from e
  except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
    raise SceneError(f"Scene file {path} is not valid: {e}") from e
  if not isinstance(data, dict):
    raise SceneError(f"Scene file {path} must contain an object at the top level")
  return data


def _coerce_color(name: Any, label: str) -> int:
  if not isinstance(name, str) or name.lower() not in PALETTE:
    raise SceneError(f"{label}: unknown color {name!r}; choose one of {', '.join(sorted(PALETTE))}")
  return PALETTE[name.lower()]


def _coerce_clock_mode(tag: Any, label: str) -> ClockMode:
  try:
    return ClockMode(str(tag).lower())
  except ValueError:
    raise SceneError(f"{label}: unknown clock mode {tag!r}; expected 'once' or 'repeat'")


def _positive_float(data: Dict[str, Any], key: str, default: Optional[float]) -> Optional[float]:
  raw = data.get(key, default)
  if raw is None:
    return None
  try:
    value = float(raw)
  except (TypeError, ValueError):
    raise SceneError(f"'{key}' must be a number, got {raw!r}")
  if not math.isfinite(value) or value <= 0:
    raise SceneError(f"'{key}' must be a positive number, got {raw!r}")
  return value


def _is_follow_marker(value: Any) -> bool:
  if isinstance(value, str):
    return value.strip().lower() not in ("", "false", "no", "0")
  return bool(value)


def list_scenes(scenes_dir: str = SCENES_DIR) -> List[Tuple[str, str]]:
  """Return list of (file_name, display_name) for available scenes."""
  items: List[Tuple[str, str]] = []
  if not os.path.isdir(scenes_dir):
    return items
  for fn in sorted(os.listdir(scenes_dir)):
    if not fn.lower().endswith(SCENE_EXTENSIONS):
      continue
    try:
      data = _read_document(os.path.join(scenes_dir, fn))
    except SceneError as e:
      logger.warning("Skipping scene %s: %s", fn, e)
      continue
    display = data.get("name") or os.path.splitext(fn)[0]
    items.append((fn, display))
  return items


def resolve_scene_path(name: str, scenes_dir: str = SCENES_DIR) -> str:
  """Accept either a path to a scene file or a file name inside scenes/."""
  if os.path.isfile(name):
    return name
  candidate = os.path.join(scenes_dir, name)
  if os.path.isfile(candidate):
    return candidate
  raise SceneError(f"Scene file not found: {name}")


def build_scene(data: Dict[str, Any], display_name: str = "") -> Scene:
  """
  Validate a parsed scene document and derive everything the tick loop needs.

  Raises SceneError (or a subclass) on any invalid input.
  """
  c = _positive_float(data, "c", None)
  if c is None:
    raise SceneError("Scene is missing the speed of light 'c'")
  time_scale = _positive_float(data, "time_scale", DEFAULT_TIME_SCALE)
  tick_step = _positive_float(data, "tick_step", None)
  clock_scale = _positive_float(data, "clock_scale", DEFAULT_CLOCK_SCALE)

  radius = data.get("resolution", DEFAULT_GRID_RADIUS)
  if isinstance(radius, bool) or not isinstance(radius, int) or radius < 0:
    raise SceneError(f"'resolution' must be a non-negative integer, got {radius!r}")

  objects = data.get("objects", data.get("object"))
  if not isinstance(objects, list) or not objects:
    raise SceneError("Scene must define a non-empty 'objects' list")

  names: List[str] = []
  paths = []
  pixel_objects: List[PixelObject] = []
  clocks: List[Clock] = []
  followed: List[int] = []

  for index, obj in enumerate(objects):
    if not isinstance(obj, dict):
      raise SceneError(f"object {index} must be a table/object, got {type(obj).__name__}")
    name = str(obj.get("name") or f"object {index}")
    label = f"object {index} ({name})"

    path = validate_path(obj.get("path", []), c, label)
    color = _coerce_color(obj.get("color"), label)
    if obj.get("clock") is not None:
      clocks.append(Clock(mode=_coerce_clock_mode(obj["clock"], label), path=path, object_index=index))
    if _is_follow_marker(obj.get("follow")):
      followed.append(index)

    pobj = pixelate(path, color, c, radius=radius, name=name)
    validate_sample_paths(pobj.paths, c, label)

    names.append(name)
    paths.append(path)
    pixel_objects.append(pobj)

  if len(followed) != 1:
    raise FollowMarkerError(
      f"Exactly one object must be marked 'follow', found {len(followed)}"
      + (f" (objects {followed})" if followed else "")
    )
  follow_index = followed[0]

  scene = Scene(
    c=c,
    follow_path=paths[follow_index],
    follow_index=follow_index,
    pixel_objects=pixel_objects,
    clocks=clocks,
    paths=paths,
    names=names,
    time_scale=time_scale,
    tick_step=tick_step,
    clock_scale=clock_scale,
    display_name=display_name or str(data.get("name") or ""),
  )
  logger.info(
    "Built scene '%s': c=%g, %d object(s), %d sample(s), %d clock(s), following '%s'",
    scene.display_name, c, len(pixel_objects), sum(p.sample_count for p in pixel_objects),
    len(clocks), names[follow_index],
  )
  return scene


def load_scene(name: str, scenes_dir: str = SCENES_DIR) -> Scene:
  """Read and build a scene by path or by file name inside scenes/."""
  path = resolve_scene_path(name, scenes_dir)
  data = _read_document(path)
  display = data.get("name") or os.path.splitext(os.path.basename(path))[0]
  logger.info("Loading scene from: %s", path)
  return build_scene(data, display)
