# SPDX-License-Identifier: AGPL-3.0-only
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
try:
    import tomllib
except ImportError:
    import tomli as tomllib


DEFAULT_CONFIG_NAME = "pagediag.toml"


@dataclass(frozen=True)
class ContrastConfig:
    min_ratio_aa: float = 4.5
    min_ratio_aaa: float = 7.0
    large_text_min_aa: float = 3.0
    large_text_min_aaa: float = 4.5
    # 18pt regular / 14pt bold expressed in CSS pixels
    large_text_px: float = 24.0
    large_bold_text_px: float = 18.5
    bold_weight: int = 700
    critical_ratio: float = 3.0
    high_ratio: float = 4.0


@dataclass(frozen=True)
class TouchTargetConfig:
    # WCAG 2.1 SC 2.5.5
    min_size: float = 44.0
    critical_size: float = 32.0
    include_hidden: bool = False


@dataclass(frozen=True)
class CollisionConfig:
    min_spacing: float = 8.0
    high_distance: float = 4.0


@dataclass(frozen=True)
class ReadabilityConfig:
    min_font_size: float = 16.0
    high_font_size: float = 12.0


@dataclass(frozen=True)
class ResponsiveConfig:
    small_fixed_px: float = 300.0
    large_fixed_px: float = 1000.0
    overflow_tolerance_px: float = 10.0
    layout_min_width_px: float = 100.0
    flex_nowrap_max_children: int = 3
    inline_block_max_children: int = 2


@dataclass(frozen=True)
class ScoringConfig:
    mobile_baseline: int = 100
    mobile_pass_threshold: int = 70
    touch_critical_penalty: int = 15
    touch_high_penalty: int = 10
    touch_other_penalty: int = 5
    readability_penalty: int = 5
    collision_penalty: int = 8
    viewport_penalty: int = 20
    responsive_baseline: int = 70
    responsive_pass_threshold: int = 60
    unit_bonus_max: int = 15
    unit_bonus_min_prevalence: float = 50.0
    pattern_bonus: int = 5
    pattern_bonus_max: int = 15
    width_critical_penalty: int = 10
    width_high_penalty: int = 5
    width_other_penalty: int = 2
    layout_penalty: int = 3
    overflow_penalty: int = 5


_SECTIONS = {
    "contrast": ContrastConfig,
    "touch_target": TouchTargetConfig,
    "collision": CollisionConfig,
    "readability": ReadabilityConfig,
    "responsive": ResponsiveConfig,
    "scoring": ScoringConfig,
}


def _build_section(name: str, cls: type, values: Any) -> Any:
    if not isinstance(values, Mapping):
        raise ValueError(f"[{name}] must be a table, got {type(values).__name__}")
    known = {f.name: f for f in fields(cls)}
    kwargs: Dict[str, Any] = {}
    for key, raw in values.items():
        if key not in known:
            raise ValueError(f"Unknown key {key!r} in [{name}] (expected one of {', '.join(sorted(known))})")
        default = getattr(cls(), key)
        if isinstance(default, bool):
            if not isinstance(raw, bool):
                raise ValueError(f"[{name}].{key} must be a boolean")
            kwargs[key] = raw
        elif isinstance(default, int):
            if isinstance(raw, bool) or not isinstance(raw, int):
                raise ValueError(f"[{name}].{key} must be an integer")
            kwargs[key] = raw
        else:
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise ValueError(f"[{name}].{key} must be a number")
            kwargs[key] = float(raw)
    return cls(**kwargs)


@dataclass(frozen=True)
class EngineConfig:
    contrast: ContrastConfig = field(default_factory=ContrastConfig)
    touch_target: TouchTargetConfig = field(default_factory=TouchTargetConfig)
    collision: CollisionConfig = field(default_factory=CollisionConfig)
    readability: ReadabilityConfig = field(default_factory=ReadabilityConfig)
    responsive: ResponsiveConfig = field(default_factory=ResponsiveConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EngineConfig":
        sections: Dict[str, Any] = {}
        for name, values in data.items():
            section_cls = _SECTIONS.get(name)
            if section_cls is None:
                raise ValueError(f"Unknown config section [{name}] (expected one of {', '.join(_SECTIONS)})")
            sections[name] = _build_section(name, section_cls, values)
        return cls(**sections)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "EngineConfig":
        """Load configuration from pagediag.toml.

        Without an explicit path the current directory is searched; a missing file
        there means defaults, while a missing explicit path is an error.
        """
        if path is None:
            path = Path.cwd() / DEFAULT_CONFIG_NAME
            if not path.exists():
                return cls()
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"No config file found at {path}")

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except Exception as e:
            raise ValueError(f"Failed to parse {path}: {e}")

        try:
            return cls.from_mapping(data)
        except ValueError as e:
            raise ValueError(f"{path}: {e}")

    def with_overrides(self, **sections: Any) -> "EngineConfig":
        return replace(self, **sections)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
