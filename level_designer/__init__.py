"""
Level Designer Module

Recovers level layouts from noisy LLM output and repairs them into valid,
catalog-bounded layouts.

Design:
    Raw text → sanitize → balanced extraction / truncation repair → strict or tolerant parse
    → grid path repair (grid profiles) or arena fit (world profiles) → catalog caps → validation

Components:
    - schema: Data structures (LayoutData, Catalog, GridSpec, GameTypeProfile)
    - sanitizer / extractor / parsers: Tolerant JSON recovery
    - roles: Role classification of catalog ids
    - repair: Grid path repair engine
    - pruner: Group-and-cap reducer
    - validator: Layout validation against a profile
    - generator: LLM generation pipeline
"""

from .schema import (
    LayoutObject,
    LayoutData,
    CatalogEntry,
    Catalog,
    GridSpec,
    GridOriginMode,
    CoordinateSpace,
    WorldSettings,
    GameTypeProfile,
)
from .errors import (
    LayoutParseError,
    MalformedLayoutError,
    EmptyLayoutError,
    LayoutValidationError,
    ConfigError,
)
from .sanitizer import sanitize
from .extractor import extract_first_layout_like, repair_truncated
from .parsers import parse_strict, parse_tolerant
from .roles import Role, classify_role
from .pruner import prune, prune_to_catalog_caps
from .repair import GridPathRepairer, repair_grid_layout
from .validator import ValidationResult, validate_layout, ensure_valid
from .world import fit_to_arena
from .api import LayoutJSONParser, parse_layout
from .generator import LevelGenerator, GenerationResult
from .config import AIConfig, load_ai_config, load_profile

__all__ = [
    # Schema
    "LayoutObject",
    "LayoutData",
    "CatalogEntry",
    "Catalog",
    "GridSpec",
    "GridOriginMode",
    "CoordinateSpace",
    "WorldSettings",
    "GameTypeProfile",
    # Errors
    "LayoutParseError",
    "MalformedLayoutError",
    "EmptyLayoutError",
    "LayoutValidationError",
    "ConfigError",
    # Recovery
    "sanitize",
    "extract_first_layout_like",
    "repair_truncated",
    "parse_strict",
    "parse_tolerant",
    "LayoutJSONParser",
    "parse_layout",
    # Repair
    "Role",
    "classify_role",
    "prune",
    "prune_to_catalog_caps",
    "GridPathRepairer",
    "repair_grid_layout",
    "fit_to_arena",
    # Validation
    "ValidationResult",
    "validate_layout",
    "ensure_valid",
    # Generation
    "LevelGenerator",
    "GenerationResult",
    "AIConfig",
    "load_ai_config",
    "load_profile",
]
