"""Level generator: LLM layout generation with recovery, repair and validation."""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from .api import LAYOUT_SCHEMA_HINT, LayoutJSONParser, build_system_message, build_user_message
from .errors import EmptyLayoutError
from .pruner import prune_to_catalog_caps
from .repair import GridPathRepairer
from .schema import GameTypeProfile, LayoutData
from .validator import ValidationResult, validate_layout
from .world import fit_to_arena

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one generation request."""
    prompt: str
    layout: Optional[LayoutData]
    validation: ValidationResult
    raw_response: str = ""

    @property
    def ok(self) -> bool:
        return self.layout is not None and self.validation.ok

    def to_dict(self) -> dict:
        return {
            "prompt": self.prompt,
            "layout": self.layout.to_dict() if self.layout is not None else None,
            "ok": self.validation.ok,
            "message": self.validation.message,
        }


class LevelGenerator:
    """
    Main level generator combining an LLM client with layout post-processing.

    Usage:
        generator = LevelGenerator(client, profile)
        result = await generator.generate("a small desert arena with two spawners")
    """

    def __init__(self, client, profile: GameTypeProfile, schema_json: str = LAYOUT_SCHEMA_HINT,
                 system_prompt_hint: str = ""):
        """
        Args:
            client: Object with ``async complete(system_prompt, user_prompt) -> str``
            profile: Game-type profile (catalog, coordinate space, grid/world rules)
            schema_json: JSON schema text embedded in the system prompt
            system_prompt_hint: Extra instruction line for the system prompt
        """
        self.client = client
        self.profile = profile
        self.system_prompt = build_system_message(schema_json, system_prompt_hint)

    async def generate(self, prompt: str) -> GenerationResult:
        """Request a layout for one prompt and post-process it."""
        user_prompt = build_user_message(prompt, self.profile)
        try:
            raw = await self.client.complete(self.system_prompt, user_prompt)
        except Exception as e:
            logger.error(f"Generation request failed: {e}")
            return GenerationResult(prompt, None, ValidationResult.failed(f"Request failed: {e}"))

        return self.process_response(raw, prompt)

    async def generate_batch(self, prompts: List[str]) -> List[GenerationResult]:
        """Run several prompts concurrently; results keep prompt order."""
        return list(await asyncio.gather(*(self.generate(p) for p in prompts)))

    def process_response(self, raw: str, prompt: str = "") -> GenerationResult:
        """Recover, repair, cap and validate an already fetched response."""
        try:
            layout = LayoutJSONParser.parse(raw)
        except EmptyLayoutError as e:
            logger.warning(f"Failed to recover layout: {e}")
            return GenerationResult(prompt, None, ValidationResult.failed(str(e)), raw)

        # Unknown ids are kept so validation can report them
        if self.profile.is_grid:
            GridPathRepairer(self.profile.grid, self.profile.catalog).repair(layout)
        else:
            fit_to_arena(layout, self.profile.world)
        prune_to_catalog_caps(layout, self.profile)

        validation = validate_layout(layout, self.profile)
        if validation.ok:
            logger.info(f"Generated layout '{layout.game_type}': {len(layout.objects)} objects")
        else:
            logger.warning(f"Layout failed validation: {validation.message}")
        return GenerationResult(prompt, layout, validation, raw)
