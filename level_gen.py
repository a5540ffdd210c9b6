#!/usr/bin/env python3
"""
Level Generator Script

Generate layouts from prompts (LLM), or recover layouts from saved raw responses.

Usage:
    python level_gen.py --profile configs/td_profile.yaml --config configs/ai.yaml \\
        --prompt "A winding tower defense map with six tower slots"
    python level_gen.py --profile configs/td_profile.yaml --input responses/*.txt
"""

import asyncio
import argparse
import json
import logging
from pathlib import Path
from datetime import datetime

from tqdm import tqdm

from level_designer import LevelGenerator, load_ai_config, load_profile
from level_designer.api import create_client, FakeClient


async def generate(generator: LevelGenerator, prompts: list):
    """Generate one layout per prompt."""
    return await generator.generate_batch(prompts)


def recover(generator: LevelGenerator, input_files: list):
    """Post-process saved responses without calling a model."""
    results = []
    for path in tqdm(input_files, desc="Recovering layouts"):
        raw = Path(path).read_text(encoding="utf-8")
        results.append(generator.process_response(raw, prompt=str(path)))
    return results


def layout_record(result, profile) -> dict:
    """Result dict; grid layouts also get each object's world-space cell center."""
    record = result.to_dict()
    if profile.is_grid and result.layout is not None:
        grid = profile.grid
        record["worldPositions"] = [
            dict(zip("xyz", grid.cell_to_world(grid.cell_of(o.position), o.position[1])))
            for o in result.layout.objects
        ]
    return record


def main():
    parser = argparse.ArgumentParser(description="Generate and repair level layouts")
    parser.add_argument("--profile", type=str, required=True, help="YAML game-type profile")
    parser.add_argument("--config", type=str, default=None, help="YAML AI provider config")
    parser.add_argument("--prompt", type=str, action="append", default=[], help="Generation prompt (repeatable)")
    parser.add_argument("--input", type=str, nargs="*", default=[], help="Raw response files to recover")
    parser.add_argument("--output", type=str, default="data/levels/outputs", help="Output directory")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    if not args.prompt and not args.input:
        parser.error("either --prompt or --input is required")

    profile = load_profile(args.profile)
    config = load_ai_config(args.config)
    client = create_client(config) if args.prompt else FakeClient()
    generator = LevelGenerator(client, profile, system_prompt_hint=config.system_prompt_hint)

    print(f"Profile: {profile.game_type_id} ({profile.coordinate_space.value}), catalog: {len(profile.catalog)} entries")

    if args.prompt:
        print(f"Provider: {config.provider}, model: {config.model}, prompts: {len(args.prompt)}")
        results = asyncio.run(generate(generator, args.prompt))
    else:
        results = recover(generator, args.input)

    # Save
    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    with open(output_dir / "layouts.json", 'w') as f:
        json.dump([layout_record(r, profile) for r in results], f, indent=2)

    num_ok = sum(1 for r in results if r.ok)
    with open(output_dir / "summary.json", 'w') as f:
        json.dump({
            "generated_at": datetime.now().isoformat(),
            "game_type": profile.game_type_id,
            "num_requests": len(results),
            "num_valid": num_ok,
            "provider": config.provider if args.prompt else "offline",
            "client_stats": client.get_stats(),
        }, f, indent=2)

    print(f"Done! {num_ok}/{len(results)} valid layouts -> {output_dir}")


if __name__ == "__main__":
    main()
