#!/usr/bin/env python3
"""
Generate the golden macro JSONL from seed instructions.

Loads seeds.csv (instruction, category), synthesizes each instruction with
the rule-based synthesizer, runs the DSL in a fresh interpreter and records
the DSL and its output.

Usage:
    python scripts/make_dataset.py --seeds data/seeds.csv --out data/macro_golden.jsonl
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

import pandas as pd

# Add parent directory for imports
sys.path.append(str(Path(__file__).parent.parent))

from neurodsl.config import Config
from neurodsl.dsl.engine import analyze
from neurodsl.macro.baseline import MacroSynthesizer
from neurodsl.runtime.interpreter import Interpreter


def make_dataset(seeds_path: str, output_path: str, config: Optional[Config] = None):
    """Generate dataset JSONL from seeds CSV."""
    config = config or Config()
    synthesizer = MacroSynthesizer(config)

    seeds_df = pd.read_csv(seeds_path)
    print(f"Loaded {len(seeds_df)} seed instructions from {seeds_path}")

    results = []
    for idx, row in seeds_df.iterrows():
        instruction = row['instruction']
        print(f"Processing {idx+1}/{len(seeds_df)}: {instruction[:50]}...")

        synthesis = synthesizer.synthesize(instruction)
        analysis = analyze(synthesis.dsl, Interpreter(config, synthesizer=synthesizer))

        entry = {
            'instruction': instruction,
            'category': row['category'],
            'dsl': synthesis.dsl,
            'output': analysis.output if analysis.ok else None,
        }
        if not analysis.ok:
            print(f"Error running '{instruction}': {analysis.output}")
            entry['error'] = analysis.output
        results.append(entry)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        for result in results:
            f.write(json.dumps(result, ensure_ascii=False) + '\n')

    print(f"✅ Generated dataset: {output_path}")
    print(f"   Total entries: {len(results)}")
    print(f"   Errors: {sum(1 for r in results if 'error' in r)}")

    print("\n📊 Sample Results:")
    for i, result in enumerate(results[:3]):
        print(f"{i+1}. {result['instruction']}")
        print(f"   DSL: {result['dsl']!r}")
        print(f"   Output: {result['output']!r}")
        print()

    return results


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Generate golden macro dataset from seed instructions")
    parser.add_argument("--seeds", default="data/seeds.csv",
                        help="Seeds CSV file (default: data/seeds.csv)")
    parser.add_argument("--out", default="data/macro_golden.jsonl",
                        help="Output JSONL file (default: data/macro_golden.jsonl)")
    args = parser.parse_args()

    if not Path(args.seeds).exists():
        print(f"❌ Seeds file not found: {args.seeds}")
        raise SystemExit(1)

    make_dataset(args.seeds, args.out)


if __name__ == "__main__":
    main()
