#!/usr/bin/env python3
"""
Evaluation harness for the NL→DSL macro pipeline.

Computes label accuracy, DSL exact match, output match, execution success,
consistency and latency metrics with per-category breakdowns.

Usage:
    python -m neurodsl.eval_harness.evaluate --test data/macro_golden.jsonl
                                             --out out/metrics.json
                                             --pred out/predictions.csv
                                             --model rules
"""
import argparse
import json
import statistics
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from neurodsl.classifier.base import Classifier
from neurodsl.classifier.factory import load_classifier
from neurodsl.config import Config
from neurodsl.dsl.engine import analyze
from neurodsl.macro.baseline import MacroSynthesizer
from neurodsl.runtime.interpreter import Interpreter

from .metrics import compute_enhanced_metrics

RULES_MODEL = "rules"


def load_model(model_name: str, config: Config) -> Optional[Classifier]:
    """Load the macro classifier to evaluate; ``rules`` means none."""
    if model_name == RULES_MODEL:
        return None
    path = config.resolve_model_id(model_name) or model_name
    return load_classifier(path, config)


def _quantile_90(latencies: List[float]) -> float:
    if len(latencies) < 2:
        return latencies[0]
    return statistics.quantiles(latencies, n=10)[8]  # 90th percentile


def evaluate_single_example(
    example: Dict[str, Any],
    synthesizer: MacroSynthesizer,
    classifier: Optional[Classifier],
    config: Config,
    repeat: int = 1,
) -> Dict[str, Any]:
    """
    Synthesize one instruction, run the DSL in a fresh interpreter and
    compare against the gold fields present in ``example``.
    """
    instruction = example['instruction']
    gold_dsl = example.get('dsl')
    gold_output = example.get('output')

    start = time.time()
    synthesis = synthesizer.synthesize(instruction, classifier)
    synthesis_time = time.time() - start

    result = {
        'instruction': instruction,
        'category': example.get('category', 'Unknown'),
        'pred_label': synthesis.resolved_label,
        'model_label': synthesis.label,
        'model_score': synthesis.score,
        'gold_dsl': gold_dsl,
        'pred_dsl': synthesis.dsl,
        'gold_output': gold_output,
        'pred_output': None,
        'ok_label': synthesis.resolved_label == example.get('category'),
        'ok_dsl': gold_dsl is not None and synthesis.dsl.strip() == gold_dsl.strip(),
        'ok_output': False,
        'ok_execution': False,
        'consistent': True,
        'error': None,
    }

    # Repeated predictions must give the same DSL.
    for _ in range(repeat - 1):
        if synthesizer.synthesize(instruction, classifier).dsl != synthesis.dsl:
            result['consistent'] = False
            break

    interpreter = Interpreter(config, synthesizer=synthesizer)
    start = time.time()
    analysis = analyze(synthesis.dsl, interpreter)
    execute_time = time.time() - start

    result['total_latency_ms'] = (synthesis_time + execute_time) * 1000
    result['ok_execution'] = analysis.ok
    if analysis.ok:
        result['pred_output'] = analysis.output
        if gold_output is not None:
            result['ok_output'] = analysis.output.strip() == gold_output.strip()
    else:
        result['error'] = analysis.output

    return result


def compute_metrics(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Compute overall and per-category metrics from evaluation results."""
    total = len(results)

    def rate(rows: List[Dict[str, Any]], key: str) -> float:
        return sum(1 for r in rows if r[key]) / len(rows) if rows else 0.0

    with_dsl = [r for r in results if r['gold_dsl'] is not None]
    with_output = [r for r in results if r['gold_output'] is not None]

    latencies = [r['total_latency_ms'] for r in results]
    if latencies:
        latency_p50 = statistics.median(latencies)
        latency_p90 = _quantile_90(latencies)
        latency_mean = statistics.mean(latencies)
        latency_max = max(latencies)
    else:
        latency_p50 = latency_p90 = latency_mean = latency_max = 0.0

    category_metrics = {}
    for category in sorted(set(r['category'] for r in results)):
        rows = [r for r in results if r['category'] == category]
        category_metrics[category] = {
            'total': len(rows),
            'label_accuracy': rate(rows, 'ok_label'),
            'execution_success': rate(rows, 'ok_execution'),
            'output_match': rate([r for r in rows if r['gold_output'] is not None], 'ok_output'),
        }

    return {
        'overall': {
            'total_examples': total,
            'label_accuracy': rate(results, 'ok_label'),
            'dsl_exact_match': rate(with_dsl, 'ok_dsl'),
            'output_match': rate(with_output, 'ok_output'),
            'execution_success': rate(results, 'ok_execution'),
            'consistency_dsl_rate': rate(results, 'consistent'),
            'latency_p50_ms': latency_p50,
            'latency_p90_ms': latency_p90,
            'latency_mean_ms': latency_mean,
            'latency_max_ms': latency_max,
        },
        'by_category': category_metrics,
    }


def load_examples(test_jsonl_path: str) -> List[Dict[str, Any]]:
    examples = []
    with open(test_jsonl_path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line:
                examples.append(json.loads(line))
    return examples


def run_evaluation(test_jsonl_path: str, model_name: str,
                   output_metrics_path: str, output_predictions_path: str,
                   repeat: int = 1, config: Optional[Config] = None) -> Dict[str, Any]:
    """Run complete evaluation and save results."""
    config = config or Config.from_env()

    print("🧪 Evaluation Harness")
    print(f"Test data: {test_jsonl_path}")
    print(f"Model: {model_name}")
    print()

    classifier = load_model(model_name, config)
    synthesizer = MacroSynthesizer(config)
    examples = load_examples(test_jsonl_path)

    results = []
    for i, example in enumerate(examples, 1):
        print(f"Evaluating {i}/{len(examples)}: {example['instruction'][:50]}...")
        results.append(evaluate_single_example(example, synthesizer, classifier, config, repeat=repeat))

    metrics = compute_metrics(results)
    metrics.update(compute_enhanced_metrics(results))
    metrics['model'] = model_name
    metrics['repeat'] = repeat

    Path(output_metrics_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_metrics_path, 'w', encoding='utf-8') as f:
        json.dump(metrics, f, indent=2, ensure_ascii=False)
    print(f"📊 Saved metrics: {output_metrics_path}")

    Path(output_predictions_path).parent.mkdir(parents=True, exist_ok=True)
    predictions_df = pd.DataFrame([
        {
            'instruction': r['instruction'],
            'category': r['category'],
            'pred_label': r['pred_label'],
            'model_label': r['model_label'],
            'model_score': r['model_score'],
            'shape': r['shape'],
            'gold_dsl': r['gold_dsl'],
            'pred_dsl': r['pred_dsl'],
            'gold_output': r['gold_output'],
            'pred_output': r['pred_output'],
            'ok_label': r['ok_label'],
            'ok_dsl': r['ok_dsl'],
            'ok_output': r['ok_output'],
            'ok_execution': r['ok_execution'],
            'consistent': r['consistent'],
            'latency_ms': r['total_latency_ms'],
            'error': r['error'],
        }
        for r in results
    ])
    predictions_df.to_csv(output_predictions_path, index=False, encoding='utf-8')
    print(f"📝 Saved predictions: {output_predictions_path}")

    print("\n" + "=" * 60)
    print("📈 EVALUATION SUMMARY")
    print("=" * 60)

    overall = metrics['overall']
    print(f"Total examples: {overall['total_examples']}")
    print(f"Label accuracy: {100 * overall['label_accuracy']:.1f}%")
    print(f"DSL exact match: {100 * overall['dsl_exact_match']:.1f}%")
    print(f"Output match: {100 * overall['output_match']:.1f}%")
    print(f"Execution success: {100 * overall['execution_success']:.1f}%")
    if repeat > 1:
        print(f"Consistency: {100 * overall['consistency_dsl_rate']:.1f}%")
    print()
    print(f"Latency p50: {overall['latency_p50_ms']:.1f}ms")
    print(f"Latency p90: {overall['latency_p90_ms']:.1f}ms")
    print(f"Latency max: {overall['latency_max_ms']:.1f}ms")

    print("\n📊 BY CATEGORY:")
    for category, data in metrics['by_category'].items():
        print(f"  {category}: {100 * data['label_accuracy']:.1f}% label accuracy ({data['total']} examples)")

    print("\n✅ Evaluation complete!")
    return metrics


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Evaluate the NL→DSL macro pipeline")
    parser.add_argument("--test", required=True,
                        help="Test JSONL file path (e.g., data/macro_golden.jsonl)")
    parser.add_argument("--out", default="out/metrics.json",
                        help="Output metrics JSON path")
    parser.add_argument("--pred", default="out/predictions.csv",
                        help="Output predictions CSV path")
    parser.add_argument("--model", default=RULES_MODEL,
                        help="Macro classifier: 'rules', a model id, a path or openai:intent_macro (default: rules)")
    parser.add_argument("--repeat", type=int, default=1,
                        help="Repeat predictions per example to measure consistency (default: 1)")

    args = parser.parse_args()

    if not Path(args.test).exists():
        print(f"❌ Test file not found: {args.test}")
        sys.exit(1)

    run_evaluation(args.test, args.model, args.out, args.pred, repeat=args.repeat)


if __name__ == "__main__":
    main()
