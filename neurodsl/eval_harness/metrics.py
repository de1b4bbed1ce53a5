#!/usr/bin/env python3
"""
Label metrics for the macro evaluation harness.

Implements per-label precision/recall/F1, a confusion table and
instruction-shape coverage.
"""

import re
from collections import defaultdict
from typing import Any, Dict, List

from neurodsl.macro.text import all_quoted, looks_like_loop


def instruction_shape(instruction: str) -> str:
    """Coarse shape of an instruction, used for coverage reporting."""
    lower = instruction.strip().lower()
    if lower.startswith("if ") or " else " in lower:
        return "conditional"
    if looks_like_loop(instruction):
        return "repetition"
    if re.search(r"\b(?:set|store|create)\b", lower):
        return "assignment"
    if len(all_quoted(instruction)) >= 2:
        return "multi_quoted"
    if all_quoted(instruction):
        return "quoted"
    return "bare"


def compute_label_metrics(gold_labels: List[str], pred_labels: List[str]) -> Dict[str, Any]:
    """Compute label accuracy and per-label precision, recall and F1."""
    total = len(gold_labels)
    correct = sum(1 for g, p in zip(gold_labels, pred_labels) if g == p)
    accuracy = correct / total if total > 0 else 0.0

    per_label = {}
    for label in sorted(set(gold_labels + pred_labels)):
        tp = sum(1 for g, p in zip(gold_labels, pred_labels) if g == label and p == label)
        fp = sum(1 for g, p in zip(gold_labels, pred_labels) if g != label and p == label)
        fn = sum(1 for g, p in zip(gold_labels, pred_labels) if g == label and p != label)

        precision = tp / (tp + fp) if (tp + fp) > 0 else 0.0
        recall = tp / (tp + fn) if (tp + fn) > 0 else 0.0
        f1 = 2 * precision * recall / (precision + recall) if (precision + recall) > 0 else 0.0

        per_label[label] = {
            'precision': precision,
            'recall': recall,
            'f1': f1,
            'support': tp + fn,
        }

    f1s = [m['f1'] for m in per_label.values()]
    return {
        'label_accuracy': accuracy,
        'macro_f1': sum(f1s) / len(f1s) if f1s else 0.0,
        'per_label': per_label,
    }


def confusion_table(gold_labels: List[str], pred_labels: List[str]) -> Dict[str, Dict[str, int]]:
    """gold label -> predicted label -> count."""
    table: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for gold, pred in zip(gold_labels, pred_labels):
        table[gold][pred] += 1
    return {gold: dict(row) for gold, row in table.items()}


def analyze_coverage(instructions: List[str], gold_labels: List[str]) -> Dict[str, Any]:
    """Share of each label and each instruction shape in the dataset."""
    label_counts = defaultdict(int)
    shape_counts = defaultdict(int)

    for instruction, label in zip(instructions, gold_labels):
        label_counts[label] += 1
        shape_counts[instruction_shape(instruction)] += 1

    total = len(instructions)
    if total == 0:
        return {'total_examples': 0, 'label_distribution': {}, 'shape_distribution': {}}
    return {
        'total_examples': total,
        'label_distribution': {k: v / total for k, v in label_counts.items()},
        'shape_distribution': {k: v / total for k, v in shape_counts.items()},
    }


def compute_enhanced_metrics(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Compute all label-level metrics and tag each result with its shape."""
    gold_labels = [r['category'] for r in results]
    pred_labels = [r['pred_label'] for r in results]
    instructions = [r['instruction'] for r in results]

    for result in results:
        result['shape'] = instruction_shape(result['instruction'])

    return {
        'label_metrics': compute_label_metrics(gold_labels, pred_labels),
        'confusion': confusion_table(gold_labels, pred_labels),
        'coverage_metrics': analyze_coverage(instructions, gold_labels),
    }
