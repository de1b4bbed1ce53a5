"""
Evaluation harness for the NL→DSL macro pipeline.

Components:
- evaluate.py: Main evaluation script with label, DSL, output, execution and latency metrics
- metrics.py: Per-label precision/recall/F1, confusion table and coverage
"""

from .evaluate import run_evaluation

__all__ = ['run_evaluation']
