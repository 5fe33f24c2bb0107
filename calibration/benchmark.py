"""
Benchmark Runner — Precision/Recall/F1 per Rule

Runs the calibration corpus through the line classifier and compares the
matched rule against the human label. Produces:

  1. Per-rule precision, recall, F1
  2. Exact-match accuracy over all samples
  3. Misclassified samples for manual review
  4. Model observations from the bundled verse packs that the engine
     penalizes (these should never be penalized)

This is the tool that tells you if the rule set is drifting.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from observation_engine.classifier import classify_line
from observation_engine.levels import ALL_PACKS
from observation_engine.registry import (
    REGISTRY_VERSION,
    RuleId,
    RuleRegistry,
    default_registry,
)
from calibration.corpus_parser import DEFAULT_LABEL, parse_all_corpora


@dataclass
class RuleMetrics:
    """Precision/recall metrics for a single rule."""
    rule_id: str
    true_positives: int = 0   # Engine matched, human labeled
    false_positives: int = 0  # Engine matched, human labeled otherwise
    false_negatives: int = 0  # Human labeled, engine matched something else

    @property
    def precision(self) -> float:
        denom = self.true_positives + self.false_positives
        return self.true_positives / denom if denom > 0 else 0.0

    @property
    def recall(self) -> float:
        denom = self.true_positives + self.false_negatives
        return self.true_positives / denom if denom > 0 else 0.0

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        return 2 * p * r / (p + r) if (p + r) > 0 else 0.0

    @property
    def support(self) -> int:
        """Number of human-labeled samples for this rule."""
        return self.true_positives + self.false_negatives


@dataclass
class BenchmarkResult:
    """Full benchmark output."""
    registry_version: str
    total_samples: int
    correct_samples: int
    rule_metrics: dict[str, RuleMetrics]
    accuracy: float
    macro_precision: float
    macro_recall: float
    macro_f1: float
    misclassified: list[dict]
    expected_observations_checked: int
    penalized_expected: list[dict]


def _label_of(result) -> str:
    return result.matched_rule or DEFAULT_LABEL


def check_expected_observations(registry: RuleRegistry = default_registry) -> tuple[int, list[dict]]:
    """Run every bundled model observation; return (count, penalized entries)."""
    checked = 0
    penalized = []
    for pack in ALL_PACKS:
        for level in pack.levels:
            for observation in level.expected_observations:
                checked += 1
                result = classify_line(observation, registry)
                if not result.valid:
                    penalized.append({
                        "pack_id": pack.id,
                        "level_id": level.id,
                        "text": observation,
                        "matched_rule": result.matched_rule,
                    })
    return checked, penalized


def run_benchmark(
    corpus_dir: str | Path = "calibration/corpus",
    registry: RuleRegistry = default_registry,
) -> BenchmarkResult:
    """
    Run the full calibration benchmark.

    Raises:
        ValueError: if the corpus directory holds no samples.
    """
    samples = parse_all_corpora(corpus_dir)
    if not samples:
        raise ValueError(f"No samples found in {corpus_dir}")

    labels = [r.value for r in RuleId] + [DEFAULT_LABEL]
    metrics = {label: RuleMetrics(rule_id=label) for label in labels}
    misclassified = []
    correct = 0

    for sample in samples:
        result = classify_line(sample.text, registry)
        predicted = _label_of(result)
        sample.engine_result = result.to_dict()

        if predicted == sample.expected:
            correct += 1
            metrics[predicted].true_positives += 1
            continue

        metrics[predicted].false_positives += 1
        metrics[sample.expected].false_negatives += 1
        misclassified.append({
            "text": sample.text[:200],
            "expected": sample.expected,
            "predicted": predicted,
            "source": sample.source,
            "notes": sample.notes,
        })

    active = [m for m in metrics.values() if m.support > 0]
    if active:
        macro_precision = sum(m.precision for m in active) / len(active)
        macro_recall = sum(m.recall for m in active) / len(active)
        macro_f1 = sum(m.f1 for m in active) / len(active)
    else:
        macro_precision = macro_recall = macro_f1 = 0.0

    checked, penalized = check_expected_observations(registry)

    return BenchmarkResult(
        registry_version=REGISTRY_VERSION,
        total_samples=len(samples),
        correct_samples=correct,
        rule_metrics=metrics,
        accuracy=round(correct / len(samples), 4),
        macro_precision=round(macro_precision, 4),
        macro_recall=round(macro_recall, 4),
        macro_f1=round(macro_f1, 4),
        misclassified=misclassified,
        expected_observations_checked=checked,
        penalized_expected=penalized,
    )


def format_report(result: BenchmarkResult) -> str:
    """Format benchmark results as a human-readable report."""
    lines = [
        "=" * 60,
        "OBSERVATION ENGINE CALIBRATION REPORT",
        f"Registry version: {result.registry_version}",
        "=" * 60,
        "",
        f"Samples: {result.total_samples} ({result.correct_samples} correct)",
        "",
        "--- OVERALL METRICS ---",
        f"Accuracy:  {result.accuracy:.1%}",
        f"Precision: {result.macro_precision:.1%}",
        f"Recall:    {result.macro_recall:.1%}",
        f"F1 Score:  {result.macro_f1:.1%}",
        "",
        "--- PER-RULE BREAKDOWN ---",
        f"{'Rule':<24} {'Prec':>6} {'Recall':>6} {'F1':>6} {'TP':>4} {'FP':>4} {'FN':>4}",
        "-" * 60,
    ]

    for m in sorted(result.rule_metrics.values(), key=lambda m: (-m.support, -m.f1)):
        if m.support > 0 or m.false_positives > 0:
            lines.append(
                f"{m.rule_id:<24} {m.precision:>5.0%} {m.recall:>6.0%} "
                f"{m.f1:>5.0%} {m.true_positives:>4} {m.false_positives:>4} "
                f"{m.false_negatives:>4}"
            )

    if result.misclassified:
        lines.extend(["", "--- MISCLASSIFIED ---"])
        for item in result.misclassified[:20]:
            lines.append(
                f"  [{item['expected']} -> {item['predicted']}] {item['text'][:80]}"
            )
            if item.get("notes"):
                lines.append(f"    Notes: {item['notes']}")

    lines.extend([
        "",
        "--- MODEL OBSERVATIONS ---",
        f"Checked: {result.expected_observations_checked}, "
        f"penalized: {len(result.penalized_expected)}",
    ])
    for item in result.penalized_expected:
        lines.append(
            f"  [{item['pack_id']}/{item['level_id']} {item['matched_rule']}] {item['text']}"
        )

    lines.extend(["", "=" * 60])
    return "\n".join(lines)


def save_report(result: BenchmarkResult, output_dir: str | Path = "calibration/reports"):
    """Save benchmark results as both human-readable report and JSON."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    report_path = output_dir / "calibration_report.txt"
    report_path.write_text(format_report(result), encoding="utf-8")

    json_data = {
        "registry_version": result.registry_version,
        "total_samples": result.total_samples,
        "correct_samples": result.correct_samples,
        "overall": {
            "accuracy": result.accuracy,
            "precision": result.macro_precision,
            "recall": result.macro_recall,
            "f1": result.macro_f1,
        },
        "per_rule": {
            rid: {
                "precision": m.precision,
                "recall": m.recall,
                "f1": m.f1,
                "tp": m.true_positives,
                "fp": m.false_positives,
                "fn": m.false_negatives,
                "support": m.support,
            }
            for rid, m in result.rule_metrics.items()
            if m.support > 0 or m.false_positives > 0
        },
        "misclassified": result.misclassified,
        "expected_observations_checked": result.expected_observations_checked,
        "penalized_expected": result.penalized_expected,
    }
    json_path = output_dir / "calibration_report.json"
    json_path.write_text(json.dumps(json_data, indent=2), encoding="utf-8")

    return report_path, json_path
