#!/usr/bin/env python3
"""
Demo script for the EvalLab workbench.

This script walks through the evaluation workflow against the local fixture:
1. Load projects, models and evaluations
2. Filter the evaluation list
3. Select an evaluation and show its results, logs and judge scores
4. Run the selected evaluation
5. Compare several models and export the results

Usage:
    python scripts/demo.py [--fixture PATH] [--models M1 M2 ...] [--export FILE]
"""

import argparse
import asyncio
import random
from pathlib import Path

from evallab.adapters.fixture_adapter import FixtureDataSource
from evallab.logging_setup import configure_logging
from evallab.models.evaluation import EvaluationFilter
from evallab.workbench import Workbench


def format_duration(ms: float | None) -> str:
    if not ms:
        return "N/A"
    if ms < 1000:
        return f"{ms:.0f}ms"
    return f"{ms / 1000:.2f}s"


def format_metric_name(metric: str) -> str:
    return " ".join(word.capitalize() for word in metric.split("_"))


async def run_demo(args: argparse.Namespace) -> None:
    source = FixtureDataSource(
        file_path=args.fixture,
        run_delay_seconds=args.delay,
        comparison_delay_seconds=args.delay,
        rng=random.Random(args.seed),
    )
    workbench = Workbench(source)
    await workbench.start()

    print("=" * 60)
    print("EvalLab Workbench Demo")
    print("=" * 60)
    print(f"\nProjects: {len(workbench.catalog.projects)}")
    print(f"Models:   {len(workbench.catalog.models)}")
    print(f"Evaluations: {len(workbench.repository)}")

    # Filter
    filters = EvaluationFilter(status=args.status)
    evaluations = workbench.selection.apply_filters(filters)
    print(f"\n📋 Evaluations (status={args.status or 'any'}):")
    for evaluation in evaluations:
        project = workbench.catalog.project_name(evaluation.project_id)
        print(f"  {evaluation.id}  {evaluation.name:<28} {evaluation.model:<16} "
              f"{evaluation.status.value:<8} {project}")

    if not evaluations:
        print("  (none)")
        await workbench.close()
        return

    # Select
    view = await workbench.select(evaluations[0].id)
    print(f"\n🔍 Selected {view.evaluation.id}: {view.evaluation.name}")
    print(f"  Duration: {format_duration(view.evaluation.duration_ms)}")
    print(f"  Tests: {view.passed_count}/{len(view.test_results)} passed")
    for result in view.test_results:
        print(f"    [{result.status.value}] {result.test_name}: {result.message}")
    if view.judge_score:
        print(f"  Judge overall: {view.judge_score.overall:.1f}/10")
        for metric, value in view.judge_score.metrics.items():
            print(f"    {format_metric_name(metric)}: {value:.1f}")
    if view.logs:
        print("  Logs:")
        for line in view.logs.splitlines():
            print(f"    {line}")

    # Run
    print("\n▶️  Running selected evaluation...")
    evaluation = await workbench.run_selected(
        view.evaluation.prompt or "You are a helpful assistant.",
        view.evaluation.user_input or "Hello!",
    )
    print(f"  Status: {evaluation.status.value} in {format_duration(evaluation.duration_ms)}")

    # Compare
    model_ids = args.models or [m.id for m in workbench.catalog.models[:3]]
    print(f"\n⚖️  Comparing {', '.join(model_ids)}...")
    report = await workbench.compare(model_ids, evaluation.prompt, evaluation.user_input)
    print(f"\n{'Model':<20} {'Score':>7} {'Latency':>9} {'Cost':>9} {'Pass':>6}")
    print("-" * 55)
    for result in report.results:
        marker = " 🏆" if result.model_id == report.winner_id else ""
        print(f"{result.model_name:<20} {result.overall_score:>6.1f} "
              f"{format_duration(result.latency_ms):>9} ${result.cost:>8.4f} "
              f"{result.pass_rate:>5.0f}%{marker}")

    if args.export:
        path = Path(args.export)
        content = report.to_json() if path.suffix == ".json" else report.to_csv()
        path.write_text(content, encoding="utf-8")
        print(f"\n💾 Exported comparison to {path}")

    await workbench.close()


def main():
    parser = argparse.ArgumentParser(description="EvalLab workbench demo")
    parser.add_argument("--fixture", default="data/mock-data.json", help="Fixture JSON path")
    parser.add_argument("--status", default="", help="Filter evaluations by status")
    parser.add_argument("--models", nargs="*", help="Model IDs to compare (2-5)")
    parser.add_argument("--delay", type=float, default=0.5, help="Mock run delay in seconds")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for mock scores")
    parser.add_argument("--export", help="Write comparison results to a .csv or .json file")
    args = parser.parse_args()

    configure_logging("WARNING", json_logs=False)
    asyncio.run(run_demo(args))


if __name__ == "__main__":
    main()
