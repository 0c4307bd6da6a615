"""Command line entry-point for training and evaluating the coreference ensemble."""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence, TextIO

import click

from .annotation import load_documents
from .errors import EnsembleError
from .features import FeatureDistribution, FeatureExtractionProcess
from .ml import AblationSearch, EnsembleProcess, InstanceTable
from .predictors import build_predictors
from .utils.config import EnsembleConfig, load_config
from .utils.logging import setup_logging

logger = logging.getLogger("coref_ensemble.cli")


def _fail_on_error(func):
    """Report pipeline errors as a CLI failure instead of a traceback."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except EnsembleError as e:
            raise click.ClickException(str(e)) from e

    return wrapper


def _emit(ctx: click.Context, data: dict[str, Any]) -> None:
    output: TextIO = ctx.obj["output"]
    json.dump(data, output, indent=2)
    output.write("\n")


def _build_process(config: EnsembleConfig, feature_names: Optional[Sequence[str]] = None) -> EnsembleProcess:
    predictors = build_predictors(config.predictors)
    names = feature_names if feature_names is not None else config.feature_extractors
    return EnsembleProcess(config, predictors, FeatureExtractionProcess.from_names(names))


def _load_table(config: EnsembleConfig, table: Optional[Path]) -> InstanceTable:
    return InstanceTable.load(table or config.instance_table_path)


@click.group()
@click.option("--config", "-c", "config_path", type=click.Path(path_type=Path), default=None,
              help="YAML configuration file")
@click.option("--output", "-o", type=click.File("w"), default="-",
              help="Where to write the JSON summary (defaults to stdout)")
@click.option("--set", "-s", "overrides", multiple=True, metavar="KEY=VALUE",
              help="Override a configuration value, e.g. classifier.name=BAYES")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
@_fail_on_error
def main(ctx: click.Context, config_path: Optional[Path], output: TextIO,
         overrides: tuple[str, ...], verbose: bool) -> None:
    """Train and evaluate an ensemble over several coreference predictors."""
    config = load_config(config_path, overrides)
    setup_logging(level="WARNING", verbose=verbose, log_file=config.log_file)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["output"] = output


@main.command()
@click.pass_context
@_fail_on_error
def train(ctx: click.Context) -> None:
    """Measure the predictors on the training corpus and build the instance table."""
    config: EnsembleConfig = ctx.obj["config"]

    documents = load_documents(config.training_dir)
    result = _build_process(config).train(documents)

    _emit(ctx, {
        "documents": len(documents),
        "instances": len(result.table),
        "table": str(config.instance_table_path),
        "classifier": result.classifier.describe(),
        "predictors": {name: evaluation.summary() for name, evaluation in result.evaluations.items()},
    })


@main.command()
@click.option("--table", "-t", type=click.Path(path_type=Path), default=None,
              help="Instance table to train on (defaults to the configured one)")
@click.pass_context
@_fail_on_error
def test(ctx: click.Context, table: Optional[Path]) -> None:
    """Score the test corpus with a classifier trained on the instance table."""
    config: EnsembleConfig = ctx.obj["config"]

    instances = _load_table(config, table)
    documents = load_documents(config.test_dir)
    evaluation = _build_process(config, instances.schema.feature_names).test(documents, instances)

    _emit(ctx, {
        "documents": len(documents),
        "instances": len(instances),
        **evaluation.summary(),
    })


@main.command()
@click.option("--run-name", "-n", default="ablation", show_default=True,
              help="Name of the ablation report")
@click.option("--table", "-t", type=click.Path(path_type=Path), default=None,
              help="Instance table to train on (defaults to the configured one)")
@click.pass_context
@_fail_on_error
def ablation(ctx: click.Context, run_name: str, table: Optional[Path]) -> None:
    """Score every non-empty subset of the features on the test corpus."""
    config: EnsembleConfig = ctx.obj["config"]

    instances = _load_table(config, table)
    documents = load_documents(config.test_dir)
    process = _build_process(config, instances.schema.feature_names)
    result = AblationSearch(config, process, instances, run_name=run_name).run(documents)

    _emit(ctx, {
        "trials": len(result.trials),
        "failed_trials": result.failed,
        "best": result.best.to_dict() if result.best else None,
    })


@main.command()
@click.option("--corpus", type=click.Choice(["training", "test"]), default="training", show_default=True)
@click.pass_context
@_fail_on_error
def distribution(ctx: click.Context, corpus: str) -> None:
    """Count feature values over the gold pairs of a corpus."""
    config: EnsembleConfig = ctx.obj["config"]

    documents = load_documents(config.corpus_dir(corpus))
    extraction = FeatureExtractionProcess.from_names(config.feature_extractors)
    report = FeatureDistribution()
    for document in documents:
        gold = document.gold_pairs()
        extraction.extract(gold, document)
        report.add(gold)

    _emit(ctx, {"corpus": corpus, **report.to_dict()})


if __name__ == "__main__":  # pragma: no cover
    main()
