"""
JSON result reports for evaluation and ablation runs
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Sequence

from .errors import OutputWriteError
from .evaluation import Evaluation, FileEvaluation
from .models import CoreferencePair, Mention
from .utils.config import EnsembleConfig

if TYPE_CHECKING:
    from .ml.ablation import AblationResult

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%d-%m-%y-%H-%M"


def mention_to_dict(mention: Mention) -> dict[str, Any]:
    return {"text": mention.text, "id": mention.key}


def pair_to_dict(pair: CoreferencePair, tag: str) -> dict[str, Any]:
    return {
        "tag": tag,
        "predictor": pair.predictor,
        "antecedent": mention_to_dict(pair.antecedent),
        "anaphor": mention_to_dict(pair.anaphor),
        "features": {name: feature.string_value for name, feature in pair.features.items()},
    }


class ResultWriter:
    """
    Collects per-document outcomes of one run and writes them as a report.

    Correct (TP) and wrong (FN, FP) pairs are listed depending on the
    ``print_correct_pairs`` and ``print_wrong_pairs`` settings. Pairs are
    rendered when added, so later changes to them don't leak into the report.
    """

    def __init__(
        self,
        output_dir: Path,
        run_name: str,
        config: Optional[EnsembleConfig] = None,
        extractors: Optional[Sequence[str]] = None,
    ):
        self.output_dir = Path(output_dir)
        self.run_name = run_name
        self.config = config or EnsembleConfig()
        self.extractors = list(extractors or [])
        self.files: list[dict[str, Any]] = []

    def add_file_result(self, result: FileEvaluation) -> None:
        pairs = []
        if self.config.print_correct_pairs:
            pairs.extend(pair_to_dict(pair, "TP") for pair in result.true_positives)
        if self.config.print_wrong_pairs:
            pairs.extend(pair_to_dict(pair, "FN") for pair in result.false_negatives)
            pairs.extend(pair_to_dict(pair, "FP") for pair in result.false_positives)

        self.files.append({
            "document": result.document_id,
            "true_positives": len(result.true_positives),
            "false_negatives": len(result.false_negatives),
            "false_positives": len(result.false_positives),
            **result.scores.to_dict(),
            "pairs": pairs,
        })

    def metadata(self) -> dict[str, Any]:
        return {
            "classifier": self.config.classifier.model_dump(mode="json"),
            "extractors": self.extractors,
            "feature_filter": {
                name: self.config.feature_selectors.get(name) for name in self.config.feature_filter
            },
            "evaluation_mode": self.config.evaluation_mode.value,
            "mention_match": self.config.mention_match.value,
        }

    def report_path(self, now: Optional[datetime] = None) -> Path:
        timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        return self.output_dir / f"{self.run_name}_{timestamp}.json"

    def write(self, evaluation: Evaluation) -> Path:
        report = {
            "run": self.run_name,
            "created": datetime.now().isoformat(timespec="seconds"),
            "metadata": self.metadata(),
            "files": self.files,
            "overall": evaluation.summary(),
        }
        return self._dump(report)

    def write_ablation(self, result: "AblationResult") -> Path:
        report = {
            "run": self.run_name,
            "created": datetime.now().isoformat(timespec="seconds"),
            "metadata": self.metadata(),
            **result.to_dict(),
        }
        return self._dump(report)

    def _dump(self, report: dict[str, Any]) -> Path:
        path = self.report_path()
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(report, f, indent=2)
        except OSError as e:
            raise OutputWriteError(f"Couldn't write report {path}: {e}") from e
        logger.info(f"Wrote report {path}")
        return path
