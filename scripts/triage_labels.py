"""
Classify a saved label list and print the resulting triage fields.

Usage:
  - From a JSON file of [{"label": ..., "score": ...}]: python scripts/triage_labels.py labels.json
  - Simulate a failed labeling call (fallback on the URL): python scripts/triage_labels.py --no-labels --image-url https://example.com/road.jpg
  - Use a custom keyword table: python scripts/triage_labels.py labels.json --keywords keywords.json

Behavior:
  - Runs the category mapper (or the fallback resolver when no labels are given).
  - Builds a fresh issue record and prints it as JSON, including its priority.
"""

import argparse
import json
import sys

from app.core.logging_config import configure_logging
from app.services.issue_classification_service import IssueClassificationService
from app.services.issue_triage_service import IssueTriageService
from app.services.triage_config import build_classification_config


def load_labels(path: str) -> list:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("labels_path", nargs="?", help="JSON file with the classifier's ordered predictions")
    parser.add_argument("--image-url", default="", help="Photo URL, used as the fallback text hint")
    parser.add_argument("--no-labels", action="store_true", help="Treat the labeling call as failed")
    parser.add_argument("--keywords", help="JSON keyword table extending the defaults")
    parser.add_argument("--log-level", default=None, help="Logging level (defaults to LOG_LEVEL)")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    if not args.no_labels and not args.labels_path:
        parser.error("labels_path is required unless --no-labels is given")

    labels = None if args.no_labels else load_labels(args.labels_path)

    config = build_classification_config(keyword_table_path=args.keywords)
    classifier = IssueClassificationService(config=config)
    result = classifier.classify_labels(labels, hint_text=args.image_url)

    issue = IssueTriageService().build_issue(result, image_url=args.image_url or "unknown")
    json.dump(
        {"classification": result.to_dict(), "issue": issue.to_dict()},
        sys.stdout,
        indent=2,
    )
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
