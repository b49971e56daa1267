import pytest

from app.models.classification import Category, LabelPrediction, Severity
from app.models.errors import InsufficientLabelsError
from app.services.category_mapper import NO_MATCH_DETAILS, CategoryMapper, classify
from app.services.triage_config import DEFAULT_CATEGORY_KEYWORDS, ClassificationConfig


def preds(*pairs):
    return [{"label": label, "score": score} for label, score in pairs]


UNRELATED = [
    ("golden retriever", 0.8),
    ("tabby cat", 0.1),
    ("sports car", 0.05),
    ("pizza", 0.03),
    ("violin", 0.02),
]


def test_unrelated_labels_fall_to_other_with_top_raw_score(mapper):
    result = mapper.classify(preds(*UNRELATED[:2]))
    assert result.category == Category.OTHER
    assert result.severity == Severity.MODERATE
    assert result.confidence == 0.8
    assert result.match_details == NO_MATCH_DETAILS


def test_empty_labels_is_other_not_an_error(mapper):
    result = mapper.classify([])
    assert result.category == Category.OTHER
    assert result.severity == Severity.MODERATE
    assert result.confidence == 0.0
    assert result.raw_labels == ()


def test_none_labels_raises_insufficient_labels(mapper):
    with pytest.raises(InsufficientLabelsError):
        mapper.classify(None)


def test_single_keyword_match_uses_label_score(mapper):
    result = mapper.classify(preds(("crater", 0.5)))
    assert result.category == Category.POTHOLE
    assert result.confidence == pytest.approx(0.5)
    assert result.severity == Severity.MODERATE


def test_pothole_on_asphalt_road_accumulates_every_keyword(mapper):
    # "pothole", "hole", "asphalt" and "road" all match at rank 0
    result = mapper.classify(preds(("pothole on asphalt road", 0.9)))
    assert result.category == Category.POTHOLE
    assert result.severity == Severity.CRITICAL
    assert result.confidence == pytest.approx(0.9 * 4)


def test_confidence_is_unnormalised_and_can_exceed_one(mapper):
    result = mapper.classify(preds(("pothole on asphalt road", 0.9)))
    assert result.confidence > 1.0


def test_multiple_keywords_in_one_label_are_additive(mapper):
    # broken_light: "street light" + "light"; pothole only gets "street"
    result = mapper.classify(preds(("street light", 0.5)))
    assert result.category == Category.BROKEN_LIGHT
    assert result.confidence == pytest.approx(1.0)
    assert result.severity == Severity.CRITICAL

    scores = mapper.score_categories(preds(("street light", 0.5)))
    assert scores[Category.POTHOLE] == pytest.approx(0.5)


def test_position_weight_discounts_lower_ranks(mapper):
    result = mapper.classify(preds(("golden retriever", 0.9), ("manhole cover", 0.6)))
    assert result.category == Category.POTHOLE
    assert result.confidence == pytest.approx(0.6 * 0.85)
    assert result.severity == Severity.MODERATE


def test_position_weight_values(mapper):
    assert mapper.position_weight(0) == 1.0
    assert mapper.position_weight(1) == pytest.approx(0.85)
    assert mapper.position_weight(4) == pytest.approx(0.4)
    assert mapper.position_weight(10) == 0.0


def test_predictions_beyond_top_five_are_ignored(mapper):
    labels = preds(*UNRELATED, ("pothole", 0.9))
    result = mapper.classify(labels)
    assert result.category == Category.OTHER
    assert result.confidence == 0.8
    assert len(result.raw_labels) == 5
    assert [p.label for p in result.raw_labels] == [label for label, _ in UNRELATED]


def test_input_order_is_trusted_not_resorted(mapper):
    # Lower-scored first entry still counts at full weight
    result = mapper.classify(preds(("crater", 0.2), ("golden retriever", 0.9)))
    assert result.category == Category.POTHOLE
    assert result.confidence == pytest.approx(0.2)
    assert result.severity == Severity.MINOR


def test_below_match_threshold_reports_top_raw_score(mapper):
    result = mapper.classify(preds(("golden retriever", 0.3), ("tabby cat", 0.2), ("crater", 0.05)))
    assert result.category == Category.OTHER
    assert result.confidence == 0.3
    assert result.severity == Severity.MODERATE


@pytest.mark.parametrize(
    "score, severity",
    [
        (0.7, Severity.CRITICAL),
        (0.69, Severity.MODERATE),
        (0.4, Severity.MODERATE),
        (0.39, Severity.MINOR),
        (0.1, Severity.MINOR),
    ],
)
def test_severity_breakpoints(mapper, score, severity):
    result = mapper.classify(preds(("crater", score)))
    assert result.category == Category.POTHOLE
    assert result.severity == severity


def test_severity_for_score_applies_to_superunity_scores(mapper):
    assert mapper.severity_for_score(3.6) == Severity.CRITICAL


def test_tie_goes_to_first_declared_category(mapper):
    # "hole" (pothole) and "pole" (broken_light) both match once
    labels = preds(("pole hole", 0.5))
    scores = mapper.score_categories(labels)
    assert scores[Category.POTHOLE] == scores[Category.BROKEN_LIGHT]

    for _ in range(3):
        assert mapper.classify(labels).category == Category.POTHOLE


def test_tie_break_follows_table_declaration_order():
    reordered = {Category.BROKEN_LIGHT: DEFAULT_CATEGORY_KEYWORDS[Category.BROKEN_LIGHT]}
    reordered.update(DEFAULT_CATEGORY_KEYWORDS)
    mapper = CategoryMapper(ClassificationConfig(category_keywords=reordered))
    assert mapper.classify(preds(("pole hole", 0.5))).category == Category.BROKEN_LIGHT


def test_labels_are_case_folded(mapper):
    result = mapper.classify(preds(("POTHOLE", 0.9)))
    assert result.category == Category.POTHOLE
    # "pothole" and "hole"
    assert result.confidence == pytest.approx(1.8)


def test_classification_is_idempotent(mapper):
    labels = preds(("street sign", 0.4), ("manhole cover", 0.3), ("trash can", 0.2))
    first = mapper.classify(labels)
    second = mapper.classify(labels)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_accepts_label_prediction_models(mapper):
    result = mapper.classify([LabelPrediction(label="graffiti wall", score=0.8)])
    assert result.category == Category.GRAFFITI
    assert result.raw_labels[0] == LabelPrediction(label="graffiti wall", score=0.8)


def test_result_carries_configured_model_name():
    config = ClassificationConfig(model_name="custom/vit")
    result = classify(preds(("crater", 0.5)), config)
    assert result.model == "custom/vit"


def test_module_classify_uses_default_table():
    result = classify(preds(("rubbish", 0.75)))
    assert result.category == Category.GARBAGE
    assert result.severity == Severity.CRITICAL
    assert result.match_details == "Matched based on 0.75 confidence"


def test_to_dict_uses_issue_field_names(mapper):
    data = mapper.classify(preds(("crater", 0.5))).to_dict()
    assert data == {
        "category": "pothole",
        "confidence": 0.5,
        "severity": "moderate",
        "rawLabels": [{"label": "crater", "score": 0.5}],
        "model": "google/vit-base-patch16-224",
        "matchDetails": "Matched based on 0.50 confidence",
    }
