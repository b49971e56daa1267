import json

import pytest
from pydantic import ValidationError

from app.models.classification import Category, Severity
from app.models.errors import KeywordTableError
from app.services.category_mapper import CategoryMapper
from app.services.triage_config import (
    DEFAULT_CATEGORY_KEYWORDS,
    ClassificationConfig,
    build_classification_config,
    load_keyword_table,
)


def write_table(tmp_path, data, name="keywords.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_default_table_covers_every_real_category(config):
    assert list(config.category_keywords) == [
        Category.POTHOLE,
        Category.GARBAGE,
        Category.BROKEN_LIGHT,
        Category.WATER_LEAKAGE,
        Category.GRAFFITI,
    ]
    assert Category.OTHER not in config.category_keywords


def test_keywords_are_lowercased_and_deduplicated():
    config = ClassificationConfig(category_keywords={Category.GRAFFITI: ("Tag", "tag ", "MURAL")})
    assert config.category_keywords[Category.GRAFFITI] == ("tag", "mural")


def test_other_cannot_have_keywords():
    with pytest.raises(ValidationError):
        ClassificationConfig(category_keywords={Category.OTHER: ("anything",)})


def test_thresholds_must_be_descending():
    with pytest.raises(ValidationError):
        ClassificationConfig(severity_thresholds=((0.4, Severity.MODERATE), (0.7, Severity.CRITICAL)))


def test_config_is_immutable(config):
    with pytest.raises(ValidationError):
        config.match_threshold = 0.5


def test_with_keywords_returns_new_config(config):
    extended = config.with_keywords(Category.GRAFFITI, ["Banksy"])
    assert "banksy" in extended.category_keywords[Category.GRAFFITI]
    assert "banksy" not in config.category_keywords[Category.GRAFFITI]

    result = CategoryMapper(extended).classify([{"label": "banksy", "score": 0.8}])
    assert result.category == Category.GRAFFITI


def test_load_keyword_table(tmp_path):
    path = write_table(tmp_path, {"garbage": ["Skip", "overflowing bin"]})
    assert load_keyword_table(path) == {Category.GARBAGE: ("skip", "overflowing bin")}


@pytest.mark.parametrize(
    "data",
    [
        {"potholes": ["crater"]},
        {"other": ["thing"]},
        {"garbage": "trash"},
        ["garbage"],
    ],
)
def test_load_keyword_table_rejects_bad_tables(tmp_path, data):
    with pytest.raises(KeywordTableError):
        load_keyword_table(write_table(tmp_path, data))


def test_load_keyword_table_missing_or_invalid_file(tmp_path):
    with pytest.raises(KeywordTableError):
        load_keyword_table(str(tmp_path / "missing.json"))

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(KeywordTableError):
        load_keyword_table(str(bad))


def test_build_config_extends_defaults(tmp_path):
    path = write_table(tmp_path, {"graffiti": ["sticker"]})
    config = build_classification_config(keyword_table_path=path, mode="extend")
    graffiti = config.category_keywords[Category.GRAFFITI]
    assert graffiti[-1] == "sticker"
    assert graffiti[:-1] == DEFAULT_CATEGORY_KEYWORDS[Category.GRAFFITI]
    assert list(config.category_keywords)[0] == Category.POTHOLE


def test_build_config_replaces_table(tmp_path):
    path = write_table(tmp_path, {"water_leakage": ["puddle"], "pothole": ["crater"]})
    config = build_classification_config(keyword_table_path=path, mode="replace")
    assert list(config.category_keywords) == [Category.WATER_LEAKAGE, Category.POTHOLE]


def test_build_config_rejects_unknown_mode(tmp_path):
    path = write_table(tmp_path, {"pothole": ["crater"]})
    with pytest.raises(KeywordTableError):
        build_classification_config(keyword_table_path=path, mode="merge")


def test_keyword_table_cannot_be_changed_in_place(config):
    with pytest.raises(TypeError):
        config.category_keywords[Category.POTHOLE] = ()
    assert CategoryMapper(config).classify([{"label": "crater", "score": 0.5}]).category == Category.POTHOLE


def test_default_keyword_table_is_read_only():
    with pytest.raises(TypeError):
        DEFAULT_CATEGORY_KEYWORDS[Category.GARBAGE] = ("zzz",)
    assert "trash" in ClassificationConfig().category_keywords[Category.GARBAGE]


def test_config_does_not_share_the_callers_dict():
    table = {Category.POTHOLE: ("crater",)}
    config = ClassificationConfig(category_keywords=table)
    table[Category.POTHOLE] = ()
    assert config.category_keywords[Category.POTHOLE] == ("crater",)
