from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from incident_sla.sla.domain import SLAThresholdConfig
from incident_sla.sla.domain.value_objects import leading_token


@pytest.mark.parametrize(
    "label, hours",
    [
        ("P1 - Critical", 1),
        ("p2", 3),
        ("P3 - Medium", 4),
        ("  P4 - Low", 8),
        ("Urgent", 8),
        ("", 8),
    ],
)
def test_threshold_for_priority_labels(config, label, hours):
    assert config.threshold_for(label) == timedelta(hours=hours)


@pytest.mark.parametrize("label", [None, 5, 1.0])
def test_threshold_for_non_text_priority_is_default(config, label):
    assert config.threshold_for(label) == timedelta(hours=8)


def test_unlisted_priority_digit_uses_configured_target():
    config = SLAThresholdConfig(sla_targets={"p5": 30})
    assert config.threshold_for("P5 - Planning") == timedelta(minutes=30)
    assert config.threshold_for("P7") == timedelta(hours=8)


def test_partial_targets_are_back_filled():
    config = SLAThresholdConfig(sla_targets={"P1": 15})
    assert config.sla_targets == {"P1": 15, "P2": 180, "P3": 240, "P4": 480}
    assert config.threshold_for("P1") == timedelta(minutes=15)


def test_non_positive_target_is_rejected():
    with pytest.raises(ValidationError):
        SLAThresholdConfig(sla_targets={"P1": 0})


def test_config_is_frozen(config):
    with pytest.raises(ValidationError):
        config.default_minutes = 10


def test_bucket_for(config):
    assert config.bucket_for("p2 - whatever") == "P2 - High"
    assert config.bucket_for("P4") == "P4 - Low"
    assert config.bucket_for("Urgent") is None
    assert config.bucket_for("") is None
    assert config.bucket_for(None) is None


def test_flagged_buckets(config):
    assert config.is_flagged("P1 - Critical")
    assert config.is_flagged("P2 - High")
    assert not config.is_flagged("P3 - Medium")


def test_flagged_priorities_are_normalised():
    config = SLAThresholdConfig(flagged_priorities=[" p3 "])
    assert config.is_flagged("P3 - Medium")
    assert not config.is_flagged("P1 - Critical")


def test_leading_token():
    assert leading_token("p2 - High") == "P2"
    assert leading_token("   ") == ""
