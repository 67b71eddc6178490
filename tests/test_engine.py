import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from scrubchef.config import Settings
from scrubchef.detectors import DetectorRegistry, Match
from scrubchef.engine import Engine, parse_pipeline, type_prefix
from scrubchef.errors import ConfigError, MissingParameterError
from scrubchef.models import StepConfig

JWT = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9"
    ".eyJzdWIiOiIxMjM0NTY3ODkwIn0"
    ".dozjgNryP4J3jVmNHl0w5N_XgL0n3I9PlFUP0THsR8U"
)


def pipeline(*steps):
    return {"version": 1, "steps": list(steps)}


def step(step_type, step_id="", **config):
    return {"id": step_id, "type": step_type, "enabled": True, "config": config}


def test_email_end_to_end():
    engine = Engine()
    out = engine.run(
        "Contact me at a@b.com or a@b.com again",
        '{"version": 1, "steps": [{"id": "1", "type": "email", "enabled": true, "config": {}}]}',
    )
    assert out == "Contact me at <EMAIL_1> or <EMAIL_1> again"

    canonical = engine.canonical_map()["canonical"]
    assert len(canonical) == 1
    (fingerprint, entry), = canonical.items()
    assert entry["id"] == "EMAIL_1"
    assert entry["type"] == "email"
    assert entry["original"] == "a@b.com"
    assert entry["fingerprint"] == fingerprint
    assert entry["occurrences"] == 2
    assert len(entry["contexts"]) == 2


def test_identical_values_collapse_into_one_entry():
    engine = Engine()
    engine.run("a@b.com, a@b.com, a@b.com", pipeline(step("email")))
    entries = list(engine.canonical_map()["canonical"].values())
    assert len(entries) == 1
    assert entries[0]["occurrences"] == 3
    assert 1 <= len(entries[0]["contexts"]) <= 3


def test_map_has_meta_and_canonical_sections():
    engine = Engine()
    engine.run("nothing here", pipeline(step("email")))
    assert engine.canonical_map() == {"meta": {}, "canonical": {}}


def test_each_prefix_is_numbered_separately():
    engine = Engine()
    out = engine.run(
        "a@b.com 10.0.0.1 c@d.com 10.0.0.2",
        pipeline(step("email"), step("ipv4")),
    )
    assert out == "<EMAIL_1> <IPV4_1> <EMAIL_2> <IPV4_2>"


def test_runs_reset_ids_but_keep_fingerprints():
    engine = Engine()
    config = pipeline(step("email"))
    first = engine.run("x@y.com then z@y.com", config)
    first_map = engine.canonical_map()
    second = engine.run("z@y.com only", config)
    second_map = engine.canonical_map()

    assert first == "<EMAIL_1> then <EMAIL_2>"
    # Numbering restarts, so the value that was EMAIL_2 is now EMAIL_1.
    assert second == "<EMAIL_1> only"
    assert len(second_map["canonical"]) == 1
    fingerprint = next(iter(second_map["canonical"]))
    assert fingerprint in first_map["canonical"]
    assert first_map["canonical"][fingerprint]["id"] == "EMAIL_2"
    assert second_map["canonical"][fingerprint]["occurrences"] == 1


def test_same_input_is_deterministic_on_one_engine():
    engine = Engine()
    config = pipeline(step("email"), step("uuid"))
    text = "u=123e4567-e89b-12d3-a456-426614174000 a@b.com a@b.com"
    assert engine.run(text, config) == engine.run(text, config)
    first = engine.canonical_map()
    engine.run(text, config)
    assert engine.canonical_map() == first


def test_engines_use_independent_secrets():
    a, b = Engine(), Engine()
    assert a.fingerprint("a@b.com") == a.fingerprint("a@b.com")
    assert a.fingerprint("a@b.com") != b.fingerprint("a@b.com")


def test_disabled_and_unknown_steps_pass_text_through():
    engine = Engine()
    disabled = step("email")
    disabled["enabled"] = False
    text = "a@b.com"
    assert engine.run(text, pipeline(disabled)) == text
    assert engine.run(text, pipeline(step("no_such_detector"))) == text
    assert engine.canonical_map()["canonical"] == {}


def test_label_overrides_prefix():
    engine = Engine()
    config = pipeline({"type": "email", "label": "work mail-2", "config": {}})
    assert engine.run("a@b.com", config) == "<WORK_MAIL_2_1>"


def test_type_prefix_defaults():
    assert type_prefix(StepConfig(type="credit_card")) == "CC"
    assert type_prefix(StepConfig(type="apikey")) == "APIKEY"
    assert type_prefix(StepConfig(type="mystery")) == "REDACTED"
    assert type_prefix(StepConfig(type="email", label="")) == "EMAIL"


def test_step_mode_is_applied():
    engine = Engine()
    out = engine.run("mail a@b.com", pipeline(step("email", mode="mask", maskChar="#")))
    assert out == "mail #######"


def test_replace_matches_literal_text():
    engine = Engine()
    out = engine.run(
        "foo.bar fooxbar foo.bar",
        pipeline(step("replace", search="foo.bar", replacement="X")),
    )
    assert out == "X fooxbar X"
    (entry,) = engine.canonical_map()["canonical"].values()
    assert entry["type"] == "replace"
    assert entry["occurrences"] == 2


def test_jwt_is_not_recounted_by_later_base64_step():
    engine = Engine()
    out = engine.run(f"Authorization: Bearer {JWT} end", pipeline(step("jwt"), step("base64")))
    assert out == "Authorization: Bearer <JWT_1> end"
    entries = list(engine.canonical_map()["canonical"].values())
    assert [e["type"] for e in entries] == ["jwt"]


def test_overlapping_matches_within_a_step_first_wins():
    detectors = DetectorRegistry()

    @detectors.detector("overlap", "OV")
    def find(text, config):
        return [Match(0, 5, text[0:5]), Match(3, 8, text[3:8]), Match(8, 10, text[8:10])]

    engine = Engine(detectors=detectors)
    out = engine.run("abcdefghij", pipeline(step("overlap")))
    assert out == "<OV_1>fgh<OV_2>"
    regions = [(r.start, r.end) for r in engine.claims.regions]
    assert regions == [(0, 5), (8, 10)]


def test_partial_mask_defaults_to_mask_mode():
    engine = Engine()
    assert engine.run("abcdefghij", pipeline(step("partial_mask", start=2, end=5))) == "ab***fghij"
    assert engine.run("abcdefghij", pipeline(step("partialMask", start=8, end=100))) == "abcdefgh**"
    assert engine.run("abcdefghij", pipeline(step("partial_mask", start=20))) == "abcdefghij"
    out = engine.run("abcdefghij", pipeline(step("partial_mask", start=2, end=5, mode="placeholder")))
    assert out == "ab<MASK_1>fghij"


def test_keyed_capture_steps_replace_only_values():
    engine = Engine()
    assert (
        engine.run('{"user": "bob", "Password": "hunter2"}', pipeline(step("json_key", keys=["password"])))
        == '{"user": "bob", "Password": "<JSON_1>"}'
    )
    assert (
        engine.run("https://x.io/cb?token=abc123&next=1", pipeline(step("queryParam", names="token")))
        == "https://x.io/cb?token=<PARAM_1>&next=1"
    )
    assert (
        engine.run("GET /\nAuthorization: Bearer abc\nHost: x", pipeline(step("header", names=["Authorization"])))
        == "GET /\nAuthorization: <HEADER_1>\nHost: x"
    )


def test_usernames():
    engine = Engine()
    out = engine.run("login by @alice_99 from /home/bob", pipeline(step("username")))
    assert out == "login by @<USERNAME_1> from /home/<USERNAME_2>"


@pytest.mark.parametrize(
    "config",
    [
        "not json",
        '{"version": 1}',
        {"version": 1, "steps": "email"},
        {"version": 1, "steps": [{"enabled": True, "config": {}}]},
        {"version": 1, "steps": [{"type": "email", "config": []}]},
    ],
)
def test_bad_pipeline_raises_config_error(config):
    with pytest.raises(ConfigError):
        Engine().run("a@b.com", config)


def test_missing_parameters_raise():
    engine = Engine()
    with pytest.raises(MissingParameterError) as exc:
        engine.run("text", pipeline(step("email"), step("regex")))
    assert exc.value.parameter == "pattern"
    with pytest.raises(MissingParameterError):
        engine.run("text", pipeline(step("replace")))


def test_empty_and_invalid_patterns_are_skipped(caplog):
    engine = Engine()
    with caplog.at_level(logging.WARNING):
        out = engine.run(
            "a@b.com secret",
            pipeline(step("regex", pattern=""), step("regex", pattern="secret["), step("email")),
        )
    assert out == "<EMAIL_1> secret"
    assert "invalid_pattern" in caplog.text
    assert "secret[" not in caplog.text


def test_regex_step_redacts_user_pattern():
    engine = Engine()
    out = engine.run("order ORD-123 and ORD-456", pipeline(step("regex", pattern=r"ORD-\d+")))
    assert out == "order <REGEX_1> and <REGEX_2>"


def test_sensitive_values_are_not_logged(caplog):
    engine = Engine()
    with caplog.at_level(logging.DEBUG):
        engine.run("reach a@example.com", pipeline(step("email", "s1")))
    assert "a@example.com" not in caplog.text
    assert any(getattr(r, "step_id", None) == "s1" for r in caplog.records)


def test_context_radius_from_settings():
    engine = Engine(settings=Settings(context_radius=2))
    engine.run("xxxxa@b.comyyyy", pipeline(step("regex", pattern="a@b.com")))
    (entry,) = engine.canonical_map()["canonical"].values()
    assert entry["contexts"] == ["xxa@b.comyy"]


def test_inspect_step_returns_before_and_after():
    engine = Engine()
    config = pipeline(step("email", "s1"), step("ipv4", "s2"))
    diff = engine.inspect_step("a@b.com from 10.1.1.1", config, "s2")
    assert diff.before == "<EMAIL_1> from 10.1.1.1"
    assert diff.after == "<EMAIL_1> from <IPV4_1>"
    with pytest.raises(KeyError):
        engine.inspect_step("a@b.com", config, "missing")


def test_parse_pipeline_accepts_models_and_null_config():
    config = parse_pipeline({"steps": [{"type": "email", "config": None}]})
    assert config.version == 1
    assert config.steps[0].config == {}
    assert parse_pipeline(config) is config


def test_canonical_map_json_round_trips_through_json():
    import json

    engine = Engine()
    engine.run("a@b.com", pipeline(step("email")))
    assert json.loads(engine.canonical_map_json()) == engine.canonical_map()
