"""ScreenerRuleset loading and cross-validation tests.

The packaged ruleset must load cleanly; hand-written broken rulesets in
``tmp_path`` must fail at load time rather than mid-session.
"""

import textwrap

import pytest
import yaml
from pydantic import ValidationError

from tariff_screener.errors import RulesetError
from tariff_screener.models.screen import TERMINAL_SCREENS, Screen
from tariff_screener.ruleset import DEFAULT_RULESET_PATH, ScreenerRuleset, load_yaml


# =====================================================================
# Packaged ruleset
# =====================================================================


def test_loads_all_questions(ruleset):
    """Four questions in asking order, each with options."""
    assert list(ruleset.questions) == ["qualification", "supply_chain", "documents", "timeline"]
    for key, q in ruleset.questions.items():
        assert q.options, f"Question {key} has no options"
        assert q.screen is Screen(key)


def test_option_counts(ruleset):
    counts = {k: len(q.options) for k, q in ruleset.questions.items()}
    assert counts == {"qualification": 4, "supply_chain": 3, "documents": 3, "timeline": 3}


def test_tracks(ruleset):
    assert [t.id for t in ruleset.tracks] == ["fast_track", "protective_track"]
    fast, protective = ruleset.tracks
    assert fast.tone == "green" and fast.timeline == ["A", "C"]
    assert protective.tone == "yellow" and protective.timeline == ["B", "C"]


def test_outcome_content(ruleset):
    assert ruleset.outcome.title == "Your Aurora Recovery Dashboard"
    assert len(ruleset.outcome.next_steps) == 3
    assert "Form 301" in ruleset.outcome.pro_tip.title


def test_off_ramps_cover_terminals(ruleset):
    assert set(ruleset.off_ramps) == set(TERMINAL_SCREENS)
    assert ruleset.get_off_ramp(Screen.FALLBACK_QUALIFICATION).action is None
    assert ruleset.get_off_ramp(Screen.FALLBACK_SUPPLIER).action


def test_lookup_errors(ruleset):
    with pytest.raises(KeyError):
        ruleset.get_question("nope")
    with pytest.raises(KeyError):
        ruleset.get_off_ramp(Screen.ENTRY)


def test_default_path_and_state():
    r = ScreenerRuleset()
    assert r.path == DEFAULT_RULESET_PATH
    assert not r.loaded
    assert r.load() is r
    assert r.loaded


def test_load_yaml_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml(tmp_path / "missing.yaml")


# =====================================================================
# Broken rulesets
# =====================================================================


@pytest.fixture
def raw_rules():
    """The packaged ruleset as a mutable dict."""
    return load_yaml(DEFAULT_RULESET_PATH)


def _load(tmp_path, raw):
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return ScreenerRuleset(path).load()


class TestBrokenRulesets:

    def test_copy_of_packaged_rules_loads(self, tmp_path, raw_rules):
        r = _load(tmp_path, raw_rules)
        assert len(r.questions) == 4

    def test_missing_question(self, tmp_path, raw_rules):
        raw_rules["questions"] = [q for q in raw_rules["questions"] if q["key"] != "documents"]
        with pytest.raises(RulesetError, match="without a question"):
            _load(tmp_path, raw_rules)

    def test_duplicate_question(self, tmp_path, raw_rules):
        raw_rules["questions"].append(raw_rules["questions"][0])
        with pytest.raises(RulesetError, match="duplicate question key"):
            _load(tmp_path, raw_rules)

    def test_missing_off_ramp(self, tmp_path, raw_rules):
        raw_rules["terminals"] = raw_rules["terminals"][1:]
        with pytest.raises(RulesetError, match="off-ramp"):
            _load(tmp_path, raw_rules)

    def test_manual_edge_from_question_screen(self, tmp_path, raw_rules):
        raw_rules["manual_edges"].append({"source": "timeline", "target": "outcome", "label": "Skip"})
        with pytest.raises(RulesetError, match="manual edge from question screen"):
            _load(tmp_path, raw_rules)

    def test_terminal_exit_must_be_entry(self, tmp_path, raw_rules):
        raw_rules["manual_edges"].append(
            {"source": "fallback_supplier", "target": "outcome", "label": "Peek"}
        )
        with pytest.raises(RulesetError, match="may only exit to entry"):
            _load(tmp_path, raw_rules)

    def test_terminal_without_reset(self, tmp_path, raw_rules):
        raw_rules["manual_edges"] = [
            e for e in raw_rules["manual_edges"] if e["source"] != "fallback_domestic"
        ]
        with pytest.raises(RulesetError, match="no reset edge"):
            _load(tmp_path, raw_rules)

    def test_track_unknown_timeline_code(self, tmp_path, raw_rules):
        raw_rules["tracks"][0]["timeline"] = ["A", "Q"]
        with pytest.raises(RulesetError, match="unknown timeline codes"):
            _load(tmp_path, raw_rules)

    def test_unknown_target_screen(self, tmp_path, raw_rules):
        raw_rules["questions"][0]["options"][0]["target"] = "nowhere"
        with pytest.raises(ValidationError):
            _load(tmp_path, raw_rules)

    def test_bad_option_code(self, tmp_path, raw_rules):
        raw_rules["questions"][0]["options"][0]["code"] = "a1"
        with pytest.raises(ValidationError, match="single uppercase letter"):
            _load(tmp_path, raw_rules)

    def test_duplicate_option_code(self, tmp_path, raw_rules):
        raw_rules["questions"][1]["options"][1]["code"] = "A"
        with pytest.raises(ValidationError, match="duplicate option codes"):
            _load(tmp_path, raw_rules)

    def test_question_on_non_question_screen(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(textwrap.dedent("""\
            questions:
              - key: outcome
                title: Not a question screen
                options:
                  - {code: A, label: "Continue", target: entry}
        """), encoding="utf-8")
        with pytest.raises(ValidationError, match="not hosted on a question screen"):
            ScreenerRuleset(path).load()
