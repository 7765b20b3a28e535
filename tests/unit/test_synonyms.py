"""
Unit tests for synonym table and query expansion.
"""

import json

import pytest
from vault.search.synonyms import DEFAULT_SYNONYMS, SynonymTable, expand_query

pytestmark = pytest.mark.unit


class TestExpandQuery:
    """Test query expansion through the default table"""
    
    def test_expands_cancel(self):
        tokens = expand_query("cancel")
        for term in ("cancel", "cancellation", "terminate", "refund"):
            assert term in tokens
    
    def test_expands_payment(self):
        tokens = expand_query("payment")
        assert "payment" in tokens
        assert "invoice" in tokens
        assert "billing" in tokens
    
    def test_synonym_triggers_its_group(self):
        """Hitting a synonym pulls in the concept key and siblings"""
        tokens = expand_query("is my deposit refundable")
        assert "cancel" in tokens
        assert "termination" in tokens
    
    def test_term_in_two_groups_expands_both(self):
        tokens = expand_query("charge")
        assert "invoice" in tokens   # payment group
        assert "penalty" in tokens   # late group
    
    def test_raw_tokens_come_first(self):
        tokens = expand_query("Snow plowing schedule?")
        assert tokens[:3] == ["snow", "plowing", "schedule"]
    
    def test_tokens_are_unique(self):
        tokens = expand_query("late late payment charge")
        assert len(tokens) == len(set(tokens))
    
    def test_filters_short_tokens(self):
        assert expand_query("a b") == []
        assert all(len(t) >= 3 for t in expand_query("is it ok to mow at 6 am"))
    
    def test_caps_token_count(self):
        tokens = expand_query("cancel payment late liability snow")
        assert len(tokens) == 30
        assert tokens[:5] == ["cancel", "payment", "late", "liability", "snow"]
    
    def test_custom_cap(self):
        assert len(expand_query("cancel", max_tokens=5)) == 5
    
    def test_unknown_words_pass_through(self):
        assert expand_query("xyzzy nonsense") == ["xyzzy", "nonsense"]
    
    def test_empty_query(self):
        assert expand_query("") == []
        assert expand_query(None) == []
    
    def test_custom_table(self):
        table = SynonymTable({"pool": ["chlorine", "skimmer"]})
        tokens = expand_query("skimmer broken", table=table)
        assert tokens == ["skimmer", "broken", "pool", "chlorine"]
        # default groups are not consulted
        assert "cancellation" not in expand_query("cancel", table=table)


class TestSynonymTable:
    def test_default_concepts(self):
        for concept in ("cancel", "payment", "late", "liability", "dispute",
                        "snow", "scope", "mowing", "season"):
            assert concept in DEFAULT_SYNONYMS
        assert len(DEFAULT_SYNONYMS) == 9
    
    def test_groups_are_read_only(self):
        assert isinstance(DEFAULT_SYNONYMS["snow"], tuple)
        with pytest.raises(TypeError):
            DEFAULT_SYNONYMS._groups["snow"] = ("sleet",)
    
    def test_keys_and_terms_lowercased(self):
        table = SynonymTable({"Fence": ["Gate", "POST"]})
        assert "fence" in table
        assert table["fence"] == ("gate", "post")
    
    def test_from_json(self, tmp_path):
        path = tmp_path / "synonyms.json"
        path.write_text(json.dumps({"irrigation": ["sprinkler", "watering"]}), encoding="utf-8")
        
        table = SynonymTable.from_json(path)
        
        assert len(table) == 1
        assert "sprinkler" in expand_query("irrigation", table=table)
    
    def test_from_json_rejects_bad_shape(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"irrigation": "sprinkler"}), encoding="utf-8")
        
        with pytest.raises(ValueError):
            SynonymTable.from_json(path)
