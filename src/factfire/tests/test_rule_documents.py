import json
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from factfire.engine.fire import apply_fire
from factfire.errors import RuleValidationError
from factfire.ir.fact import Fact
from factfire.ir.rule import ConsumeWeight, GainTerm, Gather, Match, Rule, SelectAny
from factfire.ir.terms import AuthOne, Eq, Field, Say, Var, nat, party, rules
from factfire.ir.values import VParty
from factfire.rules.documents import load_ledger, load_ledger_file, load_rules, load_rules_file


def coin_entry(holder: str, weight: int = 1) -> dict:
    return {
        "name": "Coin",
        "value": {"holder": {"kind": "party", "value": holder}},
        "by": ["Issuer", holder],
        "rules": ["claim"],
        "weight": weight,
    }


def holder_of(binder: str) -> dict:
    return {"kind": "field", "term": {"kind": "var", "name": binder}, "name": "holder"}


CLAIM_RULE = {
    "name": "claim",
    "matches": [
        {
            "binder": "coin",
            "gather": {
                "fact_name": "Coin",
                "predicates": [
                    {
                        "kind": "eq",
                        "lhs": holder_of("coin"),
                        "rhs": {"kind": "lit", "value": {"kind": "party", "value": "Alice"}},
                    }
                ],
            },
            "consume": {"kind": "weight", "weight": {"kind": "lit", "value": {"kind": "nat", "value": 1}}},
            "gain": {"kind": "term", "auth": {"kind": "auth_one", "term": holder_of("coin")}},
        }
    ],
    "body": {
        "kind": "say",
        "name": "Receipt",
        "fields": [["holder", holder_of("coin")]],
        "by": {"kind": "auth_one", "term": holder_of("coin")},
        "rules": {"kind": "lit", "value": {"kind": "rules", "value": ["claim"]}},
    },
}


def alice_coin() -> Fact:
    return Fact("Coin", {"holder": VParty("Alice")}, by=["Issuer", "Alice"], rules=["claim"])


class TestLedgerDocument(unittest.TestCase):
    def test_duplicate_entries_are_summed(self) -> None:
        store = load_ledger({"facts": [coin_entry("Alice", 2), coin_entry("Alice"), coin_entry("Bob")]})
        self.assertEqual(len(store), 2)
        self.assertEqual(store.lookup_weight(alice_coin()), 3)

    def test_weight_must_be_positive(self) -> None:
        with self.assertRaises(ValidationError):
            load_ledger({"facts": [coin_entry("Alice", 0)]})

    def test_bad_value_payload(self) -> None:
        entry = coin_entry("Alice")
        entry["value"] = {"holder": {"kind": "nat", "value": -3}}
        with self.assertRaises(ValidationError):
            load_ledger({"facts": [entry]})

    def test_load_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "ledger.json"
            path.write_text(json.dumps({"facts": [coin_entry("Alice")]}), encoding="utf-8")
            store = load_ledger_file(path)
        self.assertEqual(store.items(), [(alice_coin(), 1)])


class TestRuleDocument(unittest.TestCase):
    def test_loaded_rule_matches_built_rule(self) -> None:
        holder = Field(Var("coin"), "holder")
        expected = Rule(
            "claim",
            [
                Match(
                    "coin",
                    Gather("Coin", [Eq(holder, party("Alice"))]),
                    SelectAny(),
                    ConsumeWeight(nat(1)),
                    GainTerm(AuthOne(holder)),
                )
            ],
            Say("Receipt", [("holder", holder)], by=AuthOne(holder), rules=rules(["claim"])),
        )
        self.assertEqual(load_rules({"rules": [CLAIM_RULE]}), [expected])

    def test_loaded_rule_fires(self) -> None:
        store = load_ledger({"facts": [coin_entry("Alice", 3), coin_entry("Bob")]})
        (rule,) = load_rules({"rules": [CLAIM_RULE]})
        firings = apply_fire(frozenset({"Alice"}), store, rule)
        self.assertEqual(len(firings), 1)
        receipt = Fact("Receipt", {"holder": VParty("Alice")}, by=["Alice"], rules=["claim"])
        self.assertEqual(firings[0].store.lookup_weight(alice_coin()), 2)
        self.assertEqual(firings[0].store.lookup_weight(receipt), 1)

    def test_select_first_requires_key(self) -> None:
        payload = json.loads(json.dumps(CLAIM_RULE))
        payload["matches"][0]["select"] = {"kind": "first"}
        with self.assertRaises(ValidationError):
            load_rules({"rules": [payload]})

    def test_unknown_term_kind(self) -> None:
        payload = json.loads(json.dumps(CLAIM_RULE))
        payload["body"] = {"kind": "lambda"}
        with self.assertRaises(ValidationError):
            load_rules({"rules": [payload]})

    def test_duplicate_rule_names(self) -> None:
        with self.assertRaises(ValidationError):
            load_rules({"rules": [CLAIM_RULE, CLAIM_RULE]})

    def test_unbound_name(self) -> None:
        payload = json.loads(json.dumps(CLAIM_RULE))
        payload["body"]["fields"] = [["holder", holder_of("offer")]]
        with self.assertRaises(RuleValidationError):
            load_rules({"rules": [payload]})

    def test_load_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "rules.json"
            path.write_text(json.dumps({"rules": [CLAIM_RULE]}), encoding="utf-8")
            loaded = load_rules_file(path)
        self.assertEqual([rule.name for rule in loaded], ["claim"])


if __name__ == "__main__":
    unittest.main()
