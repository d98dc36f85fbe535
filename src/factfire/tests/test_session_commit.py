import unittest

from factfire.engine.fire import Firing
from factfire.engine.session import Session
from factfire.errors import RuleRegistryError, SessionError
from factfire.fact_store.store import Store
from factfire.ir.fact import Fact
from factfire.ir.rule import ConsumeWeight, GainTerm, Gather, Match, Rule, SelectAny
from factfire.ir.terms import AuthOne, Field, Say, Var, nat
from factfire.ir.values import VParty
from factfire.rules.registry import RuleRegistry


COIN = Fact("Coin", {"holder": VParty("Alice")}, by=["Issuer", "Alice"], rules=["claim"])
RECEIPT = Fact("Receipt", {"holder": VParty("Alice")}, by=["Alice"])


def claim_rule() -> Rule:
    holder = Field(Var("coin"), "holder")
    return Rule(
        "claim",
        [
            Match(
                "coin",
                Gather("Coin"),
                SelectAny(),
                ConsumeWeight(nat(1)),
                GainTerm(AuthOne(holder)),
            )
        ],
        Say("Receipt", [("holder", holder)], by=AuthOne(holder)),
    )


def session(weight: int = 1, **kwargs) -> Session:
    return Session(Store([(COIN, weight)]), RuleRegistry([claim_rule()]), **kwargs)


class TestSession(unittest.TestCase):
    def test_submit_commits_and_journals(self) -> None:
        host = session()
        firing = host.submit(["Alice"], "claim")
        self.assertIsNotNone(firing)
        self.assertEqual(host.store.items(), [(RECEIPT, 1)])
        self.assertEqual(len(host.journal), 1)
        entry = host.journal[0]
        self.assertEqual(entry.rule_name, "claim")
        self.assertEqual(entry.submitter, frozenset({"Alice"}))
        self.assertEqual(entry.to_dict()["spent"][0]["weight"], 1)

    def test_spent_weight_is_gone_after_commit(self) -> None:
        host = session()
        host.submit(["Alice"], "claim")
        self.assertIsNone(host.submit(["Alice"], "claim"))
        self.assertEqual(len(host.journal), 1)

    def test_stranger_commits_nothing(self) -> None:
        host = session()
        self.assertIsNone(host.submit(["Mallory"], "claim"))
        self.assertEqual(host.store.items(), [(COIN, 1)])
        self.assertEqual(host.journal, [])

    def test_preview_does_not_commit(self) -> None:
        host = session(weight=2)
        self.assertEqual(len(host.preview(["Alice"], "claim")), 1)
        self.assertEqual(host.store.lookup_weight(COIN), 2)

    def test_unknown_rule(self) -> None:
        with self.assertRaises(RuleRegistryError):
            session().submit(["Alice"], "mint")

    def test_chooser_must_pick_a_produced_firing(self) -> None:
        forged = Firing(spent=(), said=(), store=Store())
        host = session(choose=lambda firings: forged)
        with self.assertRaises(SessionError):
            host.submit(["Alice"], "claim")
        self.assertEqual(host.store.items(), [(COIN, 1)])


if __name__ == "__main__":
    unittest.main()
