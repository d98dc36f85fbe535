import unittest

from factfire.errors import EvaluationError, SchemaError
from factfire.eval.term import eval_term, exec_term
from factfire.ir.fact import Fact, Factoid
from factfire.ir.terms import (
    And,
    AuthOne,
    AuthUnion,
    Cmp,
    Eq,
    Field,
    Lit,
    Not,
    Record,
    Say,
    Seq,
    Var,
    free_vars,
    nat,
    party,
    rules,
    sym,
    term_from_dict,
)
from factfire.ir.values import FALSE, TRUE, UNIT, VAuth, VFact, VNat, VParty, VRecord, VSym


class TestEvalTerm(unittest.TestCase):
    def setUp(self) -> None:
        self.offer = Fact(
            "Offer",
            {"id": VSym("1234"), "giver": VParty("Alice"), "amount": VNat(10)},
            by=["Alice"],
        )
        self.env = {"offer": VFact(self.offer)}

    def test_field_projection(self) -> None:
        self.assertEqual(eval_term(self.env, Field(Var("offer"), "giver")), VParty("Alice"))
        record = Record([("a", nat(1)), ("b", sym("x"))])
        self.assertEqual(eval_term({}, Field(record, "b")), VSym("x"))

    def test_missing_field(self) -> None:
        with self.assertRaisesRegex(EvaluationError, "no field 'holder'"):
            eval_term(self.env, Field(Var("offer"), "holder"))

    def test_unbound_name(self) -> None:
        with self.assertRaisesRegex(EvaluationError, "unbound name: coin"):
            eval_term(self.env, Var("coin"))

    def test_equality(self) -> None:
        self.assertEqual(eval_term(self.env, Eq(Field(Var("offer"), "id"), sym("1234"))), TRUE)
        self.assertEqual(eval_term(self.env, Eq(Field(Var("offer"), "id"), sym("9"))), FALSE)
        with self.assertRaises(EvaluationError):
            eval_term(self.env, Eq(Field(Var("offer"), "giver"), sym("Alice")))

    def test_comparisons_and_logic(self) -> None:
        amount = Field(Var("offer"), "amount")
        self.assertEqual(eval_term(self.env, Cmp("ge", amount, nat(10))), TRUE)
        self.assertEqual(eval_term(self.env, Cmp("lt", amount, nat(10))), FALSE)
        self.assertEqual(eval_term(self.env, And([])), TRUE)
        self.assertEqual(
            eval_term(self.env, And([Cmp("gt", amount, nat(1)), Not(Cmp("gt", amount, nat(5)))])),
            FALSE,
        )
        with self.assertRaises(EvaluationError):
            eval_term(self.env, Cmp("lt", party("Alice"), nat(1)))

    def test_authority(self) -> None:
        term = AuthUnion(AuthOne(Field(Var("offer"), "giver")), AuthOne(party("Bob")))
        self.assertEqual(eval_term(self.env, term), VAuth(["Alice", "Bob"]))
        with self.assertRaises(EvaluationError):
            eval_term(self.env, AuthOne(sym("Alice")))

    def test_say_outside_body_is_an_error(self) -> None:
        with self.assertRaises(EvaluationError):
            eval_term(self.env, Say("Coin"))


class TestExecTerm(unittest.TestCase):
    def test_says_accumulate_in_order(self) -> None:
        body = Seq(
            [
                Say("Receipt", [("n", nat(1))], by=AuthOne(party("Alice")), rules=rules(["audit"])),
                Say("Receipt", [("n", nat(2))], weight=nat(3)),
            ]
        )
        value, said = exec_term({}, body)
        self.assertEqual(value, UNIT)
        self.assertEqual(
            said,
            [
                Factoid(Fact("Receipt", {"n": VNat(1)}, by=["Alice"], rules=["audit"]), 1),
                Factoid(Fact("Receipt", {"n": VNat(2)}), 3),
            ],
        )

    def test_empty_seq_is_unit(self) -> None:
        self.assertEqual(exec_term({}, Seq([])), (UNIT, []))

    def test_pure_term_has_no_effects(self) -> None:
        self.assertEqual(exec_term({}, nat(4)), (VNat(4), []))


class TestTermPayloads(unittest.TestCase):
    def test_free_vars(self) -> None:
        term = Say(
            "Coin",
            [("holder", Field(Var("offer"), "receiver"))],
            by=AuthOne(Field(Var("coin"), "issuer")),
        )
        self.assertEqual(free_vars(term), {"offer", "coin"})

    def test_term_from_dict(self) -> None:
        payload = {
            "kind": "eq",
            "lhs": {"kind": "field", "term": {"kind": "var", "name": "offer"}, "name": "id"},
            "rhs": {"kind": "lit", "value": {"kind": "sym", "value": "1234"}},
        }
        term = term_from_dict(payload)
        self.assertEqual(term, Eq(Field(Var("offer"), "id"), Lit(VSym("1234"))))
        self.assertEqual(term.to_dict(), payload)

    def test_unknown_kind(self) -> None:
        with self.assertRaises(SchemaError):
            term_from_dict({"kind": "lambda"})

    def test_invalid_values(self) -> None:
        with self.assertRaises(SchemaError):
            VNat(-1)
        with self.assertRaises(SchemaError):
            VRecord([("a", VNat(1)), ("a", VNat(2))])
        with self.assertRaises(SchemaError):
            Cmp("ne", nat(1), nat(2))


if __name__ == "__main__":
    unittest.main()
