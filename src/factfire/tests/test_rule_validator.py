import unittest

from factfire.errors import RuleValidationError
from factfire.ir.rule import ConsumeWeight, GainTerm, Gather, Match, Rule, SelectFirst
from factfire.ir.terms import AuthOne, Cmp, Eq, Field, Say, Seq, Var, nat, party
from factfire.rules.validator import RuleValidator


class TestRuleValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = RuleValidator()

    def test_accepts_well_scoped_rule(self) -> None:
        rule = Rule(
            "swap",
            [
                Match("left", Gather("Token"), SelectFirst(Field(Var("left"), "serial"))),
                Match(
                    "right",
                    Gather("Token", [Cmp("gt", Field(Var("right"), "serial"), Field(Var("left"), "serial"))]),
                    consume=ConsumeWeight(nat(1)),
                    gain=GainTerm(AuthOne(Field(Var("right"), "owner"))),
                ),
            ],
            Seq([Say("Swapped", [("a", Field(Var("left"), "serial")), ("b", Field(Var("right"), "serial"))])]),
        )
        self.validator.validate(rule)

    def test_duplicate_binder(self) -> None:
        rule = Rule("dup", [Match("t", Gather("Token")), Match("t", Gather("Token"))])
        with self.assertRaisesRegex(RuleValidationError, "binds 't' twice"):
            self.validator.validate(rule)

    def test_forward_reference(self) -> None:
        rule = Rule(
            "forward",
            [
                Match("first", Gather("Token", [Eq(Field(Var("second"), "owner"), party("A"))])),
                Match("second", Gather("Token")),
            ],
        )
        with self.assertRaisesRegex(RuleValidationError, "unbound names: second"):
            self.validator.validate(rule)

    def test_unbound_name_in_body(self) -> None:
        rule = Rule("body", [Match("t", Gather("Token"))], Say("Out", [("x", Var("u"))]))
        with self.assertRaisesRegex(RuleValidationError, "body refers to unbound names: u"):
            self.validator.validate(rule)

    def test_say_in_predicate(self) -> None:
        rule = Rule("sneaky", [Match("t", Gather("Token", [Say("Out")]))])
        with self.assertRaisesRegex(RuleValidationError, "outside the body"):
            self.validator.validate(rule)


if __name__ == "__main__":
    unittest.main()
