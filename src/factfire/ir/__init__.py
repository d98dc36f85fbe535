"""Values, facts, terms and rules."""

from factfire.ir.fact import Auth, Fact, Factoid, Party, make_auth
from factfire.ir.rule import (
    Consume,
    ConsumeRetain,
    ConsumeWeight,
    Gain,
    GainNone,
    GainTerm,
    Gather,
    Match,
    Rule,
    Select,
    SelectAny,
    SelectFirst,
    SelectLast,
)
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
    Term,
    Var,
    free_vars,
    nat,
    party,
    rules,
    sym,
    term_from_dict,
)
from factfire.ir.values import (
    UNIT,
    Value,
    VAuth,
    VBool,
    VFact,
    VNat,
    VParty,
    VRecord,
    VRules,
    VSym,
    VUnit,
    value_from_dict,
)

__all__ = [
    "Auth",
    "Fact",
    "Factoid",
    "Party",
    "make_auth",
    "Consume",
    "ConsumeRetain",
    "ConsumeWeight",
    "Gain",
    "GainNone",
    "GainTerm",
    "Gather",
    "Match",
    "Rule",
    "Select",
    "SelectAny",
    "SelectFirst",
    "SelectLast",
    "And",
    "AuthOne",
    "AuthUnion",
    "Cmp",
    "Eq",
    "Field",
    "Lit",
    "Not",
    "Record",
    "Say",
    "Seq",
    "Term",
    "Var",
    "free_vars",
    "nat",
    "party",
    "rules",
    "sym",
    "term_from_dict",
    "UNIT",
    "Value",
    "VAuth",
    "VBool",
    "VFact",
    "VNat",
    "VParty",
    "VRecord",
    "VRules",
    "VSym",
    "VUnit",
    "value_from_dict",
]
