from rule_model import Predicate


def test_empty_predicate_always_passes():
    assert Predicate().test(set())
    assert Predicate.from_raw(None).test({"anything"})
    assert Predicate.from_raw([]).is_empty


def test_atom_requires_option():
    p = Predicate.from_raw(["self:aim:full"])
    assert p.test({"self:aim:full", "self:check"})
    assert not p.test({"self:aim:half"})


def test_statements_are_anded():
    p = Predicate.from_raw(["a", "b"])
    assert p.test({"a", "b", "c"})
    assert not p.test({"a"})


def test_negation():
    p = Predicate.from_raw(["not:flanked"])
    assert p.test(set())
    assert not p.test({"flanked"})


def test_and_or_nesting():
    p = Predicate.from_raw([{"or": ["melee", {"and": ["ranged", "not:long-range"]}]}])
    assert p.test({"melee"})
    assert p.test({"ranged"})
    assert not p.test({"ranged", "long-range"})
    assert not p.test(set())


def test_single_statement_is_wrapped():
    assert Predicate.from_raw("a").statements == ("a",)
    assert Predicate.from_raw({"or": ["a", "b"]}).test({"b"})


def test_malformed_statements_evaluate_false():
    assert not Predicate.from_raw([42]).test({"42"})
    assert not Predicate.from_raw([{"xor": ["a"]}]).test({"a"})
    assert not Predicate.from_raw([{"and": "a"}]).test({"a"})
    assert not Predicate.from_raw([{"and": ["a"], "or": ["a"]}]).test({"a"})


def test_accepts_any_iterable_of_options():
    p = Predicate.from_raw(["a"])
    assert p.test(["a", "b"])
    assert p.test(frozenset({"a"}))


def test_from_raw_copies_content():
    raw = [{"or": ["a"]}]
    p = Predicate.from_raw(raw)
    raw[0]["or"].append("b")
    assert not p.test({"b"})


def test_to_raw_is_deep_copy():
    p = Predicate.from_raw([{"and": ["a"]}])
    out = p.to_raw()
    out[0]["and"].append("b")
    assert p.test({"a"})


def test_str():
    assert str(Predicate()) == "(always)"
    assert str(Predicate.from_raw(["a", {"or": ["b", "c"]}])) == "a & (b | c)"
