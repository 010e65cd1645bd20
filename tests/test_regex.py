import pytest
from loguru import logger
from regexfsa.automata import (
    EPSILON,
    NFA,
    MalformedPattern,
    Move,
    RegexBuilder,
    State,
    StateAllocator,
    compile,
    infix_to_postfix,
    mark_concatenation,
)


def states(*ids):
    return tuple(State(i) for i in ids)


def moves(*triples):
    return [Move(State(src), label, State(dest)) for src, label, dest in triples]


def test_mark_concatenation():
    assert mark_concatenation("(a|b)a*b") == "(a|b).a*.b"
    assert mark_concatenation("ab") == "a.b"
    assert mark_concatenation("a|b") == "a|b"
    assert mark_concatenation("a**") == "a**"
    assert mark_concatenation("(ab)*") == "(a.b)*"
    assert mark_concatenation("a(b|c)*d") == "a.(b|c)*.d"
    assert mark_concatenation("(cd*|b)*a") == "(c.d*|b)*.a"
    assert mark_concatenation("") == ""


def test_infix_to_postfix():
    assert infix_to_postfix("(a|b).a*.b") == "ab|a*.b."
    assert infix_to_postfix("a.b") == "ab."
    assert infix_to_postfix("a|b") == "ab|"
    assert infix_to_postfix("a**") == "a**"
    assert infix_to_postfix("(a.b)*") == "ab.*"
    assert infix_to_postfix("a.(b|c)*.d") == "abc|*.d."
    assert infix_to_postfix("(c.d*|b)*.a") == "cd*b|.*a."
    assert infix_to_postfix("") == ""


def test_concatenation_ranks_below_choice():
    # "." has the lowest rank, so "ab|c" reads as a(b|c)
    assert infix_to_postfix(mark_concatenation("ab|c")) == "abc|."
    nfa = compile("ab|c")
    assert nfa.accept("ab")
    assert nfa.accept("ac")
    assert not nfa.accept("c")


def test_infix_to_postfix_errors():
    with pytest.raises(MalformedPattern) as exc:
        infix_to_postfix("a)")
    assert exc.value.position == 1
    assert exc.value.pattern == "a)"

    with pytest.raises(MalformedPattern):
        infix_to_postfix("(a")
    with pytest.raises(MalformedPattern):
        infix_to_postfix("a+b")


def test_malformed_pattern_message():
    e = MalformedPattern("Unbalanced ')'", "a)", 1)
    assert str(e) == "Unbalanced ')' in pattern 'a)' at position 1"
    assert str(MalformedPattern("Oops")) == "Oops"


@pytest.mark.parametrize(
    "pattern", ["(a", "a)", ")", "|a", "*a", "a|", "a||b", "a+b", "a b", "a.b", "a()"]
)
def test_compile_malformed(pattern):
    with pytest.raises(MalformedPattern):
        compile(pattern)


def test_compile_type():
    with pytest.raises(TypeError):
        compile(None)
    with pytest.raises(TypeError):
        compile(b"ab")


def test_single_symbol():
    nfa = compile("a")
    assert nfa.alphabet == ("a",)
    assert nfa.states == states(0, 1)
    assert nfa.start == State(0)
    assert nfa.final_states == states(1)
    assert nfa.moves == tuple(moves((0, "a", 1)))


def test_builder_concat():
    rb = RegexBuilder()
    a = rb.char("a")
    b = rb.char("b")
    nfa = rb.concat(a, b)

    expected = NFA(
        "ab",
        states(0, 1, 2, 3),
        State(0),
        states(3),
        moves((0, "a", 1), (1, EPSILON, 2), (2, "b", 3)),
    )
    assert nfa == expected
    # The operands are values and stay as they were
    assert a.moves == tuple(moves((0, "a", 1)))
    assert b.final_states == states(3)


def test_builder_star():
    rb = RegexBuilder()
    nfa = rb.star(rb.char("a"))

    expected = NFA(
        "a",
        states(0, 1, 2, 3),
        State(2),
        states(3),
        moves(
            (0, "a", 1),
            (1, EPSILON, 0),
            (1, EPSILON, 3),
            (2, EPSILON, 0),
            (2, EPSILON, 3),
        ),
    )
    assert nfa == expected


def test_builder_choice():
    rb = RegexBuilder()
    nfa = rb.choice(rb.char("a"), rb.char("b"))

    expected = NFA(
        "ab",
        states(0, 1, 2, 3, 4, 5),
        State(4),
        states(5),
        moves(
            (0, "a", 1),
            (1, EPSILON, 5),
            (2, "b", 3),
            (3, EPSILON, 5),
            (4, EPSILON, 0),
            (4, EPSILON, 2),
        ),
    )
    assert nfa == expected


def test_builder_epsilon():
    nfa = RegexBuilder().epsilon()
    assert nfa.alphabet == ()
    assert nfa.moves == tuple(moves((0, EPSILON, 1)))


def test_thompson_full():
    nfa = compile("(a|b)a*b")

    expected = NFA(
        "ab",
        states(*range(12)),
        State(4),
        states(11),
        moves(
            (0, "a", 1),
            (1, EPSILON, 5),
            (2, "b", 3),
            (3, EPSILON, 5),
            (4, EPSILON, 0),
            (4, EPSILON, 2),
            (5, EPSILON, 8),
            (6, "a", 7),
            (7, EPSILON, 6),
            (7, EPSILON, 9),
            (8, EPSILON, 6),
            (8, EPSILON, 9),
            (9, EPSILON, 10),
            (10, "b", 11),
        ),
    )
    assert nfa == expected
    assert nfa.accept("ab")
    assert nfa.accept("baaab")
    assert not nfa.accept("abb")
    assert not nfa.accept("")


def test_empty_pattern():
    nfa = compile("")
    assert nfa.alphabet == ()
    assert nfa.states == states(0, 1)
    assert nfa.start == State(0)
    assert nfa.final_states == states(1)
    assert nfa.moves == tuple(moves((0, EPSILON, 1)))
    assert nfa.accept("")
    assert not nfa.accept("a")


def test_epsilon_literal():
    nfa = compile("a|" + EPSILON)
    assert nfa.alphabet == ("a",)
    assert nfa.accept("")
    assert nfa.accept("a")
    assert not nfa.accept("aa")


def test_digits_are_symbols():
    nfa = compile("1(0|1)*")
    assert nfa.alphabet == ("0", "1")
    assert nfa.accept("1")
    assert nfa.accept("10110")
    assert not nfa.accept("01")


def test_allocator_scope():
    nfa = compile("a", allocator=StateAllocator(10))
    assert nfa.states == states(10, 11)

    # Builds do not share ids
    assert compile("(a|b)a*b") == compile("(a|b)a*b")
    assert compile("a").states == states(0, 1)


def test_logging_is_opt_in():
    messages = []
    handler = logger.add(messages.append, level="DEBUG")
    try:
        compile("a")
        assert messages == []

        logger.enable("regexfsa")
        compile("a")
        assert any("Compiled 'a'" in m for m in messages)
    finally:
        logger.disable("regexfsa")
        logger.remove(handler)
