import pytest
from regexfsa.automata import (
    DFA,
    NFA,
    Move,
    State,
    compile,
    determinize,
    epsilon_closure,
    reachable_states,
)


def states(*ids):
    return tuple(State(i) for i in ids)


def moves(*triples):
    return [Move(State(src), label, State(dest)) for src, label, dest in triples]


def ids(stateset):
    return sorted(s.id for s in stateset)


def test_epsilon_closure():
    trans = compile("(a|b)a*b").transitions
    assert ids(epsilon_closure(states(4), trans)) == [0, 2, 4]
    assert ids(epsilon_closure(states(1), trans)) == [1, 5, 6, 8, 9, 10]
    assert ids(epsilon_closure(states(4, 7), trans)) == [0, 2, 4, 6, 7, 9, 10]
    assert ids(epsilon_closure(states(11), trans)) == [11]
    assert epsilon_closure((), trans) == frozenset()


def test_reachable_states():
    trans = compile("(a|b)a*b").transitions
    start = epsilon_closure(states(4), trans)
    assert ids(reachable_states(start, "a", trans)) == [1]
    assert ids(epsilon_closure(reachable_states(start, "a", trans), trans)) == [
        1, 5, 6, 8, 9, 10,
    ]
    assert reachable_states(states(11), "a", trans) == frozenset()


def test_subset_construction():
    dfa = determinize(compile("(a|b)a*b"))

    expected = DFA(
        "ab",
        states(0, 1, 2, 3, 4, 5),
        State(0),
        states(4),
        moves(
            (0, "a", 1),
            (0, "b", 2),
            (1, "a", 3),
            (1, "b", 4),
            (2, "a", 3),
            (2, "b", 4),
            (3, "a", 3),
            (3, "b", 4),
            (4, "a", 5),
            (4, "b", 5),
            (5, "a", 5),
            (5, "b", 5),
        ),
        sink=State(5),
    )
    assert dfa == expected
    assert [ids(s.origins) for s in dfa.states] == [
        [0, 2, 4],
        [1, 5, 6, 8, 9, 10],
        [3, 5, 6, 8, 9, 10],
        [6, 7, 9, 10],
        [11],
        [],
    ]


def test_total_without_sink():
    nfa = NFA(
        "ab",
        states(0, 1),
        State(0),
        states(1),
        moves((0, "a", 0), (0, "b", 0), (0, "b", 1)),
    )
    dfa = determinize(nfa)

    expected = DFA(
        "ab",
        states(0, 1),
        State(0),
        states(1),
        moves((0, "a", 0), (0, "b", 1), (1, "a", 0), (1, "b", 1)),
    )
    assert dfa == expected
    assert dfa.sink is None
    assert nfa.to_dfa() == dfa


def test_force_sink():
    nfa = NFA(
        "ab",
        states(0, 1),
        State(0),
        states(1),
        moves((0, "a", 0), (0, "b", 0), (0, "b", 1)),
    )
    dfa = determinize(nfa, force_sink=True)
    assert dfa.sink == State(2)
    assert dfa.delta[(State(2), "a")] == State(2)
    assert dfa.delta[(State(2), "b")] == State(2)
    assert State(2) not in dfa.final_states
    # Nothing else leads to the forced sink
    assert [m for m in dfa.moves if m.dest == State(2) and m.src != State(2)] == []


def test_empty_alphabet():
    dfa = determinize(compile(""))
    assert dfa.alphabet == ()
    assert dfa.states == states(0)
    assert dfa.start == State(0)
    assert dfa.final_states == states(0)
    assert dfa.moves == ()
    assert dfa.sink is None
    assert dfa.accept("")


def test_empty_alphabet_without_finals():
    nfa = NFA("", states(0, 1), State(0), (), [])
    dfa = determinize(nfa)
    assert dfa.states == states(0)
    assert dfa.final_states == ()


@pytest.mark.parametrize(
    "pattern", ["a", "ab", "a|b", "a*", "(ab)*", "a(b|c)*d", "(cd*|b)*a", "1(0|1)*"]
)
def test_result_is_complete(pattern):
    dfa = determinize(compile(pattern))
    assert dfa.is_complete()
    assert len(dfa.moves) == len(dfa.states) * len(dfa.alphabet)
    assert dfa.sink is None or dfa.sink not in dfa.final_states


def test_repeatable():
    assert determinize(compile("(cd*|b)*a")) == determinize(compile("(cd*|b)*a"))


def test_dfa_input():
    dfa = determinize(compile("(a|b)a*b"))
    again = determinize(dfa)
    assert again.states == dfa.states
    assert again.moves == dfa.moves
    assert again.final_states == dfa.final_states


def test_not_an_automaton():
    with pytest.raises(TypeError):
        determinize("(a|b)a*b")
