# Copyright 2014 Matt Chaput. All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#    1. Redistributions of source code must retain the above copyright notice,
#       this list of conditions and the following disclaimer.
#
#    2. Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY MATT CHAPUT ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO
# EVENT SHALL MATT CHAPUT OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA,
# OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
# NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of Matt Chaput.


"""
Subset (powerset) construction: converts an NFA into an equivalent complete
DFA whose states are the epsilon-closed sets of NFA states the NFA can be in
at the same time.
"""

from loguru import logger

from regexfsa.automata.fsa import (
    DFA,
    EPSILON,
    FSA,
    CompositeState,
    FSABuilder,
    StateAllocator,
)
from regexfsa.util import Stack


def epsilon_closure(states, transitions):
    """
    Expands the given set of states by following epsilon moves.

    Args:
        states (iterable): The states to expand.
        transitions (dict): A move index as returned by
            :attr:`FSA.transitions`.

    Returns:
        frozenset: Every state reachable from ``states`` using only epsilon
        moves, including the states themselves.

    Example:
        >>> nfa = compile("a*")
        >>> sorted(s.id for s in epsilon_closure({nfa.start}, nfa.transitions))
        [0, 2, 3]
    """
    closure = set(states)
    frontier = set(closure)
    while frontier:
        state = frontier.pop()
        trans = transitions.get(state)
        if trans and EPSILON in trans:
            new_states = trans[EPSILON].difference(closure)
            frontier.update(new_states)
            closure.update(new_states)
    return frozenset(closure)


def reachable_states(states, label, transitions):
    """
    Returns the set of states reachable from any of ``states`` by exactly one
    move on ``label`` (no epsilon closure is taken).

    Args:
        states (iterable): The states to start from.
        label (str): The symbol to consume.
        transitions (dict): A move index as returned by
            :attr:`FSA.transitions`.

    Returns:
        frozenset: The reached states.
    """
    reached = set()
    for state in states:
        trans = transitions.get(state)
        if trans and label in trans:
            reached.update(trans[label])
    return frozenset(reached)


def determinize(nfa, force_sink=False):
    """
    Converts an NFA (or any FSA) to a complete DFA using the subset
    construction.

    The start composite state is the epsilon closure of the NFA start. A
    stack of composite states is expanded one symbol at a time, in alphabet
    order; each non-empty target set is looked up by its origin set, so a
    set reached twice becomes one DFA state. Ids are handed out from 0 in
    discovery order. A DFA state is final if any of its origins is final.
    Finally the transition function is completed with a sink state where it
    has gaps.

    Args:
        nfa (FSA): The automaton to convert.
        force_sink (bool, optional): Always add a sink state, even when the
            transition function is already total. Defaults to False.

    Returns:
        DFA: The deterministic, complete automaton. Its states carry their
        NFA origin sets in :attr:`State.origins`.

    Raises:
        TypeError: If ``nfa`` is not an automaton.

    Example:
        >>> dfa = determinize(compile("(a|b)a*b"))
        >>> [sorted(s.id for s in state.origins) for state in dfa.states]
        [[0, 2, 4], [1, 5, 6, 8, 9, 10], [3, 5, 6, 8, 9, 10], [6, 7, 9, 10], [11], []]
    """
    if not isinstance(nfa, FSA):
        raise TypeError(f"Expected an automaton, got {nfa!r}")

    transitions = nfa.transitions
    alphabet = nfa.alphabet
    allocator = StateAllocator(0)
    builder = FSABuilder()
    builder.add_symbols(alphabet)

    first = CompositeState(epsilon_closure({nfa.start}, transitions))
    first.assign_id(allocator.new_id())
    discovered = {first: first}
    composite_moves = []

    if not alphabet:
        # Nothing can be consumed: the closure of the start is the only state
        logger.trace("Empty alphabet, building the one-state automaton")
    else:
        worklist = Stack([first])
        while worklist:
            src = worklist.pop()
            for label in alphabet:
                reached = reachable_states(src.origins, label, transitions)
                dest = CompositeState(epsilon_closure(reached, transitions))
                if dest.is_empty():
                    continue

                existing = discovered.get(dest)
                if existing is None:
                    dest.assign_id(allocator.new_id())
                    discovered[dest] = dest
                    worklist.push(dest)
                    logger.trace("New DFA state {!r}", dest)
                else:
                    dest = existing
                composite_moves.append((src, label, dest))

    plain = {composite: composite.to_state() for composite in discovered}
    finals = nfa.final_set
    for composite, state in plain.items():
        builder.add_state(state)
        if not finals.isdisjoint(composite.origins):
            builder.add_final_state(state)
    builder.set_start(plain[first])
    for src, label, dest in composite_moves:
        builder.add_move(plain[src], label, plain[dest])

    sink = builder.complete(allocator, force=force_sink)
    dfa = builder.freeze(DFA, sink=sink)
    logger.debug(
        "Determinized {} NFA states into {} DFA states ({} moves, sink={})",
        len(nfa),
        len(dfa),
        len(dfa.moves),
        None if sink is None else sink.id,
    )
    return dfa
