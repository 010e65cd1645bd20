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
This module contains the value types shared by every stage of the pipeline:
symbols and alphabets, plain and composite states, moves, the immutable
:class:`NFA`/:class:`DFA` automaton values, and :class:`FSABuilder`, the only
mutable form of an automaton.

Every stage owns a builder while it runs and hands the next stage a frozen
value, so no automaton is ever mutated after it has been returned.
"""

import sys
from functools import total_ordering
from typing import NamedTuple

from cached_property import cached_property

# The reserved empty-transition symbol. It may label moves but is never part
# of a frozen automaton's alphabet.
EPSILON = "ɛ"


class InvariantViolation(Exception):
    """
    Raised when an automaton value would break one of its structural
    invariants: a start, final or move endpoint outside the state set, a move
    symbol outside the alphabet, the empty-transition symbol inside the
    alphabet, or a DFA with more than one move for some (state, symbol) pair.

    This always indicates a programming error in hand-built input, so it is
    never caught and repaired inside the package.
    """


# Symbols


class Alphabet:
    """
    A totally ordered set of input symbols.

    Iteration always follows the symbols' natural order, so two alphabets
    holding the same symbols iterate identically regardless of insertion
    order.

    Example:
        >>> alpha = Alphabet("ba")
        >>> alpha.add_symbol("c")
        >>> list(alpha)
        ['a', 'b', 'c']
    """

    def __init__(self, symbols=()):
        self._symbols = set()
        self.add_symbols(symbols)

    def __contains__(self, symbol):
        return symbol in self._symbols

    def __len__(self):
        return len(self._symbols)

    def __iter__(self):
        return iter(sorted(self._symbols))

    def __eq__(self, other):
        if not isinstance(other, Alphabet):
            return NotImplemented
        return self._symbols == other._symbols

    def __repr__(self):
        return f"Alphabet({''.join(self)!r})"

    def add_symbol(self, symbol):
        """
        Adds a symbol to the alphabet.

        Args:
            symbol (str): A single character.

        Raises:
            TypeError: If the symbol is not a one-character string.
        """
        if not isinstance(symbol, str) or len(symbol) != 1:
            raise TypeError(f"Symbols must be single characters, not {symbol!r}")
        self._symbols.add(symbol)

    def add_symbols(self, symbols):
        for symbol in symbols:
            self.add_symbol(symbol)

    def discard_symbol(self, symbol):
        self._symbols.discard(symbol)

    def copy(self):
        return Alphabet(self._symbols)


# States


@total_ordering
class State:
    """
    An automaton vertex.

    A plain state is identified by its integer id alone: equality, hashing
    and ordering ignore ``origins``. States produced by determinization or
    minimization keep the set of states they were built from in ``origins``
    so the provenance of every DFA state stays inspectable.

    Args:
        id (int): The state's identity.
        origins (iterable, optional): The states this state was built from.
    """

    def __init__(self, id, origins=()):
        self._id = id
        self._origins = frozenset(origins)

    @property
    def id(self):
        return self._id

    @property
    def origins(self):
        return self._origins

    def __eq__(self, other):
        if not isinstance(other, State):
            return NotImplemented
        return self._id == other._id

    def __lt__(self, other):
        if not isinstance(other, State):
            return NotImplemented
        return self._id < other._id

    def __hash__(self):
        return hash(self._id)

    def __repr__(self):
        if self._origins:
            ids = ", ".join(str(s.id) for s in sorted(self._origins))
            return f"State({self._id}, {{{ids}}})"
        return f"State({self._id})"


class CompositeState:
    """
    A DFA state under construction, identified by the set of states it was
    built from rather than by its id.

    Two composite states with the same origin set are the same state, even
    when one of them has not been given an id yet. The id is assigned once,
    after deduplication, and :meth:`to_state` turns the finished composite
    into a plain :class:`State` for the frozen automaton.

    Example:
        >>> a = CompositeState({State(1), State(2)})
        >>> b = CompositeState({State(2), State(1)}, id=7)
        >>> a == b
        True
    """

    def __init__(self, origins, id=None):
        self._origins = frozenset(origins)
        self._id = id

    @property
    def id(self):
        return self._id

    @property
    def origins(self):
        return self._origins

    def assign_id(self, id):
        """
        Gives this composite state its id.

        Raises:
            InvariantViolation: If an id was already assigned.
        """
        if self._id is not None:
            raise InvariantViolation(
                f"Composite state {self!r} already has id {self._id}"
            )
        self._id = id

    def is_empty(self):
        return not self._origins

    def to_state(self):
        """
        Converts this composite state into a plain :class:`State` carrying the
        same id and origins.

        Returns:
            State: The plain state.

        Raises:
            InvariantViolation: If no id has been assigned yet.
        """
        if self._id is None:
            raise InvariantViolation(f"Composite state {self!r} has no id")
        return State(self._id, self._origins)

    def __eq__(self, other):
        if not isinstance(other, CompositeState):
            return NotImplemented
        return self._origins == other._origins

    def __hash__(self):
        return hash(self._origins)

    def __repr__(self):
        ids = ", ".join(str(s.id) for s in sorted(self._origins))
        return f"CompositeState({{{ids}}}, id={self._id})"


class StateAllocator:
    """
    Hands out consecutive state ids for one construction pass.

    Every independent build creates its own allocator, so construction is
    reentrant and always numbers states the same way for the same input.

    Args:
        start (int, optional): The first id to hand out. Defaults to 0.
    """

    def __init__(self, start=0):
        self._next = start

    def peek(self):
        """Returns the id the next call to :meth:`new_id` will return."""
        return self._next

    def new_id(self):
        n = self._next
        self._next += 1
        return n

    def new_state(self, origins=()):
        return State(self.new_id(), origins)


class Move(NamedTuple):
    """
    A transition (src, label, dest). Moves order lexicographically by source
    state id, symbol and destination state id.
    """

    src: State
    label: str
    dest: State

    def __repr__(self):
        return f"Move({self.src.id}, {self.label!r}, {self.dest.id})"


# Builder


class FSABuilder:
    """
    The mutable form of an automaton.

    A construction stage accumulates symbols, states and moves in a builder
    and then calls :meth:`freeze` to obtain the immutable value it returns.
    Nothing is validated until :meth:`freeze`.

    Attributes:
        alphabet (Alphabet): The symbols added so far.
        states (set): The states added so far.
        start (State): The start state, or None.
        final_states (set): The final states added so far.
        moves (set): The moves added so far.

    Usage:
        b = FSABuilder()
        s, e = State(0), State(1)
        b.add_states((s, e))
        b.set_start(s)
        b.add_final_state(e)
        b.add_symbol("a")
        b.add_move(s, "a", e)
        nfa = b.freeze(NFA)
    """

    def __init__(self):
        self.alphabet = Alphabet()
        self.states = set()
        self.start = None
        self.final_states = set()
        self.moves = set()

    def add_symbol(self, symbol):
        self.alphabet.add_symbol(symbol)

    def add_symbols(self, symbols):
        self.alphabet.add_symbols(symbols)

    def add_state(self, state):
        self.states.add(state)

    def add_states(self, states):
        self.states.update(states)

    def set_start(self, state):
        self.start = state

    def add_final_state(self, state):
        self.final_states.add(state)

    def clear_final_states(self):
        self.final_states.clear()

    def add_move(self, src, label, dest):
        self.moves.add(Move(src, label, dest))

    def add_moves(self, moves):
        for move in moves:
            self.add_move(*move)

    def embed(self, other):
        """
        Copies the symbols, states and moves of another automaton into this
        builder. The start and final states are left untouched.

        Args:
            other (FSA): The automaton to copy from.
        """
        self.add_symbols(other.alphabet)
        self.add_states(other.states)
        self.add_moves(other.moves)

    def copy(self):
        """
        Returns an independent copy of this builder.
        """
        other = FSABuilder()
        other.alphabet = self.alphabet.copy()
        other.states = set(self.states)
        other.start = self.start
        other.final_states = set(self.final_states)
        other.moves = set(self.moves)
        return other

    def complete(self, allocator, force=False):
        """
        Makes the transition function total over the alphabet.

        Every (state, symbol) pair without an outgoing move gets a move to a
        new sink state, visiting states in id order and symbols in symbol
        order. The sink loops back to itself on every symbol and is never
        final.

        Args:
            allocator (StateAllocator): Supplies the sink's id.
            force (bool, optional): Materialize the sink even when the
                transition function is already total. Defaults to False.

        Returns:
            State: The sink state, or None if none was needed.

        Raises:
            InvariantViolation: If the allocator's id is already in use.
        """
        present = {(move.src, move.label) for move in self.moves}
        gaps = [
            (state, label)
            for state in sorted(self.states)
            for label in self.alphabet
            if (state, label) not in present
        ]
        if not gaps and not force:
            return None

        sink = allocator.new_state()
        if sink in self.states:
            raise InvariantViolation(f"Sink id {sink.id} is already in use")
        self.add_state(sink)
        for state, label in gaps:
            self.add_move(state, label, sink)
        for label in self.alphabet:
            self.add_move(sink, label, sink)
        return sink

    def freeze(self, cls, **kwargs):
        """
        Validates the accumulated structure and returns it as an immutable
        automaton of the given class.

        Args:
            cls (type): :class:`NFA` or :class:`DFA`.
            **kwargs: Extra constructor arguments, e.g. ``sink`` for a DFA.

        Returns:
            FSA: The frozen automaton. Later changes to the builder do not
            affect it.

        Raises:
            InvariantViolation: If the structure breaks an invariant.
        """
        return cls(
            self.alphabet,
            self.states,
            self.start,
            self.final_states,
            self.moves,
            **kwargs,
        )


# Automaton values


class FSA:
    """
    Finite State Automaton (FSA) value.

    An FSA is the tuple (alphabet, states, start, final states, moves). It is
    immutable: every accessor returns a tuple in a fixed total order (symbols
    in natural order, states by id, moves lexicographically), so two
    automata built from the same input compare and print identically.

    Args:
        alphabet (iterable): The input symbols.
        states (iterable): The :class:`State` objects.
        start (State): The start state.
        final_states (iterable): The accepting states.
        moves (iterable): :class:`Move` objects or (src, label, dest) triples.

    Raises:
        TypeError: If a state is not a :class:`State`.
        InvariantViolation: If the structure breaks an invariant.

    Methods:
        initial(): The state (or set of states) simulation starts from.
        next_state(state, label): One simulation step.
        is_final(state): Whether a simulation state accepts.
        accept(string): Whether the automaton accepts a string.
        builder(): A mutable copy of this automaton.
        dump(stream): Prints a readable listing of the automaton.
    """

    def __init__(self, alphabet, states, start, final_states, moves):
        self._alphabet = tuple(Alphabet(alphabet))
        self._states = tuple(sorted(set(states)))
        self._start = start
        self._final_states = tuple(sorted(set(final_states)))
        self._moves = tuple(sorted({Move(*move) for move in moves}))
        self._check()

    def _check(self):
        for state in self._states:
            if not isinstance(state, State):
                raise TypeError(f"{state!r} is not a State")

        stateset = self.state_set
        if self._start not in stateset:
            raise InvariantViolation(
                f"Start state {self._start!r} is not a state of the automaton"
            )
        for state in self._final_states:
            if state not in stateset:
                raise InvariantViolation(
                    f"Final state {state!r} is not a state of the automaton"
                )

        alphabet = frozenset(self._alphabet)
        if EPSILON in alphabet:
            raise InvariantViolation(
                "The empty-transition symbol cannot be part of the alphabet"
            )
        for move in self._moves:
            if move.src not in stateset or move.dest not in stateset:
                raise InvariantViolation(
                    f"{move!r} connects states outside the automaton"
                )
            if move.label != EPSILON and move.label not in alphabet:
                raise InvariantViolation(
                    f"{move!r} consumes a symbol outside the alphabet"
                )

    # Read accessors

    @property
    def alphabet(self):
        return self._alphabet

    @property
    def states(self):
        return self._states

    @property
    def start(self):
        return self._start

    @property
    def final_states(self):
        return self._final_states

    @property
    def moves(self):
        return self._moves

    @cached_property
    def state_set(self):
        return frozenset(self._states)

    @cached_property
    def final_set(self):
        return frozenset(self._final_states)

    @cached_property
    def transitions(self):
        """
        An index of the moves: ``{src: {label: frozenset(dests)}}``.
        """
        index = {}
        for src, label, dest in self._moves:
            index.setdefault(src, {}).setdefault(label, set()).add(dest)
        return {
            src: {label: frozenset(dests) for label, dests in trans.items()}
            for src, trans in index.items()
        }

    def __len__(self):
        return len(self._states)

    def __eq__(self, other):
        """
        Two automata are equal when they are of the same kind and all five
        accessors are equal.
        """
        if type(self) is not type(other):
            return NotImplemented
        return (
            self._alphabet == other._alphabet
            and self._states == other._states
            and self._start == other._start
            and self._final_states == other._final_states
            and self._moves == other._moves
        )

    __hash__ = None

    def __repr__(self):
        return (
            f"<{type(self).__name__} alphabet={''.join(self._alphabet)!r} "
            f"states={len(self._states)} start={self._start.id} "
            f"final={[s.id for s in self._final_states]} "
            f"moves={len(self._moves)}>"
        )

    def builder(self):
        """
        Returns a new :class:`FSABuilder` holding a copy of this automaton.
        """
        b = FSABuilder()
        b.add_symbols(self._alphabet)
        b.add_states(self._states)
        b.set_start(self._start)
        for state in self._final_states:
            b.add_final_state(state)
        b.add_moves(self._moves)
        return b

    def dump(self, stream=sys.stdout):
        """
        Prints a textual representation of the automaton to the specified
        stream. The start state is marked with ``@`` and final states with
        ``||``.

        Example:
            >>> compile("ab").dump()
            @ 0
               a -> 1
              1
               ɛ -> 2
              2
               b -> 3
              3 ||
        """
        for src in self._states:
            beg = "@" if src == self._start else " "
            end = " ||" if src in self.final_set else ""
            print(f"{beg} {src.id}{end}", file=stream)
            trans = self.transitions.get(src, {})
            for label in sorted(trans):
                dests = " ".join(str(d.id) for d in sorted(trans[label]))
                print(f"   {label} -> {dests}", file=stream)

    # Simulation

    def initial(self):
        """
        Returns the simulation state the automaton starts in.

        Raises:
            NotImplementedError: This method should be implemented in a
                subclass.
        """
        raise NotImplementedError

    def next_state(self, state, label):
        """
        Returns the simulation state reached from ``state`` by consuming
        ``label``, or a falsy value if no move applies.

        Raises:
            NotImplementedError: This method should be implemented in a
                subclass.
        """
        raise NotImplementedError

    def is_final(self, state):
        raise NotImplementedError

    def accept(self, string):
        """
        Checks if a given string is accepted by the automaton.

        Args:
            string (str): The string to check.

        Returns:
            bool: True if the string is accepted, False otherwise.

        Example:
            >>> nfa = compile("ab*")
            >>> nfa.accept("abbb")
            True
            >>> nfa.accept("ba")
            False
        """
        state = self.initial()
        for label in string:
            state = self.next_state(state, label)
            if not state:
                return False
        return self.is_final(state)


class NFA(FSA):
    """
    Nondeterministic finite automaton. Several moves may share a (state,
    symbol) pair and moves may consume :data:`EPSILON`.

    Simulation uses subset semantics: a simulation state is the frozenset of
    NFA states the automaton may currently be in, closed under epsilon moves.
    """

    def initial(self):
        from regexfsa.automata.powerset import epsilon_closure

        return epsilon_closure({self._start}, self.transitions)

    def next_state(self, states, label):
        """
        Returns the epsilon-closed set of states reached from ``states`` by
        one move on ``label``.

        Args:
            states (iterable): The current states.
            label (str): The symbol to consume.

        Returns:
            frozenset: The reached states; empty if none.
        """
        from regexfsa.automata.powerset import epsilon_closure, reachable_states

        if label == EPSILON:
            return frozenset()
        transitions = self.transitions
        return epsilon_closure(reachable_states(states, label, transitions), transitions)

    def is_final(self, states):
        return not self.final_set.isdisjoint(states)

    def to_dfa(self, force_sink=False):
        """
        Converts the NFA to an equivalent complete DFA. See
        :func:`regexfsa.automata.powerset.determinize`.
        """
        from regexfsa.automata.powerset import determinize

        return determinize(self, force_sink=force_sink)


class DFA(FSA):
    """
    Deterministic finite automaton.

    A DFA has at most one move for every (state, symbol) pair and no epsilon
    moves; a *complete* DFA has exactly one. The ``sink`` (phi) state, when
    present, is the non-final state that absorbs every otherwise undefined
    transition.

    Args:
        alphabet, states, start, final_states, moves: As for :class:`FSA`.
        sink (State, optional): The sink state. Defaults to None.

    Raises:
        InvariantViolation: In addition to the :class:`FSA` checks, if a move
            consumes :data:`EPSILON`, if a (state, symbol) pair has more than
            one move, or if the sink is not a non-final state.
    """

    def __init__(self, alphabet, states, start, final_states, moves, sink=None):
        self._sink = sink
        super().__init__(alphabet, states, start, final_states, moves)

    def _check(self):
        super()._check()
        seen = set()
        for move in self._moves:
            if move.label == EPSILON:
                raise InvariantViolation(f"DFA move {move!r} consumes epsilon")
            key = (move.src, move.label)
            if key in seen:
                raise InvariantViolation(
                    f"DFA state {move.src.id} has more than one move on "
                    f"{move.label!r}"
                )
            seen.add(key)

        sink = self._sink
        if sink is not None:
            if sink not in self.state_set:
                raise InvariantViolation(f"Sink {sink!r} is not a state of the DFA")
            if sink in self.final_set:
                raise InvariantViolation(f"Sink {sink!r} cannot be a final state")

    @property
    def sink(self):
        return self._sink

    @cached_property
    def delta(self):
        """
        The transition function as a ``{(src, label): dest}`` dictionary.
        """
        return {(move.src, move.label): move.dest for move in self._moves}

    def __eq__(self, other):
        eq = super().__eq__(other)
        if eq is not True:
            return eq
        return self._sink == other._sink

    __hash__ = None

    def missing_moves(self):
        """
        Returns the (state, symbol) pairs without an outgoing move, in state
        then symbol order.
        """
        delta = self.delta
        return [
            (state, label)
            for state in self._states
            for label in self._alphabet
            if (state, label) not in delta
        ]

    def is_complete(self):
        return not self.missing_moves()

    def initial(self):
        return self._start

    def next_state(self, src, label):
        return self.delta.get((src, label))

    def is_final(self, state):
        return state in self.final_set

    def to_dfa(self):
        return self

    def minimize(self, always_sink=False):
        """
        Returns the minimal equivalent DFA. See
        :func:`regexfsa.automata.partition.minimize`.
        """
        from regexfsa.automata.partition import minimize

        return minimize(self, always_sink=always_sink)
