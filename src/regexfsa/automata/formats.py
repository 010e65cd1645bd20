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
Renders automata as Graphviz DOT source or as JSON-compatible dictionaries.

These functions only use the public read accessors of an automaton.
"""

import json

from regexfsa.automata.fsa import DFA, NFA, FSABuilder, State


def to_dot(fsa):
    """
    Returns Graphviz DOT source for an automaton.

    Final states are drawn as double circles, moves as labelled edges in move
    order, and an unlabelled ``ENTRY`` node points at the start state.

    Args:
        fsa (FSA): The automaton to render.

    Returns:
        str: The DOT source.
    """
    lines = [
        "digraph finite_state_machine {",
        "\trankdir=LR;",
        '\tsize="8,5";',
        "",
    ]
    if fsa.final_states:
        lines.append("\tnode [shape = doublecircle];")
        lines.append("\t" + " ".join(str(s.id) for s in fsa.final_states) + " ;")
        lines.append("")
    lines.append("\tnode [shape = circle];")
    for src, label, dest in fsa.moves:
        lines.append(f'\t{src.id} -> {dest.id} [label = "{label}"];')
    lines.append("")
    lines.append('\tnode [shape = none, label =""];')
    lines.append(f"\tENTRY -> {fsa.start.id};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def to_dict(fsa):
    """
    Returns a JSON-compatible dictionary describing an automaton.

    Example:
        >>> to_dict(compile("a"))
        {'alphabet': ['a'], 'states': [0, 1], 'start': 0, 'finalStates': [1], 'moves': [{'from': 0, 'consumed': 'a', 'to': 1}]}
    """
    data = {
        "alphabet": list(fsa.alphabet),
        "states": [s.id for s in fsa.states],
        "start": fsa.start.id,
        "finalStates": [s.id for s in fsa.final_states],
        "moves": [
            {"from": src.id, "consumed": label, "to": dest.id}
            for src, label, dest in fsa.moves
        ],
    }
    if isinstance(fsa, DFA) and fsa.sink is not None:
        data["sink"] = fsa.sink.id
    return data


def from_dict(data, cls=NFA):
    """
    Rebuilds an automaton from the output of :func:`to_dict`.

    Args:
        data (dict): The description.
        cls (type, optional): :class:`NFA` or :class:`DFA`. Defaults to NFA.

    Returns:
        FSA: The automaton. State origins are not part of the description
        and are left empty.

    Raises:
        KeyError: If a required key is missing.
        InvariantViolation: If the description is not a valid automaton.
    """
    b = FSABuilder()
    b.add_symbols(data["alphabet"])
    b.add_states(State(i) for i in data["states"])
    b.set_start(State(data["start"]))
    for i in data["finalStates"]:
        b.add_final_state(State(i))
    for move in data["moves"]:
        b.add_move(State(move["from"]), move["consumed"], State(move["to"]))

    kwargs = {}
    if cls is DFA and data.get("sink") is not None:
        kwargs["sink"] = State(data["sink"])
    return b.freeze(cls, **kwargs)


def to_json(fsa, **kwargs):
    """
    Returns :func:`to_dict` serialized as a JSON string. Keyword arguments
    are passed to :func:`json.dumps`.
    """
    kwargs.setdefault("ensure_ascii", False)
    return json.dumps(to_dict(fsa), **kwargs)


def from_json(text, cls=NFA):
    return from_dict(json.loads(text), cls)
