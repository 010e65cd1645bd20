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
DFA minimization by Myhill-Nerode partition refinement.

The states of a complete DFA start out in two blocks, final and non-final.
Each pass splits any block whose states disagree, for some symbol, on which
block they move to. When a pass changes nothing, every block is a set of
equivalent states and becomes one state of the minimal DFA.
"""

from loguru import logger

from regexfsa.automata.fsa import (
    DFA,
    CompositeState,
    FSABuilder,
    InvariantViolation,
    StateAllocator,
)


class Partition:
    """
    An immutable partition of DFA states into blocks.

    Blocks are non-empty, pairwise disjoint frozensets, kept in ascending
    order of each block's lowest state id. The order does not depend on how
    the partition was reached, so two partitions are equal exactly when they
    group the states the same way.

    Args:
        blocks (iterable): Iterables of states. Empty blocks are dropped.

    Raises:
        InvariantViolation: If two blocks share a state.

    Example:
        >>> p = Partition([{State(3)}, {State(1)}, {State(0), State(2)}])
        >>> [sorted(s.id for s in block) for block in p]
        [[0, 2], [1], [3]]
    """

    def __init__(self, blocks=()):
        blocks = [frozenset(block) for block in blocks]
        blocks = [block for block in blocks if block]
        self._blocks = tuple(sorted(blocks, key=min))

        self._index = {}
        for block in self._blocks:
            for state in block:
                if state in self._index:
                    raise InvariantViolation(f"{state!r} is in more than one block")
                self._index[state] = block

    @classmethod
    def initial(cls, dfa):
        """
        Returns the starting partition of a DFA: the final states and the
        remaining states.
        """
        finals = dfa.final_set
        return cls([finals, [s for s in dfa.states if s not in finals]])

    def __iter__(self):
        return iter(self._blocks)

    def __len__(self):
        return len(self._blocks)

    def __eq__(self, other):
        if not isinstance(other, Partition):
            return NotImplemented
        return self._blocks == other._blocks

    __hash__ = None

    def __repr__(self):
        blocks = ", ".join(
            "{" + ", ".join(str(s.id) for s in sorted(block)) + "}"
            for block in self._blocks
        )
        return f"Partition([{blocks}])"

    def block_of(self, state):
        """
        Returns the block containing ``state``, or None if no block does.
        """
        return self._index.get(state)

    def included_states(self, block, label, target, dfa):
        """
        Returns the states of ``block`` whose move on ``label`` lands in the
        block ``target``.
        """
        delta = dfa.delta
        return frozenset(s for s in block if delta[(s, label)] in target)

    def excluded_states(self, block, label, target, dfa):
        """
        Returns the states of ``block`` whose move on ``label`` does not land
        in the block ``target``.
        """
        return block - self.included_states(block, label, target, dfa)

    def split(self, block, included, excluded):
        """
        Returns a new partition in which ``block`` is replaced by the two
        blocks ``included`` and ``excluded``.

        Raises:
            InvariantViolation: If ``block`` is not part of this partition or
                the two halves do not divide it exactly.
        """
        if block not in self._blocks:
            raise InvariantViolation(f"{block!r} is not a block of {self!r}")
        if included & excluded or (included | excluded) != block:
            raise InvariantViolation(f"Not a split of {block!r}")
        blocks = [b for b in self._blocks if b != block]
        blocks.append(included)
        blocks.append(excluded)
        return Partition(blocks)

    def to_composite_states(self):
        """
        Returns one :class:`CompositeState` per block, with ids assigned in
        block order starting at 0.
        """
        return [CompositeState(block, id=i) for i, block in enumerate(self._blocks)]


def _refine(snapshot, dfa):
    # Each block of the snapshot is split at most once per pass, against the
    # partition as it stands after the splits made earlier in the pass.
    current = snapshot
    for block in snapshot:
        if len(block) < 2:
            continue
        halves = _find_split(block, current, dfa)
        if halves is not None:
            included, excluded = halves
            logger.trace(
                "Splitting {} into {} and {}",
                sorted(s.id for s in block),
                sorted(s.id for s in included),
                sorted(s.id for s in excluded),
            )
            current = current.split(block, included, excluded)
    return current


def _find_split(block, partition, dfa):
    delta = dfa.delta
    for label in dfa.alphabet:
        for state in sorted(block):
            target = partition.block_of(delta[(state, label)])
            included = partition.included_states(block, label, target, dfa)
            excluded = block - included
            if excluded:
                return included, excluded
    return None


def minimize(dfa, always_sink=False):
    """
    Returns the minimal DFA equivalent to a complete DFA.

    The partition is refined until a pass leaves it unchanged. Each refinement
    pass computes a new partition from a snapshot of the previous one, and
    convergence is detected by comparing the two. The minimized DFA has one
    state per block, numbered in block order; its start, final states and
    sink are the blocks containing the old ones, and every old move (src,
    label, dest) becomes (block of src, label, block of dest).

    A DFA without final states accepts the empty language and is returned
    unchanged.

    Args:
        dfa (DFA): A complete DFA, e.g. the output of
            :func:`regexfsa.automata.powerset.determinize`.
        always_sink (bool, optional): If the DFA has no sink, complete the
            minimized DFA with a freshly materialized one anyway. The extra
            sink is unreachable and equivalent to any existing dead state, so
            the result is no longer strictly minimal. Defaults to False, in
            which case the result has a sink exactly when the input does.

    Returns:
        DFA: The minimized DFA. Its states carry the merged input states in
        :attr:`State.origins`.

    Raises:
        TypeError: If ``dfa`` is not a :class:`DFA`.
        InvariantViolation: If the DFA is not complete.
    """
    if not isinstance(dfa, DFA):
        raise TypeError(f"Expected a DFA, got {dfa!r}")
    if not dfa.final_states:
        logger.debug("DFA accepts the empty language, nothing to minimize")
        return dfa

    missing = dfa.missing_moves()
    if missing:
        state, label = missing[0]
        raise InvariantViolation(
            f"Cannot minimize an incomplete DFA: state {state.id} has no move "
            f"on {label!r}"
        )

    partition = Partition.initial(dfa)
    passes = 0
    while True:
        passes += 1
        snapshot = partition
        partition = _refine(snapshot, dfa)
        if partition == snapshot:
            break

    mapping = {}
    for composite in partition.to_composite_states():
        state = composite.to_state()
        for old in composite.origins:
            mapping[old] = state

    b = FSABuilder()
    b.add_symbols(dfa.alphabet)
    b.add_states(mapping.values())
    b.set_start(mapping[dfa.start])
    for old in dfa.final_states:
        b.add_final_state(mapping[old])
    for src, label, dest in dfa.moves:
        b.add_move(mapping[src], label, mapping[dest])

    sink = None if dfa.sink is None else mapping[dfa.sink]
    if sink is None and always_sink:
        sink = b.complete(StateAllocator(len(partition)), force=True)

    result = b.freeze(DFA, sink=sink)
    logger.debug(
        "Minimized {} DFA states into {} in {} passes",
        len(dfa),
        len(result),
        passes,
    )
    return result
