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
Finite-state automata built from regular expressions.

The pipeline has three stages, each returning a new immutable automaton:

>>> from regexfsa.automata import compile, determinize, minimize
>>> nfa = compile("(a|b)a*b")
>>> dfa = determinize(nfa)
>>> small = minimize(dfa)
>>> small.accept("aab"), small.accept("ba")
(True, False)

Logging goes through loguru and is disabled for the ``regexfsa`` namespace
until the application calls ``logger.enable("regexfsa")``.
"""

from loguru import logger

from regexfsa.automata.fsa import (
    DFA,
    EPSILON,
    FSA,
    NFA,
    Alphabet,
    CompositeState,
    FSABuilder,
    InvariantViolation,
    Move,
    State,
    StateAllocator,
)
from regexfsa.automata.partition import Partition, minimize
from regexfsa.automata.powerset import determinize, epsilon_closure, reachable_states
from regexfsa.automata.reg import (
    MalformedPattern,
    RegexBuilder,
    compile,
    infix_to_postfix,
    mark_concatenation,
)

logger.disable("regexfsa")

__all__ = [
    "EPSILON",
    "Alphabet",
    "State",
    "CompositeState",
    "StateAllocator",
    "Move",
    "FSA",
    "NFA",
    "DFA",
    "FSABuilder",
    "InvariantViolation",
    "MalformedPattern",
    "RegexBuilder",
    "mark_concatenation",
    "infix_to_postfix",
    "compile",
    "epsilon_closure",
    "reachable_states",
    "determinize",
    "Partition",
    "minimize",
]
