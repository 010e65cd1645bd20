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
Compiles regular expressions into NFAs.

Compilation happens in three steps:

1. :func:`mark_concatenation` makes the implicit concatenation operator
   explicit, e.g. ``(a|b)a*b`` becomes ``(a|b).a*.b``.
2. :func:`infix_to_postfix` runs the shunting-yard algorithm over the marked
   string, e.g. ``(a|b).a*.b`` becomes ``ab|a*.b.``.
3. :meth:`RegexBuilder.build` reduces the postfix tokens to an NFA with
   Thompson's construction.

The supported syntax is single alphanumeric symbols, the empty-string
symbol :data:`EPSILON`, alternation ``|``, Kleene star ``*`` and grouping
with parentheses.
"""

from loguru import logger

from regexfsa.automata.fsa import EPSILON, NFA, FSABuilder, StateAllocator
from regexfsa.util import Stack

# Operators
CONCAT = "."
CHOICE = "|"
STAR = "*"
LPAREN = "("
RPAREN = ")"

# Ranks used by the shunting-yard pop rule
PRECEDENCE = {CONCAT: 1, CHOICE: 2, STAR: 3}
LEFT_ASSOCIATIVE = frozenset((CONCAT, STAR))


class MalformedPattern(Exception):
    """
    Raised when a regular expression cannot be compiled: unbalanced
    parentheses, an operator without an operand, an unexpected character, or
    a pattern that starts with an operator.

    Attributes:
        msg (str): Explanation of the error.
        pattern (str): The string being processed, if known.
        position (int): The offending index into ``pattern``, if known.
    """

    def __init__(self, msg, pattern=None, position=None):
        super().__init__(msg)
        self.msg = msg
        self.pattern = pattern
        self.position = position

    def __str__(self):
        s = self.msg
        if self.pattern is not None:
            s += f" in pattern {self.pattern!r}"
        if self.position is not None:
            s += f" at position {self.position}"
        return s


def is_operand(char):
    return char == EPSILON or char.isalnum()


def mark_concatenation(pattern):
    """
    Inserts the explicit concatenation operator ``.`` between every pair of
    adjacent tokens that are implicitly concatenated: after an operand, a
    ``)`` or a ``*``, and before an operand or a ``(``.

    Args:
        pattern (str): The infix pattern.

    Returns:
        str: The marked infix pattern.

    Example:
        >>> mark_concatenation("(a|b)a*b")
        '(a|b).a*.b'
    """
    marked = []
    limit = len(pattern)
    for i, char in enumerate(pattern):
        marked.append(char)
        if i + 1 < limit:
            nxt = pattern[i + 1]
            if (is_operand(char) or char in (RPAREN, STAR)) and (
                is_operand(nxt) or nxt == LPAREN
            ):
                marked.append(CONCAT)
    return "".join(marked)


def infix_to_postfix(marked):
    """
    Converts a marked infix pattern to postfix using Dijkstra's shunting-yard
    algorithm.

    An operator pops the stack while the top is an operator ranked higher
    than it, or ranked the same when the incoming operator is
    left-associative (``.`` and ``*``). A ``)`` pops up to and discarding the
    matching ``(``.

    Args:
        marked (str): The output of :func:`mark_concatenation`.

    Returns:
        str: The postfix token string.

    Raises:
        MalformedPattern: On unbalanced parentheses or an unexpected
            character.

    Example:
        >>> infix_to_postfix("(a|b).a*.b")
        'ab|a*.b.'
    """
    output = []
    operators = Stack()

    for pos, token in enumerate(marked):
        if is_operand(token):
            output.append(token)
        elif token in PRECEDENCE:
            rank = PRECEDENCE[token]
            while operators and operators.peek() != LPAREN:
                top_rank = PRECEDENCE[operators.peek()]
                if top_rank > rank or (
                    top_rank == rank and token in LEFT_ASSOCIATIVE
                ):
                    output.append(operators.pop())
                else:
                    break
            operators.push(token)
        elif token == LPAREN:
            operators.push(token)
        elif token == RPAREN:
            while True:
                if not operators:
                    raise MalformedPattern("Unbalanced ')'", marked, pos)
                top = operators.pop()
                if top == LPAREN:
                    break
                output.append(top)
        else:
            raise MalformedPattern(f"Unexpected character {token!r}", marked, pos)

    while operators:
        top = operators.pop()
        if top == LPAREN:
            raise MalformedPattern("Unclosed '('", marked)
        output.append(top)

    return "".join(output)


class RegexBuilder:
    """
    Builds NFAs with Thompson's construction.

    Every fragment operation takes and returns frozen :class:`NFA` values and
    numbers new states from the builder's :class:`StateAllocator`, so one
    builder corresponds to one independent build.

    Usage:
        rb = RegexBuilder()
        nfa = rb.char("a")  # states 0, 1
        nfa2 = rb.concat(nfa, rb.char("b"))  # adds states 2, 3
    """

    def __init__(self, allocator=None):
        if allocator is None:
            allocator = StateAllocator()
        self.allocator = allocator

    def new_state(self):
        return self.allocator.new_state()

    def char(self, label):
        """
        Create an NFA for a single symbol: two states joined by one move.

        Args:
            label (str): The symbol. :data:`EPSILON` gives the NFA for the
                empty string; it is not added to the alphabet.

        Returns:
            NFA: The NFA representing the symbol.
        """
        s = self.new_state()
        e = self.new_state()
        b = FSABuilder()
        b.add_states((s, e))
        b.set_start(s)
        b.add_final_state(e)
        if label != EPSILON:
            b.add_symbol(label)
        b.add_move(s, label, e)
        return b.freeze(NFA)

    def epsilon(self):
        return self.char(EPSILON)

    def concat(self, left, right):
        """
        Create an NFA for the concatenation of two NFAs.

        Every final state of ``left`` gets an epsilon move to the start of
        ``right``. No new states are created.

        Args:
            left (NFA): The first NFA.
            right (NFA): The second NFA.

        Returns:
            NFA: Starts at ``left.start`` and accepts at the final states of
            ``right``.
        """
        b = left.builder()
        for final in left.final_states:
            b.add_move(final, EPSILON, right.start)
        b.embed(right)
        b.clear_final_states()
        for final in right.final_states:
            b.add_final_state(final)
        return b.freeze(NFA)

    def choice(self, left, right):
        """
        Create an NFA for the choice (|) operator.

        A new start state has epsilon moves to both starts, and every old
        final state has an epsilon move to a single new final state.

        Args:
            left (NFA): The first alternative.
            right (NFA): The second alternative.

        Returns:
            NFA: The NFA representing the choice.
        """
        s = self.new_state()
        e = self.new_state()
        b = left.builder()
        b.embed(right)
        b.add_states((s, e))
        b.set_start(s)
        b.add_move(s, EPSILON, left.start)
        b.add_move(s, EPSILON, right.start)
        for final in left.final_states + right.final_states:
            b.add_move(final, EPSILON, e)
        b.clear_final_states()
        b.add_final_state(e)
        return b.freeze(NFA)

    def star(self, n):
        """
        Create an NFA for the Kleene star (*) operator.

        The old final states loop back to the old start; a new start state
        leads to the old start and directly to a new final state (zero
        repetitions); the old final states lead to the new final state.

        Args:
            n (NFA): The NFA to repeat.

        Returns:
            NFA: The NFA representing the star.
        """
        b = n.builder()
        for final in n.final_states:
            b.add_move(final, EPSILON, n.start)
        s = self.new_state()
        e = self.new_state()
        b.add_states((s, e))
        b.add_move(s, EPSILON, n.start)
        for final in n.final_states:
            b.add_move(final, EPSILON, e)
        b.add_move(s, EPSILON, e)
        b.set_start(s)
        b.clear_final_states()
        b.add_final_state(e)
        return b.freeze(NFA)

    def build(self, postfix):
        """
        Reduces a postfix token string to a single NFA.

        Operands push a :meth:`char` fragment; ``.`` and ``|`` pop the right
        then the left fragment; ``*`` pops one fragment. An empty token
        string gives the :meth:`epsilon` fragment.

        Args:
            postfix (str): The output of :func:`infix_to_postfix`.

        Returns:
            NFA: The NFA for the whole expression.

        Raises:
            MalformedPattern: If an operator lacks operands or operands are
                left without an operator joining them.
        """
        if not postfix:
            return self.epsilon()

        fragments = Stack()
        for pos, token in enumerate(postfix):
            if token == STAR:
                n = self._pop(fragments, token, postfix, pos)
                fragments.push(self.star(n))
            elif token in (CONCAT, CHOICE):
                right = self._pop(fragments, token, postfix, pos)
                left = self._pop(fragments, token, postfix, pos)
                if token == CONCAT:
                    fragments.push(self.concat(left, right))
                else:
                    fragments.push(self.choice(left, right))
            elif is_operand(token):
                fragments.push(self.char(token))
            else:
                raise MalformedPattern(f"Unexpected token {token!r}", postfix, pos)

        if len(fragments) != 1:
            raise MalformedPattern("Operands without an operator", postfix)
        return fragments.pop()

    def _pop(self, fragments, token, postfix, pos):
        if not fragments:
            raise MalformedPattern(
                f"Operator {token!r} is missing an operand", postfix, pos
            )
        return fragments.pop()


def compile(pattern, allocator=None):
    """
    Compiles a regular expression into an NFA.

    Args:
        pattern (str): The regular expression.
        allocator (StateAllocator, optional): The id source for this build.
            Defaults to a fresh allocator starting at 0.

    Returns:
        NFA: The Thompson NFA for the pattern. Its alphabet never contains
        :data:`EPSILON`.

    Raises:
        TypeError: If ``pattern`` is not a string.
        MalformedPattern: If the pattern is not a valid expression.

    Example:
        >>> nfa = compile("a")
        >>> nfa.moves
        (Move(0, 'a', 1),)
    """
    if not isinstance(pattern, str):
        raise TypeError(f"Expected a string pattern, got {pattern!r}")
    if pattern and pattern[0] in (CHOICE, STAR):
        raise MalformedPattern(f"Leading operator {pattern[0]!r}", pattern, 0)
    for pos, char in enumerate(pattern):
        if not (is_operand(char) or char in (CHOICE, STAR, LPAREN, RPAREN)):
            raise MalformedPattern(f"Unexpected character {char!r}", pattern, pos)

    marked = mark_concatenation(pattern)
    postfix = infix_to_postfix(marked)
    nfa = RegexBuilder(allocator).build(postfix)
    logger.debug(
        "Compiled {!r} (postfix {!r}) into an NFA with {} states and {} moves",
        pattern,
        postfix,
        len(nfa),
        len(nfa.moves),
    )
    return nfa
