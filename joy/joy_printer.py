"""
A pretty-printer for silly-joy terms and values.

Integers render as decimal text; programs render as their terms separated by
single spaces, with quoted sub-programs wrapped in brackets. The output of
``pformat`` on an AST parses back to an equal AST.
"""

from joy.joy_datatypes import ClosureValue, IntValue, Number, Quoted, Word


class Printer:
    """Formats terms, ASTs and stack values as source text."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj)

    def _get_handler(self, obj):
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        if isinstance(obj, (list, tuple)):
            return self._pformat_ast
        return repr

    def _create_handlers(self):
        return {
            Word: self._pformat_word,
            Number: self._pformat_number,
            Quoted: self._pformat_quoted,
            IntValue: self._pformat_int,
            ClosureValue: self._pformat_closure,
        }

    def _pformat_ast(self, terms):
        return " ".join(self.pformat(term) for term in terms)

    def _pformat_word(self, obj):
        return obj.name

    def _pformat_number(self, obj):
        return str(obj.value)

    def _pformat_quoted(self, obj):
        return f"[{self._pformat_ast(obj.terms)}]"

    def _pformat_int(self, obj):
        return str(obj.value)

    def _pformat_closure(self, obj):
        return f"[{self._pformat_ast(obj.ast)}]"
