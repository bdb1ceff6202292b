"""
Transforms the raw parser AST into silly-joy terms.
"""

import re

from joy.joy_datatypes import Number, Quoted, Word

_BLANKS = re.compile(r"\s+")


class JoyTransformer:
    def transform(self, node: object) -> object:
        # Lists: transform each item
        if isinstance(node, list):
            return [self.transform(n) for n in node]

        if not isinstance(node, dict):
            return node

        tag = node.get('tag')
        children = node.get('children', [])

        match tag:
            case 'program':
                return self.transform(children)
            case 'quoted':
                return Quoted(self.transform(children))
            case 'word':
                return Word(node['text'])
            case 'number':
                # "- 3" is legal; parse exactly rather than through float.
                return Number(int(_BLANKS.sub('', node['text'])))
            case _:
                raise ValueError(f"Unknown AST node tag: {tag!r}")
