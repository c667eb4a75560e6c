from __future__ import annotations

import ast
import inspect
import textwrap
from typing import Any

from astwire.exceptions import AstWireParseError, AstWireSourceUnavailableError, describe


class SyntaxTreeProvider:
    """Turn source text into ``ast`` syntax trees.

    Stateless: every call parses its input again.
    """

    def parse(self, source: str, *, filename: str = "<unknown>") -> ast.Module:
        """Parse ``source`` into a module node.

        Args:
            source: Python source text.
            filename: Name reported in syntax errors.

        Raises:
            AstWireParseError: If ``source`` is not valid Python.

        """
        try:
            return ast.parse(source, filename=filename)
        except SyntaxError as e:
            msg = f"Cannot parse source of [{filename}]: {e.msg}"
            raise AstWireParseError(msg, lineno=e.lineno) from e
        except ValueError as e:
            # null bytes in source
            msg = f"Cannot parse source of [{filename}]: {e}"
            raise AstWireParseError(msg) from e

    def source_of(self, target: Any) -> str:
        """Return the dedented source text declaring ``target``.

        Raises:
            AstWireSourceUnavailableError: If ``target`` has no retrievable
                source.

        """
        try:
            source = inspect.getsource(target)
        except (OSError, TypeError) as e:
            msg = f"No source available for [{describe(target)}]."
            raise AstWireSourceUnavailableError(msg) from e
        return textwrap.dedent(source)

    def parse_target(self, target: Any) -> ast.Module:
        return self.parse(self.source_of(target), filename=describe(target))


__all__ = ["SyntaxTreeProvider"]
