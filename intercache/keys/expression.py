"""
intercache — Key Expression Evaluator

Evaluates small key expressions such as ``sku``, ``product.sku``,
``result["id"]`` or ``f"{tenant}:{sku.upper()}"`` against the arguments of an
intercepted call.

The syntax is a restricted subset of Python expressions:
- names bound by the call (arguments, and ``result`` after execution)
- str/int/float/bool/None literals
- attribute access (no names starting with an underscore) and subscripts
- arithmetic ``+ - * / // %`` and unary minus
- f-strings
- zero-argument method calls, and the functions str, int, float, len, lower, upper

Anything else is rejected with ExpressionEvaluationError.
"""

import ast
import functools
import logging
import operator
from collections.abc import Callable, Mapping
from typing import Any

from ..errors import ExpressionEvaluationError

logger = logging.getLogger(__name__)

_BINARY_OPERATORS: dict[type[ast.operator], Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_FUNCTIONS: dict[str, Callable[[Any], Any]] = {
    "str": str,
    "int": int,
    "float": float,
    "len": len,
    "lower": lambda v: str(v).lower(),
    "upper": lambda v: str(v).upper(),
}


@functools.lru_cache(maxsize=512)
def _parse(expression: str) -> ast.Expression:
    return ast.parse(expression.strip(), mode="eval")


class ExpressionEvaluator:
    """Evaluates key expressions against name bindings."""

    def evaluate(self, expression: str, bindings: Mapping[str, Any]) -> Any:
        """
        Evaluate expression with the given bindings.

        Raises:
            ExpressionEvaluationError: On malformed or disallowed expressions,
                unknown names or attributes, or errors raised while evaluating
        """
        if not expression or not expression.strip():
            raise ExpressionEvaluationError(expression, "expression is empty")

        try:
            tree = _parse(expression)
        except SyntaxError as e:
            raise ExpressionEvaluationError(expression, f"invalid syntax: {e.msg}") from e

        try:
            return self._eval(tree.body, expression, bindings)
        except ExpressionEvaluationError:
            raise
        except Exception as e:
            logger.debug(
                f"Key expression raised {type(e).__name__}",
                extra={"expression": expression, "error": str(e)},
            )
            raise ExpressionEvaluationError(expression, f"{type(e).__name__}: {e}") from e

    def _eval(self, node: ast.AST, expression: str, bindings: Mapping[str, Any]) -> Any:
        if isinstance(node, ast.Constant):
            if node.value is None or isinstance(node.value, (str, int, float, bool)):
                return node.value
            raise ExpressionEvaluationError(expression, f"unsupported literal {node.value!r}")

        if isinstance(node, ast.Name):
            if node.id not in bindings:
                raise ExpressionEvaluationError(expression, f"undefined name '{node.id}'")
            return bindings[node.id]

        if isinstance(node, ast.Attribute):
            if node.attr.startswith("_"):
                raise ExpressionEvaluationError(expression, f"access to '{node.attr}' is not allowed")
            target = self._eval(node.value, expression, bindings)
            if isinstance(target, Mapping) and node.attr in target:
                return target[node.attr]
            if not hasattr(target, node.attr):
                raise ExpressionEvaluationError(
                    expression, f"'{type(target).__name__}' value has no attribute '{node.attr}'"
                )
            return getattr(target, node.attr)

        if isinstance(node, ast.Subscript):
            target = self._eval(node.value, expression, bindings)
            index = self._eval(node.slice, expression, bindings)
            return target[index]

        if isinstance(node, ast.BinOp):
            op = _BINARY_OPERATORS.get(type(node.op))
            if op is None:
                raise ExpressionEvaluationError(expression, f"operator {type(node.op).__name__} is not allowed")
            return op(self._eval(node.left, expression, bindings), self._eval(node.right, expression, bindings))

        if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.USub):
            return -self._eval(node.operand, expression, bindings)

        if isinstance(node, ast.JoinedStr):
            return "".join(str(self._eval(part, expression, bindings)) for part in node.values)

        if isinstance(node, ast.FormattedValue):
            if node.format_spec is not None or node.conversion != -1:
                raise ExpressionEvaluationError(expression, "format specs are not allowed")
            return self._eval(node.value, expression, bindings)

        if isinstance(node, ast.Call):
            return self._call(node, expression, bindings)

        raise ExpressionEvaluationError(expression, f"{type(node).__name__} is not allowed")

    def _call(self, node: ast.Call, expression: str, bindings: Mapping[str, Any]) -> Any:
        if node.keywords:
            raise ExpressionEvaluationError(expression, "keyword arguments are not allowed")

        # Builtin helpers: str(x), lower(x), ...
        if isinstance(node.func, ast.Name) and node.func.id not in bindings:
            func = _FUNCTIONS.get(node.func.id)
            if func is None:
                raise ExpressionEvaluationError(expression, f"unknown function '{node.func.id}'")
            if len(node.args) != 1:
                raise ExpressionEvaluationError(expression, f"'{node.func.id}' takes exactly one argument")
            return func(self._eval(node.args[0], expression, bindings))

        # Getters on bound values: product.get_sku(), sku.upper()
        if isinstance(node.func, ast.Attribute):
            if node.args:
                raise ExpressionEvaluationError(expression, "method calls cannot take arguments")
            method = self._eval(node.func, expression, bindings)
            if not callable(method):
                raise ExpressionEvaluationError(expression, f"'{node.func.attr}' is not callable")
            return method()

        raise ExpressionEvaluationError(expression, "only helper functions and getter calls are allowed")
