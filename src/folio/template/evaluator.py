"""Sandboxed expression evaluator.

Template expressions use Python expression syntax. They are parsed with
:func:`ast.parse` in ``eval`` mode and interpreted node by node over a
whitelist: literals, f-strings, names from an explicit context, attribute
and item access, operators, conditional expressions, comprehensions,
lambdas, and calls into a fixed helper registry or whitelisted methods of
built-in value types. Nothing else (imports, dunder access, arbitrary
object methods, assignment) is reachable.

Attribute access is forgiving, in the manner of template languages:
mappings resolve attributes as keys, and a missing attribute reads as
``None`` rather than raising.
"""

from __future__ import annotations

import ast
import operator
from collections.abc import Callable, Mapping
from datetime import date, datetime
from functools import lru_cache
from typing import Any


class ExpressionError(Exception):
    """An expression is malformed or failed to evaluate."""


class ExpressionSyntaxError(ExpressionError):
    """An expression could not be parsed."""


_BIN_OPS: dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS: dict[type, Callable[[Any], Any]] = {
    ast.Not: operator.not_,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}

_COMPARE_OPS: dict[type, Callable[[Any, Any], Any]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
}

# Methods callable on built-in value types
_SAFE_METHODS: dict[type, frozenset[str]] = {
    str: frozenset({
        "capitalize", "casefold", "count", "endswith", "find", "isalnum",
        "isalpha", "isdigit", "islower", "isspace", "isupper", "join", "lower",
        "lstrip", "partition", "removeprefix", "removesuffix", "replace", "rfind",
        "rpartition", "rsplit", "rstrip", "split", "splitlines", "startswith",
        "strip", "swapcase", "title", "upper", "zfill",
    }),
    list: frozenset({"count", "index"}),
    tuple: frozenset({"count", "index"}),
    Mapping: frozenset({"get", "items", "keys", "values"}),
    datetime: frozenset({
        "date", "isoformat", "isoweekday", "strftime", "timestamp", "weekday",
    }),
    date: frozenset({"isoformat", "isoweekday", "strftime", "weekday"}),
}

# Exceptions an evaluation may raise that are reported as template errors
_RUNTIME_ERRORS = (
    ArithmeticError, AttributeError, IndexError, KeyError, LookupError,
    TypeError, ValueError,
)


@lru_cache(maxsize=1024)
def compile_expression(source: str) -> ast.expr:
    """Parse an expression into its AST node.

    Raises:
        ExpressionSyntaxError: If ``source`` is not a valid expression.

    """
    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as exc:
        msg = f"invalid expression {source.strip()!r}: {exc.msg}"
        raise ExpressionSyntaxError(msg) from None
    return tree.body


def evaluate(source: str, context: Mapping[str, Any]) -> Any:
    """Evaluate an expression against ``context``.

    Raises:
        ExpressionSyntaxError: If the expression cannot be parsed.
        ExpressionError: If evaluation fails or uses a forbidden construct.

    """
    node = compile_expression(source)
    try:
        return _Interpreter(context).eval(node, {})
    except ExpressionError:
        raise
    except _RUNTIME_ERRORS as exc:
        msg = f"error evaluating {source.strip()!r}: {type(exc).__name__}: {exc}"
        raise ExpressionError(msg) from exc


def _safe_method(obj: Any, name: str) -> bool:
    for cls, names in _SAFE_METHODS.items():
        if isinstance(obj, cls) and name in names:
            return True
    return False


class _Lambda:
    """A lambda bound to the interpreter scope it was created in."""

    __slots__ = ("_interp", "_node", "_scope")

    def __init__(self, interp: _Interpreter, node: ast.Lambda, scope: dict[str, Any]) -> None:
        self._interp = interp
        self._node = node
        self._scope = scope

    def __call__(self, *args: Any) -> Any:
        params = [a.arg for a in self._node.args.args]
        if len(args) != len(params):
            msg = f"lambda takes {len(params)} argument(s), {len(args)} given"
            raise ExpressionError(msg)
        scope = {**self._scope, **dict(zip(params, args, strict=True))}
        return self._interp.eval(self._node.body, scope)


class _Interpreter:
    """Walks a whitelisted subset of the Python expression AST."""

    __slots__ = ("_context",)

    def __init__(self, context: Mapping[str, Any]) -> None:
        self._context = context

    def eval(self, node: ast.AST, scope: dict[str, Any]) -> Any:
        method = getattr(self, f"_eval_{type(node).__name__}", None)
        if method is None:
            msg = f"unsupported syntax: {type(node).__name__}"
            raise ExpressionError(msg)
        return method(node, scope)

    # ----- literals -----

    def _eval_Constant(self, node: ast.Constant, scope: dict[str, Any]) -> Any:
        return node.value

    def _eval_List(self, node: ast.List, scope: dict[str, Any]) -> Any:
        return [self.eval(e, scope) for e in node.elts]

    def _eval_Tuple(self, node: ast.Tuple, scope: dict[str, Any]) -> Any:
        return tuple(self.eval(e, scope) for e in node.elts)

    def _eval_Set(self, node: ast.Set, scope: dict[str, Any]) -> Any:
        return {self.eval(e, scope) for e in node.elts}

    def _eval_Dict(self, node: ast.Dict, scope: dict[str, Any]) -> Any:
        result: dict[Any, Any] = {}
        for key, value in zip(node.keys, node.values, strict=True):
            if key is None:
                result.update(self.eval(value, scope))
            else:
                result[self.eval(key, scope)] = self.eval(value, scope)
        return result

    def _eval_JoinedStr(self, node: ast.JoinedStr, scope: dict[str, Any]) -> Any:
        return "".join(str(self.eval(v, scope)) for v in node.values)

    def _eval_FormattedValue(self, node: ast.FormattedValue, scope: dict[str, Any]) -> Any:
        value = self.eval(node.value, scope)
        if node.conversion == ord("r"):
            value = repr(value)
        elif node.conversion == ord("s"):
            value = str(value)
        spec = self.eval(node.format_spec, scope) if node.format_spec else ""
        return format(value, spec)

    # ----- names and access -----

    def _eval_Name(self, node: ast.Name, scope: dict[str, Any]) -> Any:
        if node.id in scope:
            return scope[node.id]
        if node.id in self._context:
            return self._context[node.id]
        msg = f"name {node.id!r} is not defined"
        raise ExpressionError(msg)

    def _eval_Attribute(self, node: ast.Attribute, scope: dict[str, Any]) -> Any:
        name = node.attr
        if name.startswith("_"):
            msg = f"access to {name!r} is not allowed"
            raise ExpressionError(msg)
        obj = self.eval(node.value, scope)
        if obj is None:
            return None
        if isinstance(obj, Mapping) and name in obj:
            return obj[name]
        if _safe_method(obj, name):
            return getattr(obj, name)
        if isinstance(obj, (str, list, tuple, set, frozenset, Mapping)):
            return None
        if isinstance(obj, type):
            msg = f"attribute {name!r} of type {obj.__name__!r} is not allowed"
            raise ExpressionError(msg)
        value = getattr(obj, name, None)
        if callable(value) and not _is_data(obj, name):
            msg = f"method {name!r} is not allowed"
            raise ExpressionError(msg)
        return value

    def _eval_Subscript(self, node: ast.Subscript, scope: dict[str, Any]) -> Any:
        obj = self.eval(node.value, scope)
        key = self.eval(node.slice, scope)
        if obj is None:
            return None
        if isinstance(obj, Mapping):
            return obj.get(key)
        return obj[key]

    def _eval_Slice(self, node: ast.Slice, scope: dict[str, Any]) -> Any:
        lower = self.eval(node.lower, scope) if node.lower else None
        upper = self.eval(node.upper, scope) if node.upper else None
        step = self.eval(node.step, scope) if node.step else None
        return slice(lower, upper, step)

    # ----- operators -----

    def _eval_BinOp(self, node: ast.BinOp, scope: dict[str, Any]) -> Any:
        op = _BIN_OPS.get(type(node.op))
        if op is None:
            msg = f"unsupported operator: {type(node.op).__name__}"
            raise ExpressionError(msg)
        left = self.eval(node.left, scope)
        right = self.eval(node.right, scope)
        if op is operator.pow and isinstance(right, int) and right > 1000:
            msg = "exponent too large"
            raise ExpressionError(msg)
        return op(left, right)

    def _eval_UnaryOp(self, node: ast.UnaryOp, scope: dict[str, Any]) -> Any:
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            msg = f"unsupported operator: {type(node.op).__name__}"
            raise ExpressionError(msg)
        return op(self.eval(node.operand, scope))

    def _eval_BoolOp(self, node: ast.BoolOp, scope: dict[str, Any]) -> Any:
        value: Any = None
        for operand in node.values:
            value = self.eval(operand, scope)
            if isinstance(node.op, ast.And) and not value:
                return value
            if isinstance(node.op, ast.Or) and value:
                return value
        return value

    def _eval_Compare(self, node: ast.Compare, scope: dict[str, Any]) -> Any:
        left = self.eval(node.left, scope)
        for op_node, comparator in zip(node.ops, node.comparators, strict=True):
            right = self.eval(comparator, scope)
            if not _COMPARE_OPS[type(op_node)](left, right):
                return False
            left = right
        return True

    def _eval_IfExp(self, node: ast.IfExp, scope: dict[str, Any]) -> Any:
        if self.eval(node.test, scope):
            return self.eval(node.body, scope)
        return self.eval(node.orelse, scope)

    # ----- calls and functions -----

    def _eval_Call(self, node: ast.Call, scope: dict[str, Any]) -> Any:
        func = self.eval(node.func, scope)
        if func is None:
            msg = f"{ast.unparse(node.func)!r} is not callable"
            raise ExpressionError(msg)
        args: list[Any] = []
        for arg in node.args:
            if isinstance(arg, ast.Starred):
                args.extend(self.eval(arg.value, scope))
            else:
                args.append(self.eval(arg, scope))
        kwargs: dict[str, Any] = {}
        for kw in node.keywords:
            if kw.arg is None:
                kwargs.update(self.eval(kw.value, scope))
            else:
                kwargs[kw.arg] = self.eval(kw.value, scope)
        return func(*args, **kwargs)

    def _eval_Lambda(self, node: ast.Lambda, scope: dict[str, Any]) -> Any:
        a = node.args
        if a.vararg or a.kwarg or a.kwonlyargs or a.defaults or a.posonlyargs:
            msg = "lambdas take plain positional parameters only"
            raise ExpressionError(msg)
        return _Lambda(self, node, scope)

    # ----- comprehensions -----

    def _eval_ListComp(self, node: ast.ListComp, scope: dict[str, Any]) -> Any:
        return [self.eval(node.elt, s) for s in self._generate(node.generators, 0, scope)]

    def _eval_SetComp(self, node: ast.SetComp, scope: dict[str, Any]) -> Any:
        return {self.eval(node.elt, s) for s in self._generate(node.generators, 0, scope)}

    def _eval_GeneratorExp(self, node: ast.GeneratorExp, scope: dict[str, Any]) -> Any:
        return [self.eval(node.elt, s) for s in self._generate(node.generators, 0, scope)]

    def _eval_DictComp(self, node: ast.DictComp, scope: dict[str, Any]) -> Any:
        return {
            self.eval(node.key, s): self.eval(node.value, s)
            for s in self._generate(node.generators, 0, scope)
        }

    def _generate(self, generators: list[ast.comprehension], index: int, scope: dict[str, Any]):
        if index == len(generators):
            yield scope
            return
        gen = generators[index]
        if gen.is_async:
            msg = "async comprehensions are not supported"
            raise ExpressionError(msg)
        for item in self.eval(gen.iter, scope):
            inner = {**scope}
            self._bind(gen.target, item, inner)
            if all(self.eval(cond, inner) for cond in gen.ifs):
                yield from self._generate(generators, index + 1, inner)

    def _bind(self, target: ast.AST, value: Any, scope: dict[str, Any]) -> None:
        if isinstance(target, ast.Name):
            scope[target.id] = value
        elif isinstance(target, (ast.Tuple, ast.List)):
            values = list(value)
            if len(values) != len(target.elts):
                msg = "cannot unpack: wrong number of values"
                raise ExpressionError(msg)
            for elt, v in zip(target.elts, values, strict=True):
                self._bind(elt, v, scope)
        else:
            msg = f"unsupported loop target: {type(target).__name__}"
            raise ExpressionError(msg)


def _is_data(obj: Any, name: str) -> bool:
    """True when ``name`` is a data attribute holding a callable value.

    Instance attributes (for example a helper stored on a namespace) are data;
    methods defined on the class are not, and neither are classes.
    """
    try:
        value = vars(obj)[name]
    except (TypeError, KeyError):
        return False
    return not isinstance(value, type)
