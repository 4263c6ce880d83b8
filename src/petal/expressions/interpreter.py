"""Tree-walking interpreter for validated expression ASTs.

Evaluation happens against an explicit :class:`Scope` instead of injecting
the context into an ambient namespace. Names resolve, in order, through:

1. local frames (function and lambda parameters, locals of a ``def``)
2. per-call bindings (``el``, ``event``)
3. the component context
4. ``SAFE_BUILTINS``

Attribute access on a mapping reads its key first and falls back to the
attribute (so ``user.email`` works on dicts while ``data.get`` still
resolves to the method); a missing key evaluates to ``None``.

Bare-name assignment inside a function rebinds an enclosing local if there
is one, otherwise a context field if one exists under that name, and only
then creates a new local. Behavior methods therefore update component state
with plain ``count += 1`` while ``result = []`` stays local. Outside any
function, assignment always writes the context.

Thread-Safety:
    The interpreter keeps no state between calls; each Scope is built per
    evaluation.
"""

from __future__ import annotations

import ast
import operator
from collections.abc import Callable, Mapping, MutableMapping
from typing import Any

from petal.expressions.grammar import unsupported

SAFE_BUILTINS: dict[str, Any] = {
    "len": len,
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "list": list,
    "dict": dict,
    "tuple": tuple,
    "set": set,
    "range": range,
    "min": min,
    "max": max,
    "sum": sum,
    "sorted": sorted,
    "abs": abs,
    "round": round,
    "any": any,
    "all": all,
    "enumerate": enumerate,
    "zip": zip,
    "reversed": reversed,
    "isinstance": isinstance,
}

_BINOPS: dict[type[ast.operator], Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
    ast.BitAnd: operator.and_,
    ast.BitOr: operator.or_,
    ast.BitXor: operator.xor,
    ast.LShift: operator.lshift,
    ast.RShift: operator.rshift,
    ast.MatMult: operator.matmul,
}

_UNARYOPS: dict[type[ast.unaryop], Callable[[Any], Any]] = {
    ast.Not: operator.not_,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
    ast.Invert: operator.invert,
}

_CMPOPS: dict[type[ast.cmpop], Callable[[Any, Any], bool]] = {
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


class _Return(Exception):
    """Unwinds a ``def`` body on ``return``."""

    def __init__(self, value: Any):
        self.value = value


class Scope:
    """Name resolution environment for one evaluation."""

    __slots__ = ("bindings", "context", "frames")

    def __init__(
        self,
        context: MutableMapping[str, Any],
        bindings: Mapping[str, Any] | None = None,
        frames: tuple[dict[str, Any], ...] = (),
    ):
        self.context = context
        self.bindings = bindings or {}
        self.frames = frames

    def child(self, frame: dict[str, Any]) -> Scope:
        return Scope(self.context, self.bindings, (*self.frames, frame))

    def lookup(self, name: str) -> Any:
        for frame in reversed(self.frames):
            if name in frame:
                return frame[name]
        if name in self.bindings:
            return self.bindings[name]
        if name in self.context:
            return self.context[name]
        if name in SAFE_BUILTINS:
            return SAFE_BUILTINS[name]
        raise NameError(f"name '{name}' is not defined")

    def assign(self, name: str, value: Any) -> None:
        if not self.frames:
            self.context[name] = value
            return
        for frame in reversed(self.frames):
            if name in frame:
                frame[name] = value
                return
        if name in self.context:
            self.context[name] = value
        else:
            self.frames[-1][name] = value

    def bind_local(self, name: str, value: Any) -> None:
        """Bind in the innermost frame, or the context at top level."""
        if self.frames:
            self.frames[-1][name] = value
        else:
            self.context[name] = value


def get_attribute(obj: Any, name: str) -> Any:
    """Attribute access with mapping-key priority."""
    if isinstance(obj, Mapping):
        if name in obj:
            return obj[name]
        return getattr(obj, name, None)
    if obj is None:
        raise TypeError(f"cannot read attribute '{name}' of None")
    return getattr(obj, name)


def set_attribute(obj: Any, name: str, value: Any) -> None:
    if isinstance(obj, MutableMapping):
        obj[name] = value
    elif obj is None:
        raise TypeError(f"cannot set attribute '{name}' of None")
    else:
        setattr(obj, name, value)


class Function:
    """A ``def`` or ``lambda`` closing over the scope it was created in.

    Calls resolve free names through that scope at call time, so a method
    defined by a behavior block always reads the live component context.
    """

    __slots__ = ("body", "defaults", "interpreter", "is_lambda", "name", "params", "scope")

    def __init__(
        self,
        name: str,
        params: tuple[str, ...],
        defaults: tuple[Any, ...],
        body: ast.expr | list[ast.stmt],
        scope: Scope,
        interpreter: Interpreter,
    ):
        self.name = name
        self.params = params
        self.defaults = defaults
        self.body = body
        self.scope = scope
        self.interpreter = interpreter
        self.is_lambda = isinstance(body, ast.expr)

    @property
    def arity(self) -> int:
        """Number of declared parameters."""
        return len(self.params)

    def _bind(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
        if len(args) > len(self.params):
            raise TypeError(
                f"{self.name}() takes {len(self.params)} arguments but {len(args)} were given"
            )
        frame = dict(zip(self.params, args))
        for key, value in kwargs.items():
            if key not in self.params:
                raise TypeError(f"{self.name}() got an unexpected keyword argument '{key}'")
            if key in frame:
                raise TypeError(f"{self.name}() got multiple values for argument '{key}'")
            frame[key] = value
        first_default = len(self.params) - len(self.defaults)
        for index, param in enumerate(self.params):
            if param in frame:
                continue
            if index >= first_default:
                frame[param] = self.defaults[index - first_default]
            else:
                raise TypeError(f"{self.name}() missing required argument '{param}'")
        return frame

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        scope = self.scope.child(self._bind(args, kwargs))
        if self.is_lambda:
            return self.interpreter.eval(self.body, scope)  # type: ignore[arg-type]
        try:
            self.interpreter.exec_body(self.body, scope)  # type: ignore[arg-type]
        except _Return as ret:
            return ret.value
        return None

    def __repr__(self) -> str:
        return f"<Function {self.name}({', '.join(self.params)})>"


class Interpreter:
    """Evaluates expression nodes and executes statement nodes.

    ``source`` is only used to label errors for out-of-place syntax.
    """

    __slots__ = ("source",)

    def __init__(self, source: str | None = None):
        self.source = source

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def eval(self, node: ast.expr, scope: Scope) -> Any:
        handler = _EXPR_DISPATCH.get(type(node))
        if handler is None:
            raise unsupported(node, self.source)
        return handler(self, node, scope)

    def _constant(self, node: ast.Constant, scope: Scope) -> Any:
        return node.value

    def _name(self, node: ast.Name, scope: Scope) -> Any:
        return scope.lookup(node.id)

    def _attribute(self, node: ast.Attribute, scope: Scope) -> Any:
        return get_attribute(self.eval(node.value, scope), node.attr)

    def _subscript(self, node: ast.Subscript, scope: Scope) -> Any:
        return self.eval(node.value, scope)[self.eval(node.slice, scope)]

    def _slice(self, node: ast.Slice, scope: Scope) -> slice:
        return slice(
            self.eval(node.lower, scope) if node.lower else None,
            self.eval(node.upper, scope) if node.upper else None,
            self.eval(node.step, scope) if node.step else None,
        )

    def _call(self, node: ast.Call, scope: Scope) -> Any:
        func = self.eval(node.func, scope)
        args = []
        for arg in node.args:
            if isinstance(arg, ast.Starred):
                raise unsupported(arg, self.source)
            args.append(self.eval(arg, scope))
        kwargs = {}
        for kw in node.keywords:
            if kw.arg is None:
                raise unsupported(kw, self.source)
            kwargs[kw.arg] = self.eval(kw.value, scope)
        if not callable(func):
            raise TypeError(f"'{type(func).__name__}' object is not callable")
        return func(*args, **kwargs)

    def _binop(self, node: ast.BinOp, scope: Scope) -> Any:
        op = _BINOPS[type(node.op)]
        return op(self.eval(node.left, scope), self.eval(node.right, scope))

    def _unaryop(self, node: ast.UnaryOp, scope: Scope) -> Any:
        return _UNARYOPS[type(node.op)](self.eval(node.operand, scope))

    def _boolop(self, node: ast.BoolOp, scope: Scope) -> Any:
        is_and = isinstance(node.op, ast.And)
        value: Any = None
        for operand in node.values:
            value = self.eval(operand, scope)
            if is_and and not value:
                return value
            if not is_and and value:
                return value
        return value

    def _compare(self, node: ast.Compare, scope: Scope) -> bool:
        left = self.eval(node.left, scope)
        for op, comparator in zip(node.ops, node.comparators):
            right = self.eval(comparator, scope)
            if not _CMPOPS[type(op)](left, right):
                return False
            left = right
        return True

    def _ifexp(self, node: ast.IfExp, scope: Scope) -> Any:
        if self.eval(node.test, scope):
            return self.eval(node.body, scope)
        return self.eval(node.orelse, scope)

    def _list(self, node: ast.List, scope: Scope) -> list[Any]:
        return [self.eval(item, scope) for item in node.elts]

    def _tuple(self, node: ast.Tuple, scope: Scope) -> tuple[Any, ...]:
        return tuple(self.eval(item, scope) for item in node.elts)

    def _set(self, node: ast.Set, scope: Scope) -> set[Any]:
        return {self.eval(item, scope) for item in node.elts}

    def _dict(self, node: ast.Dict, scope: Scope) -> dict[Any, Any]:
        result = {}
        for key, value in zip(node.keys, node.values):
            if key is None:
                raise unsupported(node, self.source)
            result[self.eval(key, scope)] = self.eval(value, scope)
        return result

    def _joinedstr(self, node: ast.JoinedStr, scope: Scope) -> str:
        return "".join(str(self.eval(part, scope)) for part in node.values)

    def _formattedvalue(self, node: ast.FormattedValue, scope: Scope) -> str:
        value = self.eval(node.value, scope)
        if node.conversion == ord("r"):
            value = repr(value)
        elif node.conversion == ord("s"):
            value = str(value)
        elif node.conversion == ord("a"):
            value = ascii(value)
        spec = self.eval(node.format_spec, scope) if node.format_spec else ""
        return format(value, spec)

    def _lambda(self, node: ast.Lambda, scope: Scope) -> Function:
        params, defaults = self._parameters(node.args, scope)
        return Function("<lambda>", params, defaults, node.body, scope, self)

    def _parameters(self, args: ast.arguments, scope: Scope) -> tuple[tuple[str, ...], tuple[Any, ...]]:
        params = tuple(arg.arg for arg in args.args)
        defaults = tuple(self.eval(default, scope) for default in args.defaults)
        return params, defaults

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def exec_body(self, body: list[ast.stmt] | tuple[ast.stmt, ...], scope: Scope) -> None:
        for stmt in body:
            self.exec(stmt, scope)

    def exec(self, node: ast.stmt, scope: Scope) -> None:
        if isinstance(node, ast.Expr):
            self.eval(node.value, scope)
        elif isinstance(node, ast.Assign):
            value = self.eval(node.value, scope)
            for target in node.targets:
                self._store(target, value, scope)
        elif isinstance(node, ast.AugAssign):
            current = self.eval(_as_load(node.target), scope)
            value = _BINOPS[type(node.op)](current, self.eval(node.value, scope))
            self._store(node.target, value, scope)
        elif isinstance(node, ast.Pass):
            pass
        elif isinstance(node, ast.Return):
            raise _Return(self.eval(node.value, scope) if node.value else None)
        elif isinstance(node, ast.If):
            branch = node.body if self.eval(node.test, scope) else node.orelse
            self.exec_body(branch, scope)
        elif isinstance(node, ast.For):
            for item in self.eval(node.iter, scope):
                self._store(node.target, item, scope, local=True)
                self.exec_body(node.body, scope)
            self.exec_body(node.orelse, scope)
        elif isinstance(node, ast.FunctionDef):
            params, defaults = self._parameters(node.args, scope)
            func = Function(node.name, params, defaults, node.body, scope, self)
            scope.bind_local(node.name, func)
        else:
            raise unsupported(node, self.source)

    def _store(self, target: ast.expr, value: Any, scope: Scope, *, local: bool = False) -> None:
        if isinstance(target, ast.Name):
            if local:
                scope.bind_local(target.id, value)
            else:
                scope.assign(target.id, value)
        elif isinstance(target, ast.Attribute):
            set_attribute(self.eval(target.value, scope), target.attr, value)
        elif isinstance(target, ast.Subscript):
            self.eval(target.value, scope)[self.eval(target.slice, scope)] = value
        elif isinstance(target, (ast.Tuple, ast.List)):
            values = list(value)
            if len(values) != len(target.elts):
                raise ValueError(
                    f"cannot unpack {len(values)} values into {len(target.elts)} targets"
                )
            for element, item in zip(target.elts, values):
                self._store(element, item, scope, local=local)
        else:
            raise unsupported(target, self.source)


def _as_load(target: ast.expr) -> ast.expr:
    """Re-read an augmented-assignment target (its ctx is Store)."""
    if isinstance(target, ast.Name):
        return ast.Name(id=target.id, ctx=ast.Load())
    if isinstance(target, ast.Attribute):
        return ast.Attribute(value=target.value, attr=target.attr, ctx=ast.Load())
    if isinstance(target, ast.Subscript):
        return ast.Subscript(value=target.value, slice=target.slice, ctx=ast.Load())
    return target


_EXPR_DISPATCH: dict[type[ast.AST], Callable[[Interpreter, Any, Scope], Any]] = {
    ast.Constant: Interpreter._constant,
    ast.Name: Interpreter._name,
    ast.Attribute: Interpreter._attribute,
    ast.Subscript: Interpreter._subscript,
    ast.Slice: Interpreter._slice,
    ast.Call: Interpreter._call,
    ast.BinOp: Interpreter._binop,
    ast.UnaryOp: Interpreter._unaryop,
    ast.BoolOp: Interpreter._boolop,
    ast.Compare: Interpreter._compare,
    ast.IfExp: Interpreter._ifexp,
    ast.List: Interpreter._list,
    ast.Tuple: Interpreter._tuple,
    ast.Set: Interpreter._set,
    ast.Dict: Interpreter._dict,
    ast.JoinedStr: Interpreter._joinedstr,
    ast.FormattedValue: Interpreter._formattedvalue,
    ast.Lambda: Interpreter._lambda,
}
