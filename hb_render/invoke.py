"""Invocation builder: evaluate call-site arguments and call a helper."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Tuple, Union

import structlog

from hb_sdk.errors import ArgumentTypeError, ArityMismatchError, HelperInvocationError, TemplateError
from hb_sdk.helpers import Helper, ParamKind
from hb_sdk.nodes import BlockNode, LiteralExpr, MustacheNode, PathExpr
from hb_sdk.values import ValueKind, is_truthy, kind_of, to_str

from .options import Options

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .renderer import RenderRun

logger = structlog.get_logger(__name__)


def evaluate(run: "RenderRun", expr: Union[PathExpr, LiteralExpr], context: int, data: int) -> Any:
    """Value of one argument expression; paths never consult the helper registry."""

    if isinstance(expr, LiteralExpr):
        return expr.value
    return run.resolve(expr, context, data)


def _number_error(helper: str, position: int, kind: ParamKind, value: Any) -> ArgumentTypeError:
    return ArgumentTypeError(
        f"helper '{helper}' parameter {position} expects {kind}, got {value!r}",
        helper=helper,
    )


def coerce_param(helper: str, position: int, kind: ParamKind, value: Any) -> Any:
    """Convert ``value`` to the declared parameter kind."""

    if kind == "any":
        return value
    if kind == "str":
        return to_str(value)
    if kind == "bool":
        return is_truthy(value)

    value_kind = kind_of(value)
    if value_kind is ValueKind.ABSENT:
        return 0 if kind == "int" else 0.0
    if value_kind is ValueKind.INTEGER:
        return value if kind == "int" else float(value)
    if value_kind is ValueKind.FLOAT:
        if kind == "float":
            return value
        if value.is_integer():
            return int(value)
        raise _number_error(helper, position, kind, value)
    if value_kind is ValueKind.STRING:
        try:
            return int(value.strip()) if kind == "int" else float(value.strip())
        except ValueError as exc:
            raise _number_error(helper, position, kind, value) from exc
    raise _number_error(helper, position, kind, value)


def invoke_helper(
    run: "RenderRun",
    helper: Helper,
    node: Union[MustacheNode, BlockNode],
    context: int,
    data: int,
) -> Any:
    """Evaluate the call site, bind it to the helper signature and call it."""

    params = tuple(evaluate(run, expr, context, data) for expr in node.params)
    hash_values: Dict[str, Any] = {key: evaluate(run, expr, context, data) for key, expr in node.hash.items()}

    signature = helper.signature
    if len(params) != len(signature.params):
        raise ArityMismatchError(
            f"helper '{helper.name}' declares {len(signature.params)} parameter(s), "
            f"call site supplies {len(params)}",
            helper=helper.name,
        )
    args: List[Any] = [
        coerce_param(helper.name, position, kind, value)
        for position, (kind, value) in enumerate(zip(signature.params, params))
    ]

    body: Tuple[Any, ...] = ()
    inverse: Tuple[Any, ...] = ()
    source = None
    is_block = isinstance(node, BlockNode)
    if is_block:
        if node.raw:
            source = node.source
        else:
            body = node.body
            inverse = node.inverse or ()

    options = Options(
        run,
        helper.name,
        context=context,
        data=data,
        hash=hash_values,
        params=params,
        body=body,
        inverse=inverse,
        source=source,
        block=is_block,
    )
    try:
        result = helper.call(args, options)
        # return values must belong to the value model
        kind_of(result)
        return result
    except (TemplateError, RecursionError):
        raise
    except Exception as exc:  # noqa: BLE001 - re-raised with the helper name attached
        logger.warning("render.helper.failed", helper=helper.name, error=str(exc))
        raise HelperInvocationError(helper.name, exc) from exc
    finally:
        options.close()


__all__ = ["coerce_param", "evaluate", "invoke_helper"]
