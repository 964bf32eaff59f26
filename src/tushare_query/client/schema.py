"""Schema-driven typed query builders.

Every tushare endpoint accepts a fixed, documented set of parameters. Instead
of hand-writing one near-identical builder class per endpoint, endpoints are
declared once:

    define_api("stock_basic", "https://tushare.pro/document/2?doc_id=25",
               "ts_code", "list_status")

which generates at import time:

- ``StockBasicQueryBuilder``: one optional slot and one chainable setter per
  parameter, plus ``into_query_builder()`` / ``query()`` / ``aquery()``
- ``Tushare.stock_basic()``: factory returning a fresh builder

Setter names are checked when the attribute is looked up, so a typo such as
``.ts_cod("...")`` fails with AttributeError before any request is made. The
string based ``set(name, value)`` checks the name against the declared
vocabulary and raises UnknownParamError. Python cannot check these names at
compile time the way a code generator could; the check happens on first use.

Unset parameters are stored as ``None``, never as ``""``, and are omitted from
the request. An empty string is a legitimate value and is sent as-is.
"""

import keyword
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Self

import polars as pl

from tushare_query.client.builder import QueryBuilder, QueryTarget, normalize_fields
from tushare_query.client.errors import UnknownParamError
from tushare_query.config.logger import log
from tushare_query.transform import ParamValue, to_param_str

# =============================================================================
# Declarations
# =============================================================================


@dataclass(frozen=True)
class ApiSpec:
    """
    Declaration of one remote endpoint.

    Attributes:
        name: Endpoint name, also the factory method name on the client
        doc_link: Upstream documentation page
        params: Accepted parameter names, in declaration order
    """

    name: str
    doc_link: str
    params: tuple[str, ...]

    @property
    def builder_name(self) -> str:
        camel = "".join(part.capitalize() for part in self.name.split("_"))
        return f"{camel}QueryBuilder"


_REGISTRY: dict[str, ApiSpec] = {}
_BUILDERS: dict[str, type["TypedQueryBuilder"]] = {}


def registry() -> dict[str, ApiSpec]:
    """All declared endpoints, by name."""
    return dict(_REGISTRY)


def get_api(name: str) -> ApiSpec:
    try:
        return _REGISTRY[name]
    except KeyError:
        raise KeyError(f"No typed builder declared for `{name}`") from None


def builder_for(name: str) -> type["TypedQueryBuilder"]:
    get_api(name)
    return _BUILDERS[name]


# =============================================================================
# Client side: factory methods land here
# =============================================================================


class ApiFactories:
    """Mixin that receives one factory method per declared endpoint.

    Subclasses (the client) register their own public attribute names so an
    endpoint can never shadow a client method, and vice versa.
    """

    _reserved: ClassVar[set[str]] = set()

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        own = {n for n in vars(cls) if not n.startswith("_")}
        clash = own & _REGISTRY.keys()
        if clash:
            raise TypeError(f"{cls.__name__} shadows declared endpoints: {sorted(clash)}")
        ApiFactories._reserved.update(own)


# =============================================================================
# Typed builder base
# =============================================================================


class TypedQueryBuilder:
    """
    Base class of the generated per-endpoint builders.

    Instances are values: each setter returns a new builder and never mutates
    the one it was called on.
    """

    SPEC: ClassVar[ApiSpec]

    __slots__ = ("_client", "_values", "_field_names")

    def __init__(self, client: QueryTarget):
        self._client = client
        self._values: dict[str, str | None] = dict.fromkeys(self.SPEC.params)
        self._field_names: tuple[str, ...] | None = None

    def _copy(self) -> Self:
        new = object.__new__(type(self))
        new._client = self._client
        new._values = dict(self._values)
        new._field_names = self._field_names
        return new

    def set(self, name: str, value: ParamValue | None) -> Self:
        """Set any declared parameter by name; ``None`` unsets it.

        Raises:
            UnknownParamError: ``name`` is not declared for this endpoint
        """
        if name not in self._values:
            raise UnknownParamError(self.SPEC.name, name)
        new = self._copy()
        new._values[name] = None if value is None else to_param_str(value)
        return new

    def fields(self, names: str | Sequence[str] | None) -> Self:
        """Select output columns, as a comma string or a sequence."""
        new = self._copy()
        new._field_names = normalize_fields(names)
        return new

    def values(self) -> dict[str, str]:
        """Parameters that are set, in declaration order."""
        return {k: v for k, v in self._values.items() if v is not None}

    def into_query_builder(self) -> QueryBuilder:
        """Convert to a generic QueryBuilder; unset slots are skipped."""
        qb = QueryBuilder(self._client, self.SPEC.name).params(self.values())
        return qb.fields(self._field_names)

    def query(self) -> pl.DataFrame:
        """Directly run the query with the parameters set so far."""
        return self.into_query_builder().query()

    async def aquery(self) -> pl.DataFrame:
        return await self.into_query_builder().aquery()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (
            self._client is other._client
            and self._values == other._values
            and self._field_names == other._field_names
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.values().items())
        return f"{type(self).__name__}({args})"


_RESERVED_PARAMS = frozenset(
    n for n in dir(TypedQueryBuilder) if not n.startswith("_")
) | {"SPEC"}


# =============================================================================
# Code generation
# =============================================================================


def _check_identifier(kind: str, name: str) -> None:
    if not name.isidentifier() or keyword.iskeyword(name) or name.startswith("_"):
        raise ValueError(f"Invalid {kind} name: {name!r}")


def _make_setter(api_name: str, param: str, qualname: str):
    def setter(self: TypedQueryBuilder, value: ParamValue | None) -> TypedQueryBuilder:
        return self.set(param, value)

    setter.__name__ = param
    setter.__qualname__ = f"{qualname}.{param}"
    setter.__doc__ = f"Set `{param}` param for `{api_name}` API query."
    return setter


def _make_factory(spec: ApiSpec, builder_cls: type[TypedQueryBuilder]):
    def factory(self: QueryTarget) -> TypedQueryBuilder:
        return builder_cls(self)

    factory.__name__ = spec.name
    factory.__qualname__ = f"ApiFactories.{spec.name}"
    factory.__doc__ = (
        f"Typed query builder for `{spec.name}` API.\n\n"
        f"See <{spec.doc_link}> for detailed documentation."
    )
    return factory


def define_api(name: str, doc_link: str, *params: str) -> type[TypedQueryBuilder]:
    """
    Declare an endpoint and generate its typed builder and client factory.

    Args:
        name: Endpoint name, e.g. "stock_basic"
        doc_link: Upstream documentation URL
        *params: Accepted parameter names

    Returns:
        The generated TypedQueryBuilder subclass

    Raises:
        ValueError: duplicate endpoint or parameter, invalid or reserved name
    """
    _check_identifier("endpoint", name)
    if name in _REGISTRY:
        raise ValueError(f"Endpoint `{name}` is already declared")
    if name in ApiFactories._reserved or hasattr(ApiFactories, name):
        raise ValueError(f"Endpoint `{name}` clashes with a client attribute")

    seen: set[str] = set()
    for param in params:
        _check_identifier("parameter", param)
        if param in _RESERVED_PARAMS:
            raise ValueError(f"`{name}` parameter `{param}` clashes with a builder method")
        if param in seen:
            raise ValueError(f"`{name}` declares parameter `{param}` twice")
        seen.add(param)

    spec = ApiSpec(name=name, doc_link=doc_link, params=tuple(params))
    qualname = spec.builder_name

    namespace: dict[str, Any] = {
        "__doc__": (
            f"Typed query builder for `{name}` API.\n\n"
            f"See <{doc_link}> for detailed documentation."
        ),
        "__slots__": (),
        "__module__": __name__,
        "SPEC": spec,
    }
    for param in params:
        namespace[param] = _make_setter(name, param, qualname)

    builder_cls = type(qualname, (TypedQueryBuilder,), namespace)

    setattr(ApiFactories, name, _make_factory(spec, builder_cls))
    _REGISTRY[name] = spec
    _BUILDERS[name] = builder_cls
    log.debug(f"Declared {qualname} with params {list(params)}")
    return builder_cls
