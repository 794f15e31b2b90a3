"""
Wire models for Qdrant request bodies.

Requests whose body is a choice between mutually exclusive shapes (query
variants, batch operations, field schemas, cluster operations, alias actions)
are modelled as one frozen dataclass per case. Each case knows its wire tag
and renders itself with ``to_wire()``, so a body can never carry two cases at
once. Plain dicts are still accepted at the client boundary and sent as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, ClassVar, Mapping, Optional, Sequence, Union

from core.errors import ValidationIssue

PointId = Union[int, str]
DenseVector = list[float]
Filter = dict
Payload = dict

DISTANCES = ("Cosine", "Euclid", "Dot", "Manhattan")
RECOMMEND_STRATEGIES = ("average_vector", "best_score")
FUSION_METHODS = ("rrf", "dbsf")
SAMPLE_METHODS = ("random",)
ORDER_DIRECTIONS = ("asc", "desc")
PAYLOAD_FIELD_TYPES = ("keyword", "integer", "float", "bool", "geo", "datetime", "text", "uuid")
TOKENIZERS = ("prefix", "whitespace", "word", "multilingual")
SHARD_TRANSFER_METHODS = ("stream_records", "snapshot", "wal_delta")
SNAPSHOT_PRIORITIES = ("snapshot", "replica", "no_sync")


def _require_choice(value: Optional[str], choices: Sequence[str], field_name: str) -> None:
    if value is not None and value not in choices:
        raise ValidationIssue(
            f"{field_name} must be one of: {', '.join(choices)}",
            field=field_name,
            error_type="invalid_choice",
        )


def to_wire(value: Any) -> Any:
    """Render models (recursively) into JSON-ready values."""
    if hasattr(value, "to_wire"):
        return value.to_wire()
    if is_dataclass(value) and not isinstance(value, type):
        return compact({f.name: to_wire(getattr(value, f.name)) for f in fields(value)})
    if isinstance(value, Mapping):
        return {key: to_wire(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    return value


def compact(data: Mapping[str, Any]) -> dict:
    """Drop unset (None) members, the way an omitted optional field is sent."""
    return {key: value for key, value in data.items() if value is not None}


def _fields_wire(instance: Any, skip: Sequence[str] = ()) -> dict:
    return compact(
        {f.name: to_wire(getattr(instance, f.name)) for f in fields(instance) if f.name not in skip}
    )


class TaggedVariant:
    """One case of a single-key JSON union: renders as {tag: body}."""

    tag: ClassVar[str]

    def body(self) -> dict:
        return _fields_wire(self)

    def to_wire(self) -> dict:
        return {self.tag: self.body()}


# =============================================================================
# Collection configuration
# =============================================================================


@dataclass(frozen=True)
class VectorParams:
    size: int
    distance: str = "Cosine"
    on_disk: Optional[bool] = None
    hnsw_config: Optional[dict] = None
    quantization_config: Optional[dict] = None
    datatype: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.size, int) or self.size <= 0:
            raise ValidationIssue("size must be a positive integer", field="size", error_type="out_of_range")
        _require_choice(self.distance, DISTANCES, "distance")

    def to_wire(self) -> dict:
        return _fields_wire(self)


@dataclass(frozen=True)
class CollectionConfig:
    vectors: Union[VectorParams, Mapping[str, VectorParams], None] = None
    shard_number: Optional[int] = None
    sharding_method: Optional[str] = None
    replication_factor: Optional[int] = None
    write_consistency_factor: Optional[int] = None
    on_disk_payload: Optional[bool] = None
    hnsw_config: Optional[dict] = None
    wal_config: Optional[dict] = None
    optimizers_config: Optional[dict] = None
    quantization_config: Optional[dict] = None
    sparse_vectors: Optional[dict] = None
    init_from: Optional[dict] = None

    def to_wire(self) -> dict:
        return _fields_wire(self)


@dataclass(frozen=True)
class SparseVector:
    indices: list[int]
    values: list[float]

    def __post_init__(self):
        if len(self.indices) != len(self.values):
            raise ValidationIssue(
                "sparse vector indices and values must have the same length",
                field="indices",
                error_type="mismatch",
            )

    def to_wire(self) -> dict:
        return {"indices": list(self.indices), "values": list(self.values)}


@dataclass(frozen=True)
class PointStruct:
    id: PointId
    vector: Any
    payload: Optional[Payload] = None

    def to_wire(self) -> dict:
        return _fields_wire(self)


# =============================================================================
# Query variants
# =============================================================================


@dataclass(frozen=True)
class ContextPair:
    positive: Any
    negative: Any

    def to_wire(self) -> dict:
        return {"positive": to_wire(self.positive), "negative": to_wire(self.negative)}


@dataclass(frozen=True)
class DenseQuery:
    """Raw dense vector."""

    tag: ClassVar[str] = "dense"
    vector: DenseVector

    def to_wire(self) -> list:
        return list(self.vector)


@dataclass(frozen=True)
class SparseQuery:
    tag: ClassVar[str] = "sparse"
    indices: list[int]
    values: list[float]

    def to_wire(self) -> dict:
        return SparseVector(self.indices, self.values).to_wire()


@dataclass(frozen=True)
class NearestQuery:
    """Nearest to a stored point (by id) or to a vector."""

    tag: ClassVar[str] = "nearest"
    target: Union[PointId, DenseVector]

    def to_wire(self) -> dict:
        return {"nearest": to_wire(self.target)}


@dataclass(frozen=True)
class RecommendQuery:
    tag: ClassVar[str] = "recommend"
    positive: Sequence[Any] = ()
    negative: Sequence[Any] = ()
    strategy: Optional[str] = None

    def __post_init__(self):
        _require_choice(self.strategy, RECOMMEND_STRATEGIES, "strategy")
        if not self.positive and not self.negative:
            raise ValidationIssue(
                "recommend query needs at least one positive or negative example",
                field="positive",
                error_type="required",
            )

    def to_wire(self) -> dict:
        body = {}
        if self.positive:
            body["positive"] = to_wire(list(self.positive))
        if self.negative:
            body["negative"] = to_wire(list(self.negative))
        if self.strategy:
            body["strategy"] = self.strategy
        return {"recommend": body}


@dataclass(frozen=True)
class DiscoverQuery:
    tag: ClassVar[str] = "discover"
    target: Any
    context: Sequence[ContextPair]

    def to_wire(self) -> dict:
        return {"discover": {"target": to_wire(self.target), "context": to_wire(list(self.context))}}


@dataclass(frozen=True)
class ContextQuery:
    tag: ClassVar[str] = "context"
    context: Sequence[ContextPair]

    def to_wire(self) -> dict:
        return {"context": to_wire(list(self.context))}


@dataclass(frozen=True)
class OrderByQuery:
    tag: ClassVar[str] = "order_by"
    key: str
    direction: Optional[str] = None
    start_from: Union[float, str, None] = None

    def __post_init__(self):
        _require_choice(self.direction, ORDER_DIRECTIONS, "direction")

    def to_wire(self) -> dict:
        return {"order_by": _fields_wire(self)}


@dataclass(frozen=True)
class FusionQuery:
    tag: ClassVar[str] = "fusion"
    method: str = "rrf"

    def __post_init__(self):
        _require_choice(self.method, FUSION_METHODS, "fusion")

    def to_wire(self) -> dict:
        return {"fusion": self.method}


@dataclass(frozen=True)
class SampleQuery:
    tag: ClassVar[str] = "sample"
    method: str = "random"

    def __post_init__(self):
        _require_choice(self.method, SAMPLE_METHODS, "sample")

    def to_wire(self) -> dict:
        return {"sample": self.method}


Query = Union[
    DenseQuery,
    SparseQuery,
    NearestQuery,
    RecommendQuery,
    DiscoverQuery,
    ContextQuery,
    OrderByQuery,
    FusionQuery,
    SampleQuery,
]


def query_from_value(value: Any) -> Query:
    """Interpret a loosely-typed tool argument as a query variant."""
    if isinstance(value, (DenseQuery, SparseQuery, NearestQuery, RecommendQuery, DiscoverQuery,
                          ContextQuery, OrderByQuery, FusionQuery, SampleQuery)):
        return value
    if isinstance(value, bool):
        raise ValidationIssue("query must be a vector, point id or query object", field="query")
    if isinstance(value, (int, str)):
        return NearestQuery(value)
    if isinstance(value, (list, tuple)):
        return DenseQuery([float(item) for item in value])
    if isinstance(value, Mapping):
        if "indices" in value and "values" in value:
            return SparseQuery(list(value["indices"]), list(value["values"]))
        if len(value) != 1:
            raise ValidationIssue(
                "query object must have exactly one variant key",
                field="query",
                error_type="invalid_variant",
            )
        (tag, inner), = value.items()
        try:
            query = _query_from_variant(tag, inner)
        except TypeError as exc:
            raise ValidationIssue(
                f"invalid {tag} query: {exc}",
                field="query",
                error_type="invalid_variant",
            ) from exc
        if query is not None:
            return query
    raise ValidationIssue("unsupported query variant", field="query", error_type="invalid_variant")


def _query_from_variant(tag: str, inner: Any) -> Optional[Query]:
    if tag == "nearest":
        return NearestQuery(inner)
    if tag == "recommend" and isinstance(inner, Mapping):
        return RecommendQuery(
            positive=list(inner.get("positive") or ()),
            negative=list(inner.get("negative") or ()),
            strategy=inner.get("strategy"),
        )
    if tag == "discover" and isinstance(inner, Mapping):
        return DiscoverQuery(
            target=inner.get("target"),
            context=[ContextPair(**pair) for pair in inner.get("context") or ()],
        )
    if tag == "context":
        return ContextQuery([ContextPair(**pair) for pair in inner or ()])
    if tag == "order_by":
        if isinstance(inner, str):
            return OrderByQuery(key=inner)
        return OrderByQuery(**inner)
    if tag == "fusion":
        return FusionQuery(inner)
    if tag == "sample":
        return SampleQuery(inner)
    return None


# =============================================================================
# Batch operations
# =============================================================================


@dataclass(frozen=True)
class UpsertOperation(TaggedVariant):
    tag: ClassVar[str] = "upsert"
    points: Sequence[Any]

    def body(self) -> dict:
        return {"points": to_wire(list(self.points))}


@dataclass(frozen=True)
class DeleteOperation(TaggedVariant):
    tag: ClassVar[str] = "delete"
    points: Optional[Sequence[PointId]] = None
    filter: Optional[Filter] = None


@dataclass(frozen=True)
class SetPayloadOperation(TaggedVariant):
    tag: ClassVar[str] = "set_payload"
    payload: Payload
    points: Optional[Sequence[PointId]] = None
    filter: Optional[Filter] = None
    key: Optional[str] = None


@dataclass(frozen=True)
class OverwritePayloadOperation(TaggedVariant):
    tag: ClassVar[str] = "overwrite_payload"
    payload: Payload
    points: Optional[Sequence[PointId]] = None
    filter: Optional[Filter] = None


@dataclass(frozen=True)
class DeletePayloadOperation(TaggedVariant):
    tag: ClassVar[str] = "delete_payload"
    keys: Sequence[str]
    points: Optional[Sequence[PointId]] = None
    filter: Optional[Filter] = None


@dataclass(frozen=True)
class ClearPayloadOperation(TaggedVariant):
    tag: ClassVar[str] = "clear_payload"
    points: Optional[Sequence[PointId]] = None
    filter: Optional[Filter] = None


@dataclass(frozen=True)
class UpdateVectorsOperation(TaggedVariant):
    tag: ClassVar[str] = "update_vectors"
    points: Sequence[Any]

    def body(self) -> dict:
        return {"points": to_wire(list(self.points))}


@dataclass(frozen=True)
class DeleteVectorsOperation(TaggedVariant):
    tag: ClassVar[str] = "delete_vectors"
    vector: Sequence[str]
    points: Optional[Sequence[PointId]] = None
    filter: Optional[Filter] = None


BatchOperation = Union[
    UpsertOperation,
    DeleteOperation,
    SetPayloadOperation,
    OverwritePayloadOperation,
    DeletePayloadOperation,
    ClearPayloadOperation,
    UpdateVectorsOperation,
    DeleteVectorsOperation,
]

BATCH_OPERATION_TYPES: dict[str, type] = {
    op.tag: op
    for op in (
        UpsertOperation,
        DeleteOperation,
        SetPayloadOperation,
        OverwritePayloadOperation,
        DeletePayloadOperation,
        ClearPayloadOperation,
        UpdateVectorsOperation,
        DeleteVectorsOperation,
    )
}


def _single_variant(value: Mapping[str, Any], known: Mapping[str, Any], field_name: str) -> tuple[str, Any]:
    tags = [key for key in value if value[key] is not None]
    if len(tags) != 1:
        raise ValidationIssue(
            f"{field_name} must contain exactly one of: {', '.join(known)}",
            field=field_name,
            error_type="invalid_variant",
        )
    tag = tags[0]
    if tag not in known:
        raise ValidationIssue(
            f"unknown {field_name} '{tag}'",
            field=field_name,
            error_type="invalid_variant",
        )
    return tag, value[tag]


def batch_operation_from_dict(value: Any) -> BatchOperation:
    """Parse the single-key JSON form of a batch operation."""
    if isinstance(value, tuple(BATCH_OPERATION_TYPES.values())):
        return value
    if not isinstance(value, Mapping):
        raise ValidationIssue("batch operation must be an object", field="operation")
    tag, params = _single_variant(value, BATCH_OPERATION_TYPES, "operation")
    if not isinstance(params, Mapping):
        raise ValidationIssue(f"{tag} parameters must be an object", field="operation")
    try:
        return BATCH_OPERATION_TYPES[tag](**params)
    except TypeError as exc:
        raise ValidationIssue(f"invalid {tag} parameters: {exc}", field="operation") from exc


# =============================================================================
# Field index schema
# =============================================================================


@dataclass(frozen=True)
class TextIndexParams:
    type: ClassVar[str] = "text"
    tokenizer: Optional[str] = None
    min_token_len: Optional[int] = None
    max_token_len: Optional[int] = None
    lowercase: Optional[bool] = None

    def __post_init__(self):
        _require_choice(self.tokenizer, TOKENIZERS, "tokenizer")

    def to_wire(self) -> dict:
        return {"type": self.type, **_fields_wire(self)}


@dataclass(frozen=True)
class IntegerIndexParams:
    type: ClassVar[str] = "integer"
    lookup: Optional[bool] = None
    range: Optional[bool] = None

    def __post_init__(self):
        if self.lookup is False and self.range is False:
            raise ValidationIssue(
                "integer index needs lookup or range enabled",
                field="lookup",
                error_type="invalid",
            )

    def to_wire(self) -> dict:
        return {"type": self.type, **_fields_wire(self)}


FieldSchema = Union[str, TextIndexParams, IntegerIndexParams]


def field_schema_to_wire(schema: Optional[FieldSchema]) -> Any:
    if schema is None:
        return None
    if isinstance(schema, str):
        _require_choice(schema, PAYLOAD_FIELD_TYPES, "field_schema")
        return schema
    return to_wire(schema)


# =============================================================================
# Cluster operations
# =============================================================================


@dataclass(frozen=True)
class _ShardTransfer(TaggedVariant):
    shard_id: int
    from_peer_id: int
    to_peer_id: int
    method: Optional[str] = None

    def __post_init__(self):
        _require_choice(self.method, SHARD_TRANSFER_METHODS, "method")


@dataclass(frozen=True)
class MoveShard(_ShardTransfer):
    tag: ClassVar[str] = "move_shard"


@dataclass(frozen=True)
class ReplicateShard(_ShardTransfer):
    tag: ClassVar[str] = "replicate_shard"


@dataclass(frozen=True)
class RestartTransfer(_ShardTransfer):
    tag: ClassVar[str] = "restart_transfer"

    def __post_init__(self):
        if self.method is None:
            raise ValidationIssue("restart_transfer requires a method", field="method", error_type="required")
        super().__post_init__()


@dataclass(frozen=True)
class AbortTransfer(TaggedVariant):
    tag: ClassVar[str] = "abort_transfer"
    shard_id: int
    from_peer_id: int
    to_peer_id: int


@dataclass(frozen=True)
class DropReplica(TaggedVariant):
    tag: ClassVar[str] = "drop_replica"
    shard_id: int
    peer_id: int


@dataclass(frozen=True)
class CreateShardingKey(TaggedVariant):
    tag: ClassVar[str] = "create_sharding_key"
    shard_key: Union[int, str]
    shards_number: Optional[int] = None
    replication_factor: Optional[int] = None
    placement: Optional[Sequence[int]] = None


@dataclass(frozen=True)
class DeleteShardingKey(TaggedVariant):
    tag: ClassVar[str] = "delete_sharding_key"
    shard_key: Union[int, str]


ClusterOperation = Union[
    MoveShard,
    ReplicateShard,
    AbortTransfer,
    DropReplica,
    CreateShardingKey,
    DeleteShardingKey,
    RestartTransfer,
]

CLUSTER_OPERATION_TYPES: dict[str, type] = {
    op.tag: op
    for op in (
        MoveShard,
        ReplicateShard,
        AbortTransfer,
        DropReplica,
        CreateShardingKey,
        DeleteShardingKey,
        RestartTransfer,
    )
}


def cluster_operation_from_dict(value: Any) -> ClusterOperation:
    if isinstance(value, tuple(CLUSTER_OPERATION_TYPES.values())):
        return value
    if not isinstance(value, Mapping):
        raise ValidationIssue("cluster operation must be an object", field="operation")
    tag, params = _single_variant(value, CLUSTER_OPERATION_TYPES, "cluster operation")
    try:
        return CLUSTER_OPERATION_TYPES[tag](**params)
    except TypeError as exc:
        raise ValidationIssue(f"invalid {tag} parameters: {exc}", field="operation") from exc


# =============================================================================
# Aliases
# =============================================================================


@dataclass(frozen=True)
class CreateAlias(TaggedVariant):
    tag: ClassVar[str] = "create_alias"
    collection_name: str
    alias_name: str


@dataclass(frozen=True)
class DeleteAlias(TaggedVariant):
    tag: ClassVar[str] = "delete_alias"
    alias_name: str


@dataclass(frozen=True)
class RenameAlias(TaggedVariant):
    tag: ClassVar[str] = "rename_alias"
    old_alias_name: str
    new_alias_name: str


AliasAction = Union[CreateAlias, DeleteAlias, RenameAlias]


# =============================================================================
# Misc request bodies
# =============================================================================


@dataclass(frozen=True)
class SnapshotRecoverRequest:
    location: str
    priority: Optional[str] = None
    checksum: Optional[str] = None
    api_key: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        _require_choice(self.priority, SNAPSHOT_PRIORITIES, "priority")

    def to_wire(self) -> dict:
        return _fields_wire(self)


@dataclass(frozen=True)
class LocksOption:
    write: bool
    error_message: Optional[str] = None

    def to_wire(self) -> dict:
        return _fields_wire(self)


@dataclass(frozen=True)
class DistanceMatrixRequest:
    sample: Optional[int] = None
    limit: Optional[int] = None
    filter: Optional[Filter] = None
    using: Optional[str] = None

    def to_wire(self) -> dict:
        return _fields_wire(self)
