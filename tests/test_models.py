import pytest

from core.errors import ValidationIssue
from core.models import (
    CollectionConfig,
    DeleteOperation,
    FusionQuery,
    IntegerIndexParams,
    MoveShard,
    NearestQuery,
    RecommendQuery,
    RestartTransfer,
    SnapshotRecoverRequest,
    SparseVector,
    TextIndexParams,
    UpsertOperation,
    VectorParams,
    batch_operation_from_dict,
    cluster_operation_from_dict,
    field_schema_to_wire,
    query_from_value,
    to_wire,
)


def test_vector_params_validate_size_and_distance():
    with pytest.raises(ValidationIssue):
        VectorParams(size=0)
    with pytest.raises(ValidationIssue):
        VectorParams(size=8, distance="cosine")
    assert VectorParams(size=8).to_wire() == {"size": 8, "distance": "Cosine"}


def test_collection_config_with_named_vectors():
    config = CollectionConfig(
        vectors={"text": VectorParams(size=384), "image": VectorParams(size=512, distance="Euclid")},
        on_disk_payload=True,
    )
    assert to_wire(config) == {
        "vectors": {
            "text": {"size": 384, "distance": "Cosine"},
            "image": {"size": 512, "distance": "Euclid"},
        },
        "on_disk_payload": True,
    }


def test_sparse_vector_lengths_must_match():
    with pytest.raises(ValidationIssue):
        SparseVector(indices=[1, 2], values=[0.5])


def test_query_from_value_variants():
    assert to_wire(query_from_value([0.1, 0.2])) == [0.1, 0.2]
    assert to_wire(query_from_value(17)) == {"nearest": 17}
    assert to_wire(query_from_value({"indices": [3], "values": [1.0]})) == {"indices": [3], "values": [1.0]}
    assert to_wire(query_from_value({"fusion": "dbsf"})) == {"fusion": "dbsf"}
    assert to_wire(query_from_value({"order_by": "price"})) == {"order_by": {"key": "price"}}
    assert to_wire(query_from_value({"recommend": {"positive": [1], "strategy": "best_score"}})) == {
        "recommend": {"positive": [1], "strategy": "best_score"}
    }
    assert isinstance(query_from_value(NearestQuery(5)), NearestQuery)


def test_query_from_value_rejects_ambiguous_objects():
    with pytest.raises(ValidationIssue):
        query_from_value({"nearest": 1, "fusion": "rrf"})
    with pytest.raises(ValidationIssue):
        query_from_value({"unknown": 1})
    with pytest.raises(ValidationIssue):
        query_from_value(True)


def test_recommend_query_needs_an_example():
    with pytest.raises(ValidationIssue):
        RecommendQuery()
    with pytest.raises(ValidationIssue):
        RecommendQuery(positive=[1], strategy="median")


def test_fusion_method_is_checked():
    with pytest.raises(ValidationIssue):
        FusionQuery("sum")


def test_batch_operation_from_dict_builds_single_variant():
    op = batch_operation_from_dict({"delete": {"filter": {"must": []}}})
    assert isinstance(op, DeleteOperation)
    assert op.to_wire() == {"delete": {"filter": {"must": []}}}
    assert op.body() == {"filter": {"must": []}}


def test_batch_operation_from_dict_rejects_multiple_tags():
    with pytest.raises(ValidationIssue):
        batch_operation_from_dict({"delete": {"points": [1]}, "upsert": {"points": []}})
    with pytest.raises(ValidationIssue):
        batch_operation_from_dict({"truncate": {}})
    with pytest.raises(ValidationIssue):
        batch_operation_from_dict({"delete": {"bogus": 1}})


def test_upsert_operation_body():
    op = UpsertOperation(points=[{"id": 1, "vector": [1.0]}])
    assert op.to_wire() == {"upsert": {"points": [{"id": 1, "vector": [1.0]}]}}


def test_field_schemas():
    assert field_schema_to_wire(None) is None
    assert field_schema_to_wire("keyword") == "keyword"
    with pytest.raises(ValidationIssue):
        field_schema_to_wire("varchar")
    assert field_schema_to_wire(TextIndexParams(tokenizer="word", lowercase=True)) == {
        "type": "text",
        "tokenizer": "word",
        "lowercase": True,
    }
    assert field_schema_to_wire(IntegerIndexParams(lookup=True, range=False)) == {
        "type": "integer",
        "lookup": True,
        "range": False,
    }
    with pytest.raises(ValidationIssue):
        IntegerIndexParams(lookup=False, range=False)


def test_cluster_operations():
    op = cluster_operation_from_dict({"replicate_shard": {"shard_id": 1, "from_peer_id": 2, "to_peer_id": 3}})
    assert op.to_wire() == {"replicate_shard": {"shard_id": 1, "from_peer_id": 2, "to_peer_id": 3}}
    assert MoveShard(0, 1, 2, method="snapshot").body()["method"] == "snapshot"
    with pytest.raises(ValidationIssue):
        MoveShard(0, 1, 2, method="carrier_pigeon")
    with pytest.raises(ValidationIssue):
        RestartTransfer(0, 1, 2)


def test_snapshot_recover_request_hides_api_key_in_repr():
    request = SnapshotRecoverRequest(location="https://s/x.snapshot", priority="snapshot", api_key="secret")
    assert "secret" not in repr(request)
    assert request.to_wire()["api_key"] == "secret"
    with pytest.raises(ValidationIssue):
        SnapshotRecoverRequest(location="x", priority="fast")


def test_malformed_query_objects_raise_validation_issue():
    with pytest.raises(ValidationIssue):
        query_from_value({"order_by": {"field": "price"}})
    with pytest.raises(ValidationIssue):
        query_from_value({"context": [{"positive": 1}]})
    with pytest.raises(ValidationIssue):
        query_from_value({"discover": {"target": 1, "context": [{"positive": 1, "negative": 2, "weight": 3}]}})
